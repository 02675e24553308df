"""Unit tests for :mod:`contact_enricher.normalize`."""
from __future__ import annotations

import pytest

from contact_enricher.models import NormalizedContact
from contact_enricher.normalize import (
    CONTACT_SHAPE,
    PERSON_SHAPE,
    UNKNOWN_SHAPE,
    detect_shape,
    normalize_response,
)


@pytest.mark.parametrize("raw", [None, {}, {"person": None}, {"persons": []}, "not a payload", {"identityScore": 80}])
def test_missing_person_yields_empty_contact(raw) -> None:
    assert normalize_response(raw, "contact") == NormalizedContact()


def test_contact_shape_takes_first_entries(contact_response) -> None:
    raw = contact_response(emails=["first@example.com", "second@example.com"], phones=["555-0001", "555-0002"])

    contact = normalize_response(raw, "contact")

    assert contact == NormalizedContact(
        email="first@example.com",
        phone="555-0001",
        address="123 Main St, New York, NY 10001",
    )


def test_contact_shape_includes_unit_in_address(contact_response) -> None:
    raw = contact_response(street="9 Elm Rd", unit="Apt 2B")

    assert normalize_response(raw, "contact").address == "9 Elm Rd Apt 2B, New York, NY 10001"


def test_contact_shape_without_emails_yields_empty_email(contact_response) -> None:
    contact = normalize_response(contact_response(emails=[]), "contact")

    assert contact.email == ""
    assert contact.phone == "(555) 123-4567"


def test_person_shape_ranks_emails_premium_then_ordinal(person_response) -> None:
    raw = person_response()
    raw["person"]["emailAddresses"] = [
        {"emailAddress": "plain1@example.com", "emailOrdinal": 1, "isPremium": False},
        {"emailAddress": "premium3@example.com", "emailOrdinal": 3, "isPremium": True},
        {"emailAddress": "premium2@example.com", "emailOrdinal": 2, "isPremium": True},
    ]

    assert normalize_response(raw, "person").email == "premium2@example.com"


def test_person_shape_never_picks_disconnected_phone(person_response) -> None:
    raw = person_response()
    raw["person"]["phoneNumbers"] = [
        {"phoneNumber": "111", "phoneType": "Wireless", "isConnected": False, "isPublic": True, "phoneOrder": 1},
        {"phoneNumber": "222", "phoneType": "LandLine", "isConnected": True, "isPublic": True, "phoneOrder": 5},
        {"phoneNumber": "333", "phoneType": "Wireless", "isConnected": True, "isPublic": False, "phoneOrder": 1},
    ]

    assert normalize_response(raw, "person").phone == "222"


def test_person_shape_prefers_wireless_then_phone_order(person_response) -> None:
    raw = person_response()
    raw["person"]["phoneNumbers"] = [
        {"phoneNumber": "landline", "phoneType": "LandLine", "isConnected": True, "isPublic": True, "phoneOrder": 1},
        {"phoneNumber": "cell-3", "phoneType": "Wireless", "isConnected": True, "isPublic": True, "phoneOrder": 3},
        {"phoneNumber": "cell-2", "phoneType": "wireless", "isConnected": True, "isPublic": True, "phoneOrder": 2},
    ]

    assert normalize_response(raw, "person").phone == "cell-2"


def test_person_shape_filters_and_orders_addresses(person_response) -> None:
    raw = person_response()

    assert normalize_response(raw, "person").address == "326 S 900 W; Payson, UT 84651-2429"

    raw["person"]["addresses"][1]["isDeliverable"] = False
    assert normalize_response(raw, "person").address == "456 Old Ave; Brooklyn, NY 11201"


def test_person_shape_without_surviving_entries(person_response) -> None:
    raw = person_response()
    raw["person"]["emailAddresses"] = []
    for phone in raw["person"]["phoneNumbers"]:
        phone["isConnected"] = False
    for address in raw["person"]["addresses"]:
        address["isPublic"] = False

    contact = normalize_response(raw, "person")

    assert contact == NormalizedContact()


def test_shape_detection_ignores_hint(contact_response, person_response) -> None:
    assert normalize_response(person_response(), "contact").email == "john.person@email.com"
    assert normalize_response(contact_response(), "combination").email == "john.doe@email.com"
    assert detect_shape(person_response()["person"]) == PERSON_SHAPE
    assert detect_shape(contact_response()["person"]) == CONTACT_SHAPE


def test_phone_numbers_without_full_address_is_not_person_shape(person_response) -> None:
    raw = person_response()
    for address in raw["person"]["addresses"]:
        address["fullAddress"] = ""

    assert detect_shape(raw["person"]) == UNKNOWN_SHAPE


def test_fallback_extraction_for_unknown_shape() -> None:
    raw = {
        "person": {
            "emailAddresses": [{"emailAddress": "fallback@example.com"}],
            "phoneNumbers": [{"number": "555-9999"}],
            "addresses": [{"street": "1 Loop", "unit": "", "city": "Austin", "state": "TX", "zip": "78701"}],
        }
    }

    contact = normalize_response(raw, "combination")

    assert contact == NormalizedContact(
        email="fallback@example.com",
        phone="555-9999",
        address="1 Loop, Austin, TX 78701",
    )


def test_fallback_prefers_contact_fields_and_full_address() -> None:
    raw = {
        "person": {
            "emails": [{"address": "contact@example.com"}],
            "emailAddresses": [{"emailAddress": "person@example.com"}],
            "addresses": [{"fullAddress": "1 Full St; Reno, NV 89501", "street": "ignored"}],
        }
    }

    contact = normalize_response(raw, None)

    assert detect_shape(raw["person"]) == UNKNOWN_SHAPE
    assert contact.email == "contact@example.com"
    assert contact.phone == ""
    assert contact.address == "1 Full St; Reno, NV 89501"


def test_persons_array_uses_first_entry(person_response) -> None:
    raw = {"persons": [person_response()["person"], {"emails": []}]}

    assert normalize_response(raw, "person").phone == "(801) 404-0751"


def test_malformed_entries_do_not_raise() -> None:
    raw = {
        "person": {
            "phoneNumbers": ["garbage", {"phoneNumber": 5551234, "isConnected": True, "isPublic": True, "phoneOrder": "x"}],
            "emailAddresses": [None, {"emailAddress": None, "emailOrdinal": None, "isPremium": "yes"}],
            "addresses": [{"fullAddress": "2 Side St", "isDeliverable": True, "isPublic": True, "addressOrder": None}],
        }
    }

    contact = normalize_response(raw, "person")

    assert contact == NormalizedContact(email="", phone="5551234", address="2 Side St")


def test_normalize_is_pure(person_response) -> None:
    raw = person_response()
    snapshot = repr(raw)

    first = normalize_response(raw, "person")
    second = normalize_response(raw, "person")

    assert first == second
    assert repr(raw) == snapshot


@pytest.mark.parametrize(
    "entry, expected",
    [
        ({}, ""),
        ({"street": "", "unit": "", "city": "", "state": "", "zip": ""}, ""),
        ({"street": "1 Main St"}, "1 Main St"),
        ({"city": "Austin", "state": "TX"}, "Austin, TX"),
        ({"street": "1 Main St", "unit": "Ste 4", "zip": "78701"}, "1 Main St Ste 4, 78701"),
    ],
)
def test_contact_shape_address_only_joins_present_parts(entry, expected) -> None:
    raw = {"identityScore": 98, "person": {"phones": [], "emails": [], "addresses": [entry]}}

    assert normalize_response(raw, "contact").address == expected


@pytest.mark.parametrize("entry, expected", [({}, ""), ({"city": "Reno", "state": "NV"}, "Reno, NV")])
def test_fallback_address_only_joins_present_parts(entry, expected) -> None:
    raw = {"person": {"emailAddresses": [], "addresses": [entry]}}

    assert detect_shape(raw["person"]) == UNKNOWN_SHAPE
    assert normalize_response(raw, None).address == expected
