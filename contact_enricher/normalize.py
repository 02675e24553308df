"""Normalise identity API responses into a single contact triple.

The identity service answers with two structurally different payloads:

* the contact enrichment shape exposes ``phones``, ``emails`` and
  ``addresses`` split into street/unit/city/state/zip fields;
* the person search shape exposes ``phoneNumbers``, ``emailAddresses`` and
  ``addresses`` carrying quality flags and a pre-joined ``fullAddress``.

:func:`detect_shape` tags the person object once and :func:`normalize_response`
dispatches to the matching extractor. Extraction never raises: anything
missing or malformed collapses to an empty string.
"""
from __future__ import annotations

import logging
import math
from typing import Any, Callable, Dict, List, Mapping, Optional

from .models import NormalizedContact

LOGGER = logging.getLogger(__name__)

CONTACT_SHAPE = "contact"
PERSON_SHAPE = "person"
UNKNOWN_SHAPE = "unknown"


def extract_person(raw: Any) -> Optional[Mapping[str, Any]]:
    """Return the person object of a raw response, or ``None`` for no match."""

    if not isinstance(raw, Mapping):
        return None
    person = raw.get("person")
    if isinstance(person, Mapping):
        return person
    persons = raw.get("persons")
    if isinstance(persons, list) and persons and isinstance(persons[0], Mapping):
        return persons[0]
    return None


def detect_shape(person: Mapping[str, Any]) -> str:
    """Identify which response shape ``person`` follows from its structure."""

    addresses = _entries(person.get("addresses"))
    if isinstance(person.get("phoneNumbers"), list) and addresses and _text(addresses[0].get("fullAddress")):
        return PERSON_SHAPE
    if isinstance(person.get("phones"), list) and isinstance(person.get("emails"), list):
        return CONTACT_SHAPE
    return UNKNOWN_SHAPE


def normalize_response(raw: Any, hint: Optional[str] = None) -> NormalizedContact:
    """Convert a raw API response into a :class:`NormalizedContact`.

    ``hint`` names the strategy that produced the response. It is only used
    for diagnostics; the extractor is always chosen from the payload itself,
    because the winning response of a combination search can follow either
    shape.
    """

    person = extract_person(raw)
    if person is None:
        return NormalizedContact()

    shape = detect_shape(person)
    if shape == UNKNOWN_SHAPE:
        LOGGER.warning("Unknown response structure (hint=%s), attempting fallback extraction", hint)
    else:
        LOGGER.debug("Detected %s response shape (hint=%s)", shape, hint)
    return _EXTRACTORS[shape](person)


# ----------------------------------------------------------------------
# Extractors
# ----------------------------------------------------------------------
def _extract_contact_shape(person: Mapping[str, Any]) -> NormalizedContact:
    emails = _entries(person.get("emails"))
    phones = _entries(person.get("phones"))
    addresses = _entries(person.get("addresses"))

    email = _text(emails[0].get("address")) if emails else ""
    phone = _text(phones[0].get("number")) if phones else ""
    address = _join_address(addresses[0]) if addresses else ""
    return NormalizedContact(email=email, phone=phone, address=address)


def _extract_person_shape(person: Mapping[str, Any]) -> NormalizedContact:
    emails = sorted(
        _entries(person.get("emailAddresses")),
        key=lambda entry: (not _flag(entry.get("isPremium")), _order(entry.get("emailOrdinal"))),
    )
    phones = sorted(
        (
            entry
            for entry in _entries(person.get("phoneNumbers"))
            if _flag(entry.get("isConnected")) and _flag(entry.get("isPublic"))
        ),
        key=lambda entry: (not _is_wireless(entry), _order(entry.get("phoneOrder"))),
    )
    addresses = sorted(
        (
            entry
            for entry in _entries(person.get("addresses"))
            if _flag(entry.get("isDeliverable")) and _flag(entry.get("isPublic"))
        ),
        key=lambda entry: _order(entry.get("addressOrder")),
    )

    return NormalizedContact(
        email=_text(emails[0].get("emailAddress")) if emails else "",
        phone=_text(phones[0].get("phoneNumber")) if phones else "",
        address=_text(addresses[0].get("fullAddress")) if addresses else "",
    )


def _extract_fallback(person: Mapping[str, Any]) -> NormalizedContact:
    email = _first_value(person, ("emails", "address"), ("emailAddresses", "emailAddress"))
    phone = _first_value(
        person,
        ("phones", "number"),
        ("phoneNumbers", "phoneNumber"),
        ("phoneNumbers", "number"),
    )

    address = ""
    addresses = _entries(person.get("addresses"))
    if addresses:
        first = addresses[0]
        address = _text(first.get("fullAddress"))
        if not address:
            address = _join_address(first)
    return NormalizedContact(email=email, phone=phone, address=address)


_EXTRACTORS: Dict[str, Callable[[Mapping[str, Any]], NormalizedContact]] = {
    CONTACT_SHAPE: _extract_contact_shape,
    PERSON_SHAPE: _extract_person_shape,
    UNKNOWN_SHAPE: _extract_fallback,
}


# ----------------------------------------------------------------------
# Helpers
# ----------------------------------------------------------------------
def _entries(value: Any) -> List[Mapping[str, Any]]:
    if not isinstance(value, list):
        return []
    return [entry for entry in value if isinstance(entry, Mapping)]


def _text(value: Any) -> str:
    if value is None or isinstance(value, bool):
        return ""
    if isinstance(value, str):
        return value
    return str(value)


def _flag(value: Any) -> bool:
    return value is True


def _order(value: Any) -> float:
    """Sort key for ordinal fields; unusable values sort last."""
    if isinstance(value, bool) or value is None:
        return math.inf
    try:
        number = float(value)
    except (TypeError, ValueError):
        return math.inf
    return math.inf if math.isnan(number) else number


def _is_wireless(entry: Mapping[str, Any]) -> bool:
    return "wireless" in _text(entry.get("phoneType")).lower()


def _join_address(entry: Mapping[str, Any]) -> str:
    """Format ``street[ unit], city, state zip`` from whichever parts exist."""
    street_line = " ".join(part for part in (_text(entry.get("street")), _text(entry.get("unit"))) if part)
    region = " ".join(part for part in (_text(entry.get("state")), _text(entry.get("zip"))) if part)
    return ", ".join(part for part in (street_line, _text(entry.get("city")), region) if part)


def _first_value(person: Mapping[str, Any], *candidates: tuple[str, str]) -> str:
    for list_key, value_key in candidates:
        entries = _entries(person.get(list_key))
        if entries:
            value = _text(entries[0].get(value_key))
            if value:
                return value
    return ""


__all__ = [
    "CONTACT_SHAPE",
    "PERSON_SHAPE",
    "UNKNOWN_SHAPE",
    "detect_shape",
    "extract_person",
    "normalize_response",
]
