"""Shared fixtures: sample API payloads and a scriptable fake client."""
from __future__ import annotations

import copy
from typing import Any, Callable, Dict, List, Optional

import pytest

from contact_enricher.models import Subject


def build_contact_response(
    identity_score: Any = 98,
    emails: Optional[List[str]] = None,
    *,
    phones: Optional[List[str]] = None,
    street: str = "123 Main St",
    unit: str = "",
) -> Dict[str, Any]:
    emails = ["john.doe@email.com"] if emails is None else emails
    phones = ["(555) 123-4567"] if phones is None else phones
    return {
        "requestId": "req-contact",
        "isError": False,
        "identityScore": identity_score,
        "person": {
            "name": {"firstName": "John", "middleName": "A", "lastName": "Doe"},
            "addresses": [
                {"street": street, "unit": unit, "city": "New York", "state": "NY", "zip": "10001"}
            ],
            "phones": [{"number": number, "type": "Wireless", "isConnected": True} for number in phones],
            "emails": [{"address": address, "type": "Personal", "isConnected": True} for address in emails],
        },
    }


def build_person_response(identity_score: Any = 99) -> Dict[str, Any]:
    return {
        "requestId": "req-person",
        "isError": False,
        "identityScore": identity_score,
        "person": {
            "name": {"firstName": "John", "middleName": "A", "lastName": "Doe"},
            "addresses": [
                {
                    "isDeliverable": True,
                    "isPublic": True,
                    "addressOrder": 2,
                    "fullAddress": "456 Old Ave; Brooklyn, NY 11201",
                },
                {
                    "isDeliverable": True,
                    "isPublic": True,
                    "addressOrder": 1,
                    "fullAddress": "326 S 900 W; Payson, UT 84651-2429",
                },
            ],
            "phoneNumbers": [
                {
                    "phoneNumber": "(801) 404-0751",
                    "phoneType": "Wireless",
                    "isConnected": True,
                    "isPublic": True,
                    "phoneOrder": 1,
                }
            ],
            "emailAddresses": [
                {"emailAddress": "john.person@email.com", "emailOrdinal": 1, "isPremium": True}
            ],
        },
    }


class FakeClient:
    """Records calls and returns (or raises) scripted responses per endpoint."""

    def __init__(self, contact: Any = None, person: Any = None) -> None:
        self.contact = build_contact_response() if contact is None else contact
        self.person = build_person_response() if person is None else person
        self.calls: List[tuple[str, Subject]] = []

    def _respond(self, endpoint: str, subject: Subject, outcome: Any) -> Dict[str, Any]:
        self.calls.append((endpoint, subject))
        if callable(outcome) and not isinstance(outcome, dict):
            outcome = outcome(subject)
        if isinstance(outcome, BaseException):
            raise outcome
        return copy.deepcopy(outcome)

    def enrich_contact(self, subject: Subject) -> Dict[str, Any]:
        return self._respond("contact", subject, self.contact)

    def search_person(self, subject: Subject) -> Dict[str, Any]:
        return self._respond("person", subject, self.person)

    @property
    def endpoints(self) -> List[str]:
        return [endpoint for endpoint, _ in self.calls]


@pytest.fixture
def contact_response() -> Callable[..., Dict[str, Any]]:
    return build_contact_response


@pytest.fixture
def person_response() -> Callable[..., Dict[str, Any]]:
    return build_person_response


@pytest.fixture
def fake_client_factory() -> Callable[..., FakeClient]:
    return FakeClient


@pytest.fixture
def subject() -> Subject:
    return Subject(first_name="John", middle_name="A", last_name="Doe", city="New York", state="NY")
