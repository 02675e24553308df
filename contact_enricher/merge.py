"""Utility helpers for reconciling contact details from multiple API calls."""
from __future__ import annotations

import logging
from typing import Optional

from .models import COMBINATION, NormalizedContact, SearchResult
from .normalize import normalize_response

LOGGER = logging.getLogger(__name__)

_FIELDS = ("email", "phone", "address")


def _field(contact: Optional[NormalizedContact], name: str) -> str:
    value = getattr(contact, name, "") if contact is not None else ""
    return value if isinstance(value, str) else ""


def merge_contacts(
    primary: Optional[NormalizedContact], secondary: Optional[NormalizedContact]
) -> NormalizedContact:
    """Combine two contact triples field by field.

    A non-empty ``primary`` value always wins; ``secondary`` only fills gaps.
    This is a literal precedence rule, not a quality comparison: a stale
    contact-enrichment address beats a fresher person-search address.
    """

    merged = {}
    for name in _FIELDS:
        merged[name] = _field(primary, name) or _field(secondary, name)
    return NormalizedContact(**merged)


def reconcile(result: SearchResult) -> NormalizedContact:
    """Return the contact triple a search result resolves to.

    Combination searches that made both calls merge the contact enrichment
    (first) and person search (second) responses; every other result is
    normalised from its winning response alone.
    """

    extracted = normalize_response(result.data, result.strategy)
    if result.strategy == COMBINATION and len(result.api_calls) > 1:
        contact_data = normalize_response(result.api_calls[0].response, result.api_calls[0].endpoint)
        person_data = normalize_response(result.api_calls[1].response, result.api_calls[1].endpoint)
        extracted = merge_contacts(contact_data, person_data)
        LOGGER.debug(
            "Merged combination responses (contact email=%r, person email=%r, final email=%r)",
            contact_data.email,
            person_data.email,
            extracted.email,
        )
    return extracted


__all__ = ["merge_contacts", "reconcile"]
