"""Unified data models for subjects, search results, and enriched records."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional


# --- Search strategies and pricing ---

CONTACT = "contact"
PERSON = "person"
COMBINATION = "combination"

SEARCH_STRATEGIES = (CONTACT, PERSON, COMBINATION)

# Fixed price in dollars charged per call to each endpoint.
CALL_COSTS: Dict[str, float] = {
    CONTACT: 0.10,
    PERSON: 0.25,
}


# --- Core Input Models ---

@dataclass(frozen=True, slots=True)
class Subject:
    """The person whose contact details are looked up."""

    first_name: str = ""
    middle_name: str = ""
    last_name: str = ""
    city: str = ""
    state: str = ""
    metadata: Dict[str, Any] = field(default_factory=dict)

    def display_name(self) -> str:
        """Return a readable name for logs and exports."""
        parts = [self.first_name, self.middle_name, self.last_name]
        return " ".join(part.strip() for part in parts if part and part.strip()) or "(Unnamed Subject)"

    def has_required_names(self) -> bool:
        """The identity API refuses lookups without both a first and last name."""

        return bool((self.first_name or "").strip() and (self.last_name or "").strip())

    @property
    def location(self) -> Optional[str]:
        city = (self.city or "").strip()
        state = (self.state or "").strip()
        if city and state:
            return f"{city}, {state}"
        return None


# --- Normalized contact ---

@dataclass(slots=True)
class NormalizedContact:
    """Canonical email/phone/address triple. Unknown values are empty strings."""

    email: str = ""
    phone: str = ""
    address: str = ""

    def is_empty(self) -> bool:
        return not (self.email or self.phone or self.address)

    def as_dict(self) -> Dict[str, str]:
        return {"email": self.email, "phone": self.phone, "address": self.address}


# --- Orchestrator Models ---

@dataclass
class ApiCall:
    """One entry of the provenance log: a raw response and what it cost."""

    response: Dict[str, Any]
    endpoint: str
    timestamp: str
    cost: float

    def as_dict(self) -> Dict[str, Any]:
        return {
            "endpoint": self.endpoint,
            "timestamp": self.timestamp,
            "cost": self.cost,
            "response": self.response,
        }


@dataclass
class SearchResult:
    """Outcome of a single enrichment attempt for one subject."""

    data: Dict[str, Any]
    strategy: str
    cost: float
    used_combination: bool = False
    api_calls: List[ApiCall] = field(default_factory=list)

    @property
    def identity_score(self) -> Optional[float]:
        value = (self.data or {}).get("identityScore")
        if isinstance(value, bool):
            return None
        if isinstance(value, (int, float)):
            return value
        return None


@dataclass
class EnrichedRecord:
    """A subject together with the contact details found for it."""

    subject: Subject
    contact: NormalizedContact = field(default_factory=NormalizedContact)
    enriched: bool = False
    search: Optional[SearchResult] = None
    error: Optional[str] = None

    @property
    def email(self) -> str:
        return self.contact.email

    @property
    def phone(self) -> str:
        return self.contact.phone

    @property
    def address(self) -> str:
        return self.contact.address

    @property
    def cost(self) -> float:
        return self.search.cost if self.search else 0.0

    @property
    def strategy(self) -> Optional[str]:
        return self.search.strategy if self.search else None

    @property
    def used_combination(self) -> bool:
        return bool(self.search and self.search.used_combination)

    @property
    def identity_score(self) -> Optional[float]:
        return self.search.identity_score if self.search else None

    @property
    def api_calls(self) -> List[ApiCall]:
        return list(self.search.api_calls) if self.search else []

    def as_row(self, *, include_search_metadata: bool = False) -> Dict[str, Any]:
        """Return a flat, serialisable representation of the record."""
        subject = self.subject
        row: Dict[str, Any] = {
            "first_name": subject.first_name,
            "middle_name": subject.middle_name,
            "last_name": subject.last_name,
            "city": subject.city,
            "state": subject.state,
            "trade": subject.metadata.get("trade", ""),
            "license_number": subject.metadata.get("license_number", ""),
            "status": subject.metadata.get("status", ""),
            "email": self.email,
            "phone": self.phone,
            "address": self.address,
        }
        if include_search_metadata:
            row.update(
                {
                    "enriched": self.enriched,
                    "strategy": self.strategy or "",
                    "cost": self.cost,
                    "used_combination": self.used_combination,
                    "identity_score": self.identity_score,
                }
            )
        return row


@dataclass
class BatchSummary:
    """Totals reported once a batch run finishes."""

    total: int = 0
    enriched: int = 0
    skipped: int = 0
    failed: int = 0
    total_cost: float = 0.0
    combination_used: int = 0

    def describe(self) -> str:
        message = f"Successfully enriched {self.enriched} of {self.total} contacts."
        if self.total_cost > 0:
            message += f" Total cost: ${self.total_cost:.2f}."
        if self.combination_used > 0:
            message += f" {self.combination_used} contacts used combination search."
        return message


SKIPPED_MISSING_NAME = "Subject is missing a first or last name."


def summarize(records: Iterable[EnrichedRecord]) -> BatchSummary:
    """Aggregate per-record outcomes into a :class:`BatchSummary`."""

    summary = BatchSummary()
    cost = 0.0
    for record in records:
        summary.total += 1
        if record.enriched:
            summary.enriched += 1
        elif record.error == SKIPPED_MISSING_NAME:
            summary.skipped += 1
        else:
            summary.failed += 1
        cost += record.cost
        if record.used_combination:
            summary.combination_used += 1
    summary.total_cost = round(cost, 2)
    return summary
