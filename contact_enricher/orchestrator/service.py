"""Search orchestrator that decides which identity API calls to make."""
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional

from ..client import ApiClient
from ..config import DEFAULT_IDENTITY_SCORE_THRESHOLD, validate_identity_score_threshold
from ..models import (
    CALL_COSTS,
    COMBINATION,
    CONTACT,
    PERSON,
    SEARCH_STRATEGIES,
    ApiCall,
    SearchResult,
    Subject,
)
from ..normalize import extract_person

LOGGER = logging.getLogger(__name__)


class ValidationError(ValueError):
    """Raised when a search request is rejected before any API call."""


class MissingNameError(ValidationError):
    """Raised when a subject lacks the first or last name the API requires."""


def validate_strategy(strategy: str) -> str:
    """Return ``strategy`` if it is a known search strategy, else raise."""

    if strategy not in SEARCH_STRATEGIES:
        raise ValidationError(
            f"Invalid search type: {strategy!r}. Expected one of: {', '.join(SEARCH_STRATEGIES)}"
        )
    return strategy


def _utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


class SearchOrchestrator:
    """Runs the contact, person, or adaptive combination search for a subject.

    The combination strategy calls the cheaper contact enrichment endpoint
    first and only escalates to person search when the identity score falls
    below :attr:`identity_score_threshold` or the contact response carries no
    email. A failed person search falls back to the contact result.
    """

    def __init__(
        self,
        client: ApiClient,
        *,
        identity_score_threshold: float = DEFAULT_IDENTITY_SCORE_THRESHOLD,
        clock: Callable[[], str] = _utc_timestamp,
    ) -> None:
        self._client = client
        self._clock = clock
        self._identity_score_threshold = validate_identity_score_threshold(identity_score_threshold)

    @property
    def client(self) -> ApiClient:
        return self._client

    @property
    def identity_score_threshold(self) -> float:
        return self._identity_score_threshold

    def set_identity_score_threshold(self, threshold: float) -> None:
        """Change the escalation threshold; must lie within ``[0, 100]``."""

        self._identity_score_threshold = validate_identity_score_threshold(threshold)
        LOGGER.info("Identity score threshold set to: %s", self._identity_score_threshold)

    # ------------------------------------------------------------------
    def search(self, subject: Subject, strategy: str) -> SearchResult:
        """Look up ``subject`` using ``strategy`` and return the result envelope."""

        validate_strategy(strategy)
        if not subject.has_required_names():
            raise MissingNameError(f"{subject.display_name()} is missing a first or last name")

        LOGGER.debug("Starting %s search for %s", strategy, subject.display_name())
        if strategy == CONTACT:
            return self._single(subject, CONTACT)
        if strategy == PERSON:
            return self._single(subject, PERSON)
        return self._combination(subject)

    def _single(self, subject: Subject, endpoint: str) -> SearchResult:
        call = self._call(subject, endpoint)
        return SearchResult(
            data=call.response,
            strategy=endpoint,
            cost=call.cost,
            used_combination=False,
            api_calls=[call],
        )

    def _combination(self, subject: Subject) -> SearchResult:
        contact_call = self._call(subject, CONTACT)
        api_calls: List[ApiCall] = [contact_call]

        score = contact_call.response.get("identityScore")
        has_email = _has_email(contact_call.response)
        threshold = self._identity_score_threshold

        if not _below_threshold(contact_call.response, threshold) and has_email:
            LOGGER.debug(
                "Identity score %s is %s or above and has email data, using contact enrichment result",
                score,
                threshold,
            )
            return self._combination_result(contact_call.response, api_calls)

        LOGGER.info(
            "Identity score %s (threshold %s, email found: %s) for %s, trying person search",
            score,
            threshold,
            has_email,
            subject.display_name(),
        )
        try:
            person_call = self._call(subject, PERSON)
        except Exception as exc:
            LOGGER.warning(
                "Person search failed for %s, falling back to contact enrichment result: %s",
                subject.display_name(),
                exc,
            )
            return self._combination_result(contact_call.response, api_calls)

        api_calls.append(person_call)
        return self._combination_result(person_call.response, api_calls, used_combination=True)

    def _combination_result(
        self,
        data: Dict[str, Any],
        api_calls: List[ApiCall],
        *,
        used_combination: bool = False,
    ) -> SearchResult:
        cost = round(sum(call.cost for call in api_calls), 2)
        return SearchResult(
            data=data,
            strategy=COMBINATION,
            cost=cost,
            used_combination=used_combination,
            api_calls=api_calls,
        )

    def _call(self, subject: Subject, endpoint: str) -> ApiCall:
        if endpoint == CONTACT:
            response = self._client.enrich_contact(subject)
        else:
            response = self._client.search_person(subject)
        return ApiCall(
            response=response if isinstance(response, dict) else {},
            endpoint=endpoint,
            timestamp=self._clock(),
            cost=CALL_COSTS[endpoint],
        )


def _below_threshold(response: Dict[str, Any], threshold: float) -> bool:
    # Only a reported score can fail the gate; an explicit null counts as zero.
    if not isinstance(response, dict) or "identityScore" not in response:
        return False
    value = response["identityScore"]
    if value is None or isinstance(value, bool):
        return True
    try:
        return float(value) < threshold
    except (TypeError, ValueError):
        return False


def _has_email(response: Dict[str, Any]) -> bool:
    person = extract_person(response)
    if person is None:
        return False
    emails = person.get("emails")
    return isinstance(emails, list) and len(emails) > 0


__all__ = [
    "MissingNameError",
    "SearchOrchestrator",
    "ValidationError",
    "validate_strategy",
]
