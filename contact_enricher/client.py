"""HTTP client for the Enformion/Endato identity data API."""
from __future__ import annotations

import json
import logging
from typing import Any, Dict, Mapping, Optional, Protocol

import requests

from .config import ConfigurationError, Credentials
from .models import Subject

LOGGER = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://devapi.enformion.com"
DEFAULT_RETRY_AFTER_SECONDS = 60

RATE_LIMIT = "rate_limit"
AUTHENTICATION = "authentication"
VALIDATION = "validation"
NETWORK = "network"
UNKNOWN = "unknown"


class ApiError(RuntimeError):
    """Classified failure reported by the identity API boundary."""

    def __init__(
        self,
        type: str,
        code: str,
        message: str,
        *,
        technical_message: Optional[str] = None,
        status_code: Optional[int] = None,
        retry_after: Optional[int] = None,
    ) -> None:
        super().__init__(message)
        self.type = type
        self.code = code
        self.message = message
        self.technical_message = technical_message
        self.status_code = status_code
        self.retry_after = retry_after

    def __repr__(self) -> str:
        return f"ApiError(type={self.type!r}, code={self.code!r}, status_code={self.status_code!r})"


class ApiClient(Protocol):
    """Interface the search orchestrator expects from an API client."""

    def enrich_contact(self, subject: Subject) -> Dict[str, Any]:  # pragma: no cover - runtime protocol
        """Return the raw contact enrichment response for ``subject``."""

    def search_person(self, subject: Subject) -> Dict[str, Any]:  # pragma: no cover - runtime protocol
        """Return the raw person search response for ``subject``."""


def classify_error(
    status_code: int, body: str, headers: Optional[Mapping[str, str]] = None
) -> ApiError:
    """Turn a failed HTTP response into an :class:`ApiError`."""

    retry_after = _retry_after(headers)
    try:
        payload = json.loads(body) if body else None
    except ValueError:
        payload = None

    error = payload.get("error") if isinstance(payload, dict) else None
    if isinstance(error, dict):
        code = error.get("code") or ""
        technical = error.get("technicalErrorMessage")

        if status_code == 429 or code == "Rate Limit Exceeded":
            return ApiError(
                RATE_LIMIT,
                code or "Rate Limit Exceeded",
                "API rate limit exceeded. Please wait before making more requests.",
                technical_message=technical,
                status_code=status_code,
                retry_after=retry_after,
            )

        if code == "Invalid Input":
            input_errors = error.get("inputErrors") or []
            details = ", ".join(str(item) for item in input_errors) or error.get("message") or ""
            return ApiError(
                VALIDATION,
                code,
                f"Validation failed: {details}",
                technical_message=technical,
                status_code=status_code,
            )

        if status_code == 401 or code == "Unauthorized":
            return ApiError(
                AUTHENTICATION,
                code or "Unauthorized",
                "Authentication failed. Please check your API credentials.",
                technical_message=technical,
                status_code=status_code,
            )

        return ApiError(
            UNKNOWN,
            code or "API Error",
            error.get("message") or "An API error occurred",
            technical_message=technical,
            status_code=status_code,
        )

    if status_code == 429:
        return ApiError(
            RATE_LIMIT,
            "Rate Limit Exceeded",
            "API rate limit exceeded. Please wait before making more requests.",
            status_code=status_code,
            retry_after=retry_after,
        )
    if status_code == 401:
        return ApiError(
            AUTHENTICATION,
            "Unauthorized",
            "Authentication failed. Please check your API credentials.",
            status_code=status_code,
        )
    if status_code >= 500:
        return ApiError(
            NETWORK,
            "Server Error",
            "Server error occurred. Please try again later.",
            status_code=status_code,
        )
    return ApiError(
        UNKNOWN,
        "Unknown Error",
        f"Request failed with status {status_code}",
        status_code=status_code,
    )


def _retry_after(headers: Optional[Mapping[str, str]]) -> int:
    if headers:
        value = headers.get("Retry-After")
        if value is not None:
            try:
                return int(value)
            except (TypeError, ValueError):
                pass
    return DEFAULT_RETRY_AFTER_SECONDS


class EnformionClient:
    """Calls the contact enrichment and person search endpoints."""

    CONTACT_ENRICH_PATH = "/Contact/Enrich"
    PERSON_SEARCH_PATH = "/PersonSearch"
    CLIENT_TYPE = "python"

    def __init__(
        self,
        credentials: Credentials,
        *,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 30.0,
        session: Optional[requests.Session] = None,
    ) -> None:
        if credentials is None:
            raise ConfigurationError("EnformionClient requires API credentials")
        self._credentials = credentials
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._session = session or requests.Session()

    @property
    def base_url(self) -> str:
        return self._base_url

    def enrich_contact(self, subject: Subject) -> Dict[str, Any]:
        first_name, last_name = _request_names(subject)
        body = {
            "FirstName": first_name,
            "MiddleName": (subject.middle_name or "").strip() or None,
            "LastName": last_name,
            "Dob": None,
            "Age": None,
            "Address": {
                "AddressLine1": None,
                "AddressLine2": subject.location,
            },
            "Phone": None,
            "Email": None,
        }
        return self._post(self.CONTACT_ENRICH_PATH, "DevAPIContactEnrich", body)

    def search_person(self, subject: Subject) -> Dict[str, Any]:
        first_name, last_name = _request_names(subject)
        body = {
            "FirstName": first_name,
            "LastName": last_name,
            "Addresses": [{"AddressLine2": subject.location}],
        }
        return self._post(self.PERSON_SEARCH_PATH, "Person", body)

    # ------------------------------------------------------------------
    def _headers(self, search_type: str) -> Dict[str, str]:
        return {
            "Content-Type": "application/json",
            "Accept": "application/json",
            "galaxy-ap-name": self._credentials.access_profile,
            "galaxy-ap-password": self._credentials.password,
            "galaxy-search-type": search_type,
            "galaxy-client-type": self.CLIENT_TYPE,
        }

    def _post(self, path: str, search_type: str, body: Dict[str, Any]) -> Dict[str, Any]:
        url = f"{self._base_url}{path}"
        LOGGER.debug("POST %s (search type %s)", url, search_type)
        try:
            response = self._session.post(
                url,
                json=body,
                headers=self._headers(search_type),
                timeout=self._timeout,
            )
        except requests.RequestException as exc:
            LOGGER.error("Request to %s failed: %s", url, exc)
            raise ApiError(NETWORK, "Network Error", f"Request to {path} failed: {exc}") from exc

        if response.ok:
            try:
                payload = response.json()
            except ValueError as exc:
                raise ApiError(
                    UNKNOWN,
                    "Invalid Response",
                    f"{path} returned a non-JSON response",
                    status_code=response.status_code,
                ) from exc
            if not isinstance(payload, dict):
                raise ApiError(
                    UNKNOWN,
                    "Invalid Response",
                    f"{path} returned an unexpected payload",
                    status_code=response.status_code,
                )
            LOGGER.debug("%s succeeded with identity score %s", path, payload.get("identityScore"))
            return payload

        error = classify_error(response.status_code, response.text, response.headers)
        LOGGER.warning("%s failed with status %s: %s", path, response.status_code, error.message)
        raise error


def _request_names(subject: Subject) -> tuple[Optional[str], Optional[str]]:
    # The API requires a last name whenever a first name is sent.
    first_name = (subject.first_name or "").strip() or None
    last_name = (subject.last_name or "").strip() or None
    if first_name and last_name:
        return first_name, last_name
    return None, None


__all__ = [
    "ApiClient",
    "ApiError",
    "EnformionClient",
    "classify_error",
    "RATE_LIMIT",
    "AUTHENTICATION",
    "VALIDATION",
    "NETWORK",
    "UNKNOWN",
]
