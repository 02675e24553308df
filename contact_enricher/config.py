"""Configuration helpers for the contact enrichment pipeline."""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml

from .models import COMBINATION, SEARCH_STRATEGIES

LOGGER = logging.getLogger(__name__)

DEFAULT_IDENTITY_SCORE_THRESHOLD = 95.0
DEFAULT_CLIENT_CLASS = "contact_enricher.client.EnformionClient"


class ConfigurationError(RuntimeError):
    """Raised when configuration files or values are missing or malformed."""


_SUPPORTED_EXTENSIONS = {".json", ".yaml", ".yml"}


def load_configuration(path: str | Path) -> Dict[str, Any]:
    """Load configuration data from a JSON or YAML file."""

    file_path = Path(path)
    if not file_path.exists():
        raise ConfigurationError(f"Configuration file '{file_path}' was not found")

    if file_path.suffix.lower() not in _SUPPORTED_EXTENSIONS:
        raise ConfigurationError(
            f"Unsupported configuration format '{file_path.suffix}'. Supported extensions: {sorted(_SUPPORTED_EXTENSIONS)}"
        )

    text = file_path.read_text(encoding="utf-8")
    try:
        if file_path.suffix.lower() == ".json":
            data = json.loads(text)
        else:
            data = yaml.safe_load(text)
    except (json.JSONDecodeError, yaml.YAMLError) as exc:
        raise ConfigurationError(f"Configuration file '{file_path}' could not be parsed: {exc}") from exc

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"Configuration file '{file_path}' must contain a mapping at the top level")
    return data


def validate_identity_score_threshold(value: Any) -> float:
    """Return ``value`` as a float, rejecting anything outside ``[0, 100]``."""

    if isinstance(value, bool):
        raise ConfigurationError(f"Identity score threshold must be a number, got {value!r}")
    try:
        threshold = float(value)
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(f"Identity score threshold must be a number, got {value!r}") from exc
    if not 0 <= threshold <= 100:
        raise ConfigurationError("Identity score threshold must be between 0 and 100")
    return threshold


@dataclass(frozen=True)
class Credentials:
    """Access profile name and password for the identity API."""

    access_profile: str
    password: str = field(repr=False)

    def __post_init__(self) -> None:
        if not (self.access_profile or "").strip() or not (self.password or "").strip():
            raise ConfigurationError("Both access profile and password are required")
        if len(self.access_profile) < 3:
            LOGGER.warning("Access profile seems very short: %s", self.access_profile)
        if len(self.password) < 8:
            LOGGER.warning("Password seems very short: %s characters", len(self.password))

    @classmethod
    def from_api_key(cls, api_key: str) -> "Credentials":
        """Parse an API key of the form ``profileName:password``."""

        profile, separator, password = (api_key or "").strip().partition(":")
        if not separator or not password:
            raise ConfigurationError(
                'API key must be in format "profileName:password" (e.g., "myProfile:myPassword")'
            )
        return cls(access_profile=profile, password=password)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "Credentials":
        api_key = data.get("api_key")
        if api_key:
            return cls.from_api_key(str(api_key))
        credentials = data.get("credentials") or {}
        if not isinstance(credentials, Mapping):
            raise ConfigurationError("'credentials' must be a mapping with access_profile and password")
        return cls(
            access_profile=str(credentials.get("access_profile") or ""),
            password=str(credentials.get("password") or ""),
        )


@dataclass(frozen=True)
class EnrichmentSettings:
    """Resolved, read-only settings for one batch run."""

    strategy: str = COMBINATION
    identity_score_threshold: float = DEFAULT_IDENTITY_SCORE_THRESHOLD
    credentials: Optional[Credentials] = None
    client_class: str = DEFAULT_CLIENT_CLASS
    client_options: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_mapping(
        cls,
        data: Mapping[str, Any],
        *,
        strategy: Optional[str] = None,
        identity_score_threshold: Optional[float] = None,
        api_key: Optional[str] = None,
    ) -> "EnrichmentSettings":
        """Validate ``data`` and apply command line overrides."""

        resolved_strategy = (strategy or data.get("strategy") or COMBINATION).strip().lower()
        if resolved_strategy not in SEARCH_STRATEGIES:
            raise ConfigurationError(
                f"Invalid search strategy '{resolved_strategy}'. Expected one of: {', '.join(SEARCH_STRATEGIES)}"
            )

        threshold_value = identity_score_threshold
        if threshold_value is None:
            threshold_value = data.get("identity_score_threshold", DEFAULT_IDENTITY_SCORE_THRESHOLD)
        threshold = validate_identity_score_threshold(threshold_value)

        client_cfg = data.get("client") or {}
        if not isinstance(client_cfg, Mapping):
            raise ConfigurationError("'client' must be a mapping")
        client_class = client_cfg.get("class") or DEFAULT_CLIENT_CLASS
        options = client_cfg.get("options") or {}
        if not isinstance(options, Mapping):
            raise ConfigurationError("'client.options' must be a mapping")

        credentials: Optional[Credentials] = None
        if api_key:
            credentials = Credentials.from_api_key(api_key)
        elif data.get("api_key") or data.get("credentials"):
            credentials = Credentials.from_mapping(data)

        return cls(
            strategy=resolved_strategy,
            identity_score_threshold=threshold,
            credentials=credentials,
            client_class=str(client_class),
            client_options=dict(options),
        )
