"""Factory helpers for constructing API clients and orchestrators from configuration."""
from __future__ import annotations

import importlib
import inspect

from .client import ApiClient
from .config import ConfigurationError, EnrichmentSettings
from .orchestrator import SearchOrchestrator


def _load_class(path: str):
    module_name, _, attr = path.rpartition(".")
    if not module_name:
        raise ConfigurationError(f"Invalid client class path '{path}'")
    try:
        module = importlib.import_module(module_name)
    except ImportError as exc:
        raise ConfigurationError(f"Client module '{module_name}' could not be imported") from exc
    try:
        return getattr(module, attr)
    except AttributeError as exc:
        raise ConfigurationError(f"Module '{module_name}' does not define '{attr}'") from exc


def build_client(settings: EnrichmentSettings) -> ApiClient:
    """Instantiate the API client class named in the settings.

    Clients whose constructor accepts ``credentials`` receive the configured
    credentials; a missing credential is a configuration error for them.
    """

    client_cls = _load_class(settings.client_class)
    options = dict(settings.client_options)

    if "credentials" in inspect.signature(client_cls).parameters:
        if settings.credentials is None:
            raise ConfigurationError(
                f"{client_cls.__name__} requires credentials (set 'credentials' or 'api_key', or pass --api-key)"
            )
        options["credentials"] = settings.credentials

    try:
        return client_cls(**options)
    except TypeError as exc:
        raise ConfigurationError(f"Invalid options for {client_cls.__name__}: {exc}") from exc


def build_orchestrator(settings: EnrichmentSettings) -> SearchOrchestrator:
    """Create a :class:`SearchOrchestrator` bound to a freshly built client."""

    return SearchOrchestrator(
        build_client(settings),
        identity_score_threshold=settings.identity_score_threshold,
    )
