"""Top-level package for the contact enrichment toolkit."""

from . import ingestion, models  # noqa: F401
from .merge import merge_contacts, reconcile
from .models import (
    ApiCall,
    BatchSummary,
    EnrichedRecord,
    NormalizedContact,
    SearchResult,
    Subject,
    summarize,
)
from .normalize import normalize_response
from .orchestrator import BatchRunner, SearchOrchestrator, run_batch

__all__ = [
    "ApiCall",
    "BatchRunner",
    "BatchSummary",
    "EnrichedRecord",
    "NormalizedContact",
    "SearchOrchestrator",
    "SearchResult",
    "Subject",
    "merge_contacts",
    "normalize_response",
    "reconcile",
    "run_batch",
    "summarize",
    "ingestion",
    "orchestrator",
]
