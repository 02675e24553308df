"""Workflow orchestration for searching, reconciling, and batch enrichment."""

from .batch import BatchRunner, run_batch
from .service import MissingNameError, SearchOrchestrator, ValidationError, validate_strategy

__all__ = [
    "BatchRunner",
    "MissingNameError",
    "SearchOrchestrator",
    "ValidationError",
    "run_batch",
    "validate_strategy",
]
