"""Sequential batch runner feeding subjects through the search orchestrator."""
from __future__ import annotations

import logging
import threading
from typing import Callable, Iterable, Iterator, List, Optional, Sequence

from ..client import ApiClient
from ..config import DEFAULT_IDENTITY_SCORE_THRESHOLD
from ..merge import reconcile
from ..models import SKIPPED_MISSING_NAME, EnrichedRecord, Subject
from .service import SearchOrchestrator, validate_strategy

LOGGER = logging.getLogger(__name__)

ProgressCallback = Callable[[float], None]
RecordCallback = Callable[[EnrichedRecord], None]


class BatchRunner:
    """Enriches subjects one at a time, isolating per-record failures."""

    def __init__(
        self,
        orchestrator: SearchOrchestrator,
        *,
        cancel_event: Optional[threading.Event] = None,
        progress_callback: Optional[ProgressCallback] = None,
        result_callback: Optional[RecordCallback] = None,
    ) -> None:
        self._orchestrator = orchestrator
        self._cancel_event = cancel_event
        self._progress_callback = progress_callback
        self._result_callback = result_callback

    @property
    def orchestrator(self) -> SearchOrchestrator:
        return self._orchestrator

    def run(self, subjects: Iterable[Subject], strategy: str) -> Iterator[EnrichedRecord]:
        """Yield an :class:`EnrichedRecord` per subject as each one completes.

        The strategy is validated before the first record is dispatched.
        Every call to :meth:`run` starts a fresh pass over ``subjects``.
        """

        validate_strategy(strategy)
        return self._iterate(list(subjects), strategy)

    def run_all(self, subjects: Iterable[Subject], strategy: str) -> List[EnrichedRecord]:
        return list(self.run(subjects, strategy))

    # ------------------------------------------------------------------
    def _iterate(self, subjects: Sequence[Subject], strategy: str) -> Iterator[EnrichedRecord]:
        total = len(subjects)
        LOGGER.info("Starting %s enrichment for %s subjects", strategy, total)

        for index, subject in enumerate(subjects):
            if self._cancelled():
                LOGGER.info("Enrichment stopped after %s of %s subjects", index, total)
                return

            LOGGER.debug("Processing subject %s of %s", index + 1, total)
            record = self._enrich(subject, strategy)
            if self._result_callback:
                self._result_callback(record)
            if self._progress_callback:
                self._progress_callback((index + 1) / total * 100)
            yield record

    def _enrich(self, subject: Subject, strategy: str) -> EnrichedRecord:
        if not subject.has_required_names():
            LOGGER.warning("Skipping %s: first and last name are both required", subject.display_name())
            return EnrichedRecord(subject=subject, enriched=False, error=SKIPPED_MISSING_NAME)

        try:
            result = self._orchestrator.search(subject, strategy)
            contact = reconcile(result)
        except Exception as exc:
            LOGGER.warning("Error enriching %s: %s", subject.display_name(), exc, exc_info=True)
            return EnrichedRecord(subject=subject, enriched=False, error=str(exc) or exc.__class__.__name__)

        LOGGER.debug(
            "Enriched %s via %s (cost %.2f, identity score %s, combination used: %s)",
            subject.display_name(),
            result.strategy,
            result.cost,
            result.identity_score,
            result.used_combination,
        )
        return EnrichedRecord(subject=subject, contact=contact, enriched=True, search=result)

    def _cancelled(self) -> bool:
        return bool(self._cancel_event and self._cancel_event.is_set())


def run_batch(
    subjects: Iterable[Subject],
    strategy: str,
    client: ApiClient,
    *,
    identity_score_threshold: float = DEFAULT_IDENTITY_SCORE_THRESHOLD,
    cancel_event: Optional[threading.Event] = None,
    progress_callback: Optional[ProgressCallback] = None,
    result_callback: Optional[RecordCallback] = None,
) -> Iterator[EnrichedRecord]:
    """Convenience wrapper building a :class:`BatchRunner` around ``client``."""

    orchestrator = SearchOrchestrator(client, identity_score_threshold=identity_score_threshold)
    runner = BatchRunner(
        orchestrator,
        cancel_event=cancel_event,
        progress_callback=progress_callback,
        result_callback=result_callback,
    )
    return runner.run(subjects, strategy)


__all__ = ["BatchRunner", "run_batch"]
