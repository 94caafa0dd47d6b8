"""Processing state: candidates in flight plus the current batch run.

Pure storage. Callers recompute anything derived from it (the completion
CTA flag, progress output) after mutating.
"""

from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime

from src.core.schemas import BatchRun


class ProcessingState:
    """Holds the ProcessingSet, the BatchRun, and derived flags.

    Usage::

        state = ProcessingState()
        with state.track(candidate_id):
            await scorer.score(job_id, candidate_id)
    """

    def __init__(self) -> None:
        self._processing_ids: set[str] = set()
        self.batch = BatchRun()
        self.show_completion_cta = False

    @property
    def processing_ids(self) -> frozenset[str]:
        return frozenset(self._processing_ids)

    def is_processing(self, candidate_id: str) -> bool:
        return candidate_id in self._processing_ids

    def add(self, candidate_id: str) -> None:
        self._processing_ids.add(candidate_id)

    def discard(self, candidate_id: str) -> None:
        self._processing_ids.discard(candidate_id)

    @contextmanager
    def track(self, candidate_id: str) -> Iterator[None]:
        """Mark a candidate in flight for the duration of the block.

        The marker is released on every exit path, cancellation included.
        """
        self.add(candidate_id)
        try:
            yield
        finally:
            self.discard(candidate_id)

    # --- batch run ---------------------------------------------------------

    def start_batch(self, total: int) -> BatchRun:
        self.batch = BatchRun(total=total, is_active=True, started_at=datetime.now())
        return self.batch

    def set_current(self, candidate_id: str) -> None:
        self.batch.currently_processing = candidate_id

    def record_success(self) -> None:
        self.batch.completed += 1

    def record_failure(self) -> None:
        self.batch.completed += 1
        self.batch.failed += 1

    def record_skip(self) -> None:
        self.batch.completed += 1
        self.batch.skipped += 1

    def finish_batch(self, *, cancelled: bool = False) -> BatchRun:
        self.batch.is_active = False
        self.batch.currently_processing = ""
        self.batch.cancelled = cancelled
        self.batch.finished_at = datetime.now()
        return self.batch
