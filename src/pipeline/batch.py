"""Batch processing: "process all unprocessed candidates" with progress.

Candidates are attempted in the supplied order. With the default
max_concurrency of 1 each one finishes before the next is issued; a larger
value runs a fixed pool of workers over the same ordered queue. Either way
``completed`` grows by exactly one per attempted candidate, so progress is
monotonic, and a failed candidate never stops the others.
"""

import asyncio
import logging
from collections.abc import Callable, Iterator, Sequence

from src.core.config import BatchConfig
from src.core.schemas import BatchRun
from src.pipeline.processing_state import ProcessingState
from src.pipeline.single import SingleCandidateProcessor

logger = logging.getLogger(__name__)

ProgressListener = Callable[[BatchRun], None]


class BatchProcessor:
    """Drives SingleCandidateProcessor over a set of candidates."""

    def __init__(
        self,
        processor: SingleCandidateProcessor,
        config: BatchConfig | None = None,
    ) -> None:
        self._processor = processor
        self._config = config or BatchConfig()
        self._listeners: list[ProgressListener] = []
        self._cancel_event: asyncio.Event | None = None

    @property
    def state(self) -> ProcessingState:
        return self._processor.state

    def add_progress_listener(self, listener: ProgressListener) -> Callable[[], None]:
        """Call ``listener`` with a BatchRun snapshot after every candidate."""
        self._listeners.append(listener)

        def remove() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return remove

    def cancel(self) -> bool:
        """Stop issuing new candidates. In-flight ones are allowed to finish.

        Returns False when no batch is running.
        """
        if self._cancel_event is None or not self.state.batch.is_active:
            return False
        logger.info("Cancelling batch after in-flight candidates finish")
        self._cancel_event.set()
        return True

    async def process_all(
        self,
        job_id: str | None,
        candidate_ids: Sequence[str] | None = None,
        *,
        cancel_event: asyncio.Event | None = None,
    ) -> BatchRun | None:
        """Attempt every target candidate once and return the final BatchRun.

        ``candidate_ids`` defaults to the unprocessed candidates of a fresh
        roster read. Returns None without touching state when the job id is
        missing, a batch is already active, or there is nothing to process.
        """
        state = self.state
        if not job_id:
            logger.debug("No job id, ignoring batch request")
            return None
        if state.batch.is_active:
            logger.debug("Batch already active, ignoring batch request for job '%s'", job_id)
            return None

        if candidate_ids is None:
            job = self._processor.roster.load_job(job_id)
            if job is None:
                logger.warning("Job '%s' not found, nothing to process", job_id)
                return None
            candidate_ids = job.unprocessed_ids()

        ids = list(dict.fromkeys(candidate_ids))
        if not ids:
            self._processor.notify("info", "No unprocessed candidates found")
            return None

        cancel = cancel_event or asyncio.Event()
        self._cancel_event = cancel
        state.start_batch(len(ids))
        state.show_completion_cta = False
        logger.info("Processing %d candidates for job '%s'", len(ids), job_id)

        try:
            if self._config.max_concurrency == 1:
                await self._run_sequential(job_id, ids, cancel)
            else:
                await self._run_pooled(job_id, ids, cancel)
        finally:
            batch = state.batch
            state.finish_batch(cancelled=cancel.is_set() and batch.completed < batch.total)
            self._cancel_event = None

        run = state.batch.model_copy()
        logger.info(
            "Batch for job '%s' done: %d/%d attempted, %d failed, %d skipped",
            job_id, run.completed, run.total, run.failed, run.skipped,
        )
        self._processor.observe(job_id)
        self._notify_summary(run)
        return run

    async def _run_sequential(self, job_id: str, ids: list[str], cancel: asyncio.Event) -> None:
        for candidate_id in ids:
            if cancel.is_set():
                break
            await self._attempt(job_id, candidate_id)

    async def _run_pooled(self, job_id: str, ids: list[str], cancel: asyncio.Event) -> None:
        queue: Iterator[str] = iter(ids)

        async def worker() -> None:
            # Workers share one iterator, so ids are still issued in order.
            for candidate_id in queue:
                if cancel.is_set():
                    return
                await self._attempt(job_id, candidate_id)

        pool_size = min(self._config.max_concurrency, len(ids))
        workers = [asyncio.create_task(worker()) for _ in range(pool_size)]
        try:
            await asyncio.gather(*workers)
        finally:
            for w in workers:
                w.cancel()

    async def _attempt(self, job_id: str, candidate_id: str) -> None:
        self.state.set_current(candidate_id)
        outcome = await self._processor.score(job_id, candidate_id)
        if outcome == "scored":
            self.state.record_success()
        elif outcome == "failed":
            self.state.record_failure()
        else:
            self.state.record_skip()
        self._emit_progress()

    def _emit_progress(self) -> None:
        if self._processor.closed:
            return
        snapshot = self.state.batch.model_copy()
        logger.debug(
            "Batch progress: %d/%d (%d%%)",
            snapshot.completed, snapshot.total, snapshot.progress_percent,
        )
        for listener in list(self._listeners):
            try:
                listener(snapshot)
            except Exception:
                logger.warning("Progress listener %r failed", listener, exc_info=True)

    def _notify_summary(self, run: BatchRun) -> None:
        if run.cancelled:
            message = f"Batch cancelled after {run.completed} of {run.total} candidates"
        elif run.succeeded > 0 and run.failed == 0:
            message = f"Successfully processed {run.succeeded} candidates"
        elif run.succeeded > 0:
            message = f"Processed {run.succeeded} candidates with {run.failed} errors"
        elif run.failed > 0:
            message = "Failed to process any candidates"
        else:
            message = f"No candidates processed ({run.skipped} already in progress)"
        self._processor.notify("info", message)
