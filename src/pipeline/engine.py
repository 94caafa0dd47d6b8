"""Processing engine: the single entry point UI and CLI layers talk to.

Wires ProcessingState, the single and batch processors, the roster event
channel and the notification sink around one scoring collaborator.
"""

import asyncio
import logging
from collections.abc import Callable, Sequence
from types import TracebackType

from src.core.config import BatchConfig
from src.core.roster import RosterSource
from src.core.schemas import BatchRun, Candidate, FilterCriteria, Job
from src.pipeline.batch import BatchProcessor, ProgressListener
from src.pipeline.events import RosterEvents, RosterListener
from src.pipeline.filtering import filter_candidates
from src.pipeline.notifications import NotificationSink
from src.pipeline.processing_state import ProcessingState
from src.pipeline.single import SingleCandidateProcessor
from src.scoring.base import CandidateScorer

logger = logging.getLogger(__name__)


class ProcessingEngine:
    """Orchestrates candidate scoring for the roster of a job.

    Usage::

        async with ProcessingEngine(roster, scorer, notifier) as engine:
            engine.subscribe(lambda job: redraw(job))
            run = await engine.process_all(job_id)
    """

    def __init__(
        self,
        roster: RosterSource,
        scorer: CandidateScorer,
        notifier: NotificationSink | None = None,
        *,
        batch_config: BatchConfig | None = None,
    ) -> None:
        self.state = ProcessingState()
        self.events = RosterEvents()
        self._single = SingleCandidateProcessor(
            self.state, roster, scorer, notifier, self.events,
        )
        self._batch = BatchProcessor(self._single, batch_config)

    @property
    def batch(self) -> BatchRun:
        return self.state.batch

    @property
    def show_completion_cta(self) -> bool:
        return self.state.show_completion_cta

    async def process_one(self, job_id: str | None, candidate_id: str) -> bool:
        return await self._single.process_one(job_id, candidate_id)

    async def process_all(
        self,
        job_id: str | None,
        candidate_ids: Sequence[str] | None = None,
        *,
        cancel_event: asyncio.Event | None = None,
    ) -> BatchRun | None:
        return await self._batch.process_all(job_id, candidate_ids, cancel_event=cancel_event)

    def cancel_batch(self) -> bool:
        return self._batch.cancel()

    def refresh(self, job_id: str) -> Job | None:
        """Observe an externally changed roster: recompute the CTA, notify subscribers."""
        return self._single.refresh(job_id)

    def filtered(
        self,
        job_id: str,
        criteria: FilterCriteria | None = None,
        focused_candidate_id: str | None = None,
    ) -> list[Candidate]:
        """Display list for a job, derived from a fresh roster read."""
        job = self._single.roster.load_job(job_id)
        if job is None:
            return []
        return filter_candidates(job.candidates, criteria or FilterCriteria(), focused_candidate_id)

    def subscribe(self, listener: RosterListener) -> Callable[[], None]:
        return self.events.subscribe(listener)

    def add_progress_listener(self, listener: ProgressListener) -> Callable[[], None]:
        return self._batch.add_progress_listener(listener)

    def close(self) -> None:
        """Tear down: stop issuing batch work and silence listeners and notifications."""
        self._batch.cancel()
        self._single.close()
        logger.debug("Processing engine closed")

    async def __aenter__(self) -> "ProcessingEngine":
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.close()
