"""Single-candidate processing: one scoring call with in-flight tracking.

Flow:
  1. Preconditions:    job id present, no batch running, candidate not in flight
  2. Track:            candidate joins the ProcessingSet before the await
  3. Score:            the only suspension point
  4. Release:          candidate leaves the ProcessingSet on every path
  5. Report:           success/failure notification
  6. Observe:          re-read the roster, recompute the CTA, publish refresh
"""

import logging
from typing import Literal

from src.core.roster import RosterSource
from src.core.schemas import Job, NotificationLevel
from src.pipeline.completion import should_show_completion_cta
from src.pipeline.events import RosterEvents
from src.pipeline.notifications import LoggingNotifier, NotificationSink
from src.pipeline.processing_state import ProcessingState
from src.scoring.base import CandidateScorer

logger = logging.getLogger(__name__)

Outcome = Literal["scored", "failed", "skipped"]


class SingleCandidateProcessor:
    """Runs the scoring collaborator for one candidate at a time per id.

    Different candidates may be in flight together; the same candidate
    never is.
    """

    def __init__(
        self,
        state: ProcessingState,
        roster: RosterSource,
        scorer: CandidateScorer,
        notifier: NotificationSink | None = None,
        events: RosterEvents | None = None,
    ) -> None:
        self.state = state
        self.roster = roster
        self._scorer = scorer
        self._notifier = notifier or LoggingNotifier()
        self.events = events or RosterEvents()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    async def process_one(self, job_id: str | None, candidate_id: str) -> bool:
        """Score one candidate on request. Returns True if it was scored.

        Missing job id, an active batch, or the candidate already being in
        flight make this a no-op.
        """
        if not job_id:
            logger.debug("No job id, ignoring request to process '%s'", candidate_id)
            return False
        if self.state.batch.is_active:
            logger.debug("Batch in progress, ignoring request to process '%s'", candidate_id)
            return False
        if self.state.is_processing(candidate_id):
            logger.debug("Candidate '%s' already in flight, ignoring", candidate_id)
            return False

        return await self.score(job_id, candidate_id) == "scored"

    async def score(self, job_id: str, candidate_id: str) -> Outcome:
        """Score a candidate without the batch guard.

        Scoring failures are reported and returned as "failed", never raised.
        """
        if self.state.is_processing(candidate_id):
            logger.info("Candidate '%s' already in flight, skipping", candidate_id)
            return "skipped"

        scored = False
        with self.state.track(candidate_id):
            try:
                candidate = await self._scorer.score(job_id, candidate_id)
                scored = True
            except Exception:
                logger.warning(
                    "Scoring failed for candidate '%s' (job '%s')",
                    candidate_id,
                    job_id,
                    exc_info=True,
                )

        if not scored:
            self.notify("error", "Failed to process candidate", candidate_id)
            return "failed"

        logger.info("Processed candidate '%s' (%s)", candidate.name, candidate_id)
        self.notify("success", "Candidate processed successfully", candidate_id)
        self.observe(job_id)
        return "scored"

    def refresh(self, job_id: str) -> Job | None:
        """Re-read the roster, recompute the completion CTA, and tell subscribers.

        Returns the fresh job, or None if the roster source no longer has it.
        """
        job = self.roster.load_job(job_id)
        if job is None:
            self.state.show_completion_cta = False
            return None
        self.state.show_completion_cta = should_show_completion_cta(job.candidates)
        if not self._closed:
            self.events.publish(job)
        return job

    def observe(self, job_id: str) -> Job | None:
        """Like refresh(), but a failing roster read is logged instead of raised."""
        try:
            return self.refresh(job_id)
        except Exception:
            logger.warning("Could not re-read roster for job '%s'", job_id, exc_info=True)
            return None

    def notify(
        self,
        level: NotificationLevel,
        message: str,
        candidate_id: str | None = None,
    ) -> None:
        if self._closed:
            return
        try:
            getattr(self._notifier, level)(message, candidate_id)
        except Exception:
            logger.warning(
                "Notification sink failed for %s message %r", level, message, exc_info=True,
            )

    def close(self) -> None:
        """Stop delivering notifications and roster events."""
        self._closed = True
        self.events.close()
