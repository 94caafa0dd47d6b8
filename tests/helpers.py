"""Test doubles for processing tests: in-memory roster and a controllable scorer."""

import asyncio

from src.core.errors import ScoringError
from src.core.roster import RosterSource
from src.core.schemas import Candidate, Job, JobRequirement, RequirementScore
from src.scoring.base import CandidateScorer

JOB_ID = "job-1"


class InMemoryRoster(RosterSource):
    """Roster source backed by a dict; counts reads."""

    def __init__(self, *jobs: Job) -> None:
        self.jobs = {j.id: j for j in jobs}
        self.reads = 0

    def load_job(self, job_id: str) -> Job | None:
        self.reads += 1
        return self.jobs.get(job_id)

    def mark_processed(self, job_id: str, candidate_id: str, score: float = 7.0) -> Candidate:
        job = self.jobs[job_id]
        processed: Candidate | None = None
        candidates: list[Candidate] = []
        for c in job.candidates:
            if c.id == candidate_id:
                c = c.model_copy(update={
                    "scores": [RequirementScore(requirement_id="req-1", score=score)],
                    "overall_score": score,
                    "status": "processed",
                })
                processed = c
            candidates.append(c)
        if processed is None:
            msg = f"unknown candidate {candidate_id}"
            raise ScoringError(msg)
        self.jobs[job_id] = job.model_copy(update={"candidates": candidates})
        return processed


class FakeScorer(CandidateScorer):
    """CandidateScorer double.

    ``fail_ids`` fail with ScoringError; setting ``gate`` holds every call
    until the event is set. Tracks call order and peak concurrency.
    """

    def __init__(self, roster: InMemoryRoster) -> None:
        self.roster = roster
        self.calls: list[str] = []
        self.fail_ids: set[str] = set()
        self.gate: asyncio.Event | None = None
        self.active = 0
        self.max_active = 0

    async def score(self, job_id: str, candidate_id: str) -> Candidate:
        self.calls.append(candidate_id)
        self.active += 1
        self.max_active = max(self.max_active, self.active)
        try:
            if self.gate is not None:
                await self.gate.wait()
            else:
                await asyncio.sleep(0)
            if candidate_id in self.fail_ids:
                msg = f"scoring service rejected {candidate_id}"
                raise ScoringError(msg)
            return self.roster.mark_processed(job_id, candidate_id)
        finally:
            self.active -= 1


def make_candidate(
    candidate_id: str,
    *,
    name: str | None = None,
    processed: bool = False,
    starred: bool = False,
    overall_score: float = 0.0,
    strengths: list[str] | None = None,
    weaknesses: list[str] | None = None,
) -> Candidate:
    scores = [RequirementScore(requirement_id="req-1", score=8)] if processed else []
    return Candidate(
        id=candidate_id,
        job_id=JOB_ID,
        name=name or candidate_id.upper(),
        scores=scores,
        is_starred=starred,
        overall_score=overall_score,
        strengths=strengths or [],
        weaknesses=weaknesses or [],
        status="processed" if processed else "pending",
    )


def make_job(candidates: list[Candidate]) -> Job:
    return Job(
        id=JOB_ID,
        title="Customer Success Manager",
        requirements=[JobRequirement(id="req-1", description="SaaS experience", weight=8)],
        candidates=candidates,
    )


async def drain(rounds: int = 5) -> None:
    """Let pending tasks run until they block."""
    for _ in range(rounds):
        await asyncio.sleep(0)
