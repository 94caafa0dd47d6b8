"""Core data models for the candidate screening engine."""

import math
from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

FilterCategory = Literal["all", "starred", "processed", "unprocessed"]
NotificationLevel = Literal["success", "error", "warning", "info"]
CandidateStatus = Literal["pending", "processed", "reviewed"]


class JobRequirement(BaseModel):
    """A weighted requirement candidates are scored against."""

    model_config = ConfigDict(frozen=True)

    id: str
    description: str
    weight: int = Field(default=5, ge=1, le=10)
    is_required: bool = False
    category: str = ""


class RequirementScore(BaseModel):
    """Score a candidate received for a single requirement (0-10)."""

    model_config = ConfigDict(frozen=True)

    requirement_id: str
    score: float = Field(ge=0.0, le=10.0)
    comment: str = ""


class Candidate(BaseModel):
    """A candidate uploaded against a job.

    Frozen: the roster store owns mutation and readers get a snapshot.
    A candidate with no scores is unprocessed.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    job_id: str
    name: str
    email: str = ""
    resume_text: str = ""
    scores: list[RequirementScore] = Field(default_factory=list)
    strengths: list[str] = Field(default_factory=list)
    weaknesses: list[str] = Field(default_factory=list)
    is_starred: bool = False
    overall_score: float = 0.0
    status: CandidateStatus = "pending"
    processed_at: datetime | None = None

    @property
    def is_processed(self) -> bool:
        return bool(self.scores)


class Job(BaseModel):
    """A job posting together with its roster of candidates."""

    model_config = ConfigDict(frozen=True)

    id: str
    title: str
    company: str = ""
    department: str = ""
    location: str = ""
    description: str = ""
    requirements: list[JobRequirement] = Field(default_factory=list)
    candidates: list[Candidate] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=datetime.now)
    updated_at: datetime = Field(default_factory=datetime.now)

    def get_candidate(self, candidate_id: str) -> Candidate | None:
        for c in self.candidates:
            if c.id == candidate_id:
                return c
        return None

    def unprocessed_ids(self) -> list[str]:
        """Ids of candidates without scores, in roster order."""
        return [c.id for c in self.candidates if not c.is_processed]


class BatchRun(BaseModel):
    """Progress of one "process all unprocessed candidates" invocation.

    ``completed`` counts every attempted candidate, including failures and
    skips; ``failed`` and ``skipped`` are tracked separately for reporting.
    """

    total: int = 0
    completed: int = 0
    failed: int = 0
    skipped: int = 0
    currently_processing: str = ""
    is_active: bool = False
    cancelled: bool = False
    started_at: datetime | None = None
    finished_at: datetime | None = None

    @property
    def succeeded(self) -> int:
        return self.completed - self.failed - self.skipped

    @property
    def progress_percent(self) -> int:
        if self.total <= 0:
            return 0
        # Half-up rounding, so 12.5% shows as 13%.
        return math.floor(self.completed / self.total * 100 + 0.5)


class FilterCriteria(BaseModel):
    """Viewer-owned search term and category used to derive the display list."""

    search_query: str = ""
    category: FilterCategory = "all"


class Notification(BaseModel):
    """A human-readable message for the notification sink."""

    model_config = ConfigDict(frozen=True)

    level: NotificationLevel
    message: str
    candidate_id: str | None = None
