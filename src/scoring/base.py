"""Abstract base class for the candidate scoring collaborator."""

from abc import ABC, abstractmethod

from src.core.schemas import Candidate


class CandidateScorer(ABC):
    """Scores one candidate against its job's requirements and stores the result.

    The processing engine only relies on the asynchronous contract: the
    call eventually returns (success) or raises (failure). Duration and
    retry policy belong to the implementation.
    """

    @abstractmethod
    async def score(self, job_id: str, candidate_id: str) -> Candidate:
        """Score a candidate and persist the scores. Returns the updated candidate."""
