"""Exception types raised by the roster store and scoring collaborators."""


class ScreeningError(Exception):
    """Base class for screening engine errors."""


class JobNotFoundError(ScreeningError):
    def __init__(self, job_id: str) -> None:
        super().__init__(f"Job not found: {job_id}")
        self.job_id = job_id


class CandidateNotFoundError(ScreeningError):
    def __init__(self, candidate_id: str) -> None:
        super().__init__(f"Candidate not found: {candidate_id}")
        self.candidate_id = candidate_id


class ScoringError(ScreeningError):
    """The scoring collaborator could not produce scores for a candidate."""
