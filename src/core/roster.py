"""Roster sources: where the processing engine reads a job's candidates from."""

import sqlite3
from abc import ABC, abstractmethod

from src.core.db import load_job
from src.core.schemas import Job


class RosterSource(ABC):
    """Supplies the current roster for a job.

    Implementations must not cache: the engine re-reads after every
    processing call to observe changes made elsewhere.
    """

    @abstractmethod
    def load_job(self, job_id: str) -> Job | None:
        """Return the job with its current candidates, or None if unknown."""


class SqliteRosterSource(RosterSource):
    """Reads rosters straight from the SQLite store on every call."""

    def __init__(self, conn: sqlite3.Connection) -> None:
        self._conn = conn

    def load_job(self, job_id: str) -> Job | None:
        return load_job(self._conn, job_id)
