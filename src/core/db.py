"""SQLite roster store: jobs, requirements, candidates, and requirement scores."""

import json
import sqlite3
import uuid
from datetime import datetime
from pathlib import Path

from src.core.config import JobSpec
from src.core.errors import CandidateNotFoundError, JobNotFoundError
from src.core.schemas import Candidate, Job, JobRequirement, RequirementScore

_JOBS_TABLE = """
CREATE TABLE IF NOT EXISTS jobs (
    id          TEXT PRIMARY KEY,
    title       TEXT NOT NULL,
    company     TEXT NOT NULL DEFAULT '',
    department  TEXT NOT NULL DEFAULT '',
    location    TEXT NOT NULL DEFAULT '',
    description TEXT NOT NULL DEFAULT '',
    created_at  TEXT NOT NULL,
    updated_at  TEXT NOT NULL
);
"""

_REQUIREMENTS_TABLE = """
CREATE TABLE IF NOT EXISTS requirements (
    id          TEXT PRIMARY KEY,
    job_id      TEXT    NOT NULL REFERENCES jobs(id) ON DELETE CASCADE,
    description TEXT    NOT NULL,
    weight      INTEGER NOT NULL DEFAULT 5,
    is_required INTEGER NOT NULL DEFAULT 0,
    category    TEXT    NOT NULL DEFAULT ''
);
"""

_CANDIDATES_TABLE = """
CREATE TABLE IF NOT EXISTS candidates (
    id             TEXT PRIMARY KEY,
    job_id         TEXT    NOT NULL REFERENCES jobs(id) ON DELETE CASCADE,
    name           TEXT    NOT NULL,
    email          TEXT    NOT NULL DEFAULT '',
    resume_text    TEXT    NOT NULL DEFAULT '',
    strengths      TEXT    NOT NULL DEFAULT '[]',
    weaknesses     TEXT    NOT NULL DEFAULT '[]',
    is_starred     INTEGER NOT NULL DEFAULT 0,
    overall_score  REAL    NOT NULL DEFAULT 0.0,
    status         TEXT    NOT NULL DEFAULT 'pending',
    processed_at   TEXT,
    created_at     TEXT    NOT NULL
);
"""

_SCORES_TABLE = """
CREATE TABLE IF NOT EXISTS candidate_scores (
    candidate_id    TEXT NOT NULL REFERENCES candidates(id) ON DELETE CASCADE,
    requirement_id  TEXT NOT NULL,
    score           REAL NOT NULL,
    comment         TEXT NOT NULL DEFAULT '',
    PRIMARY KEY (candidate_id, requirement_id)
);
"""


def init_db(path: str | Path) -> sqlite3.Connection:
    """Create the database and tables, returning a connection."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(str(path))
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA journal_mode=WAL")
    conn.execute("PRAGMA foreign_keys=ON")
    conn.execute(_JOBS_TABLE)
    conn.execute(_REQUIREMENTS_TABLE)
    conn.execute(_CANDIDATES_TABLE)
    conn.execute(_SCORES_TABLE)
    conn.commit()
    return conn


def _new_id() -> str:
    return uuid.uuid4().hex


def insert_job(conn: sqlite3.Connection, spec: JobSpec) -> str:
    """Store a job and its requirements. Returns the new job ID."""
    job_id = _new_id()
    now = datetime.now().isoformat()
    conn.execute(
        """
        INSERT INTO jobs
            (id, title, company, department, location, description, created_at, updated_at)
        VALUES (?, ?, ?, ?, ?, ?, ?, ?)
        """,
        (
            job_id,
            spec.title,
            spec.company,
            spec.department,
            spec.location,
            spec.description,
            now,
            now,
        ),
    )
    for req in spec.requirements:
        conn.execute(
            """
            INSERT INTO requirements (id, job_id, description, weight, is_required, category)
            VALUES (?, ?, ?, ?, ?, ?)
            """,
            (_new_id(), job_id, req.description, req.weight, int(req.is_required), req.category),
        )
    conn.commit()
    return job_id


def insert_candidate(
    conn: sqlite3.Connection,
    job_id: str,
    name: str,
    resume_text: str = "",
    email: str = "",
) -> str:
    """Add an unprocessed candidate to a job's roster. Returns the candidate ID.

    Raises JobNotFoundError if the job does not exist.
    """
    if conn.execute("SELECT 1 FROM jobs WHERE id = ?", (job_id,)).fetchone() is None:
        raise JobNotFoundError(job_id)

    candidate_id = _new_id()
    conn.execute(
        """
        INSERT INTO candidates (id, job_id, name, email, resume_text, created_at)
        VALUES (?, ?, ?, ?, ?, ?)
        """,
        (candidate_id, job_id, name, email, resume_text, datetime.now().isoformat()),
    )
    _touch_job(conn, job_id)
    conn.commit()
    return candidate_id


def load_job(conn: sqlite3.Connection, job_id: str) -> Job | None:
    """Read a job with its requirements and full roster, or None if missing.

    Candidates are returned in upload order.
    """
    row = conn.execute("SELECT * FROM jobs WHERE id = ?", (job_id,)).fetchone()
    if row is None:
        return None

    requirements = [
        JobRequirement(
            id=r["id"],
            description=r["description"],
            weight=r["weight"],
            is_required=bool(r["is_required"]),
            category=r["category"],
        )
        for r in conn.execute(
            "SELECT * FROM requirements WHERE job_id = ? ORDER BY rowid", (job_id,),
        ).fetchall()
    ]

    scores: dict[str, list[RequirementScore]] = {}
    for s in conn.execute(
        """
        SELECT s.* FROM candidate_scores s
        JOIN candidates c ON c.id = s.candidate_id
        WHERE c.job_id = ?
        ORDER BY s.rowid
        """,
        (job_id,),
    ).fetchall():
        scores.setdefault(s["candidate_id"], []).append(
            RequirementScore(
                requirement_id=s["requirement_id"],
                score=s["score"],
                comment=s["comment"],
            )
        )

    candidates = [
        _row_to_candidate(c, scores.get(c["id"], []))
        for c in conn.execute(
            "SELECT * FROM candidates WHERE job_id = ? ORDER BY rowid", (job_id,),
        ).fetchall()
    ]

    return Job(
        id=row["id"],
        title=row["title"],
        company=row["company"],
        department=row["department"],
        location=row["location"],
        description=row["description"],
        requirements=requirements,
        candidates=candidates,
        created_at=datetime.fromisoformat(row["created_at"]),
        updated_at=datetime.fromisoformat(row["updated_at"]),
    )


def save_candidate_analysis(
    conn: sqlite3.Connection,
    candidate_id: str,
    scores: list[RequirementScore],
    overall_score: float,
    strengths: list[str],
    weaknesses: list[str],
) -> None:
    """Replace a candidate's scores and mark it processed.

    Raises CandidateNotFoundError if the candidate does not exist.
    """
    row = conn.execute("SELECT job_id FROM candidates WHERE id = ?", (candidate_id,)).fetchone()
    if row is None:
        raise CandidateNotFoundError(candidate_id)

    with conn:
        conn.execute("DELETE FROM candidate_scores WHERE candidate_id = ?", (candidate_id,))
        conn.executemany(
            """
            INSERT INTO candidate_scores (candidate_id, requirement_id, score, comment)
            VALUES (?, ?, ?, ?)
            """,
            [(candidate_id, s.requirement_id, s.score, s.comment) for s in scores],
        )
        conn.execute(
            """
            UPDATE candidates
            SET strengths = ?, weaknesses = ?, overall_score = ?,
                status = 'processed', processed_at = ?
            WHERE id = ?
            """,
            (
                json.dumps(strengths),
                json.dumps(weaknesses),
                overall_score,
                datetime.now().isoformat(),
                candidate_id,
            ),
        )
        _touch_job(conn, row["job_id"])


def set_candidate_starred(conn: sqlite3.Connection, candidate_id: str, starred: bool) -> None:
    """Star or unstar a candidate. Raises CandidateNotFoundError if missing."""
    cursor = conn.execute(
        "UPDATE candidates SET is_starred = ? WHERE id = ?",
        (int(starred), candidate_id),
    )
    if cursor.rowcount == 0:
        raise CandidateNotFoundError(candidate_id)
    conn.commit()


def delete_candidate(conn: sqlite3.Connection, candidate_id: str) -> bool:
    """Remove a candidate and its scores. Returns False if it did not exist."""
    cursor = conn.execute("DELETE FROM candidates WHERE id = ?", (candidate_id,))
    conn.commit()
    return cursor.rowcount > 0


def _touch_job(conn: sqlite3.Connection, job_id: str) -> None:
    conn.execute(
        "UPDATE jobs SET updated_at = ? WHERE id = ?",
        (datetime.now().isoformat(), job_id),
    )


def _row_to_candidate(row: sqlite3.Row, scores: list[RequirementScore]) -> Candidate:
    return Candidate(
        id=row["id"],
        job_id=row["job_id"],
        name=row["name"],
        email=row["email"],
        resume_text=row["resume_text"],
        scores=scores,
        strengths=json.loads(row["strengths"]),
        weaknesses=json.loads(row["weaknesses"]),
        is_starred=bool(row["is_starred"]),
        overall_score=row["overall_score"],
        status=row["status"],
        processed_at=(
            datetime.fromisoformat(row["processed_at"]) if row["processed_at"] else None
        ),
    )
