"""Tests for the SQLite roster store."""

import sqlite3
from pathlib import Path

import pytest

from src.core.config import JobSpec, RequirementSpec
from src.core.db import (
    delete_candidate,
    init_db,
    insert_candidate,
    insert_job,
    load_job,
    save_candidate_analysis,
    set_candidate_starred,
)
from src.core.errors import CandidateNotFoundError, JobNotFoundError
from src.core.roster import SqliteRosterSource
from src.core.schemas import RequirementScore


@pytest.fixture()
def db(tmp_path: Path) -> sqlite3.Connection:
    return init_db(tmp_path / "test.db")


def _job(db: sqlite3.Connection) -> str:
    return insert_job(db, JobSpec(
        title="Support Lead",
        company="Acme",
        requirements=[
            RequirementSpec(description="Zendesk", weight=8, is_required=True),
            RequirementSpec(description="Coaching", weight=2),
        ],
    ))


class TestInitDb:
    def test_creates_tables(self, db: sqlite3.Connection) -> None:
        tables = {
            row[0]
            for row in db.execute("SELECT name FROM sqlite_master WHERE type='table'").fetchall()
        }
        assert {"jobs", "requirements", "candidates", "candidate_scores"} <= tables

    def test_idempotent(self, tmp_path: Path) -> None:
        p = tmp_path / "double.db"
        init_db(p).close()
        init_db(p).close()


class TestJobs:
    def test_round_trip(self, db: sqlite3.Connection) -> None:
        job_id = _job(db)
        job = load_job(db, job_id)
        assert job is not None
        assert job.title == "Support Lead"
        assert [r.description for r in job.requirements] == ["Zendesk", "Coaching"]
        assert job.requirements[0].is_required is True
        assert job.candidates == []

    def test_missing_job(self, db: sqlite3.Connection) -> None:
        assert load_job(db, "nope") is None


class TestCandidates:
    def test_roster_in_upload_order(self, db: sqlite3.Connection) -> None:
        job_id = _job(db)
        ids = [insert_candidate(db, job_id, name) for name in ("Zed", "Amy", "Bo")]
        job = load_job(db, job_id)
        assert job is not None
        assert [c.id for c in job.candidates] == ids
        assert all(not c.is_processed for c in job.candidates)
        assert all(c.status == "pending" for c in job.candidates)

    def test_unknown_job(self, db: sqlite3.Connection) -> None:
        with pytest.raises(JobNotFoundError):
            insert_candidate(db, "nope", "Amy")

    def test_save_analysis_marks_processed(self, db: sqlite3.Connection) -> None:
        job_id = _job(db)
        cid = insert_candidate(db, job_id, "Amy", "resume text")
        job = load_job(db, job_id)
        assert job is not None
        req_ids = [r.id for r in job.requirements]

        save_candidate_analysis(
            db,
            cid,
            [RequirementScore(requirement_id=req_ids[0], score=9, comment="Strong")],
            7.2,
            ["Calm under pressure"],
            ["No coaching"],
        )

        c = load_job(db, job_id).get_candidate(cid)  # type: ignore[union-attr]
        assert c is not None
        assert c.is_processed
        assert c.status == "processed"
        assert c.overall_score == 7.2
        assert c.strengths == ["Calm under pressure"]
        assert c.weaknesses == ["No coaching"]
        assert c.processed_at is not None
        assert c.scores[0].comment == "Strong"

    def test_save_analysis_replaces_scores(self, db: sqlite3.Connection) -> None:
        job_id = _job(db)
        cid = insert_candidate(db, job_id, "Amy")
        req_id = load_job(db, job_id).requirements[0].id  # type: ignore[union-attr]
        for score in (3, 8):
            save_candidate_analysis(
                db, cid, [RequirementScore(requirement_id=req_id, score=score)], score, [], [],
            )
        c = load_job(db, job_id).get_candidate(cid)  # type: ignore[union-attr]
        assert [s.score for s in c.scores] == [8]  # type: ignore[union-attr]

    def test_save_analysis_unknown_candidate(self, db: sqlite3.Connection) -> None:
        with pytest.raises(CandidateNotFoundError):
            save_candidate_analysis(db, "nope", [], 0.0, [], [])

    def test_star_toggle(self, db: sqlite3.Connection) -> None:
        job_id = _job(db)
        cid = insert_candidate(db, job_id, "Amy")
        set_candidate_starred(db, cid, True)
        assert load_job(db, job_id).get_candidate(cid).is_starred  # type: ignore[union-attr]
        set_candidate_starred(db, cid, False)
        assert not load_job(db, job_id).get_candidate(cid).is_starred  # type: ignore[union-attr]

    def test_star_unknown(self, db: sqlite3.Connection) -> None:
        with pytest.raises(CandidateNotFoundError):
            set_candidate_starred(db, "nope", True)

    def test_delete(self, db: sqlite3.Connection) -> None:
        job_id = _job(db)
        cid = insert_candidate(db, job_id, "Amy")
        assert delete_candidate(db, cid) is True
        assert delete_candidate(db, cid) is False
        assert load_job(db, job_id).candidates == []  # type: ignore[union-attr]


class TestSqliteRosterSource:
    def test_rereads_every_call(self, db: sqlite3.Connection) -> None:
        job_id = _job(db)
        source = SqliteRosterSource(db)
        assert source.load_job(job_id).candidates == []  # type: ignore[union-attr]
        insert_candidate(db, job_id, "Amy")
        assert len(source.load_job(job_id).candidates) == 1  # type: ignore[union-attr]
