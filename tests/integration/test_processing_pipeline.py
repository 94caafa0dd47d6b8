"""End-to-end: SQLite roster + LLM scorer (mocked provider) + processing engine."""

import json
import sqlite3
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from src.core.config import BatchConfig, JobSpec, RequirementSpec, ScoringConfig
from src.core.db import init_db, insert_candidate, insert_job, load_job
from src.core.roster import SqliteRosterSource
from src.core.schemas import BatchRun, FilterCriteria, Job
from src.pipeline.engine import ProcessingEngine
from src.pipeline.notifications import CollectingNotifier
from src.scoring.llm_scorer import LLMCandidateScorer

# Scores per candidate name for requirements 1 (weight 8) and 2 (weight 2).
RESPONSES = {
    "Ana": (9, 4),
    "Carla": (5, 10),
}


def _complete(prompt: str, model: str | None = None, **kwargs: object) -> str:
    for name, (first, second) in RESPONSES.items():
        if f"CANDIDATE: {name}" in prompt:
            return json.dumps({
                "scores": [
                    {"requirement": 1, "score": first, "comment": "ok"},
                    {"requirement": 2, "score": second},
                ],
                "strengths": [f"{name} strength"],
                "weaknesses": [],
            })
    msg = "upstream timeout"
    raise RuntimeError(msg)


@pytest.fixture()
def db(tmp_path: Path) -> sqlite3.Connection:
    return init_db(tmp_path / "pipeline.db")


@pytest.fixture()
def seeded(db: sqlite3.Connection) -> tuple[str, dict[str, str]]:
    job_id = insert_job(db, JobSpec(
        title="Customer Success Manager",
        requirements=[
            RequirementSpec(description="SaaS onboarding", weight=8, is_required=True),
            RequirementSpec(description="Portuguese", weight=2),
        ],
    ))
    ids = {
        name: insert_candidate(db, job_id, name, f"{name} resume")
        for name in ("Ana", "Bruno", "Carla")
    }
    return job_id, ids


def _engine(
    db: sqlite3.Connection,
    notifier: CollectingNotifier,
    max_concurrency: int = 1,
) -> tuple[ProcessingEngine, MagicMock]:
    provider = MagicMock()
    provider.provider_id = "fake"
    provider.complete.side_effect = _complete
    scorer = LLMCandidateScorer(db, provider, ScoringConfig())
    engine = ProcessingEngine(
        SqliteRosterSource(db),
        scorer,
        notifier,
        batch_config=BatchConfig(max_concurrency=max_concurrency),
    )
    return engine, provider


class TestProcessingPipeline:
    async def test_batch_with_one_failure(
        self, db: sqlite3.Connection, seeded: tuple[str, dict[str, str]],
    ) -> None:
        job_id, ids = seeded
        notifier = CollectingNotifier()
        engine, provider = _engine(db, notifier)
        progress: list[int] = []
        engine.add_progress_listener(lambda run: progress.append(run.progress_percent))

        run = await engine.process_all(job_id)

        assert isinstance(run, BatchRun)
        assert (run.total, run.completed, run.failed) == (3, 3, 1)
        assert progress == [33, 67, 100]
        assert provider.complete.call_count == 3

        job = load_job(db, job_id)
        assert job is not None
        ana = job.get_candidate(ids["Ana"])
        bruno = job.get_candidate(ids["Bruno"])
        assert ana is not None and bruno is not None
        assert ana.overall_score == 8.0
        assert ana.strengths == ["Ana strength"]
        assert not bruno.is_processed

        # Mixed roster after the batch: Bruno still needs scoring.
        assert engine.show_completion_cta
        assert len(notifier.by_level("error")) == 1
        assert notifier.by_level("info")[-1].message == "Processed 2 candidates with 1 errors"

    async def test_retry_failed_candidate_individually(
        self,
        db: sqlite3.Connection,
        seeded: tuple[str, dict[str, str]],
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        job_id, ids = seeded
        notifier = CollectingNotifier()
        engine, _ = _engine(db, notifier)
        await engine.process_all(job_id)

        monkeypatch.setitem(RESPONSES, "Bruno", (7, 7))
        assert await engine.process_one(job_id, ids["Bruno"]) is True

        assert not engine.show_completion_cta
        assert notifier.by_level("success")[-1].message == "Candidate processed successfully"

    async def test_second_batch_only_touches_unprocessed(
        self, db: sqlite3.Connection, seeded: tuple[str, dict[str, str]],
    ) -> None:
        job_id, _ = seeded
        engine, provider = _engine(db, CollectingNotifier())
        await engine.process_all(job_id)
        provider.complete.reset_mock()

        run = await engine.process_all(job_id)

        assert run is not None
        assert run.total == 1
        assert provider.complete.call_count == 1
        assert "CANDIDATE: Bruno" in provider.complete.call_args.args[0]

    async def test_pooled_batch(
        self, db: sqlite3.Connection, seeded: tuple[str, dict[str, str]],
    ) -> None:
        job_id, _ = seeded
        engine, _ = _engine(db, CollectingNotifier(), max_concurrency=2)
        progress: list[int] = []
        engine.add_progress_listener(lambda run: progress.append(run.completed))

        run = await engine.process_all(job_id)

        assert run is not None
        assert run.completed == 3
        assert progress == sorted(progress)

    async def test_ranked_listing_after_batch(
        self, db: sqlite3.Connection, seeded: tuple[str, dict[str, str]],
    ) -> None:
        job_id, _ = seeded
        engine, _ = _engine(db, CollectingNotifier())
        seen: list[Job] = []
        engine.subscribe(seen.append)
        await engine.process_all(job_id)

        ranked = engine.filtered(job_id, FilterCriteria(category="processed"))
        assert [c.name for c in ranked] == ["Ana", "Carla"]
        assert [c.overall_score for c in ranked] == [8.0, 6.0]
        assert seen[-1].id == job_id

        found = engine.filtered(job_id, FilterCriteria(search_query="carla strength"))
        assert [c.name for c in found] == ["Carla"]
