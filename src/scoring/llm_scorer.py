"""LLM-backed scoring of candidates against weighted job requirements."""

import asyncio
import json
import logging
import re
import sqlite3
from datetime import datetime

from pydantic import BaseModel, Field

from src.core.config import ScoringConfig
from src.core.db import load_job, save_candidate_analysis
from src.core.errors import CandidateNotFoundError, JobNotFoundError, ScoringError
from src.core.schemas import Candidate, Job, JobRequirement, RequirementScore
from src.scoring.base import CandidateScorer
from src.scoring.llm.base import SYSTEM_PROMPT, LLMProvider

logger = logging.getLogger(__name__)

_MAX_RESUME_CHARS = 20_000


class CandidateAnalysis(BaseModel):
    """Parsed LLM verdict for one candidate."""

    scores: list[RequirementScore]
    strengths: list[str] = Field(default_factory=list)
    weaknesses: list[str] = Field(default_factory=list)


def build_prompt(job: Job, candidate: Candidate) -> str:
    """Assemble the user prompt: job summary, numbered requirements, resume."""
    lines = [
        "JOB POSTING",
        f"Title: {job.title}",
        f"Company: {job.company or 'not provided'}",
        f"Location: {job.location or 'not provided'}",
    ]
    if job.description:
        lines.append(f"Description:\n{job.description}")

    lines.append("\nREQUIREMENTS")
    for number, req in enumerate(job.requirements, start=1):
        flag = "required" if req.is_required else "optional"
        lines.append(f"{number}. {req.description} (weight {req.weight}/10, {flag})")

    resume = candidate.resume_text.strip() or "(no resume text available)"
    if len(resume) > _MAX_RESUME_CHARS:
        resume = resume[:_MAX_RESUME_CHARS]
    lines.append(f"\nCANDIDATE: {candidate.name}\nRESUME\n{resume}")

    return "\n".join(lines)


def parse_analysis(raw_text: str, requirements: list[JobRequirement]) -> CandidateAnalysis:
    """Parse an LLM JSON response into per-requirement scores.

    Handles markdown-wrapped JSON. Requirements may be referenced by their
    1-based number or by id; unknown references are dropped. Scores are
    clamped to 0-10. Raises ScoringError on a malformed or empty response.
    """
    cleaned = re.sub(r"^```(?:json)?\s*\n?", "", raw_text.strip())
    cleaned = re.sub(r"\n?```\s*$", "", cleaned)

    try:
        data = json.loads(cleaned)
    except json.JSONDecodeError as e:
        msg = f"Failed to parse LLM response as JSON: {e}"
        raise ScoringError(msg) from e

    if not isinstance(data, dict) or not isinstance(data.get("scores"), list):
        msg = "LLM response missing 'scores' list"
        raise ScoringError(msg)

    by_id = {r.id: r for r in requirements}
    scores: dict[str, RequirementScore] = {}
    for entry in data["scores"]:
        if not isinstance(entry, dict):
            continue
        req = _resolve_requirement(entry, requirements, by_id)
        if req is None or req.id in scores:
            continue
        try:
            value = float(entry.get("score", 0))
        except (TypeError, ValueError):
            continue
        scores[req.id] = RequirementScore(
            requirement_id=req.id,
            score=max(0.0, min(10.0, value)),
            comment=str(entry.get("comment", "")),
        )

    if not scores:
        msg = "LLM response did not score any known requirement"
        raise ScoringError(msg)

    return CandidateAnalysis(
        scores=[scores[r.id] for r in requirements if r.id in scores],
        strengths=[str(s) for s in data.get("strengths") or []],
        weaknesses=[str(w) for w in data.get("weaknesses") or []],
    )


def _resolve_requirement(
    entry: dict,
    requirements: list[JobRequirement],
    by_id: dict[str, JobRequirement],
) -> JobRequirement | None:
    ref = entry.get("requirement_id")
    if isinstance(ref, str) and ref in by_id:
        return by_id[ref]
    ref = entry.get("requirement")
    try:
        number = int(ref)
    except (TypeError, ValueError):
        return None
    if 1 <= number <= len(requirements):
        return requirements[number - 1]
    return None


def weighted_overall_score(
    scores: list[RequirementScore],
    requirements: list[JobRequirement],
) -> float:
    """Weighted mean of requirement scores, one decimal.

    Requirements left unscored count as zero against their weight.
    """
    total_weight = sum(r.weight for r in requirements)
    if total_weight == 0:
        return 0.0
    weights = {r.id: r.weight for r in requirements}
    total = sum(s.score * weights.get(s.requirement_id, 0) for s in scores)
    return round(total / total_weight, 1)


class LLMCandidateScorer(CandidateScorer):
    """Scores candidates with an LLM provider and writes results to the roster store."""

    def __init__(
        self,
        conn: sqlite3.Connection,
        provider: LLMProvider,
        config: ScoringConfig,
    ) -> None:
        self._conn = conn
        self._provider = provider
        self._config = config

    async def score(self, job_id: str, candidate_id: str) -> Candidate:
        job = load_job(self._conn, job_id)
        if job is None:
            raise JobNotFoundError(job_id)
        candidate = job.get_candidate(candidate_id)
        if candidate is None:
            raise CandidateNotFoundError(candidate_id)
        if not job.requirements:
            msg = f"Job '{job.title}' has no requirements to score against"
            raise ScoringError(msg)

        prompt = build_prompt(job, candidate)
        logger.info("Scoring '%s' against %d requirements", candidate.name, len(job.requirements))
        try:
            # SDK clients are blocking; keep the event loop free while we wait.
            raw = await asyncio.to_thread(
                self._provider.complete,
                prompt,
                self._config.model,
                system=SYSTEM_PROMPT,
                max_tokens=self._config.max_tokens,
            )
        except (ImportError, ValueError) as e:
            raise ScoringError(str(e)) from e
        except Exception as e:
            msg = f"{self._provider.provider_id} request failed: {e}"
            raise ScoringError(msg) from e

        analysis = parse_analysis(raw, job.requirements)
        overall = weighted_overall_score(analysis.scores, job.requirements)
        save_candidate_analysis(
            self._conn,
            candidate_id,
            analysis.scores,
            overall,
            analysis.strengths,
            analysis.weaknesses,
        )
        logger.info("Scored '%s': %.1f/10", candidate.name, overall)

        return candidate.model_copy(
            update={
                "scores": analysis.scores,
                "strengths": analysis.strengths,
                "weaknesses": analysis.weaknesses,
                "overall_score": overall,
                "status": "processed",
                "processed_at": datetime.now(),
            }
        )
