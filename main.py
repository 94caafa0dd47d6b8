"""CLI entry point for the candidate screening engine."""

import argparse
import asyncio
import logging
import sqlite3
import sys
from pathlib import Path

from src.core.config import JobSpec, Settings
from src.core.db import (
    delete_candidate,
    init_db,
    insert_candidate,
    insert_job,
    load_job,
    set_candidate_starred,
)
from src.core.errors import CandidateNotFoundError, ScreeningError
from src.core.roster import SqliteRosterSource
from src.core.schemas import BatchRun, FilterCriteria, Notification
from src.core.secrets import EnvSecretStore, SecretStore
from src.pipeline.engine import ProcessingEngine
from src.pipeline.filtering import category_counts, filter_candidates
from src.pipeline.notifications import NotificationSink
from src.scoring.llm import get_provider, resolve_api_key
from src.scoring.llm_scorer import LLMCandidateScorer

DEFAULT_CONFIG = "config/settings.yaml"

_LEVEL_TAGS = {"success": "OK", "error": "FAIL", "warning": "WARN", "info": "INFO"}


class ConsoleNotifier(NotificationSink):
    """Prints notifications to stdout (errors to stderr)."""

    def notify(self, notification: Notification) -> None:
        stream = sys.stderr if notification.level == "error" else sys.stdout
        suffix = f" [{notification.candidate_id}]" if notification.candidate_id else ""
        print(f"[{_LEVEL_TAGS[notification.level]}] {notification.message}{suffix}", file=stream)


def _add_common(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--config",
        default=DEFAULT_CONFIG,
        help=f"Path to settings YAML file (default: {DEFAULT_CONFIG})",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose (DEBUG) logging",
    )


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Candidate screening - score resumes against weighted job requirements",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    # --- add-job ---
    job_parser = subparsers.add_parser("add-job", help="Create a job from a YAML definition")
    job_parser.add_argument("--file", required=True, help="Path to job YAML file")
    _add_common(job_parser)

    # --- add-candidate ---
    cand_parser = subparsers.add_parser("add-candidate", help="Upload a resume to a job")
    cand_parser.add_argument("--job", required=True, help="Job ID")
    cand_parser.add_argument("--resume", required=True, help="Path to resume (.pdf, .txt, .md)")
    cand_parser.add_argument("--name", help="Candidate name (default: derived from filename)")
    cand_parser.add_argument("--email", default="", help="Candidate email")
    _add_common(cand_parser)

    # --- process ---
    process_parser = subparsers.add_parser(
        "process",
        help="Score all unprocessed candidates of a job (or a single one)",
    )
    process_parser.add_argument("--job", required=True, help="Job ID")
    process_parser.add_argument("--candidate", help="Process only this candidate ID")
    _add_common(process_parser)

    # --- list ---
    list_parser = subparsers.add_parser("list", help="List a job's candidates")
    list_parser.add_argument("--job", required=True, help="Job ID")
    list_parser.add_argument("--search", default="", help="Search name, strengths, weaknesses")
    list_parser.add_argument(
        "--category",
        default="all",
        choices=["all", "starred", "processed", "unprocessed"],
        help="Category filter (default: all)",
    )
    list_parser.add_argument("--candidate", help="Show only this candidate ID")
    _add_common(list_parser)

    # --- star ---
    star_parser = subparsers.add_parser("star", help="Star or unstar a candidate")
    star_parser.add_argument("--job", required=True, help="Job ID")
    star_parser.add_argument("--candidate", required=True, help="Candidate ID")
    star_parser.add_argument("--off", action="store_true", help="Remove the star instead")
    _add_common(star_parser)

    # --- delete ---
    delete_parser = subparsers.add_parser("delete", help="Remove a candidate and its scores")
    delete_parser.add_argument("--job", required=True, help="Job ID")
    delete_parser.add_argument("--candidate", required=True, help="Candidate ID")
    _add_common(delete_parser)

    return parser.parse_args(argv)


def setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


def load_settings(path: str) -> Settings:
    """Load settings; the default path may be absent, in which case defaults apply."""
    if path == DEFAULT_CONFIG and not Path(path).exists():
        return Settings()
    return Settings.from_yaml(path)


def build_engine(
    settings: Settings,
    conn: sqlite3.Connection,
    notifier: NotificationSink,
    secrets: SecretStore | None = None,
) -> ProcessingEngine:
    """Wire the LLM scorer and SQLite roster into a ProcessingEngine."""
    scoring = settings.scoring
    api_key = resolve_api_key(scoring.provider, secrets or EnvSecretStore(), scoring.api_key_env)
    provider = get_provider(scoring.provider, api_key=api_key)
    scorer = LLMCandidateScorer(conn, provider, scoring)
    return ProcessingEngine(
        SqliteRosterSource(conn),
        scorer,
        notifier,
        batch_config=settings.batch,
    )


def cmd_add_job(args: argparse.Namespace, settings: Settings) -> None:
    """Handle add-job subcommand."""
    spec = JobSpec.from_yaml(args.file)
    conn = init_db(settings.database.path)
    job_id = insert_job(conn, spec)
    conn.close()
    print(f"Created job '{spec.title}' with {len(spec.requirements)} requirements")
    print(f"  Job ID: {job_id}")


def cmd_add_candidate(args: argparse.Namespace, settings: Settings) -> None:
    """Handle add-candidate subcommand."""
    from src.core.extractor import candidate_name_from_filename, extract_resume_text

    text = extract_resume_text(args.resume)
    name = args.name or candidate_name_from_filename(Path(args.resume).name)
    conn = init_db(settings.database.path)
    try:
        candidate_id = insert_candidate(conn, args.job, name, text, args.email)
    finally:
        conn.close()
    print(f"Added candidate '{name}' ({len(text)} characters of resume text)")
    print(f"  Candidate ID: {candidate_id}")


def _print_progress(run: BatchRun) -> None:
    print(
        f"  [{run.progress_percent:3d}%] {run.completed}/{run.total} "
        f"(failed: {run.failed}) last: {run.currently_processing}"
    )


async def cmd_process(args: argparse.Namespace, settings: Settings) -> None:
    """Handle process subcommand."""
    conn = init_db(settings.database.path)
    try:
        async with build_engine(settings, conn, ConsoleNotifier()) as engine:
            if args.candidate:
                await engine.process_one(args.job, args.candidate)
            else:
                engine.add_progress_listener(_print_progress)
                run = await engine.process_all(args.job)
                if run is not None:
                    print(
                        f"\nBatch complete: {run.completed}/{run.total} attempted, "
                        f"{run.succeeded} scored, {run.failed} failed, {run.skipped} skipped"
                    )

            job = engine.refresh(args.job)
            if job is None:
                print(f"Error: job not found: {args.job}", file=sys.stderr)
                sys.exit(1)
            if engine.show_completion_cta:
                remaining = len(job.unprocessed_ids())
                print(
                    f"Scored candidates are ready for review; {remaining} still unprocessed. "
                    "Run 'process' again to finish the roster."
                )
    finally:
        conn.close()


def cmd_list(args: argparse.Namespace, settings: Settings) -> None:
    """Handle list subcommand."""
    conn = init_db(settings.database.path)
    job = load_job(conn, args.job)
    conn.close()
    if job is None:
        raise ScreeningError(f"Job not found: {args.job}")

    counts = category_counts(job.candidates)
    print(f"{job.title} ({job.company or 'no company'})")
    print("  " + "  ".join(f"{name}: {count}" for name, count in counts.items()))

    criteria = FilterCriteria(search_query=args.search, category=args.category)
    for c in filter_candidates(job.candidates, criteria, args.candidate):
        star = "*" if c.is_starred else " "
        score = f"{c.overall_score:4.1f}" if c.is_processed else "  - "
        print(f"{star} {score}  {c.status:<9}  {c.name}  [{c.id}]")


def cmd_star(args: argparse.Namespace, settings: Settings) -> None:
    """Handle star subcommand."""
    conn = init_db(settings.database.path)
    try:
        job = load_job(conn, args.job)
        if job is None or job.get_candidate(args.candidate) is None:
            raise CandidateNotFoundError(args.candidate)
        set_candidate_starred(conn, args.candidate, not args.off)
    finally:
        conn.close()
    print(f"{'Unstarred' if args.off else 'Starred'} candidate {args.candidate}")


def cmd_delete(args: argparse.Namespace, settings: Settings) -> None:
    """Handle delete subcommand."""
    conn = init_db(settings.database.path)
    try:
        job = load_job(conn, args.job)
        if job is None or job.get_candidate(args.candidate) is None:
            raise CandidateNotFoundError(args.candidate)
        delete_candidate(conn, args.candidate)
    finally:
        conn.close()
    print(f"Deleted candidate {args.candidate}")


def main(argv: list[str] | None = None) -> None:
    args = parse_args(argv)
    setup_logging(args.verbose)

    try:
        settings = load_settings(args.config)
    except (FileNotFoundError, ValueError) as e:
        print(f"Error loading config: {e}", file=sys.stderr)
        sys.exit(1)

    try:
        if args.command == "add-job":
            cmd_add_job(args, settings)
        elif args.command == "add-candidate":
            cmd_add_candidate(args, settings)
        elif args.command == "process":
            asyncio.run(cmd_process(args, settings))
        elif args.command == "list":
            cmd_list(args, settings)
        elif args.command == "star":
            cmd_star(args, settings)
        elif args.command == "delete":
            cmd_delete(args, settings)
    except (FileNotFoundError, ImportError, ValueError, ScreeningError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
