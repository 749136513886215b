import argparse
import json
from datetime import datetime
from pathlib import Path
from typing import Dict, Optional

from . import __version__
from .config import DEFAULT_QUALIFY_THRESHOLD, DEFAULT_TOP_LIMIT, build_synonym_table, load_synonyms
from .database import Application, Candidate, Job, Resume, init_database, get_session
from .env import load_env, load_settings
from .errors import ResourceNotFoundError
from .logger import get_logger
from .ranking import RankingEngine
from .repository import ApplicationStore
from .schema import validate_dataset
from .skills import SkillMatcher


def submit_application(
    store: ApplicationStore,
    engine: RankingEngine,
    job_id: int,
    candidate_id: int,
    resume_id: Optional[int] = None,
    applied_at: Optional[datetime] = None,
) -> Application:
    """
    Create an application and score it straight away.

    The application is kept even if scoring fails; the failure is logged and
    the application stays unscored until the next rescore.

    Raises:
        ResourceNotFoundError: If the job, candidate or resume doesn't exist
        ValueError: If the candidate already applied, or the resume isn't theirs
    """
    store.require_job(job_id)
    store.require_candidate(candidate_id)

    if resume_id is not None:
        resume = store.session.get(Resume, resume_id)
        if resume is None:
            raise ResourceNotFoundError("Resume", "id", resume_id)
        if resume.candidate_id != candidate_id:
            raise ValueError(f"Resume {resume_id} does not belong to candidate {candidate_id}")

    if store.find_application(job_id, candidate_id) is not None:
        raise ValueError(f"Candidate {candidate_id} already applied to job {job_id}")

    application = store.add(Application(
        job_id=job_id,
        candidate_id=candidate_id,
        resume_id=resume_id,
        applied_at=applied_at or engine.clock(),
    ))

    try:
        engine.calculate_score(application)
    except Exception as e:
        # A failed commit leaves the session unusable until rolled back
        store.session.rollback()
        engine.logger.warning(
            f"Could not calculate AI score for application {application.id}: {e}",
            application_id=application.id,
        )
        engine.logger.record_failure(type(e).__name__)

    engine.logger.info(
        f"Application created: {application.id} for job: {job_id} by candidate: {candidate_id}"
    )
    return application


def load_dataset(data: dict, store: ApplicationStore, engine: RankingEngine) -> Dict[str, int]:
    """
    Insert jobs, candidates (with resumes) and applications from a validated dataset.
    Applications go through submit_application, so each is scored on arrival.
    """
    counts = {"jobs": 0, "candidates": 0, "resumes": 0, "applications": 0}

    for record in data.get("jobs", []):
        store.add(Job(
            id=record.get("id"),
            title=record["title"],
            required_skills=record.get("required_skills"),
            experience_min=record.get("experience_min"),
            experience_max=record.get("experience_max"),
        ))
        counts["jobs"] += 1

    for record in data.get("candidates", []):
        candidate = store.add(Candidate(
            id=record.get("id"),
            name=record["name"],
            skills=record.get("skills"),
            total_experience=record.get("total_experience"),
            education=record.get("education"),
        ))
        counts["candidates"] += 1
        for resume in record.get("resumes", []):
            store.add(Resume(
                candidate_id=candidate.id,
                file_name=resume.get("file_name"),
                parsed_text=resume.get("parsed_text"),
                extracted_skills=resume.get("extracted_skills"),
                extracted_education=resume.get("extracted_education"),
                is_primary=resume.get("is_primary", False),
            ))
            counts["resumes"] += 1

    for record in data.get("applications", []):
        applied_at = record.get("applied_at")
        submit_application(
            store,
            engine,
            record["job_id"],
            record["candidate_id"],
            resume_id=record.get("resume_id"),
            applied_at=datetime.fromisoformat(applied_at) if applied_at else None,
        )
        counts["applications"] += 1

    return counts


def build_engine(session, synonyms_path: Optional[Path] = None) -> RankingEngine:
    synonyms = build_synonym_table(load_synonyms(synonyms_path)) if synonyms_path else None
    return RankingEngine(ApplicationStore(session), matcher=SkillMatcher(synonyms))


def _print_applications(applications) -> None:
    if not applications:
        print("No applications.")
        return
    for rank, a in enumerate(applications, 1):
        score = a.ai_score if a.ai_score is not None else "unscored"
        print(f"{rank:>3}. application={a.id} candidate={a.candidate.name} score={score}")


def cmd_init(args: argparse.Namespace) -> None:
    init_database(Path(args.db))
    print(f"Initialized database at {args.db}")


def cmd_load(args: argparse.Namespace) -> None:
    input_path = Path(args.input)
    if not input_path.exists():
        raise SystemExit(f"Input file not found: {input_path}")
    with input_path.open("r", encoding="utf-8") as f:
        data = json.load(f)

    errors = validate_dataset(data)
    if errors:
        print("Invalid:")
        for e in errors:
            print(f" - {e}")
        raise SystemExit(2)

    counts = load_dataset(data, args.engine.store, args.engine)
    print(
        f"Done. jobs={counts['jobs']} candidates={counts['candidates']} "
        f"resumes={counts['resumes']} applications={counts['applications']}"
    )


def cmd_apply(args: argparse.Namespace) -> None:
    try:
        application = submit_application(
            args.engine.store, args.engine, args.job, args.candidate, resume_id=args.resume
        )
    except ValueError as e:
        raise SystemExit(str(e))
    print(f"Application: {application.id}")
    print(f"Score: {application.ai_score}")


def cmd_score(args: argparse.Namespace) -> None:
    score = args.engine.score_application(args.application)
    print(f"Application {args.application}: {score}")


def cmd_score_job(args: argparse.Namespace) -> None:
    _print_applications(args.engine.score_all_for_job(args.job))


def cmd_top(args: argparse.Namespace) -> None:
    try:
        applications = args.engine.top_candidates(args.job, args.limit)
    except ValueError as e:
        raise SystemExit(str(e))
    _print_applications(applications)


def cmd_qualified(args: argparse.Namespace) -> None:
    _print_applications(args.engine.candidates_above_threshold(args.job, args.threshold))


def cmd_stats(args: argparse.Namespace) -> None:
    stats = args.engine.score_statistics(args.job)
    for key, value in stats.items():
        print(f"{key}: {value}")


def cmd_explain(args: argparse.Namespace) -> None:
    explanation = args.engine.explain_match(args.application)
    print(json.dumps(explanation, indent=2, default=str))


def cmd_rescore(args: argparse.Namespace) -> None:
    count = args.engine.rescore_pending(args.job)
    print(f"Re-scored {count} applications for job {args.job}")


def main(argv=None):
    # Load .env if present (HIRERANK_DB, HIRERANK_LOG_LEVEL, etc.)
    load_env()
    settings = load_settings()

    parser = argparse.ArgumentParser(prog="hirerank", description="Candidate scoring and ranking")
    parser.add_argument("--version", action="store_true", help="Show version")
    parser.add_argument("--db", default=str(settings.db_path), help=f"SQLite database (default: {settings.db_path})")

    subparsers = parser.add_subparsers(dest="command")
    ini = subparsers.add_parser("init", help="Create the database tables")
    ini.set_defaults(func=cmd_init, needs_engine=False)

    lod = subparsers.add_parser("load", help="Load jobs, candidates and applications from JSON")
    lod.add_argument("--input", required=True, help="Path to dataset JSON")
    lod.set_defaults(func=cmd_load)

    app = subparsers.add_parser("apply", help="Submit an application and score it")
    app.add_argument("--job", type=int, required=True)
    app.add_argument("--candidate", type=int, required=True)
    app.add_argument("--resume", type=int, help="Resume id (default: candidate's primary resume)")
    app.set_defaults(func=cmd_apply)

    scr = subparsers.add_parser("score", help="Score one application")
    scr.add_argument("--application", type=int, required=True)
    scr.set_defaults(func=cmd_score)

    scj = subparsers.add_parser("score-job", help="Score unscored applications for a job and list them")
    scj.add_argument("--job", type=int, required=True)
    scj.set_defaults(func=cmd_score_job)

    top = subparsers.add_parser("top", help="List the highest-scored applications for a job")
    top.add_argument("--job", type=int, required=True)
    top.add_argument("--limit", type=int, default=DEFAULT_TOP_LIMIT, help=f"Default {DEFAULT_TOP_LIMIT}")
    top.set_defaults(func=cmd_top)

    qua = subparsers.add_parser("qualified", help="List applications at or above a score threshold")
    qua.add_argument("--job", type=int, required=True)
    qua.add_argument("--threshold", type=float, default=DEFAULT_QUALIFY_THRESHOLD,
                     help=f"Default {DEFAULT_QUALIFY_THRESHOLD}")
    qua.set_defaults(func=cmd_qualified)

    sts = subparsers.add_parser("stats", help="Score statistics for a job")
    sts.add_argument("--job", type=int, required=True)
    sts.set_defaults(func=cmd_stats)

    exp = subparsers.add_parser("explain", help="Explain an application's score")
    exp.add_argument("--application", type=int, required=True)
    exp.set_defaults(func=cmd_explain)

    res = subparsers.add_parser("rescore", help="Score every pending application for a job")
    res.add_argument("--job", type=int, required=True)
    res.set_defaults(func=cmd_rescore)

    args = parser.parse_args(argv)

    if args.version:
        print(__version__)
        return

    if not hasattr(args, "func"):
        parser.print_help()
        return

    if not getattr(args, "needs_engine", True):
        args.func(args)
        return

    logger = get_logger(level=settings.log_level, log_dir=settings.log_dir)
    db_path = Path(args.db)
    init_database(db_path)
    session = get_session(db_path)
    try:
        args.engine = build_engine(session, settings.synonyms_path)
        args.func(args)
    except ResourceNotFoundError as e:
        raise SystemExit(str(e))
    finally:
        session.close()
        logger.log_metrics_summary()


if __name__ == "__main__":
    main()
