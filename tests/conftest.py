"""
Pytest configuration and shared fixtures.
"""

import pytest
from datetime import datetime
from decimal import Decimal

from hirerank.database import Application, Candidate, Job, Resume, init_database, get_session
from hirerank.logger import get_logger, reset_logger
from hirerank.ranking import RankingEngine
from hirerank.repository import ApplicationStore

# Fixed "now" so recency scores don't drift with the calendar
NOW = datetime(2026, 10, 19, 12, 0, 0)

TWELVE_SKILLS = (
    "java, spring boot, mysql, git, docker, maven, junit, rest api, "
    "hibernate, jenkins, linux, sql"
)


@pytest.fixture(autouse=True)
def quiet_logger(tmp_path):
    """Route the global logger to a temp dir with no console output."""
    reset_logger()
    logger = get_logger(log_dir=tmp_path / "logs", enable_console=False)
    yield logger
    reset_logger()


@pytest.fixture
def db_path(tmp_path):
    path = tmp_path / "test.db"
    init_database(path)
    return path


@pytest.fixture
def db_session(db_path):
    """Create a temporary database and return a session."""
    session = get_session(db_path)
    yield session
    session.close()


@pytest.fixture
def store(db_session) -> ApplicationStore:
    return ApplicationStore(db_session)


@pytest.fixture
def engine(store, quiet_logger) -> RankingEngine:
    return RankingEngine(store, clock=lambda: NOW, logger=quiet_logger)


@pytest.fixture
def make_job(store):
    def _make(**fields):
        fields.setdefault("title", "backend engineer")
        return store.add(Job(**fields))
    return _make


@pytest.fixture
def make_candidate(store):
    def _make(**fields):
        fields.setdefault("name", "alex")
        return store.add(Candidate(**fields))
    return _make


@pytest.fixture
def make_resume(store):
    def _make(candidate, **fields):
        return store.add(Resume(candidate_id=candidate.id, **fields))
    return _make


@pytest.fixture
def make_application(store):
    def _make(job, candidate, resume=None, applied_at=NOW, ai_score=None):
        return store.add(Application(
            job_id=job.id,
            candidate_id=candidate.id,
            resume_id=resume.id if resume is not None else None,
            applied_at=applied_at,
            ai_score=Decimal(str(ai_score)) if ai_score is not None else None,
        ))
    return _make


@pytest.fixture
def perfect_match(make_job, make_candidate, make_resume, make_application):
    """Java/Spring candidate inside the experience range with a detailed resume."""
    job = make_job(required_skills="Java, Spring Boot", experience_min=2, experience_max=5)
    candidate = make_candidate(
        skills="Java, Spring Boot, MySQL",
        total_experience=Decimal("3.0"),
        education="B.Tech Computer Science",
    )
    resume = make_resume(candidate, parsed_text="x" * 2500, extracted_skills=TWELVE_SKILLS)
    return make_application(job, candidate, resume)


@pytest.fixture
def sample_dataset():
    """Valid load file with one job, two candidates and two applications."""
    return {
        "jobs": [
            {"id": 1, "title": "backend engineer", "required_skills": "Python, Django, PostgreSQL",
             "experience_min": 2, "experience_max": 6},
        ],
        "candidates": [
            {"id": 1, "name": "sam", "skills": "python, django, postgres", "total_experience": 4,
             "education": "M.Tech", "resumes": [
                 {"file_name": "sam.pdf", "parsed_text": "y" * 1200, "extracted_skills": "python, celery",
                  "is_primary": True},
             ]},
            {"id": 2, "name": "kim", "skills": "excel", "total_experience": 1},
        ],
        "applications": [
            {"job_id": 1, "candidate_id": 1, "applied_at": "2026-10-18T09:30:00"},
            {"job_id": 1, "candidate_id": 2},
        ],
    }


@pytest.fixture
def now() -> datetime:
    return NOW
