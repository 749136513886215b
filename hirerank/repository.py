"""
Application store.

Responsibilities:
- Lookups by id for jobs, candidates and applications.
- Per-job application queries (all, unscored, above a score).
- Transaction-safe writes of a single application.

Non-Responsibilities:
- No scoring.
- No ranking decisions beyond the ordering a query promises.

Invariant:
The store never writes jobs or candidates on behalf of the engine.
"""

from decimal import Decimal
from typing import List, Optional

from .database import Application, Candidate, Job
from .errors import ResourceNotFoundError


class ApplicationStore:
    """Data access for the ranking engine over one SQLAlchemy session."""

    def __init__(self, session):
        self.session = session

    def get_job(self, job_id: int) -> Optional[Job]:
        return self.session.get(Job, job_id)

    def get_candidate(self, candidate_id: int) -> Optional[Candidate]:
        return self.session.get(Candidate, candidate_id)

    def get_application(self, application_id: int) -> Optional[Application]:
        return self.session.get(Application, application_id)

    def require_job(self, job_id: int) -> Job:
        job = self.get_job(job_id)
        if job is None:
            raise ResourceNotFoundError("Job", "id", job_id)
        return job

    def require_candidate(self, candidate_id: int) -> Candidate:
        candidate = self.get_candidate(candidate_id)
        if candidate is None:
            raise ResourceNotFoundError("Candidate", "id", candidate_id)
        return candidate

    def require_application(self, application_id: int) -> Application:
        application = self.get_application(application_id)
        if application is None:
            raise ResourceNotFoundError("Application", "id", application_id)
        return application

    def applications_for_job(self, job_id: int) -> List[Application]:
        return (
            self.session.query(Application)
            .filter(Application.job_id == job_id)
            .order_by(Application.id)
            .all()
        )

    def unscored_applications_for_job(self, job_id: int) -> List[Application]:
        return (
            self.session.query(Application)
            .filter(Application.job_id == job_id, Application.ai_score.is_(None))
            .order_by(Application.id)
            .all()
        )

    def applications_above_score(self, job_id: int, min_score) -> List[Application]:
        """Scored applications with ai_score >= min_score, highest first."""
        return (
            self.session.query(Application)
            .filter(
                Application.job_id == job_id,
                Application.ai_score.isnot(None),
                Application.ai_score >= Decimal(str(min_score)),
            )
            .order_by(Application.ai_score.desc(), Application.id)
            .all()
        )

    def find_application(self, job_id: int, candidate_id: int) -> Optional[Application]:
        return (
            self.session.query(Application)
            .filter_by(job_id=job_id, candidate_id=candidate_id)
            .first()
        )

    def add(self, entity):
        """Persist a new entity and return it with its id assigned."""
        self.session.add(entity)
        self.session.commit()
        return entity

    def save_application(self, application: Application) -> Application:
        self.session.add(application)
        self.session.commit()
        return application
