"""
Ranking engine.

Responsibilities:
- Combine the five factor scores into one 0-100 application score.
- Persist score and feedback onto the application.
- Bulk scoring, top-N, threshold and statistics queries per job.

Non-Responsibilities:
- No skill matching logic (see skills.py).
- No storage mechanics (see repository.py).

Invariant:
Given identical job, candidate, resume and application date, this module
must always produce the same score and feedback.
"""

from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Callable, Dict, List, Optional, Tuple

from .config import WEIGHTS, SCORE_BUCKETS, DEFAULT_TOP_LIMIT, DEFAULT_QUALIFY_THRESHOLD
from .database import Application
from .errors import ResourceNotFoundError
from .explain import explain_application
from .logger import StructuredLogger, get_logger
from .repository import ApplicationStore
from .scoring import (
    skill_score, experience_score, education_score, resume_quality_score,
    recency_score, resolve_resume,
)
from .skills import SkillMatcher

TWO_PLACES = Decimal("0.01")


def _round_score(value) -> Decimal:
    return Decimal(str(value)).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


def _sort_key(application: Application) -> Decimal:
    # Unscored applications sort as 0 without being written as 0
    return application.ai_score if application.ai_score is not None else Decimal("0")


class RankingEngine:
    """Scores applications and answers ranking queries for a job."""

    def __init__(
        self,
        store: ApplicationStore,
        matcher: Optional[SkillMatcher] = None,
        clock: Callable[[], datetime] = datetime.now,
        logger: Optional[StructuredLogger] = None,
    ):
        self.store = store
        self.matcher = matcher or SkillMatcher()
        self.clock = clock
        self.logger = logger or get_logger()

    # Scoring

    def evaluate(self, application: Application) -> Tuple[Dict[str, float], str]:
        """
        Compute factor scores and feedback without persisting anything.

        Raises:
            ResourceNotFoundError: If the application's job or candidate is gone
        """
        job = application.job
        candidate = application.candidate
        if job is None:
            raise ResourceNotFoundError("Job", "id", application.job_id)
        if candidate is None:
            raise ResourceNotFoundError("Candidate", "id", application.candidate_id)

        resume = resolve_resume(application)
        today = self.clock().date()

        results = [
            ("skills", skill_score(job, candidate, resume, self.matcher)),
            ("experience", experience_score(job, candidate)),
            ("education", education_score(candidate, resume)),
            ("resume_quality", resume_quality_score(resume)),
            ("recency", recency_score(application, today)),
        ]

        breakdown = {name: score for name, (score, _) in results}
        feedback = "".join(fragment for _, (_, fragment) in results).strip()
        return breakdown, feedback

    def calculate_score(self, application: Application) -> Decimal:
        """Score an already-loaded application and persist the result."""
        breakdown, feedback = self.evaluate(application)

        total = sum(breakdown[name] * weight for name, weight in WEIGHTS.items())
        score = _round_score(total * 100)

        application.ai_score = score
        application.ai_feedback = feedback
        application.updated_at = self.clock()
        self.store.save_application(application)

        self.logger.debug("Factor scores", application_id=application.id, **breakdown)
        self.logger.info(f"AI score calculated for application {application.id}: {score}")
        self.logger.record_score(application.job_id, score)
        return score

    def score_application(self, application_id: int) -> Decimal:
        application = self._require_application(application_id)
        return self.calculate_score(application)

    def score_all_for_job(self, job_id: int) -> List[Application]:
        """
        Score every unscored application for the job.

        Already-scored applications are left alone. Returns all of the job's
        applications, highest score first.
        """
        self._require_job(job_id)
        applications = self.store.applications_for_job(job_id)
        self.logger.info(f"Scoring {len(applications)} applications for job: {job_id}")

        for application in applications:
            if application.ai_score is None:
                self.calculate_score(application)

        return sorted(applications, key=_sort_key, reverse=True)

    def rescore_pending(self, job_id: int) -> int:
        """Score the job's applications that have no score yet; returns how many."""
        self._require_job(job_id)
        pending = self.store.unscored_applications_for_job(job_id)

        for application in pending:
            self.calculate_score(application)

        self.logger.info(f"Re-scored {len(pending)} applications for job {job_id}")
        return len(pending)

    # Queries

    def top_candidates(self, job_id: int, limit: int = DEFAULT_TOP_LIMIT) -> List[Application]:
        if limit < 0:
            raise ValueError(f"limit must be non-negative, got {limit}")
        self._require_job(job_id)
        scored = [a for a in self.store.applications_for_job(job_id) if a.ai_score is not None]
        return sorted(scored, key=_sort_key, reverse=True)[:limit]

    def candidates_above_threshold(
        self, job_id: int, threshold: float = DEFAULT_QUALIFY_THRESHOLD
    ) -> List[Application]:
        self._require_job(job_id)
        return self.store.applications_above_score(job_id, threshold)

    def score_statistics(self, job_id: int) -> Dict[str, Any]:
        """
        Aggregate scores over the job's scored applications.

        Returns:
            {
                "total_applications": int,
                "scored_applications": int,
                "average_score": Decimal,
                "highest_score": Decimal,
                "lowest_score": Decimal,
                "excellent": int,  # >= 80
                "good": int,       # [60, 80)
                "average": int,    # [40, 60)
                "poor": int        # < 40
            }
            Numeric fields are 0 when nothing has been scored.
        """
        self._require_job(job_id)
        applications = self.store.applications_for_job(job_id)
        scores = [a.ai_score for a in applications if a.ai_score is not None]

        stats: Dict[str, Any] = {
            "total_applications": len(applications),
            "scored_applications": len(scores),
            "average_score": Decimal("0"),
            "highest_score": Decimal("0"),
            "lowest_score": Decimal("0"),
        }
        stats.update({name: 0 for name, _ in SCORE_BUCKETS})

        if not scores:
            return stats

        stats["average_score"] = _round_score(sum(scores) / len(scores))
        stats["highest_score"] = _round_score(max(scores))
        stats["lowest_score"] = _round_score(min(scores))

        for score in scores:
            for name, lower in SCORE_BUCKETS:
                if lower is None or score >= lower:
                    stats[name] += 1
                    break

        return stats

    def explain_match(self, application_id: int) -> Dict[str, Any]:
        application = self._require_application(application_id)
        return explain_application(application, self.matcher)

    # Lookups

    def _require_job(self, job_id: int):
        try:
            return self.store.require_job(job_id)
        except ResourceNotFoundError as e:
            self.logger.warning(str(e), job_id=job_id)
            raise

    def _require_application(self, application_id: int) -> Application:
        try:
            return self.store.require_application(application_id)
        except ResourceNotFoundError as e:
            self.logger.warning(str(e), application_id=application_id)
            raise
