"""
Tests for the ranking engine.
"""

import pytest
from datetime import timedelta
from decimal import Decimal

from hirerank.config import WEIGHTS
from hirerank.errors import ResourceNotFoundError
from hirerank.ranking import RankingEngine


class TestScoreApplication:
    """Test scoring a single application."""

    def test_perfect_match_scenario(self, engine, perfect_match):
        """Skill 1.0, experience 1.0, education 0.8, resume 1.0, recency 1.0 -> 98.00."""
        score = engine.score_application(perfect_match.id)

        assert score == Decimal("98.00")
        assert perfect_match.ai_score == Decimal("98.00")
        assert perfect_match.ai_feedback == (
            "Skills: 2/2 matched (100%). "
            "Experience: 3.0 years (ideal range 2-5). "
            "Education: Bachelor's degree. "
            "Resume quality: 100%."
        )

    def test_breakdown(self, engine, perfect_match):
        """evaluate() exposes each factor score without persisting."""
        breakdown, _ = engine.evaluate(perfect_match)

        assert breakdown == {
            "skills": 1.0,
            "experience": 1.0,
            "education": 0.8,
            "resume_quality": 1.0,
            "recency": 1.0,
        }
        assert perfect_match.ai_score is None

    def test_two_decimal_places(self, engine, perfect_match):
        """Scores are stored with exactly two decimal places."""
        score = engine.score_application(perfect_match.id)
        assert score.as_tuple().exponent == -2

    def test_deterministic(self, engine, perfect_match):
        """Re-scoring unchanged inputs reproduces score and feedback."""
        first = engine.score_application(perfect_match.id)
        first_feedback = perfect_match.ai_feedback

        second = engine.score_application(perfect_match.id)

        assert first == second
        assert perfect_match.ai_feedback == first_feedback

    def test_no_resume(self, engine, make_job, make_candidate, make_application):
        """No resume at all: quality 0 and the feedback says so."""
        job = make_job(required_skills="python")
        candidate = make_candidate(skills="python")
        application = make_application(job, candidate)

        breakdown, feedback = engine.evaluate(application)

        assert breakdown["resume_quality"] == 0.0
        assert "Resume: Not uploaded." in feedback

    def test_primary_resume_used(self, engine, make_job, make_candidate, make_resume, make_application):
        """Applications without a resume fall back to the candidate's primary resume."""
        job = make_job(required_skills="python, docker")
        candidate = make_candidate(skills="python")
        make_resume(candidate, parsed_text="short", extracted_skills="excel")
        make_resume(candidate, parsed_text="x" * 1500, extracted_skills="docker", is_primary=True)
        application = make_application(job, candidate)

        breakdown, _ = engine.evaluate(application)

        assert breakdown["skills"] == 1.0
        assert breakdown["resume_quality"] == 0.8

    def test_sparse_candidate_degrades_gracefully(self, engine, make_job, make_candidate, make_application):
        """Missing optional fields give neutral scores, not errors."""
        job = make_job(required_skills="java", experience_min=3)
        candidate = make_candidate()
        application = make_application(job, candidate, applied_at=None)

        score = engine.score_application(application.id)

        # skills 0, experience 0.5, education 0.5, resume 0, recency 0.5
        assert score == Decimal("20.00")
        assert application.ai_feedback == (
            "Skills: 0/1 matched (0%). Missing: java. "
            "Experience: Not specified. "
            "Education: Not specified. "
            "Resume: Not uploaded."
        )

    def test_bounds(self, engine, now, make_job, make_candidate, make_resume, make_application):
        """Scores always land in [0, 100]."""
        job = make_job(required_skills="java, docker, aws", experience_min=4, experience_max=8)
        profiles = [
            {"skills": "", "total_experience": Decimal("0")},
            {"skills": "java, docker, aws", "total_experience": Decimal("6"), "education": "PhD"},
            {"skills": "excel", "total_experience": Decimal("30"), "education": "Diploma"},
        ]
        for i, profile in enumerate(profiles):
            candidate = make_candidate(name=f"c{i}", **profile)
            resume = make_resume(candidate, parsed_text="x" * (i * 1000)) if i else None
            application = make_application(job, candidate, resume, applied_at=now - timedelta(days=i * 20))

            score = engine.score_application(application.id)
            assert Decimal("0.00") <= score <= Decimal("100.00")

    def test_unknown_application(self, engine):
        """An unknown id raises a not-found error."""
        with pytest.raises(ResourceNotFoundError) as exc:
            engine.score_application(999)

        assert exc.value.resource == "Application"
        assert str(exc.value) == "Application not found with id : '999'"

    def test_missing_job_raises_before_writing(self, engine, make_candidate, make_application, make_job):
        """An application whose job is gone fails without being scored."""
        job = make_job()
        candidate = make_candidate()
        application = make_application(job, candidate)
        application.job_id = 4242
        engine.store.session.commit()
        engine.store.session.expire_all()

        with pytest.raises(ResourceNotFoundError):
            engine.score_application(application.id)
        assert engine.store.get_application(application.id).ai_score is None

    def test_metrics_recorded(self, engine, perfect_match):
        """Each persisted score is counted on the logger."""
        engine.score_application(perfect_match.id)

        metrics = engine.logger.get_metrics()
        assert metrics["applications_scored"] == 1
        assert metrics["jobs"][perfect_match.job_id]["scored"] == 1
        assert metrics["average_score"] == 98.0


class TestWeights:
    """Test the fixed factor weights."""

    def test_weights_sum_to_one(self):
        """The five weights add up to 1."""
        assert sum(WEIGHTS.values()) == pytest.approx(1.0)

    def test_weights_values(self):
        """Weights are fixed for score compatibility."""
        assert WEIGHTS == {
            "skills": 0.50,
            "experience": 0.25,
            "education": 0.10,
            "resume_quality": 0.10,
            "recency": 0.05,
        }

    def test_all_factors_perfect_never_exceeds_100(self, store, quiet_logger, now, make_job,
                                                   make_candidate, make_resume, make_application):
        """Every factor at 1.0 scores exactly 100.00."""
        job = make_job(required_skills="java", experience_min=1, experience_max=5)
        candidate = make_candidate(skills="java", total_experience=Decimal("2"), education="PhD")
        resume = make_resume(candidate, parsed_text="x" * 3000)
        application = make_application(job, candidate, resume)

        engine = RankingEngine(store, clock=lambda: now, logger=quiet_logger)
        assert engine.score_application(application.id) == Decimal("100.00")


@pytest.fixture
def job_pool(make_job, make_candidate, make_resume, make_application):
    """A job with a strong, a middling and a weak applicant, all unscored."""
    job = make_job(required_skills="python, django, docker", experience_min=2, experience_max=6)

    strong = make_candidate(name="strong", skills="python, django, docker",
                            total_experience=Decimal("4"), education="M.Tech")
    make_resume(strong, parsed_text="x" * 2500)
    middling = make_candidate(name="middling", skills="python",
                              total_experience=Decimal("1"), education="Bachelor")
    weak = make_candidate(name="weak", skills="excel")

    applications = {
        "strong": make_application(job, strong),
        "middling": make_application(job, middling),
        "weak": make_application(job, weak),
    }
    return job, applications


class TestBulkScoring:
    """Test job-level scoring operations."""

    def test_score_all_for_job_sorted(self, engine, job_pool):
        """All applications are scored and returned highest first."""
        job, apps = job_pool

        ranked = engine.score_all_for_job(job.id)

        assert [a.id for a in ranked] == [apps["strong"].id, apps["middling"].id, apps["weak"].id]
        assert all(a.ai_score is not None for a in ranked)

    def test_score_all_skips_scored(self, engine, job_pool):
        """Applications that already have a score are not re-scored."""
        job, apps = job_pool
        apps["weak"].ai_score = Decimal("99.50")
        engine.store.save_application(apps["weak"])

        ranked = engine.score_all_for_job(job.id)

        assert ranked[0].id == apps["weak"].id
        assert ranked[0].ai_score == Decimal("99.50")
        assert ranked[0].ai_feedback is None

    def test_score_all_unknown_job(self, engine):
        """An unknown job raises a not-found error."""
        with pytest.raises(ResourceNotFoundError):
            engine.score_all_for_job(404)

    def test_rescore_pending(self, engine, job_pool):
        """Only unscored applications are processed; a second run finds none."""
        job, apps = job_pool
        engine.score_application(apps["strong"].id)

        assert engine.rescore_pending(job.id) == 2
        assert engine.rescore_pending(job.id) == 0
        assert apps["weak"].ai_score is not None


class TestRankingQueries:
    """Test top-N, threshold and statistics queries."""

    def test_top_candidates_excludes_unscored(self, engine, job_pool):
        """Unscored applications never appear in the top list."""
        job, apps = job_pool
        engine.score_application(apps["middling"].id)
        engine.score_application(apps["weak"].id)

        top = engine.top_candidates(job.id, limit=10)

        assert [a.id for a in top] == [apps["middling"].id, apps["weak"].id]

    def test_top_candidates_limit(self, engine, job_pool):
        """The limit caps the number returned."""
        job, apps = job_pool
        engine.score_all_for_job(job.id)

        top = engine.top_candidates(job.id, limit=1)

        assert [a.id for a in top] == [apps["strong"].id]

    def test_top_candidates_negative_limit(self, engine, job_pool):
        """A negative limit is rejected instead of trimming from the end."""
        job, _ = job_pool
        engine.score_all_for_job(job.id)

        with pytest.raises(ValueError, match="non-negative"):
            engine.top_candidates(job.id, limit=-1)

    def test_top_candidates_zero_limit(self, engine, job_pool):
        job, _ = job_pool
        engine.score_all_for_job(job.id)
        assert engine.top_candidates(job.id, limit=0) == []

    def test_above_threshold(self, engine, job_pool):
        """Only scores at or above the threshold, highest first."""
        job, apps = job_pool
        ranked = engine.score_all_for_job(job.id)
        cutoff = float(ranked[1].ai_score)

        qualified = engine.candidates_above_threshold(job.id, cutoff)

        assert [a.id for a in qualified] == [apps["strong"].id, apps["middling"].id]

    def test_above_threshold_none_qualify(self, engine, job_pool):
        """A threshold above every score returns nothing."""
        job, _ = job_pool
        engine.score_all_for_job(job.id)
        assert engine.candidates_above_threshold(job.id, 100.0) == []

    def test_statistics_empty_pool(self, engine, job_pool):
        """Nothing scored: zeros everywhere, no exception."""
        job, _ = job_pool

        stats = engine.score_statistics(job.id)

        assert stats == {
            "total_applications": 3,
            "scored_applications": 0,
            "average_score": 0,
            "highest_score": 0,
            "lowest_score": 0,
            "excellent": 0,
            "good": 0,
            "average": 0,
            "poor": 0,
        }

    def test_statistics_no_applications(self, engine, make_job):
        """A job with no applications at all also reports zeros."""
        job = make_job()
        stats = engine.score_statistics(job.id)
        assert stats["total_applications"] == 0
        assert stats["average_score"] == 0

    def test_statistics_buckets(self, engine, make_job, make_candidate, make_application):
        """Scores land in buckets by inclusive lower bounds."""
        job = make_job()
        for i, score in enumerate([80, 79.99, 60, 40, 39.99]):
            make_application(job, make_candidate(name=f"c{i}"), ai_score=score)
        make_application(job, make_candidate(name="unscored"))

        stats = engine.score_statistics(job.id)

        assert stats["total_applications"] == 6
        assert stats["scored_applications"] == 5
        assert stats["excellent"] == 1
        assert stats["good"] == 2
        assert stats["average"] == 1
        assert stats["poor"] == 1
        assert stats["highest_score"] == Decimal("80.00")
        assert stats["lowest_score"] == Decimal("39.99")
        assert stats["average_score"] == Decimal("60.00")

    def test_statistics_unknown_job(self, engine):
        """An unknown job raises a not-found error."""
        with pytest.raises(ResourceNotFoundError):
            engine.score_statistics(404)
