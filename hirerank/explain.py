"""
Human-readable explanation of an application's score.
"""

from typing import Any, Dict, List

from .config import MISSING_SKILLS_DETAIL_LIMIT, RECOMMENDATION_TIERS
from .errors import ResourceNotFoundError
from .scoring import combined_skills, resolve_resume
from .skills import SkillMatcher


def generate_recommendations(score, skill_match: Dict[str, Any]) -> List[str]:
    """
    Rule-based next steps for a reviewer.

    Missing skills come first (named when there are few, counted otherwise),
    followed by one message for the score tier. Unscored applications get no
    tier message.
    """
    recommendations = []

    missing = skill_match.get("missing") or []
    if missing:
        if len(missing) <= MISSING_SKILLS_DETAIL_LIMIT:
            recommendations.append(f"Consider gaining experience in: {', '.join(missing)}")
        else:
            recommendations.append(
                f"Candidate is missing {len(missing)} required skills. May need additional training."
            )

    if score is not None:
        for lower, message in RECOMMENDATION_TIERS:
            if lower is None or score >= lower:
                recommendations.append(message)
                break

    return recommendations


def explain_application(application, matcher: SkillMatcher) -> Dict[str, Any]:
    """
    Rebuild the skill breakdown for a scored application.

    Returns:
        {
            "overall_score": Decimal | None,
            "feedback_text": str | None,
            "skill_analysis": dict (SkillMatcher.detailed_match output),
            "experience_analysis": {
                "candidate_experience", "required_min", "required_max"
            },
            "recommendations": [str]
        }

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

    skill_match = matcher.detailed_match(combined_skills(candidate, resume), job.required_skills)

    return {
        "overall_score": application.ai_score,
        "feedback_text": application.ai_feedback,
        "skill_analysis": skill_match,
        "experience_analysis": {
            "candidate_experience": candidate.total_experience,
            "required_min": job.experience_min,
            "required_max": job.experience_max,
        },
        "recommendations": generate_recommendations(application.ai_score, skill_match),
    }
