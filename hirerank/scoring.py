"""
Deterministic factor scorers.

Each scorer returns a (score, feedback) pair: a sub-score in [0, 1] and the
feedback fragment it contributes to the application's explanation. Missing
optional data degrades to a neutral score; nothing here raises on it.
"""

from datetime import date
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional, Tuple

from .config import (
    EXPERIENCE_DEFAULT_MIN, EXPERIENCE_DEFAULT_MAX, EXPERIENCE_DEFICIT_PENALTY,
    EXPERIENCE_OVERQUALIFIED_SCORE, NEUTRAL_SCORE, EDUCATION_TIERS,
    RESUME_LENGTH_TIERS, RESUME_BASE_SCORE, RESUME_SKILL_BONUS_THRESHOLD,
    RESUME_SKILL_BONUS, RECENCY_TIERS, RECENCY_DEFAULT_SCORE,
    MISSING_SKILLS_DETAIL_LIMIT,
)
from .logger import get_logger
from .skills import SkillMatcher

FactorResult = Tuple[float, str]


def _fixed(value: float, places: str) -> str:
    """Format with half-up rounding; places is a Decimal exponent like "0.1"."""
    return str(Decimal(str(value)).quantize(Decimal(places), rounding=ROUND_HALF_UP))


def _percent(fraction: float) -> str:
    return _fixed(fraction * 100, "1")


def combined_skills(candidate, resume) -> Optional[str]:
    """Candidate profile skills joined with the resume's extracted skills."""
    skills = candidate.skills
    if resume is not None and resume.extracted_skills is not None:
        if not skills:
            skills = resume.extracted_skills
        else:
            skills = f"{skills}, {resume.extracted_skills}"
    return skills


def skill_score(job, candidate, resume, matcher: SkillMatcher) -> FactorResult:
    match = matcher.detailed_match(combined_skills(candidate, resume), job.required_skills)
    score = match["match_score"]
    missing = match["missing"]

    feedback = f"Skills: {match['total_matched']}/{match['total_required']} matched ({_percent(score)}%). "
    if missing and len(missing) <= MISSING_SKILLS_DETAIL_LIMIT:
        feedback += f"Missing: {', '.join(missing)}. "
    elif len(missing) > MISSING_SKILLS_DETAIL_LIMIT:
        feedback += f"Missing {len(missing)} skills. "

    get_logger().debug(f"Skill score: {score}")
    return score, feedback


def experience_score(job, candidate) -> FactorResult:
    """
    Score years of experience against the job's [min, max] range.

    Inside the range scores 1.0. Each year below the minimum costs 0.2, down to
    0. Above the maximum is a flat 0.85.
    """
    if candidate.total_experience is None:
        return NEUTRAL_SCORE, "Experience: Not specified. "

    years = float(candidate.total_experience)
    shown = _fixed(years, "0.1")

    if job.experience_min is None and job.experience_max is None:
        return 1.0, f"Experience: {shown} years (no requirement). "

    low = job.experience_min if job.experience_min is not None else EXPERIENCE_DEFAULT_MIN
    high = job.experience_max if job.experience_max is not None else EXPERIENCE_DEFAULT_MAX

    if low <= years <= high:
        score = 1.0
        feedback = f"Experience: {shown} years (ideal range {low}-{high}). "
    elif years < low:
        score = max(0.0, 1 - (low - years) * EXPERIENCE_DEFICIT_PENALTY)
        feedback = f"Experience: {shown} years (below required {low}). "
    else:
        score = EXPERIENCE_OVERQUALIFIED_SCORE
        feedback = f"Experience: {shown} years (above range, may be overqualified). "

    get_logger().debug(f"Experience score: {score}")
    return score, feedback


def education_score(candidate, resume) -> FactorResult:
    education = candidate.education
    if not education and resume is not None and resume.extracted_education is not None:
        education = resume.extracted_education

    if not education:
        return NEUTRAL_SCORE, "Education: Not specified. "

    text = education.lower()
    for keywords, score, label in EDUCATION_TIERS:
        if any(k in text for k in keywords):
            return score, f"Education: {label}. "

    return NEUTRAL_SCORE, "Education: Found. "


def resume_quality_score(resume) -> FactorResult:
    """
    Score a resume by how much text was extracted from it.

    Length of the parsed text is the quality proxy; more than ten extracted
    skills adds a small bonus, capped at 1.0.
    """
    if resume is None:
        return 0.0, "Resume: Not uploaded. "

    score = RESUME_BASE_SCORE
    if resume.parsed_text:
        length = len(resume.parsed_text)
        for min_length, tier_score in RESUME_LENGTH_TIERS:
            if length > min_length:
                score = tier_score
                break

    if resume.extracted_skills:
        skill_count = len([s for s in resume.extracted_skills.split(",") if s.strip()])
        if skill_count > RESUME_SKILL_BONUS_THRESHOLD:
            score = min(1.0, round(score + RESUME_SKILL_BONUS, 2))

    return score, f"Resume quality: {_percent(score)}%. "


def recency_score(application, today: date) -> FactorResult:
    """Newer applications get a slight boost. Contributes no feedback text."""
    if application.applied_at is None:
        return RECENCY_DEFAULT_SCORE, ""

    days_ago = (today - application.applied_at.date()).days
    for max_days, score in RECENCY_TIERS:
        if days_ago <= max_days:
            return score, ""
    return RECENCY_DEFAULT_SCORE, ""


def resolve_resume(application):
    """The resume attached to the application, else the candidate's primary one."""
    if application.resume is not None:
        return application.resume
    return application.candidate.primary_resume
