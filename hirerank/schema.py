from datetime import datetime
from typing import Any, Dict, List

JOB_REQUIRED_STR_FIELDS = ["title"]
JOB_OPTIONAL_STR_FIELDS = ["required_skills"]
CANDIDATE_REQUIRED_STR_FIELDS = ["name"]
CANDIDATE_OPTIONAL_STR_FIELDS = ["skills", "education"]
RESUME_OPTIONAL_STR_FIELDS = ["file_name", "parsed_text", "extracted_skills", "extracted_education"]


def _is_non_empty_str(v: Any) -> bool:
    return isinstance(v, str) and v.strip() != ""


def _is_number(v: Any) -> bool:
    return isinstance(v, (int, float)) and not isinstance(v, bool)


def _valid_timestamp(v: str) -> bool:
    try:
        datetime.fromisoformat(v)
        return True
    except ValueError:
        return False


def _check_strings(data: Dict[str, Any], required: List[str], optional: List[str]) -> List[str]:
    errors: List[str] = []
    for f in required:
        if f not in data:
            errors.append(f"Missing required field: {f}")
        elif not _is_non_empty_str(data[f]):
            errors.append(f"Field '{f}' must be a non-empty string")
    # Optional strings may be null
    for f in optional:
        if data.get(f) is not None and not isinstance(data[f], str):
            errors.append(f"Field '{f}' must be a string if provided")
    return errors


def validate_job(data: Dict[str, Any]) -> List[str]:
    """
    Returns a list of validation error messages. Empty list means valid.
    """
    errors = _check_strings(data, JOB_REQUIRED_STR_FIELDS, JOB_OPTIONAL_STR_FIELDS)

    for f in ("experience_min", "experience_max"):
        v = data.get(f)
        if v is not None and (not isinstance(v, int) or isinstance(v, bool) or v < 0):
            errors.append(f"Field '{f}' must be a non-negative integer if provided")

    low, high = data.get("experience_min"), data.get("experience_max")
    if isinstance(low, int) and isinstance(high, int) and low > high:
        errors.append("Field 'experience_min' must not exceed 'experience_max'")

    return errors


def validate_resume(data: Dict[str, Any]) -> List[str]:
    errors = _check_strings(data, [], RESUME_OPTIONAL_STR_FIELDS)
    if "is_primary" in data and not isinstance(data["is_primary"], bool):
        errors.append("Field 'is_primary' must be a boolean if provided")
    return errors


def validate_candidate(data: Dict[str, Any]) -> List[str]:
    errors = _check_strings(data, CANDIDATE_REQUIRED_STR_FIELDS, CANDIDATE_OPTIONAL_STR_FIELDS)

    exp = data.get("total_experience")
    if exp is not None and (not _is_number(exp) or exp < 0):
        errors.append("Field 'total_experience' must be a non-negative number if provided")

    resumes = data.get("resumes", [])
    if not isinstance(resumes, list):
        errors.append("Field 'resumes' must be a list if provided")
    else:
        for i, resume in enumerate(resumes):
            errors.extend(f"resumes[{i}]: {e}" for e in validate_resume(resume))

    return errors


def validate_application(data: Dict[str, Any]) -> List[str]:
    errors: List[str] = []
    for f in ("job_id", "candidate_id"):
        if f not in data:
            errors.append(f"Missing required field: {f}")
        elif not isinstance(data[f], int) or isinstance(data[f], bool):
            errors.append(f"Field '{f}' must be an integer")

    resume_id = data.get("resume_id")
    if resume_id is not None and (not isinstance(resume_id, int) or isinstance(resume_id, bool)):
        errors.append("Field 'resume_id' must be an integer if provided")

    applied_at = data.get("applied_at")
    if applied_at is not None and (not isinstance(applied_at, str) or not _valid_timestamp(applied_at)):
        errors.append("Field 'applied_at' must be an ISO-8601 timestamp if provided")

    return errors


def validate_dataset(data: Dict[str, Any]) -> List[str]:
    """
    Validate a full load file: {"jobs": [...], "candidates": [...], "applications": [...]}.
    Each message is prefixed with the offending record, e.g. "jobs[0]: ...".
    """
    if not isinstance(data, dict):
        return ["Dataset must be a JSON object"]

    errors: List[str] = []
    validators = [
        ("jobs", validate_job),
        ("candidates", validate_candidate),
        ("applications", validate_application),
    ]
    for section, validate in validators:
        records = data.get(section, [])
        if not isinstance(records, list):
            errors.append(f"Section '{section}' must be a list")
            continue
        for i, record in enumerate(records):
            if not isinstance(record, dict):
                errors.append(f"{section}[{i}]: record must be an object")
                continue
            errors.extend(f"{section}[{i}]: {e}" for e in validate(record))

    return errors
