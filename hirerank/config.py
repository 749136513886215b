"""
Configuration for the candidate scoring engine.

Weights, tiers and the skill synonym table are plain data. Adjust them here
(or extend the synonym table from a JSON file) rather than in the scorers.
"""

import json
from pathlib import Path
from typing import Dict, Iterable, Mapping, Optional, Set

from .normalize import normalize_skill

# Factor weights (must sum to 1.0)
WEIGHTS = {
    "skills": 0.50,
    "experience": 0.25,
    "education": 0.10,
    "resume_quality": 0.10,
    "recency": 0.05,
}

# Experience scoring parameters
EXPERIENCE_DEFAULT_MIN = 0
EXPERIENCE_DEFAULT_MAX = 50
EXPERIENCE_DEFICIT_PENALTY = 0.2  # Lost per year below the minimum
EXPERIENCE_OVERQUALIFIED_SCORE = 0.85
NEUTRAL_SCORE = 0.5

# Education tiers, checked in order; first keyword hit wins
EDUCATION_TIERS = (
    (("phd", "doctorate"), 1.0, "PhD/Doctorate"),
    (("master", "m.tech", "mba", "mca"), 0.9, "Master's degree"),
    (("bachelor", "b.tech", "b.e", "bca"), 0.8, "Bachelor's degree"),
    (("diploma",), 0.6, "Diploma"),
)

# Resume quality: (minimum parsed text length, exclusive) -> score
RESUME_LENGTH_TIERS = (
    (2000, 1.0),
    (1000, 0.8),
    (500, 0.6),
)
RESUME_BASE_SCORE = 0.5
RESUME_SKILL_BONUS_THRESHOLD = 10
RESUME_SKILL_BONUS = 0.1

# Recency: (max days since applying, inclusive) -> score
RECENCY_TIERS = (
    (1, 1.0),
    (7, 0.9),
    (30, 0.7),
)
RECENCY_DEFAULT_SCORE = 0.5

# Statistics buckets: (name, lower bound inclusive)
SCORE_BUCKETS = (
    ("excellent", 80),
    ("good", 60),
    ("average", 40),
    ("poor", None),
)

# Recommendation tiers: (lower bound inclusive, message)
RECOMMENDATION_TIERS = (
    (80, "Strong candidate - recommend for interview"),
    (60, "Good candidate - consider for technical screening"),
    (40, "Average match - review manually"),
    (None, "Low match - may not be suitable for this role"),
)
MISSING_SKILLS_DETAIL_LIMIT = 3

# Defaults used by callers that don't pass their own
DEFAULT_TOP_LIMIT = 10
DEFAULT_QUALIFY_THRESHOLD = 70.0

# Canonical skill -> alternate spellings and related terms
SKILL_SYNONYMS: Dict[str, Set[str]] = {
    # JavaScript variants
    "javascript": {"js", "es6", "es2015", "ecmascript"},
    "typescript": {"ts"},
    # Java ecosystem
    "java": {"j2ee", "jee", "core java", "java8", "java11", "java17"},
    "spring boot": {"springboot", "spring-boot", "spring framework", "spring"},
    "hibernate": {"jpa", "orm"},
    # Frontend frameworks
    "react": {"reactjs", "react.js", "react js"},
    "angular": {"angularjs", "angular.js", "angular2", "angular4"},
    "vue": {"vuejs", "vue.js", "vue js"},
    "next.js": {"nextjs", "next"},
    # Backend
    "node.js": {"nodejs", "node", "node js"},
    "express": {"expressjs", "express.js"},
    "python": {"python3", "py"},
    "django": {"django rest", "drf"},
    # Databases
    "mysql": {"my sql", "mariadb"},
    "postgresql": {"postgres", "psql", "pgsql"},
    "mongodb": {"mongo", "nosql"},
    "sql": {"structured query language", "rdbms"},
    # Cloud & DevOps
    "aws": {"amazon web services", "amazon aws", "ec2", "s3", "lambda"},
    "azure": {"microsoft azure", "ms azure"},
    "gcp": {"google cloud", "google cloud platform"},
    "docker": {"containerization", "containers"},
    "kubernetes": {"k8s", "container orchestration"},
    "ci/cd": {"cicd", "continuous integration", "continuous deployment", "devops"},
    # Others
    "rest api": {"restful", "rest", "restful api", "web services"},
    "microservices": {"micro services", "microservice architecture"},
    "git": {"github", "gitlab", "bitbucket", "version control"},
    "agile": {"scrum", "kanban", "agile methodology"},
    "machine learning": {"ml", "deep learning", "ai", "artificial intelligence"},
}


def load_synonyms(path: Path) -> Dict[str, Set[str]]:
    """
    Load extra synonyms from a JSON file.

    The file holds a single object mapping a canonical skill to a list of
    alternates, e.g. {"golang": ["go", "go lang"]}.

    Raises:
        ValueError: If the file is not an object of string lists
    """
    with Path(path).open("r", encoding="utf-8") as f:
        data = json.load(f)

    if not isinstance(data, dict):
        raise ValueError(f"Synonym file {path} must contain a JSON object")

    table: Dict[str, Set[str]] = {}
    for canonical, alternates in data.items():
        if not isinstance(alternates, list) or not all(isinstance(a, str) for a in alternates):
            raise ValueError(f"Synonyms for '{canonical}' must be a list of strings")
        table[canonical] = set(alternates)
    return table


def build_synonym_table(
    extra: Optional[Mapping[str, Iterable[str]]] = None,
    base: Optional[Mapping[str, Iterable[str]]] = None,
) -> Dict[str, Set[str]]:
    """
    Merge extra synonyms over the seeded table.

    Keys and terms are stored in normalized form. When a canonical skill
    exists in both tables its alternate sets are unioned.
    """
    merged: Dict[str, Set[str]] = {}
    for source in (SKILL_SYNONYMS if base is None else base, extra or {}):
        for canonical, alternates in source.items():
            key = normalize_skill(canonical)
            merged.setdefault(key, set()).update(normalize_skill(a) for a in alternates)
    return merged
