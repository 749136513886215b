"""
Skill matching between free-text skill lists.

Skill lists are comma-separated strings. They are compared as unordered,
case-insensitive sets, with synonym-aware and substring matching for each
required skill.
"""

from typing import Any, Dict, Iterable, Mapping, Optional, Set

from .config import build_synonym_table
from .logger import get_logger
from .normalize import normalize_skill


def parse_skills(text: Optional[str]) -> Set[str]:
    """Split a comma-separated skill list into a set of lowercased tokens."""
    if text is None or not text.strip():
        return set()
    tokens = (part.strip().lower() for part in text.split(","))
    return {t for t in tokens if t}


class SkillMatcher:
    """
    Resolves required skills against a candidate's skills.

    A required skill is satisfied when a candidate skill equals it or contains
    it (either direction) after normalization, or when the two are linked
    through the synonym table.
    """

    def __init__(self, synonyms: Optional[Mapping[str, Iterable[str]]] = None):
        """
        Args:
            synonyms: Canonical skill -> alternates. Defaults to the seeded
                table from config; pass build_synonym_table(extra) to extend it.
        """
        self.synonyms = build_synonym_table(base=synonyms) if synonyms is not None else build_synonym_table()

        # alternate -> canonical skills listing it
        self._canonicals: Dict[str, Set[str]] = {}
        for canonical, alternates in self.synonyms.items():
            for alternate in alternates:
                self._canonicals.setdefault(alternate, set()).add(canonical)

    def has_match(self, candidate_skills: Iterable[str], required_skill: str) -> bool:
        required = normalize_skill(required_skill)
        candidates = [c for c in (normalize_skill(s) for s in candidate_skills) if c]
        # Every string contains "", so a token made only of stripped symbols
        # ("-", "!!!") would satisfy any skill by containment. Such tokens are
        # dropped and never match, unlike a plain substring test.
        if not required or not candidates:
            return False

        # Exact or containment match. Short tokens ("r", "go") match inside
        # longer ones; tests pin that behaviour.
        for candidate in candidates:
            if candidate == required or required in candidate or candidate in required:
                return True

        # Candidate uses an alternate of the required canonical skill
        alternates = self.synonyms.get(required)
        if alternates and any(c in alternates for c in candidates):
            return True

        # Required skill is itself an alternate of a canonical skill the candidate has
        canonicals = self._canonicals.get(required, set())
        return any(c in canonicals for c in candidates)

    def match_score(self, candidate_skills_text: Optional[str], required_skills_text: Optional[str]) -> float:
        """
        Fraction of required skills the candidate satisfies, in [0, 1].

        An empty requirement is a full match; an empty candidate list against a
        non-empty requirement scores 0.
        """
        if required_skills_text is None or not required_skills_text.strip():
            return 1.0
        if candidate_skills_text is None or not candidate_skills_text.strip():
            return 0.0

        candidate_set = parse_skills(candidate_skills_text)
        required_set = parse_skills(required_skills_text)
        if not required_set:
            return 1.0

        matched = sum(1 for r in required_set if self.has_match(candidate_set, r))
        score = matched / len(required_set)
        get_logger().debug(f"Skill match: {matched}/{len(required_set)} = {score}")
        return score

    def detailed_match(self, candidate_skills_text: Optional[str], required_skills_text: Optional[str]) -> Dict[str, Any]:
        """
        Break required skills into matched and missing, and list extras.

        A candidate skill is "extra" when, taken on its own, it satisfies no
        required skill.

        Returns:
            {
                "match_score": float,
                "matched": [str], "missing": [str], "extra": [str],
                "total_required": int, "total_matched": int
            }
            Lists are sorted so the output is stable across runs.
        """
        candidate_set = parse_skills(candidate_skills_text)
        required_set = parse_skills(required_skills_text)

        matched = []
        missing = []
        for required in sorted(required_set):
            if self.has_match(candidate_set, required):
                matched.append(required)
            else:
                missing.append(required)

        extra = [
            candidate for candidate in sorted(candidate_set)
            if not any(self.has_match({candidate}, required) for required in required_set)
        ]

        match_score = 1.0 if not required_set else len(matched) / len(required_set)

        return {
            "match_score": match_score,
            "matched": matched,
            "missing": missing,
            "extra": extra,
            "total_required": len(required_set),
            "total_matched": len(matched),
        }


def jaccard_similarity(skills_a: Optional[str], skills_b: Optional[str]) -> float:
    """
    Intersection over union of two parsed skill sets (no synonym expansion).

    Two empty lists are identical (1.0). Otherwise the union is non-empty, so
    the zero-union guard below is never reached.
    """
    set_a = parse_skills(skills_a)
    set_b = parse_skills(skills_b)

    if not set_a and not set_b:
        return 1.0

    union = set_a | set_b
    if not union:
        return 0.0
    return len(set_a & set_b) / len(union)
