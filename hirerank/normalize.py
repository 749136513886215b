import re

_DISALLOWED = re.compile(r"[^a-z0-9+#.]")


def normalize_text(s: str) -> str:
    return " ".join(s.strip().lower().split())


def normalize_skill(skill: str) -> str:
    """Canonical form of a skill token used for comparisons.

    Keeps "+", "#" and "." so that C++, C# and Node.js survive; every other
    non-alphanumeric character becomes a space before whitespace is folded.
    """
    return normalize_text(_DISALLOWED.sub(" ", skill.strip().lower()))
