import json
import logging
import random
import re
from pathlib import Path

logger = logging.getLogger(__name__)

PROBLEMS_DIR = Path(__file__).parent / "problems"

DEFAULT_CATEGORY = "array"
DEFAULT_DIFFICULTY = "Easy"

_PROBLEM_URL_PATTERNS = (
    re.compile(r"leetcode\.com/problems/([\w-]+)/?"),
    re.compile(r"leetcode\.com/problems/([\w-]+)/description/?"),
)


class ProblemSelectionError(ValueError):
    """No problem could be selected for the requested configuration."""


# ---------------------------------------------------------------------------
# Problem loading
# ---------------------------------------------------------------------------

def _load_problems():
    problems = {}
    for f in sorted(PROBLEMS_DIR.glob("*.json")):
        try:
            p = json.loads(f.read_text(encoding="utf-8"))
            problems[p["id"]] = p
        except (KeyError, TypeError, json.JSONDecodeError) as exc:
            logger.warning("Skipping %s: %s", f.name, exc)
    return problems


PROBLEMS = _load_problems()


def get_problem(problem_id: str) -> dict | None:
    return PROBLEMS.get(problem_id)


def list_problems(category: str = None, difficulty: str = None) -> list[dict]:
    return [
        {"id": p["id"], "title": p["title"], "difficulty": p["difficulty"], "category": p["category"]}
        for p in PROBLEMS.values()
        if (not category or p["category"] == category)
        and (not difficulty or p["difficulty"] == difficulty)
    ]


def list_categories() -> list[str]:
    return sorted({p["category"] for p in PROBLEMS.values()})


def lookup(category: str, difficulty: str = None) -> dict | None:
    """Pick a random problem from *category*, optionally filtered by difficulty."""
    candidates = [p for p in PROBLEMS.values() if p["category"] == category]
    if difficulty:
        candidates = [p for p in candidates if p["difficulty"] == difficulty]
    return random.choice(candidates) if candidates else None


# ---------------------------------------------------------------------------
# External problem URLs
# ---------------------------------------------------------------------------

def parse_problem_url(url: str) -> str | None:
    """Extract the problem slug from a leetcode.com problem URL."""
    if not isinstance(url, str):
        return None
    for pattern in _PROBLEM_URL_PATTERNS:
        match = pattern.search(url)
        if match:
            return match.group(1)
    return None


def placeholder_problem(slug: str) -> dict:
    """Build a stand-in problem record for a problem we only know by slug."""
    return {
        "id": slug,
        "title": " ".join(word[:1].upper() + word[1:] for word in slug.split("-")),
        "difficulty": "Unknown",
        "category": "custom",
        "description": (
            "This is a custom problem. Please describe the problem requirements "
            "and I'll help you solve it."
        ),
        "examples": [],
        "constraints": [],
    }


def select_problem(problem_config: dict | None) -> dict:
    """Resolve a start-of-interview problem configuration to a problem record.

    ``None`` picks a random easy array problem. Otherwise the config is
    ``{"type": "category", "category": ..., "difficulty": ...}`` or
    ``{"type": "url", "url": ...}``. Raises ProblemSelectionError when
    nothing matches.
    """
    if not problem_config:
        problem = lookup(DEFAULT_CATEGORY, DEFAULT_DIFFICULTY)
        if not problem:
            raise ProblemSelectionError("Failed to select a problem")
        return problem

    if not isinstance(problem_config, dict):
        raise ProblemSelectionError("Invalid problem configuration")

    config_type = problem_config.get("type")
    if config_type == "category":
        category = problem_config.get("category")
        difficulty = problem_config.get("difficulty")
        problem = lookup(category, difficulty) if category else None
        if not problem:
            raise ProblemSelectionError(
                f"No {difficulty or ''} problems found in {category} category"
            )
        return problem
    if config_type == "url":
        slug = parse_problem_url(problem_config.get("url"))
        if not slug:
            raise ProblemSelectionError("Invalid LeetCode URL format")
        return placeholder_problem(slug)

    raise ProblemSelectionError("Failed to select a problem")
