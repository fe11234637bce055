"""Interview phase model: the fixed, ordered sequence of interview steps.

Pure data plus a handful of navigation helpers. Phases are plain strings
so they travel over the wire unchanged.
"""

PROBLEM_EXPLANATION = "problem_explanation"
CLARIFICATION = "clarification"
SOLUTION_DISCUSSION = "solution_discussion"
CODING = "coding"
CODE_REVIEW = "code_review"
FOLLOW_UP = "follow_up"
COMPLEXITY = "complexity"

PHASES = (
    PROBLEM_EXPLANATION,
    CLARIFICATION,
    SOLUTION_DISCUSSION,
    CODING,
    CODE_REVIEW,
    FOLLOW_UP,
    COMPLEXITY,
)

PHASE_LABELS = {
    PROBLEM_EXPLANATION: "Problem Explanation",
    CLARIFICATION: "Clarification",
    SOLUTION_DISCUSSION: "Solution Discussion",
    CODING: "Coding",
    CODE_REVIEW: "Code Review",
    FOLLOW_UP: "Follow-up Questions",
    COMPLEXITY: "Complexity Analysis",
}

_INDEX = {name: i for i, name in enumerate(PHASES)}


def is_valid_phase(name) -> bool:
    return isinstance(name, str) and name in _INDEX


def coerce_phase(name) -> str:
    """Return *name* if it is a known phase, else raise ValueError."""
    if not is_valid_phase(name):
        raise ValueError(f"Unknown interview step: {name}")
    return name


def phase_index(phase: str) -> int:
    return _INDEX[coerce_phase(phase)]


def next_phase(phase: str) -> str:
    """Return the phase after *phase*; the last phase maps to itself."""
    i = phase_index(phase)
    return PHASES[min(i + 1, len(PHASES) - 1)]


def previous_phase(phase: str) -> str:
    """Return the phase before *phase*; the first phase maps to itself."""
    i = phase_index(phase)
    return PHASES[max(i - 1, 0)]



def phase_at_or_after(phase: str, other: str) -> bool:
    """True when *phase* sits at or after *other* in the interview order."""
    return phase_index(phase) >= phase_index(other)
