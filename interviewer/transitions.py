"""Phase transition detection from free-text candidate input.

The detector is an ordered table of named rules. Each rule pairs a
vocabulary (case-insensitive regexes) with the phases it may fire from.
``detect()`` walks the table top to bottom and the first rule that both
matches the input and is allowed from the current phase decides the
result. Rule order therefore encodes priority:

1. shortcuts -- exact-intent phrases tied to a single current phase
2. the coding gate -- coding requests are blocked until the candidate has
   reached solution discussion
3. topic vocabulary -- broad category matches, earliest category wins

The detector holds no state and is deterministic for a given
``(text, phase)`` pair.
"""

import re
from dataclasses import dataclass

from .phases import (
    PHASES,
    PROBLEM_EXPLANATION,
    CLARIFICATION,
    SOLUTION_DISCUSSION,
    CODING,
    CODE_REVIEW,
    FOLLOW_UP,
    COMPLEXITY,
    phase_at_or_after,
)

KIND_SHORTCUT = "shortcut"
KIND_GATE = "gate"
KIND_VOCABULARY = "vocabulary"

CODING_BLOCKED_REASON = "Before coding, please first explain your approach and solution strategy."


def _compile(*patterns: str) -> tuple[re.Pattern, ...]:
    return tuple(re.compile(p, re.IGNORECASE) for p in patterns)


@dataclass(frozen=True)
class TransitionRule:
    name: str
    kind: str
    patterns: tuple[re.Pattern, ...]
    target: str
    allowed_from: frozenset[str]
    reason: str | None = None

    def matches(self, text: str) -> bool:
        return any(p.search(text) for p in self.patterns)

    def applies_to(self, phase: str) -> bool:
        return phase in self.allowed_from


@dataclass(frozen=True)
class Detection:
    suggested_phase: str
    should_transition: bool
    reason: str | None = None
    rule: str | None = None


# ── Vocabularies ──────────────────────────────────────────────────────

CODING_PATTERNS = _compile(
    r"start.*cod", r"write.*code", r"implement", r"code.*now",
    r"begin.*coding", r"let.*code", r"ready.*to.*code",
    r"can.*i.*code", r"should.*i.*code", r"time.*to.*code",
)

CLARIFICATION_PATTERNS = _compile(
    r"what.*if", r"can.*assume", r"should.*handle", r"what.*about",
    r"clarify", r"understand.*problem", r"edge.*case",
    r"constraint", r"input.*range", r"output.*format", r"example",
)

SOLUTION_PATTERNS = _compile(
    r"approach", r"solution", r"algorithm", r"strategy", r"plan",
    r"think.*about", r"would.*use", r"idea.*is", r"solve.*by",
    r"my.*approach", r"i.*think", r"propose", r"suggest",
    r"iterate", r"loop", r"recursion", r"dynamic.*programming",
    r"hash.*table", r"binary.*search", r"two.*pointer", r"sliding.*window",
    r"breadth.*first", r"depth.*first", r"sort",
)

REVIEW_PATTERNS = _compile(
    r"review.*code", r"check.*code", r"look.*at.*code",
    r"finished.*coding", r"done.*with.*code", r"completed.*solution",
    r"here.*is.*my.*code", r"my.*solution",
)

FOLLOW_UP_PATTERNS = _compile(
    r"optimiz", r"improve", r"better.*way", r"alternative",
    r"different.*approach", r"more.*efficient", r"trade.*off",
    r"pros.*and.*cons", r"other.*solution",
)

COMPLEXITY_PATTERNS = _compile(
    r"time.*complexity", r"space.*complexity", r"big.*o",
    r"runtime", r"memory.*usage", r"complexity.*analysis",
    r"o\(.*\)", r"linear.*time", r"constant.*time", r"logarithmic",
)

# ── Rule table (order is priority) ────────────────────────────────────

# The coding gate follows phase order: blocked before solution discussion,
# allowed up to (not including) code review.
_BEFORE_SOLUTION = frozenset(p for p in PHASES if not phase_at_or_after(p, SOLUTION_DISCUSSION))
_UNTIL_CODE_REVIEW = frozenset(p for p in PHASES if not phase_at_or_after(p, CODE_REVIEW))

RULES = (
    TransitionRule(
        name="understood_problem",
        kind=KIND_SHORTCUT,
        patterns=_compile(r"understand.*problem"),
        target=CLARIFICATION,
        allowed_from=frozenset({PROBLEM_EXPLANATION}),
    ),
    TransitionRule(
        name="no_more_questions",
        kind=KIND_SHORTCUT,
        patterns=_compile(r"no.*more.*question|no.*question|ready.*to.*discuss|ready.*for.*next"),
        target=SOLUTION_DISCUSSION,
        allowed_from=frozenset({CLARIFICATION}),
    ),
    TransitionRule(
        name="go_ahead",
        kind=KIND_SHORTCUT,
        patterns=_compile(r"got.*it|sounds.*good|go.*ahead|code.*it"),
        target=CODING,
        allowed_from=frozenset({SOLUTION_DISCUSSION}),
    ),
    TransitionRule(
        name="coding_blocked",
        kind=KIND_GATE,
        patterns=CODING_PATTERNS,
        target=SOLUTION_DISCUSSION,
        allowed_from=_BEFORE_SOLUTION,
        reason=CODING_BLOCKED_REASON,
    ),
    TransitionRule(
        name="coding_allowed",
        kind=KIND_GATE,
        patterns=CODING_PATTERNS,
        target=CODING,
        allowed_from=_UNTIL_CODE_REVIEW - _BEFORE_SOLUTION,
    ),
    TransitionRule(
        name="clarification",
        kind=KIND_VOCABULARY,
        patterns=CLARIFICATION_PATTERNS,
        target=CLARIFICATION,
        allowed_from=frozenset({PROBLEM_EXPLANATION, CLARIFICATION}),
    ),
    TransitionRule(
        name="solution",
        kind=KIND_VOCABULARY,
        patterns=SOLUTION_PATTERNS,
        target=SOLUTION_DISCUSSION,
        allowed_from=frozenset({CLARIFICATION, SOLUTION_DISCUSSION}),
    ),
    TransitionRule(
        name="review",
        kind=KIND_VOCABULARY,
        patterns=REVIEW_PATTERNS,
        target=CODE_REVIEW,
        allowed_from=frozenset({CODING, CODE_REVIEW}),
    ),
    TransitionRule(
        name="follow_up",
        kind=KIND_VOCABULARY,
        patterns=FOLLOW_UP_PATTERNS,
        target=FOLLOW_UP,
        allowed_from=frozenset({CODE_REVIEW, FOLLOW_UP}),
    ),
    TransitionRule(
        name="complexity",
        kind=KIND_VOCABULARY,
        patterns=COMPLEXITY_PATTERNS,
        target=COMPLEXITY,
        allowed_from=frozenset({CODE_REVIEW, FOLLOW_UP, COMPLEXITY}),
    ),
)


def _normalize(text: str) -> str:
    return (text or "").lower().strip()


def detect(text: str, current_phase: str, rules=RULES) -> Detection:
    """Suggest the phase the interview should be in after *text*.

    Returns the current phase with ``should_transition=False`` when no rule
    fires. A blocked coding request still reports ``should_transition=True``
    because the candidate is moved to solution discussion.
    """
    normalized = _normalize(text)
    for rule in rules:
        if rule.applies_to(current_phase) and rule.matches(normalized):
            return Detection(
                suggested_phase=rule.target,
                should_transition=True,
                reason=rule.reason,
                rule=rule.name,
            )
    return Detection(suggested_phase=current_phase, should_transition=False)


def explain(text: str, rules=RULES) -> list[str]:
    """Names of every rule whose vocabulary matches *text*, ignoring phase gates."""
    normalized = _normalize(text)
    return [rule.name for rule in rules if rule.matches(normalized)]
