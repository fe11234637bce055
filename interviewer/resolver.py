"""Phase-aware reply resolution.

The resolver turns (phase, candidate input, problem context, history) into
an interviewer reply. Most phases simply delegate to the generative model
with that phase's instructions. Solution discussion is special: a
candidate who has already walked through *how* their approach works gets a
short canned go-ahead and the session is told to advance to coding,
without a model round-trip.
"""

import logging
import random
import re
from dataclasses import dataclass

from .phases import SOLUTION_DISCUSSION
from .prompts import ENCOURAGEMENTS, build_contextual_prompt

logger = logging.getLogger(__name__)

# Patterns that describe the mechanics of an approach rather than just
# naming a technique.
DETAIL_INDICATORS = (
    # stepwise narration
    re.compile(r"start.*from|begin.*with|first.*then|step.*by.*step", re.IGNORECASE),
    # movement / iteration
    re.compile(r"move.*pointer|iterate|loop.*through|traverse", re.IGNORECASE),
    # comparisons and conditions
    re.compile(r"compare|check.*if|when.*equal|if.*match", re.IGNORECASE),
    # data structure usage
    re.compile(r"store.*in|put.*into|use.*array|hash.*table", re.IGNORECASE),
    # case handling
    re.compile(r"handle.*case|convert.*to|ignore.*non", re.IGNORECASE),
    # algorithm mechanics
    re.compile(r"left.*right|beginning.*end|increment|decrement", re.IGNORECASE),
)

MIN_WORDS_WITH_MANY_INDICATORS = 15
MIN_WORDS_WITH_ONE_INDICATOR = 30


@dataclass(frozen=True)
class Resolution:
    reply: str
    should_advance: bool = False


def count_detail_indicators(explanation: str) -> int:
    text = explanation.lower()
    return sum(1 for pattern in DETAIL_INDICATORS if pattern.search(text))


def count_words(explanation: str) -> int:
    return len(explanation.split())


def is_detailed_explanation(explanation: str) -> bool:
    """Whether a solution explanation says how the approach works, not just what it is."""
    indicators = count_detail_indicators(explanation)
    words = count_words(explanation)
    return (
        (indicators >= 2 and words >= MIN_WORDS_WITH_MANY_INDICATORS)
        or (indicators >= 1 and words >= MIN_WORDS_WITH_ONE_INDICATOR)
    )


class PhasePromptResolver:
    def __init__(self, generator, *, rng: random.Random | None = None):
        self.generator = generator
        self.rng = rng or random.Random()

    async def resolve(self, phase: str, user_input: str, problem_context: str, history=()) -> Resolution:
        if phase == SOLUTION_DISCUSSION and is_detailed_explanation(user_input):
            logger.debug("Detailed solution explanation (%d words), skipping model", count_words(user_input))
            return Resolution(reply=self.rng.choice(ENCOURAGEMENTS), should_advance=True)

        prompt = build_contextual_prompt(phase, user_input, problem_context)
        reply = await self.generator.generate(prompt, user_input, history)
        return Resolution(reply=reply)
