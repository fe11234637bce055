"""Generative-text client used to produce interviewer replies.

``ClaudeGenerator.generate()`` is a one-shot, stateless call: the whole
conversation so far is replayed into the prompt on every request, so the
caller's session history stays the single source of context.
"""

import asyncio
import logging
import os

from claude_code_sdk import query, ClaudeCodeOptions, AssistantMessage, TextBlock

from .prompts import EMPTY_REPLY_FALLBACK

logger = logging.getLogger(__name__)


def _env_number(name: str, default, cast):
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return cast(raw)
    except ValueError:
        logger.warning("Ignoring invalid %s=%r, using %r", name, raw, default)
        return default


LLM_MODEL = os.environ.get("INTERVIEWER_MODEL") or None
LLM_TIMEOUT = _env_number("INTERVIEWER_LLM_TIMEOUT", None, float)  # None = wait indefinitely
MAX_RETRIES = _env_number("INTERVIEWER_LLM_MAX_RETRIES", 2, int)
RETRY_BACKOFF = 1.0  # seconds


class GenerationError(RuntimeError):
    """The model could not produce a reply."""


def build_prompt(user_message: str, history=()) -> str:
    """Flatten prior turns and the new user message into a single prompt."""
    if not history:
        return user_message
    lines = ["[CONVERSATION SO FAR]"]
    for turn in history:
        role = turn.get("role", "unknown").capitalize()
        lines.append(f"{role}: {turn.get('content', '')}")
    lines.append("[END OF CONVERSATION. The candidate's new message follows.]")
    lines.append(user_message)
    return "\n".join(lines)


class ClaudeGenerator:
    def __init__(
        self,
        *,
        model: str | None = LLM_MODEL,
        timeout: float | None = LLM_TIMEOUT,
        max_retries: int = MAX_RETRIES,
        retry_backoff: float = RETRY_BACKOFF,
    ):
        self.model = model
        self.timeout = timeout
        self.max_retries = max(0, max_retries)
        self.retry_backoff = retry_backoff

    def _options(self, system_prompt: str) -> ClaudeCodeOptions:
        kwargs = {"system_prompt": system_prompt, "allowed_tools": [], "max_turns": 1}
        if self.model:
            kwargs["model"] = self.model
        return ClaudeCodeOptions(**kwargs)

    async def _collect(self, prompt: str, options: ClaudeCodeOptions) -> str:
        parts = []
        async for msg in query(prompt=prompt, options=options):
            if isinstance(msg, AssistantMessage):
                for block in msg.content:
                    if isinstance(block, TextBlock):
                        parts.append(block.text)
        return "".join(parts)

    async def generate(self, system_prompt: str, user_message: str, history=()) -> str:
        """Return the model's reply, retrying transient failures.

        Raises GenerationError once every attempt has failed.
        """
        prompt = build_prompt(user_message, history)
        options = self._options(system_prompt)
        last_exc = None
        for attempt in range(1 + self.max_retries):
            if attempt > 0:
                await asyncio.sleep(self.retry_backoff * attempt)
            try:
                text = await asyncio.wait_for(self._collect(prompt, options), timeout=self.timeout)
            except asyncio.CancelledError:
                raise
            except Exception as exc:
                last_exc = exc
                logger.warning(
                    "Generation attempt %d/%d failed: %s",
                    attempt + 1, 1 + self.max_retries, exc,
                )
                continue
            return text.strip() or EMPTY_REPLY_FALLBACK
        raise GenerationError("Failed to generate AI response") from last_exc
