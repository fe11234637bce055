"""Session orchestration: routes inbound events to handlers and decides the
outbound events for each turn.

Handlers never touch the socket. Each returns a ``TurnDecision`` holding
the phase the session ended the turn in and the ordered list of events to
send, so the whole state machine can be exercised without a connection.
Session state is committed only once a turn has produced its reply; a
failed model call leaves the phase where it was and yields a single error
event.
"""

import logging
from dataclasses import dataclass, field

from . import problems
from .phases import (
    PROBLEM_EXPLANATION,
    CLARIFICATION,
    CODE_REVIEW,
    is_valid_phase,
    next_phase,
    previous_phase,
)
from .problems import ProblemSelectionError
from .prompts import (
    SYSTEM_PROMPT,
    GENERAL_CODE_REVIEW_PROMPT,
    COMPLETION_MESSAGE,
    build_problem_context,
    build_problem_presentation,
    build_validation_prompt,
    format_code_message,
    format_code_review_request,
)
from .resolver import PhasePromptResolver
from .session import ROLE_USER, ROLE_ASSISTANT, InterviewSession, SessionStore
from .transitions import detect
from .ws_constants import (
    MSG_SESSION_CONTROL,
    MSG_TEXT_INPUT,
    MSG_VOICE_INPUT,
    MSG_CODE_INPUT,
    MSG_STEP_CONTROL,
    MSG_AI_RESPONSE,
    ACTION_START,
    ACTION_END,
    ACTION_SET_STEP,
    ACTION_NEXT,
    ACTION_PREVIOUS,
    ERR_VALIDATION,
    ERR_GENERATION,
    STARTED_MESSAGE,
    COMPLETED_MESSAGE,
    STEP_CHANGED_MESSAGE,
    PROCESSING_FAILED_MESSAGE,
    GENERATION_FAILED_MESSAGE,
    REVIEW_FAILED_MESSAGE,
    event,
    error_event,
)

logger = logging.getLogger(__name__)


@dataclass
class TurnDecision:
    phase: str
    events: list[dict] = field(default_factory=list)


def _reply_event(text: str, phase: str, **extra) -> dict:
    return event(MSG_AI_RESPONSE, text=text, shouldSpeak=True, currentStep=phase, **extra)


def _step_event(message: str, phase: str, **extra) -> dict:
    return event(MSG_STEP_CONTROL, message=message, currentStep=phase, **extra)


class Orchestrator:
    """Owns the per-session state machine over ``status`` x ``phase``.

    *generator* is anything with an async
    ``generate(system_prompt, user_message, history) -> str``.
    *select_problem* maps a ``problemConfig`` to a problem record or raises
    ProblemSelectionError.
    """

    def __init__(self, generator, store: SessionStore, *, select_problem=problems.select_problem, rng=None):
        self.generator = generator
        self.store = store
        self.select_problem = select_problem
        self.resolver = PhasePromptResolver(generator, rng=rng)

    # ------------------------------------------------------------------
    # Entry points
    # ------------------------------------------------------------------

    async def dispatch(self, session_id: str, message) -> list[dict]:
        """Handle one inbound message for a live session, one at a time per session.

        Returns the events to send. If the session disappears while the
        turn is in flight, its result is dropped and nothing is returned.
        """
        session = self.store.get(session_id)
        if session is None:
            logger.info("Dropping message for unknown session %s", session_id)
            return []
        async with session.lock:
            if session.closed:
                return []
            decision = await self.handle(session, message)
        if session.closed:
            logger.info(
                "Session %s closed while a turn was in flight; discarding %d event(s)",
                session_id, len(decision.events),
            )
            return []
        return decision.events

    async def handle(self, session: InterviewSession, message) -> TurnDecision:
        if not isinstance(message, dict):
            return TurnDecision(session.phase, [error_event(PROCESSING_FAILED_MESSAGE, ERR_VALIDATION)])

        msg_type = message.get("type")
        handler_name = self._HANDLERS.get(msg_type)
        if not handler_name:
            logger.warning("Ignoring unknown message type %r for session %s", msg_type, session.id)
            return TurnDecision(session.phase)

        payload = message.get("payload")
        if not isinstance(payload, dict):
            payload = {}

        try:
            return await getattr(self, handler_name)(session, payload)
        except Exception:
            logger.exception("Unexpected error handling message type=%s", msg_type)
            return TurnDecision(session.phase, [error_event(PROCESSING_FAILED_MESSAGE)])

    # ------------------------------------------------------------------
    # Session control
    # ------------------------------------------------------------------

    async def handle_session_control(self, session: InterviewSession, payload: dict) -> TurnDecision:
        action = payload.get("action")
        if action == ACTION_START:
            return self._start(session, payload.get("problemConfig"))
        if action == ACTION_END:
            return self._end(session)
        logger.warning("Ignoring session_control action %r for session %s", action, session.id)
        return TurnDecision(session.phase)

    def _start(self, session: InterviewSession, problem_config) -> TurnDecision:
        try:
            problem = self.select_problem(problem_config)
        except ProblemSelectionError as exc:
            logger.info("Problem selection failed for session %s: %s", session.id, exc)
            return TurnDecision(session.phase, [error_event(str(exc), ERR_VALIDATION)])

        # A configured problem has already been read by the candidate.
        phase = CLARIFICATION if problem_config else PROBLEM_EXPLANATION
        session.start(problem, phase)
        logger.info("Session %s started problem %s at step %s", session.id, problem.get("id"), phase)

        text = build_problem_presentation(problem)
        session.append_turn(ROLE_ASSISTANT, text)
        return TurnDecision(phase, [
            _reply_event(text, phase),
            event(MSG_SESSION_CONTROL, message=STARTED_MESSAGE, problem=problem, currentStep=phase),
        ])

    def _end(self, session: InterviewSession) -> TurnDecision:
        session.complete()
        session.append_turn(ROLE_ASSISTANT, COMPLETION_MESSAGE)
        logger.info("Session %s completed", session.id)
        return TurnDecision(session.phase, [
            _reply_event(COMPLETION_MESSAGE, session.phase),
            event(MSG_SESSION_CONTROL, message=COMPLETED_MESSAGE),
        ])

    # ------------------------------------------------------------------
    # Candidate input
    # ------------------------------------------------------------------

    async def handle_text_input(self, session: InterviewSession, payload: dict) -> TurnDecision:
        text = payload.get("text")
        if not isinstance(text, str) or not text.strip():
            return TurnDecision(session.phase, [error_event("Message text is required", ERR_VALIDATION)])
        session.append_turn(ROLE_USER, text)
        return await self._respond(session, text)

    async def handle_voice_input(self, session: InterviewSession, payload: dict) -> TurnDecision:
        # Interim transcripts are for live display only. Only a JSON true
        # marks a transcript final; "false", 1 and the like do not.
        if payload.get("isFinal") is not True:
            return TurnDecision(session.phase)
        transcript = payload.get("transcript")
        if not isinstance(transcript, str) or not transcript.strip():
            return TurnDecision(session.phase)
        session.append_turn(ROLE_USER, transcript)
        return await self._respond(session, transcript)

    async def _respond(self, session: InterviewSession, user_input: str) -> TurnDecision:
        """Detect, resolve, then maybe auto-advance. The user turn is already recorded."""
        history = session.history_for_prompt(exclude_last=True)
        starting_phase = session.phase
        phase = starting_phase
        events = []
        validation_message = None

        if session.is_active:
            detection = detect(user_input, phase)
            if detection.should_transition and detection.suggested_phase != phase:
                phase = detection.suggested_phase
                logger.info(
                    "Session %s: %s -> %s (rule=%s)",
                    session.id, starting_phase, phase, detection.rule,
                )
                if detection.reason:
                    events.append(_step_event(
                        f"Moved to step: {phase} - {detection.reason}", phase,
                        autoDetected=True, validationMessage=detection.reason,
                    ))
                else:
                    events.append(_step_event(
                        f"Automatically moved to step: {phase}", phase, autoDetected=True,
                    ))
            elif not detection.should_transition and detection.reason:
                validation_message = detection.reason

        try:
            if session.is_active and session.problem:
                problem_context = build_problem_context(session.problem)
                if validation_message:
                    reply = await self.generator.generate(
                        build_validation_prompt(validation_message, problem_context),
                        user_input,
                        history,
                    )
                else:
                    resolution = await self.resolver.resolve(phase, user_input, problem_context, history)
                    reply = resolution.reply
                    if resolution.should_advance:
                        advanced = next_phase(phase)
                        if advanced != phase:
                            logger.info("Session %s: auto-advancing %s -> %s", session.id, phase, advanced)
                            phase = advanced
                            events.append(_step_event(f"Advanced to {phase}", phase, autoAdvanced=True))
            else:
                reply = await self.generator.generate(SYSTEM_PROMPT, user_input, history)
        except Exception:
            logger.exception("Error generating AI response for session %s", session.id)
            return TurnDecision(starting_phase, [error_event(GENERATION_FAILED_MESSAGE, ERR_GENERATION)])

        session.set_phase(phase)
        session.append_turn(ROLE_ASSISTANT, reply)
        events.append(_reply_event(reply, phase, stepChanged=phase != starting_phase))
        return TurnDecision(phase, events)

    async def handle_code_input(self, session: InterviewSession, payload: dict) -> TurnDecision:
        code = payload.get("code")
        language = payload.get("language")
        if not isinstance(code, str) or not isinstance(language, str) or not language:
            return TurnDecision(session.phase, [error_event("Code and language are required", ERR_VALIDATION)])

        logger.info("Code submission from %s: %s code (%d chars)", session.id, language, len(code))
        session.submitted_code[language] = code
        code_message = format_code_message(code, language)
        session.append_turn(ROLE_USER, code_message)
        history = session.history_for_prompt(exclude_last=True)

        # Submitting code is itself the signal for review; no detection needed.
        starting_phase = session.phase
        events = []
        if starting_phase != CODE_REVIEW:
            logger.info("Session %s: %s -> %s (code submitted)", session.id, starting_phase, CODE_REVIEW)
            events.append(_step_event(
                f"Automatically moved to step: {CODE_REVIEW}", CODE_REVIEW, autoDetected=True,
            ))

        try:
            if session.is_active and session.problem:
                resolution = await self.resolver.resolve(
                    CODE_REVIEW, code_message, build_problem_context(session.problem), history,
                )
                reply = resolution.reply
            else:
                reply = await self.generator.generate(
                    GENERAL_CODE_REVIEW_PROMPT.format(language=language),
                    format_code_review_request(code, language),
                    history,
                )
        except Exception:
            logger.exception("Error generating code review for session %s", session.id)
            return TurnDecision(starting_phase, [error_event(REVIEW_FAILED_MESSAGE, ERR_GENERATION)])

        session.set_phase(CODE_REVIEW)
        session.append_turn(ROLE_ASSISTANT, reply)
        events.append(_reply_event(
            reply, CODE_REVIEW, stepChanged=starting_phase != CODE_REVIEW, type="code_review",
        ))
        return TurnDecision(CODE_REVIEW, events)

    # ------------------------------------------------------------------
    # Manual step control
    # ------------------------------------------------------------------

    async def handle_step_control(self, session: InterviewSession, payload: dict) -> TurnDecision:
        action = payload.get("action")
        if action == ACTION_SET_STEP:
            step = payload.get("step")
            if not is_valid_phase(step):
                return TurnDecision(session.phase, [
                    error_event(f"Unknown interview step: {step}", ERR_VALIDATION),
                ])
            target = step
        elif action == ACTION_NEXT:
            target = next_phase(session.phase)
        elif action == ACTION_PREVIOUS:
            target = previous_phase(session.phase)
        else:
            logger.warning("Ignoring step_control action %r for session %s", action, session.id)
            return TurnDecision(session.phase)

        logger.info("Session %s: %s -> %s (manual %s)", session.id, session.phase, target, action)
        session.set_phase(target)
        return TurnDecision(target, [_step_event(STEP_CHANGED_MESSAGE, target)])

    # Dispatch table: message type -> handler method name
    _HANDLERS = {
        MSG_SESSION_CONTROL: "handle_session_control",
        MSG_TEXT_INPUT: "handle_text_input",
        MSG_VOICE_INPUT: "handle_voice_input",
        MSG_CODE_INPUT: "handle_code_input",
        MSG_STEP_CONTROL: "handle_step_control",
    }
