"""Per-connection interview session state."""

import asyncio
import time
import uuid
from dataclasses import dataclass, field

from .phases import PROBLEM_EXPLANATION, coerce_phase

STATUS_IDLE = "idle"
STATUS_ACTIVE = "active"
STATUS_COMPLETED = "completed"

ROLE_USER = "user"
ROLE_ASSISTANT = "assistant"


def _now_ms() -> int:
    return int(time.time() * 1000)


@dataclass(frozen=True)
class Turn:
    role: str
    content: str
    timestamp: int = field(default_factory=_now_ms)

    def to_dict(self) -> dict:
        return {"role": self.role, "content": self.content, "timestamp": self.timestamp}


@dataclass
class InterviewSession:
    """Holds all mutable state for one candidate connection.

    ``history`` only ever grows through ``append_turn``; turns are frozen
    once recorded. ``lock`` serializes message handling for this session.
    """

    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    status: str = STATUS_IDLE
    phase: str = PROBLEM_EXPLANATION
    problem: dict | None = None
    submitted_code: dict[str, str] = field(default_factory=dict)
    start_time: int = field(default_factory=_now_ms)
    end_time: int | None = None
    closed: bool = False
    _turns: list[Turn] = field(default_factory=list, repr=False)
    lock: asyncio.Lock = field(default_factory=asyncio.Lock, repr=False, compare=False)

    @property
    def history(self) -> tuple[Turn, ...]:
        return tuple(self._turns)

    @property
    def is_active(self) -> bool:
        return self.status == STATUS_ACTIVE

    def append_turn(self, role: str, content: str) -> Turn:
        turn = Turn(role=role, content=content)
        self._turns.append(turn)
        return turn

    def set_phase(self, phase: str) -> None:
        self.phase = coerce_phase(phase)

    def history_for_prompt(self, *, exclude_last: bool = False) -> list[dict]:
        """Role/content pairs for the model, oldest first."""
        turns = self._turns[:-1] if exclude_last else self._turns
        return [{"role": t.role, "content": t.content} for t in turns]

    def start(self, problem: dict, phase: str) -> None:
        self.status = STATUS_ACTIVE
        self.problem = problem
        self.start_time = _now_ms()
        self.end_time = None
        self.set_phase(phase)

    def complete(self) -> None:
        self.status = STATUS_COMPLETED
        self.end_time = _now_ms()

    def snapshot(self) -> dict:
        return {
            "id": self.id,
            "status": self.status,
            "currentStep": self.phase,
            "problem": self.problem,
            "userCode": dict(self.submitted_code),
            "startTime": self.start_time,
            "endTime": self.end_time,
            "messages": [t.to_dict() for t in self._turns],
        }


class SessionStore:
    """Process-wide map of live sessions, keyed by session ID.

    A session lives exactly as long as its connection: ``create`` on
    connect, ``remove`` on close.
    """

    def __init__(self):
        self._sessions: dict[str, InterviewSession] = {}

    def create(self) -> InterviewSession:
        session = InterviewSession()
        self._sessions[session.id] = session
        return session

    def get(self, session_id: str) -> InterviewSession | None:
        return self._sessions.get(session_id)

    def remove(self, session_id: str) -> InterviewSession | None:
        session = self._sessions.pop(session_id, None)
        if session is not None:
            session.closed = True
        return session

    def ids(self) -> list[str]:
        return list(self._sessions)

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, session_id) -> bool:
        return session_id in self._sessions
