"""Shared fixtures for the mock interviewer test suite."""

import random
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from httpx import ASGITransport, AsyncClient

from interviewer.orchestrator import Orchestrator
from interviewer.session import SessionStore, STATUS_ACTIVE

FAKE_REPLY = "Interviewer reply"


def make_generator(reply=FAKE_REPLY, side_effect=None):
    """A stand-in for the model client: ``generate`` is an AsyncMock."""
    generator = MagicMock()
    generator.generate = AsyncMock(return_value=reply, side_effect=side_effect)
    return generator


def make_active_session(store, problem, phase):
    """Create a session that has already started an interview at *phase*."""
    session = store.create()
    session.status = STATUS_ACTIVE
    session.problem = problem
    session.phase = phase
    return session


def filter_events(events, msg_type):
    return [e for e in events if e["type"] == msg_type]


@pytest.fixture
def sample_problem():
    """A minimal problem dict matching the catalog schema."""
    return {
        "id": "two-sum",
        "title": "Two Sum",
        "difficulty": "Easy",
        "category": "array",
        "description": "Given an array of integers nums and an integer target, "
                       "return indices of the two numbers such that they add up to target.",
        "examples": [
            {
                "input": "nums = [2,7,11,15], target = 9",
                "output": "[0,1]",
                "explanation": "Because nums[0] + nums[1] == 9, we return [0, 1].",
            }
        ],
        "constraints": ["2 <= nums.length <= 10^4", "Only one valid answer exists."],
    }


@pytest.fixture
def generator():
    return make_generator()


@pytest.fixture
def store():
    return SessionStore()


@pytest.fixture
def orchestrator(generator, store):
    return Orchestrator(generator, store, rng=random.Random(1234))


@pytest.fixture
def app(generator):
    """The FastAPI app with the model client replaced by a mock.

    A fresh SessionStore is swapped in so tests never see each other's
    sessions.
    """
    from interviewer import server

    fresh_store = SessionStore()
    fresh_orchestrator = Orchestrator(generator, fresh_store, rng=random.Random(1234))
    with patch.object(server, "generator", generator), \
         patch.object(server, "session_store", fresh_store), \
         patch.object(server, "orchestrator", fresh_orchestrator):
        yield server.app


@pytest.fixture
async def client(app):
    """Async HTTP client for testing REST endpoints."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as ac:
        yield ac
