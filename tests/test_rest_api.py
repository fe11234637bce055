"""Tests for interviewer.server -- REST API endpoints.

These tests use httpx.AsyncClient with ASGITransport to call the FastAPI app
directly (no real server needed). The model client is mocked via the `app`
fixture in conftest.
"""

import pytest

from interviewer.phases import PHASES
from tests.conftest import FAKE_REPLY


# ---------------------------------------------------------------------------
# Health check endpoint
# ---------------------------------------------------------------------------

class TestHealthCheckEndpoint:

    @pytest.mark.asyncio
    async def test_health_check(self, client):
        resp = await client.get("/health")
        assert resp.status_code == 200
        data = resp.json()
        assert data["status"] == "healthy"
        assert data["sessions"] == 0
        assert "timestamp" in data

    @pytest.mark.asyncio
    async def test_health_counts_live_sessions(self, client):
        from interviewer import server

        server.session_store.create()
        resp = await client.get("/health")
        assert resp.json()["sessions"] == 1


# ---------------------------------------------------------------------------
# Problems endpoints
# ---------------------------------------------------------------------------

class TestProblemsEndpoint:

    @pytest.mark.asyncio
    async def test_list_problems_returns_list(self, client, sample_problem):
        resp = await client.get("/api/problems")
        assert resp.status_code == 200
        data = resp.json()
        assert isinstance(data, list)
        assert sample_problem["id"] in [p["id"] for p in data]

    @pytest.mark.asyncio
    async def test_list_problems_filters(self, client):
        resp = await client.get("/api/problems", params={"category": "array", "difficulty": "Easy"})
        data = resp.json()
        assert data
        assert all(p["category"] == "array" and p["difficulty"] == "Easy" for p in data)

    @pytest.mark.asyncio
    async def test_list_problems_no_match(self, client):
        resp = await client.get("/api/problems", params={"category": "astrology"})
        assert resp.status_code == 200
        assert resp.json() == []

    @pytest.mark.asyncio
    async def test_categories(self, client):
        resp = await client.get("/api/categories")
        assert resp.status_code == 200
        assert "array" in resp.json()

    @pytest.mark.asyncio
    async def test_get_problem(self, client):
        resp = await client.get("/api/problems/two-sum")
        assert resp.status_code == 200
        data = resp.json()
        assert data["title"] == "Two Sum"
        assert data["examples"]

    @pytest.mark.asyncio
    async def test_get_problem_not_found(self, client):
        resp = await client.get("/api/problems/nonexistent-problem-xyz")
        assert resp.status_code == 404


# ---------------------------------------------------------------------------
# Steps and sessions
# ---------------------------------------------------------------------------

class TestStepsEndpoint:

    @pytest.mark.asyncio
    async def test_steps_in_order(self, client):
        resp = await client.get("/api/steps")
        assert resp.status_code == 200
        data = resp.json()
        assert [s["id"] for s in data] == list(PHASES)
        assert [s["index"] for s in data] == list(range(len(PHASES)))
        assert data[0]["label"] == "Problem Explanation"


class TestSessionEndpoint:

    @pytest.mark.asyncio
    async def test_snapshot(self, client, sample_problem):
        from interviewer import server

        session = server.session_store.create()
        session.start(sample_problem, "coding")
        resp = await client.get(f"/api/sessions/{session.id}")
        assert resp.status_code == 200
        data = resp.json()
        assert data["id"] == session.id
        assert data["currentStep"] == "coding"
        assert data["status"] == "active"

    @pytest.mark.asyncio
    async def test_unknown_session(self, client):
        resp = await client.get("/api/sessions/does-not-exist")
        assert resp.status_code == 404


# ---------------------------------------------------------------------------
# Model reachability check
# ---------------------------------------------------------------------------

class TestGenerateCheckEndpoint:

    @pytest.mark.asyncio
    async def test_success(self, client, generator):
        resp = await client.post("/api/test-generate", json={"message": "ping"})
        assert resp.status_code == 200
        data = resp.json()
        assert data["success"] is True
        assert data["response"] == FAKE_REPLY
        assert "timestamp" in data
        assert generator.generate.await_args.args[1] == "ping"

    @pytest.mark.asyncio
    async def test_default_message(self, client, generator):
        resp = await client.post("/api/test-generate", json={})
        assert resp.status_code == 200
        assert generator.generate.await_args.args[1] == "Hello, can you help me with coding interviews?"

    @pytest.mark.asyncio
    async def test_failure(self, client, generator):
        generator.generate.side_effect = RuntimeError("model unreachable")
        resp = await client.post("/api/test-generate", json={"message": "ping"})
        assert resp.status_code == 500
        assert resp.json() == {"success": False, "error": "model unreachable"}

    @pytest.mark.asyncio
    async def test_oversized_message_rejected(self, client):
        resp = await client.post("/api/test-generate", json={"message": "x" * 20000})
        assert resp.status_code == 422
