import sys
if sys.platform == "win32":
    import asyncio
    asyncio.set_event_loop_policy(asyncio.WindowsProactorEventLoopPolicy())

from datetime import datetime, timezone
import logging
import os

from fastapi import FastAPI, HTTPException, WebSocket
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from .llm import ClaudeGenerator
from .orchestrator import Orchestrator
from .phases import PHASES, PHASE_LABELS
from .problems import list_problems, list_categories, get_problem
from .prompts import SYSTEM_PROMPT, TEST_GENERATE_DEFAULT_MESSAGE
from .session import SessionStore
from .ws_handler import websocket_interview

logger = logging.getLogger(__name__)

app = FastAPI(title="Mock Interviewer")

# --- CORS Configuration ---

_DEFAULT_CORS_ORIGINS = "http://localhost:3000,http://localhost:5173"


def _get_cors_origins() -> list[str]:
    """Get CORS origins from environment variable or use default."""
    cors_origins_str = os.environ.get("INTERVIEWER_CORS_ORIGINS", _DEFAULT_CORS_ORIGINS)
    origins = [origin.strip() for origin in cors_origins_str.split(",") if origin.strip()]
    return origins if origins else _DEFAULT_CORS_ORIGINS.split(",")


app.add_middleware(
    CORSMiddleware,
    allow_origins=_get_cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

generator = ClaudeGenerator()
session_store = SessionStore()
orchestrator = Orchestrator(generator, session_store)


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


# --- API Routes ---

@app.get("/health")
async def health():
    return {
        "status": "healthy",
        "timestamp": _timestamp(),
        "sessions": len(session_store),
    }


@app.get("/api/problems")
async def api_list_problems(category: str | None = None, difficulty: str | None = None):
    return list_problems(category=category, difficulty=difficulty)


@app.get("/api/categories")
async def api_list_categories():
    return list_categories()


@app.get("/api/problems/{problem_id}")
async def api_get_problem(problem_id: str):
    problem = get_problem(problem_id)
    if not problem:
        raise HTTPException(status_code=404, detail="Problem not found")
    return problem


@app.get("/api/steps")
async def api_list_steps():
    return [{"id": phase, "label": PHASE_LABELS[phase], "index": i} for i, phase in enumerate(PHASES)]


@app.get("/api/sessions/{session_id}")
async def api_get_session(session_id: str):
    session = session_store.get(session_id)
    if session is None:
        raise HTTPException(status_code=404, detail="Session not found")
    return session.snapshot()


class GenerateCheckRequest(BaseModel):
    message: str = Field(TEST_GENERATE_DEFAULT_MESSAGE, max_length=10240)


@app.post("/api/test-generate")
async def api_test_generate(req: GenerateCheckRequest):
    """Round-trip a single message through the model to check it is reachable."""
    try:
        response = await generator.generate(SYSTEM_PROMPT, req.message)
    except Exception as exc:
        logger.exception("Test generation failed")
        return JSONResponse(status_code=500, content={"success": False, "error": str(exc) or "Unknown error"})
    return {"success": True, "response": response, "timestamp": _timestamp()}


# --- WebSocket ---

@app.websocket("/ws")
async def ws_interview(websocket: WebSocket):
    await websocket_interview(websocket, store=session_store, orchestrator=orchestrator)


@app.websocket("/ws/interview")
async def ws_interview_alias(websocket: WebSocket):
    await websocket_interview(websocket, store=session_store, orchestrator=orchestrator)
