"""WebSocket interview handler: one ``WebSocketConnection`` per client.

The connection owns nothing but the socket. Interview state lives in the
``SessionStore`` and all decisions are made by the ``Orchestrator``; this
module reads frames, hands them over, and writes back whatever events the
orchestrator returns.
"""

import asyncio
import json
import logging

from fastapi import WebSocket, WebSocketDisconnect

from .orchestrator import Orchestrator
from .session import SessionStore
from .ws_constants import (
    MSG_SESSION_CONTROL,
    CONNECTED_MESSAGE,
    PROCESSING_FAILED_MESSAGE,
    FRAME_TOO_LARGE_MESSAGE,
    BUSY_MESSAGE,
    ERR_VALIDATION,
    event,
    error_event,
    wire,
)

logger = logging.getLogger(__name__)

MAX_FRAME_SIZE = 256 * 1024  # 256KB, generous enough for pasted code
MAX_PENDING_FRAMES = 8  # frames waiting behind the one being handled


def _worker_done_callback(task: asyncio.Task):
    """Log exceptions from the frame worker instead of silently swallowing."""
    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None:
        logger.error("Frame worker failed: %s", exc, exc_info=exc)


class WebSocketConnection:
    """Holds the socket and session ID for a single connection."""

    def __init__(self, websocket: WebSocket, *, store: SessionStore, orchestrator: Orchestrator):
        self.ws = websocket
        self.store = store
        self.orchestrator = orchestrator
        self.session_id: str | None = None
        self._ws_alive = True
        self._queue: asyncio.Queue[str] = asyncio.Queue(maxsize=MAX_PENDING_FRAMES)
        self._worker: asyncio.Task | None = None

    async def safe_send(self, data: dict) -> bool:
        """Send JSON to client, return False if disconnected."""
        if not self._ws_alive:
            return False
        try:
            await self.ws.send_json(data)
            return True
        except (WebSocketDisconnect, RuntimeError):
            self._ws_alive = False
            return False

    async def send_events(self, events: list[dict]) -> None:
        for evt in events:
            if not await self.safe_send(wire(evt)):
                break

    def open(self) -> str:
        session = self.store.create()
        self.session_id = session.id
        logger.info("New WebSocket connection: %s", session.id)
        return session.id

    async def handle_frame(self, data: str) -> None:
        size = len(data.encode("utf-8"))
        if size > MAX_FRAME_SIZE:
            logger.warning("Oversized frame from %s (%d bytes)", self.session_id, size)
            await self.send_events([error_event(FRAME_TOO_LARGE_MESSAGE, ERR_VALIDATION)])
            return
        try:
            msg = json.loads(data)
        except (json.JSONDecodeError, ValueError) as e:
            logger.warning("Malformed JSON from %s: %s", self.session_id, e)
            await self.send_events([error_event(PROCESSING_FAILED_MESSAGE, ERR_VALIDATION)])
            return

        logger.debug("Message from %s: %s", self.session_id, msg.get("type") if isinstance(msg, dict) else None)
        events = await self.orchestrator.dispatch(self.session_id, msg)
        await self.send_events(events)

    async def _process_frames(self) -> None:
        """Handle queued frames strictly in arrival order."""
        while True:
            data = await self._queue.get()
            try:
                await self.handle_frame(data)
            except Exception:
                logger.exception("Unexpected error handling frame for session %s", self.session_id)
                await self.send_events([error_event(PROCESSING_FAILED_MESSAGE)])

    async def run(self) -> None:
        """Main message loop.

        Reading and processing are split so a disconnect is noticed even
        while a slow model call is in flight; ``cleanup()`` then cancels
        that call.

        At most ``MAX_PENDING_FRAMES`` frames wait behind the one being
        handled; anything beyond that is refused with a busy error.
        """
        session_id = self.open()
        await self.safe_send(wire(event(
            MSG_SESSION_CONTROL, sessionId=session_id, message=CONNECTED_MESSAGE,
        )))
        self._worker = asyncio.ensure_future(self._process_frames())
        self._worker.add_done_callback(_worker_done_callback)
        try:
            while self._ws_alive:
                data = await self.ws.receive_text()
                try:
                    self._queue.put_nowait(data)
                except asyncio.QueueFull:
                    logger.warning("Dropping frame from %s: %d already pending",
                                   self.session_id, self._queue.qsize())
                    await self.send_events([error_event(BUSY_MESSAGE, ERR_VALIDATION)])
        except (WebSocketDisconnect, RuntimeError):
            pass

    def cleanup(self) -> None:
        """Destroy the session and stop the frame worker.

        A turn still in flight is cancelled; queued frames are dropped.
        """
        if self.session_id is not None:
            self.store.remove(self.session_id)
            logger.info("WebSocket disconnected: %s", self.session_id)
        self._ws_alive = False
        if self._worker is not None and not self._worker.done():
            self._worker.cancel()


# ------------------------------------------------------------------
# FastAPI endpoint -- this is what server.py mounts at /ws
# ------------------------------------------------------------------

async def websocket_interview(websocket: WebSocket, *, store: SessionStore, orchestrator: Orchestrator) -> None:
    """WebSocket endpoint handler for /ws."""
    await websocket.accept()
    connection = WebSocketConnection(websocket, store=store, orchestrator=orchestrator)
    try:
        await connection.run()
    finally:
        connection.cleanup()
