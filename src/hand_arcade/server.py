"""WebSocket render server for the minigames.

Runs one play session at a time against the server's webcam and pushes
every tick's draw commands to all connected WebSocket clients, which
paint them on a canvas.

Endpoints:
- GET    /api/games               available game types
- GET    /api/status              active session (game, score, time left)
- POST   /api/session/{game_type} start a session, replacing any active one
- DELETE /api/session             stop the active session
- GET    /metrics                 Prometheus metrics
- WS     /ws                      {"type": "tick", "commands": [...], "score": n}

Usage:
    hand-arcade serve
    # or
    uvicorn hand_arcade.server:app --host 0.0.0.0 --port 8765
"""

from __future__ import annotations

import asyncio
import json
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterable, Callable, Optional

import numpy as np
from fastapi import FastAPI, HTTPException, WebSocket, WebSocketDisconnect
from fastapi.responses import PlainTextResponse
from pydantic import BaseModel, Field

from hand_arcade import __version__
from hand_arcade.config import ArcadeConfig, SessionSettings
from hand_arcade.detector import HandDetector, camera_frames, now_ms
from hand_arcade.driver import DetectorUnavailable, FrameDriver, LandmarkDetector
from hand_arcade.games import GAME_TYPES, TickResult, create_game
from hand_arcade.metrics import MetricsCollector
from hand_arcade.session import GameSession, ScoreReporter

logger = logging.getLogger("hand_arcade.server")


# --- State ---

class ServerState:
    def __init__(self):
        self.clients: set[WebSocket] = set()
        self.config = ArcadeConfig()
        self.reporter: Optional[ScoreReporter] = None
        self.metrics = MetricsCollector()
        self.session: Optional[GameSession] = None
        self.driver: Optional[FrameDriver] = None
        self.task: Optional[asyncio.Task] = None
        self.detector_factory: Callable[[], LandmarkDetector] = HandDetector
        self.source_factory: Callable[[], AsyncIterable[tuple[np.ndarray, int]]] = camera_frames

state = ServerState()


def configure(
    config: Optional[ArcadeConfig] = None,
    reporter: Optional[ScoreReporter] = None,
    camera: int = 0,
):
    """Set server-wide configuration before the app starts."""
    if config is not None:
        state.config = config
    state.reporter = reporter
    state.source_factory = lambda: camera_frames(camera)


class SessionRequest(BaseModel):
    duration_ms: Optional[int] = Field(default=None, gt=0)
    seed: Optional[int] = None


# --- Session control ---

async def stop_session():
    """Stop the active driver and wait for its loop to finish."""
    if state.driver is not None:
        state.driver.stop()
    task, state.task = state.task, None
    if task is not None and not task.done():
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass


async def run_session(driver: FrameDriver, detector: LandmarkDetector):
    """Capture loop: camera -> detector -> session -> WebSocket clients."""
    try:
        status = await driver.run(state.source_factory(), render=broadcast_tick)
        logger.info("Session loop ended: %s", status)
    except DetectorUnavailable as e:
        logger.error("Stopping session, detector unavailable: %s", e)
        driver.stop()
    except (RuntimeError, ImportError) as e:
        logger.error("Stopping session: %s", e)
        driver.stop()
    finally:
        await close_when_idle(driver, detector)


async def close_when_idle(driver: FrameDriver, detector: LandmarkDetector):
    """Close the detector once the driver's worker thread has let go of it."""
    idle = asyncio.ensure_future(driver.wait_idle())
    try:
        await asyncio.shield(idle)
    except asyncio.CancelledError:
        await idle
        raise
    finally:
        close = getattr(detector, "close", None)
        if close is not None:
            close()


def _status() -> dict:
    if state.session is None:
        return {"game": None, "score": 0, "running": False, "game_over": False, "time_left": None}
    return state.session.status(now_ms())


# --- App ---

@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    await stop_session()


app = FastAPI(title="HandArcade", version=__version__, lifespan=lifespan)


@app.get("/api/games")
async def list_games():
    return {"games": GAME_TYPES}


@app.get("/api/status")
async def api_status():
    return {**_status(), "clients": len(state.clients)}


@app.post("/api/session/{game_type}")
async def start_session(game_type: str, request: Optional[SessionRequest] = None):
    if game_type not in GAME_TYPES:
        raise HTTPException(status_code=404, detail=f"Unknown game type: {game_type}")
    request = request or SessionRequest()

    await stop_session()

    rng = np.random.default_rng(request.seed) if request.seed is not None else None
    game = create_game(game_type, state.config, rng=rng)
    settings = state.config.session
    if request.duration_ms is not None:
        settings = SessionSettings(game_duration_ms=request.duration_ms)

    try:
        detector = state.detector_factory()
    except ImportError as e:
        raise HTTPException(status_code=503, detail=str(e)) from e

    state.session = GameSession(game, settings=settings, reporter=state.reporter)
    state.driver = FrameDriver(detector, state.session, metrics=state.metrics)
    state.metrics.record_session(game_type)
    state.session.start(now_ms())
    state.task = asyncio.create_task(run_session(state.driver, detector))
    return _status()


@app.delete("/api/session")
async def delete_session():
    if state.session is None:
        raise HTTPException(status_code=404, detail="No active session")
    await stop_session()
    return _status()


@app.get("/metrics")
async def metrics():
    state.metrics.set_connections(len(state.clients))
    return PlainTextResponse(
        state.metrics.render(),
        media_type="text/plain; version=0.0.4; charset=utf-8",
    )


@app.websocket("/ws")
async def websocket_endpoint(ws: WebSocket):
    await ws.accept()
    state.clients.add(ws)
    logger.info("Client connected (%d total)", len(state.clients))

    try:
        await ws.send_json({"type": "connected", "games": GAME_TYPES, "status": _status()})

        while True:
            try:
                msg = await asyncio.wait_for(ws.receive_text(), timeout=30)
                data = json.loads(msg)
                if data.get("type") == "ping":
                    await ws.send_json({"type": "pong"})
                elif data.get("type") == "status":
                    await ws.send_json({"type": "status", **_status()})
            except asyncio.TimeoutError:
                await ws.send_json({"type": "ping"})
    except WebSocketDisconnect:
        pass
    except (ValueError, RuntimeError) as e:
        logger.debug("WS error: %s", e)
    finally:
        state.clients.discard(ws)
        logger.info("Client disconnected (%d remaining)", len(state.clients))


async def broadcast(message: dict):
    """Send message to all clients, dropping the ones that went away."""
    if not state.clients:
        return
    dead = set()
    payload = json.dumps(message)
    # Snapshot: clients can disconnect while a send is awaited
    for ws in list(state.clients):
        try:
            await ws.send_text(payload)
        except Exception:
            dead.add(ws)
    state.clients -= dead


async def broadcast_tick(image: np.ndarray, result: TickResult):
    score = state.session.score if state.session is not None else 0
    await broadcast({
        "type": "tick",
        "commands": [cmd.to_dict() for cmd in result.commands],
        "score": score,
    })
