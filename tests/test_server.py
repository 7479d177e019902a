"""Tests for the render server REST and WebSocket endpoints."""

import asyncio
import json
import threading
import time

import numpy as np
import pytest

try:
    from fastapi.testclient import TestClient
    _HAS_TESTCLIENT = True
except ImportError:
    _HAS_TESTCLIENT = False

try:
    from hand_arcade.metrics import MetricsCollector
    from hand_arcade.server import app, broadcast, run_session, state, stop_session
    _HAS_SERVER = True
except ImportError:
    _HAS_SERVER = False

from hand_arcade.config import SessionSettings
from hand_arcade.detector import now_ms
from hand_arcade.driver import FrameDriver
from hand_arcade.games import create_game
from hand_arcade.session import GameSession
from hand_arcade.synthetic import pose_hand

pytestmark = pytest.mark.skipif(
    not (_HAS_TESTCLIENT and _HAS_SERVER),
    reason="fastapi not installed"
)


class FakeDetector:
    def __init__(self):
        self.closed = False

    def detect(self, image, timestamp_ms):
        return [pose_hand()]

    def close(self):
        self.closed = True


async def fake_frames():
    image = np.zeros((480, 640, 3), dtype=np.uint8)
    while True:
        yield image, now_ms()
        await asyncio.sleep(0.01)


@pytest.fixture
def client():
    # Never touch a real camera
    state.clients = set()
    state.session = None
    state.driver = None
    state.task = None
    state.metrics = MetricsCollector()
    state.detector_factory = FakeDetector
    state.source_factory = fake_frames
    with TestClient(app, raise_server_exceptions=False) as c:
        yield c
    state.session = None
    state.driver = None


class TestRESTEndpoints:
    def test_list_games(self, client):
        resp = client.get("/api/games")
        assert resp.status_code == 200
        assert "SimonSays" in resp.json()["games"]
        assert len(resp.json()["games"]) == 6

    def test_status_idle(self, client):
        data = client.get("/api/status").json()
        assert data["game"] is None
        assert data["running"] is False
        assert "clients" in data

    def test_start_session(self, client):
        resp = client.post("/api/session/SimonSays", json={"duration_ms": 5000, "seed": 1})
        assert resp.status_code == 200
        data = resp.json()
        assert data["game"] == "SimonSays"
        assert data["running"] is True
        assert data["time_left"] == 5

        status = client.get("/api/status").json()
        assert status["game"] == "SimonSays"

    def test_start_without_body(self, client):
        resp = client.post("/api/session/QuickReaction")
        assert resp.status_code == 200
        assert resp.json()["time_left"] == 60

    def test_unknown_game(self, client):
        assert client.post("/api/session/Pong").status_code == 404

    def test_invalid_duration(self, client):
        resp = client.post("/api/session/BallGame", json={"duration_ms": 0})
        assert resp.status_code == 422

    def test_stop_session(self, client):
        client.post("/api/session/BallGame")
        resp = client.delete("/api/session")
        assert resp.status_code == 200
        assert resp.json()["running"] is False
        assert resp.json()["game_over"] is False
        assert state.driver.stopped

    def test_stop_without_session(self, client):
        assert client.delete("/api/session").status_code == 404

    def test_new_session_replaces_old(self, client):
        client.post("/api/session/BallGame")
        first = state.driver
        client.post("/api/session/SimonSays")
        assert first.stopped
        assert client.get("/api/status").json()["game"] == "SimonSays"

    def test_detector_missing(self, client):
        def missing():
            raise ImportError("mediapipe is required")

        state.detector_factory = missing
        resp = client.post("/api/session/SimonSays")
        assert resp.status_code == 503

    def test_metrics_endpoint(self, client):
        client.post("/api/session/SwipeChallenge")
        resp = client.get("/metrics")
        assert resp.status_code == 200
        assert "hand_arcade_ticks_total" in resp.text
        assert 'hand_arcade_sessions_total{game="SwipeChallenge"} 1' in resp.text


class TestWebSocket:
    def test_ws_connect(self, client):
        with client.websocket_connect("/ws") as ws:
            msg = ws.receive_json()
            assert msg["type"] == "connected"
            assert "BallGame" in msg["games"]

    def test_ws_ping(self, client):
        with client.websocket_connect("/ws") as ws:
            ws.receive_json()
            ws.send_text('{"type": "ping"}')
            assert ws.receive_json()["type"] == "pong"

    def test_ws_receives_ticks(self, client):
        with client.websocket_connect("/ws") as ws:
            ws.receive_json()
            client.post("/api/session/QuickReaction", json={"seed": 3})
            msg = ws.receive_json()
            assert msg["type"] == "tick"
            assert msg["score"] >= 0
            types = {c["type"] for c in msg["commands"]}
            assert "circle" in types
            assert "text" in types
            client.delete("/api/session")


class FakeSocket:
    def __init__(self, on_send=None, error=None):
        self.on_send = on_send
        self.error = error
        self.received = []

    async def send_text(self, payload):
        if self.on_send is not None:
            self.on_send()
        if self.error is not None:
            raise self.error
        self.received.append(json.loads(payload))


class SlowDetector:
    def __init__(self, delay=0.3):
        self.delay = delay
        self.entered = threading.Event()
        self.busy = False
        self.closed_while_busy = None

    def detect(self, image, timestamp_ms):
        self.busy = True
        self.entered.set()
        time.sleep(self.delay)
        self.busy = False
        return [pose_hand()]

    def close(self):
        self.closed_while_busy = self.busy


@pytest.fixture
def bare_state():
    state.clients = set()
    state.session = None
    state.driver = None
    state.task = None
    state.source_factory = fake_frames
    yield state
    state.clients = set()
    state.session = None
    state.driver = None
    state.task = None


class TestBroadcast:
    def test_client_leaving_mid_broadcast(self, bare_state):
        leaver = FakeSocket()
        stayers = [
            FakeSocket(on_send=lambda: bare_state.clients.discard(leaver)),
            FakeSocket(on_send=lambda: bare_state.clients.discard(leaver)),
        ]
        bare_state.clients = {leaver, *stayers}

        asyncio.run(broadcast({"type": "tick", "commands": [], "score": 0}))

        assert bare_state.clients == set(stayers)
        for ws in stayers:
            assert ws.received == [{"type": "tick", "commands": [], "score": 0}]

    def test_failed_send_drops_client(self, bare_state):
        broken = FakeSocket(error=OSError("connection reset"))
        healthy = FakeSocket()
        bare_state.clients = {broken, healthy}

        asyncio.run(broadcast({"type": "ping"}))

        assert bare_state.clients == {healthy}
        assert healthy.received == [{"type": "ping"}]


class TestSessionShutdown:
    def test_detector_closed_after_detection_finishes(self, bare_state):
        detector = SlowDetector()
        game = create_game("SimonSays", rng=np.random.default_rng(0))
        session = GameSession(game, SessionSettings(game_duration_ms=60000))

        async def main():
            driver = FrameDriver(detector, session)
            bare_state.driver = driver
            session.start(now_ms())
            bare_state.task = asyncio.create_task(run_session(driver, detector))
            await asyncio.to_thread(detector.entered.wait, 5)
            await stop_session()
            return driver

        driver = asyncio.run(main())
        assert driver.stopped
        assert not session.running
        assert detector.closed_while_busy is False
