"""Tests for the async frame driver."""

import asyncio
import threading
import time

import numpy as np
import pytest

from hand_arcade.config import SessionSettings
from hand_arcade.driver import DetectorUnavailable, FrameDriver
from hand_arcade.games import create_game
from hand_arcade.metrics import MetricsCollector
from hand_arcade.session import GameSession
from hand_arcade.synthetic import pose_hand

IMAGE = np.zeros((480, 640, 3), dtype=np.uint8)


class FakeDetector:
    def __init__(self, hands=None, delay=0.0):
        self.hands = hands
        self.delay = delay
        self.calls = []
        self.active = 0
        self.max_active = 0
        self._lock = threading.Lock()

    def detect(self, image, timestamp_ms):
        with self._lock:
            self.active += 1
            self.max_active = max(self.max_active, self.active)
        try:
            self.calls.append(timestamp_ms)
            if self.delay:
                time.sleep(self.delay)
            return self.hands
        finally:
            with self._lock:
                self.active -= 1


class BlockingDetector:
    def __init__(self):
        self.entered = threading.Event()
        self.release = threading.Event()

    def detect(self, image, timestamp_ms):
        self.entered.set()
        self.release.wait(timeout=5)
        return [pose_hand()]


class FailingDetector:
    def detect(self, image, timestamp_ms):
        raise OSError("camera unplugged")


def make_session(game_type="QuickReaction", duration_ms=60000):
    game = create_game(game_type, rng=np.random.default_rng(0))
    session = GameSession(game, SessionSettings(game_duration_ms=duration_ms))
    session.start(0)
    return session


async def frames(n, step=33):
    for i in range(n):
        yield IMAGE, i * step
        await asyncio.sleep(0)


class TestStep:
    def test_tick_with_hand(self):
        session = make_session()
        driver = FrameDriver(FakeDetector([pose_hand()]), session)
        result = asyncio.run(driver.step(IMAGE, 10))
        assert result is not None
        assert any(c.type == "keypoint" for c in result.commands)
        assert driver.frames == 1

    def test_canvas_size_from_image(self):
        session = make_session()
        driver = FrameDriver(FakeDetector([pose_hand()]), session)
        result = asyncio.run(driver.step(IMAGE, 10))
        marker = next(c for c in result.commands if c.type == "keypoint")
        assert marker.x == pytest.approx(0.45 * 640)

    def test_explicit_canvas_size(self):
        session = make_session()
        driver = FrameDriver(FakeDetector([pose_hand()]), session)
        result = asyncio.run(driver.step(IMAGE, 10, canvas_size=(1280, 960)))
        marker = next(c for c in result.commands if c.type == "keypoint")
        assert marker.x == pytest.approx(0.45 * 1280)

    @pytest.mark.parametrize("hands", [None, []])
    def test_no_hand(self, hands):
        session = make_session()
        driver = FrameDriver(FakeDetector(hands), session)
        result = asyncio.run(driver.step(IMAGE, 10))
        assert not any(c.type == "keypoint" for c in result.commands)

    def test_detector_failure(self):
        driver = FrameDriver(FailingDetector(), make_session())
        with pytest.raises(DetectorUnavailable, match="camera unplugged"):
            asyncio.run(driver.step(IMAGE, 10))

    def test_one_detection_in_flight(self):
        detector = FakeDetector([pose_hand()], delay=0.02)
        driver = FrameDriver(detector, make_session())

        async def main():
            return await asyncio.gather(*(driver.step(IMAGE, ts) for ts in (0, 33, 66, 99)))

        results = asyncio.run(main())
        assert all(r is not None for r in results)
        assert detector.max_active == 1
        assert len(detector.calls) == 4


class TestStop:
    def test_stop_discards_in_flight_result(self):
        detector = BlockingDetector()
        session = make_session()
        driver = FrameDriver(detector, session)

        async def main():
            task = asyncio.create_task(driver.step(IMAGE, 10))
            await asyncio.to_thread(detector.entered.wait, 5)
            driver.stop()
            try:
                return await task
            finally:
                detector.release.set()

        assert asyncio.run(main()) is None
        assert driver.stopped
        assert not session.running
        assert session.game.target is None
        assert driver.frames == 0

    def test_wait_idle_outlasts_discarded_detection(self):
        detector = BlockingDetector()
        driver = FrameDriver(detector, make_session())

        async def main():
            task = asyncio.create_task(driver.step(IMAGE, 10))
            await asyncio.to_thread(detector.entered.wait, 5)
            driver.stop()
            assert await task is None

            idle = asyncio.create_task(driver.wait_idle())
            await asyncio.sleep(0.05)
            still_waiting = not idle.done()
            detector.release.set()
            await idle
            return still_waiting

        assert asyncio.run(main())

    def test_wait_idle_without_detection(self):
        driver = FrameDriver(FakeDetector(), make_session())
        asyncio.run(driver.wait_idle())

    def test_wait_idle_swallows_detector_error(self):
        driver = FrameDriver(FailingDetector(), make_session())

        async def main():
            with pytest.raises(DetectorUnavailable):
                await driver.step(IMAGE, 10)
            await driver.wait_idle()

        asyncio.run(main())

    def test_step_after_stop(self):
        detector = FakeDetector([pose_hand()])
        driver = FrameDriver(detector, make_session())
        driver.stop()
        assert asyncio.run(driver.step(IMAGE, 10)) is None
        assert detector.calls == []

    def test_stop_twice(self):
        driver = FrameDriver(FakeDetector(), make_session())
        driver.stop()
        driver.stop()
        assert driver.stopped


class TestRun:
    def test_runs_until_game_over(self):
        session = make_session("SimonSays", duration_ms=1000)
        driver = FrameDriver(FakeDetector([pose_hand()]), session)
        rendered = []

        status = asyncio.run(driver.run(frames(100), render=lambda img, r: rendered.append(r)))

        assert status["game_over"]
        # Frames at 0..990 ms tick the game, the one at 1023 ms ends it
        assert len(rendered) == 32
        assert "Game Over!" in [c.text for c in rendered[-1].commands]

    def test_async_render(self):
        session = make_session(duration_ms=60000)
        driver = FrameDriver(FakeDetector(), session)
        rendered = []

        async def render(image, result):
            rendered.append(result)

        asyncio.run(driver.run(frames(5), render=render))
        assert len(rendered) == 5

    def test_stop_from_render_ends_run(self):
        session = make_session()
        driver = FrameDriver(FakeDetector(), session)
        rendered = []

        def render(image, result):
            rendered.append(result)
            if len(rendered) == 3:
                driver.stop()

        status = asyncio.run(driver.run(frames(50), render=render))
        assert len(rendered) == 3
        assert not status["running"]
        assert not status["game_over"]


class TestMetrics:
    def test_ticks_and_scores_recorded(self):
        metrics = MetricsCollector()
        session = make_session("SimonSays")
        detector = FakeDetector(None)
        driver = FrameDriver(detector, session, metrics=metrics)

        async def main():
            await driver.step(IMAGE, 0)
            detector.hands = [pose_hand()]
            session.game.prompt = session.game.classifier.classify(pose_hand())
            await driver.step(IMAGE, 100)

        asyncio.run(main())
        assert metrics.ticks_total == 2
        assert metrics.score_counts == {"SimonSays": 1}
