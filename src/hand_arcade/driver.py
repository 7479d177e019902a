"""Feeds camera frames through the detector into a running session.

Detection runs in a worker thread so the event loop keeps serving
clients. At most one detection is in flight; a frame that arrives while
another is being processed waits for it. Stopping the driver throws
away the pending detection's late result, so the game never sees a
frame after ``stop()``. The worker thread itself runs to completion;
await ``wait_idle()`` before closing the detector.

Usage:
    driver = FrameDriver(HandDetector(), session)
    session.start(now_ms())
    async for image, ts in camera_frames():
        result = await driver.step(image, ts)
        if result is None:
            break
"""

from __future__ import annotations

import asyncio
import inspect
import logging
import time
from typing import AsyncIterable, Callable, Optional, Protocol

import numpy as np

from hand_arcade.frame import Frame
from hand_arcade.games.base import ScoreEvent, TickResult
from hand_arcade.metrics import MetricsCollector
from hand_arcade.session import GameSession

logger = logging.getLogger("hand_arcade.driver")


class DetectorUnavailable(RuntimeError):
    """The hand detector failed; the frame loop cannot continue."""


class LandmarkDetector(Protocol):
    def detect(self, image: np.ndarray, timestamp_ms: int) -> Optional[list]: ...


RenderCallback = Callable[[np.ndarray, TickResult], object]


class FrameDriver:
    """Runs detection then one session tick per captured frame."""

    def __init__(
        self,
        detector: LandmarkDetector,
        session: GameSession,
        metrics: Optional[MetricsCollector] = None,
    ):
        self.detector = detector
        self.session = session
        self.metrics = metrics
        self._lock = asyncio.Lock()
        self._pending: Optional[asyncio.Future] = None
        self._work: Optional[asyncio.Future] = None
        self._stopped = False
        self.frames = 0

        if metrics is not None:
            session.on_score(self._record_score)

    @property
    def stopped(self) -> bool:
        return self._stopped

    async def step(
        self,
        image: np.ndarray,
        timestamp_ms: int,
        canvas_size: Optional[tuple[float, float]] = None,
    ) -> Optional[TickResult]:
        """Detect, then tick the session with the resulting frame.

        Returns None once the driver is stopped, including when ``stop()``
        lands while this frame's detection is still running.
        ``canvas_size`` defaults to the image's (width, height).
        """
        if self._stopped:
            return None

        async with self._lock:
            if self._stopped:
                return None

            t_start = time.perf_counter()
            # The worker thread cannot be interrupted; stop() cancels only
            # the shield, and wait_idle() waits for the thread itself.
            self._work = asyncio.ensure_future(
                asyncio.to_thread(self._detect, image, timestamp_ms)
            )
            self._pending = asyncio.shield(self._work)
            try:
                hands = await self._pending
            except asyncio.CancelledError:
                if self._stopped:
                    logger.debug("Discarded detection for frame at %d ms", timestamp_ms)
                    return None
                raise
            finally:
                self._pending = None

            if self._stopped:
                return None

            if canvas_size is None:
                canvas_size = (image.shape[1], image.shape[0])
            frame = Frame.from_hands(hands or [], timestamp_ms, *canvas_size)
            result = self.session.tick(frame)
            self.frames += 1

            if self.metrics is not None:
                self.metrics.record_tick(time.perf_counter() - t_start, frame.has_hand)
            return result

    def stop(self):
        """Stop ticking. Any in-flight detection result is discarded."""
        if self._stopped:
            return
        self._stopped = True
        if self._pending is not None and not self._pending.done():
            self._pending.cancel()
        if self.session.running:
            self.session.cancel()
        logger.info("Frame driver stopped after %d frames", self.frames)

    async def wait_idle(self):
        """Wait until no detection is running in the worker thread.

        After ``stop()`` a discarded detection may still be inside the
        detector; await this before closing it. Detection errors are not
        raised here, and cancelling the wait leaves the detection running.
        """
        work = self._work
        if work is not None and not work.done():
            await asyncio.wait([work])

    async def run(
        self,
        source: AsyncIterable[tuple[np.ndarray, int]],
        render: Optional[RenderCallback] = None,
    ) -> dict:
        """Drive the session from ``source`` until it ends or the driver stops.

        ``render`` receives each image with its tick result and may be a
        coroutine function. Returns the final session status.
        """
        async for image, timestamp_ms in source:
            result = await self.step(image, timestamp_ms)
            if result is None:
                break
            if render is not None:
                out = render(image, result)
                if inspect.isawaitable(out):
                    await out
            if not self.session.running:
                break
        return self.session.status()

    def _detect(self, image: np.ndarray, timestamp_ms: int):
        try:
            return self.detector.detect(image, timestamp_ms)
        except Exception as e:
            raise DetectorUnavailable(f"Hand detection failed: {e}") from e

    def _record_score(self, event: ScoreEvent):
        self.metrics.record_score(event.game_type)
