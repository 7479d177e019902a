"""Hand landmark detection with MediaPipe and camera frame capture."""

from __future__ import annotations

import asyncio
import time
from typing import AsyncIterator, Optional

import numpy as np

try:
    import mediapipe as mp
except ImportError:
    mp = None

try:
    import cv2
except ImportError:
    cv2 = None


class HandDetector:
    """Extracts 21 normalized 2-D hand landmarks per hand using MediaPipe Hands.

    Each landmark is (x, y) normalized to [0, 1] relative to the image.
    The games only follow one hand, so ``max_hands`` defaults to 1.
    """

    def __init__(
        self,
        max_hands: int = 1,
        min_detection_confidence: float = 0.7,
        min_tracking_confidence: float = 0.5,
    ):
        if mp is None:
            raise ImportError(
                "mediapipe is required. Install with: pip install mediapipe"
            )

        self.max_hands = max_hands
        self._hands = mp.solutions.hands.Hands(
            static_image_mode=False,
            max_num_hands=max_hands,
            min_detection_confidence=min_detection_confidence,
            min_tracking_confidence=min_tracking_confidence,
        )

    def detect(self, frame_rgb: np.ndarray, timestamp_ms: Optional[int] = None) -> list[np.ndarray]:
        """Detect hands in one RGB frame.

        Args:
            frame_rgb: RGB image as numpy array (H, W, 3), uint8.
            timestamp_ms: Frame time. The tracking solution orders frames
                itself, so the value is unused.

        Returns:
            List of landmark arrays, each shape (21, 2). Empty if no hands.
        """
        results = self._hands.process(frame_rgb)

        if not results.multi_hand_landmarks:
            return []

        # Points of a hand partly out of view come back slightly outside [0, 1]
        return [
            np.clip(np.array([[p.x, p.y] for p in hand.landmark], dtype=np.float32), 0.0, 1.0)
            for hand in results.multi_hand_landmarks
        ]

    def close(self):
        """Release MediaPipe resources."""
        self._hands.close()

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()


def now_ms() -> int:
    """Monotonic wall-clock time in milliseconds."""
    return int(time.monotonic() * 1000)


async def camera_frames(
    camera: int = 0,
    width: Optional[int] = None,
    height: Optional[int] = None,
    mirror: bool = True,
) -> AsyncIterator[tuple[np.ndarray, int]]:
    """Yield ``(frame_rgb, timestamp_ms)`` from an OpenCV camera.

    The frame is mirrored by default so moving a hand right moves it
    right on screen. Raises ``RuntimeError`` if the camera cannot be
    opened.
    """
    if cv2 is None:
        raise ImportError("opencv-python is required for camera capture")

    capture = cv2.VideoCapture(camera)
    if not capture.isOpened():
        raise RuntimeError(f"Could not open camera {camera}")
    if width:
        capture.set(cv2.CAP_PROP_FRAME_WIDTH, width)
    if height:
        capture.set(cv2.CAP_PROP_FRAME_HEIGHT, height)

    try:
        while True:
            ok, frame = await asyncio.to_thread(capture.read)
            if not ok:
                await asyncio.sleep(0.01)
                continue
            if mirror:
                frame = cv2.flip(frame, 1)
            yield cv2.cvtColor(frame, cv2.COLOR_BGR2RGB), now_ms()
    finally:
        capture.release()
