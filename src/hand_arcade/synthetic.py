"""Synthetic hands for simulation and benchmarks.

Builds anatomically plausible 21-point hands in each playable pose so a
game can be exercised without a camera.
"""

from __future__ import annotations

import math
from typing import Iterator, Optional

import numpy as np

from hand_arcade import landmarks as lm
from hand_arcade.frame import Frame
from hand_arcade.gestures import GestureLabel

# Palm joints of an upright right hand, normalized image coordinates
_PALM = {
    lm.WRIST: (0.50, 0.80),
    lm.THUMB_CMC: (0.45, 0.75),
    lm.INDEX_MCP: (0.45, 0.60),
    lm.MIDDLE_MCP: (0.50, 0.60),
    lm.RING_MCP: (0.55, 0.60),
    lm.PINKY_MCP: (0.60, 0.62),
}

_EXTENDED_TIP_Y = 0.40
_FOLDED_TIP_Y = 0.72

# Thumb (MCP, IP, TIP) per thumb placement
_THUMB = {
    "lateral": ((0.42, 0.68), (0.39, 0.65), (0.35, 0.60)),
    "raised": ((0.44, 0.66), (0.45, 0.55), (0.45, 0.45)),
    "tucked": ((0.44, 0.70), (0.46, 0.67), (0.50, 0.68)),
}

# (index, middle, ring, pinky) extended, thumb placement
_POSES = {
    GestureLabel.OPEN: ((True, True, True, True), "lateral"),
    GestureLabel.TWO_FINGERS: ((True, True, False, False), "tucked"),
    GestureLabel.ROCK: ((True, False, False, True), "tucked"),
    GestureLabel.THUMBS_UP: ((False, False, False, False), "raised"),
    GestureLabel.FIST: ((False, False, False, False), "tucked"),
}

_MARGIN = 1e-6


def pose_hand(
    label: GestureLabel = GestureLabel.OPEN,
    offset: tuple[float, float] = (0.0, 0.0),
    scale: float = 1.0,
) -> np.ndarray:
    """A ``(21, 2)`` hand showing ``label``.

    The hand is scaled about its wrist, then shifted by ``offset``. At
    scale 1 with no offset the index fingertip sits at (0.45, 0.40) when
    extended and (0.45, 0.72) when folded.
    """
    if label not in _POSES:
        raise ValueError(f"No synthetic pose for {label}")
    extended, thumb = _POSES[label]

    hand = np.zeros((lm.NUM_LANDMARKS, 2), dtype=np.float64)
    for idx, point in _PALM.items():
        hand[idx] = point
    hand[[lm.THUMB_MCP, lm.THUMB_IP, lm.THUMB_TIP]] = _THUMB[thumb]

    for tip, up in zip(lm.FINGER_TIPS.values(), extended):
        mcp = hand[tip - 3].copy()
        tip_y = _EXTENDED_TIP_Y if up else _FOLDED_TIP_Y
        # PIP and DIP evenly spaced between the MCP and the tip
        for step in (1, 2, 3):
            hand[tip - 3 + step] = (mcp[0], mcp[1] + (tip_y - mcp[1]) * step / 3)

    wrist = hand[lm.WRIST].copy()
    hand = wrist + (hand - wrist) * scale
    return hand + np.asarray(offset, dtype=np.float64)


def fingertip_offset(
    x: float,
    y: float,
    label: GestureLabel = GestureLabel.OPEN,
    scale: float = 1.0,
) -> tuple[float, float]:
    """Offset that moves the index fingertip of ``label`` to normalized (x, y).

    The offset is clamped so every landmark stays strictly inside the image.
    """
    hand = pose_hand(label, scale=scale)
    tip = hand[lm.INDEX_TIP]
    low = _MARGIN - hand.min(axis=0)
    high = 1.0 - _MARGIN - hand.max(axis=0)
    dx = float(np.clip(x - tip[0], low[0], high[0]))
    dy = float(np.clip(y - tip[1], low[1], high[1]))
    return dx, dy


def synthetic_frames(
    duration_ms: int,
    fps: float = 30.0,
    canvas_size: tuple[int, int] = (640, 480),
    pose_ms: int = 700,
    rng: Optional[np.random.Generator] = None,
    start_ms: int = 0,
    hand_scale: float = 0.5,
) -> Iterator[Frame]:
    """Frames of one hand whose fingertip circles the canvas center.

    The pose changes to a random playable label every ``pose_ms`` and
    about one frame in twenty has no hand at all.
    """
    rng = rng if rng is not None else np.random.default_rng()
    width, height = canvas_size
    labels = GestureLabel.playable()
    label = labels[0]
    next_pose_ms = start_ms
    step_ms = 1000.0 / fps
    radius_x = 0.3 * min(width, height) / width
    radius_y = 0.3 * min(width, height) / height

    for i in range(int(duration_ms / step_ms)):
        ts = start_ms + int(i * step_ms)
        if ts >= next_pose_ms:
            label = labels[int(rng.integers(len(labels)))]
            next_pose_ms = ts + pose_ms

        if rng.random() < 0.05:
            yield Frame(ts, None, width, height)
            continue

        angle = 2 * math.pi * (ts - start_ms) / 4000.0
        x = 0.5 + radius_x * math.cos(angle)
        y = 0.5 + radius_y * math.sin(angle)
        offset = fingertip_offset(x, y, label, scale=hand_scale)
        yield Frame(ts, pose_hand(label, offset, scale=hand_scale), width, height)
