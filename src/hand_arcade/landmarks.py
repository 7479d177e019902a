"""Hand landmark indices and input validation.

Indices follow the MediaPipe Hands topology: 21 points per hand, wrist
first, then four joints per finger from the palm outward.
"""

from __future__ import annotations

from typing import Optional

import numpy as np

WRIST = 0
THUMB_CMC, THUMB_MCP, THUMB_IP, THUMB_TIP = 1, 2, 3, 4
INDEX_MCP, INDEX_PIP, INDEX_DIP, INDEX_TIP = 5, 6, 7, 8
MIDDLE_MCP, MIDDLE_PIP, MIDDLE_DIP, MIDDLE_TIP = 9, 10, 11, 12
RING_MCP, RING_PIP, RING_DIP, RING_TIP = 13, 14, 15, 16
PINKY_MCP, PINKY_PIP, PINKY_DIP, PINKY_TIP = 17, 18, 19, 20

NUM_LANDMARKS = 21

# Points averaged into the palm center
PALM_POINTS = [WRIST, THUMB_CMC, INDEX_MCP, MIDDLE_MCP, RING_MCP, PINKY_MCP]

FINGER_TIPS = {
    "index": INDEX_TIP,
    "middle": MIDDLE_TIP,
    "ring": RING_TIP,
    "pinky": PINKY_TIP,
}


def as_hand(points) -> Optional[np.ndarray]:
    """Coerce one hand's landmarks to a ``(21, 2)`` float array.

    Accepts any nested sequence of ``(x, y)`` or ``(x, y, z)`` points,
    or objects with ``.x``/``.y`` attributes. Returns ``None`` when the
    input is short, non-numeric, non-finite, or outside the normalized
    [0, 1] range; callers treat that as "no hand".
    """
    if points is None:
        return None

    try:
        if len(points) and hasattr(points[0], "x"):
            points = [(p.x, p.y) for p in points]
        arr = np.asarray(points, dtype=np.float64)
    except (TypeError, ValueError, AttributeError, KeyError, IndexError):
        return None

    if arr.ndim != 2 or arr.shape[0] < NUM_LANDMARKS or arr.shape[1] < 2:
        return None

    arr = arr[:NUM_LANDMARKS, :2]
    if not np.all(np.isfinite(arr)):
        return None
    if np.any(arr < 0.0) or np.any(arr > 1.0):
        return None
    return arr
