"""Per-tick input handed to every game."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence

import numpy as np

from hand_arcade.landmarks import INDEX_TIP, as_hand


@dataclass(frozen=True, eq=False)
class Frame:
    """One tick of detector output.

    ``landmarks`` holds the tracked hand's 21 normalized points, or
    ``None`` when no hand was detected. Frames are never mutated by the
    games that read them.
    """
    timestamp_ms: int
    landmarks: Optional[np.ndarray]
    canvas_width: int
    canvas_height: int

    @classmethod
    def from_hands(
        cls,
        hands: Optional[Sequence],
        timestamp_ms: int,
        canvas_width: int,
        canvas_height: int,
    ) -> Frame:
        """Build a frame from a detector result, keeping the first hand only."""
        first = hands[0] if hands else None
        return cls(
            timestamp_ms=timestamp_ms,
            landmarks=as_hand(first),
            canvas_width=canvas_width,
            canvas_height=canvas_height,
        )

    @property
    def hand(self) -> Optional[np.ndarray]:
        """Validated ``(21, 2)`` landmarks, or ``None`` if absent or malformed."""
        return as_hand(self.landmarks)

    @property
    def has_hand(self) -> bool:
        return self.hand is not None

    def point(self, index: int = INDEX_TIP) -> Optional[tuple[float, float]]:
        """Pixel position of one landmark, or ``None`` without a usable hand."""
        hand = self.hand
        if hand is None:
            return None
        x, y = hand[index]
        return float(x) * self.canvas_width, float(y) * self.canvas_height

    @property
    def fingertip(self) -> Optional[tuple[float, float]]:
        """Index fingertip in pixels."""
        return self.point(INDEX_TIP)

    @property
    def size(self) -> tuple[int, int]:
        return self.canvas_width, self.canvas_height

    @property
    def center(self) -> tuple[float, float]:
        return self.canvas_width / 2, self.canvas_height / 2
