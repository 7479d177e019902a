"""Rule-based hand pose classification from 2-D landmarks."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence

import numpy as np

from hand_arcade import landmarks as lm
from hand_arcade.gestures import (
    DEFAULT_RULES,
    FingerState,
    GestureLabel,
    PoseRule,
    ThumbCheck,
)


@dataclass
class HandReading:
    """Geometry derived from one hand, shared by all pose rules."""
    palm_center: np.ndarray
    scale: float
    fingers: dict[str, FingerState]
    thumb: set[ThumbCheck]


class GestureClassifier:
    """Maps 21 hand landmarks to a :class:`GestureLabel`.

    Finger states are measured against the palm center (mean of the
    wrist, thumb CMC and the four finger MCP joints). Thresholds are
    multiples of the hand's own scale, the distance from the palm center
    to the middle-finger MCP, so the result does not change as the hand
    moves toward or away from the camera.

    A fingertip is extended when it sits above the palm center by more
    than ``up_ratio * scale`` and folded when it sits below by more than
    ``down_ratio * scale``. Image y grows downward.

    The classifier is stateless: identical input always gives the same
    label, and malformed input gives ``GestureLabel.NONE``.
    """

    def __init__(
        self,
        rules: Optional[Sequence[PoseRule]] = None,
        up_ratio: float = 0.5,
        down_ratio: float = 0.3,
        thumb_lateral_ratio: float = 0.3,
        thumb_raise_ratio: float = 0.5,
        fist_thumb_ratio: float = 1.5,
    ):
        self.rules = tuple(rules) if rules is not None else DEFAULT_RULES
        self.up_ratio = up_ratio
        self.down_ratio = down_ratio
        self.thumb_lateral_ratio = thumb_lateral_ratio
        self.thumb_raise_ratio = thumb_raise_ratio
        self.fist_thumb_ratio = fist_thumb_ratio

    def read(self, points) -> Optional[HandReading]:
        """Measure finger and thumb states, or ``None`` for unusable input."""
        hand = lm.as_hand(points)
        if hand is None:
            return None

        palm = hand[lm.PALM_POINTS].mean(axis=0)
        scale = float(np.linalg.norm(hand[lm.MIDDLE_MCP] - palm))
        if scale < 1e-6:
            return None

        up_y = palm[1] - scale * self.up_ratio
        down_y = palm[1] + scale * self.down_ratio

        fingers = {}
        for name, tip_idx in lm.FINGER_TIPS.items():
            tip_y = hand[tip_idx][1]
            if tip_y < up_y:
                fingers[name] = FingerState.EXTENDED
            elif tip_y > down_y:
                fingers[name] = FingerState.FOLDED
            else:
                fingers[name] = FingerState.BETWEEN

        thumb_tip = hand[lm.THUMB_TIP]
        thumb_ip = hand[lm.THUMB_IP]
        thumb = set()
        if abs(thumb_tip[0] - palm[0]) > scale * self.thumb_lateral_ratio:
            thumb.add(ThumbCheck.LATERAL)
        if abs(thumb_tip[1] - thumb_ip[1]) > scale * self.thumb_raise_ratio:
            thumb.add(ThumbCheck.RAISED)
        if abs(thumb_tip[1] - palm[1]) < scale * self.fist_thumb_ratio:
            thumb.add(ThumbCheck.TUCKED)

        return HandReading(palm_center=palm, scale=scale, fingers=fingers, thumb=thumb)

    def classify(self, points) -> GestureLabel:
        """Classify one hand. Returns ``GestureLabel.NONE`` if nothing matches."""
        reading = self.read(points)
        if reading is None:
            return GestureLabel.NONE

        for rule in self.rules:
            if rule.matches(reading.fingers, reading.thumb):
                return rule.label
        return GestureLabel.NONE

    def matches(self, points, label: GestureLabel) -> bool:
        """True if the hand currently shows ``label``."""
        return label is not GestureLabel.NONE and self.classify(points) is label
