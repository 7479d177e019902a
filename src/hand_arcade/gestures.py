"""Gesture vocabulary and pose rules.

A pose rule names the required state of the four long fingers plus an
optional thumb condition. Rules are evaluated in priority order by
:class:`~hand_arcade.classifier.GestureClassifier`; the first match wins.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class GestureLabel(Enum):
    """Discrete hand poses the games can prompt for."""
    OPEN = "open"
    TWO_FINGERS = "two"
    ROCK = "rock"
    THUMBS_UP = "thumbs_up"
    FIST = "fist"
    NONE = "none"

    @property
    def display_name(self) -> str:
        return _DISPLAY_NAMES[self]

    @classmethod
    def playable(cls) -> list[GestureLabel]:
        """Labels a game may ask the player to show."""
        return [label for label in cls if label is not cls.NONE]


_DISPLAY_NAMES = {
    GestureLabel.OPEN: "Open Hand",
    GestureLabel.TWO_FINGERS: "Two Fingers",
    GestureLabel.ROCK: "Rock Sign",
    GestureLabel.THUMBS_UP: "Thumbs Up",
    GestureLabel.FIST: "Fist",
    GestureLabel.NONE: "",
}


class FingerState(Enum):
    """Vertical state of a fingertip relative to the palm center."""
    EXTENDED = "extended"
    FOLDED = "folded"
    BETWEEN = "between"  # neither clearly up nor clearly down


class ThumbCheck(Enum):
    """Thumb conditions a rule can require."""
    LATERAL = "lateral"  # tip offset sideways from the palm
    RAISED = "raised"    # tip vertically away from its IP joint
    TUCKED = "tucked"    # tip level with the palm center


@dataclass(frozen=True)
class PoseRule:
    """Required finger states for one gesture. ``None`` means don't care."""

    label: GestureLabel
    index: Optional[FingerState] = None
    middle: Optional[FingerState] = None
    ring: Optional[FingerState] = None
    pinky: Optional[FingerState] = None
    thumb: Optional[ThumbCheck] = None

    def matches(self, fingers: dict[str, FingerState], thumb: set[ThumbCheck]) -> bool:
        for name in ("index", "middle", "ring", "pinky"):
            expected = getattr(self, name)
            if expected is not None and fingers.get(name) != expected:
                return False
        if self.thumb is not None and self.thumb not in thumb:
            return False
        return True

    def to_dict(self) -> dict:
        return {
            "label": self.label.value,
            "name": self.label.display_name,
            "fingers": {
                name: getattr(self, name).value if getattr(self, name) else "any"
                for name in ("index", "middle", "ring", "pinky")
            },
            "thumb": self.thumb.value if self.thumb else "any",
        }


_UP = FingerState.EXTENDED
_DOWN = FingerState.FOLDED

# Priority order: first match wins
DEFAULT_RULES: tuple[PoseRule, ...] = (
    PoseRule(GestureLabel.OPEN, index=_UP, middle=_UP, ring=_UP, pinky=_UP,
             thumb=ThumbCheck.LATERAL),
    PoseRule(GestureLabel.TWO_FINGERS, index=_UP, middle=_UP, ring=_DOWN, pinky=_DOWN),
    PoseRule(GestureLabel.ROCK, index=_UP, middle=_DOWN, ring=_DOWN, pinky=_UP),
    PoseRule(GestureLabel.THUMBS_UP, index=_DOWN, middle=_DOWN, ring=_DOWN, pinky=_DOWN,
             thumb=ThumbCheck.RAISED),
    PoseRule(GestureLabel.FIST, index=_DOWN, middle=_DOWN, ring=_DOWN, pinky=_DOWN,
             thumb=ThumbCheck.TUCKED),
)
