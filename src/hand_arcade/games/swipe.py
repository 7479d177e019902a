"""SwipeChallenge: swipe the index finger in the prompted direction."""

from __future__ import annotations

import math
from enum import Enum
from typing import Optional

from hand_arcade.config import SwipeChallengeSettings
from hand_arcade.frame import Frame
from hand_arcade.games.base import GameStateMachine, logger
from hand_arcade.geometry import Point
from hand_arcade.render import DrawCommand, text
from hand_arcade.timer import RoundTimer


class Direction(Enum):
    LEFT = "left"
    RIGHT = "right"
    UP = "up"
    DOWN = "down"


def swipe_direction(dx: float, dy: float) -> Direction:
    """Dominant-axis direction of a displacement (image y grows downward)."""
    if abs(dx) > abs(dy):
        return Direction.RIGHT if dx > 0 else Direction.LEFT
    return Direction.DOWN if dy > 0 else Direction.UP


class SwipeChallenge(GameStateMachine):
    """Directional swipe game.

    The first fingertip sample of a round becomes the swipe start. Once
    the fingertip has moved more than ``min_distance`` pixels from it,
    the swipe is classified; a match scores a point, and either way a
    new round begins immediately.
    """

    game_type = "SwipeChallenge"

    def __init__(self, settings: Optional[SwipeChallengeSettings] = None, **kwargs):
        super().__init__(**kwargs)
        self.settings = settings or SwipeChallengeSettings()
        self.timer = RoundTimer(self.settings.round_time_ms)
        self.prompt: Optional[Direction] = None
        self.swipe_start: Optional[Point] = None
        self.last_swipe: Optional[Direction] = None

    def _advance(self, frame: Frame, now: int) -> list[DrawCommand]:
        if self.prompt is None or self.timer.expired(now):
            self._new_round(now)

        commands = self._fingertip_marker(frame)
        tip = frame.fingertip
        if tip is not None:
            if self.swipe_start is None:
                self.swipe_start = tip
            else:
                dx = tip[0] - self.swipe_start[0]
                dy = tip[1] - self.swipe_start[1]
                if math.hypot(dx, dy) > self.settings.min_distance:
                    self.last_swipe = swipe_direction(dx, dy)
                    if self.last_swipe is self.prompt:
                        self._score(now)
                    self._new_round(now)

        w, h = frame.size
        commands.extend([
            text(w / 2, h / 2 - 20, f"Swipe {self.prompt.value}", font_size=32),
            text(w / 2, h / 2 + 30, f"Time Left: {self.timer.seconds_left(now)}s"),
        ])
        return commands

    def _new_round(self, now: int):
        self.prompt = self._choice(list(Direction))
        self.swipe_start = None
        self.timer.reset(now)
        logger.debug("SwipeChallenge prompt %s", self.prompt.value)
