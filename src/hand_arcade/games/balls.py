"""BallGame: watch balls light up, then touch them in the same order.

The game cycles through three phases:

- ``INIT``: lay out the balls, start a one-step sequence.
- ``SHOW``: light each ball of the sequence for ``flash_ms`` with a
  ``wait_ms`` gap before the next.
- ``INPUT``: the player touches balls in order. Each touch shows
  green/red feedback for ``feedback_ms`` before it takes effect. A
  completed sequence scores a point, grows by one step and is shown
  again; a wrong touch sends the game back to ``INIT`` with a new
  layout.

Feedback is a deadline checked at the start of each tick, so at most one
deferred transition exists at any time.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from hand_arcade.config import BallGameSettings
from hand_arcade.frame import Frame
from hand_arcade.games.base import GameStateMachine, logger
from hand_arcade.geometry import distance, point_in_circle
from hand_arcade.render import (
    BALL_OUTLINE,
    CORRECT_GREEN,
    FLASH_YELLOW,
    IDLE_GREY,
    INPUT_BLUE,
    WRONG_RED,
    DrawCommand,
    circle,
    text,
)


class BallPhase(Enum):
    INIT = "init"
    SHOW = "show"
    INPUT = "input"


@dataclass
class Ball:
    x: float
    y: float

    @property
    def center(self) -> tuple[float, float]:
        return self.x, self.y


class BallGame(GameStateMachine):
    game_type = "BallGame"

    def __init__(self, settings: Optional[BallGameSettings] = None, **kwargs):
        super().__init__(**kwargs)
        self.settings = settings or BallGameSettings()
        self.phase = BallPhase.INIT
        self.balls: list[Ball] = []
        self.sequence: list[int] = []
        self.flash_index = 0
        self.step_start_ms = 0
        self.input_index = 0
        self.streak = 0  # sequences completed on the current layout

        # Touch debounce and feedback
        self.tapped_index: Optional[int] = None
        self.feedback: Optional[str] = None  # "correct" | "wrong"
        self.feedback_until: Optional[int] = None

    @property
    def feedback_pending(self) -> bool:
        return self.feedback is not None

    def _advance(self, frame: Frame, now: int) -> list[DrawCommand]:
        if self.feedback_pending and now >= self.feedback_until:
            self._resolve_feedback(now)

        if self.phase is BallPhase.INIT:
            self._layout(frame, now)

        if self.phase is BallPhase.SHOW:
            s = self.settings
            if now - self.step_start_ms > s.flash_ms + s.wait_ms:
                self.step_start_ms = now
                self.flash_index += 1
                if self.flash_index >= len(self.sequence):
                    self.phase = BallPhase.INPUT
                    self.input_index = 0
                    self.tapped_index = None

        commands = self._draw_balls(now)

        if self.phase is BallPhase.INPUT:
            commands.extend(self._fingertip_marker(frame))
            tip = frame.fingertip
            if tip is not None:
                self._handle_touch(tip, now)

        commands.append(text(frame.canvas_width / 2, 40, f"Streak: {self.streak}"))
        return commands

    def _handle_touch(self, tip: tuple[float, float], now: int):
        touched = None
        for idx, ball in enumerate(self.balls):
            if point_in_circle(tip, ball.center, self.settings.ball_radius):
                touched = idx
                break

        if touched is None:
            # Finger left all balls: the next touch counts as a new one
            if not self.feedback_pending:
                self.tapped_index = None
            return

        if self.tapped_index is not None or self.feedback_pending:
            return

        self.tapped_index = touched
        correct = touched == self.sequence[self.input_index]
        self.feedback = "correct" if correct else "wrong"
        self.feedback_until = now + self.settings.feedback_ms

    def _resolve_feedback(self, now: int):
        if self.feedback == "wrong":
            logger.debug("BallGame wrong touch, new layout")
            self.phase = BallPhase.INIT
        else:
            self.input_index += 1
            if self.input_index == len(self.sequence):
                self._score(now)
                self.streak += 1
                self.sequence.append(self._random_ball())
                self.flash_index = 0
                self.step_start_ms = now
                self.phase = BallPhase.SHOW
        self.feedback = None
        self.feedback_until = None
        self.tapped_index = None

    def _layout(self, frame: Frame, now: int):
        self.balls = self._place_balls(frame.canvas_width, frame.canvas_height)
        self.sequence = [self._random_ball()]
        self.flash_index = 0
        self.step_start_ms = now
        self.input_index = 0
        self.streak = 0
        self.feedback = None
        self.feedback_until = None
        self.tapped_index = None
        self.phase = BallPhase.SHOW

    def _place_balls(self, width: int, height: int) -> list[Ball]:
        """Random positions kept fully on-canvas and apart where possible."""
        s = self.settings
        r = s.ball_radius
        min_dist = 2 * r + s.min_gap
        balls: list[Ball] = []
        for _ in range(s.ball_count):
            candidate = None
            for _ in range(s.layout_attempts):
                candidate = Ball(self._uniform(r, width - r), self._uniform(r, height - r))
                if all(distance(candidate.center, b.center) >= min_dist for b in balls):
                    break
            # Crowded canvas: keep the last candidate even if it overlaps
            balls.append(candidate)
        return balls

    def _random_ball(self) -> int:
        return int(self.rng.integers(self.settings.ball_count))

    def _draw_balls(self, now: int) -> list[DrawCommand]:
        elapsed = now - self.step_start_ms
        flashing = None
        if (
            self.phase is BallPhase.SHOW
            and self.flash_index < len(self.sequence)
            and elapsed < self.settings.flash_ms
        ):
            flashing = self.sequence[self.flash_index]

        commands = []
        for idx, ball in enumerate(self.balls):
            if idx == flashing:
                fill = FLASH_YELLOW
            elif self.feedback_pending and idx == self.tapped_index:
                fill = CORRECT_GREEN if self.feedback == "correct" else WRONG_RED
            elif self.phase is BallPhase.INPUT:
                fill = INPUT_BLUE
            else:
                fill = IDLE_GREY
            commands.append(circle(ball.x, ball.y, self.settings.ball_radius,
                                   fill=fill, stroke=BALL_OUTLINE))
        return commands
