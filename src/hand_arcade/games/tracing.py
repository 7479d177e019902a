"""ShapeTracing: trace a circle or square outline with the index finger.

Checkpoints are sampled along the outline when a shape is chosen.
Tracing only starts once the fingertip first touches the outline; from
then on every fingertip sample extends the trail and marks any
checkpoint within tolerance as hit. Covering enough checkpoints scores
a point and a new random shape is chosen.
"""

from __future__ import annotations

import math
from collections import deque
from typing import Optional

from hand_arcade.config import ShapeTracingSettings
from hand_arcade.frame import Frame
from hand_arcade.games.base import GameStateMachine, logger
from hand_arcade.geometry import Point, Shape, distance, perimeter_sample, point_on_outline
from hand_arcade.render import (
    CIRCLE_BLUE,
    SQUARE_ORANGE,
    DrawCommand,
    circle,
    square,
    text,
    trail,
)


class ShapeTracing(GameStateMachine):
    game_type = "ShapeTracing"

    def __init__(self, settings: Optional[ShapeTracingSettings] = None, **kwargs):
        super().__init__(**kwargs)
        self.settings = settings or ShapeTracingSettings()
        self.shape: Optional[Shape] = None
        self.center: Point = (0.0, 0.0)
        self.extent = 0.0  # radius for circles, side length for squares
        self.checkpoints: list[Point] = []
        self.hit: set[int] = set()
        self.tracing = False
        self.trail: deque = deque(maxlen=self.settings.max_trail_points)

    @property
    def state(self) -> str:
        if self.shape is None:
            return "no_shape"
        return "tracing" if self.tracing else "waiting"

    @property
    def required_hits(self) -> int:
        # round() keeps e.g. 0.9 * 10 from ceiling to 10 through float error
        n = self.settings.checkpoints
        return math.ceil(round(self.settings.completion_ratio * n, 9))

    def _advance(self, frame: Frame, now: int) -> list[DrawCommand]:
        if self.shape is None:
            self._new_shape(frame)

        commands = [self._outline()]
        tip = frame.fingertip
        if tip is not None:
            commands.extend(self._fingertip_marker(frame))
            self._trace(tip)

        if len(self.trail) >= 2:
            commands.append(trail(self.trail))
        commands.append(text(
            frame.canvas_width / 2, 40,
            f"Trace the {self.shape.value}: {len(self.hit)} / {self.required_hits}",
        ))

        if len(self.hit) >= self.required_hits:
            self._score(now)
            self._clear()
        return commands

    def _trace(self, tip: Point):
        s = self.settings
        if not self.tracing:
            if not point_on_outline(self.shape, tip, self.center, self.extent, s.tolerance):
                return
            self.tracing = True

        self.trail.append(tip)
        for idx, checkpoint in enumerate(self.checkpoints):
            if distance(checkpoint, tip) < s.tolerance:
                self.hit.add(idx)

    def _new_shape(self, frame: Frame):
        s = self.settings
        short_side = min(frame.canvas_width, frame.canvas_height)
        self._clear()
        self.shape = self._choice([Shape.CIRCLE, Shape.SQUARE])
        self.center = frame.center
        if self.shape is Shape.CIRCLE:
            self.extent = short_side * s.circle_radius_ratio
        else:
            self.extent = short_side * s.square_size_ratio
        self.checkpoints = perimeter_sample(self.shape, self.center, self.extent, s.checkpoints)
        logger.debug("ShapeTracing new %s, extent %.1f", self.shape.value, self.extent)

    def _clear(self):
        self.shape = None
        self.checkpoints = []
        self.hit = set()
        self.tracing = False
        self.trail.clear()

    def _outline(self) -> DrawCommand:
        cx, cy = self.center
        if self.shape is Shape.CIRCLE:
            return circle(cx, cy, self.extent, stroke=CIRCLE_BLUE, line_width=5.0)
        return square(cx, cy, self.extent, stroke=SQUARE_ORANGE)
