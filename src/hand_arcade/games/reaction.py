"""QuickReaction: touch targets as they appear, as fast as possible."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from hand_arcade.config import QuickReactionSettings
from hand_arcade.frame import Frame
from hand_arcade.games.base import GameStateMachine, logger
from hand_arcade.geometry import point_in_circle
from hand_arcade.render import TARGET_RED, DrawCommand, circle, text


@dataclass
class Target:
    x: float
    y: float
    radius: float
    spawn_ms: int

    @property
    def center(self) -> tuple[float, float]:
        return self.x, self.y


class QuickReaction(GameStateMachine):
    """Reaction-time target game.

    A target spawns whenever none is active, and is replaced every
    ``spawn_interval_ms`` even if nobody touched it. Touching a target
    with the index fingertip scores a point and records the reaction
    time. Missed targets are not penalized.
    """

    game_type = "QuickReaction"

    def __init__(self, settings: Optional[QuickReactionSettings] = None, **kwargs):
        super().__init__(**kwargs)
        self.settings = settings or QuickReactionSettings()
        self.target: Optional[Target] = None
        self.last_spawn_ms: Optional[int] = None
        self.reaction_ms: Optional[int] = None

    @property
    def state(self) -> str:
        return "target_active" if self.target is not None else "no_target"

    def _advance(self, frame: Frame, now: int) -> list[DrawCommand]:
        interval = self.settings.spawn_interval_ms
        if self.target is None or now - self.last_spawn_ms > interval:
            self._spawn(frame, now)

        target = self.target
        commands = [circle(target.x, target.y, target.radius, fill=TARGET_RED)]
        commands.extend(self._fingertip_marker(frame))

        tip = frame.fingertip
        if tip is not None and point_in_circle(tip, target.center, target.radius):
            self.reaction_ms = now - target.spawn_ms
            self._score(now)
            self.target = None
            self.last_spawn_ms = now

        if self.reaction_ms is not None:
            hud = f"Last Reaction: {self.reaction_ms} ms"
        else:
            hud = "Touch the target!"
        commands.append(text(frame.canvas_width / 2, 40, hud))
        return commands

    def _spawn(self, frame: Frame, now: int):
        r = self.settings.target_radius
        self.target = Target(
            x=self._uniform(r, frame.canvas_width - r),
            y=self._uniform(r, frame.canvas_height - r),
            radius=r,
            spawn_ms=now,
        )
        self.last_spawn_ms = now
        logger.debug("QuickReaction target at (%.0f, %.0f)", self.target.x, self.target.y)
