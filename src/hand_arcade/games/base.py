"""Common contract for all minigames.

Every game is a state machine driven by one call per rendered frame:

    game = QuickReaction()
    game.on_score(lambda event: print("+1", event.game_type))
    # In frame loop:
    result = game.advance(frame)
    renderer.draw(result.commands)

Each instance owns all of its round state; nothing is shared between
instances, so a fresh game is constructed for every play session.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Callable, Optional

import numpy as np

from hand_arcade.classifier import GestureClassifier
from hand_arcade.frame import Frame
from hand_arcade.render import DrawCommand, keypoint

logger = logging.getLogger("hand_arcade.games")


@dataclass
class ScoreEvent:
    """Emitted once for every point a game awards."""
    game_type: str
    delta: int
    timestamp_ms: int


@dataclass
class TickResult:
    """Outcome of one ``advance`` call."""
    score_delta: int = 0
    commands: list[DrawCommand] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "score_delta": self.score_delta,
            "commands": [cmd.to_dict() for cmd in self.commands],
        }


ScoreSink = Callable[[ScoreEvent], None]


class GameStateMachine(ABC):
    """Base class for the six minigames.

    Subclasses implement :meth:`_advance`, which updates round state for
    one tick and returns draw commands, calling :meth:`_score` when the
    player earns a point. The public :meth:`advance` wraps it so that a
    failing tick is logged and skipped instead of stopping the loop.
    """

    game_type: str = "unnamed"

    def __init__(
        self,
        classifier: Optional[GestureClassifier] = None,
        rng: Optional[np.random.Generator] = None,
    ):
        self.classifier = classifier or GestureClassifier()
        self.rng = rng if rng is not None else np.random.default_rng()
        self._score_sinks: list[ScoreSink] = []
        self._tick_delta = 0
        self._last_commands: list[DrawCommand] = []
        self._stopped = False

    def on_score(self, sink: ScoreSink):
        """Register a callback for score events."""
        self._score_sinks.append(sink)

    def advance(self, frame: Frame, now: Optional[int] = None) -> TickResult:
        """Run one tick. ``now`` defaults to the frame timestamp."""
        if self._stopped:
            return TickResult()

        now = frame.timestamp_ms if now is None else now
        self._tick_delta = 0
        try:
            commands = self._advance(frame, now)
        except Exception:
            logger.exception("%s tick at %d ms failed", self.game_type, now)
            # Last good picture, or just the fingertip before the first one
            commands = list(self._last_commands) or self._fingertip_marker(frame)
            return TickResult(score_delta=self._tick_delta, commands=commands)
        self._last_commands = list(commands)
        return TickResult(score_delta=self._tick_delta, commands=commands)

    def stop(self):
        """Cancel the game. Later ticks return empty results."""
        self._stopped = True

    @property
    def stopped(self) -> bool:
        return self._stopped

    @abstractmethod
    def _advance(self, frame: Frame, now: int) -> list[DrawCommand]:
        """Update state for one tick and return the commands to draw."""

    def _score(self, now: int):
        self._tick_delta = 1
        event = ScoreEvent(game_type=self.game_type, delta=1, timestamp_ms=now)
        logger.debug("%s scored at %d ms", self.game_type, now)
        for sink in self._score_sinks:
            try:
                sink(event)
            except Exception as e:
                logger.error("Score sink error in %s: %s", self.game_type, e)

    def _uniform(self, low: float, high: float) -> float:
        """Random coordinate in ``[low, high)``; the midpoint if the range is empty."""
        if high <= low:
            return (low + high) / 2
        return float(self.rng.uniform(low, high))

    def _choice(self, options: list):
        return options[int(self.rng.integers(len(options)))]

    @staticmethod
    def _fingertip_marker(frame: Frame) -> list[DrawCommand]:
        tip = frame.fingertip
        return [keypoint(tip)] if tip is not None else []
