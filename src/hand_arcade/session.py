"""One timed play session of a single game.

The session is the score sink: it listens to the game's score channel,
keeps the running total, runs the overall game clock and reports the
final score when time is up.

Usage:
    session = GameSession(create_game("SimonSays"), reporter=client.save_score)
    session.start(now_ms)
    # In frame loop:
    result = session.tick(frame)
"""

from __future__ import annotations

import logging
from typing import Callable, Optional

from hand_arcade.config import SessionSettings
from hand_arcade.frame import Frame
from hand_arcade.games.base import GameStateMachine, ScoreEvent, TickResult
from hand_arcade.render import text
from hand_arcade.timer import RoundTimer

logger = logging.getLogger("hand_arcade.session")

ScoreReporter = Callable[[int, str], object]


class GameSession:
    """Wraps a game with the overall session clock and score total."""

    def __init__(
        self,
        game: GameStateMachine,
        settings: Optional[SessionSettings] = None,
        reporter: Optional[ScoreReporter] = None,
    ):
        self.game = game
        self.settings = settings or SessionSettings()
        self.reporter = reporter
        self.timer = RoundTimer(self.settings.game_duration_ms)
        self.score = 0
        self.running = False
        self.game_over = False
        self._listeners: list[Callable[[ScoreEvent], None]] = []
        game.on_score(self._on_score)

    @property
    def game_type(self) -> str:
        return self.game.game_type

    def on_score(self, listener: Callable[[ScoreEvent], None]):
        """Observe score events counted by this session."""
        self._listeners.append(listener)

    def start(self, now: int):
        self.score = 0
        self.timer.reset(now)
        self.running = True
        self.game_over = False
        logger.info("Session started: %s (%d s)", self.game_type,
                    self.settings.game_duration_ms // 1000)

    def tick(self, frame: Frame) -> TickResult:
        """Advance the game by one frame while the session is running."""
        if not self.running:
            return TickResult()

        now = frame.timestamp_ms
        if self.timer.remaining_ms(now) == 0:
            self.finish()
            w, h = frame.size
            return TickResult(commands=[
                text(w / 2, h / 2 - 20, "Game Over!", font_size=40),
                text(w / 2, h / 2 + 30, f"Final Score: {self.score}", font_size=32),
            ])

        result = self.game.advance(frame, now)
        result.commands.extend([
            text(70, 30, f"{self.timer.seconds_left(now)}s", font_size=20),
            text(170, 30, f"{self.score} pts", font_size=20),
        ])
        return result

    def finish(self):
        """End the session and report the final score."""
        if not self.running:
            return
        self.running = False
        self.game_over = True
        self.game.stop()
        logger.info("Session over: %s scored %d", self.game_type, self.score)

        if self.reporter is not None:
            try:
                self.reporter(self.score, self.game_type)
            except Exception as e:
                logger.warning("Failed to report score for %s: %s", self.game_type, e)

    def cancel(self):
        """Leave the game without reporting. No state changes afterwards."""
        self.running = False
        self.game.stop()
        logger.info("Session cancelled: %s", self.game_type)

    def status(self, now: Optional[int] = None) -> dict:
        return {
            "game": self.game_type,
            "score": self.score,
            "running": self.running,
            "game_over": self.game_over,
            "time_left": self.timer.seconds_left(now) if now is not None and self.running else None,
        }

    def _on_score(self, event: ScoreEvent):
        if not self.running:
            return
        self.score += event.delta
        for listener in self._listeners:
            listener(event)
