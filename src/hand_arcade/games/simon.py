"""SimonSays: match the prompted hand pose before the round ends."""

from __future__ import annotations

from typing import Optional

from hand_arcade.config import SimonSaysSettings
from hand_arcade.frame import Frame
from hand_arcade.games.base import GameStateMachine, logger
from hand_arcade.gestures import GestureLabel
from hand_arcade.render import DrawCommand, text
from hand_arcade.timer import RoundTimer


class SimonSays(GameStateMachine):
    game_type = "SimonSays"

    def __init__(self, settings: Optional[SimonSaysSettings] = None, **kwargs):
        super().__init__(**kwargs)
        self.settings = settings or SimonSaysSettings()
        self.timer = RoundTimer(self.settings.round_time_ms)
        self.prompt: Optional[GestureLabel] = None

    def _advance(self, frame: Frame, now: int) -> list[DrawCommand]:
        if self.prompt is None or self.timer.expired(now):
            self._new_round(now)

        hand = frame.hand
        if hand is not None and self.timer.remaining_ms(now) > 0:
            # A repeat of the same prompt is allowed
            if self.classifier.classify(hand) is self.prompt:
                self._score(now)
                self._new_round(now)

        w, h = frame.size
        seconds = self.timer.remaining_ms(now) / 1000
        return [
            text(w / 2, h / 2 - 40, f"Simon Says: {self.prompt.display_name}", font_size=32),
            text(w / 2, h / 2 + 10, f"Time Left: {seconds:.1f}s"),
        ]

    def _new_round(self, now: int):
        self.prompt = self._choice(GestureLabel.playable())
        self.timer.reset(now)
        logger.debug("SimonSays prompt %s", self.prompt.value)
