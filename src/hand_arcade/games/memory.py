"""MemoryMatch: show a short run of gestures in order before time runs out."""

from __future__ import annotations

from typing import Optional

from hand_arcade.config import MemoryMatchSettings
from hand_arcade.frame import Frame
from hand_arcade.games.base import GameStateMachine, logger
from hand_arcade.gestures import GestureLabel
from hand_arcade.landmarks import INDEX_TIP, MIDDLE_TIP, PINKY_TIP, RING_TIP, THUMB_TIP
from hand_arcade.render import DrawCommand, keypoint, text
from hand_arcade.timer import RoundTimer

_TIPS = [THUMB_TIP, INDEX_TIP, MIDDLE_TIP, RING_TIP, PINKY_TIP]


class MemoryMatch(GameStateMachine):
    """Gesture-sequence recall.

    Each round draws a fresh random sequence of ``sequence_length``
    gestures. The cursor advances every tick the classified hand shows
    the gesture under it; reaching the end scores a point and starts a
    new round. A round that outlives ``round_time_ms`` is replaced
    without penalty.
    """

    game_type = "MemoryMatch"

    def __init__(self, settings: Optional[MemoryMatchSettings] = None, **kwargs):
        super().__init__(**kwargs)
        self.settings = settings or MemoryMatchSettings()
        self.timer = RoundTimer(self.settings.round_time_ms)
        self.sequence: list[GestureLabel] = []
        self.cursor = 0

    @property
    def current(self) -> Optional[GestureLabel]:
        if self.cursor < len(self.sequence):
            return self.sequence[self.cursor]
        return None

    def _advance(self, frame: Frame, now: int) -> list[DrawCommand]:
        if not self.sequence or self.timer.expired(now):
            self._new_round(now)

        commands: list[DrawCommand] = []
        hand = frame.hand
        if hand is not None:
            for idx in _TIPS:
                commands.append(keypoint(frame.point(idx)))

            if self.classifier.classify(hand) is self.current:
                self.cursor += 1
                if self.cursor == len(self.sequence):
                    self._score(now)
                    self._new_round(now)

        w, h = frame.size
        commands.extend([
            text(w / 2, h / 2 - 40, f"Memory Match: {self.current.display_name}", font_size=28),
            text(w / 2, h / 2, f"Step {self.cursor + 1} / {len(self.sequence)}", font_size=20),
            text(w / 2, h / 2 + 40, f"Time Left: {self.timer.seconds_left(now)}s", font_size=20),
        ])
        return commands

    def _new_round(self, now: int):
        playable = GestureLabel.playable()
        self.sequence = [self._choice(playable) for _ in range(self.settings.sequence_length)]
        self.cursor = 0
        self.timer.reset(now)
        logger.debug("MemoryMatch sequence %s", [g.value for g in self.sequence])
