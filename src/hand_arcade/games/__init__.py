"""The six minigames and a factory to build them by name."""

from __future__ import annotations

from typing import Optional

import numpy as np

from hand_arcade.classifier import GestureClassifier
from hand_arcade.config import ArcadeConfig
from hand_arcade.games.balls import BallGame
from hand_arcade.games.base import GameStateMachine, ScoreEvent, TickResult
from hand_arcade.games.memory import MemoryMatch
from hand_arcade.games.reaction import QuickReaction
from hand_arcade.games.simon import SimonSays
from hand_arcade.games.swipe import SwipeChallenge
from hand_arcade.games.tracing import ShapeTracing

GAMES: dict[str, type[GameStateMachine]] = {
    cls.game_type: cls
    for cls in (QuickReaction, ShapeTracing, MemoryMatch, BallGame, SwipeChallenge, SimonSays)
}

GAME_TYPES = list(GAMES)


def create_game(
    game_type: str,
    config: Optional[ArcadeConfig] = None,
    rng: Optional[np.random.Generator] = None,
) -> GameStateMachine:
    """Build a fresh game instance for ``game_type``.

    Raises:
        KeyError: Unknown game type.
    """
    if game_type not in GAMES:
        raise KeyError(f"Unknown game type: {game_type!r} (choose from {', '.join(GAME_TYPES)})")

    config = config or ArcadeConfig()
    c = config.classifier
    classifier = GestureClassifier(
        up_ratio=c.up_ratio,
        down_ratio=c.down_ratio,
        thumb_lateral_ratio=c.thumb_lateral_ratio,
        thumb_raise_ratio=c.thumb_raise_ratio,
        fist_thumb_ratio=c.fist_thumb_ratio,
    )
    return GAMES[game_type](settings=config.game(game_type), classifier=classifier, rng=rng)


__all__ = [
    "GAMES",
    "GAME_TYPES",
    "BallGame",
    "GameStateMachine",
    "MemoryMatch",
    "QuickReaction",
    "ScoreEvent",
    "ShapeTracing",
    "SimonSays",
    "SwipeChallenge",
    "TickResult",
    "create_game",
]
