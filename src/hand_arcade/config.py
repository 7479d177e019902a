"""Game tunables and YAML configuration.

Every game reads its constants from a settings dataclass. Defaults match
the shipped games; a YAML file can override any subset:

    session:
      game_duration_ms: 90000
    classifier:
      up_ratio: 0.6
    games:
      QuickReaction:
        spawn_interval_ms: 1500
      BallGame:
        ball_count: 5
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path

import yaml

logger = logging.getLogger("hand_arcade.config")


def _require_positive(owner: str, **values):
    for name, value in values.items():
        if value <= 0:
            raise ValueError(f"{owner}.{name} must be positive, got {value}")


@dataclass
class QuickReactionSettings:
    spawn_interval_ms: int = 2000
    target_radius: float = 30.0

    def __post_init__(self):
        _require_positive("QuickReaction", spawn_interval_ms=self.spawn_interval_ms,
                          target_radius=self.target_radius)


@dataclass
class ShapeTracingSettings:
    checkpoints: int = 16
    tolerance: float = 25.0
    completion_ratio: float = 0.9
    circle_radius_ratio: float = 0.3  # of the short canvas side
    square_size_ratio: float = 0.6
    max_trail_points: int = 512

    def __post_init__(self):
        _require_positive("ShapeTracing", checkpoints=self.checkpoints, tolerance=self.tolerance,
                          completion_ratio=self.completion_ratio,
                          max_trail_points=self.max_trail_points)
        if self.completion_ratio > 1:
            raise ValueError(f"ShapeTracing.completion_ratio must be <= 1, got {self.completion_ratio}")


@dataclass
class MemoryMatchSettings:
    round_time_ms: int = 8000
    sequence_length: int = 2

    def __post_init__(self):
        _require_positive("MemoryMatch", round_time_ms=self.round_time_ms,
                          sequence_length=self.sequence_length)


@dataclass
class BallGameSettings:
    ball_count: int = 4
    ball_radius: float = 30.0
    flash_ms: int = 800
    wait_ms: int = 300
    feedback_ms: int = 500
    min_gap: float = 10.0  # clearance between ball edges
    layout_attempts: int = 100

    def __post_init__(self):
        _require_positive("BallGame", ball_count=self.ball_count, ball_radius=self.ball_radius,
                          flash_ms=self.flash_ms, feedback_ms=self.feedback_ms,
                          layout_attempts=self.layout_attempts)
        if self.wait_ms < 0:
            raise ValueError(f"BallGame.wait_ms must be >= 0, got {self.wait_ms}")


@dataclass
class SwipeChallengeSettings:
    round_time_ms: int = 5000
    min_distance: float = 80.0

    def __post_init__(self):
        _require_positive("SwipeChallenge", round_time_ms=self.round_time_ms,
                          min_distance=self.min_distance)


@dataclass
class SimonSaysSettings:
    round_time_ms: int = 5000

    def __post_init__(self):
        _require_positive("SimonSays", round_time_ms=self.round_time_ms)


@dataclass
class ClassifierSettings:
    up_ratio: float = 0.5
    down_ratio: float = 0.3
    thumb_lateral_ratio: float = 0.3
    thumb_raise_ratio: float = 0.5
    fist_thumb_ratio: float = 1.5


@dataclass
class SessionSettings:
    game_duration_ms: int = 60000

    def __post_init__(self):
        _require_positive("session", game_duration_ms=self.game_duration_ms)


GAME_SETTINGS = {
    "QuickReaction": QuickReactionSettings,
    "ShapeTracing": ShapeTracingSettings,
    "MemoryMatch": MemoryMatchSettings,
    "BallGame": BallGameSettings,
    "SwipeChallenge": SwipeChallengeSettings,
    "SimonSays": SimonSaysSettings,
}


def _build(cls, data: dict | None, section: str):
    """Instantiate a settings dataclass, dropping unknown keys with a warning."""
    data = data or {}
    known = {f.name for f in fields(cls)}
    for key in data:
        if key not in known:
            logger.warning("Ignoring unknown config key %s.%s", section, key)
    return cls(**{k: v for k, v in data.items() if k in known})


@dataclass
class ArcadeConfig:
    """All tunables for a play session."""
    session: SessionSettings = field(default_factory=SessionSettings)
    classifier: ClassifierSettings = field(default_factory=ClassifierSettings)
    games: dict = field(default_factory=lambda: {name: cls() for name, cls in GAME_SETTINGS.items()})

    def game(self, game_type: str):
        """Settings object for one game type."""
        if game_type not in GAME_SETTINGS:
            raise KeyError(f"Unknown game type: {game_type}")
        return self.games.get(game_type) or GAME_SETTINGS[game_type]()

    @classmethod
    def from_dict(cls, data: dict | None) -> ArcadeConfig:
        data = data or {}
        for key in data:
            if key not in ("session", "classifier", "games"):
                logger.warning("Ignoring unknown config section %s", key)

        games = {}
        raw_games = data.get("games") or {}
        for name, settings_cls in GAME_SETTINGS.items():
            games[name] = _build(settings_cls, raw_games.get(name), name)
        for name in raw_games:
            if name not in GAME_SETTINGS:
                logger.warning("Ignoring settings for unknown game %s", name)

        return cls(
            session=_build(SessionSettings, data.get("session"), "session"),
            classifier=_build(ClassifierSettings, data.get("classifier"), "classifier"),
            games=games,
        )

    @classmethod
    def from_yaml(cls, path: str | Path) -> ArcadeConfig:
        """Load overrides from a YAML file."""
        with open(path) as f:
            data = yaml.safe_load(f)
        return cls.from_dict(data)

    def to_dict(self) -> dict:
        return {
            "session": asdict(self.session),
            "classifier": asdict(self.classifier),
            "games": {name: asdict(settings) for name, settings in self.games.items()},
        }

    def to_yaml(self, path: str | Path):
        with open(path, "w") as f:
            yaml.dump(self.to_dict(), f, default_flow_style=False, sort_keys=False)
