"""HandArcade - webcam minigames driven by per-frame hand landmarks."""

__version__ = "0.1.0"

from hand_arcade.detector import HandDetector
from hand_arcade.classifier import GestureClassifier
from hand_arcade.gestures import GestureLabel
from hand_arcade.timer import RoundTimer
from hand_arcade.frame import Frame
from hand_arcade.config import ArcadeConfig
from hand_arcade.games import GAME_TYPES, GameStateMachine, ScoreEvent, TickResult, create_game
from hand_arcade.session import GameSession
from hand_arcade.driver import DetectorUnavailable, FrameDriver
from hand_arcade.scores import ScoreClient, ScoreServiceError
from hand_arcade.metrics import MetricsCollector
