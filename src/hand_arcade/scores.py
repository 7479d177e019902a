"""Client for the remote score service.

The service stores one record per finished session:

    POST /scores  {"score": 7, "gameType": "SimonSays"}
    GET  /scores  -> [{"score": 7, "gameType": "SimonSays", "createdAt": ...}, ...]

Both endpoints require ``Authorization: Bearer <token>``. Game code
never talks to the service; a :class:`~hand_arcade.session.GameSession`
can be given ``client.save_score`` as its reporter.
"""

from __future__ import annotations

import logging
from typing import Optional

import httpx

logger = logging.getLogger("hand_arcade.scores")

# Fixed labels accepted by the service, one per game
GAME_TYPES = (
    "BallGame",
    "SimonSays",
    "ShapeTracing",
    "MemoryMatch",
    "SwipeChallenge",
    "QuickReaction",
)


class ScoreServiceError(Exception):
    """The score service rejected a request or could not be reached."""


class ScoreClient:
    """Thin bearer-token client for the score endpoints."""

    def __init__(
        self,
        base_url: str,
        token: str,
        timeout: float = 5.0,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self._client = httpx.Client(
            base_url=base_url.rstrip("/"),
            headers={"Authorization": f"Bearer {token}"},
            timeout=timeout,
            transport=transport,
        )

    def save_score(self, score: int, game_type: str) -> dict:
        """Store a finished session's score. Returns the saved record."""
        if game_type not in GAME_TYPES:
            raise ValueError(f"Unknown game type: {game_type}")
        if score < 0:
            raise ValueError(f"Score must be non-negative, got {score}")

        data = self._request("POST", "/scores", json={"score": score, "gameType": game_type})
        logger.info("Saved %s score %d", game_type, score)
        return data

    def get_scores(self) -> list[dict]:
        """All scores of the authenticated user, newest first."""
        data = self._request("GET", "/scores")
        if not isinstance(data, list):
            raise ScoreServiceError(f"Expected a list of scores, got {type(data).__name__}")
        return data

    def _request(self, method: str, path: str, **kwargs):
        try:
            resp = self._client.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            raise ScoreServiceError(f"{method} {path} failed: {e}") from e

        if resp.status_code >= 400:
            try:
                body = resp.json()
            except ValueError:
                body = None
            message = body.get("message", resp.text) if isinstance(body, dict) else resp.text
            raise ScoreServiceError(f"{method} {path} returned {resp.status_code}: {message}")
        try:
            return resp.json()
        except ValueError as e:
            raise ScoreServiceError(f"{method} {path} returned invalid JSON: {e}") from e

    def close(self):
        self._client.close()

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()


def best_scores(scores: list[dict]) -> dict[str, int]:
    """Highest score per game type from a list of score records."""
    best: dict[str, int] = {}
    for record in scores:
        game = record.get("gameType")
        value = record.get("score")
        if game is None or not isinstance(value, (int, float)):
            continue
        if game not in best or value > best[game]:
            best[game] = int(value)
    return best
