"""Tests for the score service client."""

import json

import httpx
import pytest

from hand_arcade.scores import ScoreClient, ScoreServiceError, best_scores

BASE = "https://scores.example.test/api"


def make_client(handler):
    return ScoreClient(BASE, "secret-token", transport=httpx.MockTransport(handler))


class TestSaveScore:
    def test_posts_score(self):
        seen = {}

        def handler(request):
            seen["method"] = request.method
            seen["url"] = str(request.url)
            seen["auth"] = request.headers["Authorization"]
            seen["body"] = json.loads(request.content)
            return httpx.Response(201, json={"id": 1, **seen["body"]})

        with make_client(handler) as client:
            saved = client.save_score(7, "SimonSays")

        assert seen["method"] == "POST"
        assert seen["url"] == f"{BASE}/scores"
        assert seen["auth"] == "Bearer secret-token"
        assert seen["body"] == {"score": 7, "gameType": "SimonSays"}
        assert saved["id"] == 1

    def test_unknown_game_type(self):
        def handler(request):
            raise AssertionError("should not be called")

        with pytest.raises(ValueError):
            make_client(handler).save_score(3, "Pong")

    def test_negative_score(self):
        with pytest.raises(ValueError):
            make_client(lambda r: httpx.Response(201, json={})).save_score(-1, "BallGame")

    def test_http_error_status(self):
        def handler(request):
            return httpx.Response(401, json={"message": "Unauthorized"})

        with pytest.raises(ScoreServiceError, match="401: Unauthorized"):
            make_client(handler).save_score(1, "BallGame")

    def test_error_with_plain_body(self):
        def handler(request):
            return httpx.Response(500, text="upstream exploded")

        with pytest.raises(ScoreServiceError, match="upstream exploded"):
            make_client(handler).save_score(1, "BallGame")

    def test_success_with_invalid_json(self):
        def handler(request):
            return httpx.Response(201, text="<html>saved</html>")

        with pytest.raises(ScoreServiceError, match="invalid JSON"):
            make_client(handler).save_score(1, "BallGame")

    def test_transport_failure(self):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        with pytest.raises(ScoreServiceError):
            make_client(handler).save_score(1, "QuickReaction")


class TestGetScores:
    def test_lists_scores(self):
        records = [
            {"score": 4, "gameType": "BallGame"},
            {"score": 9, "gameType": "SimonSays"},
        ]

        def handler(request):
            assert request.method == "GET"
            return httpx.Response(200, json=records)

        assert make_client(handler).get_scores() == records

    def test_rejects_non_list(self):
        with pytest.raises(ScoreServiceError):
            make_client(lambda r: httpx.Response(200, json={"oops": True})).get_scores()


class TestBestScores:
    def test_max_per_game(self):
        records = [
            {"score": 4, "gameType": "BallGame"},
            {"score": 9, "gameType": "BallGame"},
            {"score": 2, "gameType": "SimonSays"},
            {"gameType": "SwipeChallenge"},
            {"score": 5},
        ]
        assert best_scores(records) == {"BallGame": 9, "SimonSays": 2}

    def test_empty(self):
        assert best_scores([]) == {}
