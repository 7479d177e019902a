"""Tests for the round timer."""

import pytest

from hand_arcade.timer import RoundTimer


class TestRoundTimer:
    def test_remaining(self):
        timer = RoundTimer(5000, start_ms=1000)
        assert timer.remaining_ms(1000) == 5000
        assert timer.remaining_ms(3500) == 2500

    def test_remaining_clamps_at_zero(self):
        timer = RoundTimer(5000)
        assert timer.remaining_ms(9000) == 0

    def test_expired_strictly_after_duration(self):
        timer = RoundTimer(5000)
        assert not timer.expired(5000)
        assert timer.expired(5001)

    def test_reset(self):
        timer = RoundTimer(5000)
        timer.reset(10_000)
        assert timer.elapsed_ms(10_250) == 250
        assert not timer.expired(14_000)

    def test_seconds_left_counts_down(self):
        timer = RoundTimer(60_000)
        assert timer.seconds_left(0) == 60
        assert timer.seconds_left(999) == 60
        assert timer.seconds_left(1000) == 59
        assert timer.seconds_left(59_999) == 1
        assert timer.seconds_left(61_000) == 0

    @pytest.mark.parametrize("duration", [0, -1])
    def test_rejects_non_positive(self, duration):
        with pytest.raises(ValueError):
            RoundTimer(duration)
