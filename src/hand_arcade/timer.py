"""Round timing shared by the timed games."""

from __future__ import annotations


class RoundTimer:
    """Wall-clock round timer in milliseconds.

    The timer never pauses; a round is restarted with :meth:`reset`.
    """

    def __init__(self, duration_ms: int, start_ms: int = 0):
        if duration_ms <= 0:
            raise ValueError(f"round duration must be positive, got {duration_ms}")
        self.duration_ms = duration_ms
        self.round_start_ms = start_ms

    def reset(self, now: int):
        self.round_start_ms = now

    def elapsed_ms(self, now: int) -> int:
        return now - self.round_start_ms

    def remaining_ms(self, now: int) -> int:
        return max(0, self.duration_ms - self.elapsed_ms(now))

    def expired(self, now: int) -> bool:
        return self.elapsed_ms(now) > self.duration_ms

    def seconds_left(self, now: int) -> int:
        """Whole seconds left, as shown in the HUD countdown."""
        return max(0, self.duration_ms // 1000 - self.elapsed_ms(now) // 1000)
