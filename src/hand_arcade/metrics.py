"""Prometheus-compatible metrics for the arcade server.

Exposes /metrics in Prometheus text exposition format.
The text format is generated directly, without a client library.

Tracked metrics:
- hand_arcade_ticks_total (counter)
- hand_arcade_tick_latency_seconds (histogram)
- hand_arcade_hand_detection_rate (gauge)
- hand_arcade_scores_total (counter, by game type)
- hand_arcade_sessions_total (counter, by game type)
- hand_arcade_active_connections (gauge)
"""

from __future__ import annotations

import bisect
import threading
import time
from collections import Counter
from itertools import accumulate

# Tick latency covers detection plus the game update, 1 ms to 100 ms
LATENCY_BUCKETS = (0.001, 0.002, 0.005, 0.010, 0.020, 0.033, 0.050, 0.100)


def _family(name: str, kind: str, help_text: str, samples: list[str]) -> list[str]:
    return [f"# HELP {name} {help_text}", f"# TYPE {name} {kind}", *samples, ""]


class _Histogram:
    """Fixed-bucket histogram; the last slot counts values above every bucket."""

    def __init__(self, buckets):
        self.buckets = sorted(buckets)
        self._slots = [0] * (len(self.buckets) + 1)
        self.sum = 0.0
        self._lock = threading.Lock()

    @property
    def count(self) -> int:
        return sum(self._slots)

    def observe(self, value: float):
        with self._lock:
            self._slots[bisect.bisect_left(self.buckets, value)] += 1
            self.sum += value

    def samples(self, name: str) -> list[str]:
        with self._lock:
            cumulative = list(accumulate(self._slots))
            total = self.sum
        lines = [
            f'{name}_bucket{{le="{bound}"}} {n}'
            for bound, n in zip(self.buckets, cumulative)
        ]
        lines.append(f'{name}_bucket{{le="+Inf"}} {cumulative[-1]}')
        lines.append(f"{name}_sum {total:.6f}")
        lines.append(f"{name}_count {cumulative[-1]}")
        return lines


class MetricsCollector:
    """Collects tick, detection, session and score metrics."""

    def __init__(self):
        self._scores: Counter = Counter()
        self._sessions: Counter = Counter()
        self._ticks_total = 0
        self._hand_detection_rate = 0.0
        self._active_connections = 0
        self._latency = _Histogram(LATENCY_BUCKETS)
        self._lock = threading.Lock()
        self._start_time = time.time()

    def record_tick(self, latency_seconds: float, hand_detected: bool):
        with self._lock:
            self._ticks_total += 1
            # Exponential moving average over recent ticks
            hit = 1.0 if hand_detected else 0.0
            self._hand_detection_rate += 0.05 * (hit - self._hand_detection_rate)
        self._latency.observe(latency_seconds)

    def record_score(self, game_type: str):
        with self._lock:
            self._scores[game_type] += 1

    def record_session(self, game_type: str):
        with self._lock:
            self._sessions[game_type] += 1

    def set_connections(self, count: int):
        self._active_connections = count

    def render(self) -> str:
        """Render all metrics in Prometheus text exposition format."""
        with self._lock:
            ticks = self._ticks_total
            rate = self._hand_detection_rate
            scores = sorted(self._scores.items())
            sessions = sorted(self._sessions.items())

        lines: list[str] = []
        lines += _family("hand_arcade_uptime_seconds", "gauge", "Time since server start",
                         [f"hand_arcade_uptime_seconds {time.time() - self._start_time:.1f}"])
        lines += _family("hand_arcade_ticks_total", "counter", "Total game ticks processed",
                         [f"hand_arcade_ticks_total {ticks}"])
        lines += _family("hand_arcade_tick_latency_seconds", "histogram",
                         "Detection plus game update latency in seconds",
                         self._latency.samples("hand_arcade_tick_latency_seconds"))
        lines += _family("hand_arcade_hand_detection_rate", "gauge",
                         "Moving average of ticks with a detected hand",
                         [f"hand_arcade_hand_detection_rate {rate:.4f}"])
        lines += _family("hand_arcade_scores_total", "counter", "Points awarded by game type",
                         [f'hand_arcade_scores_total{{game="{g}"}} {n}' for g, n in scores])
        lines += _family("hand_arcade_sessions_total", "counter", "Sessions started by game type",
                         [f'hand_arcade_sessions_total{{game="{g}"}} {n}' for g, n in sessions])
        lines += _family("hand_arcade_active_connections", "gauge", "Current WebSocket connections",
                         [f"hand_arcade_active_connections {self._active_connections}"])
        return "\n".join(lines) + "\n"

    @property
    def score_counts(self) -> dict[str, int]:
        with self._lock:
            return dict(self._scores)

    @property
    def ticks_total(self) -> int:
        return self._ticks_total
