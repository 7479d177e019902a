#!/usr/bin/env python3
"""HandArcade benchmark: classifier and game tick latency on synthetic hands.

No camera required.

Usage:
    python examples/benchmark.py
    python examples/benchmark.py --seconds 120 --fps 60
"""

from __future__ import annotations

import argparse
import sys
import time
from pathlib import Path

import numpy as np

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from hand_arcade.classifier import GestureClassifier
from hand_arcade.games import GAME_TYPES, create_game
from hand_arcade.synthetic import synthetic_frames


def percentile_ms(times: list[float], q: float) -> float:
    return float(np.percentile(times, q)) * 1000


def bench_classifier(frames) -> list[float]:
    classifier = GestureClassifier()
    times = []
    for frame in frames:
        t0 = time.perf_counter()
        classifier.classify(frame.landmarks)
        times.append(time.perf_counter() - t0)
    return times


def bench_game(game_type: str, frames, seed: int) -> tuple[list[float], int]:
    game = create_game(game_type, rng=np.random.default_rng(seed))
    score = 0
    times = []
    for frame in frames:
        t0 = time.perf_counter()
        score += game.advance(frame).score_delta
        times.append(time.perf_counter() - t0)
    return times, score


def main():
    parser = argparse.ArgumentParser(description="HandArcade benchmark")
    parser.add_argument("--seconds", type=int, default=60, help="Simulated seconds per game")
    parser.add_argument("--fps", type=float, default=30.0, help="Simulated frame rate")
    parser.add_argument("--seed", type=int, default=42)
    args = parser.parse_args()

    frames = list(synthetic_frames(args.seconds * 1000, fps=args.fps,
                                   rng=np.random.default_rng(args.seed)))
    print(f"⚡ {len(frames)} synthetic frames ({args.seconds}s at {args.fps:.0f} FPS)\n")

    times = bench_classifier(frames)
    print(f"{'classifier':16s} avg={np.mean(times) * 1000:.3f}ms  p95={percentile_ms(times, 95):.3f}ms")

    for game_type in GAME_TYPES:
        times, score = bench_game(game_type, frames, args.seed)
        print(f"{game_type:16s} avg={np.mean(times) * 1000:.3f}ms  "
              f"p95={percentile_ms(times, 95):.3f}ms  score={score}")


if __name__ == "__main__":
    main()
