"""Tests for synthetic hands used by the simulator."""

import numpy as np
import pytest

from hand_arcade.classifier import GestureClassifier
from hand_arcade.gestures import GestureLabel
from hand_arcade.landmarks import INDEX_TIP
from hand_arcade.synthetic import fingertip_offset, pose_hand, synthetic_frames


class TestPoseHand:
    def test_unknown_label(self):
        with pytest.raises(ValueError):
            pose_hand(GestureLabel.NONE)

    @pytest.mark.parametrize("x, y", [(0.05, 0.05), (0.95, 0.95), (0.5, 0.5)])
    def test_offset_keeps_hand_in_image(self, x, y):
        offset = fingertip_offset(x, y, GestureLabel.OPEN, scale=0.5)
        hand = pose_hand(GestureLabel.OPEN, offset, scale=0.5)
        assert hand.min() >= 0.0
        assert hand.max() <= 1.0

    def test_offset_reaches_target(self):
        offset = fingertip_offset(0.5, 0.5, GestureLabel.FIST, scale=0.5)
        tip = pose_hand(GestureLabel.FIST, offset, scale=0.5)[INDEX_TIP]
        assert tip == pytest.approx([0.5, 0.5])


class TestSyntheticFrames:
    def test_frame_count_and_timing(self):
        frames = list(synthetic_frames(1000, fps=20, rng=np.random.default_rng(0)))
        assert len(frames) == 20
        assert frames[1].timestamp_ms == 50

    def test_hands_are_classifiable(self):
        classifier = GestureClassifier()
        frames = synthetic_frames(5000, rng=np.random.default_rng(0))
        labels = {classifier.classify(f.hand) for f in frames if f.has_hand}
        assert GestureLabel.NONE not in labels
        assert len(labels) > 1
