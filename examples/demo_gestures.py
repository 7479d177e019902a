#!/usr/bin/env python3
"""Live webcam pose readout, handy for checking the classifier thresholds.

Usage:
    python examples/demo_gestures.py [--camera 0]
"""

import argparse
import sys

import cv2

sys.path.insert(0, "src")
from hand_arcade import GestureClassifier, GestureLabel, HandDetector


def draw_overlay(frame, label: GestureLabel, reading):
    h, w = frame.shape[:2]
    name = label.display_name or "-"
    cv2.putText(frame, name, (10, 40), cv2.FONT_HERSHEY_SIMPLEX, 1.2, (0, 255, 255), 2)

    if reading is not None:
        states = "  ".join(f"{k}:{v.value[0]}" for k, v in reading.fingers.items())
        thumb = ",".join(sorted(t.value for t in reading.thumb)) or "none"
        cv2.putText(frame, states, (10, h - 40), cv2.FONT_HERSHEY_SIMPLEX, 0.6, (0, 255, 0), 2)
        cv2.putText(frame, f"thumb: {thumb}", (10, h - 15),
                    cv2.FONT_HERSHEY_SIMPLEX, 0.6, (0, 255, 0), 2)
        px, py = reading.palm_center
        cv2.circle(frame, (int(px * w), int(py * h)), int(reading.scale * w), (255, 200, 0), 2)
    return frame


def main():
    parser = argparse.ArgumentParser(description="HandArcade pose readout")
    parser.add_argument("--camera", type=int, default=0, help="Camera index")
    args = parser.parse_args()

    cap = cv2.VideoCapture(args.camera)
    if not cap.isOpened():
        print(f"Error: Cannot open camera {args.camera}")
        sys.exit(1)

    classifier = GestureClassifier()
    print("Press 'q' to quit\n")

    with HandDetector() as detector:
        last = None
        while True:
            ret, frame = cap.read()
            if not ret:
                break
            frame = cv2.flip(frame, 1)

            hands = detector.detect(cv2.cvtColor(frame, cv2.COLOR_BGR2RGB))
            hand = hands[0] if hands else None
            label = classifier.classify(hand)
            if label is not last and label is not GestureLabel.NONE:
                print(f"  🤚 {label.display_name}")
            last = label

            cv2.imshow("HandArcade poses", draw_overlay(frame, label, classifier.read(hand)))
            if cv2.waitKey(1) & 0xFF == ord("q"):
                break

    cap.release()
    cv2.destroyAllWindows()


if __name__ == "__main__":
    main()
