"""
Posture aggregation for the pose sampler.

The aggregator keeps the last POSTURE_BUFFER spine-tilt samples and reports
their mean. Nothing is carried over between samples, so the average always
reflects exactly the current window.
"""

from collections import deque
from typing import Dict, Optional

import numpy as np

from config import POSTURE_BUFFER


class PostureAggregator:
    """Fixed-capacity FIFO of spine-tilt angles (degrees from vertical)."""

    def __init__(self, capacity: int = POSTURE_BUFFER):
        self.capacity = capacity
        self.angles = deque(maxlen=capacity)

    def record_angle(self, angle: float):
        # deque(maxlen) drops the oldest sample once full
        self.angles.append(float(angle))

    def current_average(self) -> float:
        if not self.angles:
            return 0.0
        return float(np.mean(self.angles))

    def __len__(self):
        return len(self.angles)


def midpoint(kp1: Optional[Dict], kp2: Optional[Dict]) -> Optional[Dict]:
    """Average position of two keypoints, or None if either is missing."""
    if not kp1 or not kp2:
        return None
    return {
        'x': (kp1['position']['x'] + kp2['position']['x']) / 2,
        'y': (kp1['position']['y'] + kp2['position']['y']) / 2,
    }


def spine_tilt_angle(shoulder: Optional[Dict], hip: Optional[Dict]) -> float:
    """
    Deviation of the hip-to-shoulder line from vertical, in degrees.

    Image y grows downward, so an upright torso gives a line at 90 degrees
    (or -90 before folding). The angle is folded into [0, 180) and the
    distance from 90 is returned: 0 when upright, growing with lean in
    either direction.

    Args:
        shoulder: Shoulder midpoint {'x', 'y'}
        hip: Hip midpoint {'x', 'y'}
    """
    if not shoulder or not hip:
        return 0.0

    dy = shoulder['y'] - hip['y']
    dx = shoulder['x'] - hip['x']

    degrees = float(np.degrees(np.arctan2(dy, dx)))
    if degrees < 0:
        degrees += 180
    degrees %= 180

    return abs(degrees - 90)
