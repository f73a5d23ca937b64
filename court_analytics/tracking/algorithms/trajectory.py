"""
Ball trajectory history and short-term prediction
"""

import math
from collections import deque
from dataclasses import dataclass
from typing import List, Optional

import numpy as np

from ...core import BallObservation
from ...core.constants import (
    BALL_TRAJECTORY_MEMORY, PREDICTED_BALL_CONFIDENCE, PREDICTED_BALL_SIZE,
    SHOT_DIRECTION_CHANGE_THRESHOLD
)


@dataclass(frozen=True)
class TrajectoryPoint:
    """Detected ball center at a point in time"""
    x: float
    y: float
    timestamp: float
    speed: float = 0.0
    confidence: float = 1.0
    size: float = PREDICTED_BALL_SIZE


def turning_angle(p1: TrajectoryPoint, p2: TrajectoryPoint, p3: TrajectoryPoint) -> float:
    """Signed angle in degrees between the p1->p2 and p2->p3 movement vectors"""
    v1 = (p2.x - p1.x, p2.y - p1.y)
    v2 = (p3.x - p2.x, p3.y - p2.y)
    cross = v1[0] * v2[1] - v1[1] * v2[0]
    dot = v1[0] * v2[0] + v1[1] * v2[1]
    return math.degrees(math.atan2(cross, dot))


class BallTrajectory:
    """Recent ball positions owned by one analysis session"""

    def __init__(self,
                 memory: int = BALL_TRAJECTORY_MEMORY,
                 predicted_confidence: float = PREDICTED_BALL_CONFIDENCE):
        """
        Args:
            memory: Number of detected positions to keep
            predicted_confidence: Confidence assigned to extrapolated positions
        """
        self.points = deque(maxlen=memory)
        self.predicted_confidence = predicted_confidence

    def __len__(self) -> int:
        return len(self.points)

    def add(self, point: TrajectoryPoint):
        """Record a detected ball position"""
        if self.points and point.timestamp <= self.points[-1].timestamp:
            # Timestamps stay strictly increasing
            self.points[-1] = point
            return
        self.points.append(point)

    def last(self, n: int = 3) -> List[TrajectoryPoint]:
        return list(self.points)[-n:]

    def clear(self):
        self.points.clear()

    def has_changed_direction(self, threshold_degrees: float = SHOT_DIRECTION_CHANGE_THRESHOLD) -> bool:
        """Check whether the last three positions turn by more than the threshold"""
        if len(self.points) < 3:
            return False
        p1, p2, p3 = self.last(3)
        return abs(turning_angle(p1, p2, p3)) > threshold_degrees

    def predict(self, timestamp: float) -> Optional[BallObservation]:
        """
        Extrapolate the ball position at a timestamp

        Fits a constant-acceleration model to the last three positions: two
        velocity estimates and one acceleration estimate.

        Returns:
            Predicted observation, or None without three usable points
        """
        if len(self.points) < 3:
            return None

        p1, p2, p3 = self.last(3)
        dt1 = p2.timestamp - p1.timestamp
        dt2 = p3.timestamp - p2.timestamp
        if dt1 <= 0 or dt2 <= 0:
            return None

        v1 = np.array([(p2.x - p1.x) / dt1, (p2.y - p1.y) / dt1])
        v2 = np.array([(p3.x - p2.x) / dt2, (p3.y - p2.y) / dt2])
        acceleration = (v2 - v1) / ((p3.timestamp - p1.timestamp) / 2)

        dt = timestamp - p3.timestamp
        predicted = np.array([p3.x, p3.y]) + v2 * dt + 0.5 * acceleration * dt * dt

        size = float(np.mean([p.size for p in self.points]))

        return BallObservation.from_center(
            float(predicted[0]), float(predicted[1]),
            size=size,
            confidence=self.predicted_confidence,
            predicted=True
        )
