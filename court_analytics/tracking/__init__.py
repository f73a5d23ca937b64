"""
Object tracking for court analytics
"""

from .tracker import ByteTracker
from .algorithms import GreedyAssociator, BallTrajectory, TrajectoryPoint, iou, iou_matrix

__all__ = [
    'ByteTracker',
    'GreedyAssociator', 'BallTrajectory', 'TrajectoryPoint', 'iou', 'iou_matrix'
]
