"""
Tracking algorithms
"""

from .association import GreedyAssociator, iou, iou_matrix
from .trajectory import BallTrajectory, TrajectoryPoint, turning_angle

__all__ = [
    'GreedyAssociator', 'iou', 'iou_matrix',
    'BallTrajectory', 'TrajectoryPoint', 'turning_angle'
]
