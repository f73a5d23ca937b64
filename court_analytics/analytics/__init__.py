"""
Kinematics, event detection and aggregation
"""

from . import kinematics
from .events import (
    MovementThresholds, MovementClassifier, MovementAnalyzer, MovementStats,
    calculate_stats, generate_report, generate_feedback,
    ShotThresholds, ShotDetector, is_shot, determine_shot_type
)
from .aggregator import Aggregator, build_heatmap, heatmap_coverage

__all__ = [
    'kinematics',
    'MovementThresholds', 'MovementClassifier', 'MovementAnalyzer', 'MovementStats',
    'calculate_stats', 'generate_report', 'generate_feedback',
    'ShotThresholds', 'ShotDetector', 'is_shot', 'determine_shot_type',
    'Aggregator', 'build_heatmap', 'heatmap_coverage'
]
