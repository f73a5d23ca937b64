"""
Movement and shot event detection
"""

from .movement import (
    MovementThresholds, MovementClassifier, MovementAnalyzer, MovementStats,
    calculate_stats, compass_direction, generate_report, generate_feedback
)
from .shots import (
    ShotThresholds, ShotDetector, is_shot, evaluate_conditions, determine_shot_type
)

__all__ = [
    'MovementThresholds', 'MovementClassifier', 'MovementAnalyzer', 'MovementStats',
    'calculate_stats', 'compass_direction', 'generate_report', 'generate_feedback',
    'ShotThresholds', 'ShotDetector', 'is_shot', 'evaluate_conditions', 'determine_shot_type'
]
