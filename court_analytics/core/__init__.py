"""
Core domain models and interfaces for court analytics
"""

from .models import (
    Detection, Track, TrackState, TrackedPosition, KinematicSample,
    MovementEvent, MovementEventType, ShotType, ShotConditions, ShotEvent,
    CourtInfo, BallObservation, FrameState,
    TrackSummary, BallSummary, AnalysisSummary
)
from .interfaces import Detector, Tracker
from .exceptions import (
    CourtAnalyticsError, InvalidDetection, KinematicsError,
    ZeroElapsedTimeError, OutOfOrderSampleError, DetectorFailure,
    FrameOrderError, EmptySequenceError, ConfigurationError
)
from .constants import (
    TRACK_THRESH, TRACK_BUFFER, MATCH_THRESH, MIN_BOX_AREA,
    COURT_WIDTH_METERS, COURT_LENGTH_METERS, HEATMAP_GRID_SIZE,
    is_ball_label, is_player_label
)

__all__ = [
    # Models
    'Detection', 'Track', 'TrackState', 'TrackedPosition', 'KinematicSample',
    'MovementEvent', 'MovementEventType', 'ShotType', 'ShotConditions', 'ShotEvent',
    'CourtInfo', 'BallObservation', 'FrameState',
    'TrackSummary', 'BallSummary', 'AnalysisSummary',
    # Interfaces
    'Detector', 'Tracker',
    # Exceptions
    'CourtAnalyticsError', 'InvalidDetection', 'KinematicsError',
    'ZeroElapsedTimeError', 'OutOfOrderSampleError', 'DetectorFailure',
    'FrameOrderError', 'EmptySequenceError', 'ConfigurationError',
    # Constants
    'TRACK_THRESH', 'TRACK_BUFFER', 'MATCH_THRESH', 'MIN_BOX_AREA',
    'COURT_WIDTH_METERS', 'COURT_LENGTH_METERS', 'HEATMAP_GRID_SIZE',
    'is_ball_label', 'is_player_label'
]
