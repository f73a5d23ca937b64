"""
Constants for court analytics
"""

# Tracking parameters
TRACK_THRESH = 0.5
TRACK_BUFFER = 30
MATCH_THRESH = 0.8
MIN_BOX_AREA = 10.0
MIN_HITS_TO_CONFIRM = 3

# Court dimensions (meters, singles court)
COURT_WIDTH_METERS = 10.97
COURT_LENGTH_METERS = 23.77

# Unit conversion
MPS_TO_KMH = 3.6

# Movement classification (real-world units per second, seconds, degrees)
SPRINT_THRESHOLD = 5.0
STOP_THRESHOLD = 0.5
STOP_FROM_THRESHOLD = 2.0
DIRECTION_CHANGE_THRESHOLD = 45.0
EVENT_DEBOUNCE_SECONDS = 0.5
STEADY_INTERVAL_SECONDS = 1.0

# Shot detection
SHOT_PROXIMITY_THRESHOLD = 100.0      # pixels
SHOT_SPEED_THRESHOLD = 10.0           # m/s (36 km/h)
SHOT_DIRECTION_CHANGE_THRESHOLD = 30.0  # degrees
COURT_ZONE_MARGIN = 100.0             # pixels around net / baseline

# Ball trajectory
BALL_TRAJECTORY_MEMORY = 10
PREDICTED_BALL_CONFIDENCE = 0.4
PREDICTED_BALL_SIZE = 10.0

# Payload defaults for detectors that report no confidence
BOX_2D_SCALE = 1000.0
DEFAULT_PLAYER_CONFIDENCE = 0.95
DEFAULT_BALL_CONFIDENCE = 0.9

# Aggregation
HEATMAP_GRID_SIZE = 10

# Label matching
PLAYER_LABELS = ("player", "person")
BALL_LABELS = ("ball",)


def is_ball_label(label: str) -> bool:
    """Check whether a detector label names a ball"""
    label = label.lower()
    return any(token in label for token in BALL_LABELS)


def is_player_label(label: str) -> bool:
    """Check whether a detector label names a player"""
    label = label.lower()
    if is_ball_label(label):
        return False
    return any(token in label for token in PLAYER_LABELS)
