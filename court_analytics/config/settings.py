"""
Global settings management
"""

import os
from dataclasses import dataclass, asdict, fields
from typing import Optional
import json
import logging
from pathlib import Path

from ..core.exceptions import ConfigurationError
from ..core import constants

ENV_PREFIX = "COURT_ANALYTICS_"

logger = logging.getLogger(__name__)


@dataclass
class Settings:
    """Global application settings"""

    # Tracking
    track_thresh: float = constants.TRACK_THRESH
    track_buffer: int = constants.TRACK_BUFFER
    match_thresh: float = constants.MATCH_THRESH
    min_box_area: float = constants.MIN_BOX_AREA
    min_hits_to_confirm: int = constants.MIN_HITS_TO_CONFIRM

    # Kinematics (None derives the factor from court width / frame width)
    pixels_to_unit: Optional[float] = None
    court_width_meters: float = constants.COURT_WIDTH_METERS

    # Movement events
    sprint_threshold: float = constants.SPRINT_THRESHOLD
    stop_threshold: float = constants.STOP_THRESHOLD
    stop_from_threshold: float = constants.STOP_FROM_THRESHOLD
    direction_change_threshold: float = constants.DIRECTION_CHANGE_THRESHOLD
    event_debounce: float = constants.EVENT_DEBOUNCE_SECONDS
    steady_interval: float = constants.STEADY_INTERVAL_SECONDS

    # Shots
    shot_proximity_threshold: float = constants.SHOT_PROXIMITY_THRESHOLD
    shot_speed_threshold: float = constants.SHOT_SPEED_THRESHOLD
    shot_direction_threshold: float = constants.SHOT_DIRECTION_CHANGE_THRESHOLD
    court_zone_margin: float = constants.COURT_ZONE_MARGIN
    dominant_side: str = "right"

    # Ball trajectory
    ball_trajectory_memory: int = constants.BALL_TRAJECTORY_MEMORY
    predicted_ball_confidence: float = constants.PREDICTED_BALL_CONFIDENCE

    # Aggregation
    heatmap_grid_size: int = constants.HEATMAP_GRID_SIZE

    # Logging
    log_level: str = "INFO"

    def validate(self) -> 'Settings':
        """Raise ConfigurationError on out-of-range values"""
        if not 0.0 <= self.track_thresh <= 1.0:
            raise ConfigurationError(f"track_thresh must be in [0, 1], got {self.track_thresh}")
        if not 0.0 < self.match_thresh <= 1.0:
            raise ConfigurationError(f"match_thresh must be in (0, 1], got {self.match_thresh}")
        if self.track_buffer < 0:
            raise ConfigurationError(f"track_buffer must be >= 0, got {self.track_buffer}")
        if self.min_hits_to_confirm < 1:
            raise ConfigurationError("min_hits_to_confirm must be >= 1")
        if self.min_box_area < 0:
            raise ConfigurationError("min_box_area must be >= 0")
        if self.pixels_to_unit is not None and self.pixels_to_unit <= 0:
            raise ConfigurationError("pixels_to_unit must be positive")
        if self.stop_threshold >= self.stop_from_threshold:
            raise ConfigurationError("stop_threshold must be below stop_from_threshold")
        if self.heatmap_grid_size < 1:
            raise ConfigurationError("heatmap_grid_size must be >= 1")
        if self.ball_trajectory_memory < 3:
            raise ConfigurationError("ball_trajectory_memory must keep at least 3 points")
        if self.dominant_side not in ("right", "left"):
            raise ConfigurationError(f"dominant_side must be 'right' or 'left', got {self.dominant_side!r}")
        return self

    @classmethod
    def from_file(cls, filepath: str) -> 'Settings':
        """Load settings from JSON file"""
        with open(filepath, 'r') as f:
            data = json.load(f)
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            logger.warning(f"Ignoring unknown settings: {sorted(unknown)}")
        return cls(**{k: v for k, v in data.items() if k in known}).validate()

    @classmethod
    def from_env(cls) -> 'Settings':
        """Load settings from environment variables"""
        settings = cls()

        for field in fields(settings):
            env_key = f"{ENV_PREFIX}{field.name.upper()}"
            if env_key not in os.environ:
                continue
            value = os.environ[env_key]
            default = getattr(settings, field.name)
            try:
                if isinstance(default, bool):
                    value = value.lower() in ('true', '1', 'yes')
                elif isinstance(default, int):
                    value = int(value)
                elif isinstance(default, float) or field.name == 'pixels_to_unit':
                    value = float(value)
            except ValueError as e:
                raise ConfigurationError(f"{env_key}={value!r} is not a valid {field.name}") from e
            setattr(settings, field.name, value)

        return settings.validate()

    def save(self, filepath: str):
        """Save settings to JSON file"""
        Path(filepath).parent.mkdir(parents=True, exist_ok=True)
        with open(filepath, 'w') as f:
            json.dump(asdict(self), f, indent=2)


# Global settings instance
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get global settings instance"""
    global _settings

    if _settings is None:
        config_file = os.environ.get(f"{ENV_PREFIX}CONFIG", "court_analytics.json")
        if os.path.exists(config_file):
            _settings = Settings.from_file(config_file)
        else:
            _settings = Settings.from_env()

    return _settings


def reset_settings():
    """Reset settings (mainly for testing)"""
    global _settings
    _settings = None
