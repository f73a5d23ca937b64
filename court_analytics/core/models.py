"""
Core data models for court analytics
"""

from dataclasses import dataclass, field
from typing import List, Dict, Mapping, Optional, Tuple, Any
from types import MappingProxyType
from enum import Enum
import math
import numpy as np

from .exceptions import InvalidDetection
from .constants import MPS_TO_KMH

BBox = Tuple[float, float, float, float]  # (x, y, width, height), top-left origin
Heatmap = Tuple[Tuple[int, ...], ...]


class TrackState(Enum):
    """State of a track"""
    TENTATIVE = "tentative"
    CONFIRMED = "confirmed"
    DELETED = "deleted"


class MovementEventType(Enum):
    """Discrete movement classifications"""
    START = "start"
    SPRINT = "sprint"
    STOP = "stop"
    CHANGE_DIRECTION = "change_direction"
    STEADY = "steady"


class ShotType(Enum):
    """Shot subtypes resolved from player/ball geometry"""
    FOREHAND = "forehand"
    BACKHAND = "backhand"
    SERVE = "serve"
    VOLLEY = "volley"
    UNKNOWN = "unknown"


@dataclass
class Detection:
    """Single object detection produced by the external detector"""
    class_name: str
    bbox: BBox
    confidence: float

    def __post_init__(self):
        if isinstance(self.bbox, (list, np.ndarray)):
            self.bbox = tuple(self.bbox)

    @property
    def center(self) -> np.ndarray:
        """Get center point of bbox"""
        x, y, w, h = self.bbox
        return np.array([x + w / 2, y + h / 2])

    @property
    def area(self) -> float:
        """Get area of bbox"""
        return float(self.bbox[2] * self.bbox[3])

    @property
    def xyxy(self) -> np.ndarray:
        """Get bbox as [x1, y1, x2, y2]"""
        x, y, w, h = self.bbox
        return np.array([x, y, x + w, y + h], dtype=float)

    def validate(self) -> 'Detection':
        """
        Check the detection is well formed

        Raises:
            InvalidDetection: bbox is not four finite numbers, has a negative
                size, or confidence is outside [0, 1]
        """
        try:
            values = [float(v) for v in self.bbox]
        except (TypeError, ValueError) as e:
            raise InvalidDetection(f"bbox is not numeric: {self.bbox!r}") from e

        if len(values) != 4:
            raise InvalidDetection(f"bbox needs 4 values, got {len(values)}")
        if not all(math.isfinite(v) for v in values):
            raise InvalidDetection(f"bbox has non-finite values: {self.bbox!r}")
        if values[2] < 0 or values[3] < 0:
            raise InvalidDetection(f"bbox has negative size: {self.bbox!r}")

        try:
            confidence = float(self.confidence)
        except (TypeError, ValueError) as e:
            raise InvalidDetection(f"confidence is not numeric: {self.confidence!r}") from e
        if not 0.0 <= confidence <= 1.0:
            raise InvalidDetection(f"confidence out of range: {confidence}")

        self.bbox = tuple(values)
        self.confidence = confidence
        return self

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Detection':
        """Build a detection from a JSON-style mapping"""
        if not isinstance(data, Mapping):
            raise InvalidDetection(f"detection is not a mapping: {data!r}")

        label = data.get('class', data.get('class_name', data.get('label')))
        if label is None:
            raise InvalidDetection(f"detection has no class label: {data!r}")

        if 'bbox' in data:
            bbox = data['bbox']
        else:
            try:
                bbox = (data['x'], data['y'], data['width'], data['height'])
            except KeyError as e:
                raise InvalidDetection(f"detection has no bbox: {data!r}") from e

        return cls(
            class_name=str(label),
            bbox=bbox,
            confidence=data.get('confidence', data.get('conf', 1.0))
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'class': self.class_name,
            'bbox': list(self.bbox),
            'confidence': self.confidence
        }


@dataclass
class Track:
    """Persistent identity of one physical object across frames"""
    id: int
    class_name: str
    bbox: BBox
    confidence: float
    age: int = 1
    hits: int = 1
    time_since_update: int = 0
    state: TrackState = TrackState.TENTATIVE
    start_frame: int = 0
    last_seen_frame: int = 0

    @property
    def center(self) -> np.ndarray:
        """Get center point of the latest bbox"""
        x, y, w, h = self.bbox
        return np.array([x + w / 2, y + h / 2])

    @property
    def is_active(self) -> bool:
        """Check if track is still live"""
        return self.state in (TrackState.TENTATIVE, TrackState.CONFIRMED)

    @property
    def is_confirmed(self) -> bool:
        return self.state == TrackState.CONFIRMED

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'class': self.class_name,
            'bbox': list(self.bbox),
            'confidence': self.confidence,
            'age': self.age,
            'hits': self.hits,
            'time_since_update': self.time_since_update,
            'state': self.state.value
        }


@dataclass(frozen=True)
class TrackedPosition:
    """Center of a track's bbox at a point in time"""
    track_id: int
    x: float
    y: float
    timestamp: float

    @property
    def point(self) -> np.ndarray:
        return np.array([self.x, self.y])

    @classmethod
    def from_track(cls, track: Track, timestamp: float) -> 'TrackedPosition':
        cx, cy = track.center
        return cls(track_id=track.id, x=float(cx), y=float(cy), timestamp=timestamp)


@dataclass(frozen=True)
class KinematicSample:
    """Speed, distance and heading between two consecutive positions"""
    distance: float
    speed: float
    direction_degrees: float
    elapsed: float

    @property
    def speed_kmh(self) -> float:
        return self.speed * MPS_TO_KMH


@dataclass
class MovementEvent:
    """Movement classification emitted when a sample crosses a threshold"""
    type: MovementEventType
    timestamp: float
    details: str = ""
    track_id: Optional[int] = None
    speed: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'type': self.type.value,
            'timestamp': self.timestamp,
            'details': self.details,
            'track_id': self.track_id,
            'speed': self.speed
        }


@dataclass(frozen=True)
class ShotConditions:
    """Independently evaluated shot criteria"""
    proximity: bool = False
    speed_increase: bool = False
    direction_change: bool = False
    moving_away: bool = False

    @property
    def is_shot(self) -> bool:
        return ((self.proximity and self.speed_increase) or
                (self.proximity and self.direction_change) or
                (self.speed_increase and self.moving_away))

    def to_dict(self) -> Dict[str, bool]:
        return {
            'proximity': self.proximity,
            'speed_increase': self.speed_increase,
            'direction_change': self.direction_change,
            'moving_away': self.moving_away
        }


@dataclass
class ShotEvent:
    """Player/ball interaction classified as a strike"""
    is_shot: bool
    timestamp: float
    shot_type: ShotType = ShotType.UNKNOWN
    player_id: Optional[int] = None
    ball_speed: Optional[float] = None
    conditions: Optional[ShotConditions] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'is_shot': self.is_shot,
            'timestamp': self.timestamp,
            'shot_type': self.shot_type.value,
            'player_id': self.player_id,
            'ball_speed': self.ball_speed,
            'conditions': self.conditions.to_dict() if self.conditions else None
        }


@dataclass(frozen=True)
class CourtInfo:
    """Frame size and the court lines used by the shot heuristics (pixels)"""
    width: float
    height: float
    baseline_y: float
    net_y: float
    service_line_y: float

    @classmethod
    def from_frame_size(cls, width: float, height: float) -> 'CourtInfo':
        """Assume the court fills the frame with the near baseline at the bottom"""
        return cls(
            width=float(width),
            height=float(height),
            baseline_y=height * 0.9,
            net_y=height * 0.5,
            service_line_y=height * 0.7
        )


@dataclass
class BallObservation:
    """Ball box for one frame, detected or predicted"""
    x: float
    y: float
    width: float
    height: float
    confidence: float
    predicted: bool = False
    track_id: Optional[int] = None

    @property
    def center(self) -> np.ndarray:
        return np.array([self.x + self.width / 2, self.y + self.height / 2])

    @property
    def bbox(self) -> BBox:
        return (self.x, self.y, self.width, self.height)

    @classmethod
    def from_track(cls, track: Track) -> 'BallObservation':
        x, y, w, h = track.bbox
        return cls(x=x, y=y, width=w, height=h,
                   confidence=track.confidence, track_id=track.id)

    @classmethod
    def from_center(cls, cx: float, cy: float, size: float, confidence: float,
                    predicted: bool = True) -> 'BallObservation':
        return cls(x=cx - size / 2, y=cy - size / 2, width=size, height=size,
                   confidence=confidence, predicted=predicted)

    def to_dict(self) -> Dict[str, Any]:
        cx, cy = self.center
        return {
            'bbox': list(self.bbox),
            'center': [float(cx), float(cy)],
            'confidence': self.confidence,
            'predicted': self.predicted,
            'track_id': self.track_id
        }


@dataclass
class FrameState:
    """Everything the session derived from one frame"""
    frame_idx: int
    timestamp: float
    tracks: List[Track] = field(default_factory=list)
    positions: Dict[int, TrackedPosition] = field(default_factory=dict)
    speeds: Dict[int, float] = field(default_factory=dict)
    ball: Optional[BallObservation] = None
    ball_speed: Optional[float] = None
    movement_events: List[MovementEvent] = field(default_factory=list)
    shot: Optional[ShotEvent] = None
    degraded: bool = False

    @property
    def is_shot(self) -> bool:
        return self.shot is not None and self.shot.is_shot

    def track_classes(self) -> Dict[int, str]:
        return {track.id: track.class_name for track in self.tracks}

    def to_dict(self) -> Dict[str, Any]:
        return {
            'frame_idx': self.frame_idx,
            'timestamp': self.timestamp,
            'tracks': [t.to_dict() for t in self.tracks],
            'positions': {
                str(track_id): [p.x, p.y] for track_id, p in self.positions.items()
            },
            'speeds': {str(track_id): s for track_id, s in self.speeds.items()},
            'ball': self.ball.to_dict() if self.ball else None,
            'ball_speed': self.ball_speed,
            'movement_events': [e.to_dict() for e in self.movement_events],
            'shot': self.shot.to_dict() if self.shot else None,
            'degraded': self.degraded
        }


def normalize_heatmap(heatmap: Heatmap) -> List[List[float]]:
    """Scale raw counts to [0, 1] for display"""
    grid = np.asarray(heatmap, dtype=float)
    peak = grid.max() if grid.size else 0.0
    if peak <= 0:
        return grid.tolist()
    return (grid / peak).tolist()


@dataclass(frozen=True)
class TrackSummary:
    """Per-track totals over a whole sequence"""
    track_id: int
    class_name: str
    total_distance: float
    max_speed: float
    average_speed: float
    heatmap: Heatmap
    coverage: float
    shots_hit: int
    shot_types: Mapping[str, int]
    movement_events: Mapping[str, int]
    first_seen_frame: int
    first_seen_timestamp: float
    samples: int

    def __post_init__(self):
        object.__setattr__(self, 'shot_types', MappingProxyType(dict(self.shot_types)))
        object.__setattr__(self, 'movement_events', MappingProxyType(dict(self.movement_events)))

    @property
    def max_speed_kmh(self) -> float:
        return self.max_speed * MPS_TO_KMH

    @property
    def average_speed_kmh(self) -> float:
        return self.average_speed * MPS_TO_KMH

    def shot_count(self, shot_type: ShotType) -> int:
        return self.shot_types.get(shot_type.value, 0)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.track_id,
            'class': self.class_name,
            'total_distance': self.total_distance,
            'max_speed': self.max_speed,
            'average_speed': self.average_speed,
            'max_speed_kmh': self.max_speed_kmh,
            'average_speed_kmh': self.average_speed_kmh,
            'heatmap': [list(row) for row in self.heatmap],
            'heatmap_normalized': normalize_heatmap(self.heatmap),
            'coverage': self.coverage,
            'shots_hit': self.shots_hit,
            'forehand_count': self.shot_count(ShotType.FOREHAND),
            'backhand_count': self.shot_count(ShotType.BACKHAND),
            'serve_count': self.shot_count(ShotType.SERVE),
            'volley_count': self.shot_count(ShotType.VOLLEY),
            'shot_types': dict(self.shot_types),
            'movement_events': dict(self.movement_events),
            'first_seen_frame': self.first_seen_frame,
            'first_seen_timestamp': self.first_seen_timestamp,
            'samples': self.samples
        }


@dataclass(frozen=True)
class BallSummary:
    """Global ball statistics"""
    average_speed: float
    max_speed: float
    heatmap: Heatmap
    observed_frames: int
    predicted_frames: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            'average_speed': self.average_speed,
            'max_speed': self.max_speed,
            'average_speed_kmh': self.average_speed * MPS_TO_KMH,
            'max_speed_kmh': self.max_speed * MPS_TO_KMH,
            'heatmap': [list(row) for row in self.heatmap],
            'observed_frames': self.observed_frames,
            'predicted_frames': self.predicted_frames
        }


@dataclass(frozen=True)
class AnalysisSummary:
    """Aggregate over an entire processed sequence"""
    frames_processed: int
    degraded_frames: int
    duration: float
    grid_size: int
    tracks: Mapping[int, TrackSummary]
    primary_track_id: Optional[int]
    ball: BallSummary
    court_coverage: float
    shot_types: Mapping[str, int]

    def __post_init__(self):
        object.__setattr__(self, 'tracks', MappingProxyType(dict(self.tracks)))
        object.__setattr__(self, 'shot_types', MappingProxyType(dict(self.shot_types)))

    @property
    def primary(self) -> Optional[TrackSummary]:
        """First-seen player, for consumers that expect a single entity"""
        if self.primary_track_id is None:
            return None
        return self.tracks.get(self.primary_track_id)

    @property
    def total_shots(self) -> int:
        return sum(self.shot_types.values())

    def to_dict(self) -> Dict[str, Any]:
        primary = self.primary
        return {
            'frames_processed': self.frames_processed,
            'degraded_frames': self.degraded_frames,
            'duration': self.duration,
            'grid_size': self.grid_size,
            'primary_track_id': self.primary_track_id,
            'player_stats': primary.to_dict() if primary else None,
            'tracks': {str(track_id): s.to_dict() for track_id, s in self.tracks.items()},
            'ball': self.ball.to_dict(),
            'court_coverage': self.court_coverage,
            'shot_types': dict(self.shot_types)
        }
