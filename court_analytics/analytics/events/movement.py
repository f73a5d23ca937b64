"""
Movement event classification from consecutive kinematic samples
"""

import logging
import math
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

from ...core import (
    TrackedPosition, KinematicSample, KinematicsError,
    MovementEvent, MovementEventType
)
from ...core.constants import (
    SPRINT_THRESHOLD, STOP_THRESHOLD, STOP_FROM_THRESHOLD,
    DIRECTION_CHANGE_THRESHOLD, EVENT_DEBOUNCE_SECONDS, STEADY_INTERVAL_SECONDS
)
from ..kinematics import kinematic_sample, iter_samples, angle_between, pixel_distance

DIRECTION_NOISE_PIXELS = 2.0

# Feedback bands, in units per second
FEEDBACK_SLOW_SPEED = 5.0
FEEDBACK_FAST_SPEED = 40.0
FEEDBACK_ACCELERATION = 10.0

FEEDBACK_EVENT_PHRASES = {
    MovementEventType.SPRINT: "{name} started sprinting",
    MovementEventType.STOP: "{name} came to a stop",
    MovementEventType.CHANGE_DIRECTION: "{name} changed direction",
    MovementEventType.STEADY: "{name} maintained a steady pace",
}

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MovementThresholds:
    """Thresholds for movement classification"""
    sprint: float = SPRINT_THRESHOLD
    stop: float = STOP_THRESHOLD
    stop_from: float = STOP_FROM_THRESHOLD
    direction_change: float = DIRECTION_CHANGE_THRESHOLD
    debounce: float = EVENT_DEBOUNCE_SECONDS
    steady_interval: float = STEADY_INTERVAL_SECONDS

    @classmethod
    def from_settings(cls, settings) -> 'MovementThresholds':
        return cls(
            sprint=settings.sprint_threshold,
            stop=settings.stop_threshold,
            stop_from=settings.stop_from_threshold,
            direction_change=settings.direction_change_threshold,
            debounce=settings.event_debounce,
            steady_interval=settings.steady_interval
        )


class MovementClassifier:
    """Classifies one track's samples into movement events"""

    def __init__(self, track_id: Optional[int] = None,
                 thresholds: MovementThresholds = MovementThresholds()):
        self.track_id = track_id
        self.thresholds = thresholds
        self.prev_speed: Optional[float] = None
        self.prev_heading: Optional[float] = None
        self.last_event_time: Optional[float] = None

    def start(self, timestamp: float) -> MovementEvent:
        """Mark the first observation of the track"""
        self.last_event_time = timestamp
        return MovementEvent(
            type=MovementEventType.START,
            timestamp=timestamp,
            details="Tracking started",
            track_id=self.track_id,
            speed=0.0
        )

    def classify(self, sample: KinematicSample, timestamp: float) -> Optional[MovementEvent]:
        """
        Classify one sample

        Checked in priority order: sprint (rising edge), stop (after a
        period above ``stop_from``), direction change, steady. Nothing is
        emitted within ``debounce`` seconds of the previous event.
        """
        t = self.thresholds
        since_last = math.inf if self.last_event_time is None else timestamp - self.last_event_time
        prev_speed = self.prev_speed if self.prev_speed is not None else 0.0

        turn = 0.0
        if self.prev_heading is not None and sample.distance > 0:
            turn = angle_between(self.prev_heading, sample.direction_degrees)

        event_type = None
        details = ""
        if since_last >= t.debounce:
            if sample.speed > t.sprint and prev_speed < t.sprint:
                event_type = MovementEventType.SPRINT
                details = f"Sprint detected at {sample.speed:.1f} m/s"
            elif sample.speed < t.stop and prev_speed > t.stop_from:
                event_type = MovementEventType.STOP
                details = f"Stop detected ({sample.speed:.1f} m/s)"
            elif turn > t.direction_change:
                event_type = MovementEventType.CHANGE_DIRECTION
                details = f"Direction change of {round(turn)}°"
            elif since_last >= t.steady_interval:
                event_type = MovementEventType.STEADY
                details = f"Steady movement at {sample.speed:.1f} m/s"

        self.prev_speed = sample.speed
        if sample.distance > 0:
            self.prev_heading = sample.direction_degrees

        if event_type is None:
            return None

        self.last_event_time = timestamp
        return MovementEvent(
            type=event_type,
            timestamp=timestamp,
            details=details,
            track_id=self.track_id,
            speed=sample.speed
        )


class MovementAnalyzer:
    """Per-track movement state for one analysis session"""

    def __init__(self, pixels_to_unit: float,
                 thresholds: MovementThresholds = MovementThresholds()):
        self.pixels_to_unit = pixels_to_unit
        self.thresholds = thresholds
        self.classifiers: Dict[int, MovementClassifier] = {}
        self.last_positions: Dict[int, TrackedPosition] = {}
        self.logger = logging.getLogger(__name__)

    def update(self, position: TrackedPosition) -> Tuple[Optional[KinematicSample], List[MovementEvent]]:
        """
        Feed the next position of a track

        Returns:
            The kinematic sample against the track's previous position (None
            for the first position or an unusable pair) and any events
        """
        track_id = position.track_id
        classifier = self.classifiers.get(track_id)
        if classifier is None:
            classifier = MovementClassifier(track_id, self.thresholds)
            self.classifiers[track_id] = classifier
            self.last_positions[track_id] = position
            return None, [classifier.start(position.timestamp)]

        previous = self.last_positions[track_id]
        try:
            sample = kinematic_sample(previous, position, self.pixels_to_unit)
        except KinematicsError as e:
            self.logger.debug(f"Skipping sample for track {track_id}: {e}")
            return None, []

        self.last_positions[track_id] = position
        event = classifier.classify(sample, position.timestamp)
        return sample, [event] if event else []

    def forget(self, track_id: int):
        self.classifiers.pop(track_id, None)
        self.last_positions.pop(track_id, None)

    def calculate_stats(self, positions: Sequence[TrackedPosition]) -> 'MovementStats':
        """Offline statistics for a complete position sequence"""
        return calculate_stats(positions, self.pixels_to_unit, self.thresholds)


@dataclass
class MovementStats:
    """Movement summary for one position sequence"""
    distance: float = 0.0
    max_speed: float = 0.0
    avg_speed: float = 0.0
    speed: float = 0.0
    acceleration: float = 0.0
    direction: str = "stationary"
    events: List[MovementEvent] = field(default_factory=list)

    def to_dict(self) -> Dict:
        return {
            'distance': self.distance,
            'max_speed': self.max_speed,
            'avg_speed': self.avg_speed,
            'speed': self.speed,
            'acceleration': self.acceleration,
            'direction': self.direction,
            'events': [e.to_dict() for e in self.events]
        }


def compass_direction(dx: float, dy: float, noise: float = DIRECTION_NOISE_PIXELS) -> str:
    """Dominant image-space direction of a pixel displacement"""
    if abs(dx) > abs(dy) and abs(dx) > noise:
        return 'right' if dx > 0 else 'left'
    if abs(dy) > noise:
        return 'down' if dy > 0 else 'up'
    return 'stationary'


def calculate_stats(positions: Sequence[TrackedPosition],
                    pixels_to_unit: float = 1.0,
                    thresholds: MovementThresholds = MovementThresholds()) -> MovementStats:
    """
    Distance, speeds, acceleration, direction and events for one entity

    Positions are sorted by timestamp first; pairs without elapsed time are
    skipped.
    """
    stats = MovementStats()
    ordered = sorted(positions, key=lambda p: p.timestamp)
    if len(ordered) < 2:
        return stats

    classifier = MovementClassifier(ordered[0].track_id, thresholds)
    stats.events.append(classifier.start(ordered[0].timestamp))

    speeds = []
    for position, sample in iter_samples(ordered, pixels_to_unit):
        stats.distance += sample.distance
        speeds.append(sample.speed)
        event = classifier.classify(sample, position.timestamp)
        if event:
            stats.events.append(event)

    if speeds:
        stats.max_speed = max(speeds)
        stats.avg_speed = sum(speeds) / len(speeds)

    last, second_last = ordered[-1], ordered[-2]
    stats.direction = compass_direction(last.x - second_last.x, last.y - second_last.y)
    stats.speed = _current_speed(ordered, pixels_to_unit)
    stats.acceleration = _current_acceleration(ordered, pixels_to_unit)

    logger.debug(
        f"Movement stats over {len(ordered)} positions: {stats.distance:.2f} units, "
        f"{len(stats.events)} events"
    )
    return stats


def _current_speed(ordered: Sequence[TrackedPosition], pixels_to_unit: float) -> float:
    """Straight-line speed over the last three positions"""
    start = ordered[max(0, len(ordered) - 3)]
    end = ordered[-1]
    dt = end.timestamp - start.timestamp
    if dt <= 0:
        return 0.0
    return pixel_distance(start, end) * pixels_to_unit / dt


def _current_acceleration(ordered: Sequence[TrackedPosition], pixels_to_unit: float) -> float:
    """Speed change across the last four positions"""
    if len(ordered) < 4:
        return 0.0
    start, mid, end = ordered[-4], ordered[-2], ordered[-1]
    t_start = mid.timestamp - start.timestamp
    t_end = end.timestamp - mid.timestamp
    if t_start <= 0 or t_end <= 0:
        return 0.0
    speed_start = pixel_distance(start, mid) * pixels_to_unit / t_start
    speed_end = pixel_distance(mid, end) * pixels_to_unit / t_end
    return (speed_end - speed_start) / ((t_start + t_end) / 2)


def generate_report(stats: MovementStats) -> str:
    """Plain-text movement report"""
    lines = [
        'Movement Analysis Report',
        '=====================',
        '',
        f'Total Distance Covered: {stats.distance:.2f} meters',
        f'Maximum Speed: {stats.max_speed:.2f} m/s',
        f'Average Speed: {stats.avg_speed:.2f} m/s',
        f'Current Speed: {stats.speed:.2f} m/s',
        f'Acceleration: {stats.acceleration:.2f} m/s^2',
        f'Direction: {stats.direction}',
        '',
        'Events Detected:',
        '---------------'
    ]
    for event in stats.events:
        lines.append(f'[{event.timestamp:8.2f}s] {event.type.value}: {event.details}')
    return '\n'.join(lines)


def _clock(seconds: float) -> str:
    """HH:MM:SS for an offset in seconds"""
    total = max(0, int(seconds))
    return f"{total // 3600:02d}:{total % 3600 // 60:02d}:{total % 60:02d}"


def generate_feedback(stats: MovementStats, player_name: str = "Player") -> str:
    """
    One-paragraph coaching feedback for a movement summary

    Covers the current speed band, direction, the latest event, notable
    acceleration and the total distance.
    """
    if stats.speed < FEEDBACK_SLOW_SPEED:
        parts = [f"{player_name} is currently stationary or moving very slowly."]
    elif stats.speed > FEEDBACK_FAST_SPEED:
        parts = [f"{player_name} is moving at high speed ({stats.speed:.1f} units/sec)."]
    else:
        parts = [f"{player_name} is moving at moderate speed ({stats.speed:.1f} units/sec)."]

    if stats.direction != 'stationary':
        parts.append(f"Direction: {stats.direction}.")

    if stats.events:
        latest = stats.events[-1]
        at = _clock(latest.timestamp)
        if latest.type == MovementEventType.START:
            parts.append(f"Tracking started at {at}.")
        else:
            phrase = FEEDBACK_EVENT_PHRASES[latest.type].format(name=player_name)
            parts.append(f"At {at}, {phrase}.")

    if abs(stats.acceleration) > FEEDBACK_ACCELERATION:
        trend = 'accelerating' if stats.acceleration > 0 else 'decelerating'
        parts.append(f"{player_name} is {trend}.")

    parts.append(f"Total tracked distance: {stats.distance:.0f} units.")
    return ' '.join(parts)
