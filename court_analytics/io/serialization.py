"""
Parsing of JSON request/file payloads into session inputs
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Tuple

from ..core import Detection, TrackedPosition, CourtInfo, CourtAnalyticsError
from ..detection import detections_from_dicts, detections_from_predictions, detections_from_box_2d

logger = logging.getLogger(__name__)

DETECTION_FORMATS = ('dicts', 'predictions', 'box_2d')
TIME_UNITS = {'s': 1.0, 'ms': 0.001}


class PayloadError(CourtAnalyticsError, ValueError):
    """Payload is structurally unusable"""
    pass


@dataclass
class FrameSequence:
    """Frames of one video ready for an AnalysisSession"""
    frame_width: float
    frame_height: float
    frames: List[Tuple[float, List[Detection]]] = field(default_factory=list)
    court: Optional[CourtInfo] = None


def _to_seconds(value: Any, time_unit: str) -> float:
    if time_unit not in TIME_UNITS:
        raise PayloadError(f"Unknown time unit {time_unit!r}, expected one of {sorted(TIME_UNITS)}")
    return float(value) * TIME_UNITS[time_unit]


def parse_detections(items: Iterable[Dict[str, Any]],
                     detection_format: str = 'dicts',
                     frame_width: float = 0.0,
                     frame_height: float = 0.0) -> List[Detection]:
    """Convert one frame's raw detector output"""
    if detection_format == 'dicts':
        return detections_from_dicts(items)
    elif detection_format == 'predictions':
        return detections_from_predictions(items)
    elif detection_format == 'box_2d':
        return detections_from_box_2d(items, frame_width, frame_height)
    raise PayloadError(
        f"Unknown detection format {detection_format!r}, expected one of {DETECTION_FORMATS}"
    )


def parse_frames(payload: Dict[str, Any]) -> FrameSequence:
    """
    Parse a frame sequence payload

    Expected shape::

        {
          "frame_width": 1280, "frame_height": 720,
          "format": "dicts", "time_unit": "s", "court": true,
          "frames": [{"timestamp": 0.0, "detections": [...]}, ...]
        }

    ``court`` may be true (default court geometry for the frame size) or
    a mapping of CourtInfo fields.

    Raises:
        PayloadError: required keys are missing or malformed
    """
    if not isinstance(payload, dict):
        raise PayloadError("Frame payload must be a JSON object")

    try:
        frame_width = float(payload['frame_width'])
        frame_height = float(payload['frame_height'])
    except (KeyError, TypeError, ValueError) as e:
        raise PayloadError(f"frame_width and frame_height are required: {e}") from e
    if frame_width <= 0 or frame_height <= 0:
        raise PayloadError("frame_width and frame_height must be positive")

    detection_format = payload.get('format', 'dicts')
    time_unit = payload.get('time_unit', 's')

    raw_frames = payload.get('frames')
    if not isinstance(raw_frames, list):
        raise PayloadError("frames must be a list")

    sequence = FrameSequence(frame_width=frame_width, frame_height=frame_height)

    court = payload.get('court')
    if court is True:
        sequence.court = CourtInfo.from_frame_size(frame_width, frame_height)
    elif isinstance(court, dict):
        try:
            sequence.court = CourtInfo(**{k: float(v) for k, v in court.items()})
        except (TypeError, ValueError) as e:
            raise PayloadError(f"Invalid court geometry: {e}") from e

    for idx, raw in enumerate(raw_frames):
        try:
            timestamp = _to_seconds(raw['timestamp'], time_unit)
        except (KeyError, TypeError, ValueError) as e:
            raise PayloadError(f"Frame {idx} has no usable timestamp") from e
        raw_detections = raw.get('detections') or []
        if not isinstance(raw_detections, list):
            raise PayloadError(f"Frame {idx} detections must be a list")
        detections = parse_detections(
            raw_detections, detection_format, frame_width, frame_height
        )
        sequence.frames.append((timestamp, detections))

    logger.debug(f"Parsed {len(sequence.frames)} frames ({detection_format})")
    return sequence


def parse_positions(items: Iterable[Dict[str, Any]],
                    track_id: int = 0,
                    time_unit: str = 's') -> List[TrackedPosition]:
    """
    Parse ``[{x, y, timestamp}, ...]`` coordinates of one entity

    Raises:
        PayloadError: an item lacks a coordinate or timestamp
    """
    positions = []
    for idx, item in enumerate(items):
        try:
            positions.append(TrackedPosition(
                track_id=track_id,
                x=float(item['x']),
                y=float(item['y']),
                timestamp=_to_seconds(item['timestamp'], time_unit)
            ))
        except (KeyError, TypeError, ValueError) as e:
            raise PayloadError(f"Coordinate {idx} is malformed: {item!r}") from e
    return positions
