"""
Converters from external detector payloads to Detection objects
"""

import logging
from typing import Any, Dict, Iterable, List

from ..core import Detection, InvalidDetection, is_ball_label
from ..core.constants import (
    BOX_2D_SCALE, DEFAULT_PLAYER_CONFIDENCE, DEFAULT_BALL_CONFIDENCE
)

logger = logging.getLogger(__name__)


def detections_from_predictions(predictions: Iterable[Dict[str, Any]]) -> List[Detection]:
    """
    Convert center-format predictions

    Each prediction has ``x``/``y`` at the box center plus ``width``,
    ``height``, ``class`` and ``confidence``.
    """
    detections = []
    for pred in predictions:
        try:
            width = float(pred['width'])
            height = float(pred['height'])
            detections.append(Detection(
                class_name=str(pred['class']),
                bbox=(float(pred['x']) - width / 2, float(pred['y']) - height / 2, width, height),
                confidence=float(pred.get('confidence', 1.0))
            ))
        except (KeyError, TypeError, ValueError) as e:
            logger.debug(f"Skipping malformed prediction {pred!r}: {e}")
    return detections


def detections_from_box_2d(objects: Iterable[Dict[str, Any]],
                           frame_width: float,
                           frame_height: float) -> List[Detection]:
    """
    Convert normalized box_2d payloads

    ``box_2d`` is ``[ymin, xmin, ymax, xmax]`` on a 0..1000 scale and the
    payload carries no confidence, so a fixed per-class value is used.
    """
    detections = []
    for obj in objects:
        try:
            ymin, xmin, ymax, xmax = (float(v) for v in obj['box_2d'])
            label = str(obj['label'])
        except (KeyError, TypeError, ValueError) as e:
            logger.debug(f"Skipping malformed box_2d object {obj!r}: {e}")
            continue

        confidence = DEFAULT_BALL_CONFIDENCE if is_ball_label(label) else DEFAULT_PLAYER_CONFIDENCE
        detections.append(Detection(
            class_name=label,
            bbox=(
                xmin / BOX_2D_SCALE * frame_width,
                ymin / BOX_2D_SCALE * frame_height,
                (xmax - xmin) / BOX_2D_SCALE * frame_width,
                (ymax - ymin) / BOX_2D_SCALE * frame_height
            ),
            confidence=confidence
        ))
    return detections


def detections_from_dicts(items: Iterable[Dict[str, Any]]) -> List[Detection]:
    """Convert ``{class, bbox, confidence}`` mappings, skipping unusable ones"""
    detections = []
    for item in items:
        try:
            detections.append(Detection.from_dict(item))
        except InvalidDetection as e:
            logger.debug(f"Skipping detection: {e}")
    return detections
