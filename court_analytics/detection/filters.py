"""
Detection validation and filtering
"""

import logging
from typing import Iterable, List

from ..core import Detection, InvalidDetection
from ..core.constants import MIN_BOX_AREA

logger = logging.getLogger(__name__)


def filter_detections(detections: Iterable[Detection],
                      min_box_area: float = MIN_BOX_AREA) -> List[Detection]:
    """
    Drop malformed detections and boxes too small to be meaningful

    Invalid detections are not fatal to the frame; they are logged and
    skipped.

    Args:
        detections: Raw detector output for one frame
        min_box_area: Minimum bbox area in px^2

    Returns:
        Detections that passed validation, in input order
    """
    kept = []
    for detection in detections:
        try:
            detection.validate()
        except InvalidDetection as e:
            logger.debug(f"Dropping invalid detection: {e}")
            continue

        if detection.area < min_box_area:
            logger.debug(
                f"Dropping {detection.class_name} box with area {detection.area:.1f} "
                f"< {min_box_area}"
            )
            continue

        kept.append(detection)

    return kept
