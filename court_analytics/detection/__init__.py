"""
Detector adapter boundary: validation, payload conversion, retry policy
"""

from .filters import filter_detections
from .converters import detections_from_predictions, detections_from_box_2d, detections_from_dicts
from .adapters import retry, CallableDetector, RetryingDetector

__all__ = [
    'filter_detections',
    'detections_from_predictions', 'detections_from_box_2d', 'detections_from_dicts',
    'retry', 'CallableDetector', 'RetryingDetector'
]
