"""
Input/output utilities
"""

from .serialization import (
    FrameSequence, PayloadError, parse_detections, parse_frames, parse_positions
)

__all__ = ['FrameSequence', 'PayloadError', 'parse_detections', 'parse_frames', 'parse_positions']
