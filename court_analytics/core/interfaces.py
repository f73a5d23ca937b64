"""
Abstract interfaces for court analytics components
"""

from abc import ABC, abstractmethod
from typing import Any, List

from .models import Detection, Track


class Detector(ABC):
    """Abstract interface for the external object detector"""

    @abstractmethod
    def detect(self, image: Any) -> List[Detection]:
        """Detect objects in a single frame"""
        pass


class Tracker(ABC):
    """Abstract interface for object tracking"""

    @abstractmethod
    def update(self, detections: List[Detection]) -> List[Track]:
        """Update tracks with new detections"""
        pass

    @abstractmethod
    def get_active_tracks(self) -> List[Track]:
        """Get currently active tracks"""
        pass

    @abstractmethod
    def reset(self):
        """Reset tracker state"""
        pass
