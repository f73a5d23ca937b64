"""
Exception hierarchy for court analytics
"""


class CourtAnalyticsError(Exception):
    """Base class for all court analytics errors"""


class InvalidDetection(CourtAnalyticsError, ValueError):
    """Detection with a malformed bbox or confidence"""


class KinematicsError(CourtAnalyticsError):
    """Kinematic sample could not be computed"""


class ZeroElapsedTimeError(KinematicsError, ZeroDivisionError):
    """Two samples share the same timestamp"""


class OutOfOrderSampleError(KinematicsError):
    """Second sample is older than the first"""


class DetectorFailure(CourtAnalyticsError):
    """External detector call failed or timed out"""


class FrameOrderError(CourtAnalyticsError):
    """Frame timestamp went backwards within a session"""


class EmptySequenceError(CourtAnalyticsError):
    """Summary requested for a session without any frames"""


class ConfigurationError(CourtAnalyticsError, ValueError):
    """Settings value out of range"""
