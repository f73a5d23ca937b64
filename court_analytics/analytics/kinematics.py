"""
Pixel-to-real-world kinematics for tracked positions

Distances are pixel distances scaled by a calibration factor
(real-world units per pixel). With the factor in meters per pixel and
timestamps in seconds, speeds come out in m/s; ``to_kmh`` converts.
"""

import math
from typing import Iterable, Iterator, Optional, Tuple

from ..core import (
    TrackedPosition, KinematicSample, KinematicsError,
    ZeroElapsedTimeError, OutOfOrderSampleError
)
from ..core.constants import MPS_TO_KMH, COURT_WIDTH_METERS


def pixels_to_unit(reference_length: float, reference_pixels: float) -> float:
    """
    Calibration factor from a known real-world dimension

    Args:
        reference_length: Real-world length, e.g. court width in meters
        reference_pixels: Pixel span of the same dimension in the frame

    Returns:
        Real-world units per pixel
    """
    if reference_pixels <= 0:
        raise ValueError(f"reference_pixels must be positive, got {reference_pixels}")
    if reference_length <= 0:
        raise ValueError(f"reference_length must be positive, got {reference_length}")
    return reference_length / reference_pixels


def court_calibration(frame_width: float, court_width: float = COURT_WIDTH_METERS) -> float:
    """Calibration assuming the court spans the full frame width"""
    return pixels_to_unit(court_width, frame_width)


def pixel_distance(p1: TrackedPosition, p2: TrackedPosition) -> float:
    return math.hypot(p2.x - p1.x, p2.y - p1.y)


def distance(p1: TrackedPosition, p2: TrackedPosition, pixels_to_unit: float) -> float:
    """Euclidean distance between two positions in real-world units"""
    return pixel_distance(p1, p2) * pixels_to_unit


def elapsed(p1: TrackedPosition, p2: TrackedPosition) -> float:
    """
    Seconds from p1 to p2

    Raises:
        ZeroElapsedTimeError: both samples share a timestamp
        OutOfOrderSampleError: p2 is older than p1
    """
    dt = p2.timestamp - p1.timestamp
    if dt == 0:
        raise ZeroElapsedTimeError(
            f"No time elapsed between samples of track {p1.track_id} at t={p1.timestamp}"
        )
    if dt < 0:
        raise OutOfOrderSampleError(
            f"Sample at t={p2.timestamp} precedes t={p1.timestamp}"
        )
    return dt


def speed(p1: TrackedPosition, p2: TrackedPosition, pixels_to_unit: float) -> float:
    """Real-world units per second between two consecutive positions"""
    return distance(p1, p2, pixels_to_unit) / elapsed(p1, p2)


def to_kmh(speed_mps: float) -> float:
    return speed_mps * MPS_TO_KMH


def direction_degrees(p1: TrackedPosition, p2: TrackedPosition) -> float:
    """Heading of the p1->p2 vector in degrees, image axes (y down)"""
    return math.degrees(math.atan2(p2.y - p1.y, p2.x - p1.x))


def angle_between(heading_a: float, heading_b: float) -> float:
    """Smallest absolute difference between two headings, in [0, 180]"""
    diff = abs(heading_a - heading_b) % 360.0
    return 360.0 - diff if diff > 180.0 else diff


def kinematic_sample(p1: TrackedPosition, p2: TrackedPosition,
                     pixels_to_unit: float) -> KinematicSample:
    """
    Distance, speed and heading for a consecutive pair

    Raises:
        KinematicsError: timestamps do not strictly increase
    """
    dt = elapsed(p1, p2)
    dist = distance(p1, p2, pixels_to_unit)
    return KinematicSample(
        distance=dist,
        speed=dist / dt,
        direction_degrees=direction_degrees(p1, p2),
        elapsed=dt
    )


def iter_samples(positions: Iterable[TrackedPosition],
                 pixels_to_unit: float) -> Iterator[Tuple[TrackedPosition, KinematicSample]]:
    """
    Yield (current position, sample) for every usable consecutive pair

    Pairs without elapsed time are skipped; the earlier position stays the
    reference so no distance is lost.
    """
    previous: Optional[TrackedPosition] = None
    for position in positions:
        if previous is None:
            previous = position
            continue
        try:
            sample = kinematic_sample(previous, position, pixels_to_unit)
        except KinematicsError:
            continue
        yield position, sample
        previous = position
