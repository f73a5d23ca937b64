import math

import pytest

from court_analytics.analytics import kinematics
from court_analytics.core import (
    TrackedPosition, ZeroElapsedTimeError, OutOfOrderSampleError, KinematicsError
)

from tests.helpers import positions_along


def _pos(x, y, t):
    return TrackedPosition(track_id=1, x=x, y=y, timestamp=t)


def test_distance_is_symmetric():
    p1, p2 = _pos(3, 7, 0), _pos(-5, 11, 1)
    assert kinematics.distance(p1, p2, 0.3) == kinematics.distance(p2, p1, 0.3)


def test_speed_scales_linearly_with_calibration():
    p1, p2 = _pos(0, 0, 0), _pos(30, 40, 2)

    base = kinematics.speed(p1, p2, 1.0)
    assert base == pytest.approx(25.0)
    assert kinematics.speed(p1, p2, 0.5) == pytest.approx(base * 0.5)
    assert kinematics.speed(p1, p2, 3.0) == pytest.approx(base * 3.0)


def test_zero_elapsed_time_raises():
    with pytest.raises(ZeroElapsedTimeError):
        kinematics.speed(_pos(0, 0, 1), _pos(5, 5, 1), 1.0)


def test_zero_elapsed_time_is_a_zero_division():
    with pytest.raises(ZeroDivisionError):
        kinematics.elapsed(_pos(0, 0, 1), _pos(5, 5, 1))


def test_out_of_order_samples_raise():
    with pytest.raises(OutOfOrderSampleError):
        kinematics.elapsed(_pos(0, 0, 2), _pos(5, 5, 1))


def test_direction_and_angle_between():
    assert kinematics.direction_degrees(_pos(0, 0, 0), _pos(0, 10, 1)) == pytest.approx(90.0)
    assert kinematics.angle_between(170, -170) == pytest.approx(20.0)
    assert kinematics.angle_between(0, 180) == pytest.approx(180.0)
    assert kinematics.angle_between(45, 45) == 0.0


def test_kinematic_sample():
    sample = kinematics.kinematic_sample(_pos(0, 0, 0), _pos(6, 8, 0.5), 0.1)

    assert sample.distance == pytest.approx(1.0)
    assert sample.speed == pytest.approx(2.0)
    assert sample.elapsed == pytest.approx(0.5)
    assert sample.speed_kmh == pytest.approx(7.2)
    assert sample.direction_degrees == pytest.approx(math.degrees(math.atan2(8, 6)))


def test_iter_samples_skips_duplicate_timestamps():
    positions = positions_along([0, 5, 10, 20], [0, 1, 1, 2])
    samples = list(kinematics.iter_samples(positions, 1.0))

    # The duplicate at t=1 is dropped; the next pair measures from x=5
    assert [s.distance for _, s in samples] == [pytest.approx(5.0), pytest.approx(15.0)]
    assert [p.x for p, _ in samples] == [5.0, 20.0]


def test_calibration_helpers():
    assert kinematics.pixels_to_unit(10.97, 1097) == pytest.approx(0.01)
    assert kinematics.court_calibration(1097) == pytest.approx(0.01)
    assert kinematics.to_kmh(10) == pytest.approx(36.0)
    with pytest.raises(ValueError):
        kinematics.pixels_to_unit(10.97, 0)


def test_kinematics_errors_share_base():
    assert issubclass(ZeroElapsedTimeError, KinematicsError)
    assert issubclass(OutOfOrderSampleError, KinematicsError)
