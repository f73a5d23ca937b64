import itertools

import pytest

from court_analytics.analytics.events import (
    ShotDetector, ShotThresholds, determine_shot_type, evaluate_conditions, is_shot
)
from court_analytics.config import Settings
from court_analytics.core import CourtInfo, ShotConditions, ShotType
from court_analytics.tracking import BallTrajectory, TrajectoryPoint

from tests.helpers import make_ball, make_track


COURT = CourtInfo.from_frame_size(1000, 1000)


@pytest.mark.parametrize(
    "proximity,speed,direction,away",
    list(itertools.product([False, True], repeat=4))
)
def test_shot_rule_is_pure_function_of_conditions(proximity, speed, direction, away):
    expected = (proximity and speed) or (proximity and direction) or (speed and away)

    assert is_shot(proximity, speed, direction, away) == expected
    assert is_shot(proximity, speed, direction, away) == is_shot(proximity, speed, direction, away)
    assert ShotConditions(proximity, speed, direction, away).is_shot == expected


def test_conditions_at_exact_thresholds_are_false():
    player = make_track(center=(500, 700))
    prev_ball = make_ball(600, 700)

    conditions = evaluate_conditions(
        player, prev_ball, player, make_ball(700, 700), 10.0, BallTrajectory()
    )

    assert not conditions.proximity
    assert not conditions.speed_increase
    assert not conditions.direction_change
    assert conditions.moving_away


def test_conditions_just_inside_thresholds():
    player = make_track(center=(500, 700))
    trajectory = BallTrajectory()
    for x, y, t in [(600, 600, 0), (520, 700, 1), (700, 700, 2)]:
        trajectory.add(TrajectoryPoint(x, y, t))

    conditions = evaluate_conditions(
        player, make_ball(599.9, 700), player, make_ball(450, 700), 10.01, trajectory
    )

    assert conditions.proximity
    assert conditions.speed_increase
    assert conditions.direction_change
    assert not conditions.moving_away


def test_shot_type_serve():
    player = make_track(center=(500, 900))
    assert determine_shot_type(player, make_ball(500, 700), COURT) == ShotType.SERVE


def test_shot_type_volley():
    player = make_track(center=(500, 500))
    assert determine_shot_type(player, make_ball(560, 500), COURT) == ShotType.VOLLEY


def test_shot_type_forehand_and_backhand():
    player = make_track(center=(500, 700))
    assert determine_shot_type(player, make_ball(540, 700), COURT) == ShotType.FOREHAND
    assert determine_shot_type(player, make_ball(460, 700), COURT) == ShotType.BACKHAND


def test_shot_type_left_handed():
    player = make_track(center=(500, 700))
    ball = make_ball(460, 700)
    assert determine_shot_type(player, ball, COURT, dominant_side="left") == ShotType.FOREHAND


def test_shot_type_without_court_is_unknown():
    player = make_track(center=(500, 900))
    assert determine_shot_type(player, make_ball(500, 700), None) == ShotType.UNKNOWN


def test_detector_requires_all_inputs():
    detector = ShotDetector(COURT)
    player = make_track()

    event = detector.detect(1.0, None, make_ball(510, 700), player, make_ball(700, 700),
                            50.0, BallTrajectory())

    assert not event.is_shot
    assert event.player_id == player.id


def test_detector_reports_shot_with_type_from_previous_frame():
    detector = ShotDetector(COURT)
    prev_player = make_track(center=(500, 700))
    player = make_track(center=(500, 900))

    event = detector.detect(2.0, prev_player, make_ball(520, 700), player,
                            make_ball(700, 700), 15.0, BallTrajectory())

    assert event.is_shot
    assert event.shot_type == ShotType.FOREHAND
    assert event.player_id == 1
    assert event.ball_speed == 15.0
    assert event.conditions.proximity and event.conditions.speed_increase
    assert event.to_dict()["shot_type"] == "forehand"


def test_detector_no_shot_when_ball_far():
    detector = ShotDetector(COURT)
    player = make_track(center=(500, 700))

    event = detector.detect(2.0, player, make_ball(900, 100), player,
                            make_ball(950, 50), 5.0, BallTrajectory())

    assert not event.is_shot
    assert event.shot_type == ShotType.UNKNOWN


def test_nearest_player():
    detector = ShotDetector()
    near = make_track(track_id=2, center=(100, 100))
    far = make_track(track_id=1, center=(800, 800))

    assert detector.nearest_player([far, near], make_ball(120, 100)) is near
    assert detector.nearest_player([], make_ball(0, 0)) is None


def test_thresholds_from_settings():
    thresholds = ShotThresholds.from_settings(Settings(shot_speed_threshold=20.0, dominant_side="left"))
    assert thresholds.speed == 20.0
    assert thresholds.dominant_side == "left"
