import pytest

from court_analytics.config import Settings
from court_analytics.core import (
    ConfigurationError, Detector, DetectorFailure, EmptySequenceError,
    FrameOrderError, MovementEventType, ShotType, CourtInfo
)
from court_analytics.detection import CallableDetector, RetryingDetector
from court_analytics.io import parse_frames
from court_analytics.pipeline import AnalysisSession

from tests.helpers import ball_at, make_detection


class ScriptedDetector(Detector):
    """Returns queued results; exception instances are raised."""

    def __init__(self, results):
        self.results = list(results)
        self.calls = 0

    def detect(self, image):
        self.calls += 1
        result = self.results.pop(0)
        if isinstance(result, Exception):
            raise result
        return result


def _session(settings, detector=None, court=None):
    return AnalysisSession(1000, 1000, settings=settings, court=court, detector=detector)


def test_rally_detects_forehand(settings, rally_payload):
    sequence = parse_frames(rally_payload)
    session = AnalysisSession(sequence.frame_width, sequence.frame_height,
                              settings=settings, court=sequence.court)

    frames = [session.process_frame(t, dets) for t, dets in sequence.frames]

    assert [f.is_shot for f in frames] == [False, False, True]
    shot = frames[2].shot
    assert shot.player_id == 1
    assert shot.shot_type == ShotType.FOREHAND
    assert shot.ball_speed == pytest.approx(180.0)
    assert frames[1].ball_speed == pytest.approx(80.0)

    summary = session.summarize()
    assert list(summary.tracks) == [1]
    assert summary.primary_track_id == 1
    assert summary.tracks[1].shots_hit == 1
    assert summary.shot_types == {"forehand": 1}
    assert summary.ball.observed_frames == 3
    assert summary.ball.average_speed == pytest.approx(130.0)


def test_first_position_emits_start_event(settings):
    session = _session(settings)
    frame = session.process_frame(0.0, [make_detection(bbox=(100, 100, 50, 100))])

    assert [e.type for e in frame.movement_events] == [MovementEventType.START]
    assert frame.movement_events[0].track_id == 1


def test_out_of_order_frame_raises(settings):
    session = _session(settings)
    session.process_frame(1.0, [])

    with pytest.raises(FrameOrderError):
        session.process_frame(0.5, [])


def test_equal_timestamps_skip_kinematics(settings):
    session = _session(settings)
    player = (100, 100, 50, 100)
    session.process_frame(1.0, [make_detection(bbox=player)])

    frame = session.process_frame(1.0, [make_detection(bbox=player)])

    assert frame.speeds == {}
    assert 1 in frame.positions


def test_ball_speed_needs_elapsed_time(settings):
    session = _session(settings)
    session.process_frame(0.0, [ball_at(100, 100)])

    same_time = session.process_frame(0.0, [ball_at(102, 100)])
    later = session.process_frame(1.0, [ball_at(112, 100)])

    assert same_time.ball_speed is None
    assert later.ball_speed == pytest.approx(1.0)


def test_multiple_players_keyed_by_track(settings):
    session = _session(settings)
    for frame in range(3):
        session.process_frame(float(frame), [
            make_detection(bbox=(100 + 10 * frame, 100, 100, 200)),
            make_detection(bbox=(600, 100, 100, 200)),
        ])

    summary = session.summarize()

    assert set(summary.tracks) == {1, 2}
    assert summary.tracks[1].total_distance == pytest.approx(2.0)
    assert summary.tracks[1].max_speed == pytest.approx(1.0)
    assert summary.tracks[2].total_distance == pytest.approx(0.0)
    assert summary.primary.track_id == 1


def test_unmatched_tracks_do_not_record_positions(settings):
    session = _session(settings)
    session.process_frame(0.0, [make_detection(bbox=(100, 100, 50, 100))])

    frame = session.process_frame(1.0, [])

    assert [t.id for t in frame.tracks] == [1]
    assert frame.tracks[0].time_since_update == 1
    assert frame.positions == {}


def test_frame_snapshots_are_independent(settings):
    session = _session(settings)
    first = session.process_frame(0.0, [make_detection(bbox=(100, 100, 50, 100))])
    session.process_frame(1.0, [make_detection(bbox=(102, 100, 50, 100))])

    assert first.tracks[0].bbox == (100.0, 100.0, 50.0, 100.0)
    assert first.tracks[0].hits == 1


def test_detector_failure_degrades_frame_and_predicts_ball(settings):
    player = make_detection(bbox=(800, 800, 40, 100))
    detector = ScriptedDetector([
        [player, ball_at(100, 100)],
        [player, ball_at(120, 100)],
        [player, ball_at(140, 100)],
        DetectorFailure("service unavailable"),
    ])
    session = _session(settings, detector=detector)

    for t in range(4):
        frame = session.process_image(object(), float(t))

    assert frame.degraded
    assert frame.positions == {}
    assert frame.tracks[0].id == 1
    assert frame.tracks[0].time_since_update == 1
    assert all(t.time_since_update >= 1 for t in frame.tracks)
    assert frame.ball.predicted
    assert frame.ball.confidence == pytest.approx(0.4)
    assert frame.ball.center[0] == pytest.approx(160.0)
    assert frame.ball.center[1] == pytest.approx(100.0)

    summary = session.summarize()
    assert summary.degraded_frames == 1
    assert summary.ball.predicted_frames == 1


def test_retrying_detector_failure_reaches_session(settings):
    detector = RetryingDetector(
        ScriptedDetector([ConnectionError("down"), ConnectionError("down")]),
        max_attempts=2,
        sleep=lambda _: None
    )
    session = _session(settings, detector=detector)

    frame = session.process_image(object(), 0.0)

    assert frame.degraded
    assert frame.tracks == []


def test_unexpected_detector_error_degrades_frame(settings):
    def unreachable(image):
        raise ConnectionError("detection service unreachable")

    session = _session(settings, detector=CallableDetector(unreachable))
    session.process_frame(0.0, [make_detection(bbox=(100, 100, 50, 100))])

    frame = session.process_image(object(), 1.0)

    assert frame.degraded
    assert frame.positions == {}
    assert [t.id for t in frame.tracks] == [1]
    assert session.summarize().degraded_frames == 1


def test_missing_ball_carries_previous_position(settings):
    session = _session(settings)
    session.process_frame(0.0, [ball_at(100, 100)])

    frame = session.process_frame(1.0, [])

    assert frame.ball.predicted
    assert frame.ball.confidence == pytest.approx(0.4)
    assert frame.ball.center[0] == pytest.approx(100.0)
    assert frame.ball_speed is None


def test_no_ball_history_means_no_ball(settings):
    session = _session(settings)
    frame = session.process_frame(0.0, [make_detection(bbox=(100, 100, 50, 100))])

    assert frame.ball is None
    assert frame.shot is None


def test_process_image_requires_detector(settings):
    with pytest.raises(ConfigurationError):
        _session(settings).process_image(object(), 0.0)


def test_summarize_without_frames_raises(settings):
    with pytest.raises(EmptySequenceError):
        _session(settings).summarize()


def test_summarize_is_idempotent(settings, rally_payload):
    sequence = parse_frames(rally_payload)
    session = AnalysisSession(1000, 1000, settings=settings, court=sequence.court)
    session.process_sequence(sequence.frames)

    assert session.summarize() == session.summarize()


def test_default_calibration_from_court_width():
    session = AnalysisSession(1097, 600, settings=Settings())
    assert session.pixels_to_unit == pytest.approx(0.01)


def test_configured_calibration_wins():
    session = AnalysisSession(1097, 600, settings=Settings(pixels_to_unit=0.05))
    assert session.pixels_to_unit == 0.05


def test_session_uses_global_settings_when_none(monkeypatch):
    monkeypatch.setenv("COURT_ANALYTICS_TRACK_BUFFER", "7")
    session = AnalysisSession(1000, 1000)
    assert session.tracker.track_buffer == 7


def test_reset(settings):
    session = _session(settings)
    session.process_frame(0.0, [make_detection(bbox=(100, 100, 50, 100))])
    session.reset()

    assert session.frames == []
    frame = session.process_frame(0.0, [make_detection(bbox=(100, 100, 50, 100))])
    assert frame.tracks[0].id == 2
    assert [e.type for e in frame.movement_events] == [MovementEventType.START]


def test_sessions_do_not_share_state(settings):
    first = _session(settings)
    second = _session(settings)
    first.process_frame(0.0, [make_detection(bbox=(100, 100, 50, 100))])

    assert second.tracker.tracks == []
    assert second.frames == []
