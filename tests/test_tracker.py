import pytest

from court_analytics.config import Settings
from court_analytics.core import TrackState
from court_analytics.tracking import ByteTracker

from tests.helpers import make_detection


def test_track_id_stable_for_gradual_motion():
    tracker = ByteTracker()
    ids = set()
    for frame in range(20):
        tracks = tracker.update([make_detection(bbox=(100 + frame, 50, 100, 100))])
        assert len(tracks) == 1
        ids.add(tracks[0].id)

    assert ids == {1}


def test_low_confidence_detection_never_creates_track():
    tracker = ByteTracker(track_thresh=0.5)
    for _ in range(5):
        assert tracker.update([make_detection(conf=0.3)]) == []
    assert tracker.stats['tracks_created'] == 0
    assert tracker.stats['detections_dropped'] == 5


def test_low_confidence_detection_still_updates_existing_track():
    tracker = ByteTracker(track_thresh=0.5)
    tracker.update([make_detection(bbox=(0, 0, 50, 50), conf=0.9)])
    tracks = tracker.update([make_detection(bbox=(0, 0, 50, 50), conf=0.2)])

    assert len(tracks) == 1
    assert tracks[0].hits == 2
    assert tracks[0].confidence == pytest.approx(0.2)


def test_confirmation_after_three_hits():
    tracker = ByteTracker()
    states = []
    for _ in range(3):
        track = tracker.update([make_detection(bbox=(0, 0, 50, 50))])[0]
        states.append((track.hits, track.state))

    assert states == [
        (1, TrackState.TENTATIVE),
        (2, TrackState.TENTATIVE),
        (3, TrackState.CONFIRMED),
    ]


def test_two_non_overlapping_ball_boxes_get_distinct_ids():
    tracker = ByteTracker(match_thresh=0.8)
    first = tracker.update([make_detection("ball", (0, 0, 10, 10), 0.9)])
    second = tracker.update([make_detection("ball", (100, 0, 10, 10), 0.9)])

    assert [t.id for t in first] == [1]
    assert [t.id for t in second] == [1, 2]
    assert second[0].time_since_update == 1
    assert second[1].time_since_update == 0


def test_track_lifecycle_with_buffer():
    tracker = ByteTracker(track_buffer=30)
    ball = (200, 200, 10, 10)

    for frame in range(1, 36):
        tracks = tracker.update([make_detection("ball", ball, 0.9)])
        assert [t.id for t in tracks] == [1]
        if frame >= 3:
            assert tracks[0].is_confirmed

    for frame in range(36, 66):
        tracks = tracker.update([])
        assert [t.id for t in tracks] == [1], f"track lost early at frame {frame}"

    assert tracker.update([]) == []
    assert tracker.frame_id == 66
    assert tracker.stats['tracks_deleted'] == 1

    # Deleted identities are never reused
    tracks = tracker.update([make_detection("ball", ball, 0.9)])
    assert [t.id for t in tracks] == [2]
    assert tracks[0].state == TrackState.TENTATIVE


def test_empty_frame_ages_tracks():
    tracker = ByteTracker()
    tracker.update([make_detection(bbox=(0, 0, 50, 50))])
    track = tracker.update([])[0]

    assert track.time_since_update == 1
    assert track.age == 1
    assert track.hits == 1


def test_update_overwrites_track_with_detection():
    tracker = ByteTracker()
    tracker.update([make_detection("player", (0, 0, 100, 100), 0.9)])
    track = tracker.update([make_detection("person", (2, 0, 100, 100), 0.7)])[0]

    assert track.bbox == (2.0, 0.0, 100.0, 100.0)
    assert track.class_name == "person"
    assert track.confidence == pytest.approx(0.7)
    assert track.age == 2


def test_invalid_and_tiny_detections_are_dropped():
    tracker = ByteTracker(min_box_area=10)
    detections = [
        make_detection(bbox=(0, 0, 2, 2)),
        make_detection(bbox=(0, 0, 50, 50), conf=1.5),
        make_detection(bbox=(500, 500, 20, 20)),
    ]
    detections.append(make_detection())
    detections[-1].bbox = (0, 0, float('nan'), 10)

    tracks = tracker.update(detections)

    assert [t.bbox for t in tracks] == [(500.0, 500.0, 20.0, 20.0)]


def test_tracks_returned_in_creation_order():
    tracker = ByteTracker()
    tracks = tracker.update([
        make_detection(bbox=(300, 0, 50, 50)),
        make_detection(bbox=(0, 0, 50, 50)),
    ])
    assert [t.id for t in tracks] == [1, 2]
    assert tracks[0].bbox[0] == 300.0


def test_reset_clears_state():
    tracker = ByteTracker()
    tracker.update([make_detection(bbox=(0, 0, 50, 50))])
    tracker.reset()

    assert tracker.get_active_tracks() == []
    assert tracker.frame_id == 0
    assert tracker.update([make_detection(bbox=(0, 0, 50, 50))])[0].id == 2


def test_ids_not_reused_after_reset():
    tracker = ByteTracker()
    first = [t.id for t in tracker.update([
        make_detection(bbox=(0, 0, 50, 50)),
        make_detection(bbox=(300, 0, 50, 50)),
    ])]
    tracker.reset()
    second = [t.id for t in tracker.update([
        make_detection(bbox=(0, 0, 50, 50)),
        make_detection(bbox=(300, 0, 50, 50)),
    ])]

    assert first == [1, 2]
    assert second == [3, 4]


def test_get_track():
    tracker = ByteTracker()
    tracker.update([make_detection(bbox=(0, 0, 50, 50))])
    assert tracker.get_track(1).id == 1
    assert tracker.get_track(99) is None


def test_from_settings():
    tracker = ByteTracker.from_settings(Settings(track_buffer=5, match_thresh=0.6))
    assert tracker.track_buffer == 5
    assert tracker.associator.match_thresh == 0.6
