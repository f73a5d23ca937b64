"""Builders shared by the test modules."""

from court_analytics.core import Detection, Track, TrackedPosition, BallObservation


def make_detection(cls="player", bbox=(0, 0, 10, 10), conf=0.9):
    return Detection(class_name=cls, bbox=tuple(float(v) for v in bbox), confidence=conf)


def ball_at(cx, cy, size=10, conf=0.9):
    return make_detection("ball", (cx - size / 2, cy - size / 2, size, size), conf)


def make_track(track_id=1, cls="player", center=(500, 700), width=40, height=100, conf=0.9):
    cx, cy = center
    return Track(id=track_id, class_name=cls,
                 bbox=(cx - width / 2, cy - height / 2, width, height), confidence=conf)


def make_ball(cx, cy, size=10, conf=0.9):
    return BallObservation.from_center(cx, cy, size=size, confidence=conf, predicted=False)


def positions_along(xs, ts, y=0.0, track_id=1):
    return [TrackedPosition(track_id=track_id, x=float(x), y=y, timestamp=float(t))
            for x, t in zip(xs, ts)]
