"""
Per-video analysis session: detector -> tracker -> kinematics -> events -> aggregator
"""

import dataclasses
import logging
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from ..core import (
    Detection, Detector, Track, TrackedPosition, BallObservation, CourtInfo,
    FrameState, AnalysisSummary, FrameOrderError,
    ConfigurationError, KinematicsError, is_ball_label, is_player_label
)
from ..config import Settings, get_settings
from ..tracking import ByteTracker, BallTrajectory, TrajectoryPoint
from ..analytics import kinematics
from ..analytics.events import (
    MovementAnalyzer, MovementThresholds, ShotDetector, ShotThresholds
)
from ..analytics.aggregator import Aggregator


class AnalysisSession:
    """Processes one video's frames strictly in timestamp order"""

    def __init__(self,
                 frame_width: float,
                 frame_height: float,
                 settings: Optional[Settings] = None,
                 court: Optional[CourtInfo] = None,
                 detector: Optional[Detector] = None):
        """
        Initialize session

        Args:
            frame_width: Frame width in pixels
            frame_height: Frame height in pixels
            settings: Tunables, the global settings when None
            court: Court geometry for shot subtypes, None leaves them unknown
            detector: Detector adapter used by process_image
        """
        self.settings = settings if settings is not None else get_settings()
        self.frame_width = frame_width
        self.frame_height = frame_height
        self.court = court
        self.detector = detector

        self.logger = logging.getLogger(__name__)

        if self.settings.pixels_to_unit is not None:
            self.pixels_to_unit = self.settings.pixels_to_unit
        else:
            self.pixels_to_unit = kinematics.court_calibration(
                frame_width, self.settings.court_width_meters
            )

        self.tracker = ByteTracker.from_settings(self.settings)
        self.trajectory = BallTrajectory(
            memory=self.settings.ball_trajectory_memory,
            predicted_confidence=self.settings.predicted_ball_confidence
        )
        self.movement = MovementAnalyzer(
            self.pixels_to_unit, MovementThresholds.from_settings(self.settings)
        )
        self.shot_detector = ShotDetector(court, ShotThresholds.from_settings(self.settings))
        self.aggregator = Aggregator(
            frame_width, frame_height, self.pixels_to_unit, self.settings.heatmap_grid_size
        )

        self.frames: List[FrameState] = []
        self._prev_tracks: Dict[int, Track] = {}
        self._prev_ball: Optional[BallObservation] = None
        self._last_timestamp: Optional[float] = None

        self.logger.debug(
            f"AnalysisSession initialized: {frame_width}x{frame_height}, "
            f"pixels_to_unit={self.pixels_to_unit:.5f}"
        )

    def process_frame(self,
                      timestamp: float,
                      detections: Sequence[Detection],
                      degraded: bool = False) -> FrameState:
        """
        Process one frame's detections

        Args:
            timestamp: Frame time in seconds, never lower than the previous frame's
            detections: Detector output for the frame
            degraded: Mark the frame as produced without detector output

        Returns:
            The processed frame

        Raises:
            FrameOrderError: timestamp precedes the previous frame
        """
        if self._last_timestamp is not None and timestamp < self._last_timestamp:
            raise FrameOrderError(
                f"Frame at t={timestamp} arrived after t={self._last_timestamp}"
            )

        tracks = [dataclasses.replace(t) for t in self.tracker.update(list(detections))]
        frame = FrameState(
            frame_idx=len(self.frames),
            timestamp=timestamp,
            tracks=tracks,
            degraded=degraded
        )

        # Only tracks matched in this frame contribute positions
        observed = [t for t in tracks if t.time_since_update == 0]
        for track in observed:
            position = TrackedPosition.from_track(track, timestamp)
            frame.positions[track.id] = position
            if is_ball_label(track.class_name):
                continue
            sample, events = self.movement.update(position)
            if sample is not None:
                frame.speeds[track.id] = sample.speed
            frame.movement_events.extend(events)

        live_ids = {t.id for t in tracks}
        for track_id in list(self.movement.classifiers):
            if track_id not in live_ids:
                self.movement.forget(track_id)

        ball_tracks = [t for t in observed if is_ball_label(t.class_name)]
        frame.ball, frame.ball_speed = self._locate_ball(ball_tracks, timestamp)

        players = [t for t in observed if is_player_label(t.class_name)]
        if players and frame.ball is not None:
            player = self.shot_detector.nearest_player(players, frame.ball)
            frame.shot = self.shot_detector.detect(
                timestamp,
                self._prev_tracks.get(player.id),
                self._prev_ball,
                player,
                frame.ball,
                frame.ball_speed,
                self.trajectory
            )
            if frame.shot.is_shot:
                self.logger.info(
                    f"Frame {frame.frame_idx}: {frame.shot.shot_type.value} "
                    f"by track {player.id}"
                )

        self._prev_tracks = {t.id: t for t in tracks}
        self._prev_ball = frame.ball
        self._last_timestamp = timestamp
        self.frames.append(frame)
        return frame

    def process_image(self, image: Any, timestamp: float) -> FrameState:
        """
        Run the detector on an image and process the result

        Any detector error produces a degraded frame: tracks age and the
        ball is extrapolated.
        """
        if self.detector is None:
            raise ConfigurationError("AnalysisSession has no detector configured")

        try:
            detections = self.detector.detect(image)
        except Exception as e:
            self.logger.warning(f"Detector failed at t={timestamp:.3f}s, frame degraded: {e}")
            return self.process_frame(timestamp, [], degraded=True)

        return self.process_frame(timestamp, detections)

    def process_sequence(self,
                         frames: Iterable[Tuple[float, Sequence[Detection]]]) -> AnalysisSummary:
        """Process (timestamp, detections) pairs and summarize"""
        for timestamp, detections in frames:
            self.process_frame(timestamp, detections)
        return self.summarize()

    def summarize(self) -> AnalysisSummary:
        """
        Summarize every frame processed so far

        Raises:
            EmptySequenceError: no frames were processed
        """
        return self.aggregator.aggregate(self.frames)

    def reset(self):
        """Start over with fresh tracking state"""
        self.tracker.reset()
        self.trajectory.clear()
        self.movement = MovementAnalyzer(
            self.pixels_to_unit, MovementThresholds.from_settings(self.settings)
        )
        self.frames = []
        self._prev_tracks = {}
        self._prev_ball = None
        self._last_timestamp = None

    def _locate_ball(self,
                     ball_tracks: List[Track],
                     timestamp: float) -> Tuple[Optional[BallObservation], Optional[float]]:
        """
        Ball observation and speed for the current frame

        Uses the most confident detected ball, otherwise a trajectory
        prediction, otherwise the previous ball with reduced confidence.
        """
        if ball_tracks:
            best = max(ball_tracks, key=lambda t: (t.confidence, -t.id))
            ball = BallObservation.from_track(best)
            cx, cy = ball.center
            ball_speed = None
            if len(self.trajectory):
                last = self.trajectory.last(1)[0]
                try:
                    ball_speed = kinematics.speed(
                        TrackedPosition(best.id, last.x, last.y, last.timestamp),
                        TrackedPosition(best.id, float(cx), float(cy), timestamp),
                        self.pixels_to_unit
                    )
                except KinematicsError as e:
                    self.logger.debug(f"No ball speed at t={timestamp:.3f}s: {e}")
            self.trajectory.add(TrajectoryPoint(
                x=float(cx), y=float(cy), timestamp=timestamp,
                speed=ball_speed or 0.0,
                confidence=ball.confidence,
                size=(ball.width + ball.height) / 2
            ))
            return ball, ball_speed

        predicted = self.trajectory.predict(timestamp)
        if predicted is not None:
            return predicted, None

        if self._prev_ball is not None:
            carried = dataclasses.replace(
                self._prev_ball,
                confidence=min(self._prev_ball.confidence, self.settings.predicted_ball_confidence),
                predicted=True
            )
            return carried, None

        return None, None
