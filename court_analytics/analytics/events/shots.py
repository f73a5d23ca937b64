"""
Shot detection from player/ball interaction
"""

import logging
from dataclasses import dataclass
from typing import Optional, Sequence

import numpy as np

from ...core import (
    BallObservation, CourtInfo, ShotConditions, ShotEvent, ShotType, Track
)
from ...core.constants import (
    SHOT_PROXIMITY_THRESHOLD, SHOT_SPEED_THRESHOLD,
    SHOT_DIRECTION_CHANGE_THRESHOLD, COURT_ZONE_MARGIN
)
from ...tracking.algorithms import BallTrajectory


@dataclass(frozen=True)
class ShotThresholds:
    """Thresholds for shot detection"""
    proximity: float = SHOT_PROXIMITY_THRESHOLD          # pixels
    speed: float = SHOT_SPEED_THRESHOLD                  # m/s
    direction_change: float = SHOT_DIRECTION_CHANGE_THRESHOLD  # degrees
    zone_margin: float = COURT_ZONE_MARGIN               # pixels
    dominant_side: str = "right"

    @classmethod
    def from_settings(cls, settings) -> 'ShotThresholds':
        return cls(
            proximity=settings.shot_proximity_threshold,
            speed=settings.shot_speed_threshold,
            direction_change=settings.shot_direction_threshold,
            zone_margin=settings.court_zone_margin,
            dominant_side=settings.dominant_side
        )


def is_shot(proximity: bool, speed_increase: bool,
            direction_change: bool, moving_away: bool) -> bool:
    """Shot rule over the four independently evaluated conditions"""
    return ShotConditions(proximity, speed_increase, direction_change, moving_away).is_shot


def _distance(a: np.ndarray, b: np.ndarray) -> float:
    return float(np.linalg.norm(np.asarray(a) - np.asarray(b)))


def evaluate_conditions(prev_player: Track,
                        prev_ball: BallObservation,
                        player: Track,
                        ball: BallObservation,
                        ball_speed: Optional[float],
                        trajectory: BallTrajectory,
                        thresholds: ShotThresholds = ShotThresholds()) -> ShotConditions:
    """
    Evaluate the shot conditions for one frame

    Args:
        prev_player: Player in the previous frame
        prev_ball: Ball in the previous frame
        player: Same player in the current frame
        ball: Ball in the current frame
        ball_speed: Ball speed between the two frames (m/s), None if unknown
        trajectory: Recent detected ball positions
        thresholds: Shot thresholds
    """
    return ShotConditions(
        proximity=_distance(prev_player.center, prev_ball.center) < thresholds.proximity,
        speed_increase=ball_speed is not None and ball_speed > thresholds.speed,
        direction_change=trajectory.has_changed_direction(thresholds.direction_change),
        moving_away=_distance(player.center, ball.center) > _distance(player.center, prev_ball.center)
    )


def determine_shot_type(player: Track,
                        ball: BallObservation,
                        court: Optional[CourtInfo],
                        zone_margin: float = COURT_ZONE_MARGIN,
                        dominant_side: str = "right") -> ShotType:
    """
    Approximate shot subtype from the pre-contact geometry

    Ball above a player near the baseline is a serve, a player near the net
    volleys, a ball on the dominant side is a forehand, anything else a
    backhand.
    """
    if court is None:
        return ShotType.UNKNOWN

    player_x, player_y = player.center
    ball_x, ball_y = ball.center
    player_height = player.bbox[3]

    near_net = abs(player_y - court.net_y) < zone_margin
    near_baseline = abs(player_y - court.baseline_y) < zone_margin
    ball_above_player = ball_y < player_y - player_height
    if dominant_side == "left":
        ball_on_dominant_side = ball_x < player_x
    else:
        ball_on_dominant_side = ball_x > player_x

    if near_baseline and ball_above_player:
        return ShotType.SERVE
    elif near_net:
        return ShotType.VOLLEY
    elif ball_on_dominant_side:
        return ShotType.FOREHAND
    else:
        return ShotType.BACKHAND


class ShotDetector:
    """Detects shots between player tracks and the ball"""

    def __init__(self,
                 court: Optional[CourtInfo] = None,
                 thresholds: ShotThresholds = ShotThresholds()):
        """
        Args:
            court: Court geometry for shot subtypes, None leaves them unknown
            thresholds: Shot thresholds
        """
        self.court = court
        self.thresholds = thresholds
        self.logger = logging.getLogger(__name__)

    def nearest_player(self, players: Sequence[Track],
                       ball: BallObservation) -> Optional[Track]:
        """Player whose center is closest to the ball"""
        if not players:
            return None
        return min(players, key=lambda p: (_distance(p.center, ball.center), p.id))

    def detect(self,
               timestamp: float,
               prev_player: Optional[Track],
               prev_ball: Optional[BallObservation],
               player: Optional[Track],
               ball: Optional[BallObservation],
               ball_speed: Optional[float],
               trajectory: BallTrajectory) -> ShotEvent:
        """
        Decide whether the current frame holds a shot by ``player``

        All four inputs must be present; otherwise no shot is reported.
        """
        if prev_player is None or prev_ball is None or player is None or ball is None:
            return ShotEvent(is_shot=False, timestamp=timestamp,
                             player_id=player.id if player else None,
                             ball_speed=ball_speed)

        conditions = evaluate_conditions(
            prev_player, prev_ball, player, ball, ball_speed, trajectory, self.thresholds
        )
        if not conditions.is_shot:
            return ShotEvent(is_shot=False, timestamp=timestamp, player_id=player.id,
                             ball_speed=ball_speed, conditions=conditions)

        shot_type = determine_shot_type(
            prev_player, prev_ball, self.court,
            zone_margin=self.thresholds.zone_margin,
            dominant_side=self.thresholds.dominant_side
        )
        self.logger.debug(
            f"Shot at t={timestamp:.2f}s by track {player.id}: {shot_type.value} "
            f"({conditions.to_dict()})"
        )
        return ShotEvent(
            is_shot=True,
            timestamp=timestamp,
            shot_type=shot_type,
            player_id=player.id,
            ball_speed=ball_speed,
            conditions=conditions
        )
