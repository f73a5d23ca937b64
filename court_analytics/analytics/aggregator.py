"""
Whole-sequence aggregation into an AnalysisSummary
"""

import logging
from collections import defaultdict
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

import numpy as np

from ..core import (
    FrameState, TrackedPosition, TrackSummary, BallSummary, AnalysisSummary,
    EmptySequenceError, is_ball_label, is_player_label
)
from ..core.constants import HEATMAP_GRID_SIZE
from ..core.models import Heatmap
from .kinematics import iter_samples


def build_heatmap(points: Iterable[Tuple[float, float]],
                  width: float,
                  height: float,
                  grid_size: int = HEATMAP_GRID_SIZE) -> np.ndarray:
    """
    Raw occupancy counts on a grid_size x grid_size grid

    Rows index y, columns index x. Points outside the frame are clamped to
    the border cells.
    """
    grid = np.zeros((grid_size, grid_size), dtype=int)
    if width <= 0 or height <= 0:
        return grid

    for x, y in points:
        gx = min(max(int(np.floor(x / width * grid_size)), 0), grid_size - 1)
        gy = min(max(int(np.floor(y / height * grid_size)), 0), grid_size - 1)
        grid[gy, gx] += 1
    return grid


def heatmap_coverage(grid: np.ndarray) -> float:
    """Percentage of cells with a nonzero count"""
    grid = np.asarray(grid)
    if grid.size == 0:
        return 0.0
    return float(np.count_nonzero(grid)) / grid.size * 100.0


def freeze_heatmap(grid: np.ndarray) -> Heatmap:
    return tuple(tuple(int(v) for v in row) for row in grid.tolist())


class Aggregator:
    """Folds processed frames into a summary"""

    def __init__(self,
                 frame_width: float,
                 frame_height: float,
                 pixels_to_unit: float,
                 grid_size: int = HEATMAP_GRID_SIZE):
        """
        Args:
            frame_width: Frame width in pixels
            frame_height: Frame height in pixels
            pixels_to_unit: Calibration factor (real-world units per pixel)
            grid_size: Heatmap cells per side
        """
        self.frame_width = frame_width
        self.frame_height = frame_height
        self.pixels_to_unit = pixels_to_unit
        self.grid_size = grid_size
        self.logger = logging.getLogger(__name__)

    def aggregate(self, frames: Sequence[FrameState]) -> AnalysisSummary:
        """
        Build the summary for an ordered frame sequence

        Raises:
            EmptySequenceError: no frames were processed
        """
        if not frames:
            raise EmptySequenceError("Cannot summarize a sequence without frames")

        positions: Dict[int, List[TrackedPosition]] = {}
        class_names: Dict[int, str] = {}
        first_seen: Dict[int, Tuple[int, float]] = {}

        for frame in frames:
            classes = frame.track_classes()
            for track_id, position in frame.positions.items():
                if track_id not in positions:
                    positions[track_id] = []
                    first_seen[track_id] = (frame.frame_idx, frame.timestamp)
                positions[track_id].append(position)
                if track_id in classes:
                    class_names[track_id] = classes[track_id]

        entity_ids = [
            track_id for track_id in positions
            if not is_ball_label(class_names.get(track_id, ''))
        ]

        movement_counts = self._movement_counts(frames)
        shot_counts = self._shot_counts(frames)

        tracks: Dict[int, TrackSummary] = {}
        for track_id in entity_ids:
            tracks[track_id] = self._summarize_track(
                track_id,
                class_names.get(track_id, 'unknown'),
                positions[track_id],
                first_seen[track_id],
                movement_counts.get(track_id, {}),
                shot_counts.get(track_id, {})
            )

        player_ids = [t for t in entity_ids if is_player_label(class_names.get(t, ''))]
        primary_track_id = self._primary(player_ids or entity_ids, first_seen)

        coverage_grid = build_heatmap(
            ((p.x, p.y) for t in player_ids for p in positions[t]),
            self.frame_width, self.frame_height, self.grid_size
        )

        shot_types: Dict[str, int] = defaultdict(int)
        for frame in frames:
            if frame.is_shot:
                shot_types[frame.shot.shot_type.value] += 1

        summary = AnalysisSummary(
            frames_processed=len(frames),
            degraded_frames=sum(1 for f in frames if f.degraded),
            duration=float(frames[-1].timestamp - frames[0].timestamp),
            grid_size=self.grid_size,
            tracks=tracks,
            primary_track_id=primary_track_id,
            ball=self._summarize_ball(frames),
            court_coverage=heatmap_coverage(coverage_grid),
            shot_types=shot_types
        )

        self.logger.info(
            f"Summarized {summary.frames_processed} frames: {len(tracks)} tracks, "
            f"{summary.total_shots} shots, {summary.degraded_frames} degraded frames"
        )
        return summary

    def _summarize_track(self,
                         track_id: int,
                         class_name: str,
                         positions: List[TrackedPosition],
                         first_seen: Tuple[int, float],
                         movement_counts: Dict[str, int],
                         shot_counts: Dict[str, int]) -> TrackSummary:
        total_distance = 0.0
        speeds = []
        for _, sample in iter_samples(positions, self.pixels_to_unit):
            total_distance += sample.distance
            speeds.append(sample.speed)

        grid = build_heatmap(((p.x, p.y) for p in positions),
                             self.frame_width, self.frame_height, self.grid_size)

        return TrackSummary(
            track_id=track_id,
            class_name=class_name,
            total_distance=total_distance,
            max_speed=max(speeds) if speeds else 0.0,
            average_speed=sum(speeds) / len(speeds) if speeds else 0.0,
            heatmap=freeze_heatmap(grid),
            coverage=heatmap_coverage(grid),
            shots_hit=sum(shot_counts.values()),
            shot_types=shot_counts,
            movement_events=movement_counts,
            first_seen_frame=first_seen[0],
            first_seen_timestamp=first_seen[1],
            samples=len(positions)
        )

    def _summarize_ball(self, frames: Sequence[FrameState]) -> BallSummary:
        speeds = [f.ball_speed for f in frames if f.ball_speed is not None]
        balls = [f.ball for f in frames if f.ball is not None]
        grid = build_heatmap(
            ((float(b.center[0]), float(b.center[1])) for b in balls),
            self.frame_width, self.frame_height, self.grid_size
        )
        return BallSummary(
            average_speed=sum(speeds) / len(speeds) if speeds else 0.0,
            max_speed=max(speeds) if speeds else 0.0,
            heatmap=freeze_heatmap(grid),
            observed_frames=sum(1 for b in balls if not b.predicted),
            predicted_frames=sum(1 for b in balls if b.predicted)
        )

    @staticmethod
    def _movement_counts(frames: Sequence[FrameState]) -> Dict[int, Dict[str, int]]:
        counts: Dict[int, Dict[str, int]] = defaultdict(lambda: defaultdict(int))
        for frame in frames:
            for event in frame.movement_events:
                if event.track_id is not None:
                    counts[event.track_id][event.type.value] += 1
        return {k: dict(v) for k, v in counts.items()}

    @staticmethod
    def _shot_counts(frames: Sequence[FrameState]) -> Dict[int, Dict[str, int]]:
        counts: Dict[int, Dict[str, int]] = defaultdict(lambda: defaultdict(int))
        for frame in frames:
            if frame.is_shot and frame.shot.player_id is not None:
                counts[frame.shot.player_id][frame.shot.shot_type.value] += 1
        return {k: dict(v) for k, v in counts.items()}

    @staticmethod
    def _primary(candidates: List[int],
                 first_seen: Dict[int, Tuple[int, float]]) -> Optional[int]:
        if not candidates:
            return None
        return min(candidates, key=lambda t: (first_seen[t][0], t))
