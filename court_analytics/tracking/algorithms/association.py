"""
Track association algorithms
"""

import numpy as np
from typing import List, Sequence, Tuple

from ...core import Detection, Track
from ...core.constants import MATCH_THRESH


def iou(box1: Sequence[float], box2: Sequence[float]) -> float:
    """Compute IoU between two (x, y, width, height) boxes"""
    x1, y1, w1, h1 = box1
    x2, y2, w2, h2 = box2

    # Intersection
    inter_x_min = max(x1, x2)
    inter_y_min = max(y1, y2)
    inter_x_max = min(x1 + w1, x2 + w2)
    inter_y_max = min(y1 + h1, y2 + h2)

    if inter_x_max <= inter_x_min or inter_y_max <= inter_y_min:
        return 0.0

    inter_area = (inter_x_max - inter_x_min) * (inter_y_max - inter_y_min)

    # Union
    union_area = w1 * h1 + w2 * h2 - inter_area

    return float(inter_area / union_area) if union_area > 0 else 0.0


def iou_matrix(boxes_a: Sequence[Sequence[float]],
               boxes_b: Sequence[Sequence[float]]) -> np.ndarray:
    """
    Pairwise IoU between two sets of (x, y, width, height) boxes

    Returns:
        Array of shape (len(boxes_a), len(boxes_b))
    """
    a = np.asarray(boxes_a, dtype=float).reshape(-1, 4)
    b = np.asarray(boxes_b, dtype=float).reshape(-1, 4)
    if a.shape[0] == 0 or b.shape[0] == 0:
        return np.zeros((a.shape[0], b.shape[0]))

    a_x1, a_y1 = a[:, 0:1], a[:, 1:2]
    a_x2, a_y2 = a_x1 + a[:, 2:3], a_y1 + a[:, 3:4]
    b_x1, b_y1 = b[:, 0], b[:, 1]
    b_x2, b_y2 = b_x1 + b[:, 2], b_y1 + b[:, 3]

    inter_w = np.clip(np.minimum(a_x2, b_x2) - np.maximum(a_x1, b_x1), 0, None)
    inter_h = np.clip(np.minimum(a_y2, b_y2) - np.maximum(a_y1, b_y1), 0, None)
    inter_area = inter_w * inter_h

    area_a = (a[:, 2] * a[:, 3])[:, None]
    area_b = (b[:, 2] * b[:, 3])[None, :]
    union_area = area_a + area_b - inter_area

    with np.errstate(divide='ignore', invalid='ignore'):
        result = np.where(union_area > 0, inter_area / union_area, 0.0)
    return result


class GreedyAssociator:
    """Associates detections with existing tracks by greedy IoU matching"""

    def __init__(self, match_thresh: float = MATCH_THRESH):
        """
        Initialize track associator

        Args:
            match_thresh: Minimum IoU for a valid association
        """
        self.match_thresh = match_thresh

    def associate(self,
                  detections: List[Detection],
                  tracks: List[Track]) -> Tuple[List[Tuple[int, int]], List[int], List[int]]:
        """
        Associate detections with tracks

        Detections are visited in input order; each claims the unclaimed
        track with the highest IoU at or above the threshold. The first
        detection to reach a track keeps it, there is no global assignment.

        Args:
            detections: Current frame detections
            tracks: Live tracks

        Returns:
            Tuple of (matches, unmatched_detections, unmatched_tracks)
            where matches is list of (detection_idx, track_idx) pairs
        """
        if not tracks:
            return [], list(range(len(detections))), []
        if not detections:
            return [], [], list(range(len(tracks)))

        scores = iou_matrix([d.bbox for d in detections], [t.bbox for t in tracks])

        matches = []
        matched_tracks = set()
        unmatched_detections = []

        for det_idx in range(len(detections)):
            best_track = -1
            best_iou = self.match_thresh

            for track_idx in range(len(tracks)):
                if track_idx in matched_tracks:
                    continue
                score = scores[det_idx, track_idx]
                if score >= best_iou and (best_track == -1 or score > best_iou):
                    best_iou = score
                    best_track = track_idx

            if best_track == -1:
                unmatched_detections.append(det_idx)
            else:
                matches.append((det_idx, best_track))
                matched_tracks.add(best_track)

        unmatched_tracks = [i for i in range(len(tracks)) if i not in matched_tracks]

        return matches, unmatched_detections, unmatched_tracks
