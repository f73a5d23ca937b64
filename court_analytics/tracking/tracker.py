"""
ByteTrack-style multi-object tracker
"""

from typing import List, Optional
import logging

from ..core import Detection, Track, TrackState, Tracker
from ..core.constants import (
    TRACK_THRESH, TRACK_BUFFER, MATCH_THRESH, MIN_BOX_AREA, MIN_HITS_TO_CONFIRM
)
from ..detection.filters import filter_detections
from .algorithms import GreedyAssociator


class ByteTracker(Tracker):
    """Associates per-frame detections into persistent track identities"""

    def __init__(self,
                 track_thresh: float = TRACK_THRESH,
                 track_buffer: int = TRACK_BUFFER,
                 match_thresh: float = MATCH_THRESH,
                 min_box_area: float = MIN_BOX_AREA,
                 min_hits: int = MIN_HITS_TO_CONFIRM):
        """
        Initialize tracker

        Args:
            track_thresh: Minimum confidence for an unmatched detection to start a track
            track_buffer: Frames a track may go unmatched before it is deleted
            match_thresh: Minimum IoU for matching a detection to a track
            min_box_area: Boxes below this area (px^2) are ignored
            min_hits: Matched frames needed to confirm a track
        """
        self.track_thresh = track_thresh
        self.track_buffer = track_buffer
        self.match_thresh = match_thresh
        self.min_box_area = min_box_area
        self.min_hits = min_hits

        self.logger = logging.getLogger(__name__)

        # Tracking state
        self.frame_id = 0
        self.track_id_count = 0
        self.tracks: List[Track] = []

        self.associator = GreedyAssociator(match_thresh=match_thresh)

        self.stats = {
            'frames_processed': 0,
            'detections_received': 0,
            'detections_dropped': 0,
            'tracks_created': 0,
            'tracks_confirmed': 0,
            'tracks_deleted': 0
        }

        self.logger.debug(
            f"ByteTracker initialized: track_thresh={track_thresh}, "
            f"track_buffer={track_buffer}, match_thresh={match_thresh}, "
            f"min_box_area={min_box_area}"
        )

    @classmethod
    def from_settings(cls, settings) -> 'ByteTracker':
        return cls(
            track_thresh=settings.track_thresh,
            track_buffer=settings.track_buffer,
            match_thresh=settings.match_thresh,
            min_box_area=settings.min_box_area,
            min_hits=settings.min_hits_to_confirm
        )

    def update(self, detections: List[Detection]) -> List[Track]:
        """
        Update tracks with one frame's detections

        Must be called once per frame in temporal order.

        Returns:
            Live (tentative or confirmed) tracks
        """
        self.frame_id += 1
        self.stats['frames_processed'] += 1
        self.stats['detections_received'] += len(detections)

        detections = filter_detections(detections, self.min_box_area)

        # Age every track; stale ones are marked for removal
        for track in self.tracks:
            track.time_since_update += 1
            if track.time_since_update > self.track_buffer:
                track.state = TrackState.DELETED

        live_tracks = [t for t in self.tracks if t.state != TrackState.DELETED]

        matches, unmatched_detections, _ = self.associator.associate(detections, live_tracks)

        for det_idx, track_idx in matches:
            self._update_track(live_tracks[track_idx], detections[det_idx])

        for det_idx in unmatched_detections:
            detection = detections[det_idx]
            if detection.confidence >= self.track_thresh:
                self._create_track(detection)
            else:
                self.stats['detections_dropped'] += 1

        self._remove_deleted_tracks()

        active = self.get_active_tracks()
        self.logger.debug(
            f"Frame {self.frame_id}: {len(detections)} detections, "
            f"{len(matches)} matched, {len(active)} active tracks"
        )
        return active

    def get_active_tracks(self) -> List[Track]:
        """Get currently live tracks in creation order"""
        return [t for t in self.tracks if t.is_active]

    def get_track(self, track_id: int) -> Optional[Track]:
        for track in self.tracks:
            if track.id == track_id:
                return track
        return None

    def reset(self):
        """Reset tracker state, track ids keep counting up"""
        self.frame_id = 0
        self.tracks.clear()
        for key in self.stats:
            self.stats[key] = 0

    def _create_track(self, detection: Detection):
        """Create new tentative track from detection"""
        self.track_id_count += 1
        track = Track(
            id=self.track_id_count,
            class_name=detection.class_name,
            bbox=detection.bbox,
            confidence=detection.confidence,
            age=1,
            hits=1,
            time_since_update=0,
            state=TrackState.TENTATIVE,
            start_frame=self.frame_id,
            last_seen_frame=self.frame_id
        )
        if track.hits >= self.min_hits:
            track.state = TrackState.CONFIRMED
            self.stats['tracks_confirmed'] += 1

        self.tracks.append(track)
        self.stats['tracks_created'] += 1

    def _update_track(self, track: Track, detection: Detection):
        """Overwrite track with the matched detection"""
        track.bbox = detection.bbox
        track.confidence = detection.confidence
        track.class_name = detection.class_name
        track.time_since_update = 0
        track.hits += 1
        track.age += 1
        track.last_seen_frame = self.frame_id

        if track.state == TrackState.TENTATIVE and track.hits >= self.min_hits:
            track.state = TrackState.CONFIRMED
            self.stats['tracks_confirmed'] += 1

    def _remove_deleted_tracks(self):
        """Purge tracks marked deleted"""
        kept = []
        for track in self.tracks:
            if track.state == TrackState.DELETED:
                self.stats['tracks_deleted'] += 1
                self.logger.debug(
                    f"Track {track.id} ({track.class_name}) deleted after "
                    f"{track.time_since_update} frames unmatched"
                )
            else:
                kept.append(track)
        self.tracks = kept
