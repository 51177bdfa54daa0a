"""
Render Coordinator: the per-tick state machine tying tracking, pose synthesis
and both renderers together.

Per tick:
    detections -> SubjectTracker.update -> synthesize (AVATAR mode only)
               -> monitor overlay + avatar surface -> FrameSnapshot
"""

import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

import numpy as np

from .mode import ModeController
from .pose_synth import PoseSmoother, pose_from_pointer, synthesize
from .render.avatar import AvatarRenderer
from .render.overlay import MonitorOverlayRenderer, object_labels
from .tracker import SubjectTracker
from .types import Detection, PoseState, RenderMode, TrackedSubject

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FrameSnapshot:
    """Everything one tick produced. Readers never see a half-updated tick."""
    tick: int
    detections: Tuple[Detection, ...]
    subject: TrackedSubject
    pose: PoseState
    mode: RenderMode
    monitor: np.ndarray
    avatar: np.ndarray
    labels: Tuple[str, ...] = ()


class RenderCoordinator:
    def __init__(self,
                 mode_controller: Optional[ModeController] = None,
                 tracker: Optional[SubjectTracker] = None,
                 overlay_renderer: Optional[MonitorOverlayRenderer] = None,
                 avatar_renderer: Optional[AvatarRenderer] = None,
                 smoother: Optional[PoseSmoother] = None):
        self.mode_controller = mode_controller or ModeController()
        self.tracker = tracker or SubjectTracker()
        self.overlay_renderer = overlay_renderer or MonitorOverlayRenderer()
        self.avatar_renderer = avatar_renderer or AvatarRenderer()
        self.smoother = smoother

        self._pose = PoseState.zero()
        self._tick = 0
        self._latest: Optional[FrameSnapshot] = None

    @property
    def pose(self) -> PoseState:
        return self._pose

    @property
    def subject(self) -> TrackedSubject:
        return self.tracker.subject

    @property
    def latest(self) -> Optional[FrameSnapshot]:
        return self._latest

    def process(self, detections: Sequence[Detection], frame_size: Tuple[int, int],
                model_ready: bool = True) -> FrameSnapshot:
        detections = tuple(detections)
        mode = self.mode_controller.mode
        self._tick += 1

        # Tracking runs in both modes; only the pose is gated
        subject = self.tracker.update(detections)
        if mode is RenderMode.AVATAR and subject.present:
            pose = synthesize(subject.previous, subject.current)
            if self.smoother is not None:
                pose = self.smoother.update(pose)
            self._pose = pose

        monitor = self.overlay_renderer.render(detections, frame_size, mode, model_ready)
        avatar = self.avatar_renderer.render(self._pose, subject.present, mode)
        labels: List[str] = object_labels(detections, self.overlay_renderer.threshold)

        self._latest = FrameSnapshot(
            tick=self._tick,
            detections=detections,
            subject=subject,
            pose=self._pose,
            mode=mode,
            monitor=monitor,
            avatar=avatar,
            labels=tuple(labels),
        )
        return self._latest

    def apply_pointer(self, x: float, y: float, frame_size: Tuple[int, int]) -> PoseState:
        """Pointer over the monitor view drives the pose directly (AVATAR mode only)."""
        if self.mode_controller.avatar_enabled:
            self._pose = pose_from_pointer(x, y, *frame_size)
        return self._pose

    def reset(self):
        self.tracker.reset()
        if self.smoother is not None:
            self.smoother.reset()
        self._pose = PoseState.zero()
        logger.info("[Coordinator] Tracker and pose reset")
