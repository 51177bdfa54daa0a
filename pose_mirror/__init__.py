"""
Pose Mirror
Drives a stylized avatar from the motion of a person's detection box.

Usage:
    from pose_mirror import RenderCoordinator, Detection

    coordinator = RenderCoordinator()
    snapshot = coordinator.process(detections, (640, 480))
"""

from .coordinator import FrameSnapshot, RenderCoordinator
from .mode import ModeController
from .pose_synth import synthesize
from .tracker import SubjectTracker, select_subject
from .types import Detection, PoseState, POSE_RANGES, RenderMode, TrackedSubject

__all__ = [
    'Detection', 'PoseState', 'POSE_RANGES', 'RenderMode', 'TrackedSubject',
    'SubjectTracker', 'select_subject', 'synthesize',
    'ModeController', 'RenderCoordinator', 'FrameSnapshot',
]
