"""
Pose Synthesizer: turns the motion of the subject's bounding box between two
ticks into six clamped joint angles.

- horizontal shift  -> body lean and opposite arm swing
- vertical shift    -> leg bend and arm height
- width change      -> arms opening/closing
- height change     -> head tilt

There is no temporal filtering; consecutive detections jitter and the pose
jitters with them. PoseSmoother is an opt-in low-pass stage on top.
"""

from dataclasses import dataclass, field
from typing import Dict, Optional

from . import config
from .types import Detection, PoseState, POSE_RANGES


def clamp(v: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, v))


def synthesize(previous: Optional[Detection], current: Detection,
               sensitivity: float = config.SENSITIVITY) -> PoseState:
    # First sighting establishes the baseline
    if previous is None:
        return PoseState.zero()

    prev_cx, prev_cy = previous.center
    cur_cx, cur_cy = current.center
    dx = cur_cx - prev_cx
    dy = cur_cy - prev_cy
    dw = current.bbox[2] - previous.bbox[2]
    dh = current.bbox[3] - previous.bbox[3]
    k = sensitivity

    body_lean = clamp(dx * k, -60, 60)
    side_arm = clamp(dx * k * 0.7, -45, 45)

    # Image y grows downward, so moving up (dy < 0) raises legs and arms
    leg_movement = clamp(-dy * k, -50, 20)
    vertical_arm = clamp(-dy * k * 0.8, -60, 30)

    size_arm = clamp(dw * k * 2, -30, 30)
    head_tilt = clamp(dh * k, -45, 45)

    return PoseState(
        left_arm=clamp(vertical_arm + side_arm + size_arm, -75, 75),
        right_arm=clamp(vertical_arm - side_arm + size_arm, -75, 75),
        # Both legs share one value
        left_leg=leg_movement,
        right_leg=leg_movement,
        head_tilt=head_tilt,
        body_lean=body_lean,
    )


def pose_from_pointer(x: float, y: float, width: float, height: float) -> PoseState:
    """Pose driven by a pointer over the monitor view, relative to its center."""
    cx = width / 2
    cy = height / 2
    return PoseState(
        left_arm=clamp((x - cx) / 5, -45, 45),
        right_arm=clamp((cx - x) / 5, -45, 45),
        left_leg=clamp((y - cy) / 10, -20, 20),
        right_leg=clamp((cy - y) / 10, -20, 20),
        head_tilt=clamp((x - cx) / 10, -30, 30),
        body_lean=clamp((x - cx) / 15, -20, 20),
    )


@dataclass
class PoseSmoother:
    """
    Exponential moving average over every pose field.
    alpha in (0,1]: higher = less smoothing (more responsive)
    """
    alpha: float = 0.35
    state: Optional[Dict[str, float]] = field(default=None, repr=False)

    def reset(self):
        self.state = None

    def update(self, pose: PoseState) -> PoseState:
        target = pose.to_dict()
        if self.state is None:
            self.state = target
            return pose

        a = float(self.alpha)
        for name, value in target.items():
            lo, hi = POSE_RANGES[name]
            self.state[name] = clamp(a * value + (1.0 - a) * self.state[name], lo, hi)
        return PoseState(**self.state)
