from dataclasses import dataclass, asdict
from enum import Enum, auto
from typing import Dict, Optional, Tuple

from . import config

BBox = Tuple[float, float, float, float]  # x, y, width, height


@dataclass(frozen=True)
class Detection:
    """
    One object-detection result for a frame.
    bbox is (x, y, width, height) in frame pixels.
    """
    label: str
    score: float
    bbox: BBox

    @classmethod
    def from_xyxy(cls, label: str, score: float,
                  x1: float, y1: float, x2: float, y2: float) -> "Detection":
        return cls(label=label, score=float(score),
                   bbox=(float(x1), float(y1), float(x2 - x1), float(y2 - y1)))

    @property
    def center(self) -> Tuple[float, float]:
        x, y, w, h = self.bbox
        return x + w / 2, y + h / 2

    @property
    def is_person(self) -> bool:
        return self.label == config.SUBJECT_LABEL


@dataclass(frozen=True)
class TrackedSubject:
    current: Optional[Detection] = None
    previous: Optional[Detection] = None

    @property
    def present(self) -> bool:
        return self.current is not None


# Degrees, inclusive (lo, hi) per pose field
POSE_RANGES: Dict[str, Tuple[float, float]] = {
    "left_arm": (-75.0, 75.0),
    "right_arm": (-75.0, 75.0),
    "left_leg": (-50.0, 20.0),
    "right_leg": (-50.0, 20.0),
    "head_tilt": (-45.0, 45.0),
    "body_lean": (-60.0, 60.0),
}


@dataclass(frozen=True)
class PoseState:
    """Six joint angles in degrees driving the avatar."""
    left_arm: float = 0.0
    right_arm: float = 0.0
    left_leg: float = 0.0
    right_leg: float = 0.0
    head_tilt: float = 0.0
    body_lean: float = 0.0

    @classmethod
    def zero(cls) -> "PoseState":
        return cls()

    def to_dict(self) -> Dict[str, float]:
        return asdict(self)

    def within_ranges(self) -> bool:
        return all(lo <= getattr(self, name) <= hi
                   for name, (lo, hi) in POSE_RANGES.items())


class RenderMode(Enum):
    AVATAR = auto()
    DETECTION_ONLY = auto()
