"""
Avatar Renderer: the large 800x600 view with a stylized figure that mirrors
the current PoseState.

Figure layout (size = figure height scale):
  head   circle at (cx, cy - 0.3*size), radius 0.15*size, rotated by head_tilt
  torso  (cx, cy - 0.1*size) -> (cx + 2*body_lean, cy + 0.3*size)
  arms   from (cx, cy) at 45 deg + arm angle, left side mirrored
  legs   from (cx -/+ 10, cy + 0.3*size), vertical offset by leg angle
"""

import math
from typing import NamedTuple, Optional, Tuple

import cv2
import numpy as np

from .. import config
from ..types import PoseState, RenderMode

Point = Tuple[float, float]
Segment = Tuple[Point, Point]

# BGR
SKY = (235, 206, 135)
GRASS = (152, 251, 152)
HEAD_FILL = (0, 215, 255)
HEAD_STROKE = (0, 140, 255)
TORSO = (204, 102, 0)
ARM = (107, 107, 255)
LEG = (196, 205, 78)
BLACK = (0, 0, 0)
WHITE = (255, 255, 255)
GREEN = (94, 197, 34)
PURPLE = (246, 92, 139)
GREY = (90, 90, 90)

FONT = cv2.FONT_HERSHEY_SIMPLEX
SHADOW_OFFSET = 5
SHADOW_OPACITY = 0.3
SMILE_ARM_THRESHOLD = -20.0


class FigureGeometry(NamedTuple):
    head_center: Point
    head_radius: float
    torso: Segment
    left_arm: Segment
    right_arm: Segment
    left_leg: Segment
    right_leg: Segment


def figure_geometry(pose: PoseState, cx: float, cy: float, size: float) -> FigureGeometry:
    arm_len = size * 0.4
    leg_len = size * 0.5
    hip_y = cy + size * 0.3

    # Lean doubled so small shifts are visible
    torso = ((cx, cy - size * 0.1), (cx + pose.body_lean * 2, hip_y))

    base = math.pi / 4
    la = base + math.radians(pose.left_arm)
    ra = base + math.radians(pose.right_arm)
    left_arm = ((cx, cy), (cx - arm_len * math.cos(la), cy + arm_len * math.sin(la)))
    right_arm = ((cx, cy), (cx + arm_len * math.cos(ra), cy + arm_len * math.sin(ra)))

    ll = math.radians(pose.left_leg)
    rl = math.radians(pose.right_leg)
    left_leg = ((cx - 10, hip_y),
                (cx - 10 - leg_len * math.sin(ll), hip_y + leg_len * math.cos(ll)))
    right_leg = ((cx + 10, hip_y),
                 (cx + 10 - leg_len * math.sin(rl), hip_y + leg_len * math.cos(rl)))

    return FigureGeometry(
        head_center=(cx, cy - size * 0.3),
        head_radius=size * 0.15,
        torso=torso,
        left_arm=left_arm,
        right_arm=right_arm,
        left_leg=left_leg,
        right_leg=right_leg,
    )


def is_smiling(pose: PoseState) -> bool:
    """Raised arms switch the mouth to the wide smile."""
    return pose.left_arm < SMILE_ARM_THRESHOLD or pose.right_arm < SMILE_ARM_THRESHOLD


def _pt(p: Point, offset: int = 0) -> Tuple[int, int]:
    return int(round(p[0])) + offset, int(round(p[1])) + offset


def _rotate(dx: float, dy: float, degrees: float) -> Point:
    a = math.radians(degrees)
    return dx * math.cos(a) - dy * math.sin(a), dx * math.sin(a) + dy * math.cos(a)


class AvatarRenderer:
    def __init__(self, width: int = config.AVATAR_WIDTH, height: int = config.AVATAR_HEIGHT,
                 figure_size: Optional[float] = None):
        self.width = width
        self.height = height
        self.figure_size = figure_size or height * 0.45
        self.center = (width / 2, height / 2)
        self._background = self._make_background()

    def _make_background(self) -> np.ndarray:
        t = np.linspace(0.0, 1.0, self.height, dtype=np.float32)[:, None]
        column = np.array(SKY, np.float32) * (1.0 - t) + np.array(GRASS, np.float32) * t
        return np.repeat(column[:, None, :], self.width, axis=1).astype(np.uint8)

    def render(self, pose: PoseState, subject_present: bool, mode: RenderMode) -> np.ndarray:
        canvas = self._background.copy()

        if mode is RenderMode.AVATAR:
            if subject_present:
                self._draw_figure(canvas, pose)
                self._badge(canvas, "tracking", (16, 16), GREEN)
                self._draw_readout(canvas, pose)
            self._badge_right(canvas, "AVATAR ON", GREEN)
        else:
            status = "person detected" if subject_present else "no person"
            self._badge(canvas, status, (16, 16), GREEN if subject_present else GREY)
            self._badge_right(canvas, "AVATAR OFF", PURPLE)

        return canvas

    def _draw_figure(self, canvas: np.ndarray, pose: PoseState):
        cx, cy = self.center
        size = self.figure_size
        geo = figure_geometry(pose, cx, cy, size)

        # Soft drop shadow under the whole figure
        shadow = np.zeros(canvas.shape[:2], dtype=np.uint8)
        self._draw_shapes(shadow, geo, 255, 255, 255, 255, offset=SHADOW_OFFSET)
        shadow = cv2.GaussianBlur(shadow, (0, 0), 5)
        alpha = (shadow.astype(np.float32) / 255.0 * SHADOW_OPACITY)[..., None]
        canvas[:] = (canvas.astype(np.float32) * (1.0 - alpha)).astype(np.uint8)

        self._draw_shapes(canvas, geo, HEAD_FILL, TORSO, ARM, LEG)
        cv2.circle(canvas, _pt(geo.head_center), int(geo.head_radius), HEAD_STROKE, 3, cv2.LINE_AA)
        self._draw_face(canvas, geo, pose, size)

        # Highlight on the head
        hx, _ = geo.head_center
        r = geo.head_radius
        shine = canvas.copy()
        cv2.circle(shine, _pt((hx - r * 0.3, cy - size * 0.4)), int(r * 0.2), WHITE, -1, cv2.LINE_AA)
        cv2.addWeighted(shine, 0.3, canvas, 0.7, 0, dst=canvas)

    @staticmethod
    def _draw_shapes(img, geo: FigureGeometry, head, torso, arm, leg, offset=0):
        cv2.line(img, _pt(geo.torso[0], offset), _pt(geo.torso[1], offset), torso, 8, cv2.LINE_AA)
        for seg in (geo.left_arm, geo.right_arm):
            cv2.line(img, _pt(seg[0], offset), _pt(seg[1], offset), arm, 6, cv2.LINE_AA)
        for seg in (geo.left_leg, geo.right_leg):
            cv2.line(img, _pt(seg[0], offset), _pt(seg[1], offset), leg, 6, cv2.LINE_AA)
        cv2.circle(img, _pt(geo.head_center, offset), int(geo.head_radius), head, -1, cv2.LINE_AA)

    @staticmethod
    def _draw_face(img, geo: FigureGeometry, pose: PoseState, size: float):
        hx, hy = geo.head_center
        r = geo.head_radius
        tilt = pose.head_tilt

        for ex in (-r * 0.4, r * 0.4):
            ox, oy = _rotate(ex, -size * 0.05, tilt)
            cv2.circle(img, _pt((hx + ox, hy + oy)), 3, BLACK, -1, cv2.LINE_AA)

        if is_smiling(pose):
            mouth_y, mouth_r = size * 0.05, 8
        else:
            mouth_y, mouth_r = size * 0.03, 5
        ox, oy = _rotate(0.0, mouth_y, tilt)
        cv2.ellipse(img, _pt((hx + ox, hy + oy)), (mouth_r, mouth_r), tilt, 0, 180,
                    BLACK, 2, cv2.LINE_AA)

    def _draw_readout(self, img, pose: PoseState):
        lines = [
            f"arms L{round(pose.left_arm)} R{round(pose.right_arm)}",
            f"legs L{round(pose.left_leg)} R{round(pose.right_leg)}",
            f"head {round(pose.head_tilt)}  body {round(pose.body_lean)}",
        ]
        y = self.height - 16 - 22 * len(lines)
        for line in lines:
            (tw, _), _ = cv2.getTextSize(line, FONT, 0.5, 1)
            self._badge(img, line, (int(self.width / 2 - tw / 2), y), GREY)
            y += 22

    def _badge_right(self, img, text, color):
        (tw, _), _ = cv2.getTextSize(text, FONT, 0.5, 1)
        self._badge(img, text, (self.width - tw - 24, 16), color)

    @staticmethod
    def _badge(img, text, origin, color):
        (tw, th), base = cv2.getTextSize(text, FONT, 0.5, 1)
        x, y = origin
        cv2.rectangle(img, (x, y), (x + tw + 8, y + th + base + 6), color, -1)
        cv2.putText(img, text, (x + 4, y + th + 3), FONT, 0.5, WHITE, 1, cv2.LINE_AA)
