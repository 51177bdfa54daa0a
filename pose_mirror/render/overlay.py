import math
from typing import List, Sequence, Tuple

import cv2
import numpy as np

from .. import config
from ..types import Detection, RenderMode

# BGRA
RED = (0, 0, 255, 255)
GREEN = (0, 255, 0, 255)
WHITE = (255, 255, 255, 255)

FONT = cv2.FONT_HERSHEY_SIMPLEX
LABEL_BAND = 20


def score_label(det: Detection) -> str:
    # Round half up, matching how percentages are shown to the user
    return f"{det.label} ({int(det.score * 100 + 0.5)}%)"


def object_labels(detections: Sequence[Detection],
                  threshold: float = config.SCORE_THRESHOLD) -> List[str]:
    return [d.label for d in detections if not d.is_person and d.score > threshold]


def _draw_dashed_line(img, p0, p1, color, thickness, dash, gap):
    (ax, ay), (bx, by) = p0, p1
    length = math.hypot(bx - ax, by - ay)
    if length == 0:
        return
    ux, uy = (bx - ax) / length, (by - ay) / length
    pos = 0.0
    while pos < length:
        end = min(pos + dash, length)
        cv2.line(img,
                 (int(round(ax + ux * pos)), int(round(ay + uy * pos))),
                 (int(round(ax + ux * end)), int(round(ay + uy * end))),
                 color, thickness)
        pos += dash + gap


def draw_dashed_rect(img, x1, y1, x2, y2, color, thickness=2, dash=5, gap=5):
    corners = [(x1, y1), (x2, y1), (x2, y2), (x1, y2)]
    for i in range(4):
        _draw_dashed_line(img, corners[i], corners[(i + 1) % 4], color, thickness, dash, gap)


def _box(det: Detection) -> Tuple[int, int, int, int]:
    x, y, w, h = det.bbox
    return int(x), int(y), int(x + w), int(y + h)


class MonitorOverlayRenderer:
    """
    Transparent overlay for the small monitor view, sized to the camera's
    native resolution. Every call starts from a cleared surface.
    """

    def __init__(self, threshold: float = config.SCORE_THRESHOLD):
        self.threshold = threshold

    def render(self, detections: Sequence[Detection], frame_size: Tuple[int, int],
               mode: RenderMode, model_ready: bool = True) -> np.ndarray:
        width, height = frame_size
        overlay = np.zeros((height, width, 4), dtype=np.uint8)

        for det in detections:
            if det.is_person or det.score <= self.threshold:
                continue
            x1, y1, x2, y2 = _box(det)
            cv2.rectangle(overlay, (x1, y1), (x2, y2), RED, 2)
            cv2.rectangle(overlay, (x1, y1 - LABEL_BAND), (x2, y1), RED, -1)
            cv2.putText(overlay, score_label(det), (x1 + 2, y1 - 5),
                        FONT, 0.4, WHITE, 1, cv2.LINE_AA)

        # Every confident person gets a box, not only the tracked subject
        if mode is RenderMode.AVATAR:
            for det in detections:
                if not det.is_person or det.score <= self.threshold:
                    continue
                x1, y1, x2, y2 = _box(det)
                draw_dashed_rect(overlay, x1, y1, x2, y2, GREEN)
                cv2.putText(overlay, "tracking", (x1, y1 - 5),
                            FONT, 0.4, GREEN, 1, cv2.LINE_AA)

        labels = object_labels(detections, self.threshold)
        if labels:
            self._badge(overlay, "Detected: " + ", ".join(labels), (8, 8), RED)
        if model_ready:
            (tw, th), _ = cv2.getTextSize("AI", FONT, 0.4, 1)
            self._badge(overlay, "AI", (width - tw - 16, height - th - 16), GREEN)

        return overlay

    @staticmethod
    def _badge(img, text, origin, color):
        (tw, th), base = cv2.getTextSize(text, FONT, 0.4, 1)
        x, y = origin
        cv2.rectangle(img, (x, y), (x + tw + 8, y + th + base + 6), color, -1)
        cv2.putText(img, text, (x + 4, y + th + 3), FONT, 0.4, WHITE, 1, cv2.LINE_AA)


def composite(frame: np.ndarray, overlay: np.ndarray) -> np.ndarray:
    """Alpha-blend a BGRA overlay onto a BGR frame of the same size."""
    if overlay.shape[:2] != frame.shape[:2]:
        overlay = cv2.resize(overlay, (frame.shape[1], frame.shape[0]),
                             interpolation=cv2.INTER_NEAREST)
    alpha = overlay[..., 3:4].astype(np.float32) / 255.0
    out = frame.astype(np.float32) * (1.0 - alpha) + overlay[..., :3].astype(np.float32) * alpha
    return out.astype(np.uint8)
