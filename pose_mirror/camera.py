import logging
from typing import Optional, Tuple

import cv2
import numpy as np

from . import config
from .errors import AcquisitionError

logger = logging.getLogger(__name__)


class CameraSource:
    """
    Scoped webcam acquisition. Use as a context manager so the device is
    released on every exit path:

        with CameraSource(0) as cam:
            frame = cam.read()
    """

    def __init__(self,
                 index: int = config.CAM_INDEX,
                 width: int = config.CAPTURE_WIDTH,
                 height: int = config.CAPTURE_HEIGHT,
                 flip_vertical: bool = config.FLIP_VERTICAL,
                 flip_horizontal: bool = config.FLIP_HORIZONTAL,
                 rotate_180: bool = config.ROTATE_180,
                 backend: int = cv2.CAP_ANY):
        self.index = index
        self.width = width
        self.height = height
        self.flip_vertical = flip_vertical
        self.flip_horizontal = flip_horizontal
        self.rotate_180 = rotate_180
        self.backend = backend

        self.cap: Optional[cv2.VideoCapture] = None
        self._size: Tuple[int, int] = (width, height)

    @property
    def is_open(self) -> bool:
        return self.cap is not None and self.cap.isOpened()

    @property
    def size(self) -> Tuple[int, int]:
        """Native (width, height) reported by the device."""
        return self._size

    def open(self) -> "CameraSource":
        cap = cv2.VideoCapture(self.index, self.backend)
        if not cap.isOpened():
            cap.release()
            raise AcquisitionError(f"Cannot open camera (index {self.index})")

        # Hint only; the driver picks the closest mode it supports
        cap.set(cv2.CAP_PROP_FRAME_WIDTH, self.width)
        cap.set(cv2.CAP_PROP_FRAME_HEIGHT, self.height)
        native_w = int(cap.get(cv2.CAP_PROP_FRAME_WIDTH)) or self.width
        native_h = int(cap.get(cv2.CAP_PROP_FRAME_HEIGHT)) or self.height

        self.cap = cap
        self._size = (native_w, native_h)
        logger.info(f"[Camera] Opened index {self.index} at {native_w}x{native_h}")
        return self

    def preprocess(self, img: np.ndarray) -> np.ndarray:
        if self.rotate_180:
            return cv2.rotate(img, cv2.ROTATE_180)
        if self.flip_vertical:
            img = cv2.flip(img, 0)
        if self.flip_horizontal:
            img = cv2.flip(img, 1)
        return img

    def read(self) -> Optional[np.ndarray]:
        """Latest preprocessed frame, or None when no frame is ready."""
        if not self.is_open:
            return None
        ok, img = self.cap.read()
        if not ok or img is None or img.size == 0:
            return None
        h, w = img.shape[:2]
        self._size = (w, h)
        return self.preprocess(img)

    def reconfigure(self, width: int, height: int) -> "CameraSource":
        """Release the device and reopen it with new capture dimensions."""
        self.release()
        self.width = width
        self.height = height
        return self.open()

    def release(self):
        if self.cap is not None:
            self.cap.release()
            self.cap = None
            logger.info(f"[Camera] Released index {self.index}")

    def __enter__(self) -> "CameraSource":
        return self.open()

    def __exit__(self, exc_type, exc, tb):
        self.release()
        return False
