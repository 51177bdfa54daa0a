import asyncio
import logging
from typing import List

import numpy as np
import torch
from ultralytics import YOLO

from ..errors import DetectionError, ModelInitError
from ..types import Detection
from .base import Detector

logger = logging.getLogger(__name__)

MODEL_PATH = "yolo11n.pt"
CONF_THRES = 0.25          # Model-side floor; the pipeline applies its own 0.5 cut
DEVICE = (
    "mps" if torch.backends.mps.is_available() else
    ("cuda" if torch.cuda.is_available() else "cpu")
)


class YoloDetector(Detector):
    """COCO object detection with ultralytics YOLO. Persons are kept."""

    def __init__(self, model_path: str = MODEL_PATH, conf: float = CONF_THRES,
                 device: str = DEVICE):
        self.model_path = model_path
        self.conf = conf
        self.device = device
        self.model = None

    def name(self) -> str:
        return "yolo"

    def _load_sync(self):
        model = YOLO(self.model_path)
        # Warm up with a dummy frame so the first tick is not slow
        dummy = np.zeros((480, 640, 3), dtype=np.uint8)
        model(dummy, conf=self.conf, device=self.device, verbose=False)
        return model

    async def load(self) -> None:
        logger.info(f"[YOLO] Loading {self.model_path} on {self.device}...")
        try:
            self.model = await asyncio.to_thread(self._load_sync)
        except Exception as e:
            raise ModelInitError(f"YOLO model {self.model_path} failed to load: {e}") from e
        logger.info("[YOLO] Model loaded!")

    def _detect_sync(self, img: np.ndarray) -> List[Detection]:
        results = self.model(img, conf=self.conf, device=self.device, verbose=False)[0]

        detections: List[Detection] = []
        if results.boxes is not None:
            for box in results.boxes:
                x1, y1, x2, y2 = box.xyxy[0].tolist()
                cls_id = int(box.cls[0]) if box.cls is not None else -1
                conf = float(box.conf[0]) if box.conf is not None else 0.0
                label = results.names[cls_id] if cls_id >= 0 else "object"
                detections.append(Detection.from_xyxy(label, conf, x1, y1, x2, y2))
        return detections

    async def detect(self, frame: np.ndarray) -> List[Detection]:
        if self.model is None:
            raise DetectionError("YOLO model not loaded")
        return await asyncio.to_thread(self._detect_sync, frame)

    def close(self) -> None:
        self.model = None
