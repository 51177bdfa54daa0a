import asyncio
import logging
from typing import List, Sequence

import cv2
import numpy as np
import torch
from PIL import Image
from transformers import AutoProcessor, AutoModelForZeroShotObjectDetection

from ..errors import DetectionError, ModelInitError
from ..types import Detection
from .base import Detector

logger = logging.getLogger(__name__)

MODEL_ID = "google/owlv2-base-patch16-ensemble"    # alt: "google/owlv2-large-patch14"
TEXT_QUERIES = ["person", "cup", "cell phone", "book", "bottle"]    # "person" must stay first-class
CONF_THRES = 0.30
DEVICE = (
    "mps" if getattr(torch.backends, "mps", None) and torch.backends.mps.is_available()
    else ("cuda" if torch.cuda.is_available() else "cpu")
)


def _to_pil(bgr: np.ndarray) -> Image.Image:
    return Image.fromarray(cv2.cvtColor(bgr, cv2.COLOR_BGR2RGB))


class Owlv2Detector(Detector):
    """Open-vocabulary detection with OWLv2; labels are the text queries."""

    def __init__(self, model_id: str = MODEL_ID,
                 queries: Sequence[str] = TEXT_QUERIES,
                 conf: float = CONF_THRES, device: str = DEVICE):
        self.model_id = model_id
        self.queries = list(queries)
        self.conf = conf
        self.device = device
        self._processor = None
        self._model = None

    def name(self) -> str:
        return "owlv2"

    def _load_sync(self):
        processor = AutoProcessor.from_pretrained(self.model_id)
        model = AutoModelForZeroShotObjectDetection.from_pretrained(self.model_id).to(self.device)
        model.eval()
        return processor, model

    async def load(self) -> None:
        logger.info(f"[OWLv2] Loading {self.model_id} on {self.device}...")
        try:
            self._processor, self._model = await asyncio.to_thread(self._load_sync)
        except Exception as e:
            raise ModelInitError(f"OWLv2 model {self.model_id} failed to load: {e}") from e
        logger.info("[OWLv2] Model loaded!")

    def _detect_sync(self, img: np.ndarray) -> List[Detection]:
        H, W = img.shape[:2]
        pil = _to_pil(img)

        # OWLv2 expects list-of-list for text batch
        inputs = self._processor(images=pil, text=[self.queries], return_tensors="pt").to(self.device)

        with torch.inference_mode():
            outputs = self._model(**inputs)

        results = self._processor.post_process_object_detection(
            outputs=outputs,
            target_sizes=[(H, W)],
            threshold=self.conf
        )[0]

        boxes = results.get("boxes", [])
        scores = results.get("scores", [])
        labels = results.get("labels", [])

        # move to CPU lists if needed
        if hasattr(boxes, "cpu"):
            boxes = boxes.cpu()
        if hasattr(scores, "cpu"):
            scores = scores.cpu()
        if hasattr(labels, "cpu"):
            labels = labels.cpu()

        detections: List[Detection] = []
        for box, score, lab in zip(boxes, scores, labels):
            x1, y1, x2, y2 = [float(v) for v in (box.tolist() if hasattr(box, "tolist") else box)]
            conf = float(score.item() if hasattr(score, "item") else score)
            idx = int(lab.item() if hasattr(lab, "item") else lab)
            text = self.queries[idx] if 0 <= idx < len(self.queries) else str(idx)

            if x2 <= x1 or y2 <= y1:
                continue
            detections.append(Detection.from_xyxy(text, conf, x1, y1, x2, y2))

        # Highest score first so the tracker's first-match rule picks the strongest person
        detections.sort(key=lambda d: d.score, reverse=True)
        return detections

    async def detect(self, frame: np.ndarray) -> List[Detection]:
        if self._model is None:
            raise DetectionError("OWLv2 model not loaded")
        return await asyncio.to_thread(self._detect_sync, frame)

    def close(self) -> None:
        self._processor = None
        self._model = None
