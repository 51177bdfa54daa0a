import asyncio
import logging
from typing import Optional, Tuple

import numpy as np

from . import config
from .camera import CameraSource
from .coordinator import FrameSnapshot, RenderCoordinator
from .detectors import Detector, NullDetector
from .errors import ModelInitError

logger = logging.getLogger(__name__)


async def load_detector(detector: Detector) -> Tuple[Detector, bool]:
    """
    One-shot model initialization. On failure the pipeline keeps running
    detection-disabled: every tick sees an empty detection list.
    """
    try:
        await detector.load()
        return detector, True
    except ModelInitError as e:
        logger.error(f"[Pipeline] {e}; continuing with detection disabled")
        detector.close()
        return NullDetector(), False


class MirrorPipeline:
    """
    One tick: grab the latest camera frame, await detection (the only
    suspension point), then track, synthesize and render synchronously.
    """

    def __init__(self, camera: CameraSource, detector: Detector,
                 coordinator: RenderCoordinator, model_ready: bool = True,
                 log_interval: int = config.LOG_INTERVAL):
        self.camera = camera
        self.detector = detector
        self.coordinator = coordinator
        self.model_ready = model_ready
        self.log_interval = log_interval

        self.frame_count = 0
        self.last_fps_time: Optional[float] = None
        self.fps_frame_count = 0
        self.latest: Optional[Tuple[np.ndarray, FrameSnapshot]] = None

    async def tick(self):
        if self.last_fps_time is None:
            self.last_fps_time = asyncio.get_running_loop().time()

        frame = self.camera.read()
        if frame is None:
            return

        # A failure here skips the whole tick: no tracker, pose or render update
        detections = await self.detector.detect(frame)

        height, width = frame.shape[:2]
        snapshot = self.coordinator.process(detections, (width, height), self.model_ready)
        self.latest = (frame, snapshot)

        self.frame_count += 1
        self.fps_frame_count += 1
        if self.frame_count % self.log_interval == 0:
            self.log_frame_info(snapshot, width, height)

    def log_frame_info(self, snapshot: FrameSnapshot, width: int, height: int):
        current_time = asyncio.get_running_loop().time()
        elapsed = current_time - self.last_fps_time
        fps = self.fps_frame_count / elapsed if elapsed > 0 else 0
        self.last_fps_time = current_time
        self.fps_frame_count = 0

        subject = "tracking" if snapshot.subject.present else "no subject"
        logger.info(f"[Pipeline] Frame {self.frame_count} | Size: {width}x{height} | "
                    f"FPS: {fps:.1f} | {len(snapshot.detections)} detections | "
                    f"{subject} | mode {snapshot.mode.name}")

    def reconfigure_capture(self, width: int, height: int):
        logger.info(f"[Pipeline] Reconfiguring capture to {width}x{height}")
        self.camera.reconfigure(width, height)
        self.latest = None
        # Old-resolution boxes are not a valid motion baseline
        self.coordinator.tracker.reset()
