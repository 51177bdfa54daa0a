import asyncio
import logging
from typing import Sequence, Tuple

import cv2

from .coordinator import RenderCoordinator
from .pipeline import MirrorPipeline
from .render.overlay import composite

logger = logging.getLogger(__name__)

MONITOR_WINDOW = "Webcam Monitor"
AVATAR_WINDOW = "Avatar"
MONITOR_SIZE = (320, 240)
CAPTURE_PRESETS: Sequence[Tuple[int, int]] = ((640, 480), (1280, 720), (320, 240))


class Display:
    """
    Shows both surfaces and acts as the control surface.

    Keys:
      a      - toggle avatar mode
      r      - reset tracker and pose
      c      - cycle capture resolution
      q/ESC  - quit
    Mouse motion over the monitor window drives the pose directly.
    """

    def __init__(self, pipeline: MirrorPipeline, enable_display: bool = True,
                 monitor_size: Tuple[int, int] = MONITOR_SIZE,
                 poll_interval: float = 0.015):
        self.pipeline = pipeline
        self.enable_display = enable_display
        self.monitor_size = monitor_size
        self.poll_interval = poll_interval
        self._preset = 0
        self._windows_ready = False

    @property
    def coordinator(self) -> RenderCoordinator:
        return self.pipeline.coordinator

    def _ensure_windows(self):
        if self._windows_ready:
            return
        cv2.namedWindow(AVATAR_WINDOW)
        cv2.namedWindow(MONITOR_WINDOW)
        cv2.setMouseCallback(MONITOR_WINDOW, self.on_mouse)
        self._windows_ready = True

    def on_mouse(self, event, x, y, flags, param):
        if event != cv2.EVENT_MOUSEMOVE:
            return
        frame_size = self.pipeline.camera.size
        # Monitor window is scaled down from the native frame
        sx = frame_size[0] / self.monitor_size[0]
        sy = frame_size[1] / self.monitor_size[1]
        self.coordinator.apply_pointer(x * sx, y * sy, frame_size)

    def handle_key(self, key: int) -> bool:
        """Apply one key press. Returns False when the user asked to quit."""
        if key in (ord("q"), 27):
            return False
        if key == ord("a"):
            self.coordinator.mode_controller.toggle()
        elif key == ord("r"):
            self.coordinator.reset()
        elif key == ord("c"):
            self._preset = (self._preset + 1) % len(CAPTURE_PRESETS)
            self.pipeline.reconfigure_capture(*CAPTURE_PRESETS[self._preset])
        return True

    def show_latest(self) -> bool:
        self._ensure_windows()
        latest = self.pipeline.latest
        if latest is not None:
            frame, snapshot = latest
            monitor = cv2.resize(composite(frame, snapshot.monitor), self.monitor_size)
            cv2.imshow(MONITOR_WINDOW, monitor)
            cv2.imshow(AVATAR_WINDOW, snapshot.avatar)

        key = cv2.waitKey(1) & 0xFF
        if key == 0xFF:
            return True
        return self.handle_key(key)

    async def run(self):
        if not self.enable_display:
            # Headless: run until cancelled
            await asyncio.Future()
            return

        logger.info("[Display] Keys: a avatar | r reset | c capture size | q quit")
        while self.show_latest():
            await asyncio.sleep(self.poll_interval)

    def cleanup(self):
        if self._windows_ready:
            cv2.destroyAllWindows()
            self._windows_ready = False
