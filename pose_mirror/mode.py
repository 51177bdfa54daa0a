import logging

from .types import RenderMode

logger = logging.getLogger(__name__)


class ModeController:
    """
    Two-state switch between pose-driven avatar rendering and detection only.
    Switching never touches the tracker or the current pose.
    """

    def __init__(self, initial: RenderMode = RenderMode.AVATAR):
        self._mode = initial

    @property
    def mode(self) -> RenderMode:
        return self._mode

    @property
    def avatar_enabled(self) -> bool:
        return self._mode is RenderMode.AVATAR

    def set_mode(self, mode: RenderMode) -> RenderMode:
        if mode is not self._mode:
            logger.info(f"[Mode] {self._mode.name} -> {mode.name}")
            self._mode = mode
        return self._mode

    def toggle(self) -> RenderMode:
        if self._mode is RenderMode.AVATAR:
            return self.set_mode(RenderMode.DETECTION_ONLY)
        return self.set_mode(RenderMode.AVATAR)
