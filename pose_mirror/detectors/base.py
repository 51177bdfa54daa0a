from abc import ABC, abstractmethod
from typing import List

import numpy as np

from ..types import Detection


class Detector(ABC):
    """
    Object detector adapter.

    load() runs once before the first tick. detect() takes a BGR frame and
    returns detections in the model's output order; it may raise for a
    single frame without affecting later calls.
    """

    @abstractmethod
    def name(self) -> str: ...

    @abstractmethod
    async def load(self) -> None: ...

    @abstractmethod
    async def detect(self, frame: np.ndarray) -> List[Detection]: ...

    def close(self) -> None:
        pass


class NullDetector(Detector):
    """Stands in when no model could be loaded: every frame has no detections."""

    def name(self) -> str:
        return "null"

    async def load(self) -> None:
        return None

    async def detect(self, frame: np.ndarray) -> List[Detection]:
        return []
