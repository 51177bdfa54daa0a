"""Shared fakes: detections, detectors and capture devices without a camera or model."""

import asyncio

import numpy as np
import pytest

from pose_mirror.detectors import Detector
from pose_mirror.errors import DetectionError, ModelInitError
from pose_mirror.types import Detection


def person(x, y, w=50, h=150, score=0.9):
    return Detection("person", score, (x, y, w, h))


def obj(label, score=0.9, bbox=(10, 40, 60, 60)):
    return Detection(label, score, bbox)


class ScriptedDetector(Detector):
    """Returns queued detection lists in order; an Exception entry is raised instead."""

    def __init__(self, script=None, fail_load=False, delay=0.0):
        self.script = list(script or [])
        self.fail_load = fail_load
        self.delay = delay
        self.loaded = False
        self.closed = False
        self.calls = 0

    def name(self):
        return "scripted"

    async def load(self):
        if self.fail_load:
            raise ModelInitError("weights missing")
        self.loaded = True

    async def detect(self, frame):
        self.calls += 1
        if self.delay:
            await asyncio.sleep(self.delay)
        item = self.script.pop(0) if self.script else []
        if isinstance(item, Exception):
            raise item
        return item

    def close(self):
        self.closed = True


class FakeCapture:
    """Stand-in for cv2.VideoCapture."""

    def __init__(self, opened=True, width=640, height=480):
        self.opened = opened
        self.width = width
        self.height = height
        self.released = False
        self.props = {}

    def isOpened(self):
        return self.opened and not self.released

    def set(self, prop, value):
        self.props[prop] = value
        return True

    def get(self, prop):
        import cv2
        if prop == cv2.CAP_PROP_FRAME_WIDTH:
            return self.width
        if prop == cv2.CAP_PROP_FRAME_HEIGHT:
            return self.height
        return 0

    def read(self):
        img = np.zeros((self.height, self.width, 3), dtype=np.uint8)
        img[:, : self.width // 2] = 255
        return True, img

    def release(self):
        self.released = True


@pytest.fixture
def detection_error():
    return DetectionError("inference crashed")
