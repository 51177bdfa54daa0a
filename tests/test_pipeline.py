"""
Tests for the tick pipeline: model init fallback, per-tick failure isolation,
the display control surface, and an end-to-end scheduled run.
"""

import asyncio
import logging
import re

import cv2
import numpy as np
import pytest
from conftest import ScriptedDetector, person

from pose_mirror.camera import CameraSource
from pose_mirror.coordinator import RenderCoordinator
from pose_mirror.detectors import NullDetector, get_detector
from pose_mirror.display import Display
from pose_mirror.pipeline import MirrorPipeline, load_detector
from pose_mirror.scheduler import TickScheduler
from pose_mirror.types import PoseState, RenderMode


class StaticCamera(CameraSource):
    def __init__(self, ready=True):
        super().__init__(0)
        self.ready = ready
        self.reconfigured = []

    def read(self):
        if not self.ready:
            return None
        return np.zeros((480, 640, 3), np.uint8)

    def reconfigure(self, width, height):
        self.reconfigured.append((width, height))
        return self


def make_pipeline(script, **kwargs):
    detector = ScriptedDetector(script, **kwargs)
    return MirrorPipeline(StaticCamera(), detector, RenderCoordinator()), detector


class TestLoadDetector:
    def test_success(self):
        detector = ScriptedDetector()
        loaded, ready = asyncio.run(load_detector(detector))
        assert loaded is detector
        assert ready and detector.loaded

    def test_failure_falls_back_to_null(self):
        detector = ScriptedDetector(fail_load=True)
        loaded, ready = asyncio.run(load_detector(detector))
        assert isinstance(loaded, NullDetector)
        assert not ready
        assert detector.closed
        assert asyncio.run(loaded.detect(np.zeros((4, 4, 3), np.uint8))) == []

    def test_get_detector(self):
        assert isinstance(get_detector('null'), NullDetector)
        assert get_detector('nope') is None


class TestTick:
    def test_tick_updates_snapshot(self):
        pipeline, _ = make_pipeline([[person(100, 100)], [person(150, 100)]])
        asyncio.run(pipeline.tick())
        asyncio.run(pipeline.tick())
        frame, snapshot = pipeline.latest
        assert frame.shape == (480, 640, 3)
        assert snapshot.pose.body_lean == 60
        assert snapshot.monitor.shape == (480, 640, 4)

    def test_failed_detection_skips_tick(self, detection_error):
        pipeline, _ = make_pipeline([[person(100, 100)], detection_error, [person(150, 100)]])
        asyncio.run(pipeline.tick())
        with pytest.raises(type(detection_error)):
            asyncio.run(pipeline.tick())
        assert pipeline.coordinator.latest.tick == 1
        asyncio.run(pipeline.tick())
        # the failed tick left the baseline untouched
        assert pipeline.coordinator.latest.tick == 2
        assert pipeline.coordinator.pose.body_lean == 60

    def test_frame_not_ready(self):
        detector = ScriptedDetector([[person(0, 0)]])
        pipeline = MirrorPipeline(StaticCamera(ready=False), detector, RenderCoordinator())
        asyncio.run(pipeline.tick())
        assert detector.calls == 0
        assert pipeline.latest is None

    def test_model_not_ready_hides_badge(self):
        pipeline, _ = make_pipeline([[]])
        pipeline.model_ready = False
        asyncio.run(pipeline.tick())
        assert not pipeline.latest[1].monitor.any()

    def test_reconfigure_drops_motion_baseline(self):
        pipeline, _ = make_pipeline([[person(100, 100)], [person(150, 100)]])
        asyncio.run(pipeline.tick())
        pipeline.reconfigure_capture(1280, 720)
        assert pipeline.coordinator.subject.previous is None
        asyncio.run(pipeline.tick())
        # measured fresh, not against the 640x480 box
        assert pipeline.coordinator.pose == PoseState.zero()

    def test_first_fps_line_measures_from_first_tick(self, caplog):
        pipeline, _ = make_pipeline([[], []])
        pipeline.log_interval = 2

        async def _main():
            await pipeline.tick()
            await pipeline.tick()

        with caplog.at_level(logging.INFO, logger="pose_mirror.pipeline"):
            asyncio.run(_main())
        fps = float(re.search(r"FPS: ([\d.]+)", caplog.text).group(1))
        assert fps > 1.0


class TestScheduledRun:
    def test_failures_do_not_halt_and_state_progresses(self, detection_error):
        script = [[person(100 + 10 * i, 100)] if i % 3 else detection_error for i in range(1, 200)]
        pipeline, _ = make_pipeline(script)
        scheduler = TickScheduler(pipeline.tick, interval=0.005)

        async def _main():
            scheduler.start()
            await asyncio.sleep(0.2)
            await scheduler.stop()

        asyncio.run(_main())
        assert scheduler.failures > 0
        assert pipeline.coordinator.latest.tick == scheduler.completed
        assert pipeline.coordinator.subject.present


class TestDisplayControls:
    @pytest.fixture
    def display(self):
        pipeline, _ = make_pipeline([])
        return Display(pipeline, enable_display=False)

    def test_quit_keys(self, display):
        assert display.handle_key(ord("q")) is False
        assert display.handle_key(27) is False

    def test_toggle_mode(self, display):
        assert display.handle_key(ord("a"))
        assert display.coordinator.mode_controller.mode is RenderMode.DETECTION_ONLY

    def test_reset(self, display):
        display.coordinator.apply_pointer(640, 240, (640, 480))
        display.handle_key(ord("r"))
        assert display.coordinator.pose == PoseState.zero()

    def test_cycle_capture(self, display):
        display.handle_key(ord("c"))
        assert display.pipeline.camera.reconfigured == [(1280, 720)]

    def test_mouse_scales_to_frame(self, display):
        # right edge of the 320px monitor is x=640 in the frame
        display.on_mouse(cv2.EVENT_MOUSEMOVE, 320, 120, 0, None)
        assert display.coordinator.pose.left_arm == 45

    def test_mouse_clicks_ignored(self, display):
        display.on_mouse(cv2.EVENT_LBUTTONDOWN, 320, 120, 0, None)
        assert display.coordinator.pose == PoseState.zero()

    def test_headless_run_waits_until_cancelled(self, display):
        async def _main():
            task = asyncio.create_task(display.run())
            await asyncio.sleep(0.01)
            assert not task.done()
            task.cancel()
            with pytest.raises(asyncio.CancelledError):
                await task

        asyncio.run(_main())
