"""
Tests for the monitor overlay and avatar surfaces.
"""

import math

import numpy as np
import pytest
from conftest import obj, person

from pose_mirror.render.avatar import AvatarRenderer, figure_geometry, is_smiling
from pose_mirror.render.overlay import (
    GREEN, RED, MonitorOverlayRenderer, composite, draw_dashed_rect, score_label,
)
from pose_mirror.types import Detection, PoseState, RenderMode

FRAME = (640, 480)


class TestOverlay:
    @pytest.fixture
    def renderer(self):
        return MonitorOverlayRenderer()

    def test_cleared_when_nothing_detected(self, renderer):
        out = renderer.render([], FRAME, RenderMode.AVATAR, model_ready=False)
        assert out.shape == (480, 640, 4)
        assert not out.any()

    def test_native_resolution(self, renderer):
        out = renderer.render([], (1280, 720), RenderMode.AVATAR, model_ready=False)
        assert out.shape == (720, 1280, 4)

    def test_object_box_is_red(self, renderer):
        cup = Detection("cup", 0.9, (100, 100, 80, 60))
        out = renderer.render([cup], FRAME, RenderMode.AVATAR, model_ready=False)
        # left edge of the box, well below the label band
        assert tuple(out[130, 100]) == RED

    def test_low_score_object_skipped(self, renderer):
        cup = Detection("cup", 0.5, (100, 100, 80, 60))
        out = renderer.render([cup], FRAME, RenderMode.AVATAR, model_ready=False)
        assert not out.any()

    def test_person_dashed_only_in_avatar_mode(self, renderer):
        p = Detection("person", 0.9, (200, 100, 100, 200))
        avatar = renderer.render([p], FRAME, RenderMode.AVATAR, model_ready=False)
        detection_only = renderer.render([p], FRAME, RenderMode.DETECTION_ONLY, model_ready=False)

        # first dash is drawn, the following gap is not
        assert tuple(avatar[100, 202]) == GREEN
        assert not avatar[100, 207:209, 3].any()
        assert not detection_only.any()

    def test_every_confident_person_is_boxed(self, renderer):
        a = Detection("person", 0.9, (50, 100, 100, 200))
        b = Detection("person", 0.7, (400, 100, 100, 200))
        out = renderer.render([a, b], FRAME, RenderMode.AVATAR, model_ready=False)
        assert tuple(out[100, 52]) == GREEN
        assert tuple(out[100, 402]) == GREEN

    def test_model_badge(self, renderer):
        ready = renderer.render([], FRAME, RenderMode.AVATAR, model_ready=True)
        assert ready[440:, 560:].any()

    def test_idempotent(self, renderer):
        dets = [obj("cup"), person(200, 100)]
        a = renderer.render(dets, FRAME, RenderMode.AVATAR)
        b = renderer.render(dets, FRAME, RenderMode.AVATAR)
        assert np.array_equal(a, b)

    def test_score_label_rounds_half_up(self):
        assert score_label(Detection("cup", 0.875, (0, 0, 1, 1))) == "cup (88%)"
        assert score_label(Detection("dog", 0.5, (0, 0, 1, 1))) == "dog (50%)"

    def test_dashed_rect_has_gaps(self):
        img = np.zeros((50, 50, 4), np.uint8)
        draw_dashed_rect(img, 0, 10, 40, 30, GREEN, thickness=1)
        row = img[10, :41, 3] > 0
        assert row[:5].all()
        assert not row[6:10].any()


class TestComposite:
    def test_transparent_overlay_keeps_frame(self):
        frame = np.full((4, 4, 3), 77, np.uint8)
        assert np.array_equal(composite(frame, np.zeros((4, 4, 4), np.uint8)), frame)

    def test_opaque_overlay_replaces_frame(self):
        frame = np.full((4, 4, 3), 77, np.uint8)
        overlay = np.zeros((4, 4, 4), np.uint8)
        overlay[0, 0] = RED
        out = composite(frame, overlay)
        assert tuple(out[0, 0]) == (0, 0, 255)
        assert tuple(out[1, 1]) == (77, 77, 77)


class TestFigureGeometry:
    def test_neutral_pose(self):
        geo = figure_geometry(PoseState.zero(), 400, 300, 200)
        assert geo.head_center == pytest.approx((400, 240))
        assert geo.head_radius == pytest.approx(30)
        assert geo.torso[0] == pytest.approx((400, 280))
        assert geo.torso[1] == pytest.approx((400, 360))
        # arms hang at 45 degrees on both sides
        lx, ly = geo.left_arm[1]
        rx, ry = geo.right_arm[1]
        assert lx == pytest.approx(400 - 80 * math.cos(math.pi / 4))
        assert rx == pytest.approx(400 + 80 * math.cos(math.pi / 4))
        assert ly == pytest.approx(ry)
        # legs straight down
        assert geo.left_leg[1] == pytest.approx((390, 460))
        assert geo.right_leg[1] == pytest.approx((410, 460))

    def test_lean_is_doubled(self):
        geo = figure_geometry(PoseState(body_lean=30), 400, 300, 200)
        assert geo.torso[1][0] == pytest.approx(460)

    def test_raised_arm_goes_up(self):
        geo = figure_geometry(PoseState(left_arm=-75), 400, 300, 200)
        assert geo.left_arm[1][1] < 300

    def test_leg_angle(self):
        geo = figure_geometry(PoseState(left_leg=20, right_leg=20), 400, 300, 200)
        assert geo.left_leg[1][0] < 390
        assert geo.right_leg[1][0] < 410


class TestAvatar:
    @pytest.fixture
    def renderer(self):
        return AvatarRenderer()

    def test_fixed_size_opaque(self, renderer):
        out = renderer.render(PoseState.zero(), False, RenderMode.AVATAR)
        assert out.shape == (600, 800, 3)
        assert out.dtype == np.uint8

    def test_figure_drawn_only_with_subject(self, renderer):
        empty = renderer.render(PoseState.zero(), False, RenderMode.AVATAR)
        figure = renderer.render(PoseState.zero(), True, RenderMode.AVATAR)
        cx, cy = 400, 300
        assert not np.array_equal(empty[cy - 100:cy + 200, cx - 100:cx + 100],
                                  figure[cy - 100:cy + 200, cx - 100:cx + 100])

    def test_detection_only_skips_figure(self, renderer):
        a = renderer.render(PoseState.zero(), True, RenderMode.DETECTION_ONLY)
        b = renderer.render(PoseState(left_arm=-60, body_lean=40), True, RenderMode.DETECTION_ONLY)
        assert np.array_equal(a, b)

    def test_pose_changes_figure(self, renderer):
        a = renderer.render(PoseState.zero(), True, RenderMode.AVATAR)
        b = renderer.render(PoseState(body_lean=60), True, RenderMode.AVATAR)
        assert not np.array_equal(a, b)

    def test_idempotent(self, renderer):
        pose = PoseState(left_arm=30, right_arm=-30, head_tilt=10, body_lean=-20)
        a = renderer.render(pose, True, RenderMode.AVATAR)
        b = renderer.render(pose, True, RenderMode.AVATAR)
        assert np.array_equal(a, b)

    def test_smile_when_arm_raised(self):
        assert is_smiling(PoseState(left_arm=-21))
        assert is_smiling(PoseState(right_arm=-45))
        assert not is_smiling(PoseState(left_arm=-20, right_arm=30))
