"""
Viewport compositor tests: picture-in-picture sizing and stereo layout.
"""

import math
import pytest
import sys
from pathlib import Path

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from src.core.exceptions import ViewportDegenerateError
from src.optics.config import OpticalConfig
from src.optics.solver import Eye, derive_optics
from src.rendering.camera import EyeCamera
from src.viewport.compositor import (
    MIN_VIEWPORT_EXTENT,
    Anchor,
    DisplayMode,
    PIPConfig,
    PixelRect,
    ViewportCompositor,
    ViewportRect,
)


CARDBOARD_ASPECT = derive_optics(OpticalConfig()).aspect_ratio_eye


class TestViewportRect:
    """Normalized rectangle conversions."""

    def test_to_pixels(self):
        rect = ViewportRect(0.6, 0.6, 0.2, 0.4)
        px = rect.to_pixels((1000, 500))
        assert (px.x, px.y, px.width, px.height) == pytest.approx((600, 300, 200, 200))

    def test_overlay_pixels_use_top_left_origin(self):
        rect = ViewportRect(0.6, 0.6, 0.2, 0.4)
        px = rect.to_overlay_pixels((1000, 500))
        assert px.y == pytest.approx(0.0)
        assert px.x == pytest.approx(600)

    def test_edges(self):
        rect = ViewportRect(0.1, 0.2, 0.3, 0.4)
        assert rect.right_edge == pytest.approx(0.4)
        assert rect.top_edge == pytest.approx(0.6)

    def test_pixel_aspect_ratio(self):
        assert ViewportRect(0, 0, 0.5, 1.0).aspect_ratio((800, 600)) == pytest.approx(400 / 600)

    def test_pixel_rect_rounding(self):
        assert PixelRect(0.4, 1.6, 99.5, 10.2).rounded() == (0, 2, 100, 10)

    @pytest.mark.parametrize("canvas", [(0, 600), (800, 0), (-1, 600), (800, math.nan), None])
    def test_degenerate_canvas(self, canvas):
        with pytest.raises(ViewportDegenerateError):
            ViewportRect(0, 0, 1, 1).to_pixels(canvas)


class TestPIPLayout:
    """Simulation mode: two insets whose pixel aspect equals the eye aspect."""

    def setup_method(self):
        self.compositor = ViewportCompositor()

    @pytest.mark.parametrize("canvas", [(1920, 1080), (800, 600), (1080, 1920), (3440, 1440)])
    @pytest.mark.parametrize("aspect", [CARDBOARD_ASPECT, 0.5, 1.2])
    def test_pixel_aspect_matches_eye_aspect(self, canvas, aspect):
        """Each inset, measured in pixels, has exactly the frustum's aspect ratio"""
        layout = self.compositor.layout(DisplayMode.SIMULATION, canvas, aspect)
        left_px, right_px = layout.pixel_rects()
        assert left_px.aspect_ratio == pytest.approx(aspect)
        assert right_px.aspect_ratio == pytest.approx(aspect)

    def test_height_formula(self):
        """height = width * (canvas_w / canvas_h) / aspect"""
        layout = self.compositor.layout(DisplayMode.SIMULATION, (1920, 1080), CARDBOARD_ASPECT)
        vp = layout.viewport_l
        assert vp.width == pytest.approx(0.2)
        assert vp.height == pytest.approx(0.2 * (1920 / 1080) / CARDBOARD_ASPECT)

    def test_anchored_top_right_side_by_side(self):
        layout = self.compositor.layout(DisplayMode.SIMULATION, (1920, 1080), CARDBOARD_ASPECT)
        left, right = layout.viewport_l, layout.viewport_r
        assert right.right_edge == pytest.approx(1.0)
        assert left.top_edge == pytest.approx(1.0)
        assert right.x == pytest.approx(left.right_edge)
        assert left.y == right.y
        assert (left.width, left.height) == (right.width, right.height)

    @pytest.mark.parametrize("anchor,x,y_top", [
        (Anchor.TOP_LEFT, 0.0, True),
        (Anchor.BOTTOM_LEFT, 0.0, False),
        (Anchor.BOTTOM_RIGHT, None, False),
    ])
    def test_other_anchors(self, anchor, x, y_top):
        compositor = ViewportCompositor(PIPConfig(anchor=anchor))
        layout = compositor.layout(DisplayMode.SIMULATION, (1920, 1080), CARDBOARD_ASPECT)
        left, right = layout.viewport_l, layout.viewport_r
        if x is not None:
            assert left.x == x
        else:
            assert right.right_edge == pytest.approx(1.0)
        if y_top:
            assert left.top_edge == pytest.approx(1.0)
        else:
            assert left.y == 0.0

    def test_width_clamped_to_max(self):
        compositor = ViewportCompositor(PIPConfig(base_width_fraction=0.8, max_width_fraction=0.3))
        layout = compositor.layout(DisplayMode.SIMULATION, (1000, 1000), 1.0)
        assert layout.viewport_l.width == pytest.approx(0.3)

    def test_two_insets_always_fit(self):
        """Even a permissive max width never lets the pair exceed the screen"""
        compositor = ViewportCompositor(PIPConfig(base_width_fraction=0.9, max_width_fraction=0.9,
                                                  max_height_fraction=1.0))
        layout = compositor.layout(DisplayMode.SIMULATION, (2000, 500), 1.0)
        assert layout.viewport_r.right_edge <= 1.0 + 1e-12
        assert layout.viewport_l.x >= -1e-12

    def test_tall_inset_clamped_by_height_keeps_aspect(self):
        """Wide canvas, narrow eye: height hits its maximum and width is derived back"""
        layout = self.compositor.layout(DisplayMode.SIMULATION, (1600, 600), 0.3)
        vp = layout.viewport_l
        assert vp.height == pytest.approx(0.9)
        assert vp.width == pytest.approx(0.9 * 0.3 / (1600 / 600))
        assert layout.pixel_rects()[0].aspect_ratio == pytest.approx(0.3)

    def test_scale_with_display(self):
        config = PIPConfig(scale_with_display=True, base_display_width=0.121)
        compositor = ViewportCompositor(config)
        layout = compositor.layout(DisplayMode.SIMULATION, (1920, 1080), CARDBOARD_ASPECT,
                                   display_width=0.1815)
        assert layout.viewport_l.width == pytest.approx(0.3)

    def test_base_config_override(self):
        layout = self.compositor.layout(DisplayMode.SIMULATION, (1920, 1080), CARDBOARD_ASPECT,
                                        base_config=PIPConfig(base_width_fraction=0.1))
        assert layout.viewport_l.width == pytest.approx(0.1)

    def test_resize_rescales_width_and_height_together(self):
        """1920x1080 -> 800x600: pixel size scales uniformly, aspect unchanged"""
        before = self.compositor.layout(DisplayMode.SIMULATION, (1920, 1080), CARDBOARD_ASPECT)
        after = self.compositor.layout(DisplayMode.SIMULATION, (800, 600), CARDBOARD_ASPECT)
        px_before = before.pixel_rects()[0]
        px_after = after.pixel_rects()[0]

        width_scale = px_after.width / px_before.width
        height_scale = px_after.height / px_before.height
        assert width_scale == pytest.approx(800 / 1920)
        assert height_scale == pytest.approx(width_scale)
        assert px_after.aspect_ratio == pytest.approx(px_before.aspect_ratio)
        assert after.aspect_ratio_eye == before.aspect_ratio_eye

    def test_zero_width_fraction_clamped(self, caplog):
        compositor = ViewportCompositor(PIPConfig(base_width_fraction=0.0))
        with caplog.at_level("WARNING", logger="hmdsim.viewport"):
            layout = compositor.layout(DisplayMode.SIMULATION, (1920, 1080), CARDBOARD_ASPECT)
        assert layout.viewport_l.width == MIN_VIEWPORT_EXTENT
        assert layout.viewport_l.height > 0
        assert any("clamped" in r.message for r in caplog.records)

    def test_zero_width_fraction_strict(self):
        compositor = ViewportCompositor(PIPConfig(base_width_fraction=0.0), strict=True)
        with pytest.raises(ViewportDegenerateError):
            compositor.layout(DisplayMode.SIMULATION, (1920, 1080), CARDBOARD_ASPECT)

    @pytest.mark.parametrize("aspect", [0.0, -1.0, math.inf, math.nan])
    def test_bad_eye_aspect(self, aspect):
        with pytest.raises(ViewportDegenerateError):
            self.compositor.layout(DisplayMode.SIMULATION, (1920, 1080), aspect)

    def test_empty_canvas(self):
        with pytest.raises(ViewportDegenerateError):
            self.compositor.layout(DisplayMode.SIMULATION, (0, 0), CARDBOARD_ASPECT)


class TestVRLayout:
    """Stereo mode: each eye fills half the screen."""

    def test_halves(self):
        layout = ViewportCompositor().layout(DisplayMode.VR, (1920, 1080), CARDBOARD_ASPECT)
        assert layout.viewport_l == ViewportRect(0.0, 0.0, 0.5, 1.0)
        assert layout.viewport_r == ViewportRect(0.5, 0.0, 0.5, 1.0)
        assert layout.mode is DisplayMode.VR

    def test_mode_accepts_string(self):
        layout = ViewportCompositor().layout("vr", (800, 600), 1.0)
        assert layout.mode is DisplayMode.VR


class TestLayoutHelpers:

    def test_for_eye(self):
        layout = ViewportCompositor().layout(DisplayMode.VR, (800, 600), 1.0)
        assert layout.for_eye(Eye.LEFT) is layout.viewport_l
        assert layout.for_eye(Eye.RIGHT) is layout.viewport_r

    def test_for_eye_matches_by_identity(self):
        """Only the Eye.LEFT member selects the left viewport"""
        layout = ViewportCompositor().layout(DisplayMode.SIMULATION, (1920, 1080), 0.889412)
        assert layout.for_eye(Eye("left")) is layout.viewport_l
        assert layout.for_eye("left") is layout.viewport_r

    def test_apply_writes_camera_viewports(self):
        layout = ViewportCompositor().layout(DisplayMode.SIMULATION, (800, 600), 1.0)
        cam_l, cam_r = EyeCamera("eyeL", Eye.LEFT), EyeCamera("eyeR", Eye.RIGHT)
        ViewportCompositor.apply(layout, cam_l, cam_r)
        assert cam_l.viewport is layout.viewport_l
        assert cam_r.viewport is layout.viewport_r

    def test_to_dict(self):
        data = ViewportCompositor().layout(DisplayMode.SIMULATION, (800, 600), 1.0).to_dict()
        assert data['mode'] == 'simulation'
        assert data['canvas_size'] == [800, 600]
        assert set(data['pixels_l']) == {'x', 'y', 'width', 'height'}


class TestPIPConfig:

    def test_from_dict(self):
        config = PIPConfig.from_dict({'anchor': 'bottom_left', 'base_width_fraction': 0.25})
        assert config.anchor is Anchor.BOTTOM_LEFT
        assert config.base_width_fraction == 0.25
        assert config.max_height_fraction == 0.9

    def test_string_anchor_coerced(self):
        assert PIPConfig(anchor="top_left").anchor is Anchor.TOP_LEFT

    def test_to_dict(self):
        assert PIPConfig().to_dict()['anchor'] == 'top_right'
