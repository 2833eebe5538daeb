"""
Layer mask routing and frustum overlay resource tests.
"""

import numpy as np
import pytest
import sys
from pathlib import Path

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from src.optics.config import OpticalConfig
from src.optics.solver import solve
from src.rendering.layers import (
    LAYER_SCENE_FRUSTUM,
    LAYER_SCENE_HMD_FRUSTUM,
    CameraRole,
    LayerMask,
    camera_layer_mask,
    content_routing_tag,
)
from src.rendering.overlay import FrustumOverlay, MIN_TUBE_RADIUS
from src.rig.eye_rig import EyePoseRig
from src.rig.pose import HMDPose
from src.viewport.compositor import DisplayMode


class TestLayerMask:
    """Bit values and combinations."""

    def test_bit_values(self):
        assert LayerMask.SCENE == 0x1
        assert LayerMask.HMD == 0x2
        assert LayerMask.FRUSTUM == 0x4
        assert LayerMask.UI == 0x8
        assert LayerMask.SPLAT_MAIN == 0x10
        assert LayerMask.SPLAT_LEFT == 0x20
        assert LayerMask.SPLAT_RIGHT == 0x40

    def test_combinations(self):
        assert LayerMask.SCENE | LayerMask.HMD == 0x3
        assert LAYER_SCENE_HMD_FRUSTUM == 0x7
        assert LAYER_SCENE_FRUSTUM == 0x5

    def test_routing_tags_are_exclusive(self):
        """Each camera role owns its own sorted copy of translucent content"""
        tags = [content_routing_tag(role) for role in
                (CameraRole.MAIN, CameraRole.LEFT_EYE, CameraRole.RIGHT_EYE)]
        assert len(set(tags)) == 3
        for a in tags:
            for b in tags:
                if a is not b:
                    assert not (a & b)

    def test_gui_has_no_routing_tag(self):
        assert content_routing_tag(CameraRole.GUI) == LayerMask.NONE


class TestCameraLayerMask:
    """Per-camera masks by display mode."""

    def test_main_camera_simulation(self):
        mask = camera_layer_mask(CameraRole.MAIN, DisplayMode.SIMULATION)
        assert mask & LayerMask.HMD
        assert mask & LayerMask.FRUSTUM
        assert mask & LayerMask.SPLAT_MAIN
        assert not mask & LayerMask.SPLAT_LEFT

    def test_main_camera_renders_nothing_in_vr(self):
        assert camera_layer_mask(CameraRole.MAIN, DisplayMode.VR) == LayerMask.NONE

    @pytest.mark.parametrize("role", [CameraRole.LEFT_EYE, CameraRole.RIGHT_EYE])
    @pytest.mark.parametrize("mode", list(DisplayMode))
    def test_eye_cameras_never_see_headset_or_overlays(self, role, mode):
        mask = camera_layer_mask(role, mode)
        assert mask & LayerMask.SCENE
        assert not mask & LayerMask.HMD
        assert not mask & LayerMask.FRUSTUM

    def test_eye_masks_use_own_splat_copy(self):
        assert camera_layer_mask(CameraRole.LEFT_EYE) & LayerMask.SPLAT_LEFT
        assert not camera_layer_mask(CameraRole.LEFT_EYE) & LayerMask.SPLAT_RIGHT
        assert camera_layer_mask(CameraRole.RIGHT_EYE) & LayerMask.SPLAT_RIGHT

    def test_disabled_eyes(self):
        assert camera_layer_mask(CameraRole.LEFT_EYE, eyes_enabled=False) == LayerMask.NONE

    def test_gui_camera(self):
        assert camera_layer_mask(CameraRole.GUI, DisplayMode.VR) == LayerMask.UI


class TestFrustumOverlay:
    """Explicit overlay resource."""

    def setup_method(self):
        config = OpticalConfig()
        derived, projection = solve(config)
        eye_pose = EyePoseRig().update_from_optics(HMDPose(), config, derived)
        self.proj = projection.left
        self.view = eye_pose.view_l
        self.overlay = FrustumOverlay("frustum_left")

    def test_defaults(self):
        assert self.overlay.tube_radius == 0.0015
        assert self.overlay.layer_mask == LayerMask.FRUSTUM
        assert self.overlay.color == (1.0, 1.0, 1.0)
        assert not self.overlay.is_drawable

    def test_update_builds_segments(self):
        assert self.overlay.update(self.proj, self.view)
        assert len(self.overlay.segments()) == 12
        assert self.overlay.is_drawable

    def test_singular_update_keeps_previous_geometry(self, caplog):
        """A singular matrix hides the overlay for the frame and keeps the old corners"""
        self.overlay.update(self.proj, self.view)
        previous = self.overlay.corners
        with caplog.at_level("WARNING", logger="hmdsim.rendering"):
            assert not self.overlay.update(np.zeros((4, 4)), self.view)
        assert self.overlay.corners is previous
        assert self.overlay.stale
        assert not self.overlay.is_drawable
        assert any("Skipping frustum overlay" in r.message for r in caplog.records)

    def test_recovers_after_singular_frame(self):
        self.overlay.update(np.zeros((4, 4)), self.view)
        assert self.overlay.update(self.proj, self.view)
        assert not self.overlay.stale
        assert self.overlay.is_drawable

    def test_thickness_has_minimum(self):
        self.overlay.set_thickness(0.0)
        assert self.overlay.tube_radius == MIN_TUBE_RADIUS
        self.overlay.set_thickness(0.004)
        assert self.overlay.tube_radius == 0.004

    def test_visibility_toggle(self):
        self.overlay.update(self.proj, self.view)
        assert self.overlay.toggle_visibility() is False
        assert not self.overlay.is_drawable
        self.overlay.set_visibility(True)
        assert self.overlay.is_drawable

    def test_style_setters(self):
        self.overlay.set_emissive_color((1, 0, 0))
        self.overlay.set_rendering_group_id(2)
        self.overlay.set_layer_mask(LayerMask.FRUSTUM | LayerMask.UI)
        assert self.overlay.color == (1.0, 0.0, 0.0)
        assert self.overlay.rendering_group_id == 2
        assert self.overlay.layer_mask == 0xC

    def test_dispose(self):
        self.overlay.update(self.proj, self.view)
        self.overlay.dispose()
        assert self.overlay.segments() == []
        assert not self.overlay.is_drawable
        with pytest.raises(RuntimeError):
            self.overlay.update(self.proj, self.view)
