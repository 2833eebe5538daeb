"""
HMD Controller - owns the headset state and keeps every dependent value in
sync.

Order of recomputation on a parameter edit:
    1. OpticalSolver     (config -> derived optics, projections)
    2. EyePoseRig        (pose + optics -> eye positions, views)
    3. ViewportCompositor (mode + canvas + eye aspect -> viewports)
    4. observers

A rejected edit raises before anything is committed. Every accepted change
swaps the whole OpticalState snapshot in one assignment under a lock, so
readers on other threads see either the old or the new state.
"""

import math
import numbers
import threading
import numpy as np
from dataclasses import replace
from typing import Callable, Dict, Mapping, Optional, Tuple, Union

from ..core.animation import AnimationConfig, AnimationDriver
from ..core.exceptions import GeometryError, ViewportDegenerateError
from ..core.observable import Observable
from ..optics.config import OpticalConfig, ParameterId
from ..optics.projection import DepthRange
from ..optics.solver import DerivedOptics, Eye, OpticalSolver
from ..rendering.camera import EyeCamera
from ..rendering.layers import CameraRole, LayerMask, camera_layer_mask
from ..rendering.overlay import FrustumOverlay
from ..rig.eye_rig import ComponentLayout, DEFAULT_LENS_DIAMETER, EyePoseRig, component_layout
from ..rig.pose import HMDPose
from ..utils.logging import get_core_logger, TimedBlock
from ..viewport.compositor import DisplayMode, PIPConfig, ViewportCompositor, ViewportLayout
from .state import OpticalState


logger = get_core_logger()

DEFAULT_CANVAS_SIZE = (1920, 1080)

OVERLAY_COLOR = (1.0, 1.0, 1.0)


class HMDController:
    """
    Headset orchestrator.

    Usage:
        controller = HMDController(canvas_size=(1920, 1080))
        controller.on_values_updated.add(lambda state: print(state.derived.near))
        controller.set_parameter("ipd", 0.064)
        controller.tick(1 / 60)
    """

    def __init__(self, config: Optional[OpticalConfig] = None,
                 pose: Optional[HMDPose] = None,
                 display_mode: DisplayMode = DisplayMode.SIMULATION,
                 canvas_size: Tuple[int, int] = DEFAULT_CANVAS_SIZE,
                 pip_config: Optional[PIPConfig] = None,
                 animation: Optional[AnimationConfig] = None,
                 depth_range: DepthRange = DepthRange.MINUS_ONE_TO_ONE,
                 strict_viewport: bool = False,
                 lens_diameter: float = DEFAULT_LENS_DIAMETER):
        self._lock = threading.RLock()

        self.depth_range = depth_range
        self.display_mode = DisplayMode(display_mode)
        self.canvas_size = (int(canvas_size[0]), int(canvas_size[1]))
        self.pip_enabled = True

        self.solver = OpticalSolver(config, depth_range)
        self.rig = EyePoseRig()
        self.compositor = ViewportCompositor(pip_config, strict=strict_viewport)
        self.animation = AnimationDriver(animation)

        self.pose = pose.copy() if pose is not None else HMDPose()
        self.user_pose = self.pose.copy()
        self.user_control = False
        self.lens_diameter = component_layout(self.solver.config, lens_diameter).lens_diameter

        self.on_values_updated = Observable("values_updated")

        self.camera_l = EyeCamera("eyeL", Eye.LEFT, self._eye_mask(CameraRole.LEFT_EYE), depth_range)
        self.camera_r = EyeCamera("eyeR", Eye.RIGHT, self._eye_mask(CameraRole.RIGHT_EYE), depth_range)
        self.overlays: Dict[Eye, FrustumOverlay] = self._create_overlays()

        derived = self.solver.derived
        self._state = OpticalState(
            config=self.solver.config,
            derived=derived,
            projection=self.solver.projection,
            eye_pose=self.rig.update_from_optics(self.pose, self.solver.config, derived),
            layout=self._layout(self.solver.config, derived, self.display_mode, self.canvas_size),
            revision=0,
        )
        self._push_to_cameras(self._state, projection_changed=True)
        self._update_overlays(self._state)

        logger.info(
            f"HMD controller ready: mode={self.display_mode.value} "
            f"canvas={self.canvas_size[0]}x{self.canvas_size[1]} "
            f"magnification={derived.magnification:.3f}"
        )

    @classmethod
    def from_preset(cls, preset, **kwargs) -> 'HMDController':
        """Build from an HMDPreset; keyword arguments override preset values."""
        kwargs.setdefault('config', preset.optics)
        kwargs.setdefault('pose', preset.pose)
        kwargs.setdefault('pip_config', preset.pip)
        kwargs.setdefault('animation', preset.animation)
        kwargs.setdefault('display_mode', preset.display_mode)
        kwargs.setdefault('lens_diameter', preset.lens_diameter)
        return cls(**kwargs)

    # ------------------------------------------------------------------
    # State access
    # ------------------------------------------------------------------

    def snapshot(self) -> OpticalState:
        """Current immutable state (safe to hand to other threads)."""
        return self._state

    @property
    def config(self) -> OpticalConfig:
        return self._state.config

    @property
    def derived(self) -> DerivedOptics:
        return self._state.derived

    @property
    def layout(self) -> ViewportLayout:
        return self._state.layout

    @property
    def main_camera_mask(self) -> LayerMask:
        return camera_layer_mask(CameraRole.MAIN, self.display_mode)

    def calculated_values(self) -> Dict[str, float]:
        return self._state.derived.to_dict()

    def display_params(self) -> Dict[str, float]:
        return self._state.config.to_dict()

    def component_layout(self) -> ComponentLayout:
        """Headset body parts (local HMD space) for the current optics"""
        return component_layout(self._state.config, self.lens_diameter)

    def component_positions(self) -> Dict[str, np.ndarray]:
        """World positions of display, lenses and eyes for the headset mesh"""
        return self.component_layout().to_world(self.pose)

    def subscribe(self, callback: Callable[[OpticalState], None]) -> int:
        return self.on_values_updated.add(callback)

    # ------------------------------------------------------------------
    # Optical parameters
    # ------------------------------------------------------------------

    def set_parameter(self, param: Union[ParameterId, str], value: float) -> OpticalState:
        """
        Change one optical parameter.

        Raises:
            UnknownParameterError: unknown parameter name
            InvalidOpticalConfig: the edited configuration is rejected; the
                previous state stays in effect
        """
        param = ParameterId.parse(param)
        with self._lock:
            config = self._state.config.replace(param, value)
            return self._apply_config(config, f"{param.value}={value!r}")

    def set_parameters(self, values: Mapping[Union[ParameterId, str], float]) -> OpticalState:
        """Change several parameters with a single solve (all or nothing)."""
        with self._lock:
            config = self._state.config
            for param, value in values.items():
                config = config.replace(param, value)
            label = ", ".join(f"{ParameterId.parse(k).value}={v!r}" for k, v in values.items())
            return self._apply_config(config, label)

    def set_config(self, config: OpticalConfig) -> OpticalState:
        with self._lock:
            return self._apply_config(config, "config replaced")

    def _apply_config(self, config: OpticalConfig, label: str) -> OpticalState:
        previous = self._state
        with TimedBlock(f"apply {label}", logger):
            derived, projection = self.solver.update(config)
            try:
                eye_pose = self.rig.update_from_optics(self.pose, config, derived)
                layout = self._layout(config, derived, self.display_mode, self.canvas_size)
            except GeometryError:
                self.solver.config = previous.config
                self.solver.derived = previous.derived
                self.solver.projection = previous.projection
                raise

            state = OpticalState(
                config=config,
                derived=derived,
                projection=projection,
                eye_pose=eye_pose,
                layout=layout,
                revision=previous.revision + 1,
            )
            self._commit(state, projection_changed=True)

        logger.info(f"Parameters updated ({label}): aspect_eye={derived.aspect_ratio_eye:.4f}")
        self.on_values_updated.notify(state)
        return state

    # ------------------------------------------------------------------
    # Pose
    # ------------------------------------------------------------------

    def tick(self, dt: float) -> OpticalState:
        """
        Advance one frame.

        The pose comes from the scripted animation, or from the user pose
        while user control is on.

        Raises:
            ValueError: dt is negative or not finite
        """
        if isinstance(dt, bool) or not isinstance(dt, numbers.Real) \
                or not math.isfinite(dt) or dt < 0:
            raise ValueError(f"Frame time must be a non-negative number, got {dt!r}")
        dt = float(dt)

        with self._lock:
            if self.user_control:
                pose = self.user_pose.copy()
            else:
                position = self.animation.step(dt, self.pose.position)
                pose = HMDPose(position, self.pose.rotation.copy())
            return self._apply_pose(pose)

    def update_position(self, position) -> OpticalState:
        with self._lock:
            pose = HMDPose(position, self.pose.rotation.copy())
            if self.user_control:
                self.user_pose = pose.copy()
            return self._apply_pose(pose)

    def update_orientation(self, rotation) -> OpticalState:
        """rotation: (pitch, yaw, roll) in radians"""
        with self._lock:
            pose = HMDPose(self.pose.position.copy(), rotation)
            if self.user_control:
                self.user_pose = pose.copy()
            return self._apply_pose(pose)

    def set_user_pose(self, position, rotation=None) -> OpticalState:
        """Pose of the user-driven control camera; followed while user control is on."""
        with self._lock:
            if rotation is None:
                rotation = self.user_pose.rotation.copy()
            self.user_pose = HMDPose(position, rotation)
            if self.user_control:
                return self._apply_pose(self.user_pose.copy())
            return self._state

    def set_user_control(self, enabled: bool) -> OpticalState:
        with self._lock:
            enabled = bool(enabled)
            if enabled == self.user_control:
                return self._state
            self.user_control = enabled
            logger.info(f"User control {'enabled' if enabled else 'disabled'}")
            if enabled:
                return self._apply_pose(self.user_pose.copy())
            return self._state

    def _apply_pose(self, pose: HMDPose) -> OpticalState:
        previous = self._state
        eye_pose = self.rig.update_from_optics(pose, previous.config, previous.derived)
        self.pose = pose
        state = replace(previous, eye_pose=eye_pose, revision=previous.revision + 1)
        self._commit(state, projection_changed=False)
        self.on_values_updated.notify(state)
        return state

    # ------------------------------------------------------------------
    # Viewports
    # ------------------------------------------------------------------

    def resize(self, width: int, height: int) -> OpticalState:
        """
        Recompute viewports for a new canvas size.

        A canvas without area (e.g. a minimized window) is ignored and the
        previous layout stays in effect.
        """
        with self._lock:
            canvas_size = (int(width), int(height))
            try:
                layout = self._layout(self._state.config, self._state.derived,
                                      self.display_mode, canvas_size)
            except ViewportDegenerateError as exc:
                logger.warning(f"Ignoring resize to {width}x{height}: {exc}")
                return self._state
            self.canvas_size = canvas_size
            return self._apply_layout(layout)

    def set_display_mode(self, mode: Union[DisplayMode, str]) -> OpticalState:
        with self._lock:
            mode = DisplayMode(mode)
            layout = self._layout(self._state.config, self._state.derived, mode, self.canvas_size)
            self.display_mode = mode
            self._update_eye_masks()
            logger.info(f"Display mode set to {mode.value}")
            return self._apply_layout(layout)

    def toggle_display_mode(self) -> OpticalState:
        if self.display_mode is DisplayMode.VR:
            return self.set_display_mode(DisplayMode.SIMULATION)
        return self.set_display_mode(DisplayMode.VR)

    def set_pip_enabled(self, enabled: bool) -> OpticalState:
        """
        Switch eye-camera rendering on or off.

        Disabled eye cameras keep their viewports but render no layers; the
        setting survives display mode changes.
        """
        with self._lock:
            enabled = bool(enabled)
            if enabled == self.pip_enabled:
                return self._state
            self.pip_enabled = enabled
            self._update_eye_masks()
            logger.info(f"Eye viewports {'enabled' if enabled else 'disabled'}")
            previous = self._state
            state = replace(previous, revision=previous.revision + 1)
            self._state = state
            self.on_values_updated.notify(state)
            return state

    def toggle_pip(self) -> OpticalState:
        return self.set_pip_enabled(not self.pip_enabled)

    def _eye_mask(self, role: CameraRole) -> LayerMask:
        return camera_layer_mask(role, self.display_mode, self.pip_enabled)

    def _update_eye_masks(self):
        self.camera_l.layer_mask = self._eye_mask(CameraRole.LEFT_EYE)
        self.camera_r.layer_mask = self._eye_mask(CameraRole.RIGHT_EYE)

    def _apply_layout(self, layout: ViewportLayout) -> OpticalState:
        previous = self._state
        state = replace(previous, layout=layout, revision=previous.revision + 1)
        self._state = state
        ViewportCompositor.apply(layout, self.camera_l, self.camera_r)
        self.on_values_updated.notify(state)
        return state

    def _layout(self, config: OpticalConfig, derived: DerivedOptics, mode: DisplayMode,
                canvas_size: Tuple[int, int]) -> ViewportLayout:
        return self.compositor.layout(mode, canvas_size, derived.aspect_ratio_eye,
                                      display_width=config.display_width)

    # ------------------------------------------------------------------
    # Renderer records
    # ------------------------------------------------------------------

    def _commit(self, state: OpticalState, projection_changed: bool):
        self._state = state
        self._push_to_cameras(state, projection_changed)
        self._update_overlays(state)

    def _push_to_cameras(self, state: OpticalState, projection_changed: bool):
        for camera in (self.camera_l, self.camera_r):
            if projection_changed:
                camera.freeze_projection(state.projection.for_eye(camera.eye))
            camera.set_view(state.eye_pose.view(camera.eye), state.eye_pose.position(camera.eye))
        ViewportCompositor.apply(state.layout, self.camera_l, self.camera_r)

    def _create_overlays(self) -> Dict[Eye, FrustumOverlay]:
        return {
            eye: FrustumOverlay(f"frustum_{eye.value}", OVERLAY_COLOR, self.depth_range)
            for eye in Eye
        }

    def _update_overlays(self, state: OpticalState):
        for eye, overlay in self.overlays.items():
            if overlay.disposed:
                continue
            overlay.update(state.projection.for_eye(eye), state.eye_pose.view(eye))

    def dispose(self):
        """Tear down overlay resources (environment switch or shutdown)."""
        with self._lock:
            for overlay in self.overlays.values():
                overlay.dispose()
            logger.debug("Frustum overlays disposed")

    def reset_overlays(self) -> Dict[Eye, FrustumOverlay]:
        """Dispose and rebuild both overlays from the current state."""
        with self._lock:
            self.dispose()
            self.overlays = self._create_overlays()
            self._update_overlays(self._state)
            return self.overlays
