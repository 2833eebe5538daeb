"""
Viewport Compositor

Places the two eye views on screen.

Picture-in-picture (simulation mode):
    An eye camera with an off-axis frustum of aspect ratio A must render
    into a viewport whose *pixel* rectangle also has aspect ratio A,
    otherwise the image is stretched. In normalized units:

        width_px  = width  * canvas_w
        height_px = height * canvas_h
        width_px / height_px = A   =>   height = width * (canvas_w / canvas_h) / A

    The width starts from a fraction of the canvas, is clamped to the
    maximum width fraction, and the height is derived from it. If the height
    then exceeds its maximum, the height is clamped and the width derived
    back from it, so A holds either way.

Stereo (VR mode):
    Each eye fills half the screen width and the full height. The viewport
    does not enforce A here; filling the device screen takes priority.

Normalized rectangles use a bottom-left origin, as renderer viewports do.
"""

import math
from dataclasses import dataclass, asdict
from enum import Enum
from typing import Dict, Optional, Tuple

from ..core.exceptions import ViewportDegenerateError
from ..optics.solver import Eye
from ..utils.logging import get_viewport_logger


logger = get_viewport_logger()

# Smallest normalized extent handed to the renderer
MIN_VIEWPORT_EXTENT = 1e-4

# PIP defaults
BASE_PIP_WIDTH_FRACTION = 0.20
MAX_PIP_WIDTH_FRACTION = 0.45
MAX_PIP_HEIGHT_FRACTION = 0.9
BASE_DISPLAY_WIDTH = 0.121  # metres, Cardboard 2.0 display


class DisplayMode(Enum):
    SIMULATION = "simulation"  # picture-in-picture
    VR = "vr"                  # side-by-side stereo


class Anchor(Enum):
    TOP_RIGHT = "top_right"
    TOP_LEFT = "top_left"
    BOTTOM_RIGHT = "bottom_right"
    BOTTOM_LEFT = "bottom_left"


@dataclass
class PIPConfig:
    """Picture-in-picture sizing policy"""
    base_width_fraction: float = BASE_PIP_WIDTH_FRACTION
    max_width_fraction: float = MAX_PIP_WIDTH_FRACTION
    max_height_fraction: float = MAX_PIP_HEIGHT_FRACTION
    anchor: Anchor = Anchor.TOP_RIGHT
    # Grow the PIP with the physical display width
    scale_with_display: bool = False
    base_display_width: float = BASE_DISPLAY_WIDTH

    def __post_init__(self):
        self.anchor = Anchor(self.anchor)

    @classmethod
    def from_dict(cls, data: Dict) -> 'PIPConfig':
        data = data or {}
        return cls(
            base_width_fraction=float(data.get('base_width_fraction', BASE_PIP_WIDTH_FRACTION)),
            max_width_fraction=float(data.get('max_width_fraction', MAX_PIP_WIDTH_FRACTION)),
            max_height_fraction=float(data.get('max_height_fraction', MAX_PIP_HEIGHT_FRACTION)),
            anchor=Anchor(data.get('anchor', Anchor.TOP_RIGHT.value)),
            scale_with_display=bool(data.get('scale_with_display', False)),
            base_display_width=float(data.get('base_display_width', BASE_DISPLAY_WIDTH)),
        )

    def to_dict(self) -> Dict:
        data = asdict(self)
        data['anchor'] = self.anchor.value
        return data


@dataclass(frozen=True)
class PixelRect:
    x: float
    y: float
    width: float
    height: float

    @property
    def aspect_ratio(self) -> float:
        return self.width / self.height

    def rounded(self) -> Tuple[int, int, int, int]:
        return (int(round(self.x)), int(round(self.y)),
                int(round(self.width)), int(round(self.height)))


@dataclass(frozen=True)
class ViewportRect:
    """Normalized viewport (x, y, width, height), origin bottom-left."""
    x: float
    y: float
    width: float
    height: float

    @property
    def right_edge(self) -> float:
        return self.x + self.width

    @property
    def top_edge(self) -> float:
        return self.y + self.height

    def to_pixels(self, canvas_size: Tuple[int, int]) -> PixelRect:
        canvas_w, canvas_h = _check_canvas(canvas_size)
        return PixelRect(self.x * canvas_w, self.y * canvas_h,
                         self.width * canvas_w, self.height * canvas_h)

    def to_overlay_pixels(self, canvas_size: Tuple[int, int]) -> PixelRect:
        """Same rectangle with a top-left origin, for drawing UI borders"""
        canvas_w, canvas_h = _check_canvas(canvas_size)
        return PixelRect(self.x * canvas_w, (1.0 - self.top_edge) * canvas_h,
                         self.width * canvas_w, self.height * canvas_h)

    def aspect_ratio(self, canvas_size: Tuple[int, int]) -> float:
        return self.to_pixels(canvas_size).aspect_ratio

    def to_dict(self) -> Dict[str, float]:
        return asdict(self)


@dataclass(frozen=True)
class ViewportLayout:
    viewport_l: ViewportRect
    viewport_r: ViewportRect
    mode: DisplayMode
    canvas_size: Tuple[int, int]
    aspect_ratio_eye: float

    def for_eye(self, eye: Eye) -> ViewportRect:
        return self.viewport_l if eye is Eye.LEFT else self.viewport_r

    def pixel_rects(self) -> Tuple[PixelRect, PixelRect]:
        return (self.viewport_l.to_pixels(self.canvas_size),
                self.viewport_r.to_pixels(self.canvas_size))

    def to_dict(self) -> Dict:
        left_px, right_px = self.pixel_rects()
        return {
            'mode': self.mode.value,
            'canvas_size': list(self.canvas_size),
            'aspect_ratio_eye': self.aspect_ratio_eye,
            'viewport_l': self.viewport_l.to_dict(),
            'viewport_r': self.viewport_r.to_dict(),
            'pixels_l': asdict(left_px),
            'pixels_r': asdict(right_px),
        }


def _check_canvas(canvas_size: Tuple[int, int]) -> Tuple[float, float]:
    try:
        canvas_w, canvas_h = (float(v) for v in canvas_size)
    except (TypeError, ValueError) as exc:
        raise ViewportDegenerateError("canvas size must be (width, height)", canvas_size) from exc
    if not (math.isfinite(canvas_w) and math.isfinite(canvas_h)) or canvas_w <= 0 or canvas_h <= 0:
        raise ViewportDegenerateError("canvas has no area", canvas_size)
    return canvas_w, canvas_h


class ViewportCompositor:
    """
    Maps each eye frustum to a screen rectangle.

    Recompute on every canvas resize, display-mode change and optics change
    (the eye aspect ratio depends on the optics).
    """

    def __init__(self, pip_config: Optional[PIPConfig] = None, strict: bool = False):
        self.pip_config = pip_config or PIPConfig()
        self.strict = strict

    def layout(self, display_mode: DisplayMode, canvas_size: Tuple[int, int],
               aspect_ratio_eye: float, base_config: Optional[PIPConfig] = None,
               display_width: Optional[float] = None) -> ViewportLayout:
        """
        Compute both eye viewports.

        Args:
            display_mode: SIMULATION (picture-in-picture) or VR (stereo)
            canvas_size: current render-target size in pixels (width, height)
            aspect_ratio_eye: width / height of the eye frustum
            base_config: PIP policy overriding the compositor's own
            display_width: physical display width, used when the policy
                scales the PIP with the display

        Raises:
            ViewportDegenerateError: empty canvas or non-positive aspect ratio,
                or (strict mode) a viewport that had to be clamped
        """
        canvas_w, canvas_h = _check_canvas(canvas_size)
        if not math.isfinite(aspect_ratio_eye) or aspect_ratio_eye <= 0:
            raise ViewportDegenerateError("eye aspect ratio must be positive", aspect_ratio_eye)

        display_mode = DisplayMode(display_mode)
        if display_mode is DisplayMode.VR:
            viewport_l = ViewportRect(0.0, 0.0, 0.5, 1.0)
            viewport_r = ViewportRect(0.5, 0.0, 0.5, 1.0)
        else:
            config = base_config or self.pip_config
            width, height = self._pip_size(config, canvas_w / canvas_h,
                                           aspect_ratio_eye, display_width)
            x, y = self._anchor_origin(config.anchor, width, height)
            viewport_l = ViewportRect(x, y, width, height)
            viewport_r = ViewportRect(x + width, y, width, height)

        layout = ViewportLayout(
            viewport_l=viewport_l,
            viewport_r=viewport_r,
            mode=display_mode,
            canvas_size=(int(canvas_w), int(canvas_h)),
            aspect_ratio_eye=aspect_ratio_eye,
        )
        logger.debug(
            f"Layout {display_mode.value} canvas={int(canvas_w)}x{int(canvas_h)} "
            f"L={viewport_l} R={viewport_r}"
        )
        return layout

    def _pip_size(self, config: PIPConfig, canvas_aspect: float, aspect_ratio_eye: float,
                  display_width: Optional[float]) -> Tuple[float, float]:
        width = config.base_width_fraction
        if config.scale_with_display and display_width:
            width *= display_width / config.base_display_width

        # Two viewports side by side must fit on screen
        max_width = min(config.max_width_fraction, 0.5)
        width = self._positive("width", min(width, max_width))
        height = self._positive("height", width * canvas_aspect / aspect_ratio_eye)

        if height > config.max_height_fraction:
            height = self._positive("height", config.max_height_fraction)
            width = self._positive("width", height * aspect_ratio_eye / canvas_aspect)

        return width, height

    def _positive(self, what: str, value: float) -> float:
        if math.isfinite(value) and value > 0:
            return value
        if self.strict:
            raise ViewportDegenerateError(f"PIP {what} is not positive", value)
        logger.warning(f"PIP {what} {value!r} clamped to {MIN_VIEWPORT_EXTENT}")
        return MIN_VIEWPORT_EXTENT

    @staticmethod
    def _anchor_origin(anchor: Anchor, width: float, height: float) -> Tuple[float, float]:
        right_x = 1.0 - 2.0 * width
        top_y = 1.0 - height
        if anchor is Anchor.TOP_RIGHT:
            return right_x, top_y
        if anchor is Anchor.TOP_LEFT:
            return 0.0, top_y
        if anchor is Anchor.BOTTOM_RIGHT:
            return right_x, 0.0
        return 0.0, 0.0

    @staticmethod
    def apply(layout: ViewportLayout, camera_l, camera_r):
        """Write each rectangle into its camera's own viewport slot"""
        camera_l.viewport = layout.viewport_l
        camera_r.viewport = layout.viewport_r
