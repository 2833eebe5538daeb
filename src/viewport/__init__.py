"""
Viewport module - eye frustums to screen rectangles.
"""

from .compositor import (
    DisplayMode,
    Anchor,
    PIPConfig,
    PixelRect,
    ViewportRect,
    ViewportLayout,
    ViewportCompositor,
    MIN_VIEWPORT_EXTENT,
    BASE_PIP_WIDTH_FRACTION,
    MAX_PIP_WIDTH_FRACTION,
    MAX_PIP_HEIGHT_FRACTION,
    BASE_DISPLAY_WIDTH,
)

__all__ = [
    'DisplayMode',
    'Anchor',
    'PIPConfig',
    'PixelRect',
    'ViewportRect',
    'ViewportLayout',
    'ViewportCompositor',
    'MIN_VIEWPORT_EXTENT',
    'BASE_PIP_WIDTH_FRACTION',
    'MAX_PIP_WIDTH_FRACTION',
    'MAX_PIP_HEIGHT_FRACTION',
    'BASE_DISPLAY_WIDTH',
]
