"""
Utility functions module
"""

from .math_utils import *
from .logging import (
    setup_logging,
    get_logger,
    get_optics_logger,
    get_rig_logger,
    get_rendering_logger,
    get_viewport_logger,
    get_core_logger,
    timed,
    TimedBlock,
)

__all__ = [
    'setup_logging',
    'get_logger',
    'get_optics_logger',
    'get_rig_logger',
    'get_rendering_logger',
    'get_viewport_logger',
    'get_core_logger',
    'timed',
    'TimedBlock',
]
