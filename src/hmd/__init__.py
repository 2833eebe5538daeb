"""
HMD module - controller that keeps optics, eye poses, viewports and
renderer records in sync.
"""

from .state import OpticalState
from .controller import HMDController, DEFAULT_CANVAS_SIZE

__all__ = [
    'OpticalState',
    'HMDController',
    'DEFAULT_CANVAS_SIZE',
]
