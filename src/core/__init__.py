"""
Core module - exceptions, observers and scripted motion shared by all
components.
"""

from .exceptions import (
    HMDSimError,
    ConfigurationError,
    InvalidOpticalConfig,
    UnknownParameterError,
    PresetLoadError,
    GeometryError,
    SingularMatrixError,
    ViewportDegenerateError,
)
from .observable import Observable
from .animation import AnimationConfig, AnimationDriver

__all__ = [
    # Exceptions
    'HMDSimError',
    'ConfigurationError',
    'InvalidOpticalConfig',
    'UnknownParameterError',
    'PresetLoadError',
    'GeometryError',
    'SingularMatrixError',
    'ViewportDegenerateError',
    'Observable',
    'AnimationConfig',
    'AnimationDriver',
]
