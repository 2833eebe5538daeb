"""
Optics module - lens/display parameters to per-eye off-axis projections.
"""

from .config import OpticalConfig, ParameterId, ParameterRange
from .projection import DepthRange, off_axis_projection
from .solver import (
    Eye,
    DerivedOptics,
    EyeProjection,
    OpticalSolver,
    derive_optics,
    build_projection,
    solve,
)

__all__ = [
    'OpticalConfig',
    'ParameterId',
    'ParameterRange',
    'DepthRange',
    'off_axis_projection',
    'Eye',
    'DerivedOptics',
    'EyeProjection',
    'OpticalSolver',
    'derive_optics',
    'build_projection',
    'solve',
]
