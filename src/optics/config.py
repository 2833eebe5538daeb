"""
Optical Configuration

Physical lens/display parameters of the headset and the enumerated
parameter identifiers used by editing surfaces (sliders).

All lengths are in metres.
"""

import math
import numbers
from dataclasses import dataclass, fields, replace as dc_replace
from enum import Enum
from typing import Dict, Union

from ..core.exceptions import InvalidOpticalConfig, UnknownParameterError


@dataclass(frozen=True)
class ParameterRange:
    """Slider hint for an editable parameter"""
    minimum: float
    maximum: float
    step: float = 0.001

    def clamp(self, value: float) -> float:
        return max(self.minimum, min(self.maximum, value))

    def contains(self, value: float) -> bool:
        return self.minimum <= value <= self.maximum


class ParameterId(Enum):
    """
    Editable optical parameters.

    The value is the camelCase name used by the parameter-edit surface.
    """
    F = "f"
    IPD = "ipd"
    EYE_RELIEF = "eyeRelief"
    DIST_LENS2DISPLAY = "distLens2Display"
    DISPLAY_WIDTH = "displayWidth"
    DISPLAY_HEIGHT = "displayHeight"
    FAR_FROM_NEAR = "farFromNear"

    @property
    def field_name(self) -> str:
        """OpticalConfig attribute backing this parameter"""
        return _FIELD_NAMES[self]

    @property
    def range(self) -> ParameterRange:
        return _RANGES[self]

    @classmethod
    def parse(cls, name: Union['ParameterId', str]) -> 'ParameterId':
        """Resolve an enum member, camelCase value or snake_case field name"""
        if isinstance(name, cls):
            return name
        if isinstance(name, str):
            for member in cls:
                if name in (member.value, member.field_name, member.name):
                    return member
        raise UnknownParameterError(name, [m.value for m in cls])


_FIELD_NAMES = {
    ParameterId.F: "f",
    ParameterId.IPD: "ipd",
    ParameterId.EYE_RELIEF: "eye_relief",
    ParameterId.DIST_LENS2DISPLAY: "dist_lens2display",
    ParameterId.DISPLAY_WIDTH: "display_width",
    ParameterId.DISPLAY_HEIGHT: "display_height",
    ParameterId.FAR_FROM_NEAR: "far_from_near",
}

_RANGES = {
    ParameterId.F: ParameterRange(0.01, 0.2),
    ParameterId.IPD: ParameterRange(0.0001, 0.2),
    ParameterId.EYE_RELIEF: ParameterRange(0.0001, 1.0),
    ParameterId.DIST_LENS2DISPLAY: ParameterRange(0.01, 0.2),
    ParameterId.DISPLAY_WIDTH: ParameterRange(0.05, 0.5),
    ParameterId.DISPLAY_HEIGHT: ParameterRange(0.05, 0.5),
    ParameterId.FAR_FROM_NEAR: ParameterRange(0.1, 100.0, 0.1),
}


@dataclass(frozen=True)
class OpticalConfig:
    """
    Headset optics.

    Defaults describe a Cardboard-style clone viewer. Cardboard 2.0 itself
    uses f=0.040, ipd=0.064 and distLens2Display=0.039.

    f must exceed dist_lens2display so the lens forms an upright virtual
    image on the display side (magnifying-glass regime).
    """
    f: float = 0.043
    ipd: float = 0.065
    eye_relief: float = 0.018
    dist_lens2display: float = 0.042
    display_width: float = 0.12096
    display_height: float = 0.068
    far_from_near: float = 1.5

    def validate(self) -> 'OpticalConfig':
        """Raise InvalidOpticalConfig unless every invariant holds"""
        for param in ParameterId:
            value = getattr(self, param.field_name)
            if isinstance(value, bool) or not isinstance(value, numbers.Real):
                raise InvalidOpticalConfig(param.value, value, "must be a number")
            if not math.isfinite(value):
                raise InvalidOpticalConfig(param.value, value, "must be finite")
            if value <= 0:
                raise InvalidOpticalConfig(param.value, value, "must be strictly positive")

        if self.f == self.dist_lens2display:
            raise InvalidOpticalConfig(
                "f", self.f, "equals distLens2Display, magnification is undefined"
            )
        if self.f < self.dist_lens2display:
            raise InvalidOpticalConfig(
                "f", self.f,
                f"must exceed distLens2Display ({self.dist_lens2display}) "
                "for an upright virtual image"
            )
        return self

    def get(self, param: Union[ParameterId, str]) -> float:
        return getattr(self, ParameterId.parse(param).field_name)

    def replace(self, param: Union[ParameterId, str], value: float) -> 'OpticalConfig':
        """New config with one parameter changed (not validated)"""
        param = ParameterId.parse(param)
        if isinstance(value, numbers.Real) and not isinstance(value, bool):
            value = float(value)
        return dc_replace(self, **{param.field_name: value})

    def to_dict(self) -> Dict[str, float]:
        """camelCase mapping as shown on the parameter panel"""
        return {param.value: getattr(self, param.field_name) for param in ParameterId}

    @classmethod
    def from_dict(cls, data: Dict) -> 'OpticalConfig':
        """Build from camelCase or snake_case keys; missing keys use defaults"""
        known = {f.name for f in fields(cls)}
        kwargs = {}
        for key, value in (data or {}).items():
            param = ParameterId.parse(key)
            if param.field_name in known:
                kwargs[param.field_name] = float(value)
        return cls(**kwargs)
