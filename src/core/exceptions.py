"""
Custom Exception Classes for the HMD Optics Simulator.

Provides hierarchical exception types for better error handling and debugging.
"""


class HMDSimError(Exception):
    """Base exception for all simulator errors."""
    pass


class ConfigurationError(HMDSimError):
    """Errors related to optical configuration and presets."""
    pass


class InvalidOpticalConfig(ConfigurationError):
    """
    Raised when an optical configuration cannot produce a valid frustum.

    Covers non-positive fields, f == distLens2Display (undefined
    magnification), the inverted real-image regime and degenerate frustums.
    """

    def __init__(self, field: str, value=None, reason: str = None):
        self.field = field
        self.value = value
        self.reason = reason
        msg = f"Invalid optical parameter '{field}'"
        if value is not None:
            msg += f" = {value!r}"
        if reason:
            msg += f": {reason}"
        super().__init__(msg)


class UnknownParameterError(ConfigurationError):
    """Raised when a parameter name does not map to an editable parameter."""

    def __init__(self, name, available: list = None):
        self.name = name
        msg = f"Unknown optical parameter '{name}'"
        if available:
            msg += f" (available: {', '.join(available)})"
        super().__init__(msg)


class PresetLoadError(ConfigurationError):
    """Raised when an HMD preset YAML file cannot be loaded."""

    def __init__(self, preset_name: str, message: str = None):
        self.preset_name = preset_name
        msg = f"Failed to load preset '{preset_name}'"
        if message:
            msg += f": {message}"
        super().__init__(msg)


class GeometryError(HMDSimError):
    """Errors in frustum and viewport geometry."""
    pass


class SingularMatrixError(GeometryError):
    """Raised when a projection or view matrix cannot be inverted."""

    def __init__(self, which: str, reason: str = None):
        self.which = which
        msg = f"{which} matrix is singular"
        if reason:
            msg += f": {reason}"
        super().__init__(msg)


class ViewportDegenerateError(GeometryError):
    """Raised when a viewport would have zero or negative area."""

    def __init__(self, what: str, value=None):
        self.what = what
        self.value = value
        msg = f"Degenerate viewport: {what}"
        if value is not None:
            msg += f" ({value!r})"
        super().__init__(msg)
