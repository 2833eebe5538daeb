"""
Scripted headset motion

Oscillates the headset sideways so the eye frustums visibly sweep through
the scene:

    x(t) = sin(t * frequency) * amplitude
"""

import math
import numpy as np
from dataclasses import dataclass


@dataclass
class AnimationConfig:
    frequency: float = 0.1   # rad/s
    amplitude: float = 0.5   # metres
    axis: int = 0            # world axis that oscillates

    @classmethod
    def from_dict(cls, data: dict) -> 'AnimationConfig':
        data = data or {}
        return cls(
            frequency=float(data.get('frequency', 0.1)),
            amplitude=float(data.get('amplitude', 0.5)),
            axis=int(data.get('axis', 0)),
        )


class AnimationDriver:
    """Advances elapsed time and produces the next headset position."""

    def __init__(self, config: AnimationConfig = None):
        self.config = config or AnimationConfig()
        if self.config.axis not in (0, 1, 2):
            raise ValueError(f"Animation axis must be 0, 1 or 2, got {self.config.axis}")
        self.elapsed = 0.0

    def reset(self):
        self.elapsed = 0.0

    def step(self, dt: float, position: np.ndarray) -> np.ndarray:
        """
        Advance by dt seconds.

        Args:
            dt: frame time in seconds (>= 0)
            position: current headset position; only the animated axis changes
        """
        if not math.isfinite(dt) or dt < 0:
            raise ValueError(f"Frame time must be a non-negative number, got {dt!r}")
        self.elapsed += dt
        new_pos = np.array(position, dtype=np.float64)
        new_pos[self.config.axis] = math.sin(self.elapsed * self.config.frequency) * self.config.amplitude
        return new_pos
