"""Island falloff masking.

The mask scales a field down toward the map edges so generation is biased
toward a single landmass. Distance is measured from the map center in the
same centered sample space the field generator uses:

- Euclidean: ``2 * hypot(nx - 1, ny - 1)``
- Manhattan: ``2 * max(|nx - 1|, |ny - 1|)``

The multiplier is 1.0 up to ``FalloffConfig.distance`` and decays linearly
to 0.0 at distance 1.0.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Tuple
import math

import numpy as np

from ..errors import ConfigurationError, is_number


class FalloffMethod(Enum):
    """Distance metric for the falloff mask."""
    EUCLIDEAN = "euclidean"
    MANHATTAN = "manhattan"


@dataclass(frozen=True)
class FalloffConfig:
    """Configuration for the island falloff mask."""
    enabled: bool = True
    method: FalloffMethod = FalloffMethod.EUCLIDEAN
    # Distance at which falloff begins (0 = center, 1 = edge)
    distance: float = 0.5
    # Curve knobs, only read when shaped is True
    smoothness: float = 1.0
    intensity: float = 1.0
    amplification: float = 1.0
    shaped: bool = False

    def validate(self) -> None:
        """Validate the falloff configuration."""
        if not isinstance(self.method, FalloffMethod):
            raise ConfigurationError(f"Unknown falloff method: {self.method!r}")
        for name in ("distance", "smoothness", "intensity", "amplification"):
            if not is_number(getattr(self, name)):
                raise ConfigurationError(f"Falloff {name} must be a number: {getattr(self, name)!r}")
        if not (0.0 <= self.distance <= 1.0):
            raise ConfigurationError(f"Falloff distance must be in [0, 1]: {self.distance}")
        for name in ("smoothness", "intensity", "amplification"):
            value = getattr(self, name)
            if not math.isfinite(value):
                raise ConfigurationError(f"Falloff {name} must be finite: {value}")
        if self.smoothness < 0:
            raise ConfigurationError(f"Falloff smoothness must be >= 0: {self.smoothness}")


def sample_coordinates(x, y, size: int):
    """Map grid coordinates to centered sample space.

    Works on scalars and numpy arrays alike. The grid spans
    [0.5, 1.5) on each axis with the map center at 1.0.
    """
    return (x + size) / size - 0.5, (y + size) / size - 0.5


def center_distance(nx, ny, method: FalloffMethod):
    """Distance from the map center in sample space for the given metric."""
    if method == FalloffMethod.MANHATTAN:
        return 2 * np.maximum(np.abs(nx - 1), np.abs(ny - 1))
    return 2 * np.hypot(nx - 1, ny - 1)


def _linear_falloff(d, start: float):
    d = np.asarray(d, dtype=np.float64)
    if start >= 1.0:
        return np.where(d <= start, 1.0, 0.0)
    return np.clip((1.0 - d) / (1.0 - start), 0.0, 1.0)


def _shape(t, config: FalloffConfig):
    m = np.power(t, config.smoothness)
    m = 1.0 - config.intensity * (1.0 - m)
    return np.clip(m * config.amplification, 0.0, 1.0)


def falloff_curve(d, config: FalloffConfig):
    """Multiplier for center distance ``d`` (scalar or array)."""
    t = _linear_falloff(d, config.distance)
    if config.shaped:
        t = _shape(t, config)
    return t


def mask_at(x: int, y: int, config: FalloffConfig, size: int) -> float:
    """Get the falloff multiplier for a single cell."""
    nx, ny = sample_coordinates(x, y, size)
    return float(falloff_curve(center_distance(nx, ny, config.method), config))


def falloff_mask(size: int, config: FalloffConfig) -> np.ndarray:
    """Build the falloff mask for a whole map.

    Returns:
        Array of shape ``(size, size)`` indexed ``[y, x]``
    """
    nx, ny = grid_coordinates(size)
    return falloff_curve(center_distance(nx[np.newaxis, :], ny[:, np.newaxis], config.method), config)


def grid_coordinates(size: int) -> Tuple[np.ndarray, np.ndarray]:
    """Sample-space coordinates of every column and row of the grid."""
    cells = np.arange(size, dtype=np.float64)
    return sample_coordinates(cells, cells, size)
