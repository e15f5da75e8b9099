"""Scalar field generation from multi-octave noise.

A field is a flat ``float64`` array of ``size * size`` samples in [0, 1].
Cell ``(x, y)`` is stored at index ``y * size + x``; internally the field is
built as a ``(size, size)`` array indexed ``[y, x]`` and flattened in C order.
"""

from dataclasses import dataclass, field
from typing import Optional, Sequence, Tuple
import math

import numpy as np
import structlog

from ..errors import ConfigurationError, is_number
from .falloff import FalloffConfig, falloff_mask, grid_coordinates
from .noise import NoiseFactory, NoiseSampler, Seed

logger = structlog.get_logger()


@dataclass(frozen=True)
class FieldConfig:
    """Inputs for generating one scalar field."""
    seed: Seed
    octaves: Tuple[float, ...]
    size: int
    zoom: float = 1.0
    use_height_curve: bool = False
    height_curve: float = 1.0
    use_distance: bool = False
    falloff: FalloffConfig = field(default_factory=FalloffConfig)
    normalize: bool = False

    def validate(self) -> None:
        """Validate the field configuration."""
        check_octaves(self.octaves)
        if not is_number(self.size) or self.size <= 0:
            raise ConfigurationError(f"Map size must be positive: {self.size!r}")
        if not is_number(self.zoom) or not math.isfinite(self.zoom) or self.zoom <= 0:
            raise ConfigurationError(f"Zoom must be a positive number: {self.zoom}")
        if not is_number(self.height_curve) or not math.isfinite(self.height_curve) or self.height_curve < 0:
            raise ConfigurationError(f"Height curve must be >= 0: {self.height_curve!r}")
        if self.use_distance:
            self.falloff.validate()


def check_octaves(octaves: Sequence[float], name: str = "octaves") -> None:
    """Reject octave weights that would produce an undefined field."""
    if len(octaves) == 0:
        raise ConfigurationError(f"{name} must contain at least one weight")
    if not all(is_number(w) and math.isfinite(w) for w in octaves):
        raise ConfigurationError(f"{name} must be finite numbers: {list(octaves)}")
    if math.fsum(octaves) == 0:
        raise ConfigurationError(f"{name} weights sum to zero: {list(octaves)}")


def normalize_field(values: np.ndarray) -> np.ndarray:
    """Linearly rescale so the minimum maps to 0 and the maximum to 1.

    A flat field is returned unchanged.
    """
    low = values.min()
    high = values.max()
    if high == low:
        return values
    return (values - low) / (high - low)


class FieldGenerator:
    """Generates scalar fields by blending octaves of seeded noise."""

    def __init__(self, noise_factory: Optional[NoiseFactory] = None):
        """Initialize the generator.

        Args:
            noise_factory: Builds a noise source per seed (OpenSimplex by default)
        """
        self.noise_factory = noise_factory

    def generate(self, config: FieldConfig) -> np.ndarray:
        """Generate a field.

        Octave ``k`` is sampled at frequency ``zoom * 2**k`` and weighted by
        ``octaves[k]``; the blend is divided by the sum of weights. The
        optional height curve, normalization, clamp and falloff mask are
        applied in that order.

        Args:
            config: Field configuration

        Returns:
            Read-only flat array of ``size * size`` samples in [0, 1]
        """
        config.validate()
        size = config.size
        sampler = NoiseSampler(config.seed, self.noise_factory)
        nx, ny = grid_coordinates(size)

        total = np.zeros((size, size), dtype=np.float64)
        for k, weight in enumerate(config.octaves):
            frequency = config.zoom * 2 ** k
            total += weight * sampler.sample_grid(frequency * nx, frequency * ny)
        values = total / math.fsum(config.octaves)

        if config.use_height_curve:
            # Negative blends only occur with negative weights; keep them real
            values = np.power(np.clip(values, 0.0, None), config.height_curve)

        if config.normalize:
            values = normalize_field(values)

        values = np.clip(values, 0.0, 1.0)

        if config.use_distance:
            values = values * falloff_mask(size, config.falloff)

        logger.debug(
            "Generated field",
            seed=config.seed,
            size=size,
            octaves=len(config.octaves),
            min=float(values.min()),
            max=float(values.max()),
        )

        flat = np.ascontiguousarray(values, dtype=np.float64).reshape(-1)
        flat.flags.writeable = False
        return flat


def generate_field(config: FieldConfig, noise_factory: Optional[NoiseFactory] = None) -> np.ndarray:
    """Generate a single field with a one-off generator."""
    return FieldGenerator(noise_factory).generate(config)
