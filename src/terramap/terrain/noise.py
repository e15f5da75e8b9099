"""Seeded coherent noise sampling.

Wraps a 2D coherent-noise primitive returning values in [-1, 1] and remaps
its output to [0, 1]. The default primitive is OpenSimplex; any
``NoiseSource`` subclass can be substituted (tests use constant sources).
"""

from abc import ABC, abstractmethod
from typing import Callable, Optional, Union
import hashlib

import numpy as np
from opensimplex import OpenSimplex

Seed = Union[int, float, str]

_SEED_MASK = (1 << 63) - 1


def seed_to_int(seed: Seed) -> int:
    """Reduce a numeric or string seed to a non-negative 63-bit integer.

    Strings are hashed with SHA-256 so the result is stable across
    processes, unlike the builtin ``hash()``.
    """
    if isinstance(seed, bool):
        raise TypeError("Seed must be an int or a string, not bool")
    if isinstance(seed, int):
        return seed & _SEED_MASK
    if isinstance(seed, float):
        if seed.is_integer():
            return int(seed) & _SEED_MASK
        seed = repr(seed)
    if isinstance(seed, str):
        digest = hashlib.sha256(seed.encode("utf-8")).digest()
        return int.from_bytes(digest[:8], "big") & _SEED_MASK
    raise TypeError(f"Unsupported seed type: {type(seed).__name__}")


class NoiseSource(ABC):
    """A deterministic 2D coherent-noise function with values in [-1, 1]."""

    @abstractmethod
    def noise2(self, x: float, y: float) -> float:
        """Sample the noise at a single point."""
        pass

    def noise2array(self, xs: np.ndarray, ys: np.ndarray) -> np.ndarray:
        """Sample the noise over the grid spanned by ``xs`` and ``ys``.

        Returns:
            Array of shape ``(len(ys), len(xs))`` indexed ``[y, x]``
        """
        out = np.empty((len(ys), len(xs)), dtype=np.float64)
        for row, y in enumerate(ys):
            for col, x in enumerate(xs):
                out[row, col] = self.noise2(float(x), float(y))
        return out


class OpenSimplexSource(NoiseSource):
    """OpenSimplex noise seeded from an int or string seed."""

    def __init__(self, seed: Seed):
        self.seed = seed
        self._simplex = OpenSimplex(seed=seed_to_int(seed))

    def noise2(self, x: float, y: float) -> float:
        return float(self._simplex.noise2(x, y))

    def noise2array(self, xs: np.ndarray, ys: np.ndarray) -> np.ndarray:
        return np.asarray(
            self._simplex.noise2array(np.asarray(xs, dtype=np.float64), np.asarray(ys, dtype=np.float64)),
            dtype=np.float64,
        )


NoiseFactory = Callable[[Seed], NoiseSource]


class NoiseSampler:
    """Samples a seeded noise source, normalized to [0, 1].

    One sampler holds exactly one seeded noise instance; a new seed needs a
    new sampler.
    """

    def __init__(self, seed: Seed, factory: Optional[NoiseFactory] = None):
        """Initialize the sampler.

        Args:
            seed: Numeric or string seed
            factory: Builds the noise source for a seed (OpenSimplex by default)
        """
        self.seed = seed
        self.source = (factory or OpenSimplexSource)(seed)

    def sample(self, x: float, y: float) -> float:
        """Get the noise value at (x, y) remapped to [0, 1]."""
        return self.source.noise2(x, y) / 2 + 0.5

    def sample_grid(self, xs: np.ndarray, ys: np.ndarray) -> np.ndarray:
        """Get remapped noise values over a grid, indexed ``[y, x]``."""
        return self.source.noise2array(xs, ys) / 2 + 0.5
