"""Shared fixtures and stub noise sources."""

import math

import numpy as np
import pytest

from terramap.terrain.noise import NoiseSource


class ConstantNoise(NoiseSource):
    """Returns the same raw value everywhere."""

    def __init__(self, seed=0, value: float = 0.0):
        self.seed = seed
        self.value = value

    def noise2(self, x: float, y: float) -> float:
        return self.value


class GradientNoise(NoiseSource):
    """Raw value grows with x only, staying inside [-1, 1]."""

    def __init__(self, seed=0):
        self.seed = seed

    def noise2(self, x: float, y: float) -> float:
        return math.tanh(x - 1.0)


class RadialNoise(NoiseSource):
    """Raw value depends only on the distance from the sample-space center."""

    def __init__(self, seed=0):
        self.seed = seed

    def noise2(self, x: float, y: float) -> float:
        return math.cos(math.hypot(x - 1.0, y - 1.0))


@pytest.fixture
def constant_factory():
    return lambda seed: ConstantNoise(seed, 0.0)


@pytest.fixture
def gradient_factory():
    return GradientNoise


@pytest.fixture
def rng():
    return np.random.default_rng(1234)
