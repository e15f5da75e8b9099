"""Tests for the island falloff mask."""

import numpy as np
import pytest

from terramap.errors import ConfigurationError
from terramap.terrain.falloff import (
    FalloffConfig,
    FalloffMethod,
    center_distance,
    falloff_curve,
    falloff_mask,
    mask_at,
    sample_coordinates,
)

METHODS = [FalloffMethod.EUCLIDEAN, FalloffMethod.MANHATTAN]


class TestCoordinates:
    """Test the centered sample space."""

    def test_origin_cell(self):
        assert sample_coordinates(0, 0, 8) == (0.5, 0.5)

    def test_center_cell(self):
        assert sample_coordinates(4, 4, 8) == (1.0, 1.0)

    def test_distance_constants(self):
        assert center_distance(0.5, 1.0, FalloffMethod.EUCLIDEAN) == pytest.approx(1.0)
        assert center_distance(0.5, 0.5, FalloffMethod.EUCLIDEAN) == pytest.approx(2 ** 0.5)
        assert center_distance(0.5, 0.75, FalloffMethod.MANHATTAN) == pytest.approx(1.0)


class TestFalloffMask:
    """Test mask values and shape."""

    @pytest.mark.parametrize("method", METHODS)
    def test_center_is_unmasked(self, method):
        assert mask_at(8, 8, FalloffConfig(method=method), 16) == 1.0

    @pytest.mark.parametrize("method", METHODS)
    def test_edge_is_fully_masked(self, method):
        config = FalloffConfig(method=method)
        assert mask_at(0, 8, config, 16) == 0.0
        assert mask_at(0, 0, config, 16) == 0.0

    def test_linear_decay(self):
        config = FalloffConfig(distance=0.5)
        assert falloff_curve(0.75, config) == pytest.approx(0.5)
        assert falloff_curve(0.5, config) == pytest.approx(1.0)
        assert falloff_curve(1.2, config) == 0.0

    def test_distance_one_is_a_step(self):
        config = FalloffConfig(distance=1.0)
        assert falloff_curve(0.99, config) == 1.0
        assert falloff_curve(1.0, config) == 1.0
        assert falloff_curve(1.01, config) == 0.0

    @pytest.mark.parametrize("method", METHODS)
    def test_mask_matches_single_cells(self, method):
        config = FalloffConfig(method=method, distance=0.3)
        mask = falloff_mask(12, config)
        assert mask.shape == (12, 12)
        for y in range(12):
            for x in range(12):
                assert mask[y, x] == pytest.approx(mask_at(x, y, config, 12))

    @pytest.mark.parametrize("method", METHODS)
    def test_mask_is_symmetric(self, method):
        size = 16
        mask = falloff_mask(size, FalloffConfig(method=method, distance=0.2))
        assert np.allclose(mask, mask.T)
        half = size // 2
        for k in range(1, half):
            assert np.allclose(mask[:, half + k], mask[:, half - k])
            assert np.allclose(mask[half + k, :], mask[half - k, :])

    @pytest.mark.parametrize("method", METHODS)
    def test_monotonic_along_rays(self, method):
        size = 32
        config = FalloffConfig(method=method, distance=0.25)
        mask = falloff_mask(size, config)
        center = size // 2
        for dx, dy in [(1, 0), (0, 1), (1, 1), (-1, -1), (-1, 0)]:
            values = []
            x, y = center, center
            while 0 <= x < size and 0 <= y < size:
                values.append(mask[y, x])
                x += dx
                y += dy
            assert all(a >= b for a, b in zip(values, values[1:]))
        assert mask[0, 0] == 0.0

    def test_values_in_unit_interval(self):
        mask = falloff_mask(20, FalloffConfig(distance=0.0))
        assert mask.min() >= 0.0
        assert mask.max() <= 1.0


class TestShapedFalloff:
    """Test the opt-in shaped curve."""

    def test_knobs_ignored_unless_shaped(self):
        plain = falloff_mask(16, FalloffConfig())
        knobs = falloff_mask(16, FalloffConfig(smoothness=3.0, intensity=0.5, amplification=2.0))
        assert np.array_equal(plain, knobs)

    def test_default_shape_matches_linear(self):
        plain = falloff_mask(16, FalloffConfig())
        shaped = falloff_mask(16, FalloffConfig(shaped=True))
        assert np.allclose(plain, shaped)

    def test_shape_changes_output(self):
        plain = falloff_mask(16, FalloffConfig())
        shaped = falloff_mask(16, FalloffConfig(shaped=True, smoothness=2.0))
        assert not np.allclose(plain, shaped)
        assert np.all(shaped <= plain + 1e-12)

    def test_intensity_softens_edges(self):
        shaped = falloff_curve(2.0, FalloffConfig(shaped=True, intensity=0.5))
        assert shaped == pytest.approx(0.5)


class TestFalloffValidation:
    """Test configuration errors."""

    @pytest.mark.parametrize("distance", [-0.1, 1.5])
    def test_distance_out_of_range(self, distance):
        with pytest.raises(ConfigurationError):
            FalloffConfig(distance=distance).validate()

    def test_negative_smoothness(self):
        with pytest.raises(ConfigurationError):
            FalloffConfig(smoothness=-1.0).validate()

    def test_non_finite_knob(self):
        with pytest.raises(ConfigurationError):
            FalloffConfig(amplification=float("inf")).validate()
