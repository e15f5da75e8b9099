"""Tests for the map pipeline."""

import numpy as np
import pytest

from terramap.config import ConfigurationError, FalloffConfig, MapConfig
from terramap.generator import MapPipeline, MapProgress, generate_map
from terramap.render.colors import Color
from terramap.terrain.biome import Biome, INVALID_BIOME
from terramap.terrain.shading import is_shadowed

from conftest import ConstantNoise


@pytest.fixture
def small_config():
    return MapConfig(size=16, elevation_seed=7, moisture_seed="wet")


class TestGenerateMap:
    """Test field generation through the pipeline."""

    def test_empty_before_run(self, small_config):
        pipeline = MapPipeline(small_config)
        assert len(pipeline.elevation_map) == 0
        assert len(pipeline.moisture_map) == 0
        assert pipeline.generate_image() is None

    def test_field_lengths(self, small_config):
        pipeline = MapPipeline(small_config)
        generated = pipeline.generate_map()
        assert len(generated.elevation) == len(generated.moisture) == 16 * 16
        assert len(pipeline.elevation_map) == 16 * 16

    def test_fields_in_unit_interval(self, small_config):
        generated = MapPipeline(small_config).generate_map()
        for values in (generated.elevation, generated.moisture):
            assert values.min() >= 0.0
            assert values.max() <= 1.0

    def test_moisture_is_normalized(self, small_config):
        generated = MapPipeline(small_config).generate_map()
        assert generated.moisture.min() == 0.0
        assert generated.moisture.max() == pytest.approx(1.0)

    def test_always_mountains_reaches_peak(self):
        config = MapConfig(size=16, falloff=FalloffConfig(enabled=False), always_mountains=True)
        generated = MapPipeline(config).generate_map()
        assert generated.elevation.max() == pytest.approx(1.0)

    def test_falloff_masks_edges(self, small_config):
        generated = MapPipeline(small_config).generate_map()
        assert generated.cell(0, 0)[0] == 0.0
        assert generated.cell(0, 8)[0] == 0.0

    def test_independent_seeds(self):
        config = MapConfig(size=16, elevation_seed=3, moisture_seed=3, falloff=FalloffConfig(enabled=False))
        pipeline = MapPipeline(config)
        generated = pipeline.generate_map()
        # Same seed, but elevation is curved and uses its own octaves
        assert not np.allclose(generated.elevation, generated.moisture)

    def test_constant_noise(self):
        config = MapConfig(size=4, falloff=FalloffConfig(enabled=False), always_mountains=False, height_curve=1.0)
        pipeline = MapPipeline(config, noise_factory=lambda seed: ConstantNoise(seed, 0.0))
        generated = pipeline.generate_map()
        assert np.all(generated.elevation == 0.5)

    def test_cell_accessor(self, small_config):
        generated = MapPipeline(small_config).generate_map()
        assert generated.cell(3, 2) == (generated.elevation[2 * 16 + 3], generated.moisture[2 * 16 + 3])
        with pytest.raises(IndexError):
            generated.cell(16, 0)

    def test_progress_reported(self, small_config):
        events = []
        MapPipeline(small_config).run(events.append)
        phases = [e.phase for e in events]
        assert phases[0] == "elevation"
        assert "moisture" in phases
        assert phases[-1] == "classify"
        assert events[-1].percent == 100.0

    def test_progress_percent_empty(self):
        assert MapProgress("x", 0, 0).percent == 0.0


class TestGenerateImage:
    """Test classification and shading into RGBA."""

    def test_buffer_length(self, small_config):
        pipeline = MapPipeline(small_config)
        buffer = pipeline.run()
        assert len(buffer) == 4 * 16 * 16

    def test_cells_are_base_or_shaded(self, small_config):
        pipeline = MapPipeline(small_config)
        generated = pipeline.generate_map()
        buffer = pipeline.generate_image()
        for i in range(16 * 16):
            biome = pipeline.biomes.classify(generated.elevation[i], generated.moisture[i])
            base = biome.color.to_rgba_bytes()
            dark = biome.color.darker(small_config.shadow_intensity).to_rgba_bytes()
            rgba = tuple(buffer[4 * i:4 * i + 4])
            if biome.shadows and is_shadowed(i, generated.elevation, 16):
                assert rgba == dark
            else:
                assert rgba == base

    def test_matches_single_cell_shading(self, small_config):
        pipeline = MapPipeline(small_config)
        generated = pipeline.generate_map()
        buffer = pipeline.generate_image()
        for i in range(0, 256, 7):
            color = pipeline.shade_cell(i, generated.elevation, generated.moisture)
            assert tuple(buffer[4 * i:4 * i + 4]) == color.to_rgba_bytes()

    def test_shadows_off(self, small_config):
        config = small_config.with_overrides(show_shadows=False)
        pipeline = MapPipeline(config)
        generated = pipeline.generate_map()
        buffer = pipeline.generate_image()
        for i in range(256):
            biome = pipeline.biomes.classify(generated.elevation[i], generated.moisture[i])
            assert tuple(buffer[4 * i:4 * i + 4]) == biome.color.to_rgba_bytes()

    def test_deterministic(self, small_config):
        a = MapPipeline(small_config)
        b = MapPipeline(small_config)
        ga, gb = a.generate_map(), b.generate_map()
        assert np.array_equal(ga.elevation, gb.elevation)
        assert np.array_equal(ga.moisture, gb.moisture)
        assert a.generate_image() == b.generate_image()

    def test_explicit_fields(self):
        config = MapConfig(
            size=2,
            show_shadows=False,
            biomes=(
                Biome("Low", 0.5, 1.0, True, Color(0, 0, 0)),
                Biome("High", 1.0, 1.0, True, Color(255, 255, 255)),
            ),
        )
        pipeline = MapPipeline(config)
        buffer = pipeline.generate_image(np.array([0.1, 0.9, 0.5, 1.0]), np.array([0.5, 0.5, 0.5, 0.5]))
        assert buffer == bytes([0, 0, 0, 255, 255, 255, 255, 255, 0, 0, 0, 255, 255, 255, 255, 255])

    def test_mismatched_fields(self, small_config):
        with pytest.raises(ValueError):
            MapPipeline(small_config).generate_image(np.zeros(4), np.zeros(9))

    def test_elevation_view(self):
        config = MapConfig(size=8, show_elevation=True)
        pipeline = MapPipeline(config, elevation_colors=lambda t: Color(t * 255, 0, 0))
        generated = pipeline.generate_map()
        buffer = pipeline.generate_image()
        for i in range(64):
            expected = Color(generated.elevation[i] * 255, 0, 0).to_rgba_bytes()
            assert tuple(buffer[4 * i:4 * i + 4]) == expected

    def test_moisture_view_uses_default_scale(self):
        pipeline = MapPipeline(MapConfig(size=8, show_moisture=True))
        assert len(pipeline.run()) == 4 * 64

    @pytest.mark.parametrize("flag", ["show_elevation", "show_moisture"])
    def test_debug_view_matches_cell_scale(self, flag):
        pipeline = MapPipeline(MapConfig(size=8, **{flag: True}))
        generated = pipeline.generate_map()
        buffer = pipeline.generate_image()
        for i in range(64):
            color = pipeline.shade_cell(i, generated.elevation, generated.moisture)
            assert tuple(buffer[4 * i:4 * i + 4]) == color.to_rgba_bytes()

    def test_out_of_range_fields_shade_like_image(self):
        pipeline = MapPipeline(MapConfig(size=2))
        elevation = np.array([1.4, 1.2, 0.5, 0.5])
        moisture = np.array([0.5, 0.5, -0.2, 0.5])
        buffer = pipeline.generate_image(elevation, moisture)
        for i in range(4):
            color = pipeline.shade_cell(i, elevation, moisture)
            assert tuple(buffer[4 * i:4 * i + 4]) == color.to_rgba_bytes()

    def test_generate_map_helper(self):
        generated, buffer = generate_map(MapConfig(size=8))
        assert generated.size == 8
        assert len(buffer) == 256


class TestPipelineErrors:
    """Test configuration problems surfacing at construction."""

    def test_invalid_config_raises_early(self):
        with pytest.raises(ConfigurationError):
            MapPipeline(MapConfig(elevation_octaves=(1.0, -1.0)))

    @pytest.mark.parametrize("changes", [
        {"elevation_seed": True},
        {"moisture_seed": None},
        {"moisture_seed": [1, 2]},
    ])
    def test_bad_seed_raises_at_construction(self, changes):
        with pytest.raises(ConfigurationError, match="seed"):
            MapPipeline(MapConfig(size=4, **changes))

    def test_strict_biome_table(self):
        config = MapConfig(biomes=(Biome("Low", 0.5, 1.0, True, Color(0, 0, 0)),))
        with pytest.raises(ConfigurationError):
            MapPipeline(config, strict=True)

    def test_degraded_mode_uses_sentinel(self):
        config = MapConfig(
            size=2,
            show_shadows=False,
            biomes=(Biome("Low", 0.5, 1.0, True, Color(0, 0, 0)),),
        )
        pipeline = MapPipeline(config)
        assert pipeline.issues
        buffer = pipeline.generate_image(np.array([0.1, 0.9, 0.2, 0.3]), np.zeros(4))
        assert tuple(buffer[4:8]) == INVALID_BIOME.color.to_rgba_bytes()
        assert tuple(buffer[0:4]) == (0, 0, 0, 255)

    def test_failed_run_leaves_no_state(self, small_config):
        pipeline = MapPipeline(small_config)
        with pytest.raises(ValueError):
            pipeline.generate_image(np.zeros(4), np.zeros(9))
        assert pipeline.generate_image() is None
        assert len(pipeline.run()) == 4 * 256
