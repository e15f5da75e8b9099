"""Terrain generation: noise fields, falloff, biomes and shading."""

from .noise import (
    NoiseSource,
    OpenSimplexSource,
    NoiseSampler,
    NoiseFactory,
    Seed,
    seed_to_int,
)
from .falloff import (
    FalloffConfig,
    FalloffMethod,
    falloff_mask,
    mask_at,
    sample_coordinates,
)
from .field import (
    FieldConfig,
    FieldGenerator,
    generate_field,
    normalize_field,
)
from .biome import (
    Biome,
    BiomeTable,
    DisplayMode,
    DEFAULT_BIOMES,
    INVALID_BIOME,
    load_biomes,
)
from .shading import shade, neighbor_index, is_shadowed

__all__ = [
    # Noise
    "NoiseSource",
    "OpenSimplexSource",
    "NoiseSampler",
    "NoiseFactory",
    "Seed",
    "seed_to_int",
    # Falloff
    "FalloffConfig",
    "FalloffMethod",
    "falloff_mask",
    "mask_at",
    "sample_coordinates",
    # Fields
    "FieldConfig",
    "FieldGenerator",
    "generate_field",
    "normalize_field",
    # Biomes
    "Biome",
    "BiomeTable",
    "DisplayMode",
    "DEFAULT_BIOMES",
    "INVALID_BIOME",
    "load_biomes",
    # Shading
    "shade",
    "neighbor_index",
    "is_shadowed",
]
