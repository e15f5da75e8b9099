"""TerraMap: seeded procedural island maps with biome classification."""

__version__ = "0.1.0"

from .config import (
    ConfigurationError,
    DisplayMode,
    FalloffConfig,
    FalloffMethod,
    MapConfig,
    get_preset,
    list_presets,
)
from .generator import GeneratedMap, MapPipeline, MapProgress, generate_map

__all__ = [
    "__version__",
    "ConfigurationError",
    "DisplayMode",
    "FalloffConfig",
    "FalloffMethod",
    "MapConfig",
    "get_preset",
    "list_presets",
    "GeneratedMap",
    "MapPipeline",
    "MapProgress",
    "generate_map",
]
