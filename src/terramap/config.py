"""Configuration classes for TerraMap generation."""

from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Optional, Dict, Any, Tuple
import json
import math

from .errors import ConfigurationError, is_number
from .terrain.biome import Biome, BiomeTable, DisplayMode, DEFAULT_BIOMES, biomes_to_list
from .terrain.falloff import FalloffConfig, FalloffMethod
from .terrain.field import check_octaves
from .terrain.noise import Seed, seed_to_int

__all__ = [
    "ConfigurationError",
    "DisplayMode",
    "FalloffConfig",
    "FalloffMethod",
    "MapConfig",
    "get_preset",
    "list_presets",
]


@dataclass(frozen=True)
class MapConfig:
    """Configuration for one map generation run."""
    # Grid side length (size * size cells)
    size: int = 64

    # Noise frequency multiplier
    zoom: float = 1.0

    # Seeds
    elevation_seed: Seed = 0
    moisture_seed: Seed = 1

    # Per-octave weights; octave k samples at zoom * 2**k
    elevation_octaves: Tuple[float, ...] = (1.0, 0.5, 0.25)
    moisture_octaves: Tuple[float, ...] = (1.0, 0.75, 0.33, 0.33, 0.33, 0.5)

    # Exponent applied to elevation only
    height_curve: float = 3.0

    # Island falloff
    falloff: FalloffConfig = field(default_factory=FalloffConfig)

    # Shading
    show_shadows: bool = True
    shadow_intensity: float = 0.15

    # Display
    show_elevation: bool = False
    show_moisture: bool = False

    # Stretch elevation to [0, 1] so the highest biome always appears
    always_mountains: bool = True

    biomes: Tuple[Biome, ...] = DEFAULT_BIOMES

    def __post_init__(self):
        # Accept lists from callers while keeping the instance immutable
        object.__setattr__(self, "elevation_octaves", tuple(self.elevation_octaves))
        object.__setattr__(self, "moisture_octaves", tuple(self.moisture_octaves))
        object.__setattr__(self, "biomes", tuple(self.biomes))

    @property
    def display_mode(self) -> DisplayMode:
        """Display mode selected by the show_* flags."""
        return DisplayMode.from_flags(self.show_elevation, self.show_moisture)

    @property
    def cell_count(self) -> int:
        return self.size * self.size

    def biome_table(self) -> BiomeTable:
        """Build a biome table from this configuration."""
        return BiomeTable(self.biomes)

    def validate(self) -> None:
        """Validate the configuration."""
        if isinstance(self.size, bool) or not isinstance(self.size, int) or self.size <= 0:
            raise ConfigurationError(f"Map size must be a positive integer: {self.size!r}")
        if not is_number(self.zoom) or not math.isfinite(self.zoom) or self.zoom <= 0:
            raise ConfigurationError(f"Zoom must be a positive number: {self.zoom!r}")
        for name in ("elevation_seed", "moisture_seed"):
            try:
                seed_to_int(getattr(self, name))
            except TypeError as e:
                raise ConfigurationError(f"Invalid {name}: {e}") from e
        check_octaves(self.elevation_octaves, "elevation_octaves")
        check_octaves(self.moisture_octaves, "moisture_octaves")
        if not is_number(self.height_curve) or not math.isfinite(self.height_curve) or self.height_curve < 0:
            raise ConfigurationError(f"Height curve must be >= 0: {self.height_curve!r}")
        if not is_number(self.shadow_intensity) or not (0.0 <= self.shadow_intensity <= 1.0):
            raise ConfigurationError(f"Shadow intensity must be in [0, 1]: {self.shadow_intensity!r}")
        if not isinstance(self.falloff, FalloffConfig):
            raise ConfigurationError(f"Invalid falloff configuration: {self.falloff!r}")
        self.falloff.validate()
        if not self.biomes:
            raise ConfigurationError("Biome table is empty")

    def with_overrides(self, **changes: Any) -> "MapConfig":
        """Copy the configuration with some fields replaced."""
        return replace(self, **changes)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "size": self.size,
            "zoom": self.zoom,
            "elevation_seed": self.elevation_seed,
            "moisture_seed": self.moisture_seed,
            "elevation_octaves": list(self.elevation_octaves),
            "moisture_octaves": list(self.moisture_octaves),
            "height_curve": self.height_curve,
            "falloff": {
                "enabled": self.falloff.enabled,
                "method": self.falloff.method.value,
                "distance": self.falloff.distance,
                "smoothness": self.falloff.smoothness,
                "intensity": self.falloff.intensity,
                "amplification": self.falloff.amplification,
                "shaped": self.falloff.shaped,
            },
            "show_shadows": self.show_shadows,
            "shadow_intensity": self.shadow_intensity,
            "show_elevation": self.show_elevation,
            "show_moisture": self.show_moisture,
            "always_mountains": self.always_mountains,
            "biomes": biomes_to_list(self.biomes),
        }

    def save(self, filepath: Path) -> None:
        """Save configuration to JSON file."""
        with open(filepath, "w") as f:
            json.dump(self.to_dict(), f, indent=2)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MapConfig":
        """Build a configuration, using defaults for missing keys.

        Raises:
            ConfigurationError: If a value has the wrong shape
        """
        if not isinstance(data, dict):
            raise ConfigurationError(f"Configuration must be a JSON object, not {type(data).__name__}")
        defaults = cls()
        falloff_data = data.get("falloff", {})
        if not isinstance(falloff_data, dict):
            raise ConfigurationError(f"falloff must be a JSON object, not {type(falloff_data).__name__}")
        base_falloff = defaults.falloff
        try:
            falloff = FalloffConfig(
                enabled=falloff_data.get("enabled", base_falloff.enabled),
                method=FalloffMethod(falloff_data.get("method", base_falloff.method.value)),
                distance=falloff_data.get("distance", base_falloff.distance),
                smoothness=falloff_data.get("smoothness", base_falloff.smoothness),
                intensity=falloff_data.get("intensity", base_falloff.intensity),
                amplification=falloff_data.get("amplification", base_falloff.amplification),
                shaped=falloff_data.get("shaped", base_falloff.shaped),
            )
            biomes = (
                tuple(Biome.from_dict(b) for b in data["biomes"])
                if "biomes" in data else defaults.biomes
            )
            config = cls(
                size=data.get("size", defaults.size),
                zoom=data.get("zoom", defaults.zoom),
                elevation_seed=data.get("elevation_seed", defaults.elevation_seed),
                moisture_seed=data.get("moisture_seed", defaults.moisture_seed),
                elevation_octaves=data.get("elevation_octaves", defaults.elevation_octaves),
                moisture_octaves=data.get("moisture_octaves", defaults.moisture_octaves),
                height_curve=data.get("height_curve", defaults.height_curve),
                falloff=falloff,
                show_shadows=data.get("show_shadows", defaults.show_shadows),
                shadow_intensity=data.get("shadow_intensity", defaults.shadow_intensity),
                show_elevation=data.get("show_elevation", defaults.show_elevation),
                show_moisture=data.get("show_moisture", defaults.show_moisture),
                always_mountains=data.get("always_mountains", defaults.always_mountains),
                biomes=biomes,
            )
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            raise ConfigurationError(f"Invalid configuration: {e}") from e
        config.validate()
        return config

    @classmethod
    def load(cls, filepath: Path) -> "MapConfig":
        """Load configuration from JSON file."""
        with open(filepath) as f:
            try:
                data = json.load(f)
            except json.JSONDecodeError as e:
                raise ConfigurationError(f"{filepath} is not valid JSON: {e}") from e
        return cls.from_dict(data)


# Preset configurations for common map styles
PRESETS: Dict[str, MapConfig] = {
    "default": MapConfig(),
    "archipelago": MapConfig(
        zoom=2.5,
        elevation_octaves=(1.0, 0.5, 0.25, 0.125),
        height_curve=2.0,
        falloff=FalloffConfig(distance=0.3),
        always_mountains=False,
    ),
    "continent": MapConfig(
        size=128,
        zoom=0.8,
        elevation_octaves=(1.0, 0.5, 0.25, 0.125, 0.0625),
        height_curve=1.6,
        falloff=FalloffConfig(method=FalloffMethod.MANHATTAN, distance=0.7),
    ),
    "highlands": MapConfig(
        zoom=1.5,
        height_curve=1.0,
        falloff=FalloffConfig(enabled=False),
        shadow_intensity=0.3,
    ),
    "elevation_debug": MapConfig(show_elevation=True),
    "moisture_debug": MapConfig(show_moisture=True),
}

PRESET_DESCRIPTIONS = {
    "default": "Single island, euclidean falloff",
    "archipelago": "Scattered small islands",
    "continent": "Large landmass with a square coastline",
    "highlands": "Edge-to-edge terrain without falloff",
    "elevation_debug": "Grayscale elevation field",
    "moisture_debug": "Moisture field from dry to wet",
}


def get_preset(name: str) -> Optional[MapConfig]:
    """Get a preset configuration by name."""
    return PRESETS.get(name.lower().replace("-", "_").replace(" ", "_"))


def list_presets() -> list[str]:
    """Get list of available preset names."""
    return list(PRESETS.keys())
