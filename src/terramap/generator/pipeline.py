"""Map generation pipeline: fields, classification and shading."""

from dataclasses import dataclass
from typing import Callable, Dict, Optional, Tuple
import time

import numpy as np
import structlog

from ..config import MapConfig
from ..errors import ConfigurationError
from ..render.colors import Color, ColorScale, elevation_scale, moisture_scale, scale_to_rgba
from ..render.image import PixelBuffer
from ..terrain import (
    DisplayMode,
    FieldConfig,
    FieldGenerator,
    INVALID_BIOME,
    NoiseFactory,
    shade,
)
from ..terrain.shading import is_shadowed

logger = structlog.get_logger()

_EMPTY_FIELD = np.zeros(0, dtype=np.float64)
_EMPTY_FIELD.flags.writeable = False


@dataclass
class MapProgress:
    """Progress information for map generation."""
    phase: str
    current: int
    total: int
    message: str = ""

    @property
    def percent(self) -> float:
        if self.total == 0:
            return 0.0
        return 100.0 * self.current / self.total


ProgressCallback = Callable[[MapProgress], None]


@dataclass(frozen=True, eq=False)
class GeneratedMap:
    """Elevation and moisture fields of one generated map."""
    size: int
    elevation: np.ndarray
    moisture: np.ndarray

    def index(self, x: int, y: int) -> int:
        """Flat index of cell (x, y)."""
        if not (0 <= x < self.size and 0 <= y < self.size):
            raise IndexError(f"Cell ({x}, {y}) outside {self.size}x{self.size} map")
        return y * self.size + x

    def cell(self, x: int, y: int) -> Tuple[float, float]:
        """Get (elevation, moisture) at cell (x, y)."""
        i = self.index(x, y)
        return float(self.elevation[i]), float(self.moisture[i])


class MapPipeline:
    """Generates elevation and moisture fields and renders them to RGBA.

    The configuration is validated on construction so problems surface
    before any cell is generated.
    """

    def __init__(
        self,
        config: Optional[MapConfig] = None,
        noise_factory: Optional[NoiseFactory] = None,
        strict: bool = False,
        elevation_colors: Optional[ColorScale] = None,
        moisture_colors: Optional[ColorScale] = None,
    ):
        """Initialize the pipeline.

        Args:
            config: Map configuration (defaults when omitted)
            noise_factory: Builds noise sources per seed (OpenSimplex by default)
            strict: Raise on biome table issues instead of logging a warning
            elevation_colors: Color scale for the elevation debug view
            moisture_colors: Color scale for the moisture debug view

        Raises:
            ConfigurationError: If the configuration is invalid
        """
        self.config = config or MapConfig()
        self.config.validate()

        self.biomes = self.config.biome_table()
        self.issues = self.biomes.find_issues()
        if self.issues:
            if strict:
                raise ConfigurationError("; ".join(self.issues))
            for issue in self.issues:
                logger.warning("Biome table issue, classification may be degraded", issue=issue)

        self.mode = self.config.display_mode
        self._fields = FieldGenerator(noise_factory)
        self._elevation_colors = elevation_colors
        self._moisture_colors = moisture_colors

        self.elevation_map: np.ndarray = _EMPTY_FIELD
        self.moisture_map: np.ndarray = _EMPTY_FIELD

    def elevation_field_config(self) -> FieldConfig:
        config = self.config
        return FieldConfig(
            seed=config.elevation_seed,
            octaves=config.elevation_octaves,
            size=config.size,
            zoom=config.zoom,
            use_height_curve=True,
            height_curve=config.height_curve,
            use_distance=config.falloff.enabled,
            falloff=config.falloff,
            normalize=config.always_mountains,
        )

    def moisture_field_config(self) -> FieldConfig:
        config = self.config
        return FieldConfig(
            seed=config.moisture_seed,
            octaves=config.moisture_octaves,
            size=config.size,
            zoom=config.zoom,
            normalize=True,
        )

    def generate_map(self, progress_callback: Optional[ProgressCallback] = None) -> GeneratedMap:
        """Generate the elevation and moisture fields.

        Args:
            progress_callback: Optional callback for progress updates

        Returns:
            The generated fields
        """
        start = time.perf_counter()
        size = self.config.size

        if progress_callback:
            progress_callback(MapProgress("elevation", 0, 1, "Generating elevation..."))
        elevation = self._fields.generate(self.elevation_field_config())
        if progress_callback:
            progress_callback(MapProgress("elevation", 1, 1, "Elevation ready"))

        if progress_callback:
            progress_callback(MapProgress("moisture", 0, 1, "Generating moisture..."))
        moisture = self._fields.generate(self.moisture_field_config())
        if progress_callback:
            progress_callback(MapProgress("moisture", 1, 1, "Moisture ready"))

        self.elevation_map = elevation
        self.moisture_map = moisture

        logger.info(
            "Generated map",
            size=size,
            elevation_seed=self.config.elevation_seed,
            moisture_seed=self.config.moisture_seed,
            elapsed=round(time.perf_counter() - start, 4),
        )
        return GeneratedMap(size=size, elevation=elevation, moisture=moisture)

    def _debug_scale(self) -> Optional[ColorScale]:
        if self.mode == DisplayMode.ELEVATION:
            return self._elevation_colors or elevation_scale()
        if self.mode == DisplayMode.MOISTURE:
            return self._moisture_colors or moisture_scale()
        return None

    def generate_image(
        self,
        elevation: Optional[np.ndarray] = None,
        moisture: Optional[np.ndarray] = None,
        progress_callback: Optional[ProgressCallback] = None,
    ) -> Optional[PixelBuffer]:
        """Classify and shade every cell into an RGBA buffer.

        Uses the pipeline's last generated fields unless fields are passed.

        Returns:
            ``4 * size * size`` bytes, or None if no map has been generated
        """
        elevation = self.elevation_map if elevation is None else np.asarray(elevation, dtype=np.float64)
        moisture = self.moisture_map if moisture is None else np.asarray(moisture, dtype=np.float64)
        if len(elevation) == 0 or len(moisture) == 0:
            return None
        if len(elevation) != len(moisture):
            raise ValueError(
                f"Field lengths differ: elevation={len(elevation)} moisture={len(moisture)}"
            )
        size = int(round(len(elevation) ** 0.5))
        if size * size != len(elevation):
            raise ValueError(f"Field length {len(elevation)} is not a square map")

        elevation = np.clip(elevation, 0.0, 1.0)
        moisture = np.clip(moisture, 0.0, 1.0)
        cells = len(elevation)
        if progress_callback:
            progress_callback(MapProgress("classify", 0, cells, "Classifying cells..."))

        buffer = bytearray(4 * cells)
        scale = self._debug_scale()
        if scale is not None:
            values = elevation if self.mode == DisplayMode.ELEVATION else moisture
            buffer[:] = scale_to_rgba(scale, values).tobytes()
        else:
            self._render_biomes(elevation, moisture, size, buffer)

        if progress_callback:
            progress_callback(MapProgress("classify", cells, cells, "Image ready"))
        return bytes(buffer)

    def _render_biomes(self, elevation: np.ndarray, moisture: np.ndarray, size: int, buffer: bytearray) -> None:
        biomes = self.biomes.compile()
        indices = self.biomes.classify_many(elevation, moisture)
        invalid = int(np.count_nonzero(indices < 0))
        if invalid:
            logger.warning("Cells classified as invalid", cells=invalid)

        # Each biome has exactly two possible colors
        plain: Dict[int, Tuple[int, int, int, int]] = {-1: INVALID_BIOME.color.to_rgba_bytes()}
        shaded: Dict[int, Tuple[int, int, int, int]] = {}
        for i, biome in enumerate(biomes):
            plain[i] = biome.color.to_rgba_bytes()
            shaded[i] = biome.color.darker(self.config.shadow_intensity).to_rgba_bytes()

        enabled = self.config.show_shadows
        heights = elevation.tolist()
        for i, index in enumerate(indices.tolist()):
            biome = INVALID_BIOME if index < 0 else biomes[index]
            rgba = plain[index]
            if enabled and biome.shadows and is_shadowed(i, heights, size):
                rgba = shaded[index]
            buffer[4 * i:4 * i + 4] = rgba

    def shade_cell(self, index: int, elevation: np.ndarray, moisture: np.ndarray) -> Color:
        """Classify and shade a single cell of the given fields."""
        size = int(round(len(elevation) ** 0.5))
        elevation = np.clip(np.asarray(elevation, dtype=np.float64), 0.0, 1.0)
        moisture = np.clip(np.asarray(moisture, dtype=np.float64), 0.0, 1.0)
        biome = self.biomes.classify(float(elevation[index]), float(moisture[index]), self.mode, self._debug_scale())
        return shade(
            index,
            biome,
            elevation.tolist(),
            size,
            self.config.shadow_intensity,
            enabled=self.config.show_shadows,
            mode=self.mode,
        )

    def biome_counts(self) -> Dict[str, int]:
        """Count cells per biome label for the last generated map."""
        if len(self.elevation_map) == 0:
            return {}
        return self.biomes.histogram(
            self.biomes.classify_many(self.elevation_map, self.moisture_map)
        )

    def run(self, progress_callback: Optional[ProgressCallback] = None) -> PixelBuffer:
        """Generate the map and render it in one call."""
        self.generate_map(progress_callback)
        return self.generate_image(progress_callback=progress_callback)


def generate_map(
    config: Optional[MapConfig] = None,
    noise_factory: Optional[NoiseFactory] = None,
) -> Tuple[GeneratedMap, PixelBuffer]:
    """Convenience function to generate and render a map.

    Returns:
        The generated fields and their RGBA pixel buffer
    """
    pipeline = MapPipeline(config, noise_factory=noise_factory)
    generated = pipeline.generate_map()
    return generated, pipeline.generate_image()
