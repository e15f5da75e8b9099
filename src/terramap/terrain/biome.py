"""Biome classification from elevation and moisture.

Each biome covers an inclusive (elevation, moisture) envelope. The table is
sorted ascending by (max_height, moisture); a cell gets the first biome whose
max_height reaches its elevation and whose moisture reaches its moisture,
falling back to the last biome reaching its elevation.
"""

from dataclasses import dataclass, replace
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple
import json

import numpy as np

from ..errors import ConfigurationError
from ..render.colors import Color, ColorScale, elevation_scale, moisture_scale


class DisplayMode(Enum):
    """How cells are colored."""
    NORMAL = "normal"
    ELEVATION = "elevation"
    MOISTURE = "moisture"

    @classmethod
    def from_flags(cls, show_elevation: bool, show_moisture: bool) -> "DisplayMode":
        """Pick the mode once from the display flags; elevation wins."""
        if show_elevation:
            return cls.ELEVATION
        if show_moisture:
            return cls.MOISTURE
        return cls.NORMAL


@dataclass(frozen=True)
class Biome:
    """A biome and the envelope it covers."""
    label: str
    max_height: float
    moisture: float
    shadows: bool
    color: Color

    def covers(self, elevation: float, moisture: float) -> bool:
        """Whether (elevation, moisture) lies inside this biome's envelope."""
        return elevation <= self.max_height and moisture <= self.moisture

    def to_dict(self) -> Dict[str, Any]:
        return {
            "label": self.label,
            "max_height": self.max_height,
            "moisture": self.moisture,
            "shadows": self.shadows,
            "color": self.color.to_hex(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Biome":
        return cls(
            label=data["label"],
            max_height=float(data["max_height"]),
            moisture=float(data["moisture"]),
            shadows=bool(data.get("shadows", True)),
            color=Color.parse(data["color"]),
        )


# Returned when no biome reaches a cell's elevation
INVALID_BIOME = Biome(
    label="Invalid",
    max_height=float("nan"),
    moisture=float("nan"),
    shadows=False,
    color=Color(255, 0, 255),
)


DEFAULT_BIOMES: Tuple[Biome, ...] = (
    Biome("Deep Water", 0.10, 1.0, False, Color.from_hex("#2a4b7c")),
    Biome("Shallow Water", 0.16, 1.0, False, Color.from_hex("#3d6ea8")),
    Biome("Beach", 0.20, 1.0, True, Color.from_hex("#d9c58f")),
    Biome("Subtropical Desert", 0.40, 0.16, True, Color.from_hex("#e9ddc7")),
    Biome("Grassland", 0.40, 0.50, True, Color.from_hex("#a7c66b")),
    Biome("Tropical Seasonal Forest", 0.40, 0.83, True, Color.from_hex("#559944")),
    Biome("Tropical Rain Forest", 0.40, 1.0, True, Color.from_hex("#337755")),
    Biome("Temperate Desert", 0.60, 0.16, True, Color.from_hex("#e4e8ca")),
    Biome("Shrubland", 0.60, 0.50, True, Color.from_hex("#88aa55")),
    Biome("Temperate Deciduous Forest", 0.60, 0.83, True, Color.from_hex("#679459")),
    Biome("Temperate Rain Forest", 0.60, 1.0, True, Color.from_hex("#448855")),
    Biome("Taiga", 0.80, 0.66, True, Color.from_hex("#99aa77")),
    Biome("Tundra", 0.80, 1.0, True, Color.from_hex("#bbbbaa")),
    Biome("Bare", 0.90, 0.50, True, Color.from_hex("#999999")),
    Biome("Mountain", 0.95, 1.0, True, Color.from_hex("#7a7a7a")),
    Biome("Snow", 1.0, 1.0, True, Color.from_hex("#f8f8f8")),
)


def _sort_key(biome: Biome) -> Tuple[float, float]:
    return (biome.max_height, biome.moisture)


class BiomeTable:
    """Ordered biome collection used for classification.

    The table may be edited freely; it is re-sorted (stably, so ties keep
    insertion order) the next time it is read for classification.
    """

    def __init__(self, biomes: Optional[Iterable[Biome]] = None):
        self._biomes: List[Biome] = list(DEFAULT_BIOMES if biomes is None else biomes)
        self._compiled: Optional[Tuple[Biome, ...]] = None

    def __len__(self) -> int:
        return len(self._biomes)

    def __iter__(self):
        return iter(self.compile())

    def add(self, biome: Biome) -> None:
        """Append a biome."""
        self._biomes.append(biome)
        self._compiled = None

    def remove(self, label: str) -> Biome:
        """Remove and return the first biome with the given label."""
        for i, biome in enumerate(self._biomes):
            if biome.label == label:
                self._compiled = None
                return self._biomes.pop(i)
        raise KeyError(label)

    def update(self, label: str, **changes: Any) -> Biome:
        """Replace fields of the first biome with the given label."""
        for i, biome in enumerate(self._biomes):
            if biome.label == label:
                self._biomes[i] = replace(biome, **changes)
                self._compiled = None
                return self._biomes[i]
        raise KeyError(label)

    def compile(self) -> Tuple[Biome, ...]:
        """Get the biomes sorted ascending by (max_height, moisture)."""
        if self._compiled is None:
            self._compiled = tuple(sorted(self._biomes, key=_sort_key))
        return self._compiled

    def find_issues(self) -> List[str]:
        """Describe configuration problems that would degrade classification."""
        issues = []
        if not self._biomes:
            return ["Biome table is empty"]
        for biome in self._biomes:
            if not (0.0 <= biome.max_height <= 1.0):
                issues.append(f"Biome '{biome.label}' max_height outside [0, 1]: {biome.max_height}")
            if not (0.0 <= biome.moisture <= 1.0):
                issues.append(f"Biome '{biome.label}' moisture outside [0, 1]: {biome.moisture}")
        if max(b.max_height for b in self._biomes) < 1.0:
            issues.append("No biome covers elevation 1.0; high cells will be classified as invalid")
        return issues

    def validate(self) -> None:
        """Raise ConfigurationError if the table has any issues."""
        issues = self.find_issues()
        if issues:
            raise ConfigurationError("; ".join(issues))

    def classify(
        self,
        elevation: float,
        moisture: float,
        mode: DisplayMode = DisplayMode.NORMAL,
        color_scale: Optional[ColorScale] = None,
    ) -> Biome:
        """Classify one (elevation, moisture) pair.

        Args:
            elevation: Elevation in [0, 1]
            moisture: Moisture in [0, 1]
            mode: Debug modes bypass the table and color by the scalar
            color_scale: Scale for the debug modes (defaults per mode)

        Returns:
            The matching biome, a synthetic debug biome, or INVALID_BIOME
        """
        if mode == DisplayMode.ELEVATION:
            scale = color_scale or elevation_scale()
            return Biome("Elevation", 1.0, 1.0, False, scale(elevation))
        if mode == DisplayMode.MOISTURE:
            scale = color_scale or moisture_scale()
            return Biome("Moisture", 1.0, 1.0, False, scale(moisture))

        candidate = None
        for biome in self.compile():
            if biome.max_height < elevation:
                continue
            candidate = biome
            if biome.moisture >= moisture:
                return biome
        return candidate if candidate is not None else INVALID_BIOME

    def classify_many(self, elevation: np.ndarray, moisture: np.ndarray) -> np.ndarray:
        """Classify whole fields at once.

        Returns:
            Indices into ``compile()``, with -1 for the invalid sentinel
        """
        biomes = self.compile()
        elevation = np.asarray(elevation, dtype=np.float64)
        moisture = np.asarray(moisture, dtype=np.float64)
        if not biomes:
            return np.full(elevation.shape, -1, dtype=np.int64)

        heights = np.array([b.max_height for b in biomes])
        moistures = np.array([b.moisture for b in biomes])
        reaches = heights[np.newaxis, :] >= elevation[:, np.newaxis]
        fits = reaches & (moistures[np.newaxis, :] >= moisture[:, np.newaxis])

        # Last candidate per cell, used when no candidate fits the moisture
        last = len(biomes) - 1 - np.argmax(reaches[:, ::-1], axis=1)
        result = np.where(fits.any(axis=1), np.argmax(fits, axis=1), last)
        return np.where(reaches.any(axis=1), result, -1).astype(np.int64)

    def histogram(self, indices: np.ndarray) -> Dict[str, int]:
        """Count cells per biome label for indices from ``classify_many``."""
        biomes = self.compile()
        counts: Dict[str, int] = {}
        values, totals = np.unique(indices, return_counts=True)
        for index, total in zip(values.tolist(), totals.tolist()):
            label = INVALID_BIOME.label if index < 0 else biomes[index].label
            counts[label] = counts.get(label, 0) + total
        return counts


def biomes_to_list(biomes: Sequence[Biome]) -> List[Dict[str, Any]]:
    """Serialize biomes for JSON."""
    return [b.to_dict() for b in biomes]


def load_biomes(path: Optional[Path]) -> List[Biome]:
    """Load a biome table from JSON, falling back to the defaults."""
    if path is None:
        return list(DEFAULT_BIOMES)
    with open(Path(path)) as f:
        data = json.load(f)
    if isinstance(data, dict):
        data = data.get("biomes", [])
    try:
        return [Biome.from_dict(entry) for entry in data]
    except (KeyError, TypeError, ValueError) as e:
        raise ConfigurationError(f"Invalid biome table in {path}: {e}") from e
