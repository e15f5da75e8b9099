"""Elevation-relative shading.

A cell is darkened when its neighbor one step back on both axes,
``(max(x - 1, 0), max(y - 1, 0))``, is strictly higher. This fakes a light
source from the top-left corner of the map.
"""

from typing import Sequence

from ..render.colors import Color
from .biome import Biome, DisplayMode


def neighbor_index(index: int, size: int) -> int:
    """Get the flat index of a cell's shading neighbor.

    Cells use ``index = y * size + x``.
    """
    x = index % size
    y = index // size
    return max(y - 1, 0) * size + max(x - 1, 0)


def is_shadowed(index: int, elevation: Sequence[float], size: int) -> bool:
    """Whether the shading neighbor is strictly higher than the cell."""
    return elevation[neighbor_index(index, size)] > elevation[index]


def shade(
    index: int,
    biome: Biome,
    elevation: Sequence[float],
    size: int,
    shadow_intensity: float,
    enabled: bool = True,
    mode: DisplayMode = DisplayMode.NORMAL,
) -> Color:
    """Get the display color of a classified cell.

    The biome itself is never modified; a darkened copy of its color is
    returned when the cell is in shadow.

    Args:
        index: Flat cell index
        biome: Biome the cell was classified as
        elevation: Completed elevation field
        size: Map side length
        shadow_intensity: Darkening applied to shadowed cells
        enabled: Global shading switch
        mode: Debug display modes are never shaded

    Returns:
        The biome color or its darkened variant
    """
    if not enabled or not biome.shadows or mode != DisplayMode.NORMAL:
        return biome.color
    if is_shadowed(index, elevation, size):
        return biome.color.darker(shadow_intensity)
    return biome.color
