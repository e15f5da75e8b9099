"""Rendering helpers: colors, color scales and image output."""

from .colors import (
    Color,
    ColorScale,
    ColormapScale,
    colormap_scale,
    elevation_scale,
    moisture_scale,
    scale_to_rgba,
)
from .image import PixelBuffer, to_image, save_png

__all__ = [
    "Color",
    "ColorScale",
    "ColormapScale",
    "colormap_scale",
    "elevation_scale",
    "moisture_scale",
    "scale_to_rgba",
    "PixelBuffer",
    "to_image",
    "save_png",
]
