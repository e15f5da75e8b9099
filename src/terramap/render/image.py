"""RGBA pixel buffers and image output."""

from pathlib import Path

from PIL import Image

# Flat R, G, B, A bytes per cell, in field order
PixelBuffer = bytes


def to_image(buffer: PixelBuffer, size: int) -> Image.Image:
    """Build a square RGBA image from a pixel buffer.

    Row ``y`` of the image holds cells ``y * size`` to ``y * size + size - 1``.
    """
    expected = 4 * size * size
    if len(buffer) != expected:
        raise ValueError(f"Pixel buffer has {len(buffer)} bytes, expected {expected}")
    return Image.frombytes("RGBA", (size, size), bytes(buffer))


def save_png(buffer: PixelBuffer, size: int, path: Path, scale: int = 1) -> Path:
    """Write a pixel buffer as a PNG, optionally upscaled with nearest-neighbor.

    Returns:
        The written path
    """
    if scale < 1:
        raise ValueError(f"scale must be >= 1: {scale}")
    image = to_image(buffer, size)
    if scale > 1:
        image = image.resize((size * scale, size * scale), Image.Resampling.NEAREST)
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    image.save(path, format="PNG")
    return path
