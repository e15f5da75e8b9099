"""Colors and continuous color scales."""

from dataclasses import dataclass
from typing import Callable, Sequence, Tuple, Union

import numpy as np
from matplotlib.colors import LinearSegmentedColormap, to_rgba

# Multiplier applied per unit of darkening
DARKER = 0.7


def _channel_byte(value: float) -> int:
    return max(0, min(255, int(round(value))))


@dataclass(frozen=True)
class Color:
    """RGB color with 0-255 channels and 0-1 alpha.

    Channels are kept as floats so repeated transforms do not accumulate
    rounding; they are rounded and clamped when converted to bytes.
    """
    r: float
    g: float
    b: float
    a: float = 1.0

    @classmethod
    def from_hex(cls, value: str) -> "Color":
        """Parse ``#rgb``, ``#rrggbb`` or ``#rrggbbaa``."""
        text = value.strip().lstrip("#")
        if len(text) == 3:
            text = "".join(ch * 2 for ch in text)
        if len(text) not in (6, 8):
            raise ValueError(f"Invalid hex color: {value!r}")
        try:
            parts = [int(text[i:i + 2], 16) for i in range(0, len(text), 2)]
        except ValueError:
            raise ValueError(f"Invalid hex color: {value!r}") from None
        alpha = parts[3] / 255 if len(parts) == 4 else 1.0
        return cls(parts[0], parts[1], parts[2], alpha)

    @classmethod
    def parse(cls, value: Union[str, Sequence[float], "Color"]) -> "Color":
        """Build a color from a hex string, an (r, g, b[, a]) sequence or a Color."""
        if isinstance(value, Color):
            return value
        if isinstance(value, str):
            return cls.from_hex(value)
        if len(value) not in (3, 4):
            raise ValueError(f"Color needs 3 or 4 components: {value!r}")
        return cls(*value)

    def to_hex(self) -> str:
        """Format as ``#rrggbb`` (or ``#rrggbbaa`` when not opaque)."""
        text = "#{:02x}{:02x}{:02x}".format(
            _channel_byte(self.r), _channel_byte(self.g), _channel_byte(self.b)
        )
        if self.a < 1.0:
            text += "{:02x}".format(_channel_byte(self.a * 255))
        return text

    def darker(self, k: float = 1.0) -> "Color":
        """Darken by ``k`` units; each unit scales RGB by 0.7."""
        factor = DARKER ** k
        return Color(self.r * factor, self.g * factor, self.b * factor, self.a)

    def to_rgba_bytes(self) -> Tuple[int, int, int, int]:
        """Get (R, G, B, A) as 0-255 integers."""
        return (
            _channel_byte(self.r),
            _channel_byte(self.g),
            _channel_byte(self.b),
            _channel_byte(self.a * 255),
        )


ColorScale = Callable[[float], Color]


class ColormapScale:
    """A [0, 1] -> Color scale backed by a matplotlib colormap.

    Inputs outside [0, 1] are clamped. Whole fields can be mapped in one
    colormap call with ``rgba_bytes``.
    """

    def __init__(self, colors: Sequence[str], name: str = "scale"):
        self.cmap = LinearSegmentedColormap.from_list(name, [to_rgba(c) for c in colors])

    def __call__(self, t: float) -> Color:
        t = min(1.0, max(0.0, float(t)))
        r, g, b, a = self.cmap(t)
        return Color(r * 255, g * 255, b * 255, a)

    def rgba_bytes(self, values: np.ndarray) -> np.ndarray:
        """Map an array of values to an ``(n, 4)`` uint8 RGBA array."""
        rgba = self.cmap(np.clip(np.asarray(values, dtype=np.float64), 0.0, 1.0))
        return np.clip(np.round(rgba * 255), 0, 255).astype(np.uint8)


def colormap_scale(colors: Sequence[str], name: str = "scale") -> ColormapScale:
    """Build a [0, 1] -> Color scale interpolating between named colors."""
    return ColormapScale(colors, name)


def scale_to_rgba(scale: ColorScale, values: np.ndarray) -> np.ndarray:
    """Map values through any color scale to an ``(n, 4)`` uint8 RGBA array."""
    if isinstance(scale, ColormapScale):
        return scale.rgba_bytes(values)
    return np.array(
        [scale(v).to_rgba_bytes() for v in np.asarray(values).tolist()],
        dtype=np.uint8,
    ).reshape(-1, 4)


def elevation_scale() -> ColormapScale:
    """Default scale for the elevation debug view (black to white)."""
    return colormap_scale(["black", "white"], name="elevation")


def moisture_scale() -> ColormapScale:
    """Default scale for the moisture debug view (dry tan to wet blue)."""
    return colormap_scale(["#d2b48c", "#1e64c8"], name="moisture")
