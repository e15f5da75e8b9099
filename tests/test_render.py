"""Tests for colors and image output."""

import numpy as np
import pytest
from PIL import Image

from terramap.render.colors import (
    Color,
    colormap_scale,
    elevation_scale,
    moisture_scale,
    scale_to_rgba,
)
from terramap.render.image import save_png, to_image


class TestColor:
    """Test color parsing and transforms."""

    def test_from_hex(self):
        assert Color.from_hex("#ff8000") == Color(255, 128, 0)
        assert Color.from_hex("fff") == Color(255, 255, 255)

    def test_from_hex_alpha(self):
        color = Color.from_hex("#00000080")
        assert color.a == pytest.approx(128 / 255)

    @pytest.mark.parametrize("value", ["#12", "#zzzzzz", "1234567"])
    def test_invalid_hex(self, value):
        with pytest.raises(ValueError):
            Color.from_hex(value)

    def test_to_hex(self):
        assert Color(255, 128, 0).to_hex() == "#ff8000"
        assert Color(0, 0, 0, 0.5).to_hex() == "#00000080"

    def test_darker(self):
        color = Color(100, 50, 200, 0.5).darker(1)
        assert (color.r, color.g, color.b) == pytest.approx((70, 35, 140))
        assert color.a == 0.5

    def test_darker_zero_is_identity(self):
        assert Color(10, 20, 30).darker(0) == Color(10, 20, 30)

    def test_bytes_are_clamped(self):
        assert Color(300, -5, 127.6, 1.2).to_rgba_bytes() == (255, 0, 128, 255)

    def test_parse(self):
        assert Color.parse([1, 2, 3]) == Color(1, 2, 3)
        assert Color.parse("#010203") == Color(1, 2, 3)
        with pytest.raises(ValueError):
            Color.parse([1, 2])


class TestScales:
    """Test continuous color scales."""

    def test_endpoints(self):
        scale = elevation_scale()
        assert scale(0.0).to_rgba_bytes() == (0, 0, 0, 255)
        assert scale(1.0).to_rgba_bytes() == (255, 255, 255, 255)

    def test_clamped_domain(self):
        scale = colormap_scale(["red", "blue"])
        assert scale(-1.0) == scale(0.0)
        assert scale(2.0) == scale(1.0)

    def test_moisture_scale_runs_dry_to_wet(self):
        scale = moisture_scale()
        assert scale(1.0).b > scale(0.0).b

    def test_rgba_bytes_matches_scalar(self):
        scale = moisture_scale()
        values = np.array([-0.5, 0.0, 0.3, 0.77, 1.0, 1.5])
        rgba = scale.rgba_bytes(values)
        assert rgba.shape == (6, 4)
        assert rgba.dtype == np.uint8
        for row, value in zip(rgba.tolist(), values):
            assert tuple(row) == scale(value).to_rgba_bytes()

    def test_plain_callable_scale(self):
        rgba = scale_to_rgba(lambda t: Color(t * 255, 0, 0), np.array([0.0, 1.0]))
        assert rgba.tolist() == [[0, 0, 0, 255], [255, 0, 0, 255]]


class TestImage:
    """Test pixel buffer conversion."""

    def test_to_image(self):
        buffer = bytes([255, 0, 0, 255] * 4)
        image = to_image(buffer, 2)
        assert image.size == (2, 2)
        assert image.mode == "RGBA"
        assert image.getpixel((1, 1)) == (255, 0, 0, 255)

    def test_row_order(self):
        # Cell (x=1, y=0) is the second group of bytes
        buffer = bytes([0, 0, 0, 255, 9, 9, 9, 255] + [0, 0, 0, 255] * 2)
        assert to_image(buffer, 2).getpixel((1, 0)) == (9, 9, 9, 255)

    def test_wrong_length(self):
        with pytest.raises(ValueError):
            to_image(bytes(10), 2)

    def test_save_png_scaled(self, tmp_path):
        path = save_png(bytes([0, 255, 0, 255] * 9), 3, tmp_path / "out" / "map.png", scale=4)
        with Image.open(path) as image:
            assert image.size == (12, 12)

    def test_bad_scale(self, tmp_path):
        with pytest.raises(ValueError):
            save_png(bytes(16), 2, tmp_path / "map.png", scale=0)
