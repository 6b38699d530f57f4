"""Unit tests for the canvas raster and its PPM encoding."""

import numpy as np
import pytest


class TestCanvas:
    """Tests for pixel storage."""

    def test_new_canvas_is_black(self):
        from src.raycast.preview.canvas import Canvas

        c = Canvas(10, 20)
        assert (c.width, c.height) == (10, 20)
        assert c.to_numpy().shape == (20, 10, 3)
        assert not c.to_numpy().any()

    def test_write_pixel(self):
        from src.raycast.preview.canvas import Canvas

        c = Canvas(10, 20)
        c.write_pixel(2, 3, (1.0, 0.0, 0.0))
        assert c.pixel_at(2, 3) == (1.0, 0.0, 0.0)
        assert c.to_numpy()[3, 2, 0] == 1.0

    @pytest.mark.parametrize("width,height", [(0, 1), (1, 0), (-3, 4)])
    def test_invalid_dimensions(self, width, height):
        from src.raycast.preview.canvas import Canvas

        with pytest.raises(ValueError):
            Canvas(width, height)

    def test_from_array(self):
        from src.raycast.preview.canvas import Canvas

        pixels = np.zeros((2, 3, 3), dtype=np.float32)
        pixels[1, 2] = (0.5, 0.25, 1.0)
        c = Canvas.from_array(pixels)
        assert (c.width, c.height) == (3, 2)
        assert c.pixel_at(2, 1) == (0.5, 0.25, 1.0)

    def test_from_array_rejects_bad_shape(self):
        from src.raycast.preview.canvas import Canvas

        with pytest.raises(ValueError):
            Canvas.from_array(np.zeros((2, 3)))

    def test_to_uint8_clamps_and_rounds_up(self):
        from src.raycast.preview.canvas import Canvas

        c = Canvas(3, 1)
        c.write_pixel(0, 0, (1.5, 0.0, 0.0))
        c.write_pixel(1, 0, (0.0, 0.5, 0.0))
        c.write_pixel(2, 0, (-0.5, 0.0, 1.0))
        assert c.to_uint8()[0].tolist() == [[255, 0, 0], [0, 128, 0], [0, 0, 255]]


class TestPPM:
    """Tests for plain-text PPM output."""

    def test_header(self):
        from src.raycast.preview.canvas import Canvas

        lines = Canvas(5, 3).to_ppm().splitlines()
        assert lines[:3] == ["P3", "5 3", "255"]

    def test_pixel_data(self):
        from src.raycast.preview.canvas import Canvas

        c = Canvas(5, 3)
        c.write_pixel(0, 0, (1.5, 0.0, 0.0))
        c.write_pixel(2, 1, (0.0, 0.5, 0.0))
        c.write_pixel(4, 2, (-0.5, 0.0, 1.0))
        lines = c.to_ppm().splitlines()
        assert lines[3:6] == [
            "255 0 0 0 0 0 0 0 0 0 0 0 0 0 0",
            "0 0 0 0 0 0 0 128 0 0 0 0 0 0 0",
            "0 0 0 0 0 0 0 0 0 0 0 0 0 0 255",
        ]

    def test_long_lines_are_split(self):
        from src.raycast.preview.canvas import Canvas

        c = Canvas.from_array(np.full((2, 10, 3), (1.0, 0.8, 0.6), dtype=np.float32))
        lines = c.to_ppm().splitlines()
        assert lines[3:7] == [
            "255 204 153 255 204 153 255 204 153 255 204 153 255 204 153 255 204",
            "153 255 204 153 255 204 153 255 204 153 255 204 153",
            "255 204 153 255 204 153 255 204 153 255 204 153 255 204 153 255 204",
            "153 255 204 153 255 204 153 255 204 153 255 204 153",
        ]
        assert all(len(line) <= 70 for line in lines)

    def test_ends_with_newline(self):
        from src.raycast.preview.canvas import Canvas

        assert Canvas(5, 3).to_ppm().endswith("\n")
