"""Tests for render options."""

import math
import subprocess
import sys
from pathlib import Path

import pytest

REPO_ROOT = Path(__file__).resolve().parents[1]


class TestRenderOptions:
    """Tests for option defaults and validation."""

    def test_defaults(self):
        from src.raycast.core.config import RenderOptions

        options = RenderOptions()
        assert (options.width_pixels, options.height_pixels) == (400, 400)
        assert options.from_point == (0.0, -2.5, -10.0)
        assert options.to_point == (0.0, -5.0, 0.0)
        assert options.up == (0.0, 1.0, 0.0)
        assert options.fov_radians == math.pi / 2
        assert options.material_color == (0.0196, 0.65, 0.874)
        assert options.image_format == "jpeg"
        assert options.parallel is True

    def test_vectors_become_float_tuples(self):
        from src.raycast.core.config import RenderOptions

        options = RenderOptions(from_point=[1, 2, 3])
        assert options.from_point == (1.0, 2.0, 3.0)

    def test_format_is_normalized(self):
        from src.raycast.core.config import RenderOptions

        assert RenderOptions(image_format="JPG").image_format == "jpeg"
        assert RenderOptions(image_format="png").image_format == "png"

    def test_unsupported_format(self):
        from src.raycast.core.config import RenderOptions
        from src.raycast.preview.export import UnsupportedFormatError

        with pytest.raises(UnsupportedFormatError):
            RenderOptions(image_format="gif")

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"width_pixels": 0},
            {"height_pixels": -1},
            {"width_pixels": 100000},
            {"fov_radians": 0.0},
            {"fov_radians": math.pi},
            {"up": (0.0, 1.0)},
            {"material_color": "red"},
        ],
    )
    def test_invalid_values(self, kwargs):
        from src.raycast.core.config import RenderOptions

        with pytest.raises(ValueError):
            RenderOptions(**kwargs)

    def test_options_are_frozen(self):
        from dataclasses import FrozenInstanceError

        from src.raycast.core.config import RenderOptions

        with pytest.raises(FrozenInstanceError):
            RenderOptions().width_pixels = 10

    def test_from_dict_ignores_unknown_keys(self):
        from src.raycast.core.config import RenderOptions

        options = RenderOptions.from_dict({"width_pixels": 32, "height_pixels": 16, "verbose": True})
        assert (options.width_pixels, options.height_pixels) == (32, 16)

    def test_dict_round_trip(self):
        from src.raycast.core.config import RenderOptions

        options = RenderOptions(width_pixels=64, image_format="ppm", parallel=False)
        assert RenderOptions.from_dict(options.to_dict()) == options

    def test_size_limits_match_render_target(self):
        from src.raycast.core import config, integrator

        assert config.MAX_IMAGE_WIDTH == integrator.MAX_IMAGE_WIDTH
        assert config.MAX_IMAGE_HEIGHT == integrator.MAX_IMAGE_HEIGHT

    def test_import_does_not_allocate_render_fields(self):
        """Importing the options leaves the kernels and scene arena unloaded."""
        code = (
            "import sys\n"
            "from src.raycast.core.config import RenderOptions\n"
            "RenderOptions(width_pixels=8, height_pixels=8, image_format='png')\n"
            "loaded = [m for m in ('src.raycast.core.integrator', 'src.raycast.scene.intersection') if m in sys.modules]\n"
            "assert not loaded, loaded\n"
        )
        result = subprocess.run([sys.executable, "-c", code], cwd=REPO_ROOT, capture_output=True, text=True)
        assert result.returncode == 0, result.stderr
