"""Integration tests for the plugin entry point."""

import base64
import io
from unittest.mock import MagicMock, patch

import pytest
import requests
from PIL import Image, ImageDraw

from image_extrude.core.geometry import EMPTY_SOLID_SIZE
from image_extrude.core.pipeline import ImageExtruder
from image_extrude.plugin import PARAMS_SCHEMA, default_params, main


def extent(solid) -> tuple[float, float, float]:
    lo, hi = solid.bounds()
    return hi[0] - lo[0], hi[1] - lo[1], hi[2] - lo[2]


def is_placeholder(solid) -> bool:
    return max(extent(solid)) <= EMPTY_SOLID_SIZE + 1e-9


def png_data_url() -> str:
    image = Image.new("RGB", (64, 64), (255, 255, 255))
    ImageDraw.Draw(image).rectangle((16, 16, 47, 47), fill=(0, 0, 0))
    buffer = io.BytesIO()
    image.save(buffer, format="PNG")
    return "data:image/png;base64," + base64.b64encode(buffer.getvalue()).decode("ascii")


class TestParamsSchema:
    """Tests for the parameter schema."""

    def test_defaults(self):
        """Test every parameter has a default."""
        params = default_params()
        assert set(params) == set(PARAMS_SCHEMA)
        assert params["mode"] == "trace"
        assert params["height"] == 1
        assert params["maxWidth"] == 50
        assert params["imageFile"]["fileName"] == "star.svg"

    def test_defaults_are_copies(self):
        """Test callers cannot mutate the schema through the defaults."""
        params = default_params()
        params["imageFile"]["fileName"] = "changed.svg"
        assert PARAMS_SCHEMA["imageFile"]["default"]["fileName"] == "star.svg"


class TestMain:
    """Tests for plugin main."""

    def test_default_star(self):
        """Test the defaults trace the built-in star at 50 mm."""
        width, _, height = extent(main())
        assert width == pytest.approx(50.0, rel=0.005)
        assert height == pytest.approx(1.0)

    def test_sample_mode(self):
        """Test sample mode uses the vector outline."""
        width, _, height = extent(main({"mode": "sample", "height": 2.5, "maxWidth": 30}))
        assert width == pytest.approx(30.0, rel=0.005)
        assert height == pytest.approx(2.5)

    def test_sample_png_is_coerced(self):
        """Test sample mode on a bitmap traces instead of failing."""
        params = {
            "mode": "sample",
            "maxWidth": 20,
            "imageFile": {"dataUrl": png_data_url(), "fileType": "image/png"},
        }
        width, depth, _ = extent(main(params))
        assert width == pytest.approx(20.0, rel=0.005)
        assert depth == pytest.approx(20.0, rel=0.05)

    @pytest.mark.parametrize(
        "params",
        [
            {"height": 0},
            {"height": 0.05},
            {"maxWidth": -1},
            {"threshold": 300},
            {"mode": "carve"},
            {"imageFile": {}},
            {"imageFile": {"imageUrl": "", "dataUrl": ""}},
            {"imageFile": {"dataUrl": "data:image/png;base64,abc"}},
            {"imageFile": "not-a-mapping"},
            {"imageFile": ["data:image/png;base64,abc"]},
            {"imageFile": {"dataUrl": 42}},
        ],
    )
    def test_placeholder_on_bad_input(self, params):
        """Test invalid parameters and images give the placeholder solid."""
        solid = main(params)
        assert solid.num_triangles > 0
        assert is_placeholder(solid)

    def test_placeholder_on_fetch_failure(self):
        """Test network failures give the placeholder solid."""
        session = MagicMock()
        session.get.side_effect = requests.ConnectionError("unreachable")
        params = {"imageFile": {"imageUrl": "https://example.com/logo.png"}}

        solid = main(params, extruder=ImageExtruder(session=session))

        assert is_placeholder(solid)
        session.get.assert_called_once()

    def test_placeholder_on_blank_image(self):
        """Test an image with nothing to trace gives the placeholder solid."""
        image = Image.new("RGB", (16, 16), (255, 255, 255))
        buffer = io.BytesIO()
        image.save(buffer, format="PNG")
        data_url = "data:image/png;base64," + base64.b64encode(buffer.getvalue()).decode("ascii")

        assert is_placeholder(main({"imageFile": {"dataUrl": data_url}}))

    def test_placeholder_on_oversized_bitmap(self):
        """Test a bitmap over the decoder pixel limit gives the placeholder solid."""
        with patch.object(Image, "MAX_IMAGE_PIXELS", 100):
            solid = main({"imageFile": {"dataUrl": png_data_url(), "fileType": "image/png"}})
        assert is_placeholder(solid)
