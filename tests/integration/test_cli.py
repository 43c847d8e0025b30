"""Integration tests for the command-line interface."""

import io
import zipfile
from pathlib import Path

import pytest
from PIL import Image
from typer.testing import CliRunner

from image_extrude import __version__
from image_extrude.cli.app import app

runner = CliRunner()

SQUARE_SVG = (
    '<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 10 10">'
    '<rect x="0" y="0" width="10" height="10"/></svg>'
)


def write_png(path: Path, color: tuple[int, int, int]) -> Path:
    buffer = io.BytesIO()
    Image.new("RGB", (32, 32), color).save(buffer, format="PNG")
    path.write_bytes(buffer.getvalue())
    return path


class TestExtrudeCommand:
    """Tests for successful runs."""

    def test_default_star_glb(self, tmp_path):
        """Test the built-in star is used without an image."""
        output = tmp_path / "star.glb"
        result = runner.invoke(app, [str(output)])
        assert result.exit_code == 0, result.output
        assert output.read_bytes()[:4] == b"glTF"

    def test_svg_to_3mf(self, tmp_path):
        """Test an SVG file is extruded into a 3MF package."""
        image = tmp_path / "square.svg"
        image.write_text(SQUARE_SVG)
        output = tmp_path / "square.3mf"

        result = runner.invoke(app, [str(output), "--image", str(image), "-h", "2", "-q"])

        assert result.exit_code == 0, result.output
        with zipfile.ZipFile(output) as archive:
            model = archive.read("3D/3dmodel.model").decode("utf-8")
        assert 'z="2"' in model
        assert 'unit="millimeter"' in model

    def test_sample_png_is_traced(self, tmp_path):
        """Test sample mode on a bitmap warns and traces."""
        image = tmp_path / "dark.png"
        buffer = io.BytesIO()
        canvas = Image.new("RGB", (32, 32), (255, 255, 255))
        canvas.paste((0, 0, 0), (8, 8, 24, 24))
        canvas.save(buffer, format="PNG")
        image.write_bytes(buffer.getvalue())
        output = tmp_path / "dark.glb"

        result = runner.invoke(app, [str(output), "-i", str(image), "--mode", "sample"])

        assert result.exit_code == 0, result.output
        assert "traced instead" in result.output
        assert output.exists()

    def test_version(self):
        """Test --version prints the version and exits cleanly."""
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output


class TestExtrudeFailures:
    """Tests for rejected and failing runs."""

    def test_unsupported_extension(self, tmp_path):
        output = tmp_path / "star.stl"
        result = runner.invoke(app, [str(output)])
        assert result.exit_code == 1
        assert "Unsupported output file" in result.output
        assert not output.exists()

    def test_missing_image(self, tmp_path):
        result = runner.invoke(app, [str(tmp_path / "out.glb"), "-i", str(tmp_path / "nope.png")])
        assert result.exit_code == 1
        assert "Input file not found" in result.output

    def test_invalid_mode(self, tmp_path):
        result = runner.invoke(app, [str(tmp_path / "out.glb"), "--mode", "carve"])
        assert result.exit_code == 1
        assert "Invalid mode" in result.output

    @pytest.mark.parametrize("args", [["-h", "0"], ["-w", "-5"], ["-t", "300"]])
    def test_invalid_parameters(self, tmp_path, args):
        output = tmp_path / "out.glb"
        result = runner.invoke(app, [str(output), *args])
        assert result.exit_code == 1
        assert "Invalid parameters" in result.output
        assert not output.exists()

    def test_conflicting_sources(self, tmp_path):
        image = tmp_path / "square.svg"
        image.write_text(SQUARE_SVG)
        result = runner.invoke(
            app, [str(tmp_path / "out.glb"), "-i", str(image), "--url", "https://example.com/a.svg"]
        )
        assert result.exit_code == 1

    def test_verbose_and_quiet(self, tmp_path):
        result = runner.invoke(app, [str(tmp_path / "out.glb"), "-v", "-q"])
        assert result.exit_code == 1

    def test_blank_bitmap(self, tmp_path):
        """Test an image with nothing to trace fails without writing output."""
        image = write_png(tmp_path / "white.png", (255, 255, 255))
        output = tmp_path / "white.glb"

        result = runner.invoke(app, [str(output), "-i", str(image)])

        assert result.exit_code == 1
        assert "Tracing failed" in result.output
        assert "Stage: trace" in result.output
        assert not output.exists()
