"""resvg implementation of the rasterizer backend.

The whole SVG canvas is rendered as a browser would draw it: fills, strokes,
colours and paint order all apply, and uncovered areas stay transparent.
"""

import importlib
import io
import re
from types import ModuleType
from xml.etree import ElementTree as ET

import structlog
from PIL import Image

from image_extrude.backends.base import RasterizerBackend
from image_extrude.config import RasterConfig
from image_extrude.core.engine import EngineInitializer
from image_extrude.exceptions import DecodeError

logger = structlog.get_logger(__name__)

SVG_MIME_TYPE = "image/svg+xml"

_LENGTH = re.compile(r"^\s*([0-9]*\.?[0-9]+(?:[eE][-+]?[0-9]+)?)\s*(px)?\s*$")


def _load_resvg() -> ModuleType:
    return importlib.import_module("resvg_py")


RESVG_ENGINE: EngineInitializer[ModuleType] = EngineInitializer("resvg", _load_resvg)


def _length(value: str | None) -> float | None:
    match = _LENGTH.match(value or "")
    return float(match.group(1)) if match else None


def intrinsic_aspect(root: ET.Element) -> float | None:
    """Get height / width of an SVG document's canvas.

    Absolute ``width`` and ``height`` attributes win over the viewBox, as
    they do when resvg sizes the canvas.

    Returns:
        The aspect ratio, or None when the document does not declare a
        usable size
    """
    width = _length(root.get("width"))
    height = _length(root.get("height"))
    if not (width and height):
        # A missing dimension follows the viewBox aspect
        parts = re.split(r"[\s,]+", (root.get("viewBox") or "").strip())
        try:
            _, _, width, height = (float(part) for part in parts)
        except ValueError:
            return None
    if width <= 0 or height <= 0:
        return None
    return height / width


class ResvgRasterizer(RasterizerBackend):
    """Renders SVG documents to PNG with resvg.

    Example:
        rasterizer = ResvgRasterizer()
        png = rasterizer.rasterize(svg_text, target_width_px=1000)
    """

    name = "resvg"

    def __init__(
        self,
        config: RasterConfig | None = None,
        engine: EngineInitializer[ModuleType] | None = None,
    ) -> None:
        self.config = config or RasterConfig()
        self._engine = engine or RESVG_ENGINE

    def rasterize(self, content: str, target_width_px: int | None = None) -> bytes:
        """Render SVG content to a PNG of the requested width.

        When fitting the width would make the bitmap taller than
        ``max_side_px``, the height is fitted to ``max_side_px`` instead.

        Raises:
            DecodeError: If the SVG cannot be parsed or rendered
            EngineInitError: If resvg cannot be loaded
        """
        resvg = self._engine.get()
        try:
            root = ET.fromstring(content)
        except ET.ParseError as e:
            raise DecodeError(f"invalid SVG content: {e}", mime_type=SVG_MIME_TYPE) from e
        if not root.tag.endswith("svg"):
            raise DecodeError(f"root element is <{root.tag}>, not <svg>", mime_type=SVG_MIME_TYPE)

        max_side = self.config.max_side_px
        width_px = min(target_width_px or self.config.default_width_px, max_side)
        aspect = intrinsic_aspect(root)
        if aspect is not None and aspect * width_px > max_side:
            png = self._render(resvg, content, height=max_side)
        else:
            png = self._render(resvg, content, width=width_px)

        with Image.open(io.BytesIO(png)) as image:
            size = image.size
        logger.debug(
            "Rasterized vector content", rasterizer=self.name, width=size[0], height=size[1]
        )
        return png

    @staticmethod
    def _render(resvg: ModuleType, content: str, **fit: int) -> bytes:
        try:
            # Older releases return a list of ints
            return bytes(resvg.svg_to_bytes(svg_string=content, **fit))
        except Exception as e:
            raise DecodeError(f"SVG rendering failed: {e}", mime_type=SVG_MIME_TYPE) from e
