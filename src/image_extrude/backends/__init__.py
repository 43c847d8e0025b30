"""Tracing and rasterization backends.

The pipeline talks to these capability interfaces:
- TracerBackend: bitmap -> closed vector paths
- RasterizerBackend: vector content -> bitmap

Concrete adapters:
- OpenCVTracer: luminance threshold + contour extraction + corner smoothing
- ResvgRasterizer: full SVG rendering with resvg
"""

from image_extrude.backends.base import RasterizerBackend, TraceOptions, TracerBackend
from image_extrude.backends.opencv_tracer import OpenCVTracer
from image_extrude.backends.resvg_rasterizer import ResvgRasterizer

__all__ = [
    "OpenCVTracer",
    "RasterizerBackend",
    "ResvgRasterizer",
    "TraceOptions",
    "TracerBackend",
]
