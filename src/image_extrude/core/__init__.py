"""Core processing algorithms for image-extrude.

This module contains the core algorithms for:

- Geometry operations (even-odd polygon sets, transforms, extrusion)
- Vector sampling (SVG outlines flattened within a tolerance)
- Raster tracing (bitmap -> paths -> cross-section)
- Engine initialization (one-time, thread-safe loading of native engines)

Key functions:
- sample_svg / svg_to_cross_section: SVG content to a dimensioned cross-section
- trace_image: Bitmap to a dimensioned cross-section
- center_cross_section / fit_to_size: Placement helpers
- create_empty_solid: Placeholder solid returned on fallback

Key classes:
- CrossSection: 2D filled shape used as an extrusion profile
- EngineInitializer: Three-state initialization guard

The orchestrator lives in ``image_extrude.core.pipeline`` (ImageExtruder).
"""

from image_extrude.core.engine import EngineInitializer, EngineState
from image_extrude.core.geometry import (
    Bounds,
    CrossSection,
    FillRule,
    center_cross_section,
    create_empty_solid,
    fit_to_size,
)
from image_extrude.core.sampling import sample_svg, sample_svg_polygons, svg_to_cross_section
from image_extrude.core.tracing import trace_image, trace_options_from

__all__ = [
    # Geometry
    "Bounds",
    "CrossSection",
    "FillRule",
    "center_cross_section",
    "create_empty_solid",
    "fit_to_size",
    # Engines
    "EngineInitializer",
    "EngineState",
    # Sampling
    "sample_svg",
    "sample_svg_polygons",
    "svg_to_cross_section",
    # Tracing
    "trace_image",
    "trace_options_from",
]
