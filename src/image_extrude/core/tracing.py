"""Raster tracing path.

A bitmap is traced by a TracerBackend into closed paths, serialized as SVG in
pixel units and handed to the vector sampling path, so traced and sampled
images share the same scaling and flattening rules.
"""

import structlog

from image_extrude.backends.base import TraceOptions, TracerBackend
from image_extrude.config import ExtrusionParameters, ImageExtrudeSettings, TracingConfig
from image_extrude.core.geometry import CrossSection, center_cross_section
from image_extrude.core.sampling import svg_to_cross_section
from image_extrude.exceptions import TraceError

logger = structlog.get_logger(__name__)


def trace_options_from(
    params: ExtrusionParameters,
    config: TracingConfig | None = None,
) -> TraceOptions:
    """Build tracer options from request parameters and tracing settings."""
    config = config or TracingConfig()
    return TraceOptions(
        threshold=params.brightness_threshold,
        invert=params.invert_polarity,
        despeckle_area=params.despeckle_area_px,
        optimize_curves=config.optimize_curves,
        alpha_max=config.alpha_max,
        opt_tolerance=config.opt_tolerance,
    )


def trace_image(
    bitmap: bytes,
    tracer: TracerBackend,
    params: ExtrusionParameters | None = None,
    settings: ImageExtrudeSettings | None = None,
) -> CrossSection:
    """Trace a bitmap into a centered cross-section.

    Args:
        bitmap: Encoded image bytes
        tracer: Backend performing the trace
        params: Threshold, polarity, despeckle and target width
        settings: Tracing and sampling settings

    Returns:
        CrossSection centered at the origin, scaled to ``params.max_width_mm``
        when set

    Raises:
        DecodeError: If the bitmap cannot be decoded
        TraceError: If the tracer finds no paths
        GeometryError: If the traced outline is degenerate
    """
    params = params or ExtrusionParameters()
    settings = settings or ImageExtrudeSettings()
    options = trace_options_from(params, settings.tracing)

    result = tracer.trace(bitmap, options)
    if result.is_empty():
        raise TraceError("no paths produced", threshold=options.threshold)

    logger.debug(
        "Traced bitmap",
        tracer=tracer.name,
        paths=len(result.paths),
        width=result.width,
        height=result.height,
        threshold=result.threshold,
    )

    content = tracer.paths_to_vector_content(result, size=1.0)
    section = svg_to_cross_section(content, params.max_width_mm, settings.sampling.max_error)
    return center_cross_section(section)
