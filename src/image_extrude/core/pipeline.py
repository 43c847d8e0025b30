"""Pipeline orchestration.

This module coordinates a full image-to-solid run:

1. Resolve the source into bytes and a MIME type
2. Pick the effective mode (sample only applies to vector content)
3. Build a centered cross-section by sampling or tracing
4. Extrude it to the requested height

Errors always propagate from ``make_cross_section``. ``run`` either
propagates them or, under FailurePolicy.FALLBACK, logs them and returns the
placeholder solid instead.
"""

from dataclasses import dataclass

import requests
import structlog

from image_extrude.backends.base import RasterizerBackend, TracerBackend
from image_extrude.backends.opencv_tracer import OpenCVTracer
from image_extrude.backends.resvg_rasterizer import ResvgRasterizer
from image_extrude.config import ExtrusionParameters, ImageExtrudeSettings
from image_extrude.core.geometry import CrossSection, create_empty_solid
from image_extrude.core.sampling import sample_svg
from image_extrude.core.tracing import trace_image
from image_extrude.domain import (
    FailurePolicy,
    ImageSource,
    InlineData,
    ProcessingMode,
    RemoteUrl,
    Solid,
    is_vector_mime,
)
from image_extrude.exceptions import ImageExtrudeError
from image_extrude.io.source import decode_vector_content, resolve_source
from image_extrude.utils import PipelineLogger, PipelineStats

logger = structlog.get_logger(__name__)


@dataclass
class PipelineResult:
    """Outcome of a pipeline run.

    Attributes:
        solid: Extruded solid, or the placeholder solid after a fallback
        mode: Effective processing mode, None if the run failed before it was known
        coerced: Whether sample mode was replaced by trace
        stats: Stage timings and flags
        error: The error replaced by the placeholder solid, if any
    """

    solid: Solid
    mode: ProcessingMode | None
    coerced: bool
    stats: PipelineStats
    error: ImageExtrudeError | None = None

    @property
    def fell_back(self) -> bool:
        return self.error is not None


def describe_source(source: ImageSource) -> str:
    """Short description of a source for logs."""
    if isinstance(source, RemoteUrl):
        return source.url
    return source.file_name or f"<inline {source.mime_type}, {len(source.data)} bytes>"


class ImageExtruder:
    """Main orchestrator turning images into extruded solids.

    Example:
        extruder = ImageExtruder(get_default_settings())
        result = extruder.run(source, ProcessingMode.TRACE, ExtrusionParameters())
        solid = result.solid
    """

    def __init__(
        self,
        settings: ImageExtrudeSettings | None = None,
        tracer: TracerBackend | None = None,
        rasterizer: RasterizerBackend | None = None,
        session: requests.Session | None = None,
    ) -> None:
        """Initialize the extruder.

        Args:
            settings: Application settings
            tracer: Tracer backend (OpenCV by default)
            rasterizer: Rasterizer backend used to trace vector content (resvg by default)
            session: requests session used for remote sources
        """
        self.settings = settings or ImageExtrudeSettings()
        self.tracer = tracer or OpenCVTracer()
        self.rasterizer = rasterizer or ResvgRasterizer(self.settings.raster)
        self.session = session

    def resolve_mode(
        self,
        requested: ProcessingMode | None,
        mime_type: str | None,
        pipeline_logger: PipelineLogger | None = None,
    ) -> tuple[ProcessingMode, bool]:
        """Pick the effective processing mode.

        Sample mode only applies to vector content; for anything else it is
        replaced by trace mode and a warning is logged. Without a requested
        mode, vector content is sampled and bitmaps are traced.

        Returns:
            Tuple of (effective mode, whether the requested mode was coerced)
        """
        pipeline_logger = pipeline_logger or PipelineLogger()
        is_vector = is_vector_mime(mime_type)

        if requested is None:
            requested = ProcessingMode.SAMPLE if is_vector else ProcessingMode.TRACE

        effective = requested
        if requested is ProcessingMode.SAMPLE and not is_vector:
            effective = ProcessingMode.TRACE

        pipeline_logger.log_mode(requested.value, effective.value, mime_type)
        return effective, effective is not requested

    def make_cross_section(
        self,
        source: ImageSource,
        mode: ProcessingMode | None = None,
        params: ExtrusionParameters | None = None,
    ) -> CrossSection:
        """Build the centered cross-section for a source.

        Raises:
            ImageExtrudeError: Any stage failure (never falls back)
        """
        section, _, _ = self._cross_section(
            source, mode, params or ExtrusionParameters(), PipelineLogger()
        )
        return section

    def run(
        self,
        source: ImageSource,
        mode: ProcessingMode | None = None,
        params: ExtrusionParameters | None = None,
        on_failure: FailurePolicy = FailurePolicy.PROPAGATE,
    ) -> PipelineResult:
        """Run the full pipeline.

        Args:
            source: Image to extrude
            mode: Requested mode, None to pick from the MIME type
            params: Extrusion parameters
            on_failure: FALLBACK returns the placeholder solid on any
                pipeline error, PROPAGATE re-raises it

        Returns:
            PipelineResult

        Raises:
            ImageExtrudeError: Under FailurePolicy.PROPAGATE
        """
        params = params or ExtrusionParameters()
        pipeline_logger = PipelineLogger()
        pipeline_logger.log_run_start(
            describe_source(source), mode.value if mode else "auto"
        )

        try:
            section, effective, coerced = self._cross_section(
                source, mode, params, pipeline_logger
            )
            with pipeline_logger.stage("extrude"):
                solid = section.extrude(params.height_mm)
        except ImageExtrudeError as e:
            if on_failure is FailurePolicy.PROPAGATE:
                pipeline_logger.log_failure(e, e.stage)
                raise

            pipeline_logger.log_fallback(e, e.stage)
            stats = pipeline_logger.stats
            effective_mode = ProcessingMode(stats.effective_mode) if stats.effective_mode else None
            return PipelineResult(
                solid=create_empty_solid(),
                mode=effective_mode,
                coerced=stats.mode_coerced,
                stats=stats,
                error=e,
            )

        pipeline_logger.log_run_complete(solid.num_triangles)
        return PipelineResult(
            solid=solid,
            mode=effective,
            coerced=coerced,
            stats=pipeline_logger.stats,
        )

    def extrude_image(
        self,
        source: ImageSource,
        mode: ProcessingMode | None = None,
        params: ExtrusionParameters | None = None,
        on_failure: FailurePolicy = FailurePolicy.PROPAGATE,
    ) -> Solid:
        """Run the pipeline and return only the solid."""
        return self.run(source, mode, params, on_failure).solid

    def _cross_section(
        self,
        source: ImageSource,
        mode: ProcessingMode | None,
        params: ExtrusionParameters,
        pipeline_logger: PipelineLogger,
    ) -> tuple[CrossSection, ProcessingMode, bool]:
        with pipeline_logger.stage("resolve"):
            image = resolve_source(source, self.settings, self.session)

        effective, coerced = self.resolve_mode(mode, image.mime_type, pipeline_logger)

        if effective is ProcessingMode.SAMPLE:
            with pipeline_logger.stage("sample"):
                section = sample_svg(
                    decode_vector_content(image.data),
                    params.max_width_mm,
                    self.settings.sampling.max_error,
                )
            return section, effective, coerced

        bitmap = self._bitmap_for(image, params, pipeline_logger)
        with pipeline_logger.stage("trace"):
            section = trace_image(bitmap, self.tracer, params, self.settings)
        return section, effective, coerced

    def _bitmap_for(
        self,
        image: InlineData,
        params: ExtrusionParameters,
        pipeline_logger: PipelineLogger,
    ) -> bytes:
        if not image.is_vector:
            return image.data

        width_px = self.settings.raster.width_for(params.max_width_mm)
        logger.debug("Rasterizing vector source for tracing", width_px=width_px)
        with pipeline_logger.stage("rasterize"):
            return self.rasterizer.rasterize(decode_vector_content(image.data), width_px)
