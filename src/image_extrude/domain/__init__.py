"""Domain models for image-extrude.

This module contains the value types that flow through the pipeline. All
models are independent of the geometry, tracing and export libraries.

Key classes:
- RemoteUrl / InlineData: Where the image bytes come from
- ProcessingMode: Trace or sample
- FailurePolicy: Fallback or propagate
- TracedPath / PathSegment / TraceResult: Tracer output
- Solid: Extruded triangle mesh
"""

from image_extrude.domain.mesh import Solid
from image_extrude.domain.source import (
    FailurePolicy,
    ImageSource,
    InlineData,
    ProcessingMode,
    RemoteUrl,
    is_vector_mime,
)
from image_extrude.domain.trace import PathSegment, SegmentType, TracedPath, TraceResult

__all__: list[str] = [
    # Enums
    "FailurePolicy",
    "ProcessingMode",
    "SegmentType",
    # Sources
    "ImageSource",
    "InlineData",
    "RemoteUrl",
    "is_vector_mime",
    # Tracing
    "PathSegment",
    "TraceResult",
    "TracedPath",
    # Meshes
    "Solid",
]
