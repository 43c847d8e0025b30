"""Exception hierarchy for Image Extrude."""

from typing import Any


class ImageExtrudeError(Exception):
    """Base exception for all Image Extrude errors.

    Attributes:
        stage: Pipeline stage that raised the error
        context: Numeric or textual details relevant to the failure
    """

    stage: str = "pipeline"

    def __init__(self, message: str, **context: Any) -> None:
        self.context = context
        super().__init__(message)


class FetchError(ImageExtrudeError):
    """Remote image bytes could not be retrieved."""

    stage = "resolve"

    def __init__(self, url: str, reason: str, status_code: int | None = None) -> None:
        self.url = url
        self.reason = reason
        self.status_code = status_code
        super().__init__(
            f"Failed to fetch '{url}': {reason}",
            url=url,
            status_code=status_code,
        )


class DecodeError(ImageExtrudeError):
    """Image payload could not be parsed into usable bytes or content."""

    stage = "decode"

    def __init__(self, reason: str, mime_type: str | None = None) -> None:
        self.reason = reason
        self.mime_type = mime_type
        super().__init__(f"Could not decode image: {reason}", mime_type=mime_type)


class TraceError(ImageExtrudeError):
    """Raster tracing produced no usable paths."""

    stage = "trace"

    def __init__(self, reason: str, threshold: int | None = None) -> None:
        self.reason = reason
        self.threshold = threshold
        label = "auto" if not threshold else str(threshold)
        super().__init__(
            f"Tracing failed: {reason} (threshold: {label})",
            threshold=threshold,
        )


class GeometryError(ImageExtrudeError):
    """Degenerate shape or invalid scale derivation."""

    stage = "geometry"

    def __init__(self, reason: str, **context: Any) -> None:
        self.reason = reason
        details = ", ".join(f"{key}={value!r}" for key, value in context.items())
        message = f"Geometry error: {reason}"
        if details:
            message = f"{message} ({details})"
        super().__init__(message, **context)


class ExportError(ImageExtrudeError):
    """Packaging failed to serialize the given solids."""

    stage = "export"

    def __init__(self, format_name: str, reason: str) -> None:
        self.format_name = format_name
        self.reason = reason
        super().__init__(f"{format_name} export failed: {reason}", format=format_name)


class EngineInitError(ImageExtrudeError):
    """A tracing or rasterization engine could not be initialized."""

    stage = "engine"

    def __init__(self, engine: str, reason: str) -> None:
        self.engine = engine
        self.reason = reason
        super().__init__(f"Failed to initialize {engine}: {reason}", engine=engine)
