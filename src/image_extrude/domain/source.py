"""Image sources and request modes.

This module defines how an image reaches the pipeline:
- RemoteUrl: bytes must be fetched before processing
- InlineData: bytes are already present, with a MIME type
- ProcessingMode: trace a bitmap or sample vector outlines
- FailurePolicy: substitute a placeholder solid or propagate errors
"""

from dataclasses import dataclass
from enum import Enum

VECTOR_MIME_MARKER = "svg"


class ProcessingMode(str, Enum):
    """How the image is turned into a cross-section."""

    TRACE = "trace"
    SAMPLE = "sample"


class FailurePolicy(str, Enum):
    """What the orchestrator does when a stage fails.

    FALLBACK is the plugin-host convention (always return a solid),
    PROPAGATE is the command-line convention (report and exit non-zero).
    """

    FALLBACK = "fallback"
    PROPAGATE = "propagate"


def is_vector_mime(mime_type: str | None) -> bool:
    """Check whether a MIME type denotes vector (SVG) content."""
    return bool(mime_type) and VECTOR_MIME_MARKER in mime_type.lower()


@dataclass(frozen=True, slots=True)
class RemoteUrl:
    """An image that has to be fetched.

    Attributes:
        url: HTTP(S) location of the image
        mime_type: Declared MIME type, used when the server does not send one
        file_name: Original file name, if known
    """

    url: str
    mime_type: str | None = None
    file_name: str | None = None


@dataclass(frozen=True, slots=True)
class InlineData:
    """An image whose bytes are already available.

    Attributes:
        data: Raw file bytes (SVG text or an encoded bitmap)
        mime_type: MIME type such as "image/svg+xml" or "image/png"
        file_name: Original file name, if known
    """

    data: bytes
    mime_type: str
    file_name: str | None = None

    @property
    def is_vector(self) -> bool:
        """Whether the payload is vector content."""
        return is_vector_mime(self.mime_type)


ImageSource = RemoteUrl | InlineData
