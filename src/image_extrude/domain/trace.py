"""Traced outline representation.

Tracer backends produce closed paths made of straight corner segments and
cubic Bezier segments, in bitmap pixel coordinates (Y-down).
"""

from dataclasses import dataclass, field
from enum import Enum, auto

Coordinate = tuple[float, float]


class SegmentType(Enum):
    """Segment type on a traced path."""

    LINE = auto()
    CUBIC = auto()


@dataclass(frozen=True, slots=True)
class PathSegment:
    """A single segment ending at ``end``.

    Attributes:
        segment_type: LINE or CUBIC
        end: End point of the segment
        controls: Two control points for CUBIC segments, empty for LINE
    """

    segment_type: SegmentType
    end: Coordinate
    controls: tuple[Coordinate, ...] = ()

    @classmethod
    def line(cls, end: Coordinate) -> "PathSegment":
        return cls(SegmentType.LINE, end)

    @classmethod
    def cubic(cls, c1: Coordinate, c2: Coordinate, end: Coordinate) -> "PathSegment":
        return cls(SegmentType.CUBIC, end, (c1, c2))


@dataclass
class TracedPath:
    """A closed traced outline.

    Attributes:
        start: First point of the path
        segments: Segments following ``start``; the last one ends at ``start``
        area: Enclosed area in square pixels, as measured by the tracer
    """

    start: Coordinate
    segments: list[PathSegment] = field(default_factory=list)
    area: float = 0.0

    def to_svg_path_data(self, size: float = 1.0) -> str:
        """Render the path as SVG path data scaled by ``size``."""
        parts = [f"M{format_number(self.start[0] * size)},{format_number(self.start[1] * size)}"]
        for segment in self.segments:
            if segment.segment_type is SegmentType.LINE:
                x, y = segment.end
                parts.append(f"L{format_number(x * size)},{format_number(y * size)}")
            else:
                coords = " ".join(
                    f"{format_number(px * size)},{format_number(py * size)}"
                    for px, py in (*segment.controls, segment.end)
                )
                parts.append(f"C{coords}")
        parts.append("Z")
        return "".join(parts)


@dataclass
class TraceResult:
    """Output of a tracer backend.

    Attributes:
        paths: Closed traced outlines
        width: Source bitmap width in pixels
        height: Source bitmap height in pixels
        threshold: Brightness threshold actually applied (1-255)
    """

    paths: list[TracedPath]
    width: int
    height: int
    threshold: int | None = None

    def is_empty(self) -> bool:
        return len(self.paths) == 0


def format_number(value: float) -> str:
    """Format a coordinate with at most three decimals."""
    return f"{value:.3f}".rstrip("0").rstrip(".")
