"""Export format dispatch and output writing."""

from collections.abc import Sequence
from enum import Enum
from pathlib import Path

from image_extrude.config import ExportConfig
from image_extrude.domain import Solid
from image_extrude.exceptions import ExportError
from image_extrude.io.glb import export_glb
from image_extrude.io.threemf import export_3mf


class ExportFormat(str, Enum):
    """Supported mesh container formats."""

    GLB = "glb"
    THREE_MF = "3mf"

    @classmethod
    def from_path(cls, path: str | Path) -> "ExportFormat":
        """Pick the format from a file extension.

        Raises:
            ExportError: If the extension is not .glb or .3mf
        """
        suffix = Path(path).suffix.lower().lstrip(".")
        for export_format in cls:
            if export_format.value == suffix:
                return export_format
        raise ExportError(suffix.upper() or "unknown", f"unsupported output extension for '{path}'")


def export_solids(
    solids: Sequence[Solid],
    export_format: ExportFormat,
    config: ExportConfig | None = None,
) -> bytes:
    """Serialize solids in the given format.

    GLB holds a single solid; 3MF packages any number as one assembly.

    Raises:
        ExportError: If serialization fails or GLB receives other than one solid
    """
    if export_format is ExportFormat.GLB:
        if len(solids) != 1:
            raise ExportError("GLB", f"expected exactly one solid, got {len(solids)}")
        return export_glb(solids[0], config)
    return export_3mf(solids, config)


def write_output(
    path: Path,
    solids: Sequence[Solid],
    config: ExportConfig | None = None,
) -> int:
    """Serialize solids and write them to ``path``.

    Nothing is written unless serialization succeeds.

    Returns:
        Number of bytes written

    Raises:
        ExportError: If serialization or writing fails
    """
    export_format = ExportFormat.from_path(path)
    data = export_solids(solids, export_format, config)
    try:
        path.write_bytes(data)
    except OSError as e:
        raise ExportError(export_format.name, f"cannot write '{path}': {e}") from e
    return len(data)
