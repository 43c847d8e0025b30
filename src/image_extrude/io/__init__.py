"""I/O layer for image-extrude.

This module moves bytes in and out of the pipeline.

Key responsibilities:
- Resolve image sources (data URLs, files, remote URLs)
- Package solids as GLB or 3MF
- Write output files only after serialization succeeded

Key functions:
- resolve_source: Materialize a source into bytes and a MIME type
- export_glb / export_3mf: Serialize solids
- export_solids / write_output: Dispatch by ExportFormat
"""

from image_extrude.io.export import ExportFormat, export_solids, write_output
from image_extrude.io.glb import export_glb
from image_extrude.io.source import (
    decode_vector_content,
    guess_mime_type,
    load_file,
    parse_data_url,
    resolve_source,
    source_from_value,
    to_data_url,
)
from image_extrude.io.threemf import export_3mf

__all__ = [
    "ExportFormat",
    "decode_vector_content",
    "export_3mf",
    "export_glb",
    "export_solids",
    "guess_mime_type",
    "load_file",
    "parse_data_url",
    "resolve_source",
    "source_from_value",
    "to_data_url",
    "write_output",
]
