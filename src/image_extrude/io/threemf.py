"""3MF package export.

Layout of the package:
- ``3D/3dmodel.model``: one mesh object per solid (``Part-1`` ...), one
  assembly object whose components reference every mesh, and one build item
  referencing the assembly
- ``[Content_Types].xml`` and ``_rels/.rels``: OPC boilerplate
"""

import io
import zipfile
from collections.abc import Sequence
from xml.etree import ElementTree as ET

import structlog

from image_extrude.config import ExportConfig
from image_extrude.domain import Solid
from image_extrude.exceptions import ExportError

logger = structlog.get_logger(__name__)

FORMAT_NAME = "3MF"

CORE_NAMESPACE = "http://schemas.microsoft.com/3dmanufacturing/core/2015/02"
MODEL_PATH = "3D/3dmodel.model"
CONTENT_TYPES_PATH = "[Content_Types].xml"
RELS_PATH = "_rels/.rels"

CONTENT_TYPES_XML = (
    '<?xml version="1.0" encoding="UTF-8"?>\n'
    '<Types xmlns="http://schemas.openxmlformats.org/package/2006/content-types">'
    '<Default Extension="rels" '
    'ContentType="application/vnd.openxmlformats-package.relationships+xml"/>'
    '<Default Extension="model" '
    'ContentType="application/vnd.ms-package.3dmanufacturing-3dmodel+xml"/>'
    "</Types>"
)

RELS_XML = (
    '<?xml version="1.0" encoding="UTF-8"?>\n'
    '<Relationships xmlns="http://schemas.openxmlformats.org/package/2006/relationships">'
    f'<Relationship Id="rel0" Target="/{MODEL_PATH}" '
    'Type="http://schemas.microsoft.com/3dmanufacturing/2013/01/3dmodel"/>'
    "</Relationships>"
)


def _format(value: float, precision: int) -> str:
    return f"{float(value):.{precision}g}"


def _add_mesh_object(
    resources: ET.Element,
    object_id: int,
    name: str,
    solid: Solid,
    precision: int,
) -> None:
    obj = ET.SubElement(resources, "object", id=str(object_id), type="model", name=name)
    mesh = ET.SubElement(obj, "mesh")

    vertices = ET.SubElement(mesh, "vertices")
    for x, y, z in solid.vertices:
        ET.SubElement(
            vertices,
            "vertex",
            x=_format(x, precision),
            y=_format(y, precision),
            z=_format(z, precision),
        )

    triangles = ET.SubElement(mesh, "triangles")
    for v1, v2, v3 in solid.faces:
        ET.SubElement(triangles, "triangle", v1=str(int(v1)), v2=str(int(v2)), v3=str(int(v3)))


def build_model_xml(solids: Sequence[Solid], config: ExportConfig | None = None) -> bytes:
    """Build the ``3D/3dmodel.model`` document.

    Args:
        solids: Meshes to include, one object each
        config: Export settings (metadata, names, precision)

    Returns:
        UTF-8 encoded XML
    """
    config = config or ExportConfig()

    model = ET.Element("model", unit="millimeter", xmlns=CORE_NAMESPACE)
    model.set("xml:lang", "en-US")
    for name, value in (
        ("Title", config.title),
        ("Description", config.description),
        ("Application", config.application),
    ):
        metadata = ET.SubElement(model, "metadata", name=name)
        metadata.text = value

    resources = ET.SubElement(model, "resources")
    for index, solid in enumerate(solids, start=1):
        name = f"{config.part_name_prefix}-{index}"
        _add_mesh_object(resources, index, name, solid, config.precision)

    assembly_id = len(solids) + 1
    assembly = ET.SubElement(
        resources,
        "object",
        id=str(assembly_id),
        type="model",
        name=config.assembly_name,
    )
    components = ET.SubElement(assembly, "components")
    for index in range(1, len(solids) + 1):
        ET.SubElement(components, "component", objectid=str(index))

    build = ET.SubElement(model, "build")
    ET.SubElement(build, "item", objectid=str(assembly_id))

    return ET.tostring(model, encoding="utf-8", xml_declaration=True)


def export_3mf(solids: Sequence[Solid], config: ExportConfig | None = None) -> bytes:
    """Package solids as a 3MF file.

    Args:
        solids: One or more meshes
        config: Export settings

    Returns:
        3MF (zip) file bytes

    Raises:
        ExportError: If no solids are given, a solid is empty, or packaging fails
    """
    if not solids:
        raise ExportError(FORMAT_NAME, "no solids to export")
    for index, solid in enumerate(solids, start=1):
        if solid.num_triangles == 0:
            raise ExportError(FORMAT_NAME, f"solid {index} has no triangles")

    try:
        model_xml = build_model_xml(solids, config)
        buffer = io.BytesIO()
        with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_DEFLATED) as archive:
            archive.writestr(MODEL_PATH, model_xml)
            archive.writestr(CONTENT_TYPES_PATH, CONTENT_TYPES_XML)
            archive.writestr(RELS_PATH, RELS_XML)
    except (OSError, ValueError, zipfile.BadZipFile) as e:
        raise ExportError(FORMAT_NAME, str(e)) from e

    data = buffer.getvalue()
    logger.debug("Exported 3MF", bytes=len(data), objects=len(solids))
    return data
