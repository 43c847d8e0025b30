"""Binary glTF (GLB) export.

A single solid is written as one mesh with one PBR material of constant
colour, using trimesh's glTF exporter. Normals are omitted; viewers derive
flat normals from the triangles.
"""

import structlog
import trimesh
from trimesh.exchange.gltf import export_glb as _trimesh_export_glb
from trimesh.visual.material import PBRMaterial

from image_extrude.config import ExportConfig
from image_extrude.domain import Solid
from image_extrude.exceptions import ExportError

logger = structlog.get_logger(__name__)

FORMAT_NAME = "GLB"


def solid_to_trimesh(solid: Solid, config: ExportConfig | None = None) -> trimesh.Trimesh:
    """Wrap a solid in a trimesh mesh carrying the export material."""
    config = config or ExportConfig()
    mesh = trimesh.Trimesh(
        vertices=solid.vertices,
        faces=solid.faces,
        process=False,
    )
    material = PBRMaterial(
        name="default",
        baseColorFactor=list(config.base_color),
        metallicFactor=0.0,
        roughnessFactor=1.0,
        doubleSided=False,
    )
    mesh.visual = trimesh.visual.TextureVisuals(material=material)
    return mesh


def export_glb(solid: Solid, config: ExportConfig | None = None) -> bytes:
    """Serialize a solid as GLB.

    Args:
        solid: Mesh to export
        config: Export settings providing the material colour

    Returns:
        GLB file bytes

    Raises:
        ExportError: If the solid is empty or serialization fails
    """
    if solid.num_triangles == 0:
        raise ExportError(FORMAT_NAME, "solid has no triangles")

    try:
        scene = trimesh.Scene()
        scene.add_geometry(solid_to_trimesh(solid, config), geom_name=solid.name or "mesh")
        data = _trimesh_export_glb(scene, include_normals=False)
    except Exception as e:
        raise ExportError(FORMAT_NAME, str(e)) from e

    logger.debug("Exported GLB", bytes=len(data), triangles=solid.num_triangles)
    return data
