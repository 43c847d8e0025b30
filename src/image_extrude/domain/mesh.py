"""Solid mesh produced by extrusion.

A Solid is immutable once built: its flat buffers are read-only numpy arrays,
so it can be handed to any number of exporters without copying.
"""

from dataclasses import dataclass

import numpy as np


@dataclass(frozen=True, eq=False)
class Solid:
    """An extruded triangle mesh.

    Attributes:
        vertex_positions: Flat float32 buffer, 3 floats per vertex
        triangle_indices: Flat uint32 buffer, 3 indices per triangle
        name: Optional part name used by exporters
    """

    vertex_positions: np.ndarray
    triangle_indices: np.ndarray
    name: str | None = None

    def __post_init__(self) -> None:
        positions = np.ascontiguousarray(self.vertex_positions, dtype=np.float32).reshape(-1)
        indices = np.ascontiguousarray(self.triangle_indices, dtype=np.uint32).reshape(-1)
        if positions.size % 3 or indices.size % 3:
            raise ValueError("Solid buffers must hold whole vertices and triangles")
        if indices.size and int(indices.max()) >= positions.size // 3:
            raise ValueError("Triangle index out of range")
        positions.setflags(write=False)
        indices.setflags(write=False)
        object.__setattr__(self, "vertex_positions", positions)
        object.__setattr__(self, "triangle_indices", indices)

    @classmethod
    def from_arrays(
        cls,
        vertices: np.ndarray,
        faces: np.ndarray,
        name: str | None = None,
    ) -> "Solid":
        """Build a solid from (n, 3) vertex and (m, 3) face arrays."""
        return cls(
            vertex_positions=np.asarray(vertices, dtype=np.float32),
            triangle_indices=np.asarray(faces, dtype=np.uint32),
            name=name,
        )

    @property
    def vertices(self) -> np.ndarray:
        """Vertex positions as an (n, 3) view."""
        return self.vertex_positions.reshape(-1, 3)

    @property
    def faces(self) -> np.ndarray:
        """Triangle indices as an (m, 3) view."""
        return self.triangle_indices.reshape(-1, 3)

    @property
    def num_vertices(self) -> int:
        return self.vertex_positions.size // 3

    @property
    def num_triangles(self) -> int:
        return self.triangle_indices.size // 3

    def bounds(self) -> tuple[tuple[float, float, float], tuple[float, float, float]]:
        """Axis-aligned bounds as ((min_x, min_y, min_z), (max_x, max_y, max_z))."""
        if self.num_vertices == 0:
            return (0.0, 0.0, 0.0), (0.0, 0.0, 0.0)
        verts = self.vertices
        lo = verts.min(axis=0)
        hi = verts.max(axis=0)
        return (
            (float(lo[0]), float(lo[1]), float(lo[2])),
            (float(hi[0]), float(hi[1]), float(hi[2])),
        )
