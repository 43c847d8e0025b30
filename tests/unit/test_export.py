"""Unit tests for GLB and 3MF packaging."""

import io
import json
import struct
import zipfile
from xml.etree import ElementTree as ET

import numpy as np
import pytest

from image_extrude.config import ExportConfig
from image_extrude.core.geometry import CrossSection
from image_extrude.domain import Solid
from image_extrude.exceptions import ExportError
from image_extrude.io import ExportFormat, export_3mf, export_glb, export_solids, write_output
from image_extrude.io.threemf import CORE_NAMESPACE, MODEL_PATH, build_model_xml

NS = {"m": CORE_NAMESPACE}


@pytest.fixture
def cube() -> Solid:
    return CrossSection.square(10.0).extrude(2.0)


@pytest.fixture
def triangle() -> Solid:
    return Solid.from_arrays(
        np.array([[0.0, 0.0, 0.0], [1.0 / 3.0, 0.0, 0.0], [0.0, 1.0, 0.0]]),
        np.array([[0, 1, 2]]),
    )


def read_glb_json(data: bytes) -> dict:
    magic, version, length = struct.unpack_from("<4sII", data, 0)
    assert magic == b"glTF"
    assert version == 2
    assert length == len(data)
    chunk_length, chunk_type = struct.unpack_from("<I4s", data, 12)
    assert chunk_type == b"JSON"
    return json.loads(data[20 : 20 + chunk_length])


def read_model(data: bytes) -> ET.Element:
    with zipfile.ZipFile(io.BytesIO(data)) as archive:
        return ET.fromstring(archive.read(MODEL_PATH))


class TestGlbExport:
    """Tests for export_glb."""

    def test_header_and_mesh(self, cube):
        """Test the container holds one mesh with position and index data."""
        document = read_glb_json(export_glb(cube))
        assert len(document["meshes"]) == 1

        primitive = document["meshes"][0]["primitives"][0]
        attributes = primitive["attributes"]
        assert "NORMAL" not in attributes

        position = document["accessors"][attributes["POSITION"]]
        assert position["componentType"] == 5126
        assert position["type"] == "VEC3"
        assert position["count"] == cube.num_vertices

        indices = document["accessors"][primitive["indices"]]
        assert indices["count"] == cube.num_triangles * 3

    def test_material_color(self, cube):
        """Test the default material uses the configured base colour."""
        config = ExportConfig(base_color=(0.2, 0.8, 0.6, 1.0))
        document = read_glb_json(export_glb(cube, config))
        assert len(document["materials"]) == 1
        factor = document["materials"][0]["pbrMetallicRoughness"]["baseColorFactor"]
        assert factor == pytest.approx([0.2, 0.8, 0.6, 1.0], abs=0.01)

    def test_empty_solid(self):
        """Test a solid without triangles cannot be exported."""
        empty = Solid.from_arrays(np.zeros((0, 3)), np.zeros((0, 3)))
        with pytest.raises(ExportError, match="no triangles"):
            export_glb(empty)


class TestThreeMfExport:
    """Tests for export_3mf."""

    def test_package_entries(self, cube):
        """Test the zip holds the model and OPC boilerplate."""
        with zipfile.ZipFile(io.BytesIO(export_3mf([cube]))) as archive:
            names = set(archive.namelist())
        assert names == {"3D/3dmodel.model", "[Content_Types].xml", "_rels/.rels"}

    def test_model_root(self, cube):
        """Test the model declares millimeters and the core namespace."""
        model = read_model(export_3mf([cube]))
        assert model.tag == f"{{{CORE_NAMESPACE}}}model"
        assert model.get("unit") == "millimeter"

    def test_metadata(self, cube):
        """Test title, description and application metadata are present."""
        config = ExportConfig(title="Logo", description="A logo", application="tests")
        model = read_model(export_3mf([cube], config))
        metadata = {m.get("name"): m.text for m in model.findall("m:metadata", NS)}
        assert metadata == {"Title": "Logo", "Description": "A logo", "Application": "tests"}

    def test_objects_and_assembly(self, cube, triangle):
        """Test each solid is a part and one assembly references them all."""
        named = Solid(triangle.vertex_positions, triangle.triangle_indices, name="ignored")
        model = read_model(export_3mf([cube, named]))
        objects = model.findall("m:resources/m:object", NS)
        assert [o.get("id") for o in objects] == ["1", "2", "3"]
        assert [o.get("name") for o in objects[:2]] == ["Part-1", "Part-2"]

        assembly = objects[2]
        components = assembly.findall("m:components/m:component", NS)
        assert [c.get("objectid") for c in components] == ["1", "2"]

        items = model.findall("m:build/m:item", NS)
        assert [i.get("objectid") for i in items] == ["3"]

    def test_mesh_content(self, cube):
        """Test vertex and triangle counts match the solid."""
        model = read_model(export_3mf([cube]))
        mesh = model.find("m:resources/m:object/m:mesh", NS)
        assert len(mesh.findall("m:vertices/m:vertex", NS)) == cube.num_vertices
        assert len(mesh.findall("m:triangles/m:triangle", NS)) == cube.num_triangles

    def test_coordinate_precision(self, triangle):
        """Test coordinates are written with the configured significant digits."""
        xml = build_model_xml([triangle]).decode("utf-8")
        assert 'x="0.3333333"' in xml

    def test_no_solids(self):
        """Test an empty list cannot be packaged."""
        with pytest.raises(ExportError, match="no solids"):
            export_3mf([])

    def test_empty_solid(self, cube):
        """Test a solid without triangles cannot be packaged."""
        empty = Solid.from_arrays(np.zeros((0, 3)), np.zeros((0, 3)))
        with pytest.raises(ExportError, match="solid 2"):
            export_3mf([cube, empty])


class TestExportDispatch:
    """Tests for ExportFormat, export_solids and write_output."""

    @pytest.mark.parametrize(
        ("path", "expected"),
        [
            ("out.glb", ExportFormat.GLB),
            ("out.GLB", ExportFormat.GLB),
            ("dir/out.3mf", ExportFormat.THREE_MF),
        ],
    )
    def test_from_path(self, path, expected):
        """Test the format follows the file extension."""
        assert ExportFormat.from_path(path) is expected

    @pytest.mark.parametrize("path", ["out.stl", "out"])
    def test_unsupported_extension(self, path):
        """Test unknown extensions raise ExportError."""
        with pytest.raises(ExportError, match="unsupported"):
            ExportFormat.from_path(path)

    def test_glb_requires_one_solid(self, cube):
        """Test GLB rejects multiple solids."""
        with pytest.raises(ExportError, match="exactly one"):
            export_solids([cube, cube], ExportFormat.GLB)

    def test_3mf_accepts_many(self, cube):
        """Test 3MF packages several solids."""
        data = export_solids([cube, cube], ExportFormat.THREE_MF)
        assert zipfile.is_zipfile(io.BytesIO(data))

    def test_write_output(self, tmp_path, cube):
        """Test the serialized bytes are written to disk."""
        path = tmp_path / "cube.glb"
        written = write_output(path, [cube])
        assert path.read_bytes()[:4] == b"glTF"
        assert written == path.stat().st_size

    def test_nothing_written_on_failure(self, tmp_path):
        """Test a failed export leaves no file behind."""
        path = tmp_path / "empty.3mf"
        with pytest.raises(ExportError):
            write_output(path, [])
        assert not path.exists()

    def test_nothing_written_for_bad_extension(self, tmp_path, cube):
        """Test unsupported outputs are rejected before writing."""
        path = tmp_path / "cube.obj"
        with pytest.raises(ExportError):
            write_output(path, [cube])
        assert not path.exists()
