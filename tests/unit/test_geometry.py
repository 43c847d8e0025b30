"""Unit tests for the geometry adapter.

Tests for CrossSection construction, transforms, extrusion and the
placement helpers.
"""

import math

import numpy as np
import pytest
import shapely
import trimesh

from image_extrude.core.geometry import (
    EMPTY_SOLID_SIZE,
    CrossSection,
    FillRule,
    center_cross_section,
    create_empty_solid,
    fit_to_size,
    winding_number,
)
from image_extrude.exceptions import GeometryError


def square(x0: float, y0: float, size: float) -> list[tuple[float, float]]:
    """Counter-clockwise square ring."""
    return [(x0, y0), (x0 + size, y0), (x0 + size, y0 + size), (x0, y0 + size)]


def volume(solid) -> float:
    return abs(trimesh.Trimesh(solid.vertices, solid.faces).volume)


class TestWindingNumber:
    """Tests for the ray-casting winding number."""

    def test_inside_and_outside(self):
        """Test winding of a single counter-clockwise ring."""
        ring = np.array(square(0, 0, 10), dtype=float)
        starts, ends = ring, np.roll(ring, -1, axis=0)
        assert winding_number(5, 5, starts, ends) == 1
        assert winding_number(15, 5, starts, ends) == 0

    def test_clockwise_ring_is_negative(self):
        """Test winding sign follows ring orientation."""
        ring = np.array(square(0, 0, 10)[::-1], dtype=float)
        assert winding_number(5, 5, ring, np.roll(ring, -1, axis=0)) == -1


class TestCrossSectionConstruction:
    """Tests for CrossSection.from_polygons."""

    def test_single_square(self):
        """Test a simple square."""
        section = CrossSection.from_polygons([square(0, 0, 10)])
        assert section.area == pytest.approx(100.0)
        bounds = section.bounds()
        assert bounds.min == (0.0, 0.0)
        assert bounds.max == (10.0, 10.0)
        assert section.num_polygons == 1

    def test_closing_point_optional(self):
        """Test rings may repeat their first point."""
        ring = square(0, 0, 10)
        section = CrossSection.from_polygons([ring + [ring[0]]])
        assert section.area == pytest.approx(100.0)

    def test_even_odd_nested_rings_make_hole(self):
        """Test nested rings of the same orientation leave a hole."""
        section = CrossSection.from_polygons([square(0, 0, 10), square(3, 3, 4)])
        assert section.area == pytest.approx(84.0)
        assert len(section.polygons[0].interiors) == 1

    def test_non_zero_nested_rings_fill(self):
        """Test nested rings of the same orientation fill under non-zero."""
        section = CrossSection.from_polygons(
            [square(0, 0, 10), square(3, 3, 4)],
            fill_rule=FillRule.NON_ZERO,
        )
        assert section.area == pytest.approx(100.0)

    def test_even_odd_island_in_hole(self):
        """Test three nested rings give a ring plus an island."""
        section = CrossSection.from_polygons(
            [square(0, 0, 10), square(2, 2, 6), square(4, 4, 2)]
        )
        assert section.area == pytest.approx(100 - 36 + 4)
        assert section.num_polygons == 2

    def test_self_intersecting_ring(self):
        """Test a bow-tie ring fills both lobes."""
        section = CrossSection.from_polygons([[(0, 0), (2, 2), (2, 0), (0, 2)]])
        assert section.area == pytest.approx(2.0)
        assert section.num_polygons == 2

    def test_overlapping_rings_even_odd(self):
        """Test overlap of two rings is removed under even-odd."""
        section = CrossSection.from_polygons([square(0, 0, 4), square(2, 0, 4)])
        assert section.area == pytest.approx(16 + 16 - 2 * 8)

    def test_empty_polygon_set(self):
        """Test an empty ring list raises GeometryError."""
        with pytest.raises(GeometryError, match="empty"):
            CrossSection.from_polygons([])

    def test_short_rings_dropped(self):
        """Test rings with fewer than three points are ignored."""
        with pytest.raises(GeometryError, match="empty"):
            CrossSection.from_polygons([[(0, 0), (1, 1)]])

    def test_collinear_ring_has_no_area(self):
        """Test a collinear ring raises GeometryError."""
        with pytest.raises(GeometryError, match="zero area"):
            CrossSection.from_polygons([[(0, 0), (1, 0), (2, 0)]])


class TestCrossSectionTransforms:
    """Tests for pure transforms."""

    @pytest.fixture
    def rect(self) -> CrossSection:
        return CrossSection.from_polygons([[(0, 0), (10, 0), (10, 5), (0, 5)]])

    def test_translate_is_pure(self, rect):
        """Test translate returns a new section and leaves the input alone."""
        moved = rect.translate((5, -2))
        assert moved.bounds().min == pytest.approx((5.0, -2.0))
        assert rect.bounds().min == (0.0, 0.0)

    def test_scale_about_origin(self, rect):
        """Test scaling is about the origin."""
        scaled = rect.scale((2, 3))
        assert scaled.bounds().max == pytest.approx((20.0, 15.0))
        assert scaled.area == pytest.approx(300.0)

    def test_mirror(self, rect):
        """Test negative scale mirrors the shape."""
        mirrored = rect.scale((1, -1))
        assert mirrored.bounds().min == pytest.approx((0.0, -5.0))
        assert mirrored.area == pytest.approx(rect.area)

    def test_simplify_drops_redundant_vertices(self):
        """Test simplify removes vertices closer than the tolerance."""
        ring = [(0, 0), (3, 0.001), (6, -0.001), (10, 0), (10, 10), (0, 10)]
        section = CrossSection.from_polygons([ring])
        simplified = section.simplify(0.01)
        before = len(section.polygons[0].exterior.coords)
        after = len(simplified.polygons[0].exterior.coords)
        assert after < before
        assert simplified.area == pytest.approx(100.0, abs=0.05)

    def test_bounds_properties(self, rect):
        """Test width, height and center."""
        bounds = rect.bounds()
        assert bounds.width == 10
        assert bounds.height == 5
        assert bounds.center == (5.0, 2.5)

    def test_repr(self, rect):
        """Test repr mentions polygon count."""
        assert "polygons=1" in repr(rect)


class TestPlacement:
    """Tests for centering and fitting."""

    def test_center(self):
        """Test centering moves the bbox center to the origin."""
        section = CrossSection.from_polygons([square(3, 7, 4)])
        centered = center_cross_section(section)
        assert centered.bounds().center == pytest.approx((0.0, 0.0))

    def test_center_idempotent(self):
        """Test centering twice changes nothing."""
        section = CrossSection.from_polygons([[(1, 1), (9, 2), (4, 8)]])
        once = center_cross_section(section)
        twice = center_cross_section(once)
        assert twice.bounds().min == pytest.approx(once.bounds().min, abs=1e-12)
        assert twice.bounds().max == pytest.approx(once.bounds().max, abs=1e-12)

    def test_center_empty(self):
        """Test centering an empty section raises GeometryError."""
        with pytest.raises(GeometryError):
            center_cross_section(CrossSection(shapely.Polygon()))

    def test_fit_to_size_uses_larger_dimension(self):
        """Test fit_to_size scales the larger side to the target."""
        section = CrossSection.from_polygons([[(0, 0), (10, 0), (10, 5), (0, 5)]])
        fitted = fit_to_size(section, 20)
        assert fitted.bounds().width == pytest.approx(20.0)
        assert fitted.bounds().height == pytest.approx(10.0)

    def test_fit_to_size_tall_shape(self):
        """Test fitting a shape taller than wide."""
        section = CrossSection.from_polygons([[(0, 0), (2, 0), (2, 8), (0, 8)]])
        fitted = fit_to_size(section, 4)
        assert fitted.bounds().height == pytest.approx(4.0)
        assert fitted.bounds().width == pytest.approx(1.0)

    @pytest.mark.parametrize("max_size", [0.0, -1.0, math.nan, math.inf])
    def test_fit_to_size_invalid_target(self, max_size):
        """Test invalid target sizes raise GeometryError."""
        section = CrossSection.from_polygons([square(0, 0, 1)])
        with pytest.raises(GeometryError):
            fit_to_size(section, max_size)

    def test_fit_to_size_degenerate(self):
        """Test an empty section cannot be fitted."""
        with pytest.raises(GeometryError):
            fit_to_size(CrossSection(shapely.Polygon()), 10)


class TestExtrusion:
    """Tests for CrossSection.extrude."""

    def test_extrude_square(self):
        """Test a square prism has the expected bounds and volume."""
        solid = CrossSection.from_polygons([square(0, 0, 10)]).extrude(2.0)
        lo, hi = solid.bounds()
        assert lo == pytest.approx((0.0, 0.0, 0.0))
        assert hi == pytest.approx((10.0, 10.0, 2.0))
        assert volume(solid) == pytest.approx(200.0, rel=1e-5)

    def test_extrude_respects_holes(self):
        """Test holes are not filled by the triangulation."""
        section = CrossSection.from_polygons([square(0, 0, 10), square(3, 3, 4)])
        solid = section.extrude(1.0)
        assert volume(solid) == pytest.approx(84.0, rel=1e-5)

    def test_extrude_multiple_polygons(self):
        """Test disjoint polygons are merged into one solid."""
        section = CrossSection.from_polygons([square(0, 0, 1), square(5, 0, 1)])
        solid = section.extrude(1.0)
        assert volume(solid) == pytest.approx(2.0, rel=1e-5)

    def test_extrude_is_watertight(self):
        """Test the extruded mesh is closed."""
        section = CrossSection.from_polygons([square(0, 0, 10), square(3, 3, 4)])
        solid = section.extrude(1.0)
        assert trimesh.Trimesh(solid.vertices, solid.faces).is_watertight

    @pytest.mark.parametrize("height", [0.0, -1.0, math.nan, math.inf])
    def test_extrude_invalid_height(self, height):
        """Test invalid heights raise GeometryError."""
        section = CrossSection.from_polygons([square(0, 0, 1)])
        with pytest.raises(GeometryError, match="height"):
            section.extrude(height)

    def test_extrude_empty(self):
        """Test extruding nothing raises GeometryError."""
        with pytest.raises(GeometryError, match="nothing to extrude"):
            CrossSection(shapely.Polygon()).extrude(1.0)

    def test_empty_solid(self):
        """Test the placeholder solid is a tiny box."""
        solid = create_empty_solid()
        lo, hi = solid.bounds()
        extent = np.subtract(hi, lo)
        assert extent == pytest.approx([EMPTY_SOLID_SIZE] * 3, rel=1e-3)
        assert solid.num_triangles > 0
