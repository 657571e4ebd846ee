"""Tests for the shape model."""
import functools

import numpy as np
import pytest

from primvec.config import PrimitiveConfig
from primvec.shapes import Debug, Ellipse, Polygon, Rectangle, Shape, Triangle
from primvec.types import BBox, ConfigurationError


def _assert_axis_aligned(rect):
    (x0, y0), (x1, y1), (x2, y2), (x3, y3) = rect.points
    assert x0 == x3  # left edge
    assert y0 == y1  # top edge
    assert x1 == x2  # right edge
    assert y2 == y3  # bottom edge


class TestBBox:
    """Test bounding box construction."""

    def test_from_extents(self):
        bbox = BBox.from_extents(2, 3, 10, 7)
        assert bbox == BBox(2, 3, 8, 4)
        assert bbox.right == 10
        assert bbox.bottom == 7

    def test_zero_extent_clamped(self):
        """Degenerate extents fall back to 1."""
        bbox = BBox.from_extents(5, 5, 5, 5)
        assert bbox.width == 1
        assert bbox.height == 1


class TestCreate:
    """Test random shape creation."""

    def test_document_required(self):
        with pytest.raises(ConfigurationError):
            Triangle(32, 32, None)

    def test_create_uses_catalog(self, document, rng):
        config = PrimitiveConfig(width=32, height=32, shape_types=["ellipse"])
        for _ in range(10):
            assert isinstance(Shape.create(config, document, rng), Ellipse)

    def test_create_picks_every_kind(self, document, rng):
        config = PrimitiveConfig(width=32, height=32)
        kinds = {type(Shape.create(config, document, rng)) for _ in range(200)}
        assert kinds == {Triangle, Rectangle, Ellipse}

    def test_random_point_inside_canvas(self, rng):
        for _ in range(100):
            x, y = Shape.random_point(10, 5, rng)
            assert 0 <= x < 10
            assert 0 <= y < 5


class TestPolygon:
    """Test polygon shapes."""

    def test_point_count(self, document, rng):
        assert len(Polygon(50, 50, document, 6, rng=rng).points) == 6
        assert len(Triangle(50, 50, document, rng=rng).points) == 3

    def test_points_near_anchor(self, document, rng):
        polygon = Polygon(100, 100, document, 8, rng=rng)
        ax, ay = polygon.points[0]
        assert 0 <= ax < 100 and 0 <= ay < 100
        for x, y in polygon.points[1:]:
            assert np.hypot(x - ax, y - ay) < 20

    def test_compute_bbox(self, document, rng):
        triangle = Triangle(50, 50, document, rng=rng)
        triangle.points = [[4, 10], [20, 2], [9, 30]]
        triangle.compute_bbox()
        assert triangle.bbox == BBox(4, 2, 16, 28)

    def test_collinear_bbox_clamped(self, document, rng):
        triangle = Triangle(50, 50, document, rng=rng)
        triangle.points = [[3, 7], [9, 7], [15, 7]]
        triangle.compute_bbox()
        assert triangle.bbox.height == 1

    def test_mutate_moves_one_point(self, document, rng):
        triangle = Triangle(50, 50, document, rng=rng)
        original = [list(p) for p in triangle.points]

        mutated = triangle.mutate(rng)

        assert type(mutated) is Triangle
        assert mutated is not triangle
        assert triangle.points == original
        assert len(mutated.points) == 3
        changed = [a != b for a, b in zip(original, mutated.points)]
        assert sum(changed) <= 1

    def test_partial_polygon_keeps_count(self, document, rng):
        config = PrimitiveConfig(
            width=40, height=40, shape_types=[functools.partial(Polygon, count=7)]
        )
        shape = Shape.create(config, document, rng)
        for _ in range(20):
            shape = shape.mutate(rng)
            assert type(shape) is Polygon
            assert len(shape.points) == 7

    def test_to_svg(self, document, rng):
        triangle = Triangle(50, 50, document, rng=rng)
        triangle.points = [[0, 0], [10, 0], [10, 10]]
        node = triangle.to_svg()
        assert node.tag.endswith("path")
        assert node.get("d") == "M0,0L10,0L10,10Z"


class TestRectangle:
    """Test rectangle shapes."""

    def test_canonical_corners(self, document, rng):
        for _ in range(50):
            rect = Rectangle(64, 64, document, rng=rng)
            assert len(rect.points) == 4
            _assert_axis_aligned(rect)
            (left, top), _, (right, bottom), _ = rect.points
            assert left <= right
            assert top <= bottom

    def test_mutation_keeps_four_axis_aligned_points(self, document, rng):
        rect = Rectangle(64, 64, document, rng=rng)
        for _ in range(100):
            rect = rect.mutate(rng)
            assert type(rect) is Rectangle
            assert len(rect.points) == 4
            _assert_axis_aligned(rect)
            assert rect.bbox.width >= 1
            assert rect.bbox.height >= 1

    def test_mutation_shifts_within_range(self, document, rng):
        rect = Rectangle(64, 64, document, rng=rng)
        mutated = rect.mutate(rng)
        deltas = [
            abs(a - b)
            for p, q in zip(rect.points, mutated.points)
            for a, b in zip(p, q)
        ]
        assert max(deltas) < 10


class TestEllipse:
    """Test ellipse shapes."""

    def test_initial_radii(self, document, rng):
        for _ in range(50):
            ellipse = Ellipse(64, 64, document, rng=rng)
            assert 1 <= ellipse.rx <= 20
            assert 1 <= ellipse.ry <= 20

    def test_bbox_from_center_and_radii(self, document, rng):
        ellipse = Ellipse(64, 64, document, rng=rng)
        ellipse.center = [30, 20]
        ellipse.rx = 5
        ellipse.ry = 3
        ellipse.compute_bbox()
        assert ellipse.bbox == BBox(25, 17, 10, 6)

    def test_radius_never_below_one(self, document, rng):
        ellipse = Ellipse(64, 64, document, rng=rng)
        ellipse.rx = 1
        ellipse.ry = 1
        ellipse.compute_bbox()
        for _ in range(300):
            ellipse = ellipse.mutate(rng)
            assert type(ellipse) is Ellipse
            assert ellipse.rx >= 1
            assert ellipse.ry >= 1

    def test_mutate_leaves_source_untouched(self, document, rng):
        ellipse = Ellipse(64, 64, document, rng=rng)
        center = list(ellipse.center)
        for _ in range(20):
            ellipse.mutate(rng)
        assert ellipse.center == center

    def test_to_svg(self, document, rng):
        ellipse = Ellipse(64, 64, document, rng=rng)
        ellipse.center = [12, 8]
        ellipse.rx = 4
        ellipse.ry = 2
        node = ellipse.to_svg()
        assert node.tag.endswith("ellipse")
        assert (node.get("cx"), node.get("cy")) == ("12", "8")
        assert (node.get("rx"), node.get("ry")) == ("4", "2")


class TestDebug:
    """Test the debug marker."""

    def test_bbox_is_canvas(self, document):
        assert Debug(30, 20, document).bbox == BBox(0, 0, 30, 20)

    def test_mutate_same_kind(self, document):
        marker = Debug(30, 20, document)
        mutated = marker.mutate()
        assert type(mutated) is Debug
        assert mutated is not marker

    def test_rasterize_corner(self, document):
        surface = Debug(30, 20, document).rasterize(1.0)
        assert surface.coverage[0, 0] == pytest.approx(1.0)
        assert surface.coverage[10, 10] == 0.0


class TestRasterize:
    """Test rendering shapes to bbox-sized surfaces."""

    def test_surface_matches_bbox(self, document, rng):
        config = PrimitiveConfig(width=64, height=64)
        for _ in range(30):
            shape = Shape.create(config, document, rng)
            surface = shape.rasterize(0.5)
            assert surface.coverage.shape == (shape.bbox.height, shape.bbox.width)
            assert surface.coverage.max() <= 0.5 + 1e-9

    def test_rectangle_interior_covered(self, document, rng):
        rect = Rectangle(64, 64, document, rng=rng)
        rect.points = [[10, 10], [30, 10], [30, 30], [10, 30]]
        rect.compute_bbox()
        surface = rect.rasterize(0.75)
        assert surface.coverage[10, 10] == pytest.approx(0.75)

    def test_bboxes_never_degenerate(self, document):
        rng = np.random.default_rng(0)
        config = PrimitiveConfig(width=1, height=1)
        for _ in range(100):
            shape = Shape.create(config, document, rng)
            for _ in range(5):
                shape = shape.mutate(rng)
                assert shape.bbox.width >= 1
                assert shape.bbox.height >= 1
