"""Geometric primitives: creation, mutation, bounding boxes, rasterization and SVG nodes."""
import copy
import math
from typing import Dict, Optional, Tuple

import numpy as np

from primvec.raster import Surface
from primvec.types import BBox, ConfigurationError, PointList

# Largest random offset used when placing or moving a point
JITTER = 20

_default_rng = np.random.default_rng()


def get_rng(rng: Optional[np.random.Generator]) -> np.random.Generator:
    return _default_rng if rng is None else rng


def _random_offset(rng: np.random.Generator) -> Tuple[int, int]:
    """Offset by a random angle in [0, 2pi) and radius in [0, JITTER), truncated."""
    angle = rng.random() * 2 * math.pi
    radius = rng.random() * JITTER
    return int(radius * math.cos(angle)), int(radius * math.sin(angle))


def _signed_delta(rng: np.random.Generator) -> float:
    """Random delta in [-JITTER / 2, JITTER / 2)."""
    return (rng.random() - 0.5) * JITTER


class Shape:
    """A geometric primitive with a bbox."""

    def __init__(self, width: int, height: int, document):
        if document is None:
            raise ConfigurationError("Document required")
        self.document = document
        self.bbox = BBox(0, 0, 1, 1)

    @staticmethod
    def random_point(width: int, height: int, rng: Optional[np.random.Generator] = None) -> list:
        rng = get_rng(rng)
        return [int(rng.random() * width), int(rng.random() * height)]

    @staticmethod
    def create(config, document, rng: Optional[np.random.Generator] = None) -> "Shape":
        """
        Create a random shape of a uniformly chosen configured kind.

        Args:
            config: Configuration with shape_types, width and height
            document: SVG export document
            rng: Optional random generator

        Returns:
            New shape bounded by the canvas size
        """
        rng = get_rng(rng)
        ctors = config.shape_types
        ctor = ctors[int(rng.integers(len(ctors)))]
        return ctor(config.width, config.height, document, rng=rng)

    def _clone(self) -> "Shape":
        return copy.copy(self)

    def compute_bbox(self) -> "Shape":
        return self

    def mutate(self, rng: Optional[np.random.Generator] = None) -> "Shape":
        return self._clone()

    def rasterize(self, alpha: float) -> Surface:
        """Get a new bbox-sized surface with this shape drawn on it."""
        surface = Surface(self.bbox.width, self.bbox.height)
        surface.global_alpha = alpha
        surface.translate(-self.bbox.left, -self.bbox.top)
        self.render(surface)
        return surface

    def render(self, surface: Surface) -> None:
        pass

    def to_svg(self):
        raise NotImplementedError


class Polygon(Shape):
    """Closed polygon with a fixed number of vertices."""

    def __init__(self, width: int, height: int, document, count: int = 5,
                 rng: Optional[np.random.Generator] = None):
        super().__init__(width, height, document)
        if count < 1:
            raise ConfigurationError(f"Polygon needs at least one point, got {count}")
        self.points: PointList = self._create_points(width, height, count, get_rng(rng))
        self.compute_bbox()

    def _create_points(self, width, height, count, rng) -> PointList:
        first = Shape.random_point(width, height, rng)
        points = [first]
        for _ in range(1, count):
            dx, dy = _random_offset(rng)
            points.append([first[0] + dx, first[1] + dy])
        return points

    def _clone(self) -> "Polygon":
        clone = copy.copy(self)
        clone.points = [list(point) for point in self.points]
        return clone

    def render(self, surface: Surface) -> None:
        surface.fill_polygon(self.points)

    def to_svg(self):
        d = "".join(
            f"{'L' if index else 'M'}{x},{y}" for index, (x, y) in enumerate(self.points)
        )
        return self.document.create_element("path", d=f"{d}Z")

    def mutate(self, rng: Optional[np.random.Generator] = None) -> "Polygon":
        rng = get_rng(rng)
        clone = self._clone()

        point = clone.points[int(rng.integers(len(clone.points)))]
        dx, dy = _random_offset(rng)
        point[0] += dx
        point[1] += dy

        return clone.compute_bbox()

    def compute_bbox(self) -> "Polygon":
        xs = [p[0] for p in self.points]
        ys = [p[1] for p in self.points]
        self.bbox = BBox.from_extents(min(xs), min(ys), max(xs), max(ys))
        return self


class Triangle(Polygon):
    def __init__(self, width: int, height: int, document,
                 rng: Optional[np.random.Generator] = None):
        super().__init__(width, height, document, 3, rng=rng)


class Rectangle(Polygon):
    """
    Axis-aligned rectangle.

    Points are kept in the order top-left, top-right, bottom-right,
    bottom-left. Edge mutations move both points of one edge.
    """

    # edge -> (point indices, axis)
    EDGES = (
        ((0, 3), 0),  # left
        ((0, 1), 1),  # top
        ((1, 2), 0),  # right
        ((2, 3), 1),  # bottom
    )

    def __init__(self, width: int, height: int, document,
                 rng: Optional[np.random.Generator] = None):
        super().__init__(width, height, document, 4, rng=rng)

    def _create_points(self, width, height, count, rng) -> PointList:
        p1 = Shape.random_point(width, height, rng)
        p2 = Shape.random_point(width, height, rng)

        left, right = min(p1[0], p2[0]), max(p1[0], p2[0])
        top, bottom = min(p1[1], p2[1]), max(p1[1], p2[1])

        return [[left, top], [right, top], [right, bottom], [left, bottom]]

    def mutate(self, rng: Optional[np.random.Generator] = None) -> "Rectangle":
        rng = get_rng(rng)
        clone = self._clone()

        amount = int(_signed_delta(rng))
        indices, axis = self.EDGES[int(rng.integers(4))]
        # No reordering: a large shift may swap opposite edges
        for index in indices:
            clone.points[index][axis] += amount

        return clone.compute_bbox()


class Ellipse(Shape):
    """Axis-aligned ellipse."""

    def __init__(self, width: int, height: int, document,
                 rng: Optional[np.random.Generator] = None):
        super().__init__(width, height, document)
        rng = get_rng(rng)

        self.center = Shape.random_point(width, height, rng)
        self.rx = 1 + int(rng.random() * JITTER)
        self.ry = 1 + int(rng.random() * JITTER)

        self.compute_bbox()

    def _clone(self) -> "Ellipse":
        clone = copy.copy(self)
        clone.center = list(self.center)
        return clone

    def render(self, surface: Surface) -> None:
        surface.fill_ellipse(self.center, self.rx, self.ry)

    def to_svg(self):
        return self.document.create_element(
            "ellipse",
            cx=self.center[0],
            cy=self.center[1],
            rx=self.rx,
            ry=self.ry,
        )

    def mutate(self, rng: Optional[np.random.Generator] = None) -> "Ellipse":
        rng = get_rng(rng)
        clone = self._clone()

        choice = int(rng.integers(3))
        if choice == 0:
            dx, dy = _random_offset(rng)
            clone.center[0] += dx
            clone.center[1] += dy
        elif choice == 1:
            clone.rx = max(1, int(clone.rx + _signed_delta(rng)))
        else:
            clone.ry = max(1, int(clone.ry + _signed_delta(rng)))

        return clone.compute_bbox()

    def compute_bbox(self) -> "Ellipse":
        self.bbox = BBox.from_extents(
            self.center[0] - self.rx,
            self.center[1] - self.ry,
            self.center[0] + self.rx,
            self.center[1] + self.ry,
        )
        return self


class Debug(Shape):
    """Marker in the canvas corner, spanning the whole canvas."""

    def __init__(self, width: int, height: int, document,
                 rng: Optional[np.random.Generator] = None):
        super().__init__(width, height, document)
        self.bbox = BBox(0, 0, max(int(width), 1), max(int(height), 1))

    def render(self, surface: Surface) -> None:
        surface.fill_rect(0, 0, 1.5, 1.5)

    def to_svg(self):
        return self.document.create_element("rect", x=0, y=0, width=1.5, height=1.5)


SHAPE_TYPES: Dict[str, type] = {
    "triangle": Triangle,
    "rectangle": Rectangle,
    "ellipse": Ellipse,
    "debug": Debug,
}
