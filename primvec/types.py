"""Core types for primitive-shape vectorization."""
from dataclasses import dataclass
from enum import Enum, auto
from typing import List, Tuple

# Type aliases
PointList = List[List[int]]
RGB = Tuple[int, int, int]


class OptimizerPhase(Enum):
    """Lifecycle of an optimizer run."""
    IDLE = auto()
    SAMPLING = auto()
    REFINING = auto()
    CONVERGED = auto()


@dataclass(frozen=True)
class BBox:
    """Axis-aligned integer bounding box."""
    left: int
    top: int
    width: int
    height: int

    @classmethod
    def from_extents(cls, left: int, top: int, right: int, bottom: int) -> "BBox":
        """
        Build a box from min/max coordinates.

        A zero extent is clamped to 1 (fallback for deformed shapes).
        """
        return cls(
            left=int(left),
            top=int(top),
            width=int(right - left) or 1,
            height=int(bottom - top) or 1,
        )

    @property
    def right(self) -> int:
        return self.left + self.width

    @property
    def bottom(self) -> int:
        return self.top + self.height


class VectorizationError(Exception):
    """Base exception for vectorization errors."""
    pass


class ConfigurationError(VectorizationError):
    """Exception raised for invalid configuration or missing collaborators."""
    pass


class RasterError(VectorizationError):
    """Exception raised for unusable raster input."""
    pass
