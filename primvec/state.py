"""State: target raster, current canvas and their distance."""
import math
from dataclasses import dataclass, field

from primvec.raster import Raster


@dataclass(frozen=True, eq=False)
class State:
    """
    Immutable snapshot of the composition.

    The distance is computed from target and canvas unless a known value
    is passed in (e.g. right after applying an evaluated step).
    States compare by distance only.
    """
    target: Raster = field(repr=False)
    canvas: Raster = field(repr=False)
    distance: float = math.inf

    def __post_init__(self):
        if math.isinf(self.distance):
            object.__setattr__(self, "distance", self.target.distance(self.canvas))

    def __lt__(self, other: "State") -> bool:
        return self.distance < other.distance

    def __le__(self, other: "State") -> bool:
        return self.distance <= other.distance
