"""Configuration for the primitive-shape optimizer."""
from dataclasses import dataclass, field
from typing import Callable, Iterable, Optional, Sequence, Tuple, Union

from primvec.shapes import SHAPE_TYPES, Ellipse, Rectangle, Shape, Triangle
from primvec.types import ConfigurationError

ShapeFactory = Callable[..., Shape]


def resolve_shape_types(
    shape_types: Iterable[Union[str, ShapeFactory]]
) -> Tuple[ShapeFactory, ...]:
    """
    Resolve a shape-type catalog to constructors.

    Args:
        shape_types: Shape names (see SHAPE_TYPES) or shape constructors

    Returns:
        Tuple of constructors, in the given order

    Raises:
        ConfigurationError: If a name is unknown or the catalog is empty
    """
    resolved = []
    for entry in shape_types:
        if isinstance(entry, str):
            key = entry.strip().lower()
            if key not in SHAPE_TYPES:
                known = ", ".join(sorted(SHAPE_TYPES))
                raise ConfigurationError(
                    f"Unknown shape type '{entry}' (expected one of: {known})"
                )
            resolved.append(SHAPE_TYPES[key])
        elif callable(entry):
            resolved.append(entry)
        else:
            raise ConfigurationError(f"Invalid shape type: {entry!r}")

    if not resolved:
        raise ConfigurationError("At least one shape type is required")

    return tuple(resolved)


@dataclass
class PrimitiveConfig:
    """Configuration for the primitive-shape optimization run."""

    # Search budget
    steps: int = 50
    shapes: int = 200
    mutations: int = 30

    # Shape fill
    alpha: float = 0.5
    mutate_alpha: bool = True

    # Raster sizes (longest side)
    compute_size: int = 256
    view_size: int = 512

    # Initial canvas color, "auto" = mean color of the target
    fill: str = "auto"

    shape_types: Sequence[Union[str, ShapeFactory]] = field(
        default_factory=lambda: (Triangle, Rectangle, Ellipse)
    )

    # Canvas bounds, taken from the target when omitted
    width: Optional[int] = None
    height: Optional[int] = None

    # Performance
    workers: int = -1  # -1 = auto
    seed: Optional[int] = None
    pause: float = 0.0  # seconds yielded between iterations

    def __post_init__(self):
        """Validate ranges and resolve the shape catalog."""
        if self.steps < 0:
            raise ConfigurationError(f"steps must be >= 0, got {self.steps}")
        if self.shapes < 1:
            raise ConfigurationError(f"shapes must be >= 1, got {self.shapes}")
        if self.mutations < 0:
            raise ConfigurationError(f"mutations must be >= 0, got {self.mutations}")
        if not 0.0 < self.alpha <= 1.0:
            raise ConfigurationError(f"alpha must be in (0, 1], got {self.alpha}")
        if self.compute_size < 1 or self.view_size < 1:
            raise ConfigurationError("compute_size and view_size must be positive")
        for name in ("width", "height"):
            value = getattr(self, name)
            if value is not None and value < 1:
                raise ConfigurationError(f"{name} must be positive, got {value}")
        if self.pause < 0:
            raise ConfigurationError(f"pause must be >= 0, got {self.pause}")

        self.shape_types = resolve_shape_types(self.shape_types)
