"""Candidate step: a shape, its fill color and the distance it would produce."""
import math
from typing import Optional

import numpy as np

from primvec.raster import Surface, difference_to_distance, distance_to_difference
from primvec.shapes import Shape, get_rng
from primvec.state import State
from primvec.svg_export import format_alpha, format_color
from primvec.types import RGB

# Alpha mutation range and bounds
ALPHA_JITTER = 0.08
MIN_ALPHA = 0.1
MAX_ALPHA = 1.0


class Step:
    """
    A shape proposed for addition to the current composition.

    evaluate() picks the fill color that best moves the covered pixels
    toward the target and derives the resulting distance from the
    change in squared error, without touching the rest of the canvas.
    """

    def __init__(self, shape: Shape, config, alpha: Optional[float] = None):
        self.shape = shape
        self.config = config
        self.alpha = config.alpha if alpha is None else alpha
        self.color: RGB = (0, 0, 0)
        self.distance = math.inf
        self._surface: Optional[Surface] = None

    def __repr__(self) -> str:
        return (
            f"Step({type(self.shape).__name__}, color={self.color}, "
            f"alpha={self.alpha:.2f}, distance={self.distance:.6f})"
        )

    def rasterize(self) -> Surface:
        if self._surface is None:
            self._surface = self.shape.rasterize(self.alpha)
        return self._surface

    def evaluate(self, state: State) -> "Step":
        """
        Compute color and resulting distance against a state.

        Args:
            state: Current state, read only

        Returns:
            self, with color and distance set
        """
        canvas = state.canvas
        pixels = canvas.pixel_count
        window = canvas.window(self.shape.bbox)

        change = None
        if window is not None:
            canvas_slice, local = window
            coverage = self.rasterize().coverage[local]
            covered = coverage > 0

            if np.any(covered):
                target = state.target.pixels[canvas_slice][covered]
                current = canvas.pixels[canvas_slice][covered]
                a = coverage[covered][:, None]

                self.color = self._compute_color(target, current)
                color = np.asarray(self.color, dtype=np.float64)

                before = target - current
                after = target - (current * (1.0 - a) + color * a)
                change = float(np.sum(after * after) - np.sum(before * before))

        if not change:
            # Nothing covered, or no change in error
            self.distance = state.distance
        else:
            current_difference = distance_to_difference(state.distance, pixels)
            self.distance = difference_to_distance(current_difference + change, pixels)
        return self

    def _compute_color(self, target: np.ndarray, current: np.ndarray) -> RGB:
        """Average color that would turn current into target at this alpha."""
        mean = np.mean((target - current) / self.alpha + current, axis=0)
        rgb = np.clip(np.trunc(mean), 0, 255).astype(int)
        return int(rgb[0]), int(rgb[1]), int(rgb[2])

    def apply(self, state: State) -> State:
        """Draw this step onto a copy of the state's canvas."""
        canvas = state.canvas.clone().draw_step(self)
        return State(state.target, canvas, self.distance)

    def mutate(self, rng: Optional[np.random.Generator] = None) -> "Step":
        rng = get_rng(rng)
        shape = self.shape.mutate(rng)
        alpha = self.alpha
        if self.config.mutate_alpha:
            alpha += (rng.random() - 0.5) * ALPHA_JITTER
            alpha = float(np.clip(alpha, MIN_ALPHA, MAX_ALPHA))
        return Step(shape, self.config, alpha)

    def to_svg(self):
        node = self.shape.to_svg()
        node.set("fill", format_color(self.color))
        node.set("fill-opacity", format_alpha(self.alpha))
        return node
