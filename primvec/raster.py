"""Raster surfaces: target/canvas pixels, the distance metric and shape drawing."""
import logging
from pathlib import Path
from typing import Optional, Sequence, Tuple, Union

import cv2
import numpy as np
from PIL import Image, ImageColor, ImageOps

from primvec.types import BBox, RGB, RasterError

logger = logging.getLogger(__name__)

Window = Tuple[Tuple[slice, slice], Tuple[slice, slice]]


def difference_to_distance(difference: float, pixels: int) -> float:
    """
    Convert a summed squared RGB error to a normalized distance.

    Args:
        difference: Sum of squared channel differences
        pixels: Number of pixels the sum was taken over

    Returns:
        Root mean square channel error scaled to [0, 1]
    """
    return float(np.sqrt(max(difference, 0.0) / (3 * pixels)) / 255)


def distance_to_difference(distance: float, pixels: int) -> float:
    """Inverse of difference_to_distance."""
    return float((distance * 255) ** 2 * (3 * pixels))


def scaled_size(width: int, height: int, size: int) -> Tuple[int, int]:
    """Scale (width, height) so that the longest side equals size."""
    scale = max(width, height) / size
    return max(1, int(round(width / scale))), max(1, int(round(height / scale)))


def parse_color(color: Union[str, Sequence[int]]) -> RGB:
    """Parse a color string or RGB sequence into an RGB tuple."""
    if isinstance(color, str):
        try:
            rgb = ImageColor.getrgb(color)
        except ValueError as e:
            raise RasterError(f"Invalid color '{color}': {e}") from e
    else:
        rgb = tuple(color)
    if len(rgb) < 3:
        raise RasterError(f"Expected an RGB color, got {color!r}")
    return int(rgb[0]), int(rgb[1]), int(rgb[2])


def clip_window(bbox: BBox, width: int, height: int) -> Optional[Window]:
    """
    Intersect a shape bbox with a canvas.

    Returns:
        (canvas slices, bbox-local slices) or None if they do not overlap
    """
    x0 = max(bbox.left, 0)
    y0 = max(bbox.top, 0)
    x1 = min(bbox.right, width)
    y1 = min(bbox.bottom, height)
    if x0 >= x1 or y0 >= y1:
        return None

    canvas = (slice(y0, y1), slice(x0, x1))
    local = (
        slice(y0 - bbox.top, y1 - bbox.top),
        slice(x0 - bbox.left, x1 - bbox.left),
    )
    return canvas, local


class Surface:
    """
    Drawing context for a single shape.

    Holds a coverage mask in [0, 1] the size of the shape's bbox. Drawing
    calls honor the current translation and global alpha, like a 2D canvas
    context filled with a single color.
    """

    def __init__(self, width: int, height: int):
        if width < 1 or height < 1:
            raise RasterError(f"Surface size must be positive, got {width}x{height}")
        self.width = int(width)
        self.height = int(height)
        self.global_alpha = 1.0
        self.coverage = np.zeros((self.height, self.width), dtype=np.float64)
        self._dx = 0
        self._dy = 0

    def translate(self, dx: int, dy: int) -> None:
        self._dx += int(dx)
        self._dy += int(dy)

    def _blank_mask(self) -> np.ndarray:
        return np.zeros((self.height, self.width), dtype=np.uint8)

    def _composite(self, mask: np.ndarray) -> None:
        layer = mask.astype(np.float64) / 255.0 * self.global_alpha
        self.coverage = np.maximum(self.coverage, layer)

    def fill_polygon(self, points: Sequence[Sequence[int]]) -> None:
        pts = np.asarray(points, dtype=np.int32).reshape(-1, 2)
        pts = pts + np.array([self._dx, self._dy], dtype=np.int32)
        mask = self._blank_mask()
        cv2.fillPoly(mask, [pts.reshape(-1, 1, 2)], 255, lineType=cv2.LINE_AA)
        self._composite(mask)

    def fill_ellipse(self, center: Sequence[int], rx: int, ry: int) -> None:
        cx = int(center[0]) + self._dx
        cy = int(center[1]) + self._dy
        mask = self._blank_mask()
        cv2.ellipse(
            mask, (cx, cy), (int(rx), int(ry)), 0, 0, 360, 255,
            thickness=-1, lineType=cv2.LINE_AA
        )
        self._composite(mask)

    def fill_rect(self, x: float, y: float, w: float, h: float) -> None:
        x0 = max(int(np.floor(x + self._dx)), 0)
        y0 = max(int(np.floor(y + self._dy)), 0)
        x1 = min(int(np.ceil(x + w + self._dx)), self.width)
        y1 = min(int(np.ceil(y + h + self._dy)), self.height)
        mask = self._blank_mask()
        if x0 < x1 and y0 < y1:
            mask[y0:y1, x0:x1] = 255
        self._composite(mask)


class Raster:
    """RGB pixel surface stored as a float64 (H, W, 3) array in 0..255."""

    def __init__(self, pixels: np.ndarray):
        pixels = np.asarray(pixels, dtype=np.float64)
        if pixels.ndim != 3 or pixels.shape[2] != 3:
            raise RasterError(f"Expected (H, W, 3) pixels, got shape {pixels.shape}")
        self.pixels = pixels

    @classmethod
    def empty(cls, width: int, height: int, fill: Union[str, Sequence[int]] = "white") -> "Raster":
        """Create a raster filled with a single color."""
        pixels = np.empty((int(height), int(width), 3), dtype=np.float64)
        pixels[...] = parse_color(fill)
        return cls(pixels)

    @classmethod
    def from_image(cls, image: Image.Image) -> "Raster":
        return cls(np.array(image.convert("RGB"), dtype=np.float64))

    @property
    def width(self) -> int:
        return self.pixels.shape[1]

    @property
    def height(self) -> int:
        return self.pixels.shape[0]

    @property
    def pixel_count(self) -> int:
        return self.width * self.height

    def clone(self) -> "Raster":
        return Raster(self.pixels.copy())

    def mean_color(self) -> RGB:
        mean = self.pixels.reshape(-1, 3).mean(axis=0)
        return int(mean[0]), int(mean[1]), int(mean[2])

    def difference(self, other: "Raster") -> float:
        """Sum of squared channel differences against another raster."""
        if self.pixels.shape != other.pixels.shape:
            raise RasterError(
                f"Shape mismatch: {self.pixels.shape} vs {other.pixels.shape}"
            )
        diff = self.pixels - other.pixels
        return float(np.sum(diff * diff))

    def distance(self, other: "Raster") -> float:
        """Normalized RMS distance to another raster, 0 = identical."""
        return difference_to_distance(self.difference(other), self.pixel_count)

    def window(self, bbox: BBox) -> Optional[Window]:
        return clip_window(bbox, self.width, self.height)

    def draw_step(self, step) -> "Raster":
        """Composite a step's shape in its color onto this raster, in place."""
        window = self.window(step.shape.bbox)
        if window is None:
            return self

        canvas, local = window
        coverage = step.rasterize().coverage[local][..., None]
        color = np.asarray(step.color, dtype=np.float64)
        self.pixels[canvas] = self.pixels[canvas] * (1.0 - coverage) + color * coverage
        return self

    def to_image(self, size: Optional[int] = None) -> Image.Image:
        """Convert to an 8-bit RGB image, optionally scaled to a longest side."""
        data = np.clip(np.rint(self.pixels), 0, 255).astype(np.uint8)
        image = Image.fromarray(data)
        if size is not None and size != max(self.width, self.height):
            image = image.resize(scaled_size(self.width, self.height, size), Image.LANCZOS)
        return image


def load_target(source: Union[str, Path, Image.Image], compute_size: int) -> Raster:
    """
    Load and scale the target image.

    Args:
        source: Path to an image file, or a PIL image
        compute_size: Longest side of the working raster

    Returns:
        Raster of the target

    Raises:
        FileNotFoundError: If the file doesn't exist
        RasterError: If the file cannot be loaded
    """
    if isinstance(source, Image.Image):
        return Raster.from_image(_prepare_image(source, compute_size))

    path = Path(source)
    if not path.exists():
        raise FileNotFoundError(f"Image file not found: {path}")
    if not path.is_file():
        raise RasterError(f"Path is not a file: {path}")

    try:
        with Image.open(path) as img:
            raster = Raster.from_image(_prepare_image(img, compute_size))
    except (IOError, OSError) as e:
        raise RasterError(f"Failed to load image {path}: {e}") from e

    logger.info(f"Loaded target {path} at {raster.width}x{raster.height}")
    return raster


def _prepare_image(img: Image.Image, compute_size: int) -> Image.Image:
    """Orient, flatten alpha onto white and scale an image."""
    img = ImageOps.exif_transpose(img)

    if img.mode in ("RGBA", "LA", "P"):
        img = img.convert("RGBA")
        background = Image.new("RGB", img.size, (255, 255, 255))
        background.paste(img, mask=img.split()[3])
        img = background
    elif img.mode != "RGB":
        img = img.convert("RGB")

    size = scaled_size(img.width, img.height, compute_size)
    if size != img.size:
        img = img.resize(size, Image.LANCZOS)
    return img
