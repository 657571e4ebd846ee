"""Quality checks for a finished composition."""
from typing import Dict

import numpy as np
from skimage.metrics import structural_similarity as ssim

from primvec.raster import Raster
from primvec.types import RasterError

SSIM_THRESHOLD = 0.5


def compute_ssim(image1: np.ndarray, image2: np.ndarray) -> float:
    """
    Compute Structural Similarity Index (SSIM) between two RGB images.

    Args:
        image1: First image (H, W, 3) in 0..255
        image2: Second image (H, W, 3) in 0..255

    Returns:
        SSIM score in range [-1, 1] (1 = identical)
    """
    if image1.shape != image2.shape:
        raise RasterError(f"Shape mismatch: {image1.shape} vs {image2.shape}")

    img1 = image1.astype(np.float64) / 255.0
    img2 = image2.astype(np.float64) / 255.0

    # skimage needs the window to fit inside the image
    win_size = min(7, img1.shape[0], img1.shape[1])
    if win_size % 2 == 0:
        win_size -= 1
    if win_size < 3:
        return 1.0 if np.array_equal(img1, img2) else 0.0

    score = ssim(img1, img2, channel_axis=2, data_range=1.0, win_size=win_size)
    return float(score)


def validate(target: Raster, canvas: Raster) -> Dict[str, object]:
    """
    Compare a composition with its target.

    Returns:
        Dict with distance, ssim, ssim_pass and overall_pass
    """
    distance = target.distance(canvas)
    score = compute_ssim(target.pixels, canvas.pixels)
    ssim_pass = score >= SSIM_THRESHOLD
    return {
        "distance": distance,
        "ssim": score,
        "ssim_pass": ssim_pass,
        "overall_pass": ssim_pass,
    }
