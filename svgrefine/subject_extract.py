"""Background removal seeded from the image corners."""
import logging
from typing import Optional, Tuple

import numpy as np
from scipy import ndimage

from svgrefine.edge_detection import sobel_gradients
from svgrefine.types import ImageBuffer, SubjectExtractOptions

logger = logging.getLogger(__name__)

# Sobel magnitude above which a pixel is always kept
EDGE_THRESHOLD = 30.0

SAMPLE_BLOCK = 10
SAMPLE_FRACTION = 0.1
SEED_BLOCK = 20
SEED_FRACTION = 0.15

FOUR_CONNECTED = ndimage.generate_binary_structure(2, 1)


def _block_size(width: int, height: int, limit: int, fraction: float) -> int:
    return min(limit, int(np.floor(width * fraction)), int(np.floor(height * fraction)))


def _corner_mask(height: int, width: int, n: int) -> np.ndarray:
    mask = np.zeros((height, width), dtype=bool)
    if n > 0:
        mask[:n, :n] = True
        mask[:n, -n:] = True
        mask[-n:, :n] = True
        mask[-n:, -n:] = True
    return mask


def sample_background_color(image: ImageBuffer) -> Optional[Tuple[float, float, float]]:
    """
    Mean RGB of the four corner blocks.

    Blocks are ``N x N`` with ``N = min(10, 10% of width, 10% of height)``.
    Returns None when the image is too small to have a block.
    """
    n = _block_size(image.width, image.height, SAMPLE_BLOCK, SAMPLE_FRACTION)
    if n <= 0:
        return None

    rgb = image.pixels[..., :3].astype(np.float64)
    blocks = [
        rgb[:n, :n],
        rgb[:n, -n:],
        rgb[-n:, :n],
        rgb[-n:, -n:],
    ]
    samples = np.concatenate([block.reshape(-1, 3) for block in blocks])
    r, g, b = samples.mean(axis=0)
    return float(r), float(g), float(b)


def classify_background(
    image: ImageBuffer,
    background: Tuple[float, float, float],
    threshold: float
) -> np.ndarray:
    """Pixels that are mostly transparent or close to the background color."""
    rgb = image.pixels[..., :3].astype(np.float64)
    alpha = image.pixels[..., 3]
    distance = np.linalg.norm(rgb - np.asarray(background, dtype=np.float64), axis=-1)
    return (alpha < 128) | (distance < threshold)


def edge_mask(image: ImageBuffer, threshold: float = EDGE_THRESHOLD) -> np.ndarray:
    """Pixels whose Sobel magnitude on the mean-RGB grey exceeds ``threshold``."""
    gray = image.pixels[..., :3].astype(np.float64).mean(axis=-1)
    gx, gy = sobel_gradients(gray)
    return np.hypot(gx, gy) > threshold


def connected_to_corners(background: np.ndarray, n: int) -> np.ndarray:
    """
    Part of a background mask 4-connected to a corner block.

    Background pixels inside the four ``n x n`` corner blocks seed the
    fill; background regions no seed reaches are dropped.
    """
    labels, count = ndimage.label(background, structure=FOUR_CONNECTED)
    if count == 0:
        return background

    seeds = _corner_mask(*background.shape, n) & background
    seed_labels = np.unique(labels[seeds])
    seed_labels = seed_labels[seed_labels > 0]
    return np.isin(labels, seed_labels)


def extract_subject(image: ImageBuffer, options: Optional[SubjectExtractOptions] = None) -> ImageBuffer:
    """
    Make the background of an image transparent.

    Args:
        image: Source buffer (not modified)
        options: Color threshold, edge protection and corner seeding

    Returns:
        New buffer where background pixels are (0, 0, 0, 0) and every other
        pixel is copied from the source
    """
    options = options or SubjectExtractOptions()

    background_color = None
    if options.keep_corners:
        background_color = sample_background_color(image)
    if background_color is None:
        background_color = (0.0, 0.0, 0.0)

    background = classify_background(image, background_color, options.threshold)

    if options.detect_edges:
        background &= ~edge_mask(image)

    if options.keep_corners:
        n = _block_size(image.width, image.height, SEED_BLOCK, SEED_FRACTION)
        if n > 0:
            background = connected_to_corners(background, n)
        else:
            logger.debug(f"Image {image.width}x{image.height} too small for corner seeds")

    pixels = image.pixels.copy()
    pixels[background] = 0

    logger.debug(
        f"Subject extraction: {int(background.sum())}/{background.size} background pixels "
        f"(bg color={tuple(round(c, 1) for c in background_color)})"
    )
    return ImageBuffer(image.width, image.height, pixels)
