"""Sobel and Canny edge detection on RGBA buffers."""
import logging
from typing import Optional, Tuple

import numpy as np
from scipy import ndimage
from skimage.filters import apply_hysteresis_threshold

from svgrefine.types import EdgeDetectOptions, EdgeMap, ImageBuffer

logger = logging.getLogger(__name__)

LUMA_WEIGHTS = np.array([0.299, 0.587, 0.114])

SOBEL_X = np.array([
    [-1, 0, 1],
    [-2, 0, 2],
    [-1, 0, 1],
], dtype=np.float64)

SOBEL_Y = np.array([
    [-1, -2, -1],
    [0, 0, 0],
    [1, 2, 1],
], dtype=np.float64)

GAUSSIAN_3X3 = np.array([
    [1, 2, 1],
    [2, 4, 2],
    [1, 2, 1],
], dtype=np.float64) / 16.0

EIGHT_CONNECTED = np.ones((3, 3), dtype=bool)


def to_grayscale(image: ImageBuffer) -> np.ndarray:
    """Luma of each pixel as float64 (height, width); alpha is ignored."""
    rgb = image.pixels[..., :3].astype(np.float64)
    return rgb @ LUMA_WEIGHTS


def _interior(shape: Tuple[int, int]) -> np.ndarray:
    mask = np.zeros(shape, dtype=bool)
    if shape[0] > 2 and shape[1] > 2:
        mask[1:-1, 1:-1] = True
    return mask


def _neighbour(values: np.ndarray, dy: int, dx: int) -> np.ndarray:
    """values[y + dy, x + dx] for every pixel, 0 outside the frame."""
    h, w = values.shape
    padded = np.pad(values, 1)
    return padded[1 + dy:1 + dy + h, 1 + dx:1 + dx + w]


def sobel_gradients(gray: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    """
    Horizontal and vertical Sobel responses.

    Only interior pixels are computed; the one pixel border is 0.
    """
    gray = np.asarray(gray, dtype=np.float64)
    gx = ndimage.correlate(gray, SOBEL_X, mode="constant")
    gy = ndimage.correlate(gray, SOBEL_Y, mode="constant")

    border = ~_interior(gray.shape)
    gx[border] = 0
    gy[border] = 0
    return gx, gy


def sobel(image: ImageBuffer, threshold: float = 50.0) -> EdgeMap:
    """
    Binary Sobel edge map.

    Args:
        image: Source buffer
        threshold: Gradient magnitude above which a pixel is an edge

    Returns:
        uint8 (height, width) map of 0/255, border always 0
    """
    # Grey levels are stored as whole bytes before the convolution
    gray = np.floor(to_grayscale(image))
    gx, gy = sobel_gradients(gray)
    magnitude = np.hypot(gx, gy)

    edges = (magnitude > threshold) & _interior(gray.shape)
    return np.where(edges, 255, 0).astype(np.uint8)


def non_maximum_suppression(magnitude: np.ndarray, direction: np.ndarray) -> np.ndarray:
    """
    Keep only magnitudes that peak across the gradient direction.

    Directions fall into four buckets (0, 45, 90 and 135 degrees, +-22.5)
    and each pixel is compared with its two neighbours along the bucket.
    """
    angle = (np.degrees(direction) + 180) % 180

    horizontal = (angle < 22.5) | (angle >= 157.5)
    diagonal_up = (angle >= 22.5) & (angle < 67.5)
    vertical = (angle >= 67.5) & (angle < 112.5)
    diagonal_down = ~(horizontal | diagonal_up | vertical)

    first = np.zeros_like(magnitude)
    second = np.zeros_like(magnitude)
    for mask, (dy1, dx1), (dy2, dx2) in (
        (horizontal, (0, -1), (0, 1)),
        (diagonal_up, (-1, 1), (1, -1)),
        (vertical, (-1, 0), (1, 0)),
        (diagonal_down, (-1, -1), (1, 1)),
    ):
        first[mask] = _neighbour(magnitude, dy1, dx1)[mask]
        second[mask] = _neighbour(magnitude, dy2, dx2)[mask]

    peaks = (magnitude >= first) & (magnitude >= second) & _interior(magnitude.shape)
    return np.where(peaks, magnitude, 0.0)


def single_pass_hysteresis(values: np.ndarray, low: float, high: float) -> np.ndarray:
    """
    Double threshold evaluated in one raster pass.

    A value >= ``high`` is an edge. A value >= ``low`` is an edge when one of
    its 8 neighbours is >= ``high`` or was already marked earlier in the
    pass. Weak pixels later in scan order cannot rescue earlier ones, so
    chains of weak pixels only grow down and to the right.
    """
    strong = values >= high
    weak = (values >= low) & ~strong

    edges = strong.copy()
    near_strong = ndimage.binary_dilation(strong, structure=EIGHT_CONNECTED)
    edges |= weak & near_strong

    h, w = values.shape
    pending = weak & ~near_strong
    for y, x in zip(*np.nonzero(pending)):
        # Only neighbours earlier in scan order can be marked by now
        if (
            (x > 0 and edges[y, x - 1])
            or (y > 0 and edges[y - 1, max(0, x - 1):min(w, x + 2)].any())
        ):
            edges[y, x] = True

    return edges


def canny(
    image: ImageBuffer,
    low_threshold: float = 50.0,
    high_threshold: float = 100.0,
    iterative: bool = False
) -> EdgeMap:
    """
    Canny edge map.

    Grayscale, 3x3 Gaussian blur (edges replicated), Sobel magnitude and
    angle, non-maximum suppression and double-threshold hysteresis.

    Args:
        image: Source buffer
        low_threshold: Weak edge threshold
        high_threshold: Strong edge threshold
        iterative: Propagate weak edges until stable instead of the single
            raster pass

    Returns:
        uint8 (height, width) map of 0/255
    """
    gray = to_grayscale(image)
    blurred = ndimage.correlate(gray, GAUSSIAN_3X3, mode="nearest")

    gx, gy = sobel_gradients(blurred)
    magnitude = np.hypot(gx, gy)
    direction = np.arctan2(gy, gx)

    suppressed = non_maximum_suppression(magnitude, direction)

    if iterative:
        edges = apply_hysteresis_threshold(suppressed, low_threshold, high_threshold)
    else:
        edges = single_pass_hysteresis(suppressed, low_threshold, high_threshold)

    return np.where(edges, 255, 0).astype(np.uint8)


def detect_edges(image: ImageBuffer, options: Optional[EdgeDetectOptions] = None) -> EdgeMap:
    """Run the detector selected by ``options.mode`` (Sobel unless 'canny')."""
    options = options or EdgeDetectOptions()

    if options.mode == "canny":
        logger.debug(
            f"Canny edge detection (low={options.low_threshold}, "
            f"high={options.high_threshold}, iterative={options.iterative})"
        )
        return canny(image, options.low_threshold, options.high_threshold, options.iterative)

    if options.mode != "sobel":
        logger.warning(f"Unknown edge detection mode '{options.mode}', using sobel")
    logger.debug(f"Sobel edge detection (threshold={options.threshold})")
    return sobel(image, options.threshold)


def edge_map_to_image(edge_map: EdgeMap) -> ImageBuffer:
    """Grey opaque RGBA buffer showing an edge map."""
    edge_map = np.asarray(edge_map, dtype=np.uint8)
    h, w = edge_map.shape
    pixels = np.empty((h, w, 4), dtype=np.uint8)
    pixels[..., :3] = edge_map[..., None]
    pixels[..., 3] = 255
    return ImageBuffer(w, h, pixels)
