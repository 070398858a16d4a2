"""Raster image loading into RGBA buffers."""
import logging
from pathlib import Path
from typing import Union

import numpy as np
from PIL import Image
from PIL import ImageOps

from svgrefine.types import ImageBuffer, ImageBufferError

logger = logging.getLogger(__name__)


def load_image(path: Union[str, Path]) -> ImageBuffer:
    """
    Load a raster image file as an RGBA buffer.

    EXIF orientation is applied before conversion.

    Args:
        path: Path to image file

    Returns:
        ImageBuffer with the decoded pixels

    Raises:
        FileNotFoundError: If file doesn't exist
        ImageBufferError: If file cannot be decoded
    """
    path = Path(path)

    if not path.exists():
        raise FileNotFoundError(f"Image file not found: {path}")

    if not path.is_file():
        raise ImageBufferError(f"Path is not a file: {path}")

    try:
        with Image.open(path) as img:
            # Apply EXIF orientation transformation to handle rotation
            img = ImageOps.exif_transpose(img)
            if img.mode != 'RGBA':
                img = img.convert('RGBA')

            width, height = img.size
            pixels = np.array(img, dtype=np.uint8)

    except (IOError, OSError) as e:
        raise ImageBufferError(f"Failed to load image {path}: {e}") from e

    logger.debug(f"Loaded {path.name}: {width}x{height}")
    return ImageBuffer(width, height, pixels)


def image_from_array(image: np.ndarray) -> ImageBuffer:
    """
    Create an ImageBuffer from a numpy array.

    Args:
        image: (H, W), (H, W, 3) or (H, W, 4) array, either uint8 or floats
            in [0, 1]

    Returns:
        ImageBuffer (opaque unless the array has an alpha channel)
    """
    image = np.asarray(image)

    if image.ndim == 2:
        # Grayscale - convert to RGB
        image = np.stack([image] * 3, axis=-1)

    if image.ndim != 3:
        raise ImageBufferError(f"Expected 3D array, got {image.ndim}D")

    if np.issubdtype(image.dtype, np.floating):
        image = np.clip(np.round(image * 255.0), 0, 255)
    image = image.astype(np.uint8)

    height, width, channels = image.shape
    if channels == 3:
        alpha = np.full((height, width, 1), 255, dtype=np.uint8)
        image = np.concatenate([image, alpha], axis=-1)
    elif channels != 4:
        raise ImageBufferError(f"Expected 3 or 4 channels, got {channels}")

    return ImageBuffer(width, height, image)


def save_image(image: ImageBuffer, path: Union[str, Path]) -> None:
    """Write a buffer to disk; the format follows the file extension."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    Image.fromarray(image.pixels).save(path)
