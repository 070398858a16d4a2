"""Bitmap to vector tracing engines."""
import logging
import tempfile
from pathlib import Path
from typing import Any, Dict, Optional, Protocol

from PIL import Image

from svgrefine.types import ImageBuffer, PipelineOptions, TracingError

logger = logging.getLogger(__name__)

DEFAULT_VTRACER_SETTINGS: Dict[str, Any] = {
    'colormode': 'color',
    'hierarchical': 'stacked',
    'mode': 'spline',
    'filter_speckle': 4,
    'color_precision': 6,
    'layer_difference': 16,
    'corner_threshold': 60,
    'length_threshold': 4.0,
    'max_iterations': 10,
    'splice_threshold': 45,
    'path_precision': 3,
}


class Tracer(Protocol):
    """Anything that turns a pixel buffer into vector markup."""

    def __call__(self, image: ImageBuffer, options: PipelineOptions) -> str:
        ...


class VTracerEngine:
    """
    Tracer backed by vtracer.

    vtracer works on files, so the buffer is written to a temporary PNG and
    the markup read back from a temporary SVG.
    """

    def __init__(self, settings: Optional[Dict[str, Any]] = None):
        self.settings = dict(DEFAULT_VTRACER_SETTINGS)
        if settings:
            self.settings.update(settings)

    def __call__(self, image: ImageBuffer, options: Optional[PipelineOptions] = None) -> str:
        import vtracer

        with tempfile.TemporaryDirectory(prefix="svgrefine-") as tmp:
            in_path = Path(tmp) / "input.png"
            out_path = Path(tmp) / "output.svg"

            Image.fromarray(image.pixels).save(in_path)

            logger.debug(f"Tracing {image.width}x{image.height} image with vtracer")
            try:
                vtracer.convert_image_to_svg_py(str(in_path), str(out_path), **self.settings)
            except Exception as e:
                raise TracingError(f"vtracer failed: {e}") from e

            if not out_path.exists():
                raise TracingError("vtracer produced no output")

            return out_path.read_text(encoding='utf-8')
