"""Writing final markup as SVG, PNG or PDF."""
import io
import logging
import re
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import Optional, Tuple, Union

import numpy as np
from PIL import Image

from svgrefine.markup import SVG_NS
from svgrefine.raster_ingest import save_image
from svgrefine.types import ExportError, ImageBuffer

logger = logging.getLogger(__name__)

DEFAULT_SIZE = (1024, 1024)
EXPORT_FORMATS = ("svg", "png", "pdf")

_ROOT_RE = re.compile(r"^\s*(<\?xml[^>]*\?>\s*)?(<!--.*?-->\s*)*<svg\b", re.DOTALL)
_NUMBER_RE = re.compile(r"[-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?")


def ensure_svg_root(markup: str) -> str:
    """Wrap a markup fragment in an ``<svg>`` element if it lacks one."""
    if _ROOT_RE.match(markup):
        return markup
    return f'<svg xmlns="{SVG_NS}" viewBox="0 0 100 100">{markup}</svg>'


def _length(value: Optional[str]) -> Optional[float]:
    if not value:
        return None
    match = _NUMBER_RE.match(value.strip())
    if not match:
        return None
    number = float(match.group())
    return number if number > 0 else None


def export_dimensions(markup: str) -> Tuple[float, float]:
    """
    Pixel size to render markup at.

    Taken from the root's viewBox, else its width/height attributes, else
    1024x1024.
    """
    width, height = DEFAULT_SIZE
    try:
        root = ET.fromstring(ensure_svg_root(markup))
    except ET.ParseError:
        return width, height

    view_box = root.get("viewBox")
    if view_box:
        parts = re.split(r"[\s,]+", view_box.strip())
        if len(parts) == 4:
            return _length(parts[2]) or width, _length(parts[3]) or height

    w = _length(root.get("width"))
    h = _length(root.get("height"))
    if w and h:
        return w, h

    return width, height


def rasterize(markup: str, width: Optional[int] = None, height: Optional[int] = None) -> ImageBuffer:
    """
    Render markup to an RGBA buffer with cairosvg.

    Raises:
        ExportError: If rendering fails
    """
    import cairosvg

    markup = ensure_svg_root(markup)
    if width is None or height is None:
        w, h = export_dimensions(markup)
        width = width or w
        height = height or h
    width, height = max(1, int(round(width))), max(1, int(round(height)))

    try:
        png = cairosvg.svg2png(
            bytestring=markup.encode('utf-8'),
            output_width=width,
            output_height=height
        )
        with Image.open(io.BytesIO(png)) as img:
            img = img.convert('RGBA')
            buffer = ImageBuffer(img.width, img.height, np.array(img, dtype=np.uint8))
    except Exception as e:
        raise ExportError(f"Failed to rasterize markup: {e}") from e

    logger.debug(f"Rasterized markup at {width}x{height}")
    return buffer


def save_svg(markup: str, path: Union[str, Path]) -> Path:
    """Write markup text to a file."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(markup, encoding='utf-8')
    return path


def export(markup: str, path: Union[str, Path], fmt: Optional[str] = None) -> Path:
    """
    Export markup to a file.

    Args:
        markup: Final markup text (fragments get an ``<svg>`` root)
        path: Output file
        fmt: 'svg', 'png' or 'pdf'; taken from the file extension if omitted

    Returns:
        Path written

    Raises:
        ExportError: For unknown formats or rendering failures
    """
    path = Path(path)
    fmt = (fmt or path.suffix.lstrip('.') or 'svg').lower()
    if fmt not in EXPORT_FORMATS:
        raise ExportError(f"Unsupported export format: {fmt}")

    markup = ensure_svg_root(markup)

    if fmt == 'svg':
        save_svg(markup, path)
    elif fmt == 'png':
        save_image(rasterize(markup), path)
    else:
        import cairosvg

        path.parent.mkdir(parents=True, exist_ok=True)
        try:
            cairosvg.svg2pdf(bytestring=markup.encode('utf-8'), write_to=str(path))
        except Exception as e:
            raise ExportError(f"Failed to write PDF {path}: {e}") from e

    logger.info(f"Exported {fmt.upper()}: {path}")
    return path
