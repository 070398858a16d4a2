"""Removal of paths too small to matter."""
import logging
import math
from typing import NamedTuple, Sequence

from svgrefine.markup import SVGDocument, transform_markup

logger = logging.getLogger(__name__)

SIZE_MODES = ("area", "length", "dimension")


class BoundingBox(NamedTuple):
    min_x: float
    min_y: float
    max_x: float
    max_y: float

    @property
    def width(self) -> float:
        return self.max_x - self.min_x

    @property
    def height(self) -> float:
        return self.max_y - self.min_y


def bounding_box(points: Sequence) -> BoundingBox:
    """Axis-aligned bounds of a point sequence (all zero when empty)."""
    if len(points) == 0:
        return BoundingBox(0.0, 0.0, 0.0, 0.0)

    xs = [p.x for p in points]
    ys = [p.y for p in points]
    return BoundingBox(min(xs), min(ys), max(xs), max(ys))


def polygon_area(points: Sequence) -> float:
    """Shoelace area of the polygon through the points; 0 below 3 points."""
    n = len(points)
    if n < 3:
        return 0.0

    area = 0.0
    for i in range(n):
        j = (i + 1) % n
        area += points[i].x * points[j].y
        area -= points[j].x * points[i].y

    return abs(area / 2)


def path_length(points: Sequence) -> float:
    """Length along the points, plus one closing edge when there are more than 2."""
    n = len(points)
    if n < 2:
        return 0.0

    length = sum(
        math.hypot(points[i + 1].x - points[i].x, points[i + 1].y - points[i].y)
        for i in range(n - 1)
    )
    if n > 2:
        length += math.hypot(points[0].x - points[-1].x, points[0].y - points[-1].y)

    return length


def region_size(points: Sequence, mode: str = "dimension") -> float:
    """
    Size of a region for the given mode.

    Args:
        points: Flattened path points
        mode: 'area' (shoelace), 'length' (perimeter) or 'dimension'
            (smaller bounding box side); anything else means 'dimension'

    Returns:
        Size in the mode's unit
    """
    if mode == "area":
        return polygon_area(points)
    if mode == "length":
        return path_length(points)
    box = bounding_box(points)
    return min(box.width, box.height)


def remove_small_regions(doc: SVGDocument, threshold: float, mode: str = "dimension") -> SVGDocument:
    """
    Drop every path whose size is below ``threshold``.

    Paths whose data yields no points are kept.

    Args:
        doc: Document to modify in place
        threshold: Minimum size to keep; <= 0 leaves the document alone
        mode: Size measure, see :func:`region_size`

    Returns:
        The same document
    """
    if threshold <= 0:
        return doc

    if mode not in SIZE_MODES:
        logger.warning(f"Unknown size mode '{mode}', using 'dimension'")
        mode = "dimension"

    removed = 0
    for element in doc.paths():
        points = element.points
        if not points:
            continue
        if region_size(points, mode) < threshold:
            doc.remove(element.node)
            removed += 1

    logger.debug(f"Removed {removed} regions smaller than {threshold} ({mode})")
    return doc


def remove_small_svg_regions(markup: str, threshold: float, mode: str = "dimension") -> str:
    """Remove small paths from markup text."""
    if threshold <= 0:
        return markup
    return transform_markup(markup, remove_small_regions, threshold, mode)
