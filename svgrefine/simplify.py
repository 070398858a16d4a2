"""Path simplification using the Douglas-Peucker algorithm."""
import logging
import math
from typing import List, Sequence, TypeVar

from svgrefine.markup import SVGDocument, transform_markup
from svgrefine.path_parser import is_closed, parse_path, serialize_points

logger = logging.getLogger(__name__)

P = TypeVar("P")


def perpendicular_distance(point, line_start, line_end) -> float:
    """
    Distance from a point to a line segment.

    The projection is clamped to the segment. A zero-length segment falls
    back to the Euclidean distance to its single point.
    """
    dx = line_end.x - line_start.x
    dy = line_end.y - line_start.y

    if dx == 0 and dy == 0:
        return math.hypot(point.x - line_start.x, point.y - line_start.y)

    t = ((point.x - line_start.x) * dx + (point.y - line_start.y) * dy) / (dx * dx + dy * dy)
    t = max(0.0, min(1.0, t))
    proj_x = line_start.x + t * dx
    proj_y = line_start.y + t * dy

    return math.hypot(point.x - proj_x, point.y - proj_y)


def douglas_peucker(points: Sequence[P], tolerance: float) -> List[P]:
    """
    Simplify a polyline with the Douglas-Peucker algorithm.

    Keeps the point farthest from the chord between the endpoints when it
    lies beyond ``tolerance`` and splits the run there; otherwise the run
    collapses to its endpoints. Endpoints are always preserved.

    Args:
        points: Sequence of objects with x and y attributes
        tolerance: Maximum allowed deviation (>= 0)

    Returns:
        Simplified list of the input point objects
    """
    n = len(points)
    if n <= 2:
        return list(points)

    keep = [False] * n
    keep[0] = keep[-1] = True

    # Traced outlines can be longer than the recursion limit
    stack = [(0, n - 1)]
    while stack:
        first, last = stack.pop()
        max_distance = 0.0
        max_index = first

        for i in range(first + 1, last):
            distance = perpendicular_distance(points[i], points[first], points[last])
            if distance > max_distance:
                max_distance = distance
                max_index = i

        if max_distance > tolerance:
            keep[max_index] = True
            stack.append((first, max_index))
            stack.append((max_index, last))

    return [p for p, k in zip(points, keep) if k]


def simplify_path(d: str, tolerance: float = 1.0, precision: int = 3) -> str:
    """
    Simplify path data.

    Paths that flatten to two points or fewer are returned untouched.
    """
    if not d or not d.strip():
        return d

    points = parse_path(d)
    if len(points) <= 2:
        return d

    simplified = douglas_peucker(points, tolerance)
    return serialize_points(simplified, is_closed(d), precision)


def simplify_paths(doc: SVGDocument, tolerance: float = 1.0, precision: int = 3) -> SVGDocument:
    """Simplify every path of a document in place."""
    if tolerance < 0:
        logger.warning(f"Negative simplify tolerance {tolerance}, skipping")
        return doc

    before = after = 0
    for element in doc.paths():
        d = element.d
        simplified = simplify_path(d, tolerance, precision)
        if simplified != d:
            before += len(element.points)
            element.d = simplified
            after += len(element.points)

    logger.debug(f"Simplified paths: {before} -> {after} nodes (tolerance={tolerance})")
    return doc


def simplify_svg_paths(markup: str, tolerance: float = 1.0, precision: int = 3) -> str:
    """Simplify all paths in markup text."""
    return transform_markup(markup, simplify_paths, tolerance, precision)
