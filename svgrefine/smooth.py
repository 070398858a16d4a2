"""Path smoothing with a circular Gaussian kernel or Catmull-Rom blending."""
import logging
import math
from typing import List, Sequence

import numpy as np

from svgrefine.markup import SVGDocument, transform_markup
from svgrefine.path_parser import is_closed, parse_path, serialize_points
from svgrefine.types import Point

logger = logging.getLogger(__name__)

# Smoothness at which the Gaussian regime hands over to Catmull-Rom
METHOD_SWITCH = 0.5


def _as_array(points: Sequence) -> np.ndarray:
    return np.array([[p.x, p.y] for p in points], dtype=np.float64)


def _as_points(coords: np.ndarray) -> List[Point]:
    return [Point(float(x), float(y)) for x, y in coords]


def gaussian_smooth(points: Sequence, radius: int) -> List[Point]:
    """
    Circular Gaussian smoothing.

    Each output point is the weighted mean of the points within ``radius``
    positions of it, wrapping around the ends, with weight
    ``exp(-i^2 / (2 * radius^2))``.

    Args:
        points: Sequence of objects with x and y attributes
        radius: Kernel radius in points (>= 1)

    Returns:
        Smoothed points, same count as the input
    """
    if len(points) <= 2:
        return [Point(p.x, p.y) for p in points]

    coords = _as_array(points)
    smoothed = np.zeros_like(coords)
    weight_sum = 0.0

    for offset in range(-radius, radius + 1):
        weight = math.exp(-(offset * offset) / (2 * radius * radius))
        # roll by -offset puts coords[(i + offset) % n] at position i
        smoothed += weight * np.roll(coords, -offset, axis=0)
        weight_sum += weight

    return _as_points(smoothed / weight_sum)


def catmull_rom_smooth(points: Sequence, smoothness: float) -> List[Point]:
    """
    Blend each point with a Catmull-Rom spline evaluated at t=0.5.

    The spline through the previous, current and next two points (circular)
    is evaluated without the usual 1/2 factor and blended as
    ``p * (1 - s) + spline * s * 0.5``.

    Args:
        points: Sequence of objects with x and y attributes
        smoothness: Blend factor in [0, 1]

    Returns:
        Smoothed points, same count as the input
    """
    if len(points) <= 2:
        return [Point(p.x, p.y) for p in points]

    p1 = _as_array(points)
    p0 = np.roll(p1, 1, axis=0)
    p2 = np.roll(p1, -1, axis=0)
    p3 = np.roll(p1, -2, axis=0)

    t = 0.5
    t2 = t * t
    t3 = t2 * t

    spline = (
        2 * p1
        + (-p0 + p2) * t
        + (2 * p0 - 5 * p1 + 4 * p2 - p3) * t2
        + (-p0 + 3 * p1 - 3 * p2 + p3) * t3
    )

    blended = p1 * (1 - smoothness) + spline * smoothness * 0.5
    return _as_points(blended)


def smooth_points(points: Sequence, smoothness: float) -> List:
    """
    Smooth a point sequence.

    Below 0.5 a circular Gaussian with radius ``max(1, floor(10 * s))`` is
    used, from 0.5 up Catmull-Rom blending. The switch is a hard one, so
    output jumps at exactly 0.5.

    Args:
        points: Sequence of objects with x and y attributes
        smoothness: Smoothness in [0, 1]

    Returns:
        Smoothed points (input returned as-is when nothing to do)
    """
    if smoothness <= 0 or len(points) < 3:
        return list(points)

    if smoothness < METHOD_SWITCH:
        radius = max(1, int(math.floor(smoothness * 10)))
        return gaussian_smooth(points, radius)
    return catmull_rom_smooth(points, smoothness)


def smooth_path(d: str, smoothness: float, precision: int = 3) -> str:
    """Smooth path data."""
    if not d or not d.strip() or smoothness <= 0:
        return d

    points = parse_path(d)
    if len(points) <= 2:
        return d

    return serialize_points(smooth_points(points, smoothness), is_closed(d), precision)


def smooth_paths(doc: SVGDocument, smoothness: float, precision: int = 3) -> SVGDocument:
    """Smooth every path of a document in place."""
    if smoothness <= 0:
        return doc
    if smoothness > 1:
        logger.warning(f"Smoothness {smoothness} above 1, clamping")
        smoothness = 1.0

    method = "gaussian" if smoothness < METHOD_SWITCH else "catmull-rom"
    count = 0
    for element in doc.paths():
        smoothed = smooth_path(element.d, smoothness, precision)
        if smoothed != element.d:
            element.d = smoothed
            count += 1

    logger.debug(f"Smoothed {count} paths ({method}, smoothness={smoothness})")
    return doc


def smooth_svg_paths(markup: str, smoothness: float, precision: int = 3) -> str:
    """Smooth all paths in markup text."""
    if smoothness <= 0:
        return markup
    return transform_markup(markup, smooth_paths, smoothness, precision)
