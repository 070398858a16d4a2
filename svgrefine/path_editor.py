"""Node-level editing of path geometry."""
import logging
from dataclasses import replace
from typing import Callable, List, Optional, Sequence

from svgrefine.markup import PathElement
from svgrefine.path_parser import format_number
from svgrefine.types import CommandKind, PathCommandPoint

logger = logging.getLogger(__name__)

UpdateCallback = Callable[[PathElement, str], None]


def points_to_path_data(points: Sequence[PathCommandPoint], precision: int = 3) -> str:
    """
    Convert edited points back to path data.

    The first point and every MOVE_TO point start a subpath; the rest are
    line commands.
    """
    if not points:
        return ''

    fmt = lambda v: format_number(v, precision)
    parts = []
    for i, point in enumerate(points):
        letter = 'M' if i == 0 or point.kind is CommandKind.MOVE_TO else 'L'
        parts.append(f"{letter} {fmt(point.x)} {fmt(point.y)}")
    return ' '.join(parts)


def update_point(points: Sequence[PathCommandPoint], index: int, x: float, y: float) -> List[PathCommandPoint]:
    """Copy of ``points`` with one point moved; out-of-range indices change nothing."""
    points = list(points)
    if 0 <= index < len(points):
        points[index] = replace(points[index], x=x, y=y)
    return points


def remove_point(points: Sequence[PathCommandPoint], index: int) -> List[PathCommandPoint]:
    """Copy of ``points`` without one point. A path keeps at least two points."""
    points = list(points)
    if 0 <= index < len(points) and len(points) > 2:
        del points[index]
    return points


def add_point(
    points: Sequence[PathCommandPoint],
    index: int,
    x: Optional[float] = None,
    y: Optional[float] = None
) -> List[PathCommandPoint]:
    """
    Insert a point after ``index``.

    Without coordinates the new point sits halfway between ``points[index]``
    and the next point (wrapping to the first). An out-of-range index
    appends, at the origin if no coordinates are given.
    """
    points = list(points)
    if 0 <= index < len(points):
        prev_point = points[index]
        next_point = points[(index + 1) % len(points)]
        new = PathCommandPoint(
            x if x is not None else (prev_point.x + next_point.x) / 2,
            y if y is not None else (prev_point.y + next_point.y) / 2,
            CommandKind.LINE_TO,
        )
        points.insert(index + 1, new)
    else:
        points.append(PathCommandPoint(
            x if x is not None else 0.0,
            y if y is not None else 0.0,
            CommandKind.LINE_TO,
        ))
    return points


def delete_node(
    element: PathElement,
    index: int,
    on_update: Optional[UpdateCallback] = None,
    precision: int = 3
) -> str:
    """Remove one node from a path element and notify ``on_update``."""
    points = remove_point(element.points, index)
    element.d = points_to_path_data(points, precision)
    if on_update is not None:
        on_update(element, element.d)
    return element.d


class NodeDragSession:
    """
    Drag of one node of a path element.

    Every :meth:`move` rewrites the element's path data right away. The
    callback runs once, on :meth:`release`, and only if the node moved.
    """

    def __init__(
        self,
        element: PathElement,
        index: int,
        on_update: Optional[UpdateCallback] = None,
        precision: int = 3
    ):
        self.element = element
        self.index = index
        self.on_update = on_update
        self.precision = precision
        self.points = element.points
        self.moved = False
        self.active = True

    def move(self, x: float, y: float) -> str:
        if not self.active:
            return self.element.d

        self.points = update_point(self.points, self.index, x, y)
        self.element.d = points_to_path_data(self.points, self.precision)
        self.moved = True
        return self.element.d

    def release(self) -> None:
        if not self.active:
            return
        self.active = False

        if self.moved and self.on_update is not None:
            logger.debug(f"Node {self.index} of path {self.element.index} moved")
            self.on_update(self.element, self.element.d)
