"""Path data parsing and serialization.

Path data is parsed into absolute :class:`PathCommand` objects that keep
their control points. Stages that work on polylines call :func:`flatten`,
which is an explicit down-sampling step: every curve or arc becomes a single
line to its endpoint and the control points are dropped.
"""
import re
from typing import List, Optional, Sequence

from svgrefine.types import CommandKind, PathCommand, PathCommandPoint, Point


_SEGMENT_RE = re.compile(r"([MmLlHhVvCcSsQqTtAaZz])([^MmLlHhVvCcSsQqTtAaZz]*)")
_NUMBER_RE = re.compile(r"[-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?")
_CLOSED_RE = re.compile(r"[Zz]\s*$")

# Number of arguments consumed by one segment of each command
_ARITY = {
    'm': 2, 'l': 2, 'h': 1, 'v': 1,
    'c': 6, 's': 4, 'q': 4, 't': 2,
    'a': 7, 'z': 0,
}


def _numbers(text: str) -> List[float]:
    return [float(n) for n in _NUMBER_RE.findall(text)]


def _reflect(control: Point, about: Point) -> Point:
    return Point(2 * about.x - control.x, 2 * about.y - control.y)


def parse_commands(d: Optional[str]) -> List[PathCommand]:
    """
    Parse path data into absolute commands.

    H/V become line commands, S/T are expanded to full cubic/quadratic
    commands and implicit repetitions are split into one command per
    segment. A curve or arc whose argument count does not fit its arity is
    reduced to a line to its final two numbers.

    Args:
        d: Path data string

    Returns:
        List of absolute PathCommand objects (empty for malformed input)
    """
    if not d or not d.strip():
        return []

    commands: List[PathCommand] = []
    cx, cy = 0.0, 0.0
    sx, sy = 0.0, 0.0

    for letter, args in _SEGMENT_RE.findall(d):
        relative = letter.islower()
        op = letter.lower()
        coords = _numbers(args)

        if op == 'z':
            commands.append(PathCommand(CommandKind.CLOSE))
            cx, cy = sx, sy
            continue

        arity = _ARITY[op]
        if len(coords) < arity:
            if len(coords) >= 2 and op in 'csqa':
                # Not enough arguments for a full segment, keep the endpoint
                ex, ey = coords[-2], coords[-1]
                if relative:
                    ex, ey = cx + ex, cy + ey
                commands.append(PathCommand(CommandKind.LINE_TO, [Point(ex, ey)]))
                cx, cy = ex, ey
            continue

        if op in 'csqa' and len(coords) % arity != 0:
            ex, ey = coords[-2], coords[-1]
            if relative:
                ex, ey = cx + ex, cy + ey
            commands.append(PathCommand(CommandKind.LINE_TO, [Point(ex, ey)]))
            cx, cy = ex, ey
            continue

        for start in range(0, len(coords) - arity + 1, arity):
            seg = coords[start:start + arity]
            ox, oy = (cx, cy) if relative else (0.0, 0.0)

            if op == 'm':
                x, y = seg[0] + ox, seg[1] + oy
                if start == 0:
                    commands.append(PathCommand(CommandKind.MOVE_TO, [Point(x, y)]))
                    sx, sy = x, y
                else:
                    # Extra pairs after a moveto are implicit linetos
                    commands.append(PathCommand(CommandKind.LINE_TO, [Point(x, y)]))
                cx, cy = x, y

            elif op == 'l':
                cx, cy = seg[0] + ox, seg[1] + oy
                commands.append(PathCommand(CommandKind.LINE_TO, [Point(cx, cy)]))

            elif op == 'h':
                cx = seg[0] + ox
                commands.append(PathCommand(CommandKind.LINE_TO, [Point(cx, cy)]))

            elif op == 'v':
                cy = seg[0] + oy
                commands.append(PathCommand(CommandKind.LINE_TO, [Point(cx, cy)]))

            elif op == 'c':
                p1 = Point(seg[0] + ox, seg[1] + oy)
                p2 = Point(seg[2] + ox, seg[3] + oy)
                p3 = Point(seg[4] + ox, seg[5] + oy)
                commands.append(PathCommand(CommandKind.CUBIC_TO, [p1, p2, p3]))
                cx, cy = p3.x, p3.y

            elif op == 's':
                current = Point(cx, cy)
                prev = commands[-1] if commands else None
                if prev is not None and prev.kind is CommandKind.CUBIC_TO:
                    p1 = _reflect(prev.points[1], current)
                else:
                    p1 = current
                p2 = Point(seg[0] + ox, seg[1] + oy)
                p3 = Point(seg[2] + ox, seg[3] + oy)
                commands.append(PathCommand(CommandKind.CUBIC_TO, [p1, p2, p3]))
                cx, cy = p3.x, p3.y

            elif op == 'q':
                p1 = Point(seg[0] + ox, seg[1] + oy)
                p2 = Point(seg[2] + ox, seg[3] + oy)
                commands.append(PathCommand(CommandKind.QUAD_TO, [p1, p2]))
                cx, cy = p2.x, p2.y

            elif op == 't':
                current = Point(cx, cy)
                prev = commands[-1] if commands else None
                if prev is not None and prev.kind is CommandKind.QUAD_TO:
                    p1 = _reflect(prev.points[0], current)
                else:
                    p1 = current
                p2 = Point(seg[0] + ox, seg[1] + oy)
                commands.append(PathCommand(CommandKind.QUAD_TO, [p1, p2]))
                cx, cy = p2.x, p2.y

            elif op == 'a':
                end = Point(seg[5] + ox, seg[6] + oy)
                commands.append(PathCommand(
                    CommandKind.ARC_TO, [end],
                    arc=(seg[0], seg[1], seg[2], seg[3], seg[4])
                ))
                cx, cy = end.x, end.y

            if start > 0 and op in 'csqta':
                commands[-1].repeated = True

    return commands


def flatten(commands: Sequence[PathCommand]) -> List[PathCommandPoint]:
    """
    Down-sample commands to a polyline.

    A curve or arc command, implicit repetitions included, becomes one line
    to its final endpoint. A close command adds one line back to the
    subpath start unless the cursor is already there.
    """
    points: List[PathCommandPoint] = []
    cx, cy = 0.0, 0.0
    sx, sy = 0.0, 0.0

    for i, command in enumerate(commands):
        if command.kind is CommandKind.CLOSE:
            if cx != sx or cy != sy:
                points.append(PathCommandPoint(sx, sy, CommandKind.LINE_TO))
                cx, cy = sx, sy
            continue

        end = command.end
        if i + 1 < len(commands) and commands[i + 1].repeated:
            cx, cy = end.x, end.y
            continue

        if command.kind is CommandKind.MOVE_TO:
            points.append(PathCommandPoint(end.x, end.y, CommandKind.MOVE_TO))
            sx, sy = end.x, end.y
        else:
            points.append(PathCommandPoint(end.x, end.y, CommandKind.LINE_TO))
        cx, cy = end.x, end.y

    return points


def parse_path(d: Optional[str]) -> List[PathCommandPoint]:
    """Parse path data into a flattened point sequence."""
    return flatten(parse_commands(d))


def is_closed(d: Optional[str]) -> bool:
    """Check whether path data ends with a close command."""
    return bool(d) and bool(_CLOSED_RE.search(d.strip()))


def path_start(commands: Sequence[PathCommand]) -> Optional[Point]:
    """First point of a command list."""
    for command in commands:
        if command.end is not None:
            return command.end
    return None


def path_end(commands: Sequence[PathCommand]) -> Optional[Point]:
    """Endpoint of the last drawing command, ignoring a trailing close."""
    for command in reversed(commands):
        if command.end is not None:
            return command.end
    return None


def format_number(x: float, precision: int = 3) -> str:
    """
    Format number with given precision.

    Args:
        x: Number to format
        precision: Decimal places

    Returns:
        Formatted string without trailing zeros
    """
    formatted = f"{x:.{precision}f}"
    # Remove trailing zeros and decimal point if not needed
    if '.' in formatted:
        formatted = formatted.rstrip('0').rstrip('.')
    if formatted == '-0':
        formatted = '0'
    return formatted


def serialize_points(points: Sequence, closed: bool = False, precision: int = 3) -> str:
    """
    Convert points back to path data.

    Emits ``M`` for the first point and ``L`` for every other point, plus a
    trailing ``Z`` when closed.

    Args:
        points: Sequence of objects with x and y attributes
        closed: Whether to close the path
        precision: Decimal places

    Returns:
        Path data string
    """
    if len(points) == 0:
        return ''

    fmt = lambda v: format_number(v, precision)
    parts = []
    for i, point in enumerate(points):
        letter = 'M' if i == 0 else 'L'
        parts.append(f"{letter} {fmt(point.x)} {fmt(point.y)}")

    if closed:
        parts.append('Z')

    return ' '.join(parts)


def serialize_commands(commands: Sequence[PathCommand], precision: int = 3) -> str:
    """Convert absolute commands back to path data, keeping curves."""
    fmt = lambda v: format_number(v, precision)
    letters = {
        CommandKind.MOVE_TO: 'M',
        CommandKind.LINE_TO: 'L',
        CommandKind.CUBIC_TO: 'C',
        CommandKind.QUAD_TO: 'Q',
        CommandKind.ARC_TO: 'A',
    }

    parts = []
    for command in commands:
        if command.kind is CommandKind.CLOSE:
            parts.append('Z')
            continue

        values = []
        if command.kind is CommandKind.ARC_TO and command.arc is not None:
            values.extend(command.arc)
        for point in command.points:
            values.extend((point.x, point.y))
        coords = ' '.join(fmt(v) for v in values)
        parts.append(coords if command.repeated else f"{letters[command.kind]} {coords}")

    return ' '.join(parts)
