"""Fusion of same-color paths whose ends touch."""
import logging
from typing import Dict, List, Sequence

from svgrefine.colors import color_key
from svgrefine.markup import PathElement, SVGDocument, transform_markup
from svgrefine.path_parser import path_end, path_start, serialize_commands
from svgrefine.types import CommandKind, PathCommand

logger = logging.getLogger(__name__)

# Per-axis distance under which two endpoints count as touching
ADJACENCY_TOLERANCE = 0.1


def are_adjacent(
    head: Sequence[PathCommand],
    tail: Sequence[PathCommand],
    tolerance: float = ADJACENCY_TOLERANCE
) -> bool:
    """Check whether ``head`` ends where ``tail`` starts."""
    end = path_end(head)
    start = path_start(tail)
    if end is None or start is None:
        return False
    return abs(end.x - start.x) < tolerance and abs(end.y - start.y) < tolerance


def join_commands(head: Sequence[PathCommand], tail: Sequence[PathCommand]) -> List[PathCommand]:
    """Concatenate two command lists into one continuous path."""
    head = list(head)
    tail = list(tail)
    if head and head[-1].kind is CommandKind.CLOSE:
        head = head[:-1]
    if tail and tail[0].kind is CommandKind.MOVE_TO:
        tail = tail[1:]
    return head + tail


def partition_by_color(elements: Sequence[PathElement], canonical: bool = True) -> Dict[object, List[PathElement]]:
    """Partition elements by color, keeping first-seen order."""
    groups: Dict[object, List[PathElement]] = {}
    for element in elements:
        groups.setdefault(color_key(element.color, canonical), []).append(element)
    return groups


def merge_paths(doc: SVGDocument, canonical: bool = True, precision: int = 3) -> SVGDocument:
    """
    Merge same-color paths with touching endpoints.

    Within each color group, the first unprocessed path becomes an
    accumulator and repeatedly absorbs the first remaining path that
    continues it (or that it continues), until none is found. This is a
    greedy single pass, so the result depends on document order.

    Absorbed paths are removed from the document; the accumulator keeps its
    position and attributes.

    Args:
        doc: Document to modify in place
        canonical: Compare colors numerically instead of by exact string
        precision: Decimal places for rewritten path data

    Returns:
        The same document
    """
    absorbed = 0

    for members in partition_by_color(doc.paths(), canonical).values():
        if len(members) < 2:
            continue

        commands = [member.commands for member in members]
        processed = [False] * len(members)

        for i, accumulator in enumerate(members):
            if processed[i]:
                continue
            processed[i] = True
            merged = commands[i]
            if not merged:
                # Unparsable data stays as it is
                continue

            changed = False
            found = True
            while found:
                found = False
                for j, candidate in enumerate(members):
                    if processed[j] or not commands[j]:
                        continue

                    if are_adjacent(merged, commands[j]):
                        merged = join_commands(merged, commands[j])
                    elif are_adjacent(commands[j], merged):
                        merged = join_commands(commands[j], merged)
                    else:
                        continue

                    processed[j] = True
                    doc.remove(candidate.node)
                    absorbed += 1
                    changed = found = True
                    break

            if changed:
                accumulator.d = serialize_commands(merged, precision)

    logger.debug(f"Merged {absorbed} paths into their neighbours")
    return doc


def merge_svg_paths(markup: str, canonical: bool = True, precision: int = 3) -> str:
    """Merge adjacent same-color paths in markup text."""
    return transform_markup(markup, merge_paths, canonical, precision)
