"""Counters describing a piece of vector markup."""
import logging
import math

from svgrefine.colors import color_key
from svgrefine.markup import PAINT_ATTRS, SVGDocument
from svgrefine.types import MarkupError, Stats

logger = logging.getLogger(__name__)


def get_stats(markup: str, canonical: bool = False) -> Stats:
    """
    Count paths, nodes and colors of markup text.

    Nodes are counted on the flattened point sequence, so a curve counts as
    one node. Colors are the distinct fill/stroke values found on any
    element, ``none`` included.

    Args:
        markup: Vector markup text
        canonical: Count different spellings of one color once

    Returns:
        Stats; markup that does not parse only reports its byte size
    """
    if not markup or not isinstance(markup, str):
        return Stats()

    byte_size = len(markup.encode("utf-8"))

    try:
        doc = SVGDocument.from_string(markup)
    except MarkupError as e:
        logger.debug(f"Stats on unparsable markup: {e}")
        return Stats(byte_size=byte_size)

    paths = doc.paths()
    node_count = sum(len(element.points) for element in paths)

    colors = set()
    for node in doc.root.iter():
        for attr in PAINT_ATTRS:
            value = node.get(attr)
            if value is not None:
                colors.add(color_key(value, canonical))

    return Stats(
        path_count=len(paths),
        node_count=node_count,
        color_count=len(colors),
        byte_size=byte_size,
    )


def readable_size(size: int) -> str:
    """Byte count as B, KB or MB with two decimals."""
    if size <= 0:
        return "0 B"
    i = min(2, int(math.floor(math.log(size, 1024))))
    value = round(size / 1024 ** i, 2)
    return f"{value:g} {['B', 'KB', 'MB'][i]}"


def format_stats(stats: Stats) -> str:
    """One-line summary of stats."""
    return (
        f"Paths: {stats.path_count} | Nodes: {stats.node_count} | "
        f"Colors: {stats.color_count} | Size: {readable_size(stats.byte_size)}"
    )
