"""Color quantization.

Two ways to cut down the palette of traced markup:

* :func:`optimize_color_quantization` snaps every channel of every color to
  a fixed grid of ``levels`` steps.
* :func:`reduce_color_count` clusters similar colors and replaces each
  cluster by its mean color.
"""
import logging
import math
from typing import Dict, List, Tuple

from svgrefine.colors import ColorKey, color_distance, color_key, format_rgb, parse_rgb
from svgrefine.markup import PAINT_ATTRS, SVGDocument, transform_markup

logger = logging.getLogger(__name__)

MIN_LEVELS = 2
MAX_LEVELS = 256


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def quantize_channels(color: str, levels: int = 16) -> str:
    """
    Snap each RGB channel to a multiple of ``256 // levels``.

    Args:
        color: Any color syntax Pillow understands (hex, rgb(), names)
        levels: Quantization levels in [2, 256]

    Returns:
        ``rgb(r, g, b)`` string, or the input unchanged if it is not a color
        or ``levels`` is out of range
    """
    if not MIN_LEVELS <= levels <= MAX_LEVELS:
        return color

    rgb = parse_rgb(color)
    if rgb is None:
        return color

    step = MAX_LEVELS // int(levels)
    quantized = [min(255, max(0, _round_half_up(c / step) * step)) for c in rgb]
    return format_rgb(quantized)


def optimize_color_quantization(doc: SVGDocument, levels: int = 16) -> SVGDocument:
    """Quantize every fill and stroke color of a document in place."""
    if not MIN_LEVELS <= levels <= MAX_LEVELS:
        logger.warning(f"Quantization levels {levels} outside [{MIN_LEVELS}, {MAX_LEVELS}], skipping")
        return doc

    for node in doc.root.iter():
        for attr in PAINT_ATTRS:
            value = node.get(attr)
            if value is not None:
                node.set(attr, quantize_channels(value, levels))

    return doc


def collect_colors(doc: SVGDocument, canonical: bool = True) -> Dict[ColorKey, Tuple[int, int, int]]:
    """Distinct fill/stroke colors of a document, first seen first."""
    colors: Dict[ColorKey, Tuple[int, int, int]] = {}
    for node in doc.root.iter():
        for attr in PAINT_ATTRS:
            value = node.get(attr)
            rgb = parse_rgb(value)
            if rgb is None:
                continue
            colors.setdefault(color_key(value, canonical), rgb)
    return colors


def cluster_colors(colors: List[Tuple[int, int, int]], threshold: float) -> List[List[int]]:
    """
    Greedy clustering in first-seen order.

    Each unassigned color seeds a cluster and takes every later unassigned
    color within ``threshold`` of the seed.
    """
    clusters = []
    assigned = [False] * len(colors)
    for i, seed in enumerate(colors):
        if assigned[i]:
            continue
        assigned[i] = True
        cluster = [i]
        for j in range(i + 1, len(colors)):
            if not assigned[j] and color_distance(seed, colors[j]) < threshold:
                cluster.append(j)
                assigned[j] = True
        clusters.append(cluster)
    return clusters


def reduce_color_count(doc: SVGDocument, max_colors: int = 16, canonical: bool = True) -> SVGDocument:
    """
    Merge similar colors until the palette trends toward ``max_colors``.

    Colors closer than ``2 * 255 / max_colors`` to a cluster's seed join that
    cluster; every member is then replaced by the cluster's mean color. The
    result is order dependent and may keep more than ``max_colors`` colors.

    Args:
        doc: Document to modify in place
        max_colors: Target palette size in [1, 256]
        canonical: Treat different spellings of one color as the same color

    Returns:
        The same document
    """
    if not 1 <= max_colors <= MAX_LEVELS:
        logger.warning(f"Max colors {max_colors} outside [1, {MAX_LEVELS}], skipping")
        return doc

    colors = collect_colors(doc, canonical)
    if len(colors) <= max_colors:
        return doc

    keys = list(colors)
    values = [colors[key] for key in keys]
    threshold = 255 / max_colors * 2

    replacements: Dict[ColorKey, str] = {}
    clusters = cluster_colors(values, threshold)
    for cluster in clusters:
        mean = [
            _round_half_up(sum(values[i][channel] for i in cluster) / len(cluster))
            for channel in range(3)
        ]
        for i in cluster:
            replacements[keys[i]] = format_rgb(mean)

    for node in doc.root.iter():
        for attr in PAINT_ATTRS:
            value = node.get(attr)
            if value is None or parse_rgb(value) is None:
                continue
            new = replacements.get(color_key(value, canonical))
            if new is not None:
                node.set(attr, new)

    logger.debug(f"Reduced {len(colors)} colors to {len(clusters)} (max_colors={max_colors})")
    return doc


def quantize_svg_colors(markup: str, levels: int = 16) -> str:
    """Quantize colors in markup text."""
    return transform_markup(markup, optimize_color_quantization, levels)


def reduce_svg_colors(markup: str, max_colors: int = 16, canonical: bool = True) -> str:
    """Reduce the palette of markup text."""
    return transform_markup(markup, reduce_color_count, max_colors, canonical)
