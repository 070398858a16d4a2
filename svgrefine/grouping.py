"""Grouping of paths by color and by spatial proximity."""
import logging
import re
from typing import Dict, List, Optional, Sequence
import xml.etree.ElementTree as ET

import numpy as np
from scipy.sparse import coo_matrix
from scipy.sparse.csgraph import connected_components
from scipy.spatial import cKDTree

from svgrefine.colors import color_key
from svgrefine.markup import PAINT_ATTRS, PathElement, SVGDocument, local_name, transform_markup
from svgrefine.path_parser import parse_path
from svgrefine.types import Point

logger = logging.getLogger(__name__)


def _group_id(doc: SVGDocument, base: str) -> str:
    taken = {node.get("id") for node in doc.root.iter()}
    if base not in taken:
        return base
    suffix = 2
    while f"{base}-{suffix}" in taken:
        suffix += 1
    return f"{base}-{suffix}"


def _shared_paint(members: Sequence[PathElement], canonical: bool) -> Dict[str, str]:
    """Paint attributes every member carries with the same color."""
    shared = {}
    for attr in PAINT_ATTRS:
        values = [member.get(attr) for member in members]
        if any(value is None for value in values):
            continue
        keys = {color_key(value, canonical) for value in values}
        if len(keys) == 1:
            shared[attr] = values[0]
    return shared


def group_by_color(doc: SVGDocument, canonical: bool = True) -> SVGDocument:
    """
    Wrap same-color sibling paths in a ``<g>``.

    Paths are partitioned by color within their parent container. Every
    partition with two or more members is moved into a group placed where
    its first member was; paint values shared by all members move up to the
    group. Single paths stay where they are.

    Args:
        doc: Document to modify in place
        canonical: Compare colors numerically instead of by exact string

    Returns:
        The same document
    """
    by_parent: Dict[ET.Element, List[PathElement]] = {}
    for element in doc.paths():
        parent = doc.parent_of(element.node)
        if parent is not None:
            by_parent.setdefault(parent, []).append(element)

    created = 0
    for parent, elements in by_parent.items():
        partitions: Dict[object, List[PathElement]] = {}
        for element in elements:
            partitions.setdefault(color_key(element.color, canonical), []).append(element)

        for members in partitions.values():
            if len(members) < 2:
                continue

            shared = _shared_paint(members, canonical)
            color = members[0].color
            attrs = {"id": _group_id(doc, "group-" + re.sub(r"[^a-zA-Z0-9]", "-", color))}
            attrs.update(shared)

            for member in members:
                for attr in shared:
                    member.remove_attr(attr)

            doc.wrap([member.node for member in members], attrs)
            created += 1

    logger.debug(f"Created {created} color groups")
    return doc


def _node_points(node: ET.Element) -> list:
    if local_name(node.tag) == "path":
        return parse_path(node.get("d"))
    points = []
    for child in node.iter():
        if local_name(child.tag) == "path" and "d" in child.attrib:
            points.extend(parse_path(child.get("d")))
    return points


def centroid(points: Sequence) -> Optional[Point]:
    """Mean of the points, or None when there are none."""
    if len(points) == 0:
        return None
    coords = np.array([[p.x, p.y] for p in points], dtype=np.float64)
    cx, cy = coords.mean(axis=0)
    return Point(float(cx), float(cy))


def seed_clusters(centers: np.ndarray, threshold: float) -> np.ndarray:
    """
    Single pass clustering around the earliest unassigned center.

    Each unassigned center starts a new cluster and claims every later
    unassigned center closer than ``threshold`` to it. Membership is not
    transitive.
    """
    n = len(centers)
    labels = np.full(n, -1, dtype=int)
    current = 0
    for i in range(n):
        if labels[i] != -1:
            continue
        labels[i] = current
        for j in range(i + 1, n):
            if labels[j] == -1 and np.hypot(*(centers[i] - centers[j])) < threshold:
                labels[j] = current
        current += 1
    return labels


def connected_clusters(centers: np.ndarray, threshold: float) -> np.ndarray:
    """
    Connected components of the graph linking centers closer than ``threshold``.

    Labels are numbered in order of each component's first member.
    """
    n = len(centers)
    if n == 0:
        return np.zeros(0, dtype=int)

    tree = cKDTree(centers)
    pairs = tree.query_pairs(r=threshold, output_type="ndarray") if threshold > 0 else np.zeros((0, 2), dtype=int)
    if len(pairs):
        # query_pairs includes pairs exactly at the radius
        distances = np.linalg.norm(centers[pairs[:, 0]] - centers[pairs[:, 1]], axis=1)
        pairs = pairs[distances < threshold]

    graph = coo_matrix(
        (np.ones(len(pairs)), (pairs[:, 0], pairs[:, 1])),
        shape=(n, n)
    )
    _, raw = connected_components(graph, directed=False)

    # Renumber by first appearance
    order: Dict[int, int] = {}
    for label in raw:
        order.setdefault(int(label), len(order))
    return np.array([order[int(label)] for label in raw], dtype=int)


def group_by_proximity(doc: SVGDocument, threshold: float = 50.0, transitive: bool = True) -> SVGDocument:
    """
    Wrap top-level shapes whose centroids lie close together in a ``<g>``.

    Top-level paths and groups are the units; a unit's centroid is the mean
    of all its flattened points. Units without points, or whose centroid is
    not finite, are left alone.

    Args:
        doc: Document to modify in place
        threshold: Centroid distance under which two units belong together
        transitive: Use connected components (a chain of close units forms
            one group); otherwise cluster around the earliest seed only

    Returns:
        The same document
    """
    units = []
    centers = []
    for node in doc.top_level_nodes():
        center = centroid(_node_points(node))
        if center is not None and np.isfinite([center.x, center.y]).all():
            units.append(node)
            centers.append((center.x, center.y))

    if len(units) < 2:
        return doc

    centers = np.array(centers, dtype=np.float64)
    if transitive:
        labels = connected_clusters(centers, threshold)
    else:
        labels = seed_clusters(centers, threshold)

    created = 0
    for label in range(int(labels.max()) + 1):
        members = [units[i] for i in np.flatnonzero(labels == label)]
        if len(members) < 2:
            continue
        doc.wrap(members, {"id": _group_id(doc, f"group-proximity-{label}")})
        created += 1

    logger.debug(f"Created {created} proximity groups from {len(units)} shapes (threshold={threshold})")
    return doc


def group_paths(
    doc: SVGDocument,
    by_color: bool = True,
    by_proximity: bool = False,
    proximity_threshold: float = 50.0,
    transitive: bool = True,
    canonical: bool = True
) -> SVGDocument:
    """Group by color, then by proximity, as enabled."""
    if by_color:
        group_by_color(doc, canonical)
    if by_proximity:
        group_by_proximity(doc, proximity_threshold, transitive)
    return doc


def group_svg_paths(markup: str, **kwargs) -> str:
    """Group paths in markup text. Keyword arguments as for :func:`group_paths`."""
    return transform_markup(markup, group_paths, **kwargs)
