"""Parsed vector markup.

Stages work on an :class:`SVGDocument`, an ElementTree of the traced
markup, instead of rewriting the text with regular expressions. Each
``<path>`` is exposed as a :class:`PathElement` whose attribute edits write
straight through to the tree.
"""
import logging
import xml.etree.ElementTree as ET
from typing import Callable, Dict, List, Optional

from svgrefine.colors import DEFAULT_COLOR
from svgrefine.path_parser import is_closed, parse_commands, parse_path
from svgrefine.types import MarkupError, PathCommand, PathCommandPoint

logger = logging.getLogger(__name__)

SVG_NS = "http://www.w3.org/2000/svg"
XLINK_NS = "http://www.w3.org/1999/xlink"

ET.register_namespace("", SVG_NS)
ET.register_namespace("xlink", XLINK_NS)

PAINT_ATTRS = ("fill", "stroke")


def local_name(tag) -> str:
    """Tag name without its namespace."""
    if not isinstance(tag, str):
        return ""
    return tag.rsplit("}", 1)[-1]


class PathElement:
    """One drawable ``<path>`` of a document."""

    def __init__(self, node: ET.Element, index: int):
        self.node = node
        self.index = index

    @property
    def attrs(self) -> Dict[str, str]:
        return self.node.attrib

    def get(self, name: str, default: Optional[str] = None) -> Optional[str]:
        return self.node.get(name, default)

    def set(self, name: str, value) -> None:
        self.node.set(name, str(value))

    def remove_attr(self, name: str) -> None:
        self.node.attrib.pop(name, None)

    @property
    def d(self) -> str:
        return self.node.get("d", "")

    @d.setter
    def d(self, value: str) -> None:
        self.node.set("d", value)

    @property
    def commands(self) -> List[PathCommand]:
        return parse_commands(self.d)

    @property
    def points(self) -> List[PathCommandPoint]:
        return parse_path(self.d)

    @property
    def closed(self) -> bool:
        return is_closed(self.d)

    @property
    def fill(self) -> Optional[str]:
        return self.node.get("fill")

    @property
    def stroke(self) -> Optional[str]:
        return self.node.get("stroke")

    @property
    def color(self) -> str:
        """Primary color: the fill attribute (``none`` included), else stroke, else black."""
        if self.fill is not None:
            return self.fill
        if self.stroke is not None:
            return self.stroke
        return DEFAULT_COLOR

    def __repr__(self) -> str:
        return f"PathElement(index={self.index}, color={self.color!r}, d={self.d[:30]!r})"


class SVGDocument:
    """Element tree of one piece of vector markup."""

    def __init__(self, root: ET.Element, declaration: bool = False):
        self.root = root
        self.declaration = declaration
        self._parents: Dict[ET.Element, ET.Element] = {}
        self.refresh()

    @classmethod
    def from_string(cls, markup: str) -> "SVGDocument":
        """
        Parse markup text.

        Raises:
            MarkupError: If the text is not well-formed XML
        """
        if not markup or not markup.strip():
            raise MarkupError("Empty markup")
        try:
            root = ET.fromstring(markup)
        except ET.ParseError as e:
            raise MarkupError(f"Failed to parse markup: {e}") from e
        return cls(root, declaration=markup.lstrip().startswith("<?xml"))

    def refresh(self) -> None:
        """Rebuild the parent index after structural edits."""
        self._parents = {child: parent for parent in self.root.iter() for child in parent}

    @property
    def namespace(self) -> str:
        tag = self.root.tag
        if isinstance(tag, str) and tag.startswith("{"):
            return tag[1:].split("}", 1)[0]
        return ""

    def make_element(self, name: str, attrs: Optional[Dict[str, str]] = None) -> ET.Element:
        """Create an element in the document's namespace."""
        tag = f"{{{self.namespace}}}{name}" if self.namespace else name
        return ET.Element(tag, attrs or {})

    def paths(self) -> List[PathElement]:
        """All path elements with geometry, in document order."""
        nodes = [
            node for node in self.root.iter()
            if local_name(node.tag) == "path" and "d" in node.attrib
        ]
        return [PathElement(node, i) for i, node in enumerate(nodes)]

    def parent_of(self, node: ET.Element) -> Optional[ET.Element]:
        return self._parents.get(node)

    def ancestors(self, node: ET.Element) -> List[ET.Element]:
        """Ancestors from the nearest outward."""
        chain = []
        parent = self.parent_of(node)
        while parent is not None:
            chain.append(parent)
            parent = self.parent_of(parent)
        return chain

    def inherited(self, node: ET.Element, name: str) -> Optional[str]:
        """Value of an attribute on the node or its nearest ancestor."""
        if name in node.attrib:
            return node.attrib[name]
        for ancestor in self.ancestors(node):
            if name in ancestor.attrib:
                return ancestor.attrib[name]
        return None

    def remove(self, node: ET.Element) -> None:
        parent = self.parent_of(node)
        if parent is None:
            return
        parent.remove(node)
        self.refresh()

    def top_level_nodes(self) -> List[ET.Element]:
        """Direct children of the root that draw something."""
        nodes = []
        for child in self.root:
            name = local_name(child.tag)
            if name == "path" and "d" in child.attrib:
                nodes.append(child)
            elif name == "g" and any(
                local_name(n.tag) == "path" and "d" in n.attrib for n in child.iter()
            ):
                nodes.append(child)
        return nodes

    def wrap(self, nodes: List[ET.Element], attrs: Dict[str, str]) -> ET.Element:
        """
        Move nodes into a new group.

        The group takes the place of the first node; the others keep their
        relative order inside it.
        """
        group = self.make_element("g", attrs)
        first = nodes[0]
        parent = self.parent_of(first)
        position = list(parent).index(first)
        for node in nodes:
            self.parent_of(node).remove(node)
            group.append(node)
        self.insert_at(parent, position, group)
        return group

    def insert_at(self, parent: ET.Element, position: int, node: ET.Element) -> None:
        parent.insert(position, node)
        self.refresh()

    def to_string(self) -> str:
        text = ET.tostring(self.root, encoding="unicode")
        if self.declaration:
            text = '<?xml version="1.0" encoding="UTF-8"?>\n' + text
        return text


def transform_markup(markup: str, stage: Callable, *args, **kwargs) -> str:
    """
    Apply a document-level stage to markup text.

    Text that does not parse, or that holds no drawable path, is returned
    unchanged.

    Args:
        markup: Vector markup text
        stage: Function taking an SVGDocument as its first argument
        *args, **kwargs: Passed on to the stage

    Returns:
        Serialized markup after the stage
    """
    if not markup or not isinstance(markup, str):
        return markup

    try:
        doc = SVGDocument.from_string(markup)
    except MarkupError as e:
        logger.warning(f"{getattr(stage, '__name__', 'stage')}: {e}, leaving markup unchanged")
        return markup

    if not doc.paths():
        logger.debug("No drawable paths found, leaving markup unchanged")
        return markup

    stage(doc, *args, **kwargs)
    return doc.to_string()
