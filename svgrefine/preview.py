"""Display-only views of markup (fill only, outline only, wireframe)."""
import logging

from svgrefine.markup import SVGDocument, local_name, transform_markup
from svgrefine.path_parser import format_number

logger = logging.getLogger(__name__)

PREVIEW_MODES = ("normal", "fill-only", "outline-only", "wireframe")

STROKE_ATTRS = ("stroke", "stroke-width", "stroke-opacity")


def _fill_only(doc: SVGDocument, outline_width: float) -> None:
    for node in doc.root.iter():
        name = local_name(node.tag)
        if name not in ("path", "g"):
            continue
        for attr in STROKE_ATTRS:
            node.attrib.pop(attr, None)
        if name == "path" and doc.inherited(node, "fill") is None:
            node.set("fill", "currentColor")


def _outline_only(doc: SVGDocument, outline_width: float) -> None:
    width = format_number(outline_width)
    for node in doc.root.iter():
        name = local_name(node.tag)
        if name == "g" and "fill" in node.attrib:
            node.set("fill", "none")
        elif name == "path":
            node.set("fill", "none")
            if doc.inherited(node, "stroke") is None:
                node.set("stroke", "currentColor")
            node.set("stroke-width", width)


def _wireframe(doc: SVGDocument, outline_width: float) -> None:
    for node in doc.root.iter():
        name = local_name(node.tag)
        if name == "g":
            for attr, value in (("fill", "none"), ("stroke", "#000"), ("stroke-width", "1")):
                if attr in node.attrib:
                    node.set(attr, value)
        elif name == "path":
            node.set("fill", "none")
            node.set("stroke", "#000")
            node.set("stroke-width", "1")


_APPLIERS = {
    "fill-only": _fill_only,
    "outline-only": _outline_only,
    "wireframe": _wireframe,
}


def apply_preview_mode(markup: str, mode: str = "normal", outline_width: float = 2.0) -> str:
    """
    Return a copy of the markup restyled for a preview mode.

    * ``fill-only``: strokes removed, paths without any fill get
      ``currentColor``.
    * ``outline-only``: fills set to ``none``, strokes kept (``currentColor``
      where missing) at ``outline_width``.
    * ``wireframe``: no fill, 1px black stroke.

    ``normal`` and unknown modes return the markup unchanged.
    """
    applier = _APPLIERS.get(mode)
    if applier is None:
        if mode not in PREVIEW_MODES:
            logger.debug(f"Unknown preview mode '{mode}', showing markup as is")
        return markup
    return transform_markup(markup, applier, outline_width)
