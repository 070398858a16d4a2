"""Tests for node editing."""
from svgrefine.markup import SVGDocument
from svgrefine.path_editor import (
    NodeDragSession,
    add_point,
    delete_node,
    points_to_path_data,
    remove_point,
    update_point,
)
from svgrefine.path_parser import parse_path
from svgrefine.types import CommandKind, PathCommandPoint


def coords(points):
    return [(p.x, p.y) for p in points]


TRIANGLE = parse_path("M0 0 L10 0 L10 10")


class TestPointEdits:
    """Test pure point list edits."""

    def test_points_to_path_data(self):
        assert points_to_path_data(TRIANGLE) == "M 0 0 L 10 0 L 10 10"
        assert points_to_path_data([]) == ""

    def test_subpaths_keep_move(self):
        points = parse_path("M0 0 L1 1 M5 5 L6 6")
        assert points_to_path_data(points) == "M 0 0 L 1 1 M 5 5 L 6 6"

    def test_precision(self):
        points = [PathCommandPoint(1.23456, 2, CommandKind.MOVE_TO)]
        assert points_to_path_data(points, precision=2) == "M 1.23 2"

    def test_update_point(self):
        updated = update_point(TRIANGLE, 1, 20, 5)
        assert coords(updated) == [(0, 0), (20, 5), (10, 10)]
        assert updated[1].kind is CommandKind.LINE_TO
        assert coords(TRIANGLE) == [(0, 0), (10, 0), (10, 10)]

    def test_update_out_of_range(self):
        assert coords(update_point(TRIANGLE, 7, 1, 1)) == coords(TRIANGLE)

    def test_remove_point(self):
        assert coords(remove_point(TRIANGLE, 1)) == [(0, 0), (10, 10)]

    def test_remove_keeps_two_points(self):
        line = parse_path("M0 0 L5 5")
        assert coords(remove_point(line, 0)) == [(0, 0), (5, 5)]

    def test_add_midpoint(self):
        assert coords(add_point(TRIANGLE, 0)) == [(0, 0), (5, 0), (10, 0), (10, 10)]

    def test_add_midpoint_wraps(self):
        assert coords(add_point(TRIANGLE, 2)) == [(0, 0), (10, 0), (10, 10), (5, 5)]

    def test_add_explicit(self):
        assert coords(add_point(TRIANGLE, 1, 3, 4))[2] == (3, 4)

    def test_add_out_of_range_appends(self):
        assert coords(add_point(TRIANGLE, 99))[-1] == (0, 0)
        assert coords(add_point(TRIANGLE, -1, 7, 8))[-1] == (7, 8)


class TestElementEdits:
    """Test edits written through to a document."""

    def element(self, svg):
        doc = SVGDocument.from_string(svg('<path fill="red" d="M0 0 L10 0 L10 10"/>'))
        return doc, doc.paths()[0]

    def test_drag_updates_on_release(self, svg):
        doc, element = self.element(svg)
        updates = []
        session = NodeDragSession(element, 2, lambda el, d: updates.append(d))

        session.move(15, 12)
        session.move(20, 20)
        assert element.d == "M 0 0 L 10 0 L 20 20"
        assert updates == []

        session.release()
        assert updates == ["M 0 0 L 10 0 L 20 20"]
        assert 'd="M 0 0 L 10 0 L 20 20"' in doc.to_string()

    def test_release_without_move(self, svg):
        _, element = self.element(svg)
        updates = []
        NodeDragSession(element, 0, lambda el, d: updates.append(d)).release()
        assert updates == []
        assert element.d == "M0 0 L10 0 L10 10"

    def test_moves_after_release_ignored(self, svg):
        _, element = self.element(svg)
        updates = []
        session = NodeDragSession(element, 1, lambda el, d: updates.append(d))
        session.move(1, 1)
        session.release()
        session.move(9, 9)
        session.release()
        assert element.d == "M 0 0 L 1 1 L 10 10"
        assert len(updates) == 1

    def test_delete_node(self, svg):
        _, element = self.element(svg)
        updates = []
        d = delete_node(element, 1, lambda el, data: updates.append((el, data)))
        assert d == "M 0 0 L 10 10"
        assert updates == [(element, d)]
        assert element.get("fill") == "red"


class TestPublicApi:
    """Test the editing API is exported from the package."""

    def test_exported(self):
        import svgrefine

        assert svgrefine.NodeDragSession is NodeDragSession
        assert svgrefine.update_point is update_point
        for name in ("add_point", "delete_node", "points_to_path_data", "remove_point"):
            assert name in svgrefine.__all__
            assert hasattr(svgrefine, name)
