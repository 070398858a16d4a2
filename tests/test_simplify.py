"""Tests for Douglas-Peucker path simplification."""
import math

import pytest

from svgrefine.markup import SVGDocument
from svgrefine.path_parser import parse_path
from svgrefine.simplify import (
    douglas_peucker,
    perpendicular_distance,
    simplify_path,
    simplify_paths,
    simplify_svg_paths,
)
from svgrefine.types import Point


class TestPerpendicularDistance:
    """Test point to segment distance."""

    def test_distance_to_segment(self):
        assert perpendicular_distance(Point(5, 3), Point(0, 0), Point(10, 0)) == pytest.approx(3)

    def test_projection_is_clamped(self):
        """Points beyond the segment measure to the nearest endpoint."""
        d = perpendicular_distance(Point(13, 4), Point(0, 0), Point(10, 0))
        assert d == pytest.approx(5)

    def test_degenerate_segment(self):
        d = perpendicular_distance(Point(3, 4), Point(0, 0), Point(0, 0))
        assert d == pytest.approx(5)


class TestDouglasPeucker:
    """Test the simplification algorithm."""

    @pytest.mark.parametrize("points", [
        [],
        [Point(1, 1)],
        [Point(0, 0), Point(5, 5)],
    ])
    @pytest.mark.parametrize("tolerance", [0, 1, 100])
    def test_short_sequences_unchanged(self, points, tolerance):
        assert douglas_peucker(points, tolerance) == points

    def test_collinear_points_collapse(self):
        points = [Point(i, 0) for i in range(10)]
        assert douglas_peucker(points, 0.5) == [Point(0, 0), Point(9, 0)]

    def test_keeps_far_point(self):
        points = [Point(0, 0), Point(5, 0.1), Point(10, 10), Point(15, 0.1), Point(20, 0)]
        simplified = douglas_peucker(points, 1.0)
        assert Point(10, 10) in simplified
        assert Point(5, 0.1) not in simplified

    def test_zero_tolerance_keeps_every_deviating_point(self):
        points = [Point(0, 0), Point(1, 1), Point(2, 0), Point(3, 1), Point(4, 0)]
        assert douglas_peucker(points, 0) == points

    def test_endpoints_preserved(self):
        points = [Point(math.cos(t / 10), math.sin(t / 10)) for t in range(60)]
        for tolerance in (0.01, 0.1, 1.0, 10.0):
            simplified = douglas_peucker(points, tolerance)
            assert simplified[0] == points[0]
            assert simplified[-1] == points[-1]

    def test_long_sequence(self):
        """Long zig-zags do not hit the recursion limit."""
        points = [Point(i, (i % 2) * 10) for i in range(1500)]
        assert len(douglas_peucker(points, 1.0)) == 1500


class TestSimplifyMarkup:
    """Test simplification of paths in markup."""

    def test_simplify_path(self):
        d = simplify_path("M0 0 L5 0.1 L10 0 L10 10 Z", tolerance=1.0)
        assert d == "M 0 0 L 10 0 L 10 10 L 0 0 Z"

    def test_two_point_path_untouched(self):
        assert simplify_path("M0 0 L5 5", tolerance=10) == "M0 0 L5 5"

    def test_simplify_paths_in_document(self, svg):
        doc = SVGDocument.from_string(svg('<path d="M0 0 L1 0.1 L2 0 L3 0.1 L4 0" fill="red"/>'))
        simplify_paths(doc, tolerance=1.0)

        path = doc.paths()[0]
        assert [(p.x, p.y) for p in path.points] == [(0, 0), (4, 0)]
        assert path.get("fill") == "red"

    def test_markup_without_paths_is_unchanged(self, svg):
        markup = svg('<rect width="10" height="10"/>')
        assert simplify_svg_paths(markup, 1.0) == markup

    def test_unparsable_markup_is_unchanged(self):
        assert simplify_svg_paths("<svg><path", 1.0) == "<svg><path"

    def test_simplify_svg_paths(self, svg):
        result = simplify_svg_paths(svg('<path d="M0 0 L5 0 L10 0"/>'), 1.0)
        doc = SVGDocument.from_string(result)
        assert len(parse_path(doc.paths()[0].d)) == 2
