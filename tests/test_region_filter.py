"""Tests for small region removal."""
import pytest

from svgrefine.markup import SVGDocument
from svgrefine.path_parser import parse_path
from svgrefine.region_filter import (
    bounding_box,
    path_length,
    polygon_area,
    region_size,
    remove_small_regions,
    remove_small_svg_regions,
)
from svgrefine.types import Point

SQUARE = [Point(0, 0), Point(10, 0), Point(10, 10), Point(0, 10)]


class TestMeasures:
    """Test the size measures."""

    def test_bounding_box(self):
        box = bounding_box([Point(1, 2), Point(5, -3), Point(2, 8)])
        assert box == (1, -3, 5, 8)
        assert box.width == 4
        assert box.height == 11

    def test_empty_bounding_box(self):
        assert bounding_box([]) == (0, 0, 0, 0)

    def test_polygon_area(self):
        assert polygon_area(SQUARE) == pytest.approx(100)
        assert polygon_area(list(reversed(SQUARE))) == pytest.approx(100)

    def test_area_needs_three_points(self):
        assert polygon_area([Point(0, 0), Point(10, 10)]) == 0

    def test_path_length_closes_polygons(self):
        assert path_length(SQUARE) == pytest.approx(40)

    def test_path_length_of_segment(self):
        """Two points have no implicit closing edge."""
        assert path_length([Point(0, 0), Point(3, 4)]) == pytest.approx(5)
        assert path_length([Point(0, 0)]) == 0

    def test_region_size_modes(self):
        points = [Point(0, 0), Point(20, 0), Point(20, 5), Point(0, 5)]
        assert region_size(points, "area") == pytest.approx(100)
        assert region_size(points, "length") == pytest.approx(50)
        assert region_size(points, "dimension") == pytest.approx(5)
        assert region_size(points, "bogus") == pytest.approx(5)


class TestRemoveSmallRegions:
    """Test removal from documents."""

    MARKUP = (
        '<path id="big" d="M0 0 L50 0 L50 50 L0 50 Z"/>'
        '<path id="thin" d="M0 0 L50 0 L50 2 L0 2 Z"/>'
        '<path id="tiny" d="M0 0 L3 0 L3 3 L0 3 Z"/>'
        '<path id="line" d="M0 0 L100 0"/>'
    )

    def ids(self, markup):
        return [p.get("id") for p in SVGDocument.from_string(markup).paths()]

    @pytest.mark.parametrize("mode", ["area", "length", "dimension"])
    def test_zero_threshold_is_identity(self, svg, mode):
        markup = svg(self.MARKUP)
        assert remove_small_svg_regions(markup, 0, mode) == markup

    def test_dimension_mode(self, svg):
        result = remove_small_svg_regions(svg(self.MARKUP), 5, "dimension")
        assert self.ids(result) == ["big"]

    def test_area_mode(self, svg):
        result = remove_small_svg_regions(svg(self.MARKUP), 50, "area")
        assert self.ids(result) == ["big", "thin"]

    def test_length_mode(self, svg):
        result = remove_small_svg_regions(svg(self.MARKUP), 20, "length")
        assert self.ids(result) == ["big", "thin", "line"]

    def test_unparsable_paths_are_kept(self, svg):
        markup = svg('<path id="bad" d="nonsense"/><path id="tiny" d="M0 0 L1 0 L1 1 Z"/>')
        doc = SVGDocument.from_string(markup)
        remove_small_regions(doc, 10, "area")
        assert [p.get("id") for p in doc.paths()] == ["bad"]

    def test_never_adds_paths(self, svg):
        doc = SVGDocument.from_string(svg(self.MARKUP))
        before = len(doc.paths())
        remove_small_regions(doc, 1, "dimension")
        assert len(doc.paths()) <= before

    def test_nested_paths(self, svg):
        markup = svg('<g fill="red"><path id="tiny" d="M0 0 L1 0 L1 1 Z"/></g>')
        doc = SVGDocument.from_string(markup)
        remove_small_regions(doc, 5)
        assert doc.paths() == []
        assert len(list(doc.root)) == 1
