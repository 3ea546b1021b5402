from __future__ import annotations

import sys
import unittest
from pathlib import Path

TESTS_DIR = Path(__file__).resolve().parent
PROJECT_ROOT = TESTS_DIR.parent
sys.path.insert(0, str(PROJECT_ROOT / "src"))

from droidvector.diagnostics import Severity, WarningSink
from droidvector.pathdata import parse_path
from droidvector.shapes import parse_length, parse_points, shape_to_path


class ShapeTests(unittest.TestCase):
    def setUp(self) -> None:
        self.sink = WarningSink()

    def test_rect_is_closed_four_segment_path(self) -> None:
        d = shape_to_path("rect", {"x": "1", "y": "2", "width": "3", "height": "4"}, self.sink)
        self.assertEqual(d, "M 1 2 H 4 V 6 H 1 Z")
        self.assertEqual([cmd for cmd, _ in parse_path(d)], ["M", "L", "L", "L", "Z"])
        self.assertEqual(len(self.sink), 0)

    def test_rounded_rect_warns_once(self) -> None:
        d = shape_to_path("rect", {"width": "10", "height": "10", "rx": "2"}, self.sink)
        self.assertEqual(d, "M 0 0 H 10 V 10 H 0 Z")
        self.assertEqual(self.sink.codes(), ["W_RECT_ROUNDED_IGNORED"])
        self.assertEqual(self.sink.diagnostics[0].severity, Severity.WARN)

    def test_zero_radius_is_not_rounded(self) -> None:
        shape_to_path("rect", {"width": "10", "height": "10", "rx": "0", "ry": "0"}, self.sink)
        self.assertEqual(len(self.sink), 0)

    def test_degenerate_rect_is_dropped(self) -> None:
        self.assertIsNone(shape_to_path("rect", {"width": "0", "height": "5"}, self.sink))
        self.assertIsNone(shape_to_path("rect", {"width": "5"}, self.sink))
        self.assertEqual(self.sink.codes(), ["W_SHAPE_DEGENERATE", "W_SHAPE_DEGENERATE"])

    def test_circle_uses_two_arcs(self) -> None:
        d = shape_to_path("circle", {"cx": "12", "cy": "12", "r": "10"}, self.sink)
        self.assertEqual(d, "M 22 12 A 10 10 0 1 0 2 12 A 10 10 0 1 0 22 12 Z")
        self.assertIsNone(shape_to_path("circle", {"r": "-1"}, self.sink))

    def test_ellipse(self) -> None:
        d = shape_to_path("ellipse", {"cx": "5", "cy": "5", "rx": "4", "ry": "2"}, self.sink)
        self.assertEqual(d, "M 9 5 A 4 2 0 1 0 1 5 A 4 2 0 1 0 9 5 Z")
        self.assertIsNone(shape_to_path("ellipse", {"rx": "4"}, self.sink))

    def test_line_is_open(self) -> None:
        d = shape_to_path("line", {"x2": "10", "y2": "5"}, self.sink)
        self.assertEqual(d, "M 0 0 L 10 5")

    def test_polygon_closes_and_polyline_does_not(self) -> None:
        points = {"points": "0,0 10,0 10,10"}
        self.assertEqual(shape_to_path("polygon", points, self.sink), "M 0 0 L 10 0 L 10 10 Z")
        self.assertEqual(shape_to_path("polyline", points, self.sink), "M 0 0 L 10 0 L 10 10")

    def test_polyline_needs_two_points(self) -> None:
        self.assertIsNone(shape_to_path("polyline", {"points": "0 0"}, self.sink))
        self.assertEqual(self.sink.codes(), ["W_SHAPE_DEGENERATE"])

    def test_length_and_points_parsing(self) -> None:
        self.assertEqual(parse_length("12px"), 12.0)
        self.assertIsNone(parse_length("50%"))
        self.assertEqual(parse_length(None, 3.0), 3.0)
        self.assertEqual(parse_points("1,2 3 4 x 5"), [1.0, 2.0, 3.0, 4.0])


if __name__ == "__main__":
    unittest.main()
