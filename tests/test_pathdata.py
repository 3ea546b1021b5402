from __future__ import annotations

import sys
import unittest
from pathlib import Path

TESTS_DIR = Path(__file__).resolve().parent
PROJECT_ROOT = TESTS_DIR.parent
sys.path.insert(0, str(PROJECT_ROOT / "src"))

from droidvector import affine
from droidvector.errors import PathDataError
from droidvector.pathdata import (
    AbsolutePathTransformer,
    format_value,
    parse_path,
    serialize,
    tokenize,
    transform_segments,
)


class PathDataTests(unittest.TestCase):
    def test_relative_and_shorthand_commands_expand(self) -> None:
        self.assertEqual(
            parse_path("m10 10 h5 v5 z"),
            [("M", (10.0, 10.0)), ("L", (15.0, 10.0)), ("L", (15.0, 15.0)), ("Z", ())],
        )

    def test_implicit_repeats_are_split(self) -> None:
        self.assertEqual(
            parse_path("M0 0 10 10 20 0"),
            [("M", (0.0, 0.0)), ("L", (10.0, 10.0)), ("L", (20.0, 0.0))],
        )

    def test_smooth_cubic_reflects_previous_control(self) -> None:
        segments = parse_path("M0 0 C 0 10 10 10 10 0 S 20 -10 20 0")
        self.assertEqual(segments[2], ("C", (10.0, -10.0, 20.0, -10.0, 20.0, 0.0)))
        first = parse_path("M0 0 S 10 10 20 0")
        self.assertEqual(first[1], ("C", (0.0, 0.0, 10.0, 10.0, 20.0, 0.0)))

    def test_compact_arc_flags(self) -> None:
        self.assertEqual(tokenize("a5 5 0 0110 10"), [("a", [5.0, 5.0, 0.0, 0.0, 1.0, 10.0, 10.0])])

    def test_malformed_path_raises(self) -> None:
        with self.assertRaises(PathDataError):
            tokenize("10 10")
        with self.assertRaises(PathDataError):
            parse_path("M 0")
        with self.assertRaises(ValueError):
            parse_path("M 0 0 L 1 x")

    def test_transform_maps_every_pair(self) -> None:
        out = AbsolutePathTransformer().transform("M0 0 L10 0 Q 5 5 0 0", affine.translate(5, 5))
        self.assertEqual(out, "M 5 5 L 15 5 Q 10 10 5 5")

    def test_arc_radii_scale_and_mirror_flips_sweep(self) -> None:
        arc = [("A", (5.0, 5.0, 0.0, 0.0, 1.0, 10.0, 0.0))]
        scaled = transform_segments(arc, affine.scale(2, 3))
        self.assertEqual(scaled[0][1][:2], (10.0, 15.0))
        mirrored = transform_segments(arc, affine.scale(-1, 1))
        self.assertEqual(mirrored[0][1][4], 0.0)
        self.assertEqual(mirrored[0][1][5], -10.0)

    def test_serialize_arc_flags_as_integers(self) -> None:
        self.assertEqual(serialize([("A", (5.0, 5.0, 0.0, 0.0, 1.0, 10.0, 0.0))]), "A 5 5 0 0 1 10 0")
        self.assertEqual(format_value(-0.0), "0")
        self.assertEqual(format_value(2.50), "2.5")


if __name__ == "__main__":
    unittest.main()
