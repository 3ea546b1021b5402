from __future__ import annotations

import io
import math
import sys
import unittest
from pathlib import Path

from PIL import Image

TESTS_DIR = Path(__file__).resolve().parent
PROJECT_ROOT = TESTS_DIR.parent
sys.path.insert(0, str(PROJECT_ROOT / "src"))

from droidvector import convert_svg
from droidvector.mapper import VectorDocument, VectorPath
from droidvector.pathdata import parse_path
from droidvector.preview import arc_points, flatten, render_image, render_png

SQUARE_WITH_HOLE = "M0 0 H24 V24 H0 Z M6 6 H18 V18 H6 Z"


def _document(fill_rule: str = "") -> VectorDocument:
    rule = f' fill-rule="{fill_rule}"' if fill_rule else ""
    svg = (
        '<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 24 24">'
        f'<path d="{SQUARE_WITH_HOLE}" fill="#ff0000"{rule}/></svg>'
    )
    return convert_svg(svg).document


class PreviewTests(unittest.TestCase):
    def test_density_sets_pixel_size(self) -> None:
        document = _document()
        self.assertEqual(render_image(document).size, (24, 24))
        self.assertEqual(render_image(document, density="xhdpi").size, (48, 48))
        self.assertEqual(render_image(document, density="xxxhdpi").size, (96, 96))

    def test_fill_is_painted(self) -> None:
        image = render_image(_document(), density="xhdpi")
        r, g, b, _a = image.getpixel((2, 2))
        self.assertGreater(r, 200)
        self.assertLess(g, 50)
        self.assertLess(b, 50)

    def test_even_odd_cuts_holes(self) -> None:
        even_odd = render_image(_document("evenodd"), density="xhdpi")
        for channel in even_odd.getpixel((24, 24))[:3]:
            self.assertGreater(channel, 250)
        union = render_image(_document(), density="xhdpi")
        self.assertGreater(union.getpixel((24, 24))[0], 200)
        self.assertLess(union.getpixel((24, 24))[1], 50)

    def test_dark_theme_background(self) -> None:
        document = VectorDocument(24, 24, 24, 24, [])
        pixel = render_image(document, theme="dark").getpixel((12, 12))
        for got, want in zip(pixel, (32, 33, 36, 255)):
            self.assertLessEqual(abs(got - want), 1)

    def test_bad_path_data_is_skipped(self) -> None:
        document = VectorDocument(24, 24, 24, 24, [VectorPath("M 0", fill_color="#000000")])
        for channel in render_image(document).getpixel((12, 12)):
            self.assertGreater(channel, 250)

    def test_png_bytes(self) -> None:
        blob = render_png(_document(), density="hdpi", grid=True)
        self.assertEqual(blob[:8], b"\x89PNG\r\n\x1a\n")
        with Image.open(io.BytesIO(blob)) as image:
            self.assertEqual(image.size, (36, 36))

    def test_unknown_density_or_theme(self) -> None:
        with self.assertRaises(ValueError):
            render_image(_document(), density="ldpi")
        with self.assertRaises(ValueError):
            render_image(_document(), theme="sepia")

    def test_flatten_closes_subpaths(self) -> None:
        self.assertEqual(
            flatten(parse_path("M0 0 L10 0 L10 10 Z")),
            [([(0.0, 0.0), (10.0, 0.0), (10.0, 10.0)], True)],
        )

    def test_arc_points_stay_on_circle(self) -> None:
        points = arc_points((10.0, 0.0), 10, 10, 0, True, False, (-10.0, 0.0))
        self.assertEqual(points[-1], (-10.0, 0.0))
        for x, y in points:
            self.assertAlmostEqual(math.hypot(x, y), 10.0, places=6)
        self.assertTrue(any(y < -9.9 for _x, y in points))


if __name__ == "__main__":
    unittest.main()
