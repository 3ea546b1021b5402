from __future__ import annotations

import sys
import unittest
import xml.etree.ElementTree as ET
from pathlib import Path

TESTS_DIR = Path(__file__).resolve().parent
PROJECT_ROOT = TESTS_DIR.parent
sys.path.insert(0, str(PROJECT_ROOT / "src"))

from droidvector.diagnostics import Severity, WarningSink
from droidvector.mapper import ANDROID_NS, VectorPath, map_tree, physical_size
from droidvector.normalize import normalize_tree
from droidvector.options import ConversionOptions
from droidvector.tree import GeometryTree

SVG_NS = 'xmlns="http://www.w3.org/2000/svg"'


def _map(svg: str, options: ConversionOptions = ConversionOptions()):
    sink = WarningSink()
    tree = normalize_tree(GeometryTree.from_svg(svg), sink, convert_shapes=options.convert_shapes)
    return map_tree(tree, options, sink), sink


def _a(name: str) -> str:
    return f"{{{ANDROID_NS}}}{name}"


class ViewportTests(unittest.TestCase):
    def test_viewbox_wins_over_size(self) -> None:
        result, sink = _map(f'<svg {SVG_NS} viewBox="0 0 48 48" width="24" height="24"/>')
        self.assertEqual(result.viewport, (48.0, 48.0))
        self.assertEqual(len(sink), 0)

    def test_width_height_fallback_is_info(self) -> None:
        result, sink = _map(f'<svg {SVG_NS} width="32px" height="16px"/>')
        self.assertEqual(result.viewport, (32.0, 16.0))
        self.assertEqual(sink.codes(), ["W_NO_VIEWBOX"])
        self.assertEqual(sink.diagnostics[0].severity, Severity.INFO)
        self.assertEqual((result.document.width_dp, result.document.height_dp), (24.0, 12.0))

    def test_default_viewport_warns_once(self) -> None:
        result, sink = _map(f'<svg {SVG_NS} width="50%" height="10"/>')
        self.assertEqual(result.viewport, (24.0, 24.0))
        self.assertEqual(sink.codes(), ["W_VIEWPORT_FALLBACK"])
        self.assertEqual(sink.diagnostics[0].severity, Severity.WARN)

    def test_custom_default_viewport(self) -> None:
        options = ConversionOptions(default_viewport=(100, 50))
        result, _sink = _map(f"<svg {SVG_NS}/>", options)
        self.assertEqual(result.viewport, (100.0, 50.0))

    def test_viewbox_origin_is_reported(self) -> None:
        result, sink = _map(f'<svg {SVG_NS} viewBox="5 5 10 10"/>')
        self.assertEqual(result.viewport, (10.0, 10.0))
        self.assertEqual(sink.codes(), ["W_VIEWBOX_ORIGIN_IGNORED"])

    def test_physical_size_keeps_aspect(self) -> None:
        self.assertEqual(physical_size((10, 20), 24), (12.0, 24.0))
        self.assertEqual(physical_size((48, 48), 24), (24.0, 24.0))


class MappingTests(unittest.TestCase):
    def test_unsupported_scan_counts_per_kind(self) -> None:
        svg = (
            f'<svg {SVG_NS} viewBox="0 0 24 24"><defs>'
            '<linearGradient id="a"/><linearGradient id="b"/><clipPath id="c"><path d="M0 0 L1 1"/></clipPath>'
            '</defs><filter id="f"/><path d="M0 0 L24 24"/></svg>'
        )
        result, sink = _map(svg)
        summary = sink.summarize()
        self.assertEqual(summary["W_UNSUPPORTED_LINEARGRADIENT"].count, 1)
        self.assertEqual(sink.diagnostics[0].meta, {"count": 2})
        self.assertEqual(summary["W_UNSUPPORTED_FILTER"].severity, Severity.WARN)
        self.assertEqual(summary["W_CLIPPATH_LIMITED"].severity, Severity.INFO)
        self.assertEqual(result.path_count, 1)

    def test_path_order_and_empty_paths(self) -> None:
        svg = (
            f'<svg {SVG_NS} viewBox="0 0 24 24">'
            '<path d="M1 1 L2 2" fill="red"/><g><path d=""/><path d="M3 3 L4 4" fill="blue"/></g></svg>'
        )
        result, sink = _map(svg)
        self.assertEqual(result.path_count, 2)
        self.assertEqual(result.skipped_count, 1)
        self.assertEqual([p.fill_color for p in result.document.paths], ["#ff0000", "#0000ff"])
        self.assertEqual(sink.codes(), ["W_PATH_EMPTY"])

    def test_shapes_skipped_when_conversion_disabled(self) -> None:
        result, sink = _map(f'<svg {SVG_NS} viewBox="0 0 24 24"><rect width="4" height="4"/></svg>')
        self.assertEqual(result.path_count, 0)
        self.assertEqual(result.skipped_count, 1)
        self.assertEqual(sink.codes(), ["W_SHAPE_SKIPPED"])

    def test_shapes_converted_with_inherited_transform(self) -> None:
        svg = (
            f'<svg {SVG_NS} viewBox="0 0 24 24">'
            '<g transform="translate(10,10)"><rect width="4" height="2"/></g>'
            '<circle cx="12" cy="12" r="10" transform="scale(2)"/></svg>'
        )
        result, sink = _map(svg, ConversionOptions(convert_shapes=True))
        self.assertEqual(len(sink), 0)
        self.assertEqual(
            [p.path_data for p in result.document.paths],
            [
                "M 10 10 L 14 10 L 14 12 L 10 12 Z",
                "M 44 24 A 20 20 0 1 0 4 24 A 20 20 0 1 0 44 24 Z",
            ],
        )

    def test_degenerate_shape_counts_as_skipped(self) -> None:
        result, sink = _map(
            f'<svg {SVG_NS} viewBox="0 0 24 24"><circle r="0"/></svg>',
            ConversionOptions(convert_shapes=True),
        )
        self.assertEqual(result.skipped_count, 1)
        self.assertEqual(sink.codes(), ["W_SHAPE_DEGENERATE"])

    def test_path_data_is_rounded_to_options(self) -> None:
        svg = f'<svg {SVG_NS} viewBox="0 0 24 24"><g transform="translate(2.5,0)"><path d="M0 0 L1 1"/></g></svg>'
        result, _sink = _map(svg, ConversionOptions(decimals=0))
        self.assertEqual(result.document.paths[0].path_data, "M 3 0 L 4 1")

    def test_document_xml_omits_defaults(self) -> None:
        svg = (
            f'<svg {SVG_NS} viewBox="0 0 24 24">'
            '<path d="M0 0 L10 0 L10 10 Z" fill="#ff0000" fill-opacity="0.5" '
            'stroke="#00f" stroke-width="2" stroke-linecap="round" fill-rule="evenodd"/>'
            '<path d="M1 1 L2 2"/></svg>'
        )
        result, _sink = _map(svg)
        root = ET.fromstring(result.document.to_xml().encode("utf-8"))
        self.assertEqual(root.tag, "vector")
        self.assertEqual(root.get(_a("width")), "24dp")
        self.assertEqual(root.get(_a("viewportHeight")), "24")
        first, second = root.findall("path")
        self.assertEqual(first.get(_a("pathData")), "M 0 0 L 10 0 L 10 10 Z")
        self.assertEqual(first.get(_a("fillAlpha")), "0.5")
        self.assertEqual(first.get(_a("strokeColor")), "#0000ff")
        self.assertEqual(first.get(_a("strokeWidth")), "2")
        self.assertEqual(first.get(_a("strokeLineCap")), "round")
        self.assertEqual(first.get(_a("fillType")), "evenOdd")
        self.assertEqual(
            set(second.attrib),
            {_a("pathData"), _a("fillColor")},
        )

    def test_vector_path_attributes(self) -> None:
        path = VectorPath("M0 0", fill_color=None, stroke_color="#000000", stroke_width=1.0, stroke_miter_limit=4.0)
        self.assertEqual(path.attributes(2), {"pathData": "M0 0", "strokeColor": "#000000", "strokeWidth": "1"})


if __name__ == "__main__":
    unittest.main()
