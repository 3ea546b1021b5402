from __future__ import annotations

import sys
import unittest
from pathlib import Path

TESTS_DIR = Path(__file__).resolve().parent
PROJECT_ROOT = TESTS_DIR.parent
sys.path.insert(0, str(PROJECT_ROOT / "src"))

from droidvector.diagnostics import Severity, WarningSink
from droidvector.errors import StructuralError
from droidvector.normalize import normalize_tree
from droidvector.tree import GeometryTree

SVG_NS = 'xmlns="http://www.w3.org/2000/svg"'


def _tree(body: str) -> GeometryTree:
    return GeometryTree.from_svg(f"<svg {SVG_NS}>{body}</svg>")


def _paths(tree: GeometryTree):
    return [node for node in tree.nodes if node.tag == "path"]


class NormalizeTests(unittest.TestCase):
    def test_group_and_path_transforms_are_baked(self) -> None:
        tree = _tree('<g transform="translate(10,0)"><path d="M0 0 L1 1" transform="scale(2)"/></g>')
        sink = WarningSink()
        out = normalize_tree(tree, sink)
        path = _paths(out)[0]
        self.assertEqual(path.attrs["d"], "M 10 0 L 12 2")
        self.assertNotIn("transform", path.attrs)
        self.assertNotIn("transform", out.nodes[1].attrs)
        self.assertEqual(len(sink), 0)

    def test_input_tree_is_not_mutated(self) -> None:
        tree = _tree('<path d="m0 0 h5" transform="translate(1 1)"/>')
        normalize_tree(tree, WarningSink())
        self.assertEqual(_paths(tree)[0].attrs, {"d": "m0 0 h5", "transform": "translate(1 1)"})

    def test_nested_groups_compose_parent_first(self) -> None:
        tree = _tree(
            '<g transform="scale(2)"><g transform="translate(5,0)">'
            '<path d="M1 1"/></g></g>'
        )
        out = normalize_tree(tree, WarningSink())
        self.assertEqual(_paths(out)[0].attrs["d"], "M 12 2")

    def test_paths_are_expanded_without_transform(self) -> None:
        out = normalize_tree(_tree('<path d="m1 1 10 0 v5 z"/>'), WarningSink())
        self.assertEqual(_paths(out)[0].attrs["d"], "M 1 1 L 11 1 L 11 6 Z")

    def test_shape_keeps_composed_transform_with_info(self) -> None:
        tree = _tree('<g transform="translate(10,0)"><rect width="4" height="4" transform="scale(2)"/></g>')
        sink = WarningSink()
        out = normalize_tree(tree, sink)
        rect = [node for node in out.nodes if node.tag == "rect"][0]
        self.assertEqual(rect.attrs["transform"], "matrix(2,0,0,2,10,0)")
        self.assertEqual(sink.codes(), ["W_SHAPE_TRANSFORM_RETAINED"])
        self.assertEqual(sink.diagnostics[0].severity, Severity.INFO)

    def test_shape_without_transform_is_untouched(self) -> None:
        sink = WarningSink()
        out = normalize_tree(_tree('<circle r="3"/>'), sink)
        self.assertNotIn("transform", out.nodes[1].attrs)
        self.assertEqual(len(sink), 0)

    def test_malformed_path_is_kept_with_warning(self) -> None:
        sink = WarningSink()
        out = normalize_tree(_tree('<path d="M 0" transform="translate(1,1)"/>'), sink)
        self.assertEqual(_paths(out)[0].attrs["d"], "M 0")
        self.assertEqual(sink.codes(), ["W_PATH_TRANSFORM_FAILED"])

    def test_missing_transformer_reports_dropped_transform(self) -> None:
        sink = WarningSink()
        out = normalize_tree(
            _tree('<path d="M0 0" transform="translate(1,1)"/><path d="M0 0"/>'),
            sink,
            path_transformer=None,
        )
        self.assertEqual(sink.codes(), ["W_PATH_TRANSFORMER_MISSING"])
        self.assertNotIn("transform", _paths(out)[0].attrs)

    def test_root_must_be_svg(self) -> None:
        tree = GeometryTree()
        tree.add("g")
        with self.assertRaises(StructuralError):
            normalize_tree(tree, WarningSink())
        with self.assertRaises(StructuralError):
            normalize_tree(GeometryTree(), WarningSink())


if __name__ == "__main__":
    unittest.main()
