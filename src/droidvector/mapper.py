"""Map a normalized geometry tree onto an Android VectorDrawable document."""
from __future__ import annotations

import logging
import re
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional, Tuple

from . import affine
from . import diagnostics as codes
from .diagnostics import CodeSummary, Severity, WarningSink
from .errors import StructuralError
from .normalize import DEFAULT_PATH_TRANSFORMER
from .options import ConversionOptions
from .pathdata import PathTransformer
from .precision import canonicalize_path_data, format_number
from .shapes import shape_to_path
from .style import collect_style, resolve_paint
from .tree import NON_RENDERED_TAGS, GeometryTree, Node, NodeKind

logger = logging.getLogger(__name__)

ANDROID_NS = "http://schemas.android.com/apk/res/android"
ET.register_namespace("android", ANDROID_NS)

# Alphas and viewport sizes keep three places whatever the path precision.
FIXED_DECIMALS = 3

DEFAULT_MITER_LIMIT = 4.0

UNSUPPORTED_SCAN = ("linearGradient", "radialGradient", "pattern", "filter", "mask", "foreignObject")

_VIEWBOX_SPLIT = re.compile(r"[\s,]+")
_DIMENSION = re.compile(r"^\s*([-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?)\s*([a-zA-Z]*)\s*$")


def _a(name: str) -> str:
    return f"{{{ANDROID_NS}}}{name}"


@dataclass
class VectorPath:
    path_data: str
    fill_color: Optional[str] = None
    fill_alpha: float = 1.0
    stroke_color: Optional[str] = None
    stroke_alpha: float = 1.0
    stroke_width: Optional[float] = None
    fill_type: Optional[str] = None
    stroke_line_cap: Optional[str] = None
    stroke_line_join: Optional[str] = None
    stroke_miter_limit: Optional[float] = None

    def attributes(self, decimals: int) -> Dict[str, str]:
        """Android attributes in output order, defaults omitted."""
        attrs: Dict[str, str] = {"pathData": self.path_data}
        if self.fill_color:
            attrs["fillColor"] = self.fill_color
        fill_alpha = format_number(self.fill_alpha, FIXED_DECIMALS)
        if self.fill_color and fill_alpha != "1":
            attrs["fillAlpha"] = fill_alpha
        if self.stroke_color:
            attrs["strokeColor"] = self.stroke_color
            stroke_alpha = format_number(self.stroke_alpha, FIXED_DECIMALS)
            if stroke_alpha != "1":
                attrs["strokeAlpha"] = stroke_alpha
            if self.stroke_width is not None:
                width = format_number(self.stroke_width, decimals)
                if width != "0":
                    attrs["strokeWidth"] = width
        if self.fill_type and self.fill_type != "nonZero":
            attrs["fillType"] = self.fill_type
        if self.stroke_line_cap and self.stroke_line_cap != "butt":
            attrs["strokeLineCap"] = self.stroke_line_cap
        if self.stroke_line_join and self.stroke_line_join != "miter":
            attrs["strokeLineJoin"] = self.stroke_line_join
        if self.stroke_miter_limit is not None:
            limit = format_number(self.stroke_miter_limit, decimals)
            if limit != format_number(DEFAULT_MITER_LIMIT, decimals):
                attrs["strokeMiterLimit"] = limit
        return attrs


@dataclass
class VectorDocument:
    viewport_width: float
    viewport_height: float
    width_dp: float
    height_dp: float
    paths: List[VectorPath] = field(default_factory=list)
    decimals: int = 2

    def to_element(self) -> ET.Element:
        root = ET.Element("vector")
        root.set(_a("width"), f"{format_number(self.width_dp, FIXED_DECIMALS)}dp")
        root.set(_a("height"), f"{format_number(self.height_dp, FIXED_DECIMALS)}dp")
        root.set(_a("viewportWidth"), format_number(self.viewport_width, FIXED_DECIMALS))
        root.set(_a("viewportHeight"), format_number(self.viewport_height, FIXED_DECIMALS))
        for path in self.paths:
            child = ET.SubElement(root, "path")
            for key, value in path.attributes(self.decimals).items():
                child.set(_a(key), value)
        return root

    def to_xml(self) -> str:
        root = self.to_element()
        ET.indent(root, space="  ")
        body = ET.tostring(root, encoding="unicode")
        return '<?xml version="1.0" encoding="utf-8"?>\n' + body + "\n"


@dataclass
class MappingResult:
    document: VectorDocument
    path_count: int
    skipped_count: int
    viewport: Tuple[float, float]
    summary: Dict[str, CodeSummary]


def scan_unsupported(tree: GeometryTree, sink: WarningSink) -> None:
    """One diagnostic per unsupported kind present, with its count."""
    for tag in UNSUPPORTED_SCAN:
        count = tree.count(tag)
        if count:
            sink.add(
                codes.unsupported_code(tag),
                f"Unsupported SVG feature <{tag}> detected; skipped.",
                Severity.WARN,
                {"count": count},
            )
    clips = tree.count("clipPath")
    if clips:
        sink.add(
            codes.CLIPPATH_LIMITED,
            "clipPath is not honored as a clip; shapes may not clip as expected.",
            Severity.INFO,
            {"count": clips},
        )


def parse_viewbox(value: Optional[str]) -> Optional[Tuple[float, float, float, float]]:
    if not value:
        return None
    parts = [part for part in _VIEWBOX_SPLIT.split(value.strip()) if part]
    if len(parts) != 4:
        return None
    try:
        min_x, min_y, width, height = (float(part) for part in parts)
    except ValueError:
        return None
    if width <= 0 or height <= 0:
        return None
    return (min_x, min_y, width, height)


def parse_dimension(value: Optional[str]) -> Optional[float]:
    """Positive number with an optional alphabetic unit; percentages rejected."""
    if value is None:
        return None
    match = _DIMENSION.match(value)
    if not match:
        return None
    number = float(match.group(1))
    return number if number > 0 else None


def resolve_viewport(
    root: Node, options: ConversionOptions, sink: WarningSink
) -> Tuple[float, float]:
    viewbox = parse_viewbox(root.get("viewBox"))
    if viewbox is not None:
        min_x, min_y, width, height = viewbox
        if min_x or min_y:
            sink.add(
                codes.VIEWBOX_ORIGIN_IGNORED,
                "viewBox origin is not zero; VectorDrawable viewports start at 0,0.",
                Severity.WARN,
                {"minX": min_x, "minY": min_y},
            )
        return (width, height)
    width = parse_dimension(root.get("width"))
    height = parse_dimension(root.get("height"))
    if width is not None and height is not None:
        sink.add(
            codes.NO_VIEWBOX,
            "No viewBox on <svg>; using width/height as viewport.",
            Severity.INFO,
            {"width": width, "height": height},
        )
        return (width, height)
    fallback_w, fallback_h = options.default_viewport
    sink.add(
        codes.VIEWPORT_FALLBACK,
        f"Missing viewBox/size; using fallback viewport "
        f"{format_number(fallback_w, FIXED_DECIMALS)}x{format_number(fallback_h, FIXED_DECIMALS)}.",
        Severity.WARN,
        {"width": fallback_w, "height": fallback_h},
    )
    return (fallback_w, fallback_h)


def physical_size(viewport: Tuple[float, float], size: float) -> Tuple[float, float]:
    """Longer side gets ``size`` dp; the other keeps the viewport aspect."""
    width, height = viewport
    if width >= height:
        return (size, size * height / width)
    return (size * width / height, size)


def _map_path(
    attrs: Mapping[str, str],
    d: str,
    options: ConversionOptions,
    sink: WarningSink,
) -> VectorPath:
    paint = resolve_paint(collect_style(attrs), sink)
    return VectorPath(
        path_data=canonicalize_path_data(d, options.decimals),
        fill_color=paint.fill_color,
        fill_alpha=paint.fill_alpha,
        stroke_color=paint.stroke_color,
        stroke_alpha=paint.stroke_alpha,
        stroke_width=paint.stroke_width,
        fill_type=paint.fill_type,
        stroke_line_cap=paint.stroke_line_cap,
        stroke_line_join=paint.stroke_line_join,
        stroke_miter_limit=paint.stroke_miter_limit,
    )


def _shape_path_data(
    node: Node,
    sink: WarningSink,
    path_transformer: Optional[PathTransformer],
) -> Optional[str]:
    d = shape_to_path(node.tag, node.attrs, sink)
    if d is None:
        return None
    transform = node.get("transform")
    if not transform:
        return d
    m = affine.parse_transform(transform)
    if affine.is_identity(m):
        return d
    if path_transformer is None:
        sink.add(
            codes.PATH_TRANSFORMER_MISSING,
            "No path transformer configured; transform not applied.",
            Severity.WARN,
            {"transform": transform},
        )
        return d
    try:
        return path_transformer.transform(d, m)
    except ValueError as exc:
        sink.add(
            codes.PATH_TRANSFORM_FAILED,
            f"Failed to apply transform to <{node.tag}>: {exc}",
            Severity.WARN,
            {"tag": node.tag},
        )
        return d


def map_tree(
    tree: GeometryTree,
    options: ConversionOptions,
    sink: WarningSink,
    *,
    path_transformer: Optional[PathTransformer] = DEFAULT_PATH_TRANSFORMER,
) -> MappingResult:
    """Build the VectorDrawable document for an already-normalized tree."""
    if not tree.nodes or tree.root.tag != "svg":
        tag = tree.root.tag if tree.nodes else None
        raise StructuralError(f"Root element is not <svg> (got {tag!r}).")

    scan_unsupported(tree, sink)
    viewport = resolve_viewport(tree.root, options, sink)
    width_dp, height_dp = physical_size(viewport, options.default_size)

    paths: List[VectorPath] = []
    skipped = 0
    for index in tree.walk(skip=NON_RENDERED_TAGS):
        node = tree.nodes[index]
        kind = node.kind
        if kind is NodeKind.PATH:
            d = node.get("d") or ""
            if not d.strip():
                sink.add(codes.PATH_EMPTY, '<path> has empty "d". Skipped.', Severity.WARN)
                skipped += 1
                continue
            paths.append(_map_path(node.attrs, d, options, sink))
        elif kind is NodeKind.SHAPE:
            if not options.convert_shapes:
                sink.add(
                    codes.SHAPE_SKIPPED,
                    f"<{node.tag}> not converted (shape conversion disabled).",
                    Severity.INFO,
                    {"tag": node.tag},
                )
                skipped += 1
                continue
            d = _shape_path_data(node, sink, path_transformer)
            if d is None:
                skipped += 1
                continue
            paths.append(_map_path(node.attrs, d, options, sink))

    logger.debug("mapped %d paths, skipped %d", len(paths), skipped)
    document = VectorDocument(
        viewport_width=viewport[0],
        viewport_height=viewport[1],
        width_dp=width_dp,
        height_dp=height_dp,
        paths=paths,
        decimals=options.decimals,
    )
    return MappingResult(
        document=document,
        path_count=len(paths),
        skipped_count=skipped,
        viewport=viewport,
        summary=sink.summarize(),
    )


__all__ = [
    "ANDROID_NS",
    "VectorPath",
    "VectorDocument",
    "MappingResult",
    "scan_unsupported",
    "parse_viewbox",
    "parse_dimension",
    "resolve_viewport",
    "physical_size",
    "map_tree",
]
