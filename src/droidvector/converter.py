"""SVG to VectorDrawable conversion entry points."""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from pathlib import PurePath
from typing import Any, Dict, Mapping, Optional, Tuple

from . import diagnostics as codes
from .diagnostics import CodeSummary, Diagnostic, Severity, WarningSink
from .mapper import VectorDocument, map_tree
from .normalize import DEFAULT_PATH_TRANSFORMER, normalize_tree
from .optimize import LightOptimizer, Optimizer, OptimizeStats
from .options import ConversionOptions
from .pathdata import PathTransformer
from .tree import GeometryTree

logger = logging.getLogger(__name__)

DEFAULT_OPTIMIZER: Optimizer = LightOptimizer()


@dataclass(frozen=True)
class ConversionStats:
    path_count: int
    skipped_count: int
    viewport: Tuple[float, float]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "pathCount": self.path_count,
            "skippedCount": self.skipped_count,
            "resolvedViewport": {"width": self.viewport[0], "height": self.viewport[1]},
        }


@dataclass(frozen=True)
class ConversionResult:
    xml: str
    document: VectorDocument
    stats: ConversionStats
    diagnostics: Tuple[Diagnostic, ...]
    summary: Dict[str, CodeSummary]
    optimize_stats: Optional[OptimizeStats] = None

    def has_severity(self, severity: Severity) -> bool:
        return any(item.severity >= severity for item in self.diagnostics)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "stats": self.stats.to_dict(),
            "diagnostics": [item.to_dict() for item in self.diagnostics],
            "summary": {
                code: {"count": entry.count, "severity": entry.severity.label}
                for code, entry in self.summary.items()
            },
        }


def _convert(
    tree: GeometryTree,
    options: ConversionOptions,
    sink: WarningSink,
    path_transformer: Optional[PathTransformer],
    optimize_stats: Optional[OptimizeStats] = None,
) -> ConversionResult:
    normalized = normalize_tree(
        tree,
        sink,
        convert_shapes=options.convert_shapes,
        path_transformer=path_transformer,
    )
    mapped = map_tree(normalized, options, sink, path_transformer=path_transformer)
    stats = ConversionStats(mapped.path_count, mapped.skipped_count, mapped.viewport)
    return ConversionResult(
        xml=mapped.document.to_xml(),
        document=mapped.document,
        stats=stats,
        diagnostics=sink.diagnostics,
        summary=sink.summarize(),
        optimize_stats=optimize_stats,
    )


def convert_tree(
    tree: GeometryTree,
    options: Optional[ConversionOptions] = None,
    *,
    path_transformer: Optional[PathTransformer] = DEFAULT_PATH_TRANSFORMER,
) -> ConversionResult:
    """Normalize then map an already-parsed tree.

    Raises :class:`StructuralError` when the root is not ``<svg>``; every
    other anomaly is reported in the result's diagnostics.
    """
    return _convert(tree, options or ConversionOptions(), WarningSink(), path_transformer)


def convert_svg(
    svg_text: str,
    options: Optional[ConversionOptions] = None,
    *,
    path_transformer: Optional[PathTransformer] = DEFAULT_PATH_TRANSFORMER,
    optimizer: Optional[Optimizer] = DEFAULT_OPTIMIZER,
    optimizer_config: Optional[Mapping[str, bool]] = None,
) -> ConversionResult:
    """Convert SVG markup to VectorDrawable XML."""
    sink = WarningSink()
    optimize_stats: Optional[OptimizeStats] = None
    if optimizer is None:
        sink.add(codes.OPTIMIZER_MISSING, "No optimizer configured; input used as is.", Severity.INFO)
    else:
        svg_text, optimize_stats = optimizer.optimize(svg_text, optimizer_config)
        logger.debug("optimizer saved %d bytes", optimize_stats.saved)
    tree = GeometryTree.from_svg(svg_text)
    return _convert(tree, options or ConversionOptions(), sink, path_transformer, optimize_stats)


def resource_name(filename: str) -> str:
    """Android drawable resource name for a source file name."""
    stem = PurePath(filename.replace("\\", "/")).stem
    name = re.sub(r"[^a-z0-9_]+", "_", stem.lower()).strip("_")
    name = re.sub(r"_+", "_", name)
    if not name:
        name = "vector"
    if name[0].isdigit():
        name = f"ic_{name}"
    return name


__all__ = [
    "ConversionStats",
    "ConversionResult",
    "convert_tree",
    "convert_svg",
    "resource_name",
]
