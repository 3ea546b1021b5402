"""Flatten inherited transforms into path geometry."""
from __future__ import annotations

import logging
from typing import List, Optional, Tuple

from . import affine
from . import diagnostics as codes
from .affine import Affine
from .diagnostics import Severity, WarningSink
from .errors import StructuralError
from .pathdata import AbsolutePathTransformer, PathTransformer
from .tree import GeometryTree, Node, NodeKind

logger = logging.getLogger(__name__)

DEFAULT_PATH_TRANSFORMER: PathTransformer = AbsolutePathTransformer()


def _flatten_path(
    node: Node,
    m: Affine,
    sink: WarningSink,
    path_transformer: Optional[PathTransformer],
) -> bool:
    d = node.attrs.get("d") or ""
    if not d.strip():
        # Reported by the mapper as an empty path.
        return False
    if path_transformer is None:
        if not affine.is_identity(m):
            sink.add(
                codes.PATH_TRANSFORMER_MISSING,
                "No path transformer configured; transform not applied.",
                Severity.WARN,
                {"transform": affine.to_string(m)},
            )
        return False
    try:
        node.attrs["d"] = path_transformer.transform(d, m)
    except ValueError as exc:
        sink.add(
            codes.PATH_TRANSFORM_FAILED,
            f"Failed to apply transform to path: {exc}",
            Severity.WARN,
            {"id": node.attrs.get("id")} if node.attrs.get("id") else None,
        )
        return False
    return True


def normalize_tree(
    tree: GeometryTree,
    sink: WarningSink,
    *,
    convert_shapes: bool = False,
    path_transformer: Optional[PathTransformer] = DEFAULT_PATH_TRANSFORMER,
) -> GeometryTree:
    """Return a copy of ``tree`` with every transform baked or consolidated.

    Paths get absolute, expanded path data with the composed matrix applied
    and lose their ``transform``. Groups pass their matrix down and lose
    theirs. Shapes under a non-identity matrix keep their geometry and carry
    the composed matrix as a single ``matrix(...)`` transform.
    """
    if not tree.nodes or tree.root.kind is not NodeKind.GROUP or tree.root.tag != "svg":
        tag = tree.root.tag if tree.nodes else None
        raise StructuralError(f"Root element is not <svg> (got {tag!r}).")

    out = tree.copy()
    flattened = 0
    stack: List[Tuple[int, Affine]] = [(0, affine.IDENTITY)]
    while stack:
        index, inherited = stack.pop()
        node = out.nodes[index]
        kind = node.kind
        own = node.attrs.get("transform")
        m = affine.compose(inherited, affine.parse_transform(own)) if own else inherited

        if kind is NodeKind.PATH:
            node.attrs.pop("transform", None)
            if _flatten_path(node, m, sink, path_transformer):
                flattened += 1
            continue

        if kind is NodeKind.SHAPE:
            node.attrs.pop("transform", None)
            if not affine.is_identity(m):
                node.attrs["transform"] = affine.to_string(m, 10)
                if not convert_shapes:
                    sink.add(
                        codes.SHAPE_TRANSFORM_RETAINED,
                        f"<{node.tag}> retains transform attribute; consider converting shapes to paths.",
                        Severity.INFO,
                        {"tag": node.tag},
                    )
            continue

        if kind in (NodeKind.GROUP, NodeKind.UNSUPPORTED):
            node.attrs.pop("transform", None)
        for child in reversed(node.children):
            stack.append((child, m))

    logger.debug("normalized %d nodes, flattened %d paths", len(out), flattened)
    return out


__all__ = ["DEFAULT_PATH_TRANSFORMER", "normalize_tree"]
