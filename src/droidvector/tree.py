"""Arena-indexed geometry tree.

Nodes live in one list owned by :class:`GeometryTree`; a node refers to its
children by index and never to its parent.
"""
from __future__ import annotations

import xml.etree.ElementTree as ET
from copy import deepcopy
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterator, List, Mapping, Optional, Tuple

SHAPE_TAGS = ("rect", "circle", "ellipse", "line", "polyline", "polygon")
GROUP_TAGS = ("svg", "g", "a", "symbol", "defs", "switch")
UNSUPPORTED_TAGS = (
    "linearGradient",
    "radialGradient",
    "pattern",
    "filter",
    "mask",
    "foreignObject",
    "clipPath",
)
# Containers whose content is referenced rather than drawn in place.
NON_RENDERED_TAGS = ("defs", "symbol") + UNSUPPORTED_TAGS


class NodeKind(Enum):
    PATH = "path"
    SHAPE = "shape"
    GROUP = "group"
    UNSUPPORTED = "unsupported"
    OTHER = "other"


def classify(tag: str) -> NodeKind:
    if tag == "path":
        return NodeKind.PATH
    if tag in SHAPE_TAGS:
        return NodeKind.SHAPE
    if tag in GROUP_TAGS:
        return NodeKind.GROUP
    if tag in UNSUPPORTED_TAGS:
        return NodeKind.UNSUPPORTED
    return NodeKind.OTHER


@dataclass
class Node:
    tag: str
    attrs: Dict[str, str] = field(default_factory=dict)
    children: List[int] = field(default_factory=list)

    @property
    def kind(self) -> NodeKind:
        return classify(self.tag)

    def get(self, name: str, default: Optional[str] = None) -> Optional[str]:
        return self.attrs.get(name, default)


class GeometryTree:
    """Ordered element tree; index 0 is the root."""

    def __init__(self, nodes: Optional[List[Node]] = None) -> None:
        self.nodes: List[Node] = nodes if nodes is not None else []

    @property
    def root(self) -> Node:
        if not self.nodes:
            raise IndexError("empty tree has no root")
        return self.nodes[0]

    def add(
        self,
        tag: str,
        attrs: Optional[Mapping[str, str]] = None,
        parent: Optional[int] = None,
    ) -> int:
        if parent is None and self.nodes:
            raise ValueError("tree already has a root; pass a parent index")
        index = len(self.nodes)
        self.nodes.append(Node(tag, dict(attrs or {})))
        if parent is not None:
            self.nodes[parent].children.append(index)
        return index

    def walk(self, start: int = 0, *, skip: Tuple[str, ...] = ()) -> Iterator[int]:
        """Pre-order document-order traversal, not entering ``skip`` tags."""
        if not self.nodes:
            return
        stack = [start]
        while stack:
            index = stack.pop()
            node = self.nodes[index]
            yield index
            if node.tag in skip and index != start:
                continue
            stack.extend(reversed(node.children))

    def count(self, tag: str) -> int:
        return sum(1 for node in self.nodes if node.tag == tag)

    def copy(self) -> "GeometryTree":
        return GeometryTree(deepcopy(self.nodes))

    def __len__(self) -> int:
        return len(self.nodes)

    def __getitem__(self, index: int) -> Node:
        return self.nodes[index]

    @classmethod
    def from_element(cls, element: ET.Element) -> "GeometryTree":
        tree = cls()
        stack: List[Tuple[ET.Element, Optional[int]]] = [(element, None)]
        while stack:
            elem, parent = stack.pop()
            if not isinstance(elem.tag, str):
                # Comments and processing instructions.
                continue
            attrs = {_local_name(key): value for key, value in elem.attrib.items()}
            index = tree.add(_local_name(elem.tag), attrs, parent)
            for child in reversed(list(elem)):
                stack.append((child, index))
        return tree

    @classmethod
    def from_svg(cls, svg_text: str) -> "GeometryTree":
        try:
            root = ET.fromstring(svg_text.encode("utf-8"))
        except ET.ParseError as exc:
            line, column = getattr(exc, "position", (None, None))
            location = (
                f" at line {line}, column {column}" if line is not None and column is not None else ""
            )
            raise ValueError(f"Failed to parse SVG input{location}") from exc
        return cls.from_element(root)


def _local_name(tag: str) -> str:
    if tag.startswith("{"):
        return tag.split("}", 1)[1]
    return tag


__all__ = [
    "SHAPE_TAGS",
    "GROUP_TAGS",
    "UNSUPPORTED_TAGS",
    "NON_RENDERED_TAGS",
    "NodeKind",
    "classify",
    "Node",
    "GeometryTree",
]
