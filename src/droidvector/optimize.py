"""Light text-level SVG cleanup run ahead of parsing."""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import List, Mapping, Optional, Protocol, Tuple

_XML_DECLARATION = re.compile(r"^\s*<\?xml[\s\S]*?\?>\s*", re.IGNORECASE)
_DOCTYPE = re.compile(r"^\s*<!doctype[^>\[]*(?:\[[\s\S]*?\])?\s*>\s*", re.IGNORECASE)
_COMMENTS = re.compile(r"<!--[\s\S]*?-->")
_BETWEEN_TAGS = re.compile(r">\s+<")

_NON_VISUAL = ("metadata", "title", "desc")


@dataclass(frozen=True)
class OptimizeStats:
    bytes_in: int
    bytes_out: int
    removed: Tuple[str, ...] = ()

    @property
    def saved(self) -> int:
        return max(self.bytes_in - self.bytes_out, 0)

    @property
    def ratio(self) -> float:
        if self.bytes_in <= 0:
            return 0.0
        return 1.0 - self.bytes_out / self.bytes_in


class Optimizer(Protocol):
    def optimize(self, text: str, config: Optional[Mapping[str, bool]] = None) -> Tuple[str, OptimizeStats]:
        ...


def _size(text: str) -> int:
    return len(text.encode("utf-8"))


class LightOptimizer:
    """Strips declarations, comments and non-visual elements.

    Recognized config keys: ``keep_title``, ``keep_desc``, ``keep_metadata``
    and ``collapse_whitespace`` (default on).
    """

    def optimize(self, text: str, config: Optional[Mapping[str, bool]] = None) -> Tuple[str, OptimizeStats]:
        config = config or {}
        removed: List[str] = []
        out = _XML_DECLARATION.sub("", text, count=1)
        out = _DOCTYPE.sub("", out, count=1)
        out = _COMMENTS.sub("", out)
        for tag in _NON_VISUAL:
            if config.get(f"keep_{tag}"):
                continue
            pattern = re.compile(rf"<{tag}\b[^>]*/>|<{tag}\b[\s\S]*?</{tag}\s*>", re.IGNORECASE)
            out, count = pattern.subn("", out)
            if count:
                removed.append(tag)
        if config.get("collapse_whitespace", True):
            out = _BETWEEN_TAGS.sub("><", out).strip()
        return out, OptimizeStats(_size(text), _size(out), tuple(removed))


__all__ = ["Optimizer", "OptimizeStats", "LightOptimizer"]
