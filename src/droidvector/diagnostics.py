"""Structured, append-only diagnostics for a single conversion call."""
from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from types import MappingProxyType
from typing import Any, Dict, Iterator, List, Mapping, Optional, Tuple


class Severity(IntEnum):
    INFO = 1
    WARN = 2
    ERROR = 3

    @property
    def label(self) -> str:
        return self.name.lower()


@dataclass(frozen=True)
class Diagnostic:
    code: str
    message: str
    severity: Severity = Severity.WARN
    meta: Optional[Mapping[str, Any]] = None

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "code": self.code,
            "message": self.message,
            "severity": self.severity.label,
        }
        if self.meta is not None:
            payload["meta"] = dict(self.meta)
        return payload


@dataclass(frozen=True)
class CodeSummary:
    count: int
    severity: Severity


class WarningSink:
    """Ordered accumulator of diagnostics.

    One sink is created per top-level call and handed down explicitly; entries
    are never removed or replaced once added.
    """

    def __init__(self) -> None:
        self._items: List[Diagnostic] = []

    def add(
        self,
        code: str,
        message: str,
        severity: Severity = Severity.WARN,
        meta: Optional[Mapping[str, Any]] = None,
    ) -> Diagnostic:
        frozen_meta = MappingProxyType(dict(meta)) if meta is not None else None
        diagnostic = Diagnostic(code, message, Severity(severity), frozen_meta)
        self._items.append(diagnostic)
        return diagnostic

    def info(self, code: str, message: str, **meta: Any) -> Diagnostic:
        return self.add(code, message, Severity.INFO, meta or None)

    def warn(self, code: str, message: str, **meta: Any) -> Diagnostic:
        return self.add(code, message, Severity.WARN, meta or None)

    def error(self, code: str, message: str, **meta: Any) -> Diagnostic:
        return self.add(code, message, Severity.ERROR, meta or None)

    @property
    def diagnostics(self) -> Tuple[Diagnostic, ...]:
        return tuple(self._items)

    def codes(self) -> List[str]:
        return [item.code for item in self._items]

    def by_severity(self, severity: Severity) -> List[Diagnostic]:
        return [item for item in self._items if item.severity == severity]

    def max_severity(self) -> Optional[Severity]:
        if not self._items:
            return None
        return max(item.severity for item in self._items)

    def summarize(self) -> Dict[str, CodeSummary]:
        """Group by code: occurrence count and highest severity seen."""
        counts: Dict[str, int] = {}
        worst: Dict[str, Severity] = {}
        for item in self._items:
            counts[item.code] = counts.get(item.code, 0) + 1
            if item.code not in worst or item.severity > worst[item.code]:
                worst[item.code] = item.severity
        return {code: CodeSummary(counts[code], worst[code]) for code in counts}

    def __iter__(self) -> Iterator[Diagnostic]:
        return iter(tuple(self._items))

    def __len__(self) -> int:
        return len(self._items)

    def __bool__(self) -> bool:
        return bool(self._items)


# Codes shared across modules.
PATH_EMPTY = "W_PATH_EMPTY"
COLOR_UNPARSEABLE = "W_COLOR_UNPARSEABLE"
RECT_ROUNDED_IGNORED = "W_RECT_ROUNDED_IGNORED"
SHAPE_SKIPPED = "W_SHAPE_SKIPPED"
SHAPE_DEGENERATE = "W_SHAPE_DEGENERATE"
SHAPE_TRANSFORM_RETAINED = "W_SHAPE_TRANSFORM_RETAINED"
PATH_TRANSFORM_FAILED = "W_PATH_TRANSFORM_FAILED"
PATH_TRANSFORMER_MISSING = "W_PATH_TRANSFORMER_MISSING"
OPTIMIZER_MISSING = "W_OPTIMIZER_MISSING"
NO_VIEWBOX = "W_NO_VIEWBOX"
VIEWPORT_FALLBACK = "W_VIEWPORT_FALLBACK"
VIEWBOX_ORIGIN_IGNORED = "W_VIEWBOX_ORIGIN_IGNORED"
STROKE_LINECAP_UNSUPPORTED = "W_STROKE_LINECAP_UNSUPPORTED"
STROKE_LINEJOIN_UNSUPPORTED = "W_STROKE_LINEJOIN_UNSUPPORTED"
CLIPPATH_LIMITED = "W_CLIPPATH_LIMITED"


def unsupported_code(tag: str) -> str:
    return f"W_UNSUPPORTED_{tag.upper()}"


__all__ = [
    "Severity",
    "Diagnostic",
    "CodeSummary",
    "WarningSink",
    "unsupported_code",
]
