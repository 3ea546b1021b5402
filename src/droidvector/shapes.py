"""Reduce primitive shapes to path data."""
from __future__ import annotations

import re
from typing import List, Mapping, Optional

from . import diagnostics as codes
from .diagnostics import Severity, WarningSink
from .pathdata import format_value as _fmt

_LENGTH = re.compile(r"^\s*([-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?)\s*([a-zA-Z]*)\s*$")
_POINT_SPLIT = re.compile(r"[\s,]+")


def parse_length(value: Optional[str], default: Optional[float] = None) -> Optional[float]:
    """Numeric value of a length, ignoring an alphabetic unit suffix."""
    if value is None:
        return default
    match = _LENGTH.match(value)
    if not match:
        return default
    return float(match.group(1))


def parse_points(value: Optional[str]) -> List[float]:
    numbers: List[float] = []
    if not value:
        return numbers
    for chunk in _POINT_SPLIT.split(value.strip()):
        if not chunk:
            continue
        try:
            numbers.append(float(chunk))
        except ValueError:
            break
    return numbers


def _degenerate(sink: WarningSink, tag: str, reason: str) -> None:
    sink.add(
        codes.SHAPE_DEGENERATE,
        f"<{tag}> {reason}; skipped.",
        Severity.WARN,
        {"tag": tag},
    )


def _rect(attrs: Mapping[str, str], sink: WarningSink) -> Optional[str]:
    x = parse_length(attrs.get("x"), 0.0) or 0.0
    y = parse_length(attrs.get("y"), 0.0) or 0.0
    w = parse_length(attrs.get("width"))
    h = parse_length(attrs.get("height"))
    if w is None or h is None or w <= 0 or h <= 0:
        _degenerate(sink, "rect", "needs positive width and height")
        return None
    rx = parse_length(attrs.get("rx"))
    ry = parse_length(attrs.get("ry"))
    if (rx is not None and rx > 0) or (ry is not None and ry > 0):
        sink.add(
            codes.RECT_ROUNDED_IGNORED,
            "Rounded rect rx/ry ignored; exporting sharp corners.",
            Severity.WARN,
            {"rx": rx, "ry": ry},
        )
    return f"M {_fmt(x)} {_fmt(y)} H {_fmt(x + w)} V {_fmt(y + h)} H {_fmt(x)} Z"


def _ellipse_path(cx: float, cy: float, rx: float, ry: float) -> str:
    radii = f"{_fmt(rx)} {_fmt(ry)}"
    right = f"{_fmt(cx + rx)} {_fmt(cy)}"
    left = f"{_fmt(cx - rx)} {_fmt(cy)}"
    return f"M {right} A {radii} 0 1 0 {left} A {radii} 0 1 0 {right} Z"


def _circle(attrs: Mapping[str, str], sink: WarningSink) -> Optional[str]:
    cx = parse_length(attrs.get("cx"), 0.0) or 0.0
    cy = parse_length(attrs.get("cy"), 0.0) or 0.0
    r = parse_length(attrs.get("r"))
    if r is None or r <= 0:
        _degenerate(sink, "circle", "needs a positive radius")
        return None
    return _ellipse_path(cx, cy, r, r)


def _ellipse(attrs: Mapping[str, str], sink: WarningSink) -> Optional[str]:
    cx = parse_length(attrs.get("cx"), 0.0) or 0.0
    cy = parse_length(attrs.get("cy"), 0.0) or 0.0
    rx = parse_length(attrs.get("rx"))
    ry = parse_length(attrs.get("ry"))
    if rx is None or ry is None or rx <= 0 or ry <= 0:
        _degenerate(sink, "ellipse", "needs positive rx and ry")
        return None
    return _ellipse_path(cx, cy, rx, ry)


def _line(attrs: Mapping[str, str], sink: WarningSink) -> Optional[str]:
    x1 = parse_length(attrs.get("x1"), 0.0) or 0.0
    y1 = parse_length(attrs.get("y1"), 0.0) or 0.0
    x2 = parse_length(attrs.get("x2"), 0.0) or 0.0
    y2 = parse_length(attrs.get("y2"), 0.0) or 0.0
    return f"M {_fmt(x1)} {_fmt(y1)} L {_fmt(x2)} {_fmt(y2)}"


def _poly(tag: str, attrs: Mapping[str, str], sink: WarningSink) -> Optional[str]:
    numbers = parse_points(attrs.get("points"))
    if len(numbers) < 4:
        _degenerate(sink, tag, "needs at least two points")
        return None
    # An odd trailing coordinate is dropped.
    pairs = [(numbers[i], numbers[i + 1]) for i in range(0, len(numbers) - 1, 2)]
    parts = [f"M {_fmt(pairs[0][0])} {_fmt(pairs[0][1])}"]
    parts.extend(f"L {_fmt(x)} {_fmt(y)}" for x, y in pairs[1:])
    if tag == "polygon":
        parts.append("Z")
    return " ".join(parts)


def shape_to_path(tag: str, attrs: Mapping[str, str], sink: WarningSink) -> Optional[str]:
    """Path data for a primitive shape, or ``None`` when it is degenerate."""
    if tag == "rect":
        return _rect(attrs, sink)
    if tag == "circle":
        return _circle(attrs, sink)
    if tag == "ellipse":
        return _ellipse(attrs, sink)
    if tag == "line":
        return _line(attrs, sink)
    if tag in ("polyline", "polygon"):
        return _poly(tag, attrs, sink)
    return None


__all__ = ["parse_length", "parse_points", "shape_to_path"]
