"""Presentation/style parsing, color grammar and alpha composition."""
from __future__ import annotations

import math
import re
from dataclasses import dataclass, fields
from typing import Dict, Mapping, Optional

from . import diagnostics as codes
from .diagnostics import Severity, WarningSink

_FUNCTIONAL = re.compile(r"^rgba?\s*\(\s*([^)]*)\)$", re.IGNORECASE)
_HEX_DIGITS = set("0123456789abcdefABCDEF")

LINE_CAPS = ("butt", "round", "square")
LINE_JOINS = ("miter", "round", "bevel")

# Attribute name -> StyleAttributes field name.
PRESENTATION_ATTRIBUTES = {
    "fill": "fill",
    "fill-opacity": "fill_opacity",
    "fill-rule": "fill_rule",
    "stroke": "stroke",
    "stroke-opacity": "stroke_opacity",
    "stroke-width": "stroke_width",
    "stroke-linecap": "stroke_linecap",
    "stroke-linejoin": "stroke_linejoin",
    "stroke-miterlimit": "stroke_miterlimit",
    "opacity": "opacity",
}


@dataclass(frozen=True)
class Color:
    r: int
    g: int
    b: int
    alpha: float = 1.0

    @property
    def hex(self) -> str:
        return f"#{self.r:02x}{self.g:02x}{self.b:02x}"


NAMED_COLORS: Dict[str, Color] = {
    "black": Color(0, 0, 0),
    "white": Color(255, 255, 255),
    "red": Color(255, 0, 0),
    "green": Color(0, 128, 0),
    "blue": Color(0, 0, 255),
    "gray": Color(128, 128, 128),
}

TRANSPARENT = Color(0, 0, 0, 0.0)


@dataclass
class StyleAttributes:
    fill: Optional[str] = None
    fill_opacity: Optional[str] = None
    fill_rule: Optional[str] = None
    stroke: Optional[str] = None
    stroke_opacity: Optional[str] = None
    stroke_width: Optional[str] = None
    stroke_linecap: Optional[str] = None
    stroke_linejoin: Optional[str] = None
    stroke_miterlimit: Optional[str] = None
    opacity: Optional[str] = None

    def merged(self, overrides: "StyleAttributes") -> "StyleAttributes":
        values = {}
        for field in fields(self):
            override = getattr(overrides, field.name)
            values[field.name] = override if override is not None else getattr(self, field.name)
        return StyleAttributes(**values)


@dataclass(frozen=True)
class Paint:
    fill_color: Optional[str]
    fill_alpha: float
    stroke_color: Optional[str]
    stroke_alpha: float
    stroke_width: Optional[float]
    fill_type: Optional[str]
    stroke_line_cap: Optional[str]
    stroke_line_join: Optional[str]
    stroke_miter_limit: Optional[float]


def clamp_unit(value: float) -> float:
    if math.isnan(value):
        return 1.0
    return max(0.0, min(1.0, value))


def _clamp_channel(value: float) -> int:
    return int(round(max(0.0, min(255.0, value))))


def _parse_channel(text: str) -> Optional[float]:
    text = text.strip()
    try:
        if text.endswith("%"):
            return float(text[:-1]) * 255.0 / 100.0
        return float(text)
    except ValueError:
        return None


def _parse_alpha(text: str) -> Optional[float]:
    text = text.strip()
    try:
        if text.endswith("%"):
            return clamp_unit(float(text[:-1]) / 100.0)
        return clamp_unit(float(text))
    except ValueError:
        return None


def _parse_hex(digits: str) -> Optional[Color]:
    if len(digits) not in (3, 4, 6, 8) or not set(digits) <= _HEX_DIGITS:
        return None
    if len(digits) in (3, 4):
        digits = "".join(ch * 2 for ch in digits)
    r = int(digits[0:2], 16)
    g = int(digits[2:4], 16)
    b = int(digits[4:6], 16)
    a = int(digits[6:8], 16) if len(digits) == 8 else 255
    return Color(r, g, b, a / 255.0)


def parse_color(value: Optional[str]) -> Optional[Color]:
    """Parse a CSS color, or return ``None`` when it is not understood."""
    if value is None:
        return None
    text = value.strip()
    if not text:
        return None
    low = text.lower()
    if low in ("none", "transparent"):
        return TRANSPARENT
    if text.startswith("#"):
        return _parse_hex(text[1:])
    match = _FUNCTIONAL.match(text)
    if match:
        parts = [part for part in re.split(r"\s*,\s*|\s+", match.group(1).strip()) if part]
        if len(parts) not in (3, 4):
            return None
        channels = [_parse_channel(part) for part in parts[:3]]
        if any(ch is None for ch in channels):
            return None
        alpha = 1.0
        if len(parts) == 4:
            parsed_alpha = _parse_alpha(parts[3])
            if parsed_alpha is None:
                return None
            alpha = parsed_alpha
        r, g, b = (_clamp_channel(ch) for ch in channels)  # type: ignore[arg-type]
        return Color(r, g, b, alpha)
    return NAMED_COLORS.get(low)


def parse_style_declarations(style: Optional[str]) -> Dict[str, str]:
    declarations: Dict[str, str] = {}
    if not style:
        return declarations
    for decl in style.split(";"):
        if ":" not in decl:
            continue
        key, value = decl.split(":", 1)
        key = key.strip().lower()
        value = value.strip()
        if key and value:
            declarations[key] = value
    return declarations


def _from_mapping(values: Mapping[str, str]) -> StyleAttributes:
    kwargs = {}
    for attr_name, field_name in PRESENTATION_ATTRIBUTES.items():
        raw = values.get(attr_name)
        if raw is not None and raw.strip():
            kwargs[field_name] = raw.strip()
    return StyleAttributes(**kwargs)


def collect_style(attrs: Mapping[str, str]) -> StyleAttributes:
    """Presentation attributes first, then inline ``style`` overrides."""
    presentation = _from_mapping(attrs)
    inline = _from_mapping(parse_style_declarations(attrs.get("style")))
    return presentation.merged(inline)


def _number(value: Optional[str]) -> Optional[float]:
    if value is None:
        return None
    match = re.match(r"^\s*([-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?)", value)
    if not match:
        return None
    number = float(match.group(1))
    if not math.isfinite(number):
        return None
    return number


def _opacity(value: Optional[str]) -> float:
    if value is None:
        return 1.0
    text = value.strip()
    if text.endswith("%"):
        number = _number(text[:-1])
        return 1.0 if number is None else clamp_unit(number / 100.0)
    number = _number(text)
    return 1.0 if number is None else clamp_unit(number)


def _enum(
    value: Optional[str],
    allowed: tuple,
    code: str,
    label: str,
    sink: WarningSink,
) -> Optional[str]:
    if value is None:
        return None
    low = value.strip().lower()
    if low in allowed:
        return low
    sink.add(
        code,
        f'Unsupported {label}: "{value}".',
        Severity.INFO,
        {label: value},
    )
    return None


def resolve_paint(style: StyleAttributes, sink: WarningSink) -> Paint:
    """Turn merged style attributes into VectorDrawable paint values."""
    element_opacity = _opacity(style.opacity)

    fill_color: Optional[str]
    fill_text = style.fill if style.fill is not None else "black"
    fill_parsed = parse_color(fill_text)
    if fill_text.strip().lower() == "none":
        fill_color = None
        fill_alpha = 0.0
    elif fill_parsed is None:
        sink.add(
            codes.COLOR_UNPARSEABLE,
            f'Unparseable fill color: "{fill_text}". Using black.',
            Severity.WARN,
            {"fill": fill_text},
        )
        fill_color = "#000000"
        fill_alpha = 1.0
    else:
        fill_color = fill_parsed.hex
        fill_alpha = fill_parsed.alpha * _opacity(style.fill_opacity) * element_opacity

    stroke_color: Optional[str] = None
    stroke_alpha = 1.0
    stroke_width: Optional[float] = None
    stroke_text = style.stroke
    if stroke_text is not None and stroke_text.strip().lower() != "none":
        stroke_parsed = parse_color(stroke_text)
        if stroke_parsed is None:
            sink.add(
                codes.COLOR_UNPARSEABLE,
                f'Unparseable stroke color: "{stroke_text}". Dropping stroke.',
                Severity.WARN,
                {"stroke": stroke_text},
            )
        else:
            stroke_color = stroke_parsed.hex
            stroke_alpha = stroke_parsed.alpha * _opacity(style.stroke_opacity) * element_opacity
            width = _number(style.stroke_width)
            stroke_width = 1.0 if width is None else max(0.0, width)

    fill_type = None
    if style.fill_rule is not None and style.fill_rule.strip().lower() == "evenodd":
        fill_type = "evenOdd"

    line_cap = _enum(style.stroke_linecap, LINE_CAPS, codes.STROKE_LINECAP_UNSUPPORTED, "stroke-linecap", sink)
    line_join = _enum(style.stroke_linejoin, LINE_JOINS, codes.STROKE_LINEJOIN_UNSUPPORTED, "stroke-linejoin", sink)

    miter_limit = _number(style.stroke_miterlimit)
    if miter_limit is not None and miter_limit <= 0:
        miter_limit = None

    return Paint(
        fill_color=fill_color,
        fill_alpha=clamp_unit(fill_alpha),
        stroke_color=stroke_color,
        stroke_alpha=clamp_unit(stroke_alpha),
        stroke_width=stroke_width,
        fill_type=fill_type,
        stroke_line_cap=line_cap,
        stroke_line_join=line_join,
        stroke_miter_limit=miter_limit,
    )


__all__ = [
    "Color",
    "NAMED_COLORS",
    "StyleAttributes",
    "Paint",
    "parse_color",
    "parse_style_declarations",
    "collect_style",
    "resolve_paint",
    "clamp_unit",
]
