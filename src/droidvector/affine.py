"""2D affine matrices in SVG order ``(a, b, c, d, e, f)``."""
from __future__ import annotations

import math
import re
from typing import List, Optional, Tuple

Affine = Tuple[float, float, float, float, float, float]

IDENTITY: Affine = (1.0, 0.0, 0.0, 1.0, 0.0, 0.0)

_TRANSFORM_CALL = re.compile(r"([a-zA-Z]+)\s*\(([^)]*)\)")
_ARG_SPLIT = re.compile(r"[,\s]+")


def compose(parent: Affine, child: Affine) -> Affine:
    """Return ``parent x child``: the child is applied first, then the parent."""
    a1, b1, c1, d1, e1, f1 = parent
    a2, b2, c2, d2, e2, f2 = child
    return (
        a1 * a2 + c1 * b2,
        b1 * a2 + d1 * b2,
        a1 * c2 + c1 * d2,
        b1 * c2 + d1 * d2,
        a1 * e2 + c1 * f2 + e1,
        b1 * e2 + d1 * f2 + f1,
    )


def apply(m: Affine, x: float, y: float) -> Tuple[float, float]:
    a, b, c, d, e, f = m
    return (a * x + c * y + e, b * x + d * y + f)


def determinant(m: Affine) -> float:
    a, b, c, d, _e, _f = m
    return a * d - b * c


def is_identity(m: Affine, tol: float = 1e-12) -> bool:
    return all(abs(value - ref) <= tol for value, ref in zip(m, IDENTITY))


def translate(tx: float, ty: float = 0.0) -> Affine:
    return (1.0, 0.0, 0.0, 1.0, tx, ty)


def scale(sx: float, sy: Optional[float] = None) -> Affine:
    return (sx, 0.0, 0.0, sx if sy is None else sy, 0.0, 0.0)


def rotate(angle: float, cx: float = 0.0, cy: float = 0.0) -> Affine:
    rad = math.radians(angle)
    cos_v = math.cos(rad)
    sin_v = math.sin(rad)
    r = (cos_v, sin_v, -sin_v, cos_v, 0.0, 0.0)
    if cx == 0.0 and cy == 0.0:
        return r
    return compose(compose(translate(cx, cy), r), translate(-cx, -cy))


def skew_x(angle: float) -> Affine:
    return (1.0, 0.0, math.tan(math.radians(angle)), 1.0, 0.0, 0.0)


def skew_y(angle: float) -> Affine:
    return (1.0, math.tan(math.radians(angle)), 0.0, 1.0, 0.0, 0.0)


def _parse_args(arg_text: str) -> Optional[List[float]]:
    values: List[float] = []
    for chunk in _ARG_SPLIT.split(arg_text.strip()):
        if not chunk:
            continue
        try:
            value = float(chunk)
        except ValueError:
            return None
        if not math.isfinite(value):
            return None
        values.append(value)
    return values


def _term(name: str, values: List[float]) -> Affine:
    n = len(values)
    if name == "matrix" and n == 6:
        return (values[0], values[1], values[2], values[3], values[4], values[5])
    if name == "translate" and n in (1, 2):
        return translate(values[0], values[1] if n == 2 else 0.0)
    if name == "scale" and n in (1, 2):
        return scale(values[0], values[1] if n == 2 else None)
    if name == "rotate" and n == 1:
        return rotate(values[0])
    if name == "rotate" and n == 3:
        return rotate(values[0], values[1], values[2])
    if name == "skewx" and n == 1:
        return skew_x(values[0])
    if name == "skewy" and n == 1:
        return skew_y(values[0])
    return IDENTITY


def parse_transform(transform: Optional[str]) -> Affine:
    """Parse a ``transform`` attribute.

    Functions compose left to right as written. A term with an unknown name,
    a bad number or the wrong argument count contributes the identity.
    """
    m = IDENTITY
    if not transform:
        return m
    for fn, arg_text in _TRANSFORM_CALL.findall(transform):
        values = _parse_args(arg_text)
        if values is None:
            continue
        m = compose(m, _term(fn.lower(), values))
    return m


def to_string(m: Affine, decimals: int = 6) -> str:
    parts = []
    for value in m:
        text = f"{value:.{decimals}f}".rstrip("0").rstrip(".")
        parts.append("0" if text in ("", "-0") else text)
    return "matrix(" + ",".join(parts) + ")"


def column_scales(m: Affine) -> Tuple[float, float]:
    """Lengths of the mapped unit x and y vectors."""
    a, b, c, d, _e, _f = m
    return (math.hypot(a, b), math.hypot(c, d))


__all__ = [
    "Affine",
    "IDENTITY",
    "compose",
    "apply",
    "determinant",
    "is_identity",
    "translate",
    "scale",
    "rotate",
    "skew_x",
    "skew_y",
    "parse_transform",
    "to_string",
    "column_scales",
]
