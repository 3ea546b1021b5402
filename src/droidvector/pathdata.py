"""SVG path data: tokenizing, absolute expansion and matrix application."""
from __future__ import annotations

import re
from typing import List, Optional, Protocol, Sequence, Tuple

from . import affine
from .affine import Affine
from .errors import PathDataError

Segment = Tuple[str, Tuple[float, ...]]

_NUMBER = re.compile(r"[-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?")
_COMMANDS = "MmZzLlHhVvCcSsQqTtAa"
_ARG_COUNTS = {"M": 2, "L": 2, "H": 1, "V": 1, "C": 6, "S": 4, "Q": 4, "T": 2, "A": 7, "Z": 0}


class PathTransformer(Protocol):
    def transform(self, path_data: str, matrix: Affine) -> str:
        ...


def tokenize(d: str) -> List[Tuple[str, List[float]]]:
    """Split path data into ``(command, args)`` groups as written.

    Arc flags are read as single ``0``/``1`` characters so compact forms like
    ``a5 5 0 0110 10`` parse correctly.
    """
    groups: List[Tuple[str, List[float]]] = []
    pos = 0
    n = len(d)
    current: Optional[Tuple[str, List[float]]] = None
    while pos < n:
        ch = d[pos]
        if ch.isspace() or ch == ",":
            pos += 1
            continue
        if ch in _COMMANDS:
            current = (ch, [])
            groups.append(current)
            pos += 1
            continue
        if current is None:
            raise PathDataError(f"path data must start with a command, got {ch!r}")
        letter = current[0].upper()
        if letter == "Z":
            raise PathDataError(f"unexpected number after close command at offset {pos}")
        if letter == "A" and len(current[1]) % 7 in (3, 4):
            if ch not in "01":
                raise PathDataError(f"invalid arc flag {ch!r} at offset {pos}")
            current[1].append(float(ch))
            pos += 1
            continue
        match = _NUMBER.match(d, pos)
        if not match:
            raise PathDataError(f"unexpected character {ch!r} at offset {pos}")
        current[1].append(float(match.group(0)))
        pos = match.end()
    return groups


def parse_path(d: str) -> List[Segment]:
    """Parse path data into absolute ``M L C Q A Z`` segments.

    Shorthand commands are expanded: H and V become L, S becomes C and T
    becomes Q, and implicit repeats are split into explicit segments.
    """
    segments: List[Segment] = []
    x = y = 0.0
    start_x = start_y = 0.0
    last_cubic: Optional[Tuple[float, float]] = None
    last_quad: Optional[Tuple[float, float]] = None

    for command, args in tokenize(d):
        letter = command.upper()
        relative = command != letter
        count = _ARG_COUNTS[letter]
        if count == 0:
            if args:
                raise PathDataError("close command takes no arguments")
            segments.append(("Z", ()))
            x, y = start_x, start_y
            last_cubic = last_quad = None
            continue
        if not args or len(args) % count:
            raise PathDataError(
                f"command {command!r} expects a multiple of {count} numbers, got {len(args)}"
            )
        for index in range(0, len(args), count):
            chunk = args[index:index + count]
            ox, oy = (x, y) if relative else (0.0, 0.0)
            next_cubic: Optional[Tuple[float, float]] = None
            next_quad: Optional[Tuple[float, float]] = None
            if letter == "M" and index == 0:
                x, y = chunk[0] + ox, chunk[1] + oy
                start_x, start_y = x, y
                segments.append(("M", (x, y)))
            elif letter in ("M", "L"):
                x, y = chunk[0] + ox, chunk[1] + oy
                segments.append(("L", (x, y)))
            elif letter == "H":
                x = chunk[0] + ox
                segments.append(("L", (x, y)))
            elif letter == "V":
                y = chunk[0] + oy
                segments.append(("L", (x, y)))
            elif letter == "C":
                x1, y1 = chunk[0] + ox, chunk[1] + oy
                x2, y2 = chunk[2] + ox, chunk[3] + oy
                x, y = chunk[4] + ox, chunk[5] + oy
                segments.append(("C", (x1, y1, x2, y2, x, y)))
                next_cubic = (x2, y2)
            elif letter == "S":
                if last_cubic is not None:
                    x1, y1 = 2 * x - last_cubic[0], 2 * y - last_cubic[1]
                else:
                    x1, y1 = x, y
                x2, y2 = chunk[0] + ox, chunk[1] + oy
                x, y = chunk[2] + ox, chunk[3] + oy
                segments.append(("C", (x1, y1, x2, y2, x, y)))
                next_cubic = (x2, y2)
            elif letter == "Q":
                qx, qy = chunk[0] + ox, chunk[1] + oy
                x, y = chunk[2] + ox, chunk[3] + oy
                segments.append(("Q", (qx, qy, x, y)))
                next_quad = (qx, qy)
            elif letter == "T":
                if last_quad is not None:
                    qx, qy = 2 * x - last_quad[0], 2 * y - last_quad[1]
                else:
                    qx, qy = x, y
                x, y = chunk[0] + ox, chunk[1] + oy
                segments.append(("Q", (qx, qy, x, y)))
                next_quad = (qx, qy)
            else:
                rx, ry, rotation, large, sweep = chunk[0], chunk[1], chunk[2], chunk[3], chunk[4]
                x, y = chunk[5] + ox, chunk[6] + oy
                segments.append(("A", (abs(rx), abs(ry), rotation, large, sweep, x, y)))
            last_cubic = next_cubic
            last_quad = next_quad
    return segments


def transform_segments(segments: Sequence[Segment], m: Affine) -> List[Segment]:
    """Apply ``m`` to every coordinate pair of absolute segments.

    Arc radii are scaled by the matrix column lengths and the sweep flag is
    flipped for mirroring matrices. The arc x-axis rotation is kept as is, so
    rotated ellipses under non-uniform scale are approximate.
    """
    if affine.is_identity(m):
        return list(segments)
    sx, sy = affine.column_scales(m)
    mirrored = affine.determinant(m) < 0
    out: List[Segment] = []
    for command, values in segments:
        if command == "Z":
            out.append((command, values))
        elif command == "A":
            rx, ry, rotation, large, sweep, x, y = values
            px, py = affine.apply(m, x, y)
            if mirrored:
                sweep = 0.0 if sweep else 1.0
            out.append((command, (rx * sx, ry * sy, rotation, large, sweep, px, py)))
        else:
            mapped: List[float] = []
            for index in range(0, len(values), 2):
                mapped.extend(affine.apply(m, values[index], values[index + 1]))
            out.append((command, tuple(mapped)))
    return out


def format_value(value: float) -> str:
    text = f"{value:.10f}".rstrip("0").rstrip(".")
    if text in ("", "-0"):
        return "0"
    return text


def serialize(segments: Sequence[Segment]) -> str:
    parts: List[str] = []
    for command, values in segments:
        if command == "A":
            rx, ry, rotation, large, sweep, x, y = values
            numbers = [format_value(rx), format_value(ry), format_value(rotation)]
            numbers += [str(int(large)), str(int(sweep)), format_value(x), format_value(y)]
        else:
            numbers = [format_value(value) for value in values]
        parts.append(" ".join([command] + numbers))
    return " ".join(parts)


class AbsolutePathTransformer:
    """Bakes a matrix into path data, emitting absolute expanded commands."""

    def transform(self, path_data: str, matrix: Affine) -> str:
        return serialize(transform_segments(parse_path(path_data), matrix))


__all__ = [
    "Segment",
    "PathTransformer",
    "AbsolutePathTransformer",
    "tokenize",
    "parse_path",
    "transform_segments",
    "serialize",
    "format_value",
]
