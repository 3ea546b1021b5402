"""Canonical decimal rounding for path data and numeric attributes."""
from __future__ import annotations

import re
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import List, Union

MIN_DECIMALS = 0
MAX_DECIMALS = 8

_NUMBER = re.compile(r"[-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?")
_COMMANDS = "MmZzLlHhVvCcSsQqTtAa"


def clamp_decimals(decimals: int) -> int:
    return max(MIN_DECIMALS, min(MAX_DECIMALS, int(decimals)))


def _quantize(value: Union[str, float, int, Decimal], decimals: int) -> Decimal:
    if isinstance(value, Decimal):
        exact = value
    elif isinstance(value, str):
        exact = Decimal(value)
    else:
        # repr gives the shortest string that round-trips the float.
        exact = Decimal(repr(float(value)))
    step = Decimal(1).scaleb(-clamp_decimals(decimals))
    # ROUND_HALF_UP in the decimal module rounds ties away from zero.
    return exact.quantize(step, rounding=ROUND_HALF_UP)


def round_number(value: Union[str, float, int], decimals: int) -> float:
    result = float(_quantize(value, decimals))
    return 0.0 if result == 0 else result


def format_number(value: Union[str, float, int, Decimal], decimals: int) -> str:
    """Round then print without trailing zeros, a trailing point or ``-0``."""
    try:
        quantized = _quantize(value, decimals)
    except (InvalidOperation, ValueError, OverflowError):
        return str(value)
    if quantized.is_zero():
        return "0"
    text = format(quantized, "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text


def canonicalize_path_data(d: str, decimals: int) -> str:
    """Round every numeric literal of path data to ``decimals`` places.

    Command letters, separators and arc flags are kept in place. A single
    space is inserted when a rewritten number would otherwise run into the
    previous one, e.g. ``1.5.5`` at zero decimals becomes ``2 1``.
    """
    if not d or not d.strip():
        return d
    decimals = clamp_decimals(decimals)
    out: List[str] = []
    pos = 0
    n = len(d)
    command = ""
    arg_index = 0
    prev_number = False
    while pos < n:
        ch = d[pos]
        if ch in _COMMANDS:
            command = ch.upper()
            arg_index = 0
            prev_number = False
            out.append(ch)
            pos += 1
            continue
        if command == "A" and arg_index % 7 in (3, 4) and ch in "01":
            out.append(ch)
            arg_index += 1
            prev_number = False
            pos += 1
            continue
        match = _NUMBER.match(d, pos)
        if match is None:
            out.append(ch)
            prev_number = False
            pos += 1
            continue
        text = format_number(match.group(0), decimals)
        if prev_number and not text.startswith(("-", "+")):
            out.append(" ")
        out.append(text)
        arg_index += 1
        prev_number = True
        pos = match.end()
    return "".join(out)


def canonicalize_number(value: Union[str, float, int], decimals: int) -> str:
    return format_number(value, decimals)


__all__ = [
    "MIN_DECIMALS",
    "MAX_DECIMALS",
    "clamp_decimals",
    "round_number",
    "format_number",
    "canonicalize_path_data",
    "canonicalize_number",
]
