"""Raster previews of converted documents at Android density buckets.

Curves and arcs are flattened to polylines. Fills use the even-odd rule
when the path asks for it; non-zero fills are drawn as the union of their
subpaths, so counter-wound holes are not cut out.
"""
from __future__ import annotations

import io
import math
from typing import List, Optional, Sequence, Tuple

from PIL import Image, ImageChops, ImageDraw

from .errors import PathDataError
from .mapper import VectorDocument, VectorPath
from .pathdata import Segment, parse_path

DENSITIES = {
    "mdpi": 1.0,
    "hdpi": 1.5,
    "xhdpi": 2.0,
    "xxhdpi": 3.0,
    "xxxhdpi": 4.0,
}

BACKGROUNDS = {
    "light": (255, 255, 255, 255),
    "dark": (32, 33, 36, 255),
}
GRID_COLORS = {
    "light": (220, 220, 220, 255),
    "dark": (64, 66, 70, 255),
}

CURVE_STEPS = 16
SUPERSAMPLE = 4

Point = Tuple[float, float]


def pixel_size(document: VectorDocument, density: float) -> Tuple[int, int]:
    return (
        max(1, int(round(document.width_dp * density))),
        max(1, int(round(document.height_dp * density))),
    )


def _vector_angle(ux: float, uy: float, vx: float, vy: float) -> float:
    return math.atan2(ux * vy - uy * vx, ux * vx + uy * vy)


def arc_points(
    start: Point,
    rx: float,
    ry: float,
    rotation: float,
    large: bool,
    sweep: bool,
    end: Point,
    steps: int = CURVE_STEPS,
) -> List[Point]:
    """Sample an endpoint-parameterized elliptical arc, excluding ``start``."""
    x1, y1 = start
    x2, y2 = end
    if rx == 0 or ry == 0 or (x1 == x2 and y1 == y2):
        return [end]
    phi = math.radians(rotation)
    cos_phi, sin_phi = math.cos(phi), math.sin(phi)
    dx = (x1 - x2) / 2.0
    dy = (y1 - y2) / 2.0
    x1p = cos_phi * dx + sin_phi * dy
    y1p = -sin_phi * dx + cos_phi * dy
    rx, ry = abs(rx), abs(ry)
    lam = (x1p * x1p) / (rx * rx) + (y1p * y1p) / (ry * ry)
    if lam > 1:
        scale = math.sqrt(lam)
        rx *= scale
        ry *= scale
    num = rx * rx * ry * ry - rx * rx * y1p * y1p - ry * ry * x1p * x1p
    den = rx * rx * y1p * y1p + ry * ry * x1p * x1p
    coef = math.sqrt(max(0.0, num / den)) if den else 0.0
    if large == sweep:
        coef = -coef
    cxp = coef * rx * y1p / ry
    cyp = -coef * ry * x1p / rx
    cx = cos_phi * cxp - sin_phi * cyp + (x1 + x2) / 2.0
    cy = sin_phi * cxp + cos_phi * cyp + (y1 + y2) / 2.0
    ux, uy = (x1p - cxp) / rx, (y1p - cyp) / ry
    vx, vy = (-x1p - cxp) / rx, (-y1p - cyp) / ry
    theta = _vector_angle(1.0, 0.0, ux, uy)
    delta = _vector_angle(ux, uy, vx, vy)
    if not sweep and delta > 0:
        delta -= 2 * math.pi
    elif sweep and delta < 0:
        delta += 2 * math.pi
    points = []
    for i in range(1, steps + 1):
        t = theta + delta * i / steps
        points.append(
            (
                cx + rx * cos_phi * math.cos(t) - ry * sin_phi * math.sin(t),
                cy + rx * sin_phi * math.cos(t) + ry * cos_phi * math.sin(t),
            )
        )
    points[-1] = end
    return points


def flatten(segments: Sequence[Segment], steps: int = CURVE_STEPS) -> List[Tuple[List[Point], bool]]:
    """Split absolute segments into ``(points, closed)`` polylines."""
    polylines: List[Tuple[List[Point], bool]] = []
    current: List[Point] = []
    x = y = 0.0

    def finish(closed: bool) -> None:
        nonlocal current
        if len(current) > 1:
            polylines.append((current, closed))
        current = []

    for command, values in segments:
        if command == "M":
            finish(False)
            x, y = values
            current = [(x, y)]
        elif command == "Z":
            start = current[0] if current else (x, y)
            finish(True)
            x, y = start
            current = [(x, y)]
        else:
            if not current:
                current = [(x, y)]
            if command == "L":
                x, y = values
                current.append((x, y))
            elif command == "C":
                x1, y1, x2, y2, ex, ey = values
                for i in range(1, steps + 1):
                    t = i / steps
                    mt = 1 - t
                    current.append(
                        (
                            mt ** 3 * x + 3 * mt * mt * t * x1 + 3 * mt * t * t * x2 + t ** 3 * ex,
                            mt ** 3 * y + 3 * mt * mt * t * y1 + 3 * mt * t * t * y2 + t ** 3 * ey,
                        )
                    )
                x, y = ex, ey
            elif command == "Q":
                qx, qy, ex, ey = values
                for i in range(1, steps + 1):
                    t = i / steps
                    mt = 1 - t
                    current.append(
                        (
                            mt * mt * x + 2 * mt * t * qx + t * t * ex,
                            mt * mt * y + 2 * mt * t * qy + t * t * ey,
                        )
                    )
                x, y = ex, ey
            elif command == "A":
                rx, ry, rotation, large, sweep, ex, ey = values
                current.extend(arc_points((x, y), rx, ry, rotation, bool(large), bool(sweep), (ex, ey), steps))
                x, y = ex, ey
    finish(False)
    return polylines


def _hex_rgb(value: str) -> Tuple[int, int, int]:
    return (int(value[1:3], 16), int(value[3:5], 16), int(value[5:7], 16))


def _composite(canvas: Image.Image, mask: Image.Image, color: str, alpha: float) -> Image.Image:
    if alpha <= 0:
        return canvas
    level = Image.new("L", canvas.size, int(round(alpha * 255)))
    overlay = Image.new("RGBA", canvas.size, _hex_rgb(color) + (0,))
    overlay.putalpha(ImageChops.multiply(mask, level))
    return Image.alpha_composite(canvas, overlay)


def _fill_mask(size: Tuple[int, int], polylines, even_odd: bool) -> Image.Image:
    mask = Image.new("1", size, 0)
    for points, _closed in polylines:
        if len(points) < 3:
            continue
        layer = Image.new("1", size, 0)
        ImageDraw.Draw(layer).polygon(points, fill=1)
        mask = ImageChops.logical_xor(mask, layer) if even_odd else ImageChops.logical_or(mask, layer)
    return mask.convert("L")


def _stroke_mask(size: Tuple[int, int], polylines, width: int) -> Image.Image:
    mask = Image.new("L", size, 0)
    draw = ImageDraw.Draw(mask)
    for points, closed in polylines:
        line = points + [points[0]] if closed else points
        draw.line(line, fill=255, width=width, joint="curve")
    return mask


def _draw_grid(canvas: Image.Image, document: VectorDocument, scale_x: float, scale_y: float, theme: str) -> None:
    if scale_x < 4 or scale_y < 4:
        return
    draw = ImageDraw.Draw(canvas)
    color = GRID_COLORS[theme]
    width, height = canvas.size
    for i in range(int(document.viewport_width) + 1):
        x = int(round(i * scale_x))
        draw.line([(x, 0), (x, height)], fill=color, width=SUPERSAMPLE)
    for j in range(int(document.viewport_height) + 1):
        y = int(round(j * scale_y))
        draw.line([(0, y), (width, y)], fill=color, width=SUPERSAMPLE)


def _draw_path(canvas: Image.Image, path: VectorPath, scale_x: float, scale_y: float) -> Image.Image:
    try:
        segments = parse_path(path.path_data)
    except PathDataError:
        return canvas
    polylines = [
        ([(px * scale_x, py * scale_y) for px, py in points], closed)
        for points, closed in flatten(segments)
    ]
    if not polylines:
        return canvas
    if path.fill_color:
        mask = _fill_mask(canvas.size, polylines, path.fill_type == "evenOdd")
        canvas = _composite(canvas, mask, path.fill_color, path.fill_alpha)
    if path.stroke_color and path.stroke_width:
        width = max(1, int(round(path.stroke_width * (scale_x + scale_y) / 2.0)))
        mask = _stroke_mask(canvas.size, polylines, width)
        canvas = _composite(canvas, mask, path.stroke_color, path.stroke_alpha)
    return canvas


def render_image(
    document: VectorDocument,
    *,
    density: str = "mdpi",
    theme: str = "light",
    grid: bool = False,
    scale: Optional[float] = None,
) -> Image.Image:
    if density not in DENSITIES:
        raise ValueError(f"unknown density {density!r}; choose one of {', '.join(DENSITIES)}")
    if theme not in BACKGROUNDS:
        raise ValueError(f"unknown theme {theme!r}; choose light or dark")
    factor = DENSITIES[density] * (scale if scale is not None else 1.0)
    if factor <= 0:
        raise ValueError("scale must be > 0")
    width, height = pixel_size(document, factor)
    big = (width * SUPERSAMPLE, height * SUPERSAMPLE)
    canvas = Image.new("RGBA", big, BACKGROUNDS[theme])
    scale_x = big[0] / document.viewport_width
    scale_y = big[1] / document.viewport_height
    if grid:
        _draw_grid(canvas, document, scale_x, scale_y, theme)
    for path in document.paths:
        canvas = _draw_path(canvas, path, scale_x, scale_y)
    return canvas.resize((width, height), Image.Resampling.LANCZOS)


def render_png(document: VectorDocument, **kwargs) -> bytes:
    """PNG bytes of :func:`render_image`."""
    image = render_image(document, **kwargs)
    buffer = io.BytesIO()
    image.save(buffer, format="PNG")
    return buffer.getvalue()


__all__ = ["DENSITIES", "pixel_size", "arc_points", "flatten", "render_image", "render_png"]
