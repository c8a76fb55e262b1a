"""
Line measurement, grid snapping and length edits.

Also holds the block-width rules (a width class needs the line to be at least
``width + 150mm`` long) and the length-entry validation used by the editor.
"""

from __future__ import annotations

import math
from dataclasses import replace
from typing import Any, Mapping, Optional

from scaffold_spans.catalog import (
    BLOCK_WIDTHS,
    DEFAULT_BLOCK_WIDTH,
    MINIMUM_SPAN_LENGTH_MM,
    SECONDARY_SNAP_SIZE,
    SUPPORTED_BLOCK_WIDTHS,
)
from scaffold_spans.contracts import (
    LINE_COLORS,
    LINE_STYLES,
    BandOrientation,
    BandSettings,
    LineAxis,
    ScaffoldLine,
    Vec2,
    to_vec2,
)

EPSILON = 1e-6

# Typed lengths must be a multiple of the finest grid step
MIN_LENGTH_UNIT = SECONDARY_SNAP_SIZE


def line_length(start: Vec2, end: Vec2) -> float:
    return math.hypot(end[0] - start[0], end[1] - start[1])


def infer_axis(line: ScaffoldLine) -> LineAxis:
    if abs(line.dy) <= EPSILON:
        return LineAxis.HORIZONTAL
    if abs(line.dx) <= EPSILON:
        return LineAxis.VERTICAL
    return LineAxis.DIAGONAL


def snap_to_grid(value: float, snap_size: float) -> float:
    """Round ``value`` to the nearest grid step; non-positive steps disable snapping."""
    if math.isnan(snap_size) or snap_size <= 0:
        return value
    return math.floor(value / snap_size + 0.5) * snap_size


def snap_point_to_grid(point: Vec2, snap_size: float) -> Vec2:
    return (snap_to_grid(point[0], snap_size), snap_to_grid(point[1], snap_size))


def validate_line_length_value(raw_value: str, snap_size: float) -> Optional[str]:
    """Validate a typed length. Returns an error message or None."""
    text = raw_value.strip()
    if not text:
        return "Enter a length."
    try:
        parsed = float(text)
    except ValueError:
        return "Enter a number."
    if not math.isfinite(parsed) or parsed <= 0:
        return "Enter a positive number."
    if not parsed.is_integer():
        return "Enter a whole number of millimetres."
    if parsed < snap_size:
        return f"Minimum length is {snap_size:g}mm."
    if parsed % MIN_LENGTH_UNIT != 0:
        return f"Length must be a multiple of {MIN_LENGTH_UNIT}mm."
    return None


def recalculate_line_with_length(
    line: ScaffoldLine,
    next_length_mm: float,
    snap_size: float,
) -> ScaffoldLine:
    """Resize a line around its midpoint, keeping its draw direction.

    Horizontal and vertical lines snap their fixed coordinate to the grid;
    diagonal lines are scaled along their current direction.

    Raises:
        ValueError: invalid length, or a line that would collapse.
    """
    if not math.isfinite(next_length_mm) or next_length_mm <= 0:
        raise ValueError("Line length must be a positive number.")
    error = validate_line_length_value(str(int(round(next_length_mm))), snap_size)
    if error:
        raise ValueError(error)

    axis = line.axis or infer_axis(line)
    mid_x = (line.start[0] + line.end[0]) / 2
    mid_y = (line.start[1] + line.end[1]) / 2
    half = next_length_mm / 2

    if axis == LineAxis.HORIZONTAL:
        forward = line.dx >= 0
        low, high = mid_x - half, mid_x + half
        start_x, end_x = (low, high) if forward else (high, low)
        y = snap_to_grid(mid_y, snap_size)
        _ensure_distinct(start_x, end_x, "Snapped endpoints collapse the line.")
        start, end = (start_x, y), (end_x, y)
    elif axis == LineAxis.VERTICAL:
        forward = line.dy >= 0
        low, high = mid_y - half, mid_y + half
        start_y, end_y = (low, high) if forward else (high, low)
        x = snap_to_grid(mid_x, snap_size)
        _ensure_distinct(start_y, end_y, "Snapped endpoints collapse the line.")
        start, end = (x, start_y), (x, end_y)
    else:
        current = line.measured_length
        if current <= EPSILON:
            raise ValueError("Cannot adjust a zero-length line.")
        ux, uy = line.dx / current, line.dy / current
        start = (mid_x - ux * half, mid_y - uy * half)
        end = (mid_x + ux * half, mid_y + uy * half)
        _ensure_distinct(0.0, line_length(start, end), "Snapped diagonal line collapsed.")

    resized = replace(line, start=start, end=end, length=round(line_length(start, end)))
    return replace(resized, axis=axis if axis != LineAxis.DIAGONAL else infer_axis(resized))


def validate_line_appearance(color: str, style: str) -> None:
    """Raise ValueError for a color or style the editor cannot draw."""
    if color not in LINE_COLORS:
        raise ValueError(f"Unknown line color '{color}'. Expected one of {LINE_COLORS}.")
    if style not in LINE_STYLES:
        raise ValueError(f"Unknown line style '{style}'. Expected one of {LINE_STYLES}.")


def normalize_line(payload: Mapping[str, Any]) -> ScaffoldLine:
    """Build a ScaffoldLine from a plain mapping, filling legacy defaults.

    Older snapshots may omit color, style, block width and band settings.
    """
    start = to_vec2(payload["start"])
    end = to_vec2(payload["end"])
    color = payload.get("color") or "black"
    style = payload.get("style") or "solid"
    validate_line_appearance(color, style)

    settings = None
    raw_settings = payload.get("band_settings")
    if raw_settings:
        orientation = raw_settings.get("orientation")
        settings = BandSettings(
            polarity=raw_settings.get("polarity"),
            orientation=BandOrientation(orientation) if orientation else None,
        )

    axis = payload.get("axis")
    return ScaffoldLine(
        id=str(payload["id"]),
        start=start,
        end=end,
        block_width=int(payload.get("block_width") or DEFAULT_BLOCK_WIDTH),
        color=color,
        style=style,
        axis=LineAxis(axis) if axis else None,
        band_settings=settings,
        length=payload.get("length"),
        span_checksum=payload.get("span_checksum"),
    )


# ─── Block width rules ───────────────────────────────────────────────────────


def is_supported_block_width(value: float) -> bool:
    return value in BLOCK_WIDTHS


def clamp_supported_width(value: float) -> int:
    """Nearest supported width class: unknown widths at or below the
    narrowest class map to it, everything else to the default."""
    if is_supported_block_width(value):
        return int(value)
    narrowest = SUPPORTED_BLOCK_WIDTHS[-1]
    return narrowest if value <= narrowest else DEFAULT_BLOCK_WIDTH


def minimum_length_for_width(width: int) -> float:
    spec = BLOCK_WIDTHS.get(width)
    if spec is None:
        return width + MINIMUM_SPAN_LENGTH_MM
    return spec.minimum_line_length_mm


def can_apply_width_to_line(line: ScaffoldLine, width: int) -> bool:
    return line.measured_length >= minimum_length_for_width(width)


def _ensure_distinct(a: float, b: float, message: str) -> None:
    if abs(a - b) <= EPSILON:
        raise ValueError(message)
