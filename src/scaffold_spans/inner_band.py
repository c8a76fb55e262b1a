"""
Inner-band geometry for scaffold lines.

A band is a parallel strip offset from a line by the deck block width. The
default side comes from a canonical inward normal that keeps axis-aligned
lines on the same side regardless of draw direction; band settings on the
line can flip it (polarity) or pin it to a named side (orientation).
"""
import logging
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np

from scaffold_spans.contracts import (
    BandGeometry,
    BandGeometryError,
    BandOrientation,
    BandSettings,
    FailureReason,
    OffsetResolution,
    ScaffoldLine,
    Span,
    SpanPolygon,
    Vec2,
    to_vec2,
)

logger = logging.getLogger(__name__)

NEAR_ZERO = 1e-6

# Screen coordinates: y grows downward, so "up" is -y
ORIENTATION_AXES: Dict[BandOrientation, Vec2] = {
    BandOrientation.UP: (0.0, -1.0),
    BandOrientation.DOWN: (0.0, 1.0),
    BandOrientation.LEFT: (-1.0, 0.0),
    BandOrientation.RIGHT: (1.0, 0.0),
}


def compute_inward_normal(line: ScaffoldLine) -> Vec2:
    """Canonical unit normal used as the default band side.

    Horizontal lines point toward -y when drawn left-to-right and +y when
    drawn right-to-left; vertical lines point toward +x when drawn upward
    (dy < 0) and -x when drawn downward. Diagonals use the plain
    counter-clockwise perpendicular (-dy, dx).
    """
    dx, dy = line.dx, line.dy
    if abs(dx) < NEAR_ZERO and abs(dy) < NEAR_ZERO:
        raise BandGeometryError(
            FailureReason.ZERO_LENGTH_NORMAL,
            f"Cannot compute normal for zero-length line {line.id}",
        )

    if abs(dy) < NEAR_ZERO:
        return (0.0, -1.0 if dx >= 0 else 1.0)
    if abs(dx) < NEAR_ZERO:
        return (1.0 if dy < 0 else -1.0, 0.0)

    return _normalize(np.array([-dy, dx], dtype=float))


def resolve_offset(
    line: ScaffoldLine,
    width: float,
    settings: Optional[BandSettings] = None,
) -> OffsetResolution:
    """Turn band settings into a concrete offset vector of magnitude ``width``.

    An explicit orientation wins over an explicit polarity; polarity is then
    re-derived from the resulting vector. A reversed band without an explicit
    orientation is recorded as ``REVERSE``.
    """
    if width <= 0:
        raise BandGeometryError(FailureReason.INVALID_WIDTH, f"Band width must be positive, got {width}")

    normal = np.array(compute_inward_normal(line))
    orientation = settings.orientation if settings is not None else None
    polarity_setting = settings.polarity if settings is not None else None

    if orientation is not None:
        offset = _orientation_vector(orientation, normal, width)
    elif polarity_setting:
        offset = normal * width * polarity_setting
    else:
        offset = normal * width

    polarity = 1 if float(normal @ offset) >= 0 else -1

    magnitude = float(np.linalg.norm(offset)) or 1.0
    offset = offset / magnitude * width

    if orientation is None and polarity == -1:
        orientation = BandOrientation.REVERSE

    if (
        settings is not None
        and settings.orientation is not None
        and settings.polarity is not None
        and settings.polarity != polarity
    ):
        logger.debug(
            "Line %s: orientation %s overrides polarity %d (resolved %d)",
            line.id, settings.orientation.value, settings.polarity, polarity,
        )

    return OffsetResolution(offset_vector=to_vec2(offset), polarity=polarity, orientation=orientation)


def build_band_geometry(
    line: ScaffoldLine,
    spans: Sequence[Span],
    width: float,
    polarity: int = 1,
    offset_vector: Optional[Vec2] = None,
    orientation: Optional[BandOrientation] = None,
) -> BandGeometry:
    """Build outer/inner boundaries, outline and per-span quads.

    Args:
        line: Source line.
        spans: Projected spans of the line.
        width: Band width in mm.
        polarity: Side relative to the inward normal, used when no
            ``offset_vector`` is given.
        offset_vector: Pre-resolved offset (see resolve_offset).
        orientation: Named side to record on the geometry.
    """
    if width <= 0:
        raise BandGeometryError(FailureReason.INVALID_WIDTH, f"Band width must be positive, got {width}")

    if offset_vector is None:
        normal = np.array(compute_inward_normal(line))
        offset = normal * width * polarity
    else:
        offset = np.array(offset_vector, dtype=float)

    outer_start, outer_end = to_vec2(line.start), to_vec2(line.end)
    inner_start = _shift(outer_start, offset)
    inner_end = _shift(outer_end, offset)

    span_polygons = tuple(
        SpanPolygon(
            span_id=span.id,
            points=_quad(to_vec2(span.start), to_vec2(span.end), offset),
        )
        for span in spans
    )

    return BandGeometry(
        outer=(outer_start, outer_end),
        inner=(inner_start, inner_end),
        outline=(outer_start, outer_end, inner_end, inner_start),
        span_polygons=span_polygons,
        offset_vector=to_vec2(offset),
        polarity=polarity,
        orientation=orientation,
    )


def flatten_points(points: Sequence[Vec2]) -> List[float]:
    """[(x, y), ...] -> [x0, y0, x1, y1, ...] for canvas polygon APIs."""
    return [float(c) for p in points for c in p]


# ─── Internal helpers ────────────────────────────────────────────────────────


def _orientation_vector(orientation: BandOrientation, normal: np.ndarray, width: float) -> np.ndarray:
    if orientation in ORIENTATION_AXES:
        return np.array(ORIENTATION_AXES[orientation], dtype=float) * width
    if orientation == BandOrientation.REVERSE:
        return -normal * width
    return normal * width


def _normalize(vector: np.ndarray) -> Vec2:
    magnitude = float(np.linalg.norm(vector))
    if magnitude < NEAR_ZERO:
        raise BandGeometryError(FailureReason.ZERO_LENGTH_NORMAL, "Cannot normalize zero-length vector")
    return to_vec2(vector / magnitude)


def _shift(point: Vec2, offset: np.ndarray) -> Vec2:
    return (point[0] + float(offset[0]), point[1] + float(offset[1]))


def _quad(start: Vec2, end: Vec2, offset: np.ndarray) -> Tuple[Vec2, Vec2, Vec2, Vec2]:
    return (start, end, _shift(end, offset), _shift(start, offset))
