"""Lay planned span lengths out along a scaffold line."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Sequence

import numpy as np

from scaffold_spans.catalog import LENGTH_TOLERANCE_MM
from scaffold_spans.contracts import (
    FailureReason,
    ProjectionError,
    ScaffoldLine,
    Vec2,
    to_vec2,
)


@dataclass(frozen=True)
class ProjectedSegment:
    start: Vec2
    end: Vec2


def project_segments_onto_line(
    line: ScaffoldLine,
    segments: Sequence[float],
    tolerance_mm: float = LENGTH_TOLERANCE_MM,
) -> List[ProjectedSegment]:
    """Map segment lengths onto world coordinates along ``line``.

    The last segment always ends exactly on the line's end point, and
    coordinates within ``tolerance_mm`` of the start coordinate are snapped
    onto it.

    Raises:
        ProjectionError: no segments, a zero-length line, or a segment sum
            that differs from the measured length by more than the tolerance.
    """
    if len(segments) == 0:
        raise ProjectionError(FailureReason.LENGTH_MISMATCH, "No segments provided")

    measured = line.measured_length
    if measured <= 0:
        raise ProjectionError(FailureReason.LENGTH_MISMATCH, "Line length must be positive")

    total = float(np.sum(segments))
    delta = measured - total
    if abs(delta) > tolerance_mm:
        raise ProjectionError(
            FailureReason.LENGTH_MISMATCH,
            f"Segments sum to {total:.3f}mm but line measures {measured:.3f}mm",
        )

    origin = np.array(line.start, dtype=float)
    direction = np.array([line.dx, line.dy], dtype=float) / measured
    distances = np.concatenate([[0.0], np.cumsum(segments, dtype=float)])

    projected = []
    last = len(segments) - 1
    for i in range(len(segments)):
        start = _snap_to_origin(origin + direction * distances[i], origin, tolerance_mm)
        if i == last:
            end = to_vec2(line.end)
        else:
            end = _snap_to_origin(origin + direction * distances[i + 1], origin, tolerance_mm)
        projected.append(ProjectedSegment(start=start, end=end))
    return projected


def _snap_to_origin(point: np.ndarray, origin: np.ndarray, tolerance_mm: float) -> Vec2:
    """Snap each coordinate lying within tolerance of the origin coordinate."""
    offset = point - origin
    offset[np.abs(offset) <= tolerance_mm] = 0.0
    return to_vec2(origin + offset)
