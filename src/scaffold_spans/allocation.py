"""
Span allocation for a single scaffold line.

measure -> plan -> fold remainder -> project -> spans/markers/blocks ->
band geometry -> checksum + summary. Every call produces a full replacement
set of derived entities for the line; nothing is patched in place.
"""
import logging
import math
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

from scaffold_spans.contracts import (
    AllocationFailure,
    AllocationResult,
    AllocationSuccess,
    Block,
    FailureReason,
    Marker,
    ScaffoldGeometryError,
    ScaffoldLine,
    Span,
    SpanPlanFailure,
)
from scaffold_spans.inner_band import build_band_geometry, resolve_offset
from scaffold_spans.line_projection import ProjectedSegment, project_segments_onto_line
from scaffold_spans.span_planner import SpanPlannerConfig, format_mm, plan_spans, span_summary

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AllocationConfig:
    """Allocation settings."""
    planner: SpanPlannerConfig = field(default_factory=SpanPlannerConfig)
    length_precision: int = 3  # decimals kept on measured and span lengths


def create_span_id(line_id: str, index: int) -> str:
    """Span id for 0-based ``index`` (ids are 1-based)."""
    return f"{line_id}-span-{index + 1}"


def create_marker_id(line_id: str, index: int) -> str:
    return f"{line_id}-marker-{index + 1}"


def compute_span_checksum(
    line_id: str,
    measured_length: float,
    segments: Sequence[float],
    precision: int = 3,
) -> str:
    """Change-detection signature: ``{line_id}:{length}:{seg-seg-...}``."""
    signature = "-".join(format_mm(round(s, precision)) for s in segments)
    return f"{line_id}:{format_mm(round(measured_length, precision))}:{signature}"


def fold_remainder(segments: Sequence[float], remainder: float) -> Tuple[float, ...]:
    """New segment tuple with ``remainder`` added to the final segment."""
    folded = tuple(float(s) for s in segments)
    if not folded or remainder == 0:
        return folded
    return folded[:-1] + (folded[-1] + remainder,)


def allocate_line(
    line: ScaffoldLine,
    config: Optional[AllocationConfig] = None,
) -> AllocationResult:
    """Allocate standard spans and band geometry for one line.

    Args:
        line: Line snapshot; any stored ``length`` is ignored.
        config: Planner and rounding settings.

    Returns:
        AllocationSuccess, or AllocationFailure with INSUFFICIENT_LENGTH,
        PROJECTION_FAILED or a band geometry reason.
    """
    if config is None:
        config = AllocationConfig()

    measured = round(line.measured_length, config.length_precision)

    plan = plan_spans(measured, config.planner)
    if isinstance(plan, SpanPlanFailure):
        logger.warning("Line %s: %.3fmm is too short for any span combination", line.id, measured)
        return AllocationFailure(
            line_id=line.id,
            reason=FailureReason.INSUFFICIENT_LENGTH,
            message=(
                f"Line {line.id} is too short for spans "
                f"(minimum {format_mm(config.planner.minimum_length_mm)}mm)"
            ),
        )

    segments = fold_remainder(plan.segments, plan.remainder)

    try:
        projected = project_segments_onto_line(line, segments, config.planner.tolerance_mm)
    except Exception as exc:
        logger.warning("Line %s: span projection failed: %s", line.id, exc)
        return AllocationFailure(
            line_id=line.id,
            reason=FailureReason.PROJECTION_FAILED,
            message=f"Span projection failed for line {line.id}",
        )

    spans = _build_spans(line, segments, projected, config.length_precision)
    markers = _build_boundary_markers(line, projected)
    blocks = _build_blocks(line, spans)

    try:
        offset = resolve_offset(line, line.block_width, line.band_settings)
        geometry = build_band_geometry(
            line,
            spans,
            line.block_width,
            polarity=offset.polarity,
            offset_vector=offset.offset_vector,
            orientation=offset.orientation,
        )
    except ScaffoldGeometryError as exc:
        logger.warning("Line %s: band geometry failed: %s", line.id, exc)
        return AllocationFailure(line_id=line.id, reason=exc.reason, message=str(exc))

    summary = span_summary(segments)
    checksum = compute_span_checksum(line.id, measured, segments, config.length_precision)

    logger.info("Line %s: %.3fmm -> %s", line.id, measured, summary)
    return AllocationSuccess(
        line_id=line.id,
        measured_length=measured,
        segments=segments,
        spans=tuple(spans),
        markers=tuple(markers),
        blocks=tuple(blocks),
        summary=summary,
        checksum=checksum,
        geometry=geometry,
        offset=offset,
    )


# ─── Entity builders ─────────────────────────────────────────────────────────


def _build_spans(
    line: ScaffoldLine,
    segments: Sequence[float],
    projected: Sequence[ProjectedSegment],
    precision: int,
) -> List[Span]:
    return [
        Span(
            id=create_span_id(line.id, i),
            line_id=line.id,
            index=i,
            length=round(length, precision),
            start=seg.start,
            end=seg.end,
        )
        for i, (length, seg) in enumerate(zip(segments, projected))
    ]


def _build_boundary_markers(
    line: ScaffoldLine,
    projected: Sequence[ProjectedSegment],
) -> List[Marker]:
    # One marker per internal junction
    return [
        Marker(
            id=create_marker_id(line.id, i),
            line_id=line.id,
            x=seg.end[0],
            y=seg.end[1],
            color=line.color,
            role="boundary",
        )
        for i, seg in enumerate(projected[:-1])
    ]


def _build_blocks(line: ScaffoldLine, spans: Sequence[Span]) -> List[Block]:
    return [
        Block(
            id=span.id,
            length=_round_half_up(span.length),
            x=span.start[0],
            y=span.start[1],
            source_line_id=line.id,
            width=line.block_width,
        )
        for span in spans
    ]


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))
