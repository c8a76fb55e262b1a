"""
Span planning for scaffold lines.

Splits a measured line length into standard procurement spans. The search is
a small explicit scan over the number of preferred spans: each candidate
count has its leftover filled greedily with fallback units, and the
candidates are ranked by (span count, penalty sum) using the catalog's
penalty table.
"""
import logging
import math
from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple, Union

from scaffold_spans.catalog import (
    FALLBACK_SPANS_MM,
    LENGTH_TOLERANCE_MM,
    PREFERRED_SPAN_MM,
    UNKNOWN_UNIT_PENALTY,
    span_penalty_table,
)
from scaffold_spans.contracts import SpanPlan, SpanPlanFailure

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SpanPlannerConfig:
    """Unit table and tie-break policy for span planning."""
    preferred_span_mm: float = PREFERRED_SPAN_MM
    fallback_spans_mm: Tuple[float, ...] = FALLBACK_SPANS_MM  # strictly descending
    tolerance_mm: float = LENGTH_TOLERANCE_MM
    penalty_weights: Dict[float, int] = field(default_factory=span_penalty_table)
    unknown_penalty: int = UNKNOWN_UNIT_PENALTY

    @property
    def minimum_length_mm(self) -> float:
        return self.fallback_spans_mm[-1]

    def validate(self) -> None:
        if self.preferred_span_mm <= 0:
            raise ValueError(f"preferred_span_mm must be > 0, got {self.preferred_span_mm}")
        if not self.fallback_spans_mm:
            raise ValueError("fallback_spans_mm must not be empty")
        for larger, smaller in zip(self.fallback_spans_mm, self.fallback_spans_mm[1:]):
            if smaller >= larger:
                raise ValueError(
                    f"fallback_spans_mm must be strictly descending, got {self.fallback_spans_mm}"
                )
        if self.fallback_spans_mm[-1] <= 0:
            raise ValueError("fallback_spans_mm must be positive")
        if self.tolerance_mm <= 0:
            raise ValueError(f"tolerance_mm must be > 0, got {self.tolerance_mm}")


@dataclass
class _Candidate:
    preferred_count: int
    segments: List[float]
    remainder: float


def plan_spans(
    total_length_mm: float,
    config: Optional[SpanPlannerConfig] = None,
) -> Union[SpanPlan, SpanPlanFailure]:
    """Decompose a length into preferred and fallback spans.

    Args:
        total_length_mm: Measured line length.
        config: Unit table and penalties.

    Returns:
        SpanPlan with the chosen segments and the residual (|remainder| <= tol)
        that the caller folds into the final segment, or SpanPlanFailure when
        no combination fits.
    """
    if config is None:
        config = SpanPlannerConfig()
    config.validate()

    if not math.isfinite(total_length_mm) or total_length_mm < config.minimum_length_mm:
        logger.debug("Length %s below minimum span %.0fmm", total_length_mm, config.minimum_length_mm)
        return SpanPlanFailure()

    best: Optional[_Candidate] = None
    best_score: Optional[Tuple[int, int]] = None

    max_preferred = int(math.floor(total_length_mm / config.preferred_span_mm))
    for preferred_count in range(max_preferred, -1, -1):
        candidate = _build_candidate(total_length_mm, preferred_count, config)
        if candidate is None:
            continue
        score = score_segments(candidate.segments, config)
        logger.debug(
            "Candidate preferred=%d segments=%s score=%s",
            preferred_count, candidate.segments, score,
        )
        # Strict comparison: ties keep the candidate with more preferred spans
        if best_score is None or score < best_score:
            best = candidate
            best_score = score

    if best is None:
        logger.debug("No span combination fits %.3fmm", total_length_mm)
        return SpanPlanFailure()

    logger.debug(
        "Span plan for %.3fmm: preferred=%d total_segments=%d remainder=%.3f",
        total_length_mm, best.preferred_count, len(best.segments), best.remainder,
    )
    return SpanPlan(segments=tuple(best.segments), remainder=best.remainder)


def score_segments(
    segments: Sequence[float],
    config: Optional[SpanPlannerConfig] = None,
) -> Tuple[int, int]:
    """(segment count, penalty sum) -- lower is better."""
    if config is None:
        config = SpanPlannerConfig()
    penalty = sum(config.penalty_weights.get(s, config.unknown_penalty) for s in segments)
    return (len(segments), penalty)


def span_summary(segments: Sequence[float]) -> str:
    """Human summary, longest first, e.g. ``"1800 × 3, 1500"``."""
    counts = Counter(segments)
    parts = []
    for length in sorted(counts, reverse=True):
        count = counts[length]
        label = format_mm(length)
        parts.append(f"{label} × {count}" if count > 1 else label)
    return ", ".join(parts)


def format_mm(value: float) -> str:
    """Render a length with at most three decimals and no trailing zeros."""
    text = f"{round(float(value), 3):.3f}".rstrip("0").rstrip(".")
    return "0" if text == "-0" else text


# ─── Internal helpers ────────────────────────────────────────────────────────


def _build_candidate(
    total_length_mm: float,
    preferred_count: int,
    config: SpanPlannerConfig,
) -> Optional[_Candidate]:
    segments = [config.preferred_span_mm] * preferred_count
    leftover = total_length_mm - preferred_count * config.preferred_span_mm

    if abs(leftover) <= config.tolerance_mm:
        return _Candidate(preferred_count, segments, leftover)

    filled = _fill_with_fallbacks(leftover, config)
    if filled is None:
        return None
    fallback_segments, remainder = filled
    return _Candidate(preferred_count, segments + fallback_segments, remainder)


def _fill_with_fallbacks(
    remaining: float,
    config: SpanPlannerConfig,
) -> Optional[Tuple[List[float], float]]:
    """Greedy descending fill; None if the residual exceeds the tolerance."""
    segments: List[float] = []
    rem = remaining
    for unit in config.fallback_spans_mm:
        count = int(math.floor(rem / unit))
        if count <= 0:
            continue
        segments.extend([unit] * count)
        rem -= count * unit

    if abs(rem) <= config.tolerance_mm:
        return segments, rem
    return None
