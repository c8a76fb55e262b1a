"""Public API for scaffold span allocation and inner-band geometry."""

from scaffold_spans.allocation import AllocationConfig, allocate_line
from scaffold_spans.band_generation import DerivedEntityStore, generate_inner_band
from scaffold_spans.contracts import (
    AllocationFailure,
    AllocationSuccess,
    BandOrientation,
    BandSettings,
    FailureReason,
    ScaffoldLine,
)
from scaffold_spans.editor import LineEditor
from scaffold_spans.inner_band import build_band_geometry, compute_inward_normal, resolve_offset
from scaffold_spans.line_projection import project_segments_onto_line
from scaffold_spans.span_planner import SpanPlannerConfig, plan_spans, span_summary

__all__ = [
    "AllocationConfig",
    "AllocationFailure",
    "AllocationSuccess",
    "BandOrientation",
    "BandSettings",
    "DerivedEntityStore",
    "FailureReason",
    "LineEditor",
    "ScaffoldLine",
    "SpanPlannerConfig",
    "allocate_line",
    "build_band_geometry",
    "compute_inward_normal",
    "generate_inner_band",
    "plan_spans",
    "project_segments_onto_line",
    "resolve_offset",
    "span_summary",
]
