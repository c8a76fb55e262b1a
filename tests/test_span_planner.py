"""Tests for span_planner module."""
import math

import pytest

from scaffold_spans.contracts import FailureReason, SpanPlan, SpanPlanFailure
from scaffold_spans.span_planner import (
    SpanPlannerConfig,
    format_mm,
    plan_spans,
    score_segments,
    span_summary,
)


class TestPlanSpans:
    """Known decompositions."""

    def test_mixed_fallback_length(self):
        plan = plan_spans(9300)
        assert isinstance(plan, SpanPlan)
        assert plan.segments == (1800, 1800, 1800, 1800, 1500, 600)
        assert plan.remainder == 0

    def test_exact_preferred_multiple(self):
        plan = plan_spans(3600)
        assert plan.segments == (1800, 1800)
        assert plan.remainder == 0

    def test_fallback_only_beats_more_segments(self):
        """2100 = 1500 + 600 (2 spans) beats 1800 + 150 + 150 (3 spans)."""
        plan = plan_spans(2100)
        assert plan.segments == (1500, 600)
        assert plan.remainder == 0

    def test_remainder_within_tolerance(self):
        plan = plan_spans(1801)
        assert plan.segments == (1800,)
        assert abs(plan.remainder) <= 1

    def test_planner_never_folds_remainder(self):
        plan = plan_spans(150.5)
        assert plan.segments == (150,)
        assert plan.remainder == pytest.approx(0.5)

    def test_smallest_unit(self):
        assert plan_spans(150).segments == (150,)

    def test_below_minimum_fails(self):
        plan = plan_spans(149)
        assert isinstance(plan, SpanPlanFailure)
        assert plan.reason == FailureReason.INSUFFICIENT_LENGTH

    def test_no_candidate_fits(self):
        """1000 leaves 100mm after 900 -- nothing absorbs it."""
        plan = plan_spans(1000)
        assert isinstance(plan, SpanPlanFailure)
        assert plan.reason == FailureReason.INSUFFICIENT_LENGTH

    @pytest.mark.parametrize("value", [math.nan, math.inf, -1800.0, 0.0])
    def test_non_finite_or_non_positive_fails(self, value):
        assert isinstance(plan_spans(value), SpanPlanFailure)

    def test_tie_keeps_more_preferred_spans(self):
        """For 9300 several 6-span plans have penalty 5; the first scanned wins."""
        plan = plan_spans(9300)
        assert plan.segments.count(1800) == 4

    def test_sum_within_tolerance_and_deterministic(self):
        for length in range(150, 20000, 37):
            plan = plan_spans(float(length))
            if isinstance(plan, SpanPlanFailure):
                continue
            assert abs(sum(plan.segments) - length) <= 1.0
            assert sum(plan.segments) + plan.remainder == pytest.approx(length)
            assert plan_spans(float(length)) == plan

    def test_segments_are_catalog_units(self):
        units = {1800, 1500, 1200, 900, 600, 150}
        for length in range(150, 12000, 150):
            plan = plan_spans(float(length))
            assert isinstance(plan, SpanPlan), length
            assert set(plan.segments) <= units


class TestPlannerConfig:

    def test_custom_unit_table(self):
        config = SpanPlannerConfig(preferred_span_mm=2000, fallback_spans_mm=(1000, 500))
        plan = plan_spans(4500, config)
        assert plan.segments == (2000, 2000, 500)

    def test_non_descending_fallbacks_rejected(self):
        config = SpanPlannerConfig(fallback_spans_mm=(600, 900, 150))
        with pytest.raises(ValueError, match="strictly descending"):
            plan_spans(3000, config)

    def test_non_positive_tolerance_rejected(self):
        with pytest.raises(ValueError, match="tolerance_mm"):
            SpanPlannerConfig(tolerance_mm=0).validate()

    def test_minimum_length_is_smallest_fallback(self):
        assert SpanPlannerConfig().minimum_length_mm == 150


class TestScoring:

    def test_count_then_penalty(self):
        assert score_segments([1800, 1800]) == (2, 0)
        assert score_segments([1500, 600]) == (2, 5)

    def test_unknown_unit_penalty(self):
        assert score_segments([1800, 1500, 1234]) == (3, 11)


class TestSummary:

    def test_grouped_descending(self):
        assert span_summary([1500, 1800, 1800, 1800]) == "1800 × 3, 1500"

    def test_single_entries(self):
        assert span_summary([1500, 600]) == "1500, 600"

    def test_folded_fraction(self):
        assert span_summary([1800, 1800.5]) == "1800.5, 1800"

    def test_empty(self):
        assert span_summary([]) == ""

    def test_format_mm(self):
        assert format_mm(3600.0) == "3600"
        assert format_mm(1800.25) == "1800.25"
        assert format_mm(100.0004) == "100"
        assert format_mm(-0.0001) == "0"
