"""Tests for line_projection module."""
import math

import pytest

from scaffold_spans.allocation import fold_remainder
from scaffold_spans.contracts import (
    FailureReason,
    ProjectionError,
    ScaffoldLine,
    SpanPlan,
)
from scaffold_spans.line_projection import project_segments_onto_line
from scaffold_spans.span_planner import plan_spans


def _line(start, end, line_id="line-p"):
    return ScaffoldLine(id=line_id, start=start, end=end)


class TestProjectSegments:

    def test_horizontal_split(self):
        line = _line((0.0, 0.0), (3000.0, 0.0))
        projected = project_segments_onto_line(line, [1800, 1200])
        assert len(projected) == 2
        assert projected[0].start == (0.0, 0.0)
        assert projected[0].end == pytest.approx((1800.0, 0.0))
        assert projected[1].start == pytest.approx((1800.0, 0.0))
        assert projected[1].end == (3000.0, 0.0)

    def test_segments_are_contiguous(self):
        line = _line((100.0, 50.0), (2260.0, 2930.0))  # 3600mm diagonal
        projected = project_segments_onto_line(line, [1800, 1200, 600])
        for prev, nxt in zip(projected, projected[1:]):
            assert prev.end == pytest.approx(nxt.start)

    def test_reverse_direction(self):
        line = _line((3600.0, 0.0), (0.0, 0.0))
        projected = project_segments_onto_line(line, [1800, 1800])
        assert projected[0].start == (3600.0, 0.0)
        assert projected[0].end == pytest.approx((1800.0, 0.0))
        assert projected[1].end == (0.0, 0.0)

    def test_final_end_is_line_end(self):
        """A sub-millimetre mismatch is absorbed by the last segment."""
        line = _line((0.0, 0.0), (3000.5, 0.0))
        projected = project_segments_onto_line(line, [1800, 1200])
        assert projected[-1].end == (3000.5, 0.0)

    def test_start_coordinate_snapping(self):
        """An almost-vertical line keeps junction x exactly on the start x."""
        line = _line((100.0, 100.0), (100.5, 2000.0))
        projected = project_segments_onto_line(line, [1500, 400])
        assert projected[0].end[0] == 100.0
        assert projected[1].start[0] == 100.0

    def test_length_mismatch_raises(self):
        line = _line((0.0, 0.0), (3000.0, 0.0))
        with pytest.raises(ProjectionError) as excinfo:
            project_segments_onto_line(line, [1800])
        assert excinfo.value.reason == FailureReason.LENGTH_MISMATCH

    def test_projection_error_is_value_error(self):
        line = _line((0.0, 0.0), (3000.0, 0.0))
        with pytest.raises(ValueError):
            project_segments_onto_line(line, [1800, 1800])

    def test_empty_segments_raise(self):
        line = _line((0.0, 0.0), (3000.0, 0.0))
        with pytest.raises(ProjectionError, match="No segments"):
            project_segments_onto_line(line, [])

    def test_zero_length_line_raises(self):
        line = _line((10.0, 10.0), (10.0, 10.0))
        with pytest.raises(ProjectionError, match="positive"):
            project_segments_onto_line(line, [150])


class TestPlannerRoundTrip:
    """The planner's own output always projects cleanly."""

    @pytest.mark.parametrize("angle_deg", [0, 17, 45, 90, 133, 180, 251, 315])
    @pytest.mark.parametrize("length", [150.0, 1801.0, 2100.0, 3600.0, 9300.0, 12300.5])
    def test_round_trip(self, angle_deg, length):
        theta = math.radians(angle_deg)
        line = _line((250.0, -75.0), (250.0 + length * math.cos(theta), -75.0 + length * math.sin(theta)))
        measured = round(line.measured_length, 3)
        plan = plan_spans(measured)
        if not isinstance(plan, SpanPlan):
            pytest.skip(f"{length}mm has no span plan")
        segments = fold_remainder(plan.segments, plan.remainder)
        projected = project_segments_onto_line(line, segments)
        assert len(projected) == len(segments)
        assert projected[-1].end == line.end
