"""Contracts for scaffold span allocation and inner-band geometry."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Sequence, Tuple, Union

from shapely.geometry import LinearRing, Polygon

from scaffold_spans.catalog import DEFAULT_BLOCK_WIDTH

Vec2 = Tuple[float, float]

LINE_COLORS = ("black", "red", "blue", "green")
LINE_STYLES = ("solid", "dashed")


class FailureReason(Enum):
    """Per-line failure codes surfaced to the editor."""
    INSUFFICIENT_LENGTH = "INSUFFICIENT_LENGTH"
    PROJECTION_FAILED = "PROJECTION_FAILED"
    LENGTH_MISMATCH = "LENGTH_MISMATCH"
    INVALID_WIDTH = "INVALID_WIDTH"
    ZERO_LENGTH_NORMAL = "ZERO_LENGTH_NORMAL"


class LineAxis(Enum):
    HORIZONTAL = "horizontal"
    VERTICAL = "vertical"
    DIAGONAL = "diagonal"


class BandOrientation(Enum):
    """Named side a band is placed on."""
    UP = "up"
    DOWN = "down"
    LEFT = "left"
    RIGHT = "right"
    STANDARD = "standard"
    REVERSE = "reverse"


class ScaffoldGeometryError(ValueError):
    """Raised for impossible span or band geometry."""

    def __init__(self, reason: FailureReason, message: str):
        super().__init__(message)
        self.reason = reason


class ProjectionError(ScaffoldGeometryError):
    """Segments cannot be laid out along a line."""


class BandGeometryError(ScaffoldGeometryError):
    """A band cannot be offset from a line."""


@dataclass(frozen=True)
class BandSettings:
    """Side selection persisted on a line between regenerations."""

    polarity: Optional[int] = None  # +1 / -1
    orientation: Optional[BandOrientation] = None

    def to_dict(self) -> Dict[str, object]:
        payload: Dict[str, object] = {}
        if self.polarity is not None:
            payload["polarity"] = int(self.polarity)
        if self.orientation is not None:
            payload["orientation"] = self.orientation.value
        return payload


@dataclass(frozen=True)
class ScaffoldLine:
    """Immutable snapshot of a drawn line (coordinates in mm).

    ``length`` is whatever the editor last stored for display; the engine
    always re-measures from the endpoints.
    """

    id: str
    start: Vec2
    end: Vec2
    block_width: int = DEFAULT_BLOCK_WIDTH
    color: str = "black"
    style: str = "solid"
    axis: Optional[LineAxis] = None
    band_settings: Optional[BandSettings] = None
    length: Optional[float] = None
    span_checksum: Optional[str] = None

    @property
    def dx(self) -> float:
        return self.end[0] - self.start[0]

    @property
    def dy(self) -> float:
        return self.end[1] - self.start[1]

    @property
    def measured_length(self) -> float:
        return math.hypot(self.dx, self.dy)

    def to_dict(self) -> Dict[str, object]:
        return {
            "id": self.id,
            "start": list(self.start),
            "end": list(self.end),
            "length": self.length,
            "block_width": self.block_width,
            "color": self.color,
            "style": self.style,
            "axis": self.axis.value if self.axis is not None else None,
            "band_settings": self.band_settings.to_dict() if self.band_settings else None,
            "span_checksum": self.span_checksum,
        }


@dataclass(frozen=True)
class Span:
    """One procurement-length piece of a line."""

    id: str
    line_id: str
    index: int  # 0-based; the id uses index + 1
    length: float
    start: Vec2
    end: Vec2

    def to_dict(self) -> Dict[str, object]:
        return {
            "id": self.id,
            "line_id": self.line_id,
            "index": self.index,
            "length": self.length,
            "start": list(self.start),
            "end": list(self.end),
        }


@dataclass(frozen=True)
class Marker:
    id: str
    line_id: str
    x: float
    y: float
    color: str
    role: str = "boundary"  # "boundary" | "corner"
    generated: bool = True
    block_id: Optional[str] = None

    def to_dict(self) -> Dict[str, object]:
        return {
            "id": self.id,
            "line_id": self.line_id,
            "x": self.x,
            "y": self.y,
            "color": self.color,
            "role": self.role,
            "generated": self.generated,
            "block_id": self.block_id,
        }


@dataclass(frozen=True)
class Block:
    """Locked display block derived from a span."""

    id: str
    length: int
    x: float
    y: float
    source_line_id: str
    width: int
    kind: str = "span"
    locked: bool = True

    def to_dict(self) -> Dict[str, object]:
        return {
            "id": self.id,
            "length": self.length,
            "kind": self.kind,
            "x": self.x,
            "y": self.y,
            "source_line_id": self.source_line_id,
            "width": self.width,
            "locked": self.locked,
        }


@dataclass(frozen=True)
class OffsetResolution:
    """Concrete band offset derived from a line and its band settings."""

    offset_vector: Vec2
    polarity: int
    orientation: Optional[BandOrientation] = None


@dataclass(frozen=True)
class SpanPolygon:
    """Quad for one span: outerStart, outerEnd, innerEnd, innerStart."""

    span_id: str
    points: Tuple[Vec2, Vec2, Vec2, Vec2]

    def polygon(self) -> Polygon:
        return Polygon(self.points)


@dataclass(frozen=True)
class BandGeometry:
    """Inset band alongside a line.

    ``outline`` and every span quad share the point ordering
    outerStart, outerEnd, innerEnd, innerStart.
    """

    outer: Tuple[Vec2, Vec2]
    inner: Tuple[Vec2, Vec2]
    outline: Tuple[Vec2, Vec2, Vec2, Vec2]
    span_polygons: Tuple[SpanPolygon, ...]
    offset_vector: Vec2
    polarity: int
    orientation: Optional[BandOrientation] = None

    @property
    def width(self) -> float:
        return math.hypot(self.offset_vector[0], self.offset_vector[1])

    def outline_polygon(self) -> Polygon:
        return Polygon(self.outline)

    def validate_geometry(self, tol: float = 1e-3) -> List[str]:
        """Check band invariants.

        Returns list of issue strings (empty = ok).
        """
        issues = []
        width = self.width
        pairs = [(self.outer[0], self.inner[0]), (self.outer[1], self.inner[1])]
        for sp in self.span_polygons:
            pairs.append((sp.points[0], sp.points[3]))
            pairs.append((sp.points[1], sp.points[2]))
        for outer_pt, inner_pt in pairs:
            dist = math.hypot(inner_pt[0] - outer_pt[0], inner_pt[1] - outer_pt[1])
            if abs(dist - width) > tol:
                issues.append(
                    f"Inner point {inner_pt} is {dist:.4f}mm from {outer_pt}, expected {width:.4f}mm"
                )
        outline_ccw = LinearRing(self.outline).is_ccw
        for sp in self.span_polygons:
            if _has_length(sp.points) and LinearRing(sp.points).is_ccw != outline_ccw:
                issues.append(f"Span polygon {sp.span_id} winding differs from outline")
        return issues

    def to_dict(self) -> Dict[str, object]:
        return {
            "outer": [list(p) for p in self.outer],
            "inner": [list(p) for p in self.inner],
            "outline": [list(p) for p in self.outline],
            "span_polygons": [
                {"span_id": sp.span_id, "points": [list(p) for p in sp.points]}
                for sp in self.span_polygons
            ],
            "offset_vector": list(self.offset_vector),
            "polarity": self.polarity,
            "orientation": self.orientation.value if self.orientation else None,
        }


@dataclass(frozen=True)
class SpanPlan:
    """Planner output. ``remainder`` is left for the caller to fold."""

    segments: Tuple[float, ...]
    remainder: float


@dataclass(frozen=True)
class SpanPlanFailure:
    reason: FailureReason = FailureReason.INSUFFICIENT_LENGTH


@dataclass(frozen=True)
class AllocationSuccess:
    line_id: str
    measured_length: float
    segments: Tuple[float, ...]
    spans: Tuple[Span, ...]
    markers: Tuple[Marker, ...]
    blocks: Tuple[Block, ...]
    summary: str
    checksum: str
    geometry: BandGeometry
    offset: OffsetResolution
    success: bool = field(default=True, init=False)

    def to_dict(self) -> Dict[str, object]:
        return {
            "success": True,
            "line_id": self.line_id,
            "measured_length": self.measured_length,
            "segments": list(self.segments),
            "spans": [s.to_dict() for s in self.spans],
            "markers": [m.to_dict() for m in self.markers],
            "blocks": [b.to_dict() for b in self.blocks],
            "summary": self.summary,
            "checksum": self.checksum,
            "geometry": self.geometry.to_dict(),
        }


@dataclass(frozen=True)
class AllocationFailure:
    line_id: str
    reason: FailureReason
    message: str = ""
    success: bool = field(default=False, init=False)

    def to_dict(self) -> Dict[str, object]:
        return {
            "success": False,
            "line_id": self.line_id,
            "reason": self.reason.value,
            "message": self.message,
        }


AllocationResult = Union[AllocationSuccess, AllocationFailure]


def to_vec2(values: Sequence[float]) -> Vec2:
    return (float(values[0]), float(values[1]))


def _has_length(points: Sequence[Vec2]) -> bool:
    return math.hypot(points[1][0] - points[0][0], points[1][1] - points[0][1]) > 1e-9
