"""
Inner-band regeneration for the editor.

Wraps allocate_line with the editor-facing pieces: the persisted band
settings and checksum on the line, the inner band entity, corner markers,
and a per-line entity store whose contents are swapped or cleared as a whole.
"""
import logging
from dataclasses import dataclass, field, replace
from typing import Dict, List, Optional, Sequence, Tuple, Union

from scaffold_spans.allocation import AllocationConfig, allocate_line
from scaffold_spans.catalog import DEFAULT_BLOCK_WIDTH
from scaffold_spans.contracts import (
    AllocationFailure,
    AllocationSuccess,
    BandGeometry,
    BandOrientation,
    BandSettings,
    Block,
    FailureReason,
    LineAxis,
    Marker,
    ScaffoldLine,
    Span,
)
from scaffold_spans.inner_band import compute_inward_normal
from scaffold_spans.line_geometry import infer_axis

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class InnerBand:
    """Generated band entity attached to a line."""
    id: str
    line_id: str
    width: int
    geometry: BandGeometry
    summary: str
    polarity: int
    orientation: Optional[BandOrientation] = None
    auto: bool = True

    def to_dict(self) -> Dict[str, object]:
        return {
            "id": self.id,
            "line_id": self.line_id,
            "width": self.width,
            "summary": self.summary,
            "polarity": self.polarity,
            "orientation": self.orientation.value if self.orientation else None,
            "auto": self.auto,
            "geometry": self.geometry.to_dict(),
        }


@dataclass(frozen=True)
class BandGenerationSuccess:
    line: ScaffoldLine  # with measured length, band settings and checksum
    allocation: AllocationSuccess
    band: InnerBand
    markers: Tuple[Marker, ...]  # boundary markers followed by corner markers
    success: bool = field(default=True, init=False)

    @property
    def spans(self) -> Tuple[Span, ...]:
        return self.allocation.spans

    @property
    def blocks(self) -> Tuple[Block, ...]:
        return self.allocation.blocks

    @property
    def summary(self) -> str:
        return self.allocation.summary

    @property
    def checksum(self) -> str:
        return self.allocation.checksum


@dataclass(frozen=True)
class BandGenerationFailure:
    line: ScaffoldLine
    reason: FailureReason
    message: str = ""
    success: bool = field(default=False, init=False)


BandGenerationResult = Union[BandGenerationSuccess, BandGenerationFailure]


def create_inner_band_id(line_id: str) -> str:
    return f"{line_id}-inner-band"


def generate_inner_band(
    line: ScaffoldLine,
    config: Optional[AllocationConfig] = None,
) -> BandGenerationResult:
    """Regenerate everything derived from ``line``."""
    line = replace(line, block_width=line.block_width or DEFAULT_BLOCK_WIDTH)

    allocation = allocate_line(line, config)
    if isinstance(allocation, AllocationFailure):
        return BandGenerationFailure(
            line=strip_derived_metadata(line),
            reason=allocation.reason,
            message=allocation.message,
        )

    offset = allocation.offset
    band = InnerBand(
        id=create_inner_band_id(line.id),
        line_id=line.id,
        width=line.block_width,
        geometry=allocation.geometry,
        summary=allocation.summary,
        polarity=offset.polarity,
        orientation=offset.orientation,
    )
    enriched = replace(
        line,
        length=allocation.measured_length,
        band_settings=BandSettings(polarity=offset.polarity, orientation=offset.orientation),
        span_checksum=allocation.checksum,
    )
    markers = tuple(allocation.markers) + tuple(_corner_markers(line))

    logger.info(
        "Generated band %s: width=%d polarity=%+d orientation=%s spans=%d",
        band.id, band.width, band.polarity,
        band.orientation.value if band.orientation else "-", len(allocation.spans),
    )
    return BandGenerationSuccess(line=enriched, allocation=allocation, band=band, markers=markers)


def strip_derived_metadata(line: ScaffoldLine) -> ScaffoldLine:
    """Drop derived state (checksum) but keep the user's band settings."""
    return replace(line, span_checksum=None)


def dedupe_markers_by_position(markers: Sequence[Marker]) -> List[Marker]:
    """Keep the first marker per (rounded position, role)."""
    seen = set()
    result = []
    for marker in markers:
        key = (round(marker.x, 3), round(marker.y, 3), marker.role)
        if key in seen:
            continue
        seen.add(key)
        result.append(marker)
    return result


def orientation_choices(line: ScaffoldLine) -> Tuple[BandOrientation, BandOrientation]:
    """Sides offered for a line, depending on its axis."""
    axis = infer_axis(line)
    if axis == LineAxis.HORIZONTAL:
        return (BandOrientation.UP, BandOrientation.DOWN)
    if axis == LineAxis.VERTICAL:
        return (BandOrientation.RIGHT, BandOrientation.LEFT)
    return (BandOrientation.STANDARD, BandOrientation.REVERSE)


def effective_orientation(line: ScaffoldLine) -> BandOrientation:
    """Stored orientation, else the side implied by the axis and polarity."""
    settings = line.band_settings
    if settings is not None and settings.orientation is not None:
        return settings.orientation

    polarity = settings.polarity if settings is not None and settings.polarity else 1
    normal = compute_inward_normal(line)
    nx, ny = normal[0] * polarity, normal[1] * polarity

    axis = infer_axis(line)
    if axis == LineAxis.HORIZONTAL:
        return BandOrientation.UP if ny <= 0 else BandOrientation.DOWN
    if axis == LineAxis.VERTICAL:
        return BandOrientation.RIGHT if nx >= 0 else BandOrientation.LEFT
    return BandOrientation.STANDARD if polarity == 1 else BandOrientation.REVERSE


def _corner_markers(line: ScaffoldLine) -> List[Marker]:
    corners = [
        Marker(
            id=f"{line.id}-corner-start",
            line_id=line.id,
            x=line.start[0],
            y=line.start[1],
            color=line.color,
            role="corner",
        ),
        Marker(
            id=f"{line.id}-corner-end",
            line_id=line.id,
            x=line.end[0],
            y=line.end[1],
            color=line.color,
            role="corner",
        ),
    ]
    return dedupe_markers_by_position(corners)


# ─── Derived entity store ────────────────────────────────────────────────────


@dataclass(frozen=True)
class LineEntities:
    """Everything derived from one line."""
    line_id: str
    spans: Tuple[Span, ...]
    markers: Tuple[Marker, ...]
    blocks: Tuple[Block, ...]
    band: InnerBand
    checksum: str


class DerivedEntityStore:
    """Derived entities keyed by line id.

    A line's entities are only ever swapped for a complete new set or removed;
    a failed regeneration removes them so no stale allocation survives.
    """

    def __init__(self):
        self._by_line: Dict[str, LineEntities] = {}

    def __contains__(self, line_id: str) -> bool:
        return line_id in self._by_line

    def __len__(self) -> int:
        return len(self._by_line)

    def get(self, line_id: str) -> Optional[LineEntities]:
        return self._by_line.get(line_id)

    def replace(self, entities: LineEntities) -> None:
        self._by_line[entities.line_id] = entities

    def clear(self, line_id: str) -> bool:
        """Remove a line's entities. Returns True if any were present."""
        return self._by_line.pop(line_id, None) is not None

    def apply(self, result: BandGenerationResult) -> None:
        """Swap in a successful result, or clear the line on failure."""
        if isinstance(result, BandGenerationFailure):
            if self.clear(result.line.id):
                logger.info("Cleared derived entities for line %s (%s)", result.line.id, result.reason.value)
            return
        self.replace(
            LineEntities(
                line_id=result.line.id,
                spans=result.spans,
                markers=result.markers,
                blocks=result.blocks,
                band=result.band,
                checksum=result.checksum,
            )
        )

    def is_current(self, line_id: str, checksum: str) -> bool:
        """True if the stored spans were generated from the same checksum."""
        entities = self._by_line.get(line_id)
        return entities is not None and entities.checksum == checksum

    @property
    def spans(self) -> List[Span]:
        return [s for e in self._by_line.values() for s in e.spans]

    @property
    def markers(self) -> List[Marker]:
        return [m for e in self._by_line.values() for m in e.markers]

    @property
    def blocks(self) -> List[Block]:
        return [b for e in self._by_line.values() for b in e.blocks]

    @property
    def bands(self) -> List[InnerBand]:
        return [e.band for e in self._by_line.values()]
