"""Line editing façade: owns the lines and keeps their derived entities fresh."""
import logging
from dataclasses import replace
from typing import Dict, List, Optional

from scaffold_spans.allocation import AllocationConfig
from scaffold_spans.band_generation import (
    BandGenerationFailure,
    BandGenerationResult,
    DerivedEntityStore,
    generate_inner_band,
)
from scaffold_spans.catalog import DEFAULT_BLOCK_WIDTH, DEFAULT_SNAP_SIZE
from scaffold_spans.contracts import (
    BandOrientation,
    BandSettings,
    FailureReason,
    ScaffoldGeometryError,
    ScaffoldLine,
    Vec2,
    to_vec2,
)
from scaffold_spans.ids import IdFactory, make_id_factory
from scaffold_spans.inner_band import resolve_offset
from scaffold_spans.line_geometry import (
    can_apply_width_to_line,
    infer_axis,
    is_supported_block_width,
    line_length,
    minimum_length_for_width,
    recalculate_line_with_length,
    validate_line_appearance,
)

logger = logging.getLogger(__name__)


class LineEditor:
    """Holds scaffold lines and regenerates their spans and bands on every edit."""

    def __init__(
        self,
        id_factory: Optional[IdFactory] = None,
        config: Optional[AllocationConfig] = None,
        snap_size: float = DEFAULT_SNAP_SIZE,
        default_block_width: int = DEFAULT_BLOCK_WIDTH,
    ):
        self._id_factory = id_factory or make_id_factory("line")
        self._config = config
        self.snap_size = snap_size
        self.default_block_width = default_block_width
        self._lines: Dict[str, ScaffoldLine] = {}
        self.store = DerivedEntityStore()

    @property
    def lines(self) -> List[ScaffoldLine]:
        return list(self._lines.values())

    def get(self, line_id: str) -> ScaffoldLine:
        if line_id not in self._lines:
            raise KeyError(f"Unknown line '{line_id}'")
        return self._lines[line_id]

    def add_line(
        self,
        start: Vec2,
        end: Vec2,
        color: str = "black",
        style: str = "solid",
        block_width: Optional[int] = None,
    ) -> BandGenerationResult:
        """Create a line and generate its spans (ValueError on unknown color or style)."""
        validate_line_appearance(color, style)
        start, end = to_vec2(start), to_vec2(end)
        line = ScaffoldLine(
            id=self._id_factory(),
            start=start,
            end=end,
            block_width=block_width or self.default_block_width,
            color=color,
            style=style,
            length=round(line_length(start, end)),
        )
        line = replace(line, axis=infer_axis(line))
        return self._regenerate(line)

    def update_length(self, line_id: str, length_mm: float) -> BandGenerationResult:
        """Resize a line around its midpoint (ValueError on invalid lengths)."""
        line = recalculate_line_with_length(self.get(line_id), length_mm, self.snap_size)
        return self._regenerate(line)

    def change_width(self, line_id: str, width: int) -> BandGenerationResult:
        """Switch the block width class.

        A width the line is too short for is rejected with INVALID_WIDTH and
        leaves the line and its entities untouched.
        """
        line = self.get(line_id)
        if not is_supported_block_width(width) or not can_apply_width_to_line(line, width):
            message = (
                f"Line {line_id} needs {minimum_length_for_width(width):g}mm for a "
                f"{width}mm block width; width unchanged"
            )
            logger.warning("Line %s: rejected %dmm block width", line_id, width)
            return BandGenerationFailure(line=line, reason=FailureReason.INVALID_WIDTH, message=message)
        return self._regenerate(replace(line, block_width=width))

    def change_orientation(self, line_id: str, orientation: BandOrientation) -> BandGenerationResult:
        """Pin the band to a named side."""
        line = self.get(line_id)
        current = line.band_settings or BandSettings()
        requested = BandSettings(polarity=current.polarity or 1, orientation=orientation)
        try:
            resolved = resolve_offset(line, line.block_width, requested)
        except ScaffoldGeometryError as exc:
            logger.warning("Line %s: cannot orient band: %s", line_id, exc)
            return BandGenerationFailure(line=line, reason=exc.reason, message=str(exc))

        settings = BandSettings(polarity=resolved.polarity, orientation=orientation)
        return self._regenerate(replace(line, band_settings=settings))

    def remove_line(self, line_id: str) -> None:
        self._lines.pop(line_id, None)
        self.store.clear(line_id)

    def _regenerate(self, line: ScaffoldLine) -> BandGenerationResult:
        result = generate_inner_band(line, self._config)
        self._lines[line.id] = result.line
        self.store.apply(result)
        return result
