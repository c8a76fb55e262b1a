"""
Scaffold deck catalog.

Standard procurement span lengths and the deck block widths a scaffold line
can carry. Used by span_planner.py for span selection and by the band
generation code for width rules.
"""

from dataclasses import dataclass
from typing import Dict, List, Tuple


@dataclass(frozen=True)
class SpanUnit:
    """A standard span length that can be ordered."""

    length_mm: float
    penalty: int  # tie-break weight when two plans use the same number of spans
    preferred: bool = False


# Preferred unit first, then fallback units in strictly descending order.
SPAN_UNITS: Tuple[SpanUnit, ...] = (
    SpanUnit(length_mm=1800, penalty=0, preferred=True),
    SpanUnit(length_mm=1500, penalty=1),
    SpanUnit(length_mm=1200, penalty=2),
    SpanUnit(length_mm=900, penalty=3),
    SpanUnit(length_mm=600, penalty=4),
    SpanUnit(length_mm=150, penalty=5),
)

# Penalty charged for any segment that is not a catalog unit
UNKNOWN_UNIT_PENALTY = 10

PREFERRED_SPAN_MM = SPAN_UNITS[0].length_mm
FALLBACK_SPANS_MM: Tuple[float, ...] = tuple(u.length_mm for u in SPAN_UNITS[1:])

# Smallest orderable unit; shorter lines cannot be allocated at all
MINIMUM_SPAN_LENGTH_MM = FALLBACK_SPANS_MM[-1]

# Allowed deviation between a plan and the measured line (mm)
LENGTH_TOLERANCE_MM = 1.0


def span_penalty_table() -> Dict[float, int]:
    return {u.length_mm: u.penalty for u in SPAN_UNITS}


@dataclass(frozen=True)
class BlockWidthSpec:
    """A deck block width class."""

    name: str
    width_mm: int

    @property
    def minimum_line_length_mm(self) -> float:
        # The band needs at least one fallback span beyond its own width
        return self.width_mm + MINIMUM_SPAN_LENGTH_MM


BLOCK_WIDTHS: Dict[int, BlockWidthSpec] = {
    600: BlockWidthSpec(name="Standard deck", width_mm=600),
    355: BlockWidthSpec(name="Narrow deck", width_mm=355),
}

SUPPORTED_BLOCK_WIDTHS: List[int] = list(BLOCK_WIDTHS.keys())

DEFAULT_BLOCK_WIDTH = SUPPORTED_BLOCK_WIDTHS[0]

# Drawing grid (mm)
DEFAULT_SNAP_SIZE = 300
SECONDARY_SNAP_SIZE = 150
