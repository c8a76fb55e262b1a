"""
Shared test fixtures for span allocation and inner-band tests.
"""
import sys
from pathlib import Path

import pytest

# Add src/ to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from scaffold_spans.contracts import ScaffoldLine, Span
from scaffold_spans.editor import LineEditor
from scaffold_spans.ids import sequential_id_factory


@pytest.fixture
def horizontal_line():
    """A 3600mm red line drawn left-to-right."""
    return ScaffoldLine(
        id="line-1",
        start=(0.0, 0.0),
        end=(3600.0, 0.0),
        color="red",
    )


@pytest.fixture
def vertical_line():
    """A 9300mm blue line drawn downward (+y)."""
    return ScaffoldLine(
        id="line-long",
        start=(0.0, 0.0),
        end=(0.0, 9300.0),
        color="blue",
    )


@pytest.fixture
def vertical_up_line():
    """A 1200mm line drawn bottom-to-top on screen (y decreasing)."""
    return ScaffoldLine(
        id="vertical-up",
        start=(0.0, 1200.0),
        end=(0.0, 0.0),
    )


@pytest.fixture
def diagonal_line():
    """A 3600mm diagonal line along the 3-4-5 direction."""
    return ScaffoldLine(
        id="line-diagonal",
        start=(0.0, 0.0),
        end=(2160.0, 2880.0),
        block_width=355,
    )


@pytest.fixture
def two_spans():
    """Spans of a 3000mm horizontal line split 1800 + 1200."""
    return [
        Span(id="line-1-span-1", line_id="line-1", index=0, length=1800.0,
             start=(0.0, 0.0), end=(1800.0, 0.0)),
        Span(id="line-1-span-2", line_id="line-1", index=1, length=1200.0,
             start=(1800.0, 0.0), end=(3000.0, 0.0)),
    ]


@pytest.fixture
def editor():
    """LineEditor with deterministic ids line-1, line-2, ..."""
    return LineEditor(id_factory=sequential_id_factory("line"))
