"""Line id factories. The editor takes one as a dependency."""

from __future__ import annotations

import itertools
import uuid
from typing import Callable

IdFactory = Callable[[], str]


def make_id_factory(prefix: str = "line") -> IdFactory:
    """Random ids: ``{prefix}-{uuid4}``."""

    def _next_id() -> str:
        return f"{prefix}-{uuid.uuid4()}"

    return _next_id


def sequential_id_factory(prefix: str = "line", start: int = 1) -> IdFactory:
    """Deterministic ids: ``{prefix}-1``, ``{prefix}-2``, ..."""
    counter = itertools.count(start)

    def _next_id() -> str:
        return f"{prefix}-{next(counter)}"

    return _next_id
