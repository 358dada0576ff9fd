"""
Candidate gating by area and distance from the image border.

Regions and circles share the same interface (``area`` and an
axis-aligned ``bbox``), so both gates apply to either shape.
"""

from __future__ import annotations
from typing import Iterable, List, Union

from .hough import Circle
from .params import FilterParams
from .regions import Region

Candidate = Union[Region, Circle]


def passes_area_gate(c: Candidate, filters: FilterParams) -> bool:
    """True when min_area <= area <= max_area."""
    return filters.min_area <= c.area <= filters.max_area


def passes_border_gate(c: Candidate, shape: tuple[int, int], filters: FilterParams) -> bool:
    """True when the candidate's extent stays at least border_margin px inside the frame."""
    H, W = shape
    m = filters.border_margin
    x, y, w, h = c.bbox
    return not (x < m or y < m or x + w > W - m or y + h > H - m)


def filter_candidates(
    candidates: Iterable[Candidate],
    shape: tuple[int, int],
    filters: FilterParams | None = None,
) -> List[Candidate]:
    """Keep candidates that pass both gates, preserving input order."""
    f = filters or FilterParams()
    return [c for c in candidates
            if passes_area_gate(c, f) and passes_border_gate(c, shape, f)]
