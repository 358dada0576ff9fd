"""
Annotated visualization of accepted candidates.
"""

from __future__ import annotations
from typing import Sequence
import cv2
import numpy as np

from .candidates import Candidate
from .hough import Circle


def draw_overlay(
    gray: np.ndarray,
    candidates: Sequence[Candidate],
    color: tuple[int, int, int] = (0, 255, 0),
    thickness: int = 2,
) -> np.ndarray:
    """Return an RGB copy of gray with region outlines / circles drawn in color."""
    out = cv2.cvtColor(np.ascontiguousarray(gray, dtype=np.uint8), cv2.COLOR_GRAY2RGB)
    contours = [c.contour for c in candidates if not isinstance(c, Circle)]
    if contours:
        cv2.drawContours(out, contours, -1, color, thickness)
    for c in candidates:
        if isinstance(c, Circle):
            cv2.circle(out, (int(round(c.x)), int(round(c.y))), int(round(c.radius)),
                       color, thickness)
    out.setflags(write=False)
    return out
