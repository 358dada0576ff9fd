"""
Connected-region extraction from a cleaned binary mask.

Only outermost boundaries are followed (8-connected border following);
holes and anything nested inside them belong to the enclosing region.
Area is the number of pixels enclosed by the outer boundary.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import List
import cv2
import numpy as np


@dataclass(frozen=True, eq=False)
class Region:
    """A connected foreground component."""

    contour: np.ndarray                 # (N, 1, 2) int32 boundary points, OpenCV layout
    area: float                         # enclosed pixel count
    bbox: tuple[int, int, int, int]     # x, y, width, height


def enclosed_area(contour: np.ndarray, bbox: tuple[int, int, int, int]) -> int:
    """Count pixels inside (and on) a closed contour by rasterizing it into its bbox."""
    x, y, w, h = bbox
    roi = np.zeros((h, w), np.uint8)
    cv2.drawContours(roi, [contour], -1, 1, thickness=cv2.FILLED, offset=(-x, -y))
    return int(roi.sum())


def extract_regions(mask: np.ndarray) -> List[Region]:
    """
    Find all outer 8-connected components of a binary mask.

    Args:
        mask: 2-D array, nonzero = foreground.

    Returns:
        One Region per external contour; order is not meaningful.
    """
    bw = (np.asarray(mask) > 0).astype(np.uint8)
    contours, _ = cv2.findContours(bw, cv2.RETR_EXTERNAL, cv2.CHAIN_APPROX_SIMPLE)
    regions: List[Region] = []
    for cnt in contours:
        x, y, w, h = (int(v) for v in cv2.boundingRect(cnt))
        cnt = cnt.copy()
        cnt.setflags(write=False)
        regions.append(Region(contour=cnt, area=float(enclosed_area(cnt, (x, y, w, h))),
                              bbox=(x, y, w, h)))
    return regions
