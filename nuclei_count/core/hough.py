"""
Threshold-free circle detection via the gradient Hough transform.

Votes are accumulated over (x, y, r) from Canny edge evidence of the
smoothed grayscale image. Unlike the contour methods, touching blobs
can be reported as separate circles; counts may therefore legitimately
differ from the threshold-based methods on crowded images.
"""

from __future__ import annotations
from dataclasses import dataclass
import math
from typing import List
import cv2
import numpy as np

from .params import HoughParams


@dataclass(frozen=True)
class Circle:
    """A detected circle with floating-point center and radius."""

    x: float
    y: float
    radius: float

    @property
    def area(self) -> float:
        return math.pi * self.radius * self.radius

    @property
    def bbox(self) -> tuple[float, float, float, float]:
        r = self.radius
        return self.x - r, self.y - r, 2.0 * r, 2.0 * r


def detect_circles(smoothed: np.ndarray, params: HoughParams | None = None) -> List[Circle]:
    """Run HoughCircles (HOUGH_GRADIENT) on an 8-bit smoothed image."""
    p = params or HoughParams()
    img = np.ascontiguousarray(smoothed, dtype=np.uint8)
    cir = cv2.HoughCircles(
        img, cv2.HOUGH_GRADIENT, dp=p.dp, minDist=p.min_dist,
        param1=p.param1, param2=p.param2,
        minRadius=int(p.min_radius), maxRadius=int(p.max_radius),
    )
    if cir is None:
        return []
    return [Circle(float(x), float(y), float(r)) for x, y, r in cir[0][:, :3]]
