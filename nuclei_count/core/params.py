"""
Detection method parameter data structures.

Defines the fixed per-method settings (smoothing, thresholding,
morphology, Hough voting, candidate gates) and the four default
methods in presentation order.
"""

from __future__ import annotations
from dataclasses import dataclass, field

from .image import InputError

DETECTORS = ("contours", "hough")
THRESHOLD_METHODS = ("otsu", "fixed", "adaptive")


@dataclass(frozen=True)
class FilterParams:
    """Area and border gates applied to every candidate."""

    min_area: float = 30.0
    max_area: float = 2000.0
    border_margin: int = 10


@dataclass(frozen=True)
class HoughParams:
    """Gradient Hough circle voting settings (empirically tuned defaults)."""

    dp: float = 1.0
    min_dist: float = 20.0
    param1: float = 50.0    # Canny high threshold
    param2: float = 30.0    # accumulator threshold
    min_radius: int = 5
    max_radius: int = 50


@dataclass(frozen=True)
class MethodParams:
    """Configuration of a single detection method."""

    method_id: str
    label: str

    # "contours" | "hough"
    detector: str = "contours"

    # Smoothing
    blur_ksize: int = 5
    blur_sigma: float = 1.0

    # Thresholding ("otsu" | "fixed" | "adaptive")
    threshold: str = "otsu"
    fixed_level: int = 80
    block_size: int = 11
    block_c: float = 2.0

    # Morphology
    open_ksize: int = 3

    hough: HoughParams = field(default_factory=HoughParams)
    filters: FilterParams = field(default_factory=FilterParams)

    # Overlay colour (RGB)
    color: tuple[int, int, int] = (0, 255, 0)

    def validate(self) -> None:
        """Raise ValueError for settings no pipeline stage can honour."""
        if self.detector not in DETECTORS:
            raise ValueError(f"Unknown detector {self.detector!r}")
        if self.detector == "contours" and self.threshold not in THRESHOLD_METHODS:
            raise ValueError(f"Unknown threshold method {self.threshold!r}")
        for name in ("blur_ksize", "block_size", "open_ksize"):
            k = getattr(self, name)
            if k <= 0 or k % 2 == 0:
                raise ValueError(f"{name} must be a positive odd integer, got {k}")
        if self.blur_sigma <= 0:
            raise ValueError("blur_sigma must be positive")
        f = self.filters
        if f.min_area < 0 or f.max_area < f.min_area:
            raise ValueError(f"Invalid area range [{f.min_area}, {f.max_area}]")
        if f.border_margin < 0:
            raise ValueError("border_margin must be >= 0")
        h = self.hough
        if h.dp <= 0 or h.min_dist <= 0:
            raise ValueError("Hough dp and min_dist must be positive")
        if h.min_radius < 0 or (h.max_radius and h.max_radius < h.min_radius):
            raise ValueError(f"Invalid radius range [{h.min_radius}, {h.max_radius}]")


DEFAULT_METHODS: tuple[MethodParams, ...] = (
    MethodParams("otsu", "Otsu Threshold", threshold="otsu", color=(0, 255, 0)),
    MethodParams("fixed", "Simple Thresholding", threshold="fixed", color=(255, 0, 0)),
    MethodParams("hough", "Blob Detection", detector="hough",
                 blur_ksize=9, blur_sigma=2.0, color=(0, 0, 255)),
    MethodParams("adaptive", "Adaptive Thresholding", threshold="adaptive", color=(255, 255, 0)),
)


def get_method(method_id: str, configs: tuple[MethodParams, ...] = DEFAULT_METHODS) -> MethodParams:
    """Return the configuration registered under method_id."""
    for p in configs:
        if p.method_id == method_id:
            return p
    known = ", ".join(p.method_id for p in configs)
    raise InputError(f"Unknown method {method_id!r} (known: {known})")
