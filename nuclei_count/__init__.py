"""
Nuclei counting in 2-D microscopy images.

Runs several independent detection methods (Otsu, fixed and adaptive
thresholding with contour extraction, and Hough circle voting) over the
same image and reports per-method counts, timings and overlays.
"""

from .core import DEFAULT_METHODS, InputError, MethodParams, RasterBuffer, decode_image, load_image
from .pipeline import MethodResult, MethodState, build_export, count_nuclei, summarize_counts

__version__ = "0.1.0"

__all__ = [
    "DEFAULT_METHODS", "InputError", "MethodParams", "RasterBuffer", "decode_image", "load_image",
    "MethodResult", "MethodState", "build_export", "count_nuclei", "summarize_counts",
]
