# Public API of the core package (re-export)
from .image import (
    InputError,
    RasterBuffer,
    as_raster,
    load_image,
    decode_image,
)
from .params import (
    FilterParams,
    HoughParams,
    MethodParams,
    DEFAULT_METHODS,
    get_method,
)
from .preprocess import (
    to_gray,
    gaussian_smooth,
    preprocess,
)
from .threshold import (
    otsu_threshold,
    threshold_otsu,
    threshold_fixed,
    threshold_adaptive,
    apply_threshold,
    THRESHOLDERS,
)
from .morphology import (
    check_mask,
    morph_open,
)
from .regions import (
    Region,
    enclosed_area,
    extract_regions,
)
from .hough import (
    Circle,
    detect_circles,
)
from .candidates import (
    Candidate,
    passes_area_gate,
    passes_border_gate,
    filter_candidates,
)
from .overlay import draw_overlay

__all__ = [
    # image acquisition
    "InputError", "RasterBuffer", "as_raster", "load_image", "decode_image",
    # params
    "FilterParams", "HoughParams", "MethodParams", "DEFAULT_METHODS", "get_method",
    # preprocess / threshold
    "to_gray", "gaussian_smooth", "preprocess",
    "otsu_threshold", "threshold_otsu", "threshold_fixed", "threshold_adaptive",
    "apply_threshold", "THRESHOLDERS",
    # morphology & regions
    "check_mask", "morph_open", "Region", "enclosed_area", "extract_regions",
    # circles
    "Circle", "detect_circles",
    # gating & overlay
    "Candidate", "passes_area_gate", "passes_border_gate", "filter_candidates",
    "draw_overlay",
]
