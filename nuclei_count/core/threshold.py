"""
Binarization strategies.

- Global Otsu (histogram, between-class variance, lowest t on ties)
- Fixed level
- Local adaptive (Gaussian-weighted neighbourhood mean minus C)

All strategies mark foreground as ``sample >= threshold`` and return
a boolean mask of the input shape.
"""

from __future__ import annotations
from typing import Callable, Dict, Optional
import cv2
import numpy as np

from .params import MethodParams


def otsu_threshold(gray: np.ndarray) -> Optional[int]:
    """
    Compute Otsu's threshold t* for an 8-bit image.

    Classes are [0, t) and [t, 255]; t* maximizes
    w0·w1·(μ0 − μ1)² over t in 1..255. Returns None when the
    histogram has a single populated bin (no split exists).
    """
    hist = np.bincount(np.asarray(gray, np.uint8).ravel(), minlength=256).astype(np.float64)
    total = hist.sum()
    if total == 0:
        return None
    levels = np.arange(256, dtype=np.float64)

    # Cumulative counts / first moments of the lower class for t = 1..255
    n0 = np.cumsum(hist)[:-1]
    m0 = np.cumsum(hist * levels)[:-1]
    n1 = total - n0
    m_total = float((hist * levels).sum())

    valid = (n0 > 0) & (n1 > 0)
    if not valid.any():
        return None
    sigma_b = np.zeros(255, np.float64)
    w0 = n0[valid] / total
    w1 = n1[valid] / total
    mu0 = m0[valid] / n0[valid]
    mu1 = (m_total - m0[valid]) / n1[valid]
    sigma_b[valid] = w0 * w1 * (mu0 - mu1) ** 2
    if sigma_b.max() <= 0:
        return None
    return int(np.argmax(sigma_b)) + 1  # argmax keeps the lowest t on ties


def threshold_otsu(gray: np.ndarray, params: Optional[MethodParams] = None) -> np.ndarray:
    """Otsu binarization; a constant image is all background."""
    t = otsu_threshold(gray)
    if t is None:
        return np.zeros(gray.shape, bool)
    return gray >= t


def threshold_fixed(gray: np.ndarray, params: Optional[MethodParams] = None) -> np.ndarray:
    """Foreground where sample >= fixed_level (80 by default)."""
    level = params.fixed_level if params is not None else 80
    return gray >= level


def threshold_adaptive(gray: np.ndarray, params: Optional[MethodParams] = None) -> np.ndarray:
    """
    Foreground where sample >= (Gaussian-weighted local mean − C).

    The local mean is a windowed convolution over a block_size × block_size
    neighbourhood (σ = 0.3·((block_size − 1)·0.5 − 1) + 0.8, replicated
    border), so the cost is linear in the pixel count.
    """
    block_size = params.block_size if params is not None else 11
    C = params.block_c if params is not None else 2.0
    if block_size < 3 or block_size % 2 == 0:
        raise ValueError(f"block_size must be odd and >= 3, got {block_size}")
    src = np.asarray(gray, np.float32)
    local_mean = cv2.GaussianBlur(src, (block_size, block_size), 0,
                                  borderType=cv2.BORDER_REPLICATE)
    return src >= (local_mean - float(C))


THRESHOLDERS: Dict[str, Callable[[np.ndarray, Optional[MethodParams]], np.ndarray]] = {
    "otsu": threshold_otsu,
    "fixed": threshold_fixed,
    "adaptive": threshold_adaptive,
}


def apply_threshold(gray: np.ndarray, params: MethodParams) -> np.ndarray:
    """Dispatch to the strategy named by params.threshold."""
    try:
        fn = THRESHOLDERS[params.threshold]
    except KeyError:
        raise ValueError(f"Unknown threshold method {params.threshold!r}") from None
    return fn(gray, params)
