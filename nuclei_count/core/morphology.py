"""
Binary morphology: opening with a small elliptical element.
"""

from __future__ import annotations
import cv2
import numpy as np


def check_mask(mask: np.ndarray, shape: tuple[int, int]) -> None:
    """Raise ValueError unless mask is a 2-D array of the given shape."""
    if not isinstance(mask, np.ndarray) or mask.ndim != 2:
        raise ValueError("Binary mask must be a 2-D array")
    if mask.shape != tuple(shape):
        raise ValueError(f"Mask shape {mask.shape} does not match image shape {tuple(shape)}")


def morph_open(mask: np.ndarray, ksize: int = 3) -> np.ndarray:
    """Erosion then dilation with an ellipse ksize×ksize; returns a new boolean mask."""
    if ksize <= 0 or ksize % 2 == 0:
        raise ValueError(f"Structuring element size must be odd and positive, got {ksize}")
    bw = (mask > 0).astype(np.uint8) * 255
    ker = cv2.getStructuringElement(cv2.MORPH_ELLIPSE, (ksize, ksize))
    opened = cv2.morphologyEx(bw, cv2.MORPH_OPEN, ker, iterations=1)
    return opened > 0
