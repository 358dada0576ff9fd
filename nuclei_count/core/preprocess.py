"""
Grayscale conversion and Gaussian smoothing.

Colour input is reduced with the ITU-R BT.601 luminance weights
(cv2 RGB2GRAY). Smoothing uses a separable Gaussian kernel with
reflect-101 border handling (gfedcb|abcdefgh|gfedcba).
"""

from __future__ import annotations
import cv2
import numpy as np

from .image import RasterBuffer

BORDER_MODE = cv2.BORDER_REFLECT_101


def to_gray(raster: RasterBuffer) -> np.ndarray:
    """Return a read-only single-channel uint8 view of the raster."""
    px = raster.pixels
    if px.ndim == 2:
        return px
    code = cv2.COLOR_RGBA2GRAY if px.shape[2] == 4 else cv2.COLOR_RGB2GRAY
    gray = cv2.cvtColor(px, code)
    gray.setflags(write=False)
    return gray


def gaussian_smooth(gray: np.ndarray, ksize: int, sigma: float) -> np.ndarray:
    """Separable Gaussian blur with an odd square kernel."""
    if ksize <= 0 or ksize % 2 == 0:
        raise ValueError(f"Gaussian kernel size must be odd and positive, got {ksize}")
    return cv2.GaussianBlur(gray, (ksize, ksize), sigmaX=sigma, sigmaY=sigma,
                            borderType=BORDER_MODE)


def preprocess(raster: RasterBuffer, ksize: int = 5, sigma: float = 1.0) -> np.ndarray:
    """Grayscale conversion followed by Gaussian smoothing."""
    return gaussian_smooth(to_gray(raster), ksize, sigma)
