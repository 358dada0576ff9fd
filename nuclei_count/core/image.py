"""
Image acquisition utilities.

Provides the immutable RasterBuffer wrapper and robust decoding of
files and in-memory uploads (OpenCV first, Pillow as fallback).
"""

from __future__ import annotations
import io
from dataclasses import dataclass
from pathlib import Path
from typing import Union

import cv2
import numpy as np
from PIL import Image, UnidentifiedImageError


class InputError(ValueError):
    """Image missing, empty or not image data; fatal to the whole run."""


def _normalize_dtype(arr: np.ndarray) -> np.ndarray:
    if arr.dtype == np.uint8:
        return arr
    if arr.dtype == np.bool_:
        return arr.astype(np.uint8) * 255
    if arr.dtype == np.uint16:
        return cv2.normalize(arr, None, 0, 255, cv2.NORM_MINMAX).astype(np.uint8)
    raise InputError(f"Unsupported pixel dtype {arr.dtype}")


@dataclass(frozen=True, eq=False)
class RasterBuffer:
    """Read-only 8-bit raster, shape (H, W) or (H, W, C) with C in {1, 3, 4}, RGB(A) order."""

    pixels: np.ndarray

    def __post_init__(self) -> None:
        arr = self.pixels
        if not isinstance(arr, np.ndarray):
            raise InputError(f"Expected a numpy array, got {type(arr).__name__}")
        if arr.ndim == 3 and arr.shape[2] == 1:
            arr = arr[:, :, 0]
        if arr.ndim not in (2, 3) or (arr.ndim == 3 and arr.shape[2] not in (3, 4)):
            raise InputError(f"Not an image array: shape {arr.shape}")
        if arr.shape[0] == 0 or arr.shape[1] == 0:
            raise InputError(f"Zero-dimension image: shape {arr.shape}")
        arr = np.array(_normalize_dtype(arr), copy=True)
        arr.setflags(write=False)
        object.__setattr__(self, "pixels", arr)

    @property
    def height(self) -> int:
        return int(self.pixels.shape[0])

    @property
    def width(self) -> int:
        return int(self.pixels.shape[1])

    @property
    def channels(self) -> int:
        return 1 if self.pixels.ndim == 2 else int(self.pixels.shape[2])

    @property
    def shape(self) -> tuple[int, int]:
        return self.height, self.width


def _from_cv2(img: np.ndarray) -> RasterBuffer:
    # OpenCV decodes colour as BGR(A)
    if img.ndim == 3 and img.shape[2] == 3:
        img = cv2.cvtColor(img, cv2.COLOR_BGR2RGB)
    elif img.ndim == 3 and img.shape[2] == 4:
        img = cv2.cvtColor(img, cv2.COLOR_BGRA2RGBA)
    return RasterBuffer(img)


def _from_pil(pil: Image.Image) -> RasterBuffer:
    if pil.mode not in ("L", "RGB", "RGBA", "I;16", "I;16B", "I;16L"):
        pil = pil.convert("RGBA" if "A" in pil.getbands() else "RGB")
    return RasterBuffer(np.array(pil))


def load_image(path: Union[str, Path]) -> RasterBuffer:
    """Read an image file into a RasterBuffer."""
    p = Path(path)
    if not p.is_file():
        raise InputError(f"Image not found: {p}")
    img = cv2.imread(str(p), cv2.IMREAD_UNCHANGED)
    if img is not None:
        return _from_cv2(img)
    # Fallback: use Pillow if OpenCV fails
    try:
        with Image.open(p) as pil:
            return _from_pil(pil)
    except (UnidentifiedImageError, OSError) as e:
        raise InputError(f"Cannot decode image {p}: {e}") from e


def decode_image(data: bytes) -> RasterBuffer:
    """Decode an uploaded image (encoded bytes) into a RasterBuffer."""
    if not data:
        raise InputError("Empty image data")
    buf = np.frombuffer(data, dtype=np.uint8)
    img = cv2.imdecode(buf, cv2.IMREAD_UNCHANGED)
    if img is not None:
        return _from_cv2(img)
    try:
        with Image.open(io.BytesIO(data)) as pil:
            return _from_pil(pil)
    except (UnidentifiedImageError, OSError) as e:
        raise InputError(f"Cannot decode image data: {e}") from e


def as_raster(image: Union[RasterBuffer, np.ndarray, None]) -> RasterBuffer:
    """Coerce caller input to a RasterBuffer, rejecting missing images."""
    if image is None:
        raise InputError("No image supplied")
    if isinstance(image, RasterBuffer):
        return image
    return RasterBuffer(image)
