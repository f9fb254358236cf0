"""RGBA raster helpers.

A raster is a ``numpy`` array of shape ``(height, width, 4)`` and dtype
``uint8``. Pillow is used at the edges: converting decoded images into
rasters, resampling, and handing rasters back to encoders.
"""

import logging
from typing import Tuple, Union

import numpy as np
from PIL import Image

from stipple.contracts import assert_raster

__all__ = ['RESAMPLE_FILTERS', 'new_raster', 'to_raster', 'to_image', 'resample', 'flatten']

logger = logging.getLogger(__name__)

RESAMPLE_FILTERS = {
    "nearest": Image.Resampling.NEAREST,
    "box": Image.Resampling.BOX,
    "bilinear": Image.Resampling.BILINEAR,
    "bicubic": Image.Resampling.BICUBIC,
    "lanczos": Image.Resampling.LANCZOS,
}


def new_raster(width: int, height: int,
               color: Tuple[int, int, int, int] = (0, 0, 0, 0)) -> np.ndarray:
    """Allocate a raster filled with a single RGBA color."""
    raster = np.empty((height, width, 4), dtype=np.uint8)
    raster[...] = color
    return raster


def to_raster(image: Union[Image.Image, np.ndarray]) -> np.ndarray:
    """Convert a Pillow image or an array into a new RGBA raster.

    Arrays may be grayscale ``(h, w)``, RGB ``(h, w, 3)`` or RGBA
    ``(h, w, 4)``; missing alpha is filled with 255.
    """
    if isinstance(image, Image.Image):
        raster = np.array(image.convert("RGBA"), dtype=np.uint8)
    else:
        arr = np.asarray(image)
        if arr.dtype != np.uint8:
            arr = np.clip(arr, 0, 255).astype(np.uint8)
        if arr.ndim == 2:
            arr = np.stack([arr, arr, arr], axis=-1)
        if arr.ndim == 3 and arr.shape[2] == 3:
            alpha = np.full(arr.shape[:2] + (1,), 255, dtype=np.uint8)
            arr = np.concatenate([arr, alpha], axis=-1)
        raster = np.array(arr, dtype=np.uint8, copy=True)

    raster = np.ascontiguousarray(raster)
    assert_raster(raster)
    return raster


def to_image(raster: np.ndarray) -> Image.Image:
    """Wrap a raster as a Pillow RGBA image (copies the buffer)."""
    assert_raster(raster)
    return Image.fromarray(np.ascontiguousarray(raster))


def resample(raster: np.ndarray, width: int, height: int,
             method: str = "bilinear") -> np.ndarray:
    """Draw a raster into a ``width`` x ``height`` raster.

    Same-size requests return a copy without resampling.
    """
    assert_raster(raster)
    if raster.shape[1] == width and raster.shape[0] == height:
        return raster.copy()

    resized = to_image(raster).resize((width, height), RESAMPLE_FILTERS[method])
    logger.debug("Resampled %dx%d -> %dx%d (%s)",
                 raster.shape[1], raster.shape[0], width, height, method)
    return np.array(resized, dtype=np.uint8)


def flatten(raster: np.ndarray) -> np.ndarray:
    """Composite a raster onto a cleared (transparent black) canvas.

    Fully transparent pixels lose their color and read back as
    ``(0, 0, 0, 0)``, so they count as black in brightness sampling.
    Partially transparent pixels keep their un-premultiplied color.
    """
    assert_raster(raster)
    out = raster.copy()
    out[out[..., 3] == 0] = 0
    return out
