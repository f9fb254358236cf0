"""Block-sampling dot transform.

Divides a raster into a grid of square blocks, maps each block's average
brightness to a filled circle and renders the circles onto a solid
background of the same size.

The same function is applied to still images and to every animation frame.
"""

import logging
import math
from typing import Tuple

import numpy as np

from stipple.contracts import assert_raster, assert_same_shape

__all__ = ['render', 'block_brightness', 'palette', 'BLACK', 'WHITE']

logger = logging.getLogger(__name__)

BLACK = (0, 0, 0, 255)
WHITE = (255, 255, 255, 255)


def palette(dark_background: bool) -> Tuple[Tuple[int, int, int, int], Tuple[int, int, int, int]]:
    """Return ``(background, dot)`` colors."""
    if dark_background:
        return BLACK, WHITE
    return WHITE, BLACK


def block_brightness(pixels: np.ndarray, block_size: int, step: int):
    """Sum channel values over every grid block.

    Blocks start at multiples of ``step`` on both axes and cover
    ``block_size`` pixels, clipped at the raster edge.

    Parameters
    ----------
    pixels : np.ndarray
        RGBA raster, alpha is ignored.
    block_size : int
        Edge length of a block.
    step : int
        Distance between block origins (block_size + spacing).

    Returns
    -------
    xs, ys : np.ndarray
        Block origins along x and y.
    totals : np.ndarray
        ``(len(ys), len(xs))`` int64 sums of R+G+B over the in-bounds pixels.
    counts : np.ndarray
        ``(len(ys), len(xs))`` number of in-bounds pixels per block.
    """
    height, width = pixels.shape[:2]
    xs = np.arange(0, width, step, dtype=np.int64)
    ys = np.arange(0, height, step, dtype=np.int64)

    # Summed-area table with a zero row/column in front
    channel_sum = pixels[..., :3].sum(axis=2, dtype=np.int64)
    table = np.zeros((height + 1, width + 1), dtype=np.int64)
    table[1:, 1:] = channel_sum.cumsum(axis=0).cumsum(axis=1)

    x1 = np.minimum(xs + block_size, width)
    y1 = np.minimum(ys + block_size, height)

    totals = (table[np.ix_(y1, x1)] - table[np.ix_(ys, x1)]
              - table[np.ix_(y1, xs)] + table[np.ix_(ys, xs)])
    counts = np.outer(y1 - ys, x1 - xs)
    return xs, ys, totals, counts


def _fill_disk(out: np.ndarray, cx: float, cy: float, radius: float, color) -> None:
    """Paint pixels whose centre lies strictly inside the circle."""
    height, width = out.shape[:2]
    x0 = max(0, math.floor(cx - radius))
    x1 = min(width, math.ceil(cx + radius))
    y0 = max(0, math.floor(cy - radius))
    y1 = min(height, math.ceil(cy + radius))
    if x0 >= x1 or y0 >= y1:
        return

    px = np.arange(x0, x1) + 0.5 - cx
    py = np.arange(y0, y1) + 0.5 - cy
    inside = (py[:, None] ** 2 + px[None, :] ** 2) < radius * radius
    out[y0:y1, x0:x1][inside] = color


def render(pixels: np.ndarray, params) -> np.ndarray:
    """Render the dot effect of a raster.

    Parameters
    ----------
    pixels : np.ndarray
        RGBA raster ``(height, width, 4)``.
    params : DotParameters
        Parameter snapshot (block size, max radius, spacing, threshold,
        background).

    Returns
    -------
    np.ndarray
        New raster of the same shape: background fill plus one circle per
        block brighter than the threshold.

    Notes
    -----
    A block draws a circle of radius ``max_radius * avg / 255`` centred at
    ``(x + block_size / 2, y + block_size / 2)`` only when
    ``avg > threshold_percent * 2.55``, where ``avg`` is the mean of
    ``(R + G + B) / 3`` over the block. The comparison is done on integer
    sums, ``sum_rgb * 100 > threshold_percent * 255 * 3 * count``, so the
    boundary is exact: a block at exactly the cutoff draws nothing.

    Examples
    --------
    >>> white = new_raster(16, 16, (255, 255, 255, 255))
    >>> out = render(white, DotParameters(block_size=8, max_radius=4, spacing=0,
    ...                                   threshold_percent=0, dark_background=False))
    >>> tuple(out[4, 4]), tuple(out[0, 0])
    ((0, 0, 0, 255), (255, 255, 255, 255))
    """
    assert_raster(pixels, "input")
    background, dot = palette(params.dark_background)

    out = np.empty_like(pixels)
    out[...] = background

    block_size = params.block_size
    xs, ys, totals, counts = block_brightness(pixels, block_size, params.step)

    cutoff = params.threshold_percent * 255 * 3 * counts
    drawn = (counts > 0) & (totals * 100 > cutoff)

    half = block_size / 2
    for j, i in zip(*np.nonzero(drawn)):
        avg = totals[j, i] / (3 * counts[j, i])
        radius = params.max_radius * avg / 255
        _fill_disk(out, xs[i] + half, ys[j] + half, radius, dot)

    logger.debug("Dot transform %dx%d: %d/%d blocks drawn (block=%d, step=%d)",
                 pixels.shape[1], pixels.shape[0], int(drawn.sum()), drawn.size,
                 block_size, params.step)

    assert_same_shape(out, pixels)
    return out
