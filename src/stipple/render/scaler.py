"""Fit a source raster inside the preview container.

The fitted size preserves the source aspect ratio, never upscales beyond
the native resolution and never exceeds the hard canvas cap.
"""

import math
from typing import Tuple

from stipple.contracts import require

__all__ = ['fit', 'container_is_usable']


def container_is_usable(container_width: int, container_height: int) -> bool:
    """True when a container can host a fitted raster.

    A zero-sized container (collapsed or hidden preview) is a no-op for
    every caller, not an error.
    """
    return container_width > 0 and container_height > 0


def fit(source_width: int, source_height: int,
        container_width: int, container_height: int,
        max_canvas_size: int) -> Tuple[int, int]:
    """Compute the output size of a source inside a container.

    Parameters
    ----------
    source_width, source_height : int
        Native size of the source raster.
    container_width, container_height : int
        Live size of the preview container. Must be positive.
    max_canvas_size : int
        Hard cap applied to both axes (4096 by default).

    Returns
    -------
    tuple of int
        ``(out_width, out_height)``, both floored. Either may be 0 for very
        thin sources in a small container; callers skip such frames.

    Raises
    ------
    ContractViolation
        If the container or the source has a non-positive dimension.

    Examples
    --------
    >>> fit(1000, 500, 400, 400, 4096)
    (400, 200)
    >>> fit(100, 50, 800, 600, 4096)
    (100, 50)
    """
    require(
        source_width > 0 and source_height > 0,
        f"Scaler contract violated: source is {source_width}x{source_height}"
    )
    require(
        container_is_usable(container_width, container_height),
        f"Scaler contract violated: container is {container_width}x{container_height}"
    )

    scale = min(max_canvas_size / source_width, max_canvas_size / source_height, 1)

    image_aspect = source_width / source_height
    container_aspect = container_width / container_height
    if image_aspect > container_aspect:
        width = min(container_width, source_width * scale)
        height = width / image_aspect
    else:
        height = min(container_height, source_height * scale)
        width = height * image_aspect

    return math.floor(width), math.floor(height)
