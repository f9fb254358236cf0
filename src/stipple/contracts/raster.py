"""Raster contracts.

A raster is an RGBA ``uint8`` array shaped ``(height, width, 4)``, so its
buffer length is always ``width * height * 4``.
"""

import numpy as np
from stipple.contracts.base import require


def assert_raster(raster: np.ndarray, name: str = "raster") -> None:
    """Enforce the raster layout.

    Parameters
    ----------
    raster : np.ndarray
        Candidate raster
    name : str
        Label used in the violation message

    Raises
    ------
    ContractViolation
        If the array is not an RGBA uint8 image
    """
    require(
        isinstance(raster, np.ndarray),
        f"Raster contract violated: {name} is {type(raster).__name__}, expected ndarray"
    )
    require(
        raster.ndim == 3 and raster.shape[2] == 4,
        f"Raster contract violated: {name} has shape {raster.shape}, expected (height, width, 4)"
    )
    require(
        raster.dtype == np.uint8,
        f"Raster contract violated: {name} has dtype {raster.dtype}, expected uint8"
    )


def assert_same_shape(output: np.ndarray, source: np.ndarray) -> None:
    """Enforce that a transform preserved the raster dimensions."""
    assert_raster(output, "output")
    require(
        output.shape == source.shape,
        f"Transform contract violated: output shape {output.shape} != input shape {source.shape}"
    )
