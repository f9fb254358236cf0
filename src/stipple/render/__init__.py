"""Rendering modules.

- scaler: Fit a source inside the preview container
- raster: RGBA array helpers (Pillow bridge, resample, flatten)
- dot_transform: Block-sampling dot effect
- still: Still image processor
"""

from stipple.render.scaler import fit
from stipple.render.dot_transform import render
from stipple.render.still import StillImageProcessor

__all__ = [
    "fit",
    "render",
    "StillImageProcessor",
]
