"""Animation stage contracts.

Enforces the guarantees of the decoder output and of the frame capture
store handed to the encoder.
"""

from typing import TYPE_CHECKING, Sequence

import numpy as np

from stipple.contracts.base import require
from stipple.contracts.raster import assert_raster

if TYPE_CHECKING:
    from stipple.media.decoder import DecodedAnimation


def assert_decoded(animation: "DecodedAnimation") -> None:
    """Enforce decode stage contract.

    Called immediately after decoding. Verifies the logical canvas has a
    usable size, at least one frame exists and every patch is a raster
    placed at a non-negative offset.

    Raises
    ------
    ContractViolation
        If any invariant is violated
    """
    require(
        animation.width > 0 and animation.height > 0,
        f"Decode contract violated: logical canvas is {animation.width}x{animation.height}"
    )
    require(
        len(animation.frames) > 0,
        "Decode contract violated: no frames decoded"
    )
    for index, frame in enumerate(animation.frames):
        assert_raster(frame.patch, f"frame {index} patch")
        require(
            frame.offset_x >= 0 and frame.offset_y >= 0,
            f"Decode contract violated: frame {index} has negative offset "
            f"({frame.offset_x}, {frame.offset_y})"
        )
        require(
            frame.delay_ticks >= 0,
            f"Decode contract violated: frame {index} has negative delay {frame.delay_ticks}"
        )


def assert_captured(frames: Sequence[np.ndarray]) -> None:
    """Enforce capture contract before encoding.

    All captured rasters must share the size of the first one, since the
    encoder writes a single logical screen.
    """
    require(len(frames) > 0, "Capture contract violated: no frames to encode")
    first = frames[0]
    assert_raster(first, "captured frame 0")
    for index, frame in enumerate(frames[1:], start=1):
        assert_raster(frame, f"captured frame {index}")
        require(
            frame.shape == first.shape,
            f"Capture contract violated: frame {index} is {frame.shape[1]}x{frame.shape[0]}, "
            f"expected {first.shape[1]}x{first.shape[0]}"
        )
