"""Animated container decoding.

Splits an animated GIF into per-frame patches: the region the frame
updates, its offset on the logical screen, its delay in container ticks
and its disposal hint.
"""

import io
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, Iterator, List, Sequence, Tuple, Union, TYPE_CHECKING

import numpy as np
from PIL import Image, UnidentifiedImageError

from stipple.contracts import assert_decoded
from stipple.errors import DecodeError

if TYPE_CHECKING:
    from stipple.schemas import InternalConfig

__all__ = ['AnimationFrame', 'DecodedAnimation', 'AnimationDecoder', 'logical_size']

logger = logging.getLogger(__name__)

Source = Union[str, Path, bytes, bytearray, BinaryIO]


@dataclass(frozen=True)
class AnimationFrame:
    """One decoded frame of an animated container."""
    patch: np.ndarray
    offset_x: int
    offset_y: int
    delay_ticks: int
    disposal_hint: int = 0

    @property
    def width(self) -> int:
        return self.patch.shape[1]

    @property
    def height(self) -> int:
        return self.patch.shape[0]


@dataclass(frozen=True)
class DecodedAnimation:
    """Ordered frames plus the logical screen size."""
    frames: List[AnimationFrame]
    width: int
    height: int

    def __len__(self) -> int:
        return len(self.frames)


def logical_size(screen_size: Tuple[int, int],
                 frames: Sequence[AnimationFrame]) -> Tuple[int, int]:
    """Logical canvas size of an animation.

    The container's own screen size wins when it is non-empty; otherwise
    the bounding box of all frame placements is used.

    Examples
    --------
    >>> logical_size((0, 0), [AnimationFrame(np.zeros((4, 6, 4), np.uint8), 2, 1, 0)])
    (8, 5)
    """
    width, height = screen_size
    if width > 0 and height > 0:
        return width, height

    width = max((f.offset_x + f.width for f in frames), default=0)
    height = max((f.offset_y + f.height for f in frames), default=0)
    return width, height


def _open(source: Source) -> Image.Image:
    if isinstance(source, (bytes, bytearray)):
        return Image.open(io.BytesIO(bytes(source)))
    return Image.open(source)


class AnimationDecoder:
    """Decode animated containers into frame patches.

    Pillow composites each GIF frame onto the full logical screen; the
    decoder crops that composite back to the frame's update region
    (``dispose_extent``) so compositing downstream stays patch-based.

    Example usage::

        decoder = AnimationDecoder(config)
        animation = decoder.decode("spinner.gif")
        for frame in animation.frames:
            ...
    """

    def __init__(self, config: "InternalConfig"):
        self.tick_ms = config.animation.tick_ms

    def decode(self, source: Source) -> DecodedAnimation:
        """Decode every frame of ``source``.

        Parameters
        ----------
        source : str, Path, bytes or file object
            Animated container.

        Returns
        -------
        DecodedAnimation

        Raises
        ------
        DecodeError
            If the container cannot be parsed or holds no frames.
        """
        try:
            with _open(source) as im:
                screen_size = im.size
                frames = list(self._iter_frames(im))
        except (UnidentifiedImageError, Image.DecompressionBombError,
                OSError, EOFError, SyntaxError, ValueError) as e:
            raise DecodeError(f"Could not decode animation: {e}") from e

        if not frames:
            raise DecodeError("Could not decode animation: container holds no frames")

        width, height = logical_size(screen_size, frames)
        if width == 0 or height == 0:
            raise DecodeError(f"Could not decode animation: logical screen is {width}x{height}")

        animation = DecodedAnimation(frames=frames, width=width, height=height)
        assert_decoded(animation)

        logger.info("Decoded animation %dx%d with %d frames", width, height, len(frames))
        return animation

    def _iter_frames(self, im: Image.Image) -> Iterator[AnimationFrame]:
        for index in range(getattr(im, "n_frames", 1)):
            im.seek(index)
            full = im.convert("RGBA")
            x0, y0, x1, y1 = self._frame_extent(im, full.size)

            duration = im.info.get("duration") or 0
            delay_ticks = int(round(duration / self.tick_ms))
            disposal = getattr(im, "disposal_method", 0) or 0

            patch = np.array(full.crop((x0, y0, x1, y1)), dtype=np.uint8)
            logger.debug("Frame %d: patch %dx%d at (%d, %d), delay %d ticks, disposal %d",
                         index, x1 - x0, y1 - y0, x0, y0, delay_ticks, disposal)

            yield AnimationFrame(
                patch=np.ascontiguousarray(patch),
                offset_x=x0,
                offset_y=y0,
                delay_ticks=delay_ticks,
                disposal_hint=int(disposal),
            )

    @staticmethod
    def _frame_extent(im: Image.Image, size: Tuple[int, int]) -> Tuple[int, int, int, int]:
        """Update region of the current frame, clipped to the screen."""
        width, height = size
        extent = getattr(im, "dispose_extent", None) or (0, 0, width, height)
        x0, y0, x1, y1 = (int(v) for v in extent)
        x0 = min(max(0, x0), width)
        y0 = min(max(0, y0), height)
        x1 = min(max(x0, x1), width)
        y1 = min(max(y0, y1), height)
        return x0, y0, x1, y1
