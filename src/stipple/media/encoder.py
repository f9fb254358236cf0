"""Background GIF encoding of captured frames.

Encoding never runs on the caller's thread: ``request_encode`` submits a
job to a single-slot executor and returns a ``Future`` that resolves to
the encoded bytes. Palette quantization of the frames is spread over a
small worker pool.
"""

import io
import logging
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from functools import partial
from typing import List, Optional, Sequence, TYPE_CHECKING

import numpy as np
from PIL import GifImagePlugin, Image

from stipple.contracts import ContractViolation, assert_captured
from stipple.errors import EncodeError
from stipple.render.raster import resample, to_image

if TYPE_CHECKING:
    from stipple.schemas import InternalConfig, DownloadOptions

__all__ = ['EncodedFrame', 'AnimationEncoder', 'quantize_frame', 'frame_delays']

logger = logging.getLogger(__name__)

PALETTE_MIN_SAMPLE = 256
GIF_TRAILER = b";"


@dataclass(frozen=True)
class EncodedFrame:
    """A frame as submitted to the GIF writer."""
    image: Image.Image
    delay_ms: float


def frame_delays(count: int, options: "DownloadOptions") -> List[float]:
    """Uniform delay list for ``count`` frames.

    Examples
    --------
    >>> frame_delays(2, DownloadOptions(speed_factor=2, quality=15))
    [50.0, 50.0]
    """
    return [options.frame_delay_ms] * count


def quantize_frame(raster: np.ndarray, quality: int) -> Image.Image:
    """Reduce a raster to a 256-color palette image.

    ``quality`` is the pixel sampling stride used to build the palette:
    1 samples every pixel, larger values sample fewer pixels and run
    faster. The sample never shrinks below ``PALETTE_MIN_SAMPLE`` pixels.
    """
    rgb = raster[..., :3].reshape(-1, 3)
    stride = max(1, min(int(quality), len(rgb) // PALETTE_MIN_SAMPLE))
    sample = rgb[::stride]

    sample_image = Image.fromarray(np.ascontiguousarray(sample).reshape(1, -1, 3))
    palette = sample_image.quantize(colors=256, method=Image.Quantize.MEDIANCUT)
    return to_image(raster).convert("RGB").quantize(palette=palette, dither=Image.Dither.NONE)


class AnimationEncoder:
    """Encodes captured frames into an animated GIF off the caller's thread.

    Jobs run one at a time; a request made while a job is running is
    queued behind it.

    Example usage::

        encoder = AnimationEncoder(config)
        future = encoder.request_encode(store.snapshot(), config.download_options())
        if future is not None:
            data = future.result()
    """

    def __init__(self, config: "InternalConfig"):
        """Store encoder settings.

        Parameters
        ----------
        config : InternalConfig
            Uses ``encoder.workers`` and ``encoder.loop``.
        """
        self.workers = config.encoder.workers
        self.loop = config.encoder.loop
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="StippleEncoder")

    def request_encode(self, frames: Sequence[np.ndarray],
                       options: "DownloadOptions") -> Optional[Future]:
        """Submit an encode job.

        Parameters
        ----------
        frames : sequence of np.ndarray
            Captured rasters in capture order. The sequence is copied, so
            the caller may keep appending to its store.
        options : DownloadOptions
            Speed factor and quality of this request.

        Returns
        -------
        concurrent.futures.Future or None
            Future resolving to the GIF bytes, or None when there are no
            frames to encode.
        """
        frames = list(frames)
        if not frames:
            logger.info("No captured frames, skipping encode request")
            return None

        logger.info("Encoding %d frames (speed x%s, quality %d)",
                    len(frames), options.speed_factor, options.quality)
        return self._executor.submit(self.encode, frames, options)

    def prepare_frames(self, frames: Sequence[np.ndarray],
                       options: "DownloadOptions") -> List[EncodedFrame]:
        """Quantize frames and attach their uniform delay.

        Frames that differ in size from the first (the container was
        resized mid-capture) are resampled to the first frame's size.
        """
        first = frames[0]
        height, width = first.shape[:2]
        uniform = [f if f.shape == first.shape else resample(f, width, height, "nearest")
                   for f in frames]
        assert_captured(uniform)

        with ThreadPoolExecutor(max_workers=self.workers,
                                thread_name_prefix="StippleQuantize") as pool:
            images = list(pool.map(partial(quantize_frame, quality=options.quality), uniform))

        delays = frame_delays(len(images), options)
        return [EncodedFrame(image, delay) for image, delay in zip(images, delays)]

    def encode(self, frames: Sequence[np.ndarray], options: "DownloadOptions") -> bytes:
        """Encode synchronously and return the GIF bytes.

        Raises
        ------
        EncodeError
            If the frames are unusable or the writer fails.
        """
        try:
            prepared = self.prepare_frames(frames, options)
            data = self.write_gif(prepared)
        except (ContractViolation, OSError, ValueError) as e:
            raise EncodeError(f"Could not encode animation: {e}") from e

        logger.info("Encoded %d frames into %d bytes", len(prepared), len(data))
        return data

    def write_gif(self, prepared: Sequence[EncodedFrame]) -> bytes:
        """Serialize prepared frames into a looping GIF stream.

        Each frame is written as its own image block with its own delay and
        local color table. ``Image.save(save_all=True)`` would fold identical
        consecutive frames into one and sum their delays; here every
        captured frame stays a frame.
        """
        head = prepared[0]
        header, _ = GifImagePlugin.getheader(
            head.image, info={"loop": self.loop, "duration": head.delay_ms})

        buffer = io.BytesIO()
        for block in header:
            buffer.write(block)
        for frame in prepared:
            for block in GifImagePlugin.getdata(frame.image, offset=(0, 0),
                                                duration=frame.delay_ms,
                                                include_color_table=True):
                buffer.write(block)
        buffer.write(GIF_TRAILER)
        return buffer.getvalue()

    def close(self, wait: bool = True) -> None:
        """Shut down the encode executor."""
        self._executor.shutdown(wait=wait)
