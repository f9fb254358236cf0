"""Pipeline orchestration.

Routes inputs to the still or animation branch, owns the live dot
parameters and container size, and turns download requests into GIF files
on disk.
"""

import io
import logging
import threading
from concurrent.futures import Future
from pathlib import Path
from typing import Optional, Tuple, Union, BinaryIO, TYPE_CHECKING

import numpy as np
from PIL import Image, UnidentifiedImageError

from stipple.errors import DecodeError, StippleError, UnsupportedMediaError
from stipple.media.classify import MediaKind, classify_media_type, guess_media_type
from stipple.media.decoder import AnimationDecoder
from stipple.media.encoder import AnimationEncoder
from stipple.pipeline.animator import AnimationPipeline
from stipple.pipeline.debounce import Debouncer
from stipple.pipeline.frame_capture import FrameCaptureStore
from stipple.render.raster import to_image, to_raster
from stipple.render.still import StillImageProcessor
from stipple.schemas.internal import DotParameters
from stipple.setup_directories import get_animation_path, get_log_path, get_render_path

if TYPE_CHECKING:
    from stipple.schemas import InternalConfig, DownloadOptions

__all__ = ['StippleOrchestrator']

logger = logging.getLogger(__name__)

Source = Union[str, Path, bytes, bytearray, BinaryIO]


class StippleOrchestrator:
    """Entry point tying the stipple components together.

    **Branches:**

    - **Still**: the decoded image is kept as the source raster and
      re-rendered immediately on a parameter change, and after
      ``preview.resize_debounce_ms`` of quiet on a container resize.

    - **Animation**: the decoded animation is handed to the
      AnimationPipeline thread, which reads the parameters and container
      size afresh on every tick and fills the frame capture store.

    Loading any supported file first resets the pipeline to Idle, so
    frames of a previous animation never leak into the new capture.

    **Logging:**

    ``start()`` configures console logging, plus ``logs/stipple.log`` when
    output directories are given. Log level comes from
    ``config.logging.level``.

    Example usage::

        from stipple.pipeline.orchestrator import StippleOrchestrator

        orch = StippleOrchestrator(config, output_dirs)
        orch.start()
        orch.load_file("spinner.gif")
        orch.update_parameters(block_size=10)
        future = orch.request_download()
        path = future.result()
        orch.stop()
    """

    def __init__(self, config: "InternalConfig", output_dirs: Optional[dict] = None):
        """Initialize orchestrator.

        Parameters
        ----------
        config : InternalConfig
            Fully validated runtime configuration.
        output_dirs : dict, optional
            Directories from ``setup_output_directories()``. Without them
            nothing is written to disk.
        """
        self.config = config
        self.output_dirs = output_dirs

        self._lock = threading.Lock()
        self._parameters: DotParameters = config.render
        self._container: Tuple[int, int] = (config.preview.container_width,
                                            config.preview.container_height)
        self._kind: Optional[MediaKind] = None
        self._still_source: Optional[np.ndarray] = None
        self._latest: Optional[np.ndarray] = None

        self.still_processor = StillImageProcessor(config)
        self.decoder = AnimationDecoder(config)
        self.encoder = AnimationEncoder(config)
        self.store = FrameCaptureStore(config.animation.capture_max_frames)
        self.pipeline = AnimationPipeline(
            config,
            parameters=lambda: self.parameters,
            container=lambda: self.container,
            store=self.store,
            on_frame=self._publish,
        )
        self._resize = Debouncer(self._render_still, config.preview.resize_debounce_ms)
        self._started = False

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def setup_logging(self):
        """Configure the root logger with console and file handlers."""
        log_level = getattr(logging, self.config.logging.level, logging.INFO)

        formatter = logging.Formatter(
            fmt='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )

        root = logging.getLogger()
        root.setLevel(log_level)
        for handler in root.handlers[:]:
            root.removeHandler(handler)

        log_path = None
        if self.output_dirs:
            log_path = get_log_path(self.output_dirs)
            fh = logging.FileHandler(log_path)
            fh.setLevel(log_level)
            fh.setFormatter(formatter)
            root.addHandler(fh)

        ch = logging.StreamHandler()
        ch.setLevel(log_level)
        ch.setFormatter(formatter)
        root.addHandler(ch)

        logger.info("Logging: level=%s, file=%s", self.config.logging.level, log_path)

    def start(self, configure_logging: bool = True):
        """Start the animation thread."""
        if self._started:
            return
        if configure_logging:
            self.setup_logging()
        self.pipeline.start()
        self._started = True
        logger.info("Stipple pipeline running (container %dx%d)", *self.container)

    def stop(self):
        """Stop the animation thread and the encoder. Safe to call twice."""
        self._resize.cancel()
        if self._started:
            self.pipeline.stop()
            self.pipeline.join(timeout=5)
            if self.pipeline.is_alive():
                logger.warning("Animation thread did not stop cleanly")
            self._started = False
        self.encoder.close()
        logger.info("Stipple pipeline stopped")

    # ------------------------------------------------------------------
    # Live state
    # ------------------------------------------------------------------

    @property
    def parameters(self) -> DotParameters:
        with self._lock:
            return self._parameters

    @property
    def container(self) -> Tuple[int, int]:
        with self._lock:
            return self._container

    @property
    def kind(self) -> Optional[MediaKind]:
        """Branch of the loaded input, None when idle."""
        with self._lock:
            return self._kind

    @property
    def latest_raster(self) -> Optional[np.ndarray]:
        """Most recently rendered raster (the visible canvas)."""
        with self._lock:
            return self._latest

    def _publish(self, raster: np.ndarray) -> None:
        with self._lock:
            self._latest = raster

    def update_parameters(self, **changes) -> DotParameters:
        """Swap in a new DotParameters snapshot.

        A loaded still image is re-rendered immediately; an animation picks
        the change up on its next tick.

        Raises
        ------
        pydantic.ValidationError
            If a value is outside its allowed range.
        """
        with self._lock:
            params = DotParameters.model_validate({**self._parameters.model_dump(), **changes})
            self._parameters = params
            kind = self._kind

        logger.debug("Parameters updated: %s", params)
        if kind is MediaKind.STILL:
            self._render_still()
        return params

    def resize_preview(self, width: int, height: int, immediate: bool = False) -> None:
        """Record a new container size.

        Still re-rendering is debounced unless ``immediate`` is set.
        """
        with self._lock:
            self._container = (int(width), int(height))
            kind = self._kind

        logger.debug("Container resized to %dx%d", width, height)
        if kind is not MediaKind.STILL:
            return
        if immediate:
            self._resize.flush()
        else:
            self._resize.call()

    # ------------------------------------------------------------------
    # Input boundary
    # ------------------------------------------------------------------

    def load_file(self, source: Source, media_type: Optional[str] = None) -> Optional[MediaKind]:
        """Route an input to the still or animation branch.

        Parameters
        ----------
        source : str, Path, bytes or file object
            Input file.
        media_type : str, optional
            Declared media type. Guessed from the name (or sniffed from
            bytes) when omitted.

        Returns
        -------
        MediaKind or None
            Branch taken, None when the input was ignored.

        Raises
        ------
        UnsupportedMediaError
            If the type is unsupported and ``input.strict_media_types`` is set.
        DecodeError
            If the file cannot be decoded. The pipeline is left Idle.
        """
        if media_type is None:
            media_type = guess_media_type(source)
        kind = classify_media_type(media_type, self.config.input.animated_media_types)

        if kind is MediaKind.UNSUPPORTED:
            if self.config.input.strict_media_types:
                raise UnsupportedMediaError(media_type)
            logger.warning("Unsupported file type %r, input ignored", media_type)
            return None

        self.reset()

        if kind is MediaKind.ANIMATION:
            animation = self.decoder.decode(source)
            self.pipeline.load(animation)
            with self._lock:
                self._kind = MediaKind.ANIMATION
        else:
            raster = self._decode_still(source)
            with self._lock:
                self._still_source = raster
                self._kind = MediaKind.STILL
            self._render_still()

        logger.info("Loaded %s input (%s)", kind.value, media_type)
        return kind

    def reset(self) -> None:
        """Return to Idle: stop playback, clear canvas and captured frames."""
        self._resize.cancel()
        self.pipeline.reset()
        with self._lock:
            self._kind = None
            self._still_source = None
            self._latest = None

    @staticmethod
    def _decode_still(source: Source) -> np.ndarray:
        if isinstance(source, (bytes, bytearray)):
            source = io.BytesIO(bytes(source))
        try:
            with Image.open(source) as im:
                return to_raster(im)
        except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError) as e:
            raise DecodeError(f"Could not decode image: {e}") from e

    def _render_still(self) -> Optional[np.ndarray]:
        with self._lock:
            source = self._still_source
            params = self._parameters
            container = self._container
        if source is None:
            return None

        raster = self.still_processor.process(source, container, params)
        if raster is None:
            return None
        with self._lock:
            if self._still_source is not source:
                logger.debug("Still input replaced during render, result dropped")
                return None
            self._latest = raster
        return raster

    # ------------------------------------------------------------------
    # Output
    # ------------------------------------------------------------------

    def render_animation(self, cycles: int = 1) -> int:
        """Render ``cycles`` full loops of the loaded animation synchronously.

        Used for batch runs with the animation thread stopped; no waiting
        happens between ticks.

        Returns
        -------
        int
            Number of frames rendered.
        """
        state = self.pipeline.state
        if state is None:
            logger.warning("No animation loaded, nothing to render")
            return 0
        ticks = cycles * len(state.animation.frames)
        done = self.pipeline.advance(ticks)
        logger.info("Rendered %d animation ticks (%d captured)", done, len(self.store))
        return done

    def save_still(self, source_name: str = "image") -> Optional[Path]:
        """Write the rendered still image to ``renders/``."""
        raster = self.latest_raster
        if raster is None or self.kind is not MediaKind.STILL or not self.output_dirs:
            return None
        fmt = self.config.output.still_format
        path = get_render_path(self.output_dirs, source_name, fmt)
        image = to_image(raster)
        if fmt == "jpeg":
            image = image.convert("RGB")
        image.save(path, format=fmt.upper())
        logger.info("Saved still render: %s", path)
        return path

    def request_download(self, options: Optional["DownloadOptions"] = None) -> Optional[Future]:
        """Encode the captured frames in the background.

        Parameters
        ----------
        options : DownloadOptions, optional
            Defaults to ``config.download_options()``.

        Returns
        -------
        concurrent.futures.Future or None
            Resolves to the written GIF path (or the raw bytes when no
            output directories are configured); carries an ``EncodeError``
            on failure. None when nothing has been captured.
        """
        options = options if options is not None else self.config.download_options()
        encoded = self.encoder.request_encode(self.store.snapshot(), options)
        if encoded is None:
            return None

        written: Future = Future()
        encoded.add_done_callback(lambda f: self._on_encoded(f, written))
        return written

    def _on_encoded(self, encoded: Future, written: Future) -> None:
        try:
            data = encoded.result()
        except StippleError as e:
            logger.error("Animation encoding failed: %s", e)
            written.set_exception(e)
            return
        except Exception as e:
            logger.exception("Unexpected error while encoding animation")
            written.set_exception(e)
            return

        if not self.output_dirs:
            written.set_result(data)
            return

        path = get_animation_path(self.output_dirs, self.config.encoder.filename)
        try:
            path.write_bytes(data)
        except OSError as e:
            logger.error("Could not write %s: %s", path, e)
            written.set_exception(e)
            return
        logger.info("Saved animation: %s (%d bytes)", path, len(data))
        written.set_result(path)
