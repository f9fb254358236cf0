"""Perpetual animation loop.

Composites decoded frame patches onto a persistent logical canvas, renders
the dot effect of every tick into the preview size and records each
rendered frame for later encoding.
"""

import logging
import threading
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Optional, Tuple, TYPE_CHECKING

import numpy as np

from stipple.contracts import ContractViolation
from stipple.media.decoder import AnimationFrame, DecodedAnimation
from stipple.pipeline.frame_capture import FrameCaptureStore
from stipple.render.raster import new_raster
from stipple.render.still import StillImageProcessor

if TYPE_CHECKING:
    from stipple.schemas import InternalConfig, DotParameters

__all__ = ['PipelinePhase', 'AnimationState', 'AnimationPipeline', 'composite']

logger = logging.getLogger(__name__)

# Dispose codes of the GIF graphic control extension
RESTORE_BACKGROUND = 2
RESTORE_PREVIOUS = 3


class PipelinePhase(str, Enum):
    IDLE = "idle"
    PLAYING = "playing"


@dataclass
class AnimationState:
    """Mutable playback state of one loaded animation.

    A new state object is installed on every load, tagged with the epoch
    it belongs to.
    """
    animation: DecodedAnimation
    canvas: np.ndarray
    epoch: int
    frame_index: int = 0
    ticks: int = 0
    pending_disposal: Optional[Tuple[int, Tuple[int, int, int, int], Optional[np.ndarray]]] = field(
        default=None, repr=False)


def _clip(canvas: np.ndarray, frame: AnimationFrame) -> Optional[Tuple[int, int, int, int]]:
    height, width = canvas.shape[:2]
    x0, y0 = frame.offset_x, frame.offset_y
    x1 = min(width, x0 + frame.width)
    y1 = min(height, y0 + frame.height)
    if x1 <= x0 or y1 <= y0:
        return None
    return x0, y0, x1, y1


def composite(canvas: np.ndarray, frame: AnimationFrame) -> None:
    """Overwrite the canvas region under ``frame`` with its patch.

    Parts of the patch outside the canvas are dropped. No alpha blending:
    transparent patch pixels replace what was there.
    """
    region = _clip(canvas, frame)
    if region is None:
        return
    x0, y0, x1, y1 = region
    canvas[y0:y1, x0:x1] = frame.patch[:y1 - y0, :x1 - x0]


class AnimationPipeline(threading.Thread):
    """Drives an animation one tick at a time in a background thread.

    **Tick:**

    1. Composite ``frame[i]`` onto the logical canvas.
    2. Fit the canvas into the live container size, resample, flatten and
       apply the dot transform with the parameters read at tick start.
    3. Append the result to the capture store and publish it through
       ``on_frame``.
    4. Wait ``max(delay_ticks * tick_ms, min_delay_ms)`` milliseconds and
       advance ``i`` cyclically.

    **Epochs:**

    ``load()`` and ``reset()`` bump the epoch and replace the state under
    the pipeline lock. ``tick(epoch)`` with an outdated epoch does nothing,
    so a tick scheduled for a previous animation can never touch the new
    canvas or capture store.

    ``on_frame`` is called with the pipeline lock held and must not call
    back into the pipeline.

    Example usage::

        pipeline = AnimationPipeline(config, parameters=lambda: params,
                                     container=lambda: (800, 600))
        pipeline.start()
        pipeline.load(decoder.decode("spinner.gif"))
        ...
        pipeline.stop()
        pipeline.join()
    """

    def __init__(self, config: "InternalConfig",
                 parameters: Callable[[], "DotParameters"],
                 container: Callable[[], Tuple[int, int]],
                 store: Optional[FrameCaptureStore] = None,
                 on_frame: Optional[Callable[[np.ndarray], None]] = None,
                 name: str = "StippleAnimator"):
        """Initialize the pipeline thread.

        Parameters
        ----------
        config : InternalConfig
            Uses the ``animation`` and ``preview`` sections.
        parameters : callable
            Returns the current DotParameters snapshot.
        container : callable
            Returns the current ``(width, height)`` of the preview container.
        store : FrameCaptureStore, optional
            Capture store; created from ``animation.capture_max_frames``
            when omitted.
        on_frame : callable, optional
            Receives every rendered raster.
        name : str
            Thread name.
        """
        super().__init__(name=name, daemon=True)
        self.config = config
        self.tick_ms = config.animation.tick_ms
        self.min_delay_ms = config.animation.min_delay_ms
        self.honor_disposal = config.animation.honor_disposal

        self._parameters = parameters
        self._container = container
        self.store = store if store is not None else FrameCaptureStore(
            config.animation.capture_max_frames)
        self.on_frame = on_frame
        self.processor = StillImageProcessor(config)

        self._lock = threading.Lock()
        self._state: Optional[AnimationState] = None
        self._epoch = 0
        self._stop_event = threading.Event()
        self._wake = threading.Event()

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def epoch(self) -> int:
        with self._lock:
            return self._epoch

    @property
    def phase(self) -> PipelinePhase:
        with self._lock:
            return PipelinePhase.IDLE if self._state is None else PipelinePhase.PLAYING

    @property
    def state(self) -> Optional[AnimationState]:
        with self._lock:
            return self._state

    def load(self, animation: DecodedAnimation) -> int:
        """Reset and start playing ``animation`` from its first frame.

        Returns
        -------
        int
            Epoch of the new animation.
        """
        with self._lock:
            self._epoch += 1
            self._state = AnimationState(
                animation=animation,
                canvas=new_raster(animation.width, animation.height),
                epoch=self._epoch,
            )
            self.store.clear()
            epoch = self._epoch
        self._wake.set()
        logger.info("Loaded animation %dx%d, %d frames (epoch %d)",
                    animation.width, animation.height, len(animation.frames), epoch)
        return epoch

    def reset(self) -> None:
        """Return to Idle, dropping the canvas and captured frames."""
        with self._lock:
            self._epoch += 1
            was_playing = self._state is not None
            self._state = None
            self.store.clear()
        self._wake.set()
        if was_playing:
            logger.info("Animation pipeline reset to idle")

    # ------------------------------------------------------------------
    # Ticking
    # ------------------------------------------------------------------

    def frame_delay_ms(self, frame: AnimationFrame) -> int:
        """Wait after showing ``frame``."""
        return max(frame.delay_ticks * self.tick_ms, self.min_delay_ms)

    def tick(self, epoch: int) -> Optional[int]:
        """Render the current frame of animation ``epoch``.

        Returns
        -------
        int or None
            Milliseconds to wait before the next tick, or None when
            ``epoch`` is no longer current.
        """
        params = self._parameters()
        container = self._container()

        with self._lock:
            state = self._state
            if state is None or state.epoch != epoch or epoch != self._epoch:
                logger.debug("Dropping tick for stale epoch %d (current %d)", epoch, self._epoch)
                return None

            frames = state.animation.frames
            frame = frames[state.frame_index]

            # A frame that fails to render is still consumed
            try:
                if self.honor_disposal:
                    self._dispose_previous(state)
                    self._remember_disposal(state, frame)
                composite(state.canvas, frame)

                raster = self.processor.process(state.canvas, container, params)
                if raster is None:
                    logger.debug("Container %s is empty, tick %d not rendered",
                                 container, state.ticks)
                else:
                    self.store.append(raster)
                    if self.on_frame is not None:
                        self.on_frame(raster)
            finally:
                state.frame_index = (state.frame_index + 1) % len(frames)
                state.ticks += 1

        return self.frame_delay_ms(frame)

    def advance(self, count: int) -> int:
        """Run ``count`` ticks of the current animation without waiting.

        For batch rendering while the thread is not running.

        Returns
        -------
        int
            Number of ticks that rendered.
        """
        epoch = self.epoch
        done = 0
        for _ in range(count):
            if self.tick(epoch) is None:
                break
            done += 1
        return done

    def _dispose_previous(self, state: AnimationState) -> None:
        if state.pending_disposal is None:
            return
        hint, (x0, y0, x1, y1), saved = state.pending_disposal
        if hint == RESTORE_BACKGROUND:
            state.canvas[y0:y1, x0:x1] = 0
        elif hint == RESTORE_PREVIOUS and saved is not None:
            state.canvas[y0:y1, x0:x1] = saved
        state.pending_disposal = None

    def _remember_disposal(self, state: AnimationState, frame: AnimationFrame) -> None:
        if frame.disposal_hint not in (RESTORE_BACKGROUND, RESTORE_PREVIOUS):
            return
        region = _clip(state.canvas, frame)
        if region is None:
            return
        x0, y0, x1, y1 = region
        saved = None
        if frame.disposal_hint == RESTORE_PREVIOUS:
            saved = state.canvas[y0:y1, x0:x1].copy()
        state.pending_disposal = (frame.disposal_hint, region, saved)

    # ------------------------------------------------------------------
    # Thread lifecycle
    # ------------------------------------------------------------------

    def stop(self):
        """Signal the loop to exit."""
        self._stop_event.set()
        self._wake.set()

    def stopped(self):
        """Check if stop was requested."""
        return self._stop_event.is_set()

    def run(self):
        """Main loop (runs in thread).

        Idles until an animation is loaded, then ticks it forever. A load,
        reset or stop interrupts the wait between ticks.
        """
        logger.info("Animation pipeline started")

        while not self.stopped():
            self._wake.clear()
            with self._lock:
                epoch = self._epoch
                idle = self._state is None

            if idle:
                self._wake.wait(timeout=1)
                continue

            try:
                delay = self.tick(epoch)
            except ContractViolation as e:
                logger.critical("Pipeline contract violated: %s", e)
                logger.critical("This indicates a bug in pipeline logic. Stopping animation.")
                self._stop_event.set()
                break
            except Exception:
                logger.exception("Animation tick failed")
                delay = self.min_delay_ms

            if delay is None:
                continue
            self._wake.wait(delay / 1000.0)

        logger.info("Animation pipeline stopped")
