"""Trailing-edge debounce for container resize events."""

import logging
import threading
from typing import Callable, Optional

__all__ = ['Debouncer']

logger = logging.getLogger(__name__)


class Debouncer:
    """Run a callback once calls have been quiet for ``delay_ms``.

    Every ``call()`` cancels the pending timer and starts a new one, so a
    burst of resize events triggers a single re-render with the arguments
    of the last event.
    """

    def __init__(self, callback: Callable, delay_ms: int):
        self.callback = callback
        self.delay = delay_ms / 1000.0
        self._timer: Optional[threading.Timer] = None
        self._lock = threading.Lock()

    def call(self, *args, **kwargs) -> None:
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
            self._timer = threading.Timer(self.delay, self._fire, args, kwargs)
            self._timer.daemon = True
            self._timer.start()

    def _fire(self, *args, **kwargs) -> None:
        with self._lock:
            if self._timer is threading.current_thread():
                self._timer = None
        try:
            self.callback(*args, **kwargs)
        except Exception:
            logger.exception("Debounced callback failed")

    def flush(self, *args, **kwargs) -> None:
        """Cancel the pending timer and run the callback now."""
        self.cancel()
        self.callback(*args, **kwargs)

    def cancel(self) -> None:
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None

    @property
    def pending(self) -> bool:
        with self._lock:
            return self._timer is not None
