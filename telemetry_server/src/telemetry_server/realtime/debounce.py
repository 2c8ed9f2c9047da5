import logging
import threading
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class Debouncer:
    """Collapses bursts of ``trigger()`` calls into one delayed ``action`` call.

    Each trigger restarts the timer; the action runs once ``delay_s`` has
    passed without a new trigger. After ``close()`` triggers are ignored.
    """

    def __init__(self, delay_s: float, action: Callable[[], None], name: str = "debounce"):
        self.delay_s = delay_s
        self._action = action
        self._name = name
        self._lock = threading.Lock()
        self._timer: Optional[threading.Timer] = None
        self._closed = False

    def trigger(self) -> None:
        with self._lock:
            if self._closed:
                return
            if self._timer is not None:
                self._timer.cancel()
            timer = threading.Timer(self.delay_s, self._fire)
            timer.name = self._name
            timer.daemon = True
            self._timer = timer
            timer.start()

    def pending(self) -> bool:
        with self._lock:
            return self._timer is not None

    def cancel(self) -> None:
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None

    def close(self) -> None:
        with self._lock:
            self._closed = True
        self.cancel()

    def _fire(self) -> None:
        with self._lock:
            if self._closed or self._timer is not threading.current_thread():
                return
            self._timer = None
        try:
            self._action()
        except Exception as e:
            logger.error("Debounced action %s failed: %s", self._name, e)
