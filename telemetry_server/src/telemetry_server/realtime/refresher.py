import logging
import threading
import time
from typing import Callable

logger = logging.getLogger(__name__)


class PeriodicRefresher(threading.Thread):
    """Calls ``action`` every ``interval_s`` seconds until stopped."""

    daemon = True

    def __init__(self, name: str, interval_s: float, action: Callable[[], None]):
        super().__init__(name=name)
        self.interval_s = interval_s
        self.action = action
        self.s_stop = threading.Event()

    def stop(self):
        self.s_stop.set()

    def run(self):
        next_tick = time.time() + self.interval_s
        while not self.s_stop.is_set():
            now = time.time()
            if now >= next_tick:
                try:
                    self.action()
                except Exception as e:
                    logger.error("Periodic %s failed: %s", self.name, e)
                next_tick += self.interval_s
            else:
                self.s_stop.wait(next_tick - now)
