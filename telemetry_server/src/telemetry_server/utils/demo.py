import logging
import random
import threading
import time
from datetime import datetime
from typing import Any, Dict, Optional

from telemetry_core.application.fetch_snapshot import device_path
from telemetry_core.application.refresh_predictions import HORIZON
from telemetry_core.domain.ports import PredictionSource, RealtimeStore
from telemetry_core.utils.factories import RawReadingFactory, device_window
from telemetry_core.utils.memory_store import InMemoryRealtimeStore

logger = logging.getLogger(__name__)


def seeded_store(device_id: str, points: int = 30) -> InMemoryRealtimeStore:
    """In-memory store holding one device with ``points`` historical readings."""
    return InMemoryRealtimeStore({"sensors": {device_id: device_window(points)}})


def random_reading(rng: random.Random, now: Optional[datetime] = None) -> Dict[str, Any]:
    stamp = (now or datetime.now()).strftime("%Y-%m-%d_%H-%M-%S")
    return RawReadingFactory(
        timestamp=stamp,
        aqi=rng.randint(20, 180),
        so2=round(rng.uniform(0.0, 3.0), 2),
        pm25=round(rng.uniform(5.0, 60.0), 1),
        pm10=round(rng.uniform(10.0, 90.0), 1),
        co=round(rng.uniform(0.1, 2.0), 2),
        no2=round(rng.uniform(0.01, 0.2), 3),
        humidity=round(rng.uniform(25.0, 85.0), 1),
        temperature=round(rng.uniform(5.0, 35.0), 1),
    )


class DemoFeeder(threading.Thread):
    """Pushes a random reading for one device every ``interval_s`` seconds."""

    daemon = True

    def __init__(
        self,
        store: RealtimeStore,
        device_id: str,
        interval_s: float = 5.0,
        rng: Optional[random.Random] = None,
    ):
        super().__init__(name="demo-feeder")
        self.store = store
        self.device_id = device_id
        self.interval_s = interval_s
        self.rng = rng or random.Random()
        self.s_stop = threading.Event()

    def stop(self):
        self.s_stop.set()

    def run(self):
        next_tick = time.time() + self.interval_s
        while not self.s_stop.is_set():
            now = time.time()
            if now >= next_tick:
                try:
                    key = self.store.push(device_path(self.device_id), random_reading(self.rng))
                    logger.debug("Demo reading %s pushed for %s", key, self.device_id)
                except Exception as e:
                    logger.error("Demo feeder failed to push: %s", e)
                next_tick += self.interval_s
            else:
                self.s_stop.wait(next_tick - now)


class StaticPredictionSource(PredictionSource):
    """Prediction source that returns slowly drifting fixed values."""

    def __init__(self, rng: Optional[random.Random] = None):
        self.rng = rng or random.Random()

    def fetch_predictions(self) -> Dict[str, Any]:
        return {
            "pm": [
                {
                    "PM2.5": round(self.rng.uniform(5, 40), 2),
                    "PM10": round(self.rng.uniform(10, 60), 2),
                }
                for _ in range(HORIZON)
            ],
            "no2": [{"NO2": round(self.rng.uniform(0.01, 0.1), 3)} for _ in range(HORIZON)],
            "co": [{"CO": round(self.rng.uniform(0.2, 1.5), 2)} for _ in range(HORIZON)],
        }
