import logging
from typing import Callable, List, Optional

from telemetry_core.config.environments import Settings, get_settings

from telemetry_server.adapters.firebase.store import FirebaseRealtimeStore
from telemetry_server.adapters.predictions.client import PredictionClient
from telemetry_server.live_view import LiveView
from telemetry_server.utils.demo import DemoFeeder, StaticPredictionSource, seeded_store

logger = logging.getLogger(__name__)


class Runtime:
    """A live view plus the resources it owns, started and stopped together."""

    def __init__(
        self,
        view: LiveView,
        feeder: Optional[DemoFeeder] = None,
        closers: Optional[List[Callable[[], None]]] = None,
    ):
        self.view = view
        self.feeder = feeder
        self._closers = closers or []

    def start(self) -> None:
        self.view.start()
        if self.feeder is not None:
            self.feeder.start()

    def stop(self) -> None:
        if self.feeder is not None:
            self.feeder.stop()
            self.feeder.join(timeout=5.0)
        self.view.stop()
        for close in self._closers:
            try:
                close()
            except Exception as e:
                logger.warning("Error while closing client: %s", e)


def build_runtime(
    settings: Optional[Settings] = None,
    device: Optional[str] = None,
    test_mode: bool = False,
) -> Runtime:
    settings = settings or get_settings()

    if test_mode:
        device_id = device or settings.DEFAULT_DEVICE_ID
        logger.info("Test mode: seeding in-memory store for %s", device_id)
        store = seeded_store(device_id)
        view = LiveView.from_settings(settings, store, StaticPredictionSource(), device)
        return Runtime(view, feeder=DemoFeeder(store, device_id))

    store = FirebaseRealtimeStore.from_settings(settings)
    predictions = PredictionClient(
        settings.PREDICTION_API_URL, timeout=settings.PREDICTION_TIMEOUT_SEC
    )
    view = LiveView.from_settings(settings, store, predictions, device)
    return Runtime(view, closers=[store.close, predictions.close])
