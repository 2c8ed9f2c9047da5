import logging
import threading
from typing import Any, Dict, Optional

from telemetry_core.application.build_snapshot import no_sensors_snapshot
from telemetry_core.application.fetch_snapshot import PipelineOptions, SnapshotCache, fetch_snapshot
from telemetry_core.application.manage_maintenance import (
    get_maintenance_config,
    set_maintenance_config,
    watch_maintenance,
)
from telemetry_core.application.refresh_predictions import (
    placeholder_predictions,
    refresh_predictions,
)
from telemetry_core.config.environments import Settings
from telemetry_core.domain.models import MaintenanceConfig, Snapshot
from telemetry_core.domain.ports import PredictionSource, RealtimeStore, Unsubscribe

from telemetry_server.realtime.coordinator import RealtimeSubscription
from telemetry_server.realtime.refresher import PeriodicRefresher

logger = logging.getLogger(__name__)


class LiveView:
    """Latest snapshot and predictions for one requested device.

    ``start()`` does an initial fetch, then keeps both values current from
    the realtime subscription, the maintenance record watch and a periodic
    prediction refresh.
    """

    def __init__(
        self,
        store: RealtimeStore,
        predictions: PredictionSource,
        options: PipelineOptions,
        *,
        requested_device: Optional[str] = None,
        debounce_s: float = 1.0,
        refresh_interval_s: float = 60.0,
    ):
        self.store = store
        self.options = options
        self.requested_device = requested_device
        self._prediction_source = predictions
        self._debounce_s = debounce_s
        self._refresh_interval_s = refresh_interval_s

        self._lock = threading.Lock()
        self._cache = SnapshotCache()
        self._maintenance = MaintenanceConfig()
        self._snapshot: Snapshot = no_sensors_snapshot()
        self._predictions: Dict[str, Any] = placeholder_predictions()
        self._subscription: Optional[RealtimeSubscription] = None
        self._refresher: Optional[PeriodicRefresher] = None
        self._unwatch: Optional[Unsubscribe] = None

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        store: RealtimeStore,
        predictions: PredictionSource,
        requested_device: Optional[str] = None,
    ) -> "LiveView":
        return cls(
            store,
            predictions,
            PipelineOptions.from_settings(settings),
            requested_device=requested_device,
            debounce_s=settings.PREDICTION_DEBOUNCE_SEC,
            refresh_interval_s=settings.PREDICTION_REFRESH_SEC,
        )

    # readers
    def snapshot(self) -> Snapshot:
        with self._lock:
            return self._snapshot

    def predictions(self) -> Dict[str, Any]:
        with self._lock:
            return self._predictions

    def maintenance_config(self) -> MaintenanceConfig:
        with self._lock:
            return self._maintenance

    @property
    def subscription(self) -> Optional[RealtimeSubscription]:
        return self._subscription

    # lifecycle
    def start(self) -> None:
        logger.info("Starting live view for device %r", self.requested_device or "<default>")
        with self._lock:
            self._maintenance = get_maintenance_config(self.store)
        self.refresh_snapshot()
        self.refresh_predictions()

        subscription = RealtimeSubscription(
            self.store,
            self.options,
            requested_device=self.requested_device,
            cache=self._cache,
            maintenance=self.maintenance_config,
            debounce_s=self._debounce_s,
        )
        subscription.on_snapshot(self._set_snapshot)
        subscription.on_dependent_refresh(self.refresh_predictions)
        self._subscription = subscription.start()

        try:
            self._unwatch = watch_maintenance(self.store, self._on_maintenance_change)
        except Exception as e:
            logger.error("Could not watch maintenance settings: %s", e)

        self._refresher = PeriodicRefresher(
            "prediction-refresh", self._refresh_interval_s, self.refresh_predictions
        )
        self._refresher.start()

    def stop(self) -> None:
        logger.info("Stopping live view")
        if self._subscription is not None:
            self._subscription.close()
        if self._unwatch is not None:
            try:
                self._unwatch()
            except Exception as e:
                logger.warning("Error while stopping maintenance watch: %s", e)
            self._unwatch = None
        if self._refresher is not None:
            self._refresher.stop()
            self._refresher.join(timeout=5.0)
            self._refresher = None

    # updates
    def refresh_snapshot(self) -> Snapshot:
        snapshot = fetch_snapshot(
            self.store,
            self.requested_device,
            self.options,
            self.maintenance_config(),
            self._cache,
        )
        self._set_snapshot(snapshot)
        return snapshot

    def refresh_predictions(self) -> None:
        predictions = refresh_predictions(self._prediction_source)
        with self._lock:
            self._predictions = predictions

    def update_maintenance(self, config: MaintenanceConfig) -> Dict[str, Any]:
        record = set_maintenance_config(self.store, config)
        self._on_maintenance_change(config)
        return record

    def _set_snapshot(self, snapshot: Snapshot) -> None:
        with self._lock:
            self._snapshot = snapshot

    def _on_maintenance_change(self, config: MaintenanceConfig) -> None:
        with self._lock:
            changed = config != self._maintenance
            self._maintenance = config
        if not changed:
            return
        logger.info("Maintenance settings changed, re-applying mask")
        subscription = self._subscription
        if subscription is None or not subscription.reapply_maintenance():
            self.refresh_snapshot()
