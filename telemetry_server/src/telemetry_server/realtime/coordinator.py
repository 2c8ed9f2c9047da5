import logging
import threading
from enum import Enum
from typing import Any, Callable, List, Optional

from telemetry_core.application.build_snapshot import no_sensors_snapshot
from telemetry_core.application.fetch_snapshot import (
    ORDER_FIELD,
    PipelineOptions,
    SnapshotCache,
    compute_snapshot,
    device_path,
    resolve_device,
)
from telemetry_core.application.maintenance_overlay import apply_maintenance
from telemetry_core.domain.models import MaintenanceConfig, Snapshot
from telemetry_core.domain.ports import RealtimeStore, Unsubscribe

from telemetry_server.realtime.debounce import Debouncer

logger = logging.getLogger(__name__)

SnapshotHandler = Callable[[Snapshot], None]
RefreshHandler = Callable[[], None]


class SubscriptionState(str, Enum):
    DETACHED = "detached"
    ATTACHING = "attaching"
    SUBSCRIBED = "subscribed"
    CLOSED = "closed"


class RealtimeSubscription:
    """Live view of one device's capped reading window.

    Lifecycle: ``start()`` moves DETACHED -> ATTACHING and resolves the device
    on a worker thread; once the store listener is registered the state is
    SUBSCRIBED. Every store push re-runs the pipeline, hands the masked
    snapshot to the ``on_snapshot`` handlers and then restarts the debounce
    timer whose expiry calls the ``on_dependent_refresh`` handlers.

    ``close()`` is idempotent and may be called at any point, including while
    the attach is still in flight; a listener registered after close is
    removed straight away.
    """

    def __init__(
        self,
        store: RealtimeStore,
        options: PipelineOptions,
        *,
        requested_device: Optional[str] = None,
        cache: Optional[SnapshotCache] = None,
        maintenance: Callable[[], MaintenanceConfig] = MaintenanceConfig,
        debounce_s: float = 1.0,
    ):
        self._store = store
        self._options = options
        self._requested_device = requested_device
        self._cache = cache if cache is not None else SnapshotCache()
        self._maintenance = maintenance

        self._lock = threading.Lock()
        # serializes overlay and handler calls so emissions keep base order
        self._emit_lock = threading.Lock()
        self._state = SubscriptionState.DETACHED
        self._device_id: Optional[str] = None
        self._unsubscribe: Optional[Unsubscribe] = None
        self._last_base: Optional[Snapshot] = None
        self._base_seq = 0
        self._snapshot_handlers: List[SnapshotHandler] = []
        self._refresh_handlers: List[RefreshHandler] = []
        self._attach_done = threading.Event()
        self._debouncer = Debouncer(
            debounce_s, self._fire_dependent_refresh, name="dependent-refresh"
        )

    # registration
    def on_snapshot(self, handler: SnapshotHandler) -> None:
        with self._lock:
            self._snapshot_handlers.append(handler)

    def on_dependent_refresh(self, handler: RefreshHandler) -> None:
        with self._lock:
            self._refresh_handlers.append(handler)

    @property
    def state(self) -> SubscriptionState:
        with self._lock:
            return self._state

    @property
    def device_id(self) -> Optional[str]:
        with self._lock:
            return self._device_id

    # lifecycle
    def start(self) -> "RealtimeSubscription":
        with self._lock:
            if self._state is not SubscriptionState.DETACHED:
                return self
            self._state = SubscriptionState.ATTACHING
            self._attach_done.clear()
        worker = threading.Thread(target=self._attach, name="realtime-attach", daemon=True)
        worker.start()
        return self

    def wait_attached(self, timeout: Optional[float] = None) -> bool:
        """Block until the current attach attempt has finished."""
        return self._attach_done.wait(timeout)

    def close(self) -> None:
        with self._lock:
            if self._state is SubscriptionState.CLOSED:
                return
            self._state = SubscriptionState.CLOSED
            unsubscribe, self._unsubscribe = self._unsubscribe, None
        self._debouncer.close()
        if unsubscribe is not None:
            self._detach(unsubscribe)
        logger.info("Realtime subscription for %s closed", self._device_id)

    def __enter__(self) -> "RealtimeSubscription":
        return self.start()

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def _attach(self) -> None:
        try:
            device_id = resolve_device(self._store, self._requested_device, self._options)
            if device_id is None:
                logger.warning("No sensors available, nothing to subscribe to")
                with self._lock:
                    if self._state is SubscriptionState.ATTACHING:
                        self._state = SubscriptionState.DETACHED
                self._emit_base(no_sensors_snapshot())
                return

            with self._lock:
                if self._state is SubscriptionState.CLOSED:
                    logger.info("Subscription closed before attach to %s", device_id)
                    return
                self._device_id = device_id

            logger.info("Subscribing to %s", device_path(device_id))
            unsubscribe = self._store.subscribe(
                device_path(device_id),
                ORDER_FIELD,
                self._options.max_points,
                self._handle_push,
            )

            with self._lock:
                closed = self._state is SubscriptionState.CLOSED
                if not closed:
                    self._unsubscribe = unsubscribe
                    self._state = SubscriptionState.SUBSCRIBED
            if closed:
                logger.info("Subscription closed during attach, detaching from %s", device_id)
                self._detach(unsubscribe)
        except Exception as e:
            logger.error("Failed to attach realtime listener: %s", e)
            with self._lock:
                if self._state is SubscriptionState.ATTACHING:
                    self._state = SubscriptionState.DETACHED
            self._emit_base(self._cache.fallback(self._requested_device))
        finally:
            self._attach_done.set()

    @staticmethod
    def _detach(unsubscribe: Unsubscribe) -> None:
        try:
            unsubscribe()
        except Exception as e:
            logger.warning("Error while detaching store listener: %s", e)

    # pushes
    def _handle_push(self, window: Any) -> None:
        with self._lock:
            if self._state is SubscriptionState.CLOSED:
                return
            device_id = self._device_id

        records = window if isinstance(window, dict) else None
        try:
            base = compute_snapshot(records, device_id, self._options, self._cache)
        except Exception as e:
            logger.error("Failed to process push for %s: %s", device_id, e)
            base = self._cache.fallback(device_id)

        self._emit_base(base)
        self._debouncer.trigger()

    def reapply_maintenance(self) -> bool:
        """Re-emit the last snapshot under the current maintenance config.

        A re-apply that loses the race against a newer push is dropped; the
        push emission already reads the current config.
        """
        with self._lock:
            base, seq = self._last_base, self._base_seq
        if base is None:
            return False
        self._emit(base, seq)
        return True

    def _emit_base(self, base: Snapshot) -> None:
        with self._lock:
            if self._state is SubscriptionState.CLOSED:
                return
            self._base_seq += 1
            self._last_base = base
            seq = self._base_seq
        self._emit(base, seq)

    def _emit(self, base: Snapshot, seq: int) -> None:
        with self._emit_lock:
            with self._lock:
                if self._state is SubscriptionState.CLOSED:
                    return
                # a newer base exists and is emitted by its own caller
                if seq < self._base_seq:
                    logger.debug("Dropping stale snapshot emission #%d", seq)
                    return
                handlers = list(self._snapshot_handlers)
            try:
                snapshot = apply_maintenance(base, self._maintenance())
            except Exception as e:
                logger.error("Could not apply maintenance config: %s", e)
                snapshot = base
            for handler in handlers:
                try:
                    handler(snapshot)
                except Exception as e:
                    logger.error("Snapshot handler failed: %s", e)

    def _fire_dependent_refresh(self) -> None:
        with self._lock:
            if self._state is SubscriptionState.CLOSED:
                return
            handlers = list(self._refresh_handlers)
        logger.debug("Running %d dependent refresh handler(s)", len(handlers))
        for handler in handlers:
            try:
                handler()
            except Exception as e:
                logger.error("Dependent refresh handler failed: %s", e)
