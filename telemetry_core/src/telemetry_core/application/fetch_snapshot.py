# telemetry_core/application/fetch_snapshot.py

import logging
import threading
from dataclasses import dataclass, replace
from typing import Any, Dict, Optional

from telemetry_core.application.build_snapshot import build_snapshot, no_sensors_snapshot
from telemetry_core.application.maintenance_overlay import apply_maintenance
from telemetry_core.application.normalize_readings import OutlierFilter
from telemetry_core.application.select_device import select_device
from telemetry_core.config.environments import Settings
from telemetry_core.domain.models import MaintenanceConfig, Snapshot, SnapshotStatus
from telemetry_core.domain.ports import RealtimeStore

logger = logging.getLogger(__name__)

SENSORS_ROOT = "sensors"
ORDER_FIELD = "timestamp"


def device_path(device_id: str) -> str:
    return f"{SENSORS_ROOT}/{device_id}"


@dataclass(frozen=True)
class PipelineOptions:
    default_device_id: str = ""
    max_points: int = 500
    min_points: int = 20
    so2_filter: OutlierFilter = OutlierFilter()

    @classmethod
    def from_settings(cls, settings: Settings) -> "PipelineOptions":
        return cls(
            default_device_id=settings.DEFAULT_DEVICE_ID.strip(),
            max_points=max(1, settings.CHART_MAX_POINTS),
            min_points=settings.MIN_WINDOW_POINTS,
            so2_filter=OutlierFilter(
                enabled=settings.FILTER_SO2_OUTLIERS,
                minimum=settings.SO2_MIN,
                maximum=settings.SO2_MAX,
            ),
        )


class SnapshotCache:
    """Last known-good snapshot for one device, owned by a single consumer."""

    def __init__(self, initial: Optional[Snapshot] = None):
        self._lock = threading.Lock()
        self._snapshot = initial

    def get(self) -> Optional[Snapshot]:
        with self._lock:
            return self._snapshot

    def put(self, snapshot: Snapshot) -> None:
        with self._lock:
            self._snapshot = snapshot

    def fallback(self, device_id: Optional[str] = None) -> Snapshot:
        cached = self.get()
        if cached is None:
            return no_sensors_snapshot(device_id)
        return replace(cached, status=SnapshotStatus.CACHED)


def resolve_device(
    store: RealtimeStore, requested: Optional[str], options: PipelineOptions
) -> Optional[str]:
    devices = store.get(SENSORS_ROOT, shallow=True)
    if not isinstance(devices, dict):
        return None
    return select_device(requested, devices, options.default_device_id)


def load_device_window(
    store: RealtimeStore, device_id: str, options: PipelineOptions
) -> Optional[Dict[str, Any]]:
    """Read the capped window for a device, widening to the full node when sparse."""
    path = device_path(device_id)
    window = store.query_last(path, ORDER_FIELD, options.max_points)
    if window is None:
        return None
    if len(window) < options.min_points:
        logger.info(
            "Window for %s has %d points (< %d), reading full device node",
            device_id,
            len(window),
            options.min_points,
        )
        full = store.get(path)
        if isinstance(full, dict) and full:
            window = full
    return window


def compute_snapshot(
    records: Optional[Dict[str, Any]],
    device_id: Optional[str],
    options: PipelineOptions,
    cache: SnapshotCache,
) -> Snapshot:
    """Build the unmasked snapshot for a window and remember it.

    A window with no usable readings yields the cache fallback instead.
    """
    snapshot = build_snapshot(records, device_id, (options.so2_filter,))
    if snapshot is None:
        logger.info("No usable readings for %s, using fallback snapshot", device_id)
        return cache.fallback(device_id)
    cache.put(snapshot)
    return snapshot


def fetch_snapshot(
    store: RealtimeStore,
    requested_device: Optional[str],
    options: PipelineOptions,
    maintenance: MaintenanceConfig,
    cache: SnapshotCache,
) -> Snapshot:
    """One-shot fetch; never raises, degrades to the cached or no-sensors snapshot."""
    device_id = None
    try:
        device_id = resolve_device(store, requested_device, options)
        if device_id is None:
            logger.warning("No sensors found in store")
            return apply_maintenance(no_sensors_snapshot(), maintenance)
        records = load_device_window(store, device_id, options)
        return apply_maintenance(compute_snapshot(records, device_id, options, cache), maintenance)
    except Exception as e:
        logger.error("Error fetching sensor data for %s: %s", device_id or requested_device, e)
        return apply_maintenance(cache.fallback(device_id), maintenance)
