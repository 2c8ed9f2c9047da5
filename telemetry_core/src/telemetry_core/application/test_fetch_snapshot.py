import pytest

from telemetry_core.application.fetch_snapshot import (
    PipelineOptions,
    SnapshotCache,
    fetch_snapshot,
    load_device_window,
    resolve_device,
)
from telemetry_core.application.normalize_readings import OutlierFilter
from telemetry_core.config.environments import Settings
from telemetry_core.domain.models import MASKED, MaintenanceConfig, ParameterId, SnapshotStatus
from telemetry_core.utils.factories import device_window
from telemetry_core.utils.memory_store import InMemoryRealtimeStore


class FailingStore:
    def get(self, path, shallow=False):
        raise ConnectionError("store unreachable")

    def query_last(self, path, order_by, limit):
        raise ConnectionError("store unreachable")


class CountingStore(InMemoryRealtimeStore):
    def __init__(self, data):
        super().__init__(data)
        self.full_reads = []

    def get(self, path, shallow=False):
        if not shallow:
            self.full_reads.append(path)
        return super().get(path, shallow)


@pytest.fixture
def options():
    return PipelineOptions(default_device_id="dev-1", max_points=10, min_points=5)


def test_options_from_settings():
    settings = Settings(
        DEFAULT_DEVICE_ID=" dev-9 ",
        CHART_MAX_POINTS=0,
        FILTER_SO2_OUTLIERS=True,
        SO2_MAX=2.0,
    )
    opts = PipelineOptions.from_settings(settings)
    assert opts.default_device_id == "dev-9"
    assert opts.max_points == 1
    assert opts.so2_filter == OutlierFilter(enabled=True, minimum=0.0, maximum=2.0)


def test_fetch_caps_window(options):
    store = InMemoryRealtimeStore({"sensors": {"dev-1": device_window(30)}})
    snapshot = fetch_snapshot(store, None, options, MaintenanceConfig(), SnapshotCache())
    assert snapshot.status is SnapshotStatus.LIVE
    assert snapshot.device_id == "dev-1"
    assert len(snapshot.series[ParameterId.AQI]) == 10
    # most recent readings are kept
    assert snapshot.series[ParameterId.AQI][-1].label == "09-29-00"


def test_sparse_window_reads_full_node_once():
    store = CountingStore({"sensors": {"dev-1": device_window(3)}})
    opts = PipelineOptions(default_device_id="dev-1", max_points=2, min_points=5)
    window = load_device_window(store, "dev-1", opts)
    assert len(window) == 3
    assert store.full_reads == ["sensors/dev-1"]


def test_resolve_device_prefers_request(options):
    store = InMemoryRealtimeStore(
        {"sensors": {"dev-1": device_window(1), "dev-2": device_window(1)}}
    )
    assert resolve_device(store, "dev-2", options) == "dev-2"
    assert resolve_device(store, "nope", options) == "dev-1"


def test_no_sensors(options):
    snapshot = fetch_snapshot(
        InMemoryRealtimeStore(), None, options, MaintenanceConfig(), SnapshotCache()
    )
    assert snapshot.status is SnapshotStatus.NO_SENSORS
    assert snapshot.latest[ParameterId.AQI] == MASKED


def test_store_failure_degrades_to_cached_snapshot(options):
    cache = SnapshotCache()
    store = InMemoryRealtimeStore({"sensors": {"dev-1": device_window(8)}})
    first = fetch_snapshot(store, None, options, MaintenanceConfig(), cache)
    assert first.status is SnapshotStatus.LIVE

    second = fetch_snapshot(FailingStore(), None, options, MaintenanceConfig(), cache)
    assert second.status is SnapshotStatus.CACHED
    assert second.latest == first.latest


def test_store_failure_without_cache_is_no_sensors(options):
    snapshot = fetch_snapshot(FailingStore(), None, options, MaintenanceConfig(), SnapshotCache())
    assert snapshot.status is SnapshotStatus.NO_SENSORS


def test_empty_window_uses_fallback(options):
    store = InMemoryRealtimeStore({"sensors": {"dev-1": {"k": {"note": "nothing tracked"}}}})
    snapshot = fetch_snapshot(store, None, options, MaintenanceConfig(), SnapshotCache())
    assert snapshot.status is SnapshotStatus.NO_SENSORS
    assert snapshot.device_id == "dev-1"


def test_maintenance_applied_but_cache_keeps_raw(options):
    cache = SnapshotCache()
    store = InMemoryRealtimeStore({"sensors": {"dev-1": device_window(8)}})
    snapshot = fetch_snapshot(store, None, options, MaintenanceConfig(dashboard=True), cache)
    assert snapshot.latest[ParameterId.AQI] == MASKED
    assert cache.get().latest[ParameterId.AQI] == 42.0
