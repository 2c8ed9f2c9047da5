from telemetry_core.application.manage_maintenance import (
    HISTORY_PATH,
    SETTINGS_PATH,
    get_maintenance_config,
    list_maintenance_history,
    set_maintenance_config,
    watch_maintenance,
)
from telemetry_core.domain.models import MaintenanceConfig
from telemetry_core.utils.memory_store import InMemoryRealtimeStore


class BrokenStore:
    def get(self, path, shallow=False):
        raise TimeoutError("no answer")


def test_write_stamps_record():
    store = InMemoryRealtimeStore()
    record = set_maintenance_config(store, MaintenanceConfig(pm25_chart=True), now_ms=1234)
    assert record["pm25Chart"] is True
    assert record["dashboard"] is False
    assert record["updatedAt"] == 1234
    assert store.get(SETTINGS_PATH) == record
    assert get_maintenance_config(store) == MaintenanceConfig(pm25_chart=True)


def test_turning_on_opens_history_entry():
    store = InMemoryRealtimeStore()
    set_maintenance_config(store, MaintenanceConfig(dashboard=True), now_ms=1000)
    history = list_maintenance_history(store)
    assert len(history) == 1
    assert history[0].start_time == 1000
    assert history[0].end_time is None


def test_turning_off_closes_open_entry():
    store = InMemoryRealtimeStore()
    set_maintenance_config(store, MaintenanceConfig(dashboard=True), now_ms=1000)
    set_maintenance_config(store, MaintenanceConfig(), now_ms=5000)
    history = list_maintenance_history(store)
    assert len(history) == 1
    assert history[0].end_time == 5000
    assert history[0].updated_at == 5000


def test_turning_off_without_history_pushes_closed_entry():
    store = InMemoryRealtimeStore({"admin": {"maintenanceSettings": {"coChart": True}}})
    set_maintenance_config(store, MaintenanceConfig(), now_ms=7000)
    history = list_maintenance_history(store)
    assert [(e.start_time, e.end_time) for e in history] == [(7000, 7000)]


def test_turning_off_after_closed_entry_pushes_new_closed_entry():
    store = InMemoryRealtimeStore(
        {
            "admin": {
                "maintenanceSettings": {"dashboard": True},
                "maintenanceHistory": {"old": {"startTime": 10, "endTime": 20, "createdAt": 10}},
            }
        }
    )
    set_maintenance_config(store, MaintenanceConfig(), now_ms=9000)
    history = list_maintenance_history(store)
    assert [(e.start_time, e.end_time) for e in history] == [(10, 20), (10, 9000)]


def test_staying_active_records_nothing():
    store = InMemoryRealtimeStore()
    set_maintenance_config(store, MaintenanceConfig(dashboard=True), now_ms=1000)
    set_maintenance_config(store, MaintenanceConfig(so2_chart=True), now_ms=2000)
    assert len(list_maintenance_history(store)) == 1


def test_read_failure_returns_defaults():
    assert get_maintenance_config(BrokenStore()) == MaintenanceConfig()


def test_watch_reports_current_and_changed_config():
    store = InMemoryRealtimeStore()
    seen = []
    unsubscribe = watch_maintenance(store, seen.append)
    set_maintenance_config(store, MaintenanceConfig(no2_chart=True), now_ms=1)
    unsubscribe()
    set_maintenance_config(store, MaintenanceConfig(dashboard=True), now_ms=2)

    assert seen[0] == MaintenanceConfig()
    assert seen[-1] == MaintenanceConfig(no2_chart=True)
    assert MaintenanceConfig(dashboard=True) not in seen
    assert store.get(HISTORY_PATH)
