from telemetry_core.application.build_snapshot import build_snapshot, no_sensors_snapshot
from telemetry_core.application.normalize_readings import OutlierFilter
from telemetry_core.domain.models import (
    MASKED,
    NO_SENSORS_DETECTED,
    ParameterId,
    SnapshotStatus,
    placeholder_series,
)
from telemetry_core.utils.factories import device_window


def test_snapshot_from_window():
    records = device_window(10, aqi=250, so2=1.2, humidity=85.0, temperature=-3.0)
    snapshot = build_snapshot(records, "dev-1")

    assert snapshot.status is SnapshotStatus.LIVE
    assert snapshot.device_id == "dev-1"
    assert snapshot.latest[ParameterId.AQI] == 250.0
    assert snapshot.metrics.air_quality_level == "VERY UNHEALTHY"
    assert snapshot.metrics.air_quality_percent == 50.0
    assert snapshot.metrics.hazard_level == "MODERATE"
    assert snapshot.metrics.humidity_level == "HIGH"
    assert snapshot.metrics.temperature_level == "FREEZING"
    assert all(len(snapshot.series[p]) == 10 for p in ParameterId)


def test_outlier_filter_affects_latest_so2():
    records = device_window(3)
    records["r0002"]["so2"] = 9.0
    snapshot = build_snapshot(records, "dev-1", (OutlierFilter(enabled=True),))
    assert snapshot.latest[ParameterId.SO2] == 0.4
    assert len(snapshot.series[ParameterId.SO2]) == 2


def test_no_usable_readings_returns_none():
    assert build_snapshot({}, "dev-1") is None
    assert build_snapshot({"k": {"note": "no parameters"}}, "dev-1") is None


def test_no_sensors_snapshot():
    snapshot = no_sensors_snapshot()
    assert snapshot.status is SnapshotStatus.NO_SENSORS
    assert set(snapshot.latest.values()) == {MASKED}
    assert snapshot.metrics.air_quality_level == NO_SENSORS_DETECTED
    assert snapshot.metrics.hazard_progress == MASKED
    assert all(s == placeholder_series() for s in snapshot.series.values())
