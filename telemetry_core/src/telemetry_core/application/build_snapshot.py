from typing import Any, Iterable, Mapping, Optional

from telemetry_core.application.normalize_readings import (
    OutlierFilter,
    align_series,
    latest_values,
    normalize_window,
)
from telemetry_core.domain import levels
from telemetry_core.domain.models import (
    MASKED,
    NO_SENSORS_DETECTED,
    DerivedMetrics,
    MaintenanceConfig,
    ParameterId,
    Snapshot,
    SnapshotStatus,
    placeholder_series,
)


def derive_metrics(latest: Mapping[ParameterId, float]) -> DerivedMetrics:
    aqi = latest[ParameterId.AQI]
    so2 = latest[ParameterId.SO2]
    return DerivedMetrics(
        air_quality_level=levels.air_quality_level(aqi).value,
        air_quality_percent=levels.air_quality_percent(aqi),
        hazard_level=levels.hazard_level(so2).value,
        hazard_progress=levels.hazard_progress(so2),
        humidity_level=levels.humidity_level(latest[ParameterId.HUMIDITY]).value,
        temperature_level=levels.temperature_level(latest[ParameterId.TEMPERATURE]).value,
    )


def build_snapshot(
    records: Optional[Mapping[str, Any]],
    device_id: Optional[str],
    outlier_filters: Iterable[OutlierFilter] = (),
) -> Optional[Snapshot]:
    """Run normalize -> filter -> align -> derive over one window.

    Returns ``None`` when the window holds no usable readings.
    """
    readings = normalize_window(records)
    if not readings:
        return None
    series = align_series(readings, outlier_filters)
    latest = latest_values(series)
    return Snapshot(
        device_id=device_id,
        status=SnapshotStatus.LIVE,
        latest=dict(latest),
        metrics=derive_metrics(latest),
        series=series,
        maintenance=MaintenanceConfig(),
    )


def no_sensors_snapshot(device_id: Optional[str] = None) -> Snapshot:
    return Snapshot(
        device_id=device_id,
        status=SnapshotStatus.NO_SENSORS,
        latest={p: MASKED for p in ParameterId},
        metrics=DerivedMetrics(
            air_quality_level=NO_SENSORS_DETECTED,
            air_quality_percent=MASKED,
            hazard_level=NO_SENSORS_DETECTED,
            hazard_progress=MASKED,
            humidity_level=NO_SENSORS_DETECTED,
            temperature_level=NO_SENSORS_DETECTED,
        ),
        series={p: placeholder_series() for p in ParameterId},
        maintenance=MaintenanceConfig(),
    )
