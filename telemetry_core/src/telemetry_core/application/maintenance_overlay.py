import copy
from dataclasses import replace

from telemetry_core.domain.models import (
    MASKED,
    UNDER_MAINTENANCE,
    MaintenanceConfig,
    ParameterId,
    Snapshot,
    placeholder_series,
)


def apply_maintenance(snapshot: Snapshot, config: MaintenanceConfig) -> Snapshot:
    """Derive the masked snapshot for ``config``; ``snapshot`` is left untouched.

    ``dashboard`` masks everything. Otherwise ``aqi_display`` masks the AQI
    card and each chart flag replaces that parameter's series with the
    placeholder series.
    """
    data = copy.deepcopy(snapshot)

    if config.dashboard:
        return replace(
            data,
            latest={p: MASKED for p in data.latest},
            metrics=replace(
                data.metrics,
                air_quality_level=UNDER_MAINTENANCE,
                air_quality_percent=MASKED,
                hazard_level=UNDER_MAINTENANCE,
                hazard_progress=MASKED,
                humidity_level=UNDER_MAINTENANCE,
                temperature_level=UNDER_MAINTENANCE,
            ),
            series={p: placeholder_series() for p in data.series},
            maintenance=MaintenanceConfig.all_active(),
        )

    latest = data.latest
    metrics = data.metrics
    if config.aqi_display:
        latest = {**latest, ParameterId.AQI: MASKED}
        metrics = replace(
            metrics,
            air_quality_level=UNDER_MAINTENANCE,
            air_quality_percent=MASKED,
        )

    series = {
        p: (placeholder_series() if config.chart_flag(p) else points)
        for p, points in data.series.items()
    }
    return replace(data, latest=latest, metrics=metrics, series=series, maintenance=config)
