import logging
import math
import re
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Optional

from telemetry_core.domain.models import (
    NormalizedReading,
    ParameterId,
    SeriesPoint,
    TimeSeries,
)
from telemetry_core.domain.timestamps import resolve_time

logger = logging.getLogger(__name__)

# leading decimal literal, trailing text such as a unit suffix is ignored
NUMBER_PREFIX = re.compile(r"\s*[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?")


def to_number(value: Any) -> float:
    """Coerce a present field to a finite float, 0.0 when that is impossible."""
    if isinstance(value, str):
        match = NUMBER_PREFIX.match(value)
        if match is None:
            return 0.0
        num = float(match.group(0))
    elif isinstance(value, (int, float)):
        num = float(value)
    else:
        return 0.0
    return num if math.isfinite(num) else 0.0


def normalize_reading(record: Any, key: str) -> Optional[NormalizedReading]:
    """Convert one raw record, or return ``None`` to drop it."""
    if not isinstance(record, Mapping):
        return None
    if not any(p.value in record for p in ParameterId):
        return None

    resolved = resolve_time(record, key)
    if resolved is None:
        logger.debug("Dropping reading %s: unresolvable time", key)
        return None

    values = {p: (to_number(record[p.value]) if p.value in record else None) for p in ParameterId}
    return NormalizedReading(instant=resolved.instant, label=resolved.label, values=values)


def normalize_window(records: Optional[Mapping[str, Any]]) -> List[NormalizedReading]:
    """Normalize a ``key -> record`` window and sort it by instant."""
    if not records:
        return []
    readings = []
    for key, record in records.items():
        reading = normalize_reading(record, str(key))
        if reading is not None:
            readings.append(reading)
    # stable sort keeps store order for equal instants
    readings.sort(key=lambda r: r.instant)
    return readings


@dataclass(frozen=True)
class OutlierFilter:
    """Inclusive range filter applied to one parameter's series."""

    enabled: bool = False
    minimum: float = 0.0
    maximum: float = 3.5
    parameter: ParameterId = ParameterId.SO2

    def admits(self, value: Optional[float]) -> bool:
        if value is None:
            return False
        if not self.enabled:
            return True
        return self.minimum <= value <= self.maximum


def align_series(
    readings: Iterable[NormalizedReading],
    outlier_filters: Iterable[OutlierFilter] = (),
) -> Dict[ParameterId, TimeSeries]:
    readings = list(readings)
    filters = {f.parameter: f for f in outlier_filters}
    series: Dict[ParameterId, TimeSeries] = {}
    for parameter in ParameterId:
        governing = filters.get(parameter)
        points = []
        for reading in readings:
            value = reading.value(parameter)
            if value is None:
                continue
            if governing is not None and not governing.admits(value):
                continue
            points.append(SeriesPoint(label=reading.label, value=value))
        series[parameter] = tuple(points)
    return series


def latest_values(series: Mapping[ParameterId, TimeSeries]) -> Dict[ParameterId, float]:
    return {p: (series[p][-1].value if series.get(p) else 0.0) for p in ParameterId}
