from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Tuple, Union

MASKED = "N/A"
UNDER_MAINTENANCE = "UNDER MAINTENANCE"
NO_SENSORS_DETECTED = "NO SENSORS DETECTED"
PLACEHOLDER_POINTS = 5

# A displayed number, or the MASKED sentinel once an overlay has been applied.
Display = Union[float, str]


class ParameterId(str, Enum):
    AQI = "aqi"
    SO2 = "so2"
    PM25 = "pm25"
    PM10 = "pm10"
    CO = "co"
    NO2 = "no2"
    HUMIDITY = "humidity"
    TEMPERATURE = "temperature"


class SnapshotStatus(str, Enum):
    LIVE = "live"
    CACHED = "cached"
    NO_SENSORS = "no_sensors"


@dataclass(frozen=True)
class NormalizedReading:
    instant: int
    label: str
    values: Mapping[ParameterId, Optional[float]]

    def value(self, parameter: ParameterId) -> Optional[float]:
        return self.values.get(parameter)


@dataclass(frozen=True)
class SeriesPoint:
    label: str
    value: float


TimeSeries = Tuple[SeriesPoint, ...]


def placeholder_series() -> TimeSeries:
    return tuple(SeriesPoint(label=MASKED, value=0.0) for _ in range(PLACEHOLDER_POINTS))


@dataclass(frozen=True)
class DerivedMetrics:
    air_quality_level: str
    air_quality_percent: Display
    hazard_level: str
    hazard_progress: Display
    humidity_level: str
    temperature_level: str


@dataclass(frozen=True)
class MaintenanceConfig:
    """Operator switches stored under ``admin/maintenanceSettings``."""

    dashboard: bool = False
    aqi_display: bool = False
    pm25_chart: bool = False
    pm10_chart: bool = False
    co_chart: bool = False
    no2_chart: bool = False
    so2_chart: bool = False
    humidity_chart: bool = False
    temperature_chart: bool = False

    # attribute name -> wire field name
    FIELDS = {
        "dashboard": "dashboard",
        "aqi_display": "aqiDisplay",
        "pm25_chart": "pm25Chart",
        "pm10_chart": "pm10Chart",
        "co_chart": "coChart",
        "no2_chart": "no2Chart",
        "so2_chart": "so2Chart",
        "humidity_chart": "humidityChart",
        "temperature_chart": "temperatureChart",
    }

    @classmethod
    def from_record(cls, record: Optional[Mapping[str, Any]]) -> "MaintenanceConfig":
        record = record if isinstance(record, Mapping) else {}
        return cls(**{attr: bool(record.get(wire)) for attr, wire in cls.FIELDS.items()})

    @classmethod
    def all_active(cls) -> "MaintenanceConfig":
        return cls(**{attr: True for attr in cls.FIELDS})

    def to_record(self) -> Dict[str, bool]:
        return {wire: getattr(self, attr) for attr, wire in self.FIELDS.items()}

    def is_active(self) -> bool:
        return any(getattr(self, attr) for attr in self.FIELDS)

    def chart_flag(self, parameter: ParameterId) -> bool:
        return bool(getattr(self, f"{parameter.value}_chart", False))


@dataclass(frozen=True)
class Snapshot:
    device_id: Optional[str]
    status: SnapshotStatus
    latest: Dict[ParameterId, Display]
    metrics: DerivedMetrics
    series: Dict[ParameterId, TimeSeries]
    maintenance: MaintenanceConfig = field(default_factory=MaintenanceConfig)


@dataclass
class MaintenanceHistoryEntry:
    start_time: int
    end_time: Optional[int]
    created_at: int
    updated_at: Optional[int] = None
