# telemetry_server/adapters/api/schemas.py

from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from telemetry_core.domain.models import MaintenanceConfig, SeriesPoint, Snapshot

DisplayOut = Union[float, str]


class SeriesPointOut(BaseModel):
    label: str
    value: float

    @classmethod
    def from_domain(cls, point: SeriesPoint) -> "SeriesPointOut":
        return cls(label=point.label, value=point.value)


class MetricsOut(BaseModel):
    air_quality_level: str
    air_quality_percent: DisplayOut
    hazard_level: str
    hazard_progress: DisplayOut
    humidity_level: str
    temperature_level: str


class MaintenanceIn(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    dashboard: bool = False
    aqi_display: bool = Field(False, alias="aqiDisplay")
    pm25_chart: bool = Field(False, alias="pm25Chart")
    pm10_chart: bool = Field(False, alias="pm10Chart")
    co_chart: bool = Field(False, alias="coChart")
    no2_chart: bool = Field(False, alias="no2Chart")
    so2_chart: bool = Field(False, alias="so2Chart")
    humidity_chart: bool = Field(False, alias="humidityChart")
    temperature_chart: bool = Field(False, alias="temperatureChart")

    def to_domain(self) -> MaintenanceConfig:
        return MaintenanceConfig(**self.model_dump(by_alias=False))


class MaintenanceOut(MaintenanceIn):
    updated_at: Optional[int] = Field(None, alias="updatedAt")

    @classmethod
    def from_domain(
        cls, config: MaintenanceConfig, updated_at: Optional[int] = None
    ) -> "MaintenanceOut":
        return cls(**config.to_record(), updatedAt=updated_at)


class SnapshotOut(BaseModel):
    device_id: Optional[str]
    status: str
    latest: Dict[str, DisplayOut]
    metrics: MetricsOut
    series: Dict[str, List[SeriesPointOut]]
    maintenance: MaintenanceOut

    @classmethod
    def from_domain(cls, snapshot: Snapshot) -> "SnapshotOut":
        m = snapshot.metrics
        return cls(
            device_id=snapshot.device_id,
            status=snapshot.status.value,
            latest={p.value: v for p, v in snapshot.latest.items()},
            metrics=MetricsOut(
                air_quality_level=m.air_quality_level,
                air_quality_percent=m.air_quality_percent,
                hazard_level=m.hazard_level,
                hazard_progress=m.hazard_progress,
                humidity_level=m.humidity_level,
                temperature_level=m.temperature_level,
            ),
            series={
                p.value: [SeriesPointOut.from_domain(pt) for pt in points]
                for p, points in snapshot.series.items()
            },
            maintenance=MaintenanceOut.from_domain(snapshot.maintenance),
        )


class PredictionsOut(BaseModel):
    predictions: Dict[str, Any]
    summary: Dict[str, List[str]]


class HistoryOut(BaseModel):
    parameter: str
    device_id: Optional[str] = Field(None, description="Requested device, default when omitted")
    points: List[SeriesPointOut]


class MaintenanceHistoryOut(BaseModel):
    start_time: int
    end_time: Optional[int] = None
    created_at: int
    updated_at: Optional[int] = None

    @classmethod
    def from_domain(cls, entry) -> "MaintenanceHistoryOut":
        return cls(
            start_time=entry.start_time,
            end_time=entry.end_time,
            created_at=entry.created_at,
            updated_at=entry.updated_at,
        )
