from enum import Enum

AQI_SCALE_MAX = 500.0
SO2_PROGRESS_MAX = 3.0


class AirQualityLevel(str, Enum):
    GOOD = "GOOD"
    MODERATE = "MODERATE"
    UNHEALTHY_FOR_SENSITIVE_GROUPS = "UNHEALTHY FOR SENSITIVE GROUPS"
    UNHEALTHY = "UNHEALTHY"
    VERY_UNHEALTHY = "VERY UNHEALTHY"
    HAZARDOUS = "HAZARDOUS"


class HazardLevel(str, Enum):
    SAFE = "SAFE"
    MODERATE = "MODERATE"
    HIGH = "HIGH"
    DANGEROUS = "DANGEROUS"


class HumidityLevel(str, Enum):
    LOW = "LOW"
    COMFORTABLE = "COMFORTABLE"
    MODERATE = "MODERATE"
    HIGH = "HIGH"


class TemperatureLevel(str, Enum):
    FREEZING = "FREEZING"
    COLD = "COLD"
    COMFORTABLE = "COMFORTABLE"
    WARM = "WARM"
    HOT = "HOT"


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def air_quality_level(aqi: float) -> AirQualityLevel:
    """EPA AQI category; each bucket includes its upper bound."""
    if aqi <= 50:
        return AirQualityLevel.GOOD
    if aqi <= 100:
        return AirQualityLevel.MODERATE
    if aqi <= 150:
        return AirQualityLevel.UNHEALTHY_FOR_SENSITIVE_GROUPS
    if aqi <= 200:
        return AirQualityLevel.UNHEALTHY
    if aqi <= 300:
        return AirQualityLevel.VERY_UNHEALTHY
    return AirQualityLevel.HAZARDOUS


def air_quality_percent(aqi: float) -> float:
    return clamp(aqi / AQI_SCALE_MAX * 100, 0.0, 100.0)


def hazard_level(value: float) -> HazardLevel:
    if value <= 0.9:
        return HazardLevel.SAFE
    if value <= 1.9:
        return HazardLevel.MODERATE
    if value <= 2.5:
        return HazardLevel.HIGH
    return HazardLevel.DANGEROUS


def hazard_progress(value: float) -> float:
    return clamp(value / SO2_PROGRESS_MAX * 100, 0.0, 100.0)


def humidity_level(humidity: float) -> HumidityLevel:
    if humidity < 30:
        return HumidityLevel.LOW
    if humidity < 60:
        return HumidityLevel.COMFORTABLE
    if humidity < 80:
        return HumidityLevel.MODERATE
    return HumidityLevel.HIGH


def temperature_level(temperature: float) -> TemperatureLevel:
    if temperature < 0:
        return TemperatureLevel.FREEZING
    if temperature < 15:
        return TemperatureLevel.COLD
    if temperature < 25:
        return TemperatureLevel.COMFORTABLE
    if temperature < 35:
        return TemperatureLevel.WARM
    return TemperatureLevel.HOT
