import pytest

from telemetry_core.domain import levels


@pytest.mark.parametrize(
    "aqi,expected",
    [
        (0, "GOOD"),
        (50, "GOOD"),
        (51, "MODERATE"),
        (100, "MODERATE"),
        (150, "UNHEALTHY FOR SENSITIVE GROUPS"),
        (200, "UNHEALTHY"),
        (300, "VERY UNHEALTHY"),
        (301, "HAZARDOUS"),
    ],
)
def test_air_quality_level(aqi, expected):
    assert levels.air_quality_level(aqi).value == expected


@pytest.mark.parametrize(
    "so2,expected",
    [(0.9, "SAFE"), (0.91, "MODERATE"), (1.9, "MODERATE"), (2.5, "HIGH"), (2.51, "DANGEROUS")],
)
def test_hazard_level(so2, expected):
    assert levels.hazard_level(so2).value == expected


def test_percent_and_progress_are_clamped():
    assert levels.air_quality_percent(250) == 50.0
    assert levels.air_quality_percent(900) == 100.0
    assert levels.air_quality_percent(-5) == 0.0
    assert levels.hazard_progress(1.5) == 50.0
    assert levels.hazard_progress(10) == 100.0


def test_humidity_bands_are_exclusive_upper():
    assert levels.humidity_level(29.9) is levels.HumidityLevel.LOW
    assert levels.humidity_level(30) is levels.HumidityLevel.COMFORTABLE
    assert levels.humidity_level(60) is levels.HumidityLevel.MODERATE
    assert levels.humidity_level(80) is levels.HumidityLevel.HIGH


def test_temperature_bands():
    assert levels.temperature_level(-1) is levels.TemperatureLevel.FREEZING
    assert levels.temperature_level(0) is levels.TemperatureLevel.COLD
    assert levels.temperature_level(15) is levels.TemperatureLevel.COMFORTABLE
    assert levels.temperature_level(25) is levels.TemperatureLevel.WARM
    assert levels.temperature_level(35) is levels.TemperatureLevel.HOT
