from unittest.mock import Mock

from telemetry_core.application.refresh_predictions import (
    PLACEHOLDER_PREDICTIONS,
    placeholder_predictions,
    refresh_predictions,
    summarize_predictions,
)


def test_refresh_returns_source_predictions():
    source = Mock()
    source.fetch_predictions.return_value = {"pm": [{"PM2.5": 1, "PM10": 2}]}
    assert refresh_predictions(source) == {"pm": [{"PM2.5": 1, "PM10": 2}]}


def test_refresh_failure_gives_placeholder():
    source = Mock()
    source.fetch_predictions.side_effect = ConnectionError("down")
    result = refresh_predictions(source)
    assert result == PLACEHOLDER_PREDICTIONS
    assert len(result["pm"]) == 3
    assert result["co"][0] == {"CO": 0}


def test_placeholder_is_a_fresh_copy():
    first = placeholder_predictions()
    first["pm"][0]["PM2.5"] = 99
    assert placeholder_predictions()["pm"][0]["PM2.5"] == 0


def test_summary_formats_and_pads():
    summary = summarize_predictions(
        {
            "pm": [{"PM2.5": 12.346, "PM10": 20}, {"PM2.5": "bad", "PM10": 21}],
            "no2": [{"NO2": 0.1234}],
            "co": "unexpected",
        }
    )
    assert summary["pm25"] == ["12.35 μg/m³", "N/A", "N/A"]
    assert summary["pm10"] == ["20.00 μg/m³", "21.00 μg/m³", "N/A"]
    assert summary["no2"] == ["0.12 ppm", "N/A", "N/A"]
    assert summary["co"] == ["N/A", "N/A", "N/A"]
