# telemetry_core/application/refresh_predictions.py

import copy
import logging
import math
from typing import Any, Dict, List

from telemetry_core.domain.ports import PredictionSource

logger = logging.getLogger(__name__)

HORIZON = 3

PLACEHOLDER_PREDICTIONS: Dict[str, List[Dict[str, float]]] = {
    "pm": [{"PM2.5": 0, "PM10": 0} for _ in range(HORIZON)],
    "no2": [{"NO2": 0} for _ in range(HORIZON)],
    "co": [{"CO": 0} for _ in range(HORIZON)],
}

# summary key -> (prediction family, row field, unit)
SUMMARY_FIELDS = {
    "pm25": ("pm", "PM2.5", "μg/m³"),
    "pm10": ("pm", "PM10", "μg/m³"),
    "no2": ("no2", "NO2", "ppm"),
    "co": ("co", "CO", "ppm"),
}


def placeholder_predictions() -> Dict[str, Any]:
    return copy.deepcopy(PLACEHOLDER_PREDICTIONS)


def refresh_predictions(source: PredictionSource) -> Dict[str, Any]:
    """Fetch predictions, substituting the zero placeholder on any failure."""
    try:
        return source.fetch_predictions()
    except Exception as e:
        logger.error("Error fetching predictions: %s", e)
        return placeholder_predictions()


def _fmt(value: Any, unit: str) -> str:
    try:
        num = float(value)
    except (TypeError, ValueError):
        return "N/A"
    return f"{num:.2f} {unit}" if math.isfinite(num) else "N/A"


def summarize_predictions(predictions: Dict[str, Any]) -> Dict[str, List[str]]:
    """First three hourly horizons per pollutant, padded with ``N/A``."""
    summary: Dict[str, List[str]] = {}
    for key, (family, field, unit) in SUMMARY_FIELDS.items():
        rows = predictions.get(family) if isinstance(predictions, dict) else None
        values = []
        if isinstance(rows, list):
            for row in rows[:HORIZON]:
                values.append(_fmt((row or {}).get(field), unit))
        values.extend(["N/A"] * (HORIZON - len(values)))
        summary[key] = values
    return summary
