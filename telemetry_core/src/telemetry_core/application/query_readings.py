# telemetry_core/application/query_readings.py

import logging
from typing import List, Optional, Tuple

from telemetry_core.application.fetch_snapshot import SENSORS_ROOT, device_path
from telemetry_core.application.normalize_readings import normalize_window
from telemetry_core.application.select_device import select_device
from telemetry_core.domain.models import ParameterId, SeriesPoint
from telemetry_core.domain.ports import RealtimeStore

logger = logging.getLogger(__name__)


def get_sensor_locations(store: RealtimeStore) -> List[str]:
    """Device ids known to the store, empty when unreachable."""
    try:
        devices = store.get(SENSORS_ROOT, shallow=True)
    except Exception as e:
        logger.error("Could not list sensor locations: %s", e)
        return []
    if isinstance(devices, dict):
        return list(devices)
    return []


def get_parameter_history(
    store: RealtimeStore,
    parameter: ParameterId,
    requested_device: Optional[str],
    default_device_id: Optional[str] = None,
) -> Tuple[Optional[str], List[SeriesPoint]]:
    """Chosen device and the full history of one parameter, ascending by time."""
    device_id = None
    try:
        devices = store.get(SENSORS_ROOT, shallow=True)
        if not isinstance(devices, dict):
            return None, []
        device_id = select_device(requested_device, devices, default_device_id)
        if device_id is None:
            return None, []
        records = store.get(device_path(device_id))
    except Exception as e:
        logger.error("Could not read history for %s: %s", requested_device, e)
        return device_id, []

    return device_id, [
        SeriesPoint(label=r.label, value=r.value(parameter))
        for r in normalize_window(records if isinstance(records, dict) else None)
        if r.value(parameter) is not None
    ]
