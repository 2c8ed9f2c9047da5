from .build_snapshot import build_snapshot, no_sensors_snapshot
from .fetch_snapshot import PipelineOptions, SnapshotCache, fetch_snapshot
from .maintenance_overlay import apply_maintenance
from .manage_maintenance import get_maintenance_config, set_maintenance_config, watch_maintenance
from .query_readings import get_parameter_history, get_sensor_locations
from .refresh_predictions import placeholder_predictions, refresh_predictions, summarize_predictions
from .select_device import select_device

__all__ = [
    "build_snapshot",
    "no_sensors_snapshot",
    "PipelineOptions",
    "SnapshotCache",
    "fetch_snapshot",
    "apply_maintenance",
    "get_maintenance_config",
    "set_maintenance_config",
    "watch_maintenance",
    "get_parameter_history",
    "get_sensor_locations",
    "placeholder_predictions",
    "refresh_predictions",
    "summarize_predictions",
    "select_device",
]
