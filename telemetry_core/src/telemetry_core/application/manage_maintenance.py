# telemetry_core/application/manage_maintenance.py

import logging
import time
from typing import Any, Callable, Dict, List, Optional

from telemetry_core.domain.models import MaintenanceConfig, MaintenanceHistoryEntry
from telemetry_core.domain.ports import RealtimeStore, Unsubscribe

logger = logging.getLogger(__name__)

SETTINGS_PATH = "admin/maintenanceSettings"
HISTORY_PATH = "admin/maintenanceHistory"


def _now_ms() -> int:
    return int(time.time() * 1000)


def get_maintenance_config(store: RealtimeStore) -> MaintenanceConfig:
    try:
        return MaintenanceConfig.from_record(store.get(SETTINGS_PATH))
    except Exception as e:
        logger.error("Could not read maintenance settings: %s", e)
        return MaintenanceConfig()


def set_maintenance_config(
    store: RealtimeStore,
    config: MaintenanceConfig,
    now_ms: Optional[int] = None,
) -> Dict[str, Any]:
    """Write the switches (last writer wins) and record on/off transitions."""
    now = _now_ms() if now_ms is None else now_ms
    try:
        previous = MaintenanceConfig.from_record(store.get(SETTINGS_PATH))
    except Exception as e:
        logger.warning("Could not read previous maintenance settings: %s", e)
        previous = MaintenanceConfig()

    record: Dict[str, Any] = {**config.to_record(), "updatedAt": now}
    store.set(SETTINGS_PATH, record)
    logger.info("Maintenance settings updated: %s", config)

    try:
        _record_transition(store, previous.is_active(), config.is_active(), now)
    except Exception as e:
        logger.error("Could not record maintenance history: %s", e)
    return record


def _record_transition(store: RealtimeStore, was_active: bool, is_active: bool, now: int) -> None:
    if not was_active and is_active:
        store.push(HISTORY_PATH, {"startTime": now, "endTime": None, "createdAt": now})
        logger.info("Maintenance started at %s", now)
    elif was_active and not is_active:
        last = store.query_last(HISTORY_PATH, "startTime", 1) or {}
        if last:
            key, entry = next(iter(last.items()))
            entry = entry or {}
            if not entry.get("endTime"):
                store.update(f"{HISTORY_PATH}/{key}", {"endTime": now, "updatedAt": now})
            else:
                store.push(
                    HISTORY_PATH,
                    {"startTime": entry.get("startTime") or now, "endTime": now, "createdAt": now},
                )
        else:
            store.push(HISTORY_PATH, {"startTime": now, "endTime": now, "createdAt": now})
        logger.info("Maintenance ended at %s", now)


def list_maintenance_history(store: RealtimeStore) -> List[MaintenanceHistoryEntry]:
    raw = store.get(HISTORY_PATH) or {}
    entries = [
        MaintenanceHistoryEntry(
            start_time=int(item.get("startTime") or 0),
            end_time=item.get("endTime"),
            created_at=int(item.get("createdAt") or 0),
            updated_at=item.get("updatedAt"),
        )
        for item in raw.values()
        if isinstance(item, dict)
    ]
    entries.sort(key=lambda e: e.start_time)
    return entries


def watch_maintenance(
    store: RealtimeStore, on_change: Callable[[MaintenanceConfig], None]
) -> Unsubscribe:
    def _handler(value: Any) -> None:
        on_change(MaintenanceConfig.from_record(value))

    return store.subscribe(SETTINGS_PATH, None, None, _handler)
