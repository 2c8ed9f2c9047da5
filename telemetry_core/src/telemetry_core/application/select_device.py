from typing import Any, Mapping, Optional


def select_device(
    requested: Optional[str],
    devices: Optional[Mapping[str, Any]],
    default_device_id: Optional[str],
) -> Optional[str]:
    """Pick the device whose readings feed the pipeline.

    Priority: the requested id, then the configured default, then the first
    key in the map's iteration order. Returns ``None`` only for an empty map.
    """
    if not devices:
        return None
    if requested and requested in devices:
        return requested
    if default_device_id and default_device_id in devices:
        return default_device_id
    return next(iter(devices))
