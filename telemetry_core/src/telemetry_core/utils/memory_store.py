import copy
import logging
import threading
from typing import Any, Dict, List, Optional, Tuple

from telemetry_core.domain.ports import OnChange, RealtimeStore, Unsubscribe
from telemetry_core.domain.push_ids import PushIdGenerator

logger = logging.getLogger(__name__)


def _split(path: str) -> List[str]:
    return [part for part in path.strip("/").split("/") if part]


def _order_key(value: Any) -> Tuple:
    # Realtime Database child ordering: null, false, true, numbers, strings, objects
    if value is None:
        return (0,)
    if isinstance(value, bool):
        return (1, value)
    if isinstance(value, (int, float)):
        return (2, value)
    if isinstance(value, str):
        return (3, value)
    return (4,)


class InMemoryRealtimeStore(RealtimeStore):
    """Thread-safe in-process stand-in for the realtime database.

    Listeners receive the current value when they subscribe and again after
    every write that touches their path, on the writing thread.
    """

    def __init__(
        self,
        data: Optional[Dict[str, Any]] = None,
        push_ids: Optional[PushIdGenerator] = None,
    ):
        self._lock = threading.RLock()
        self._root: Dict[str, Any] = copy.deepcopy(data) if data else {}
        self._push_ids = push_ids or PushIdGenerator()
        self._listeners: Dict[int, Tuple[List[str], Optional[str], Optional[int], OnChange]] = {}
        self._next_listener = 0

    # READ side
    def _node(self, parts: List[str]) -> Any:
        node: Any = self._root
        for part in parts:
            if not isinstance(node, dict) or part not in node:
                return None
            node = node[part]
        return node

    def get(self, path: str, shallow: bool = False) -> Any:
        with self._lock:
            node = self._node(_split(path))
            if shallow and isinstance(node, dict):
                return {k: (True if isinstance(v, dict) else v) for k, v in node.items()}
            return copy.deepcopy(node)

    def query_last(
        self, path: str, order_by: Optional[str], limit: Optional[int]
    ) -> Optional[Dict[str, Any]]:
        with self._lock:
            return self._query(_split(path), order_by, limit)

    def _query(self, parts: List[str], order_by: Optional[str], limit: Optional[int]) -> Any:
        node = self._node(parts)
        if order_by is None and limit is None:
            return copy.deepcopy(node)
        if not isinstance(node, dict):
            return None
        if order_by is None:
            items = sorted(node.items())
        else:
            items = sorted(
                node.items(),
                key=lambda kv: (
                    _order_key(kv[1].get(order_by) if isinstance(kv[1], dict) else None),
                    kv[0],
                ),
            )
        if limit is not None:
            items = items[-limit:] if limit > 0 else []
        return copy.deepcopy(dict(items))

    def subscribe(
        self,
        path: str,
        order_by: Optional[str],
        limit: Optional[int],
        on_change: OnChange,
    ) -> Unsubscribe:
        with self._lock:
            listener_id = self._next_listener
            self._next_listener += 1
            parts = _split(path)
            self._listeners[listener_id] = (parts, order_by, limit, on_change)
            initial = self._query(parts, order_by, limit)
        logger.debug("Listener %d attached to %s", listener_id, path)
        on_change(initial)

        def unsubscribe() -> None:
            with self._lock:
                if self._listeners.pop(listener_id, None) is not None:
                    logger.debug("Listener %d detached from %s", listener_id, path)

        return unsubscribe

    def listener_count(self) -> int:
        with self._lock:
            return len(self._listeners)

    # WRITE side
    def set(self, path: str, value: Any) -> None:
        parts = _split(path)
        if not parts:
            raise ValueError("Cannot write the store root")
        with self._lock:
            if value is None:
                parent = self._node(parts[:-1])
                if isinstance(parent, dict):
                    parent.pop(parts[-1], None)
            else:
                node = self._root
                for part in parts[:-1]:
                    child = node.get(part)
                    if not isinstance(child, dict):
                        child = node[part] = {}
                    node = child
                node[parts[-1]] = copy.deepcopy(value)
        self._notify(parts)

    def update(self, path: str, value: Dict[str, Any]) -> None:
        for key, child in value.items():
            self.set(f"{path}/{key}", child)

    def push(self, path: str, value: Any) -> str:
        key = self._push_ids()
        self.set(f"{path}/{key}", value)
        return key

    def _notify(self, written: List[str]) -> None:
        with self._lock:
            pending = []
            for parts, order_by, limit, on_change in list(self._listeners.values()):
                common = min(len(parts), len(written))
                if parts[:common] == written[:common]:
                    pending.append((on_change, self._query(parts, order_by, limit)))
        for on_change, value in pending:
            on_change(value)
