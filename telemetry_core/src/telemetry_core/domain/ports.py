from typing import Any, Callable, Dict, Optional, Protocol

Unsubscribe = Callable[[], None]
OnChange = Callable[[Optional[Dict[str, Any]]], None]


class RealtimeStore(Protocol):
    """Read/write contract with the realtime data store.

    ``None`` means the node is absent; an empty dict is an existing empty map.
    """

    def get(self, path: str, shallow: bool = False) -> Any: ...

    def query_last(
        self, path: str, order_by: Optional[str], limit: Optional[int]
    ) -> Optional[Dict[str, Any]]: ...

    def subscribe(
        self,
        path: str,
        order_by: Optional[str],
        limit: Optional[int],
        on_change: OnChange,
    ) -> Unsubscribe: ...

    def set(self, path: str, value: Any) -> None: ...

    def update(self, path: str, value: Dict[str, Any]) -> None: ...

    def push(self, path: str, value: Any) -> str: ...


class PredictionSource(Protocol):
    def fetch_predictions(self) -> Dict[str, Any]: ...
