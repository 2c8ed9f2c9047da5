import json
import logging
from typing import Any, Callable, Dict, Optional

import requests

from telemetry_core.config.environments import Settings
from telemetry_core.domain.ports import OnChange, RealtimeStore, Unsubscribe

from telemetry_server.adapters.firebase.stream import (
    BackoffPolicy,
    ExponentialBackoff,
    StreamListener,
)

logger = logging.getLogger(__name__)


class FirebaseRealtimeStore(RealtimeStore):
    """Realtime Database adapter over the REST API.

    Reads are plain ``GET {path}.json`` calls; ``subscribe`` keeps a
    server-sent event stream open on the path and re-reads the queried
    window whenever the stream reports a change. Each subscription owns its
    own session, since a session is not shared safely across threads.
    """

    def __init__(
        self,
        base_url: str,
        *,
        auth_token: str = "",
        timeout: float = 10.0,
        stream_read_timeout: float = 90.0,
        session: Optional[requests.Session] = None,
        session_factory: Callable[[], requests.Session] = requests.Session,
        backoff_factory: Callable[[], BackoffPolicy] = ExponentialBackoff,
    ):
        self.base_url = base_url.rstrip("/")
        self.auth_token = auth_token
        self.timeout = timeout
        self.stream_read_timeout = stream_read_timeout
        self._session = session or session_factory()
        self._session_factory = session_factory
        self._backoff_factory = backoff_factory

        logger.info("Initializing realtime store client: url=%s", self.base_url)

    @classmethod
    def from_settings(cls, settings: Settings) -> "FirebaseRealtimeStore":
        return cls(
            settings.FIREBASE_DB_URL,
            auth_token=settings.FIREBASE_AUTH_TOKEN,
            timeout=settings.STORE_TIMEOUT_SEC,
            stream_read_timeout=settings.STREAM_READ_TIMEOUT_SEC,
        )

    def _url(self, path: str) -> str:
        return f"{self.base_url}/{path.strip('/')}.json"

    def _params(self, **extra: str) -> Dict[str, str]:
        params = dict(extra)
        if self.auth_token:
            params["auth"] = self.auth_token
        return params

    @staticmethod
    def _query_params(order_by: Optional[str], limit: Optional[int]) -> Dict[str, str]:
        if order_by is None and limit is None:
            return {}
        # orderBy values are JSON strings on the REST API
        params = {"orderBy": json.dumps(order_by or "$key")}
        if limit is not None:
            params["limitToLast"] = str(limit)
        return params

    # READ side
    def get(self, path: str, shallow: bool = False) -> Any:
        params = self._params(shallow="true") if shallow else self._params()
        resp = self._session.get(self._url(path), params=params, timeout=self.timeout)
        resp.raise_for_status()
        return resp.json()

    def query_last(
        self, path: str, order_by: Optional[str], limit: Optional[int]
    ) -> Optional[Dict[str, Any]]:
        return self._query(self._session, path, order_by, limit)

    def _query(
        self,
        session: requests.Session,
        path: str,
        order_by: Optional[str],
        limit: Optional[int],
    ) -> Optional[Dict[str, Any]]:
        params = self._params(**self._query_params(order_by, limit))
        resp = session.get(self._url(path), params=params, timeout=self.timeout)
        resp.raise_for_status()
        data = resp.json()
        if data is None:
            return None
        # a queried node that is a list or primitive is not a keyed collection
        return data if isinstance(data, dict) else {}

    def subscribe(
        self,
        path: str,
        order_by: Optional[str],
        limit: Optional[int],
        on_change: OnChange,
    ) -> Unsubscribe:
        session = self._session_factory()

        def _on_event(event: str, data: Any) -> None:
            try:
                on_change(self._query(session, path, order_by, limit))
            except Exception as e:
                logger.error("Failed to deliver change on %s: %s", path, e)

        listener = StreamListener(
            session,
            self._url(path),
            self._params(**self._query_params(order_by, limit)),
            _on_event,
            self._backoff_factory(),
            connect_timeout=self.timeout,
            read_timeout=self.stream_read_timeout,
        )
        listener.start()

        def unsubscribe() -> None:
            listener.stop()
            session.close()

        return unsubscribe

    # WRITE side
    def set(self, path: str, value: Any) -> None:
        resp = self._session.put(
            self._url(path), params=self._params(), json=value, timeout=self.timeout
        )
        resp.raise_for_status()

    def update(self, path: str, value: Dict[str, Any]) -> None:
        resp = self._session.patch(
            self._url(path), params=self._params(), json=value, timeout=self.timeout
        )
        resp.raise_for_status()

    def push(self, path: str, value: Any) -> str:
        resp = self._session.post(
            self._url(path), params=self._params(), json=value, timeout=self.timeout
        )
        resp.raise_for_status()
        return resp.json()["name"]

    def close(self) -> None:
        logger.info("Closing realtime store client")
        self._session.close()
