import json
import logging
import random
import threading
from typing import (
    Any,
    Callable,
    Dict,
    Iterable,
    Iterator,
    Optional,
    Protocol,
    Tuple,
    runtime_checkable,
)

import requests

logger = logging.getLogger(__name__)

DATA_EVENTS = ("put", "patch")
CLOSING_EVENTS = ("cancel", "auth_revoked")


@runtime_checkable
class BackoffPolicy(Protocol):
    """Delay before the next stream reconnect."""

    def next_delay(self, *, success: bool) -> float: ...


class ExponentialBackoff(BackoffPolicy):
    """Reconnect delays for a dropped event stream.

    The first retry waits ``initial`` seconds and each further failure doubles
    the wait up to ``ceiling``. A connection that opens resets the sequence.
    """

    def __init__(self, initial: float = 1.0, ceiling: float = 60.0, jitter: float = 0.5):
        self._initial = initial
        self._ceiling = ceiling
        self._jitter = jitter
        self._failures = 0

    def next_delay(self, *, success: bool) -> float:
        if success:
            self._failures = 0
            return 0.0

        delay = min(self._initial * 2**self._failures, self._ceiling)
        if delay < self._ceiling:
            self._failures += 1
        return delay * (1 + random.uniform(-self._jitter, self._jitter))


def iter_events(lines: Iterable[str]) -> Iterator[Tuple[str, Any]]:
    """Parse a server-sent event stream into ``(event, data)`` pairs."""
    event: Optional[str] = None
    data_lines = []
    for line in lines:
        if line is None:
            continue
        if line == "":
            if event is not None:
                raw = "\n".join(data_lines)
                try:
                    data = json.loads(raw) if raw else None
                except ValueError:
                    data = raw
                yield event, data
            event, data_lines = None, []
        elif line.startswith("event:"):
            event = line[len("event:"):].strip()
        elif line.startswith("data:"):
            data_lines.append(line[len("data:"):].strip())


class StreamListener(threading.Thread):
    """Thread that holds a streaming GET open and reconnects with backoff."""

    daemon = True

    def __init__(
        self,
        session: requests.Session,
        url: str,
        params: Dict[str, str],
        on_event: Callable[[str, Any], None],
        backoff: BackoffPolicy,
        *,
        connect_timeout: float = 10.0,
        read_timeout: float = 90.0,
    ):
        super().__init__(name=f"stream-listener:{url}")
        self._session = session
        self._url = url
        self._params = params
        self._on_event = on_event
        self._backoff = backoff
        self._timeout = (connect_timeout, read_timeout)
        self._stop_event = threading.Event()
        self._response: Optional[requests.Response] = None

    def stop(self) -> None:
        """Signal the listener to stop and drop the open connection."""
        if self._stop_event.is_set():
            return
        logger.info("Stopping stream listener for %s", self._url)
        self._stop_event.set()
        response = self._response
        if response is not None:
            try:
                response.close()
            except Exception as e:
                logger.debug("Error closing stream response: %s", e)

    def stopped(self) -> bool:
        return self._stop_event.is_set()

    def run(self) -> None:
        logger.info("Starting stream listener for %s", self._url)

        while not self._stop_event.is_set():
            try:
                self._listen_once()
            except (requests.RequestException, ValueError) as e:
                if self._stop_event.is_set():
                    break
                logger.warning("Stream to %s failed: %s", self._url, e)
            except Exception as e:
                if self._stop_event.is_set():
                    break
                logger.error("Unexpected error in stream listener: %s", e)
            finally:
                self._response = None

            if self._stop_event.is_set():
                break
            delay = self._backoff.next_delay(success=False)
            logger.debug("Reconnecting stream in %.2f seconds", delay)
            self._stop_event.wait(delay)

        logger.info("Stream listener for %s stopped", self._url)

    def _listen_once(self) -> None:
        with self._session.get(
            self._url,
            params=self._params,
            headers={"Accept": "text/event-stream"},
            stream=True,
            timeout=self._timeout,
        ) as resp:
            self._response = resp
            resp.raise_for_status()
            self._backoff.next_delay(success=True)
            logger.debug("Stream connected to %s", self._url)

            for event, data in iter_events(resp.iter_lines(decode_unicode=True)):
                if self._stop_event.is_set():
                    return
                if event in DATA_EVENTS:
                    self._on_event(event, data)
                elif event in CLOSING_EVENTS:
                    logger.warning("Stream closed by server (%s): %s", event, data)
                    return
