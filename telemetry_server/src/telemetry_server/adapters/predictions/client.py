import logging
from typing import Any, Dict, Optional

import requests

from telemetry_core.domain.ports import PredictionSource

logger = logging.getLogger(__name__)


class PredictionClient(PredictionSource):
    """HTTP client for the remote prediction service."""

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = 10.0,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._session = session or requests.Session()

    def fetch_predictions(self) -> Dict[str, Any]:
        url = f"{self.base_url}/predict_all"
        logger.debug("Fetching predictions from %s", url)
        resp = self._session.get(url, headers={"Accept": "application/json"}, timeout=self.timeout)
        resp.raise_for_status()
        data = resp.json()
        predictions = data.get("predictions") if isinstance(data, dict) else None
        if not isinstance(predictions, dict):
            raise ValueError("No predictions data in backend response")
        return predictions

    def check_health(self) -> Dict[str, Any]:
        resp = self._session.get(f"{self.base_url}/health", timeout=self.timeout)
        resp.raise_for_status()
        return resp.json()

    def close(self) -> None:
        self._session.close()
