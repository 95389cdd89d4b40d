"""HTTP client for the distance-matrix service."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any

import httpx

from ...config import settings

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class DistanceMatrixResponse:
    status_code: int
    payload: dict[str, Any] | None
    text: str = ""


class DistanceMatrixClient:
    """Synchronous client for one origin / one destination distance lookups.

    Transport failures (timeouts, DNS, refused connections) are retried with
    backoff. HTTP status codes are returned to the caller untouched.
    """

    def __init__(
        self,
        base_url: str | None = None,
        origin: str | None = None,
        units: str | None = None,
        timeout: float | None = None,
        max_retries: int | None = None,
        backoff_seconds: float | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.base_url = base_url or settings.distance_matrix_url
        if not self.base_url:
            raise ValueError("Distance matrix URL is not configured.")
        self.origin = origin or settings.origin_address
        self.units = units or settings.distance_units
        self.timeout = timeout if timeout is not None else settings.distance_timeout_seconds
        self.max_retries = max_retries if max_retries is not None else settings.distance_max_retries
        self.backoff_seconds = backoff_seconds if backoff_seconds is not None else settings.distance_backoff_seconds
        self._transport = transport

    def _get_client(self) -> httpx.Client:
        return httpx.Client(
            timeout=httpx.Timeout(self.timeout, connect=min(self.timeout, 10.0)),
            transport=self._transport,
        )

    def distance(self, destination: str, api_key: str) -> DistanceMatrixResponse:
        """Request driving distance from the fixed origin to ``destination``."""
        params = {
            "origins": self.origin,
            "destinations": destination,
            "units": self.units,
            "key": api_key,
        }
        client = self._get_client()
        try:
            attempt = 0
            while True:
                try:
                    response = client.get(self.base_url, params=params)
                    break
                except (httpx.TimeoutException, httpx.NetworkError) as e:
                    attempt += 1
                    if attempt > self.max_retries:
                        raise ConnectionError(
                            f"Distance service at {self.base_url} unreachable after {attempt} attempts: {e}"
                        ) from e
                    wait_time = self.backoff_seconds * (2 ** (attempt - 1))
                    logger.debug(
                        f"Distance request failed, retrying in {wait_time:.1f}s "
                        f"(attempt {attempt}/{self.max_retries}): {e}"
                    )
                    time.sleep(wait_time)
        finally:
            client.close()

        logger.debug(f"Distance response {response.status_code}: {response.text[:500]}")
        payload = None
        if response.status_code == 200:
            try:
                payload = response.json()
            except ValueError:
                logger.warning("Distance response body is not valid JSON")
        return DistanceMatrixResponse(status_code=response.status_code, payload=payload, text=response.text)


def check_health(api_key: str | None = None, client: DistanceMatrixClient | None = None) -> bool:
    """Resolve the origin against itself to confirm the service answers."""
    key = api_key or settings.distance_api_key
    if not key:
        return False
    try:
        client = client or DistanceMatrixClient(max_retries=0)
        response = client.distance(client.origin, key)
        return response.status_code == 200 and bool(response.payload) and response.payload.get("status") == "OK"
    except (ConnectionError, httpx.HTTPError, ValueError):
        return False
