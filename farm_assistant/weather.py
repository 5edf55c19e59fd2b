"""Forwarding relay for the farm weather backend."""

from __future__ import annotations

import logging
from typing import Any

import httpx

LOGGER = logging.getLogger(__name__)

ERROR_ENVELOPE = {"error": "Failed to fetch weather data"}
ERROR_STATUS = 500


class WeatherRelay:
    """Relay a single upstream weather JSON response without transforming it."""

    def __init__(
        self,
        upstream_url: str,
        timeout: float = 10.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.upstream_url = upstream_url
        self._timeout = httpx.Timeout(timeout)
        self._client = client or httpx.AsyncClient(timeout=self._timeout)
        self._owns_client = client is None

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def fetch(self) -> tuple[int, Any]:
        """Return ``(status, body)``: the upstream JSON or the fixed error envelope."""
        try:
            response = await self._client.get(self.upstream_url, timeout=self._timeout)
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPStatusError as exc:
            LOGGER.error(
                "weather.upstream.status",
                extra={
                    "event": "weather.upstream.status",
                    "status_code": exc.response.status_code,
                },
            )
            return ERROR_STATUS, dict(ERROR_ENVELOPE)
        except (httpx.HTTPError, ValueError) as exc:
            LOGGER.error(
                "weather.upstream.failed",
                extra={"event": "weather.upstream.failed", "error": str(exc)},
            )
            return ERROR_STATUS, dict(ERROR_ENVELOPE)
        return 200, data
