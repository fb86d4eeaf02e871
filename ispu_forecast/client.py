"""
HTTP access to the historical-data backend and the ML prediction service.

Only transport lives here: status codes and bodies are handed back as-is and
interpreted by the pipeline. Network failures and timeouts raise TransportError.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import aiohttp

from ispu_forecast.config import Settings
from ispu_forecast.errors import TransportError


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Response:
    status: int
    body: Any

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300


def auth_headers(token: Optional[str] = None) -> Dict[str, str]:
    headers = {"Content-Type": "application/json"}
    if token:
        headers["Authorization"] = f"Bearer {token}"
    return headers


class ForecastClient:
    def __init__(self, settings: Settings, session: Optional[aiohttp.ClientSession] = None) -> None:
        self.settings = settings
        self._session = session
        self._owns_session = session is None

    async def __aenter__(self) -> "ForecastClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.settings.request_timeout)
            )
            self._owns_session = True
        return self._session

    async def close(self) -> None:
        if self._owns_session and self._session is not None and not self._session.closed:
            await self._session.close()

    async def _request(self, method: str, url: str, **kwargs: Any) -> Response:
        session = self._get_session()
        try:
            async with session.request(method, url, **kwargs) as resp:
                try:
                    body = await resp.json(content_type=None)
                except ValueError:
                    body = {}
                return Response(status=resp.status, body=body if body is not None else {})
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.warning("%s %s failed: %s", method, url, e)
            raise TransportError(f"{method} {url} failed: {e}") from e

    async def fetch_hourly(self, city: str, hours: int, token: Optional[str] = None) -> Response:
        """GET /weather/analytics/hourly -> {"data": {"hourly": [...]}}"""
        url = f"{self.settings.api_base_url}/weather/analytics/hourly"
        return await self._request(
            "GET", url, params={"city": city, "hours": str(int(hours))}, headers=auth_headers(token)
        )

    async def predict(self, pollutant: str, history: List[Dict[str, Any]]) -> Response:
        """POST /predict -> {"predictions": [...]} or {"detail": "..."}"""
        url = f"{self.settings.ml_api_url}/predict"
        return await self._request(
            "POST", url, json={"pollutant": pollutant, "history": history}, headers=auth_headers()
        )
