"""
base.py — Shared plumbing for seismic data sources.

Each source owns one lazily-created ``httpx.AsyncClient`` and exposes a
single coroutine, ``fetch()``, that either returns a complete list of
normalised events or raises ``SourceUnavailable``. Individual records that
cannot be read are skipped by the concrete source; whole-response failures
(transport errors, timeouts, non-2xx status, unusable body) are fatal for
that source and left to the fetch orchestrator.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import httpx

from backend.app.core.errors import SourceUnavailable
from backend.app.relief.models import SeismicEvent, SourceId

logger = logging.getLogger(__name__)


class SeismicSource:
    """Base class for one upstream earthquake feed."""

    source_id: SourceId

    def __init__(
        self,
        url: str,
        *,
        timeout: float,
        verify: bool = True,
        headers: Optional[Dict[str, str]] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.url = url
        self.timeout = timeout
        self.verify = verify
        self.headers = headers or {}
        self._transport = transport
        self._http_client: Optional[httpx.AsyncClient] = None

    @property
    def name(self) -> str:
        return self.source_id.label

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._http_client is None or self._http_client.is_closed:
            self._http_client = httpx.AsyncClient(
                timeout=self.timeout,
                verify=self.verify,
                headers=self.headers,
                transport=self._transport,
                follow_redirects=True,
            )
        return self._http_client

    async def close(self) -> None:
        """Close HTTP client."""
        if self._http_client and not self._http_client.is_closed:
            await self._http_client.aclose()

    async def _get(self, params: Optional[Dict[str, Any]] = None) -> httpx.Response:
        """GET ``self.url``; every transport or status failure is SourceUnavailable."""
        client = await self._get_client()
        try:
            response = await client.get(self.url, params=params)
            response.raise_for_status()
        except httpx.TimeoutException as exc:
            raise SourceUnavailable(self.name, f"timed out after {self.timeout:g}s") from exc
        except httpx.HTTPStatusError as exc:
            raise SourceUnavailable(
                self.name, f"HTTP {exc.response.status_code}",
                status_code=exc.response.status_code,
            ) from exc
        except httpx.HTTPError as exc:
            raise SourceUnavailable(self.name, f"{type(exc).__name__}: {exc}") from exc
        return response

    async def fetch(self) -> List[SeismicEvent]:
        raise NotImplementedError
