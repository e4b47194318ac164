"""Async client for an OpenAI-compatible model catalog (GET /v1/models)."""

import logging
import time
from collections.abc import Callable
from typing import Any

import httpx

from toolcaddy.errors import CatalogError

logger = logging.getLogger(__name__)


class ModelCatalog:
    """Wraps httpx.AsyncClient to list model ids, caching the last good answer."""

    def __init__(
        self,
        models_url: str,
        api_key: str | None = None,
        timeout: float = 30.0,
        cache_ttl: float = 300.0,
        transport: httpx.AsyncBaseTransport | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.models_url = models_url
        self.cache_ttl = cache_ttl
        self._clock = clock
        self._cached: list[str] | None = None
        self._cached_at = 0.0

        headers = {}
        if api_key:
            headers["Authorization"] = f"Bearer {api_key}"

        self._client = httpx.AsyncClient(timeout=timeout, headers=headers, transport=transport)

    async def close(self) -> None:
        await self._client.aclose()

    def _cache_fresh(self) -> bool:
        return self._cached is not None and self._clock() - self._cached_at < self.cache_ttl

    def invalidate(self) -> None:
        self._cached = None

    async def list_models(self, refresh: bool = False) -> list[str]:
        """Return model ids. Raises httpx.HTTPStatusError on non-2xx responses."""
        if not refresh and self._cache_fresh():
            logger.debug("Serving %d model ids from cache", len(self._cached))
            return list(self._cached)

        resp = await self._client.get(self.models_url)
        resp.raise_for_status()
        models = _parse_model_ids(resp.json())

        self._cached = models
        self._cached_at = self._clock()
        logger.debug("Fetched %d model ids from %s", len(models), self.models_url)
        return list(models)


def _parse_model_ids(payload: Any) -> list[str]:
    data = payload.get("data") if isinstance(payload, dict) else None
    if not isinstance(data, list):
        raise CatalogError("model catalog response has no 'data' list")
    ids = []
    for item in data:
        model_id = item.get("id") if isinstance(item, dict) else None
        if not isinstance(model_id, str):
            raise CatalogError(f"model catalog entry without an id: {item!r}")
        ids.append(model_id)
    return ids
