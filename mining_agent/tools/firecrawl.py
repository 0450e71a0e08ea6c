"""Firecrawl REST client implementing the search/scrape capability."""
from __future__ import annotations

from typing import Any

import httpx
from loguru import logger

from mining_agent.config import settings
from mining_agent.models.interfaces import SearchHit
from mining_agent.tools.web_utils import clean_content, is_valid_url


class FirecrawlClient:
    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        *,
        scrape_timeout_ms: int | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.api_key = (api_key if api_key is not None else settings.firecrawl_api_key).strip()
        self.base_url = (base_url or settings.firecrawl_base_url).strip().rstrip("/")
        self.scrape_timeout_ms = scrape_timeout_ms or settings.scrape_timeout_ms
        self._transport = transport

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        return headers

    async def _post(self, path: str, payload: dict[str, Any], timeout_ms: int) -> dict[str, Any]:
        if not self.base_url:
            raise RuntimeError("Firecrawl base URL not configured")

        # Firecrawl's own timeout applies server-side; leave headroom for the round trip.
        timeout_seconds = max(timeout_ms / 1000.0, 1.0) + 5.0
        async with httpx.AsyncClient(
            timeout=timeout_seconds,
            follow_redirects=True,
            transport=self._transport,
        ) as client:
            response = await client.post(self.base_url + path, json=payload, headers=self._headers())
            response.raise_for_status()
            data = response.json()

        if not isinstance(data, dict):
            raise RuntimeError(f"Firecrawl {path} returned a non-object response")
        if data.get("success") is False:
            raise RuntimeError(f"Firecrawl {path} failed: {data.get('error') or 'unknown error'}")
        return data

    async def search(
        self,
        query: str,
        *,
        limit: int,
        timeout_ms: int,
        formats: list[str] | None = None,
    ) -> list[SearchHit]:
        payload = {
            "query": query,
            "limit": limit,
            "timeout": timeout_ms,
            "scrapeOptions": {"formats": formats or ["markdown"]},
        }
        data = await self._post("/v1/search", payload, timeout_ms)

        hits: list[SearchHit] = []
        for item in data.get("data") or []:
            if not isinstance(item, dict):
                continue
            url = str(item.get("url") or "")
            if not is_valid_url(url):
                continue
            metadata = item.get("metadata") if isinstance(item.get("metadata"), dict) else {}
            hits.append(
                SearchHit(
                    url=url,
                    title=str(item.get("title") or metadata.get("title") or ""),
                    content=clean_content(
                        str(item.get("markdown") or item.get("content") or item.get("description") or "")
                    ),
                )
            )
        logger.debug(f"Firecrawl search returned {len(hits)} hits for {query!r}")
        return hits

    async def scrape(self, url: str) -> str:
        payload = {
            "url": url,
            "formats": ["markdown"],
            "onlyMainContent": True,
            "timeout": self.scrape_timeout_ms,
        }
        data = await self._post("/v1/scrape", payload, self.scrape_timeout_ms)

        body = data.get("data", data)
        content = ""
        if isinstance(body, dict):
            content = str(body.get("markdown") or body.get("content") or "")
        if not content:
            raise RuntimeError(f"Firecrawl response missing content for {url}")
        return clean_content(content)
