from __future__ import annotations

from loguru import logger

from mining_agent.config import settings
from mining_agent.models.interfaces import SearchCapability, SourceDocument
from mining_agent.tools.firecrawl import FirecrawlClient


class SiteSearchFetcher:
    """Finds a regulator's or exchange's recent filings through a site-restricted web search."""

    def __init__(
        self,
        name: str,
        site: str,
        queries: list[str],
        *,
        document_type: str,
        search: SearchCapability | None = None,
        results_per_query: int = 5,
    ):
        self.name = name
        self.site = site
        self.queries = queries
        self.document_type = document_type
        self.results_per_query = results_per_query
        self._search = search

    @property
    def search(self) -> SearchCapability:
        if self._search is None:
            self._search = FirecrawlClient()
        return self._search

    async def fetch_latest_documents(self) -> list[SourceDocument]:
        documents: list[SourceDocument] = []
        seen: set[str] = set()
        for query in self.queries:
            hits = await self.search.search(
                f"site:{self.site} {query}",
                limit=self.results_per_query,
                timeout_ms=int(settings.search_timeout_seconds * 1000),
            )
            for hit in hits:
                if hit.url in seen:
                    continue
                seen.add(hit.url)
                documents.append(
                    SourceDocument(
                        url=hit.url,
                        title=hit.title,
                        type=self.document_type,
                        source=self.name,
                    )
                )
        logger.info(f"{self.name}: found {len(documents)} candidate documents")
        return documents


def sedar_fetcher(search: SearchCapability | None = None) -> SiteSearchFetcher:
    return SiteSearchFetcher(
        "SEDAR",
        "sedarplus.ca",
        ['"NI 43-101" technical report', '"technical report" feasibility study mineral resource'],
        document_type="NI 43-101",
        search=search,
    )


def lse_fetcher(search: SearchCapability | None = None) -> SiteSearchFetcher:
    return SiteSearchFetcher(
        "LSE",
        "londonstockexchange.com",
        ["RNS mineral resource estimate", "RNS feasibility study mining project"],
        document_type="RNS Announcement",
        search=search,
    )


def asx_fetcher(search: SearchCapability | None = None) -> SiteSearchFetcher:
    return SiteSearchFetcher(
        "ASX",
        "asx.com.au",
        ["JORC mineral resource update", "JORC ore reserve feasibility study"],
        document_type="JORC",
        search=search,
    )
