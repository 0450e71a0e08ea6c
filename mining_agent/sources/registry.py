from __future__ import annotations

from mining_agent.models.interfaces import DocumentFetcher, SearchCapability
from mining_agent.sources.curated import CuratedFeedFetcher
from mining_agent.sources.edgar import EdgarFetcher
from mining_agent.sources.site_search import asx_fetcher, lse_fetcher, sedar_fetcher


def default_fetchers(search: SearchCapability | None = None) -> list[DocumentFetcher]:
    """Configured sources, in collection order."""
    return [
        sedar_fetcher(search),
        EdgarFetcher(),
        lse_fetcher(search),
        asx_fetcher(search),
        CuratedFeedFetcher(),
    ]
