from __future__ import annotations

import asyncio

from loguru import logger

from mining_agent.config import settings
from mining_agent.models.interfaces import ScrapedDocument, SearchCapability, SearchQuery
from mining_agent.services import streaming
from mining_agent.services.progress import ProgressReporter

MINING_KEYWORDS = (
    "mining",
    "resource",
    "ore",
    "mineral",
    "feasibility",
    "exploration",
    "production",
    "reserve",
    "tonnage",
    "grade",
    "npv",
    "irr",
    "capex",
    "opex",
)

OFF_TOPIC_KEYWORDS = (
    "fashion",
    "clothing",
    "retail",
    "restaurant",
    "real estate",
    "insurance",
    "banking",
)

MIN_KEYWORD_MATCHES = 2


def is_relevant_content(content: str) -> bool:
    """At least two mining keywords and no off-topic keyword (substring match)."""
    lowered = (content or "").lower()
    if any(keyword in lowered for keyword in OFF_TOPIC_KEYWORDS):
        return False
    matches = sum(1 for keyword in MINING_KEYWORDS if keyword in lowered)
    return matches >= MIN_KEYWORD_MATCHES


class MiningWebScraper:
    """Runs search queries in small concurrent batches until enough documents are found."""

    def __init__(
        self,
        search: SearchCapability,
        reporter: ProgressReporter | None = None,
        *,
        batch_size: int | None = None,
        results_per_query: int | None = None,
        timeout_seconds: float | None = None,
        sufficient_documents: int | None = None,
        scrape_timeout_ms: int | None = None,
    ):
        self.search = search
        self.reporter = reporter or ProgressReporter()
        self.batch_size = max(batch_size or settings.search_batch_size, 1)
        self.results_per_query = results_per_query or settings.search_results_per_query
        self.timeout_seconds = timeout_seconds or settings.search_timeout_seconds
        self.sufficient_documents = sufficient_documents or settings.sufficient_documents
        self.scrape_timeout_ms = scrape_timeout_ms or settings.scrape_timeout_ms

    async def _search_single_query(self, query: SearchQuery) -> list[ScrapedDocument]:
        try:
            hits = await asyncio.wait_for(
                self.search.search(
                    query.text,
                    limit=self.results_per_query,
                    timeout_ms=self.scrape_timeout_ms,
                    formats=["markdown"],
                ),
                timeout=self.timeout_seconds,
            )
        except asyncio.TimeoutError:
            logger.warning(f"Search timeout for: {query.text[:50]}")
            self.reporter.emit(streaming.query_skipped(query.text, "timeout"))
            return []
        except Exception as exc:
            logger.warning(f"Search failed for {query.text[:50]!r}: {exc}")
            self.reporter.emit(streaming.query_skipped(query.text, "error"))
            return []

        return [
            ScrapedDocument(
                url=hit.url,
                title=hit.title or "Mining Project Update",
                content=hit.content,
                source_query=query,
            )
            for hit in hits
            if hit.content and is_relevant_content(hit.content)
        ]

    async def scrape_with_queries(self, queries: list[SearchQuery]) -> list[ScrapedDocument]:
        documents: list[ScrapedDocument] = []
        seen_urls: set[str] = set()
        total = len(queries)
        self.reporter.emit(streaming.search_started(total))

        for start in range(0, total, self.batch_size):
            batch = queries[start : start + self.batch_size]
            batch_results = await asyncio.gather(*(self._search_single_query(q) for q in batch))

            found = 0
            for results in batch_results:
                for document in results:
                    if document.url in seen_urls:
                        continue
                    seen_urls.add(document.url)
                    documents.append(document)
                    found += 1

            commodities = list(dict.fromkeys(q.commodity for q in batch if q.commodity))
            self.reporter.emit(
                streaming.batch_searched(
                    queries=[q.text for q in batch],
                    commodities=commodities,
                    documents_found=found,
                    total_found=len(documents),
                    current_step=start + len(batch),
                    total_steps=total,
                )
            )

            if len(documents) >= self.sufficient_documents:
                self.reporter.emit(streaming.search_sufficient(len(documents), total))
                break

        logger.info(f"Collected {len(documents)} relevant documents from {total} queries")
        return documents
