"""Multi-source run: collect documents from every fetcher, then process them with bounded concurrency."""
from __future__ import annotations

import asyncio

from loguru import logger

from mining_agent.agents.document_processor import DocumentProcessor
from mining_agent.config import settings
from mining_agent.models.interfaces import (
    DocumentFetcher,
    ProcessingResult,
    RunHistory,
    ScrapingResult,
    SourceDocument,
)
from mining_agent.services import progress, streaming
from mining_agent.services.logger import log_event
from mining_agent.services.progress import ProgressReporter


class MiningAgentOrchestrator:
    agent_type = "mining"

    def __init__(
        self,
        fetchers: list[DocumentFetcher],
        processor: DocumentProcessor,
        reporter: ProgressReporter | None = None,
        *,
        concurrency: int | None = None,
        history: RunHistory | None = None,
    ):
        self.fetchers = fetchers
        self.processor = processor
        self.reporter = reporter or ProgressReporter()
        self.concurrency = max(concurrency or settings.document_concurrency, 1)
        self.history = history
        self._results: dict[str, ScrapingResult] = {}

    def _result_for(self, source: str) -> ScrapingResult:
        result = self._results.get(source)
        if result is None:
            result = ScrapingResult(source=source)
            self._results[source] = result
        return result

    def _ordered_results(self) -> list[ScrapingResult]:
        ordered = [self._results[f.name] for f in self.fetchers if f.name in self._results]
        listed = {f.name for f in self.fetchers}
        ordered.extend(r for name, r in self._results.items() if name not in listed)
        return ordered

    async def _collect(self) -> list[tuple[str, SourceDocument]]:
        collected: list[tuple[str, SourceDocument]] = []
        total = len(self.fetchers)
        self.reporter.emit(streaming.collect_started(total))

        for index, fetcher in enumerate(self.fetchers):
            self.reporter.emit(streaming.source_scanning(fetcher.name, index, total))
            try:
                documents = await fetcher.fetch_latest_documents()
            except Exception as exc:
                logger.warning(f"Fetcher {fetcher.name} failed: {exc}")
                self._result_for(fetcher.name).errors.append(f"Failed to fetch documents: {exc}")
                self.reporter.emit(streaming.source_failed(fetcher.name, str(exc)))
                continue

            for document in documents:
                document.source = document.source or fetcher.name
                collected.append((fetcher.name, document))
            logger.info(f"{fetcher.name}: {len(documents)} documents")
        return collected

    def _record(self, source: str, document: SourceDocument, outcome: ProcessingResult) -> None:
        result = self._result_for(source)
        result.documents_found += 1
        if not outcome.success:
            result.errors.append(f"{document.url}: {outcome.error or 'unknown error'}")
        elif outcome.action == "created":
            result.projects_created += 1
        elif outcome.action == "updated":
            result.projects_updated += 1

    async def _process(self, documents: list[tuple[str, SourceDocument]]) -> None:
        semaphore = asyncio.Semaphore(self.concurrency)
        total = len(documents)
        self.reporter.emit(streaming.process_started(total))
        started = 0

        async def process_one(source: str, document: SourceDocument) -> None:
            nonlocal started
            async with semaphore:
                self.reporter.emit(
                    streaming.document_started(
                        started, total, title=document.title, source=source, url=document.url
                    )
                )
                started += 1
                try:
                    outcome = await self.processor.process_document(document)
                except Exception as exc:
                    logger.exception(f"Unexpected failure processing {document.url}")
                    outcome = ProcessingResult(success=False, error=str(exc))
                self._record(source, document, outcome)

        await asyncio.gather(*(process_one(source, doc) for source, doc in documents))

    async def _record_run(self, results: list[ScrapingResult]) -> None:
        if self.history is None:
            return
        try:
            await self.history.record_run(
                self.agent_type,
                projects_added=sum(r.projects_created for r in results),
                projects_updated=sum(r.projects_updated for r in results),
            )
        except Exception as exc:
            logger.warning(f"Could not record {self.agent_type} run: {exc}")

    async def run(self) -> list[ScrapingResult]:
        self._results = {}
        self.reporter.reset()
        progress.register(self.reporter)
        self.reporter.emit(streaming.run_started())

        try:
            documents = await self._collect()
            if not documents:
                logger.warning("No documents collected from any source")
                self.reporter.emit(streaming.no_documents())
                return self._ordered_results()

            await self._process(documents)
            results = self._ordered_results()
            await self._record_run(results)
            self.reporter.emit(
                streaming.run_completed(
                    len(documents),
                    documents=len(documents),
                    projects_created=sum(r.projects_created for r in results),
                    projects_updated=sum(r.projects_updated for r in results),
                )
            )
            log_event(
                "mining_agent_run",
                "Mining agent run completed",
                run_id=self.reporter.run_id,
                results=[r.to_dict() for r in results],
            )
            return results
        except Exception as exc:
            logger.exception("Mining agent run failed")
            self.reporter.emit(streaming.run_failed(str(exc) or exc.__class__.__name__))
            raise
