from __future__ import annotations

import asyncio

from loguru import logger

from mining_agent.config import settings
from mining_agent.models.interfaces import (
    ProcessingResult,
    ProjectStore,
    SearchCapability,
    SourceDocument,
)
from mining_agent.services.enrichment import ProjectEnricher
from mining_agent.services.extraction import StructuredExtractor
from mining_agent.services.prompt_store import agent_prompt
from mining_agent.tools.web_utils import truncate


def _failed(error: str) -> ProcessingResult:
    return ProcessingResult(success=False, error=error)


class DocumentProcessor:
    """Turns one source document into one created or updated project.

    Never raises: every failure comes back as `success=False` with the reason.
    One instance should serve a single run; it remembers which projects it
    already wrote and skips repeats.
    """

    def __init__(
        self,
        search: SearchCapability,
        store: ProjectStore,
        *,
        extractor: StructuredExtractor | None = None,
        enricher: ProjectEnricher | None = None,
        content_chars: int | None = None,
    ):
        self.search = search
        self.store = store
        self.extractor = extractor or StructuredExtractor(caller="document_processor")
        self.enricher = enricher or ProjectEnricher()
        self.content_chars = content_chars or settings.document_content_chars
        self._written: dict[str, str] = {}
        self._key_locks: dict[str, asyncio.Lock] = {}

    async def process_document(self, document: SourceDocument) -> ProcessingResult:
        try:
            content = await self.search.scrape(document.url)
        except Exception as exc:
            logger.warning(f"Failed to fetch {document.url}: {exc}")
            return _failed(f"Failed to fetch document content: {exc}")
        if not content or not content.strip():
            return _failed("Failed to fetch document content: empty document")

        prompt = agent_prompt(
            "document_processor",
            source=document.source or "Unknown",
            document_type=document.type or "Unknown",
            content=truncate(content, self.content_chars),
        )
        try:
            outcome = await self.extractor.extract(prompt.system, prompt.user)
        except Exception as exc:
            logger.warning(f"Extraction failed for {document.url}: {exc}")
            return _failed(f"Extraction failed: {exc}")
        if outcome.unparseable:
            return _failed(f"Failed to extract project data: {outcome.reason}")
        if not outcome.candidates:
            return _failed("Failed to extract project data: no named project in document")

        raw = outcome.candidates[0]
        project = self.enricher.enrich(
            raw,
            source_url=document.url,
            report_type=document.type or "Unknown",
            data_source=document.source or "Unknown",
        )

        key = project.dedup_key
        lock = self._key_locks.setdefault(key, asyncio.Lock())
        async with lock:
            if key in self._written:
                logger.info(f"Skipping {project.project_name}: already written in this run")
                return ProcessingResult(success=True, action="skipped", project_id=self._written[key])

            try:
                existing = await self.store.find_by_name_and_company(
                    project.project_name, project.company_name
                )
            except Exception as exc:
                logger.error(f"Project lookup failed for {project.project_name}: {exc}")
                return _failed(f"Failed to look up project: {exc}")

            try:
                if existing:
                    project_id = str(existing["id"])
                    await self.store.update(project_id, project)
                    action = "updated"
                else:
                    project_id = await self.store.create(project)
                    action = "created"
            except Exception as exc:
                logger.error(f"Failed to save {project.project_name}: {exc}")
                return _failed(str(exc))

            self._written[key] = project_id

        logger.info(f"Project {action}: {project.project_name} ({project_id})")
        return ProcessingResult(success=True, action=action, project_id=project_id)
