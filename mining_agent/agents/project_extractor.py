from __future__ import annotations

from loguru import logger

from mining_agent.config import settings
from mining_agent.models.interfaces import ScrapedDocument
from mining_agent.models.schemas import EnrichedProject, RawExtractedProject
from mining_agent.services import streaming
from mining_agent.services.enrichment import ProjectEnricher
from mining_agent.services.extraction import StructuredExtractor
from mining_agent.services.progress import ProgressReporter
from mining_agent.services.prompt_store import agent_prompt
from mining_agent.tools.web_utils import extract_domain, truncate

SOURCE_LABELS = (
    ("sedar", "SEDAR"),
    ("sec.gov", "SEC EDGAR"),
    ("asx.com.au", "ASX"),
    ("londonstockexchange.com", "LSE"),
    ("mining.com", "Mining.com"),
)


def source_label(url: str) -> str:
    domain = extract_domain(url)
    for needle, label in SOURCE_LABELS:
        if needle in domain:
            return label
    return "Web Source"


class ProjectExtractor:
    """Extracts up to a few named projects per search document, first occurrence wins."""

    def __init__(
        self,
        reporter: ProgressReporter | None = None,
        *,
        extractor: StructuredExtractor | None = None,
        enricher: ProjectEnricher | None = None,
        max_candidates: int | None = None,
        content_chars: int | None = None,
    ):
        self.reporter = reporter or ProgressReporter()
        self.extractor = extractor or StructuredExtractor(caller="project_extractor")
        self.enricher = enricher or ProjectEnricher()
        self.max_candidates = max_candidates or settings.max_candidates_per_document
        self.content_chars = content_chars or settings.extraction_content_chars

    async def _extract_candidates(self, document: ScrapedDocument) -> list[RawExtractedProject]:
        prompt = agent_prompt(
            "project_extractor",
            url=document.url,
            title=document.title,
            content=truncate(document.content, self.content_chars),
            max_projects=self.max_candidates,
        )
        outcome = await self.extractor.extract(prompt.system, prompt.user)
        if outcome.unparseable:
            raise ValueError(outcome.reason or "unparseable response")
        return outcome.candidates[: self.max_candidates]

    async def extract_projects(self, documents: list[ScrapedDocument]) -> list[EnrichedProject]:
        projects: list[EnrichedProject] = []
        seen: set[str] = set()
        total = len(documents)
        self.reporter.emit(streaming.extraction_started(total))

        for index, document in enumerate(documents):
            self.reporter.emit(
                streaming.document_analyzing(
                    index, total, source=source_label(document.url), title=document.title
                )
            )
            try:
                candidates = await self._extract_candidates(document)
            except Exception as exc:
                logger.warning(f"Extraction failed for {document.url}: {exc}")
                self.reporter.emit(
                    streaming.document_skipped(index, total, title=document.title, error=str(exc))
                )
                continue

            for candidate in candidates:
                if candidate.dedup_key in seen:
                    continue
                seen.add(candidate.dedup_key)
                project = self.enricher.enrich(
                    candidate,
                    source_url=document.url,
                    fallback_commodity=document.source_query.commodity,
                )
                projects.append(project)
                self.reporter.emit(
                    streaming.project_extracted(
                        index,
                        total,
                        project_name=project.project_name,
                        commodity=project.primary_commodity,
                        stage=project.stage,
                    )
                )

        logger.info(f"Extracted {len(projects)} unique projects from {total} documents")
        return projects
