"""Web discovery run: generate queries, search, extract projects, save the new ones."""
from __future__ import annotations

from dataclasses import dataclass, field

from loguru import logger

from mining_agent.agents.project_extractor import ProjectExtractor
from mining_agent.agents.web_scraper import MiningWebScraper
from mining_agent.models.interfaces import ProjectStore, RunHistory, SearchCapability
from mining_agent.models.schemas import EnrichedProject
from mining_agent.services import progress, streaming
from mining_agent.services.logger import log_event
from mining_agent.services.progress import ProgressReporter
from mining_agent.services.query_generator import MiningQueryGenerator


@dataclass(slots=True)
class DiscoveryResult:
    success: bool
    projects_added: int
    message: str
    project_ids: list[str] = field(default_factory=list)


class DiscoveryAgent:
    agent_type = "discovery"

    def __init__(
        self,
        search: SearchCapability,
        store: ProjectStore,
        reporter: ProgressReporter | None = None,
        *,
        query_generator: MiningQueryGenerator | None = None,
        scraper: MiningWebScraper | None = None,
        extractor: ProjectExtractor | None = None,
        history: RunHistory | None = None,
    ):
        self.store = store
        self.reporter = reporter or ProgressReporter()
        self.query_generator = query_generator or MiningQueryGenerator()
        self.scraper = scraper or MiningWebScraper(search, self.reporter)
        self.extractor = extractor or ProjectExtractor(self.reporter)
        self.history = history

    async def _save_new_projects(self, projects: list[EnrichedProject]) -> list[str]:
        saved: list[str] = []
        total = len(projects)
        self.reporter.emit(streaming.save_started(total))
        for project in projects:
            try:
                existing = await self.store.find_by_name_and_company(
                    project.project_name, project.company_name
                )
                if existing:
                    logger.debug(f"Project already stored: {project.project_name}")
                    continue
                saved.append(await self.store.create(project))
            except Exception as exc:
                logger.error(f"Error saving project {project.project_name}: {exc}")
                continue
            self.reporter.emit(streaming.project_saved(project.project_name, saved=len(saved), total=total))
        return saved

    async def _record_run(self, projects_added: int) -> None:
        if self.history is None:
            return
        try:
            await self.history.record_run(self.agent_type, projects_added=projects_added, projects_updated=0)
        except Exception as exc:
            logger.warning(f"Could not record {self.agent_type} run: {exc}")

    async def run(self) -> DiscoveryResult:
        self.reporter.reset()
        progress.register(self.reporter)
        self.reporter.emit(streaming.run_started())

        try:
            queries = self.query_generator.generate_queries()
            self.reporter.emit(streaming.queries_generated(len(queries)))
            logger.info(f"Generated {len(queries)} search queries")

            documents = await self.scraper.scrape_with_queries(queries)
            if not documents:
                self.reporter.emit(streaming.no_documents())
                return DiscoveryResult(success=False, projects_added=0, message="No mining documents found")

            projects = await self.extractor.extract_projects(documents)
            if not projects:
                self.reporter.emit(streaming.no_projects())
                return DiscoveryResult(
                    success=False, projects_added=0, message="No projects could be extracted"
                )

            project_ids = await self._save_new_projects(projects)
            await self._record_run(len(project_ids))
            self.reporter.emit(streaming.run_completed(len(projects), projects_added=len(project_ids)))
            log_event(
                "discovery_run",
                "Discovery run completed",
                run_id=self.reporter.run_id,
                documents=len(documents),
                projects_extracted=len(projects),
                projects_added=len(project_ids),
            )
            return DiscoveryResult(
                success=True,
                projects_added=len(project_ids),
                message=f"Added {len(project_ids)} new projects",
                project_ids=project_ids,
            )
        except Exception as exc:
            logger.exception("Discovery run failed")
            self.reporter.emit(streaming.run_failed(str(exc) or exc.__class__.__name__))
            raise
