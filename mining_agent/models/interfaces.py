from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any, Literal, Protocol

from mining_agent.models.schemas import EnrichedProject


class QueryCategory(StrEnum):
    RECENT_UPDATES = "recent-updates"
    DISCOVERIES = "discoveries"
    TECHNICAL_REPORTS = "technical-reports"
    PROJECT_STAGES = "project-stages"
    REGIONAL = "regional"
    MAJOR_COMPANIES = "major-companies"


@dataclass(frozen=True, slots=True)
class SearchQuery:
    text: str
    category: QueryCategory
    commodity: str | None = None


@dataclass(slots=True)
class SearchHit:
    url: str
    title: str
    content: str


@dataclass(slots=True)
class ScrapedDocument:
    """Search result with its page content, used by the multi-document path."""

    url: str
    title: str
    content: str
    source_query: SearchQuery


@dataclass(slots=True)
class SourceDocument:
    """Pointer to a filing or page published by one source; content is fetched later."""

    url: str
    title: str = ""
    type: str = ""
    date: str = ""
    source: str = ""


ProcessingAction = Literal["created", "updated", "skipped"]


@dataclass(slots=True)
class ProcessingResult:
    success: bool
    action: ProcessingAction | None = None
    project_id: str | None = None
    error: str | None = None


@dataclass(slots=True)
class ScrapingResult:
    source: str
    documents_found: int = 0
    projects_created: int = 0
    projects_updated: int = 0
    errors: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "source": self.source,
            "documents_found": self.documents_found,
            "projects_created": self.projects_created,
            "projects_updated": self.projects_updated,
            "errors": list(self.errors),
        }


# --- Capabilities ---


class SearchCapability(Protocol):
    async def search(
        self,
        query: str,
        *,
        limit: int,
        timeout_ms: int,
        formats: list[str] | None = None,
    ) -> list[SearchHit]: ...

    async def scrape(self, url: str) -> str: ...


class ProjectStore(Protocol):
    async def find_by_name_and_company(
        self, project_name: str, company_name: str
    ) -> dict[str, Any] | None: ...

    async def create(self, project: EnrichedProject) -> str: ...

    async def update(self, project_id: str, project: EnrichedProject) -> None: ...


class DocumentFetcher(Protocol):
    name: str

    async def fetch_latest_documents(self) -> list[SourceDocument]: ...


class RunHistory(Protocol):
    async def record_run(
        self, agent_type: str, *, projects_added: int, projects_updated: int
    ) -> None: ...

    async def last_run(self, agent_type: str | None = None) -> dict[str, Any] | None: ...

    async def count_projects(self) -> int: ...
