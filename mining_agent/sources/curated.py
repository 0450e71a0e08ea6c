from __future__ import annotations

from dataclasses import dataclass

from mining_agent.models.interfaces import SourceDocument


@dataclass(frozen=True, slots=True)
class CuratedPage:
    url: str
    company: str
    title: str
    type: str
    date: str


MINING_NEWS_PAGES: tuple[CuratedPage, ...] = (
    CuratedPage(
        "https://www.lithiumamericas.com/thacker-pass/default.aspx",
        "Lithium Americas Corp",
        "Thacker Pass Project Update",
        "Project Update",
        "2025-01-15",
    ),
    CuratedPage(
        "https://www.sigmalithium.ca/sigma-lithium-delivers-robust-feasibility-study/",
        "Sigma Lithium Corporation",
        "Grota do Cirilo Feasibility Study",
        "Feasibility Study",
        "2024-12-10",
    ),
    CuratedPage(
        "https://piedmontlithium.com/carolina-lithium/",
        "Piedmont Lithium Inc",
        "Carolina Lithium Project",
        "Project Overview",
        "2024-11-20",
    ),
    CuratedPage(
        "https://www.ltresources.com.au/kathleen-valley",
        "Liontown Resources Limited",
        "Kathleen Valley Lithium Project",
        "Project Update",
        "2024-12-05",
    ),
    CuratedPage(
        "https://corelithium.com.au/finniss-lithium-project/",
        "Core Lithium Ltd",
        "Finniss Lithium Project Update",
        "Operations Update",
        "2024-11-15",
    ),
    CuratedPage(
        "https://www.albemarle.com/news/albemarle-announces-kings-mountain-mine-restart",
        "Albemarle Corporation",
        "Kings Mountain Mine Restart",
        "Mine Restart Study",
        "2024-10-30",
    ),
)


class CuratedFeedFetcher:
    """Fixed list of public project-update pages."""

    def __init__(self, name: str = "Mining News", pages: tuple[CuratedPage, ...] = MINING_NEWS_PAGES):
        self.name = name
        self.pages = pages

    async def fetch_latest_documents(self) -> list[SourceDocument]:
        return [
            SourceDocument(
                url=page.url,
                title=f"{page.company} - {page.title}",
                type=page.type,
                date=page.date,
                source=self.name,
            )
            for page in self.pages
        ]
