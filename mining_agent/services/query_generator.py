from __future__ import annotations

import random
from datetime import date

from mining_agent.config import settings
from mining_agent.models.interfaces import QueryCategory, SearchQuery

COMMODITIES = (
    "lithium",
    "copper",
    "gold",
    "silver",
    "nickel",
    "cobalt",
    "graphite",
    "rare earth",
    "uranium",
    "zinc",
    "lead",
    "tin",
    "tungsten",
    "molybdenum",
)

DOCUMENT_TYPES = (
    "NI 43-101",
    "JORC",
    "feasibility study",
    "PEA",
    "resource estimate",
    "technical report",
    "DFS",
)

STAGES = ("exploration", "pre-feasibility", "feasibility", "construction", "production", "expansion")

REGIONS = (
    "Canada mining",
    "Australia ASX",
    "Nevada USA",
    "Chile copper",
    "Peru mining",
    "Brazil lithium",
    "Africa mining",
    "Indonesia nickel",
)

MAJOR_COMPANIES = (
    "BHP",
    "Rio Tinto",
    "Glencore",
    "Vale",
    "Barrick",
    "Newmont",
    "Freeport",
    "Anglo American",
)


class MiningQueryGenerator:
    """Builds a shuffled, capped mix of search queries across commodities, stages and regions."""

    def __init__(
        self,
        rng: random.Random | None = None,
        today: date | None = None,
        limit: int | None = None,
    ):
        self._rng = rng or random.Random()
        self._today = today
        self.limit = max(limit if limit is not None else settings.query_limit, 1)

    def _all_queries(self) -> list[SearchQuery]:
        today = self._today or date.today()
        year = today.year
        month_context = f"{today.strftime('%B')} {year}"

        queries: list[SearchQuery] = []
        for commodity in COMMODITIES:
            queries.append(
                SearchQuery(
                    text=f'"{commodity} project" {month_context} technical report mining',
                    category=QueryCategory.RECENT_UPDATES,
                    commodity=commodity,
                )
            )
            queries.append(
                SearchQuery(
                    text=f"new {commodity} discovery {year} resource estimate",
                    category=QueryCategory.DISCOVERIES,
                    commodity=commodity,
                )
            )

        for doc_type in DOCUMENT_TYPES:
            queries.append(
                SearchQuery(
                    text=f'"{doc_type}" mining project {year} site:sedarplus.ca',
                    category=QueryCategory.TECHNICAL_REPORTS,
                )
            )

        for stage in STAGES:
            queries.append(
                SearchQuery(
                    text=f'"{stage} stage" mining project announcement {month_context}',
                    category=QueryCategory.PROJECT_STAGES,
                )
            )

        for region in REGIONS:
            queries.append(
                SearchQuery(
                    text=f"{region} project update {year} feasibility",
                    category=QueryCategory.REGIONAL,
                )
            )

        for company in MAJOR_COMPANIES:
            queries.append(
                SearchQuery(
                    text=f'"{company}" new project announcement {year}',
                    category=QueryCategory.MAJOR_COMPANIES,
                )
            )
        return queries

    def generate_queries(self) -> list[SearchQuery]:
        queries = self._all_queries()
        self._rng.shuffle(queries)
        return queries[: self.limit]
