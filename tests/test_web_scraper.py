from __future__ import annotations

import asyncio

import pytest

from mining_agent.agents.web_scraper import MiningWebScraper, is_relevant_content
from mining_agent.models.interfaces import QueryCategory, SearchQuery
from mining_agent.models.progress import ProgressStage
from mining_agent.services.progress import ProgressReporter
from fakes import FakeSearch, hit


def _queries(count: int) -> list[SearchQuery]:
    return [
        SearchQuery(text=f"query {i}", category=QueryCategory.REGIONAL, commodity="lithium" if i % 2 else None)
        for i in range(count)
    ]


def test_relevance_needs_two_mining_keywords():
    assert is_relevant_content("Updated mineral resource and ore reserve statement")
    assert is_relevant_content("Project NPV and IRR improved after the study")
    assert not is_relevant_content("Company announces mining event")


def test_relevance_rejects_off_topic_content():
    assert not is_relevant_content("Mining resource fund expands into real estate and banking")


@pytest.mark.asyncio
async def test_slow_query_counts_as_zero_documents():
    async def never_returns():
        await asyncio.sleep(5)
        return [hit("https://slow.example.com")]

    search = FakeSearch({"query 0": never_returns, "query 1": [hit("https://fast.example.com/a")]})
    scraper = MiningWebScraper(search, batch_size=5, timeout_seconds=0.05)

    documents = await scraper.scrape_with_queries(_queries(2))

    assert [d.url for d in documents] == ["https://fast.example.com/a"]


@pytest.mark.asyncio
async def test_failing_query_counts_as_zero_documents():
    search = FakeSearch({"query 0": RuntimeError("rate limited"), "query 1": [hit("https://ok.example.com")]})

    documents = await MiningWebScraper(search).scrape_with_queries(_queries(2))

    assert len(documents) == 1
    assert documents[0].source_query.text == "query 1"


@pytest.mark.asyncio
async def test_irrelevant_hits_are_filtered():
    search = FakeSearch(
        {
            "query 0": [
                hit("https://good.example.com"),
                hit("https://bad.example.com", content="Spring fashion and clothing retail trends"),
                hit("https://empty.example.com", content=""),
            ]
        }
    )

    documents = await MiningWebScraper(search, results_per_query=5).scrape_with_queries(_queries(1))

    assert [d.url for d in documents] == ["https://good.example.com"]


@pytest.mark.asyncio
async def test_stops_after_sufficient_documents():
    results = {f"query {i}": [hit(f"https://e.com/{i}/a"), hit(f"https://e.com/{i}/b")] for i in range(6)}
    search = FakeSearch(results)
    reporter = ProgressReporter()
    scraper = MiningWebScraper(search, reporter, batch_size=2, sufficient_documents=3)

    documents = await scraper.scrape_with_queries(_queries(6))

    assert len(documents) == 4
    assert search.search_calls == ["query 0", "query 1"]
    state = reporter.get()
    assert state.details["event"] == "search_sufficient"
    assert state.current_step == state.total_steps == 6


@pytest.mark.asyncio
async def test_batches_bound_in_flight_searches():
    in_flight = 0
    peak = 0

    def slow_hits(i):
        async def run():
            nonlocal in_flight, peak
            in_flight += 1
            peak = max(peak, in_flight)
            await asyncio.sleep(0.01)
            in_flight -= 1
            return [hit(f"https://e.com/{i}")]

        return run

    search = FakeSearch({f"query {i}": slow_hits(i) for i in range(7)})
    reporter = ProgressReporter()
    scraper = MiningWebScraper(search, reporter, batch_size=3, sufficient_documents=100)

    documents = await scraper.scrape_with_queries(_queries(7))

    assert len(documents) == 7
    assert peak == 3
    state = reporter.get()
    assert state.stage == ProgressStage.COLLECTING
    assert state.details["event"] == "batch_searched"
    assert state.details["total_found"] == 7
    assert state.current_step == 7


@pytest.mark.asyncio
async def test_duplicate_urls_are_collected_once():
    search = FakeSearch({"query 0": [hit("https://e.com/same")], "query 1": [hit("https://e.com/same")]})

    documents = await MiningWebScraper(search).scrape_with_queries(_queries(2))

    assert len(documents) == 1
