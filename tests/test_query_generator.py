from __future__ import annotations

import random
from datetime import date

from mining_agent.models.interfaces import QueryCategory
from mining_agent.services.query_generator import MiningQueryGenerator


def test_generate_queries_is_capped_and_non_empty():
    queries = MiningQueryGenerator(rng=random.Random(1)).generate_queries()

    assert 0 < len(queries) <= 30
    assert all(q.text for q in queries)
    assert all(isinstance(q.category, QueryCategory) for q in queries)


def test_generate_queries_covers_every_family_without_cap():
    queries = MiningQueryGenerator(rng=random.Random(1), limit=1000).generate_queries()

    categories = {q.category for q in queries}
    assert categories == set(QueryCategory)
    # 14 commodities x 2 + 7 document types + 6 stages + 8 regions + 8 companies
    assert len(queries) == 57
    assert len({q.text for q in queries}) == len(queries)


def test_generate_queries_uses_current_date():
    generator = MiningQueryGenerator(rng=random.Random(3), today=date(2025, 3, 9), limit=1000)
    texts = [q.text for q in generator.generate_queries()]

    assert any("March 2025" in text for text in texts)
    assert all("2025" in text for text in texts)


def test_generate_queries_shuffle_follows_injected_rng():
    first = MiningQueryGenerator(rng=random.Random(7), today=date(2025, 1, 1)).generate_queries()
    second = MiningQueryGenerator(rng=random.Random(7), today=date(2025, 1, 1)).generate_queries()
    other = MiningQueryGenerator(rng=random.Random(8), today=date(2025, 1, 1)).generate_queries()

    assert first == second
    assert first != other


def test_commodity_queries_carry_their_commodity():
    queries = MiningQueryGenerator(rng=random.Random(1), limit=1000).generate_queries()

    for query in queries:
        if query.category in (QueryCategory.RECENT_UPDATES, QueryCategory.DISCOVERIES):
            assert query.commodity and query.commodity in query.text
        else:
            assert query.commodity is None


def test_limit_is_at_least_one():
    assert len(MiningQueryGenerator(rng=random.Random(1), limit=0).generate_queries()) == 1
