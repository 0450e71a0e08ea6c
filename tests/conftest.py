from __future__ import annotations

import random

import pytest

from mining_agent.services.defaults import IndustryDefaultsProvider
from mining_agent.services.enrichment import ProjectEnricher


@pytest.fixture
def rng():
    return random.Random(42)


@pytest.fixture
def enricher(rng):
    return ProjectEnricher(IndustryDefaultsProvider(rng))
