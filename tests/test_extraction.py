from __future__ import annotations

from unittest.mock import AsyncMock

import pytest

from mining_agent.services.extraction import StructuredExtractor, parse_extraction_payload
from fakes import completion

PROJECT = {"project_name": "Greenbushes", "company_name": "Talison", "commodity": "Lithium"}


def test_parse_projects_wrapper_in_code_fence():
    raw = '```json\n{"projects": [{"project_name": "Greenbushes", "company_name": "Talison"}]}\n```'
    outcome = parse_extraction_payload(raw)

    assert not outcome.unparseable
    assert [c.project_name for c in outcome.candidates] == ["Greenbushes"]


def test_parse_bare_array_and_single_record():
    array = parse_extraction_payload('[{"name": "Kamoa-Kakula", "company": "Ivanhoe Mines"}]')
    single = parse_extraction_payload('Here you go: {"project_name": "Oyu Tolgoi", "company_name": "Rio Tinto"}')

    assert array.candidates[0].company_name == "Ivanhoe Mines"
    assert single.candidates[0].project_name == "Oyu Tolgoi"


def test_invalid_items_are_dropped_not_fatal():
    outcome = parse_extraction_payload(
        '{"projects": [{"project_name": "Pilgangoora"}, "junk", '
        '{"project_name": "Pilgangoora", "company_name": "Pilbara Minerals"}]}'
    )

    assert not outcome.unparseable
    assert len(outcome.candidates) == 1
    assert outcome.rejected == 2


def test_empty_projects_list_is_a_parsed_outcome():
    outcome = parse_extraction_payload('{"projects": []}')

    assert not outcome.unparseable
    assert outcome.candidates == []


@pytest.mark.parametrize("raw", ["", "not json at all", '{"summary": "nothing here"}', "42"])
def test_unreadable_responses_are_tagged(raw):
    outcome = parse_extraction_payload(raw)

    assert outcome.unparseable
    assert outcome.reason
    assert outcome.candidates == []


@pytest.mark.asyncio
async def test_structured_extractor_parses_completion():
    complete = AsyncMock(return_value=completion({"projects": [PROJECT]}))
    extractor = StructuredExtractor(complete=complete, caller="test")

    outcome = await extractor.extract("system", "prompt")

    assert outcome.candidates[0].commodity == "Lithium"
    complete.assert_awaited_once_with("system", "prompt", caller="test")


@pytest.mark.asyncio
async def test_structured_extractor_propagates_transport_errors():
    extractor = StructuredExtractor(complete=AsyncMock(side_effect=ConnectionError("down")))

    with pytest.raises(ConnectionError):
        await extractor.extract("system", "prompt")
