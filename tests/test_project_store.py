from __future__ import annotations

from unittest.mock import MagicMock

import pytest
from postgrest.exceptions import APIError

from mining_agent.models.schemas import RawExtractedProject
from mining_agent.services.project_store import SupabaseProjectStore, to_row


def _project(enricher, **extra):
    raw = RawExtractedProject(project_name="Rhyolite Ridge", company_name="ioneer", **extra)
    return enricher.enrich(raw, source_url="https://example.com/rr")


def _store_with(table: MagicMock) -> SupabaseProjectStore:
    supabase = MagicMock()
    supabase.table.return_value = table
    return SupabaseProjectStore(supabase, table="projects")


def test_to_row_converts_coordinates_to_point(enricher):
    row = to_row(_project(enricher, latitude=37.9, longitude=-117.6))

    assert row["location"] == "POINT(-117.6 37.9)"
    assert "latitude" not in row and "longitude" not in row
    assert row["project_name"] == "Rhyolite Ridge"


def test_to_row_without_coordinates_has_no_location(enricher):
    assert "location" not in to_row(_project(enricher))


@pytest.mark.asyncio
async def test_find_returns_first_row():
    table = MagicMock()
    query = table.select.return_value.eq.return_value.eq.return_value.limit.return_value
    query.execute.return_value = MagicMock(data=[{"id": "abc"}])

    found = await _store_with(table).find_by_name_and_company("Rhyolite Ridge", "ioneer")

    assert found == {"id": "abc"}
    table.select.assert_called_once_with("id")
    table.select.return_value.eq.assert_called_once_with("project_name", "Rhyolite Ridge")


@pytest.mark.asyncio
async def test_find_treats_lookup_errors_as_not_found():
    table = MagicMock()
    query = table.select.return_value.eq.return_value.eq.return_value.limit.return_value
    query.execute.side_effect = APIError({"code": "PGRST116", "message": "no rows"})

    assert await _store_with(table).find_by_name_and_company("X", "Y") is None


@pytest.mark.asyncio
async def test_create_returns_new_id(enricher):
    table = MagicMock()
    table.insert.return_value.execute.return_value = MagicMock(data=[{"id": 42}])

    project_id = await _store_with(table).create(_project(enricher))

    assert project_id == "42"
    inserted = table.insert.call_args.args[0]
    assert inserted["company_name"] == "ioneer"


@pytest.mark.asyncio
async def test_create_failure_raises_runtime_error(enricher):
    table = MagicMock()
    table.insert.return_value.execute.side_effect = APIError({"code": "23505", "message": "duplicate key"})

    with pytest.raises(RuntimeError, match="Failed to create project: duplicate key"):
        await _store_with(table).create(_project(enricher))


@pytest.mark.asyncio
async def test_update_failure_raises_runtime_error(enricher):
    table = MagicMock()
    table.update.return_value.eq.return_value.execute.side_effect = APIError(
        {"code": "42501", "message": "permission denied"}
    )

    with pytest.raises(RuntimeError, match="Failed to update project: permission denied"):
        await _store_with(table).update("abc", _project(enricher))


@pytest.mark.asyncio
async def test_record_run_inserts_history_row_with_project_total():
    projects = MagicMock()
    projects.select.return_value.limit.return_value.execute.return_value = MagicMock(count=57)
    runs = MagicMock()
    supabase = MagicMock()
    supabase.table.side_effect = lambda name: {"projects": projects, "agent_runs": runs}[name]
    store = SupabaseProjectStore(supabase, table="projects", runs_table="agent_runs")

    await store.record_run("mining", projects_added=3, projects_updated=2)

    projects.select.assert_called_once_with("id", count="exact")
    row = runs.insert.call_args.args[0]
    assert row["agent_type"] == "mining"
    assert (row["projects_added"], row["projects_updated"], row["total_projects"]) == (3, 2, 57)
    assert row["run_at"].endswith("+00:00")


@pytest.mark.asyncio
async def test_last_run_returns_newest_row_for_agent_type():
    runs = MagicMock()
    query = runs.select.return_value.eq.return_value.order.return_value.limit.return_value
    query.execute.return_value = MagicMock(data=[{"agent_type": "mining", "run_at": "2026-10-18T09:00:00+00:00"}])
    supabase = MagicMock()
    supabase.table.return_value = runs
    store = SupabaseProjectStore(supabase, runs_table="agent_runs")

    last = await store.last_run("mining")

    assert last["run_at"] == "2026-10-18T09:00:00+00:00"
    runs.select.return_value.eq.assert_called_once_with("agent_type", "mining")
    runs.select.return_value.eq.return_value.order.assert_called_once_with("run_at", desc=True)


@pytest.mark.asyncio
async def test_last_run_without_history_is_none():
    runs = MagicMock()
    runs.select.return_value.order.return_value.limit.return_value.execute.return_value = MagicMock(data=[])
    supabase = MagicMock()
    supabase.table.return_value = runs

    assert await SupabaseProjectStore(supabase).last_run() is None


@pytest.mark.asyncio
async def test_record_run_failure_raises_runtime_error():
    table = MagicMock()
    table.select.return_value.limit.return_value.execute.return_value = MagicMock(count=1)
    table.insert.return_value.execute.side_effect = APIError({"code": "42P01", "message": "relation does not exist"})

    with pytest.raises(RuntimeError, match="Failed to record run: relation does not exist"):
        await _store_with(table).record_run("discovery", projects_added=1, projects_updated=0)
