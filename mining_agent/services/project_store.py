from __future__ import annotations

import asyncio
from datetime import datetime, timezone
from typing import Any

from loguru import logger
from postgrest.exceptions import APIError
from supabase import Client, create_client

from mining_agent.config import settings
from mining_agent.models.schemas import EnrichedProject
from mining_agent.services.logger import log_db_operation

# PostgREST code for "no rows returned" on single-row reads.
NO_ROWS_CODE = "PGRST116"


def get_client() -> Client:
    if not settings.supabase_url or not settings.supabase_service_key:
        raise RuntimeError("SUPABASE_URL and SUPABASE_SERVICE_KEY must be configured")
    return create_client(settings.supabase_url, settings.supabase_service_key)


_client: Client | None = None


def client() -> Client:
    global _client
    if _client is None:
        _client = get_client()
    return _client


async def _execute(query: Any) -> Any:
    """Run blocking Supabase query execution in a worker thread."""
    return await asyncio.to_thread(query.execute)


def to_row(project: EnrichedProject) -> dict[str, Any]:
    """Store row for a project; coordinates become a PostGIS point."""
    row = project.model_dump(exclude={"latitude", "longitude"})
    if project.latitude is not None and project.longitude is not None:
        row["location"] = f"POINT({project.longitude} {project.latitude})"
    row.pop("id", None)
    row.pop("created_at", None)
    return row


class SupabaseProjectStore:
    """Keyed upsert of projects into Supabase, plus the `agent_runs` history."""

    def __init__(
        self,
        supabase: Client | None = None,
        table: str | None = None,
        runs_table: str | None = None,
    ):
        self._supabase = supabase
        self.table = table or settings.projects_table
        self.runs_table = runs_table or settings.runs_table

    def _table(self) -> Any:
        return (self._supabase or client()).table(self.table)

    def _runs(self) -> Any:
        return (self._supabase or client()).table(self.runs_table)

    async def find_by_name_and_company(
        self, project_name: str, company_name: str
    ) -> dict[str, Any] | None:
        try:
            result = await _execute(
                self._table()
                .select("id")
                .eq("project_name", project_name)
                .eq("company_name", company_name)
                .limit(1)
            )
        except APIError as exc:
            if exc.code != NO_ROWS_CODE:
                logger.warning(f"Project lookup failed for {project_name!r}: {exc.message}")
            return None
        rows = result.data or []
        return rows[0] if rows else None

    async def create(self, project: EnrichedProject) -> str:
        try:
            result = await _execute(self._table().insert(to_row(project)))
        except APIError as exc:
            log_db_operation("insert", self.table, "error", error=exc.message)
            raise RuntimeError(f"Failed to create project: {exc.message}") from exc
        if not result.data:
            log_db_operation("insert", self.table, "error", error="no row returned")
            raise RuntimeError("Failed to create project: no row returned")

        project_id = str(result.data[0]["id"])
        log_db_operation("insert", self.table, "success", details=f"{project.project_name} -> {project_id}")
        return project_id

    async def update(self, project_id: str, project: EnrichedProject) -> None:
        try:
            await _execute(self._table().update(to_row(project)).eq("id", project_id))
        except APIError as exc:
            log_db_operation("update", self.table, "error", error=exc.message)
            raise RuntimeError(f"Failed to update project: {exc.message}") from exc
        log_db_operation("update", self.table, "success", details=f"{project.project_name} -> {project_id}")

    # --- Run history ---

    async def count_projects(self) -> int:
        try:
            result = await _execute(self._table().select("id", count="exact").limit(1))
        except APIError as exc:
            log_db_operation("count", self.table, "error", error=exc.message)
            raise RuntimeError(f"Failed to count projects: {exc.message}") from exc
        return result.count or 0

    async def record_run(self, agent_type: str, *, projects_added: int, projects_updated: int) -> None:
        """Append one `agent_runs` row with the project total after the run."""
        row = {
            "agent_type": agent_type,
            "projects_added": projects_added,
            "projects_updated": projects_updated,
            "total_projects": await self.count_projects(),
            "run_at": datetime.now(timezone.utc).isoformat(),
        }
        try:
            await _execute(self._runs().insert(row))
        except APIError as exc:
            log_db_operation("insert", self.runs_table, "error", error=exc.message)
            raise RuntimeError(f"Failed to record run: {exc.message}") from exc
        log_db_operation("insert", self.runs_table, "success", details=f"{agent_type} run +{projects_added}")

    async def last_run(self, agent_type: str | None = None) -> dict[str, Any] | None:
        query = self._runs().select("*")
        if agent_type:
            query = query.eq("agent_type", agent_type)
        try:
            result = await _execute(query.order("run_at", desc=True).limit(1))
        except APIError as exc:
            log_db_operation("select", self.runs_table, "error", error=exc.message)
            raise RuntimeError(f"Failed to read run history: {exc.message}") from exc
        rows = result.data or []
        return rows[0] if rows else None
