from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from loguru import logger

from mining_agent.agents.discovery import DiscoveryAgent
from mining_agent.agents.orchestrator import MiningAgentOrchestrator
from mining_agent.api.deps import get_discovery_agent, get_orchestrator, get_run_history
from mining_agent.models.interfaces import RunHistory
from mining_agent.models.schemas import (
    AgentStatusResponse,
    DiscoveryResponse,
    MiningAgentRunResponse,
    ProgressResponse,
    ProgressStateResponse,
    SourceResultResponse,
)
from mining_agent.services.progress import get_progress, is_running

router = APIRouter(prefix="/api/mining-agent", tags=["mining-agent"])


@router.post("/start", response_model=MiningAgentRunResponse)
async def start_run(orchestrator: MiningAgentOrchestrator = Depends(get_orchestrator)):
    """Collect from every source and process the documents; blocks until the run ends."""
    try:
        results = await orchestrator.run()
    except Exception as exc:
        raise HTTPException(status_code=500, detail=str(exc)) from exc

    return MiningAgentRunResponse(
        success=True,
        message=f"Mining agent processed {sum(r.documents_found for r in results)} documents",
        results=[SourceResultResponse(**r.to_dict()) for r in results],
    )


@router.post("/discover", response_model=DiscoveryResponse)
async def start_discovery(agent: DiscoveryAgent = Depends(get_discovery_agent)):
    try:
        result = await agent.run()
    except Exception as exc:
        raise HTTPException(status_code=500, detail=str(exc)) from exc
    return DiscoveryResponse(
        success=result.success,
        projects_added=result.projects_added,
        message=result.message,
    )


@router.get("/progress", response_model=ProgressResponse)
async def read_progress(run_id: str | None = None):
    state = get_progress(run_id)
    return ProgressResponse(success=True, progress=ProgressStateResponse(**state.to_dict()))


@router.get("/status", response_model=AgentStatusResponse)
async def read_status(agent_type: str | None = None, history: RunHistory = Depends(get_run_history)):
    """Last recorded run and the current project total."""
    can_run_now = not is_running()
    try:
        last_run = await history.last_run(agent_type)
        total_projects = await history.count_projects()
    except RuntimeError as exc:
        logger.warning(f"Run history unavailable: {exc}")
        return AgentStatusResponse(can_run_now=can_run_now)

    last_run = last_run or {}
    return AgentStatusResponse(
        last_run=last_run.get("run_at"),
        agent_type=last_run.get("agent_type"),
        total_projects=total_projects,
        projects_added=last_run.get("projects_added") or 0,
        projects_updated=last_run.get("projects_updated") or 0,
        can_run_now=can_run_now,
    )
