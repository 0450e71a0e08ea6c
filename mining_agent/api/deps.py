from __future__ import annotations

from mining_agent.agents.discovery import DiscoveryAgent
from mining_agent.agents.document_processor import DocumentProcessor
from mining_agent.agents.orchestrator import MiningAgentOrchestrator
from mining_agent.services.progress import ProgressReporter
from mining_agent.services.project_store import SupabaseProjectStore
from mining_agent.sources.registry import default_fetchers
from mining_agent.tools.firecrawl import FirecrawlClient


def get_orchestrator() -> MiningAgentOrchestrator:
    """Fresh orchestrator per run, wired to the configured sources and store."""
    search = FirecrawlClient()
    store = SupabaseProjectStore()
    processor = DocumentProcessor(search, store)
    return MiningAgentOrchestrator(default_fetchers(search), processor, ProgressReporter(), history=store)


def get_discovery_agent() -> DiscoveryAgent:
    store = SupabaseProjectStore()
    return DiscoveryAgent(FirecrawlClient(), store, ProgressReporter(), history=store)


def get_run_history() -> SupabaseProjectStore:
    return SupabaseProjectStore()
