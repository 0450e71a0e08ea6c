"""Tests for API routes."""
import pytest
from fastapi.testclient import TestClient

from mining_agent.agents.discovery import DiscoveryResult
from mining_agent.api.deps import get_discovery_agent, get_orchestrator, get_run_history
from mining_agent.main import app
from mining_agent.models.interfaces import ScrapingResult
from mining_agent.services import streaming
from mining_agent.services.progress import ProgressReporter, register
from fakes import FakeHistory


class FakeOrchestrator:
    def __init__(self, results=None, error=None):
        self.results = results or []
        self.error = error

    async def run(self):
        if self.error:
            raise self.error
        return self.results


class FakeDiscoveryAgent:
    async def run(self):
        return DiscoveryResult(success=True, projects_added=2, message="Added 2 new projects")


@pytest.fixture
def client():
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_health(client):
    response = client.get("/api/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ok"
    assert data["service"] == "mining-agent"


def test_start_returns_per_source_results(client):
    results = [
        ScrapingResult(source="SEDAR", documents_found=2, projects_created=1, projects_updated=1),
        ScrapingResult(source="EDGAR", errors=["Failed to fetch documents: 503"]),
    ]
    app.dependency_overrides[get_orchestrator] = lambda: FakeOrchestrator(results)

    response = client.post("/api/mining-agent/start")

    assert response.status_code == 200
    data = response.json()
    assert data["success"] is True
    assert [r["source"] for r in data["results"]] == ["SEDAR", "EDGAR"]
    assert data["results"][1]["errors"] == ["Failed to fetch documents: 503"]


def test_start_reports_run_failure(client):
    app.dependency_overrides[get_orchestrator] = lambda: FakeOrchestrator(error=RuntimeError("boom"))

    response = client.post("/api/mining-agent/start")

    assert response.status_code == 500
    assert response.json()["detail"] == "boom"


def test_discover(client):
    app.dependency_overrides[get_discovery_agent] = FakeDiscoveryAgent

    response = client.post("/api/mining-agent/discover")

    assert response.status_code == 200
    assert response.json() == {"success": True, "projects_added": 2, "message": "Added 2 new projects"}


def test_progress_reads_latest_run(client):
    reporter = register(ProgressReporter())
    reporter.emit(streaming.source_scanning("ASX", 3, 5))

    response = client.get("/api/mining-agent/progress")
    assert response.status_code == 200
    progress = response.json()["progress"]
    assert progress["stage"] == "collecting"
    assert progress["message"] == "Scanning ASX for new documents..."
    assert (progress["current_step"], progress["total_steps"]) == (4, 5)

    by_id = client.get("/api/mining-agent/progress", params={"run_id": "no-such-run"}).json()
    assert by_id["progress"]["message"] == "Mining agent is idle"


def _finished_run():
    reporter = register(ProgressReporter())
    reporter.emit(streaming.run_completed(1, documents=1, projects_created=1, projects_updated=0))
    return reporter


def test_status_reports_last_run_and_project_total(client):
    _finished_run()
    history = FakeHistory(total_projects=120)
    history.runs.append(
        {
            "agent_type": "mining",
            "projects_added": 4,
            "projects_updated": 7,
            "total_projects": 120,
            "run_at": "2026-10-18T06:00:00+00:00",
        }
    )
    app.dependency_overrides[get_run_history] = lambda: history

    response = client.get("/api/mining-agent/status")

    assert response.status_code == 200
    assert response.json() == {
        "last_run": "2026-10-18T06:00:00+00:00",
        "agent_type": "mining",
        "total_projects": 120,
        "projects_added": 4,
        "projects_updated": 7,
        "can_run_now": True,
    }


def test_status_without_history(client):
    _finished_run()
    app.dependency_overrides[get_run_history] = lambda: FakeHistory(total_projects=3)

    data = client.get("/api/mining-agent/status", params={"agent_type": "discovery"}).json()

    assert data["last_run"] is None
    assert data["total_projects"] == 3
    assert data["projects_added"] == 0


def test_status_when_store_unavailable(client):
    _finished_run()
    history = FakeHistory(error=RuntimeError("SUPABASE_URL and SUPABASE_SERVICE_KEY must be configured"))
    app.dependency_overrides[get_run_history] = lambda: history

    response = client.get("/api/mining-agent/status")

    assert response.status_code == 200
    assert response.json()["last_run"] is None
    assert response.json()["total_projects"] == 0


def test_status_cannot_run_while_a_run_is_active(client):
    reporter = register(ProgressReporter())
    reporter.emit(streaming.collect_started(5))
    app.dependency_overrides[get_run_history] = lambda: FakeHistory()

    assert client.get("/api/mining-agent/status").json()["can_run_now"] is False
