"""Run-scoped progress reporting.

Each pipeline run owns one `ProgressReporter`. The pipeline only emits
structured `ProgressEvent`s; the reporter folds them into the latest
`ProgressState` snapshot and renders the human-readable message. Observers
(the status endpoint, the CLI) read snapshots through `get_progress`.
"""
from __future__ import annotations

from collections import OrderedDict
from dataclasses import fields, replace
from typing import Any, Callable
from uuid import uuid4

from mining_agent.models.progress import (
    IDLE_MESSAGE,
    ProgressEvent,
    ProgressEventType,
    ProgressStage,
    ProgressState,
)

MAX_TITLE_CHARS = 80
MAX_TRACKED_RUNS = 20

_STATE_FIELDS = {f.name for f in fields(ProgressState)}


def _clip(value: Any, limit: int = MAX_TITLE_CHARS) -> str:
    text = str(value or "Unknown")
    return text if len(text) <= limit else text[:limit] + "..."


def _render_completed(data: dict[str, Any]) -> str:
    if "projects_added" in data:
        return f"Successfully added {data['projects_added']} new mining projects!"
    return "Mining agent completed successfully"


def _render_batch(data: dict[str, Any]) -> str:
    topics = ", ".join(data.get("commodities") or []) or "mining"
    return (
        f"Searched {len(data.get('queries') or [])} queries ({topics}) - "
        f"found {data['documents_found']} documents, {data['total_found']} so far"
    )


_RENDERERS: dict[ProgressEventType, Callable[[dict[str, Any]], str]] = {
    ProgressEventType.RUN_STARTED: lambda d: "Initializing mining agent...",
    ProgressEventType.COLLECT_STARTED: lambda d: (
        f"Scanning {d['total_sources']} data sources for new technical reports..."
    ),
    ProgressEventType.SOURCE_SCANNING: lambda d: f"Scanning {d['source']} for new documents...",
    ProgressEventType.SOURCE_FAILED: lambda d: f"Could not read {d['source']}: {d['error']}",
    ProgressEventType.PROCESS_STARTED: lambda d: f"Processing {d['total_documents']} documents...",
    ProgressEventType.DOCUMENT_STARTED: lambda d: (
        f"Processing document {d['position']} of {d['total']}: {_clip(d.get('title'))}"
    ),
    ProgressEventType.QUERIES_GENERATED: lambda d: (
        f"Generated {d['count']} search queries for diverse mining projects"
    ),
    ProgressEventType.SEARCH_STARTED: lambda d: "Searching for mining project updates...",
    ProgressEventType.BATCH_SEARCHED: _render_batch,
    ProgressEventType.QUERY_SKIPPED: lambda d: f"Skipped query ({d['reason']}): {_clip(d['query'], 40)}",
    ProgressEventType.SEARCH_SUFFICIENT: lambda d: (
        f"Collected {d['documents']} relevant documents - sufficient data for analysis"
    ),
    ProgressEventType.EXTRACTION_STARTED: lambda d: "Extracting project data with AI...",
    ProgressEventType.DOCUMENT_ANALYZING: lambda d: (
        f"Analyzing document {d['position']}/{d['total']} - Source: {d['source']} - {_clip(d.get('title'), 50)}"
    ),
    ProgressEventType.PROJECT_EXTRACTED: lambda d: (
        f"Extracted: {d['project_name']} ({d['commodity']}) - Stage: {d['stage']}"
    ),
    ProgressEventType.DOCUMENT_SKIPPED: lambda d: (
        f"Skipped document (extraction failed): {_clip(d.get('title'), 50)}"
    ),
    ProgressEventType.SAVE_STARTED: lambda d: "Saving projects to database...",
    ProgressEventType.PROJECT_SAVED: lambda d: f"Added: {d['project_name']}",
    ProgressEventType.NO_DOCUMENTS: lambda d: "No documents found. Please try again.",
    ProgressEventType.NO_PROJECTS: lambda d: "Could not extract any projects from documents.",
    ProgressEventType.RUN_COMPLETED: _render_completed,
    ProgressEventType.RUN_FAILED: lambda d: d.get("error") or "Unknown error occurred",
}


def render_message(event: ProgressEvent) -> str:
    renderer = _RENDERERS.get(event.event)
    if renderer is None:
        return event.event.value.replace("_", " ")
    return renderer(event.data)


class ProgressReporter:
    """Latest-snapshot progress state for a single pipeline run."""

    def __init__(self, run_id: str | None = None):
        self.run_id = run_id or uuid4().hex
        self._state = ProgressState()

    def reset(self) -> None:
        self._state = ProgressState()

    def update(self, **partial: Any) -> None:
        """Merge the given fields into the snapshot; omitted fields keep their value."""
        unknown = set(partial) - _STATE_FIELDS
        if unknown:
            raise TypeError(f"Unknown progress fields: {sorted(unknown)}")
        if "stage" in partial:
            partial["stage"] = ProgressStage(partial["stage"])
        self._state = replace(self._state, **partial)

    def emit(self, event: ProgressEvent) -> None:
        partial: dict[str, Any] = {
            "stage": event.stage,
            "message": render_message(event),
            "details": {"event": event.event.value, **event.data},
        }
        if event.current_step is not None:
            partial["current_step"] = event.current_step
        if event.total_steps is not None:
            partial["total_steps"] = event.total_steps
        self.update(**partial)

    def get(self) -> ProgressState:
        return self._state.copy()


# --- Observer access ---

_runs: OrderedDict[str, ProgressReporter] = OrderedDict()


def register(reporter: ProgressReporter) -> ProgressReporter:
    """Make a run's reporter visible to observers; the most recent run is the default."""
    _runs.pop(reporter.run_id, None)
    _runs[reporter.run_id] = reporter
    while len(_runs) > MAX_TRACKED_RUNS:
        _runs.popitem(last=False)
    return reporter


def get_progress(run_id: str | None = None) -> ProgressState:
    """Read-only snapshot of a run's progress (latest run when run_id is omitted)."""
    if run_id is not None:
        reporter = _runs.get(run_id)
    else:
        reporter = next(reversed(_runs.values()), None)
    if reporter is None:
        return ProgressState(message=IDLE_MESSAGE)
    return reporter.get()


def is_running() -> bool:
    return get_progress().stage in (ProgressStage.COLLECTING, ProgressStage.PROCESSING)
