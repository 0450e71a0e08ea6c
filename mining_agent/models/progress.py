from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import StrEnum
from typing import Any


class ProgressStage(StrEnum):
    IDLE = "idle"
    COLLECTING = "collecting"
    PROCESSING = "processing"
    COMPLETED = "completed"
    ERROR = "error"


class ProgressEventType(StrEnum):
    RUN_STARTED = "run_started"
    COLLECT_STARTED = "collect_started"
    SOURCE_SCANNING = "source_scanning"
    SOURCE_FAILED = "source_failed"
    PROCESS_STARTED = "process_started"
    DOCUMENT_STARTED = "document_started"
    QUERIES_GENERATED = "queries_generated"
    SEARCH_STARTED = "search_started"
    BATCH_SEARCHED = "batch_searched"
    QUERY_SKIPPED = "query_skipped"
    SEARCH_SUFFICIENT = "search_sufficient"
    EXTRACTION_STARTED = "extraction_started"
    DOCUMENT_ANALYZING = "document_analyzing"
    PROJECT_EXTRACTED = "project_extracted"
    DOCUMENT_SKIPPED = "document_skipped"
    SAVE_STARTED = "save_started"
    PROJECT_SAVED = "project_saved"
    NO_DOCUMENTS = "no_documents"
    NO_PROJECTS = "no_projects"
    RUN_COMPLETED = "run_completed"
    RUN_FAILED = "run_failed"


IDLE_MESSAGE = "Mining agent is idle"


@dataclass(slots=True)
class ProgressState:
    stage: ProgressStage = ProgressStage.IDLE
    message: str = IDLE_MESSAGE
    current_step: int = 0
    total_steps: int = 0
    details: dict[str, Any] | None = None

    def copy(self) -> ProgressState:
        details = dict(self.details) if self.details is not None else None
        return replace(self, details=details)

    def to_dict(self) -> dict[str, Any]:
        return {
            "stage": self.stage.value,
            "message": self.message,
            "current_step": self.current_step,
            "total_steps": self.total_steps,
            "details": self.details,
        }


@dataclass(slots=True)
class ProgressEvent:
    """Structured progress notification emitted by the pipeline.

    `current_step` / `total_steps` are left as None when the event does not move
    the counters; the reporter keeps the previous values in that case.
    """

    event: ProgressEventType
    stage: ProgressStage
    current_step: int | None = None
    total_steps: int | None = None
    data: dict[str, Any] = field(default_factory=dict)
