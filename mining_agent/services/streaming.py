from __future__ import annotations

from typing import Any

from mining_agent.models.progress import ProgressEvent, ProgressEventType, ProgressStage


def run_started() -> ProgressEvent:
    return ProgressEvent(
        event=ProgressEventType.RUN_STARTED,
        stage=ProgressStage.IDLE,
        current_step=0,
        total_steps=0,
    )


# --- Multi-source collect / process ---


def collect_started(total_sources: int) -> ProgressEvent:
    return ProgressEvent(
        event=ProgressEventType.COLLECT_STARTED,
        stage=ProgressStage.COLLECTING,
        current_step=0,
        total_steps=total_sources,
        data={"total_sources": total_sources},
    )


def source_scanning(source: str, index: int, total: int) -> ProgressEvent:
    return ProgressEvent(
        event=ProgressEventType.SOURCE_SCANNING,
        stage=ProgressStage.COLLECTING,
        current_step=index + 1,
        total_steps=total,
        data={"source": source},
    )


def source_failed(source: str, error: str) -> ProgressEvent:
    return ProgressEvent(
        event=ProgressEventType.SOURCE_FAILED,
        stage=ProgressStage.COLLECTING,
        data={"source": source, "error": error},
    )


def process_started(total_documents: int) -> ProgressEvent:
    return ProgressEvent(
        event=ProgressEventType.PROCESS_STARTED,
        stage=ProgressStage.PROCESSING,
        current_step=0,
        total_steps=total_documents,
        data={"total_documents": total_documents},
    )


def document_started(index: int, total: int, *, title: str, source: str, url: str) -> ProgressEvent:
    return ProgressEvent(
        event=ProgressEventType.DOCUMENT_STARTED,
        stage=ProgressStage.PROCESSING,
        current_step=index + 1,
        total_steps=total,
        data={"position": index + 1, "total": total, "title": title, "source": source, "url": url},
    )


# --- Search and extraction ---


def queries_generated(count: int) -> ProgressEvent:
    return ProgressEvent(
        event=ProgressEventType.QUERIES_GENERATED,
        stage=ProgressStage.COLLECTING,
        data={"count": count},
    )


def search_started(total_queries: int) -> ProgressEvent:
    return ProgressEvent(
        event=ProgressEventType.SEARCH_STARTED,
        stage=ProgressStage.COLLECTING,
        current_step=0,
        total_steps=total_queries,
        data={"total_queries": total_queries},
    )


def batch_searched(
    *,
    queries: list[str],
    commodities: list[str],
    documents_found: int,
    total_found: int,
    current_step: int,
    total_steps: int,
) -> ProgressEvent:
    return ProgressEvent(
        event=ProgressEventType.BATCH_SEARCHED,
        stage=ProgressStage.COLLECTING,
        current_step=current_step,
        total_steps=total_steps,
        data={
            "queries": queries,
            "commodities": commodities,
            "documents_found": documents_found,
            "total_found": total_found,
        },
    )


def query_skipped(query: str, reason: str) -> ProgressEvent:
    return ProgressEvent(
        event=ProgressEventType.QUERY_SKIPPED,
        stage=ProgressStage.COLLECTING,
        data={"query": query, "reason": reason},
    )


def search_sufficient(documents: int, total_queries: int) -> ProgressEvent:
    return ProgressEvent(
        event=ProgressEventType.SEARCH_SUFFICIENT,
        stage=ProgressStage.COLLECTING,
        current_step=total_queries,
        total_steps=total_queries,
        data={"documents": documents},
    )


def extraction_started(total_documents: int) -> ProgressEvent:
    return ProgressEvent(
        event=ProgressEventType.EXTRACTION_STARTED,
        stage=ProgressStage.PROCESSING,
        current_step=0,
        total_steps=total_documents,
        data={"total_documents": total_documents},
    )


def document_analyzing(index: int, total: int, *, source: str, title: str) -> ProgressEvent:
    return ProgressEvent(
        event=ProgressEventType.DOCUMENT_ANALYZING,
        stage=ProgressStage.PROCESSING,
        current_step=index + 1,
        total_steps=total,
        data={"position": index + 1, "total": total, "source": source, "title": title},
    )


def project_extracted(
    index: int, total: int, *, project_name: str, commodity: str, stage: str
) -> ProgressEvent:
    return ProgressEvent(
        event=ProgressEventType.PROJECT_EXTRACTED,
        stage=ProgressStage.PROCESSING,
        current_step=index + 1,
        total_steps=total,
        data={"project_name": project_name, "commodity": commodity, "stage": stage},
    )


def document_skipped(index: int, total: int, *, title: str, error: str) -> ProgressEvent:
    return ProgressEvent(
        event=ProgressEventType.DOCUMENT_SKIPPED,
        stage=ProgressStage.PROCESSING,
        current_step=index + 1,
        total_steps=total,
        data={"title": title, "error": error},
    )


def save_started(total: int) -> ProgressEvent:
    return ProgressEvent(
        event=ProgressEventType.SAVE_STARTED,
        stage=ProgressStage.PROCESSING,
        current_step=0,
        total_steps=total,
        data={"total": total},
    )


def project_saved(project_name: str, *, saved: int, total: int) -> ProgressEvent:
    return ProgressEvent(
        event=ProgressEventType.PROJECT_SAVED,
        stage=ProgressStage.PROCESSING,
        current_step=saved,
        total_steps=total,
        data={"project_name": project_name},
    )


# --- Terminal states ---


def no_documents() -> ProgressEvent:
    return ProgressEvent(event=ProgressEventType.NO_DOCUMENTS, stage=ProgressStage.ERROR)


def no_projects() -> ProgressEvent:
    return ProgressEvent(event=ProgressEventType.NO_PROJECTS, stage=ProgressStage.ERROR)


def run_completed(total_steps: int, **summary: Any) -> ProgressEvent:
    return ProgressEvent(
        event=ProgressEventType.RUN_COMPLETED,
        stage=ProgressStage.COMPLETED,
        current_step=total_steps,
        total_steps=total_steps,
        data=summary,
    )


def run_failed(error: str) -> ProgressEvent:
    return ProgressEvent(
        event=ProgressEventType.RUN_FAILED,
        stage=ProgressStage.ERROR,
        current_step=0,
        total_steps=0,
        data={"error": error},
    )
