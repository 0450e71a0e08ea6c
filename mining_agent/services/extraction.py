"""Structured-extraction capability: LLM completion parsed into validated project candidates."""
from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable

from loguru import logger
from pydantic import ValidationError

from mining_agent import llm_client
from mining_agent.models.schemas import RawExtractedProject

CompleteFn = Callable[..., Awaitable[llm_client.Completion]]


@dataclass(slots=True)
class ExtractionOutcome:
    """Either the validated candidates of a response, or why it could not be read."""

    candidates: list[RawExtractedProject] = field(default_factory=list)
    unparseable: bool = False
    reason: str | None = None
    rejected: int = 0

    @classmethod
    def failed(cls, reason: str) -> ExtractionOutcome:
        return cls(unparseable=True, reason=reason)


def _strip_fences(raw_text: str) -> str:
    text = raw_text.strip()
    if text.startswith("```"):
        parts = text.split("```")
        if len(parts) >= 2:
            text = parts[1]
        if text.startswith("json"):
            text = text[4:]
        text = text.strip()
    return text


def _load_json(raw_text: str) -> Any:
    text = _strip_fences(raw_text)
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        pass

    for open_char, close_char in (("{", "}"), ("[", "]")):
        start = text.find(open_char)
        end = text.rfind(close_char)
        if start >= 0 and end > start:
            try:
                return json.loads(text[start : end + 1])
            except json.JSONDecodeError:
                continue
    raise json.JSONDecodeError("no JSON object or array found", text, 0)


def _candidate_items(payload: Any) -> list[Any] | None:
    if isinstance(payload, list):
        return payload
    if not isinstance(payload, dict):
        return None
    projects = payload.get("projects")
    if isinstance(projects, list):
        return projects
    if isinstance(projects, dict):
        return [projects]
    if projects is None and any(key in payload for key in ("project_name", "name")):
        return [payload]
    if projects is None and not payload:
        return []
    return None


def parse_extraction_payload(raw_text: str) -> ExtractionOutcome:
    """Parse model output into candidates; invalid items are dropped, not fatal."""
    if not raw_text or not raw_text.strip():
        return ExtractionOutcome.failed("empty response")
    try:
        payload = _load_json(raw_text)
    except json.JSONDecodeError as exc:
        return ExtractionOutcome.failed(f"invalid JSON: {exc.msg}")

    items = _candidate_items(payload)
    if items is None:
        return ExtractionOutcome.failed("response has no project records")

    outcome = ExtractionOutcome()
    for item in items:
        if not isinstance(item, dict):
            outcome.rejected += 1
            continue
        try:
            outcome.candidates.append(RawExtractedProject.model_validate(item))
        except ValidationError as exc:
            outcome.rejected += 1
            logger.debug(f"Dropped extracted record: {exc.error_count()} validation errors")
    return outcome


class StructuredExtractor:
    def __init__(self, complete: CompleteFn | None = None, *, caller: str = "extraction"):
        self._complete = complete or llm_client.complete
        self._caller = caller

    async def extract(self, system_prompt: str, prompt: str) -> ExtractionOutcome:
        """Run one JSON-mode completion. LLM transport errors propagate to the caller."""
        completion = await self._complete(system_prompt, prompt, caller=self._caller)
        outcome = parse_extraction_payload(completion.text)
        if outcome.unparseable:
            logger.warning(f"[{self._caller}] Unparseable extraction response: {outcome.reason}")
        return outcome
