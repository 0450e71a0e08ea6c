"""Prompt catalog for the extraction agents.

`prompts/prompts.json` maps each agent name to a `system_prompt` and a
`user_prompt`, both `string.Template` text. The catalog is re-read when the
file changes on disk.
"""
from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from string import Template
from typing import Any


PROMPTS_PATH = Path(__file__).resolve().parents[1] / "prompts" / "prompts.json"
PROMPT_PARTS = ("system_prompt", "user_prompt")

_catalog_cache: dict[str, dict[str, str]] | None = None
_catalog_mtime_ns: int | None = None


@dataclass(frozen=True, slots=True)
class AgentPrompt:
    system: str
    user: str


def _validate(payload: Any) -> dict[str, dict[str, str]]:
    if not isinstance(payload, dict):
        raise ValueError("Prompt catalog must be a JSON object.")
    for agent, entry in payload.items():
        if not isinstance(entry, dict):
            raise ValueError(f"Prompt entry for '{agent}' must be an object.")
        for part in PROMPT_PARTS:
            if not isinstance(entry.get(part), str):
                raise ValueError(f"Prompt entry for '{agent}' needs a string '{part}'.")
    return payload


def _load_catalog() -> dict[str, dict[str, str]]:
    global _catalog_cache, _catalog_mtime_ns
    mtime_ns = PROMPTS_PATH.stat().st_mtime_ns
    if _catalog_cache is None or _catalog_mtime_ns != mtime_ns:
        _catalog_cache = _validate(json.loads(PROMPTS_PATH.read_text(encoding="utf-8")))
        _catalog_mtime_ns = mtime_ns
    return _catalog_cache


def prompt_agents() -> list[str]:
    return sorted(_load_catalog())


def _substitute(key: str, text: str, values: dict[str, Any]) -> str:
    try:
        return Template(text).substitute(**values)
    except KeyError as exc:
        raise KeyError(f"Missing template value '{exc.args[0]}' for prompt '{key}'") from exc


def render_prompt(key: str, **values: Any) -> str:
    """Render `<agent>.<part>`; values are substituted once, so `$` inside them is literal."""
    agent, _, part = key.partition(".")
    entry = _load_catalog().get(agent)
    if entry is None or part not in PROMPT_PARTS:
        raise KeyError(f"Prompt key not found: {key}")
    return _substitute(key, entry[part], values)


def agent_prompt(agent: str, **values: Any) -> AgentPrompt:
    """System and user prompt of one agent, both rendered with the same values."""
    return AgentPrompt(
        system=render_prompt(f"{agent}.system_prompt", **values),
        user=render_prompt(f"{agent}.user_prompt", **values),
    )
