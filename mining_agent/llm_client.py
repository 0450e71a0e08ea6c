"""OpenRouter LLM client factory with a JSON-mode completion helper."""
from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any

from openai import AsyncOpenAI

from mining_agent.config import settings
from mining_agent.services.logger import log_llm_call


@dataclass
class Usage:
    input_tokens: int = 0
    output_tokens: int = 0


@dataclass
class Completion:
    text: str
    usage: Usage


def _temperature_for_model(model: str) -> float:
    # Some OpenAI GPT-5-compatible gateways reject any temperature but 1.
    lowered = (model or "").lower()
    if "gpt-5" in lowered:
        return 1
    return settings.extraction_temperature


def _from_openai_response(response: Any) -> Completion:
    choices = getattr(response, "choices", None) or []
    text = ""
    if choices:
        text = getattr(choices[0].message, "content", None) or ""
    usage = getattr(response, "usage", None)
    return Completion(
        text=text,
        usage=Usage(
            input_tokens=getattr(usage, "prompt_tokens", 0) or 0,
            output_tokens=getattr(usage, "completion_tokens", 0) or 0,
        ),
    )


async def complete(
    system: str,
    prompt: str,
    *,
    caller: str,
    model: str | None = None,
    json_mode: bool = True,
) -> Completion:
    """Single-turn chat completion. Transport and API errors propagate."""
    active_model = model or get_model()
    kwargs: dict[str, Any] = {
        "model": active_model,
        "messages": [
            {"role": "system", "content": system},
            {"role": "user", "content": prompt},
        ],
        "temperature": _temperature_for_model(active_model),
    }
    if json_mode:
        kwargs["response_format"] = {"type": "json_object"}

    started = time.perf_counter()
    try:
        response = await client().chat.completions.create(**kwargs)
    except Exception as exc:
        log_llm_call(
            model=active_model,
            caller=caller,
            duration_ms=int((time.perf_counter() - started) * 1000),
            status="error",
            error=str(exc),
        )
        raise

    completion = _from_openai_response(response)
    log_llm_call(
        model=active_model,
        caller=caller,
        input_tokens=completion.usage.input_tokens,
        output_tokens=completion.usage.output_tokens,
        duration_ms=int((time.perf_counter() - started) * 1000),
    )
    return completion


def get_client() -> AsyncOpenAI:
    """Get OpenRouter client via OpenAI-compatible SDK."""
    if not settings.openrouter_api_key:
        raise RuntimeError("OPENROUTER_API_KEY is not configured")
    base_url = settings.openrouter_base_url.strip() or "https://openrouter.ai/api/v1"
    return AsyncOpenAI(api_key=settings.openrouter_api_key, base_url=base_url)


def get_model() -> str:
    """Get the active OpenRouter model id."""
    if settings.openrouter_model:
        return settings.openrouter_model
    return settings.default_model


_client: AsyncOpenAI | None = None


def client() -> AsyncOpenAI:
    """Get or create the LLM client."""
    global _client
    if _client is None:
        _client = get_client()
    return _client
