"""Generative backend speaking the Gemini ``generateContent`` API."""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Any

import httpx

from inbox_briefing.core.config import LlmSettings
from inbox_briefing.core.models import (
    CapabilityCall,
    CapabilityDeclaration,
    CapabilityResult,
    ModelRequest,
    ModelTurn,
)

LOGGER = logging.getLogger(__name__)

_REQUEST_ATTEMPTS = 3


class LLMError(RuntimeError):
    """Raised when the LLM provider fails to respond as expected."""


@dataclass(slots=True)
class GeminiClient:
    """Thin asynchronous client for Gemini function calling."""

    settings: LlmSettings
    client: httpx.AsyncClient | None = None

    @property
    def provider_id(self) -> str:
        """Return a human readable identifier for the configured model."""
        return f"gemini:{self.settings.model}"

    async def complete(self, request: ModelRequest) -> ModelTurn:
        """Send one round trip and return the model's text and calls."""
        if not self.settings.api_key:
            raise LLMError("Gemini API key is not configured")

        endpoint = _resolve_endpoint(self.settings.base_url, self.settings.model)
        payload = build_payload(request, self.settings)
        headers = {"x-goog-api-key": self.settings.api_key}

        data: dict[str, Any] | None = None
        last_error: Exception | None = None
        async with self._session() as client:
            for attempt in range(1, _REQUEST_ATTEMPTS + 1):
                try:
                    response = await client.post(
                        endpoint, json=payload, headers=headers
                    )
                    response.raise_for_status()
                    data = response.json()
                    break
                except httpx.HTTPError as exc:
                    LOGGER.warning("Gemini request attempt %d failed: %s", attempt, exc)
                    last_error = exc
                except json.JSONDecodeError as exc:
                    raise LLMError("LLM returned invalid JSON") from exc

                if attempt < _REQUEST_ATTEMPTS:
                    await asyncio.sleep(_backoff_delay(attempt))

        if data is None:
            raise LLMError("LLM request failed after retries") from last_error
        return parse_turn(data)

    @asynccontextmanager
    async def _session(self) -> AsyncIterator[httpx.AsyncClient]:
        if self.client is not None:
            yield self.client
            return
        async with httpx.AsyncClient(timeout=self.settings.timeout_seconds) as client:
            yield client


def build_payload(request: ModelRequest, settings: LlmSettings) -> dict[str, Any]:
    """Translate ``request`` into a ``generateContent`` body."""
    contents: list[dict[str, Any]] = [
        {"role": "user", "parts": [{"text": request.user_prompt}]}
    ]
    for turn, results in request.exchanges:
        contents.append({"role": "model", "parts": _turn_parts(turn)})
        if results:
            contents.append(
                {"role": "user", "parts": [_result_part(result) for result in results]}
            )

    if request.forced_capability is None:
        calling_config: dict[str, Any] = {"mode": "AUTO"}
    else:
        calling_config = {
            "mode": "ANY",
            "allowedFunctionNames": [request.forced_capability],
        }

    generation_config: dict[str, Any] = {"temperature": settings.temperature}
    if settings.max_output_tokens is not None:
        generation_config["maxOutputTokens"] = settings.max_output_tokens

    return {
        "systemInstruction": {"parts": [{"text": request.system_prompt}]},
        "contents": contents,
        "tools": [
            {
                "functionDeclarations": [
                    _declaration(item) for item in request.capabilities
                ]
            }
        ],
        "toolConfig": {"functionCallingConfig": calling_config},
        "generationConfig": generation_config,
    }


def parse_turn(data: dict[str, Any]) -> ModelTurn:
    """Extract text and function calls from a ``generateContent`` response."""
    candidates = data.get("candidates")
    if not isinstance(candidates, list) or not candidates:
        raise LLMError("LLM response missing 'candidates'")

    parts = (candidates[0].get("content") or {}).get("parts") or []
    texts: list[str] = []
    calls: list[CapabilityCall] = []
    for part in parts:
        if isinstance(part.get("text"), str):
            texts.append(part["text"])
        function_call = part.get("functionCall")
        if isinstance(function_call, dict) and function_call.get("name"):
            arguments = function_call.get("args")
            calls.append(
                CapabilityCall(
                    name=function_call["name"],
                    arguments=arguments if isinstance(arguments, dict) else {},
                    call_id=function_call.get("id"),
                )
            )
    return ModelTurn(text="".join(texts), calls=tuple(calls))


def _turn_parts(turn: ModelTurn) -> list[dict[str, Any]]:
    parts: list[dict[str, Any]] = []
    if turn.text:
        parts.append({"text": turn.text})
    for call in turn.calls:
        function_call: dict[str, Any] = {
            "name": call.name,
            "args": dict(call.arguments),
        }
        if call.call_id:
            function_call["id"] = call.call_id
        parts.append({"functionCall": function_call})
    return parts


def _result_part(result: CapabilityResult) -> dict[str, Any]:
    function_response: dict[str, Any] = {
        "name": result.call.name,
        "response": dict(result.response),
    }
    if result.call.call_id:
        function_response["id"] = result.call.call_id
    return {"functionResponse": function_response}


def _declaration(item: CapabilityDeclaration) -> dict[str, Any]:
    declaration: dict[str, Any] = {"name": item.name, "description": item.description}
    if item.parameters is not None:
        declaration["parameters"] = dict(item.parameters)
    return declaration


def _backoff_delay(attempt: int) -> float:
    return float(min(2**attempt, 8))


def _resolve_endpoint(base_url: str, model: str) -> str:
    return f"{base_url.rstrip('/')}/v1beta/models/{model}:generateContent"


__all__ = ["GeminiClient", "LLMError", "build_payload", "parse_turn"]
