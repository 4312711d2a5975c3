"""OpenAI chat-completion client used by the graders."""

from __future__ import annotations

import json
import logging
import os
import re
import time
from dataclasses import dataclass
from typing import Any

import httpx
from openai import APIConnectionError, OpenAI

from scorecard.grading.errors import ConfigurationError, GradingParseError, UpstreamTransientError

logger = logging.getLogger(__name__)

API_KEY_ENV_VARS = ("OPENAI_API_KEY", "OPENAI_EVAL_KEY")

_LEADING_FENCE = re.compile(r"^```(?:json)?", re.IGNORECASE)
_TRAILING_FENCE = re.compile(r"```$")


@dataclass
class OpenAIRequestError(Exception):
    status_code: int | None
    body: str
    message: str

    def __str__(self) -> str:
        return self.message


@dataclass
class ChatResult:
    text: str
    model: str
    prompt_tokens: int = 0
    completion_tokens: int = 0


def resolve_api_key(explicit: str | None = None) -> str:
    """Return the first configured key: explicit, then OPENAI_API_KEY, then OPENAI_EVAL_KEY."""
    for candidate in (explicit, *(os.getenv(name) for name in API_KEY_ENV_VARS)):
        if candidate and candidate.strip():
            return candidate.strip()
    raise ConfigurationError("No OpenAI API key configured")


def build_chat_request(
    model: str,
    system_prompt: str,
    user_prompt: str,
    temperature: float,
    json_mode: bool = True,
    max_tokens: int | None = None,
) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "model": model,
        "messages": [
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": user_prompt},
        ],
        "temperature": temperature,
    }
    if json_mode:
        payload["response_format"] = {"type": "json_object"}
    if max_tokens is not None:
        payload["max_tokens"] = max_tokens
    return payload


def parse_json_payload(text: str) -> dict[str, Any]:
    """Parse a model response as a JSON object, tolerating markdown fences."""
    cleaned = _TRAILING_FENCE.sub("", _LEADING_FENCE.sub("", (text or "").strip())).strip()
    try:
        payload = json.loads(cleaned)
    except json.JSONDecodeError as exc:
        raise GradingParseError("Grading response is not valid JSON", raw_text=cleaned[:500]) from exc
    if not isinstance(payload, dict):
        raise GradingParseError("Grading response is not a JSON object", raw_text=cleaned[:500])
    return payload


def _classify_failure(exc: Exception) -> tuple[bool, int | None]:
    status_code = getattr(exc, "status_code", None)
    if isinstance(exc, (httpx.TimeoutException, TimeoutError)):
        return True, 504
    if isinstance(exc, (httpx.TransportError, APIConnectionError)):
        return True, status_code
    return isinstance(status_code, int) and status_code >= 500, status_code


class ChatJSONClient:
    """Thin wrapper issuing one chat completion with a single transient retry."""

    def __init__(
        self,
        model: str,
        api_key: str | None = None,
        timeout_seconds: float = 30.0,
        retry_backoff_seconds: float = 0.5,
        client: Any = None,
    ) -> None:
        self.model = model
        self._retry_backoff_seconds = retry_backoff_seconds
        if client is None:
            client = OpenAI(api_key=resolve_api_key(api_key), timeout=timeout_seconds, max_retries=0)
        self._client = client

    def _call_with_retry(self, request_payload: dict[str, Any], request_id: str) -> Any:
        attempts = 2
        for attempt in range(attempts):
            try:
                return self._client.chat.completions.create(**request_payload)
            except Exception as exc:
                transient, status_code = _classify_failure(exc)
                if transient and attempt < attempts - 1:
                    logger.warning(
                        "openai chat retry",
                        extra={
                            "request_id": request_id,
                            "stage": "openai_retry",
                            "model": self.model,
                            "attempt": attempt + 1,
                            "status_code": status_code,
                        },
                    )
                    time.sleep(self._retry_backoff_seconds)
                    continue
                if transient:
                    raise UpstreamTransientError(status_code=status_code, message=f"OpenAI request failed: {exc}") from exc

                response_obj = getattr(exc, "response", None)
                body_text = getattr(response_obj, "text", "") if response_obj is not None else ""
                raise OpenAIRequestError(
                    status_code=status_code,
                    body=body_text or str(exc),
                    message=f"OpenAI request failed: {exc}",
                ) from exc
        raise UpstreamTransientError(status_code=None, message="OpenAI request failed")

    def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        temperature: float,
        request_id: str = "",
        json_mode: bool = True,
        max_tokens: int | None = None,
    ) -> ChatResult:
        request_payload = build_chat_request(
            model=self.model,
            system_prompt=system_prompt,
            user_prompt=user_prompt,
            temperature=temperature,
            json_mode=json_mode,
            max_tokens=max_tokens,
        )
        started = time.perf_counter()
        response = self._call_with_retry(request_payload, request_id)

        choices = getattr(response, "choices", None) or []
        text = ""
        if choices:
            text = getattr(choices[0].message, "content", "") or ""
        usage = getattr(response, "usage", None)
        result = ChatResult(
            text=text,
            model=self.model,
            prompt_tokens=getattr(usage, "prompt_tokens", 0) or 0,
            completion_tokens=getattr(usage, "completion_tokens", 0) or 0,
        )
        logger.info(
            "openai chat completed",
            extra={
                "request_id": request_id,
                "stage": "call_openai",
                "model": self.model,
                "prompt_tokens": result.prompt_tokens,
                "completion_tokens": result.completion_tokens,
                "openai_ms": int((time.perf_counter() - started) * 1000),
            },
        )
        return result
