# src/tasktango/suggestions/client.py

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from enum import StrEnum
from typing import Any

import httpx

from ..config import DEFAULT_SUGGESTION_ENDPOINT, DEFAULT_SUGGESTION_MAX_TOKENS

logger = logging.getLogger(__name__)


class SuggestionError(StrEnum):
    NETWORK_FAILURE = "network_failure"
    HTTP_STATUS = "http_status"
    DECODE_FAILURE = "decode_failure"
    MALFORMED_RESPONSE = "malformed_response"
    CANCELLED = "cancelled"


@dataclass(frozen=True, slots=True)
class SuggestionResult:
    """
    Outcome of one suggestion round trip.

    Exactly one of `text` (success) or `error` (failure) is set.
    """

    text: str | None = None
    error: SuggestionError | None = None
    detail: str = ""

    @property
    def ok(self) -> bool:
        return self.error is None and self.text is not None

    @classmethod
    def success(cls, text: str) -> SuggestionResult:
        return cls(text=text)

    @classmethod
    def failure(cls, error: SuggestionError, detail: str = "") -> SuggestionResult:
        return cls(error=error, detail=detail)


def build_request_body(prompt: str, max_tokens: int) -> dict[str, Any]:
    return {"prompt": prompt, "max_tokens": int(max_tokens)}


def extract_suggestion_text(payload: Any) -> str | None:
    """Return choices[0].text from a completion-style payload, or None if absent."""
    if not isinstance(payload, dict):
        return None
    choices = payload.get("choices")
    if not isinstance(choices, list) or not choices:
        return None
    first = choices[0]
    if not isinstance(first, dict):
        return None
    text = first.get("text")
    return text if isinstance(text, str) else None


def friendly_suggestion_error_message(result: SuggestionResult) -> str:
    if result.ok:
        return ""
    err = result.error
    if err == SuggestionError.NETWORK_FAILURE:
        return "Suggestion server is unreachable. Is it running? (TASKTANGO_SUGGESTION_ENDPOINT)"
    if err == SuggestionError.HTTP_STATUS:
        return f"Suggestion server returned an error ({result.detail or 'non-2xx status'})."
    if err == SuggestionError.DECODE_FAILURE:
        return "Suggestion server returned a body that is not JSON."
    if err == SuggestionError.MALFORMED_RESPONSE:
        return "Suggestion server reply has no choices[0].text."
    if err == SuggestionError.CANCELLED:
        return "Suggestion request was cancelled."
    return "No suggestion available."


class SuggestionClient:
    """
    Posts the task summary prompt to a completion-style endpoint.

    Contract:
    - one POST per call, JSON body {"prompt": ..., "max_tokens": ...}
    - no retries, no caching, httpx default timeouts
    - never raises for transport/HTTP/payload problems: they come back as
      a failed SuggestionResult
    """

    def __init__(
        self,
        endpoint: str = DEFAULT_SUGGESTION_ENDPOINT,
        max_tokens: int = DEFAULT_SUGGESTION_MAX_TOKENS,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.endpoint = endpoint
        self.max_tokens = max_tokens
        # Tests inject httpx.MockTransport here.
        self._transport = transport

    @classmethod
    def from_settings(cls, settings) -> SuggestionClient:
        return cls(
            endpoint=str(getattr(settings, "suggestion_endpoint", DEFAULT_SUGGESTION_ENDPOINT)),
            max_tokens=int(getattr(settings, "suggestion_max_tokens", DEFAULT_SUGGESTION_MAX_TOKENS)),
        )

    async def request_suggestion(
        self,
        prompt: str,
        endpoint: str | None = None,
        max_tokens: int | None = None,
    ) -> SuggestionResult:
        url = endpoint or self.endpoint
        body = build_request_body(prompt, self.max_tokens if max_tokens is None else max_tokens)

        logger.debug("Suggestion request url=%s prompt_len=%d", url, len(prompt))

        try:
            async with httpx.AsyncClient(transport=self._transport) as http:
                response = await http.post(
                    url,
                    content=json.dumps(body, ensure_ascii=False).encode("utf-8"),
                    headers={"Content-Type": "application/json"},
                )
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.info("Suggestion request failed url=%s (%s)", url, e.__class__.__name__)
            return SuggestionResult.failure(SuggestionError.NETWORK_FAILURE, str(e) or e.__class__.__name__)

        if not response.is_success:
            logger.info("Suggestion server returned HTTP %s url=%s", response.status_code, url)
            return SuggestionResult.failure(SuggestionError.HTTP_STATUS, f"HTTP {response.status_code}")

        try:
            payload = response.json()
        except ValueError as e:
            logger.info("Suggestion response is not JSON url=%s", url)
            return SuggestionResult.failure(SuggestionError.DECODE_FAILURE, str(e))

        text = extract_suggestion_text(payload)
        if text is None:
            logger.info("Suggestion response has no choices[0].text url=%s", url)
            return SuggestionResult.failure(SuggestionError.MALFORMED_RESPONSE, "missing choices[0].text")

        logger.debug("Suggestion received len=%d", len(text))
        return SuggestionResult.success(text)
