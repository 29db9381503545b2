from __future__ import annotations

import logging
from typing import Optional

import httpx

from study_schedule import config
from study_schedule.errors import UpstreamError
from .base import GenerationConfig, LLMProvider

logger = logging.getLogger(__name__)


class GeminiProvider(LLMProvider):
    def __init__(
        self,
        api_key: str,
        model: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout_s: Optional[float] = None,
        generation: GenerationConfig = GenerationConfig(),
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.api_key = (api_key or "").strip()
        self.model = model or config.GEMINI_MODEL
        self.base_url = (base_url or config.GEMINI_BASE_URL).rstrip("/")
        self.timeout_s = timeout_s or config.LLM_TIMEOUT_S
        self.generation = generation
        self._transport = transport

        if not self.api_key:
            raise UpstreamError("Gemini API key is missing")

    def __repr__(self) -> str:
        return f"GeminiProvider(model={self.model!r}, api_key='***')"

    def generate(self, *, system: str, user: str) -> str:
        url = f"{self.base_url}/models/{self.model}:generateContent"
        headers = {
            "x-goog-api-key": self.api_key,
            "Content-Type": "application/json",
        }
        # Gemini takes a single text part: instructions first, user text last.
        payload = {
            "contents": [{"parts": [{"text": f"{system}\n\nUser input: {user}"}]}],
            "generationConfig": {
                "temperature": self.generation.temperature,
                "topK": self.generation.top_k,
                "topP": self.generation.top_p,
                "maxOutputTokens": self.generation.max_output_tokens,
            },
        }

        try:
            with httpx.Client(timeout=self.timeout_s, transport=self._transport) as client:
                r = client.post(url, headers=headers, json=payload)
        except httpx.TimeoutException as e:
            raise UpstreamError(f"Gemini request timed out after {self.timeout_s}s") from e
        except httpx.HTTPError as e:
            raise UpstreamError(f"Gemini request failed: {e}") from e

        if r.is_error:
            logger.warning(f"Gemini returned status {r.status_code} for model {self.model}")
            raise UpstreamError(
                f"Failed to get response from Gemini API: {_error_message(r)}",
                status_code=r.status_code,
            )

        # a 200 from a proxy or gateway may not be JSON at all
        try:
            return r.json()["candidates"][0]["content"]["parts"][0]["text"]
        except ValueError as e:
            raise UpstreamError("Gemini returned a non-JSON response", status_code=r.status_code) from e
        except (KeyError, IndexError, TypeError) as e:
            raise UpstreamError("Gemini response contained no candidates") from e


def _error_message(r: httpx.Response) -> str:
    try:
        return r.json()["error"]["message"]
    except (ValueError, KeyError, TypeError):
        return r.reason_phrase or "unknown error"
