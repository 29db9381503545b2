from __future__ import annotations

from typing import Optional

import httpx

from study_schedule import config
from study_schedule.errors import UpstreamError
from .base import GenerationConfig, LLMProvider


class OpenAIProvider(LLMProvider):
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
        self.model = model or config.OPENAI_MODEL
        self.base_url = (base_url or config.OPENAI_BASE_URL).rstrip("/")
        self.timeout_s = timeout_s or config.LLM_TIMEOUT_S
        self.generation = generation
        self._transport = transport

        if not self.api_key:
            raise UpstreamError("OpenAI API key is missing")

    def __repr__(self) -> str:
        return f"OpenAIProvider(model={self.model!r}, api_key='***')"

    def generate(self, *, system: str, user: str) -> str:
        url = f"{self.base_url}/chat/completions"
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }
        # chat completions has no top_k
        payload = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": system},
                {"role": "user", "content": f"User input: {user}"},
            ],
            "temperature": self.generation.temperature,
            "top_p": self.generation.top_p,
            "max_tokens": self.generation.max_output_tokens,
        }

        try:
            with httpx.Client(timeout=self.timeout_s, transport=self._transport) as client:
                r = client.post(url, headers=headers, json=payload)
        except httpx.HTTPError as e:
            raise UpstreamError(f"OpenAI request failed: {e}") from e

        if r.is_error:
            raise UpstreamError(
                "Failed to get response from OpenAI API", status_code=r.status_code
            )

        try:
            return r.json()["choices"][0]["message"]["content"]
        except ValueError as e:
            raise UpstreamError("OpenAI returned a non-JSON response", status_code=r.status_code) from e
        except (KeyError, IndexError, TypeError) as e:
            raise UpstreamError("OpenAI response contained no choices") from e
