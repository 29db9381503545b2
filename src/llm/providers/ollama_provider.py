from __future__ import annotations

from typing import Optional

import httpx

from study_schedule import config
from study_schedule.errors import UpstreamError
from .base import GenerationConfig, LLMProvider


class OllamaProvider(LLMProvider):
    def __init__(
        self,
        model: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout_s: Optional[float] = None,
        generation: GenerationConfig = GenerationConfig(),
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.model = model or config.OLLAMA_MODEL
        self.base_url = (base_url or config.OLLAMA_BASE_URL).rstrip("/")
        self.timeout_s = timeout_s or config.LLM_TIMEOUT_S
        self.generation = generation
        self._transport = transport

    def generate(self, *, system: str, user: str) -> str:
        url = f"{self.base_url}/api/chat"
        payload = {
            "model": self.model,
            "stream": False,
            "messages": [
                {"role": "system", "content": system},
                {"role": "user", "content": f"User input: {user}"},
            ],
            "options": {
                "temperature": self.generation.temperature,
                "top_k": self.generation.top_k,
                "top_p": self.generation.top_p,
                "num_predict": self.generation.max_output_tokens,
            },
        }

        try:
            with httpx.Client(timeout=self.timeout_s, transport=self._transport) as client:
                r = client.post(url, json=payload)
        except httpx.HTTPError as e:
            raise UpstreamError(f"Ollama request failed: {e}") from e

        if r.is_error:
            raise UpstreamError(
                "Failed to get response from Ollama", status_code=r.status_code
            )

        try:
            return r.json()["message"]["content"]
        except ValueError as e:
            raise UpstreamError("Ollama returned a non-JSON response", status_code=r.status_code) from e
        except (KeyError, TypeError) as e:
            raise UpstreamError("Ollama response contained no message") from e
