from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class GenerationConfig:
    """Low-randomness sampling so the model returns literal, repeatable JSON."""

    temperature: float = 0.3
    top_k: int = 40
    top_p: float = 0.95
    max_output_tokens: int = 2048


class LLMProvider(ABC):
    @abstractmethod
    def generate(self, *, system: str, user: str) -> str:
        """
        Must return the model output as TEXT (parsing happens in extraction.response_parser).
        Raises UpstreamError when the endpoint answers with a non-success status.
        """
        raise NotImplementedError
