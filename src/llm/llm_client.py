import logging
from typing import Optional

from llm.providers.base import LLMProvider
from study_schedule import config

logger = logging.getLogger(__name__)

PROVIDERS = ("gemini", "openai", "ollama", "mock")


def build_provider(name: Optional[str] = None, api_key: Optional[str] = None) -> LLMProvider:
    """Instantiate the configured text-generation provider.

    The API key is the one the user supplied for the current session; it is
    never read from or written to persistent configuration.
    """
    name = (name or config.LLM_PROVIDER).lower()

    if name == "gemini":
        from llm.providers.gemini_provider import GeminiProvider
        return GeminiProvider(api_key=api_key or "")
    if name == "openai":
        from llm.providers.openai_provider import OpenAIProvider
        return OpenAIProvider(api_key=api_key or "")
    if name == "ollama":
        from llm.providers.ollama_provider import OllamaProvider
        return OllamaProvider()
    if name == "mock":
        from llm.providers.mock_provider import MockProvider
        return MockProvider()

    raise ValueError(f"Unknown LLM_PROVIDER {name!r}, expected one of {PROVIDERS}")


class LLMClient:
    """Thin wrapper that sends one instruction/input pair to a provider."""

    def __init__(self, provider: Optional[LLMProvider] = None, api_key: Optional[str] = None):
        self.provider = provider or build_provider(api_key=api_key)

    def complete(self, system: str, user: str) -> str:
        logger.info(f"Requesting completion from {type(self.provider).__name__}")
        text = self.provider.generate(system=system, user=user)
        logger.info(f"Received {len(text or '')} characters from upstream")
        return text or ""
