"""Ollama local LLM provider (OpenAI-compatible API, no key needed)."""

import logging

from mobility.screening.llm.base import LLMProvider, missing_sdk
from mobility.screening.llm.openai import chat_complete

logger = logging.getLogger(__name__)

OLLAMA_BASE_URL = "http://localhost:11434/v1"


class OllamaProvider(LLMProvider):
    """Screens move requests with a local Ollama model."""

    @property
    def provider_id(self) -> str:
        return "ollama"

    @property
    def default_model(self) -> str:
        return "llama3"

    @property
    def env_var(self) -> None:
        return None

    def complete(
        self,
        prompt: str,
        model: str | None = None,
        *,
        system: str | None = None,
    ) -> str:
        try:
            import openai
        except ImportError:
            purpose = "Ollama (OpenAI-compatible API)"
            raise missing_sdk("openai", "openai", purpose=purpose) from None

        use_model = model or self.default_model
        logger.info("Screening request -> Ollama (%s)", use_model)
        client = openai.OpenAI(base_url=OLLAMA_BASE_URL, api_key="ollama")
        return chat_complete(client, use_model, prompt, system)
