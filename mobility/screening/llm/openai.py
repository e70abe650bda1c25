"""OpenAI LLM provider, plus the chat-completions call shared with Ollama."""

import logging
from typing import Any

from mobility.screening.llm.base import SYSTEM_PROMPT, LLMProvider, missing_sdk, require_api_key

logger = logging.getLogger(__name__)


def chat_complete(client: Any, model: str, prompt: str, system: str | None, **options: Any) -> str:
    """Run one system + user exchange on an OpenAI-compatible client."""
    response = client.chat.completions.create(
        model=model,
        messages=[
            {"role": "system", "content": SYSTEM_PROMPT if system is None else system},
            {"role": "user", "content": prompt},
        ],
        **options,
    )
    return response.choices[0].message.content  # type: ignore[no-any-return]


class OpenAIProvider(LLMProvider):
    """Screens move requests with the OpenAI chat completions API."""

    @property
    def provider_id(self) -> str:
        return "openai"

    @property
    def default_model(self) -> str:
        return "gpt-4o-mini"

    @property
    def env_var(self) -> str:
        return "OPENAI_API_KEY"

    def complete(
        self,
        prompt: str,
        model: str | None = None,
        *,
        system: str | None = None,
    ) -> str:
        api_key = require_api_key(self.env_var)
        try:
            import openai
        except ImportError:
            raise missing_sdk("openai", "openai") from None

        use_model = model or self.default_model
        logger.info("Screening request -> OpenAI (%s)", use_model)
        return chat_complete(
            openai.OpenAI(api_key=api_key),
            use_model,
            prompt,
            system,
            temperature=0.2,
            max_tokens=300,
        )
