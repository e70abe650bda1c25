"""Anthropic Claude LLM provider."""

import logging

from mobility.screening.llm.base import SYSTEM_PROMPT, LLMProvider, missing_sdk, require_api_key

logger = logging.getLogger(__name__)

MAX_TOKENS = 512


class AnthropicProvider(LLMProvider):
    """Screens move requests with the Anthropic Messages API."""

    @property
    def provider_id(self) -> str:
        return "anthropic"

    @property
    def default_model(self) -> str:
        return "claude-sonnet-4-20250514"

    @property
    def env_var(self) -> str:
        return "ANTHROPIC_API_KEY"

    def complete(
        self,
        prompt: str,
        model: str | None = None,
        *,
        system: str | None = None,
    ) -> str:
        api_key = require_api_key(self.env_var)
        try:
            import anthropic
        except ImportError:
            raise missing_sdk("anthropic", "anthropic") from None

        use_model = model or self.default_model
        logger.info("Screening request -> Anthropic (%s)", use_model)
        message = anthropic.Anthropic(api_key=api_key).messages.create(
            model=use_model,
            max_tokens=MAX_TOKENS,
            system=SYSTEM_PROMPT if system is None else system,
            messages=[{"role": "user", "content": prompt}],
        )
        return message.content[0].text  # type: ignore[union-attr]
