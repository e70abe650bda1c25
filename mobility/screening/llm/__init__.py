"""LLM provider registry with lazy loading.

Usage:
    from mobility.screening.llm import get_provider

    provider = get_provider("openai")
    raw = provider.complete(prompt, system=SYSTEM_PROMPT)
"""

import importlib

from mobility.screening.llm.base import LLMProvider, parse_json_object

__all__ = ["LLMProvider", "available_providers", "get_provider", "parse_json_object"]

# Lazy registry: maps provider name -> (module_path, class_name)
_REGISTRY: dict[str, tuple[str, str]] = {
    "anthropic": ("mobility.screening.llm.anthropic", "AnthropicProvider"),
    "openai": ("mobility.screening.llm.openai", "OpenAIProvider"),
    "gemini": ("mobility.screening.llm.gemini", "GeminiProvider"),
    "ollama": ("mobility.screening.llm.ollama", "OllamaProvider"),
}


def get_provider(name: str) -> LLMProvider:
    """Instantiate and return an LLM provider by name.

    Args:
        name: Provider identifier (anthropic, openai, gemini, ollama).

    Returns:
        An LLMProvider instance.

    Raises:
        ValueError: If the provider name is unknown.
    """
    if name not in _REGISTRY:
        valid = ", ".join(sorted(_REGISTRY))
        msg = f"Unknown LLM provider '{name}'. Available: {valid}"
        raise ValueError(msg)

    module_path, class_name = _REGISTRY[name]
    module = importlib.import_module(module_path)
    cls = getattr(module, class_name)
    return cls()  # type: ignore[no-any-return]


def available_providers() -> list[str]:
    """Return sorted list of registered provider names."""
    return sorted(_REGISTRY)
