"""Abstract base class for LLM providers and shared request/response helpers."""

import json
import os
import re
from abc import ABC, abstractmethod
from typing import Any

SYSTEM_PROMPT = (
    "You are a global mobility compliance screener. You evaluate international "
    "assignment requests to decide whether they should proceed to cost analysis.\n\n"
    "SCORING RUBRIC (apply strictly):\n"
    "  APPROVE: short-term business trip (< 30 days) with any business "
    "justification (confidence 90+)\n"
    "  APPROVE: business-requested move with a documented business case, local "
    "market searched and an existing project (confidence 85+)\n"
    "  REJECT: no business case and self-initiated\n"
    "  REJECT: self-initiated with no local market search and no existing project\n"
    "  REJECT: no business case, no existing project and no local market search\n"
    "  Mixed signals lean towards REJECT with a clear explanation of what is missing.\n\n"
    "Always flag: assignment >= 6 months (tax residency risk), >= 12 months "
    "(social security review), no bilateral treaty (double taxation risk), "
    "self-initiated move (business alignment).\n\n"
    "Return ONLY a JSON object (no markdown, no explanation):\n"
    '{"decision": "approved" | "rejected", "confidence": <integer 0-100>, '
    '"reasoning": "<2-3 sentences>", "flags": ["<risk flag>", ...]}'
)


def parse_json_object(raw_text: str) -> dict[str, Any]:
    """Parse an LLM response into a dict.

    Handles markdown-wrapped JSON (```json ... ```) and plain JSON.
    Raises ValueError when the text is not a JSON object.
    """
    cleaned = re.sub(r"^```(?:json)?\s*\n?", "", raw_text.strip())
    cleaned = re.sub(r"\n?```\s*$", "", cleaned)

    try:
        data = json.loads(cleaned)
    except json.JSONDecodeError as e:
        msg = f"Failed to parse LLM response as JSON: {e}"
        raise ValueError(msg) from e

    if not isinstance(data, dict):
        msg = "LLM response is not a JSON object"
        raise ValueError(msg)
    return data


def require_api_key(env_var: str) -> str:
    """Return the API key from the environment. Raises ValueError when unset."""
    api_key = os.environ.get(env_var)
    if not api_key:
        msg = f"{env_var} environment variable is required"
        raise ValueError(msg)
    return api_key


def missing_sdk(package: str, extra: str, purpose: str = "LLM screening") -> ImportError:
    msg = (
        f"{package} is required for {purpose}. "
        f"Install with: pip install 'deployment-cost-engine[{extra}]'"
    )
    return ImportError(msg)


class LLMProvider(ABC):
    """Base class that every LLM provider must implement."""

    @property
    @abstractmethod
    def provider_id(self) -> str:
        """Unique identifier for this provider (e.g. 'anthropic')."""

    @abstractmethod
    def complete(
        self,
        prompt: str,
        model: str | None = None,
        *,
        system: str | None = None,
    ) -> str:
        """Send a prompt to the LLM and return raw response text.

        Args:
            prompt: User prompt describing the assignment request.
            model: Override the provider's default model. None uses default.
            system: Override the system prompt. None falls back to SYSTEM_PROMPT.

        Returns:
            Raw text response from the LLM (expected to be JSON).
        """

    @property
    @abstractmethod
    def default_model(self) -> str:
        """The default model ID used when no override is specified."""

    @property
    @abstractmethod
    def env_var(self) -> str | None:
        """Environment variable name for the API key, or None if not needed."""
