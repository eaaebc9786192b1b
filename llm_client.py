"""Generative text-completion collaborator backed by LiteLLM.

The contract is best-effort: a call returns free-form text that is expected
(not guaranteed) to contain one JSON object. Callers validate everything.
"""

from __future__ import annotations

import sys
from typing import Any, Dict, List, Optional, Protocol

import litellm

from exceptions import GenerationUnavailable, ValidationFailure
from llm_config import GenerationSettings, get_generation_settings
from retry_utils import CircuitBreaker, get_llm_circuit_breaker, is_timeout_error


class TextGenerationClient(Protocol):
    """Anything that can turn a system+user prompt into text."""

    def is_configured(self) -> bool:
        ...

    def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        max_tokens: int,
        temperature: float,
        timeout: float,
    ) -> str:
        ...


def _validate_llm_response(response: Any, context: str = "LLM call") -> str:
    """Extract message content from a completion response.

    Args:
        response: The response from litellm.completion()
        context: Description of where this validation is happening

    Returns:
        The first choice's message content

    Raises:
        ValidationFailure: If response is malformed or empty
    """
    if response is None:
        raise ValidationFailure(f"{context}: Response is None")

    choices = getattr(response, "choices", None)
    if not choices:
        raise ValidationFailure(f"{context}: response.choices is empty")

    message = getattr(choices[0], "message", None)
    content = getattr(message, "content", None) if message is not None else None
    if not content or not str(content).strip():
        raise ValidationFailure(f"{context}: No response content")

    return str(content)


class LiteLLMTextClient:
    """TextGenerationClient that calls litellm.completion directly."""

    def __init__(
        self,
        settings: Optional[GenerationSettings] = None,
        circuit_breaker: Optional[CircuitBreaker] = None,
    ) -> None:
        self.settings = settings or get_generation_settings()
        self.circuit_breaker = circuit_breaker or get_llm_circuit_breaker(self.settings)

    def is_configured(self) -> bool:
        return self.settings.is_configured

    def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        max_tokens: int,
        temperature: float,
        timeout: float,
    ) -> str:
        if not self.is_configured():
            raise GenerationUnavailable("No OPENAI_API_KEY configured")

        if not self.circuit_breaker.can_execute():
            raise GenerationUnavailable(
                f"Circuit breaker '{self.circuit_breaker.name}' is open"
            )

        messages: List[Dict[str, str]] = [
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": user_prompt},
        ]

        kwargs: Dict[str, Any] = {
            "model": self.settings.model,
            "messages": messages,
            "api_key": self.settings.api_key,
            "max_tokens": max_tokens,
            "temperature": temperature,
            "timeout": timeout,
            "drop_params": True,
        }
        if self.settings.api_base:
            kwargs["api_base"] = self.settings.api_base

        try:
            response = litellm.completion(**kwargs)
            content = _validate_llm_response(response, f"{self.settings.model} completion")
        except Exception as exc:
            self.circuit_breaker.record_failure()
            label = "timed out" if is_timeout_error(exc) else "failed"
            print(
                f"   ❌ litellm.completion {label} ({self.settings.model}): {exc}",
                file=sys.stderr,
            )
            raise

        self.circuit_breaker.record_success()
        return content
