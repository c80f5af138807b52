"""Shared request type and base class for text-completion backends."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, ClassVar, Optional


class BackendError(RuntimeError):
    """Raised when a backend cannot produce a usable completion."""


@dataclass
class LLMRequest:
    """Represents one completion request handed to a backend transport."""

    prompt: str
    system: Optional[str]
    model: str
    temperature: Optional[float]
    max_tokens: Optional[int]
    api_key: Optional[str]
    base_url: Optional[str]
    request_timeout: Optional[float]


class TextRunner:
    """Executes prompts against one backend and returns the completion text.

    Subclasses supply the transport through ``_transport``; tests swap it
    out with the ``runner`` argument.
    """

    provider: ClassVar[str] = ""
    requires_api_key: ClassVar[bool] = True

    def __init__(
        self,
        model: str,
        *,
        api_key: str | None = None,
        base_url: str | None = None,
        temperature: Optional[float] = 0.1,
        max_tokens: Optional[int] = 4000,
        request_timeout: Optional[float] = 60.0,
        runner: Callable[[LLMRequest], str] | None = None,
    ) -> None:
        self.model = model
        self.api_key = api_key
        self.base_url = base_url.rstrip("/") if base_url else None
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.request_timeout = request_timeout
        self._runner = runner if runner is not None else self._transport

    def run(self, prompt: str, *, system: str | None = None) -> str:
        """Send the prompt and return the stripped completion text."""
        if self.requires_api_key and not self.api_key:
            raise BackendError(f"No API key configured for provider '{self.provider}'")
        request = LLMRequest(
            prompt=prompt,
            system=system,
            model=self.model,
            temperature=self.temperature,
            max_tokens=self.max_tokens,
            api_key=self.api_key,
            base_url=self.base_url,
            request_timeout=self.request_timeout,
        )
        try:
            text = self._runner(request)
        except BackendError:
            raise
        except Exception as exc:
            raise BackendError(f"{self.provider} request failed: {exc}") from exc

        if not isinstance(text, str) or not text.strip():
            raise BackendError(f"{self.provider} returned an empty response")
        return text.strip()

    @staticmethod
    def _transport(request: LLMRequest) -> str:  # pragma: no cover - overridden
        raise NotImplementedError

    @staticmethod
    def _build_messages(system: str | None, prompt: str) -> list[dict[str, str]]:
        messages: list[dict[str, str]] = []
        if system:
            messages.append({"role": "system", "content": system})
        messages.append({"role": "user", "content": prompt})
        return messages

    @staticmethod
    def _compose_prompt(system: str | None, prompt: str) -> str:
        if system:
            return f"{system.strip()}\n\n{prompt}"
        return prompt


__all__ = ["BackendError", "LLMRequest", "TextRunner"]
