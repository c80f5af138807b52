"""Adapter for the OpenAI chat completions API."""

from __future__ import annotations

from .runner import LLMRequest, TextRunner


class OpenAIRunner(TextRunner):
    """Requests a JSON-object completion from an OpenAI chat model."""

    provider = "openai"

    @staticmethod
    def _transport(request: LLMRequest) -> str:
        from openai import OpenAI

        client = OpenAI(
            api_key=request.api_key,
            base_url=request.base_url,
            timeout=request.request_timeout,
            max_retries=0,
        )
        kwargs: dict[str, object] = {
            "model": request.model,
            "messages": TextRunner._build_messages(request.system, request.prompt),
            "response_format": {"type": "json_object"},
        }
        if request.max_tokens is not None:
            kwargs["max_tokens"] = request.max_tokens
        if request.temperature is not None:
            kwargs["temperature"] = request.temperature

        response = client.chat.completions.create(**kwargs)
        if not response.choices:
            return ""
        return response.choices[0].message.content or ""


__all__ = ["OpenAIRunner"]
