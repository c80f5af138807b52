"""Adapter for Anthropic's Messages API."""

from __future__ import annotations

from .runner import LLMRequest, TextRunner


class ClaudeRunner(TextRunner):
    provider = "claude"

    @staticmethod
    def _transport(request: LLMRequest) -> str:
        import anthropic

        client = anthropic.Anthropic(
            api_key=request.api_key,
            timeout=request.request_timeout,
            max_retries=0,
        )
        kwargs: dict[str, object] = {
            "model": request.model,
            "max_tokens": request.max_tokens or 4000,
            "messages": [{"role": "user", "content": request.prompt}],
        }
        if request.system:
            kwargs["system"] = request.system
        if request.temperature is not None:
            kwargs["temperature"] = request.temperature

        response = client.messages.create(**kwargs)
        parts = [
            getattr(block, "text", "")
            for block in response.content or []
            if getattr(block, "type", None) == "text"
        ]
        return "\n".join(part for part in parts if part)


__all__ = ["ClaudeRunner"]
