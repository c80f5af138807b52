"""Adapter for Google's Gemini models via google-generativeai."""

from __future__ import annotations

from .runner import LLMRequest, TextRunner


class GeminiRunner(TextRunner):
    """Gemini has no separate system role on older models, so it is prepended."""

    provider = "gemini"

    @staticmethod
    def _transport(request: LLMRequest) -> str:
        import google.generativeai as genai

        genai.configure(api_key=request.api_key)
        model = genai.GenerativeModel(request.model)

        generation_config: dict[str, object] = {}
        if request.temperature is not None:
            generation_config["temperature"] = request.temperature
        if request.max_tokens is not None:
            generation_config["max_output_tokens"] = request.max_tokens

        request_options = {"timeout": request.request_timeout} if request.request_timeout else None
        response = model.generate_content(
            TextRunner._compose_prompt(request.system, request.prompt),
            generation_config=generation_config or None,
            request_options=request_options,
        )
        return getattr(response, "text", "") or ""


__all__ = ["GeminiRunner"]
