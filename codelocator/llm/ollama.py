"""Adapter for a local or remote Ollama server."""

from __future__ import annotations

import json
from urllib.error import HTTPError, URLError
from urllib.request import Request, urlopen

from .runner import BackendError, LLMRequest, TextRunner

DEFAULT_BASE_URL = "http://localhost:11434"


class OllamaRunner(TextRunner):
    """Calls ``POST {base_url}/api/generate`` with streaming disabled."""

    provider = "ollama"
    requires_api_key = False

    @staticmethod
    def _transport(request: LLMRequest) -> str:
        base_url = request.base_url or DEFAULT_BASE_URL
        endpoint = f"{base_url}/api/generate"
        payload: dict[str, object] = {
            "model": request.model,
            "prompt": request.prompt,
            "stream": False,
        }
        if request.system:
            payload["system"] = request.system
        options: dict[str, object] = {}
        if request.temperature is not None:
            options["temperature"] = request.temperature
        if request.max_tokens is not None:
            options["num_predict"] = request.max_tokens
        if options:
            payload["options"] = options

        data = json.dumps(payload).encode("utf-8")
        headers = {"Content-Type": "application/json"}
        http_request = Request(endpoint, data=data, headers=headers, method="POST")
        timeout = request.request_timeout or 60.0

        try:
            with urlopen(http_request, timeout=timeout) as response:  # type: ignore[arg-type]
                raw = response.read()
        except HTTPError as exc:
            detail = exc.read().decode("utf-8", errors="ignore") if hasattr(exc, "read") else ""
            message = detail.strip() or exc.reason
            raise BackendError(f"Ollama request failed with status {exc.code}: {message}") from exc
        except URLError as exc:
            raise BackendError(f"Ollama request failed: {exc.reason}") from exc

        try:
            response_payload = json.loads(raw.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise BackendError("Ollama returned invalid JSON") from exc

        content = response_payload.get("response") if isinstance(response_payload, dict) else None
        if not isinstance(content, str):
            raise BackendError("Ollama response has no 'response' text")
        return content


__all__ = ["OllamaRunner"]
