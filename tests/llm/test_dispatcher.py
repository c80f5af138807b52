from __future__ import annotations

import json
import threading

from codelocator.config import LLMConfig, ProviderCredentials
from codelocator.llm.claude import ClaudeRunner
from codelocator.llm.dispatcher import HEURISTIC_MODEL, ProviderDispatcher, build_runner
from codelocator.llm.gemini import GeminiRunner
from codelocator.llm.heuristic import HeuristicAnalyzer
from codelocator.llm.ollama import OllamaRunner
from codelocator.llm.openai_chat import OpenAIRunner

PROBLEM = "实现用户登录和商品列表功能"
TRANSCRIPT = "Key source files:\n  src/main.js (24 lines, 600 bytes)\nManifest files:\n  package.json\n"
KEY_CONTENT = "=== Key Source Files ===\n"


def _openai_config(**overrides) -> LLMConfig:
    return LLMConfig(provider="openai", openai=ProviderCredentials(api_key="sk-test"), **overrides)


def test_mock_provider_uses_heuristic() -> None:
    outcome = ProviderDispatcher(LLMConfig()).analyze(PROBLEM, TRANSCRIPT, KEY_CONTENT)

    assert outcome.provider == "mock"
    assert outcome.model == HEURISTIC_MODEL
    assert outcome.fallback_used is False
    assert outcome.report == HeuristicAnalyzer().analyze(PROBLEM, TRANSCRIPT)


def test_backend_success_returns_normalized_report() -> None:
    prompts = []
    payload = {
        "feature_analysis": [
            {
                "feature_description": "User login",
                "implementation_location": [
                    {"file": "src/main.js", "function": "userLogin", "lines": "2-23"}
                ],
            }
        ],
        "execution_plan_suggestion": "npm install && npm start",
    }

    def fake_runner(request):
        prompts.append(request)
        return "Here it is: " + json.dumps(payload)

    config = _openai_config()
    runner = OpenAIRunner("gpt-test", api_key="sk-test", runner=fake_runner)
    outcome = ProviderDispatcher(config, runner=runner).analyze(PROBLEM, TRANSCRIPT, KEY_CONTENT)

    assert outcome.provider == "openai"
    assert outcome.model == "gpt-test"
    assert outcome.fallback_used is False
    assert outcome.report.to_dict() == payload
    assert PROBLEM in prompts[0].prompt
    assert "src/main.js (24 lines" in prompts[0].prompt
    assert prompts[0].system


def test_backend_failure_falls_back_to_heuristic() -> None:
    def failing(request):
        raise ConnectionError("network down")

    runner = OpenAIRunner("gpt-test", api_key="sk-test", runner=failing)
    outcome = ProviderDispatcher(_openai_config(), runner=runner).analyze(
        PROBLEM, TRANSCRIPT, KEY_CONTENT
    )

    assert outcome.fallback_used is True
    assert outcome.provider == "mock"
    assert "network down" in (outcome.error or "")
    assert outcome.report == HeuristicAnalyzer().analyze(PROBLEM, TRANSCRIPT)


def test_unparseable_output_falls_back() -> None:
    runner = OpenAIRunner("gpt-test", api_key="sk-test", runner=lambda request: "I cannot help.")
    outcome = ProviderDispatcher(_openai_config(), runner=runner).analyze(
        PROBLEM, TRANSCRIPT, KEY_CONTENT
    )

    assert outcome.fallback_used is True
    assert outcome.report == HeuristicAnalyzer().analyze(PROBLEM, TRANSCRIPT)


def test_missing_credentials_fall_back_without_network() -> None:
    outcome = ProviderDispatcher(LLMConfig(provider="claude")).analyze(
        PROBLEM, TRANSCRIPT, KEY_CONTENT
    )

    assert outcome.fallback_used is True
    assert "No API key" in (outcome.error or "")


def test_slow_backend_times_out() -> None:
    release = threading.Event()

    def slow(request):
        release.wait(5)
        return '{"feature_analysis": []}'

    config = LLMConfig(provider="ollama", request_timeout=0.05)
    runner = OllamaRunner("llama3.1:8b", runner=slow)
    try:
        outcome = ProviderDispatcher(config, runner=runner).analyze(PROBLEM, TRANSCRIPT, KEY_CONTENT)
    finally:
        release.set()

    assert outcome.fallback_used is True
    assert "did not answer" in (outcome.error or "")


def test_build_runner_selects_by_provider_only() -> None:
    config = LLMConfig(
        openai=ProviderCredentials(api_key="sk-a"),
        claude=ProviderCredentials(api_key="sk-b"),
    )
    assert build_runner(config) is None

    expectations = {
        "openai": OpenAIRunner,
        "gemini": GeminiRunner,
        "claude": ClaudeRunner,
        "ollama": OllamaRunner,
    }
    for provider, runner_type in expectations.items():
        config.provider = provider
        assert isinstance(build_runner(config), runner_type)


def test_build_runner_uses_configured_model_and_limits() -> None:
    config = LLMConfig(
        provider="ollama",
        max_tokens=512,
        temperature=0.3,
        ollama=ProviderCredentials(model="qwen2.5:7b", base_url="http://gpu:11434"),
    )

    runner = build_runner(config)

    assert runner is not None
    assert runner.model == "qwen2.5:7b"
    assert runner.base_url == "http://gpu:11434"
    assert runner.max_tokens == 512
    assert runner.temperature == 0.3
