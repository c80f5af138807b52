"""Provider selection, invocation and fallback for feature analysis."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from dataclasses import dataclass
from typing import Dict, Optional, Type

from ..config import MOCK_PROVIDER, ConfigError, LLMConfig
from ..logging import get_logger
from ..models import FeatureReport
from ..prompting.builder import AnalysisPromptBuilder
from .claude import ClaudeRunner
from .gemini import GeminiRunner
from .heuristic import HeuristicAnalyzer
from .ollama import OllamaRunner
from .openai_chat import OpenAIRunner
from .parsing import normalize_report, parse_json_response
from .runner import BackendError, TextRunner

RUNNER_TYPES: Dict[str, Type[TextRunner]] = {
    "openai": OpenAIRunner,
    "gemini": GeminiRunner,
    "claude": ClaudeRunner,
    "ollama": OllamaRunner,
}

HEURISTIC_MODEL = "intelligent-analysis"


def build_runner(config: LLMConfig) -> TextRunner | None:
    """Instantiate the runner for ``config.provider``; ``None`` selects the heuristic."""
    if config.provider == MOCK_PROVIDER:
        return None
    runner_type = RUNNER_TYPES.get(config.provider)
    if runner_type is None:
        raise ConfigError(f"Unknown provider '{config.provider}'")
    credentials = config.credentials_for(config.provider)
    return runner_type(
        config.model_for(config.provider),
        api_key=credentials.api_key,
        base_url=credentials.base_url,
        temperature=config.temperature,
        max_tokens=config.max_tokens,
        request_timeout=config.request_timeout,
    )


@dataclass
class AnalysisOutcome:
    """The report plus which engine produced it."""

    report: FeatureReport
    provider: str
    model: str
    fallback_used: bool = False
    error: Optional[str] = None


class ProviderDispatcher:
    """Runs the configured backend and degrades to the heuristic on any failure.

    The backend is chosen once, at construction, from ``config.provider``.
    :meth:`analyze` never raises: network errors, missing credentials,
    timeouts and unparseable output all produce the heuristic report.
    """

    def __init__(
        self,
        config: LLMConfig | None = None,
        *,
        runner: TextRunner | None = None,
        heuristic: HeuristicAnalyzer | None = None,
        prompt_builder: AnalysisPromptBuilder | None = None,
    ) -> None:
        self.config = config or LLMConfig()
        self.provider = self.config.provider
        self.heuristic = heuristic or HeuristicAnalyzer()
        self.prompt_builder = prompt_builder or AnalysisPromptBuilder()
        self.runner = runner if runner is not None else build_runner(self.config)
        self.logger = get_logger("dispatcher")

    def analyze(self, problem_description: str, transcript: str, key_content: str) -> AnalysisOutcome:
        if self.runner is None:
            self.logger.info("No analysis backend selected; using heuristic analysis")
            return self._heuristic_outcome(problem_description, transcript)

        try:
            report = self._analyze_with_backend(problem_description, transcript, key_content)
        except Exception as exc:
            self.logger.warning(
                "%s analysis failed (%s); falling back to heuristic analysis", self.provider, exc
            )
            return self._heuristic_outcome(
                problem_description, transcript, fallback_used=True, error=str(exc)
            )

        return AnalysisOutcome(report=report, provider=self.provider, model=self.runner.model)

    def _analyze_with_backend(
        self, problem_description: str, transcript: str, key_content: str
    ) -> FeatureReport:
        request = self.prompt_builder.build(problem_description, transcript, key_content)
        self.logger.debug(
            "Sending %d prompt characters to %s (%s)", len(request.prompt), self.provider, self.runner.model
        )
        text = self._run_with_timeout(request.prompt, request.system)
        return normalize_report(parse_json_response(text))

    def _run_with_timeout(self, prompt: str, system: str) -> str:
        timeout = self.config.request_timeout
        executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix=f"codelocator-{self.provider}")
        try:
            future = executor.submit(self.runner.run, prompt, system=system)
            try:
                return future.result(timeout=timeout)
            except FutureTimeoutError as exc:
                future.cancel()
                raise BackendError(f"{self.provider} did not answer within {timeout:g}s") from exc
        finally:
            # A hung call keeps its worker thread; the pipeline does not wait for it.
            executor.shutdown(wait=False, cancel_futures=True)

    def _heuristic_outcome(
        self,
        problem_description: str,
        transcript: str,
        *,
        fallback_used: bool = False,
        error: str | None = None,
    ) -> AnalysisOutcome:
        return AnalysisOutcome(
            report=self.heuristic.analyze(problem_description, transcript),
            provider=MOCK_PROVIDER,
            model=HEURISTIC_MODEL,
            fallback_used=fallback_used,
            error=error,
        )


__all__ = ["AnalysisOutcome", "ProviderDispatcher", "RUNNER_TYPES", "build_runner"]
