"""Analysis backends, response parsing and the heuristic fallback."""

from .claude import ClaudeRunner
from .dispatcher import AnalysisOutcome, ProviderDispatcher, build_runner
from .gemini import GeminiRunner
from .heuristic import HeuristicAnalyzer
from .ollama import OllamaRunner
from .openai_chat import OpenAIRunner
from .runner import BackendError, LLMRequest, TextRunner

__all__ = [
    "AnalysisOutcome",
    "BackendError",
    "ClaudeRunner",
    "GeminiRunner",
    "HeuristicAnalyzer",
    "LLMRequest",
    "OllamaRunner",
    "OpenAIRunner",
    "ProviderDispatcher",
    "TextRunner",
    "build_runner",
]
