"""Prompt and script templates."""

from .builder import AnalysisPromptBuilder, PromptRequest

__all__ = ["AnalysisPromptBuilder", "PromptRequest"]
