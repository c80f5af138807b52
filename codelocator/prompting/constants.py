"""Shared constants for analysis prompting."""

from __future__ import annotations

SYSTEM_PROMPT = (
    "You are an expert code analyst. You identify where each requested feature is "
    "implemented in a codebase. Answer with a single JSON object that follows the "
    "requested schema exactly and contains no commentary."
)

ANALYSIS_TEMPLATE = "analysis.j2"
VERIFICATION_TEMPLATE = "verification.js.j2"

RESPONSE_SCHEMA_EXAMPLE = """{
  "feature_analysis": [
    {
      "feature_description": "what the feature does",
      "implementation_location": [
        {
          "file": "relative/path/to/file",
          "function": "functionOrSymbolName",
          "lines": "start-end"
        }
      ]
    }
  ],
  "execution_plan_suggestion": "how to install, run and exercise the project"
}"""


__all__ = [
    "ANALYSIS_TEMPLATE",
    "RESPONSE_SCHEMA_EXAMPLE",
    "SYSTEM_PROMPT",
    "VERIFICATION_TEMPLATE",
]
