from __future__ import annotations

from pathlib import Path

from codelocator.prompting import AnalysisPromptBuilder
from codelocator.prompting.constants import RESPONSE_SCHEMA_EXAMPLE, SYSTEM_PROMPT


def test_prompt_embeds_inputs_and_schema() -> None:
    request = AnalysisPromptBuilder().build(
        "  Locate the login flow  ",
        "Total files: 3\n",
        "=== Key Source Files ===\n\nFile: src/auth.js\n",
    )

    assert request.system == SYSTEM_PROMPT
    assert "Problem description:\nLocate the login flow\n" in request.prompt
    assert "Total files: 3" in request.prompt
    assert "File: src/auth.js" in request.prompt
    assert RESPONSE_SCHEMA_EXAMPLE in request.prompt


def test_prompt_does_not_escape_source_text() -> None:
    request = AnalysisPromptBuilder().build("find <div> rendering", "", "if (a && b) {}")

    assert "<div>" in request.prompt
    assert "a && b" in request.prompt


def test_custom_templates_directory_overrides_default(tmp_path: Path) -> None:
    (tmp_path / "analysis.j2").write_text("Q={{ problem_description }}|{{ schema | length > 0 }}", encoding="utf-8")

    request = AnalysisPromptBuilder(tmp_path, system_prompt="custom").build("question", "", "")

    assert request.prompt == "Q=question|True"
    assert request.system == "custom"
