"""Builds analysis prompts from packaged Jinja2 templates."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from jinja2 import Environment, FileSystemLoader, StrictUndefined

from .constants import ANALYSIS_TEMPLATE, RESPONSE_SCHEMA_EXAMPLE, SYSTEM_PROMPT

TEMPLATES_DIR = Path(__file__).with_name("templates")


@dataclass(frozen=True)
class PromptRequest:
    """A system message plus the user prompt for one analysis call."""

    system: str
    prompt: str


def create_environment(templates_dir: Path | None = None) -> Environment:
    directories = []
    if templates_dir is not None:
        directories.append(str(templates_dir))
    if str(TEMPLATES_DIR) not in directories:
        directories.append(str(TEMPLATES_DIR))
    return Environment(
        loader=FileSystemLoader(directories),
        autoescape=False,
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
        undefined=StrictUndefined,
    )


class AnalysisPromptBuilder:
    """Embeds the problem, transcript and key content next to the JSON schema."""

    def __init__(self, templates_dir: Path | None = None, *, system_prompt: str = SYSTEM_PROMPT) -> None:
        self._env = create_environment(templates_dir)
        self.system_prompt = system_prompt

    def build(self, problem_description: str, transcript: str, key_content: str) -> PromptRequest:
        template = self._env.get_template(ANALYSIS_TEMPLATE)
        prompt = template.render(
            problem_description=problem_description.strip(),
            transcript=transcript.rstrip(),
            key_content=key_content.rstrip(),
            schema=RESPONSE_SCHEMA_EXAMPLE,
        )
        return PromptRequest(system=self.system_prompt, prompt=prompt)


__all__ = ["AnalysisPromptBuilder", "PromptRequest", "create_environment"]
