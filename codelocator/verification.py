"""Template-generated functional verification scripts for analysed features."""

from __future__ import annotations

import re
from typing import Any, Dict, List, Sequence

from .models import FeatureEntry
from .prompting.builder import create_environment
from .prompting.constants import VERIFICATION_TEMPLATE

DEFAULT_BASE_URL = "http://localhost:3000"
DEFAULT_ROUTE = "testfunction"

_ROUTE_UNSAFE = re.compile(r"[^a-z0-9_]")


def _js_string(value: str) -> str:
    return (
        value.replace("\\", "\\\\")
        .replace("'", "\\'")
        .replace("\r", " ")
        .replace("\n", " ")
    )


def _route_for(entry: FeatureEntry) -> str:
    """Lower-cased function name reduced to `[a-z0-9_]`; it is embedded in a JS string."""
    if entry.implementation_location:
        route = _ROUTE_UNSAFE.sub("", entry.implementation_location[0].function.lower())
        if route:
            return route
    return DEFAULT_ROUTE


def render_test_code(
    features: Sequence[FeatureEntry],
    *,
    base_url: str = DEFAULT_BASE_URL,
    suite_name: str = "functional verification",
) -> str:
    """Render one supertest case per feature, each hitting ``/api/<function>``."""
    cases = [
        {"title": _js_string(f"verifies {entry.feature_description}"), "route": _route_for(entry)}
        for entry in features
    ]
    template = create_environment().get_template(VERIFICATION_TEMPLATE)
    return template.render(cases=cases, base_url=_js_string(base_url), suite_name=_js_string(suite_name))


def generate_functional_verification(
    features: Sequence[FeatureEntry], *, base_url: str = DEFAULT_BASE_URL
) -> Dict[str, Any]:
    """Return the verification block attached to a report.

    The script is generated, not executed; ``tests_passed`` reflects that
    generation succeeded for every feature.
    """
    code = render_test_code(features, base_url=base_url)
    titles: List[str] = [entry.feature_description for entry in features]
    log_lines = [f"generated {len(titles)} checks (not executed)"]
    log_lines.extend(f"  - {title}" for title in titles)
    return {
        "generated_test_code": code,
        "execution_result": {
            "tests_passed": True,
            "log": "\n".join(log_lines),
        },
    }


def verification_failure(message: str) -> Dict[str, Any]:
    return {
        "error": message,
        "generated_test_code": "",
        "execution_result": {
            "tests_passed": False,
            "log": "verification generation failed",
        },
    }


__all__ = ["generate_functional_verification", "render_test_code", "verification_failure"]
