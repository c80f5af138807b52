"""Turning raw model output into the canonical feature report."""

from __future__ import annotations

import json
from typing import Any, Dict, List

from ..models import FeatureEntry, FeatureReport, Location
from .runner import BackendError

# Upper bound on brace positions tried when the response wraps JSON in prose.
MAX_RECOVERY_ATTEMPTS = 32

_DECODER = json.JSONDecoder()


def extract_json_object(text: str) -> Dict[str, Any] | None:
    """Return the first JSON object embedded in ``text``, or ``None``."""
    start = text.find("{")
    attempts = 0
    while start != -1 and attempts < MAX_RECOVERY_ATTEMPTS:
        attempts += 1
        try:
            value, _ = _DECODER.raw_decode(text, start)
        except json.JSONDecodeError:
            start = text.find("{", start + 1)
            continue
        if isinstance(value, dict):
            return value
        start = text.find("{", start + 1)
    return None


def parse_json_response(text: str) -> Dict[str, Any]:
    """Parse a completion as a JSON object.

    A strict parse is tried first. When that fails, the first embedded
    object is recovered so answers like ``Here you go: {...}`` still count.
    """
    try:
        payload = json.loads(text)
    except json.JSONDecodeError:
        payload = extract_json_object(text)
        if payload is None:
            raise BackendError("Response does not contain a JSON object") from None

    if not isinstance(payload, dict):
        raise BackendError("Response JSON is not an object")
    return payload


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, (list, tuple)) and len(value) == 2:
        return f"{value[0]}-{value[1]}"
    return str(value).strip()


def _normalize_locations(raw: Any) -> List[Location]:
    if isinstance(raw, dict):
        raw = [raw]
    if not isinstance(raw, list):
        return []
    locations: List[Location] = []
    for item in raw:
        if not isinstance(item, dict):
            continue
        file_path = _as_text(item.get("file"))
        if not file_path:
            continue
        locations.append(
            Location(
                file=file_path,
                function=_as_text(item.get("function")),
                lines=_as_text(item.get("lines")),
            )
        )
    return locations


def normalize_report(payload: Dict[str, Any]) -> FeatureReport:
    """Coerce a parsed model payload into a :class:`FeatureReport`.

    Entries without a description and locations without a file are
    dropped; a payload without a ``feature_analysis`` list is rejected.
    """
    features = payload.get("feature_analysis")
    if not isinstance(features, list):
        raise BackendError("Response is missing the feature_analysis list")

    entries: List[FeatureEntry] = []
    for item in features:
        if not isinstance(item, dict):
            continue
        description = _as_text(item.get("feature_description"))
        if not description:
            continue
        entries.append(
            FeatureEntry(
                feature_description=description,
                implementation_location=_normalize_locations(item.get("implementation_location")),
            )
        )

    plan = payload.get("execution_plan_suggestion")
    return FeatureReport(
        feature_analysis=entries,
        execution_plan_suggestion=plan.strip() if isinstance(plan, str) else "",
    )


__all__ = ["extract_json_object", "normalize_report", "parse_json_response"]
