"""Request validation performed before any pipeline stage runs."""

from __future__ import annotations

from typing import List, Optional

MIN_DESCRIPTION_CHARS = 10


class ValidationError(ValueError):
    """Raised when an analysis request is missing or has malformed inputs."""

    def __init__(self, errors: List[str]) -> None:
        self.errors = list(errors)
        super().__init__("; ".join(self.errors) or "invalid request")


def validate_analysis_request(
    problem_description: Optional[object],
    *,
    has_archive: bool,
    upload_size: Optional[int] = None,
    max_upload_bytes: Optional[int] = None,
) -> str:
    """Check the inputs and return the cleaned description.

    Every problem is collected before raising so callers can report them
    together.
    """
    errors: List[str] = []
    description = ""
    if problem_description is None or problem_description == "":
        errors.append("problem_description is required")
    elif not isinstance(problem_description, str):
        errors.append("problem_description must be a string")
    else:
        description = problem_description.strip()
        non_whitespace = "".join(description.split())
        if len(non_whitespace) < MIN_DESCRIPTION_CHARS:
            errors.append(
                f"problem_description must contain at least {MIN_DESCRIPTION_CHARS} non-whitespace characters"
            )

    if not has_archive:
        errors.append("code_zip archive is required")
    elif upload_size is not None and max_upload_bytes is not None and upload_size > max_upload_bytes:
        limit_mb = max_upload_bytes // (1024 * 1024)
        errors.append(f"code_zip exceeds the {limit_mb}MB upload limit")

    if errors:
        raise ValidationError(errors)
    return description


__all__ = ["MIN_DESCRIPTION_CHARS", "ValidationError", "validate_analysis_request"]
