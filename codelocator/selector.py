"""Selection of the file contents that accompany the structure transcript."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List

from .models import FileRecord, StructureSnapshot
from .summarizer import rank_files

MAX_KEY_FILES = 15
MIN_KEY_FILE_LINES = 10

MANIFEST_HEADER = "=== Manifest Files ==="
CODE_HEADER = "=== Key Source Files ==="
SEPARATOR = "---"


@dataclass
class KeyFileSelection:
    manifests: List[FileRecord]
    code_files: List[FileRecord]


def select_key_files(
    snapshot: StructureSnapshot,
    *,
    limit: int = MAX_KEY_FILES,
    min_lines: int = MIN_KEY_FILE_LINES,
) -> KeyFileSelection:
    """Pick every captured manifest plus the longest code files above ``min_lines``.

    The thresholds only bound prompt size; they say nothing about relevance.
    """
    manifests = []
    for path in snapshot.package_files:
        record = snapshot.find(path)
        if record is not None:
            manifests.append(record)

    eligible = [record for record in snapshot.files if record.lines > min_lines]
    return KeyFileSelection(manifests=manifests, code_files=rank_files(eligible, limit))


def render_key_content(selection: KeyFileSelection) -> str:
    parts: List[str] = []
    if selection.manifests:
        parts.append(MANIFEST_HEADER)
        for record in selection.manifests:
            parts.append("")
            parts.append(f"File: {record.path}")
            parts.append(record.content)
            parts.append(SEPARATOR)
        parts.append("")

    parts.append(CODE_HEADER)
    for record in selection.code_files:
        parts.append("")
        parts.append(f"File: {record.path}")
        parts.append(f"Lines: {record.lines}")
        parts.append("Content:")
        parts.append(record.content)
        parts.append(SEPARATOR)

    return "\n".join(parts) + "\n"


def build_key_content(snapshot: StructureSnapshot) -> str:
    return render_key_content(select_key_files(snapshot))


__all__ = [
    "CODE_HEADER",
    "KeyFileSelection",
    "MANIFEST_HEADER",
    "build_key_content",
    "render_key_content",
    "select_key_files",
]
