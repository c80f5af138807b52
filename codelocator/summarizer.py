"""Derived summaries and prompt-ready transcripts of a structure snapshot."""

from __future__ import annotations

from typing import List

from .models import ExtensionCount, FileRecord, RankedFile, StructureSnapshot, StructureSummary

SUMMARY_TOP_EXTENSIONS = 5
SUMMARY_TOP_FILES = 10
TRANSCRIPT_TOP_EXTENSIONS = 10
TRANSCRIPT_TOP_FILES = 20


def rank_extensions(snapshot: StructureSnapshot, limit: int) -> List[ExtensionCount]:
    """Most frequent extensions first; ties keep first-seen order."""
    ranked = sorted(snapshot.file_types.items(), key=lambda item: -item[1])
    return [ExtensionCount(extension=ext, count=count) for ext, count in ranked[:limit]]


def rank_files(files: List[FileRecord], limit: int) -> List[FileRecord]:
    """Longest files first; ties keep traversal order."""
    return sorted(files, key=lambda record: -record.lines)[:limit]


def summarize(snapshot: StructureSnapshot) -> StructureSummary:
    return StructureSummary(
        total_files=snapshot.total_files,
        total_lines=snapshot.total_lines,
        top_extensions=rank_extensions(snapshot, SUMMARY_TOP_EXTENSIONS),
        top_files=[
            RankedFile(path=record.path, lines=record.lines, size=record.size)
            for record in rank_files(snapshot.files, SUMMARY_TOP_FILES)
        ],
        has_package_files=bool(snapshot.package_files),
        has_config_files=bool(snapshot.config_files),
    )


def render_transcript(snapshot: StructureSnapshot) -> str:
    """Render the snapshot as bounded plain text for inclusion in a prompt.

    Only counts, paths and sizes are included; file contents travel in the
    key-content block instead.
    """
    lines = [
        f"Project root: {snapshot.root_path}",
        f"Total files: {snapshot.total_files}",
        f"Total lines: {snapshot.total_lines}",
        "",
        "File types:",
    ]
    for item in rank_extensions(snapshot, TRANSCRIPT_TOP_EXTENSIONS):
        label = item.extension or "(no extension)"
        lines.append(f"  {label}: {item.count} files")

    lines.append("")
    lines.append("Key source files:")
    for record in rank_files(snapshot.files, TRANSCRIPT_TOP_FILES):
        lines.append(f"  {record.path} ({record.lines} lines, {record.size} bytes)")

    if snapshot.package_files:
        lines.append("")
        lines.append("Manifest files:")
        lines.extend(f"  {path}" for path in snapshot.package_files)

    if snapshot.config_files:
        lines.append("")
        lines.append("Config files:")
        lines.extend(f"  {path}" for path in snapshot.config_files)

    return "\n".join(lines) + "\n"


__all__ = ["rank_extensions", "rank_files", "render_transcript", "summarize"]
