from __future__ import annotations

from codelocator.models import FileRecord, StructureSnapshot
from codelocator.summarizer import rank_extensions, rank_files, render_transcript, summarize


def _record(path: str, lines: int, size: int = 100) -> FileRecord:
    name = path.rsplit("/", 1)[-1]
    extension = "." + name.rsplit(".", 1)[-1] if "." in name else ""
    return FileRecord(path=path, name=name, extension=extension, size=size, lines=lines, content="")


def _snapshot() -> StructureSnapshot:
    files = [_record("a.js", 5), _record("b.js", 40), _record("c.py", 40), _record("d.py", 12)]
    return StructureSnapshot(
        root_path="/tmp/project",
        files=files,
        package_files=["package.json"],
        config_files=[],
        total_files=len(files),
        total_lines=sum(record.lines for record in files),
        file_types={".js": 2, ".py": 2, "": 1, ".md": 3},
    )


def test_rank_extensions_breaks_ties_by_first_seen() -> None:
    ranked = rank_extensions(_snapshot(), 3)

    assert [(item.extension, item.count) for item in ranked] == [(".md", 3), (".js", 2), (".py", 2)]


def test_rank_files_orders_by_lines_then_traversal() -> None:
    ranked = rank_files(_snapshot().files, 3)

    assert [record.path for record in ranked] == ["b.js", "c.py", "d.py"]


def test_summarize_reports_totals_and_flags() -> None:
    summary = summarize(_snapshot()).to_dict()

    assert summary["total_files"] == 4
    assert summary["total_lines"] == 97
    assert summary["has_package_files"] is True
    assert summary["has_config_files"] is False
    assert summary["top_files"][0] == {"path": "b.js", "lines": 40, "size": 100}
    assert len(summary["top_extensions"]) == 4


def test_render_transcript_layout() -> None:
    transcript = render_transcript(_snapshot())

    assert transcript.startswith("Project root: /tmp/project\nTotal files: 4\nTotal lines: 97\n")
    assert "  (no extension): 1 files" in transcript
    assert "  b.js (40 lines, 100 bytes)" in transcript
    assert "Manifest files:\n  package.json\n" in transcript
    assert "Config files:" not in transcript
    assert transcript.endswith("\n")


def test_render_transcript_is_deterministic() -> None:
    assert render_transcript(_snapshot()) == render_transcript(_snapshot())


def test_render_transcript_for_empty_snapshot() -> None:
    transcript = render_transcript(StructureSnapshot(root_path="/tmp/empty"))

    assert "Total files: 0" in transcript
    assert "Key source files:" in transcript
    assert "Manifest files:" not in transcript
