from __future__ import annotations

import zipfile
from pathlib import Path

import pytest

from codelocator.archive import (
    ArchiveError,
    allocate_scratch_dir,
    expanded_archive,
    extract_archive,
    release_scratch_dir,
)
from tests._fixtures.project_builder import ProjectBuilder


def _scratch_entries(root: Path) -> list[Path]:
    return list(root.iterdir()) if root.exists() else []


def test_expanded_archive_yields_tree_and_cleans_up(
    project_builder: ProjectBuilder, tmp_path: Path
) -> None:
    project_builder.write({"src/app.py": "print('hi')\n"})
    archive = project_builder.zip()
    scratch = tmp_path / "scratch"

    with expanded_archive(archive, scratch) as workdir:
        assert (workdir / "src" / "app.py").read_text(encoding="utf-8") == "print('hi')\n"
        assert workdir.parent == scratch

    assert _scratch_entries(scratch) == []


def test_expanded_archive_cleans_up_when_body_raises(
    project_builder: ProjectBuilder, tmp_path: Path
) -> None:
    project_builder.write({"a.py": "x = 1\n"})
    archive = project_builder.zip()
    scratch = tmp_path / "scratch"

    with pytest.raises(KeyError):
        with expanded_archive(archive, scratch):
            raise KeyError("boom")

    assert _scratch_entries(scratch) == []


def test_corrupt_archive_raises_and_cleans_up(tmp_path: Path) -> None:
    archive = tmp_path / "broken.zip"
    archive.write_bytes(b"this is not a zip file")
    scratch = tmp_path / "scratch"

    with pytest.raises(ArchiveError):
        with expanded_archive(archive, scratch):
            pytest.fail("body must not run for a corrupt archive")

    assert _scratch_entries(scratch) == []


def test_truncated_archive_raises(project_builder: ProjectBuilder, tmp_path: Path) -> None:
    project_builder.write({"main.py": "print('hello')\n" * 200})
    archive = project_builder.zip()
    data = archive.read_bytes()
    archive.write_bytes(data[: len(data) // 2])

    with pytest.raises(ArchiveError):
        extract_archive(archive, allocate_scratch_dir(tmp_path / "scratch"))


def test_empty_archive_raises(tmp_path: Path) -> None:
    archive = tmp_path / "empty.zip"
    with zipfile.ZipFile(archive, "w"):
        pass

    with pytest.raises(ArchiveError, match="empty"):
        extract_archive(archive, allocate_scratch_dir(tmp_path / "scratch"))


@pytest.mark.parametrize("member", ["../escape.py", "/etc/passwd", "C:/windows/evil.py"])
def test_unsafe_member_paths_are_rejected(tmp_path: Path, member: str) -> None:
    archive = tmp_path / "unsafe.zip"
    with zipfile.ZipFile(archive, "w") as handle:
        handle.writestr(member, "payload")
    destination = allocate_scratch_dir(tmp_path / "scratch")

    with pytest.raises(ArchiveError):
        extract_archive(archive, destination)

    assert list(destination.iterdir()) == []
    assert not (tmp_path / "escape.py").exists()


def test_symlink_members_are_skipped(tmp_path: Path) -> None:
    archive = tmp_path / "links.zip"
    with zipfile.ZipFile(archive, "w") as handle:
        handle.writestr("real.py", "x = 1\n")
        link = zipfile.ZipInfo("link.py")
        link.external_attr = (0o120777 << 16)
        handle.writestr(link, "/etc/passwd")
    destination = allocate_scratch_dir(tmp_path / "scratch")

    extract_archive(archive, destination)

    assert sorted(path.name for path in destination.iterdir()) == ["real.py"]


def test_scratch_dirs_are_unique(tmp_path: Path) -> None:
    first = allocate_scratch_dir(tmp_path)
    second = allocate_scratch_dir(tmp_path)

    assert first != second
    assert first.is_dir() and second.is_dir()


def test_release_tolerates_missing_directory(tmp_path: Path) -> None:
    target = allocate_scratch_dir(tmp_path)
    release_scratch_dir(target)
    release_scratch_dir(target)

    assert not target.exists()


def test_archive_with_only_directories_raises(tmp_path: Path) -> None:
    archive = tmp_path / "dirs.zip"
    with zipfile.ZipFile(archive, "w") as handle:
        handle.writestr("src/", "")
        handle.writestr("src/lib/", "")

    with pytest.raises(ArchiveError, match="no files"):
        extract_archive(archive, allocate_scratch_dir(tmp_path / "scratch"))


def test_archive_with_only_symlinks_raises(tmp_path: Path) -> None:
    archive = tmp_path / "links-only.zip"
    with zipfile.ZipFile(archive, "w") as handle:
        link = zipfile.ZipInfo("link.py")
        link.external_attr = (0o120777 << 16)
        handle.writestr(link, "/etc/passwd")

    with pytest.raises(ArchiveError, match="no files"):
        extract_archive(archive, allocate_scratch_dir(tmp_path / "scratch"))
