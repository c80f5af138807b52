"""Expansion of uploaded project archives into isolated scratch directories."""

from __future__ import annotations

import shutil
import uuid
import zipfile
import zlib
from contextlib import contextmanager
from pathlib import Path, PurePosixPath
from typing import Iterator

from .logging import get_logger

MAX_ARCHIVE_ENTRIES = 10_000
MAX_UNCOMPRESSED_BYTES = 500 * 1024 * 1024

_logger = get_logger("archive")


class ArchiveError(RuntimeError):
    """Raised when an archive is corrupt, empty, unsafe or unreadable."""


def _is_symlink(info: zipfile.ZipInfo) -> bool:
    unix_mode = (info.external_attr >> 16) & 0xFFFF
    return (unix_mode & 0o170000) == 0o120000


def _safe_member_path(name: str) -> PurePosixPath:
    if "\x00" in name:
        raise ArchiveError(f"Archive entry contains a null byte: {name!r}")
    normalized = name.replace("\\", "/")
    if normalized.startswith("/") or (len(normalized) > 1 and normalized[1] == ":"):
        raise ArchiveError(f"Archive entry uses an absolute path: {name}")
    member = PurePosixPath(normalized)
    if any(part == ".." for part in member.parts):
        raise ArchiveError(f"Archive entry escapes the extraction root: {name}")
    return member


def _validate_members(archive: zipfile.ZipFile) -> list[zipfile.ZipInfo]:
    members = archive.infolist()
    if not members:
        raise ArchiveError("Archive is empty")
    if len(members) > MAX_ARCHIVE_ENTRIES:
        raise ArchiveError(
            f"Archive holds {len(members)} entries (limit {MAX_ARCHIVE_ENTRIES})"
        )
    total = sum(info.file_size for info in members)
    if total > MAX_UNCOMPRESSED_BYTES:
        raise ArchiveError(
            f"Archive expands to {total} bytes (limit {MAX_UNCOMPRESSED_BYTES})"
        )

    selected: list[zipfile.ZipInfo] = []
    for info in members:
        _safe_member_path(info.filename)
        if _is_symlink(info):
            _logger.warning("Skipping symlink entry %s", info.filename)
            continue
        selected.append(info)

    if all(info.is_dir() for info in selected):
        raise ArchiveError("Archive contains no files")
    return selected


def allocate_scratch_dir(scratch_root: Path, *, prefix: str = "extracted") -> Path:
    """Create a uniquely named, empty directory under ``scratch_root``."""
    scratch_root.mkdir(parents=True, exist_ok=True)
    target = scratch_root / f"{prefix}-{uuid.uuid4()}"
    target.mkdir()
    return target


def release_scratch_dir(path: Path) -> None:
    """Remove a scratch directory; a directory that is already gone is fine."""
    try:
        shutil.rmtree(path)
    except FileNotFoundError:
        return
    except OSError as exc:
        _logger.warning("Unable to remove scratch directory %s: %s", path, exc)


def extract_archive(archive_path: Path, destination: Path) -> Path:
    """Extract every safe member of ``archive_path`` into ``destination``."""
    try:
        with zipfile.ZipFile(archive_path) as archive:
            members = _validate_members(archive)
            corrupt = archive.testzip()
            if corrupt is not None:
                raise ArchiveError(f"Archive member is corrupt: {corrupt}")
            archive.extractall(destination, members=members)
    except ArchiveError:
        raise
    except zipfile.BadZipFile as exc:
        raise ArchiveError(f"Archive could not be decompressed: {exc}") from exc
    except (OSError, EOFError, RuntimeError, ValueError, zlib.error) as exc:
        raise ArchiveError(f"Archive could not be read: {exc}") from exc

    _logger.debug("Extracted %d entries into %s", len(members), destination)
    return destination


@contextmanager
def expanded_archive(archive_path: Path, scratch_root: Path) -> Iterator[Path]:
    """Expand ``archive_path`` into a fresh scratch directory for the ``with`` block.

    The directory is removed exactly once when the block exits, whether it
    exits normally, through an extraction failure or through any exception
    raised by the caller.
    """
    workdir = allocate_scratch_dir(scratch_root)
    try:
        extract_archive(archive_path, workdir)
        yield workdir
    finally:
        release_scratch_dir(workdir)


__all__ = [
    "ArchiveError",
    "allocate_scratch_dir",
    "expanded_archive",
    "extract_archive",
    "release_scratch_dir",
]
