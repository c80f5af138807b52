"""Repository walking and file classification for uploaded projects."""

from __future__ import annotations

import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, Iterator, List, Sequence

from .logging import get_logger
from .models import FileRecord, StructureSnapshot

IGNORE_PATTERNS: tuple[str, ...] = (
    "node_modules",
    ".git",
    "dist",
    "build",
    ".next",
    ".nuxt",
    "target",
    "__pycache__",
    ".pytest_cache",
    "coverage",
    ".coverage",
    "vendor",
    ".idea",
    ".vscode",
    ".DS_Store",
    "thumbs.db",
    "*.log",
    "*.tmp",
)

CODE_EXTENSIONS = frozenset(
    {
        ".js", ".ts", ".jsx", ".tsx", ".py", ".java", ".cs", ".cpp", ".c", ".go",
        ".rs", ".php", ".rb", ".swift", ".kt", ".scala", ".clj", ".hs", ".ml",
        ".vue", ".svelte", ".html", ".css", ".scss", ".less", ".sql", ".graphql",
        ".json", ".yaml", ".yml", ".toml", ".xml", ".md", ".dockerfile", ".sh",
    }
)

# Build scripts and entrypoints that often carry no telling extension.
CODE_FILE_NAMES = frozenset(
    {
        "dockerfile",
        "makefile",
        "rakefile",
        "gemfile",
        "requirements.txt",
        "setup.py",
        "main.py",
        "app.py",
        "index.js",
        "server.js",
        "main.js",
    }
)

MANIFEST_NAMES = frozenset(
    {"package.json", "requirements.txt", "pom.xml", "build.gradle", "Cargo.toml"}
)

CONFIG_MARKERS: tuple[str, ...] = (
    "dockerfile",
    ".env",
    "docker-compose.yml",
    "webpack.config.js",
    "tsconfig.json",
)

CONTENT_SAMPLE_CHARS = 10_000

_logger = get_logger("repo_scanner")


class FileReadError(OSError):
    """Raised when a single file cannot be read or decoded as text."""


@dataclass(frozen=True)
class IgnoreRule:
    """One ignore pattern.

    Plain patterns match an entry whose name equals the pattern or whose
    relative path contains it. Patterns with ``*`` match the entry name as a
    whole, with ``*`` standing for any character sequence.
    """

    pattern: str

    def matches(self, name: str, rel_path: str) -> bool:
        if not self.pattern:
            return False
        if "*" in self.pattern:
            return _wildcard_regex(self.pattern).fullmatch(name) is not None
        return name == self.pattern or self.pattern in rel_path


_WILDCARD_CACHE: Dict[str, re.Pattern[str]] = {}


def _wildcard_regex(pattern: str) -> re.Pattern[str]:
    compiled = _WILDCARD_CACHE.get(pattern)
    if compiled is None:
        parts = (re.escape(chunk) for chunk in pattern.split("*"))
        compiled = re.compile(".*".join(parts), re.DOTALL)
        _WILDCARD_CACHE[pattern] = compiled
    return compiled


def build_ignore_rules(extra_patterns: Iterable[str] = ()) -> List[IgnoreRule]:
    rules = [IgnoreRule(pattern) for pattern in IGNORE_PATTERNS]
    for pattern in extra_patterns:
        cleaned = pattern.strip().strip("/")
        if cleaned:
            rules.append(IgnoreRule(cleaned))
    return rules


def should_ignore(name: str, rel_path: str, rules: Sequence[IgnoreRule]) -> bool:
    return any(rule.matches(name, rel_path) for rule in rules)


def is_manifest(name: str) -> bool:
    return name in MANIFEST_NAMES


def is_config_file(name: str) -> bool:
    lowered = name.lower()
    return any(marker in lowered for marker in CONFIG_MARKERS)


def is_code_file(name: str, extension: str) -> bool:
    return extension in CODE_EXTENSIONS or name.lower() in CODE_FILE_NAMES


def count_lines(text: str) -> int:
    """Number of newline-delimited segments; an empty file has one."""
    return text.count("\n") + 1


def _read_text(path: Path) -> str:
    try:
        return path.read_bytes().decode("utf-8")
    except UnicodeDecodeError as exc:
        raise FileReadError(f"{path.name} is not valid UTF-8 text") from exc
    except OSError as exc:
        raise FileReadError(f"{path.name} could not be read: {exc.strerror or exc}") from exc


def _sorted_entries(directory: Path) -> Iterator[os.DirEntry[str]]:
    with os.scandir(directory) as handle:
        entries = sorted(handle, key=lambda entry: entry.name)
    return iter(entries)


class RepoScanner:
    """Walks an expanded project tree to produce a structure snapshot."""

    def __init__(
        self,
        extra_ignore_patterns: Iterable[str] = (),
        *,
        sample_chars: int = CONTENT_SAMPLE_CHARS,
    ) -> None:
        self.rules = build_ignore_rules(extra_ignore_patterns)
        self.sample_chars = sample_chars

    def scan(self, root: str | Path) -> StructureSnapshot:
        """Return a snapshot describing every non-ignored entry under ``root``.

        Traversal is depth-first in name order and uses an explicit stack of
        directory iterators, so nesting depth never grows the call stack.
        Ignored directories are never descended into.
        """
        root_path = Path(root).expanduser().resolve()
        if not root_path.exists():
            raise FileNotFoundError(f"Project path not found: {root}")
        if not root_path.is_dir():
            raise NotADirectoryError(f"Project path is not a directory: {root}")

        snapshot = StructureSnapshot(root_path=str(root_path))
        stack: List[Iterator[os.DirEntry[str]]] = []
        self._push_directory(stack, root_path, snapshot)

        while stack:
            entry = next(stack[-1], None)
            if entry is None:
                stack.pop()
                continue

            entry_path = Path(entry.path)
            rel_path = entry_path.relative_to(root_path).as_posix()
            if should_ignore(entry.name, rel_path, self.rules):
                continue

            if entry.is_dir(follow_symlinks=False):
                snapshot.directories.append(rel_path)
                self._push_directory(stack, entry_path, snapshot)
            elif entry.is_file(follow_symlinks=False):
                try:
                    self._process_file(entry_path, rel_path, snapshot)
                except FileReadError as exc:
                    message = f"Skipped {rel_path}: {exc}"
                    _logger.warning(message)
                    snapshot.warnings.append(message)

        _logger.debug(
            "Scanned %s: %d files captured, %d lines, %d directories",
            root_path,
            snapshot.total_files,
            snapshot.total_lines,
            len(snapshot.directories),
        )
        return snapshot

    def _push_directory(
        self,
        stack: List[Iterator[os.DirEntry[str]]],
        directory: Path,
        snapshot: StructureSnapshot,
    ) -> None:
        try:
            stack.append(_sorted_entries(directory))
        except OSError as exc:
            message = f"Unable to list directory {directory.name or directory}: {exc.strerror or exc}"
            _logger.warning(message)
            snapshot.warnings.append(message)

    def _process_file(self, path: Path, rel_path: str, snapshot: StructureSnapshot) -> None:
        name = path.name
        extension = path.suffix.lower()

        record: FileRecord | None = None
        if is_code_file(name, extension):
            text = _read_text(path)
            record = FileRecord(
                path=rel_path,
                name=name,
                extension=extension,
                size=len(text.encode("utf-8")),
                lines=count_lines(text),
                content=text[: self.sample_chars],
            )

        snapshot.file_types[extension] = snapshot.file_types.get(extension, 0) + 1
        if is_manifest(name):
            snapshot.package_files.append(rel_path)
        if is_config_file(name):
            snapshot.config_files.append(rel_path)

        if record is not None:
            snapshot.files.append(record)
            snapshot.total_files += 1
            snapshot.total_lines += record.lines


__all__ = [
    "CODE_EXTENSIONS",
    "CODE_FILE_NAMES",
    "CONFIG_MARKERS",
    "CONTENT_SAMPLE_CHARS",
    "FileReadError",
    "IGNORE_PATTERNS",
    "IgnoreRule",
    "MANIFEST_NAMES",
    "RepoScanner",
    "build_ignore_rules",
    "count_lines",
    "should_ignore",
]
