"""Core data models shared across codelocator components."""

from dataclasses import dataclass, field
from typing import Any, Dict, List


@dataclass
class FileRecord:
    """Metadata and a bounded content sample for one captured source file."""

    path: str
    name: str
    extension: str
    size: int
    lines: int
    content: str


@dataclass
class StructureSnapshot:
    """Traversal-derived view of an expanded project tree.

    Built once by :class:`codelocator.repo_scanner.RepoScanner` and treated as
    read-only afterwards.
    """

    root_path: str
    files: List[FileRecord] = field(default_factory=list)
    directories: List[str] = field(default_factory=list)
    package_files: List[str] = field(default_factory=list)
    config_files: List[str] = field(default_factory=list)
    total_files: int = 0
    total_lines: int = 0
    file_types: Dict[str, int] = field(default_factory=dict)
    warnings: List[str] = field(default_factory=list)

    def find(self, path: str) -> FileRecord | None:
        for record in self.files:
            if record.path == path:
                return record
        return None


@dataclass
class ExtensionCount:
    extension: str
    count: int


@dataclass
class RankedFile:
    path: str
    lines: int
    size: int


@dataclass
class StructureSummary:
    """Condensed, derived statistics about a snapshot."""

    total_files: int
    total_lines: int
    top_extensions: List[ExtensionCount]
    top_files: List[RankedFile]
    has_package_files: bool
    has_config_files: bool

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total_files": self.total_files,
            "total_lines": self.total_lines,
            "top_extensions": [
                {"extension": item.extension, "count": item.count} for item in self.top_extensions
            ],
            "top_files": [
                {"path": item.path, "lines": item.lines, "size": item.size} for item in self.top_files
            ],
            "has_package_files": self.has_package_files,
            "has_config_files": self.has_config_files,
        }


@dataclass
class Location:
    """Where a feature is implemented: file, symbol and a line range string."""

    file: str
    function: str
    lines: str


@dataclass
class FeatureEntry:
    feature_description: str
    implementation_location: List[Location] = field(default_factory=list)


@dataclass
class FeatureReport:
    """Canonical analysis result shared by every backend."""

    feature_analysis: List[FeatureEntry]
    execution_plan_suggestion: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "feature_analysis": [
                {
                    "feature_description": entry.feature_description,
                    "implementation_location": [
                        {"file": loc.file, "function": loc.function, "lines": loc.lines}
                        for loc in entry.implementation_location
                    ],
                }
                for entry in self.feature_analysis
            ],
            "execution_plan_suggestion": self.execution_plan_suggestion,
        }
