"""Feature location analysis for uploaded source archives."""

from .archive import ArchiveError
from .config import ConfigError
from .llm.runner import BackendError
from .pipeline import AnalysisPipeline
from .repo_scanner import FileReadError, RepoScanner
from .validation import ValidationError

__version__ = "1.0.0"

__all__ = [
    "AnalysisPipeline",
    "ArchiveError",
    "BackendError",
    "ConfigError",
    "FileReadError",
    "RepoScanner",
    "ValidationError",
]
