from __future__ import annotations

from pathlib import Path

import pytest

from codelocator.config import CodeLocatorConfig, StorageConfig
from tests._fixtures.project_builder import ProjectBuilder


@pytest.fixture
def project_builder(tmp_path: Path) -> ProjectBuilder:
    """Provide a reusable project builder rooted at the pytest tmp_path."""
    return ProjectBuilder(tmp_path)


@pytest.fixture
def scratch_config(tmp_path: Path) -> CodeLocatorConfig:
    """Defaults (heuristic provider) with uploads and scratch space inside tmp_path."""
    return CodeLocatorConfig(
        root=tmp_path,
        storage=StorageConfig(upload_dir=tmp_path / "uploads", temp_dir=tmp_path / "scratch"),
    )
