# tests/cli/conftest.py
"""CLI test fixtures."""

from pathlib import Path

import pytest


@pytest.fixture
def settings_file(tmp_path: Path) -> Path:
    """Settings YAML with the LFS store in a fresh local directory."""
    config = tmp_path / "settings.yaml"
    config.write_text(f"""
storage:
  bucket_url: "file://{tmp_path}"
lfs_content_path: "lfs"
""")
    return config


@pytest.fixture
def lfs_root(tmp_path: Path) -> Path:
    return tmp_path / "lfs"
