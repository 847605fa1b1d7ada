"""Shared test fixtures."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

if TYPE_CHECKING:
    from pathlib import Path


@pytest.fixture
def config_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point configuration lookups at a temporary directory."""
    monkeypatch.setenv("CLOUDTAIL_CONFIG_DIR", str(tmp_path))
    return tmp_path
