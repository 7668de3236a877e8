"""CLI test fixtures."""

from __future__ import annotations

import logging
from collections.abc import Generator
from pathlib import Path

import pytest
import structlog


@pytest.fixture(autouse=True)
def _reset_logging() -> Generator[None, None, None]:
    """Each invocation configures logging against the runner's streams."""
    yield
    structlog.reset_defaults()
    logging.getLogger().handlers.clear()


@pytest.fixture
def vault(tmp_path: Path) -> Path:
    root = tmp_path / "vault"
    root.mkdir()
    (root / "Project Plan.md").write_text("---\naliases: [plan]\n---\nSee [[Someday]].\n")
    (root / "Q3.md").write_text("---\ntitle: Quarterly Plan Notes\n---\n")
    (root / "Guide.md").write_text("# Installation steps\n\n# Usage\n")
    (root / "plan-diagram.pdf").write_bytes(b"%PDF-1.4")
    return root
