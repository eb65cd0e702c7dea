"""
================================================================================
Root Pytest Configuration
================================================================================

Loads the UI automation plugin (registry, page and page-object fixtures,
failure screenshots) for every suite in the repository.

================================================================================
"""

from __future__ import annotations

from pathlib import Path

import pytest

pytest_plugins = ["ui_automation.plugin", "pytester"]


@pytest.fixture(scope="session")
def project_root() -> Path:
    """Return repo root path."""
    return Path(__file__).parent
