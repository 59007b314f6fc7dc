"""Integration test fixtures for running the server as a subprocess."""

from __future__ import annotations

import os
from typing import TYPE_CHECKING

import pytest

if TYPE_CHECKING:
    from pathlib import Path


@pytest.fixture()
def subprocess_env(tmp_path: Path) -> dict[str, str]:
    """Environment for a server subprocess, isolated from the user's config."""
    env = {k: v for k, v in os.environ.items() if not k.startswith("CONANREADME__")}
    env["HOME"] = str(tmp_path)
    env["XDG_CONFIG_HOME"] = str(tmp_path / ".config")
    return env
