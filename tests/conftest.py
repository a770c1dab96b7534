"""
Shared test fixtures and configuration.
"""

from pathlib import Path

import pytest


@pytest.fixture
def fixtures_dir() -> Path:
    """Return the test fixtures directory."""
    return Path(__file__).parent / "fixtures"


@pytest.fixture
def shell_nix(fixtures_dir: Path) -> Path:
    """The reference shell.nix: bash, pkg-config, openssl, clang, lldb."""
    return fixtures_dir / "shell.nix"


@pytest.fixture
def devshell_yml(fixtures_dir: Path) -> Path:
    """The same five tools in the wrapped YAML form."""
    return fixtures_dir / "devshell.yml"
