"""Shared fixtures for CLI tests.

Commands run through ``CliRunner`` with a ``FakeEngine`` injected via
the Click context object, and a configuration file rooted at a temporary
directory with every check enabled.
"""

from __future__ import annotations

from pathlib import Path

import pytest
from click.testing import CliRunner


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture
def install_root(tmp_path: Path) -> Path:
    root = tmp_path / "sysroot"
    root.mkdir()
    return root


@pytest.fixture
def config_file(tmp_path: Path, install_root: Path) -> Path:
    """YAML configuration enabling checks for local and repository packages."""
    path = tmp_path / "pkgtrust.yaml"
    path.write_text(
        f"installroot: {install_root}\n"
        "gpgcheck: true\n"
        "localpkg_gpgcheck: true\n"
        "repos:\n"
        "  updates:\n"
        "    gpgcheck: false\n"
    )
    return path


@pytest.fixture
def package_file(tmp_path: Path) -> Path:
    """An (unsigned, fake) package file that exists on disk."""
    path = tmp_path / "dummy-1.0-1.noarch.rpm"
    path.write_bytes(b"\xed\xab\xee\xdb")
    return path
