"""Shared fixtures for pkgtrust tests."""

from __future__ import annotations

from pathlib import Path

import pytest

from pkgtrust.config import TrustConfig
from tests.helpers import FakeEngine, KeyMaterial, make_key


@pytest.fixture
def key_material() -> KeyMaterial:
    """A synthetic V4 public key."""
    return make_key()


@pytest.fixture
def key_file(tmp_path: Path, key_material: KeyMaterial) -> Path:
    """The synthetic key written as an armored public key block."""
    return key_material.write(tmp_path / "RPM-GPG-KEY-test")


@pytest.fixture
def engine() -> FakeEngine:
    """A scripted engine that reports success by default."""
    return FakeEngine()


@pytest.fixture
def config(tmp_path: Path) -> TrustConfig:
    """Configuration rooted at a temporary directory, all checks enabled."""
    root = tmp_path / "root"
    root.mkdir()
    return TrustConfig(installroot=str(root), gpgcheck=True, localpkg_gpgcheck=True)
