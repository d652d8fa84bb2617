"""Configuration and signature-check policy.

pkgtrust does not decide whether signatures must be checked. It reads the
policy flags from a YAML file and enforces them::

    installroot: /
    gpgcheck: true
    localpkg_gpgcheck: false
    download:
      timeout: 30
      user_agent: pkgtrust/0.1.0
      sslverify: true
    repos:
      updates:
        gpgcheck: false

``TrustConfig`` satisfies the ``TrustPolicy`` protocol consumed by
``SignatureVerifier``; any other object with the same three methods can
stand in for it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Protocol

import yaml

from pkgtrust import __version__
from pkgtrust.exceptions import ConfigError
from pkgtrust.package import PackageSource

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT: float = 30.0
DEFAULT_USER_AGENT: str = f"pkgtrust/{__version__}"

_TOP_LEVEL_KEYS = {"installroot", "gpgcheck", "localpkg_gpgcheck", "download", "repos"}


class TrustPolicy(Protocol):
    """Policy source consulted before every signature check."""

    def is_local_check_enabled(self) -> bool: ...

    def is_remote_source_check_enabled(self, source: PackageSource) -> bool: ...

    def install_root(self) -> str: ...


@dataclass
class DownloadConfig:
    """Settings for fetching remote keys.

    Attributes:
        timeout: Request timeout in seconds.
        user_agent: User-Agent header sent with every request.
        sslverify: Whether TLS certificates are verified.
    """

    timeout: float = DEFAULT_TIMEOUT
    user_agent: str = DEFAULT_USER_AGENT
    sslverify: bool = True


@dataclass
class RepoConfig:
    """Per-repository overrides."""

    gpgcheck: bool = True


@dataclass
class TrustConfig:
    """Loaded pkgtrust configuration.

    Attributes:
        installroot: Absolute root the keyring and package database live
            under.
        gpgcheck: Check flag for repositories without their own entry.
        localpkg_gpgcheck: Check flag for packages given on the command
            line.
        download: Remote key fetch settings.
        repos: Repository id to per-repository settings.
    """

    installroot: str = "/"
    gpgcheck: bool = True
    localpkg_gpgcheck: bool = False
    download: DownloadConfig = field(default_factory=DownloadConfig)
    repos: dict[str, RepoConfig] = field(default_factory=dict)

    # -- TrustPolicy --------------------------------------------------------

    def is_local_check_enabled(self) -> bool:
        return self.localpkg_gpgcheck

    def is_remote_source_check_enabled(self, source: PackageSource) -> bool:
        repo = self.repos.get(source.id)
        if repo is not None:
            return repo.gpgcheck
        return self.gpgcheck

    def install_root(self) -> str:
        return self.installroot

    # -- Loading ------------------------------------------------------------

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> TrustConfig:
        """Build a configuration from parsed YAML.

        Missing keys take their defaults; unknown keys are logged and
        ignored.

        Raises:
            ConfigError: If a value has the wrong type.
        """
        if data is None:
            return cls()
        if not isinstance(data, dict):
            raise ConfigError(
                f"Configuration must be a mapping, got {type(data).__name__}"
            )
        for key in sorted(set(data) - _TOP_LEVEL_KEYS):
            logger.warning("Ignoring unknown configuration key: %s", key)

        config = cls()
        if "installroot" in data:
            config.installroot = _require(data, "installroot", str)
        if "gpgcheck" in data:
            config.gpgcheck = _require(data, "gpgcheck", bool)
        if "localpkg_gpgcheck" in data:
            config.localpkg_gpgcheck = _require(data, "localpkg_gpgcheck", bool)

        download = data.get("download") or {}
        if not isinstance(download, dict):
            raise ConfigError("'download' must be a mapping")
        if "timeout" in download:
            timeout = _require(download, "timeout", (int, float), "download.")
            if timeout <= 0:
                raise ConfigError(f"'download.timeout' must be positive, got {timeout}")
            config.download.timeout = float(timeout)
        if "user_agent" in download:
            config.download.user_agent = _require(download, "user_agent", str, "download.")
        if "sslverify" in download:
            config.download.sslverify = _require(download, "sslverify", bool, "download.")

        repos = data.get("repos") or {}
        if not isinstance(repos, dict):
            raise ConfigError("'repos' must be a mapping of repository ids")
        for repo_id, repo_data in repos.items():
            repo_data = repo_data or {}
            if not isinstance(repo_data, dict):
                raise ConfigError(f"'repos.{repo_id}' must be a mapping")
            repo = RepoConfig(gpgcheck=config.gpgcheck)
            if "gpgcheck" in repo_data:
                repo.gpgcheck = _require(repo_data, "gpgcheck", bool, f"repos.{repo_id}.")
            config.repos[str(repo_id)] = repo
        return config

    @classmethod
    def load(cls, path: Path | str) -> TrustConfig:
        """Read and parse a YAML configuration file.

        Raises:
            ConfigError: If the file cannot be read or parsed.
        """
        path = Path(path)
        try:
            text = path.read_text(encoding="utf-8")
        except OSError as exc:
            raise ConfigError(f"Cannot read configuration {path}: {exc}") from exc
        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as exc:
            raise ConfigError(f"Invalid YAML in {path}: {exc}") from exc
        logger.debug("Loaded configuration from %s", path)
        return cls.from_dict(data)


def _require(data: dict[str, Any], key: str, kind: Any, prefix: str = "") -> Any:
    value = data[key]
    # bool is an int subclass; keep flags and numbers apart.
    if kind is not bool and isinstance(value, bool):
        raise ConfigError(f"'{prefix}{key}' has the wrong type: bool")
    if not isinstance(value, kind):
        raise ConfigError(
            f"'{prefix}{key}' has the wrong type: {type(value).__name__}"
        )
    return value
