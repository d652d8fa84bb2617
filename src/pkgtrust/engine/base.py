"""Verification engine interface.

pkgtrust never verifies a signature itself. It drives an external engine
and reads back whatever that engine writes to its diagnostic channel.
This module defines what an engine has to provide:

- ``VerificationEngine`` -- diagnostic channel state (level and sink),
  context creation, and the signature check entry point.
- ``TrustStoreContext`` -- a handle on the keyring below an install root,
  used both for verification and for key lookup/import.
- ``KeyRecord`` -- one entry of the keyring as reported by the engine.

The diagnostic channel is shared by everything using the same engine.
Callers must hold ``pkgtrust.core.diagnostics.capture_diagnostics`` while
they redirect or read it.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Callable, Iterator
from dataclasses import dataclass
from enum import IntEnum

logger = logging.getLogger("pkgtrust.engine")

# Name under which the keyring stores public keys.
PUBKEY_TAG: str = "gpg-pubkey"


class DiagnosticLevel(IntEnum):
    """Syslog-style message priorities, most severe first.

    A message is emitted when its priority is numerically <= the engine's
    current diagnostic level, so raising the level means more output.
    """

    EMERG = 0
    ALERT = 1
    CRIT = 2
    ERR = 3
    WARNING = 4
    NOTICE = 5
    INFO = 6
    DEBUG = 7


DiagnosticSink = Callable[[DiagnosticLevel, str], None]


def to_logging_level(level: DiagnosticLevel) -> int:
    """Map an engine priority onto a ``logging`` level."""
    if level <= DiagnosticLevel.ERR:
        return logging.ERROR
    if level == DiagnosticLevel.WARNING:
        return logging.WARNING
    if level == DiagnosticLevel.DEBUG:
        return logging.DEBUG
    return logging.INFO


@dataclass(frozen=True)
class KeyRecord:
    """A key entry stored in the keyring.

    Attributes:
        name: Record name, ``gpg-pubkey`` for public keys.
        version: Short key identifier (last 8 hex digits of the key id).
        release: Key creation time as hex, as the keyring stores it.
    """

    name: str
    version: str
    release: str = ""


class TrustStoreContext(ABC):
    """Handle on the keyring and package database below ``root_dir``."""

    def __init__(self, root_dir: str) -> None:
        self.root_dir = root_dir

    @abstractmethod
    def iterate(self, tag: str) -> Iterator[KeyRecord]:
        """Yield the keyring records stored under ``tag``."""

    @abstractmethod
    def import_pubkey(self, packet: bytes) -> bool:
        """Import raw public key packets. Returns True on success."""


class VerificationEngine(ABC):
    """Base class for signature verification engines.

    Subclasses implement ``create_context`` and ``verify`` and report
    their findings through ``emit``. The level and sink held here form
    the engine's diagnostic channel.
    """

    def __init__(self) -> None:
        self._level = DiagnosticLevel.NOTICE
        self._sink: DiagnosticSink | None = None

    @property
    def diagnostic_level(self) -> DiagnosticLevel:
        """Current diagnostic verbosity."""
        return self._level

    def set_diagnostic_level(self, level: DiagnosticLevel) -> DiagnosticLevel:
        """Set the diagnostic verbosity and return the previous one."""
        previous = self._level
        self._level = DiagnosticLevel(level)
        return previous

    def set_diagnostic_sink(self, sink: DiagnosticSink | None) -> DiagnosticSink | None:
        """Redirect diagnostic output to ``sink`` and return the previous sink.

        Passing None restores the default behaviour of writing to the
        ``pkgtrust.engine`` logger.
        """
        previous = self._sink
        self._sink = sink
        return previous

    def emit(self, level: DiagnosticLevel, message: str) -> None:
        """Write a message to the diagnostic channel if the level allows it."""
        if level > self._level:
            return
        if self._sink is not None:
            self._sink(level, message)
        else:
            logger.log(to_logging_level(level), "%s", message)

    @abstractmethod
    def create_context(self, root_dir: str) -> TrustStoreContext:
        """Create a verification context rooted at ``root_dir``.

        Raises:
            EngineError: If the root directory cannot be used.
        """

    @abstractmethod
    def verify(self, context: TrustStoreContext, package_path: str) -> bool:
        """Check the signatures of the package at ``package_path``.

        Per-check results are written to the diagnostic channel.

        Returns:
            True if every check passed.
        """
