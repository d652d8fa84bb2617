"""Verification engine backed by the system ``rpmkeys`` and ``rpm`` tools.

Each operation runs one command below the configured root:

- verify   -- ``rpmkeys --root ROOT --checksig [-v] -- PACKAGE``
- iterate  -- ``rpm --root ROOT -q gpg-pubkey --qf '%{NAME} %{VERSION} %{RELEASE}\\n'``
- import   -- ``rpmkeys --root ROOT --import FILE``

Command output is written line by line to the engine's diagnostic
channel: stdout at INFO when verbose (NOTICE otherwise), stderr at ERR.
"""

from __future__ import annotations

import logging
import os
import subprocess
import tempfile
from pathlib import Path
from typing import Iterator

from pkgtrust.core.keys.armor import encode_armor
from pkgtrust.engine.base import (
    DiagnosticLevel,
    KeyRecord,
    TrustStoreContext,
    VerificationEngine,
)
from pkgtrust.exceptions import EngineError

logger = logging.getLogger(__name__)

_QUERY_FORMAT = "%{NAME} %{VERSION} %{RELEASE}\\n"


class RpmKeysContext(TrustStoreContext):
    """Keyring and package database below ``root_dir``."""

    def __init__(self, engine: RpmKeysEngine, root_dir: str) -> None:
        super().__init__(root_dir)
        self._engine = engine

    def iterate(self, tag: str) -> Iterator[KeyRecord]:
        proc = self._engine.run(
            [self._engine.rpm, "--root", self.root_dir, "-q", tag, "--qf", _QUERY_FORMAT]
        )
        if proc.returncode != 0:
            # "package gpg-pubkey is not installed" means an empty keyring.
            if "is not installed" not in proc.stdout:
                self._engine.emit_output(proc.stdout, proc.stderr, verbose=False)
            return
        for line in proc.stdout.splitlines():
            fields = line.split()
            if len(fields) < 2:
                continue
            yield KeyRecord(
                name=fields[0],
                version=fields[1],
                release=fields[2] if len(fields) > 2 else "",
            )

    def import_pubkey(self, packet: bytes) -> bool:
        fd, name = tempfile.mkstemp(prefix="pkgkey", suffix=".asc")
        path = Path(name)
        try:
            with os.fdopen(fd, "w", encoding="ascii") as out:
                out.write(encode_armor(packet))
            proc = self._engine.run(
                [self._engine.rpmkeys, "--root", self.root_dir, "--import", str(path)]
            )
        finally:
            path.unlink(missing_ok=True)
        self._engine.emit_output(proc.stdout, proc.stderr, verbose=False)
        return proc.returncode == 0


class RpmKeysEngine(VerificationEngine):
    """Drive ``rpmkeys``/``rpm`` as the verification engine.

    Args:
        rpmkeys: Name or path of the ``rpmkeys`` executable.
        rpm: Name or path of the ``rpm`` executable.
    """

    def __init__(self, rpmkeys: str = "rpmkeys", rpm: str = "rpm") -> None:
        super().__init__()
        self.rpmkeys = rpmkeys
        self.rpm = rpm

    def run(self, args: list[str]) -> subprocess.CompletedProcess[str]:
        """Run a command, capturing its output as text.

        Raises:
            EngineError: If the executable cannot be started.
        """
        logger.debug("Running: %s", " ".join(args))
        try:
            return subprocess.run(args, capture_output=True, text=True, check=False)
        except OSError as exc:
            raise EngineError(f"Cannot run {args[0]}: {exc}") from exc

    def emit_output(self, stdout: str, stderr: str, *, verbose: bool) -> None:
        """Write command output to the diagnostic channel."""
        out_level = DiagnosticLevel.INFO if verbose else DiagnosticLevel.NOTICE
        for line in stdout.splitlines():
            self.emit(out_level, line)
        for line in stderr.splitlines():
            self.emit(DiagnosticLevel.ERR, line)

    def create_context(self, root_dir: str) -> RpmKeysContext:
        if not os.path.isabs(root_dir):
            raise EngineError(f"Root directory must be absolute: {root_dir}")
        if not os.path.isdir(root_dir):
            raise EngineError(f"Root directory does not exist: {root_dir}")
        return RpmKeysContext(self, root_dir)

    def verify(self, context: TrustStoreContext, package_path: str) -> bool:
        args = [self.rpmkeys, "--root", context.root_dir, "--checksig"]
        verbose = self.diagnostic_level >= DiagnosticLevel.INFO
        if verbose:
            args.append("-v")
        args.extend(["--", package_path])

        proc = self.run(args)
        self.emit_output(proc.stdout, proc.stderr, verbose=verbose)
        return proc.returncode == 0
