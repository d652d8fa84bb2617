"""Scoped, exclusive capture of the verification engine's diagnostics.

The engine reports *why* a check failed only as free text on its
diagnostic channel, and that channel is shared by every user of the
engine in the process. ``capture_diagnostics`` takes a process-wide lock,
points the channel at a ``DiagnosticChannel`` and puts the previous sink
back on exit, including when the body raises.

The yielded ``DiagnosticChannel`` is the capability to use the engine:
functions that invoke the engine take it as an argument, so holding the
lock is visible in their signatures.

Two modes:

- collect (default) -- lines are kept in order for the classifier.
- forward -- lines are passed to the ``pkgtrust.engine`` logger; used by
  trust store operations that need the lock but not the text.
"""

from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from typing import Iterator

from pkgtrust.engine.base import DiagnosticLevel, VerificationEngine, to_logging_level

_CHANNEL_LOCK = threading.Lock()

engine_logger = logging.getLogger("pkgtrust.engine")


class DiagnosticChannel:
    """Exclusive access to an engine's diagnostic output.

    Only ``capture_diagnostics`` creates instances; a channel is valid for
    the duration of that scope.
    """

    def __init__(self, engine: VerificationEngine, collect: bool = True) -> None:
        self.engine = engine
        self._collect = collect
        self._lines: list[str] = []

    def _receive(self, level: DiagnosticLevel, message: str) -> None:
        for line in message.splitlines():
            line = line.rstrip()
            if not line:
                continue
            if self._collect:
                self._lines.append(line)
            else:
                engine_logger.log(to_logging_level(level), "%s", line)

    @property
    def lines(self) -> list[str]:
        """Lines captured so far, in emission order."""
        return list(self._lines)

    def drain(self) -> list[str]:
        """Return the captured lines and clear the buffer."""
        lines, self._lines = self._lines, []
        return lines

    @contextmanager
    def verbosity(self, level: DiagnosticLevel) -> Iterator[None]:
        """Raise the engine's verbosity to at least ``level`` for the block."""
        previous = self.engine.diagnostic_level
        self.engine.set_diagnostic_level(max(previous, level))
        try:
            yield
        finally:
            self.engine.set_diagnostic_level(previous)


@contextmanager
def capture_diagnostics(
    engine: VerificationEngine, *, collect: bool = True
) -> Iterator[DiagnosticChannel]:
    """Hold the diagnostic channel of ``engine`` for the ``with`` block.

    Blocks until no other capture is active anywhere in the process.

    Args:
        engine: Engine whose channel is redirected.
        collect: Keep lines for later reading; when False they are
            forwarded to the ``pkgtrust.engine`` logger instead.

    Yields:
        The channel capability for the duration of the block.
    """
    with _CHANNEL_LOCK:
        channel = DiagnosticChannel(engine, collect=collect)
        previous = engine.set_diagnostic_sink(channel._receive)
        try:
            yield channel
        finally:
            engine.set_diagnostic_sink(previous)
