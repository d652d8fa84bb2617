"""pkgtrust: Signature verification and key management for signed packages."""

from __future__ import annotations

__version__ = "0.1.0"
__license__ = "MIT"
