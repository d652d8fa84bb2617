"""Signature verification core.

Submodules:
    diagnostics  -- exclusive capture of the engine's diagnostic channel
    classifier   -- CheckResult and classify_diagnostics
    keys         -- KeyInfo and the armor/identity codecs behind it
    truststore   -- keyring lookup and import
    signature    -- SignatureVerifier, the orchestrator

All public names are re-exported here so that callers can write
``from pkgtrust.core import SignatureVerifier``.
"""

from pkgtrust.core.classifier import CheckResult, classify_diagnostics, describe_result
from pkgtrust.core.diagnostics import DiagnosticChannel, capture_diagnostics
from pkgtrust.core.keys import KeyInfo
from pkgtrust.core.signature import SignatureVerifier

__all__ = [
    "CheckResult",
    "DiagnosticChannel",
    "KeyInfo",
    "SignatureVerifier",
    "capture_diagnostics",
    "classify_diagnostics",
    "describe_result",
]
