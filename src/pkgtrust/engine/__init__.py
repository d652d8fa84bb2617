"""Verification engines.

Submodules:
    base     -- VerificationEngine, TrustStoreContext, KeyRecord, DiagnosticLevel
    rpmkeys  -- RpmKeysEngine, driving the system ``rpmkeys``/``rpm`` tools
"""

from pkgtrust.engine.base import (
    PUBKEY_TAG,
    DiagnosticLevel,
    KeyRecord,
    TrustStoreContext,
    VerificationEngine,
)
from pkgtrust.engine.rpmkeys import RpmKeysContext, RpmKeysEngine

__all__ = [
    "PUBKEY_TAG",
    "DiagnosticLevel",
    "KeyRecord",
    "RpmKeysContext",
    "RpmKeysEngine",
    "TrustStoreContext",
    "VerificationEngine",
]
