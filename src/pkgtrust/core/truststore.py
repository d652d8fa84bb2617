"""Trust store lookup and import.

The keyring is owned by the engine; these functions only query and add
to it through a ``TrustStoreContext``. Keys are matched by their short
identifier (last 8 hex digits of the key id), which is what the keyring
records as the version of each ``gpg-pubkey`` entry.

``lookup`` and ``import_key`` take the ``DiagnosticChannel`` the caller
already holds. ``is_present`` acquires its own and opens the store inside
it, so context creation never writes to another caller's channel.
"""

from __future__ import annotations

import logging
from typing import Callable

from pkgtrust.core.diagnostics import DiagnosticChannel, capture_diagnostics
from pkgtrust.core.keys.descriptor import KeyInfo
from pkgtrust.engine.base import PUBKEY_TAG, TrustStoreContext, VerificationEngine
from pkgtrust.exceptions import KeyImportError

logger = logging.getLogger(__name__)


def lookup(channel: DiagnosticChannel, store: TrustStoreContext, key: KeyInfo) -> bool:
    """Return True if ``key`` is already in the trust store."""
    short_id = key.get_short_key_id().lower()
    for record in store.iterate(PUBKEY_TAG):
        if record.version.lower() == short_id:
            return True
    return False


def import_key(channel: DiagnosticChannel, store: TrustStoreContext, key: KeyInfo) -> bool:
    """Add ``key`` to the trust store unless it is already there.

    Returns:
        True if the key was imported, False if it was already present.

    Raises:
        KeyImportError: If the trust store rejects the key.
    """
    if lookup(channel, store, key):
        logger.info("Key %s is already present", key.get_short_key_id())
        return False
    if not store.import_pubkey(key.packet):
        raise KeyImportError(
            f'Failed to import public key "{key.location}" to the trust store.',
            key.location,
        )
    logger.info("Imported key %s from %s", key.get_short_key_id(), key.location)
    return True


def is_present(
    engine: VerificationEngine,
    open_store: Callable[[], TrustStoreContext],
    key: KeyInfo,
) -> bool:
    """Read-only ``lookup`` under its own forwarding diagnostic capture.

    ``open_store`` is called inside the capture.
    """
    with capture_diagnostics(engine, collect=False) as channel:
        return lookup(channel, open_store(), key)
