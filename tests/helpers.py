"""Shared test helpers: synthetic key material and a scripted engine.

Key packets are assembled by hand so the tests never depend on gpg or a
real keyring. Their key material is not a usable RSA key, which is fine:
pkgtrust only frames packets and hashes their bodies.

``FakeEngine`` records every call and replays scripted diagnostics;
``FakeStore`` is an in-memory keyring.
"""

from __future__ import annotations

import hashlib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterator

from pkgtrust.core.keys.armor import ArmorType, encode_armor
from pkgtrust.core.keys.identities import identities_from_packets
from pkgtrust.engine.base import (
    PUBKEY_TAG,
    DiagnosticLevel,
    KeyRecord,
    TrustStoreContext,
    VerificationEngine,
)
from pkgtrust.exceptions import EngineError


# ---------------------------------------------------------------------------
# Key material
# ---------------------------------------------------------------------------


def new_packet(tag: int, body: bytes) -> bytes:
    """Frame ``body`` as a new-format OpenPGP packet."""
    length = len(body)
    if length < 192:
        header = bytes([length])
    elif length < 8384:
        length -= 192
        header = bytes([(length >> 8) + 192, length & 0xFF])
    else:
        header = b"\xff" + length.to_bytes(4, "big")
    return bytes([0xC0 | tag]) + header + body


def old_packet(tag: int, body: bytes) -> bytes:
    """Frame ``body`` as an old-format packet with a 2-octet length."""
    return bytes([0x80 | (tag << 2) | 1]) + len(body).to_bytes(2, "big") + body


def v4_key_body(seed: int = 1, created: int = 0x5F000000) -> bytes:
    """Build a V4 RSA public key packet body with a fake 1024-bit modulus."""
    modulus = bytes([0x80 | (seed & 0x7F)]) + bytes((seed + i) & 0xFF for i in range(127))
    exponent = b"\x01\x00\x01"
    return (
        b"\x04"
        + created.to_bytes(4, "big")
        + b"\x01"
        + (1024).to_bytes(2, "big") + modulus
        + (17).to_bytes(2, "big") + exponent
    )


@dataclass
class KeyMaterial:
    """A synthetic public key and the identity pkgtrust should derive."""

    packets: bytes
    key_id: str
    fingerprint: str
    user_id: str

    @property
    def short_key_id(self) -> str:
        return self.key_id[-8:]

    def armored(self, armor_type: ArmorType = ArmorType.PUBKEY) -> str:
        return encode_armor(self.packets, armor_type)

    def write(self, path: Path, armor_type: ArmorType = ArmorType.PUBKEY) -> Path:
        path.write_text(self.armored(armor_type))
        return path


def make_key(seed: int = 1, user_id: str = "Test Key <test@example.com>") -> KeyMaterial:
    """Build a V4 public key with one User ID and a subkey."""
    body = v4_key_body(seed)
    digest = hashlib.sha1(b"\x99" + len(body).to_bytes(2, "big") + body).digest()
    packets = (
        new_packet(6, body)
        + new_packet(13, user_id.encode("utf-8"))
        + new_packet(2, b"\x04\x13fake-signature")
        + new_packet(14, v4_key_body(seed + 100))
    )
    return KeyMaterial(
        packets=packets,
        key_id=digest[-8:].hex().upper(),
        fingerprint=digest.hex().upper(),
        user_id=user_id,
    )


# ---------------------------------------------------------------------------
# Scripted engine and in-memory keyring
# ---------------------------------------------------------------------------


class FakeStore(TrustStoreContext):
    """In-memory keyring."""

    def __init__(self, root_dir: str = "/", records: list[KeyRecord] | None = None) -> None:
        super().__init__(root_dir)
        self.records = list(records or [])
        self.imported: list[bytes] = []
        self.accept_imports = True

    def iterate(self, tag: str) -> Iterator[KeyRecord]:
        for record in self.records:
            if record.name == tag:
                yield record

    def import_pubkey(self, packet: bytes) -> bool:
        self.imported.append(packet)
        if not self.accept_imports:
            return False
        key_id = identities_from_packets(packet)[0].id
        self.records.append(KeyRecord(PUBKEY_TAG, key_id[-8:].lower()))
        return True


@dataclass
class FakeEngine(VerificationEngine):
    """Engine that replays ``lines`` and answers ``result``.

    Attributes:
        result: Overall verification outcome to report.
        lines: Diagnostic lines emitted at INFO during ``verify``.
        store: Keyring handed out by ``create_context``.
        verify_calls: Package paths passed to ``verify``.
        levels_seen: Diagnostic level in force during each ``verify``.
        context_lines: Diagnostic lines emitted at NOTICE by ``create_context``.
        captured_during_context: Whether a sink was installed at each
            ``create_context`` call.
    """

    result: bool = True
    lines: list[str] = field(default_factory=list)
    store: FakeStore = field(default_factory=FakeStore)
    fail_context: bool = False
    verify_calls: list[str] = field(default_factory=list)
    levels_seen: list[DiagnosticLevel] = field(default_factory=list)
    context_lines: list[str] = field(default_factory=list)
    captured_during_context: list[bool] = field(default_factory=list)

    def __post_init__(self) -> None:
        VerificationEngine.__init__(self)

    def create_context(self, root_dir: str) -> FakeStore:
        self.captured_during_context.append(self._sink is not None)
        for line in self.context_lines:
            self.emit(DiagnosticLevel.NOTICE, line)
        if self.fail_context:
            raise EngineError(f"Root directory does not exist: {root_dir}")
        self.store.root_dir = root_dir
        return self.store

    def verify(self, context: TrustStoreContext, package_path: str) -> bool:
        self.verify_calls.append(package_path)
        self.levels_seen.append(self.diagnostic_level)
        for line in self.lines:
            self.emit(DiagnosticLevel.INFO, line)
        return self.result
