"""Key identity extraction from OpenPGP public key material.

Walks the packet stream of each armored public key block (or of raw
binary packets) and reports one ``KeyIdentity`` per primary key. Only
the framing and the fields needed for identification are read; no
signature is checked here.

Only primary key and User ID packets are interpreted; every other
packet, subkeys included, is skipped by length. This is not a general
OpenPGP parser.

Packet framing (RFC 4880 section 4.2):

- Old format: tag in bits 5-2, length type in bits 1-0 (1, 2 or 4 length
  octets, or "until end of data").
- New format: tag in bits 5-0, length encoded in 1, 2 or 5 octets.
  Partial body lengths are not valid for key packets and are rejected.

Fingerprints:

- V4: SHA-1 over ``0x99 || 2-octet length || body``; key id is the low
  64 bits.
- V5 / V6: SHA-256 over ``0x9A/0x9B || 4-octet length || body``; key id
  is the high 64 bits.
"""

from __future__ import annotations

import hashlib
import logging
from dataclasses import dataclass
from typing import IO, Iterator

from pkgtrust.core.keys.armor import ArmorType, is_armored, iter_armor_blocks
from pkgtrust.exceptions import ArmorError

logger = logging.getLogger(__name__)

TAG_PUBLIC_KEY = 6
TAG_USER_ID = 13
TAG_PUBLIC_SUBKEY = 14


@dataclass(frozen=True)
class KeyIdentity:
    """Identity of one primary public key.

    Attributes:
        id: 16 hex digit key id, upper case.
        user_id: First User ID attached to the key, empty if none.
        fingerprint: Full fingerprint as upper case hex.
    """

    id: str
    user_id: str
    fingerprint: str


def iter_packets(data: bytes) -> Iterator[tuple[int, bytes]]:
    """Yield ``(tag, body)`` for every packet in ``data``.

    Raises:
        ArmorError: On an invalid header or a truncated packet.
    """
    pos = 0
    size = len(data)
    while pos < size:
        header = data[pos]
        if not header & 0x80:
            raise ArmorError(f"Invalid OpenPGP packet header at offset {pos}")
        pos += 1

        if header & 0x40:
            tag = header & 0x3F
            if pos >= size:
                raise ArmorError("Truncated OpenPGP packet length")
            first = data[pos]
            if first < 192:
                length = first
                pos += 1
            elif first < 224:
                if pos + 1 >= size:
                    raise ArmorError("Truncated OpenPGP packet length")
                length = ((first - 192) << 8) + data[pos + 1] + 192
                pos += 2
            elif first == 255:
                if pos + 5 > size:
                    raise ArmorError("Truncated OpenPGP packet length")
                length = int.from_bytes(data[pos + 1:pos + 5], "big")
                pos += 5
            else:
                raise ArmorError("Partial body lengths are not supported in key material")
        else:
            tag = (header >> 2) & 0x0F
            length_type = header & 0x03
            if length_type == 3:
                length = size - pos
            else:
                octets = (1, 2, 4)[length_type]
                if pos + octets > size:
                    raise ArmorError("Truncated OpenPGP packet length")
                length = int.from_bytes(data[pos:pos + octets], "big")
                pos += octets

        if pos + length > size:
            raise ArmorError(
                f"Truncated OpenPGP packet: tag {tag} needs {length} octets, "
                f"{size - pos} left"
            )
        yield tag, data[pos:pos + length]
        pos += length


def fingerprint_of(body: bytes) -> tuple[str, str]:
    """Compute ``(key_id, fingerprint)`` for a public key packet body.

    Raises:
        ArmorError: For an empty body or an unsupported key version.
    """
    if not body:
        raise ArmorError("Empty public key packet")
    version = body[0]
    if version == 4:
        digest = hashlib.sha1(b"\x99" + len(body).to_bytes(2, "big") + body).digest()
        key_id = digest[-8:]
    elif version in (5, 6):
        prefix = b"\x9a" if version == 5 else b"\x9b"
        digest = hashlib.sha256(prefix + len(body).to_bytes(4, "big") + body).digest()
        key_id = digest[:8]
    else:
        raise ArmorError(f"Unsupported public key packet version {version}")
    return key_id.hex().upper(), digest.hex().upper()


def identities_from_packets(packets: bytes) -> list[KeyIdentity]:
    """Extract one identity per primary public key in a packet stream."""
    identities: list[KeyIdentity] = []
    current: tuple[str, str] | None = None
    user_id = ""

    for tag, body in iter_packets(packets):
        if tag == TAG_PUBLIC_KEY:
            if current is not None:
                identities.append(KeyIdentity(current[0], user_id, current[1]))
            current = fingerprint_of(body)
            user_id = ""
        elif tag == TAG_USER_ID and current is not None and not user_id:
            user_id = body.decode("utf-8", errors="replace")

    if current is not None:
        identities.append(KeyIdentity(current[0], user_id, current[1]))
    return identities


def parse_key_identities(fileobj: IO[bytes]) -> list[KeyIdentity]:
    """Read the identities of every public key in an open key file.

    Armored input may hold several blocks; blocks that are not public
    keys contribute nothing. Non-armored input is read as raw packets.

    Args:
        fileobj: File opened in binary mode.

    Returns:
        Identities in file order. Empty if no public key was found.

    Raises:
        ArmorError: If the armor or the packet stream is malformed.
    """
    data = fileobj.read()
    if not is_armored(data):
        return identities_from_packets(data)

    identities: list[KeyIdentity] = []
    for block in iter_armor_blocks(data):
        if block.type is not ArmorType.PUBKEY:
            logger.debug("Skipping %s armor block", block.type.name)
            continue
        identities.extend(identities_from_packets(block.packets))
    return identities
