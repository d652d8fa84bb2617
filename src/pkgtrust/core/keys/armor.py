"""OpenPGP ASCII armor decoding and encoding.

Armored key files wrap binary OpenPGP packets in a text envelope::

    -----BEGIN PGP PUBLIC KEY BLOCK-----
    Comment: optional headers

    mQINBGP...base64...
    =Xy1z
    -----END PGP PUBLIC KEY BLOCK-----

The label on the BEGIN line decides the ``ArmorType``. The optional line
starting with ``=`` carries a CRC-24 of the decoded packets; when present
it must match.

This is a minimal codec for identifying keys before they are handed to
the trust store. It is not a general OpenPGP implementation: it does not
verify signatures or interpret secret key material.

References:
    RFC 4880 section 6 (Radix-64 conversions).
    RFC 9580 section 6 (checksum made optional).
"""

from __future__ import annotations

import base64
import binascii
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import IO, Iterator

from pkgtrust.exceptions import ArmorError

_CRC24_INIT = 0xB704CE
_CRC24_POLY = 0x1864CFB

_LINE_WIDTH = 64

_BEGIN_RE = re.compile(r"^-----BEGIN (PGP [A-Z0-9 ,/]+)-----$")
_HEADER_RE = re.compile(r"^([A-Za-z][A-Za-z0-9-]*): ?(.*)$")
_ARMOR_MARKER = b"-----BEGIN PGP "


class ArmorType(Enum):
    """Kind of armored block, taken from the BEGIN line label."""

    NONE = "none"
    PUBKEY = "PGP PUBLIC KEY BLOCK"
    SIGNATURE = "PGP SIGNATURE"
    SECKEY = "PGP PRIVATE KEY BLOCK"
    MESSAGE = "PGP MESSAGE"
    UNKNOWN = "unknown"


def _armor_type(label: str) -> ArmorType:
    if label == ArmorType.PUBKEY.value:
        return ArmorType.PUBKEY
    if label == ArmorType.SIGNATURE.value:
        return ArmorType.SIGNATURE
    if label in (ArmorType.SECKEY.value, "PGP SECRET KEY BLOCK"):
        return ArmorType.SECKEY
    if label.startswith(ArmorType.MESSAGE.value):
        return ArmorType.MESSAGE
    return ArmorType.UNKNOWN


@dataclass(frozen=True)
class ArmorBlock:
    """One decoded armor block.

    Attributes:
        type: Block kind; ``ArmorType.NONE`` when the input was not armored.
        packets: Decoded binary OpenPGP packet data.
        headers: Armor headers such as ``Version`` or ``Comment``.
    """

    type: ArmorType
    packets: bytes = b""
    headers: dict[str, str] = field(default_factory=dict, compare=False)


def crc24(data: bytes) -> int:
    """Compute the OpenPGP CRC-24 checksum of ``data``."""
    crc = _CRC24_INIT
    for byte in data:
        crc ^= byte << 16
        for _ in range(8):
            crc <<= 1
            if crc & 0x1000000:
                crc ^= _CRC24_POLY
    return crc & 0xFFFFFF


def _decode_payload(body: list[str], checksum: str | None, label: str) -> bytes:
    try:
        payload = base64.b64decode("".join(body), validate=True)
    except (binascii.Error, ValueError) as exc:
        raise ArmorError(f"Invalid base64 payload in {label} armor: {exc}") from exc

    if checksum is not None:
        try:
            raw = base64.b64decode(checksum, validate=True)
        except (binascii.Error, ValueError) as exc:
            raise ArmorError(f"Invalid checksum line in {label} armor") from exc
        if len(raw) != 3:
            raise ArmorError(f"Invalid checksum line in {label} armor")
        expected = int.from_bytes(raw, "big")
        if crc24(payload) != expected:
            raise ArmorError(
                f"CRC-24 mismatch in {label} armor: "
                f"expected {expected:06x}, got {crc24(payload):06x}"
            )
    return payload


def _parse_block(lines: list[str], start: int, label: str) -> tuple[ArmorBlock, int]:
    """Parse one block whose BEGIN line precedes ``lines[start]``.

    Returns the block and the index of the line after its END line.
    """
    end_line = f"-----END {label}-----"
    idx = start
    headers: dict[str, str] = {}

    # Headers run up to the first blank line; some producers omit both.
    while idx < len(lines):
        line = lines[idx]
        if not line:
            idx += 1
            break
        header = _HEADER_RE.match(line)
        if header is None:
            break
        headers[header.group(1)] = header.group(2)
        idx += 1

    body: list[str] = []
    checksum: str | None = None
    while idx < len(lines):
        line = lines[idx]
        idx += 1
        if line == end_line:
            payload = _decode_payload(body, checksum, label)
            return ArmorBlock(_armor_type(label), payload, headers), idx
        if line.startswith("-----"):
            raise ArmorError(f"Unexpected armor line in {label} block: {line!r}")
        if not line:
            continue
        if line.startswith("="):
            checksum = line[1:]
            continue
        if checksum is not None:
            raise ArmorError(f"Data after checksum line in {label} armor")
        body.append(line)

    raise ArmorError(f"Unterminated {label} armor block")


def iter_armor_blocks(data: bytes | str) -> Iterator[ArmorBlock]:
    """Yield every armor block found in ``data``, in order.

    Text outside of armor blocks is ignored.

    Raises:
        ArmorError: If a block is malformed.
    """
    if isinstance(data, bytes):
        data = data.decode("utf-8", errors="replace")
    lines = [line.strip() for line in data.splitlines()]
    idx = 0
    while idx < len(lines):
        begin = _BEGIN_RE.match(lines[idx])
        if begin is None:
            idx += 1
            continue
        block, idx = _parse_block(lines, idx + 1, begin.group(1))
        yield block


def is_armored(data: bytes) -> bool:
    """Return True if ``data`` contains an armor BEGIN marker."""
    return _ARMOR_MARKER in data


def decode_armor(fileobj: IO[bytes]) -> ArmorBlock:
    """Decode the first armor block of an open binary file.

    Input without any armor yields ``ArmorBlock(ArmorType.NONE)`` so that
    callers can reject it by type rather than by exception.

    Args:
        fileobj: File opened in binary mode, positioned at the start.

    Returns:
        The first decoded ``ArmorBlock``.

    Raises:
        ArmorError: If the first block is malformed.
    """
    data = fileobj.read()
    if not is_armored(data):
        return ArmorBlock(ArmorType.NONE)
    for block in iter_armor_blocks(data):
        return block
    # A marker that is not on a line of its own.
    raise ArmorError("Armor BEGIN marker without a valid BEGIN line")


def encode_armor(
    packets: bytes,
    armor_type: ArmorType = ArmorType.PUBKEY,
    headers: dict[str, str] | None = None,
) -> str:
    """Wrap binary packets in ASCII armor, including the CRC-24 line."""
    if armor_type in (ArmorType.NONE, ArmorType.UNKNOWN):
        raise ValueError(f"Cannot armor a block of type {armor_type.name}")
    label = armor_type.value
    encoded = base64.b64encode(packets).decode("ascii")
    out = [f"-----BEGIN {label}-----"]
    for key, value in (headers or {}).items():
        out.append(f"{key}: {value}")
    out.append("")
    out.extend(
        encoded[i:i + _LINE_WIDTH] for i in range(0, len(encoded), _LINE_WIDTH)
    )
    checksum = base64.b64encode(crc24(packets).to_bytes(3, "big")).decode("ascii")
    out.append(f"={checksum}")
    out.append(f"-----END {label}-----")
    return "\n".join(out) + "\n"
