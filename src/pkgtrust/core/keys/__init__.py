"""Public key material: armor codec, identity extraction, key descriptor.

Submodules:
    armor       -- ASCII armor decoding/encoding and CRC-24
    identities  -- OpenPGP packet walking, key ids and fingerprints
    descriptor  -- KeyInfo, the immutable descriptor built from a location
"""

from pkgtrust.core.keys.armor import ArmorBlock, ArmorType, decode_armor, encode_armor
from pkgtrust.core.keys.descriptor import KeyInfo, is_url, short_key_id
from pkgtrust.core.keys.identities import KeyIdentity, parse_key_identities

__all__ = [
    "ArmorBlock",
    "ArmorType",
    "KeyIdentity",
    "KeyInfo",
    "decode_armor",
    "encode_armor",
    "is_url",
    "parse_key_identities",
    "short_key_id",
]
