"""Public key descriptor built from a key location.

``KeyInfo`` turns a location reference (local path, ``file://`` URI or
remote URL) into an immutable description of one public key: its
identity fields and the raw packet bytes the trust store imports.

Construction is all-or-nothing. Either every field is populated from a
public key armor block, or the constructor raises and no object exists.
A remote key is downloaded to a scratch file that is removed before the
constructor returns or raises.
"""

from __future__ import annotations

import logging
import os
import re
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

from pkgtrust.config import TrustConfig
from pkgtrust.core.keys.armor import ArmorType, decode_armor
from pkgtrust.core.keys.identities import parse_key_identities
from pkgtrust.exceptions import KeyImportError
from pkgtrust.remote.downloader import FileDownloader

logger = logging.getLogger(__name__)

FILE_SCHEME = "file://"
SHORT_KEY_ID_LENGTH = 8

_URL_RE = re.compile(r"^[A-Za-z][A-Za-z0-9+.-]*://")


def is_url(location: str) -> bool:
    """Return True if ``location`` starts with a ``scheme://`` prefix."""
    return _URL_RE.match(location) is not None


def short_key_id(key_id: str) -> str:
    """Return the last 8 characters of ``key_id``, or all of it if shorter."""
    return key_id[-SHORT_KEY_ID_LENGTH:]


@contextmanager
def _scratch_file(prefix: str) -> Iterator[Path]:
    fd, name = tempfile.mkstemp(prefix=prefix)
    os.close(fd)
    path = Path(name)
    try:
        yield path
    finally:
        path.unlink(missing_ok=True)


class KeyInfo:
    """Identity and packet data of one public key.

    Args:
        location: Local path, ``file://`` URI, or remote URL of an
            armored public key.
        config: Supplies download settings for remote keys.
        downloader: Downloader for remote keys; built from ``config``
            when omitted.

    Raises:
        FetchError: If a remote key cannot be downloaded.
        ArmorError: If the key material is malformed.
        KeyImportError: If the file is not an armored public key.
        OSError: If a local key file cannot be opened.
    """

    def __init__(
        self,
        location: str,
        config: TrustConfig | None = None,
        downloader: FileDownloader | None = None,
    ) -> None:
        self._location = location
        self._key_id = ""
        self._user_id = ""
        self._fingerprint = ""

        if is_url(location) and not location.startswith(FILE_SCHEME):
            if downloader is None:
                downloader = FileDownloader((config or TrustConfig()).download)
            with _scratch_file("pkgkey") as scratch:
                downloader.download(location, scratch)
                self._path = str(scratch)
                self._load(scratch)
        else:
            if location.startswith(FILE_SCHEME):
                self._path = location[len(FILE_SCHEME):]
            else:
                self._path = location
            self._load(Path(self._path))

    def _load(self, path: Path) -> None:
        with path.open("rb") as key_file:
            block = decode_armor(key_file)
        if block.type is not ArmorType.PUBKEY or not block.packets:
            raise KeyImportError(
                f'"{self._location}": key is not an armored public key.',
                self._location,
            )
        self._packet = block.packets

        with path.open("rb") as key_file:
            # Several keys in one file: the last one wins.
            for identity in parse_key_identities(key_file):
                self._key_id = identity.id
                self._user_id = identity.user_id
                self._fingerprint = identity.fingerprint
        logger.debug(
            "Loaded key %s (%s) from %s", self._key_id, self._user_id, self._location
        )

    @property
    def location(self) -> str:
        """Location reference the key was created from."""
        return self._location

    url = location

    @property
    def path(self) -> str:
        """Local path the key was read from."""
        return self._path

    @property
    def key_id(self) -> str:
        return self._key_id

    @property
    def user_id(self) -> str:
        return self._user_id

    @property
    def fingerprint(self) -> str:
        return self._fingerprint

    @property
    def packet(self) -> bytes:
        """Decoded OpenPGP packets of the key."""
        return self._packet

    @property
    def packet_length(self) -> int:
        return len(self._packet)

    def get_short_key_id(self) -> str:
        """Return the trust store lookup id: the last 8 characters of the key id."""
        return short_key_id(self._key_id)

    def __repr__(self) -> str:
        return f"KeyInfo(location={self._location!r}, key_id={self._key_id!r})"
