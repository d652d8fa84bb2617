"""Tests for KeyInfo construction.

Verifies:
    - Local path, file:// URI and remote URL resolution.
    - Identity fields and packet data are populated.
    - Non-public-key armor raises KeyImportError with the location.
    - Scratch files for remote keys are removed on success and failure.
    - Download failures propagate unchanged.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from pkgtrust.core.keys.armor import ArmorType
from pkgtrust.core.keys.descriptor import KeyInfo, is_url, short_key_id
from pkgtrust.exceptions import ArmorError, FetchError, KeyImportError
from tests.helpers import KeyMaterial, make_key


class _FakeDownloader:
    """Writes ``content`` to the destination, or raises ``error``."""

    def __init__(self, content: str = "", error: Exception | None = None) -> None:
        self.content = content
        self.error = error
        self.calls: list[tuple[str, Path]] = []

    def download(self, url: str, destination: Path) -> None:
        self.calls.append((url, Path(destination)))
        if self.error is not None:
            raise self.error
        Path(destination).write_text(self.content)


class TestIsUrl:
    """Tests for is_url."""

    @pytest.mark.parametrize(
        "location",
        ["https://example.com/key", "http://x/k", "file:///etc/pki/key", "ftp://mirror/key"],
    )
    def test_urls(self, location: str) -> None:
        assert is_url(location)

    @pytest.mark.parametrize("location", ["/etc/pki/key", "relative/key", "C:\\keys\\k", ""])
    def test_paths(self, location: str) -> None:
        assert not is_url(location)


class TestShortKeyId:
    """Short identifier used for trust store lookups."""

    def test_ten_characters(self) -> None:
        assert short_key_id("0123456789") == "23456789"

    def test_six_characters(self) -> None:
        assert short_key_id("ABCDEF") == "ABCDEF"

    def test_exactly_eight(self) -> None:
        assert short_key_id("773DD1BA") == "773DD1BA"

    def test_empty(self) -> None:
        assert short_key_id("") == ""

    def test_key_info_uses_last_eight(self, key_file: Path, key_material: KeyMaterial) -> None:
        key = KeyInfo(str(key_file))
        assert key.get_short_key_id() == key_material.key_id[-8:]


class TestLocalKeys:
    """Keys read from the local filesystem."""

    def test_plain_path(self, key_file: Path, key_material: KeyMaterial) -> None:
        key = KeyInfo(str(key_file))
        assert key.location == str(key_file)
        assert key.url == str(key_file)
        assert key.path == str(key_file)
        assert key.key_id == key_material.key_id
        assert key.user_id == key_material.user_id
        assert key.fingerprint == key_material.fingerprint
        assert key.packet == key_material.packets
        assert key.packet_length == len(key_material.packets)

    def test_file_uri(self, key_file: Path, key_material: KeyMaterial) -> None:
        key = KeyInfo(f"file://{key_file}")
        assert key.path == str(key_file)
        assert key.location == f"file://{key_file}"
        assert key.key_id == key_material.key_id

    def test_last_identity_wins(self, tmp_path: Path) -> None:
        first, second = make_key(1, "First <1@x>"), make_key(2, "Second <2@x>")
        path = tmp_path / "two-keys.asc"
        path.write_text(first.armored() + second.armored())
        key = KeyInfo(str(path))
        assert key.key_id == second.key_id
        assert key.user_id == "Second <2@x>"
        # Packet data comes from the first armor block.
        assert key.packet == first.packets

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(OSError):
            KeyInfo(str(tmp_path / "absent.asc"))


class TestRejectedKeys:
    """Input that is not an armored public key."""

    def test_signature_armor(self, tmp_path: Path, key_material: KeyMaterial) -> None:
        path = key_material.write(tmp_path / "key.sig", ArmorType.SIGNATURE)
        with pytest.raises(KeyImportError) as excinfo:
            KeyInfo(str(path))
        assert excinfo.value.location == str(path)
        assert str(path) in str(excinfo.value)

    def test_secret_key_armor(self, tmp_path: Path, key_material: KeyMaterial) -> None:
        path = key_material.write(tmp_path / "secret.asc", ArmorType.SECKEY)
        with pytest.raises(KeyImportError):
            KeyInfo(str(path))

    def test_binary_key_is_not_armored(self, tmp_path: Path, key_material: KeyMaterial) -> None:
        path = tmp_path / "key.gpg"
        path.write_bytes(key_material.packets)
        with pytest.raises(KeyImportError, match="not an armored public key"):
            KeyInfo(str(path))

    def test_plain_text_is_not_a_key(self, tmp_path: Path) -> None:
        path = tmp_path / "notakey.txt"
        path.write_text("hello, this is not a key\n")
        with pytest.raises(KeyImportError, match="not an armored public key") as excinfo:
            KeyInfo(str(path))
        assert excinfo.value.location == str(path)

    def test_empty_file(self, tmp_path: Path) -> None:
        path = tmp_path / "empty.asc"
        path.write_bytes(b"")
        with pytest.raises(KeyImportError):
            KeyInfo(str(path))

    def test_malformed_armor(self, tmp_path: Path, key_material: KeyMaterial) -> None:
        path = tmp_path / "broken.asc"
        path.write_text(key_material.armored().replace("-----END PGP PUBLIC KEY BLOCK-----", ""))
        with pytest.raises(ArmorError):
            KeyInfo(str(path))


class TestRemoteKeys:
    """Keys fetched through the downloader."""

    def test_download_and_parse(self, key_material: KeyMaterial) -> None:
        downloader = _FakeDownloader(key_material.armored())
        key = KeyInfo("https://example.com/RPM-GPG-KEY", downloader=downloader)
        assert key.key_id == key_material.key_id
        assert key.location == "https://example.com/RPM-GPG-KEY"
        url, scratch = downloader.calls[0]
        assert url == "https://example.com/RPM-GPG-KEY"
        assert scratch.name.startswith("pkgkey")

    def test_scratch_removed_on_success(self, key_material: KeyMaterial) -> None:
        downloader = _FakeDownloader(key_material.armored())
        KeyInfo("https://example.com/key", downloader=downloader)
        assert not downloader.calls[0][1].exists()

    def test_scratch_removed_on_rejection(self, key_material: KeyMaterial) -> None:
        downloader = _FakeDownloader(key_material.armored(ArmorType.SIGNATURE))
        with pytest.raises(KeyImportError) as excinfo:
            KeyInfo("https://example.com/key.sig", downloader=downloader)
        assert excinfo.value.location == "https://example.com/key.sig"
        assert not downloader.calls[0][1].exists()

    def test_scratch_removed_on_parse_error(self) -> None:
        downloader = _FakeDownloader("-----BEGIN PGP PUBLIC KEY BLOCK-----\n\nQUJD\n")
        with pytest.raises(ArmorError):
            KeyInfo("https://example.com/key", downloader=downloader)
        assert not downloader.calls[0][1].exists()

    def test_fetch_error_propagates(self) -> None:
        error = FetchError("HTTP 404 from https://example.com/key", "https://example.com/key")
        downloader = _FakeDownloader(error=error)
        with pytest.raises(FetchError) as excinfo:
            KeyInfo("https://example.com/key", downloader=downloader)
        assert excinfo.value is error
        assert not downloader.calls[0][1].exists()

    def test_file_uri_skips_downloader(self, key_file: Path) -> None:
        downloader = _FakeDownloader(error=AssertionError("must not download"))
        KeyInfo(f"file://{key_file}", downloader=downloader)
        assert downloader.calls == []
