"""pkgtrust exception hierarchy.

All public exceptions inherit from PkgTrustError, giving callers a single
base class to catch when they want to handle any pkgtrust-specific failure
without swallowing unrelated errors.

A failed signature is not an exception. ``SignatureVerifier`` reports it
as a ``CheckResult`` value; the classes below cover setup and input faults
only.
"""


class PkgTrustError(Exception):
    """Base exception for all pkgtrust errors."""


class ConfigError(PkgTrustError):
    """Raised when the configuration cannot be loaded.

    Covers missing or unreadable files, invalid YAML, and values of
    the wrong type.
    """


class FetchError(PkgTrustError):
    """Raised when remote key material cannot be downloaded.

    Covers HTTP error statuses, timeouts, and transport failures.

    Attributes:
        url: The URL that could not be fetched.
    """

    def __init__(self, message: str, url: str) -> None:
        super().__init__(message)
        self.url = url


class ArmorError(PkgTrustError):
    """Raised for malformed key material.

    Covers bad base64 payloads, CRC-24 checksum mismatches, unterminated
    armor blocks, and truncated OpenPGP packet streams.
    """


class KeyImportError(PkgTrustError):
    """Raised when a key cannot be accepted into the trust store.

    Either the supplied armor block is not a public key, or the trust
    store rejected the import.

    Attributes:
        location: The original key location reference (path or URL).
    """

    def __init__(self, message: str, location: str) -> None:
        super().__init__(message)
        self.location = location


class SignatureCheckError(PkgTrustError):
    """Raised when a verification context cannot be created.

    Typically an invalid install root. Not retried.
    """


class EngineError(PkgTrustError):
    """Raised when the verification engine itself cannot run.

    Covers a missing engine executable and an unusable root directory.
    """
