"""Signature verdicts and classification of engine diagnostics.

When the engine reports a failed check, the only detail it gives is one
text line per sub-check, after a header line naming the package::

    /path/to/dummy-signed-1.0.1-0.x86_64.rpm:
        Header V4 EdDSA/SHA512 Signature, key ID 773dd1ba: NOKEY
        Header RSA signature: NOTFOUND
        Header SHA256 digest: OK
        Payload SHA256 digest: OK
        RSA signature: NOTFOUND
        MD5 digest: OK

``classify_diagnostics`` folds such a sequence into one ``CheckResult``.
It is a pure function of the lines and the package path.

Rules, applied per line in order:

1. Skip the header line (starts with the package path).
2. ``": BAD"`` anywhere -> FAILED at once.
3. Ends with ``": NOKEY"`` / ``": NOTTRUSTED"`` / ``": NOTFOUND"`` ->
   remember it and continue.
4. Anything not ending with ``": OK"`` -> FAILED at once.

Afterwards: NOTTRUSTED beats NOKEY beats NOTFOUND. If every line read OK
the engine still said no, so the result is FAILED.
"""

from __future__ import annotations

from enum import Enum
from typing import Iterable


class CheckResult(Enum):
    """Outcome of one package signature check.

    Anything other than ``OK`` means the package must not be installed;
    the variants only refine the message shown to the user.
    """

    OK = "ok"
    FAILED = "failed"
    FAILED_NOT_TRUSTED = "failed_not_trusted"
    FAILED_KEY_MISSING = "failed_key_missing"
    FAILED_NOT_SIGNED = "failed_not_signed"

    @property
    def is_ok(self) -> bool:
        return self is CheckResult.OK


_DESCRIPTIONS: dict[CheckResult, str] = {
    CheckResult.OK: "signature is valid",
    CheckResult.FAILED: "signature verification failed",
    CheckResult.FAILED_NOT_TRUSTED: "signing key is not trusted",
    CheckResult.FAILED_KEY_MISSING: "signing key is not installed",
    CheckResult.FAILED_NOT_SIGNED: "package is not signed",
}

MARKER_BAD = ": BAD"
MARKER_NOKEY = ": NOKEY"
MARKER_NOTTRUSTED = ": NOTTRUSTED"
MARKER_NOTFOUND = ": NOTFOUND"
MARKER_OK = ": OK"


def describe_result(result: CheckResult) -> str:
    """Return a short human readable message for ``result``."""
    return _DESCRIPTIONS[result]


def classify_diagnostics(lines: Iterable[str], package_path: str) -> CheckResult:
    """Fold the diagnostics of a failed check into a single verdict.

    Only call this when the engine reported failure: it never returns
    ``CheckResult.OK``.

    Args:
        lines: Diagnostic lines in emission order.
        package_path: Path passed to the engine; identifies the header
            line.

    Returns:
        One of the ``FAILED*`` verdicts.
    """
    missing_key = False
    not_trusted = False
    not_signed = False

    for line in lines:
        if line.startswith(package_path):
            continue
        if MARKER_BAD in line:
            return CheckResult.FAILED
        if line.endswith(MARKER_NOKEY):
            missing_key = True
        elif line.endswith(MARKER_NOTTRUSTED):
            not_trusted = True
        elif line.endswith(MARKER_NOTFOUND):
            not_signed = True
        elif not line.endswith(MARKER_OK):
            return CheckResult.FAILED

    if not_trusted:
        return CheckResult.FAILED_NOT_TRUSTED
    if missing_key:
        return CheckResult.FAILED_KEY_MISSING
    if not_signed:
        return CheckResult.FAILED_NOT_SIGNED
    # The engine failed although every line read OK.
    return CheckResult.FAILED
