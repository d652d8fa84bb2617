"""Package signature verification and key import.

``SignatureVerifier`` is the entry point used by installers:

1. **Policy gate** -- command-line packages follow ``localpkg_gpgcheck``,
   repository packages follow their repository's ``gpgcheck``. When the
   flag is off the package passes without touching the engine.
2. **Engine run** -- under an exclusive diagnostic capture, with the
   engine's verbosity raised to INFO so that per-check lines are emitted.
3. **Classification** -- on failure, the captured lines are folded into a
   ``CheckResult`` by ``classify_diagnostics``.

Key management (``is_key_present``, ``import_key``) goes through the same
diagnostic lock, forwarding engine messages to the log.
"""

from __future__ import annotations

import logging

from pkgtrust.config import TrustPolicy
from pkgtrust.core import truststore
from pkgtrust.core.classifier import CheckResult, classify_diagnostics
from pkgtrust.core.diagnostics import DiagnosticChannel, capture_diagnostics
from pkgtrust.core.keys.descriptor import KeyInfo
from pkgtrust.engine.base import DiagnosticLevel, TrustStoreContext, VerificationEngine
from pkgtrust.exceptions import EngineError, SignatureCheckError
from pkgtrust.package import Package

logger = logging.getLogger(__name__)


def _run_engine(channel: DiagnosticChannel, context: TrustStoreContext, package_path: str) -> bool:
    with channel.verbosity(DiagnosticLevel.INFO):
        return channel.engine.verify(context, package_path)


class SignatureVerifier:
    """Checks package signatures and manages the keys they are checked with.

    Args:
        policy: Supplies the check flags and the install root, usually a
            ``TrustConfig``.
        engine: Verification engine. Defaults to ``RpmKeysEngine``.
    """

    def __init__(self, policy: TrustPolicy, engine: VerificationEngine | None = None) -> None:
        if engine is None:
            from pkgtrust.engine.rpmkeys import RpmKeysEngine

            engine = RpmKeysEngine()
        self._policy = policy
        self._engine = engine

    @property
    def engine(self) -> VerificationEngine:
        return self._engine

    def _create_context(self) -> TrustStoreContext:
        root_dir = self._policy.install_root()
        try:
            return self._engine.create_context(root_dir)
        except EngineError as exc:
            raise SignatureCheckError(
                f'Failed to set verification root directory "{root_dir}": {exc}'
            ) from exc

    def _is_check_required(self, package: Package) -> bool:
        if package.source.is_commandline:
            return self._policy.is_local_check_enabled()
        return self._policy.is_remote_source_check_enabled(package.source)

    def check_signature(self, package: Package) -> CheckResult:
        """Verify the signature of ``package`` as the policy requires.

        Returns:
            ``CheckResult.OK`` if the check passed or is not required,
            otherwise the ``FAILED*`` variant describing why.

        Raises:
            SignatureCheckError: If the verification context cannot be
                created.
        """
        if not self._is_check_required(package):
            logger.debug("Signature check disabled for %s (%s)", package.path, package.source.id)
            return CheckResult.OK

        with capture_diagnostics(self._engine) as channel:
            context = self._create_context()
            if _run_engine(channel, context, package.path):
                logger.info("Signature OK: %s", package.path)
                return CheckResult.OK
            lines = channel.drain()
            logger.debug("Engine diagnostics for %s: %s", package.path, lines)
            result = classify_diagnostics(lines, package.path)

        logger.info("Signature check of %s: %s", package.path, result.name)
        return result

    def is_key_present(self, key: KeyInfo) -> bool:
        """Return True if ``key`` is in the trust store."""
        return truststore.is_present(self._engine, self._create_context, key)

    def import_key(self, key: KeyInfo) -> bool:
        """Import ``key`` into the trust store if it is not there yet.

        Returns:
            True if imported, False if the key was already present.

        Raises:
            KeyImportError: If the trust store rejects the key.
            SignatureCheckError: If the trust store context cannot be
                created.
        """
        with capture_diagnostics(self._engine, collect=False) as channel:
            store = self._create_context()
            return truststore.import_key(channel, store, key)
