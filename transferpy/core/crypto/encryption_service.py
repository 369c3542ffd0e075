"""
Encryption service.

Encrypts content for the upload pipeline: symmetric (passphrase) when no
key is selected, public-key encryption to exactly the selected keys
otherwise. Failures never fall back to plaintext.
"""
from pathlib import Path
from typing import Callable, FrozenSet, Iterable, Optional, Union

import aiofiles
from cryptography.exceptions import UnsupportedAlgorithm

from ..exceptions import EncryptionError, EncryptionErrorKind
from ..keyring import KeyRecord, KeyringIndex
from ..logging import get_logger
from .envelope import EnvelopeEngine

logger = get_logger('transferpy.crypto')

PassphraseProvider = Callable[[], Optional[str]]

# Exceptions the engine raises for bad keys or data
ENGINE_ERRORS = (ValueError, TypeError, UnsupportedAlgorithm)


class EncryptionService:
    """
    High-level encryption service.

    The passphrase provider is the interactive collaborator asked for a
    passphrase in symmetric mode; returning None or "" (or raising) aborts.

    Example:
        >>> service = EncryptionService(index, passphrase_provider=lambda: "secret")
        >>> ciphertext = service.encrypt(b"hello")  # symmetric
        >>> keys = service.resolve_recipients(["Ann - ann@example.com - 3F9A..."])
        >>> ciphertext = service.encrypt(b"hello", keys)
    """

    def __init__(
        self,
        keyring_index: Optional[KeyringIndex] = None,
        passphrase_provider: Optional[PassphraseProvider] = None,
        engine: Optional[EnvelopeEngine] = None
    ):
        """
        Initialize encryption service.

        Args:
            keyring_index: Index used to resolve recipient references
            passphrase_provider: Callback returning the symmetric passphrase
            engine: Encryption engine (EnvelopeEngine by default)
        """
        self._index = keyring_index
        self._passphrase_provider = passphrase_provider
        self._engine = engine or EnvelopeEngine()

    @property
    def keyring_index(self) -> Optional[KeyringIndex]:
        return self._index

    def resolve_recipients(self, references: Iterable[str]) -> FrozenSet[KeyRecord]:
        """
        Turn reference strings (or fingerprints) into key records.

        The keyring index is built on first use.

        Raises:
            KeyringError: If the keyring cannot be opened
            EncryptionError: UNKNOWN_RECIPIENT for a reference with no key
        """
        references = list(references)
        if not references:
            return frozenset()

        if self._index is None:
            raise EncryptionError(
                "Recipients requested but no keyring is configured",
                kind=EncryptionErrorKind.UNKNOWN_RECIPIENT
            )
        self._index.ensure_loaded()

        keys = set()
        for reference in references:
            record = self._index.lookup(reference)
            if record is None:
                raise EncryptionError(
                    f"No key matches '{reference}'",
                    kind=EncryptionErrorKind.UNKNOWN_RECIPIENT
                )
            keys.add(record)
        return frozenset(keys)

    def encrypt(self, plaintext: bytes, keys: Iterable[KeyRecord] = ()) -> bytes:
        """
        Encrypt a byte buffer.

        Args:
            plaintext: Content to encrypt
            keys: Recipients; empty means symmetric mode

        Returns:
            Ciphertext bytes

        Raises:
            EncryptionError: NO_PASSPHRASE or BACKEND_FAILURE
        """
        recipients = sorted(keys, key=lambda k: k.fingerprint)

        if not recipients:
            passphrase = self._ask_passphrase()
            if not passphrase:
                raise EncryptionError(
                    "No passphrase supplied for symmetric encryption",
                    kind=EncryptionErrorKind.NO_PASSPHRASE
                )
            logger.debug(f"Encrypting {len(plaintext)} bytes with a passphrase")
            return self._run(self._engine.encrypt_symmetric, plaintext, passphrase)

        logger.debug(
            f"Encrypting {len(plaintext)} bytes to "
            f"{', '.join(k.fingerprint[-16:] for k in recipients)}"
        )
        return self._run(self._engine.encrypt_to_recipients, plaintext, recipients)

    async def encrypt_file(
        self,
        source: Union[str, Path],
        destination: Union[str, Path],
        keys: Iterable[KeyRecord] = ()
    ) -> Path:
        """
        Encrypt a file into another file.

        Both sides are handled as opaque binary; the destination is
        truncated before writing.

        Returns:
            Destination path
        """
        destination = Path(destination)
        async with aiofiles.open(source, 'rb') as f:
            plaintext = await f.read()

        ciphertext = self.encrypt(plaintext, keys)

        async with aiofiles.open(destination, 'wb') as f:
            await f.write(ciphertext)
        return destination

    def decrypt(
        self,
        ciphertext: bytes,
        passphrase: Optional[str] = None,
        private_keys: Optional[Iterable[KeyRecord]] = None
    ) -> bytes:
        """
        Decrypt content produced by :meth:`encrypt`.

        Args:
            ciphertext: Envelope bytes
            passphrase: Passphrase for symmetric content (asked from the
                provider when missing)
            private_keys: Keys to try; defaults to the keyring's secret keys

        Raises:
            EncryptionError: BACKEND_FAILURE on wrong key, passphrase or data
        """
        recipients = self._run(self._engine.recipients, ciphertext)

        if not recipients:
            if passphrase is None:
                passphrase = self._ask_passphrase()
            if not passphrase:
                raise EncryptionError(
                    "No passphrase supplied for decryption",
                    kind=EncryptionErrorKind.NO_PASSPHRASE
                )
            return self._run(self._engine.decrypt, ciphertext, passphrase=passphrase)

        if private_keys is None:
            private_keys = []
            if self._index is not None:
                self._index.ensure_loaded()
                private_keys = [k for k in self._index.records() if k.has_secret]
        return self._run(self._engine.decrypt, ciphertext, private_keys=list(private_keys))

    def _ask_passphrase(self) -> Optional[str]:
        if self._passphrase_provider is None:
            return None
        try:
            return self._passphrase_provider()
        except Exception as e:
            # Closed or aborted prompts (EOFError, click Abort)
            raise EncryptionError(
                "Passphrase prompt aborted",
                kind=EncryptionErrorKind.NO_PASSPHRASE,
                detail=str(e) or type(e).__name__
            ) from e

    def _run(self, operation, *args, **kwargs):
        try:
            return operation(*args, **kwargs)
        except ENGINE_ERRORS as e:
            logger.error(f"Encryption engine failure: {e}")
            raise EncryptionError(
                f"Encryption engine failure: {e}",
                kind=EncryptionErrorKind.BACKEND_FAILURE,
                detail=str(e)
            ) from e
