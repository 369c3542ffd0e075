"""
Keyring index.

Caches the keys of a keyring backend by fingerprint and exposes them
through human readable reference strings. The cache is only rebuilt on
an explicit refresh; the backend may change without the index knowing.
"""
import threading
from typing import Dict, List, Optional

from ..logging import get_logger
from .models import DEFAULT_SEPARATOR, KeyRecord
from .protocols import KeyringBackend

logger = get_logger('transferpy.keyring')


class KeyringIndex:
    """
    Process-wide cache of keyring identities.

    Records are keyed by full fingerprint. Reference strings are display
    labels mapped onto fingerprints; lookups accept either.

    Example:
        >>> index = KeyringIndex(DirectoryKeyring("~/.config/transferpy/keyring"))
        >>> index.refresh()
        >>> record = index.lookup(index.all_references()[0])
    """

    def __init__(self, backend: KeyringBackend, separator: str = DEFAULT_SEPARATOR):
        """
        Initialize the index. Nothing is read until first use.

        Args:
            backend: Keyring to enumerate
            separator: Separator between name, email and fingerprint
        """
        self._backend = backend
        self._separator = separator
        self._lock = threading.RLock()
        self._records: Dict[str, KeyRecord] = {}
        self._references: Dict[str, str] = {}
        self._loaded = False

    @property
    def backend(self) -> KeyringBackend:
        return self._backend

    @property
    def loaded(self) -> bool:
        """Whether the index has been built."""
        return self._loaded

    def refresh(self) -> None:
        """
        Discard the cache and enumerate the backend again.

        Raises:
            KeyringError: BACKEND_UNAVAILABLE from the backend; the
                previous cache is kept in that case
        """
        keys = list(self._backend.list_keys())

        records: Dict[str, KeyRecord] = {}
        references: Dict[str, str] = {}
        for record in keys:
            if record.fingerprint in records:
                logger.warning(f"Key {record.fingerprint} listed twice, using the last one")
            records[record.fingerprint] = record
            references[record.reference(self._separator)] = record.fingerprint

        with self._lock:
            self._records = records
            self._references = references
            self._loaded = True
        logger.info(f"Keyring index built: {len(records)} keys")

    def ensure_loaded(self) -> None:
        """Build the index on first use."""
        with self._lock:
            if not self._loaded:
                self.refresh()

    def lookup(self, reference: str) -> Optional[KeyRecord]:
        """
        Find a key by reference string or full fingerprint.

        Args:
            reference: Reference label or fingerprint

        Returns:
            KeyRecord or None if no such key is cached
        """
        with self._lock:
            fingerprint = self._references.get(reference)
            if fingerprint is None:
                fingerprint = reference.strip().upper()
            return self._records.get(fingerprint)

    def all_references(self) -> List[str]:
        """Returns every reference string (no ordering guarantee)."""
        with self._lock:
            return list(self._references)

    def records(self) -> List[KeyRecord]:
        """Returns every cached key record."""
        with self._lock:
            return list(self._records.values())
