"""
In-memory keyring implementation.

Provides non-persistent key storage for testing and temporary use.
"""
from typing import Dict, Iterable, List, Optional

from ..exceptions import KeyringError, KeyringErrorKind
from .models import KeyRecord
from .protocols import KeyringBackend


class MemoryKeyring(KeyringBackend):
    """
    In-memory keyring.

    Keys are lost when the object is destroyed. ``available`` can be
    switched off to simulate a keyring that cannot be opened.

    Example:
        >>> keyring = MemoryKeyring([KeyRecord.generate("Ann", "ann@example.com")])
        >>> len(list(keyring.list_keys()))
        1
    """

    def __init__(self, records: Optional[Iterable[KeyRecord]] = None):
        """Initialize memory keyring."""
        self._records: Dict[str, KeyRecord] = {}
        self.available = True
        for record in records or ():
            self.save(record)

    def list_keys(self) -> List[KeyRecord]:
        if not self.available:
            raise KeyringError(
                "Keyring is unavailable",
                kind=KeyringErrorKind.BACKEND_UNAVAILABLE
            )
        return list(self._records.values())

    def save(self, record: KeyRecord) -> None:
        self._records[record.fingerprint] = record

    def remove(self, fingerprint: str) -> None:
        """Delete a key, ignoring unknown fingerprints."""
        self._records.pop(fingerprint.upper(), None)
