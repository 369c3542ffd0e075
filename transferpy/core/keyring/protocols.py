"""
Keyring backend protocols.

Defines the interface the KeyringIndex reads keys through.
"""
from typing import Iterable, Protocol, runtime_checkable

from .models import KeyRecord


@runtime_checkable
class KeyringBackend(Protocol):
    """
    Protocol for keyring storage implementations.

    Implementations can use a directory of key files, an in-memory list,
    or any other store of identities.
    """

    def list_keys(self) -> Iterable[KeyRecord]:
        """
        Enumerate every key of the keyring.

        Returns:
            Iterable of key records

        Raises:
            KeyringError: BACKEND_UNAVAILABLE if the keyring cannot be opened
        """
        ...

    def save(self, record: KeyRecord) -> None:
        """
        Store a key record.

        Args:
            record: Key to add or replace (matched by fingerprint)
        """
        ...
