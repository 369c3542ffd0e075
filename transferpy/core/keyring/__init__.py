"""
Keyring module.

Local store of identities used as encryption recipients.
"""
from .models import DEFAULT_SEPARATOR, KeyRecord, compute_fingerprint
from .protocols import KeyringBackend
from .directory_keyring import DirectoryKeyring
from .memory_keyring import MemoryKeyring
from .index import KeyringIndex

__all__ = [
    'DEFAULT_SEPARATOR',
    'KeyRecord',
    'compute_fingerprint',
    'KeyringBackend',
    'DirectoryKeyring',
    'MemoryKeyring',
    'KeyringIndex',
]
