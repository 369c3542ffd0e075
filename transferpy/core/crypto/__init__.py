"""Crypto module - envelope engine and the encryption service."""
from .key_derivation import PasswordKeyDeriver
from .envelope import EnvelopeEngine
from .encryption_service import EncryptionService, PassphraseProvider

__all__ = [
    'PasswordKeyDeriver',
    'EnvelopeEngine',
    'EncryptionService',
    'PassphraseProvider',
]
