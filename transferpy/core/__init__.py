"""Core building blocks: agent, keyring, crypto and the upload pipeline."""
from .config import TransferConfig
from .exceptions import (
    AgentError,
    AgentErrorKind,
    ConfigurationError,
    EncryptionError,
    EncryptionErrorKind,
    KeyringError,
    KeyringErrorKind,
    TransferError,
)

__all__ = [
    'TransferConfig',
    'TransferError',
    'ConfigurationError',
    'AgentError',
    'AgentErrorKind',
    'KeyringError',
    'KeyringErrorKind',
    'EncryptionError',
    'EncryptionErrorKind',
]
