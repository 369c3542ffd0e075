"""
transferpy - Encrypt-then-upload client for transfer.sh style services.

Usage:
    >>> from transferpy import TransferClient
    >>>
    >>> async with TransferClient() as client:
    ...     result = await client.upload_file("notes.txt")
    ...     print(result.url)
"""
import logging
from .client import TransferClient

# Configuration
from .core.config import TransferConfig

# Pipeline values
from .core.upload import (
    EncryptionRequest,
    ResultSink,
    UploadCoordinator,
    UploadHandle,
    UploadJob,
    UploadResult,
    UploadStatus,
)

# Agents and keys
from .core.agent import AgentVariant, UploadAgent, UploadAgentSpec
from .core.keyring import DirectoryKeyring, KeyRecord, KeyringIndex, MemoryKeyring
from .core.crypto import EncryptionService

# Errors
from .core.exceptions import (
    AgentError,
    ConfigurationError,
    EncryptionError,
    KeyringError,
    TransferError,
)

__version__ = '1.0.0'


def setup_logging(level=logging.INFO):
    """
    Configure logging for transferpy modules.

    Sets the level of all transferpy loggers and keeps propagation on,
    so the root logger's handlers print them.

    Args:
        level: Logging level (default: logging.INFO)
    """
    loggers = [
        'transferpy',
        'transferpy.client',
        'transferpy.agent',
        'transferpy.keyring',
        'transferpy.crypto',
        'transferpy.upload.coordinator',
        'transferpy.upload.sink',
    ]

    for logger_name in loggers:
        logger = logging.getLogger(logger_name)
        logger.setLevel(level)
        logger.propagate = True


__all__ = [
    'TransferClient',
    'TransferConfig',
    'EncryptionRequest',
    'ResultSink',
    'UploadCoordinator',
    'UploadHandle',
    'UploadJob',
    'UploadResult',
    'UploadStatus',
    'AgentVariant',
    'UploadAgent',
    'UploadAgentSpec',
    'DirectoryKeyring',
    'KeyRecord',
    'KeyringIndex',
    'MemoryKeyring',
    'EncryptionService',
    'TransferError',
    'ConfigurationError',
    'AgentError',
    'KeyringError',
    'EncryptionError',
    'setup_logging',
]
