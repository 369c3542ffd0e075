"""
Upload module.

Resolves content, optionally encrypts it, hands it to the transfer agent
and records the result.

Example:
    >>> from transferpy.core.upload import UploadCoordinator, UploadJob
    >>> coordinator = UploadCoordinator(agent, "https://transfer.sh", "/tmp/transferpy-upload")
    >>> result = await coordinator.upload(UploadJob(Path("notes.txt")))
    >>> print(result.url)
"""
from .models import (
    DEFAULT_BUFFER_NAME,
    EncryptionRequest,
    JobState,
    UploadJob,
    UploadResult,
    UploadStatus,
)
from .protocols import AgentProtocol, EncryptorProtocol, ResultSinkProtocol
from .sink import Notifier, ResultSink
from .coordinator import UploadCoordinator, UploadHandle

__all__ = [
    'DEFAULT_BUFFER_NAME',
    'EncryptionRequest',
    'JobState',
    'UploadJob',
    'UploadResult',
    'UploadStatus',
    'AgentProtocol',
    'EncryptorProtocol',
    'ResultSinkProtocol',
    'Notifier',
    'ResultSink',
    'UploadCoordinator',
    'UploadHandle',
]
