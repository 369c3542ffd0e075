"""
Data models for upload module.

Uses dataclasses for job and result values.
"""
import uuid
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import FrozenSet, Optional, Union

DEFAULT_BUFFER_NAME = "buffer"


class JobState(Enum):
    """Pipeline stages of a job."""
    RESOLVING = "resolving"
    ENCRYPTING = "encrypting"
    UPLOADING = "uploading"
    COMPLETED = "completed"
    FAILED = "failed"


class UploadStatus(Enum):
    """Final outcome of a job."""
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass(frozen=True)
class EncryptionRequest:
    """
    Asks for the content to be encrypted before upload.

    Attributes:
        recipients: Key references or fingerprints; empty = passphrase mode
    """
    recipients: FrozenSet[str] = frozenset()

    @property
    def symmetric(self) -> bool:
        return not self.recipients


@dataclass
class UploadJob:
    """
    One request to upload a piece of content.

    Attributes:
        source: Path of an existing file, or in-memory bytes
        remote_filename: Name on the remote side (prefix/suffix applied)
        background: Run without blocking the caller
        encryption: Optional encryption request
        job_id: Unique job identity, also used for temp file names
    """
    source: Union[Path, bytes]
    remote_filename: Optional[str] = None
    background: bool = False
    encryption: Optional[EncryptionRequest] = None
    job_id: str = field(default_factory=lambda: uuid.uuid4().hex)

    def __post_init__(self):
        if isinstance(self.source, str):
            self.source = Path(self.source)
        elif isinstance(self.source, bytearray):
            self.source = bytes(self.source)
        if self.remote_filename is None:
            self.remote_filename = self.default_filename()

    @property
    def from_memory(self) -> bool:
        """Whether the content is an in-memory buffer."""
        return isinstance(self.source, bytes)

    def default_filename(self) -> str:
        """Base name of the local file, or a fixed name for buffers."""
        if self.from_memory:
            return DEFAULT_BUFFER_NAME
        return self.source.name


@dataclass
class UploadResult:
    """
    Result of an upload job.

    Success means the agent exited with status 0 and printed a URL.

    Attributes:
        job_id: Job identity
        remote_filename: Name the content was uploaded as
        status: Completed or failed
        url: Public URL returned by the service
        exit_status: Agent exit status (None if the agent never ran)
        output: Raw agent output, also kept on failure for diagnostics
        error: The error that stopped the pipeline
        encrypted: Whether ciphertext was uploaded
    """
    job_id: str
    remote_filename: str
    status: UploadStatus
    url: Optional[str] = None
    exit_status: Optional[int] = None
    output: str = ""
    error: Optional[Exception] = None
    encrypted: bool = False

    @property
    def ok(self) -> bool:
        return self.status is UploadStatus.COMPLETED

    def raise_for_error(self) -> 'UploadResult':
        """Re-raise the pipeline error, if any. Returns self otherwise."""
        if self.error is not None:
            raise self.error
        return self

    @classmethod
    def completed(cls, job: UploadJob, url: str, encrypted: bool = False) -> 'UploadResult':
        return cls(
            job_id=job.job_id,
            remote_filename=job.remote_filename,
            status=UploadStatus.COMPLETED,
            url=url,
            exit_status=0,
            output=url,
            encrypted=encrypted
        )

    @classmethod
    def failed(cls, job: UploadJob, error: Exception) -> 'UploadResult':
        return cls(
            job_id=job.job_id,
            remote_filename=job.remote_filename,
            status=UploadStatus.FAILED,
            exit_status=getattr(error, 'exit_status', None),
            output=getattr(error, 'output', ""),
            error=error
        )
