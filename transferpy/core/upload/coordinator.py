"""
Upload coordinator.

Orchestrates the upload pipeline using injected dependencies:

    RESOLVING -> (ENCRYPTING) -> UPLOADING -> COMPLETED | FAILED

Any step failing short-circuits the rest. Nothing is retried.
"""
import asyncio
import dataclasses
from pathlib import Path
from typing import Dict, Optional, Union
from urllib.parse import quote

import aiofiles

from ..exceptions import (
    AgentError,
    AgentErrorKind,
    EncryptionError,
    EncryptionErrorKind,
    TransferError,
)
from ..logging import get_logger
from .models import JobState, UploadJob, UploadResult
from .protocols import AgentProtocol, EncryptorProtocol, ResultSinkProtocol
from .sink import ResultSink

logger = get_logger('transferpy.upload.coordinator')

# Errors that fail a job instead of escaping the coordinator
PIPELINE_ERRORS = (TransferError, OSError)


class UploadHandle:
    """
    Handle on a job running in the background.

    Await the handle (or :meth:`result`) to get the UploadResult. A job
    cancelled before its agent started still resolves to a failed
    result with ``AgentError(CANCELLED)``.
    """

    def __init__(self, job: UploadJob, task: 'asyncio.Task[UploadResult]'):
        self.job = job
        self._task = task

    @property
    def job_id(self) -> str:
        return self.job.job_id

    def done(self) -> bool:
        return self._task.done()

    def cancel(self) -> bool:
        """
        Request cancellation.

        A running agent process is terminated. Returns False if the job
        already finished.
        """
        return self._task.cancel()

    async def result(self) -> UploadResult:
        """Wait for the job and return its result."""
        try:
            return await self._task
        except asyncio.CancelledError:
            if not self._task.cancelled():
                raise
            return UploadResult.failed(self.job, _cancelled_error())

    def __await__(self):
        return self.result().__await__()


def _cancelled_error() -> AgentError:
    return AgentError("Upload cancelled", kind=AgentErrorKind.CANCELLED)


class UploadCoordinator:
    """
    Coordinates the upload of one job at a time per call.

    Jobs may run concurrently through :meth:`upload_async`; each job uses
    its own temp files, named after the job id.

    Example:
        >>> coordinator = UploadCoordinator(agent, "https://transfer.sh", "/tmp/transferpy-upload")
        >>> result = await coordinator.upload(UploadJob(Path("notes.txt")))
        >>> handle = coordinator.upload_async(UploadJob(b"hello", "hello.txt"))
        >>> result = await handle
    """

    def __init__(
        self,
        agent: AgentProtocol,
        base_url: str,
        temp_file_location: Union[str, Path],
        encryption_service: Optional[EncryptorProtocol] = None,
        sink: Optional[ResultSinkProtocol] = None
    ):
        """
        Initialize upload coordinator.

        Args:
            agent: Transfer agent
            base_url: Service URL the remote filename is appended to
            temp_file_location: Base path of temp files (job id is appended)
            encryption_service: Needed only for jobs asking for encryption
            sink: Receives every result (a logging ResultSink by default)
        """
        self._agent = agent
        self._base_url = base_url.rstrip('/')
        self._temp_location = Path(temp_file_location).expanduser()
        self._encryption = encryption_service
        self._sink = sink or ResultSink()
        self._states: Dict[str, JobState] = {}

    @property
    def sink(self) -> ResultSinkProtocol:
        return self._sink

    def remote_url(self, remote_filename: str) -> str:
        """Returns the upload URL for a remote filename."""
        return f"{self._base_url}/{quote(remote_filename, safe='/')}"

    def temp_path(self, job: UploadJob, suffix: str = '') -> Path:
        """Returns the job's private temp file path."""
        return Path(f"{self._temp_location}.{job.job_id}{suffix}")

    def job_state(self, job_id: str) -> Optional[JobState]:
        """Returns the pipeline state of a running job (None once it finished)."""
        return self._states.get(job_id)

    async def upload(self, job: UploadJob) -> UploadResult:
        """
        Run the whole pipeline and wait for it.

        Pipeline errors do not raise: they come back inside a failed
        result, which is also handed to the sink.

        Args:
            job: Upload job

        Returns:
            UploadResult (check ``ok`` or call ``raise_for_error()``)
        """
        try:
            result = await self._run(job)
        except PIPELINE_ERRORS as e:
            logger.error(f"Upload of '{job.remote_filename}' failed: {e}")
            self._enter(job, JobState.FAILED)
            result = UploadResult.failed(job, e)
        except asyncio.CancelledError:
            self._enter(job, JobState.FAILED)
            self._sink.record(UploadResult.failed(job, _cancelled_error()))
            raise
        finally:
            self._states.pop(job.job_id, None)

        self._sink.record(result)
        return result

    def upload_async(self, job: UploadJob) -> UploadHandle:
        """
        Schedule the pipeline on a background task.

        Must be called from a running event loop. The job is copied so
        later changes by the caller do not affect the running job.

        Returns:
            Handle to await or cancel
        """
        job = dataclasses.replace(job, background=True)
        task = asyncio.create_task(self.upload(job), name=f"upload-{job.job_id}")
        logger.debug(f"Scheduled background upload {job.job_id}")
        return UploadHandle(job, task)

    async def _run(self, job: UploadJob) -> UploadResult:
        self._enter(job, JobState.RESOLVING)
        source = await self._resolve(job)

        if job.encryption is not None:
            self._enter(job, JobState.ENCRYPTING)
            source = await self._encrypt(job, source)

        self._enter(job, JobState.UPLOADING)
        url = self.remote_url(job.remote_filename)
        logger.info(f"Uploading {source} to {url}")
        output = await self._agent.invoke(source, url)

        self._enter(job, JobState.COMPLETED)
        return UploadResult.completed(job, output, encrypted=job.encryption is not None)

    async def _resolve(self, job: UploadJob) -> Path:
        """Returns a local file holding the job's content."""
        if job.from_memory:
            path = self.temp_path(job)
            path.parent.mkdir(parents=True, exist_ok=True)
            # 'wb' truncates: stale content is never appended to
            async with aiofiles.open(path, 'wb') as f:
                await f.write(job.source)
            logger.debug(f"Wrote {len(job.source)} bytes to {path}")
            return path

        path = job.source
        if not path.exists():
            raise FileNotFoundError(f"File not found: {path}")
        if not path.is_file():
            raise IsADirectoryError(f"Path is not a file: {path}")
        return path

    async def _encrypt(self, job: UploadJob, source: Path) -> Path:
        if self._encryption is None:
            raise EncryptionError(
                "Encryption requested but no encryption service is configured",
                kind=EncryptionErrorKind.BACKEND_FAILURE
            )
        keys = self._encryption.resolve_recipients(job.encryption.recipients)
        destination = self.temp_path(job, '.enc')
        destination.parent.mkdir(parents=True, exist_ok=True)
        await self._encryption.encrypt_file(source, destination, keys)
        logger.debug(f"Encrypted {source} into {destination}")
        return destination

    def _enter(self, job: UploadJob, state: JobState) -> None:
        self._states[job.job_id] = state
        logger.debug(f"Job {job.job_id}: {state.value}")
