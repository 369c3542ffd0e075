"""
TransferClient - High-level async client for transfer.sh style services.

Example:
    >>> async with TransferClient() as client:
    ...     result = await client.upload_file("notes.txt")
    ...     print(result.url)
"""
from pathlib import Path
from typing import Iterable, List, Optional, Union

from .core.agent import UploadAgent, UploadAgentSpec, detect_agent_spec
from .core.config import TransferConfig
from .core.crypto import EncryptionService, EnvelopeEngine, PassphraseProvider
from .core.keyring import DirectoryKeyring, KeyRecord, KeyringBackend, KeyringIndex
from .core.logging import get_logger
from .core.upload import (
    DEFAULT_BUFFER_NAME,
    AgentProtocol,
    EncryptionRequest,
    Notifier,
    ResultSink,
    UploadCoordinator,
    UploadHandle,
    UploadJob,
    UploadResult,
)

logger = get_logger('transferpy.client')

Submission = Union[UploadResult, UploadHandle]


class TransferClient:
    """
    High-level client wiring agent, keyring, encryption and result sink.

    Every upload method returns an UploadResult, or an UploadHandle when
    called with ``background=True``. Remote filenames get the configured
    prefix and suffix.
    """

    def __init__(
        self,
        config: Optional[TransferConfig] = None,
        agent: Optional[AgentProtocol] = None,
        keyring: Optional[KeyringBackend] = None,
        passphrase_provider: Optional[PassphraseProvider] = None,
        notifier: Optional[Notifier] = None,
        engine: Optional[EnvelopeEngine] = None
    ):
        """
        Initialize client.

        Args:
            config: Client configuration (defaults if None)
            agent: Custom transfer agent (detected from config if None)
            keyring: Keyring backend (directory keyring from config if None)
            passphrase_provider: Asked for the passphrase in symmetric mode
            notifier: Receives the upload notifications
            engine: Custom encryption engine

        Raises:
            ConfigurationError: If no agent can be configured
            AgentError: If the configured agent executable does not exist
        """
        self.config = config or TransferConfig.default()

        if agent is None:
            spec = detect_agent_spec(self.config.agent_command, self.config.agent_arguments)
            agent = UploadAgent(spec)
        self._agent = agent

        backend = keyring or DirectoryKeyring(self.config.keyring_path)
        self._index = KeyringIndex(backend, self.config.key_reference_separator)
        self._encryption = EncryptionService(self._index, passphrase_provider, engine)
        self._sink = ResultSink(notifier, self.config.state_file)
        self._coordinator = UploadCoordinator(
            agent=self._agent,
            base_url=self.config.base_url,
            temp_file_location=self.config.temp_file_location,
            encryption_service=self._encryption,
            sink=self._sink
        )
        self._pending: List[UploadHandle] = []

    @property
    def agent_spec(self) -> Optional[UploadAgentSpec]:
        """Returns the agent's command and template, if it exposes them."""
        return getattr(self._agent, 'spec', None)

    @property
    def coordinator(self) -> UploadCoordinator:
        return self._coordinator

    @property
    def encryption(self) -> EncryptionService:
        return self._encryption

    @property
    def keyring_index(self) -> KeyringIndex:
        return self._index

    @property
    def last_url(self) -> Optional[str]:
        """URL of the last successful upload."""
        return self._sink.last_url

    async def __aenter__(self) -> 'TransferClient':
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.wait_pending()

    # Uploads

    async def upload_file(
        self,
        path: Union[str, Path],
        remote_filename: Optional[str] = None,
        background: bool = False
    ) -> Submission:
        """
        Upload an existing file.

        Args:
            path: Local file
            remote_filename: Remote name (defaults to the file's base name)
            background: Return a handle instead of waiting

        Example:
            >>> result = await client.upload_file("/tmp/notes.txt")
            >>> result.remote_filename
            'notes.txt'
        """
        path = Path(path).expanduser()
        return await self._submit(UploadJob(
            source=path,
            remote_filename=self.config.remote_filename(remote_filename or path.name),
            background=background
        ))

    async def upload_bytes(
        self,
        data: bytes,
        remote_filename: Optional[str] = None,
        background: bool = False
    ) -> Submission:
        """
        Upload an in-memory buffer (a region or a whole unsaved buffer).

        The bytes are written to a job-private temp file first.
        """
        return await self._submit(UploadJob(
            source=bytes(data),
            remote_filename=self.config.remote_filename(remote_filename or DEFAULT_BUFFER_NAME),
            background=background
        ))

    async def encrypt_and_upload(
        self,
        source: Union[bytes, str, Path],
        recipients: Union[str, Iterable[str]] = (),
        remote_filename: Optional[str] = None,
        background: bool = False
    ) -> Submission:
        """
        Encrypt content, then upload the ciphertext.

        Args:
            source: Bytes or path of a local file
            recipients: Key reference(s) or fingerprint(s); none = passphrase mode
            remote_filename: Remote name
            background: Return a handle instead of waiting
        """
        if isinstance(recipients, str):
            recipients = [recipients]
        if isinstance(source, (bytes, bytearray)):
            source = bytes(source)
            default_name = DEFAULT_BUFFER_NAME
        else:
            source = Path(source).expanduser()
            default_name = source.name

        return await self._submit(UploadJob(
            source=source,
            remote_filename=self.config.remote_filename(remote_filename or default_name),
            background=background,
            encryption=EncryptionRequest(frozenset(recipients))
        ))

    async def wait_pending(self) -> List[UploadResult]:
        """Wait for every background job started by this client."""
        pending, self._pending = self._pending, []
        return [await handle for handle in pending]

    async def _submit(self, job: UploadJob) -> Submission:
        if job.background:
            handle = self._coordinator.upload_async(job)
            self._pending.append(handle)
            return handle
        return await self._coordinator.upload(job)

    # Keyring

    def refresh_keyring(self) -> None:
        """Re-read the keyring into the index."""
        self._index.refresh()

    def list_key_references(self) -> List[str]:
        """Reference strings of every known key (index built on first use)."""
        self._index.ensure_loaded()
        return self._index.all_references()

    def generate_key(self, name: str, email: str, key_size: int = 3072) -> KeyRecord:
        """
        Create a key pair, store it in the keyring and refresh the index.

        Returns:
            The new key record
        """
        record = KeyRecord.generate(name, email, key_size=key_size)
        self._index.backend.save(record)
        self._index.refresh()
        logger.info(f"Generated key {record.reference(self.config.key_reference_separator)}")
        return record
