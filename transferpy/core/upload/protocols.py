"""
Protocol definitions for upload module.

Defines the interfaces the coordinator depends on, so agents, encryption
and result handling can be swapped or mocked.
"""
from pathlib import Path
from typing import FrozenSet, Iterable, Protocol, Union

from ..keyring import KeyRecord
from .models import UploadResult


class AgentProtocol(Protocol):
    """Protocol for transfer agents."""

    async def invoke(self, local_path: Union[str, Path], remote_url: str) -> str:
        """
        Upload a local file.

        Args:
            local_path: File to send
            remote_url: Destination URL

        Returns:
            Response body (the public URL)
        """
        ...


class EncryptorProtocol(Protocol):
    """Protocol for the encryption step of the pipeline."""

    def resolve_recipients(self, references: Iterable[str]) -> FrozenSet[KeyRecord]:
        """Map reference strings to key records."""
        ...

    async def encrypt_file(
        self,
        source: Union[str, Path],
        destination: Union[str, Path],
        keys: Iterable[KeyRecord] = ()
    ) -> Path:
        """Encrypt source into destination."""
        ...


class ResultSinkProtocol(Protocol):
    """Protocol for result consumers."""

    def record(self, result: UploadResult) -> None:
        """Store and announce a job result. Must not raise."""
        ...
