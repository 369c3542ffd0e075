"""
Directory keyring implementation.

Stores one JSON file per key, named after the fingerprint:

    ~/.config/transferpy/keyring/
        3F9A...C01B.json
        77D2...9E40.json
"""
import json
import os
from pathlib import Path
from typing import List, Union

from ..exceptions import KeyringError, KeyringErrorKind
from ..logging import get_logger
from .models import KeyRecord
from .protocols import KeyringBackend

logger = get_logger('transferpy.keyring')


class DirectoryKeyring(KeyringBackend):
    """
    Keyring stored as a directory of JSON key files.

    Example:
        >>> keyring = DirectoryKeyring("~/.config/transferpy/keyring")
        >>> keyring.save(KeyRecord.generate("Ann", "ann@example.com"))
        >>> [k.email for k in keyring.list_keys()]
        ['ann@example.com']
    """

    SUFFIX = '.json'

    def __init__(self, path: Union[str, Path]):
        """
        Initialize directory keyring.

        Args:
            path: Keyring directory
        """
        self.path = Path(path).expanduser()

    def list_keys(self) -> List[KeyRecord]:
        """
        Read every key file of the directory.

        Unparseable files are skipped with a warning.

        Raises:
            KeyringError: BACKEND_UNAVAILABLE if the directory cannot be read
        """
        if not self.path.is_dir():
            raise KeyringError(
                f"Keyring directory not found: {self.path}",
                kind=KeyringErrorKind.BACKEND_UNAVAILABLE
            )

        try:
            files = sorted(self.path.glob(f'*{self.SUFFIX}'))
        except OSError as e:
            raise KeyringError(
                f"Cannot open keyring: {self.path}",
                kind=KeyringErrorKind.BACKEND_UNAVAILABLE,
                detail=str(e)
            ) from e

        records = []
        for key_file in files:
            try:
                data = json.loads(key_file.read_text(encoding='utf-8'))
                records.append(KeyRecord.from_dict(data))
            except (OSError, ValueError) as e:
                logger.warning(f"Skipping unreadable key file {key_file.name}: {e}")
            except KeyringError as e:
                logger.warning(f"Skipping invalid key file {key_file.name}: {e} ({e.detail})")

        logger.debug(f"Read {len(records)} keys from {self.path}")
        return records

    def save(self, record: KeyRecord) -> None:
        """
        Write a key file, replacing any file with the same fingerprint.

        Files holding a private key are only readable by the owner.
        """
        self.path.mkdir(parents=True, exist_ok=True)
        key_file = self.path / f'{record.fingerprint}{self.SUFFIX}'
        mode = 0o600 if record.has_secret else 0o644

        fd = os.open(key_file, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, mode)
        with os.fdopen(fd, 'w', encoding='utf-8') as f:
            json.dump(record.to_dict(), f, indent=2)
        logger.info(f"Saved key {record.reference()} to {key_file}")
