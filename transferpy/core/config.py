"""
Configuration module.

Provides the configuration of the transfer client, loadable from
``~/.config/transferpy/config.json``:

    {
        "base_url": "https://transfer.sh",
        "remote_prefix": "u/",
        "agent_command": "curl",
        "agent_arguments": ["--silent", "--upload-file", "{source}", "{destination}"]
    }
"""
import json
import os
import tempfile
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from .exceptions import ConfigurationError
from .keyring.models import DEFAULT_SEPARATOR

CONFIG_DIR = Path.home() / ".config" / "transferpy"
BASE_URL_ENV = "TRANSFERPY_BASE_URL"


def default_temp_file_location() -> str:
    return str(Path(tempfile.gettempdir()) / "transferpy-upload")


@dataclass
class TransferConfig:
    """
    Complete client configuration.

    Attributes:
        base_url: Service the files are uploaded to
        temp_file_location: Base path for buffer and ciphertext temp files
        remote_prefix: Prepended to every remote filename
        remote_suffix: Appended to every remote filename
        agent_command: Agent executable (None = detect curl/wget on PATH)
        agent_arguments: Agent argument template (None = match the command)
        key_reference_separator: Separator inside key reference strings
        keyring_path: Directory keyring location
        state_file: File remembering the last uploaded URL (None = disabled)
        log_level: Logging level of the transferpy loggers
    """
    base_url: str = 'https://transfer.sh'
    temp_file_location: str = field(default_factory=default_temp_file_location)
    remote_prefix: str = ''
    remote_suffix: str = ''
    agent_command: Optional[str] = None
    agent_arguments: Optional[List[str]] = None
    key_reference_separator: str = DEFAULT_SEPARATOR
    keyring_path: str = str(CONFIG_DIR / "keyring")
    state_file: Optional[str] = str(CONFIG_DIR / "last_url")
    log_level: int = 30  # logging.WARNING

    @classmethod
    def default(cls) -> 'TransferConfig':
        """Create default configuration."""
        return cls()

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'TransferConfig':
        """
        Create from dictionary.

        Raises:
            ConfigurationError: On unknown keys
        """
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigurationError(f"Unknown configuration keys: {', '.join(unknown)}")
        return cls(**data)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return asdict(self)

    @classmethod
    def load(cls, path: Optional[Union[str, Path]] = None) -> 'TransferConfig':
        """
        Load configuration from a JSON file.

        A missing file gives the defaults. The ``TRANSFERPY_BASE_URL``
        environment variable overrides ``base_url``.

        Args:
            path: Config file (``~/.config/transferpy/config.json`` by default)

        Raises:
            ConfigurationError: If the file is not valid JSON or has unknown keys
        """
        path = Path(path).expanduser() if path else CONFIG_DIR / "config.json"

        data: Dict[str, Any] = {}
        if path.exists():
            try:
                data = json.loads(path.read_text(encoding='utf-8'))
            except (OSError, ValueError) as e:
                raise ConfigurationError(f"Cannot read config file {path}: {e}") from e
            if not isinstance(data, dict):
                raise ConfigurationError(f"Config file {path} must hold a JSON object")

        config = cls.from_dict(data)
        if os.environ.get(BASE_URL_ENV):
            config.base_url = os.environ[BASE_URL_ENV]
        return config

    def save(self, path: Optional[Union[str, Path]] = None) -> Path:
        """Write configuration as JSON. Returns the file path."""
        path = Path(path).expanduser() if path else CONFIG_DIR / "config.json"
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(self.to_dict(), indent=2), encoding='utf-8')
        return path

    def remote_filename(self, name: str) -> str:
        """Apply the configured prefix and suffix."""
        return f"{self.remote_prefix}{name}{self.remote_suffix}"
