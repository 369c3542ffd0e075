"""Tests for TransferConfig."""
import json

import pytest

from transferpy.core.config import BASE_URL_ENV, TransferConfig
from transferpy.core.exceptions import ConfigurationError
from transferpy.core.keyring import DEFAULT_SEPARATOR


class TestTransferConfig:
    """Test suite for TransferConfig."""

    def test_defaults(self):
        """Test default values."""
        config = TransferConfig.default()

        assert config.base_url == 'https://transfer.sh'
        assert config.temp_file_location.endswith('transferpy-upload')
        assert config.remote_prefix == ''
        assert config.remote_suffix == ''
        assert config.agent_command is None
        assert config.agent_arguments is None
        assert config.key_reference_separator == DEFAULT_SEPARATOR == " - "

    def test_remote_filename(self):
        """Test prefix and suffix wrap the name."""
        config = TransferConfig(remote_prefix="u/", remote_suffix=".txt")

        assert config.remote_filename("notes") == "u/notes.txt"
        assert TransferConfig().remote_filename("notes") == "notes"

    def test_dict_roundtrip(self):
        config = TransferConfig(base_url="https://example.test", agent_command="curl")

        assert TransferConfig.from_dict(config.to_dict()) == config

    def test_unknown_key(self):
        """Test typos in config keys are reported."""
        with pytest.raises(ConfigurationError, match="base_ulr"):
            TransferConfig.from_dict({"base_ulr": "https://example.test"})

    def test_load_missing_file(self, tmp_path, monkeypatch):
        """Test a missing file gives defaults."""
        monkeypatch.delenv(BASE_URL_ENV, raising=False)

        assert TransferConfig.load(tmp_path / "none.json") == TransferConfig.default()

    def test_load_file(self, tmp_path, monkeypatch):
        monkeypatch.delenv(BASE_URL_ENV, raising=False)
        path = tmp_path / "config.json"
        path.write_text(json.dumps({
            "base_url": "https://example.test",
            "remote_prefix": "u/",
            "agent_command": "curl",
            "agent_arguments": ["--upload-file", "{source}", "{destination}"],
        }))

        config = TransferConfig.load(path)

        assert config.base_url == "https://example.test"
        assert config.remote_prefix == "u/"
        assert config.agent_arguments == ["--upload-file", "{source}", "{destination}"]

    def test_env_overrides_base_url(self, tmp_path, monkeypatch):
        """Test the environment wins over the file."""
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"base_url": "https://file.example.test"}))
        monkeypatch.setenv(BASE_URL_ENV, "https://env.example.test")

        assert TransferConfig.load(path).base_url == "https://env.example.test"

    @pytest.mark.parametrize("content", ["{broken", "[1, 2]"])
    def test_load_invalid(self, tmp_path, content):
        """Test unreadable config files are configuration errors."""
        path = tmp_path / "config.json"
        path.write_text(content)

        with pytest.raises(ConfigurationError):
            TransferConfig.load(path)

    def test_save_and_load(self, tmp_path, monkeypatch):
        monkeypatch.delenv(BASE_URL_ENV, raising=False)
        config = TransferConfig(base_url="https://example.test", remote_suffix=".log")

        path = config.save(tmp_path / "nested" / "config.json")

        assert TransferConfig.load(path) == config
