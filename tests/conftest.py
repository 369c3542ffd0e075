"""Pytest fixtures for transferpy tests."""
import stat
from pathlib import Path
from unittest.mock import AsyncMock, Mock

import pytest
from Crypto.Random import get_random_bytes

from transferpy.core.config import TransferConfig
from transferpy.core.crypto import EncryptionService, EnvelopeEngine
from transferpy.core.keyring import KeyRecord, KeyringIndex, MemoryKeyring


@pytest.fixture(scope="session")
def key_a():
    """Key pair of a first identity (generated once per session)."""
    return KeyRecord.generate("Alice Example", "alice@example.test", key_size=2048)


@pytest.fixture(scope="session")
def key_b():
    """Key pair of a second identity."""
    return KeyRecord.generate("Bob Example", "bob@example.test", key_size=2048)


@pytest.fixture
def plaintext():
    """Random non-empty content."""
    return get_random_bytes(4096)


@pytest.fixture
def engine():
    """Envelope engine with few PBKDF2 iterations, to keep tests fast."""
    return EnvelopeEngine(iterations=1000)


@pytest.fixture
def memory_keyring(key_a, key_b):
    """In-memory keyring holding both identities."""
    return MemoryKeyring([key_a, key_b])


@pytest.fixture
def keyring_index(memory_keyring):
    """Index over the in-memory keyring."""
    return KeyringIndex(memory_keyring)


@pytest.fixture
def encryption_service(keyring_index, engine):
    """Encryption service whose passphrase provider answers 'x'."""
    return EncryptionService(keyring_index, passphrase_provider=lambda: "x", engine=engine)


@pytest.fixture
def mock_agent():
    """Agent whose invoke() returns a URL built from the destination."""
    agent = Mock()
    agent.invoke = AsyncMock(side_effect=lambda path, url: url.replace("example.test", "example.test/dl"))
    return agent


@pytest.fixture
def config(tmp_path):
    """Configuration pointing every path into tmp_path."""
    return TransferConfig(
        base_url="https://example.test",
        temp_file_location=str(tmp_path / "tmp" / "upload"),
        keyring_path=str(tmp_path / "keyring"),
        state_file=None,
    )


@pytest.fixture
def make_script(tmp_path):
    """Factory writing an executable shell script, returns its path."""
    def _make(name: str, body: str) -> Path:
        script = tmp_path / name
        script.write_text("#!/bin/sh\n" + body + "\n")
        script.chmod(script.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
        return script
    return _make
