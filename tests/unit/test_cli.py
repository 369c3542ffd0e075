"""Tests for the command line interface."""
import json

import pytest
from typer.testing import CliRunner

from transferpy.cli.main import app
from transferpy.core.keyring import DirectoryKeyring

runner = CliRunner()


@pytest.fixture
def config_file(tmp_path, make_script, monkeypatch):
    """Config using a stub agent that prints the destination URL."""
    monkeypatch.delenv("TRANSFERPY_BASE_URL", raising=False)
    script = make_script("agent", 'echo "$2"')
    path = tmp_path / "config.json"
    path.write_text(json.dumps({
        "base_url": "https://example.test",
        "temp_file_location": str(tmp_path / "tmp" / "upload"),
        "agent_command": str(script),
        "agent_arguments": ["{source}", "{destination}"],
        "keyring_path": str(tmp_path / "keyring"),
        "state_file": str(tmp_path / "last_url"),
    }))
    return path


def invoke(config_file, *args, **kwargs):
    return runner.invoke(app, ["--config", str(config_file), *args], **kwargs)


class TestCli:
    """Test suite for the CLI commands."""

    def test_upload_and_last(self, config_file, tmp_path):
        notes = tmp_path / "notes.txt"
        notes.write_text("some notes\n")

        result = invoke(config_file, "upload", str(notes))
        last = invoke(config_file, "last")

        assert result.exit_code == 0
        assert 'File "notes.txt" uploaded: https://example.test/notes.txt' in result.output
        assert last.exit_code == 0
        assert "https://example.test/notes.txt" in last.output

    def test_upload_failure_exit_code(self, config_file, tmp_path, make_script):
        """Test a failing agent makes the command fail."""
        failing = make_script("failing", 'echo "Could not save"; exit 1')
        data = json.loads(config_file.read_text())
        data["agent_command"] = str(failing)
        config_file.write_text(json.dumps(data))
        notes = tmp_path / "notes.txt"
        notes.write_text("x")

        result = invoke(config_file, "upload", str(notes))

        assert result.exit_code == 1
        assert "upload failed" in result.output

    def test_paste_with_name(self, config_file):
        result = invoke(config_file, "paste", "--name", "snippet.py", input="print('hi')\n")

        assert result.exit_code == 0
        assert "https://example.test/snippet.py" in result.output

    def test_last_without_upload(self, config_file):
        result = invoke(config_file, "last")

        assert result.exit_code == 1
        assert "No upload recorded" in result.output

    def test_agent(self, config_file):
        result = invoke(config_file, "agent")

        assert result.exit_code == 0
        assert "custom" in result.output

    def test_bad_config(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"no_such_option": 1}))

        result = invoke(path, "last")

        assert result.exit_code == 1
        assert "no_such_option" in result.output

    def test_keys_generate_and_refresh(self, config_file, tmp_path):
        generated = invoke(
            config_file, "keys", "generate", "Alice Example", "alice@example.test",
            "--key-size", "2048"
        )
        refreshed = invoke(config_file, "keys", "refresh")

        record = DirectoryKeyring(tmp_path / "keyring").list_keys()[0]
        assert generated.exit_code == 0
        assert refreshed.exit_code == 0
        assert record.fingerprint in refreshed.output
        assert "alice@example.test" in refreshed.output

    def test_keys_list_without_keyring(self, config_file):
        """Test a missing keyring is reported, not a crash."""
        result = invoke(config_file, "keys", "list")

        assert result.exit_code == 1
        assert "Keyring directory not found" in result.output

    def test_encrypted_upload_then_decrypt(self, config_file, tmp_path, key_a):
        """Test a recipient-encrypted upload decrypts with the keyring's secret key."""
        DirectoryKeyring(tmp_path / "keyring").save(key_a)
        notes = tmp_path / "notes.txt"
        notes.write_text("secret notes\n")

        result = invoke(config_file, "upload", str(notes), "--recipient", key_a.fingerprint)
        ciphertext = next((tmp_path / "tmp").glob("upload.*.enc"))
        decrypted = invoke(config_file, "decrypt", str(ciphertext), "--output", str(tmp_path / "out.txt"))

        assert result.exit_code == 0
        assert decrypted.exit_code == 0
        assert (tmp_path / "out.txt").read_text() == "secret notes\n"

    def test_decrypt_with_unknown_key(self, config_file, tmp_path, key_a):
        DirectoryKeyring(tmp_path / "keyring").save(key_a)
        envelope = tmp_path / "data.enc"
        envelope.write_bytes(b"anything")

        result = invoke(config_file, "decrypt", str(envelope), "--key", "0" * 64)

        assert result.exit_code == 1
        assert "None of the given keys" in result.output
