"""Tests for upload agents: templates, detection and process handling."""
import asyncio
import os

import pytest

from transferpy.core.agent import (
    DESTINATION,
    SOURCE,
    AgentVariant,
    UploadAgent,
    UploadAgentSpec,
    detect_agent_spec,
)
from transferpy.core.exceptions import AgentError, AgentErrorKind, ConfigurationError


class TestUploadAgentSpec:
    """Test suite for UploadAgentSpec."""

    def test_put_style_arguments(self):
        """Test the wget template puts the body file before the URL."""
        spec = UploadAgentSpec.put_style()

        args = spec.build_arguments("/tmp/a.txt", "https://example.test/a.txt")

        assert spec.command == "wget"
        assert spec.variant is AgentVariant.PUT_STYLE
        assert args == [
            "--quiet", "--method", "PUT", "--output-document", "-",
            "--body-file", "/tmp/a.txt", "https://example.test/a.txt"
        ]

    def test_upload_file_style_arguments(self):
        """Test the curl template."""
        spec = UploadAgentSpec.upload_file_style()

        args = spec.build_arguments("/tmp/a.txt", "https://example.test/a.txt")

        assert spec.command == "curl"
        assert args[-3:] == ["--upload-file", "/tmp/a.txt", "https://example.test/a.txt"]

    def test_custom_keeps_fixed_flags_in_order(self):
        """Test only the slots change, flags keep their order."""
        spec = UploadAgentSpec.custom(
            "agent", ["-a", DESTINATION, "--b", "c", SOURCE, "-d"]
        )

        args = spec.build_arguments("src", "dst")

        assert args == ["-a", "dst", "--b", "c", "src", "-d"]

    def test_list_template_is_frozen(self):
        """Test list arguments are stored as a tuple."""
        spec = UploadAgentSpec("agent", [SOURCE, DESTINATION])

        assert spec.arguments == (SOURCE, DESTINATION)
        assert hash(spec)

    @pytest.mark.parametrize("arguments", [
        ("--upload-file", SOURCE),
        ("--upload-file", DESTINATION),
        (SOURCE, SOURCE, DESTINATION),
        (SOURCE, DESTINATION, DESTINATION),
        (),
    ])
    def test_template_requires_each_slot_once(self, arguments):
        """Test missing or repeated slots are rejected."""
        with pytest.raises(ConfigurationError):
            UploadAgentSpec("agent", arguments)

    def test_empty_command_rejected(self):
        """Test an empty command is rejected."""
        with pytest.raises(ConfigurationError):
            UploadAgentSpec("", (SOURCE, DESTINATION))


class TestDetectAgentSpec:
    """Test suite for agent auto-detection."""

    def test_first_found_wins(self):
        """Test curl is used when both are available."""
        spec = detect_agent_spec(which=lambda name: f"/usr/bin/{name}")

        assert spec.command == "curl"
        assert spec.variant is AgentVariant.UPLOAD_FILE_STYLE

    def test_falls_back_to_wget(self):
        """Test wget is used when curl is missing."""
        spec = detect_agent_spec(which=lambda name: "/usr/bin/wget" if name == "wget" else None)

        assert spec.command == "wget"
        assert spec.variant is AgentVariant.PUT_STYLE

    def test_nothing_found(self):
        """Test no agent on PATH is a configuration error."""
        with pytest.raises(ConfigurationError, match="No upload agent"):
            detect_agent_spec(which=lambda name: None)

    def test_explicit_command_overrides_detection(self):
        """Test a configured command is not probed."""
        spec = detect_agent_spec("wget", which=lambda name: f"/usr/bin/{name}")

        assert spec.command == "wget"
        assert spec.variant is AgentVariant.PUT_STYLE

    def test_explicit_path_matches_builtin(self):
        """Test a full path still selects the built-in template."""
        spec = detect_agent_spec("/opt/bin/curl")

        assert spec.command == "/opt/bin/curl"
        assert spec.variant is AgentVariant.UPLOAD_FILE_STYLE

    def test_explicit_template(self):
        """Test a configured template makes a custom agent."""
        spec = detect_agent_spec("httpie", ["PUT", DESTINATION, SOURCE])

        assert spec.variant is AgentVariant.CUSTOM
        assert spec.arguments == ("PUT", DESTINATION, SOURCE)

    def test_unknown_command_needs_template(self):
        """Test an unknown command without template is rejected."""
        with pytest.raises(ConfigurationError, match="argument template"):
            detect_agent_spec("httpie")


class TestUploadAgent:
    """Test suite for UploadAgent with stub executables."""

    def test_missing_executable_fails_eagerly(self):
        """Test a missing command fails at construction time."""
        with pytest.raises(AgentError) as exc_info:
            UploadAgent(UploadAgentSpec.custom("no-such-agent-xyz", [SOURCE, DESTINATION]))

        assert exc_info.value.kind is AgentErrorKind.EXECUTABLE_NOT_FOUND

    @pytest.mark.asyncio
    async def test_invoke_passes_substituted_arguments(self, make_script):
        """Test the stub receives fixed flags and both slots in order."""
        script = make_script("echo-args", 'printf "%s\\n" "$@"')
        agent = UploadAgent(UploadAgentSpec.custom(
            str(script), ["--method", "PUT", SOURCE, "--to", DESTINATION]
        ))

        output = await agent.invoke("/tmp/notes.txt", "https://example.test/notes.txt")

        assert output.splitlines() == [
            "--method", "PUT", "/tmp/notes.txt", "--to", "https://example.test/notes.txt"
        ]

    @pytest.mark.asyncio
    async def test_invoke_strips_trailing_newline(self, make_script):
        """Test the response body is stripped."""
        script = make_script("agent", 'echo "https://example.test/abc/notes.txt"')
        agent = UploadAgent(UploadAgentSpec.custom(str(script), [SOURCE, DESTINATION]))

        output = await agent.invoke("a", "b")

        assert output == "https://example.test/abc/notes.txt"

    @pytest.mark.asyncio
    async def test_non_zero_exit(self, make_script):
        """Test non-zero exit fails even with output, keeping the output."""
        script = make_script("agent", 'echo "partial"; echo "boom" >&2; exit 1')
        agent = UploadAgent(UploadAgentSpec.custom(str(script), [SOURCE, DESTINATION]))

        with pytest.raises(AgentError) as exc_info:
            await agent.invoke("a", "b")

        error = exc_info.value
        assert error.kind is AgentErrorKind.NON_ZERO_EXIT
        assert error.exit_status == 1
        assert error.output == "partial"
        assert error.detail == "boom"

    @pytest.mark.asyncio
    async def test_empty_response(self, make_script):
        """Test exit 0 without output is not a success."""
        script = make_script("agent", "exit 0")
        agent = UploadAgent(UploadAgentSpec.custom(str(script), [SOURCE, DESTINATION]))

        with pytest.raises(AgentError) as exc_info:
            await agent.invoke("a", "b")

        assert exc_info.value.kind is AgentErrorKind.EMPTY_RESPONSE

    @pytest.mark.asyncio
    async def test_executable_removed_after_construction(self, make_script):
        """Test a binary deleted later is reported as not found."""
        script = make_script("agent", "echo ok")
        agent = UploadAgent(UploadAgentSpec.custom(str(script), [SOURCE, DESTINATION]))
        script.unlink()

        with pytest.raises(AgentError) as exc_info:
            await agent.invoke("a", "b")

        assert exc_info.value.kind is AgentErrorKind.EXECUTABLE_NOT_FOUND

    @pytest.mark.asyncio
    async def test_cancel_kills_process(self, make_script, tmp_path):
        """Test cancelling a running invoke terminates the agent."""
        marker = tmp_path / "pid"
        script = make_script("slow-agent", f'echo $$ > "{marker}"; exec sleep 30')
        agent = UploadAgent(UploadAgentSpec.custom(str(script), [SOURCE, DESTINATION]))

        task = asyncio.create_task(agent.invoke("a", "b"))
        for _ in range(100):
            if marker.exists() and marker.read_text().strip():
                break
            await asyncio.sleep(0.05)
        pid = int(marker.read_text())

        task.cancel()
        with pytest.raises(AgentError) as exc_info:
            await task

        assert exc_info.value.kind is AgentErrorKind.CANCELLED
        with pytest.raises(ProcessLookupError):
            os.kill(pid, 0)
