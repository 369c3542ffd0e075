"""
External transfer agent.

Runs the configured command as a subprocess and returns what it
printed on stdout.
"""
import asyncio
import shutil
from pathlib import Path
from typing import Union

from ..exceptions import AgentError, AgentErrorKind
from ..logging import get_logger
from .models import UploadAgentSpec

logger = get_logger('transferpy.agent')


class UploadAgent:
    """
    Invokes an external HTTP PUT/POST capable command.

    The executable is resolved when the agent is built, so a missing
    binary is reported before any job runs.

    Example:
        >>> agent = UploadAgent(UploadAgentSpec.upload_file_style())
        >>> url = await agent.invoke("notes.txt", "https://transfer.sh/notes.txt")
    """

    def __init__(self, spec: UploadAgentSpec):
        """
        Initialize the agent.

        Args:
            spec: Command and argument template

        Raises:
            AgentError: EXECUTABLE_NOT_FOUND if the command is not on PATH
        """
        executable = shutil.which(spec.command)
        if executable is None:
            raise AgentError(
                f"Upload agent executable not found: {spec.command}",
                kind=AgentErrorKind.EXECUTABLE_NOT_FOUND
            )
        self._spec = spec
        self._executable = executable

    @property
    def spec(self) -> UploadAgentSpec:
        """Returns the agent spec."""
        return self._spec

    @property
    def executable(self) -> str:
        """Returns the resolved executable path."""
        return self._executable

    async def invoke(self, local_path: Union[str, Path], remote_url: str) -> str:
        """
        Transfer a local file to a remote URL.

        Args:
            local_path: File to upload
            remote_url: Destination URL

        Returns:
            Response body with trailing whitespace stripped

        Raises:
            AgentError: NON_ZERO_EXIT, EMPTY_RESPONSE, CANCELLED or
                EXECUTABLE_NOT_FOUND (binary removed since construction)
        """
        args = self._spec.build_arguments(str(local_path), remote_url)
        logger.debug(f"Running agent: {self._executable} {' '.join(args)}")

        try:
            process = await asyncio.create_subprocess_exec(
                self._executable,
                *args,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE
            )
        except FileNotFoundError as e:
            raise AgentError(
                f"Upload agent executable not found: {self._executable}",
                kind=AgentErrorKind.EXECUTABLE_NOT_FOUND,
                detail=str(e)
            ) from e

        try:
            stdout, stderr = await process.communicate()
        except asyncio.CancelledError:
            if process.returncode is None:
                logger.info(f"Upload cancelled, terminating agent (pid {process.pid})")
                process.kill()
                await process.wait()
            raise AgentError(
                "Upload cancelled",
                kind=AgentErrorKind.CANCELLED,
                exit_status=process.returncode
            )

        output = stdout.decode('utf-8', errors='replace').rstrip()
        errors = stderr.decode('utf-8', errors='replace').strip()

        if process.returncode != 0:
            logger.error(
                f"Agent exited with status {process.returncode}: {errors or output}"
            )
            raise AgentError(
                f"Upload agent exited with status {process.returncode}",
                kind=AgentErrorKind.NON_ZERO_EXIT,
                detail=errors or None,
                exit_status=process.returncode,
                output=output
            )

        if not output:
            raise AgentError(
                "Upload agent returned an empty response",
                kind=AgentErrorKind.EMPTY_RESPONSE,
                detail=errors or None,
                exit_status=process.returncode
            )

        return output
