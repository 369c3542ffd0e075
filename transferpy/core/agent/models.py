"""
Data models for upload agents.

An agent is an external command plus an argument template with two
slots: ``{source}`` (local path) and ``{destination}`` (remote URL).
"""
from dataclasses import dataclass
from enum import Enum
from typing import List, Sequence, Tuple

from ..exceptions import ConfigurationError

SOURCE = "{source}"
DESTINATION = "{destination}"


class AgentVariant(Enum):
    """Known argument layouts."""
    PUT_STYLE = "put"
    UPLOAD_FILE_STYLE = "upload-file"
    CUSTOM = "custom"


@dataclass(frozen=True)
class UploadAgentSpec:
    """
    Command and argument template of a transfer agent.

    Attributes:
        command: Executable name or path
        arguments: Ordered argument tokens, containing each slot exactly once
        variant: Which layout the template follows

    Example:
        >>> spec = UploadAgentSpec("curl", ("--upload-file", SOURCE, DESTINATION))
        >>> spec.build_arguments("/tmp/a.txt", "https://transfer.sh/a.txt")
        ['--upload-file', '/tmp/a.txt', 'https://transfer.sh/a.txt']
    """
    command: str
    arguments: Tuple[str, ...]
    variant: AgentVariant = AgentVariant.CUSTOM

    def __post_init__(self):
        if not self.command:
            raise ConfigurationError("Agent command must not be empty")
        # Lists from JSON config are frozen into tuples
        object.__setattr__(self, 'arguments', tuple(self.arguments))
        for slot in (SOURCE, DESTINATION):
            count = self.arguments.count(slot)
            if count != 1:
                raise ConfigurationError(
                    f"Agent argument template must contain {slot} exactly once, "
                    f"found {count}: {list(self.arguments)}"
                )

    def build_arguments(self, local_path: str, remote_url: str) -> List[str]:
        """
        Substitute the slots, keeping fixed flags in their order.

        Args:
            local_path: File to send
            remote_url: Target URL

        Returns:
            Concrete argument list (without the command itself)
        """
        substitutions = {SOURCE: str(local_path), DESTINATION: remote_url}
        return [substitutions.get(token, token) for token in self.arguments]

    @classmethod
    def put_style(cls, command: str = "wget") -> 'UploadAgentSpec':
        """wget-like agent sending the body with an HTTP PUT."""
        return cls(
            command=command,
            arguments=(
                "--quiet", "--method", "PUT", "--output-document", "-",
                "--body-file", SOURCE, DESTINATION
            ),
            variant=AgentVariant.PUT_STYLE
        )

    @classmethod
    def upload_file_style(cls, command: str = "curl") -> 'UploadAgentSpec':
        """curl-like agent using ``--upload-file``."""
        return cls(
            command=command,
            arguments=(
                "--silent", "--show-error", "--upload-file", SOURCE, DESTINATION
            ),
            variant=AgentVariant.UPLOAD_FILE_STYLE
        )

    @classmethod
    def custom(cls, command: str, arguments: Sequence[str]) -> 'UploadAgentSpec':
        """Agent with a user supplied template."""
        return cls(command=command, arguments=tuple(arguments), variant=AgentVariant.CUSTOM)
