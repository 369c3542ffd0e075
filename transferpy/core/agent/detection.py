"""
Agent auto-detection.

Chooses an agent spec once, at configuration time. Explicit
configuration always wins over probing PATH.
"""
import shutil
from pathlib import Path
from typing import Callable, Dict, Optional, Sequence

from ..exceptions import ConfigurationError
from ..logging import get_logger
from .models import UploadAgentSpec

logger = get_logger('transferpy.agent')

# Probe order: first executable found wins
BUILTIN_AGENTS: Dict[str, Callable[[str], UploadAgentSpec]] = {
    "curl": UploadAgentSpec.upload_file_style,
    "wget": UploadAgentSpec.put_style,
}


def detect_agent_spec(
    command: Optional[str] = None,
    arguments: Optional[Sequence[str]] = None,
    which: Callable[[str], Optional[str]] = shutil.which
) -> UploadAgentSpec:
    """
    Build the agent spec from configuration, probing PATH when needed.

    Args:
        command: Configured agent command (None = auto-detect)
        arguments: Configured argument template (None = match the command)
        which: Executable lookup, ``shutil.which`` by default

    Returns:
        Selected agent spec

    Raises:
        ConfigurationError: If no agent is usable or the template is invalid
    """
    if command is None:
        for name in BUILTIN_AGENTS:
            if which(name):
                command = name
                logger.debug(f"Auto-detected upload agent: {name}")
                break
        else:
            raise ConfigurationError(
                f"No upload agent found on PATH (tried: {', '.join(BUILTIN_AGENTS)})"
            )

    if arguments is not None:
        return UploadAgentSpec.custom(command, arguments)

    factory = BUILTIN_AGENTS.get(Path(command).name)
    if factory is None:
        raise ConfigurationError(
            f"Unknown agent command '{command}': an argument template is required"
        )
    return factory(command)
