"""Upload agent module."""
from .models import SOURCE, DESTINATION, AgentVariant, UploadAgentSpec
from .detection import BUILTIN_AGENTS, detect_agent_spec
from .agent import UploadAgent

__all__ = [
    'SOURCE',
    'DESTINATION',
    'AgentVariant',
    'UploadAgentSpec',
    'BUILTIN_AGENTS',
    'detect_agent_spec',
    'UploadAgent',
]
