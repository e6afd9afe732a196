"""Agent persona and short-term memory."""

from .agent_state import DEFAULT_SUPPORTED_LANGUAGES, AgentState, default_agent_profile

__all__ = ["AgentState", "default_agent_profile", "DEFAULT_SUPPORTED_LANGUAGES"]
