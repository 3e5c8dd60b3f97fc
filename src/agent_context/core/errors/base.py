"""Root of the agent-context error hierarchy."""


class AgentContextError(RuntimeError):
    """Base exception for all agent-context errors."""
