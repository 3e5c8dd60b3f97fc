"""Command-line interface for agent-context."""

from agent_context.cli.main import cli

__all__ = ["cli"]
