"""Unified error hierarchy for agent-context.

All custom exception classes are defined in domain-specific modules within
this package. This __init__.py re-exports everything for convenient access.

Usage:
    from agent_context.core.errors import EncoderLoadError

    try:
        await context.warm_up()
    except EncoderLoadError as exc:
        logger.error("Encoder %s unavailable: %s", exc.encoding_name, exc.__cause__)
"""

from agent_context.core.errors.base import AgentContextError

# --- Encoder errors ---
from agent_context.core.errors.encoding import (
    EncoderError,
    EncoderLoadError,
    EncoderNotReadyError,
)

# --- Pruning errors ---
from agent_context.core.errors.pruning import (
    MalformedHistoryError,
    PruningError,
)

__all__ = [
    "AgentContextError",
    # Encoder errors
    "EncoderError",
    "EncoderLoadError",
    "EncoderNotReadyError",
    # Pruning errors
    "PruningError",
    "MalformedHistoryError",
]
