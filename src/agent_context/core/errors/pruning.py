"""Context pruning error classes."""

from typing import Optional

from agent_context.core.errors.base import AgentContextError


class PruningError(AgentContextError):
    """Base exception for context pruning errors."""


class MalformedHistoryError(PruningError):
    """Raised when a history is inconsistent with the pruner's bookkeeping.

    Attributes:
        history_length: Number of messages received
        expected_index: Index the pruner expected to exist
    """

    def __init__(
        self,
        message: str,
        *,
        history_length: Optional[int] = None,
        expected_index: Optional[int] = None,
    ):
        super().__init__(message)
        self.history_length = history_length
        self.expected_index = expected_index
