"""Encoder lifecycle error classes."""

from typing import Optional

from agent_context.core.errors.base import AgentContextError


class EncoderError(AgentContextError):
    """Base exception for sub-word encoder errors."""

    def __init__(self, message: str, *, encoding_name: Optional[str] = None):
        self.encoding_name = encoding_name
        super().__init__(message)


class EncoderLoadError(EncoderError):
    """Raised to every caller awaiting an encoder load attempt that failed.

    The failed attempt is discarded, so the next warm-up starts a fresh
    load. The underlying exception is available as ``__cause__``.
    """


class EncoderNotReadyError(EncoderError):
    """Raised when tokens are counted before the encoder has been loaded."""
