"""Per-message token counting.

Provides:
    - TokenCounter: converts a Message into an integer token cost
    - create_token_counter(): warm an encoder context and return a counter
    - TOKENS_PER_MESSAGE: fixed framing overhead added once per message
"""

from __future__ import annotations

import json
import logging
from typing import Any, Optional

from agent_context.core.messages.models import (
    CachePointPart,
    ErrorPart,
    ImagePart,
    Message,
    ReasoningPart,
    RedactedThinkingPart,
    TextPart,
    ThinkingPart,
    ToolCallPart,
    UnknownPart,
)
from agent_context.core.token_management.encoder import (
    EncoderContext,
    get_default_encoder_context,
)

logger = logging.getLogger(__name__)

# Approximates the role/separator framing every message costs on the wire.
TOKENS_PER_MESSAGE = 3


class TokenCounter:
    """Counts tokens in messages using a shared encoder context.

    Counting is synchronous and has no side effects. The encoder context
    must be warmed up first; counting before that raises
    EncoderNotReadyError.

    Instances are callable, so a counter can be passed anywhere a
    ``Callable[[Message], int]`` is expected.
    """

    def __init__(
        self,
        encoder_context: EncoderContext,
        *,
        tokens_per_message: int = TOKENS_PER_MESSAGE,
    ):
        if tokens_per_message < 0:
            raise ValueError(f"tokens_per_message must be non-negative, got {tokens_per_message}")
        self.encoder_context = encoder_context
        self.tokens_per_message = tokens_per_message

    def count_text(self, text: str) -> int:
        return self.encoder_context.encode(text)

    def count(self, message: Message) -> int:
        """Token cost of one message, framing overhead included."""
        total = self.tokens_per_message
        if isinstance(message.content, str):
            return total + self.count_text(message.content)
        for part in message.content:
            total += self._count_part(part)
        return total

    __call__ = count

    def _count_part(self, part: Any) -> int:
        if isinstance(part, TextPart):
            return self.count_text(part.text)
        if isinstance(part, ToolCallPart):
            call = part.tool_call
            if call is None:
                return 0
            return (
                self.count_text(call.name or "")
                + self.count_text(_args_text(call.args))
                + self.count_text(call.output or "")
            )
        if isinstance(part, ThinkingPart):
            return self.count_text(part.thinking)
        if isinstance(part, ReasoningPart):
            return self.count_text(part.reasoning_text.text if part.reasoning_text else "")
        if isinstance(part, (ImagePart, ErrorPart, RedactedThinkingPart, CachePointPart)):
            return 0
        if isinstance(part, UnknownPart):
            logger.debug(f"Skipping content part with unrecognized type {part.type!r}")
            return 0
        logger.debug(f"Skipping malformed content part {type(part).__name__}")
        return 0


def _args_text(args: Any) -> str:
    if not args:
        return ""
    if isinstance(args, str):
        return args
    return json.dumps(args, sort_keys=True, separators=(",", ":"))


async def create_token_counter(
    encoder_context: Optional[EncoderContext] = None,
    *,
    tokens_per_message: int = TOKENS_PER_MESSAGE,
) -> TokenCounter:
    """Warm up an encoder context and return a ready counter.

    Args:
        encoder_context: Context to use; defaults to the shared one
        tokens_per_message: Framing overhead per message

    Raises:
        EncoderLoadError: If the encoder could not be loaded
    """
    context = encoder_context or get_default_encoder_context()
    await context.warm_up()
    return TokenCounter(context, tokens_per_message=tokens_per_message)
