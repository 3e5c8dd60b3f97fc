"""Prompt-cache breakpoints for outgoing payloads.

Two mutually exclusive marker dialects exist:

- inline (Anthropic): a ``cache_control`` property on a content part
- block (Bedrock Converse): a separate ``{"cachePoint": {...}}`` part
  inserted after the last text part

Every entry point strips all markers of both dialects before adding fresh
ones, so annotating any list, including one annotated before or annotated in
the other dialect, converges to the same result as a single call. Messages
are never edited in place; changed messages are replaced by copies in a new
list.
"""

from __future__ import annotations

import logging
from typing import Callable, List, Optional, Sequence

from .models import CacheControl, CachePointPart, Message, Role, TextPart

logger = logging.getLogger(__name__)

# Number of user turns that carry a breakpoint after annotation.
MAX_CACHE_MARKERS = 2

EPHEMERAL = CacheControl(type="ephemeral")

INLINE_DIALECT = "anthropic"
BLOCK_DIALECT = "bedrock"


def _strip_message(message: Message, *, inline: bool, blocks: bool) -> Message:
    if isinstance(message.content, str):
        return message
    parts = []
    changed = False
    for part in message.content:
        if isinstance(part, CachePointPart):
            if blocks:
                changed = True
                continue
        elif inline and part.cache_control is not None:
            part = part.model_copy(update={"cache_control": None})
            changed = True
        parts.append(part)
    return message.with_content(tuple(parts)) if changed else message


def strip_anthropic_cache_control(messages: Sequence[Message]) -> List[Message]:
    """Remove inline ``cache_control`` markers, e.g. before switching to Bedrock."""
    return [_strip_message(message, inline=True, blocks=False) for message in messages]


def strip_bedrock_cache_control(messages: Sequence[Message]) -> List[Message]:
    """Remove ``cachePoint`` blocks, e.g. before switching to Anthropic."""
    return [_strip_message(message, inline=False, blocks=True) for message in messages]


def strip_cache_markers(messages: Sequence[Message]) -> List[Message]:
    """Remove markers of both dialects."""
    return [_strip_message(message, inline=True, blocks=True) for message in messages]


def has_cache_marker(message: Message, dialect: Optional[str] = None) -> bool:
    """Whether a message carries a marker (of ``dialect``, or of either)."""
    for part in message.parts():
        if isinstance(part, CachePointPart):
            if dialect in (None, BLOCK_DIALECT):
                return True
        elif part.cache_control is not None and dialect in (None, INLINE_DIALECT):
            return True
    return False


def _mark_inline(message: Message) -> Optional[Message]:
    content = message.content
    if isinstance(content, str):
        if not content:
            return None
        return message.with_content((TextPart(text=content, cache_control=EPHEMERAL),))
    if not content:
        return None
    last = content[-1].model_copy(update={"cache_control": EPHEMERAL})
    return message.with_content(content[:-1] + (last,))


def _mark_block(message: Message) -> Optional[Message]:
    content = message.content
    if isinstance(content, str):
        if not content:
            return None
        return message.with_content((TextPart(text=content), CachePointPart()))
    if not content:
        return None
    for index in range(len(content) - 1, -1, -1):
        part = content[index]
        if isinstance(part, TextPart) and part.text:
            return message.with_content(content[: index + 1] + (CachePointPart(),) + content[index + 1 :])
    return message.with_content(content + (CachePointPart(),))


def _annotate(
    messages: Sequence[Message],
    mark: Callable[[Message], Optional[Message]],
) -> List[Message]:
    updated = strip_cache_markers(messages)
    marked = 0
    for index in range(len(updated) - 1, -1, -1):
        if marked >= MAX_CACHE_MARKERS:
            break
        message = updated[index]
        if message.role != Role.USER:
            continue
        replacement = mark(message)
        if replacement is None:
            logger.debug(f"User message {index} has no cacheable content; skipping")
            continue
        updated[index] = replacement
        marked += 1
    return updated


def add_cache_control(messages: Sequence[Message]) -> List[Message]:
    """Mark the last two user messages with inline ``cache_control``.

    The marker goes on the last content part of each message; string
    content becomes a single text part. User messages with empty content
    are skipped.

    Args:
        messages: Already pruned payload messages

    Returns:
        New list with markers of both dialects removed and fresh inline
        markers added
    """
    return _annotate(messages, _mark_inline)


def add_bedrock_cache_control(messages: Sequence[Message]) -> List[Message]:
    """Mark the last two user messages with Bedrock ``cachePoint`` blocks.

    The block is inserted right after the last non-empty text part, or
    appended when the message has no text. String content becomes
    ``[text, cachePoint]``. User messages with empty content are skipped.

    Args:
        messages: Already pruned payload messages

    Returns:
        New list with markers of both dialects removed and fresh cache
        points added
    """
    return _annotate(messages, _mark_block)


ANNOTATORS = {
    INLINE_DIALECT: add_cache_control,
    BLOCK_DIALECT: add_bedrock_cache_control,
}

STRIPPERS = {
    INLINE_DIALECT: strip_anthropic_cache_control,
    BLOCK_DIALECT: strip_bedrock_cache_control,
}
