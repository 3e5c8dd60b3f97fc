"""Message models and prompt-cache annotation.

Key Components:
    - Message / Role / ContentType: Immutable message model
    - TextPart, ImagePart, ToolCallPart, ThinkingPart, ReasoningPart,
      RedactedThinkingPart, ErrorPart, CachePointPart, UnknownPart:
      Tagged content part variants
    - add_cache_control(): Inline (Anthropic) cache breakpoints
    - add_bedrock_cache_control(): Block (Bedrock) cache breakpoints
    - strip_*: Marker removal when switching dialects
"""

from .cache import (
    ANNOTATORS,
    BLOCK_DIALECT,
    INLINE_DIALECT,
    MAX_CACHE_MARKERS,
    STRIPPERS,
    add_bedrock_cache_control,
    add_cache_control,
    has_cache_marker,
    strip_anthropic_cache_control,
    strip_bedrock_cache_control,
    strip_cache_markers,
)
from .models import (
    CacheControl,
    CachePointPart,
    ContentPart,
    ContentType,
    ErrorPart,
    ImagePart,
    Message,
    ReasoningPart,
    ReasoningText,
    RedactedThinkingPart,
    Role,
    TextPart,
    ThinkingPart,
    ToolCall,
    ToolCallPart,
    UnknownPart,
    messages_from_payload,
    resolve_role,
)

__all__ = [
    # Models
    "Role",
    "resolve_role",
    "ContentType",
    "ContentPart",
    "CacheControl",
    "TextPart",
    "ImagePart",
    "ToolCall",
    "ToolCallPart",
    "ThinkingPart",
    "ReasoningText",
    "ReasoningPart",
    "RedactedThinkingPart",
    "ErrorPart",
    "CachePointPart",
    "UnknownPart",
    "Message",
    "messages_from_payload",
    # Cache annotation
    "MAX_CACHE_MARKERS",
    "INLINE_DIALECT",
    "BLOCK_DIALECT",
    "ANNOTATORS",
    "STRIPPERS",
    "add_cache_control",
    "add_bedrock_cache_control",
    "strip_anthropic_cache_control",
    "strip_bedrock_cache_control",
    "strip_cache_markers",
    "has_cache_marker",
]
