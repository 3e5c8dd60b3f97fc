"""agent-context: token-budgeted context management for LLM agents.

Counts message tokens with a shared tiktoken encoder, prunes conversation
history to fit a context window, and adds prompt-cache breakpoints to the
payload that is finally sent.
"""

__version__ = "0.1.0"

from agent_context.config import ContextConfig, get_config, set_config
from agent_context.core.errors import (
    AgentContextError,
    EncoderLoadError,
    EncoderNotReadyError,
    MalformedHistoryError,
)
from agent_context.core.messages import (
    ContentType,
    Message,
    Role,
    add_bedrock_cache_control,
    add_cache_control,
    messages_from_payload,
)
from agent_context.core.providers import Provider
from agent_context.core.pruning import (
    PruneOutput,
    PruningResult,
    create_prune_messages,
    get_messages_within_token_limit,
)
from agent_context.core.token_management import (
    EncoderContext,
    TokenCounter,
    UsageMetadata,
    calculate_total_tokens,
    create_token_counter,
)

__all__ = [
    "__version__",
    "ContextConfig",
    "get_config",
    "set_config",
    "AgentContextError",
    "EncoderLoadError",
    "EncoderNotReadyError",
    "MalformedHistoryError",
    "ContentType",
    "Message",
    "Role",
    "add_cache_control",
    "add_bedrock_cache_control",
    "messages_from_payload",
    "Provider",
    "PruneOutput",
    "PruningResult",
    "create_prune_messages",
    "get_messages_within_token_limit",
    "EncoderContext",
    "TokenCounter",
    "UsageMetadata",
    "calculate_total_tokens",
    "create_token_counter",
]
