"""Context pruning for token-budgeted conversations.

Key Components:
    - get_messages_within_token_limit(): Select the newest turns that fit
    - create_prune_messages(): Per-conversation pruner reused across turns
    - PruneOptions / PruningResult / PruneOutput: Options and results
    - find_thinking_start_index(): Start of the trailing reasoning chain

Usage:
    from agent_context.core.pruning import (
        create_prune_messages,
        get_messages_within_token_limit,
    )

    result = get_messages_within_token_limit(history, 8_000, cost_map,
                                             token_counter=counter)

    prune = create_prune_messages(provider="anthropic", max_tokens=8_000,
                                  token_counter=counter)
    output = prune(history, usage=last_usage)
"""

from .factory import (
    create_prune_messages,
    fold_openai_reasoning,
    make_pruner,
    reasoning_kind_for,
)
from .models import (
    PruneOptions,
    PruneOutput,
    PruningResult,
    normalize_start_type,
)
from .window import (
    find_thinking_start_index,
    get_messages_within_token_limit,
    select,
    turn_bounds,
)

__all__ = [
    # Models
    "PruneOptions",
    "PruningResult",
    "PruneOutput",
    "normalize_start_type",
    # Selection
    "get_messages_within_token_limit",
    "select",
    "find_thinking_start_index",
    "turn_bounds",
    # Factory
    "create_prune_messages",
    "make_pruner",
    "fold_openai_reasoning",
    "reasoning_kind_for",
]
