"""Token management for conversation context.

Provides encoder lifecycle management, per-message token counting and
usage normalization for managing a model's context window.

Key Components:
    - EncoderContext: Lazily loaded, shareable sub-word encoder
    - TokenCounter: Message -> token cost, with fixed framing overhead
    - create_token_counter(): Warm an encoder and return a ready counter
    - UsageMetadata / calculate_total_tokens(): Normalize usage reports
    - UsageAccumulator: Running usage totals across turns

Usage:
    from agent_context.core.token_management import (
        EncoderContext,
        create_token_counter,
        calculate_total_tokens,
    )

    counter = await create_token_counter(EncoderContext("o200k_base"))
    tokens = counter.count(message)

    usage = calculate_total_tokens({"input_tokens": 5})
    usage.total_tokens  # 5
"""

from .counter import TOKENS_PER_MESSAGE, TokenCounter, create_token_counter
from .encoder import (
    DEFAULT_ENCODING,
    EncoderContext,
    get_default_encoder_context,
    reset_default_encoder_context,
)
from .usage import (
    InputTokenDetails,
    UsageAccumulator,
    UsageMetadata,
    calculate_total_tokens,
    check_valid_number,
    is_usable_report,
    total_tokens,
)

__all__ = [
    # Encoder
    "DEFAULT_ENCODING",
    "EncoderContext",
    "get_default_encoder_context",
    "reset_default_encoder_context",
    # Counter
    "TOKENS_PER_MESSAGE",
    "TokenCounter",
    "create_token_counter",
    # Usage
    "InputTokenDetails",
    "UsageMetadata",
    "UsageAccumulator",
    "calculate_total_tokens",
    "check_valid_number",
    "is_usable_report",
    "total_tokens",
]
