"""Reusable per-conversation pruner.

Provides:
    - create_prune_messages(): bind a provider, budget and counter into a
      pruner that is called once per model turn
"""

from __future__ import annotations

import logging
from typing import Callable, Dict, List, Mapping, Optional, Sequence, Union

from agent_context.core.errors import MalformedHistoryError
from agent_context.core.messages.models import ContentType, Message, Role, ThinkingPart
from agent_context.core.providers import Provider
from agent_context.core.token_management.usage import (
    UsageLike,
    calculate_total_tokens,
    is_usable_report,
)

from .models import PruneOptions, PruneOutput, StartType
from .window import TokenCounterFn, get_messages_within_token_limit

logger = logging.getLogger(__name__)

PruneMessagesFn = Callable[..., PruneOutput]


def reasoning_kind_for(provider: Union[Provider, str]) -> ContentType:
    """Reasoning block type a provider emits."""
    if Provider(provider) == Provider.BEDROCK:
        return ContentType.REASONING_CONTENT
    return ContentType.THINKING


def fold_openai_reasoning(messages: Sequence[Message]) -> List[Message]:
    """Move side-channel reasoning of tool-calling turns into content.

    OpenAI-compatible proxies in front of Anthropic models return the
    reasoning text in ``additional_kwargs["reasoning_content"]`` and the
    signed blocks in ``provider_specific_fields.thinking_blocks``. Such an
    assistant message is replaced by a copy whose content is a single
    thinking part. The input list and its messages are left untouched.
    """
    folded = list(messages)
    for index, message in enumerate(folded):
        if message.role != Role.ASSISTANT or not message.tool_calls:
            continue
        kwargs = message.additional_kwargs
        reasoning = kwargs.get("reasoning_content")
        fields = kwargs.get("provider_specific_fields")
        blocks = fields.get("thinking_blocks") if isinstance(fields, Mapping) else None
        if not isinstance(reasoning, str) or not isinstance(blocks, list):
            continue

        signature = None
        if blocks and isinstance(blocks[-1], Mapping):
            signature = blocks[-1].get("signature")
        remaining_kwargs = {key: value for key, value in kwargs.items() if key != "reasoning_content"}
        folded[index] = message.model_copy(
            update={
                "content": (ThinkingPart(thinking=reasoning, signature=signature),),
                "additional_kwargs": remaining_kwargs,
            }
        )
    return folded


def create_prune_messages(
    *,
    provider: Union[Provider, str],
    max_tokens: int,
    token_counter: TokenCounterFn,
    start_index: int = 0,
    cost_map: Optional[Mapping[int, int]] = None,
    thinking_enabled: bool = False,
) -> PruneMessagesFn:
    """Create a pruner for one conversation.

    The pruner keeps its own copy of the cost map, so every message is
    counted at most once across turns. Calls must be serialized per
    conversation.

    Args:
        provider: Provider the payload is built for
        max_tokens: Token budget for the context window
        token_counter: Counts messages not yet in the cost map
        start_index: Index of the first message of the current run; costs
            of earlier messages are expected in ``cost_map``
        cost_map: Initial index -> token cost map (copied)
        thinking_enabled: Whether the model is running with extended
            thinking

    Returns:
        ``prune_messages(messages, usage=None, start_type=None) -> PruneOutput``

    Example:
        prune = create_prune_messages(
            provider="anthropic",
            max_tokens=100_000,
            token_counter=counter,
            cost_map={0: system_tokens},
        )
        output = prune(history, usage=last_usage)
        payload = output.context
    """
    if max_tokens < 0:
        raise ValueError(f"max_tokens must be non-negative, got {max_tokens}")
    if start_index < 0:
        raise ValueError(f"start_index must be non-negative, got {start_index}")

    provider = Provider(provider)
    reasoning_kind = reasoning_kind_for(provider)
    index_costs: Dict[int, int] = dict(cost_map or {})
    state = {
        "last_turn_start": start_index,
        "last_cut_off": 0,
        "running_total": sum(index_costs.values()),
    }

    def prune_messages(
        messages: Sequence[Message],
        usage: Optional[UsageLike] = None,
        start_type: StartType = None,
    ) -> PruneOutput:
        """Derive this turn's context from the full history.

        Args:
            messages: Full chronological history
            usage: Latest usage report from the provider, if any
            start_type: Role(s) eligible to start the window

        Raises:
            MalformedHistoryError: If the history is shorter than at the
                previous call
        """
        history = list(messages)
        if state["last_turn_start"] > len(history):
            raise MalformedHistoryError(
                f"History has {len(history)} messages but the pruner already saw "
                f"{state['last_turn_start']}",
                history_length=len(history),
                expected_index=state["last_turn_start"],
            )
        if provider == Provider.OPENAI and thinking_enabled:
            history = fold_openai_reasoning(history)

        current_usage = None
        if is_usable_report(usage):
            current_usage = calculate_total_tokens(usage)
            state["running_total"] = current_usage.total_tokens or 0

        first_new = state["last_turn_start"]
        for index in range(first_new, len(history)):
            if index in index_costs:
                continue
            message = history[index]
            if index == first_new and current_usage is not None and message.role == Role.ASSISTANT:
                # The reply the usage report describes; its size is known exactly.
                index_costs[index] = current_usage.output_tokens or 0
                continue
            index_costs[index] = token_counter(message)
            state["running_total"] += index_costs[index]
        state["last_turn_start"] = len(history)

        if state["last_cut_off"] == 0 and state["running_total"] <= max_tokens:
            return PruneOutput(
                context=history,
                cost_map=dict(index_costs),
                remaining_context_tokens=max_tokens - state["running_total"],
            )

        result = get_messages_within_token_limit(
            history,
            max_tokens,
            index_costs,
            token_counter=token_counter,
            options=PruneOptions(
                start_type=start_type,
                thinking_enabled=thinking_enabled,
                reasoning_kind=reasoning_kind,
            ),
        )
        state["last_cut_off"] = len(history) - len(result.context)
        return PruneOutput(
            context=result.context,
            cost_map=dict(index_costs),
            messages_to_refine=result.messages_to_refine,
            remaining_context_tokens=result.remaining_context_tokens,
            thinking_start_index=result.thinking_start_index,
        )

    return prune_messages


# Short alias matching the external interface name.
make_pruner = create_prune_messages
