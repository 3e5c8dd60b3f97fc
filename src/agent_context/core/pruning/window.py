"""Select the newest messages that fit a token budget.

Provides:
    - get_messages_within_token_limit(): budgeted suffix selection
    - find_thinking_start_index(): start of the trailing reasoning chain
    - turn_bounds(): atomic turn boundaries of a history

The retained window is always a suffix of the history that starts on a turn
boundary. A turn is an assistant message together with the tool messages
that immediately follow it; any other message is a turn of its own. Turns
are never split, and the newest turn is never dropped, even when it alone
exceeds the budget.
"""

from __future__ import annotations

import logging
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from agent_context.core.messages.models import ContentType, Message, Role

from .models import PruneOptions, PruningResult

logger = logging.getLogger(__name__)

TokenCounterFn = Callable[[Message], int]

# Used when the window would otherwise open on a tool result.
_DANGLING_TOOL_START = frozenset({Role.ASSISTANT, Role.USER})


def find_thinking_start_index(
    messages: Sequence[Message],
    reasoning_kind: ContentType = ContentType.THINKING,
) -> Optional[int]:
    """Find where the trailing chain of reasoning-bearing assistant turns begins.

    Scans backward from the newest message. Tool messages are skipped. Each
    assistant message carrying a ``reasoning_kind`` part moves the start
    back to it; the scan stops at the first assistant message without one,
    or at any user or system message.

    Returns:
        Index of the earliest assistant message in the chain, or None
    """
    start: Optional[int] = None
    for index in range(len(messages) - 1, -1, -1):
        message = messages[index]
        if message.role == Role.TOOL:
            continue
        if message.role != Role.ASSISTANT or not message.has_part(reasoning_kind):
            break
        start = index
    return start


def turn_bounds(
    messages: Sequence[Message],
    merge_from: Optional[int] = None,
) -> List[Tuple[int, int]]:
    """Split a history into atomic turns.

    Args:
        messages: Full history
        merge_from: If given, every turn from this index to the end is
            merged into one turn. Must be a turn start.

    Returns:
        Chronological ``(start, end)`` half-open index ranges
    """
    bounds: List[Tuple[int, int]] = []
    start = 0
    for index in range(1, len(messages)):
        joins_turn = (
            messages[index].role == Role.TOOL and messages[start].role == Role.ASSISTANT
        )
        if not joins_turn:
            bounds.append((start, index))
            start = index
    if messages:
        bounds.append((start, len(messages)))

    if merge_from is not None:
        bounds = [bound for bound in bounds if bound[1] <= merge_from]
        bounds.append((merge_from, len(messages)))
    return bounds


def _resolve_cost(
    index: int,
    message: Message,
    cost_map: Dict[int, int],
    token_counter: Optional[TokenCounterFn],
) -> int:
    cost = cost_map.get(index)
    if cost is None:
        if token_counter is None:
            raise ValueError(
                f"No token count cached for message {index} and no token_counter provided"
            )
        cost = token_counter(message)
        cost_map[index] = cost
    return cost


def get_messages_within_token_limit(
    messages: Sequence[Message],
    max_context_tokens: int,
    cost_map: Dict[int, int],
    *,
    token_counter: Optional[TokenCounterFn] = None,
    options: Optional[PruneOptions] = None,
) -> PruningResult:
    """Select the newest turns whose summed cost fits ``max_context_tokens``.

    Costs are read from ``cost_map`` by position in ``messages``. Missing
    costs are computed with ``token_counter`` and written back into
    ``cost_map``; messages older than the cut are never costed.

    Args:
        messages: Full chronological history
        max_context_tokens: Token budget for the retained window
        cost_map: Index -> token cost map owned by the caller
        token_counter: Counts messages missing from ``cost_map``
        options: Role filter and reasoning settings

    Returns:
        PruningResult where ``messages_to_refine + context == messages``

    Raises:
        ValueError: If the budget is negative, or a cost is missing and no
            counter was given

    Example:
        result = get_messages_within_token_limit(history, 8_000, cost_map,
                                                 token_counter=counter)
        payload = result.context
    """
    if max_context_tokens < 0:
        raise ValueError(f"max_context_tokens must be non-negative, got {max_context_tokens}")
    options = options or PruneOptions()
    history = list(messages)
    if not history:
        return PruningResult(context=[], remaining_context_tokens=max_context_tokens)

    thinking_start_index = None
    if options.thinking_enabled:
        thinking_start_index = find_thinking_start_index(history, options.reasoning_kind)

    def turn_cost(bound: Tuple[int, int]) -> int:
        return sum(
            _resolve_cost(index, history[index], cost_map, token_counter)
            for index in range(bound[0], bound[1])
        )

    bounds = turn_bounds(history, merge_from=thinking_start_index)
    used = 0
    cut = len(history)
    for position, bound in enumerate(reversed(bounds)):
        cost = turn_cost(bound)
        if position > 0 and used + cost > max_context_tokens:
            break
        used += cost
        cut = bound[0]

    if used > max_context_tokens:
        logger.debug(
            f"Newest turn ({used} tokens) exceeds budget {max_context_tokens}; keeping it anyway"
        )

    start_roles = options.start_roles
    if history[cut].role == Role.TOOL:
        # a tool result cannot open the window, whatever start_type asks for
        start_roles = _DANGLING_TOOL_START
    if start_roles:
        for bound in bounds:
            if bound[0] < cut:
                continue
            if history[bound[0]].role in start_roles:
                if bound[0] > cut:
                    used -= sum(cost_map[index] for index in range(cut, bound[0]))
                    cut = bound[0]
                break

    if cut > 0:
        logger.info(
            f"Pruned {cut} of {len(history)} messages to fit {max_context_tokens} tokens "
            f"({used} retained)"
        )

    return PruningResult(
        context=history[cut:],
        remaining_context_tokens=max_context_tokens - used,
        messages_to_refine=history[:cut],
        thinking_start_index=thinking_start_index,
    )


# Short alias matching the external interface name.
select = get_messages_within_token_limit
