"""Context pruning option and result types.

Provides:
    - PruneOptions: Role filter and reasoning settings for a pruning pass
    - PruningResult: Outcome of selecting messages within a token budget
    - PruneOutput: Outcome of one call to a pruner built by the factory
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Collection, Dict, FrozenSet, List, Optional, Union

from agent_context.core.messages.models import ContentType, Message, Role, resolve_role

StartType = Union[Role, str, Collection[Union[Role, str]], None]

REASONING_KINDS = frozenset({ContentType.THINKING, ContentType.REASONING_CONTENT})


def normalize_start_type(start_type: StartType) -> FrozenSet[Role]:
    """Turn a role, role name or collection of them into a set of roles."""
    if start_type is None:
        return frozenset()
    if isinstance(start_type, str):
        return frozenset({resolve_role(start_type)})
    return frozenset(resolve_role(item) for item in start_type)


@dataclass(frozen=True)
class PruneOptions:
    """Options for one pruning pass.

    Attributes:
        start_type: Role(s) eligible to start the retained window
        thinking_enabled: Keep the trailing reasoning chain together and
            report where it starts
        reasoning_kind: Which content part counts as a reasoning block
            (``thinking`` or ``reasoning_content``)
    """

    start_type: StartType = None
    thinking_enabled: bool = False
    reasoning_kind: ContentType = ContentType.THINKING

    def __post_init__(self) -> None:
        kind = ContentType(self.reasoning_kind)
        if kind not in REASONING_KINDS:
            raise ValueError(
                f"reasoning_kind must be one of {sorted(k.value for k in REASONING_KINDS)}, "
                f"got {kind.value!r}"
            )
        object.__setattr__(self, "reasoning_kind", kind)
        # raises ValueError for unknown role names
        normalize_start_type(self.start_type)

    @property
    def start_roles(self) -> FrozenSet[Role]:
        return normalize_start_type(self.start_type)


@dataclass
class PruningResult:
    """Messages selected to fit a token budget.

    Attributes:
        context: Retained chronological suffix of the input
        remaining_context_tokens: Budget minus the retained cost; negative
            only when the newest turn alone exceeds the budget
        messages_to_refine: Dropped chronological prefix, a candidate for
            summarization by the caller
        thinking_start_index: Index where the trailing chain of
            reasoning-bearing assistant messages begins, if any
    """

    context: List[Message]
    remaining_context_tokens: int
    messages_to_refine: List[Message] = field(default_factory=list)
    thinking_start_index: Optional[int] = None


@dataclass
class PruneOutput:
    """Result of one call to a pruner from create_prune_messages().

    Attributes:
        context: Messages to send this turn
        cost_map: Updated index -> token cost map (a copy owned by the caller)
        messages_to_refine: Messages dropped this turn
        remaining_context_tokens: Budget left after the retained context
        thinking_start_index: See PruningResult
    """

    context: List[Message]
    cost_map: Dict[int, int]
    messages_to_refine: List[Message] = field(default_factory=list)
    remaining_context_tokens: int = 0
    thinking_start_index: Optional[int] = None
