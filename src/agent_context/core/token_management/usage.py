"""Token usage normalization and accumulation.

Provides:
    - UsageMetadata: normalized usage report
    - calculate_total_tokens(): normalize a partial usage report
    - check_valid_number(): positive finite number check
    - UsageAccumulator: running totals across turns

Provider adapters report usage in loosely shaped mappings where any field
may be missing or garbage. Missing and invalid values count as zero in
arithmetic; they never surface as NaN or infinity.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional, Union

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class InputTokenDetails:
    """Breakdown of input tokens served from or written to the prompt cache."""

    cache_creation: Optional[int] = None
    cache_read: Optional[int] = None


@dataclass(frozen=True)
class UsageMetadata:
    """Token usage for one model call, or a running total.

    Absent fields stay ``None`` so callers can tell "not reported" from
    zero when displaying usage.
    """

    input_tokens: Optional[int] = None
    output_tokens: Optional[int] = None
    total_tokens: Optional[int] = None
    input_token_details: Optional[InputTokenDetails] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "UsageMetadata":
        """Build from a raw provider mapping, dropping invalid values."""
        details = data.get("input_token_details")
        parsed_details = None
        if isinstance(details, Mapping):
            parsed_details = InputTokenDetails(
                cache_creation=_as_count(details.get("cache_creation")),
                cache_read=_as_count(details.get("cache_read")),
            )
        return cls(
            input_tokens=_as_count(data.get("input_tokens")),
            output_tokens=_as_count(data.get("output_tokens")),
            total_tokens=_as_count(data.get("total_tokens")),
            input_token_details=parsed_details,
        )

    def to_dict(self) -> dict[str, int]:
        return {
            "input_tokens": self.input_tokens or 0,
            "output_tokens": self.output_tokens or 0,
            "total_tokens": self.total_tokens or 0,
        }


UsageLike = Union[UsageMetadata, Mapping[str, Any]]


def _is_number(value: Any) -> bool:
    return (
        isinstance(value, (int, float))
        and not isinstance(value, bool)
        and math.isfinite(value)
    )


def _as_count(value: Any) -> Optional[int]:
    if not _is_number(value):
        if value is not None:
            logger.debug(f"Ignoring invalid usage value {value!r}")
        return None
    return int(value)


def check_valid_number(value: Any) -> bool:
    """True for finite, positive, non-boolean numbers."""
    return _is_number(value) and value > 0


def _coerce(usage: UsageLike) -> UsageMetadata:
    if isinstance(usage, UsageMetadata):
        return usage
    return UsageMetadata.from_dict(usage)


def calculate_total_tokens(usage: UsageLike) -> UsageMetadata:
    """Normalize a partial usage report into complete totals.

    Input tokens include prompt-cache creation and reads. A valid
    ``total_tokens`` is kept as reported; otherwise it is derived as input
    plus output. The argument is never modified.

    Example:
        calculate_total_tokens({"input_tokens": 5})
        # UsageMetadata(input_tokens=5, output_tokens=0, total_tokens=5)
    """
    parsed = _coerce(usage)
    details = parsed.input_token_details or InputTokenDetails()
    input_tokens = (
        (parsed.input_tokens or 0)
        + (details.cache_creation or 0)
        + (details.cache_read or 0)
    )
    output_tokens = parsed.output_tokens or 0
    total = parsed.total_tokens
    if total is None:
        total = input_tokens + output_tokens
    return UsageMetadata(
        input_tokens=input_tokens,
        output_tokens=output_tokens,
        total_tokens=total,
    )


def is_usable_report(usage: Optional[UsageLike]) -> bool:
    """Whether a report is complete enough to calibrate a pruning pass.

    Requires positive output tokens and positive input tokens, where input
    may come from the prompt cache alone.
    """
    if usage is None:
        return False
    parsed = _coerce(usage)
    details = parsed.input_token_details
    has_input = check_valid_number(parsed.input_tokens) or (
        details is not None
        and (check_valid_number(details.cache_creation) or check_valid_number(details.cache_read))
    )
    return has_input and check_valid_number(parsed.output_tokens)


@dataclass
class UsageAccumulator:
    """Running token totals across the turns of one conversation.

    Example:
        accumulator = UsageAccumulator()
        accumulator.add({"input_tokens": 120, "output_tokens": 30})
        accumulator.add({"input_tokens": 160})
        accumulator.totals.total_tokens  # 310
    """

    input_tokens: int = 0
    output_tokens: int = 0
    total_tokens: int = 0
    turns: int = 0
    latest: Optional[UsageMetadata] = field(default=None)

    def add(self, usage: UsageLike) -> UsageMetadata:
        """Normalize one report, add it to the totals and return it."""
        normalized = calculate_total_tokens(usage)
        self.input_tokens += normalized.input_tokens or 0
        self.output_tokens += normalized.output_tokens or 0
        self.total_tokens += normalized.total_tokens or 0
        self.turns += 1
        self.latest = _coerce(usage)
        return normalized

    @property
    def totals(self) -> UsageMetadata:
        return UsageMetadata(
            input_tokens=self.input_tokens,
            output_tokens=self.output_tokens,
            total_tokens=self.total_tokens,
        )

    def reset(self) -> None:
        self.input_tokens = 0
        self.output_tokens = 0
        self.total_tokens = 0
        self.turns = 0
        self.latest = None


# Short alias matching the external interface name.
total_tokens = calculate_total_tokens
