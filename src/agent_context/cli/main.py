"""agent-context command-line interface.

Commands read a JSON file holding a list of messages in the common
``{"role", "content"}`` wire shape (or an object with a ``messages`` key)
and print a JSON envelope on stdout.
"""

import asyncio
import json
import logging
from pathlib import Path
from typing import Any, List, Optional, Tuple

import click
from pydantic import ValidationError

from agent_context import __version__
from agent_context.cli.output import emit_error, emit_success
from agent_context.config import ContextConfig
from agent_context.core.errors import EncoderLoadError
from agent_context.core.messages import ANNOTATORS, Message, messages_from_payload
from agent_context.core.providers import cache_dialect_for
from agent_context.core.pruning import (
    PruneOptions,
    get_messages_within_token_limit,
    reasoning_kind_for,
)
from agent_context.core.token_management import (
    EncoderContext,
    TokenCounter,
    UsageAccumulator,
    create_token_counter,
)

logger = logging.getLogger(__name__)

_ROLE_CHOICES = click.Choice(["system", "user", "assistant", "tool"], case_sensitive=False)


def _get_config(ctx: click.Context) -> ContextConfig:
    return ctx.obj["config"]


def _read_json(path: str) -> Any:
    try:
        return json.loads(Path(path).read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        emit_error(
            f"Invalid JSON in {path}: {exc}",
            code="INVALID_JSON",
            error_type="validation",
            details={"path": path},
        )


def _load_messages(path: str) -> List[Message]:
    data = _read_json(path)
    if isinstance(data, dict) and "messages" in data:
        data = data["messages"]
    if not isinstance(data, list):
        emit_error(
            "Expected a JSON list of messages",
            code="VALIDATION_ERROR",
            error_type="validation",
            remediation="Provide a list of {role, content} objects or an object with a 'messages' key",
            details={"path": path},
        )
    try:
        return messages_from_payload(data)
    except ValidationError as exc:
        emit_error(
            f"Invalid message in {path}",
            code="VALIDATION_ERROR",
            error_type="validation",
            details={"errors": exc.errors(include_url=False, include_input=False)},
        )


def _build_counter(config: ContextConfig) -> TokenCounter:
    context = EncoderContext(config.encoding_name)
    try:
        return asyncio.run(
            create_token_counter(context, tokens_per_message=config.tokens_per_message)
        )
    except EncoderLoadError as exc:
        emit_error(
            str(exc),
            code="ENCODER_UNAVAILABLE",
            error_type="dependency",
            remediation="Check the encoding name and network access for the first download",
            details={"encoding": exc.encoding_name},
        )


@click.group()
@click.option(
    "--config",
    "config_file",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help="Path to an agent-context.toml file (replaces the layered lookup).",
)
@click.option("--verbose", is_flag=True, help="Log to stderr at the configured level.")
@click.version_option(__version__, prog_name="agent-context")
@click.pass_context
def cli(ctx: click.Context, config_file: Optional[str], verbose: bool) -> None:
    """Token counting, context pruning and prompt-cache annotation."""
    config = ContextConfig.from_env(config_file)
    if verbose:
        config.setup_logging()
    ctx.ensure_object(dict)
    ctx.obj["config"] = config


@cli.command("count")
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
@click.pass_context
def count_cmd(ctx: click.Context, file: str) -> None:
    """Show the token cost of every message in FILE."""
    config = _get_config(ctx)
    messages = _load_messages(file)
    counter = _build_counter(config)

    costs = [counter.count(message) for message in messages]
    emit_success({
        "encoding": config.encoding_name,
        "tokens_per_message": counter.tokens_per_message,
        "messages": [
            {"index": index, "role": message.role.value, "tokens": cost}
            for index, (message, cost) in enumerate(zip(messages, costs))
        ],
        "total_tokens": sum(costs),
    })


@cli.command("prune")
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
@click.option("--max-tokens", type=click.IntRange(min=0), default=None, help="Context budget.")
@click.option(
    "--start-type",
    "start_types",
    type=_ROLE_CHOICES,
    multiple=True,
    help="Role allowed to open the retained window (repeatable).",
)
@click.option("--thinking/--no-thinking", default=None, help="Keep the trailing reasoning chain together.")
@click.option(
    "--reasoning-kind",
    type=click.Choice(["thinking", "reasoning_content"]),
    default=None,
    help="Reasoning block type (defaults from the configured provider).",
)
@click.pass_context
def prune_cmd(
    ctx: click.Context,
    file: str,
    max_tokens: Optional[int],
    start_types: Tuple[str, ...],
    thinking: Optional[bool],
    reasoning_kind: Optional[str],
) -> None:
    """Select the newest messages of FILE that fit the token budget."""
    config = _get_config(ctx)
    budget = max_tokens if max_tokens is not None else config.max_context_tokens
    if budget is None:
        emit_error(
            "No token budget given",
            code="VALIDATION_ERROR",
            error_type="validation",
            remediation="Pass --max-tokens or set AGENT_CONTEXT_MAX_TOKENS",
        )

    messages = _load_messages(file)
    counter = _build_counter(config)
    logger.debug(f"Pruning {len(messages)} messages from {file} to {budget} tokens")
    options = PruneOptions(
        start_type=start_types or None,
        thinking_enabled=config.thinking_enabled if thinking is None else thinking,
        reasoning_kind=reasoning_kind or reasoning_kind_for(config.provider),
    )
    cost_map: dict = {}
    result = get_messages_within_token_limit(
        messages, budget, cost_map, token_counter=counter, options=options
    )

    emit_success({
        "max_tokens": budget,
        "total_messages": len(messages),
        "retained": len(result.context),
        "pruned": len(result.messages_to_refine),
        "first_retained_index": len(result.messages_to_refine),
        "remaining_context_tokens": result.remaining_context_tokens,
        "thinking_start_index": result.thinking_start_index,
        "counted_messages": len(cost_map),
        "context": [message.to_payload() for message in result.context],
    })


@cli.command("annotate")
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
@click.option(
    "--dialect",
    type=click.Choice(sorted(ANNOTATORS)),
    default=None,
    help="Cache marker dialect (defaults from the configured provider).",
)
@click.pass_context
def annotate_cmd(ctx: click.Context, file: str, dialect: Optional[str]) -> None:
    """Add prompt-cache breakpoints to the messages in FILE."""
    config = _get_config(ctx)
    dialect = dialect or cache_dialect_for(config.provider)
    messages = _load_messages(file)

    annotated = ANNOTATORS[dialect](messages)
    emit_success({
        "dialect": dialect,
        "messages": [message.to_payload() for message in annotated],
    })


@cli.command("usage")
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
def usage_cmd(file: str) -> None:
    """Normalize the usage report(s) in FILE and sum them."""
    data = _read_json(file)
    reports = data if isinstance(data, list) else [data]
    if not all(isinstance(report, dict) for report in reports):
        emit_error(
            "Expected a usage object or a list of usage objects",
            code="VALIDATION_ERROR",
            error_type="validation",
            details={"path": file},
        )

    accumulator = UsageAccumulator()
    normalized = [accumulator.add(report).to_dict() for report in reports]
    emit_success({
        "turns": accumulator.turns,
        "reports": normalized,
        "totals": accumulator.totals.to_dict(),
    })


__all__ = ["cli"]
