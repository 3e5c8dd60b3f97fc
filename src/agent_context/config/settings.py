"""ContextConfig dataclass and global accessors.

Settings are layered, lowest to highest priority:

1. Defaults
2. XDG config (``~/.config/agent-context/config.toml``)
3. User config (``~/.agent-context.toml``)
4. Project config (``./agent-context.toml``)
5. Environment variables (``AGENT_CONTEXT_*``)

An explicit file (argument or ``AGENT_CONTEXT_CONFIG_FILE``) replaces steps
2-4.
"""

from __future__ import annotations

import logging
import os
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

from agent_context.config.parsing import (
    _normalize_log_level,
    _parse_bool,
    _try_parse_int,
)
from agent_context.core.providers import Provider
from agent_context.core.token_management.counter import TOKENS_PER_MESSAGE
from agent_context.core.token_management.encoder import DEFAULT_ENCODING

logger = logging.getLogger(__name__)

_ENV_PREFIX = "AGENT_CONTEXT_"
_CONFIG_FILE_ENV_VAR = "AGENT_CONTEXT_CONFIG_FILE"
_PROJECT_CONFIG = "agent-context.toml"
_USER_CONFIG = ".agent-context.toml"


@dataclass
class ContextConfig:
    """Settings for context-window management.

    Attributes:
        encoding_name: tiktoken encoding used by the shared encoder
        tokens_per_message: Framing overhead added to every message
        max_context_tokens: Default context budget (None = caller decides)
        thinking_enabled: Default for keeping reasoning chains together
        provider: Default provider for pruning and cache dialect
        log_level: Level for the ``agent_context`` logger
        structured_logging: Emit JSON-style log lines
    """

    encoding_name: str = DEFAULT_ENCODING
    tokens_per_message: int = TOKENS_PER_MESSAGE
    max_context_tokens: Optional[int] = None
    thinking_enabled: bool = False
    provider: str = Provider.ANTHROPIC.value
    log_level: str = "INFO"
    structured_logging: bool = False

    @classmethod
    def from_toml_dict(cls, data: Dict[str, Any]) -> "ContextConfig":
        """Create config from a parsed TOML document.

        Args:
            data: Dict from TOML parsing (``[context]`` and ``[logging]``)

        Returns:
            ContextConfig instance
        """
        config = cls()
        config._apply_toml(data)
        return config

    @classmethod
    def from_env(cls, config_file: Optional[str] = None) -> "ContextConfig":
        """Create configuration from environment variables and TOML files."""
        config = cls()

        toml_path = config_file or os.environ.get(_CONFIG_FILE_ENV_VAR)
        if toml_path:
            config._load_toml(Path(toml_path))
        else:
            xdg_config_home = os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config")
            for candidate in (
                Path(xdg_config_home) / "agent-context" / "config.toml",
                Path.home() / _USER_CONFIG,
                Path(_PROJECT_CONFIG),
            ):
                if candidate.exists():
                    config._load_toml(candidate)
                    logger.debug(f"Loaded config from {candidate}")

        config._load_env()
        return config

    def _load_toml(self, path: Path) -> None:
        """Load configuration from a TOML file."""
        if not path.exists():
            logger.warning(f"Config file not found: {path}")
            return
        try:
            with open(path, "rb") as f:
                data = tomllib.load(f)
        except (OSError, tomllib.TOMLDecodeError) as e:
            logger.error(f"Error loading config file {path}: {e}")
            return
        self._apply_toml(data)

    def _apply_toml(self, data: Dict[str, Any]) -> None:
        ctx = data.get("context", {})
        if "encoding" in ctx:
            self.encoding_name = str(ctx["encoding"])
        if "tokens_per_message" in ctx:
            self._set_int("tokens_per_message", ctx["tokens_per_message"])
        if "max_context_tokens" in ctx:
            self._set_int("max_context_tokens", ctx["max_context_tokens"])
        if "thinking_enabled" in ctx:
            self.thinking_enabled = _parse_bool(ctx["thinking_enabled"])
        if "provider" in ctx:
            self._set_provider(ctx["provider"])

        log = data.get("logging", {})
        if "level" in log:
            self.log_level = _normalize_log_level(log["level"])
        if "structured" in log:
            self.structured_logging = _parse_bool(log["structured"])

    def _load_env(self) -> None:
        """Override settings from ``AGENT_CONTEXT_*`` environment variables."""
        env = os.environ
        if encoding := env.get(f"{_ENV_PREFIX}ENCODING"):
            self.encoding_name = encoding
        if value := env.get(f"{_ENV_PREFIX}TOKENS_PER_MESSAGE"):
            self._set_int("tokens_per_message", value)
        if value := env.get(f"{_ENV_PREFIX}MAX_TOKENS"):
            self._set_int("max_context_tokens", value)
        if value := env.get(f"{_ENV_PREFIX}THINKING_ENABLED"):
            self.thinking_enabled = _parse_bool(value)
        if value := env.get(f"{_ENV_PREFIX}PROVIDER"):
            self._set_provider(value)
        if value := env.get(f"{_ENV_PREFIX}LOG_LEVEL"):
            self.log_level = _normalize_log_level(value)
        if value := env.get(f"{_ENV_PREFIX}STRUCTURED_LOGGING"):
            self.structured_logging = _parse_bool(value)

    def _set_int(self, name: str, value: Any) -> None:
        parsed = _try_parse_int(value, name=name)
        if parsed is not None:
            setattr(self, name, parsed)

    def _set_provider(self, value: Any) -> None:
        normalized = str(value).strip().lower()
        valid = {provider.value for provider in Provider}
        if normalized not in valid:
            logger.warning(
                "Invalid provider '%s'. Keeping '%s'. Valid options: %s",
                value,
                self.provider,
                ", ".join(sorted(valid)),
            )
            return
        self.provider = normalized

    def setup_logging(self) -> None:
        """Configure the ``agent_context`` logger from settings."""
        level = getattr(logging, self.log_level, logging.INFO)

        if self.structured_logging:
            formatter = logging.Formatter(
                '{"timestamp":"%(asctime)s","level":"%(levelname)s","logger":"%(name)s","message":"%(message)s"}'
            )
        else:
            formatter = logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")

        handler = logging.StreamHandler()
        handler.setFormatter(formatter)

        root_logger = logging.getLogger("agent_context")
        root_logger.setLevel(level)
        root_logger.addHandler(handler)


# Global configuration instance
_config: Optional[ContextConfig] = None


def get_config() -> ContextConfig:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = ContextConfig.from_env()
    return _config


def set_config(config: Optional[ContextConfig]) -> None:
    """Set (or with None, clear) the global configuration instance."""
    global _config
    _config = config
