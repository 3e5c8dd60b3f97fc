"""Configuration package for agent-context.

Sub-modules:
    parsing  – Boolean/integer/log-level parsing helpers
    settings – ContextConfig dataclass, get_config/set_config globals
"""

from agent_context.config.parsing import (  # noqa: F401
    _normalize_log_level,
    _parse_bool,
    _try_parse_int,
)
from agent_context.config.settings import (  # noqa: F401
    ContextConfig,
    get_config,
    set_config,
)
