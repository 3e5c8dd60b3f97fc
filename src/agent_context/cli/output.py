"""JSON output helpers for CLI commands.

Every command prints exactly one JSON document to stdout:

    {"success": true, "data": {...}}
    {"success": false, "error": "...", "data": {"error_code": ..., ...}}
"""

import json
import sys
from typing import Any, Dict, NoReturn, Optional

import click


def _emit(payload: Dict[str, Any]) -> None:
    click.echo(json.dumps(payload, indent=2, default=str))


def emit_success(data: Any) -> None:
    """Print a success envelope."""
    _emit({"success": True, "data": data})


def emit_error(
    message: str,
    *,
    code: str = "ERROR",
    error_type: str = "internal",
    remediation: Optional[str] = None,
    details: Optional[Dict[str, Any]] = None,
    exit_code: int = 1,
) -> NoReturn:
    """Print an error envelope and exit with a non-zero status."""
    data: Dict[str, Any] = {"error_code": code, "error_type": error_type}
    if remediation:
        data["remediation"] = remediation
    if details:
        data["details"] = details
    _emit({"success": False, "error": message, "data": data})
    sys.exit(exit_code)
