"""Generic helper utilities used across the project."""
from __future__ import annotations

from typing import Mapping, Optional


def default_var(environ: Mapping[str, str], key: str, default: str) -> str:
    """Return environ[key], or default when the variable is not set."""
    value = environ.get(key)
    if value is None:
        return default
    return value


def parse_int_env(
    environ: Mapping[str, str],
    name: str,
    default: int,
    *,
    min_value: Optional[int] = None,
    max_value: Optional[int] = None,
) -> int:
    """Parse an integer environment variable with optional bounds."""
    try:
        value = int(default_var(environ, name, str(default)))
    except ValueError:
        value = default
    if min_value is not None:
        value = max(min_value, value)
    if max_value is not None:
        value = min(max_value, value)
    return value


def parse_flag_env(environ: Mapping[str, str], name: str, default: str = "0") -> bool:
    return default_var(environ, name, default).strip().lower() in ("1", "true", "yes", "on")
