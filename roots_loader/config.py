"""Configuration loading from environment variables."""
from __future__ import annotations

import os
import re
from dataclasses import dataclass
from typing import Mapping, Optional

from .utils import default_var, parse_flag_env, parse_int_env

MALFORMED_POLICIES = ("abort", "skip")
DEFAULT_TABLE = "roots"


@dataclass(frozen=True)
class LoaderConfig:
    connection_string: str
    kind: str
    quality: str
    table: str
    on_malformed: str
    log_every: int
    create_table: bool
    log_level: str
    file_log_level: str
    log_dir: str


def normalize_table_name(value: str) -> str:
    cleaned = re.sub(r"[^A-Za-z0-9_]", "", value or "")
    if not cleaned:
        return DEFAULT_TABLE
    return cleaned


def normalize_malformed_policy(value: str) -> str:
    policy = (value or "").strip().lower()
    if policy not in MALFORMED_POLICIES:
        return "abort"
    return policy


def load_config(environ: Optional[Mapping[str, str]] = None) -> LoaderConfig:
    """Resolve loader settings from environ (defaults to os.environ)."""
    env = os.environ if environ is None else environ
    connection_string = default_var(env, "DATABASE_URL", "").strip()
    kind = default_var(env, "ROOTS_KIND", "morphemes").strip().lower()
    quality = default_var(env, "ROOTS_QUALITY", "")
    table = normalize_table_name(default_var(env, "ROOTS_TABLE", DEFAULT_TABLE))
    on_malformed = normalize_malformed_policy(default_var(env, "ROOTS_ON_MALFORMED", "abort"))
    log_every = parse_int_env(env, "ROOTS_LOG_EVERY", 1000, min_value=1, max_value=1_000_000)
    create_table = parse_flag_env(env, "ROOTS_CREATE_TABLE", "0")
    log_level = default_var(env, "LOG_LEVEL", "INFO").strip().upper()
    file_log_level = default_var(env, "FILE_LOG_LEVEL", "DEBUG").strip().upper()
    log_dir = default_var(env, "LOG_DIR", "").strip()
    return LoaderConfig(
        connection_string=connection_string,
        kind=kind,
        quality=quality,
        table=table,
        on_malformed=on_malformed,
        log_every=log_every,
        create_table=create_table,
        log_level=log_level,
        file_log_level=file_log_level,
        log_dir=log_dir,
    )
