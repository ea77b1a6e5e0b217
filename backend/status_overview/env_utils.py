"""Environment lookups; secrets may be mounted as files via ``<NAME>_FILE``."""

from __future__ import annotations

import logging
import os
from pathlib import Path

logger = logging.getLogger("status_overview.env")

_TRUTHY = frozenset({"1", "true", "yes", "on"})


def _read_secret_file(name: str) -> str:
    secret_path = os.getenv(f"{name}_FILE", "").strip()
    if not secret_path:
        return ""
    try:
        return Path(secret_path).read_text(encoding="utf-8").strip()
    except OSError as exc:
        logger.warning("Could not read %s_FILE (%s)", name, exc.__class__.__name__)
        return ""


def get_env(name: str, default: str = "") -> str:
    """Return ``$NAME``, else the contents of ``$NAME_FILE``, else *default*."""
    return os.getenv(name) or _read_secret_file(name) or default


def env_bool(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in _TRUTHY
