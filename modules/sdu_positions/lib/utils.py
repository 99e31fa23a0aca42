from __future__ import annotations

import os
from datetime import datetime
from email.utils import format_datetime
from typing import Any

_ELLIPSIS = "..."


def collapse_ws(s: str | None) -> str:
    """
    Join runs of whitespace (including newlines and NBSP) into single spaces
    and trim both ends.
    """
    if not s:
        return ""
    return " ".join(s.split())


def truncate_ellipsis(s: str, limit: int) -> str:
    """
    Cut `s` to at most `limit` characters, ending in '...' when shortened.
    """
    if limit <= 0:
        return ""
    if len(s) <= limit:
        return s
    if limit <= len(_ELLIPSIS):
        return s[:limit]
    return s[: limit - len(_ELLIPSIS)].rstrip() + _ELLIPSIS


def truthy(v: Any) -> bool:
    """
    Normalize common truthy inputs from env/kwargs.
    Accepts bools or strings like: '1', 'true', 'yes', 'on'.
    """
    if isinstance(v, bool):
        return v
    if v is None:
        return False
    if isinstance(v, (int, float)):
        return v != 0
    s = str(v).strip().lower()
    return s in {"1", "true", "yes", "on", "y", "t"}


def now_local() -> datetime:
    """Current local time with its UTC offset, truncated to whole seconds."""
    return datetime.now().astimezone().replace(microsecond=0)


def rfc2822(dt: datetime) -> str:
    return format_datetime(dt)


def getenv_str(name: str, default: str | None = None) -> str | None:
    """
    Typed wrapper for environment access. Empty values count as unset.
    """
    val = os.getenv(name)
    return val if val else default
