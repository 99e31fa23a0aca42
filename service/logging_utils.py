# service/logging_utils.py
"""
JSONL sink for run records.

Two streams, one JSON object per line:

    $LOG_DIR/<ACTIVITY_LOG_PREFIX>-YYYY-MM-DD.jsonl   (default prefix "activity")
    $LOG_DIR/<ERROR_LOG_PREFIX>-YYYY-MM-DD.jsonl      (default prefix "error")

LOG_DIR defaults to ./local/logs. Files roll over daily by name; setting
ACTIVITY_LOG_MAX_BYTES > 0 also moves a file aside once it reaches that size.
The environment is read on every write.
"""

from __future__ import annotations

import contextlib
import datetime as _dt
import json
import os
import socket
from typing import Any

_DEFAULT_LOG_DIR = os.path.join("local", "logs")

# Case-insensitive substrings; any dict key containing one is scrubbed
_SECRET_KEY_PARTS = frozenset({
    "password",
    "token",
    "apikey",
    "api_key",
    "secret",
    "authorization",
    "cookie",
})
_MASK = "***REDACTED***"

_STREAMS = {
    # kind -> (env var holding the prefix, default prefix)
    "activity": ("ACTIVITY_LOG_PREFIX", "activity"),
    "error": ("ERROR_LOG_PREFIX", "error"),
}

_HOST = socket.gethostname()


def write_activity_log(record: dict[str, Any]) -> None:
    """
    Append one record to today's activity log.

    The record is redacted and stamped with host/pid first; the caller's dict
    is left alone. OSError from the filesystem propagates.
    """
    _append("activity", record)


def write_error_log(record: dict[str, Any]) -> None:
    _append("error", record)


def get_activity_log_path() -> str:
    return _stream_path("activity")


def get_error_log_path() -> str:
    return _stream_path("error")


def redact(record: dict[str, Any], keys: set[str] | None = None) -> dict[str, Any]:
    """Deep copy of `record` with secret-looking keys masked (nested dicts and lists too)."""
    return _scrub(record, frozenset(k.lower() for k in keys) if keys else _SECRET_KEY_PARTS)


# ---- internals ---------------------------------------------------------------


def _stream_path(kind: str) -> str:
    env_name, default_prefix = _STREAMS[kind]
    prefix = os.getenv(env_name, default_prefix)
    log_dir = os.getenv("LOG_DIR") or _DEFAULT_LOG_DIR
    return os.path.join(log_dir, f"{prefix}-{_dt.date.today().isoformat()}.jsonl")


def _scrub(value: Any, parts: frozenset[str]) -> Any:
    if isinstance(value, dict):
        return {
            k: _MASK if isinstance(k, str) and any(p in k.lower() for p in parts) else _scrub(v, parts)
            for k, v in value.items()
        }
    if isinstance(value, (list, tuple)):
        return [_scrub(v, parts) for v in value]
    return value


def _size_limit() -> int:
    raw = os.getenv("ACTIVITY_LOG_MAX_BYTES", "")
    return int(raw) if raw.strip().lstrip("-").isdigit() else 0


def _roll_over(path: str) -> None:
    limit = _size_limit()
    if limit <= 0 or not os.path.exists(path) or os.path.getsize(path) < limit:
        return
    stamp = _dt.datetime.now().strftime("%Y%m%d-%H%M%S")
    with contextlib.suppress(FileNotFoundError):
        os.replace(path, f"{path}.{stamp}")


def _append(kind: str, record: dict[str, Any]) -> None:
    payload = _scrub(record, _SECRET_KEY_PARTS)
    extra = payload.get("_meta") if isinstance(payload.get("_meta"), dict) else {}
    payload["_meta"] = {**extra, "host": _HOST, "pid": os.getpid()}
    # default=str: dates and enums in records are written as text
    line = json.dumps(payload, ensure_ascii=False, separators=(",", ":"), default=str) + "\n"

    path = _stream_path(kind)
    os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
    _roll_over(path)

    fd = os.open(path, os.O_CREAT | os.O_APPEND | os.O_WRONLY, 0o644)
    try:
        os.write(fd, line.encode("utf-8"))
    finally:
        os.close(fd)
