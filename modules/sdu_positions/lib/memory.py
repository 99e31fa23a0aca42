"""
First-seen memory: fingerprint -> RFC-2822 timestamp, persisted as JSON.

    {"first_seen_map": {"12345678901234567890": "Sun, 05 Mar 2023 10:00:00 +0100"}}

Loading never fails (a missing or corrupt file means "start fresh") and saving
is best-effort. The map only ever grows.
"""

from __future__ import annotations

import contextlib
import json
import os
import tempfile
from dataclasses import dataclass, field

from .logging_bridge import error as log_error

_MAP_KEY = "first_seen_map"


@dataclass
class Memory:
    first_seen_map: dict[str, str] = field(default_factory=dict)

    def get(self, fingerprint: int) -> str | None:
        return self.first_seen_map.get(str(fingerprint))

    def record(self, fingerprint: int, timestamp: str) -> None:
        self.first_seen_map[str(fingerprint)] = timestamp

    def __len__(self) -> int:
        return len(self.first_seen_map)

    def __contains__(self, fingerprint: object) -> bool:
        return str(fingerprint) in self.first_seen_map

    def to_json(self) -> dict:
        return {_MAP_KEY: dict(self.first_seen_map)}

    @classmethod
    def from_json(cls, data: object) -> Memory:
        """
        Build Memory from decoded JSON. Anything that is not the expected
        shape yields an empty Memory; non-string entries are dropped.
        """
        if not isinstance(data, dict):
            return cls()
        raw = data.get(_MAP_KEY)
        if not isinstance(raw, dict):
            return cls()
        return cls({k: v for k, v in raw.items() if isinstance(k, str) and isinstance(v, str)})


# ---- Public API -------------------------------------------------------------


def load(path: str) -> Memory:
    """Read the memory file; return an empty Memory on any failure."""
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError):
        # missing/unreadable file, JSONDecodeError, UnicodeDecodeError
        return Memory()
    return Memory.from_json(data)


def save(memory: Memory, path: str) -> bool:
    """
    Write the memory file. A temp file in the same directory is written first
    and swapped in with os.replace, so a failed write leaves the previous
    snapshot intact. Failures are logged and swallowed.

    Returns:
        True if the file was written.
    """
    tmp_path = None
    try:
        payload = json.dumps(memory.to_json(), ensure_ascii=False)
        d = os.path.dirname(os.path.abspath(path))
        os.makedirs(d, exist_ok=True)
        with tempfile.NamedTemporaryFile(
            "w", encoding="utf-8", dir=d, prefix=".memory-", suffix=".tmp", delete=False
        ) as f:
            tmp_path = f.name
            f.write(payload)
        os.replace(tmp_path, path)
    except (OSError, TypeError, ValueError) as e:
        if tmp_path is not None:
            with contextlib.suppress(FileNotFoundError):
                os.unlink(tmp_path)
        log_error({
            "component": "sdu_positions.memory",
            "op": "save",
            "memory_path": path,
            "error": repr(e),
        })
        return False
    return True
