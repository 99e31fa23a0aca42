from __future__ import annotations

import hashlib
from collections.abc import Callable, Iterable
from dataclasses import dataclass, replace
from datetime import datetime
from email.utils import parsedate_to_datetime

from .memory import Memory
from .models import Position
from .utils import now_local, rfc2822


@dataclass
class EnrichResult:
    positions: list[Position]
    new_count: int = 0  # fingerprints minted during this pass


def fingerprint(position: Position) -> int:
    """
    Stable unsigned 64-bit fingerprint of (link, title, campus, faculty).

    Campus/faculty enter as their canonical display strings; the deadline is
    not part of it. Each field is length-prefixed so values can't run together.
    """
    h = hashlib.blake2b(digest_size=8)
    for part in position.identity():
        data = part.encode("utf-8")
        h.update(len(data).to_bytes(4, "big"))
        h.update(data)
    return int.from_bytes(h.digest(), "big")


def enrich(
    positions: Iterable[Position],
    memory: Memory,
    now: Callable[[], datetime] | None = None,
) -> EnrichResult:
    """
    Assign first_seen to each position, in order, using and updating `memory`.

    Known fingerprints get their stored timestamp (None if it no longer
    parses); unknown ones get `now()` recorded as RFC-2822. Memory is mutated
    in place and never pruned; persisting it is the caller's job.
    """
    clock = now or now_local
    out: list[Position] = []
    new_count = 0

    for p in positions:
        fp = fingerprint(p)
        stored = memory.get(fp)
        if stored is not None:
            out.append(replace(p, first_seen=_parse_stored(stored)))
            continue

        ts = clock().replace(microsecond=0)
        if ts.tzinfo is None:
            ts = ts.astimezone()
        memory.record(fp, rfc2822(ts))
        new_count += 1
        out.append(replace(p, first_seen=ts))

    return EnrichResult(positions=out, new_count=new_count)


def _parse_stored(value: str) -> datetime | None:
    try:
        return parsedate_to_datetime(value)
    except (TypeError, ValueError, IndexError):
        return None
