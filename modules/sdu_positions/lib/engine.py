"""
Engine for one sdu_positions run: fetch, parse, stamp first-seen, render.

Features:
  - Table parsing with per-row drop diagnostics (`parser.parse_table`)
  - First-seen memory load/enrich/save (`memory`, `dedupe`)
  - Dependency injection for testability (`fetch_html`, `now`)
  - Structured activity records via `logging_bridge`
"""

from __future__ import annotations

import time
from collections.abc import Callable
from datetime import datetime

from . import dedupe, logging_bridge, memory, render
from .config import Settings
from .models import ParseResult, Position
from .parser import parse_table
from .webdriver import fetch_table_html

FetchHtml = Callable[[Settings], str]


# =============================================================================
# CORE: HTML -> enriched positions
# =============================================================================
def parse_dom(
    html: str | bytes,
    *,
    memory_path: str,
    domain_root: str,
    now: Callable[[], datetime] | None = None,
) -> list[Position]:
    """
    Parse the listings HTML and stamp every position with its first-seen time.

    The memory file is read once before enrichment and rewritten once after.
    If the HTML cannot be parsed at all, StructuralParseError propagates and
    the memory file is left untouched.

    Returns:
        Positions in document order, first_seen populated (None only when a
        stored timestamp no longer parses).
    """
    _, enriched = _parse_and_stamp(html, memory_path=memory_path, domain_root=domain_root, now=now)
    return enriched.positions


def _parse_and_stamp(
    html: str | bytes,
    *,
    memory_path: str,
    domain_root: str,
    now: Callable[[], datetime] | None,
) -> tuple[ParseResult, dedupe.EnrichResult]:
    start_ns = time.perf_counter_ns()

    parsed = parse_table(html, domain_root)

    mem = memory.load(memory_path)
    known_before = len(mem)
    enriched = dedupe.enrich(parsed.positions, mem, now=now)
    saved = memory.save(mem, memory_path)

    logging_bridge.activity({
        "component": "sdu_positions.engine",
        "op": "parse_dom",
        "rows_valid": len(enriched.positions),
        "rows_skipped": len(parsed.skipped),
        "skipped": parsed.skipped,
        "new_fingerprints": enriched.new_count,
        "memory_before": known_before,
        "memory_after": len(mem),
        "memory_saved": saved,
        "total_us": int((time.perf_counter_ns() - start_ns) // 1000),
    })
    return parsed, enriched


def get_open_positions(settings: Settings, fetch_html: FetchHtml | None = None) -> list[Position]:
    """
    Fetch the rendered table (ChromeDriver by default) and parse it.

    With settings.skip_network the fetch is skipped and an empty table is
    parsed, so memory is still loaded and rewritten.
    """
    html = _fetch(settings, fetch_html)
    return parse_dom(html, memory_path=settings.memory_path, domain_root=settings.domain_root)


def _fetch(settings: Settings, fetch_html: FetchHtml | None) -> str:
    if settings.skip_network:
        logging_bridge.activity({
            "component": "sdu_positions.engine",
            "op": "skipped_fetch",
            "reason": "skip_network",
        })
        return ""
    fetch = fetch_html or fetch_table_html
    return fetch(settings)


# =============================================================================
# MAIN ORCHESTRATOR
# =============================================================================
def run_once(settings: Settings, fetch_html: FetchHtml | None = None) -> tuple[str, dict]:
    """
    Run one complete cycle and render the result.

    Args:
        settings: validated configuration (output format, paths, driver URL).
        fetch_html: optional override for the browser fetch (for testing).

    Returns:
        (rendered_text, meta_dict) where rendered_text is RSS XML or a
        plain-text listing depending on settings.output.
    """
    start_ns = time.perf_counter_ns()

    html = _fetch(settings, fetch_html)
    parsed, enriched = _parse_and_stamp(
        html, memory_path=settings.memory_path, domain_root=settings.domain_root, now=None
    )
    positions = enriched.positions

    if settings.output == "text":
        rendered = render.build_listing(positions)
    else:
        rendered = render.build_rss(positions, settings)

    total_us = int((time.perf_counter_ns() - start_ns) // 1000)
    meta = {
        "count": len(positions),
        "new_total": enriched.new_count,
        "skipped": len(parsed.skipped),
        "output": settings.output,
        "listings_url": settings.listings_url,
        "total_us": total_us,
    }

    logging_bridge.activity({
        "component": "sdu_positions.engine",
        "op": "rendered",
        **meta,
    })
    return rendered, meta
