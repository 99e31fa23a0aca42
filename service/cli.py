# service/cli.py
"""
User-facing command-line entrypoints.

Subcommands
-----------
rss [--kwargs k=v ...]
    - Fetches the listings page through ChromeDriver and prints an RSS 2.0 feed

list [--kwargs k=v ...]
    - Same fetch, printed as one line per position

parse FILE [--format rss|text] [--kwargs k=v ...]
    - Parses a saved copy of the table HTML (no browser needed); first-seen
      memory is still read and updated
"""

from __future__ import annotations

import argparse
import json
import logging
import os
import sys
import time
import uuid
from collections.abc import Iterable
from datetime import datetime
from typing import Any

from modules.sdu_positions import main as _module
from modules.sdu_positions.lib.config import Settings
from modules.sdu_positions.lib.engine import run_once
from service import logging_utils as L


# ---- stderr logging -----------------------------------------------------------
def _ensure_logging() -> None:
    """basicConfig on stderr (stdout carries the feed), unless handlers already exist."""
    if logging.getLogger().handlers:
        return
    level_name = os.getenv("LOG_LEVEL", "INFO").upper()
    logging.basicConfig(
        level=getattr(logging, level_name, logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        stream=sys.stderr,
    )


# ---- helpers ------------------------------------------------------------------
def _parse_kv_pairs(pairs: Iterable[str]) -> dict[str, Any]:
    """
    Turn ["memory_path=/tmp/m", "skip_network=true"] into Settings kwargs.
    JSON literals are decoded; anything else stays a string.
    """
    out: dict[str, Any] = {}
    for item in pairs:
        key, sep, value = item.partition("=")
        key = key.strip()
        if not sep or not key:
            raise argparse.ArgumentTypeError(f"--kwargs expects key=value, got {item!r}")
        value = value.strip()
        try:
            out[key] = json.loads(value)
        except ValueError:
            out[key] = value
    return out


def _now_iso() -> str:
    return datetime.now().astimezone().isoformat()


def _execute(cmd: str, kwargs: dict[str, Any], produce) -> int:
    """Run `produce()`, print its text, and log the outcome as JSONL."""
    run_id = uuid.uuid4().hex
    start_time = time.monotonic()
    try:
        text, meta = produce()
    except KeyboardInterrupt:
        return 130
    except Exception as e:
        print(f"FAILURE: {e}", file=sys.stderr)
        L.write_error_log({
            "ts": _now_iso(),
            "where": f"cli.{cmd}",
            "run_id": run_id,
            "kwargs": kwargs,
            "error": repr(e),
            "duration_ms": int((time.monotonic() - start_time) * 1000),
        })
        return 1

    L.write_activity_log({
        "ts": _now_iso(),
        "event": f"cli_{cmd}",
        "run_id": run_id,
        "kwargs": kwargs,
        "meta": meta,
        "duration_ms": int((time.monotonic() - start_time) * 1000),
    })
    if text:
        print(text)
    return 0


# ---- subcommands --------------------------------------------------------------
def cmd_rss(args: argparse.Namespace) -> int:
    kwargs = {**_parse_kv_pairs(args.kwargs or []), "output": "rss"}
    return _execute("rss", kwargs, lambda: _module.run(**kwargs))


def cmd_list(args: argparse.Namespace) -> int:
    kwargs = {**_parse_kv_pairs(args.kwargs or []), "output": "text"}
    return _execute("list", kwargs, lambda: _module.run(**kwargs))


def cmd_parse(args: argparse.Namespace) -> int:
    kwargs = {**_parse_kv_pairs(args.kwargs or []), "output": args.format}

    def produce() -> tuple[str, dict]:
        with open(args.file, "rb") as f:
            raw = f.read()
        settings = Settings.from_env_and_kwargs(kwargs)
        return run_once(settings, fetch_html=lambda _settings: raw)

    return _execute("parse", {**kwargs, "file": args.file}, produce)


# ---- argparse -----------------------------------------------------------------
def _add_kwargs_arg(sp: argparse.ArgumentParser) -> None:
    sp.add_argument(
        "--kwargs",
        metavar="k=v",
        nargs="*",
        help="Settings overrides, e.g. memory_path=/var/lib/sdu/.memory (JSON values supported).",
    )


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="python -m service.cli",
        description="SDU open positions: scrape, remember first-seen dates, and publish.",
    )
    sub = p.add_subparsers(dest="cmd", required=True)

    sp = sub.add_parser("rss", help="Fetch the listings and print an RSS feed.")
    _add_kwargs_arg(sp)
    sp.set_defaults(func=cmd_rss)

    sp = sub.add_parser("list", help="Fetch the listings and print one line per position.")
    _add_kwargs_arg(sp)
    sp.set_defaults(func=cmd_list)

    sp = sub.add_parser("parse", help="Parse a saved table HTML file instead of fetching.")
    sp.add_argument("file", help="Path to the saved HTML (e.g., the tbody.list inner HTML).")
    sp.add_argument("--format", choices=("rss", "text"), default="text", help="Output format.")
    _add_kwargs_arg(sp)
    sp.set_defaults(func=cmd_parse)

    return p


# ---- main ---------------------------------------------------------------------
def main(argv: Iterable[str] | None = None) -> int:
    _ensure_logging()
    parser = _build_parser()
    args = parser.parse_args(args=list(argv) if argv is not None else None)
    return args.func(args)


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
