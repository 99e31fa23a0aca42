from __future__ import annotations

from typing import Any

from .lib.config import Settings
from .lib.engine import run_once as _run_engine
from .lib.logging_bridge import activity as log_activity


def run(**kwargs: Any) -> tuple[str, dict]:
    """
    Entry point for the 'sdu_positions' module.

    Accepts kwargs (from the CLI or another caller), including:
      output: "rss" | "text" = "rss"
      memory_path: str = ".memory"
      webdriver_url: str = "http://localhost:9515"
      chrome_binary: str | None
      render_wait_seconds: float = 5.0
      skip_network: bool = False

    Returns:
      (text, meta) - the RSS document or plain listing, plus run counts.
    """
    settings = Settings.from_env_and_kwargs(kwargs)

    log_activity({
        "component": "sdu_positions.main",
        "op": "start",
        "output": settings.output,
        "memory_path": settings.memory_path,
        "webdriver_url": settings.webdriver_url,
        "skip_network": settings.skip_network,
    })

    return _run_engine(settings)
