# tests/conftest.py
import os
import pathlib
from datetime import datetime, timedelta, timezone

import pytest
from freezegun import freeze_time

from modules.sdu_positions.lib import config as sp_config

FIXTURES = pathlib.Path(__file__).parent / "fixtures"


# ---------------------------------------------------------------------
# Live tests are opt-in: use --live or RUN_LIVE_TESTS=1
# ---------------------------------------------------------------------
def pytest_addoption(parser: pytest.Parser) -> None:
    parser.addoption(
        "--live",
        action="store_true",
        default=False,
        help="Run tests marked as 'live' (needs a running ChromeDriver and network).",
    )


def pytest_configure(config: pytest.Config) -> None:
    config.addinivalue_line(
        "markers",
        "live: marks tests that drive a real browser or hit the network (skipped by default).",
    )


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    run_live = config.getoption("--live") or os.getenv("RUN_LIVE_TESTS") == "1"
    if run_live:
        return
    skip_live = pytest.mark.skip(reason="live tests disabled (use --live or RUN_LIVE_TESTS=1)")
    for item in items:
        if "live" in item.keywords:
            item.add_marker(skip_live)


# ---------------------------------------------------------------------
# Test-wide env defaults (autouse, function-scoped)
# ---------------------------------------------------------------------
@pytest.fixture(autouse=True)
def _env_defaults(monkeypatch, tmp_path):
    # Logs go to a throwaway dir so real logs stay clean (per test)
    monkeypatch.setenv("LOG_DIR", str(tmp_path / "logs"))
    monkeypatch.setenv("ACTIVITY_LOG_PREFIX", "activity-test")
    monkeypatch.setenv("ERROR_LOG_PREFIX", "error-test")
    for name in ("SDU_MEMORY_PATH", "WEBDRIVER_URL", "CHROME_BINARY", "SDU_FEED_WEBMASTER"):
        monkeypatch.delenv(name, raising=False)
    yield


@pytest.fixture
def frozen_utc():
    with freeze_time("2025-01-01T00:00:00Z"):
        yield


@pytest.fixture
def fixed_clock():
    """A controllable clock: call .advance(seconds) to move it forward."""

    class Clock:
        def __init__(self) -> None:
            self.current = datetime(2023, 3, 1, 9, 30, 15, tzinfo=timezone(timedelta(hours=1)))

        def __call__(self) -> datetime:
            return self.current

        def advance(self, seconds: float) -> None:
            self.current = self.current + timedelta(seconds=seconds)

    return Clock()


@pytest.fixture
def example_html() -> str:
    return (FIXTURES / "example_inner.html").read_text(encoding="utf-8")


@pytest.fixture
def memory_path(tmp_path) -> str:
    return str(tmp_path / "state" / ".memory")


@pytest.fixture
def fresh_settings(memory_path):
    """A brand-new Settings per test, with its own memory file and no browser wait."""
    return sp_config.Settings.from_env_and_kwargs({
        "memory_path": memory_path,
        "render_wait_seconds": 0,
    })


@pytest.fixture
def make_row():
    """Build one listings row in the page's column order."""

    def _row(
        href="/en/service/ledige_stillinger/1",
        title="Assistant Professor",
        faculty="Faculty of Science",
        campus="Odense",
        deadline="2023-March-05",
    ) -> str:
        return (
            f'<tr><td><a href="{href}">{title}</a></td>'
            f"<td>{faculty}</td><td>{campus}</td><td>{deadline}</td></tr>"
        )

    return _row
