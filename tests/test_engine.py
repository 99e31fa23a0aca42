# tests/test_engine.py
import json
import os
from datetime import datetime, timezone
from unittest import mock

import pytest

from modules.sdu_positions.lib import config as sp_config
from modules.sdu_positions.lib import engine
from modules.sdu_positions.lib.parser import StructuralParseError

ROOT = "https://www.sdu.dk"


# ----------------------------------------------------------------------
# 1. First run stamps "now" and writes one memory entry per posting
# ----------------------------------------------------------------------
def test_first_run_stamps_now(make_row, memory_path):
    before = datetime.now(timezone.utc).replace(microsecond=0)
    positions = engine.parse_dom(make_row(), memory_path=memory_path, domain_root=ROOT)
    after = datetime.now(timezone.utc)

    (p,) = positions
    assert before <= p.first_seen <= after
    with open(memory_path, encoding="utf-8") as f:
        data = json.load(f)
    assert len(data["first_seen_map"]) == 1


# ----------------------------------------------------------------------
# 2. Second run replays the stored first_seen
# ----------------------------------------------------------------------
def test_stable_replay_across_runs(example_html, memory_path, fixed_clock):
    first = engine.parse_dom(example_html, memory_path=memory_path, domain_root=ROOT, now=fixed_clock)

    fixed_clock.advance(7 * 86400)
    second = engine.parse_dom(example_html, memory_path=memory_path, domain_root=ROOT, now=fixed_clock)

    assert [p.first_seen for p in second] == [p.first_seen for p in first]
    assert all(p.first_seen == datetime(2023, 3, 1, 8, 30, 15, tzinfo=timezone.utc) for p in second)


def test_extended_deadline_keeps_first_seen(make_row, memory_path, fixed_clock):
    (before,) = engine.parse_dom(make_row(deadline="2023-March-05"), memory_path=memory_path, domain_root=ROOT, now=fixed_clock)
    fixed_clock.advance(3600)
    (after,) = engine.parse_dom(make_row(deadline="2023-April-30"), memory_path=memory_path, domain_root=ROOT, now=fixed_clock)

    assert after.deadline != before.deadline
    assert after.first_seen == before.first_seen


def test_new_posting_on_later_run_gets_later_time(make_row, memory_path, fixed_clock):
    engine.parse_dom(make_row(), memory_path=memory_path, domain_root=ROOT, now=fixed_clock)
    fixed_clock.advance(600)
    old, new = engine.parse_dom(
        make_row() + make_row(href="/2", title="Postdoc"),
        memory_path=memory_path,
        domain_root=ROOT,
        now=fixed_clock,
    )
    assert new.first_seen > old.first_seen


def test_memory_is_never_pruned(make_row, memory_path, fixed_clock):
    engine.parse_dom(make_row(href="/gone"), memory_path=memory_path, domain_root=ROOT, now=fixed_clock)
    engine.parse_dom(make_row(href="/new"), memory_path=memory_path, domain_root=ROOT, now=fixed_clock)
    with open(memory_path, encoding="utf-8") as f:
        assert len(json.load(f)["first_seen_map"]) == 2


# ----------------------------------------------------------------------
# 3. Failure modes
# ----------------------------------------------------------------------
def test_structural_error_writes_nothing(memory_path):
    with pytest.raises(StructuralParseError):
        engine.parse_dom(b"\xff\xfe\xfd", memory_path=memory_path, domain_root=ROOT)
    assert not os.path.exists(memory_path)


def test_corrupt_memory_starts_fresh(make_row, memory_path):
    os.makedirs(os.path.dirname(memory_path), exist_ok=True)
    with open(memory_path, "w", encoding="utf-8") as f:
        f.write("{{{ definitely not json")

    (p,) = engine.parse_dom(make_row(), memory_path=memory_path, domain_root=ROOT)

    assert p.first_seen is not None
    with open(memory_path, encoding="utf-8") as f:
        assert len(json.load(f)["first_seen_map"]) == 1


def test_unwritable_memory_still_returns_results(make_row, tmp_path):
    blocked = tmp_path / "blocked"
    blocked.mkdir()
    with mock.patch("modules.sdu_positions.lib.memory.log_error") as log_error:
        positions = engine.parse_dom(make_row(), memory_path=str(blocked), domain_root=ROOT)
    assert len(positions) == 1
    assert positions[0].first_seen is not None
    log_error.assert_called_once()


def test_activity_record_counts_skipped_rows(example_html, memory_path):
    with mock.patch("modules.sdu_positions.lib.logging_bridge.activity") as activity:
        engine.parse_dom(example_html, memory_path=memory_path, domain_root=ROOT)
    record = activity.call_args_list[-1].args[0]
    assert record["op"] == "parse_dom"
    assert record["rows_valid"] == 3
    assert record["rows_skipped"] == 3
    assert record["new_fingerprints"] == 3
    assert record["memory_saved"] is True


# ----------------------------------------------------------------------
# 4. run_once with an injected fetcher
# ----------------------------------------------------------------------
def test_run_once_renders_rss(fresh_settings, example_html):
    xml, meta = engine.run_once(fresh_settings, fetch_html=lambda s: example_html)

    assert xml.startswith('<?xml version="1.0" encoding="UTF-8"?>')
    assert xml.count("<item>") == 3
    assert meta["count"] == 3
    assert meta["new_total"] == 3
    assert meta["skipped"] == 3
    assert meta["output"] == "rss"


def test_run_once_second_time_has_nothing_new(fresh_settings, example_html):
    engine.run_once(fresh_settings, fetch_html=lambda s: example_html)
    _, meta = engine.run_once(fresh_settings, fetch_html=lambda s: example_html)
    assert meta["count"] == 3
    assert meta["new_total"] == 0


def test_run_once_text_output(memory_path, example_html):
    settings = sp_config.Settings.from_env_and_kwargs({"memory_path": memory_path, "output": "text"})
    text, meta = engine.run_once(settings, fetch_html=lambda s: example_html)
    lines = text.splitlines()
    assert len(lines) == 3
    assert lines[1] == "2023-04-14 Sønderborg: PhD Scholarship in Power Electronics Faculty of Engineering"


def test_run_once_passes_settings_to_fetcher(fresh_settings):
    seen = []

    def fetch(settings):
        seen.append(settings)
        return ""

    engine.run_once(fresh_settings, fetch_html=fetch)
    assert seen == [fresh_settings]


def test_skip_network_never_fetches(memory_path):
    settings = sp_config.Settings.from_env_and_kwargs({"memory_path": memory_path, "skip_network": "true"})
    fetch = mock.Mock(side_effect=AssertionError("fetch should not run"))

    _, meta = engine.run_once(settings, fetch_html=fetch)

    assert meta["count"] == 0
    fetch.assert_not_called()


def test_get_open_positions_uses_webdriver_by_default(fresh_settings, make_row):
    with mock.patch.object(engine, "fetch_table_html", return_value=make_row()) as fetch:
        positions = engine.get_open_positions(fresh_settings)
    fetch.assert_called_once_with(fresh_settings)
    assert len(positions) == 1
