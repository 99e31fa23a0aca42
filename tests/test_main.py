# tests/test_main.py
from unittest import mock

import pytest

from modules.sdu_positions import main
from modules.sdu_positions.lib.config import ConfigError


def test_run_text_with_injected_html(memory_path, example_html):
    with mock.patch("modules.sdu_positions.lib.engine.fetch_table_html", return_value=example_html):
        text, meta = main.run(output="text", memory_path=memory_path)
    assert len(text.splitlines()) == 3
    assert meta["count"] == 3
    assert meta["output"] == "text"


def test_run_skip_network_gives_empty_feed(memory_path):
    xml, meta = main.run(memory_path=memory_path, skip_network=True)
    assert meta["count"] == 0
    assert "<channel>" in xml
    assert "<item>" not in xml


def test_run_rejects_bad_settings():
    with pytest.raises(ConfigError):
        main.run(output="pdf")
