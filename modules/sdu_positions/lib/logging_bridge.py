from __future__ import annotations

import logging
from typing import Any

from service import logging_utils as _sink

_ACTIVITY_LOG = logging.getLogger("sdu_positions.activity")
_ERROR_LOG = logging.getLogger("sdu_positions.error")


def activity(record: dict[str, Any]) -> None:
    """
    Write an activity record to the JSONL sink.
    Falls back to stdlib logging as structured info if the sink fails.
    """
    payload = _sink.redact(record)
    try:
        _sink.write_activity_log(payload)
        return
    except (OSError, TypeError, ValueError):
        _ACTIVITY_LOG.debug("activity sink failed; using stdlib logging", exc_info=True)
    _ACTIVITY_LOG.info(payload)


def error(record: dict[str, Any]) -> None:
    """
    Write an error record to the JSONL sink.
    Falls back to stdlib logging as structured error if the sink fails.
    """
    payload = _sink.redact(record)
    try:
        _sink.write_error_log(payload)
        return
    except (OSError, TypeError, ValueError):
        _ERROR_LOG.debug("error sink failed; using stdlib logging", exc_info=True)
    _ERROR_LOG.error(payload)
