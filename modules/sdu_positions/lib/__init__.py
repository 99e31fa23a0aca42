# modules/sdu_positions/lib/__init__.py
from __future__ import annotations

# Re-export commonly-used types for convenience
from .config import ConfigError, Settings
from .engine import get_open_positions, parse_dom, run_once
from .models import Campus, Faculty, ParseResult, Position, ValidationError
from .parser import RowValidationError, StructuralParseError
from .webdriver import WebDriverError

__all__ = [
    "Campus",
    "ConfigError",
    "Faculty",
    "ParseResult",
    "Position",
    "RowValidationError",
    "Settings",
    "StructuralParseError",
    "ValidationError",
    "WebDriverError",
    "get_open_positions",
    "parse_dom",
    "run_once",
]
