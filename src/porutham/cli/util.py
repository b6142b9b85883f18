"""Shared CLI utilities for terminal output and input parsing."""

from __future__ import annotations

import math
import os
import re
import sys
from collections.abc import Iterable


class C:
    """Terminal colors using ANSI escape codes."""

    _enabled = sys.stdout.isatty() and os.environ.get("NO_COLOR") is None

    BOLD = "\033[1m" if _enabled else ""
    DIM = "\033[2m" if _enabled else ""
    RED = "\033[91m" if _enabled else ""
    GREEN = "\033[92m" if _enabled else ""
    YELLOW = "\033[93m" if _enabled else ""
    CYAN = "\033[96m" if _enabled else ""
    RESET = "\033[0m" if _enabled else ""

    @classmethod
    def bold(cls, s: str) -> str:
        return f"{cls.BOLD}{s}{cls.RESET}"

    @classmethod
    def dim(cls, s: str) -> str:
        return f"{cls.DIM}{s}{cls.RESET}"

    @classmethod
    def green(cls, s: str) -> str:
        return f"{cls.GREEN}{s}{cls.RESET}"

    @classmethod
    def red(cls, s: str) -> str:
        return f"{cls.RED}{s}{cls.RESET}"

    @classmethod
    def yellow(cls, s: str) -> str:
        return f"{cls.YELLOW}{s}{cls.RESET}"

    @classmethod
    def cyan(cls, s: str) -> str:
        return f"{cls.CYAN}{s}{cls.RESET}"


TRUTHY = frozenset({"true", "yes", "on", "1"})


def parse_bool(value) -> bool:
    """Coerce loosely encoded booleans ('true', 'yes', 'on', 1) to a real bool."""
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value == 1
    if isinstance(value, str):
        return value.strip().lower() in TRUTHY
    return False


def parse_int(value) -> int | None:
    """Parse an integer from an int or a string like ' 12 ', None otherwise."""
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value.is_integer() else None
    if isinstance(value, str):
        match = re.match(r"^\s*([+-]?\d+)\s*$", value)
        return int(match.group(1)) if match else None
    return None


def parse_float(value) -> float | None:
    """Parse a finite number from a number or a string like '45000' or '45,000.50'."""
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, (int, float)):
        result = float(value)
    elif isinstance(value, str):
        text = value.strip().replace(",", "")
        if not re.match(r"^[+-]?(\d+(\.\d*)?|\.\d+)$", text):
            return None
        result = float(text)
    else:
        return None
    return result if math.isfinite(result) else None


def parse_csv_values(values: Iterable[str] | str | None) -> frozenset[str]:
    """Normalize repeated and/or comma-separated option values to a set.

    e.g., ('Chennai,Vellore', 'Overseas') -> {'Chennai', 'Vellore', 'Overseas'}.
    A single legacy string becomes a one-element set.
    """
    if values is None:
        return frozenset()
    if isinstance(values, str):
        values = [values]
    result = set()
    for value in values:
        result.update(part.strip() for part in value.split(",") if part.strip())
    return frozenset(result)


def parse_nakshatra_preferences(values: Iterable[str] | str | None) -> frozenset[int]:
    """Parse preferred nakshatra ids; raises ValueError on a non-integer entry."""
    result = set()
    for raw in parse_csv_values(values):
        parsed = parse_int(raw)
        if parsed is None:
            raise ValueError(f"Invalid nakshatra id in preferences: '{raw}'")
        result.add(parsed)
    return frozenset(result)


def format_income(value: float | None) -> str:
    """Format a monthly income for display."""
    if value is None:
        return "N/A"
    if float(value).is_integer():
        return f"{int(value):,}"
    return f"{value:,.2f}"


def format_range(values: list, suffix: str = "") -> str:
    """Format a list of values as a range string."""
    if not values:
        return "N/A"
    min_val, max_val = min(values), max(values)
    if min_val == max_val:
        return f"{min_val}{suffix}"
    return f"{min_val}-{max_val}{suffix}"
