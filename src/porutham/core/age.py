"""Age derivation from stored birth dates."""

from __future__ import annotations

import logging
import re
from datetime import date, datetime

logger = logging.getLogger(__name__)

# (pattern, group order) for the birth date layouts found in profile data
_DATE_PATTERNS = (
    (re.compile(r"^(\d{4})-(\d{1,2})-(\d{1,2})(?:[T ].*)?$"), ("y", "m", "d")),
    (re.compile(r"^(\d{4})/(\d{1,2})/(\d{1,2})$"), ("y", "m", "d")),
    (re.compile(r"^(\d{1,2})-(\d{1,2})-(\d{4})$"), ("d", "m", "y")),
    (re.compile(r"^(\d{1,2})/(\d{1,2})/(\d{4})$"), ("d", "m", "y")),
)


def parse_birth_date(value) -> date | None:
    """Parse a birth date from a date, datetime or string.

    Supports 'YYYY-MM-DD' (optionally followed by a time), 'YYYY/MM/DD',
    'DD-MM-YYYY' and 'DD/MM/YYYY'. Returns None for anything else.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        return None

    text = value.strip()
    for pattern, order in _DATE_PATTERNS:
        match = pattern.match(text)
        if not match:
            continue
        parts = dict(zip(order, (int(g) for g in match.groups())))
        try:
            return date(parts["y"], parts["m"], parts["d"])
        except ValueError:
            return None
    return None


def calculate_age(birth_date, today: date | None = None) -> int | None:
    """Return completed years between birth_date and today.

    The age drops by one when today's month/day precedes the birth month/day.
    Missing or unparseable birth dates give None.
    """
    born = parse_birth_date(birth_date)
    if born is None:
        if birth_date:
            logger.debug("Unparseable birth date %r", birth_date)
        return None

    today = today or date.today()
    age = today.year - born.year
    if (today.month, today.day) < (born.month, born.day):
        age -= 1

    if age < 0 or age > 120:
        logger.warning("Unusual age %d computed from birth date %s", age, born.isoformat())

    return age
