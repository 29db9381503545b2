from __future__ import annotations

import calendar
import logging
import re
from datetime import date, datetime
from typing import Optional

from dateutil import parser as dt_parser

logger = logging.getLogger(__name__)

ISO_DAY_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def _with_year(month: int, day: int, year: int) -> date:
    # Feb 29 moved into a non-leap year lands on Feb 28
    last = calendar.monthrange(year, month)[1]
    return date(year, month, min(day, last))


def repair_date(value: Optional[str], reference_date: date) -> str:
    """Normalize a model-supplied date to YYYY-MM-DD, never before the reference year.

    - "YYYY-MM-DD" keeps month/day; a stale year is replaced by the reference year.
    - Anything else goes through dateutil; the year becomes
      max(parsed year, reference year).
    - Missing or unparseable values fall back to the reference date.
    """
    ref_year = reference_date.year
    raw = (value or "").strip()

    if ISO_DAY_RE.match(raw):
        year, month, day = (int(p) for p in raw.split("-"))
        try:
            date(year, month, day)
        except ValueError:
            logger.warning(f"Invalid calendar date {raw!r}, using reference date")
            return reference_date.isoformat()
        if year < ref_year:
            return _with_year(month, day, ref_year).isoformat()
        return raw

    if not raw:
        logger.warning("Material has no date, using reference date")
        return reference_date.isoformat()

    try:
        parsed = dt_parser.parse(raw, default=datetime(ref_year, 1, 1))
    except (ValueError, OverflowError) as e:
        logger.warning(f"Could not parse date {raw!r} ({e}), using reference date")
        return reference_date.isoformat()

    return _with_year(parsed.month, parsed.day, max(parsed.year, ref_year)).isoformat()
