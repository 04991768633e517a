# src/tatboard/normalizer/dates.py
"""
Cell value → canonical timestamp, and timestamp pairs → whole minutes.

Spreadsheet exports mix three encodings of the same instant: native date cells,
numeric day counts (serial dates), and free text that may use Arabic-Indic
digits. Everything funnels into a timezone-aware `datetime` in the configured
zone, or `None` when the value cannot be read as a point in time.
"""

from __future__ import annotations

import math
import numbers
import re
from datetime import date, datetime, time, timedelta, timezone, tzinfo
from typing import Any

import pandas as pd

# Serial day 0 of the spreadsheet calendar (1900 date system with the leap-year quirk)
SPREADSHEET_EPOCH = datetime(1899, 12, 30, tzinfo=timezone.utc)
MS_PER_DAY = 24 * 60 * 60 * 1000

_ARABIC_DIGITS = str.maketrans("٠١٢٣٤٥٦٧٨٩", "0123456789")
_SEPARATORS = re.compile(r"[/\-.]")


def normalize_digits(text: str) -> str:
    """Replace Arabic-Indic digits (٠-٩) with their ASCII equivalents."""
    return text.translate(_ARABIC_DIGITS)


def normalize_date(value: Any, tz: tzinfo = timezone.utc) -> datetime | None:
    """
    @brief
    Convert one raw cell value into a timezone-aware timestamp.

    @details
    Resolution order:
        (1) missing markers (None / NaN / NaT) → None
        (2) native datetime / date / time → same instant in `tz` (naive = wall clock in `tz`;
            a bare time lands on 1899-12-30)
        (3) real number → spreadsheet serial day count since 1899-12-30 UTC
        (4) text → generic parse, then day/month/year fallback on / - . separators

    @params
        value : Any
            Cell value as delivered by the workbook reader.
        tz : tzinfo
            Zone used for naive inputs and for the returned timestamp.

    @returns
        Aware datetime in `tz`, or None when the value is unparseable.
    """
    if value is None:
        return None

    # (1) NaT is a datetime subclass and NaN a float; both mean "no value"
    if value is pd.NaT or (isinstance(value, float) and math.isnan(value)):
        return None

    # (2) Native date/time cells
    if isinstance(value, datetime):
        return _localize(value, tz)
    if isinstance(value, date):
        return datetime.combine(value, time(), tzinfo=tz)
    if isinstance(value, time):
        # Time-only cells sit on serial day 0
        return datetime.combine(SPREADSHEET_EPOCH.date(), value.replace(tzinfo=None), tzinfo=tz)

    # (3) Serial day counts
    if isinstance(value, numbers.Real) and not isinstance(value, bool):
        return _from_serial(float(value), tz)

    # (4) Free text
    if isinstance(value, str):
        return _from_text(value, tz)

    return None


def minutes_between(start: datetime, end: datetime) -> int | None:
    """
    @brief
    Whole minutes from `start` to `end`.

    @details
    Rounds half-up to the nearest minute. Returns None when the interval is
    negative or not finite, so callers can use it as a validity gate.
    """
    # Same-zone subtraction is wall-clock arithmetic; compare instants across DST changes
    diff = (end.astimezone(timezone.utc) - start.astimezone(timezone.utc)).total_seconds() / 60.0
    if not math.isfinite(diff) or diff < 0:
        return None
    return int(math.floor(diff + 0.5))


# ----------------- internal -----------------


def _localize(dt: datetime, tz: tzinfo) -> datetime | None:
    if isinstance(dt, pd.Timestamp):
        if pd.isna(dt):
            return None
        dt = dt.to_pydatetime()
    if dt.tzinfo is None:
        return dt.replace(tzinfo=tz)
    return dt.astimezone(tz)


def _from_serial(days: float, tz: tzinfo) -> datetime | None:
    if not math.isfinite(days):
        return None
    try:
        return (SPREADSHEET_EPOCH + timedelta(milliseconds=round(days * MS_PER_DAY))).astimezone(
            tz
        )
    except OverflowError:
        return None


def _from_text(raw: str, tz: tzinfo) -> datetime | None:
    text = normalize_digits(raw.strip())
    if not text:
        return None

    parsed = _generic_parse(text)
    if parsed is not None:
        return _localize(parsed, tz)

    if _SEPARATORS.search(text):
        return _parse_day_month_year(text, tz)
    return None


def _generic_parse(text: str) -> datetime | None:
    try:
        ts = pd.to_datetime(text, errors="coerce")
    except (ValueError, TypeError, OverflowError):
        return None
    if ts is None or pd.isna(ts):
        return None
    return ts.to_pydatetime()


def _parse_day_month_year(text: str, tz: tzinfo) -> datetime | None:
    """
    @brief
    Fallback for dates written as day, month, year.

    @details
    Splits on / - . and reads the first three parts as integers. Two-digit
    years land in 1900-1999. Calendar-invalid combinations are rejected.
    """
    parts = [p.strip() for p in _SEPARATORS.split(text)]
    if len(parts) < 3:
        return None
    try:
        day, month, year = (int(p) for p in parts[:3])
    except ValueError:
        return None
    if 0 <= year <= 99:
        year += 1900
    try:
        return datetime(year, month, day, tzinfo=tz)
    except ValueError:
        return None


__all__ = ["SPREADSHEET_EPOCH", "minutes_between", "normalize_date", "normalize_digits"]
