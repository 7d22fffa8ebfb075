# SMB Invoicing - Invoicing & CRM client for SMBs
# Copyright (c) 2026 The SMB Invoicing authors
# Licensed under the MIT License. See LICENSE file for details.

"""
Period helpers for SMB Invoicing.

This module defines a Period value object and helpers to resolve the named
reporting periods offered on the report cards (yesterday, last week, last
month, last year, this year, all) into inclusive datetime ranges.

Named periods
-------------
Periods are identified by the keys used by the REST front end:

    yesterday, lastWeek, lastMonth, lastYear, thisYear, all

The CLI also accepts dashed spellings (``last-week``, ``this-year``, ...);
``normalize_period`` converts them to the canonical keys.

Every range is day-bounded: ``start`` is at 00:00:00.000 of its first day and
``end`` is at 23:59:59.999 of its last day, both inclusive.

``all`` (and any unknown or missing key) resolves to the same range as
``thisYear``. Only the label differs ("All Time").
"""

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Optional, Union

import pandas as pd

PERIOD_KEYS = ("yesterday", "lastWeek", "lastMonth", "lastYear", "thisYear", "all")

PERIOD_LABELS = {
    "yesterday": "Yesterday",
    "lastWeek": "Last Week",
    "lastMonth": "Last Month",
    "lastYear": "Last Year",
    "thisYear": "This Year",
}

_ALIASES = {
    "last-week": "lastWeek",
    "last_week": "lastWeek",
    "last-month": "lastMonth",
    "last_month": "lastMonth",
    "last-year": "lastYear",
    "last_year": "lastYear",
    "this-year": "thisYear",
    "this_year": "thisYear",
    "all-time": "all",
}

_END_OF_DAY = time(23, 59, 59, 999000)


@dataclass(frozen=True)
class Period:
    """Represents an inclusive reporting range with a human-readable label."""

    start: datetime
    end: datetime
    label: str

    def contains(self, moment: datetime) -> bool:
        return self.start <= moment <= self.end


def _today() -> date:
    """Return today's date as a date object (isolated for easier testing)."""
    return datetime.today().date()


def normalize_period(period: Optional[str]) -> Optional[str]:
    """
    Return the canonical key for ``period``.

    Dashed/underscored aliases are mapped to their camelCase key. None is
    returned unchanged; unknown strings are returned as-is so that callers
    can decide whether to reject them or let them fall back to "this year".
    """
    if period is None:
        return None
    key = str(period).strip()
    return _ALIASES.get(key.lower(), key)


def is_known_period(period: Optional[str]) -> bool:
    return period is None or normalize_period(period) in PERIOD_KEYS


def period_label(period: Optional[str]) -> str:
    """Label shown on a report card for the selected period."""
    return PERIOD_LABELS.get(normalize_period(period) or "", "All Time")


def _day_span(first: date, last: date, label: str) -> Period:
    return Period(
        start=datetime.combine(first, time.min),
        end=datetime.combine(last, _END_OF_DAY),
        label=label,
    )


def _as_date(reference: Union[date, datetime, None]) -> date:
    if reference is None:
        return _today()
    if isinstance(reference, datetime):
        return reference.date()
    return reference


def period_yesterday(today: date) -> Period:
    """The previous calendar day."""
    yesterday = today - timedelta(days=1)
    return _day_span(yesterday, yesterday, PERIOD_LABELS["yesterday"])


def period_last_week(today: date) -> Period:
    """
    The Sunday-based calendar week immediately preceding the current one.

    Weeks run from Sunday to Saturday, so on any day of the current week the
    range ends on the last Saturday before the current week's Sunday.
    """
    # date.weekday() is Monday=0..Sunday=6; shift to Sunday=0..Saturday=6.
    day_of_week = (today.weekday() + 1) % 7
    first = today - timedelta(days=day_of_week + 7)
    last = today - timedelta(days=day_of_week + 1)
    return _day_span(first, last, PERIOD_LABELS["lastWeek"])


def period_last_month(today: date) -> Period:
    """Full previous calendar month."""
    last = today.replace(day=1) - timedelta(days=1)
    first = last.replace(day=1)
    return _day_span(first, last, PERIOD_LABELS["lastMonth"])


def period_last_year(today: date) -> Period:
    """Full previous calendar year."""
    year = today.year - 1
    return _day_span(date(year, 1, 1), date(year, 12, 31), PERIOD_LABELS["lastYear"])


def period_this_year(today: date, label: Optional[str] = None) -> Period:
    """January 1st to December 31st of the current year."""
    return _day_span(
        date(today.year, 1, 1),
        date(today.year, 12, 31),
        label or PERIOD_LABELS["thisYear"],
    )


def date_range_for(
    period: Optional[str],
    reference: Union[date, datetime, None] = None,
) -> Period:
    """
    Resolve a named period against ``reference`` (today by default).

    Parameters
    ----------
    period:
        One of PERIOD_KEYS (or an accepted alias). None, ``"all"`` and any
        unrecognized value resolve to the current calendar year.
    reference:
        The day the period is relative to.

    Returns
    -------
    Period
        Inclusive [start, end] datetimes and the card label.
    """
    today = _as_date(reference)
    key = normalize_period(period)

    if key == "yesterday":
        return period_yesterday(today)
    if key == "lastWeek":
        return period_last_week(today)
    if key == "lastMonth":
        return period_last_month(today)
    if key == "lastYear":
        return period_last_year(today)
    if key == "thisYear":
        return period_this_year(today)

    # "all", None or anything else: same range as this year.
    return period_this_year(today, label=period_label(key))


def filter_by_period(frame: pd.DataFrame, period: Period) -> pd.DataFrame:
    """
    Keep only the rows of ``frame`` whose 'date' falls within the period.

    The DataFrame is expected to contain a 'date' column of type
    datetime64[ns] (as produced by ``io.invoices_to_dataframe``). Bounds are
    inclusive.
    """
    mask = (frame["date"] >= pd.Timestamp(period.start)) & (
        frame["date"] <= pd.Timestamp(period.end)
    )
    return frame.loc[mask].copy()
