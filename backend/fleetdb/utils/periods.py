from __future__ import annotations

import calendar
from datetime import date, timedelta
from typing import List, Optional, Tuple

from fastapi import HTTPException, status

REPORT_PERIODS = ("current_month", "last_month", "quarter", "year")


def month_label(month: int) -> str:
    return calendar.month_abbr[month]


def year_bounds(year: int) -> Tuple[date, date]:
    return date(year, 1, 1), date(year, 12, 31)


def month_end(day: date) -> date:
    return day.replace(day=calendar.monthrange(day.year, day.month)[1])


def empty_month_buckets(year: int, *fields: str) -> List[dict]:
    """Twelve zeroed rows, one per month of `year`."""
    return [
        {"month": m, "label": month_label(m), **{f: 0.0 for f in fields}}
        for m in range(1, 13)
    ]


def months_ago(today: date, months: int) -> date:
    """Same day-of-month `months` back, clamped to the end of shorter months."""
    year = today.year
    month = today.month - months
    while month <= 0:
        month += 12
        year -= 1
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(today.day, last_day))


def resolve_period(
    period: Optional[str],
    *,
    today: Optional[date] = None,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
) -> Tuple[date, date]:
    """
    Turn a report period name into an inclusive (date_from, date_to) range.

    Explicit dates win over the named period; a missing bound is filled
    from the period.
    """
    today = today or date.today()
    name = (period or "current_month").strip().lower()

    if name == "current_month":
        start, end = today.replace(day=1), month_end(today)
    elif name == "last_month":
        end = today.replace(day=1) - timedelta(days=1)
        start = end.replace(day=1)
    elif name == "quarter":
        first_month = 3 * ((today.month - 1) // 3) + 1
        start = date(today.year, first_month, 1)
        end = month_end(date(today.year, first_month + 2, 1))
    elif name == "year":
        start, end = year_bounds(today.year)
    else:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Unknown report period '{period}'. Expected one of: {', '.join(REPORT_PERIODS)}.",
        )

    start = date_from or start
    end = date_to or end
    if end < start:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="date_to must be on or after date_from.",
        )
    return start, end
