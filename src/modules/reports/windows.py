"""Calendar-month windowing against a single captured "now"."""

from calendar import monthrange
from collections.abc import Iterable
from datetime import datetime, time, tzinfo
from typing import Any, TypeVar

T = TypeVar("T")


def month_window(now: datetime) -> tuple[datetime, datetime]:
    """
    First and last instant of the calendar month containing now.

    Both ends are inclusive and carry now's tzinfo.
    """
    first = datetime.combine(now.date().replace(day=1), time.min, tzinfo=now.tzinfo)
    last_day = monthrange(now.year, now.month)[1]
    last = datetime.combine(now.date().replace(day=last_day), time.max, tzinfo=now.tzinfo)
    return first, last


def resolve_timestamp(item: Any, preferred_field: str, fallback_field: str | None = None) -> datetime | None:
    """Preferred timestamp of an item, else the fallback one, else None."""
    value = getattr(item, preferred_field, None)
    if value is None and fallback_field:
        value = getattr(item, fallback_field, None)
    return value


def to_report_tz(value: datetime, tz: tzinfo | None) -> datetime:
    """Align a timestamp with the window's timezone (naive values are taken as already local)."""
    if tz is None:
        if value.tzinfo is not None:
            value = value.astimezone().replace(tzinfo=None)
        return value
    if value.tzinfo is None:
        return value.replace(tzinfo=tz)
    return value.astimezone(tz)


def in_window(value: datetime | None, window: tuple[datetime, datetime]) -> bool:
    if value is None:
        return False
    start, end = window
    value = to_report_tz(value, start.tzinfo)
    return start <= value <= end


def filter_to_current_month(
    items: Iterable[T],
    preferred_field: str,
    fallback_field: str | None,
    now: datetime,
) -> list[T]:
    """
    Items whose timestamp falls inside now's calendar month.

    The window is computed once from now; items without any timestamp are dropped.
    Input order is preserved.
    """
    window = month_window(now)
    return [
        item
        for item in items
        if in_window(resolve_timestamp(item, preferred_field, fallback_field), window)
    ]
