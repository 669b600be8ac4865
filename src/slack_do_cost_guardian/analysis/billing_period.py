"""Time helpers for the current billing month."""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

HOUR = timedelta(hours=1)
WEEK = timedelta(weeks=1)


def as_utc(value: datetime) -> datetime:
    """Treat a naive datetime as UTC; leave aware ones alone."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


def _ceil_units(start: datetime, end: datetime | None, unit: timedelta, now: datetime | None) -> int:
    if end is None:
        end = now or datetime.now(UTC)
    return math.ceil(abs(as_utc(end) - as_utc(start)) / unit)


def hours_between(start: datetime, end: datetime | None = None, *, now: datetime | None = None) -> int:
    """
    Whole hours between two instants, rounded up.

    Argument order doesn't matter. If `end` is omitted the evaluation time
    (`now`, or the current UTC time) is used instead.
    """
    return _ceil_units(start, end, HOUR, now)


def weeks_between(start: datetime, end: datetime | None = None, *, now: datetime | None = None) -> int:
    """Whole weeks between two instants, rounded up. Same rules as hours_between."""
    return _ceil_units(start, end, WEEK, now)


@dataclass(frozen=True)
class MonthWindow:
    """
    The billing month containing `now`.

    All boundaries come from the same captured instant so that one cost
    computation never straddles two months.
    """

    now: datetime
    month_start: datetime
    next_month_start: datetime

    @classmethod
    def at(cls, now: datetime | None = None) -> MonthWindow:
        now = as_utc(now or datetime.now(UTC))

        month_start = now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)
        if month_start.month == 12:
            next_month_start = month_start.replace(year=month_start.year + 1, month=1)
        else:
            next_month_start = month_start.replace(month=month_start.month + 1)

        return cls(now=now, month_start=month_start, next_month_start=next_month_start)

    def created_this_month(self, created_at: datetime) -> bool:
        """True if the resource was created strictly after the month started."""
        return as_utc(created_at) > self.month_start

    def billing_start(self, created_at: datetime) -> datetime:
        """When billing started accruing this month for a resource."""
        created_at = as_utc(created_at)
        return created_at if self.created_this_month(created_at) else self.month_start
