"""Cost estimators for each DigitalOcean resource category.

Every estimator is a pure function of its resource list and the evaluation
time. Amounts are rounded to cents per resource before they are summed, so
totals may drift by a cent or two.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal

from slack_do_cost_guardian.analysis.billing_period import (
    MonthWindow,
    as_utc,
    hours_between,
    weeks_between,
)
from slack_do_cost_guardian.collectors.base import DatabaseCluster, Droplet, Snapshot, Volume
from slack_do_cost_guardian.errors import UnknownRateError
from slack_do_cost_guardian.pricing import (
    BACKUP_COST_FRACTION,
    BACKUPS_PER_MONTH,
    DEFAULT_DATABASE_HOURLY_RATES,
    MONTHLY_HOUR_CAP,
    SNAPSHOT_MONTHLY_RATE_PER_GB,
    VOLUME_MONTHLY_RATE_PER_GB,
    DatabaseRateTable,
)


@dataclass(frozen=True)
class CostEstimate:
    """Month-to-date and projected full-month cost, in USD."""

    current: float = 0.0
    projected: float = 0.0

    def __add__(self, other: CostEstimate) -> CostEstimate:
        if not isinstance(other, CostEstimate):
            return NotImplemented
        return CostEstimate(
            current=self.current + other.current,
            projected=self.projected + other.projected,
        )


def round2(amount: float) -> float:
    """
    Round to cents, halves away from zero.

    Uses the exact binary value of the float, so 0.125 becomes 0.13 while
    1.005 (stored as 1.00499...) becomes 1.0.
    """
    return float(Decimal(amount).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


def prorate(
    created_at: datetime,
    hourly_price: float,
    window: MonthWindow,
    cap: int = MONTHLY_HOUR_CAP,
) -> CostEstimate:
    """
    Cost of one resource for the month in `window`.

    Resources created this month accrue from their creation time and are
    projected until the start of next month. Older resources accrue from the
    start of the month and are projected for the full capped month.
    """
    created_at = as_utc(created_at)
    if window.created_this_month(created_at):
        hours_run = hours_between(created_at, window.now)
        projected_hours = min(cap, hours_between(window.next_month_start, created_at))
    else:
        hours_run = hours_between(window.month_start, window.now)
        projected_hours = cap

    hours_run = min(cap, hours_run)

    return CostEstimate(
        current=round2(hours_run * hourly_price),
        projected=round2(projected_hours * hourly_price),
    )


def _sum(estimates: Iterable[CostEstimate]) -> CostEstimate:
    return sum(estimates, CostEstimate())


def estimate_droplets(
    droplets: Iterable[Droplet],
    *,
    now: datetime | None = None,
    cap: int = MONTHLY_HOUR_CAP,
) -> CostEstimate:
    """Estimate droplet costs from each droplet's hourly price."""
    window = MonthWindow.at(now)
    return _sum(prorate(d.created_at, d.price_hourly, window, cap) for d in droplets)


def database_hourly_price(
    database: DatabaseCluster,
    rates: DatabaseRateTable = DEFAULT_DATABASE_HOURLY_RATES,
) -> float:
    """
    Look up a cluster's hourly price by size slug and node count.

    Raises:
        UnknownRateError: If the combination is not in the rate table.
    """
    try:
        return rates[database.size][database.num_nodes]
    except KeyError:
        raise UnknownRateError(database.size, database.num_nodes) from None


def estimate_databases(
    databases: Iterable[DatabaseCluster],
    rates: DatabaseRateTable = DEFAULT_DATABASE_HOURLY_RATES,
    *,
    now: datetime | None = None,
    cap: int = MONTHLY_HOUR_CAP,
) -> CostEstimate:
    """Estimate database cluster costs. Fails on the first unknown rate."""
    window = MonthWindow.at(now)
    return _sum(
        prorate(db.created_at, database_hourly_price(db, rates), window, cap)
        for db in databases
    )


def estimate_storage(
    items: Iterable[Volume | Snapshot],
    monthly_rate_per_gb: float,
    *,
    now: datetime | None = None,
    cap: int = MONTHLY_HOUR_CAP,
) -> CostEstimate:
    """Estimate costs for anything billed per gigabyte per month."""
    window = MonthWindow.at(now)
    return _sum(
        prorate(item.created_at, item.size_gigabytes * monthly_rate_per_gb / cap, window, cap)
        for item in items
    )


def estimate_volumes(
    volumes: Iterable[Volume],
    monthly_rate_per_gb: float = VOLUME_MONTHLY_RATE_PER_GB,
    *,
    now: datetime | None = None,
    cap: int = MONTHLY_HOUR_CAP,
) -> CostEstimate:
    return estimate_storage(volumes, monthly_rate_per_gb, now=now, cap=cap)


def estimate_snapshots(
    snapshots: Iterable[Snapshot],
    monthly_rate_per_gb: float = SNAPSHOT_MONTHLY_RATE_PER_GB,
    *,
    now: datetime | None = None,
    cap: int = MONTHLY_HOUR_CAP,
) -> CostEstimate:
    return estimate_storage(snapshots, monthly_rate_per_gb, now=now, cap=cap)


def estimate_backups(
    droplets: Iterable[Droplet],
    *,
    now: datetime | None = None,
    cap: int = MONTHLY_HOUR_CAP,
    cost_fraction: float = BACKUP_COST_FRACTION,
    backups_per_month: int = BACKUPS_PER_MONTH,
) -> CostEstimate:
    """
    Estimate the cost of weekly droplet backups.

    Only droplets with the backups feature count. Each backup costs a fixed
    fraction of a full month of the droplet, and one is assumed per week
    since the droplet (or the month) started.
    """
    window = MonthWindow.at(now)
    current = 0.0
    projected = 0.0

    for droplet in droplets:
        if not droplet.has_backups:
            continue

        unit_price = droplet.price_hourly * cap * cost_fraction
        backups_taken = min(
            backups_per_month,
            weeks_between(window.billing_start(droplet.created_at), window.now),
        )

        current += round2(backups_taken * unit_price)
        projected += round2(backups_per_month * unit_price)

    return CostEstimate(current=current, projected=projected)
