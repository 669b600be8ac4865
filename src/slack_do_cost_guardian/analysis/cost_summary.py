"""Aggregate per-category estimates into one cost summary."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from datetime import UTC, datetime

from slack_do_cost_guardian.analysis.estimators import (
    CostEstimate,
    estimate_backups,
    estimate_databases,
    estimate_droplets,
    estimate_storage,
)
from slack_do_cost_guardian.collectors.base import Resource
from slack_do_cost_guardian.config.schema import PricingConfig

# Display order of the breakdown
SUMMARY_CATEGORIES = ("droplets", "databases", "volumes", "snapshots", "backups")


@dataclass(frozen=True)
class CostSummary:
    """Grand total plus the estimate of every category."""

    current: float
    projected: float
    breakdown: dict[str, CostEstimate] = field(default_factory=dict)
    computed_at: datetime | None = None


def aggregate(breakdown: Mapping[str, CostEstimate]) -> CostEstimate:
    """Sum estimates component-wise. Subtotals are not re-rounded."""
    return sum(breakdown.values(), CostEstimate())


def compute_cost_summary(
    resources_by_category: Mapping[str, Sequence[Resource]],
    pricing: PricingConfig | None = None,
    *,
    now: datetime | None = None,
) -> CostSummary:
    """
    Estimate this month's costs for every resource category.

    Args:
        resources_by_category: Resources keyed by category name. Missing
            categories count as empty.
        pricing: Rates and caps. Defaults to PricingConfig().
        now: Evaluation time, shared by every estimator. Defaults to now (UTC).

    Returns:
        CostSummary with the grand total and the per-category breakdown.

    Raises:
        CostComputationError: If any estimate fails (e.g. an unknown database
            rate). No partial summary is returned.
    """
    pricing = pricing or PricingConfig()
    now = now or datetime.now(UTC)
    cap = pricing.monthly_hour_cap

    droplets = resources_by_category.get("droplets") or []

    breakdown = {
        "droplets": estimate_droplets(droplets, now=now, cap=cap),
        "databases": estimate_databases(
            resources_by_category.get("databases") or [],
            pricing.database_hourly_rates,
            now=now,
            cap=cap,
        ),
        "volumes": estimate_storage(
            resources_by_category.get("volumes") or [],
            pricing.volume_monthly_rate_per_gb,
            now=now,
            cap=cap,
        ),
        "snapshots": estimate_storage(
            resources_by_category.get("snapshots") or [],
            pricing.snapshot_monthly_rate_per_gb,
            now=now,
            cap=cap,
        ),
        "backups": estimate_backups(
            droplets,
            now=now,
            cap=cap,
            cost_fraction=pricing.backup_cost_fraction,
            backups_per_month=pricing.backups_per_month,
        ),
    }

    total = aggregate(breakdown)
    return CostSummary(
        current=total.current,
        projected=total.projected,
        breakdown=breakdown,
        computed_at=now,
    )
