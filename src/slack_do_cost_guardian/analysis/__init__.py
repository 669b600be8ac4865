"""Cost estimation for Slack DigitalOcean Cost Guardian."""

from slack_do_cost_guardian.analysis.billing_period import MonthWindow, hours_between, weeks_between
from slack_do_cost_guardian.analysis.cost_summary import CostSummary, aggregate, compute_cost_summary
from slack_do_cost_guardian.analysis.estimators import (
    CostEstimate,
    estimate_backups,
    estimate_databases,
    estimate_droplets,
    estimate_snapshots,
    estimate_storage,
    estimate_volumes,
    prorate,
)

__all__ = [
    "MonthWindow",
    "hours_between",
    "weeks_between",
    "CostEstimate",
    "CostSummary",
    "prorate",
    "estimate_droplets",
    "estimate_databases",
    "estimate_storage",
    "estimate_volumes",
    "estimate_snapshots",
    "estimate_backups",
    "aggregate",
    "compute_cost_summary",
]
