"""Slack message formatting for cost summaries."""

from __future__ import annotations

from typing import Any, Literal

from slack_do_cost_guardian.analysis.cost_summary import SUMMARY_CATEGORIES, CostSummary


def _usd(amount: float) -> str:
    return f"${amount:,.2f}"


class SlackFormatter:
    """Format slash-command replies using Slack mrkdwn."""

    CATEGORY_LABELS = {
        "droplets": "Droplets",
        "databases": "Databases",
        "volumes": "Volumes",
        "snapshots": "Snapshots",
        "backups": "Backups",
    }

    def __init__(self, response_type: Literal["in_channel", "ephemeral"] = "in_channel"):
        self.response_type = response_type

    def format_summary(self, summary: CostSummary) -> str:
        """
        Format a cost summary as mrkdwn text.

        Totals are rounded for display only; the breakdown keeps each
        category's own already-rounded figures.
        """
        lines = [
            f"Total Costs so far: {_usd(summary.current)}",
            f"Projected Costs for this month: {_usd(summary.projected)}",
        ]

        categories = [c for c in SUMMARY_CATEGORIES if c in summary.breakdown]
        categories += [c for c in summary.breakdown if c not in SUMMARY_CATEGORIES]

        for category in categories:
            estimate = summary.breakdown[category]
            label = self.CATEGORY_LABELS.get(category, category.title())
            lines.append(f"*{label}*")
            lines.append(f" Current: {_usd(estimate.current)}")
            lines.append(f" Projected: {_usd(estimate.projected)}")

        return "\n".join(lines)

    def format_error(self, message: str) -> str:
        """Format an error for display."""
        return f"*ERROR:* {message}"

    def format_missing_credential(self, key_name: str, secret_name: str | None = None) -> str:
        """Tell the user how to provide the DigitalOcean API key."""
        if secret_name:
            return (
                f"You need the `{key_name}` secret to run this command. "
                f"Add your DigitalOcean API token under `{key_name}` in the "
                f"`{secret_name}` secret and try again."
            )
        return (
            f"You need the `{key_name}` secret to run this command. "
            "Provide your DigitalOcean API token and try again."
        )

    def build_response(self, text: str) -> dict[str, Any]:
        """Wrap text in a slash-command response payload."""
        return {"response_type": self.response_type, "text": text}
