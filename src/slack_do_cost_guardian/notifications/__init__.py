"""Notification integrations for Slack DigitalOcean Cost Guardian."""

from slack_do_cost_guardian.notifications.slack.formatter import SlackFormatter

__all__ = [
    "SlackFormatter",
]
