"""Slack slash-command integration."""

from slack_do_cost_guardian.notifications.slack.callback import (
    SlashCommand,
    parse_slash_command,
    verify_slack_signature,
)
from slack_do_cost_guardian.notifications.slack.formatter import SlackFormatter

__all__ = ["SlackFormatter", "SlashCommand", "parse_slash_command", "verify_slack_signature"]
