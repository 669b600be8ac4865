"""Slack slash-command request handling."""

from __future__ import annotations

import hashlib
import hmac
import time
import urllib.parse
from dataclasses import dataclass


@dataclass
class SlashCommand:
    """Parsed slash-command request."""

    command: str
    text: str
    user_id: str
    user_name: str
    channel_id: str
    team_id: str
    response_url: str


def verify_slack_signature(
    signing_secret: str,
    timestamp: str,
    body: str,
    signature: str,
) -> bool:
    """
    Verify Slack request signature using HMAC-SHA256.

    Args:
        signing_secret: Slack app signing secret.
        timestamp: X-Slack-Request-Timestamp header value.
        body: Raw request body (URL-encoded).
        signature: X-Slack-Signature header value.

    Returns:
        True if signature is valid, False otherwise.
    """
    # Reject requests older than 5 minutes (replay attack prevention)
    try:
        request_time = int(timestamp)
        if abs(time.time() - request_time) > 60 * 5:
            return False
    except (ValueError, TypeError):
        return False

    sig_basestring = f"v0:{timestamp}:{body}"
    expected_signature = "v0=" + hmac.new(
        signing_secret.encode("utf-8"),
        sig_basestring.encode("utf-8"),
        hashlib.sha256,
    ).hexdigest()

    return hmac.compare_digest(expected_signature, signature)


def parse_slash_command(body: str) -> SlashCommand:
    """
    Parse a slash-command request from its URL-encoded body.

    Args:
        body: URL-encoded request body (command=/dobill&text=...).

    Returns:
        SlashCommand with extracted fields.

    Raises:
        ValueError: If the body has no command.
    """
    parsed = urllib.parse.parse_qs(body, keep_blank_values=True)

    def field(name: str) -> str:
        return parsed.get(name, [""])[0]

    command = field("command")
    if not command:
        raise ValueError("Missing command in request body")

    return SlashCommand(
        command=command,
        text=field("text").strip(),
        user_id=field("user_id"),
        user_name=field("user_name"),
        channel_id=field("channel_id"),
        team_id=field("team_id"),
        response_url=field("response_url"),
    )
