"""
Slack Slash Command Lambda Handler.

Replies to the cost command with this month's DigitalOcean cost estimate.
Receives requests via Lambda Function URL, or direct invocation with the
secrets passed in the event as `__secrets`.
"""

from __future__ import annotations

import base64
import json
from collections.abc import Mapping
from datetime import UTC, datetime
from typing import Any

from slack_do_cost_guardian.analysis.cost_summary import compute_cost_summary
from slack_do_cost_guardian.collectors.base import ResourceFetcher, collect_resources
from slack_do_cost_guardian.collectors.digitalocean import DigitalOceanCollector
from slack_do_cost_guardian.config.loader import get_cached_config
from slack_do_cost_guardian.config.schema import Config, DigitalOceanConfig
from slack_do_cost_guardian.config.secrets import (
    SecretProvider,
    SecretsManagerProvider,
    StaticSecretProvider,
)
from slack_do_cost_guardian.errors import CostComputationError, MissingCredentialError
from slack_do_cost_guardian.notifications.slack.callback import (
    parse_slash_command,
    verify_slack_signature,
)
from slack_do_cost_guardian.notifications.slack.formatter import SlackFormatter

HELP_TEXT = (
    "Estimates this month's DigitalOcean costs for droplets, databases, "
    "volumes, snapshots and backups.\n"
    "Run the command with no arguments to get the current and projected totals."
)


def handler(event: dict[str, Any], context: Any) -> dict[str, Any]:
    """
    Lambda handler for the cost slash command.

    Environment variables:
    - CONFIG_SECRET_NAME: Secrets Manager secret with digitaloceanApiKey and signing_secret
    - CONFIG_ENV: Deployment environment (dev/staging/prod)

    Args:
        event: Lambda Function URL event, or a direct invocation carrying `__secrets`.
        context: Lambda context.

    Returns:
        HTTP response dict for Function URL events; {"body": payload} for
        direct invocations.
    """
    config = get_cached_config()
    print(f"{config.project_name} command handler invoked at {datetime.now(UTC).isoformat()}")

    formatter = SlackFormatter(response_type=config.slack.response_type)

    if "__secrets" in event:
        invocation_secrets = event.get("__secrets")
        if not isinstance(invocation_secrets, Mapping):
            print(f"Ignoring __secrets of type {type(invocation_secrets).__name__}")
            invocation_secrets = {}
        secrets = StaticSecretProvider(invocation_secrets)
        text = build_cost_report(secrets, config)
        return {"body": formatter.build_response(text)}

    headers = {k.lower(): v for k, v in (event.get("headers") or {}).items()}
    body = event.get("body") or ""

    if event.get("isBase64Encoded"):
        body = base64.b64decode(body).decode("utf-8")

    secrets = _get_secret_provider(config)

    if config.slack.verify_signatures:
        timestamp = headers.get("x-slack-request-timestamp", "")
        signature = headers.get("x-slack-signature", "")

        if not timestamp or not signature:
            print("Missing Slack signature headers")
            return _error_response(401, "Missing signature headers")

        try:
            signing_secret = secrets.get_secret(config.slack.signing_secret_key)
        except CostComputationError as e:
            print(f"Could not retrieve Slack signing secret: {e}")
            return _error_response(500, "Configuration error")

        if not signing_secret:
            print(f"{config.slack.signing_secret_key} not found in secret")
            return _error_response(500, "Configuration error")

        if not verify_slack_signature(signing_secret, timestamp, body, signature):
            print("Invalid Slack signature")
            return _error_response(401, "Invalid signature")

    try:
        command = parse_slash_command(body)
    except ValueError as e:
        print(f"Failed to parse slash command: {e}")
        return _error_response(400, "Invalid slash command")

    print(f"Command {command.command} from user {command.user_id} in channel {command.channel_id}")

    if command.text.lower() == "help":
        return _success_response(formatter.build_response(HELP_TEXT))

    text = build_cost_report(secrets, config)
    return _success_response(formatter.build_response(text))


def build_cost_report(
    secrets: SecretProvider,
    config: Config | None = None,
    collector: ResourceFetcher | None = None,
    now: datetime | None = None,
) -> str:
    """
    Fetch every resource, estimate costs and format the reply text.

    Any failure is turned into a single error message; there is never a
    partial summary. Without an API key nothing is fetched.

    Args:
        secrets: Where to find the DigitalOcean API key.
        config: Configuration. Defaults to Config().
        collector: Optional resource fetcher. Defaults to a DigitalOceanCollector
                   built from the API key.
        now: Evaluation time for the estimate. Defaults to now (UTC).

    Returns:
        Slack mrkdwn text for the reply.
    """
    config = config or Config()
    formatter = SlackFormatter(response_type=config.slack.response_type)
    key_name = config.digitalocean.api_key_secret_key

    try:
        api_key = _require_api_key(secrets, key_name)
    except MissingCredentialError as e:
        print(f"Missing DigitalOcean credential: {e}")
        return formatter.format_missing_credential(e.key_name, config.secrets.secret_name)
    except CostComputationError as e:
        print(f"Error retrieving DigitalOcean credential: {e}")
        return formatter.format_error(str(e))

    fetcher = collector or _create_collector(api_key, config.digitalocean)

    try:
        resources = collect_resources(fetcher)
        print(
            f"Fetched resources from {fetcher.collector_name}: "
            + ", ".join(f"{len(items)} {category}" for category, items in resources.items())
        )
        summary = compute_cost_summary(resources, config.pricing, now=now)
    except CostComputationError as e:
        print(f"Cost summary failed: {e}")
        return formatter.format_error(str(e))

    print(f"Estimated costs: ${summary.current:.2f} so far, ${summary.projected:.2f} projected")
    return formatter.format_summary(summary)


def _require_api_key(secrets: SecretProvider, key_name: str) -> str:
    api_key = secrets.get_secret(key_name)
    if not api_key:
        raise MissingCredentialError(key_name)
    return api_key


def _get_secret_provider(config: Config) -> SecretProvider:
    """Secrets Manager if a secret is configured, otherwise no secrets at all."""
    if not config.secrets.secret_name:
        print("No secret name configured")
        return StaticSecretProvider()

    return SecretsManagerProvider(
        secret_name=config.secrets.secret_name,
        region=config.secrets.region or config.aws.region,
    )


def _create_collector(api_key: str, do_config: DigitalOceanConfig) -> DigitalOceanCollector:
    return DigitalOceanCollector(
        api_key=api_key,
        base_url=do_config.api_base_url,
        per_page=do_config.per_page,
        follow_pagination=do_config.follow_pagination,
        timeout=do_config.request_timeout,
    )


def _success_response(payload: dict[str, Any]) -> dict[str, Any]:
    """Return a slash-command reply to Slack."""
    return {
        "statusCode": 200,
        "headers": {"Content-Type": "application/json"},
        "body": json.dumps(payload),
    }


def _error_response(status_code: int, message: str) -> dict[str, Any]:
    """Build an error response."""
    return {
        "statusCode": status_code,
        "headers": {"Content-Type": "application/json"},
        "body": json.dumps({"error": message}),
    }
