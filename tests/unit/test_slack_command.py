"""Tests for the slash-command handler."""

import base64
import hashlib
import hmac
import json
import pytest
import time
import urllib.parse
from datetime import UTC, datetime
from unittest.mock import MagicMock

from botocore.exceptions import EndpointConnectionError

from slack_do_cost_guardian.collectors.base import DatabaseCluster, ResourceFetcher
from slack_do_cost_guardian.config.schema import Config
from slack_do_cost_guardian.config.secrets import (
    SecretProvider,
    SecretsManagerProvider,
    StaticSecretProvider,
)
from slack_do_cost_guardian.errors import FetchError, ParseError, SecretLookupError
from slack_do_cost_guardian.handlers import slack_command
from slack_do_cost_guardian.handlers.slack_command import build_cost_report, handler
from slack_do_cost_guardian.notifications.slack.callback import parse_slash_command, verify_slack_signature

SIGNING_SECRET = "8f742231b10e8888abcd99yyyzzz85a5"


class FakeFetcher(ResourceFetcher):
    """In-memory fetcher that records calls."""

    collector_name = "fake"

    def __init__(self, resources=None, error=None):
        self.resources = resources or {}
        self.error = error
        self.calls = []

    def fetch(self, category):
        self.calls.append(category)
        if self.error:
            raise self.error
        return self.resources.get(category, [])


class FailingSecretProvider(SecretProvider):
    """Secret provider whose store can't be read."""

    def get_secret(self, name):
        raise SecretLookupError("Error retrieving secret 'locked': AccessDenied")


def sign(body: str, timestamp: str, secret: str = SIGNING_SECRET) -> str:
    """Helper to compute a Slack request signature."""
    digest = hmac.new(
        secret.encode("utf-8"),
        f"v0:{timestamp}:{body}".encode("utf-8"),
        hashlib.sha256,
    ).hexdigest()
    return f"v0={digest}"


def create_http_event(body: str, signed: bool = True) -> dict:
    """Helper to create a Lambda Function URL event."""
    timestamp = str(int(time.time()))
    headers = {"Content-Type": "application/x-www-form-urlencoded"}
    if signed:
        headers["X-Slack-Request-Timestamp"] = timestamp
        headers["X-Slack-Signature"] = sign(body, timestamp)
    return {"headers": headers, "body": body, "isBase64Encoded": False}


COMMAND_BODY = urllib.parse.urlencode({
    "command": "/dobill",
    "text": "",
    "user_id": "U123",
    "user_name": "ada",
    "channel_id": "C456",
    "team_id": "T789",
    "response_url": "https://hooks.slack.com/commands/T789/1/abc",
})


class TestBuildCostReport:
    """Tests for build_cost_report."""

    def test_missing_credential_skips_fetching(self):
        """Test that no API key means an instructional message and zero fetches."""
        fetcher = FakeFetcher()
        text = build_cost_report(StaticSecretProvider(), Config(), collector=fetcher)

        assert "You need the `digitaloceanApiKey` secret" in text
        assert fetcher.calls == []

    def test_summary(self, sample_resources, now):
        """Test a successful report."""
        fetcher = FakeFetcher(sample_resources)
        secrets = StaticSecretProvider({"digitaloceanApiKey": "token"})

        text = build_cost_report(secrets, Config(), collector=fetcher, now=now)

        assert text.startswith("Total Costs so far: $")
        assert "*Droplets*\n Current: $5.00\n Projected: $33.60" in text
        assert "*Databases*" in text and "Projected: $14.78" in text
        assert "*Backups*" in text
        assert fetcher.calls == ["droplets", "databases", "volumes", "snapshots"]

    def test_fetch_error_is_reported(self):
        """Test that a failed fetch becomes a single error message."""
        fetcher = FakeFetcher(error=FetchError("Failed to load page, status code: 401", 401))
        secrets = StaticSecretProvider({"digitaloceanApiKey": "bad-token"})

        text = build_cost_report(secrets, Config(), collector=fetcher)

        assert text == "*ERROR:* Failed to load page, status code: 401"

    def test_parse_error_is_reported(self):
        """Test that a malformed response aborts the report."""
        fetcher = FakeFetcher(error=ParseError("Invalid JSON in response"))
        text = build_cost_report(StaticSecretProvider({"digitaloceanApiKey": "t"}), collector=fetcher)
        assert text == "*ERROR:* Invalid JSON in response"

    def test_unknown_rate_has_no_partial_total(self, sample_resources, now):
        """Test that an unknown database rate fails the whole report."""
        resources = dict(sample_resources)
        resources["databases"] = [
            DatabaseCluster(
                id="db",
                name="big",
                created_at=datetime(2024, 1, 1, tzinfo=UTC),
                size="db-s-32vcpu-1tb",
                num_nodes=1,
            ),
        ]
        secrets = StaticSecretProvider({"digitaloceanApiKey": "t"})

        text = build_cost_report(secrets, collector=FakeFetcher(resources), now=now)

        assert text.startswith("*ERROR:*")
        assert "db-s-32vcpu-1tb" in text
        assert "Total Costs" not in text

    def test_secret_store_error(self):
        """Test that an unreadable secret store is reported without fetching."""
        fetcher = FakeFetcher()
        text = build_cost_report(FailingSecretProvider(), collector=fetcher)
        assert text.startswith("*ERROR:* Error retrieving secret")
        assert fetcher.calls == []

    def test_secrets_manager_unreachable(self):
        """Test that a Secrets Manager connection failure becomes an error reply."""
        client = MagicMock()
        client.get_secret_value.side_effect = EndpointConnectionError(
            endpoint_url="https://secretsmanager.us-east-1.amazonaws.com"
        )
        secrets = SecretsManagerProvider("cost-guardian/dev/config", secrets_client=client)
        fetcher = FakeFetcher()

        text = build_cost_report(secrets, Config(), collector=fetcher)

        assert text.startswith("*ERROR:* Error retrieving secret 'cost-guardian/dev/config'")
        assert fetcher.calls == []

    def test_logs_collector_name(self, capsys):
        """Test that the collector used is logged."""
        build_cost_report(StaticSecretProvider({"digitaloceanApiKey": "t"}), collector=FakeFetcher())
        assert "Fetched resources from fake:" in capsys.readouterr().out

    def test_custom_key_name(self):
        """Test that the API key name comes from config."""
        config = Config(digitalocean={"api_key_secret_key": "do_token"})
        fetcher = FakeFetcher()
        text = build_cost_report(StaticSecretProvider({"do_token": "t"}), config, collector=fetcher)
        assert text.startswith("Total Costs so far: $0.00")


class TestHandler:
    """Tests for the Lambda handler."""

    @pytest.fixture(autouse=True)
    def isolated_config(self, tmp_path, monkeypatch):
        """Load config from an empty directory."""
        monkeypatch.setenv("CONFIG_DIR", str(tmp_path))

    @pytest.fixture
    def fetcher(self, monkeypatch, sample_resources):
        """Replace the DigitalOcean collector."""
        fetcher = FakeFetcher(sample_resources)
        monkeypatch.setattr(slack_command, "_create_collector", lambda api_key, do_config: fetcher)
        return fetcher

    @pytest.fixture
    def secrets(self, monkeypatch):
        """Replace Secrets Manager with static secrets."""
        provider = StaticSecretProvider({
            "digitaloceanApiKey": "token",
            "signing_secret": SIGNING_SECRET,
        })
        monkeypatch.setattr(slack_command, "_get_secret_provider", lambda config: provider)
        return provider

    def test_direct_invocation(self, fetcher):
        """Test invocation with secrets in the event."""
        response = handler({"__secrets": {"digitaloceanApiKey": "token"}}, None)

        assert response["body"]["response_type"] == "in_channel"
        assert response["body"]["text"].startswith("Total Costs so far: $")
        assert len(fetcher.calls) == 4

    def test_direct_invocation_missing_key(self, fetcher):
        """Test that missing secrets short-circuit before any fetch."""
        response = handler({"__secrets": {}}, None)

        assert "digitaloceanApiKey" in response["body"]["text"]
        assert fetcher.calls == []

    @pytest.mark.parametrize("invocation_secrets", [["digitaloceanApiKey"], "token", None, 42])
    def test_direct_invocation_malformed_secrets(self, fetcher, invocation_secrets):
        """Test that non-mapping secrets are treated as no secrets."""
        response = handler({"__secrets": invocation_secrets}, None)

        assert "You need the `digitaloceanApiKey` secret" in response["body"]["text"]
        assert fetcher.calls == []

    def test_config_is_cached(self, fetcher, monkeypatch):
        """Test that config is loaded once across warm invocations."""
        handler({"__secrets": {}}, None)
        monkeypatch.setenv("SLACK_RESPONSE_TYPE", "ephemeral")

        response = handler({"__secrets": {}}, None)

        assert response["body"]["response_type"] == "in_channel"

    def test_signed_slash_command(self, fetcher, secrets):
        """Test a verified slash command."""
        response = handler(create_http_event(COMMAND_BODY), None)

        assert response["statusCode"] == 200
        payload = json.loads(response["body"])
        assert payload["response_type"] == "in_channel"
        assert "Projected Costs for this month" in payload["text"]

    def test_base64_body(self, fetcher, secrets):
        """Test that base64-encoded bodies are decoded before verification."""
        event = create_http_event(COMMAND_BODY)
        event["body"] = base64.b64encode(COMMAND_BODY.encode("utf-8")).decode("ascii")
        event["isBase64Encoded"] = True

        assert handler(event, None)["statusCode"] == 200

    def test_missing_signature(self, fetcher, secrets):
        """Test that unsigned requests are rejected."""
        response = handler(create_http_event(COMMAND_BODY, signed=False), None)
        assert response["statusCode"] == 401
        assert fetcher.calls == []

    def test_bad_signature(self, fetcher, secrets):
        """Test that tampered requests are rejected."""
        event = create_http_event(COMMAND_BODY)
        event["body"] = COMMAND_BODY.replace("ada", "eve")
        assert handler(event, None)["statusCode"] == 401

    def test_missing_signing_secret(self, fetcher, monkeypatch):
        """Test that verification without a signing secret is a config error."""
        provider = StaticSecretProvider({"digitaloceanApiKey": "token"})
        monkeypatch.setattr(slack_command, "_get_secret_provider", lambda config: provider)

        assert handler(create_http_event(COMMAND_BODY), None)["statusCode"] == 500

    def test_verification_disabled(self, fetcher, secrets, monkeypatch):
        """Test that verification can be turned off."""
        monkeypatch.setenv("SLACK_VERIFY_SIGNATURES", "false")
        response = handler(create_http_event(COMMAND_BODY, signed=False), None)
        assert response["statusCode"] == 200

    def test_help(self, fetcher, secrets):
        """Test the help text."""
        body = COMMAND_BODY.replace("text=&", "text=help&")
        response = handler(create_http_event(body), None)

        assert "Estimates this month's DigitalOcean costs" in json.loads(response["body"])["text"]
        assert fetcher.calls == []

    def test_invalid_body(self, fetcher, secrets):
        """Test that a body without a command is rejected."""
        response = handler(create_http_event("foo=bar"), None)
        assert response["statusCode"] == 400


class TestSlashCommandParsing:
    """Tests for request parsing and verification."""

    def test_parse(self):
        """Test parsing the URL-encoded body."""
        command = parse_slash_command(COMMAND_BODY)
        assert command.command == "/dobill"
        assert command.text == ""
        assert command.user_name == "ada"
        assert command.channel_id == "C456"

    def test_parse_missing_command(self):
        """Test that a body without a command is rejected."""
        with pytest.raises(ValueError):
            parse_slash_command("text=hello")

    def test_verify_signature(self):
        """Test a valid signature."""
        timestamp = str(int(time.time()))
        assert verify_slack_signature(SIGNING_SECRET, timestamp, "a=b", sign("a=b", timestamp))

    def test_stale_timestamp(self):
        """Test that old requests are rejected even when signed."""
        timestamp = str(int(time.time()) - 600)
        assert not verify_slack_signature(SIGNING_SECRET, timestamp, "a=b", sign("a=b", timestamp))

    def test_non_numeric_timestamp(self):
        """Test that garbage timestamps are rejected."""
        assert not verify_slack_signature(SIGNING_SECRET, "soon", "a=b", "v0=00")
