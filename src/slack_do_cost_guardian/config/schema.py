"""Pydantic configuration schema for Slack DigitalOcean Cost Guardian."""

from typing import Literal

from pydantic import BaseModel, Field

from slack_do_cost_guardian.pricing import (
    BACKUP_COST_FRACTION,
    BACKUPS_PER_MONTH,
    DEFAULT_DATABASE_HOURLY_RATES,
    MONTHLY_HOUR_CAP,
    SNAPSHOT_MONTHLY_RATE_PER_GB,
    VOLUME_MONTHLY_RATE_PER_GB,
)


class AWSConfig(BaseModel):
    """AWS account configuration (the bot runs on Lambda)."""

    region: str = "us-east-1"


class DigitalOceanConfig(BaseModel):
    """DigitalOcean API configuration."""

    api_base_url: str = "https://api.digitalocean.com/v2"
    per_page: int = Field(default=50, ge=1, le=200)
    follow_pagination: bool = True
    request_timeout: float = Field(default=10.0, gt=0)  # Seconds
    api_key_secret_key: str = "digitaloceanApiKey"  # Key name in the secret


class PricingConfig(BaseModel):
    """Rates used by the cost estimators (USD)."""

    monthly_hour_cap: int = Field(default=MONTHLY_HOUR_CAP, ge=1)
    volume_monthly_rate_per_gb: float = Field(default=VOLUME_MONTHLY_RATE_PER_GB, ge=0)
    snapshot_monthly_rate_per_gb: float = Field(default=SNAPSHOT_MONTHLY_RATE_PER_GB, ge=0)
    backup_cost_fraction: float = Field(default=BACKUP_COST_FRACTION, ge=0, le=1)
    backups_per_month: int = Field(default=BACKUPS_PER_MONTH, ge=0)
    # size slug -> node count -> hourly price; not available from the API
    database_hourly_rates: dict[str, dict[int, float]] = Field(
        default_factory=lambda: {
            size: dict(nodes) for size, nodes in DEFAULT_DATABASE_HOURLY_RATES.items()
        }
    )


class SecretsConfig(BaseModel):
    """Secrets Manager configuration."""

    secret_name: str | None = None  # Falls back to CONFIG_SECRET_NAME
    region: str | None = None  # Defaults to aws.region


class SlackConfig(BaseModel):
    """Slack slash-command configuration."""

    response_type: Literal["in_channel", "ephemeral"] = "in_channel"
    verify_signatures: bool = True
    signing_secret_key: str = "signing_secret"  # Key name in the secret


class Config(BaseModel):
    """Root configuration for Slack DigitalOcean Cost Guardian."""

    project_name: str = "slack-do-cost-guardian"
    environment: Literal["dev", "staging", "prod"] = "dev"

    aws: AWSConfig = Field(default_factory=AWSConfig)
    digitalocean: DigitalOceanConfig = Field(default_factory=DigitalOceanConfig)
    pricing: PricingConfig = Field(default_factory=PricingConfig)
    secrets: SecretsConfig = Field(default_factory=SecretsConfig)
    slack: SlackConfig = Field(default_factory=SlackConfig)
