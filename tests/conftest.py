"""Pytest configuration and fixtures."""

import pytest
from datetime import UTC, datetime

from slack_do_cost_guardian.collectors.base import DatabaseCluster, Droplet, Snapshot, Volume
from slack_do_cost_guardian.config.loader import get_cached_config

# 100 hours into March 2024
FIXED_NOW = datetime(2024, 3, 5, 4, 0, tzinfo=UTC)
LAST_MONTH = datetime(2024, 2, 10, 9, 30, tzinfo=UTC)

OVERRIDE_ENV_VARS = (
    "AWS_REGION",
    "CONFIG_DIR",
    "CONFIG_ENV",
    "CONFIG_SECRET_NAME",
    "DO_API_BASE_URL",
    "DO_FOLLOW_PAGINATION",
    "DO_PER_PAGE",
    "DO_REQUEST_TIMEOUT",
    "MONTHLY_HOUR_CAP",
    "SNAPSHOT_MONTHLY_RATE_PER_GB",
    "VOLUME_MONTHLY_RATE_PER_GB",
    "SLACK_RESPONSE_TYPE",
    "SLACK_VERIFY_SIGNATURES",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep config overrides from the outer environment out of tests."""
    for name in OVERRIDE_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    get_cached_config.cache_clear()
    yield
    get_cached_config.cache_clear()


@pytest.fixture
def now():
    """Fixed evaluation time: hour 100 of March 2024."""
    return FIXED_NOW


@pytest.fixture
def make_droplet():
    """Factory for droplet records."""

    def _make(created_at=LAST_MONTH, price_hourly=0.05, features=(), name="web-1"):
        return Droplet(
            id=name,
            name=name,
            created_at=created_at,
            price_hourly=price_hourly,
            features=frozenset(features),
        )

    return _make


@pytest.fixture
def sample_resources():
    """One resource of each category, all created before this month."""
    return {
        "droplets": [
            Droplet(
                id="1",
                name="web-1",
                created_at=LAST_MONTH,
                price_hourly=0.05,
                features=frozenset({"backups", "ipv6"}),
            ),
        ],
        "databases": [
            DatabaseCluster(
                id="db-1",
                name="pg-main",
                created_at=LAST_MONTH,
                size="db-s-1vcpu-1gb",
                num_nodes=1,
            ),
        ],
        "volumes": [
            Volume(id="vol-1", name="data", created_at=LAST_MONTH, size_gigabytes=100),
        ],
        "snapshots": [
            Snapshot(id="snap-1", name="nightly", created_at=LAST_MONTH, size_gigabytes=20),
        ],
    }


@pytest.fixture
def droplet_api_record():
    """A droplet as returned by GET /v2/droplets."""
    return {
        "id": 3164444,
        "name": "example.com",
        "created_at": "2024-02-10T09:30:00Z",
        "features": ["backups", "ipv6", "virtio"],
        "size_slug": "s-1vcpu-1gb",
        "size": {
            "slug": "s-1vcpu-1gb",
            "price_monthly": 6.0,
            "price_hourly": 0.00893,
        },
    }


@pytest.fixture
def sample_config_dict():
    """Sample configuration dictionary."""
    return {
        "project_name": "test-guardian",
        "environment": "dev",
        "aws": {
            "region": "eu-west-1",
        },
        "digitalocean": {
            "per_page": 100,
        },
        "pricing": {
            "volume_monthly_rate_per_gb": 0.12,
            "database_hourly_rates": {
                "db-s-1vcpu-1gb": {1: 0.03},
            },
        },
        "secrets": {
            "secret_name": "cost-guardian/dev/config",
        },
        "slack": {
            "response_type": "ephemeral",
        },
    }
