"""Resource collectors for Slack DigitalOcean Cost Guardian."""

from slack_do_cost_guardian.collectors.base import (
    RESOURCE_CATEGORIES,
    DatabaseCluster,
    Droplet,
    Resource,
    ResourceFetcher,
    Snapshot,
    Volume,
    collect_resources,
)
from slack_do_cost_guardian.collectors.digitalocean import DigitalOceanCollector

__all__ = [
    "RESOURCE_CATEGORIES",
    "Resource",
    "Droplet",
    "DatabaseCluster",
    "Volume",
    "Snapshot",
    "ResourceFetcher",
    "DigitalOceanCollector",
    "collect_resources",
]
