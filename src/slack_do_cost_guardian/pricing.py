"""DigitalOcean pricing constants.

DigitalOcean doesn't expose database cluster rates via the API, so they are
kept here and must follow the published pricing page. Config can override
any of them (see PricingConfig).
"""

from __future__ import annotations

from collections.abc import Mapping

# DigitalOcean bills at most 672 hours (28 days) per month
MONTHLY_HOUR_CAP = 672

VOLUME_MONTHLY_RATE_PER_GB = 0.10
SNAPSHOT_MONTHLY_RATE_PER_GB = 0.05

# A backup costs this fraction of a full month of the droplet
BACKUP_COST_FRACTION = 0.05
BACKUPS_PER_MONTH = 4

DatabaseRateTable = Mapping[str, Mapping[int, float]]

# size slug -> node count -> USD per hour
DEFAULT_DATABASE_HOURLY_RATES: dict[str, dict[int, float]] = {
    "db-s-1vcpu-1gb": {1: 0.022},
    "db-s-1vcpu-2gb": {1: 0.045, 2: 0.074, 3: 0.104},
    "db-s-2vcpu-4gb": {1: 0.089, 2: 0.149, 3: 0.208},
    "db-s-4vcpu-8gb": {1: 0.179, 2: 0.298, 3: 0.417},
    "db-s-6vcpu-16gb": {1: 0.357, 2: 0.595, 3: 0.833},
    "db-s-8vcpu-32gb": {1: 0.714, 2: 1.19, 3: 1.667},
    "db-s-16vcpu-64gb": {1: 2.381, 2: 3.333},
}
