"""Configuration management for Slack DigitalOcean Cost Guardian."""

from slack_do_cost_guardian.config.schema import (
    AWSConfig,
    Config,
    DigitalOceanConfig,
    PricingConfig,
    SecretsConfig,
    SlackConfig,
)
from slack_do_cost_guardian.config.loader import get_cached_config, load_config
from slack_do_cost_guardian.config.secrets import (
    SecretProvider,
    SecretsManagerProvider,
    StaticSecretProvider,
)

__all__ = [
    "Config",
    "AWSConfig",
    "DigitalOceanConfig",
    "PricingConfig",
    "SecretsConfig",
    "SlackConfig",
    "load_config",
    "get_cached_config",
    "SecretProvider",
    "SecretsManagerProvider",
    "StaticSecretProvider",
]
