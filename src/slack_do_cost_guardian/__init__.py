"""
Slack DigitalOcean Cost Guardian - DigitalOcean cost estimates as a Slack command.

A small, stateless Lambda that:
- Reads the DigitalOcean API key from AWS Secrets Manager
- Lists droplets, database clusters, volumes and snapshots
- Estimates month-to-date and projected costs for the current month
- Replies to the Slack slash command with a cost summary
"""

__version__ = "0.1.0"
