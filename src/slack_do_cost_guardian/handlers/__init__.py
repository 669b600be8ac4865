"""Lambda handlers for Slack DigitalOcean Cost Guardian."""
