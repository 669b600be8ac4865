"""DigitalOcean API collector."""

from __future__ import annotations

from typing import Any

import requests

from slack_do_cost_guardian.collectors.base import (
    RESOURCE_TYPES,
    Resource,
    ResourceCategory,
    ResourceFetcher,
)
from slack_do_cost_guardian.errors import FetchError, ParseError


class DigitalOceanCollector(ResourceFetcher):
    """
    List billable resources from the DigitalOcean v2 API.

    Each category maps to one list endpoint whose response wraps the records
    in a key of the same name (e.g. GET /droplets -> {"droplets": [...]}).
    """

    collector_name = "digitalocean"

    BASE_URL = "https://api.digitalocean.com/v2"

    def __init__(
        self,
        api_key: str,
        base_url: str = BASE_URL,
        per_page: int = 50,
        follow_pagination: bool = True,
        timeout: float = 10.0,
        session: requests.Session | None = None,
    ):
        """
        Initialize the DigitalOcean collector.

        Args:
            api_key: DigitalOcean personal access token.
            base_url: API root, without trailing slash.
            per_page: Page size requested from list endpoints.
            follow_pagination: Follow links.pages.next until exhausted.
            timeout: Per-request timeout in seconds.
            session: Optional requests session (for testing).
        """
        self.base_url = base_url.rstrip("/")
        self.per_page = per_page
        self.follow_pagination = follow_pagination
        self.timeout = timeout
        self._session = session or requests.Session()
        self._session.headers.update({
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json",
        })

    def fetch(self, category: ResourceCategory) -> list[Resource]:
        """List every resource in a category, parsed into records."""
        if category not in RESOURCE_TYPES:
            raise ValueError(f"Unknown resource category: {category}")

        resource_type = RESOURCE_TYPES[category]
        url: str | None = f"{self.base_url}/{category}?per_page={self.per_page}"
        resources: list[Resource] = []

        while url:
            payload = self._get(url)
            if category not in payload:
                raise ParseError(f"Response from {category} endpoint has no '{category}' field")

            # /databases returns null rather than [] when there are no clusters
            for item in payload[category] or []:
                resources.append(resource_type.from_api(item))

            url = self._next_page(payload) if self.follow_pagination else None

        return resources

    def _get(self, url: str) -> dict[str, Any]:
        """
        GET a URL and decode its JSON body.

        Raises:
            FetchError: On network errors or a non-2xx status.
            ParseError: If the body is not a JSON object.
        """
        try:
            response = self._session.get(url, timeout=self.timeout)
        except requests.RequestException as e:
            raise FetchError(f"Failed to load page: {e}") from e

        if response.status_code < 200 or response.status_code > 299:
            raise FetchError(
                f"Failed to load page, status code: {response.status_code}",
                status_code=response.status_code,
            )

        try:
            payload = response.json()
        except ValueError as e:
            raise ParseError(f"Invalid JSON in response from {url}: {e}") from e

        if not isinstance(payload, dict):
            raise ParseError(f"Unexpected response body from {url}")

        return payload

    @staticmethod
    def _next_page(payload: dict[str, Any]) -> str | None:
        links = payload.get("links") or {}
        pages = links.get("pages") or {}
        return pages.get("next")
