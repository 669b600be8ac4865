"""Base classes for DigitalOcean resource collectors."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any, Literal

from slack_do_cost_guardian.errors import ParseError

ResourceCategory = Literal["droplets", "databases", "volumes", "snapshots"]

RESOURCE_CATEGORIES: tuple[ResourceCategory, ...] = (
    "droplets",
    "databases",
    "volumes",
    "snapshots",
)

BACKUPS_FEATURE = "backups"


def parse_timestamp(value: str) -> datetime:
    """Parse an API timestamp (e.g. "2024-01-15T18:37:44Z") into an aware datetime."""
    try:
        parsed = datetime.fromisoformat(value)
    except (TypeError, ValueError) as e:
        raise ParseError(f"Invalid created_at timestamp: {value!r}") from e

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def _require(data: dict[str, Any], key: str, kind: str) -> Any:
    try:
        return data[key]
    except (KeyError, TypeError) as e:
        raise ParseError(f"{kind} record is missing '{key}'") from e


@dataclass(frozen=True)
class Droplet:
    """A compute instance."""

    id: str
    name: str
    created_at: datetime
    price_hourly: float
    features: frozenset[str] = field(default_factory=frozenset)

    @property
    def has_backups(self) -> bool:
        return BACKUPS_FEATURE in self.features

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> Droplet:
        size = _require(data, "size", "Droplet")
        try:
            price_hourly = float(_require(size, "price_hourly", "Droplet size"))
        except (TypeError, ValueError) as e:
            raise ParseError(f"Droplet has an invalid hourly price: {size!r}") from e

        return cls(
            id=str(data.get("id", "")),
            name=data.get("name", ""),
            created_at=parse_timestamp(_require(data, "created_at", "Droplet")),
            price_hourly=price_hourly,
            features=frozenset(data.get("features") or ()),
        )


@dataclass(frozen=True)
class DatabaseCluster:
    """A managed database cluster. Its price comes from the rate table."""

    id: str
    name: str
    created_at: datetime
    size: str
    num_nodes: int

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> DatabaseCluster:
        try:
            num_nodes = int(_require(data, "num_nodes", "Database"))
        except (TypeError, ValueError) as e:
            raise ParseError(f"Database has an invalid node count: {data.get('num_nodes')!r}") from e

        return cls(
            id=str(data.get("id", "")),
            name=data.get("name", ""),
            created_at=parse_timestamp(_require(data, "created_at", "Database")),
            size=_require(data, "size", "Database"),
            num_nodes=num_nodes,
        )


@dataclass(frozen=True)
class Volume:
    """A block-storage volume."""

    id: str
    name: str
    created_at: datetime
    size_gigabytes: float

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> Volume:
        return cls(
            id=str(data.get("id", "")),
            name=data.get("name", ""),
            created_at=parse_timestamp(_require(data, "created_at", "Volume")),
            size_gigabytes=_parse_size(data, "Volume"),
        )


@dataclass(frozen=True)
class Snapshot:
    """A droplet or volume snapshot."""

    id: str
    name: str
    created_at: datetime
    size_gigabytes: float

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> Snapshot:
        return cls(
            id=str(data.get("id", "")),
            name=data.get("name", ""),
            created_at=parse_timestamp(_require(data, "created_at", "Snapshot")),
            size_gigabytes=_parse_size(data, "Snapshot"),
        )


def _parse_size(data: dict[str, Any], kind: str) -> float:
    value = _require(data, "size_gigabytes", kind)
    try:
        return float(value)
    except (TypeError, ValueError) as e:
        raise ParseError(f"{kind} has an invalid size: {value!r}") from e


Resource = Droplet | DatabaseCluster | Volume | Snapshot

RESOURCE_TYPES: dict[ResourceCategory, type] = {
    "droplets": Droplet,
    "databases": DatabaseCluster,
    "volumes": Volume,
    "snapshots": Snapshot,
}


class ResourceFetcher(ABC):
    """Abstract base class for anything that lists billable resources."""

    @abstractmethod
    def fetch(self, category: ResourceCategory) -> list[Resource]:
        """
        List every resource in a category.

        Args:
            category: One of RESOURCE_CATEGORIES.

        Returns:
            Parsed resource records.

        Raises:
            FetchError: On transport failure or a non-2xx response.
            ParseError: On a malformed response body.
        """
        pass

    @property
    @abstractmethod
    def collector_name(self) -> str:
        """Return the name of this collector."""
        pass


def collect_resources(fetcher: ResourceFetcher) -> dict[ResourceCategory, list[Resource]]:
    """Fetch every category in turn. The first failure aborts the whole collection."""
    return {category: fetcher.fetch(category) for category in RESOURCE_CATEGORIES}
