"""Catalog data model: organizations, repositories and per-channel versions."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal

Channel = Literal["alpha", "beta", "release"]

CHANNELS: tuple[Channel, ...] = ("alpha", "beta", "release")


@dataclass(frozen=True)
class Version:
    """A concrete release resolved for one channel."""

    name: str
    url: str
    size: int
    date: int
    body: str
    download_count: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "url": self.url,
            "size": self.size,
            "date": self.date,
            "body": self.body,
            "download_count": self.download_count,
        }


@dataclass(frozen=True)
class RepositoryVersions:
    """Latest release per channel; ``None`` means nothing resolved yet."""

    alpha: Version | None = None
    beta: Version | None = None
    release: Version | None = None

    def get(self, channel: str) -> Version | None:
        """Return the slot for ``channel``.

        Raises:
            KeyError: If ``channel`` is not one of the three known channels.
        """
        if channel not in CHANNELS:
            raise KeyError(channel)
        return getattr(self, channel)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {}
        for channel in CHANNELS:
            slot = self.get(channel)
            data[channel] = slot.to_dict() if slot is not None else None
        return data


@dataclass(frozen=True)
class Vendor:
    """Plugin vendor contact metadata."""

    email: str = ""
    url: str = ""
    name: str = ""


@dataclass(frozen=True)
class Repository:
    """A tracked GitHub repository published as an IDE plugin."""

    id: str
    name: str
    plugin_name: str
    description: str
    vendor: Vendor = field(default_factory=Vendor)
    versions: RepositoryVersions = field(default_factory=RepositoryVersions)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "plugin_name": self.plugin_name,
            "description": self.description,
            "vendor": {
                "email": self.vendor.email,
                "url": self.vendor.url,
                "name": self.vendor.name,
            },
            "versions": self.versions.to_dict(),
        }


@dataclass(frozen=True)
class Organization:
    """A GitHub owner grouping tracked repositories."""

    name: str
    repositories: tuple[Repository, ...] = ()


Catalog = tuple[Organization, ...]


def catalog_to_json(catalog: Catalog) -> list[dict]:
    """Convert the catalog to JSON-serializable dictionaries, preserving order."""
    return [
        {
            "name": org.name,
            "repositories": [repo.to_dict() for repo in org.repositories],
        }
        for org in catalog
    ]
