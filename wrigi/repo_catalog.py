"""Static catalog configuration: which organizations and repositories to track."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml

from wrigi.errors import ConfigError
from wrigi.models import Catalog, Organization, Repository, Vendor

DEFAULT_CATALOG: Catalog = (
    Organization(
        name="go-lang-plugin-org",
        repositories=(
            Repository(
                id="ro.redeul.google.go",
                name="go-lang-idea-plugin",
                plugin_name="Go language (golang.org) support plugin",
                description=(
                    "Google Go language IDE built using the Intellij Platform. "
                    "Released both an integrated IDE and as a standalone Intellij IDEA plugin"
                ),
                vendor=Vendor(
                    email="mtoader@gmail.com",
                    url="https://github.com/go-lang-plugin-org/go-lang-idea-plugin",
                    name="mtoader@gmail.com",
                ),
            ),
        ),
    ),
)


def _required_str(data: dict, key: str, where: str) -> str:
    value = data.get(key)
    if not isinstance(value, str) or not value:
        raise ConfigError(f"{where}: missing or invalid {key!r}")
    return value


def parse_repository(data: Any, where: str) -> Repository:
    """Build a Repository from its YAML mapping."""
    if not isinstance(data, dict):
        raise ConfigError(f"{where}: repository entry must be a mapping")
    vendor = data.get("vendor") or {}
    if not isinstance(vendor, dict):
        raise ConfigError(f"{where}: 'vendor' must be a mapping")
    return Repository(
        id=_required_str(data, "id", where),
        name=_required_str(data, "name", where),
        plugin_name=str(data.get("plugin_name", "")),
        description=str(data.get("description", "")),
        vendor=Vendor(
            email=str(vendor.get("email", "")),
            url=str(vendor.get("url", "")),
            name=str(vendor.get("name", "")),
        ),
    )


def parse_catalog(data: Any, source: str = "<catalog>") -> Catalog:
    """Build the catalog from the parsed YAML document, keeping file order."""
    if not isinstance(data, dict) or not isinstance(data.get("organizations"), list):
        raise ConfigError(f"{source}: expected an 'organizations' list")

    organizations = []
    for index, org_data in enumerate(data["organizations"]):
        where = f"{source}: organizations[{index}]"
        if not isinstance(org_data, dict):
            raise ConfigError(f"{where}: organization entry must be a mapping")
        name = _required_str(org_data, "name", where)
        repos = org_data.get("repositories") or []
        if not isinstance(repos, list):
            raise ConfigError(f"{where}: 'repositories' must be a list")
        organizations.append(
            Organization(
                name=name,
                repositories=tuple(
                    parse_repository(repo, f"{where}.repositories[{i}]")
                    for i, repo in enumerate(repos)
                ),
            )
        )
    return tuple(organizations)


def load_catalog(path: Path | None) -> Catalog:
    """Load the tracked organizations from a YAML file, or the built-in default."""
    if path is None:
        return DEFAULT_CATALOG
    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f"Cannot read catalog file {path}: {e}") from e
    return parse_catalog(data, source=str(path))


def write_catalog(path: Path, catalog: Catalog) -> None:
    """Save the static part of a catalog as YAML, preserving key order."""
    data = {
        "organizations": [
            {
                "name": org.name,
                "repositories": [
                    {
                        "id": repo.id,
                        "name": repo.name,
                        "plugin_name": repo.plugin_name,
                        "description": repo.description,
                        "vendor": {
                            "email": repo.vendor.email,
                            "url": repo.vendor.url,
                            "name": repo.vendor.name,
                        },
                    }
                    for repo in org.repositories
                ],
            }
            for org in catalog
        ]
    }
    with open(path, "w", encoding="utf-8") as f:
        yaml.dump(data, f, sort_keys=False, allow_unicode=True)
