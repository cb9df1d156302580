"""Wrigi - GitHub release feeds for IDE plugin repositories."""

__version__ = "0.2.0"

from wrigi.catalog_store import CatalogStore, RefreshOutcome
from wrigi.classifier import channel_for_tag, classify
from wrigi.descriptor import render
from wrigi.errors import (
    ConfigError,
    DecodeFailure,
    NotFound,
    UpstreamUnavailable,
    WrigiError,
)
from wrigi.github_api import GitHubAuthError, GitHubClient, GitHubError, GitHubHTTPError
from wrigi.models import Organization, Repository, RepositoryVersions, Vendor, Version
from wrigi.refresh import refresh

__all__ = [
    "CatalogStore",
    "RefreshOutcome",
    "channel_for_tag",
    "classify",
    "render",
    "ConfigError",
    "DecodeFailure",
    "NotFound",
    "UpstreamUnavailable",
    "WrigiError",
    "GitHubAuthError",
    "GitHubClient",
    "GitHubError",
    "GitHubHTTPError",
    "Organization",
    "Repository",
    "RepositoryVersions",
    "Vendor",
    "Version",
    "refresh",
]
