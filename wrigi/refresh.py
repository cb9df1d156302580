"""Throttled re-resolution of every tracked repository."""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime

from wrigi.catalog_store import CatalogStore, RefreshOutcome
from wrigi.classifier import classify
from wrigi.dates import now_utc
from wrigi.errors import DecodeFailure, UpstreamUnavailable
from wrigi.logger import get_logger
from wrigi.models import Catalog, Organization
from wrigi.upstream import Fetcher

logger = get_logger(__name__)


def refresh_catalog(
    catalog: Catalog, fetch: Fetcher, now: datetime
) -> tuple[Catalog, RefreshOutcome]:
    """Fetch and classify releases for every repository in ``catalog``.

    A repository whose fetch fails keeps its previous versions.
    """
    updated = 0
    failed = 0
    organizations: list[Organization] = []

    for org in catalog:
        repositories = []
        for repo in org.repositories:
            try:
                releases = fetch(org.name, repo.name)
            except (UpstreamUnavailable, DecodeFailure) as e:
                logger.warning(
                    "repository_refresh_failed",
                    owner=org.name,
                    repo=repo.name,
                    error=str(e),
                )
                failed += 1
                repositories.append(repo)
                continue

            repositories.append(replace(repo, versions=classify(releases, now)))
            updated += 1
        organizations.append(replace(org, repositories=tuple(repositories)))

    return tuple(organizations), RefreshOutcome.applied_with(updated, failed)


def refresh(store: CatalogStore, fetch: Fetcher, now: datetime | None = None) -> RefreshOutcome:
    """Refresh the store unless a refresh ran within the cooldown window."""
    if now is None:
        now = now_utc()

    outcome = store.apply_refresh(lambda catalog: refresh_catalog(catalog, fetch, now), now)

    if outcome.applied:
        logger.info("catalog_refreshed", updated=outcome.updated, failed=outcome.failed)
    else:
        logger.info("catalog_refresh_skipped", reason=outcome.reason)
    return outcome
