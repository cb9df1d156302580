"""Resolve a raw release list into the latest release per channel."""

from __future__ import annotations

from datetime import datetime

from wrigi.dates import now_utc, release_millis
from wrigi.models import CHANNELS, Channel, RepositoryVersions, Version
from wrigi.upstream import RawRelease


def channel_for_tag(tag: str) -> Channel | None:
    """Return the first channel name contained in ``tag``.

    Channels are tested in priority order, so ``alpha-release-1`` is alpha.
    """
    for channel in CHANNELS:
        if channel in tag:
            return channel
    return None


def version_from_release(release: RawRelease, now: datetime | None = None) -> Version:
    """Build a Version from a release and its primary (first) asset."""
    asset = release.assets[0]
    return Version(
        name=release.tag,
        url=asset.download_url,
        size=asset.size,
        date=release_millis(asset.created_at, now),
        body=release.body,
        download_count=asset.download_count,
    )


def classify(releases: list[RawRelease], now: datetime | None = None) -> RepositoryVersions:
    """Pick the first release seen for each channel.

    The result is the most recent release per channel only when ``releases``
    is ordered newest first, as the GitHub API returns it. Releases without
    assets or without a channel keyword in their tag are ignored.

    Args:
        releases: Releases in the order they should be considered.
        now: Fallback date for releases whose asset timestamp cannot be parsed.
    """
    if now is None:
        now = now_utc()

    resolved: dict[str, Version] = {}
    for release in releases:
        if not release.assets:
            continue
        channel = channel_for_tag(release.tag)
        if channel is None or channel in resolved:
            continue
        resolved[channel] = version_from_release(release, now)

    return RepositoryVersions(**resolved)
