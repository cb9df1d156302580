"""Upstream release fetching and error-report forwarding."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable

from wrigi.errors import DecodeFailure, UpstreamUnavailable
from wrigi.github_api import GitHubClient, GitHubError
from wrigi.logger import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class RawAsset:
    """A downloadable file attached to a GitHub release."""

    created_at: str | None
    download_url: str
    size: int
    download_count: int


@dataclass(frozen=True)
class RawRelease:
    """A GitHub release as returned by the releases API."""

    tag: str
    body: str
    assets: tuple[RawAsset, ...] = ()


Fetcher = Callable[[str, str], list[RawRelease]]


def _require(data: dict, key: str, kind: type | tuple[type, ...]) -> Any:
    value = data.get(key)
    if not isinstance(value, kind) or isinstance(value, bool):
        raise DecodeFailure(f"Release field {key!r} is missing or has the wrong type")
    return value


def _require_count(data: dict, key: str) -> int:
    value = _require(data, key, int)
    if value < 0:
        raise DecodeFailure(f"Release field {key!r} is negative: {value}")
    return value


def decode_asset(data: Any) -> RawAsset:
    """Decode one release asset object."""
    if not isinstance(data, dict):
        raise DecodeFailure("Release asset is not an object")
    created_at = data.get("created_at")
    return RawAsset(
        created_at=created_at if isinstance(created_at, str) else None,
        download_url=_require(data, "browser_download_url", str),
        size=_require_count(data, "size"),
        download_count=_require_count(data, "download_count"),
    )


def decode_release(data: Any) -> RawRelease:
    """Decode one release object.

    A ``null`` body is accepted as an empty changelog.
    """
    if not isinstance(data, dict):
        raise DecodeFailure("Release is not an object")
    assets = data.get("assets", [])
    if not isinstance(assets, list):
        raise DecodeFailure("Release field 'assets' is not a list")
    body = data.get("body")
    if body is None:
        body = ""
    elif not isinstance(body, str):
        raise DecodeFailure("Release field 'body' is not a string")
    return RawRelease(
        tag=_require(data, "tag_name", str),
        body=body,
        assets=tuple(decode_asset(asset) for asset in assets),
    )


def decode_releases(payload: Any) -> list[RawRelease]:
    """Decode a releases API payload, preserving upstream order (newest first).

    Raises:
        DecodeFailure: If the payload does not have the releases list shape.
    """
    if not isinstance(payload, list):
        raise DecodeFailure("Releases payload is not a list")
    return [decode_release(item) for item in payload]


def fetch_releases(
    client: GitHubClient, owner: str, repo: str, limit_pages: int | None = 1
) -> list[RawRelease]:
    """Fetch the release list of ``owner/repo``.

    Raises:
        UpstreamUnavailable: On transport errors or non-success responses.
        DecodeFailure: If the response body is not a valid release list.
    """
    try:
        items = list(
            client.paginate(
                f"/repos/{owner}/{repo}/releases", limit_pages=limit_pages
            )
        )
    except GitHubError as e:
        raise UpstreamUnavailable(f"Cannot fetch releases for {owner}/{repo}: {e}") from e
    except ValueError as e:
        raise DecodeFailure(f"Invalid JSON in releases for {owner}/{repo}: {e}") from e
    return decode_releases(items)


def make_fetcher(client: GitHubClient, limit_pages: int | None = 1) -> Fetcher:
    """Bind a client into the ``fetch(owner, repo)`` callable used by refresh."""

    def fetch(owner: str, repo: str) -> list[RawRelease]:
        return fetch_releases(client, owner, repo, limit_pages=limit_pages)

    return fetch


def forward_error_report(
    client: GitHubClient, owner: str, repo: str, payload: bytes
) -> None:
    """Open an issue on ``owner/repo`` with the opaque JSON ``payload``.

    Failures are logged and dropped; callers get no result.
    """
    try:
        client.request(
            "POST",
            f"/repos/{owner}/{repo}/issues",
            headers={"Content-Type": "application/json"},
            data=payload,
            auth="required",
            expected=(200, 201),
        )
    except GitHubError as e:
        logger.warning("error_report_forward_failed", owner=owner, repo=repo, error=str(e))
        return
    logger.info("error_report_forwarded", owner=owner, repo=repo, size=len(payload))
