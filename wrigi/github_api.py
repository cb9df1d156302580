"""GitHub API client with rate-limit aware retries, ETag caching, and pagination."""

from __future__ import annotations

import json
import os
import random
import re
import time
from dataclasses import dataclass, field
from typing import Any, Iterator, Literal
from urllib.parse import urlencode

import requests

Json = Any
AuthMode = Literal["auto", "required", "none"]

DEFAULT_BASE_URL = "https://api.github.com"
USER_AGENT = "Wrigi 0.2 (https://github.com/dlsniper/wrigi)"
TOKEN_ENV = ("WRIGI_GITHUB_TOKEN", "GITHUB_TOKEN", "GH_TOKEN")


class GitHubError(RuntimeError):
    """Base exception for GitHub API errors."""


class GitHubAuthError(GitHubError):
    """Raised when authentication is required but not available."""


@dataclass
class GitHubHTTPError(GitHubError):
    """Raised for non-success HTTP responses from the GitHub API."""

    status_code: int
    url: str
    response_text: str | None = None
    headers: dict[str, str] = field(default_factory=dict)

    def __str__(self) -> str:
        body = self.response_text[:200] if self.response_text else "No response body"
        return f"GitHub API error {self.status_code} for {self.url}: {body}"


@dataclass
class CacheEntry:
    """Last successful GET response for a URL, keyed by its ETag."""

    etag: str
    status_code: int
    headers: dict[str, str]
    body_text: str


@dataclass
class ResponseData:
    """Response from a GitHub API request."""

    url: str
    status_code: int
    headers: dict[str, str]
    text: str

    def json(self) -> Json:
        return json.loads(self.text)


class GitHubClient:
    """Blocking GitHub API client.

    Conditional GET requests reuse the in-memory ETag cache, so an unchanged
    release list costs no rate-limit budget. Nothing is written to disk.
    """

    def __init__(
        self,
        *,
        token: str | None = None,
        token_env: tuple[str, ...] = TOKEN_ENV,
        auth: AuthMode = "auto",
        base_url: str = DEFAULT_BASE_URL,
        user_agent: str = USER_AGENT,
        timeout_s: float = 30.0,
        max_retries: int = 0,
        backoff_base_s: float = 1.0,
        backoff_max_s: float = 60.0,
        cache_enabled: bool = True,
        session: requests.Session | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.user_agent = user_agent
        self.timeout_s = timeout_s
        self.max_retries = max_retries
        self.backoff_base_s = backoff_base_s
        self.backoff_max_s = backoff_max_s
        self.cache_enabled = cache_enabled
        self._default_auth = auth

        self._token = token or None
        if self._token is None:
            for env_var in token_env:
                if os.environ.get(env_var):
                    self._token = os.environ[env_var]
                    break

        if auth == "required" and not self._token:
            raise GitHubAuthError(
                f"GitHub token required but not found in environment variables: {token_env}"
            )

        self._session = session or requests.Session()
        self._cache: dict[str, CacheEntry] = {}

    @property
    def has_token(self) -> bool:
        return self._token is not None

    def _build_url(self, path: str, params: dict[str, Any] | None = None) -> str:
        """Build full URL from path and parameters."""
        if path.startswith("http://") or path.startswith("https://"):
            url = path
        else:
            url = f"{self.base_url}/{path.lstrip('/')}"

        if params:
            url = f"{url}?{urlencode(sorted(params.items()))}"

        return url

    def _should_retry(self, response: requests.Response) -> bool:
        """Check if request should be retried based on response."""
        if response.status_code == 429 or response.status_code >= 500:
            return True

        if response.status_code == 403:
            if response.headers.get("X-RateLimit-Remaining") == "0":
                return True
            try:
                message = response.json().get("message", "").lower()
            except (ValueError, AttributeError):
                return False
            return "rate limit" in message

        return False

    def _retry_delay(self, response: requests.Response | None, attempt: int) -> float:
        """Calculate delay before the next attempt."""
        if response is not None:
            retry_after = response.headers.get("Retry-After")
            if retry_after:
                try:
                    return float(retry_after)
                except ValueError:
                    pass

            reset_time = response.headers.get("X-RateLimit-Reset")
            if reset_time and response.headers.get("X-RateLimit-Remaining") == "0":
                try:
                    return min(int(reset_time) - time.time() + 1, 300)
                except ValueError:
                    pass

        delay = min(self.backoff_max_s, self.backoff_base_s * (2**attempt))
        return delay + random.uniform(0, 0.25)

    def request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
        data: bytes | None = None,
        accept: str = "application/vnd.github+json",
        use_cache: bool = False,
        auth: AuthMode | None = None,
        expected: tuple[int, ...] = (200,),
    ) -> ResponseData:
        """Make a request to the GitHub API.

        Raises:
            GitHubAuthError: If ``auth`` is ``required`` and no token is configured.
            GitHubHTTPError: If the final response status is not in ``expected``.
            GitHubError: If the request could not be sent at all.
        """
        url = self._build_url(path, params)
        auth_mode = auth if auth is not None else self._default_auth
        is_get = method.upper() == "GET"

        req_headers = {
            "Accept": accept,
            "X-GitHub-Api-Version": "2022-11-28",
            "User-Agent": self.user_agent,
        }

        if auth_mode != "none" and self._token:
            req_headers["Authorization"] = f"Bearer {self._token}"
        elif auth_mode == "required":
            raise GitHubAuthError("GitHub token required but not available")

        if headers:
            req_headers.update(headers)

        cache_key = f"{url}|{accept}"
        cached_entry: CacheEntry | None = None
        if is_get and use_cache and self.cache_enabled:
            cached_entry = self._cache.get(cache_key)
            if cached_entry is not None:
                req_headers["If-None-Match"] = cached_entry.etag

        for attempt in range(self.max_retries + 1):
            try:
                response = self._session.request(
                    method,
                    url,
                    headers=req_headers,
                    data=data,
                    timeout=self.timeout_s,
                )
            except requests.RequestException as e:
                if attempt < self.max_retries:
                    time.sleep(self._retry_delay(None, attempt))
                    continue
                raise GitHubError(f"Request failed: {e}") from e

            if response.status_code == 304 and cached_entry is not None:
                return ResponseData(
                    url=url,
                    status_code=cached_entry.status_code,
                    headers=cached_entry.headers,
                    text=cached_entry.body_text,
                )

            if response.status_code in expected:
                etag = response.headers.get("ETag", "")
                if is_get and use_cache and self.cache_enabled and etag:
                    self._cache[cache_key] = CacheEntry(
                        etag=etag,
                        status_code=response.status_code,
                        headers=dict(response.headers),
                        body_text=response.text,
                    )
                return ResponseData(
                    url=url,
                    status_code=response.status_code,
                    headers=dict(response.headers),
                    text=response.text,
                )

            if self._should_retry(response) and attempt < self.max_retries:
                time.sleep(self._retry_delay(response, attempt))
                continue

            raise GitHubHTTPError(
                status_code=response.status_code,
                url=url,
                response_text=response.text,
                headers=dict(response.headers),
            )

        raise GitHubError(f"Request to {url} failed after {self.max_retries} retries")

    def get_json(
        self,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        use_cache: bool = True,
        auth: AuthMode | None = None,
    ) -> Json:
        """Make a GET request and return the decoded JSON body."""
        return self.request(
            "GET", path, params=params, use_cache=use_cache, auth=auth
        ).json()

    def paginate(
        self,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        per_page: int = 100,
        limit_pages: int | None = None,
        auth: AuthMode | None = None,
    ) -> Iterator[Json]:
        """Iterate over the items of a paginated list endpoint.

        Raises:
            ValueError: If a page body is not valid JSON.
        """
        params = dict(params) if params else {}
        params["per_page"] = per_page

        url: str | None = self._build_url(path, params)
        pages_fetched = 0

        while url:
            if limit_pages is not None and pages_fetched >= limit_pages:
                break

            response = self.request("GET", url, use_cache=True, auth=auth)
            pages_fetched += 1

            data = response.json()
            if isinstance(data, list):
                yield from data
            else:
                yield data

            url = self._parse_next_link(response.headers.get("Link", ""))

    def _parse_next_link(self, link_header: str) -> str | None:
        """Parse Link header to find next page URL."""
        if not link_header:
            return None

        for part in link_header.split(","):
            match = re.match(r'\s*<([^>]+)>\s*;\s*rel="next"', part.strip())
            if match:
                return match.group(1)

        return None

    def close(self) -> None:
        """Close the underlying session."""
        self._session.close()

    def __enter__(self) -> GitHubClient:
        return self

    def __exit__(self, exc_type: Any, exc: Any, tb: Any) -> None:
        self.close()
