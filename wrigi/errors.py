"""Error taxonomy for release catalog synchronization."""

from __future__ import annotations

from dataclasses import dataclass


class WrigiError(RuntimeError):
    """Base exception for wrigi errors."""


class ConfigError(WrigiError):
    """Raised when settings or the static catalog cannot be loaded."""


class UpstreamUnavailable(WrigiError):
    """Raised when the release API cannot be reached or answers with an error."""


class DecodeFailure(WrigiError):
    """Raised when the release API returns a payload we cannot decode."""


@dataclass
class NotFound(WrigiError):
    """Raised when an organization, repository or channel is unknown."""

    org: str
    repo: str
    channel: str

    def __str__(self) -> str:
        return f"No descriptor for {self.org}/{self.repo} on channel {self.channel!r}"
