#!/usr/bin/env python3
"""Configuration dataclasses for ghec-backup."""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional, Sequence, Tuple

DEFAULT_API_URL = "https://api.github.com"
# Stays under the GitHub abuse rate limit; not a backoff.
DEFAULT_POLL_INTERVAL_S = 3.6


class MigrationState(Enum):
    """States reported by the GitHub migrations API."""
    PENDING = "pending"
    EXPORTING = "exporting"
    EXPORTED = "exported"
    FAILED = "failed"

    @classmethod
    def from_api(cls, value: Optional[str]) -> "MigrationState":
        """Map a server state string; unknown values count as exporting."""
        try:
            return cls(value)
        except ValueError:
            return cls.EXPORTING

    @property
    def is_terminal(self) -> bool:
        return self in (MigrationState.EXPORTED, MigrationState.FAILED)


@dataclass(frozen=True)
class GitHubConfig:
    """GitHub connection configuration."""
    api_url: str
    token: str


@dataclass(frozen=True)
class BackupRequest:
    """What to export: an organization and optionally an explicit repo list."""
    organization: str
    repositories: Tuple[str, ...] = ()
    lock_repositories: bool = False

    def with_repositories(self, repositories: Sequence[str]) -> "BackupRequest":
        return replace(self, repositories=tuple(repositories))


@dataclass(frozen=True)
class PollingConfig:
    """Migration status polling behavior."""
    interval_s: float = DEFAULT_POLL_INTERVAL_S
    max_attempts: Optional[int] = None


@dataclass(frozen=True)
class OutputConfig:
    """Where the downloaded archive is written."""
    directory: str = "."


@dataclass(frozen=True)
class Config:
    """Main configuration for an organization backup."""
    github: GitHubConfig
    request: BackupRequest
    polling: PollingConfig = PollingConfig()
    output: OutputConfig = OutputConfig()
