#!/usr/bin/env python3
"""Exception types raised by the ghec-backup workflow."""

from __future__ import annotations

from typing import Sequence


class BackupError(Exception):
    """Base class for every fatal backup failure."""


class ConfigurationError(BackupError):
    """Invalid or missing configuration input."""


class EnumerationError(BackupError):
    """Listing the organization repositories failed."""


class SubmissionError(BackupError):
    """The migration could not be started."""


class PollError(BackupError):
    """Checking the migration status failed."""


class ExportFailedError(PollError):
    """GitHub reported the migration as failed."""


class DownloadError(BackupError):
    """Streaming the archive to disk failed."""


class UnlockError(BackupError):
    """One or more repositories could not be unlocked."""

    def __init__(self, organization: str, failed: Sequence[str]) -> None:
        self.organization = organization
        self.failed = list(failed)
        names = ", ".join(f"{organization}/{name}" for name in self.failed)
        super().__init__(f"failed to unlock {len(self.failed)} repositories: {names}")


class CleanupError(BackupError):
    """The server-side migration archive could not be deleted."""
