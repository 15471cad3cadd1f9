#!/usr/bin/env python3
"""GitHub API wrapper for organization migrations (export jobs)."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Callable, List, Optional, Sequence

import github
import requests

if TYPE_CHECKING:
    from github.Migration import Migration

from config import BackupRequest, GitHubConfig, MigrationState
from errors import (CleanupError, ExportFailedError, PollError,
                    SubmissionError, UnlockError)
from logging_utils import Logger
from utils import PollingStrategy

# Failures raised by PyGithub itself and by the requests layer underneath it
API_ERRORS = (github.GithubException, requests.RequestException)


@dataclass
class MigrationJob:
    """Client-side view of one server-side migration."""
    id: int
    organization: str
    state: MigrationState = MigrationState.PENDING
    archive_url: Optional[str] = None
    handle: Any = field(default=None, repr=False, compare=False)


class MigrationTarget:
    """Drives one GitHub organization migration through its lifecycle."""

    def __init__(
        self, config: GitHubConfig, polling: Optional[PollingStrategy] = None
    ) -> None:
        self.config = config
        self.polling = polling or PollingStrategy()
        self.api: Optional[github.Github] = None

    def connect(self) -> None:
        Logger.debug(f"init github API: {self.config.api_url}")
        auth = github.Auth.Token(self.config.token)
        if self.config.api_url != "https://api.github.com":
            self.api = github.Github(base_url=self.config.api_url, auth=auth)
        else:
            self.api = github.Github(auth=auth)

    def _require_api(self) -> github.Github:
        if self.api is None:
            self.connect()
        return self.api

    def submit(self, request: BackupRequest) -> MigrationJob:
        """Start a migration of the request's (resolved) repositories."""
        if not request.repositories:
            raise SubmissionError(
                f"no repositories to back up in organization '{request.organization}'"
            )
        api = self._require_api()
        try:
            org = api.get_organization(request.organization)
            migration: "Migration" = org.create_migration(
                list(request.repositories),
                lock_repositories=request.lock_repositories,
                exclude_attachments=True,
            )
        except API_ERRORS as e:
            raise SubmissionError(
                f"failed to start migration for '{request.organization}': {e}"
            ) from e

        job = MigrationJob(
            id=migration.id,
            organization=request.organization,
            state=MigrationState.from_api(migration.state),
            handle=migration,
        )
        Logger.debug(
            f"migration {job.id} started for {len(request.repositories)} repositories"
        )
        return job

    def _poll_state(self, job: MigrationJob) -> MigrationState:
        try:
            status = job.handle.get_status()
        except API_ERRORS as e:
            raise PollError(f"failed to get status of migration {job.id}: {e}") from e
        job.state = MigrationState.from_api(status)
        return job.state

    def await_export(
        self,
        job: MigrationJob,
        on_tick: Optional[Callable[[MigrationState], None]] = None,
    ) -> str:
        """Poll until the export is ready and return the archive URL."""
        attempts = 0
        while True:
            state = self._poll_state(job)
            attempts += 1
            if on_tick is not None:
                on_tick(state)

            if state is MigrationState.EXPORTED:
                break
            if state is MigrationState.FAILED:
                raise ExportFailedError(f"migration {job.id} failed on the server")
            if self.polling.exhausted(attempts):
                raise PollError(
                    f"migration {job.id} still {state.value} after {attempts} polls"
                )
            self.polling.wait()

        try:
            job.archive_url = job.handle.get_archive_url()
        except API_ERRORS as e:
            raise PollError(
                f"failed to get archive url of migration {job.id}: {e}"
            ) from e
        return job.archive_url

    def unlock(self, job: MigrationJob, repositories: Sequence[str]) -> None:
        """Unlock every repository, then report all that failed."""
        failed: List[str] = []
        for name in repositories:
            try:
                job.handle.unlock_repo(name)
            except API_ERRORS as e:
                Logger.error(f"failed to unlock {job.organization}/{name}: {e}")
                failed.append(name)
                continue
            Logger.info(f"{job.organization}/{name} unlocked")

        if failed:
            raise UnlockError(job.organization, failed)

    def cleanup(self, job: MigrationJob) -> None:
        """Delete the server-side migration archive."""
        try:
            job.handle.delete()
        except API_ERRORS as e:
            raise CleanupError(
                f"failed to delete archive of migration {job.id}: {e}"
            ) from e
