#!/usr/bin/env python3
"""Main orchestrator for backing up a GitHub organization via migrations."""

from __future__ import annotations

import os
import time
from typing import Callable, List, Optional

from archive_downloader import ArchiveDownloader
from config import BackupRequest, Config, MigrationState
from errors import BackupError, UnlockError
from logging_utils import Logger
from migration_target import MigrationTarget
from repository_source import RepositorySource
from utils import PollingStrategy

# Exit codes
EXIT_SUCCESS = 0
EXIT_BACKUP_ERROR = 2


def archive_name(started_at: float) -> str:
    return f"backup.{int(started_at)}.tar.gz"


class BackupOrchestrator:
    def __init__(
        self,
        cfg: Config,
        source: Optional[RepositorySource] = None,
        target: Optional[MigrationTarget] = None,
        downloader: Optional[ArchiveDownloader] = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.cfg = cfg
        self.source = source or RepositorySource(cfg.github.api_url, cfg.github.token)
        self.target = target or MigrationTarget(
            cfg.github, PollingStrategy.from_config(cfg.polling)
        )
        self.downloader = downloader or ArchiveDownloader()
        self.clock = clock

    def run(self) -> int:
        try:
            self._run()
            return EXIT_SUCCESS
        except BackupError as e:
            Logger.error(f"error: {e}")
            return EXIT_BACKUP_ERROR
        except KeyboardInterrupt:
            Logger.error("interrupted; the migration keeps running on GitHub")
            return EXIT_BACKUP_ERROR
        except Exception as e:
            Logger.error(f"unexpected error: {e}")
            return EXIT_BACKUP_ERROR

    def _run(self) -> None:
        started_at = self.clock()
        request = self.resolve_request(self.cfg.request)

        job = self.target.submit(request)
        Logger.progress(f"Creating backup archive ({job.id}) ")
        try:
            url = self.target.await_export(job, on_tick=self._print_tick)
        finally:
            Logger.progress("\n")
        Logger.info(f"backup archive ({job.id}) complete")

        destination = os.path.join(self.cfg.output.directory, archive_name(started_at))
        self.downloader.download(destination, url)

        unlock_error: Optional[UnlockError] = None
        if request.lock_repositories:
            try:
                self.target.unlock(job, request.repositories)
            except UnlockError as e:
                # Cleanup still runs after a partial unlock
                unlock_error = e

        Logger.info(f"cleaning up ({job.id})")
        self.target.cleanup(job)
        Logger.info(f"cleaning up ({job.id}) complete")

        if unlock_error is not None:
            raise unlock_error

    def resolve_request(self, request: BackupRequest) -> BackupRequest:
        """Fill in the organization repositories when none were listed."""
        if request.repositories:
            return request
        names: List[str] = self.source.list_repositories(request.organization)
        return request.with_repositories(names)

    @staticmethod
    def _print_tick(state: MigrationState) -> None:
        Logger.progress(".")
