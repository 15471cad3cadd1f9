#!/usr/bin/env python3
"""Streaming archive download with write-then-rename semantics."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Callable, Optional

import requests

from errors import DownloadError
from logging_utils import Logger
from utils import format_bytes, tee_writer

PART_SUFFIX = ".part"
CHUNK_SIZE = 64 * 1024
# Connect/read timeouts; the total transfer time is unbounded
REQUEST_TIMEOUT_S = (30, 300)


@dataclass
class DownloadProgress:
    bytes_written: int = 0

    def advance(self, size: int) -> None:
        self.bytes_written += size


def print_progress(progress: DownloadProgress) -> None:
    Logger.progress_line(f"Downloading {format_bytes(progress.bytes_written)}")


class ArchiveDownloader:
    """Downloads a URL to a local file that only appears once complete."""

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        on_progress: Callable[[DownloadProgress], None] = print_progress,
        chunk_size: int = CHUNK_SIZE,
    ) -> None:
        # No API credentials here: the archive URL is pre-signed storage
        self.session = session or requests.Session()
        self.on_progress = on_progress
        self.chunk_size = chunk_size

    def download(self, destination: str, url: str) -> int:
        """Stream url to destination and return the number of bytes written.

        Data lands in ``destination + ".part"`` and is renamed into place
        only after the body was fully copied. On failure the partial file
        is left behind and the final name is never created.
        """
        part_path = destination + PART_SUFFIX
        progress = DownloadProgress()

        def _report(size: int) -> None:
            progress.advance(size)
            self.on_progress(progress)

        try:
            with open(part_path, "wb") as out:
                write = tee_writer(out.write, _report)
                with self.session.get(
                    url, stream=True, timeout=REQUEST_TIMEOUT_S
                ) as response:
                    if response.status_code >= 400:
                        raise DownloadError(
                            f"archive download failed with status {response.status_code}"
                        )
                    for chunk in response.iter_content(chunk_size=self.chunk_size):
                        if chunk:
                            write(chunk)
        except requests.RequestException as e:
            Logger.progress("\n")
            raise DownloadError(f"archive download interrupted: {e}") from e
        except OSError as e:
            Logger.progress("\n")
            raise DownloadError(f"failed to write {part_path}: {e}") from e

        # The progress line is rewritten in place; terminate it
        Logger.progress("\n")

        try:
            os.replace(part_path, destination)
        except OSError as e:
            raise DownloadError(f"failed to move {part_path} to {destination}: {e}") from e

        Logger.info(f"archive saved: {destination} ({format_bytes(progress.bytes_written)})")
        return progress.bytes_written
