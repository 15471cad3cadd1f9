#!/usr/bin/env python3
"""Utility functions for ghec-backup."""

import time
from typing import Callable, Optional

from config import DEFAULT_POLL_INTERVAL_S, PollingConfig

BYTE_UNITS = ["B", "kB", "MB", "GB", "TB", "PB"]


class PollingStrategy:
    """Fixed-interval polling policy with an optional attempt ceiling."""

    def __init__(
        self,
        interval_s: float = DEFAULT_POLL_INTERVAL_S,
        max_attempts: Optional[int] = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        if interval_s < 0:
            raise ValueError("poll interval must not be negative")
        if max_attempts is not None and max_attempts < 1:
            raise ValueError("max attempts must be at least 1")
        self.interval_s = interval_s
        self.max_attempts = max_attempts
        self._sleep = sleep

    @classmethod
    def from_config(cls, cfg: PollingConfig) -> "PollingStrategy":
        return cls(interval_s=cfg.interval_s, max_attempts=cfg.max_attempts)

    def exhausted(self, attempts: int) -> bool:
        """Return True once attempts reached the configured ceiling."""
        return self.max_attempts is not None and attempts >= self.max_attempts

    def wait(self) -> None:
        self._sleep(self.interval_s)


def format_bytes(count: int) -> str:
    """Format a byte count using SI units (e.g. '10 MB')."""
    if count < 1000:
        return f"{count} B"
    value = float(count)
    for unit in BYTE_UNITS[1:]:
        value /= 1000
        # Round before picking the unit so 999_950 reads 1.0 MB, not 1000 kB
        rounded = round(value, 1) if value < 9.95 else float(round(value))
        if rounded < 1000 or unit == BYTE_UNITS[-1]:
            break
    if rounded < 10:
        return f"{rounded:.1f} {unit}"
    return f"{rounded:.0f} {unit}"


def tee_writer(
    write: Callable[[bytes], object], on_chunk: Callable[[int], None]
) -> Callable[[bytes], int]:
    """Compose a write function that reports each chunk size after writing."""

    def _write(chunk: bytes) -> int:
        write(chunk)
        size = len(chunk)
        on_chunk(size)
        return size

    return _write
