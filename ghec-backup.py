#!/usr/bin/env python3
"""
ghec-backup - Back up all repositories of a GitHub organization.

This tool starts an organization migration (export) on GitHub, waits for
the archive to be ready, downloads it as backup.<unix-seconds>.tar.gz,
then unlocks the repositories (when locked for the backup) and deletes the
server-side archive.
"""

from __future__ import annotations

import sys
from typing import NoReturn

from argument_parser import parse_arguments
from backup_orchestrator import BackupOrchestrator


def main() -> NoReturn:
    cfg = parse_arguments()
    orchestrator = BackupOrchestrator(cfg)
    sys.exit(orchestrator.run())


if __name__ == "__main__":
    main()
