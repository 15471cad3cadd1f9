#!/usr/bin/env python3
"""Command line argument parsing and configuration building."""

from __future__ import annotations

import argparse
import os
import sys
from typing import Any, Dict, List, Optional, Sequence

import yaml

from config import (DEFAULT_API_URL, DEFAULT_POLL_INTERVAL_S, BackupRequest,
                    Config, GitHubConfig, OutputConfig, PollingConfig)
from errors import ConfigurationError
from logging_utils import Logger
from security import SecurityValidator

# Exit codes
EXIT_MISSING_ARGUMENTS = 2

CONFIG_FILE_NAME = ".ghec-backup"


def _create_argument_parser() -> argparse.ArgumentParser:
    """Create and configure the argument parser."""
    parser = argparse.ArgumentParser(
        prog="ghec-backup",
        description="Back up a GitHub organization using the migrations API",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Options may also be set in a YAML file named .ghec-backup
(keys: token, organization, repository, lock, gh_api, output_dir).
The token falls back to the GITHUB_TOKEN environment variable.

Examples:
  %(prog)s
  %(prog)s -o acme
  %(prog)s -o acme -r api -r web --lock
  %(prog)s -c /etc/ghec-backup --output-dir /srv/backups
  %(prog)s -o acme --gh-api https://github.company.com/api/v3
        """,
    )
    return parser


def _add_github_arguments(parser: argparse.ArgumentParser) -> None:
    """Add GitHub-related arguments to parser."""
    parser.add_argument(
        "-c",
        "--config",
        dest="config_dir",
        help="Directory containing the .ghec-backup file (default: current directory)",
    )
    parser.add_argument(
        "--token",
        dest="token",
        help="GitHub API token (or set GITHUB_TOKEN env var)",
    )
    parser.add_argument(
        "--gh-api",
        dest="gh_api_url",
        help=f"Base URL of the GitHub API (default: {DEFAULT_API_URL})",
    )
    parser.add_argument(
        "-o",
        "--organization",
        dest="organization",
        help="Organization on GitHub to back up",
    )
    parser.add_argument(
        "-r",
        "--repository",
        dest="repositories",
        action="append",
        help="Repository to back up, can be provided multiple times "
        "(default: all organization repositories)",
    )
    parser.add_argument(
        "-l",
        "--lock",
        action="store_true",
        default=None,
        dest="lock",
        help="Lock repositories while backing up (default: false)",
    )


def _add_behavior_arguments(parser: argparse.ArgumentParser) -> None:
    """Add behavior and output arguments to parser."""
    parser.add_argument(
        "--output-dir",
        dest="output_dir",
        help="Directory the archive is written to (default: current directory)",
    )
    parser.add_argument(
        "--poll-interval",
        dest="poll_interval_s",
        type=float,
        default=DEFAULT_POLL_INTERVAL_S,
        help="Seconds between migration status checks, "
        f"at least {DEFAULT_POLL_INTERVAL_S} (default: {DEFAULT_POLL_INTERVAL_S})",
    )
    parser.add_argument(
        "--max-polls",
        dest="max_polls",
        type=int,
        help="Give up after this many status checks (default: poll until done)",
    )


def load_config_file(config_dir: Optional[str]) -> Dict[str, Any]:
    """Read .ghec-backup from config_dir or the current directory.

    A missing file is only an error when a directory was given explicitly.
    """
    directory = config_dir or "."
    path = os.path.join(directory, CONFIG_FILE_NAME)
    if not os.path.isfile(path):
        if config_dir:
            raise ConfigurationError(f"config file {CONFIG_FILE_NAME} not found in {config_dir}")
        return {}

    try:
        with open(path, "r", encoding="utf-8") as fh:
            data = yaml.safe_load(fh) or {}
    except (OSError, yaml.YAMLError) as e:
        raise ConfigurationError(f"failed to read {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigurationError(f"{path} must contain a mapping of options")
    Logger.debug(f"loaded configuration from {path}")
    return data


def _as_list(value: Any) -> List[str]:
    """Accept a list or a string; every entry may hold comma separated names."""
    if value is None:
        return []
    if isinstance(value, str):
        value = [value]
    if isinstance(value, (list, tuple)):
        return [
            name.strip()
            for item in value
            for name in str(item).split(",")
            if name.strip()
        ]
    raise ConfigurationError("repository must be a list of names")


def _as_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes", "on")
    return bool(value)


def _first(*values: Any) -> Any:
    for value in values:
        if value is not None and value != "":
            return value
    return None


def build_config(args: argparse.Namespace, file_values: Dict[str, Any]) -> Config:
    """Merge command line, config file and environment into a Config.

    Precedence: command line, then config file, then environment.
    """
    token = _first(args.token, file_values.get("token"), os.getenv("GITHUB_TOKEN"))
    if not token:
        raise ConfigurationError("github token missing (use --token, the config file or GITHUB_TOKEN)")

    organization = _first(args.organization, file_values.get("organization"))
    if not organization:
        raise ConfigurationError("organization is required")

    if args.repositories:
        raw_repos = _as_list(args.repositories)
    else:
        raw_repos = _as_list(file_values.get("repository"))

    lock = _first(args.lock, file_values.get("lock"))
    api_url = _first(args.gh_api_url, file_values.get("gh_api"), DEFAULT_API_URL)
    output_dir = _first(args.output_dir, file_values.get("output_dir"), ".")

    # Polling faster than this trips the GitHub abuse rate limit
    if args.poll_interval_s < DEFAULT_POLL_INTERVAL_S or args.poll_interval_s > 300:
        raise ConfigurationError(
            f"poll interval must be between {DEFAULT_POLL_INTERVAL_S} and 300 seconds"
        )
    if args.max_polls is not None and args.max_polls < 1:
        raise ConfigurationError("max polls must be at least 1")

    try:
        validated_org = SecurityValidator.validate_organization(str(organization))
        validated_repos = tuple(
            SecurityValidator.validate_repo_name(name) for name in raw_repos
        )
        validated_api_url = SecurityValidator.validate_url(str(api_url), ["https", "http"])
        validated_output_dir = SecurityValidator.validate_directory(str(output_dir))
    except ValueError as e:
        raise ConfigurationError(str(e)) from e

    return Config(
        github=GitHubConfig(api_url=validated_api_url, token=str(token)),
        request=BackupRequest(
            organization=validated_org,
            repositories=validated_repos,
            lock_repositories=_as_bool(lock),
        ),
        polling=PollingConfig(
            interval_s=float(args.poll_interval_s),
            max_attempts=args.max_polls,
        ),
        output=OutputConfig(directory=validated_output_dir),
    )


def parse_arguments(argv: Optional[Sequence[str]] = None) -> Config:
    """Parse command line arguments and return configuration object."""
    parser = _create_argument_parser()
    _add_github_arguments(parser)
    _add_behavior_arguments(parser)

    args = parser.parse_args(argv)

    try:
        file_values = load_config_file(args.config_dir)
        return build_config(args, file_values)
    except ConfigurationError as e:
        parser.print_help()
        Logger.error(f"error: {e}")
        sys.exit(EXIT_MISSING_ARGUMENTS)
