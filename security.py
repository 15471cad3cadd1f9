#!/usr/bin/env python3
"""Security validation utilities for ghec-backup."""

import os
import re
from typing import List, Optional


class SecurityValidator:
    """Input validation and log sanitization."""

    MAX_REPO_NAME_LENGTH = 100
    MAX_ORG_NAME_LENGTH = 39
    MAX_URL_LENGTH = 2048
    MAX_PATH_LENGTH = 500

    SAFE_REPO_NAME_PATTERN = re.compile(r"^[A-Za-z0-9._-]+$")
    # GitHub logins: alphanumerics and single inner hyphens
    SAFE_ORG_PATTERN = re.compile(r"^[A-Za-z0-9](?:[A-Za-z0-9-]*[A-Za-z0-9])?$")

    @staticmethod
    def _has_control_chars(value: str) -> bool:
        return "\x00" in value or any(ord(c) < 32 for c in value)

    @classmethod
    def validate_organization(cls, org: str) -> str:
        """Validate a GitHub organization login."""
        if not org or not isinstance(org, str):
            raise ValueError("Organization must be a non-empty string")

        if len(org) > cls.MAX_ORG_NAME_LENGTH:
            raise ValueError(
                f"Organization exceeds maximum length of {cls.MAX_ORG_NAME_LENGTH}"
            )

        if cls._has_control_chars(org):
            raise ValueError("Organization contains null bytes or control characters")

        if not cls.SAFE_ORG_PATTERN.match(org):
            raise ValueError("Organization contains invalid characters")

        return org

    @classmethod
    def validate_repo_name(cls, name: str) -> str:
        """Validate a repository name.

        Unlike organization logins, repository names are not rewritten: the
        name is passed verbatim to the migrations API, so anything outside
        the safe character set is rejected instead of sanitized.
        """
        if not name or not isinstance(name, str):
            raise ValueError("Repository name must be a non-empty string")

        if len(name) > cls.MAX_REPO_NAME_LENGTH:
            raise ValueError(
                f"Repository name exceeds maximum length of {cls.MAX_REPO_NAME_LENGTH}"
            )

        if ".." in name or "/" in name or "\\" in name:
            raise ValueError(f"Repository name '{name}' contains invalid path characters")

        if cls._has_control_chars(name):
            raise ValueError("Repository name contains null bytes or control characters")

        if not cls.SAFE_REPO_NAME_PATTERN.match(name):
            raise ValueError(f"Repository name '{name}' contains invalid characters")

        return name

    @classmethod
    def validate_url(cls, url: str, allowed_schemes: Optional[List[str]] = None) -> str:
        """Validate an API base URL."""
        if not url or not isinstance(url, str):
            raise ValueError("URL must be a non-empty string")

        if len(url) > cls.MAX_URL_LENGTH:
            raise ValueError(f"URL exceeds maximum length of {cls.MAX_URL_LENGTH}")

        if "\x00" in url or any(ord(c) < 32 for c in url if c not in "\t\n\r"):
            raise ValueError("URL contains null bytes or control characters")

        if not url.startswith(("http://", "https://")):
            raise ValueError("URL must use http or https scheme")

        scheme = url.split("://")[0].lower()
        if allowed_schemes and scheme not in allowed_schemes:
            raise ValueError(
                f"URL scheme '{scheme}' not in allowed schemes: {allowed_schemes}"
            )

        return url.rstrip("/")

    @classmethod
    def validate_directory(cls, path: str) -> str:
        """Validate the output directory path."""
        if not path or not isinstance(path, str):
            raise ValueError("Directory path must be a non-empty string")

        if len(path) > cls.MAX_PATH_LENGTH:
            raise ValueError(
                f"Directory path exceeds maximum length of {cls.MAX_PATH_LENGTH}"
            )

        if "\x00" in path:
            raise ValueError("Directory path contains null bytes")

        normalized = os.path.normpath(os.path.expanduser(path))
        if os.path.exists(normalized) and not os.path.isdir(normalized):
            raise ValueError(f"Output path '{normalized}' is not a directory")

        return normalized

    @classmethod
    def sanitize_for_logging(cls, message: str) -> str:
        """Redact credentials from a log message."""
        if not message:
            return message

        patterns = [
            (r"https://[^:/@\s]+:[^@\s]+@", "https://[REDACTED]@"),
            (r"token\s*[=:]\s*[^\s]+", "token=[REDACTED]"),
            (r"bearer\s+[^\s]+", "bearer [REDACTED]"),
            (r"(X-Amz-Signature|sig|signature)=[^&\s]+", r"\1=[REDACTED]"),
            (r"gh[pousr]_[A-Za-z0-9_]+", "[GITHUB_TOKEN_REDACTED]"),
            (r"github_pat_[A-Za-z0-9_]+", "[GITHUB_TOKEN_REDACTED]"),
        ]

        sanitized = message
        for pattern, replacement in patterns:
            sanitized = re.sub(pattern, replacement, sanitized, flags=re.IGNORECASE)

        return sanitized
