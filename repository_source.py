#!/usr/bin/env python3
"""GitHub GraphQL wrapper for enumerating organization repositories."""

from __future__ import annotations

from typing import Any, Dict, List, Optional
from urllib.parse import urlparse

import requests

from errors import EnumerationError
from logging_utils import Logger

PAGE_SIZE = 100
REQUEST_TIMEOUT_S = 30

REPOSITORIES_QUERY = """
query($login: String!, $page: String) {
  organization(login: $login) {
    repositories(first: %d, after: $page) {
      pageInfo { endCursor hasNextPage }
      nodes { name }
    }
  }
}
""" % PAGE_SIZE


def graphql_url(api_url: str) -> str:
    """Derive the GraphQL endpoint from a REST API base URL."""
    parsed = urlparse(api_url)
    base_path = parsed.path.rstrip("/")
    if base_path.endswith("/v3"):
        # GitHub Enterprise Server: /api/v3 -> /api/graphql
        base_path = base_path[: -len("/v3")]
    return f"{parsed.scheme}://{parsed.netloc}{base_path}/graphql"


class RepositorySource:
    """Lists every repository of an organization via cursor pagination."""

    def __init__(
        self,
        api_url: str,
        token: str,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.endpoint = graphql_url(api_url)
        self.session = session or requests.Session()
        self.session.headers.update(
            {
                "Authorization": f"Bearer {token}",
                "Accept": "application/vnd.github+json",
                "User-Agent": "ghec-backup",
            }
        )

    def list_repositories(self, organization: str) -> List[str]:
        Logger.info(f"discovering repositories of: {organization}")
        names: List[str] = []
        cursor: Optional[str] = None
        pages = 0

        while True:
            connection = self._query_page(organization, cursor)
            pages += 1
            if connection is None:
                break

            for node in connection.get("nodes") or []:
                if node and node.get("name"):
                    names.append(node["name"])

            page_info = connection.get("pageInfo") or {}
            if not page_info.get("hasNextPage"):
                break

            cursor = page_info.get("endCursor")
            if not cursor:
                raise EnumerationError(
                    f"pagination for '{organization}' reported more pages "
                    "without an end cursor"
                )

        Logger.info(f"found {len(names)} repositories in {pages} page(s)")
        return names

    def _query_page(
        self, organization: str, cursor: Optional[str]
    ) -> Optional[Dict[str, Any]]:
        """Fetch one page; None means the organization does not resolve."""
        payload = {
            "query": REPOSITORIES_QUERY,
            "variables": {"login": organization, "page": cursor},
        }
        try:
            response = self.session.post(
                self.endpoint, json=payload, timeout=REQUEST_TIMEOUT_S
            )
        except requests.RequestException as e:
            raise EnumerationError(f"failed to contact github graphql api: {e}") from e

        if response.status_code >= 400:
            raise EnumerationError(
                f"repository listing failed ({response.status_code}): {response.text}"
            )

        try:
            body = response.json()
        except ValueError as e:
            raise EnumerationError("repository listing returned invalid JSON") from e

        errors = body.get("errors")
        if errors:
            # An unknown login yields NOT_FOUND with a null organization
            if all(err.get("type") == "NOT_FOUND" for err in errors):
                Logger.warn(f"organization '{organization}' not found")
                return None
            message = errors[0].get("message", "unknown GraphQL error")
            raise EnumerationError(f"repository listing failed: {message}")

        org = (body.get("data") or {}).get("organization")
        if org is None:
            return None
        connection = org.get("repositories")
        if connection is None:
            raise EnumerationError("repository listing returned no repositories field")
        return connection
