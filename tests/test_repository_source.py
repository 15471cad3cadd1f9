"""Tests for RepositorySource GraphQL pagination."""

from __future__ import annotations

from typing import List
from unittest.mock import Mock

import pytest
import requests

from errors import EnumerationError
from repository_source import RepositorySource, graphql_url


def _response(body: dict, status_code: int = 200) -> Mock:
    response = Mock()
    response.status_code = status_code
    response.json.return_value = body
    response.text = str(body)
    return response


def _pages(names: List[str], page_size: int = 100) -> List[Mock]:
    chunks = [names[i:i + page_size] for i in range(0, len(names), page_size)] or [[]]
    responses = []
    for idx, chunk in enumerate(chunks):
        body = {
            'data': {
                'organization': {
                    'repositories': {
                        'pageInfo': {
                            'endCursor': f'cursor-{idx}' if chunk else None,
                            'hasNextPage': idx < len(chunks) - 1,
                        },
                        'nodes': [{'name': name} for name in chunk],
                    }
                }
            }
        }
        responses.append(_response(body))
    return responses


def _make_source(responses: List[Mock]) -> RepositorySource:
    session = Mock()
    session.headers = {}
    session.post.side_effect = responses
    return RepositorySource('https://api.github.com', 'token-value', session=session)


@pytest.mark.parametrize('count', [0, 1, 100, 101, 250])
def test_list_repositories_collects_every_page(count: int) -> None:
    """All names across all pages are returned once, in order."""
    names = [f'repo-{i:03d}' for i in range(count)]
    source = _make_source(_pages(names))

    result = source.list_repositories('acme')

    assert result == names
    assert len(set(result)) == count
    expected_pages = max(1, -(-count // 100))
    assert source.session.post.call_count == expected_pages


def test_list_repositories_follows_end_cursor() -> None:
    """Each request after the first continues from the previous end cursor."""
    source = _make_source(_pages([f'r{i}' for i in range(250)]))

    source.list_repositories('acme')

    pages = [c.kwargs['json']['variables']['page'] for c in source.session.post.call_args_list]
    assert pages == [None, 'cursor-0', 'cursor-1']
    logins = {c.kwargs['json']['variables']['login'] for c in source.session.post.call_args_list}
    assert logins == {'acme'}


def test_list_repositories_preserves_server_order() -> None:
    """Names are not sorted locally."""
    source = _make_source(_pages(['zeta', 'alpha', 'mid']))
    assert source.list_repositories('acme') == ['zeta', 'alpha', 'mid']


def test_unknown_organization_yields_empty_list() -> None:
    """A null organization is an empty result, not an error."""
    body = {
        'data': {'organization': None},
        'errors': [{'type': 'NOT_FOUND', 'message': 'Could not resolve'}],
    }
    source = _make_source([_response(body)])

    assert source.list_repositories('ghost') == []


def test_graphql_error_raises_enumeration_error() -> None:
    body = {'data': None, 'errors': [{'type': 'FORBIDDEN', 'message': 'Resource not accessible'}]}
    source = _make_source([_response(body)])

    with pytest.raises(EnumerationError, match='Resource not accessible'):
        source.list_repositories('acme')


def test_http_error_raises_enumeration_error() -> None:
    source = _make_source([_response({'message': 'Bad credentials'}, status_code=401)])

    with pytest.raises(EnumerationError, match='401'):
        source.list_repositories('acme')


def test_transport_error_aborts_enumeration() -> None:
    """A failure on a later page discards the partial result."""
    first_page = _pages([f'r{i}' for i in range(150)])[0]
    source = _make_source([first_page, requests.ConnectionError('reset by peer')])

    with pytest.raises(EnumerationError, match='reset by peer'):
        source.list_repositories('acme')


def test_session_carries_bearer_token() -> None:
    source = _make_source([])
    assert source.session.headers['Authorization'] == 'Bearer token-value'


@pytest.mark.parametrize(
    'api_url, expected',
    [
        ('https://api.github.com', 'https://api.github.com/graphql'),
        ('https://github.acme.com/api/v3', 'https://github.acme.com/api/graphql'),
        ('https://github.acme.com/api/v3/', 'https://github.acme.com/api/graphql'),
    ],
)
def test_graphql_url_resolves_endpoint(api_url: str, expected: str) -> None:
    assert graphql_url(api_url) == expected
