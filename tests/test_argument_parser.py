"""Tests for configuration building from flags, config file and environment."""

from __future__ import annotations

from pathlib import Path

import pytest

from argument_parser import EXIT_MISSING_ARGUMENTS, parse_arguments
from config import DEFAULT_API_URL, DEFAULT_POLL_INTERVAL_S


@pytest.fixture(autouse=True)
def _isolate(monkeypatch, tmp_path: Path) -> None:
    """Run from an empty directory without a token in the environment."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv('GITHUB_TOKEN', raising=False)


def _write_config(directory: Path, text: str) -> None:
    (directory / '.ghec-backup').write_text(text, encoding='utf-8')


def test_flags_build_config(monkeypatch) -> None:
    monkeypatch.setenv('GITHUB_TOKEN', 'env-token')

    cfg = parse_arguments(['-o', 'acme', '-r', 'r1', '-r', 'r2', '--lock'])

    assert cfg.github.token == 'env-token'
    assert cfg.github.api_url == DEFAULT_API_URL
    assert cfg.request.organization == 'acme'
    assert cfg.request.repositories == ('r1', 'r2')
    assert cfg.request.lock_repositories is True
    assert cfg.polling.interval_s == DEFAULT_POLL_INTERVAL_S
    assert cfg.polling.max_attempts is None
    assert cfg.output.directory == '.'


def test_defaults_mean_all_repositories_unlocked(monkeypatch) -> None:
    monkeypatch.setenv('GITHUB_TOKEN', 'env-token')

    cfg = parse_arguments(['-o', 'acme'])

    assert cfg.request.repositories == ()
    assert cfg.request.lock_repositories is False


def test_config_file_in_current_directory(tmp_path: Path) -> None:
    _write_config(
        tmp_path,
        'token: file-token\norganization: acme\nrepository:\n  - api\n  - web\nlock: true\n',
    )

    cfg = parse_arguments([])

    assert cfg.github.token == 'file-token'
    assert cfg.request.repositories == ('api', 'web')
    assert cfg.request.lock_repositories is True


def test_flags_override_config_file(tmp_path: Path, monkeypatch) -> None:
    config_dir = tmp_path / 'conf'
    config_dir.mkdir()
    _write_config(config_dir, 'token: file-token\norganization: acme\nrepository: [api]\n')
    monkeypatch.setenv('GITHUB_TOKEN', 'env-token')

    cfg = parse_arguments(['-c', str(config_dir), '-o', 'other', '-r', 'web'])

    assert cfg.github.token == 'file-token'
    assert cfg.request.organization == 'other'
    assert cfg.request.repositories == ('web',)


def test_enterprise_api_url_from_flag(monkeypatch) -> None:
    monkeypatch.setenv('GITHUB_TOKEN', 'env-token')

    cfg = parse_arguments(['-o', 'acme', '--gh-api', 'https://github.acme.com/api/v3/'])

    assert cfg.github.api_url == 'https://github.acme.com/api/v3'


def test_missing_token_exits(capsys) -> None:
    with pytest.raises(SystemExit) as excinfo:
        parse_arguments(['-o', 'acme'])

    assert excinfo.value.code == EXIT_MISSING_ARGUMENTS
    assert 'token missing' in capsys.readouterr().err


def test_missing_organization_exits(monkeypatch) -> None:
    monkeypatch.setenv('GITHUB_TOKEN', 'env-token')

    with pytest.raises(SystemExit) as excinfo:
        parse_arguments([])

    assert excinfo.value.code == EXIT_MISSING_ARGUMENTS


def test_explicit_config_dir_without_file_exits(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.setenv('GITHUB_TOKEN', 'env-token')

    with pytest.raises(SystemExit) as excinfo:
        parse_arguments(['-c', str(tmp_path / 'nowhere'), '-o', 'acme'])

    assert excinfo.value.code == EXIT_MISSING_ARGUMENTS


def test_invalid_repository_name_exits(monkeypatch) -> None:
    monkeypatch.setenv('GITHUB_TOKEN', 'env-token')

    with pytest.raises(SystemExit):
        parse_arguments(['-o', 'acme', '-r', '../etc'])


def test_polling_options(monkeypatch) -> None:
    monkeypatch.setenv('GITHUB_TOKEN', 'env-token')

    cfg = parse_arguments(['-o', 'acme', '--poll-interval', '10', '--max-polls', '5'])

    assert cfg.polling.interval_s == 10.0
    assert cfg.polling.max_attempts == 5


@pytest.mark.parametrize('interval', ['0', '1', '3.5'])
def test_poll_interval_below_rate_limit_floor_exits(monkeypatch, interval: str) -> None:
    """Polling faster than the default interval is refused."""
    monkeypatch.setenv('GITHUB_TOKEN', 'env-token')

    with pytest.raises(SystemExit) as excinfo:
        parse_arguments(['-o', 'acme', '--poll-interval', interval])

    assert excinfo.value.code == EXIT_MISSING_ARGUMENTS


def test_repository_flag_accepts_comma_separated_names(monkeypatch) -> None:
    monkeypatch.setenv('GITHUB_TOKEN', 'env-token')

    cfg = parse_arguments(['-o', 'acme', '-r', 'r1,r2', '-r', 'r3'])

    assert cfg.request.repositories == ('r1', 'r2', 'r3')


def test_config_file_repository_string_is_split(tmp_path: Path) -> None:
    _write_config(tmp_path, 'token: file-token\norganization: acme\nrepository: api, web\n')

    cfg = parse_arguments([])

    assert cfg.request.repositories == ('api', 'web')
