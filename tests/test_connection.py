"""Tests for connection URL building and connection lifecycle."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from mysql_scaler.context import EvaluationContext
from mysql_scaler.errors import DatabaseConnectionError, EvaluationCancelled
from mysql_scaler.models.metadata import ExplicitLocator, ScalerConfig, parse_mysql_metadata
from mysql_scaler.services.connection import (
    ConnectionHandle,
    SQLAlchemyConnection,
    build_connection_url,
    close_connection,
    establish,
)

from .fakes import FakeConnection


def test_build_url_from_structured_fields(structured_config, settings):
    meta = parse_mysql_metadata(structured_config)
    assert build_connection_url(meta.locator, settings) == 'mysql+pymysql://u:p@h:3306/d'


def test_build_url_escapes_password(structured_config, settings):
    structured_config.auth_params['password'] = 'p@ss/word'
    meta = parse_mysql_metadata(structured_config)

    url = build_connection_url(meta.locator, settings)
    assert url == 'mysql+pymysql://u:p%40ss%2Fword@h:3306/d'


def test_build_url_uses_connection_string_verbatim(settings):
    locator = ExplicitLocator('mysql+pymysql://root:pw@db:3306/stats?charset=utf8mb4')
    assert build_connection_url(locator, settings) == locator.connection_string


def test_establish_pings_connection(structured_config, settings, fake_connection, connection_factory):
    meta = parse_mysql_metadata(structured_config)

    handle = establish(meta, settings, connection_factory)

    assert handle is fake_connection
    assert fake_connection.probes == 1
    assert connection_factory.urls == ['mysql+pymysql://u:p@h:3306/d']


def test_establish_ping_failure_closes_handle(structured_config, settings):
    meta = parse_mysql_metadata(structured_config)
    fake = FakeConnection(probe_error=OSError('connection refused'))

    with pytest.raises(DatabaseConnectionError, match='error pinging database') as exc_info:
        establish(meta, settings, lambda url, s: fake)

    assert fake.closes == 1
    assert isinstance(exc_info.value.__cause__, OSError)


def test_establish_with_expired_deadline(structured_config, settings):
    meta = parse_mysql_metadata(structured_config)
    factory = MagicMock()

    with pytest.raises(DatabaseConnectionError, match='context deadline exceeded'):
        establish(meta, settings, factory, ctx=EvaluationContext.with_timeout(0))

    factory.assert_not_called()


def test_establish_open_failure(structured_config, settings):
    meta = parse_mysql_metadata(structured_config)
    factory = MagicMock(side_effect=ValueError('bad url'))

    with pytest.raises(DatabaseConnectionError, match='error opening connection'):
        establish(meta, settings, factory)


def test_establish_logs_ping_failure(structured_config, settings):
    meta = parse_mysql_metadata(structured_config)
    log = MagicMock()
    fake = FakeConnection(probe_error=OSError('timeout'))

    with pytest.raises(DatabaseConnectionError):
        establish(meta, settings, lambda url, s: fake, log)

    log.error.assert_called_once()
    assert 'pinging' in log.error.call_args[0][0]


def test_close_connection_wraps_errors():
    handle = MagicMock()
    handle.close.side_effect = RuntimeError('already gone')

    with pytest.raises(DatabaseConnectionError, match='error closing connection'):
        close_connection(handle)


def test_fake_connection_satisfies_protocol():
    assert isinstance(FakeConnection(), ConnectionHandle)


@pytest.fixture
def sqlite_url(tmp_path) -> str:
    return f"sqlite:///{tmp_path / 'scaler.db'}"


def test_sqlalchemy_connection_against_sqlite(sqlite_url, settings):
    conn = SQLAlchemyConnection(sqlite_url, settings)
    try:
        conn.probe()
        assert conn.query(EvaluationContext(), 'SELECT 7') == [(7,)]
        assert conn.query(EvaluationContext(), "SELECT '100%'") == [('100%',)]
    finally:
        conn.close()


def test_sqlalchemy_connection_fetches_at_most_two_rows(sqlite_url, settings):
    conn = SQLAlchemyConnection(sqlite_url, settings)
    try:
        rows = conn.query(
            EvaluationContext(),
            'SELECT 1 UNION ALL SELECT 2 UNION ALL SELECT 3',
        )
        assert len(rows) == 2
    finally:
        conn.close()


def test_sqlalchemy_connection_skips_query_for_cancelled_context(sqlite_url, settings):
    conn = SQLAlchemyConnection(sqlite_url, settings)
    ctx = EvaluationContext()
    ctx.cancel()
    try:
        with pytest.raises(EvaluationCancelled):
            conn.query(ctx, 'SELECT 1')
    finally:
        conn.close()


def test_establish_with_invalid_url(settings):
    config = ScalerConfig(
        trigger_metadata={'query': 'SELECT 1', 'queryValue': '1'},
        auth_params={'connectionString': 'not a database url'},
    )
    meta = parse_mysql_metadata(config)

    with pytest.raises(DatabaseConnectionError):
        establish(meta, settings)
