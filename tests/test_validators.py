"""Tests for metric naming and configuration lookup helpers."""

from __future__ import annotations

import pytest

from mysql_scaler.errors import ConfigError
from mysql_scaler.models.metadata import ScalerConfig
from mysql_scaler.utils.validators import (
    generate_metric_name_with_index,
    get_from_auth_or_meta,
    normalize_string,
    parse_int64,
    parse_mysql_db_name_from_connection_str,
    validate_port,
)


@pytest.mark.parametrize('connection_string, expected', [
    ('tcp(host:3306)/mydb', 'mydb'),
    ('user:pass@tcp(host:3306)/stats_db', 'stats_db'),
    ('mysql+pymysql://u:p@host:3306/orders', 'orders'),
    ('', 'dbname'),
    ('no-slash-here', 'dbname'),
    ('tcp(host:3306)/', 'dbname'),
])
def test_parse_db_name_from_connection_string(connection_string, expected):
    assert parse_mysql_db_name_from_connection_str(connection_string) == expected


def test_normalize_string_lowercases_and_replaces_unsafe_chars():
    assert normalize_string('mysql-My.DB:01/x y') == 'mysql-my-db-01-x-y'


def test_normalize_string_keeps_safe_chars():
    assert normalize_string('mysql-stats-2') == 'mysql-stats-2'


def test_generate_metric_name_with_index():
    assert generate_metric_name_with_index(3, 'mysql-d') == 's3-mysql-d'


def test_get_from_auth_or_meta_prefers_auth():
    config = ScalerConfig(
        trigger_metadata={'host': 'meta-host'},
        auth_params={'host': 'auth-host'},
    )
    assert get_from_auth_or_meta(config, 'host') == 'auth-host'


def test_get_from_auth_or_meta_falls_back_to_metadata():
    config = ScalerConfig(
        trigger_metadata={'host': 'meta-host'},
        auth_params={'host': ''},
    )
    assert get_from_auth_or_meta(config, 'host') == 'meta-host'


def test_get_from_auth_or_meta_missing():
    with pytest.raises(ConfigError, match='no host given') as exc_info:
        get_from_auth_or_meta(ScalerConfig(), 'host')
    assert exc_info.value.field == 'host'


@pytest.mark.parametrize('value, expected', [
    ('5', 5),
    ('-12', -12),
    ('+7', 7),
    ('9223372036854775807', 2 ** 63 - 1),
])
def test_parse_int64_accepts_base10(value, expected):
    assert parse_int64(value, 'queryValue') == expected


@pytest.mark.parametrize('value', [
    '', 'five', '1.5', ' 5', '5\n', '1_000', '0x10', '-',
    '\uff15', '\u0663', '9223372036854775808',
])
def test_parse_int64_rejects_invalid(value):
    with pytest.raises(ConfigError, match='queryValue parsing error'):
        parse_int64(value, 'queryValue')


def test_validate_port():
    assert validate_port('3306') == 3306


@pytest.mark.parametrize('port', [
    'abc', '0', '70000', ' 3306', '3306 ', '3_306',
    '\uff13\uff13\uff10\uff16',
])
def test_validate_port_rejects_invalid(port):
    with pytest.raises(ConfigError, match='port parsing error'):
        validate_port(port)
