"""Validation and naming utilities for scaler configuration.

Implements metric naming rules and the lookups shared by trigger metadata
parsing.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

from ..errors import ConfigError

if TYPE_CHECKING:
    from ..models.metadata import ScalerConfig

# Metric names only carry lower-case letters, digits and dashes
UNSAFE_METRIC_CHARS = re.compile(r'[^a-z0-9-]')
DEFAULT_DB_NAME = 'dbname'

# Plain ASCII decimal with an optional sign; int() alone also takes
# whitespace, underscores and non-ASCII digits
INTEGER_PATTERN = re.compile(r'^[+-]?[0-9]+$')

INT64_MIN = -(2 ** 63)
INT64_MAX = 2 ** 63 - 1


def normalize_string(value: str) -> str:
    """Normalize a string into a metric-name-safe identifier.

    Lower-cases the value and replaces every character outside
    ``[a-z0-9-]`` with ``-``.

    Args:
        value: Raw string.

    Returns:
        Normalized string.
    """
    return UNSAFE_METRIC_CHARS.sub('-', value.lower())


def generate_metric_name_with_index(scaler_index: int, metric_name: str) -> str:
    """Prefix a metric name with the scaler's ordinal index.

    Args:
        scaler_index: Position of the trigger within its scaled object.
        metric_name: Normalized metric name.

    Returns:
        Name of the form ``s<index>-<metric_name>``.
    """
    return f's{scaler_index}-{metric_name}'


def parse_mysql_db_name_from_connection_str(connection_string: str) -> str:
    """Extract the database name from a connection string.

    The database name is the final ``/``-delimited segment, so both
    ``user:pass@tcp(host:3306)/mydb`` and ``mysql+pymysql://u:p@host/mydb``
    yield ``mydb``.

    Args:
        connection_string: Pre-formed connection string.

    Returns:
        Database name, or ``dbname`` if none can be extracted.
    """
    if '/' not in connection_string:
        return DEFAULT_DB_NAME

    db_name = connection_string.rsplit('/', 1)[-1]
    return db_name or DEFAULT_DB_NAME


def get_from_auth_or_meta(config: ScalerConfig, field: str) -> str:
    """Resolve a field from auth params first, then trigger metadata.

    Args:
        config: Scaler configuration bag.
        field: Key to look up.

    Returns:
        Non-empty value.

    Raises:
        ConfigError: If neither source holds a non-empty value.
    """
    value = config.auth_params.get(field, '')
    if value:
        return value

    value = config.trigger_metadata.get(field, '')
    if value:
        return value

    raise ConfigError(f'no {field} given', field=field)


def parse_int64(value: str, field: str) -> int:
    """Parse a base-10 signed 64-bit integer.

    Args:
        value: String to parse.
        field: Field name for error messages.

    Returns:
        Parsed integer.

    Raises:
        ConfigError: If value is not a base-10 integer in int64 range.
    """
    try:
        if not INTEGER_PATTERN.fullmatch(value):
            raise ValueError(f'invalid literal for int() with base 10: {value!r}')
        parsed = int(value, 10)
    except ValueError as e:
        raise ConfigError(f'{field} parsing error {e}', field=field) from e

    if not INT64_MIN <= parsed <= INT64_MAX:
        raise ConfigError(
            f'{field} parsing error value out of range: {value}',
            field=field,
        )
    return parsed


def validate_port(port: str) -> int:
    """Validate a TCP port number.

    Args:
        port: Port as given in the configuration.

    Returns:
        Port as integer.

    Raises:
        ConfigError: If port is not an integer between 1 and 65535.
    """
    try:
        if not INTEGER_PATTERN.fullmatch(port):
            raise ValueError(f'invalid literal for int() with base 10: {port!r}')
        parsed = int(port, 10)
    except ValueError as e:
        raise ConfigError(f'port parsing error {e}', field='port') from e

    if not 1 <= parsed <= 65535:
        raise ConfigError(
            f'port parsing error must be between 1 and 65535: {port}',
            field='port',
        )
    return parsed
