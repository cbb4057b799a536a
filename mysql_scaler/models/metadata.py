"""
Trigger metadata for the MySQL scaler.

Turns the controller's untyped configuration bag (trigger metadata, auth
params and resolved environment) into an immutable ``MySQLMetadata``.
Parsing is pure: nothing here touches the network.

Connection locator resolution order:
- ``connectionString`` auth param, used verbatim
- ``connectionStringFromEnv`` metadata key, resolved through the environment
- structured ``host``/``port``/``username``/``dbName`` plus a password
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Optional, Union

from ..errors import ConfigError
from ..utils.validators import (
    generate_metric_name_with_index,
    get_from_auth_or_meta,
    normalize_string,
    parse_int64,
    parse_mysql_db_name_from_connection_str,
    validate_port,
)

METRIC_PREFIX = 'mysql'


@dataclass
class ScalerConfig:
    """Configuration bag handed over by the autoscaling controller."""

    trigger_metadata: Dict[str, str] = field(default_factory=dict)
    auth_params: Dict[str, str] = field(default_factory=dict)
    resolved_env: Dict[str, str] = field(default_factory=dict)
    scaler_index: int = 0
    metric_type: Optional[str] = None


@dataclass(frozen=True)
class ExplicitLocator:
    """Pre-formed connection string (SQLAlchemy database URL)."""

    connection_string: str

    def __repr__(self) -> str:
        return 'ExplicitLocator(connection_string=***)'


@dataclass(frozen=True)
class StructuredLocator:
    """Connection fields a URL is built from."""

    host: str
    port: int
    username: str
    password: str = field(repr=False)
    db_name: str


ConnectionLocator = Union[ExplicitLocator, StructuredLocator]


@dataclass(frozen=True)
class MySQLMetadata:
    """Validated trigger descriptor."""

    query: str
    query_value: int
    locator: ConnectionLocator
    db_name: str
    metric_name: str


def parse_mysql_metadata(config: ScalerConfig) -> MySQLMetadata:
    """
    Parse and validate trigger configuration.

    Args:
        config: Configuration bag from the controller

    Returns:
        MySQLMetadata with a resolved connection locator and metric name

    Raises:
        ConfigError: If a required field is missing or invalid
    """
    meta = config.trigger_metadata

    if 'query' not in meta or not meta['query']:
        raise ConfigError('no query given', field='query')
    query = meta['query']

    if 'queryValue' not in meta:
        raise ConfigError('no queryValue given', field='queryValue')
    query_value = parse_int64(meta['queryValue'], 'queryValue')

    locator = _resolve_locator(config)

    if isinstance(locator, ExplicitLocator):
        db_name = parse_mysql_db_name_from_connection_str(locator.connection_string)
    else:
        db_name = locator.db_name

    metric_name = generate_metric_name_with_index(
        config.scaler_index,
        normalize_string(f'{METRIC_PREFIX}-{db_name}'),
    )

    return MySQLMetadata(
        query=query,
        query_value=query_value,
        locator=locator,
        db_name=db_name,
        metric_name=metric_name,
    )


def _resolve_locator(config: ScalerConfig) -> ConnectionLocator:
    """Pick the connection locator in precedence order."""
    meta = config.trigger_metadata
    auth = config.auth_params

    if auth.get('connectionString'):
        return ExplicitLocator(auth['connectionString'])

    if meta.get('connectionStringFromEnv'):
        return ExplicitLocator(
            config.resolved_env.get(meta['connectionStringFromEnv'], '')
        )

    host = get_from_auth_or_meta(config, 'host')
    port = validate_port(get_from_auth_or_meta(config, 'port'))
    username = get_from_auth_or_meta(config, 'username')
    db_name = get_from_auth_or_meta(config, 'dbName')

    password = ''
    if auth.get('password'):
        password = auth['password']
    elif meta.get('passwordFromEnv'):
        password = config.resolved_env.get(meta['passwordFromEnv'], '')

    if not password:
        raise ConfigError('no password given', field='password')

    return StructuredLocator(
        host=host,
        port=port,
        username=username,
        password=password,
        db_name=db_name,
    )
