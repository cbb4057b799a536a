"""
Connection management for the MySQL scaler.

Architecture:
- ConnectionHandle: capability the evaluator needs (probe, query, close)
- SQLAlchemyConnection: pooled SQLAlchemy engine, safe for concurrent use
- establish(): builds the URL, opens the handle, runs the liveness probe

Connection setup happens once per scaler; the handle is shared by every
evaluation until the scaler is closed.
"""

from __future__ import annotations

import logging
from typing import Callable, List, Optional, Protocol, Tuple, runtime_checkable

from sqlalchemy import create_engine
from sqlalchemy.engine import URL, Engine, make_url

from ..config import ScalerSettings
from ..context import EvaluationContext
from ..errors import DatabaseConnectionError, EvaluationCancelled
from ..models.metadata import ConnectionLocator, ExplicitLocator, MySQLMetadata

logger = logging.getLogger(__name__)

PROBE_QUERY = "SELECT 1"

# One extra row is enough to tell a single-row result from a multi-row one
MAX_FETCH_ROWS = 2


@runtime_checkable
class ConnectionHandle(Protocol):
    """Pooled connection capability used by the query evaluator."""

    def probe(self) -> None:
        """Round-trip to the database; raise if it is unusable."""
        ...

    def query(self, ctx: EvaluationContext, statement: str) -> List[Tuple]:
        """Run ``statement`` and return up to two result rows."""
        ...

    def close(self) -> None:
        """Release every pooled connection."""
        ...


ConnectionFactory = Callable[[str, ScalerSettings], ConnectionHandle]


class SQLAlchemyConnection:
    """
    SQLAlchemy engine wrapper implementing ConnectionHandle.

    The engine's pool is internally synchronized, so a single instance is
    shared across threads. Creating the engine does not connect; ``probe()``
    does.
    """

    def __init__(self, url: str, settings: ScalerSettings) -> None:
        """
        Create the pooled engine.

        Args:
            url: SQLAlchemy database URL
            settings: Pool and driver timeout settings
        """
        backend = make_url(url).get_backend_name()
        self._engine: Engine = create_engine(url, **settings.engine_options(backend))

    def probe(self) -> None:
        with self._engine.connect() as conn:
            conn.exec_driver_sql(PROBE_QUERY)

    def query(self, ctx: EvaluationContext, statement: str) -> List[Tuple]:
        with self._engine.connect() as conn:
            # Pool checkout may have waited; skip the query if nobody is listening
            ctx.raise_if_done()
            result = conn.exec_driver_sql(
                statement,
                execution_options={'no_parameters': True},
            )
            try:
                return [tuple(row) for row in result.fetchmany(MAX_FETCH_ROWS)]
            finally:
                result.close()

    def close(self) -> None:
        self._engine.dispose()


def build_connection_url(locator: ConnectionLocator, settings: ScalerSettings) -> str:
    """
    Build the database URL for a connection locator.

    Args:
        locator: Explicit connection string or structured fields
        settings: Provides the driver name for structured locators

    Returns:
        Connection URL, password included
    """
    if isinstance(locator, ExplicitLocator):
        return locator.connection_string

    url = URL.create(
        settings.DB_DRIVER,
        username=locator.username,
        password=locator.password,
        host=locator.host,
        port=locator.port,
        database=locator.db_name,
    )
    return url.render_as_string(hide_password=False)


def establish(
    metadata: MySQLMetadata,
    settings: Optional[ScalerSettings] = None,
    factory: Optional[ConnectionFactory] = None,
    log: Optional[logging.Logger] = None,
    ctx: Optional[EvaluationContext] = None,
) -> ConnectionHandle:
    """
    Open a connection handle and verify it with a liveness probe.

    Args:
        metadata: Parsed trigger metadata
        settings: Pool settings (defaults to ScalerSettings)
        factory: Handle constructor (defaults to SQLAlchemyConnection)
        log: Logger for failures (defaults to this module's logger)
        ctx: Cancellation context, checked before opening and after the probe

    Returns:
        ConnectionHandle that answered the probe

    Raises:
        DatabaseConnectionError: If opening or probing fails, or ctx is done
    """
    settings = settings or ScalerSettings()
    factory = factory or SQLAlchemyConnection
    log = log or logger

    url = build_connection_url(metadata.locator, settings)

    if ctx is not None:
        try:
            ctx.raise_if_done()
        except EvaluationCancelled as e:
            log.error(f"Connection setup cancelled: {e}")
            raise DatabaseConnectionError(f"connection setup cancelled: {e}") from e

    try:
        handle = factory(url, settings)
    except Exception as e:
        log.error(f"Found error when opening connection: {e}")
        raise DatabaseConnectionError(f"error opening connection: {e}") from e

    try:
        handle.probe()
    except Exception as e:
        log.error(f"Found error when pinging database: {e}")
        try:
            handle.close()
        except Exception as close_error:
            log.error(f"Error closing connection after failed ping: {close_error}")
        raise DatabaseConnectionError(f"error pinging database: {e}") from e

    if ctx is not None and ctx.done:
        try:
            ctx.raise_if_done()
        except EvaluationCancelled as e:
            log.error(f"Connection setup cancelled after ping: {e}")
            close_connection(handle, log)
            raise DatabaseConnectionError(f"connection setup cancelled: {e}") from e

    log.info(f"Connected to MySQL database {metadata.db_name}")
    return handle


def close_connection(
    handle: ConnectionHandle,
    log: Optional[logging.Logger] = None,
) -> None:
    """
    Close a connection handle.

    Args:
        handle: Handle returned by establish()
        log: Logger for failures

    Raises:
        DatabaseConnectionError: If closing fails
    """
    log = log or logger
    try:
        handle.close()
    except Exception as e:
        log.error(f"Error closing MySQL connection: {e}")
        raise DatabaseConnectionError(f"error closing connection: {e}") from e
