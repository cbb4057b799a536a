"""
MySQL Scaler - external metric trigger backed by a SQL query.

The autoscaling controller constructs one scaler per trigger and polls it on
a fixed cadence:
- is_active(): whether the workload has anything to do (value > 0)
- get_metric_spec_for_scaling(): metric name and target, no I/O
- get_metrics(): fresh query result as a timestamped external metric
- close(): release the connection pool

Construction parses the configuration completely before any network I/O
and fails fast on invalid configuration or an unreachable database.
"""

from __future__ import annotations

import logging
import threading
from typing import List, Optional

from .config import ScalerSettings
from .context import EvaluationContext
from .errors import ConfigError, DatabaseConnectionError, QueryError
from .models.metadata import MySQLMetadata, ScalerConfig, parse_mysql_metadata
from .models.metrics import (
    MetricSample,
    MetricSpec,
    MetricTargetType,
    get_metric_target,
    get_metric_target_type,
)
from .services.connection import (
    ConnectionFactory,
    ConnectionHandle,
    close_connection,
    establish,
)
from .services.evaluator import QueryEvaluator

logger = logging.getLogger(__name__)


class MySQLScaler:
    """
    External metric scaler for MySQL.

    Owns the connection handle exclusively and closes it exactly once.
    """

    def __init__(
        self,
        metadata: MySQLMetadata,
        connection: ConnectionHandle,
        metric_type: MetricTargetType = MetricTargetType.AVERAGE_VALUE,
        settings: Optional[ScalerSettings] = None,
        log: Optional[logging.Logger] = None,
    ) -> None:
        """
        Initialize scaler from already validated parts.

        Prefer ``from_config``, which parses and connects in the right order.

        Args:
            metadata: Parsed trigger metadata
            connection: Open, probed connection handle
            metric_type: Target type declared for the external metric
            settings: Pool and polling settings
            log: Injected logger (defaults to this module's logger)
        """
        self.settings = settings or ScalerSettings()
        self.metric_type = metric_type
        self.metadata = metadata
        self.connection = connection
        self.log = log or logger
        self.evaluator = QueryEvaluator(
            connection,
            metadata.query,
            max_workers=self.settings.DB_POOL_SIZE,
            poll_interval=self.settings.QUERY_POLL_INTERVAL,
            log=self.log,
        )
        self._close_lock = threading.Lock()
        self._closed = False

    @classmethod
    def from_config(
        cls,
        config: ScalerConfig,
        settings: Optional[ScalerSettings] = None,
        connection_factory: Optional[ConnectionFactory] = None,
        log: Optional[logging.Logger] = None,
        ctx: Optional[EvaluationContext] = None,
    ) -> MySQLScaler:
        """
        Create a scaler from the controller's configuration bag.

        Args:
            config: Trigger metadata, auth params, resolved env, index and type
            settings: Pool and polling settings
            connection_factory: Handle constructor, for alternative drivers
            log: Injected logger
            ctx: Cancellation context for connection setup

        Returns:
            Connected MySQLScaler

        Raises:
            ConfigError: If the configuration is invalid (no I/O attempted)
            DatabaseConnectionError: If the database cannot be reached or
                setup is cancelled
        """
        settings = settings or ScalerSettings()
        log = log or logger

        try:
            metric_type = get_metric_target_type(config.metric_type)
        except ConfigError as e:
            log.error(f"Error getting scaler metric type: {e}")
            raise ConfigError(f"error getting scaler metric type: {e}", field=e.field) from e

        try:
            metadata = parse_mysql_metadata(config)
        except ConfigError as e:
            log.error(f"Error parsing MySQL metadata: {e}")
            raise ConfigError(f"error parsing MySQL metadata: {e}", field=e.field) from e

        try:
            connection = establish(metadata, settings, connection_factory, log, ctx)
        except DatabaseConnectionError as e:
            raise DatabaseConnectionError(
                f"error establishing MySQL connection: {e}"
            ) from e

        return cls(metadata, connection, metric_type=metric_type, settings=settings, log=log)

    def __enter__(self) -> MySQLScaler:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def is_active(self, ctx: EvaluationContext) -> bool:
        """
        Check whether there is work to do.

        Args:
            ctx: Cancellation context for this call

        Returns:
            True if the query result is strictly positive

        Raises:
            QueryError: If the query fails, is cancelled or times out
        """
        try:
            value = self.evaluator.evaluate(ctx)
        except QueryError as e:
            self.log.error(f"Error inspecting MySQL: {e}")
            raise
        return value > 0

    def get_metric_spec_for_scaling(
        self, ctx: Optional[EvaluationContext] = None
    ) -> List[MetricSpec]:
        """
        Declare the external metric used for scaling.

        Args:
            ctx: Unused; accepted for call-shape symmetry

        Returns:
            Single-element list with this trigger's MetricSpec
        """
        target = get_metric_target(self.metric_type, self.metadata.query_value)
        return [MetricSpec(metric_name=self.metadata.metric_name, target=target)]

    def get_metrics(self, ctx: EvaluationContext, metric_name: str) -> List[MetricSample]:
        """
        Evaluate the query and return it as an external metric value.

        Args:
            ctx: Cancellation context for this call
            metric_name: Metric name requested by the controller

        Returns:
            Single-element list with a fresh MetricSample

        Raises:
            QueryError: If the query fails, is cancelled or times out
        """
        try:
            value = self.evaluator.evaluate(ctx)
        except QueryError as e:
            raise type(e)(f"error inspecting MySQL: {e}") from e

        return [MetricSample.now(metric_name, value)]

    def close(self, ctx: Optional[EvaluationContext] = None) -> None:
        """
        Dispose of MySQL connections.

        Safe to call more than once; only the first call closes.

        Args:
            ctx: Unused; accepted for call-shape symmetry

        Raises:
            DatabaseConnectionError: If the pool fails to close
        """
        with self._close_lock:
            if self._closed:
                return
            self._closed = True

        self.evaluator.shutdown()
        close_connection(self.connection, self.log)
        self.log.info(f"Closed MySQL scaler {self.metadata.metric_name}")
