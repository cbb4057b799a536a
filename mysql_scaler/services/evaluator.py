"""
Query Evaluator - runs the trigger query and reduces it to one integer.

Queries run on a bounded worker pool so the calling thread can keep watching
its EvaluationContext and return as soon as the context is cancelled or
expires, instead of blocking on the driver.
"""

import logging
from concurrent.futures import Future, ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from decimal import Decimal
from typing import Any, List, Optional, Tuple

from ..context import EvaluationContext
from ..errors import EvaluationCancelled, QueryError, QueryResultError
from ..utils.validators import INT64_MAX, INT64_MIN, INTEGER_PATTERN
from .connection import ConnectionHandle

logger = logging.getLogger(__name__)


class QueryEvaluator:
    """
    Evaluates one query against a shared connection handle.

    Safe to call from several threads at once; every call performs its own
    fresh query and nothing is cached.
    """

    def __init__(
        self,
        connection: ConnectionHandle,
        query: str,
        max_workers: int = 5,
        poll_interval: float = 0.05,
        log: Optional[logging.Logger] = None,
    ) -> None:
        """
        Initialize query evaluator.

        Args:
            connection: Shared connection handle
            query: SQL text returning one row with one integer column
            max_workers: Upper bound on concurrently running queries
            poll_interval: Seconds between context checks while waiting
            log: Logger for failures
        """
        self.connection = connection
        self.query = query
        self.poll_interval = poll_interval
        self.log = log or logger
        self._executor = ThreadPoolExecutor(
            max_workers=max(1, max_workers),
            thread_name_prefix="mysql-scaler-query",
        )

    def evaluate(self, ctx: EvaluationContext) -> int:
        """
        Run the query and return its scalar result.

        Args:
            ctx: Cancellation context for this call

        Returns:
            Query result as a 64-bit integer

        Raises:
            EvaluationCancelled: If ctx is cancelled before the result arrives
            EvaluationTimeout: If ctx's deadline passes first
            QueryResultError: If the result is not one integer-coercible value
            QueryError: If the query itself fails
        """
        try:
            ctx.raise_if_done()
            future = self._executor.submit(self.connection.query, ctx, self.query)
            rows = self._wait(future, ctx)
            value = coerce_result(rows)
        except QueryError as e:
            self.log.error(f"Could not query MySQL database: {e}")
            raise
        except Exception as e:
            self.log.error(f"Could not query MySQL database: {e}")
            raise QueryError(f"query failed: {e}") from e

        self.log.debug(f"Query returned {value}")
        return value

    def _wait(self, future: Future, ctx: EvaluationContext) -> List[Tuple]:
        """Wait for the query future while watching the context."""
        while True:
            try:
                return future.result(timeout=self._next_wait(ctx))
            except FutureTimeoutError:
                pass

            if ctx.done:
                # A query still queued never starts; a running one finishes
                # on its worker and hands its connection back to the pool
                future.cancel()
                try:
                    ctx.raise_if_done()
                except EvaluationCancelled as e:
                    raise type(e)(f"query abandoned: {e}") from e

    def _next_wait(self, ctx: EvaluationContext) -> float:
        remaining = ctx.remaining()
        if remaining is None:
            return self.poll_interval
        return min(self.poll_interval, remaining)

    def shutdown(self) -> None:
        """Stop accepting queries and drop the ones not yet started."""
        self._executor.shutdown(wait=False, cancel_futures=True)


def coerce_result(rows: List[Tuple]) -> int:
    """
    Reduce a query result to a single 64-bit integer.

    Args:
        rows: Rows returned by the connection handle

    Returns:
        The single value of the single row

    Raises:
        QueryResultError: If the shape or the value does not fit
    """
    if not rows:
        raise QueryResultError("query returned no rows")
    if len(rows) > 1:
        raise QueryResultError("query returned more than one row")

    row = rows[0]
    if len(row) != 1:
        raise QueryResultError(f"query returned {len(row)} columns, expected 1")

    value = _to_int(row[0])
    if not INT64_MIN <= value <= INT64_MAX:
        raise QueryResultError(f"query result {value} overflows int64")
    return value


def _to_int(value: Any) -> int:
    if value is None:
        raise QueryResultError("query returned NULL")

    if isinstance(value, bool):
        return int(value)

    if isinstance(value, int):
        return value

    if isinstance(value, (Decimal, float)):
        if value != value or value in (float('inf'), float('-inf')):
            raise QueryResultError(f"query result {value} is not an integer")
        if value != int(value):
            raise QueryResultError(f"query result {value} is not an integer")
        return int(value)

    if isinstance(value, (bytes, bytearray)):
        value = value.decode('ascii', errors='replace')

    if isinstance(value, str):
        if not INTEGER_PATTERN.fullmatch(value):
            raise QueryResultError(f"query result {value!r} is not an integer")
        return int(value, 10)

    raise QueryResultError(
        f"query result of type {type(value).__name__} is not an integer"
    )
