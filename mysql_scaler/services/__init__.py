"""Services package for the MySQL scaler.

This package provides connection management and query evaluation.
"""

from __future__ import annotations

from .connection import (
    ConnectionHandle,
    SQLAlchemyConnection,
    build_connection_url,
    close_connection,
    establish,
)
from .evaluator import QueryEvaluator, coerce_result

__all__ = [
    'ConnectionHandle',
    'SQLAlchemyConnection',
    'build_connection_url',
    'close_connection',
    'establish',
    'QueryEvaluator',
    'coerce_result',
]
