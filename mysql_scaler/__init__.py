"""MySQL external metric scaler.

Evaluates a SQL query against MySQL and exposes the result as an external
metric for an autoscaling controller.
"""

from __future__ import annotations

from .config import ScalerSettings, TestingSettings, configure_logging
from .context import EvaluationContext
from .errors import (
    ConfigError,
    DatabaseConnectionError,
    EvaluationCancelled,
    EvaluationTimeout,
    QueryError,
    QueryResultError,
    ScalerError,
)
from .models import MetricSample, MetricSpec, MetricTarget, MetricTargetType, ScalerConfig
from .scaler import MySQLScaler

__version__ = "1.0.0"

__all__ = [
    'MySQLScaler',
    'ScalerConfig',
    'ScalerSettings',
    'TestingSettings',
    'configure_logging',
    'EvaluationContext',
    'MetricSample',
    'MetricSpec',
    'MetricTarget',
    'MetricTargetType',
    'ScalerError',
    'ConfigError',
    'DatabaseConnectionError',
    'QueryError',
    'QueryResultError',
    'EvaluationCancelled',
    'EvaluationTimeout',
]
