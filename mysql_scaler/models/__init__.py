"""
MySQL scaler models package.

Trigger configuration, connection locators and external metric shapes.
"""

from .metadata import (
    ConnectionLocator,
    ExplicitLocator,
    MySQLMetadata,
    ScalerConfig,
    StructuredLocator,
    parse_mysql_metadata,
)
from .metrics import (
    MetricSample,
    MetricSpec,
    MetricTarget,
    MetricTargetType,
    get_metric_target,
    get_metric_target_type,
)

__all__ = [
    'ConnectionLocator',
    'ExplicitLocator',
    'MySQLMetadata',
    'ScalerConfig',
    'StructuredLocator',
    'parse_mysql_metadata',
    'MetricSample',
    'MetricSpec',
    'MetricTarget',
    'MetricTargetType',
    'get_metric_target',
    'get_metric_target_type',
]
