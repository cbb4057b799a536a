"""
External metric models.

Mirrors the autoscaling/v2 ``ExternalMetricSource`` spec and the
external.metrics.k8s.io ``ExternalMetricValue`` shape closely enough for a
metrics adapter to serialize them directly.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional

from ..errors import ConfigError

EXTERNAL_METRIC_TYPE = 'External'


class MetricTargetType(str, Enum):
    """Target types the controller understands."""

    VALUE = 'Value'
    AVERAGE_VALUE = 'AverageValue'
    UTILIZATION = 'Utilization'


def get_metric_target_type(metric_type: Optional[str]) -> MetricTargetType:
    """
    Resolve the declared metric target type.

    Args:
        metric_type: Declared type; empty or None means AverageValue

    Returns:
        MetricTargetType usable for an external metric

    Raises:
        ConfigError: For Utilization or an unknown type
    """
    if not metric_type:
        return MetricTargetType.AVERAGE_VALUE

    try:
        target_type = MetricTargetType(metric_type)
    except ValueError as e:
        raise ConfigError(
            f"unknown metric type {metric_type!r}, "
            f"use 'Value' or 'AverageValue'",
            field='metricType',
        ) from e

    if target_type is MetricTargetType.UTILIZATION:
        raise ConfigError(
            "'Utilization' metric type is unsupported "
            "for external metrics, use 'Value' or 'AverageValue' instead",
            field='metricType',
        )
    return target_type


@dataclass(frozen=True)
class MetricTarget:
    """Target the controller sizes replicas against."""

    type: MetricTargetType
    value: Optional[int] = None
    average_value: Optional[int] = None

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {'type': self.type.value}
        if self.value is not None:
            result['value'] = str(self.value)
        if self.average_value is not None:
            result['averageValue'] = str(self.average_value)
        return result


def get_metric_target(metric_type: MetricTargetType, target_value: int) -> MetricTarget:
    """
    Build a metric target for the given type.

    Args:
        metric_type: Value or AverageValue
        target_value: Threshold from the trigger metadata

    Returns:
        MetricTarget with exactly one of value/average_value set
    """
    if metric_type is MetricTargetType.VALUE:
        return MetricTarget(type=metric_type, value=target_value)
    return MetricTarget(type=MetricTargetType.AVERAGE_VALUE, average_value=target_value)


@dataclass(frozen=True)
class MetricSpec:
    """One external metric declared for scaling."""

    metric_name: str
    target: MetricTarget
    type: str = EXTERNAL_METRIC_TYPE

    def to_dict(self) -> dict[str, Any]:
        return {
            'type': self.type,
            'external': {
                'metric': {'name': self.metric_name},
                'target': self.target.to_dict(),
            },
        }


@dataclass(frozen=True)
class MetricSample:
    """Timestamped value of an external metric."""

    metric_name: str
    value: int
    timestamp: datetime

    @classmethod
    def now(cls, metric_name: str, value: int) -> 'MetricSample':
        return cls(
            metric_name=metric_name,
            value=value,
            timestamp=datetime.now(timezone.utc),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            'metricName': self.metric_name,
            'value': str(self.value),
            'timestamp': self.timestamp.isoformat(),
        }
