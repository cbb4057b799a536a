"""Pytest configuration and fixtures for MySQL scaler tests."""

from __future__ import annotations

from typing import Any, Callable

import pytest

from mysql_scaler.config import TestingSettings
from mysql_scaler.context import EvaluationContext
from mysql_scaler.models.metadata import ScalerConfig

from .fakes import FakeConnection


@pytest.fixture
def settings() -> TestingSettings:
    """Settings tuned for fast tests.

    Returns:
        TestingSettings instance.
    """
    return TestingSettings()


@pytest.fixture
def fake_connection() -> FakeConnection:
    """Create a fake connection handle returning 0.

    Returns:
        FakeConnection instance.
    """
    return FakeConnection()


@pytest.fixture
def connection_factory(fake_connection: FakeConnection) -> Callable:
    """Create a factory handing out the fake connection and recording URLs.

    Args:
        fake_connection: FakeConnection fixture.

    Returns:
        Factory callable with a ``urls`` attribute.
    """
    def factory(url: str, settings: Any) -> FakeConnection:
        factory.urls.append(url)
        return fake_connection

    factory.urls = []
    return factory


@pytest.fixture
def structured_config() -> ScalerConfig:
    """Configuration using host/port/username/dbName fields.

    Returns:
        ScalerConfig with the password in auth params.
    """
    return ScalerConfig(
        trigger_metadata={
            'query': 'SELECT count(*) FROM q',
            'queryValue': '5',
            'host': 'h',
            'port': '3306',
            'username': 'u',
            'dbName': 'd',
        },
        auth_params={'password': 'p'},
    )


@pytest.fixture
def ctx() -> EvaluationContext:
    """Evaluation context with a generous deadline.

    Returns:
        EvaluationContext expiring after five seconds.
    """
    return EvaluationContext.with_timeout(5.0)
