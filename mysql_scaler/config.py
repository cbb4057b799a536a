"""Settings management for the MySQL scaler."""

from __future__ import annotations

import logging
import os

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


class ScalerSettings:
    """Base settings class loading from environment variables."""

    # Driver used when a connection URL is built from host/port fields
    DB_DRIVER = os.getenv("DB_DRIVER", "mysql+pymysql")

    # Connection pool
    DB_POOL_SIZE = int(os.getenv("DB_POOL_SIZE", "5"))
    DB_MAX_OVERFLOW = int(os.getenv("DB_MAX_OVERFLOW", "5"))
    DB_POOL_TIMEOUT = int(os.getenv("DB_POOL_TIMEOUT", "30"))
    DB_POOL_RECYCLE = int(os.getenv("DB_POOL_RECYCLE", "3600"))

    # Driver timeouts (seconds)
    DB_CONNECT_TIMEOUT = int(os.getenv("DB_CONNECT_TIMEOUT", "10"))
    DB_READ_TIMEOUT = int(os.getenv("DB_READ_TIMEOUT", "30"))

    # How often a waiting evaluation re-checks its context (seconds)
    QUERY_POLL_INTERVAL = float(os.getenv("QUERY_POLL_INTERVAL", "0.05"))

    # Logging configuration
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    def engine_options(self, backend: str) -> dict:
        """Build SQLAlchemy ``create_engine`` keyword arguments.

        Args:
            backend: Dialect name of the target URL (e.g. ``mysql``).

        Returns:
            Keyword arguments for ``create_engine``.
        """
        if backend == "sqlite":
            # SQLite picks its own pool class; queue pool arguments are rejected
            return {}

        options = {
            "pool_size": self.DB_POOL_SIZE,
            "max_overflow": self.DB_MAX_OVERFLOW,
            "pool_timeout": self.DB_POOL_TIMEOUT,
            "pool_recycle": self.DB_POOL_RECYCLE,
        }
        if backend == "mysql":
            options["connect_args"] = {
                "connect_timeout": self.DB_CONNECT_TIMEOUT,
                "read_timeout": self.DB_READ_TIMEOUT,
            }
        return options


class TestingSettings(ScalerSettings):
    """Testing settings."""

    DB_POOL_SIZE = 2
    DB_MAX_OVERFLOW = 0
    DB_POOL_TIMEOUT = 5
    DB_CONNECT_TIMEOUT = 2
    DB_READ_TIMEOUT = 5
    QUERY_POLL_INTERVAL = 0.01
    LOG_LEVEL = "DEBUG"


def configure_logging(level: str | None = None) -> None:
    """Configure root logging for processes hosting the scaler.

    Args:
        level: Log level name. Defaults to ``ScalerSettings.LOG_LEVEL``.
    """
    logging.basicConfig(
        level=(level or ScalerSettings.LOG_LEVEL).upper(),
        format=LOG_FORMAT,
    )
