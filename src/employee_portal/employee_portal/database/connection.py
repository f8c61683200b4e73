from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Any, Mapping, Optional

from mysql.connector import pooling

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DBConfig:
    host: str
    port: int
    user: str
    password: str
    database: str
    connection_timeout: int = 10
    pool_size: int = 5

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> "DBConfig":
        return cls(
            host=str(raw.get("host", "localhost")),
            port=int(raw.get("port", 3306)),
            user=str(raw.get("user", "root")),
            password=str(raw.get("password", "")),
            database=str(raw.get("database", "employee_portal")),
            connection_timeout=int(raw.get("connection_timeout", 10)),
            pool_size=int(raw.get("pool_size", 5)),
        )

    def describe(self) -> str:
        return f"{self.user}@{self.host}:{self.port}/{self.database}"


class DatabaseConnection:
    """Process-wide connection source backed by a small MySQL pool.

    Each repository call borrows a connection and returns it on close(). The pool
    is created on first use so building the app does not require a reachable server.
    """

    _instance: Optional["DatabaseConnection"] = None
    _instance_guard = threading.Lock()

    def __init__(self, config: DBConfig):
        self._config = config
        self._pool: Optional[pooling.MySQLConnectionPool] = None
        self._pool_guard = threading.Lock()

    @property
    def config(self) -> DBConfig:
        return self._config

    @classmethod
    def get_instance(cls, config: DBConfig) -> "DatabaseConnection":
        with cls._instance_guard:
            if cls._instance is None:
                cls._instance = DatabaseConnection(config)
            elif cls._instance.config != config:
                logger.warning(
                    "Database already configured for %s; ignoring %s",
                    cls._instance.config.describe(),
                    config.describe(),
                )
            return cls._instance

    def connect(self):
        with self._pool_guard:
            if self._pool is None:
                self._pool = pooling.MySQLConnectionPool(
                    pool_name="employee_portal",
                    pool_size=self._config.pool_size,
                    host=self._config.host,
                    port=self._config.port,
                    user=self._config.user,
                    password=self._config.password,
                    database=self._config.database,
                    connection_timeout=self._config.connection_timeout,
                )
                logger.info("MySQL pool ready: %s (size=%d)", self._config.describe(), self._config.pool_size)
        return self._pool.get_connection()
