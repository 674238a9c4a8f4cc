from __future__ import annotations

import logging
from dataclasses import dataclass

import mysql.connector

logger = logging.getLogger(__name__)


@dataclass
class DBConfig:
    host: str
    port: int
    user: str
    password: str
    database: str

    @classmethod
    def from_dict(cls, db_config: dict) -> "DBConfig":
        return cls(
            host=str(db_config["host"]),
            port=int(db_config.get("port", 3306)),
            user=str(db_config["user"]),
            password=str(db_config["password"]),
            database=str(db_config["database"]),
        )


class Database:
    """Connection factory with an explicit lifecycle.

    Built once by the container, opened at startup and closed at shutdown.
    Each operation gets a short-lived connection.
    """

    def __init__(self, config: DBConfig):
        self._config = config
        self._opened = False

    def open(self) -> None:
        if self._opened:
            return
        conn = self._raw_connect()
        try:
            conn.ping(reconnect=False)
        finally:
            conn.close()
        self._opened = True
        logger.info(
            "database opened %s@%s:%s/%s",
            self._config.user, self._config.host, self._config.port, self._config.database,
        )

    def close(self) -> None:
        if self._opened:
            self._opened = False
            logger.info("database closed")

    def connect(self):
        if not self._opened:
            raise RuntimeError("Database is not open")
        return self._raw_connect()

    def _raw_connect(self):
        return mysql.connector.connect(
            host=self._config.host,
            port=int(self._config.port),
            user=self._config.user,
            password=self._config.password,
            database=self._config.database,
        )
