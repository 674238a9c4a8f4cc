from __future__ import annotations

from typing import Mapping, Optional

from ..database.connection import Database
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .repository import SystemConfigRepository


class MySQLSystemConfigRepository(SystemConfigRepository):
    def __init__(self, db: Database):
        self._db = db

    def get_all(self) -> Mapping[str, str]:
        with db_cursor(self._db) as (_, cur):
            cur.execute("SELECT config_key, config_value FROM system_configs ORDER BY config_key ASC")
            return {r["config_key"]: r["config_value"] for r in fetchall(cur)}

    def get_value(self, key: str) -> Optional[str]:
        with db_cursor(self._db) as (_, cur):
            cur.execute("SELECT config_value FROM system_configs WHERE config_key=%s", (key,))
            r = fetchone(cur)
            return r["config_value"] if r else None

    def upsert_many(self, values: Mapping[str, str], *, updated_by: Optional[int]) -> None:
        with db_cursor(self._db) as (_, cur):
            for key, value in values.items():
                cur.execute(
                    """
                    INSERT INTO system_configs (config_key, config_value, updated_by)
                    VALUES (%s, %s, %s)
                    ON DUPLICATE KEY UPDATE config_value=VALUES(config_value), updated_by=VALUES(updated_by)
                    """,
                    (key, value, updated_by),
                )
