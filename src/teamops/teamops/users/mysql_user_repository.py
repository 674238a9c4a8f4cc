from __future__ import annotations

from typing import Optional

from ..core.enums import Company, Role
from ..database.connection import Database
from ..database.mysql_base import db_cursor, fetchone
from .model import UserAccount
from .repository import UserRepository

_SELECT = """
    SELECT a.id, a.member_id, a.email, a.password_hash, a.role,
           m.name AS member_name, m.company, m.deleted_at
    FROM user_accounts a
    JOIN members m ON m.id = a.member_id
"""


def _to_account(r: dict) -> UserAccount:
    return UserAccount(
        account_id=int(r["id"]),
        member_id=int(r["member_id"]),
        email=r["email"],
        password_hash=r.get("password_hash") or "",
        role=Role.normalize(r["role"]),
        member_name=r["member_name"],
        company=Company(r["company"]) if r.get("company") else None,
        member_deleted=r.get("deleted_at") is not None,
    )


class MySQLUserRepository(UserRepository):
    def __init__(self, db: Database):
        self._db = db

    def get_by_email(self, email: str) -> Optional[UserAccount]:
        with db_cursor(self._db) as (_, cur):
            cur.execute(_SELECT + " WHERE a.email=%s", (email,))
            r = fetchone(cur)
            return _to_account(r) if r else None

    def get_by_member_id(self, member_id: int) -> Optional[UserAccount]:
        with db_cursor(self._db) as (_, cur):
            cur.execute(_SELECT + " WHERE a.member_id=%s", (int(member_id),))
            r = fetchone(cur)
            return _to_account(r) if r else None

    def update_password(self, *, member_id: int, password_hash: str) -> bool:
        with db_cursor(self._db) as (_, cur):
            cur.execute(
                "UPDATE user_accounts SET password_hash=%s WHERE member_id=%s",
                (password_hash, int(member_id)),
            )
            return cur.rowcount > 0
