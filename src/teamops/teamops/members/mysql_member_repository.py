from __future__ import annotations

from datetime import date
from typing import Optional, Sequence

from ..audit.log import AuditEntry, write_audit
from ..core.enums import Company, MemberStatus, Role, SalaryType
from ..database.connection import Database
from ..database.mysql_base import conflict_on_duplicate, db_cursor, fetchall, fetchone
from .model import DUPLICATE_EMAIL, Member, NewMember
from .repository import MemberRepository

_SELECT = """
    SELECT m.id, m.name, m.phone, m.status, m.company, m.salary_type, m.salary_amount,
           m.joined_at, m.left_at, m.deleted_at, m.address, m.bank_name, m.bank_branch,
           m.bank_account_number, m.bank_account_holder,
           a.email, a.role
    FROM members m
    LEFT JOIN user_accounts a ON a.member_id = m.id
"""

# API field name -> column, for partial updates.
MEMBER_COLUMNS = {
    "name": "name",
    "phone": "phone",
    "status": "status",
    "company": "company",
    "salaryType": "salary_type",
    "salaryAmount": "salary_amount",
    "joinedAt": "joined_at",
    "leftAt": "left_at",
    "address": "address",
    "bankName": "bank_name",
    "bankBranch": "bank_branch",
    "bankAccountNumber": "bank_account_number",
    "bankAccountHolder": "bank_account_holder",
}
ACCOUNT_COLUMNS = {"email": "email", "role": "role", "passwordHash": "password_hash"}


def to_member(r: dict) -> Member:
    return Member(
        member_id=int(r["id"]),
        name=r["name"],
        status=MemberStatus(r["status"]),
        company=Company(r["company"]),
        salary_type=SalaryType(r["salary_type"]),
        salary_amount=int(r.get("salary_amount") or 0),
        joined_at=r["joined_at"],
        email=r.get("email"),
        role=Role.normalize(r["role"]) if r.get("role") else None,
        phone=r.get("phone"),
        left_at=r.get("left_at"),
        deleted_at=r.get("deleted_at"),
        address=r.get("address"),
        bank_name=r.get("bank_name"),
        bank_branch=r.get("bank_branch"),
        bank_account_number=r.get("bank_account_number"),
        bank_account_holder=r.get("bank_account_holder"),
    )


def insert_member_with_account(cur, new: NewMember) -> int:
    """Insert member + account rows on an open transaction cursor."""
    cur.execute(
        """
        INSERT INTO members (
            name, phone, status, company, salary_type, salary_amount, joined_at,
            address, bank_name, bank_branch, bank_account_number, bank_account_holder
        )
        VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s)
        """,
        (
            new.name,
            new.phone,
            new.status.value,
            new.company.value,
            new.salary_type.value,
            int(new.salary_amount),
            new.joined_at or date.today(),
            new.address,
            new.bank_name,
            new.bank_branch,
            new.bank_account_number,
            new.bank_account_holder,
        ),
    )
    member_id = int(cur.lastrowid)
    with conflict_on_duplicate(DUPLICATE_EMAIL):
        cur.execute(
            "INSERT INTO user_accounts (member_id, email, password_hash, role) VALUES (%s, %s, %s, %s)",
            (member_id, new.email, new.password_hash, new.role.value),
        )
    return member_id


class MySQLMemberRepository(MemberRepository):
    def __init__(self, db: Database):
        self._db = db

    def list_members(self, *, q=None, company=None, role=None) -> Sequence[Member]:
        clauses = ["m.deleted_at IS NULL"]
        params: list[object] = []
        if q:
            clauses.append("(m.name LIKE %s OR a.email LIKE %s)")
            params.extend([f"%{q}%", f"%{q}%"])
        if company:
            clauses.append("m.company=%s")
            params.append(company)
        if role:
            clauses.append("a.role=%s")
            params.append(role)

        with db_cursor(self._db) as (_, cur):
            cur.execute(_SELECT + f" WHERE {' AND '.join(clauses)} ORDER BY m.name ASC", tuple(params))
            return [to_member(r) for r in fetchall(cur)]

    def list_not_deleted(self) -> Sequence[Member]:
        with db_cursor(self._db) as (_, cur):
            cur.execute(_SELECT + " WHERE m.deleted_at IS NULL ORDER BY m.name ASC")
            return [to_member(r) for r in fetchall(cur)]

    def list_active(self) -> Sequence[Member]:
        with db_cursor(self._db) as (_, cur):
            cur.execute(_SELECT + " WHERE m.deleted_at IS NULL AND m.left_at IS NULL ORDER BY m.name ASC")
            return [to_member(r) for r in fetchall(cur)]

    def get_member(self, member_id: int) -> Optional[Member]:
        with db_cursor(self._db) as (_, cur):
            cur.execute(_SELECT + " WHERE m.id=%s AND m.deleted_at IS NULL", (int(member_id),))
            r = fetchone(cur)
            return to_member(r) if r else None

    def email_exists(self, email: str, *, exclude_member_id: Optional[int] = None) -> bool:
        with db_cursor(self._db) as (_, cur):
            if exclude_member_id is None:
                cur.execute("SELECT 1 FROM user_accounts WHERE email=%s", (email,))
            else:
                cur.execute(
                    "SELECT 1 FROM user_accounts WHERE email=%s AND member_id<>%s",
                    (email, int(exclude_member_id)),
                )
            return fetchone(cur) is not None

    def create_member(self, new: NewMember, *, actor_id: Optional[int]) -> int:
        with db_cursor(self._db) as (_, cur):
            member_id = insert_member_with_account(cur, new)
            write_audit(
                cur,
                AuditEntry(
                    user_id=actor_id,
                    action="create",
                    resource_type="member",
                    resource_id=member_id,
                    after={"name": new.name, "email": new.email, "role": new.role.value, "status": new.status.value},
                ),
            )
            return member_id

    def update_member(self, member_id: int, *, member_fields: dict, account_fields: dict, actor_id: Optional[int]) -> None:
        with db_cursor(self._db) as (_, cur):
            cur.execute(_SELECT + " WHERE m.id=%s FOR UPDATE", (int(member_id),))
            before = fetchone(cur)

            if member_fields:
                sets = ", ".join(f"{MEMBER_COLUMNS[k]}=%s" for k in member_fields)
                cur.execute(
                    f"UPDATE members SET {sets} WHERE id=%s",
                    (*member_fields.values(), int(member_id)),
                )
            if account_fields:
                sets = ", ".join(f"{ACCOUNT_COLUMNS[k]}=%s" for k in account_fields)
                with conflict_on_duplicate(DUPLICATE_EMAIL):
                    cur.execute(
                        f"UPDATE user_accounts SET {sets} WHERE member_id=%s",
                        (*account_fields.values(), int(member_id)),
                    )

            after = {k: v for k, v in {**member_fields, **account_fields}.items() if k != "passwordHash"}
            write_audit(
                cur,
                AuditEntry(
                    user_id=actor_id,
                    action="update",
                    resource_type="member",
                    resource_id=member_id,
                    before={k: (before or {}).get(MEMBER_COLUMNS.get(k) or ACCOUNT_COLUMNS.get(k)) for k in after},
                    after=after,
                ),
            )

    def soft_delete(self, member_id: int, *, actor_id: Optional[int]) -> bool:
        with db_cursor(self._db) as (_, cur):
            cur.execute(
                "UPDATE members SET deleted_at=NOW() WHERE id=%s AND deleted_at IS NULL",
                (int(member_id),),
            )
            if cur.rowcount == 0:
                return False
            write_audit(
                cur,
                AuditEntry(user_id=actor_id, action="delete", resource_type="member", resource_id=member_id),
            )
            return True

    def update_profile(self, member_id: int, fields: dict) -> None:
        if not fields:
            return
        sets = ", ".join(f"{MEMBER_COLUMNS[k]}=%s" for k in fields)
        with db_cursor(self._db) as (_, cur):
            cur.execute(f"UPDATE members SET {sets} WHERE id=%s", (*fields.values(), int(member_id)))
