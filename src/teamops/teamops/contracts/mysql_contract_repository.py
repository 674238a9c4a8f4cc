from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from ..audit.log import AuditEntry, write_audit
from ..core.enums import ContractStatus
from ..database.connection import Database
from ..database.mysql_base import conflict_on_duplicate, db_cursor, fetchall, fetchone
from ..members.model import DUPLICATE_EMAIL, NewMember
from ..members.mysql_member_repository import insert_member_with_account
from .model import Contract, NewContract
from .repository import ContractRepository

_SELECT = """
    SELECT c.id, c.member_id, c.template_name, c.docusign_template_id, c.signer_email, c.status,
           c.envelope_id, c.start_date, c.end_date, c.sent_at, c.completed_at, c.created_at,
           m.name AS member_name
    FROM member_contracts c
    JOIN members m ON m.id = c.member_id
"""


def _to_contract(r: dict, *, with_member: bool = True) -> Contract:
    return Contract(
        contract_id=int(r["id"]),
        member_id=int(r["member_id"]),
        template_name=r["template_name"],
        signer_email=r["signer_email"],
        status=ContractStatus(r["status"]),
        created_at=r["created_at"],
        docusign_template_id=r.get("docusign_template_id"),
        envelope_id=r.get("envelope_id"),
        start_date=r.get("start_date"),
        end_date=r.get("end_date"),
        sent_at=r.get("sent_at"),
        completed_at=r.get("completed_at"),
        member_name=r.get("member_name") if with_member else None,
    )


def _insert_contract(cur, member_id: int, new: NewContract) -> int:
    cur.execute(
        """
        INSERT INTO member_contracts (
            member_id, template_name, docusign_template_id, signer_email, status, start_date, end_date
        )
        VALUES (%s, %s, %s, %s, %s, %s, %s)
        """,
        (
            member_id,
            new.template_name,
            new.docusign_template_id,
            new.signer_email,
            ContractStatus.DRAFT.value,
            new.start_date,
            new.end_date,
        ),
    )
    return int(cur.lastrowid)


class MySQLContractRepository(ContractRepository):
    def __init__(self, db: Database):
        self._db = db

    def list_for_member(self, member_id: int) -> Sequence[Contract]:
        with db_cursor(self._db) as (_, cur):
            cur.execute(_SELECT + " WHERE c.member_id=%s ORDER BY c.created_at DESC, c.id DESC", (member_id,))
            rows = fetchall(cur)
        return [_to_contract(r, with_member=False) for r in rows]

    def list_all(
        self, *, member_id: Optional[int] = None, status: Optional[ContractStatus] = None
    ) -> Sequence[Contract]:
        where, params = [], []
        if member_id is not None:
            where.append("c.member_id=%s")
            params.append(member_id)
        if status is not None:
            where.append("c.status=%s")
            params.append(status.value)
        sql = _SELECT
        if where:
            sql += " WHERE " + " AND ".join(where)
        sql += " ORDER BY c.created_at DESC, c.id DESC"
        with db_cursor(self._db) as (_, cur):
            cur.execute(sql, tuple(params))
            rows = fetchall(cur)
        return [_to_contract(r) for r in rows]

    def get(self, member_id: int, contract_id: int) -> Optional[Contract]:
        with db_cursor(self._db) as (_, cur):
            cur.execute(_SELECT + " WHERE c.id=%s AND c.member_id=%s", (contract_id, member_id))
            row = fetchone(cur)
        return _to_contract(row, with_member=False) if row else None

    def create(self, member_id: int, new: NewContract) -> Contract:
        with db_cursor(self._db) as (_, cur):
            contract_id = _insert_contract(cur, member_id, new)
            cur.execute(_SELECT + " WHERE c.id=%s", (contract_id,))
            row = fetchone(cur)
        return _to_contract(row, with_member=False)

    def create_with_new_member(self, member: NewMember, new: NewContract, *, actor_id: int) -> Contract:
        with conflict_on_duplicate(DUPLICATE_EMAIL):
            with db_cursor(self._db) as (_, cur):
                member_id = insert_member_with_account(cur, member)
                contract_id = _insert_contract(cur, member_id, new)
                write_audit(
                    cur,
                    AuditEntry(
                        user_id=actor_id,
                        action="create",
                        resource_type="member",
                        resource_id=member_id,
                        after={"name": member.name, "email": member.email, "contractId": contract_id},
                    ),
                )
                cur.execute(_SELECT + " WHERE c.id=%s", (contract_id,))
                row = fetchone(cur)
        return _to_contract(row, with_member=False)

    def mark_sent(self, contract_id: int, envelope_id: str, sent_at: datetime) -> None:
        with db_cursor(self._db) as (_, cur):
            cur.execute(
                "UPDATE member_contracts SET envelope_id=%s, status=%s, sent_at=%s WHERE id=%s",
                (envelope_id, ContractStatus.SENT.value, sent_at, contract_id),
            )

    def set_status(self, contract_id: int, status: ContractStatus) -> None:
        with db_cursor(self._db) as (_, cur):
            cur.execute("UPDATE member_contracts SET status=%s WHERE id=%s", (status.value, contract_id))

    def find_by_envelope(self, envelope_id: str) -> Optional[Contract]:
        with db_cursor(self._db) as (_, cur):
            cur.execute(_SELECT + " WHERE c.envelope_id=%s ORDER BY c.id DESC LIMIT 1", (envelope_id,))
            row = fetchone(cur)
        return _to_contract(row, with_member=False) if row else None

    def apply_envelope_status(
        self, contract_id: int, status: ContractStatus, completed_at: Optional[datetime] = None
    ) -> None:
        with db_cursor(self._db) as (_, cur):
            if completed_at is not None:
                cur.execute(
                    "UPDATE member_contracts SET status=%s, completed_at=%s WHERE id=%s",
                    (status.value, completed_at, contract_id),
                )
            else:
                cur.execute("UPDATE member_contracts SET status=%s WHERE id=%s", (status.value, contract_id))
