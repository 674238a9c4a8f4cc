from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

from ..database.mysql_base import to_json


@dataclass(frozen=True)
class AuditEntry:
    """Append-only change trail row; written inside the mutating transaction."""

    user_id: Optional[int]
    action: str
    resource_type: str
    resource_id: int
    before: Optional[Any] = None
    after: Optional[Any] = None


def write_audit(cur, entry: AuditEntry) -> None:
    cur.execute(
        """
        INSERT INTO audit_logs (user_id, action, resource_type, resource_id, before_data, after_data)
        VALUES (%s, %s, %s, %s, %s, %s)
        """,
        (
            entry.user_id,
            entry.action,
            entry.resource_type,
            int(entry.resource_id),
            to_json(entry.before),
            to_json(entry.after),
        ),
    )
