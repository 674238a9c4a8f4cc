from __future__ import annotations

from datetime import date
from typing import Optional, Sequence

from ..audit.log import AuditEntry, write_audit
from ..core.enums import Company, ProjectContractType, ProjectStatus, ProjectType
from ..database.connection import Database
from ..database.mysql_base import db_cursor, fetchall, fetchone, in_clause
from .model import Assignment, NewPosition, Position, Project
from .repository import ProjectRepository

PROJECT_COLUMNS = {
    "name": "name",
    "description": "description",
    "status": "status",
    "company": "company",
    "projectType": "project_type",
    "startDate": "start_date",
    "endDate": "end_date",
    "clientName": "client_name",
    "contractType": "contract_type",
    "monthlyContractAmount": "monthly_contract_amount",
}

_ASSIGNMENT_SELECT = """
    SELECT pa.id, pa.project_id, pa.position_id, pa.member_id, pa.workload_hours,
           pa.start_date, pa.end_date,
           m.name AS member_name, m.company AS member_company,
           pp.position_name, p.name AS project_name
    FROM project_assignments pa
    JOIN members m ON m.id = pa.member_id
    JOIN project_positions pp ON pp.id = pa.position_id
    JOIN projects p ON p.id = pa.project_id
"""


def to_project(r: dict) -> Project:
    return Project(
        project_id=int(r["id"]),
        name=r["name"],
        description=r.get("description"),
        status=ProjectStatus(r["status"]),
        company=Company(r["company"]),
        project_type=ProjectType(r.get("project_type") or ProjectType.SALT2_OWN.value),
        start_date=r["start_date"],
        end_date=r.get("end_date"),
        client_name=r.get("client_name"),
        contract_type=ProjectContractType(r["contract_type"]) if r.get("contract_type") else None,
        monthly_contract_amount=int(r.get("monthly_contract_amount") or 0),
    )


def _to_assignment(r: dict) -> Assignment:
    return Assignment(
        assignment_id=int(r["id"]),
        project_id=int(r["project_id"]),
        position_id=int(r["position_id"]),
        member_id=int(r["member_id"]),
        workload_hours=float(r.get("workload_hours") or 0),
        start_date=r["start_date"],
        end_date=r.get("end_date"),
        member_name=r.get("member_name"),
        member_company=r.get("member_company"),
        position_name=r.get("position_name"),
        project_name=r.get("project_name"),
    )


def _audit_view(fields: dict) -> dict:
    return {k: fields.get(k) for k in ("name", "status", "company") if k in fields}


class MySQLProjectRepository(ProjectRepository):
    def __init__(self, db: Database):
        self._db = db

    def list_projects(self, *, company: Optional[str] = None, status: Optional[str] = None) -> Sequence[Project]:
        clauses = ["deleted_at IS NULL"]
        params: list[object] = []
        if company:
            clauses.append("company=%s")
            params.append(company)
        if status:
            clauses.append("status=%s")
            params.append(status)

        with db_cursor(self._db) as (_, cur):
            cur.execute(
                f"SELECT * FROM projects WHERE {' AND '.join(clauses)} ORDER BY created_at DESC, id DESC",
                tuple(params),
            )
            return [to_project(r) for r in fetchall(cur)]

    def get_project(self, project_id: int) -> Optional[Project]:
        with db_cursor(self._db) as (_, cur):
            cur.execute("SELECT * FROM projects WHERE id=%s AND deleted_at IS NULL", (int(project_id),))
            r = fetchone(cur)
            return to_project(r) if r else None

    def get_projects(self, project_ids: Sequence[int]) -> Sequence[Project]:
        if not project_ids:
            return []
        with db_cursor(self._db) as (_, cur):
            cur.execute(
                f"SELECT * FROM projects WHERE id IN ({in_clause(project_ids)}) AND deleted_at IS NULL",
                tuple(int(p) for p in project_ids),
            )
            return [to_project(r) for r in fetchall(cur)]

    def create_project(self, fields: dict, positions: Sequence[NewPosition], *, actor_id: Optional[int]) -> int:
        columns = [PROJECT_COLUMNS[k] for k in fields]
        with db_cursor(self._db) as (_, cur):
            cur.execute(
                f"INSERT INTO projects ({', '.join(columns)}) VALUES ({in_clause(columns)})",
                tuple(fields.values()),
            )
            project_id = int(cur.lastrowid)
            for pos in positions:
                cur.execute(
                    "INSERT INTO project_positions (project_id, position_name, required_count) VALUES (%s, %s, %s)",
                    (project_id, pos.position_name, int(pos.required_count)),
                )
            write_audit(
                cur,
                AuditEntry(
                    user_id=actor_id,
                    action="create",
                    resource_type="project",
                    resource_id=project_id,
                    after=_audit_view(fields),
                ),
            )
            return project_id

    def update_project(self, project_id: int, fields: dict, *, actor_id: Optional[int]) -> None:
        with db_cursor(self._db) as (_, cur):
            cur.execute("SELECT name, status, company FROM projects WHERE id=%s FOR UPDATE", (int(project_id),))
            before = fetchone(cur) or {}
            if fields:
                sets = ", ".join(f"{PROJECT_COLUMNS[k]}=%s" for k in fields)
                cur.execute(f"UPDATE projects SET {sets} WHERE id=%s", (*fields.values(), int(project_id)))
            write_audit(
                cur,
                AuditEntry(
                    user_id=actor_id,
                    action="update",
                    resource_type="project",
                    resource_id=project_id,
                    before=dict(before),
                    after={**dict(before), **_audit_view(fields)},
                ),
            )

    def soft_delete(self, project_id: int, *, actor_id: Optional[int]) -> None:
        with db_cursor(self._db) as (_, cur):
            cur.execute("SELECT name, status FROM projects WHERE id=%s FOR UPDATE", (int(project_id),))
            before = fetchone(cur) or {}
            cur.execute("UPDATE projects SET deleted_at=NOW() WHERE id=%s", (int(project_id),))
            write_audit(
                cur,
                AuditEntry(
                    user_id=actor_id,
                    action="delete",
                    resource_type="project",
                    resource_id=project_id,
                    before=dict(before),
                ),
            )

    def list_positions(self, project_id: int) -> Sequence[Position]:
        with db_cursor(self._db) as (_, cur):
            cur.execute(
                """
                SELECT pp.id, pp.project_id, pp.position_name, pp.required_count,
                       COUNT(pa.id) AS assignment_count
                FROM project_positions pp
                LEFT JOIN project_assignments pa ON pa.position_id = pp.id
                WHERE pp.project_id=%s
                GROUP BY pp.id, pp.project_id, pp.position_name, pp.required_count
                ORDER BY pp.id ASC
                """,
                (int(project_id),),
            )
            return [
                Position(
                    position_id=int(r["id"]),
                    project_id=int(r["project_id"]),
                    position_name=r["position_name"],
                    required_count=int(r["required_count"]),
                    assignment_count=int(r["assignment_count"] or 0),
                )
                for r in fetchall(cur)
            ]

    def get_position(self, *, project_id: int, position_id: int) -> Optional[Position]:
        for pos in self.list_positions(project_id):
            if pos.position_id == int(position_id):
                return pos
        return None

    def add_position(self, project_id: int, position: NewPosition) -> int:
        with db_cursor(self._db) as (_, cur):
            cur.execute(
                "INSERT INTO project_positions (project_id, position_name, required_count) VALUES (%s, %s, %s)",
                (int(project_id), position.position_name, int(position.required_count)),
            )
            return int(cur.lastrowid)

    def list_assignments(self, project_ids: Sequence[int]) -> Sequence[Assignment]:
        if not project_ids:
            return []
        with db_cursor(self._db) as (_, cur):
            cur.execute(
                _ASSIGNMENT_SELECT
                + f" WHERE pa.project_id IN ({in_clause(project_ids)}) ORDER BY pa.created_at ASC, pa.id ASC",
                tuple(int(p) for p in project_ids),
            )
            return [_to_assignment(r) for r in fetchall(cur)]

    def get_assignment(self, assignment_id: int) -> Optional[Assignment]:
        with db_cursor(self._db) as (_, cur):
            cur.execute(_ASSIGNMENT_SELECT + " WHERE pa.id=%s", (int(assignment_id),))
            r = fetchone(cur)
            return _to_assignment(r) if r else None

    def create_assignment(
        self,
        *,
        project_id: int,
        position_id: int,
        member_id: int,
        workload_hours: float,
        start_date: date,
        end_date: Optional[date],
    ) -> int:
        with db_cursor(self._db) as (_, cur):
            cur.execute(
                """
                INSERT INTO project_assignments (project_id, position_id, member_id, workload_hours, start_date, end_date)
                VALUES (%s, %s, %s, %s, %s, %s)
                """,
                (int(project_id), int(position_id), int(member_id), workload_hours, start_date, end_date),
            )
            return int(cur.lastrowid)

    def update_workload(self, assignment_id: int, workload_hours: float) -> None:
        with db_cursor(self._db) as (_, cur):
            cur.execute(
                "UPDATE project_assignments SET workload_hours=%s WHERE id=%s",
                (workload_hours, int(assignment_id)),
            )

    def delete_assignment(self, assignment_id: int) -> None:
        with db_cursor(self._db) as (_, cur):
            cur.execute("DELETE FROM project_assignments WHERE id=%s", (int(assignment_id),))

    def assignments_overlapping(
        self,
        *,
        start: date,
        end: date,
        project_ids: Optional[Sequence[int]] = None,
        member_ids: Optional[Sequence[int]] = None,
    ) -> Sequence[Assignment]:
        clauses = ["p.deleted_at IS NULL", "pa.start_date <= %s", "(pa.end_date IS NULL OR pa.end_date >= %s)"]
        params: list[object] = [end, start]
        if project_ids is not None:
            if not project_ids:
                return []
            clauses.append(f"pa.project_id IN ({in_clause(project_ids)})")
            params.extend(int(p) for p in project_ids)
        if member_ids is not None:
            if not member_ids:
                return []
            clauses.append(f"pa.member_id IN ({in_clause(member_ids)})")
            params.extend(int(m) for m in member_ids)

        with db_cursor(self._db) as (_, cur):
            cur.execute(
                _ASSIGNMENT_SELECT + f" WHERE {' AND '.join(clauses)} ORDER BY pa.id ASC",
                tuple(params),
            )
            return [_to_assignment(r) for r in fetchall(cur)]
