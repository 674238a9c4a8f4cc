from __future__ import annotations

from datetime import date
from typing import Optional, Sequence

from ..database.connection import Database
from ..database.mysql_base import conflict_on_duplicate, db_cursor, fetchall, fetchone, in_clause
from .model import MemberSkillEntry, Skill, SkillCategory, latest_per_skill
from .repository import SkillRepository

_CATEGORY_COLUMNS = {"name": "name", "description": "description", "displayOrder": "display_order"}
_SKILL_COLUMNS = _CATEGORY_COLUMNS

_HISTORY_SELECT = """
    SELECT ms.id, ms.member_id, ms.skill_id, ms.level, ms.evaluated_at, ms.memo,
           s.name AS skill_name, c.id AS category_id, c.name AS category_name,
           em.name AS evaluator_name
    FROM member_skills ms
    JOIN skills s ON s.id = ms.skill_id
    JOIN skill_categories c ON c.id = s.category_id
    LEFT JOIN user_accounts ea ON ea.id = ms.evaluated_by
    LEFT JOIN members em ON em.id = ea.member_id
"""


def _to_skill(r: dict) -> Skill:
    return Skill(
        skill_id=int(r["id"]),
        category_id=int(r["category_id"]),
        name=r["name"],
        description=r.get("description"),
        display_order=int(r.get("display_order") or 99),
    )


def _to_entry(r: dict) -> MemberSkillEntry:
    return MemberSkillEntry(
        entry_id=int(r["id"]),
        member_id=int(r["member_id"]),
        skill_id=int(r["skill_id"]),
        skill_name=r["skill_name"],
        category_id=int(r["category_id"]),
        category_name=r["category_name"],
        level=int(r["level"]),
        evaluated_at=r["evaluated_at"],
        memo=r.get("memo"),
        evaluator_name=r.get("evaluator_name"),
    )


def _set_clause(columns: dict, fields: dict) -> str:
    return ", ".join(f"{columns[k]}=%s" for k in fields)


class MySQLSkillRepository(SkillRepository):
    def __init__(self, db: Database):
        self._db = db

    def list_categories(self, *, category_id: Optional[int] = None) -> Sequence[SkillCategory]:
        with db_cursor(self._db) as (_, cur):
            if category_id is None:
                cur.execute("SELECT * FROM skill_categories ORDER BY display_order ASC, id ASC")
            else:
                cur.execute("SELECT * FROM skill_categories WHERE id=%s", (int(category_id),))
            categories = fetchall(cur)
            if not categories:
                return []

            ids = [int(c["id"]) for c in categories]
            cur.execute(
                f"SELECT * FROM skills WHERE category_id IN ({in_clause(ids)}) ORDER BY display_order ASC, id ASC",
                tuple(ids),
            )
            by_category: dict[int, list[Skill]] = {}
            for r in fetchall(cur):
                skill = _to_skill(r)
                by_category.setdefault(skill.category_id, []).append(skill)

        return [
            SkillCategory(
                category_id=int(c["id"]),
                name=c["name"],
                description=c.get("description"),
                display_order=int(c.get("display_order") or 99),
                skills=tuple(by_category.get(int(c["id"]), [])),
            )
            for c in categories
        ]

    def get_category(self, category_id: int) -> Optional[SkillCategory]:
        found = self.list_categories(category_id=category_id)
        return found[0] if found else None

    def category_name_taken(self, name: str, *, exclude_id: Optional[int] = None) -> bool:
        with db_cursor(self._db) as (_, cur):
            cur.execute(
                "SELECT 1 FROM skill_categories WHERE name=%s AND id<>%s",
                (name, int(exclude_id or 0)),
            )
            return fetchone(cur) is not None

    def create_category(self, *, name: str, description: Optional[str], display_order: int) -> int:
        with db_cursor(self._db) as (_, cur):
            with conflict_on_duplicate("同名のカテゴリが既に存在します"):
                cur.execute(
                    "INSERT INTO skill_categories (name, description, display_order) VALUES (%s, %s, %s)",
                    (name, description, int(display_order)),
                )
            return int(cur.lastrowid)

    def update_category(self, category_id: int, fields: dict) -> None:
        if not fields:
            return
        with db_cursor(self._db) as (_, cur):
            with conflict_on_duplicate("同名のカテゴリが既に存在します"):
                cur.execute(
                    f"UPDATE skill_categories SET {_set_clause(_CATEGORY_COLUMNS, fields)} WHERE id=%s",
                    (*fields.values(), int(category_id)),
                )

    def category_has_evaluations(self, category_id: int) -> bool:
        with db_cursor(self._db) as (_, cur):
            cur.execute(
                """
                SELECT 1 FROM member_skills ms
                JOIN skills s ON s.id = ms.skill_id
                WHERE s.category_id=%s
                LIMIT 1
                """,
                (int(category_id),),
            )
            return fetchone(cur) is not None

    def delete_category(self, category_id: int) -> None:
        with db_cursor(self._db) as (_, cur):
            cur.execute("DELETE FROM skills WHERE category_id=%s", (int(category_id),))
            cur.execute("DELETE FROM skill_categories WHERE id=%s", (int(category_id),))

    def get_skill(self, *, category_id: int, skill_id: int) -> Optional[Skill]:
        with db_cursor(self._db) as (_, cur):
            cur.execute(
                "SELECT * FROM skills WHERE id=%s AND category_id=%s",
                (int(skill_id), int(category_id)),
            )
            r = fetchone(cur)
            return _to_skill(r) if r else None

    def skill_name_taken(self, *, category_id: int, name: str, exclude_id: Optional[int] = None) -> bool:
        with db_cursor(self._db) as (_, cur):
            cur.execute(
                "SELECT 1 FROM skills WHERE category_id=%s AND name=%s AND id<>%s",
                (int(category_id), name, int(exclude_id or 0)),
            )
            return fetchone(cur) is not None

    def create_skill(self, *, category_id: int, name: str, description: Optional[str], display_order: int) -> int:
        with db_cursor(self._db) as (_, cur):
            with conflict_on_duplicate("同名のスキルがこのカテゴリに既に存在します"):
                cur.execute(
                    "INSERT INTO skills (category_id, name, description, display_order) VALUES (%s, %s, %s, %s)",
                    (int(category_id), name, description, int(display_order)),
                )
            return int(cur.lastrowid)

    def update_skill(self, skill_id: int, fields: dict) -> None:
        if not fields:
            return
        with db_cursor(self._db) as (_, cur):
            with conflict_on_duplicate("同名のスキルがこのカテゴリに既に存在します"):
                cur.execute(
                    f"UPDATE skills SET {_set_clause(_SKILL_COLUMNS, fields)} WHERE id=%s",
                    (*fields.values(), int(skill_id)),
                )

    def delete_skill(self, skill_id: int) -> None:
        with db_cursor(self._db) as (_, cur):
            cur.execute("DELETE FROM member_skills WHERE skill_id=%s", (int(skill_id),))
            cur.execute("DELETE FROM skills WHERE id=%s", (int(skill_id),))

    def member_history(self, member_id: int) -> Sequence[MemberSkillEntry]:
        with db_cursor(self._db) as (_, cur):
            cur.execute(
                _HISTORY_SELECT + " WHERE ms.member_id=%s ORDER BY ms.evaluated_at DESC, ms.id DESC",
                (int(member_id),),
            )
            return [_to_entry(r) for r in fetchall(cur)]

    def latest_for_member(self, member_id: int) -> Sequence[MemberSkillEntry]:
        return latest_per_skill(self.member_history(member_id))

    def add_member_skill(
        self,
        *,
        member_id: int,
        skill_id: int,
        level: int,
        evaluated_at: date,
        memo: Optional[str],
        evaluated_by: int,
    ) -> int:
        with db_cursor(self._db) as (_, cur):
            cur.execute(
                """
                INSERT INTO member_skills (member_id, skill_id, level, evaluated_at, evaluated_by, memo)
                VALUES (%s, %s, %s, %s, %s, %s)
                """,
                (int(member_id), int(skill_id), int(level), evaluated_at, int(evaluated_by), memo),
            )
            return int(cur.lastrowid)

    def get_member_skill(self, entry_id: int) -> Optional[MemberSkillEntry]:
        with db_cursor(self._db) as (_, cur):
            cur.execute(_HISTORY_SELECT + " WHERE ms.id=%s", (int(entry_id),))
            r = fetchone(cur)
            return _to_entry(r) if r else None

    def latest_levels(self, *, member_ids: Sequence[int], skill_ids: Sequence[int]) -> dict[int, dict[int, int]]:
        if not member_ids or not skill_ids:
            return {}
        with db_cursor(self._db) as (_, cur):
            cur.execute(
                f"""
                SELECT member_id, skill_id, level
                FROM member_skills
                WHERE member_id IN ({in_clause(member_ids)}) AND skill_id IN ({in_clause(skill_ids)})
                ORDER BY evaluated_at DESC, id DESC
                """,
                (*[int(m) for m in member_ids], *[int(s) for s in skill_ids]),
            )
            rows = fetchall(cur)

        levels: dict[int, dict[int, int]] = {}
        for r in rows:
            levels.setdefault(int(r["member_id"]), {}).setdefault(int(r["skill_id"]), int(r["level"]))
        return levels
