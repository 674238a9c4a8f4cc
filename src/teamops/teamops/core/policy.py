"""Declarative access policy.

Each (resource, action) pair maps to a rule naming the roles that may act on
any record and whether the owning member may act on their own record.
Services ask the shared ``authorizer`` instead of comparing roles inline.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping, Optional

from .enums import Role
from .exceptions import AuthorizationError

ADMIN_ONLY = frozenset({Role.ADMIN})
STAFF = frozenset({Role.ADMIN, Role.MANAGER})
NOBODY: frozenset = frozenset()


@dataclass(frozen=True)
class Rule:
    roles: frozenset
    owner: bool = False


POLICY: Mapping[tuple[str, str], Rule] = {
    ("attendance", "read"): Rule(STAFF, owner=True),
    ("attendance", "correct"): Rule(STAFF, owner=True),
    ("attendance", "confirm"): Rule(STAFF),
    ("attendance", "corrections"): Rule(STAFF),
    ("schedule", "read"): Rule(STAFF, owner=True),
    ("schedule", "write"): Rule(STAFF, owner=True),
    ("schedule", "unsubmitted"): Rule(STAFF),
    ("calendar", "read"): Rule(STAFF),
    ("closing", "read_all"): Rule(STAFF),
    ("closing", "notify"): Rule(STAFF),
    ("closing", "export"): Rule(STAFF),
    ("member", "read"): Rule(STAFF, owner=True),
    ("member", "create"): Rule(STAFF),
    ("member", "update"): Rule(STAFF),
    ("member", "delete"): Rule(ADMIN_ONLY),
    ("member", "private"): Rule(ADMIN_ONLY, owner=True),
    ("member", "profile"): Rule(ADMIN_ONLY, owner=True),
    ("member", "password"): Rule(NOBODY, owner=True),
    ("tool", "read"): Rule(STAFF),
    ("tool", "write"): Rule(STAFF),
    ("project", "write"): Rule(STAFF),
    ("project", "delete"): Rule(ADMIN_ONLY),
    ("assignment", "write"): Rule(STAFF),
    ("skill", "write"): Rule(ADMIN_ONLY),
    ("member_skill", "write"): Rule(STAFF),
    ("evaluation", "read"): Rule(STAFF, owner=True),
    ("evaluation", "read_all"): Rule(STAFF),
    ("evaluation", "write"): Rule(ADMIN_ONLY),
    ("self_report", "read_all"): Rule(STAFF),
    ("pl", "write"): Rule(STAFF),
    ("pl", "generate"): Rule(ADMIN_ONLY),
    ("invoice", "read_all"): Rule(STAFF),
    ("invoice", "accounting"): Rule(STAFF),
    ("system_config", "read"): Rule(ADMIN_ONLY),
    ("system_config", "write"): Rule(ADMIN_ONLY),
    ("slack", "test"): Rule(ADMIN_ONLY),
    ("contract", "read"): Rule(ADMIN_ONLY, owner=True),
    ("contract", "read_all"): Rule(ADMIN_ONLY),
    ("contract", "write"): Rule(ADMIN_ONLY),
    ("contract", "download"): Rule(ADMIN_ONLY, owner=True),
}


class Authorizer:
    def __init__(self, policy: Mapping[tuple[str, str], Rule]):
        self._policy = policy

    def allows(self, user, resource: str, action: str, *, owner_member_id: Optional[int] = None) -> bool:
        rule = self._policy.get((resource, action))
        if rule is None:
            raise KeyError(f"No policy for {resource}.{action}")
        if user.role in rule.roles:
            return True
        return bool(rule.owner and owner_member_id is not None and int(owner_member_id) == int(user.member_id))

    def require(self, user, resource: str, action: str, *, owner_member_id: Optional[int] = None) -> None:
        if not self.allows(user, resource, action, owner_member_id=owner_member_id):
            raise AuthorizationError("権限がありません")


authorizer = Authorizer(POLICY)
