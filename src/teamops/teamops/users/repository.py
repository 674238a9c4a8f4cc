from __future__ import annotations

from typing import Optional, Protocol

from .model import UserAccount


class UserRepository(Protocol):
    def get_by_email(self, email: str) -> Optional[UserAccount]:
        raise NotImplementedError

    def get_by_member_id(self, member_id: int) -> Optional[UserAccount]:
        raise NotImplementedError

    def update_password(self, *, member_id: int, password_hash: str) -> bool:
        raise NotImplementedError
