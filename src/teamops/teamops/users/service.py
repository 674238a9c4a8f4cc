from __future__ import annotations

import logging

from werkzeug.security import check_password_hash, generate_password_hash

from ..common.validators import require_min_length
from ..core.constants import MIN_PASSWORD_LENGTH
from ..core.exceptions import AuthenticationError, NotFoundError, ValidationError
from ..core.policy import authorizer
from .model import SessionUser
from .repository import UserRepository

logger = logging.getLogger(__name__)


class AuthService:
    """Use case: login and password management."""

    def __init__(self, users: UserRepository):
        self._users = users

    def authenticate(self, email: str, password: str) -> SessionUser:
        account = self._users.get_by_email((email or "").strip().lower())
        if not account or account.member_deleted or not account.password_hash:
            raise AuthenticationError("メールアドレスまたはパスワードが違います")

        try:
            ok = check_password_hash(account.password_hash, password or "")
        except ValueError:
            # e.g. placeholder hashes or corrupted values
            ok = False

        if not ok:
            raise AuthenticationError("メールアドレスまたはパスワードが違います")

        logger.info("login member_id=%s", account.member_id)
        return SessionUser(
            id=account.account_id,
            member_id=account.member_id,
            email=account.email,
            role=account.role,
            name=account.member_name,
            company=account.company,
        )

    def change_password(self, actor: SessionUser, *, member_id: int, current_password: str, new_password: str) -> None:
        authorizer.require(actor, "member", "password", owner_member_id=member_id)

        account = self._users.get_by_member_id(member_id)
        if not account:
            raise NotFoundError("アカウントが見つかりません")

        # Accounts created without a password (contract onboarding) skip the check.
        if account.password_hash:
            try:
                ok = check_password_hash(account.password_hash, current_password or "")
            except ValueError:
                ok = False
            if not ok:
                raise ValidationError("現在のパスワードが正しくありません")

        require_min_length(new_password, "新しいパスワード", MIN_PASSWORD_LENGTH)
        self._users.update_password(member_id=member_id, password_hash=generate_password_hash(new_password))
