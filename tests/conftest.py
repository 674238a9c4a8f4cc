from __future__ import annotations

import pytest

from src.teamops.teamops.core.enums import Company, Role
from src.teamops.teamops.users.model import SessionUser


class RecordingNotifications:
    """Stands in for NotificationService; keeps what would have been sent."""

    def __init__(self):
        self.slack_messages = []
        self.emails = []

    def slack(self, channel, text):
        self.slack_messages.append((channel, text))

    def email(self, *, to, subject, body, attachments=()):
        self.emails.append({"to": to, "subject": subject, "body": body, "attachments": list(attachments)})


def make_user(member_id: int, role: Role, name: str = "テスト") -> SessionUser:
    return SessionUser(
        id=member_id * 10, member_id=member_id, email=f"user{member_id}@example.com", role=role, name=name,
        company=Company.BOOST,
    )


@pytest.fixture
def admin() -> SessionUser:
    return make_user(1, Role.ADMIN, "管理者")


@pytest.fixture
def manager() -> SessionUser:
    return make_user(2, Role.MANAGER, "マネージャー")


@pytest.fixture
def member() -> SessionUser:
    return make_user(3, Role.MEMBER, "山田")


@pytest.fixture
def notifications() -> RecordingNotifications:
    return RecordingNotifications()
