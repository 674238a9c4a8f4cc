from __future__ import annotations

from typing import Sequence

import requests

from ..core.enums import NotificationChannel
from ..core.exceptions import ExternalServiceError
from ..core.policy import authorizer
from .dispatcher import NotificationDispatcher
from .mailer import Attachment, Mailer
from .slack import SlackNotifier


class NotificationService:
    """Entry point the other services use to fire notifications."""

    def __init__(self, slack: SlackNotifier, mailer: Mailer, dispatcher: NotificationDispatcher):
        self._slack = slack
        self._mailer = mailer
        self._dispatcher = dispatcher

    def slack(self, channel: NotificationChannel, text: str) -> None:
        self._dispatcher.submit(f"slack:{channel.value}", self._slack.post, channel, text)

    def email(self, *, to: str, subject: str, body: str, attachments: Sequence[Attachment] = ()) -> None:
        self._dispatcher.submit(
            f"mail:{subject}", self._mailer.send, to=to, subject=subject, body=body, attachments=attachments
        )

    def send_test_message(self, actor) -> bool:
        """Synchronous so the admin sees whether Slack is reachable."""
        authorizer.require(actor, "slack", "test")
        try:
            return self._slack.post(NotificationChannel.DEFAULT, f"テスト通知 from {actor.name}")
        except requests.RequestException as e:
            raise ExternalServiceError(f"Slack への送信に失敗しました: {e}")
