from __future__ import annotations

import logging
from typing import Callable, Mapping, Optional

import requests

from ..core.enums import NotificationChannel
from ..core.exceptions import ExternalServiceError

logger = logging.getLogger(__name__)

SLACK_POST_URL = "https://slack.com/api/chat.postMessage"


class SlackNotifier:
    """Posts messages with a bot token to the channel mapped to a category.

    ``channel_lookup`` lets admins override channel ids stored in the
    system config table; environment values are the fallback.
    """

    def __init__(
        self,
        *,
        bot_token: Optional[str],
        channels: Mapping[str, str],
        channel_lookup: Optional[Callable[[str], Optional[str]]] = None,
        timeout: float = 10.0,
        session: Optional[requests.Session] = None,
    ):
        self._bot_token = bot_token
        self._channels = dict(channels)
        self._channel_lookup = channel_lookup
        self._timeout = timeout
        self._session = session or requests.Session()

    def resolve_channel(self, channel: NotificationChannel) -> Optional[str]:
        if self._channel_lookup:
            override = self._channel_lookup(f"slack_channel_{channel.value}")
            if override:
                return override
        return self._channels.get(channel.value) or self._channels.get(NotificationChannel.DEFAULT.value)

    def post(self, channel: NotificationChannel, text: str) -> bool:
        """Returns False when Slack is not configured."""
        channel_id = self.resolve_channel(channel)
        if not self._bot_token or not channel_id:
            logger.debug("slack not configured, skipping %s message", channel.value)
            return False

        response = self._session.post(
            SLACK_POST_URL,
            headers={"Authorization": f"Bearer {self._bot_token}"},
            json={"channel": channel_id, "text": text},
            timeout=self._timeout,
        )
        response.raise_for_status()
        data = response.json()
        if not data.get("ok"):
            raise ExternalServiceError(f"Slack error: {data.get('error', 'unknown')}")
        return True
