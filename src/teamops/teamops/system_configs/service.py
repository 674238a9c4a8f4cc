from __future__ import annotations

import logging
from typing import Optional

from ..core.constants import SECRET_CONFIG_KEYS
from ..core.policy import authorizer
from ..users.model import SessionUser
from .repository import SystemConfigRepository
from .schemas import ConfigUpdate

logger = logging.getLogger(__name__)


class SystemConfigService:
    """Admin-editable key/value settings; secret values are never read back."""

    def __init__(self, configs: SystemConfigRepository):
        self._configs = configs

    def get_all(self, actor: SessionUser) -> dict:
        authorizer.require(actor, "system_config", "read")
        return {k: ("" if k in SECRET_CONFIG_KEYS else v) for k, v in self._configs.get_all().items()}

    def put(self, actor: SessionUser, payload: ConfigUpdate) -> dict:
        authorizer.require(actor, "system_config", "write")
        values = {item.key: item.value for item in payload.configs}
        self._configs.upsert_many(values, updated_by=actor.id)
        logger.info("system configs %s updated by %s", sorted(values), actor.member_id)
        return {"ok": True}

    def lookup(self, key: str) -> Optional[str]:
        """Runtime override read by notifiers; empty values count as unset."""
        return self._configs.get_value(key) or None
