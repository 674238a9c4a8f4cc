from __future__ import annotations

from pydantic import BaseModel, Field


class ConfigItem(BaseModel):
    key: str = Field(..., min_length=1, max_length=100)
    value: str


class ConfigUpdate(BaseModel):
    """PUT /api/system-configs request body"""

    configs: list[ConfigItem] = Field(..., min_length=1)
