from __future__ import annotations

from typing import Mapping, Optional, Protocol


class SystemConfigRepository(Protocol):
    def get_all(self) -> Mapping[str, str]:
        raise NotImplementedError

    def get_value(self, key: str) -> Optional[str]:
        raise NotImplementedError

    def upsert_many(self, values: Mapping[str, str], *, updated_by: Optional[int]) -> None:
        raise NotImplementedError
