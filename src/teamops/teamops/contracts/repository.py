from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import ContractStatus
from ..members.model import NewMember
from .model import Contract, NewContract


class ContractRepository(Protocol):
    def list_for_member(self, member_id: int) -> Sequence[Contract]:
        """Newest first."""
        raise NotImplementedError

    def list_all(
        self, *, member_id: Optional[int] = None, status: Optional[ContractStatus] = None
    ) -> Sequence[Contract]:
        """Newest first, with member names."""
        raise NotImplementedError

    def get(self, member_id: int, contract_id: int) -> Optional[Contract]:
        raise NotImplementedError

    def create(self, member_id: int, new: NewContract) -> Contract:
        raise NotImplementedError

    def create_with_new_member(self, member: NewMember, new: NewContract, *, actor_id: int) -> Contract:
        """Member, account and draft contract in one transaction."""
        raise NotImplementedError

    def mark_sent(self, contract_id: int, envelope_id: str, sent_at: datetime) -> None:
        raise NotImplementedError

    def set_status(self, contract_id: int, status: ContractStatus) -> None:
        raise NotImplementedError

    def find_by_envelope(self, envelope_id: str) -> Optional[Contract]:
        raise NotImplementedError

    def apply_envelope_status(
        self, contract_id: int, status: ContractStatus, completed_at: Optional[datetime] = None
    ) -> None:
        raise NotImplementedError
