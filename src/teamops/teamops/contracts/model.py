from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..common.datetime_utils import format_jp_date
from ..core.enums import ContractStatus
from ..members.model import Member
from .esign import TextTab

CONTRACT_NOT_FOUND = "契約が見つかりません"


@dataclass(frozen=True)
class Contract:
    """An employment/outsourcing contract routed through e-signature."""

    contract_id: int
    member_id: int
    template_name: str
    signer_email: str
    status: ContractStatus
    created_at: datetime
    docusign_template_id: Optional[str] = None
    envelope_id: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    sent_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    member_name: Optional[str] = None

    def to_dict(self) -> dict:
        data = {
            "id": self.contract_id,
            "memberId": self.member_id,
            "status": self.status.value,
            "templateName": self.template_name,
            "docusignTemplateId": self.docusign_template_id,
            "envelopeId": self.envelope_id,
            "signerEmail": self.signer_email,
            "startDate": self.start_date.isoformat() if self.start_date else None,
            "endDate": self.end_date.isoformat() if self.end_date else None,
            "sentAt": self.sent_at.isoformat() if self.sent_at else None,
            "completedAt": self.completed_at.isoformat() if self.completed_at else None,
            "createdAt": self.created_at.isoformat(),
        }
        if self.member_name is not None:
            data["memberName"] = self.member_name
        return data


@dataclass(frozen=True)
class NewContract:
    template_name: str
    signer_email: str
    docusign_template_id: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None


def prefill_tabs(member: Member, contract: Contract) -> list[TextTab]:
    """Text tabs filled from the member profile; empty values are left for the signer."""
    candidates = [
        ("契約者氏名", member.name),
        ("契約開始日", format_jp_date(contract.start_date)),
        ("契約終了日", format_jp_date(contract.end_date)),
        ("住所", member.address),
        ("銀行名", member.bank_name),
        ("支店名", member.bank_branch),
        ("口座番号", member.bank_account_number),
        ("口座名義", member.bank_account_holder),
    ]
    return [TextTab(label=label, value=value) for label, value in candidates if value]
