from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional, Union

from ..common.datetime_utils import now_local
from ..core.enums import ContractStatus, SalaryType
from ..core.exceptions import (
    AuthenticationError,
    ConflictError,
    ExternalServiceError,
    NotFoundError,
    StateError,
)
from ..core.policy import authorizer
from ..members.model import DUPLICATE_EMAIL, Member, NewMember
from ..members.repository import MemberRepository
from ..users.model import SessionUser
from . import webhook
from .esign import DEFAULT_VOID_REASON, ESignClient
from .model import CONTRACT_NOT_FOUND, Contract, NewContract, prefill_tabs
from .repository import ContractRepository
from .schemas import ContractDraft, ExistingMemberContract, NewMemberContract

logger = logging.getLogger(__name__)

PDF_MIMETYPE = "application/pdf"


class ContractService:
    """Use case: draft contracts, send them for e-signature and track envelope state."""

    def __init__(self, contracts: ContractRepository, members: MemberRepository, esign: ESignClient):
        self._contracts = contracts
        self._members = members
        self._esign = esign

    def _require_member(self, member_id: int) -> Member:
        member = self._members.get_member(member_id)
        if not member:
            raise NotFoundError("メンバーが見つかりません")
        return member

    def _require_contract(self, member_id: int, contract_id: int) -> Contract:
        contract = self._contracts.get(member_id, contract_id)
        if not contract:
            raise NotFoundError(CONTRACT_NOT_FOUND)
        return contract

    def list_for_member(self, actor: SessionUser, member_id: int) -> list[dict]:
        authorizer.require(actor, "contract", "read", owner_member_id=member_id)
        return [c.to_dict() for c in self._contracts.list_for_member(member_id)]

    def list_all(
        self, actor: SessionUser, *, member_id: Optional[int] = None, status: Optional[ContractStatus] = None
    ) -> list[dict]:
        authorizer.require(actor, "contract", "read_all")
        return [c.to_dict() for c in self._contracts.list_all(member_id=member_id, status=status)]

    def create_draft(self, actor: SessionUser, member_id: int, payload: ContractDraft) -> dict:
        authorizer.require(actor, "contract", "write")
        self._require_member(member_id)
        contract = self._contracts.create(member_id, self._new_contract(payload, payload.signerEmail))
        logger.info("contract draft %s created for member %s", contract.contract_id, member_id)
        return contract.to_dict()

    def create(self, actor: SessionUser, payload: Union[NewMemberContract, ExistingMemberContract]) -> dict:
        """Draft for an existing member, or onboard a new member with a draft contract."""
        authorizer.require(actor, "contract", "write")
        if isinstance(payload, ExistingMemberContract):
            return self.create_draft(actor, payload.memberId, payload)

        if self._members.email_exists(payload.email):
            raise ConflictError(DUPLICATE_EMAIL)

        member = NewMember(
            name=payload.name,
            email=payload.email,
            # No password yet; the administrator sets one before first login.
            password_hash="",
            role=payload.status.default_role(),
            status=payload.status,
            salary_type=SalaryType.MONTHLY,
            salary_amount=0,
            joined_at=now_local().date(),
            phone=payload.phone,
            address=payload.address,
            bank_name=payload.bankName,
            bank_branch=payload.bankBranch,
            bank_account_number=payload.bankAccountNumber,
            bank_account_holder=payload.bankAccountHolder,
        )
        contract = self._contracts.create_with_new_member(
            member, self._new_contract(payload, payload.email), actor_id=actor.id
        )
        logger.info("member %s onboarded with contract %s", contract.member_id, contract.contract_id)
        return contract.to_dict()

    @staticmethod
    def _new_contract(payload, signer_email: str) -> NewContract:
        return NewContract(
            template_name=payload.templateName,
            signer_email=signer_email,
            docusign_template_id=payload.docusignTemplateId,
            start_date=payload.startDate,
            end_date=payload.endDate,
        )

    def send(self, actor: SessionUser, member_id: int, contract_id: int, *, now: Optional[datetime] = None) -> dict:
        authorizer.require(actor, "contract", "write")
        contract = self._require_contract(member_id, contract_id)
        if contract.status is not ContractStatus.DRAFT:
            raise StateError("送付できるのはドラフト状態の契約のみです")
        if not contract.docusign_template_id:
            raise StateError("DocuSign テンプレートが設定されていません")

        member = self._require_member(member_id)
        envelope_id = self._esign.send_envelope(
            template_id=contract.docusign_template_id,
            signer_email=contract.signer_email,
            signer_name=member.name,
            tabs=prefill_tabs(member, contract),
        )
        sent_at = now or now_local()
        self._contracts.mark_sent(contract_id, envelope_id, sent_at)
        logger.info("contract %s sent as envelope %s", contract_id, envelope_id)
        return {"id": contract_id, "status": ContractStatus.SENT.value, "envelopeId": envelope_id}

    def void(self, actor: SessionUser, member_id: int, contract_id: int, reason: Optional[str] = None) -> dict:
        authorizer.require(actor, "contract", "write")
        contract = self._require_contract(member_id, contract_id)
        if contract.status is ContractStatus.VOIDED:
            raise StateError("既に無効化されています")

        if contract.envelope_id:
            self._esign.void_envelope(contract.envelope_id, reason or DEFAULT_VOID_REASON)
        self._contracts.set_status(contract_id, ContractStatus.VOIDED)
        logger.info("contract %s voided", contract_id)
        return {"id": contract_id, "status": ContractStatus.VOIDED.value}

    def _signed_contract(self, actor: SessionUser, member_id: int, contract_id: int) -> Contract:
        authorizer.require(actor, "contract", "download", owner_member_id=member_id)
        contract = self._require_contract(member_id, contract_id)
        if contract.status is not ContractStatus.COMPLETED:
            raise StateError("署名完了した契約のみダウンロードできます")
        if not contract.envelope_id:
            raise StateError("エンベロープIDがありません")
        return contract

    def download_url(self, actor: SessionUser, member_id: int, contract_id: int) -> dict:
        self._signed_contract(actor, member_id, contract_id)
        return {"url": f"/api/members/{member_id}/contracts/{contract_id}/document"}

    def document(self, actor: SessionUser, member_id: int, contract_id: int) -> tuple[str, bytes]:
        contract = self._signed_contract(actor, member_id, contract_id)
        content = self._esign.download_document(contract.envelope_id)
        return f"contract-{contract_id}.pdf", content

    def templates(self, actor: SessionUser) -> list[dict]:
        authorizer.require(actor, "contract", "write")
        try:
            return self._esign.list_templates()
        except ExternalServiceError as e:
            logger.warning("template list unavailable: %s", e.message)
            return []

    def handle_webhook(self, body: bytes, signature: Optional[str]) -> dict:
        """Apply a signed envelope status callback."""
        if not webhook.verify_signature(body, signature, self._esign.settings.webhook_secret):
            raise AuthenticationError("Invalid signature")

        event = webhook.parse_event(body)
        if event.status is None:
            return {"ok": True}

        contract = self._contracts.find_by_envelope(event.envelope_id)
        if not contract:
            logger.warning("webhook for unknown envelope %s", event.envelope_id)
            return {"ok": True}

        self._contracts.apply_envelope_status(contract.contract_id, event.status, event.completed_at)
        logger.info("contract %s -> %s via webhook", contract.contract_id, event.status.value)
        return {"ok": True}
