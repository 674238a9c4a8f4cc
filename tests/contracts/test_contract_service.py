from __future__ import annotations

import json
from dataclasses import replace
from datetime import date, datetime

import pytest

from src.teamops.teamops.contracts.esign import ESignSettings
from src.teamops.teamops.contracts.model import Contract, prefill_tabs
from src.teamops.teamops.contracts.schemas import ContractDraft, NewMemberContract
from src.teamops.teamops.contracts.service import ContractService
from src.teamops.teamops.contracts.webhook import sign
from src.teamops.teamops.core.enums import Company, ContractStatus, MemberStatus, Role, SalaryType
from src.teamops.teamops.core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    ExternalServiceError,
    NotFoundError,
    StateError,
)
from src.teamops.teamops.members.model import Member

SECRET = "hook-secret"
CREATED = datetime(2026, 4, 1, 10, 0)


class FakeESign:
    def __init__(self):
        self.settings = ESignSettings(webhook_secret=SECRET)
        self.sent = []
        self.voided = []
        self.templates_error = False

    def send_envelope(self, *, template_id, signer_email, signer_name, tabs=()):
        self.sent.append({"template_id": template_id, "email": signer_email, "name": signer_name, "tabs": list(tabs)})
        return "env-123"

    def void_envelope(self, envelope_id, reason):
        self.voided.append((envelope_id, reason))

    def download_document(self, envelope_id):
        return b"%PDF-1.7"

    def list_templates(self):
        if self.templates_error:
            raise ExternalServiceError("DocuSign getTemplates error: 500")
        return [{"templateId": "tpl-1", "name": "業務委託契約"}]


class InMemoryContracts:
    def __init__(self):
        self.rows: dict[int, Contract] = {}
        self.new_members = []

    def _add(self, member_id, new):
        contract = Contract(
            contract_id=len(self.rows) + 1,
            member_id=member_id,
            template_name=new.template_name,
            signer_email=new.signer_email,
            status=ContractStatus.DRAFT,
            created_at=CREATED,
            docusign_template_id=new.docusign_template_id,
            start_date=new.start_date,
            end_date=new.end_date,
        )
        self.rows[contract.contract_id] = contract
        return contract

    def list_for_member(self, member_id):
        return [c for c in self.rows.values() if c.member_id == member_id]

    def get(self, member_id, contract_id):
        c = self.rows.get(contract_id)
        return c if c and c.member_id == member_id else None

    def create(self, member_id, new):
        return self._add(member_id, new)

    def create_with_new_member(self, member, new, *, actor_id):
        self.new_members.append((member, actor_id))
        return self._add(100, new)

    def mark_sent(self, contract_id, envelope_id, sent_at):
        self.rows[contract_id] = replace(
            self.rows[contract_id], envelope_id=envelope_id, status=ContractStatus.SENT, sent_at=sent_at
        )

    def set_status(self, contract_id, status):
        self.rows[contract_id] = replace(self.rows[contract_id], status=status)

    def find_by_envelope(self, envelope_id):
        return next((c for c in self.rows.values() if c.envelope_id == envelope_id), None)

    def apply_envelope_status(self, contract_id, status, completed_at=None):
        c = replace(self.rows[contract_id], status=status)
        if completed_at is not None:
            c = replace(c, completed_at=completed_at)
        self.rows[contract_id] = c


class InMemoryMembers:
    def __init__(self, members, emails=()):
        self._members = {m.member_id: m for m in members}
        self._emails = set(emails)

    def get_member(self, member_id):
        return self._members.get(member_id)

    def email_exists(self, email, *, exclude_member_id=None):
        return email in self._emails


YAMADA = Member(
    member_id=3,
    name="山田",
    status=MemberStatus.EMPLOYEE,
    company=Company.BOOST,
    salary_type=SalaryType.MONTHLY,
    salary_amount=300000,
    joined_at=date(2025, 4, 1),
    address="東京都千代田区1-1",
    bank_name="みずほ銀行",
)


@pytest.fixture
def esign():
    return FakeESign()


@pytest.fixture
def contracts():
    return InMemoryContracts()


@pytest.fixture
def service(contracts, esign):
    return ContractService(contracts, InMemoryMembers([YAMADA], emails={"taken@example.com"}), esign)


def _draft(template_id="tpl-1"):
    return ContractDraft(
        templateName="業務委託契約",
        docusignTemplateId=template_id,
        signerEmail="yamada@example.com",
        startDate=date(2026, 4, 1),
    )


def test_prefill_tabs_skip_empty_values():
    contract = Contract(
        contract_id=1, member_id=3, template_name="t", signer_email="a@b.c", status=ContractStatus.DRAFT,
        created_at=CREATED, start_date=date(2026, 4, 1),
    )

    tabs = {t.label: t.value for t in prefill_tabs(YAMADA, contract)}

    assert tabs == {
        "契約者氏名": "山田",
        "契約開始日": "2026年4月1日",
        "住所": "東京都千代田区1-1",
        "銀行名": "みずほ銀行",
    }


def test_send_moves_draft_to_sent(service, contracts, esign, admin):
    created = service.create_draft(admin, 3, _draft())

    result = service.send(admin, 3, created["id"], now=datetime(2026, 4, 2, 9, 0))

    assert result == {"id": created["id"], "status": "sent", "envelopeId": "env-123"}
    assert contracts.rows[created["id"]].sent_at == datetime(2026, 4, 2, 9, 0)
    assert esign.sent[0]["email"] == "yamada@example.com"
    with pytest.raises(StateError):
        service.send(admin, 3, created["id"])


def test_send_requires_template(service, admin):
    created = service.create_draft(admin, 3, _draft(template_id=None))
    with pytest.raises(StateError):
        service.send(admin, 3, created["id"])


def test_void_calls_provider_once_and_rejects_repeat(service, esign, admin):
    created = service.create_draft(admin, 3, _draft())
    service.send(admin, 3, created["id"])

    assert service.void(admin, 3, created["id"])["status"] == "voided"
    assert esign.voided == [("env-123", "管理者により無効化")]
    with pytest.raises(StateError):
        service.void(admin, 3, created["id"])


def test_owner_can_download_only_completed_contract(service, contracts, admin):
    owner = replace(admin, role=Role.MEMBER, member_id=3)
    created = service.create_draft(admin, 3, _draft())
    service.send(admin, 3, created["id"])
    with pytest.raises(StateError):
        service.download_url(owner, 3, created["id"])

    contracts.set_status(created["id"], ContractStatus.COMPLETED)

    assert service.download_url(owner, 3, created["id"]) == {
        "url": f"/api/members/3/contracts/{created['id']}/document"
    }
    assert service.document(owner, 3, created["id"]) == (f"contract-{created['id']}.pdf", b"%PDF-1.7")


def test_non_owner_member_cannot_list_contracts(service, member):
    with pytest.raises(AuthorizationError):
        service.list_for_member(member, 99)


def test_unknown_contract_is_not_found(service, admin):
    with pytest.raises(NotFoundError):
        service.send(admin, 3, 404)


def test_new_member_contract_derives_role_and_rejects_taken_email(service, contracts, admin):
    payload = NewMemberContract.model_validate(
        {
            "memberType": "new",
            "name": "新人",
            "email": "New@Example.com",
            "status": "intern_full",
            "templateName": "インターン契約",
        }
    )

    created = service.create(admin, payload)

    member, actor_id = contracts.new_members[0]
    assert member.role is Role.MEMBER
    assert member.password_hash == ""
    assert member.salary_amount == 0
    assert actor_id == admin.id
    assert created["signerEmail"] == "new@example.com"
    assert created["status"] == "draft"

    taken = payload.model_copy(update={"email": "taken@example.com"})
    with pytest.raises(ConflictError):
        service.create(admin, taken)


def test_templates_fall_back_to_empty_list(service, esign, admin):
    assert service.templates(admin) == [{"templateId": "tpl-1", "name": "業務委託契約"}]
    esign.templates_error = True
    assert service.templates(admin) == []


def test_webhook_applies_completed_status(service, contracts, admin):
    created = service.create_draft(admin, 3, _draft())
    service.send(admin, 3, created["id"])
    body = json.dumps(
        {"envelopeId": "env-123", "status": "completed", "completedDateTime": "2026-04-10T03:00:00+00:00"}
    ).encode()

    assert service.handle_webhook(body, sign(body, SECRET)) == {"ok": True}

    stored = contracts.rows[created["id"]]
    assert stored.status is ContractStatus.COMPLETED
    assert stored.completed_at is not None


def test_webhook_with_bad_signature_is_rejected(service):
    body = b'{"envelopeId": "env-123", "status": "sent"}'
    with pytest.raises(AuthenticationError):
        service.handle_webhook(body, "bogus")


def test_webhook_for_unknown_envelope_is_accepted(service):
    body = b'{"envelopeId": "nope", "status": "sent"}'
    assert service.handle_webhook(body, sign(body, SECRET)) == {"ok": True}
