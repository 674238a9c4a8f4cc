from __future__ import annotations

from dataclasses import replace
from datetime import date

import pytest
from werkzeug.security import check_password_hash

from src.teamops.teamops.core.enums import Company, MemberStatus, Role, SalaryType
from src.teamops.teamops.core.exceptions import AuthorizationError, ConflictError, NotFoundError
from src.teamops.teamops.members.model import Member
from src.teamops.teamops.members.schemas import MemberCreate, MemberUpdate, ProfileUpdate
from src.teamops.teamops.members.service import MemberService


class InMemoryMembers:
    def __init__(self):
        self.members: dict[int, Member] = {}
        self.password_hashes: dict[int, str] = {}
        self.last_update = None

    def add(self, member: Member) -> Member:
        self.members[member.member_id] = member
        return member

    def list_members(self, *, q=None, company=None, role=None):
        return [m for m in self.members.values() if m.deleted_at is None]

    def get_member(self, member_id):
        m = self.members.get(member_id)
        return m if m and m.deleted_at is None else None

    def email_exists(self, email, *, exclude_member_id=None):
        return any(m.email == email and m.member_id != exclude_member_id for m in self.members.values())

    def create_member(self, new, *, actor_id):
        member_id = max(self.members, default=0) + 1
        self.password_hashes[member_id] = new.password_hash
        self.add(
            Member(
                member_id=member_id,
                name=new.name,
                status=new.status,
                company=new.company,
                salary_type=new.salary_type,
                salary_amount=new.salary_amount,
                joined_at=new.joined_at,
                email=new.email,
                role=new.role,
            )
        )
        return member_id

    def update_member(self, member_id, *, member_fields, account_fields, actor_id):
        self.last_update = (member_fields, account_fields)
        m = self.members[member_id]
        if "name" in member_fields:
            m = replace(m, name=member_fields["name"])
        if "email" in account_fields:
            m = replace(m, email=account_fields["email"])
        self.members[member_id] = m

    def soft_delete(self, member_id, *, actor_id):
        m = self.get_member(member_id)
        if not m:
            return False
        self.members[member_id] = replace(m, deleted_at=date(2026, 4, 1))
        return True

    def update_profile(self, member_id, fields):
        mapping = {"bankName": "bank_name", "address": "address", "phone": "phone"}
        self.members[member_id] = replace(
            self.members[member_id], **{mapping[k]: v for k, v in fields.items() if k in mapping}
        )


class NoSkills:
    def latest_for_member(self, member_id):
        return []


def _existing(member_id=3, email="yamada@example.com"):
    return Member(
        member_id=member_id,
        name="山田",
        status=MemberStatus.INTERN_FULL,
        company=Company.BOOST,
        salary_type=SalaryType.HOURLY,
        salary_amount=3000,
        joined_at=date(2025, 4, 1),
        email=email,
        role=Role.MEMBER,
        address="東京都",
        bank_name="みずほ銀行",
    )


@pytest.fixture
def repo():
    repo = InMemoryMembers()
    repo.add(_existing())
    return repo


@pytest.fixture
def service(repo):
    return MemberService(repo, NoSkills())


def _create_payload(**overrides):
    body = {
        "name": "佐藤",
        "email": "Sato@Example.com",
        "password": "password123",
        "company": "boost",
        "role": "member",
        "status": "employee",
        "salaryType": "monthly",
        "salaryAmount": 250000,
        "joinedAt": "2026-04-01",
    }
    body.update(overrides)
    return MemberCreate.model_validate(body)


def test_create_hashes_password_and_normalizes_email(service, repo, manager):
    created = service.create_member(manager, _create_payload())

    assert created["email"] == "sato@example.com"
    assert check_password_hash(repo.password_hashes[created["id"]], "password123")


def test_duplicate_email_conflicts(service, manager):
    with pytest.raises(ConflictError):
        service.create_member(manager, _create_payload(email="yamada@example.com"))


def test_member_cannot_create_members(service, member):
    with pytest.raises(AuthorizationError):
        service.create_member(member, _create_payload())


def test_private_fields_visible_to_admin_and_owner_only(service, admin, manager, member):
    assert service.get_member(admin, 3)["bankName"] == "みずほ銀行"
    assert service.get_member(member, 3)["address"] == "東京都"
    assert "bankName" not in service.get_member(manager, 3)


def test_member_cannot_read_another_members_profile(service, repo, member):
    repo.add(_existing(member_id=4, email="sato@example.com"))

    with pytest.raises(AuthorizationError):
        service.get_member(member, 4)


def test_staff_read_any_member(service, repo, admin, manager):
    repo.add(_existing(member_id=4, email="sato@example.com"))

    assert service.get_member(manager, 4)["salaryAmount"] == 3000
    assert service.get_member(admin, 4)["id"] == 4


def test_update_splits_account_and_member_fields(service, repo, manager):
    service.update_member(manager, 3, MemberUpdate(name="山田太郎", email="taro@example.com", password="newpassword"))

    member_fields, account_fields = repo.last_update
    assert member_fields == {"name": "山田太郎"}
    assert account_fields["email"] == "taro@example.com"
    assert check_password_hash(account_fields["passwordHash"], "newpassword")


def test_update_can_clear_left_at(service, repo, manager):
    service.update_member(manager, 3, MemberUpdate.model_validate({"leftAt": None}))

    member_fields, _ = repo.last_update
    assert member_fields == {"leftAt": None}


def test_delete_is_admin_only_and_soft(service, repo, admin, manager):
    with pytest.raises(AuthorizationError):
        service.delete_member(manager, 3)

    service.delete_member(admin, 3)

    assert repo.members[3].deleted_at is not None
    with pytest.raises(NotFoundError):
        service.get_member(admin, 3)


def test_profile_is_owner_editable(service, member, manager):
    updated = service.update_profile(member, 3, ProfileUpdate(bankName="三井住友銀行"))
    assert updated["bankName"] == "三井住友銀行"

    with pytest.raises(AuthorizationError):
        service.update_profile(manager, 3, ProfileUpdate(bankName="x"))
